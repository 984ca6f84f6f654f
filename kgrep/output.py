"""
Terminal rendering of grep results.

Resource matches print as `<resource>[<line>]: <text>` under a header with
the number of occurrences; log matches print as
`<pod>/<container>[<line>]: <text>`. Prefixes are blue and every occurrence
of the pattern is bold red. Colors are dropped automatically when the output
is not a terminal.
"""

from typing import Iterable, Optional

from rich.console import Console
from rich.text import Text

from .models import LogMessage, ResourceLine

PREFIX_STYLE = "blue"
MATCH_STYLE = "bold red"


def _line(prefix: str, text: str, pattern: str) -> Text:
    body = Text(text)
    if pattern:
        body.highlight_words([pattern], style=MATCH_STYLE)
    return Text.assemble((prefix, PREFIX_STYLE), " ", body)


def print_resource_lines(lines: Iterable[ResourceLine], pattern: str, console: Optional[Console] = None) -> None:
    """Print resource matches ordered by resource and line number."""
    console = console or Console(highlight=False, soft_wrap=True)
    ordered = sorted(lines, key=lambda line: (line.resource, line.line_number))
    if not ordered:
        console.print(Text(f"No occurrences of '{pattern}' found."))
        return

    console.print(Text(f"Found {len(ordered)} occurrence(s) of '{pattern}':\n"))
    for line in ordered:
        console.print(_line(f"{line.resource}[{line.line_number}]:", line.text, pattern))


def print_log_messages(messages: Iterable[LogMessage], pattern: str, console: Optional[Console] = None) -> None:
    """Print log matches in the order given."""
    console = console or Console(highlight=False, soft_wrap=True)
    for message in messages:
        prefix = f"{message.pod_name}/{message.container_name}[{message.line_number}]:"
        console.print(_line(prefix, message.text, pattern))
