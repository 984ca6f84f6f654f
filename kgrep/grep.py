"""
Literal line matching.

The matcher behind both grep engines. A line matches when the pattern occurs
in it as a literal, case-sensitive substring: no regex semantics, no word
boundaries, and an empty pattern matches every line.

Key Functions:
- split_lines: Split a text block into lines
- split_log_lines: Split a container log into lines, CRLF aware
- match_lines: Report the lines containing a pattern

Example:
    ```python
    match_lines(["one text", "a text ending with kgrep"], "kgrep")
    # [Occurrence(line_number=2, text='a text ending with kgrep')]
    ```
"""

from typing import List, Sequence

from .constants import LINE_TERMINATOR
from .models import Occurrence


def split_lines(text: str) -> List[str]:
    """Split text on the line terminator, dropping trailing empty lines."""
    lines = text.split(LINE_TERMINATOR)
    while lines and lines[-1] == "":
        lines.pop()
    return lines


def split_log_lines(text: str) -> List[str]:
    """Split a container log into lines, also dropping the carriage return of CRLF line endings."""
    return [line[:-1] if line.endswith("\r") else line for line in split_lines(text)]


def match_lines(lines: Sequence[str], pattern: str) -> List[Occurrence]:
    """
    Report every line that contains `pattern`.

    Args:
        lines: Lines to search, in order
        pattern: Literal text to look for

    Returns:
        List[Occurrence]: Matching lines with their 1-based numbers, in input order
    """
    return [
        Occurrence(line_number=number, text=line)
        for number, line in enumerate(lines, start=1)
        if pattern in line
    ]
