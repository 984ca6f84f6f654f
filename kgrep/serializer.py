"""
YAML rendering of cluster resources.

Resources are rendered the way `kubectl get -o yaml` shows them so that the
line numbers kgrep reports can be looked up in kubectl's output: fields in
the order the API delivered them, block style, two-space indentation,
sequences flush with their parent key, and every scalar on a single line.
The rendering is deterministic; the same resource always produces the same
text.
"""

from typing import Any

import yaml

from .constants import YAML_INDENT, YAML_LINE_WIDTH
from .exceptions import SerializationError
from .models import StructuredResource


class _ResourceDumper(yaml.SafeDumper):
    """SafeDumper that expands shared objects instead of emitting anchors."""

    def ignore_aliases(self, data: Any) -> bool:
        return True


def _represent_str(dumper: yaml.SafeDumper, data: str) -> yaml.ScalarNode:
    # multi-line values (config map files, scripts) as literal blocks, one text line per line
    if "\n" in data:
        return dumper.represent_scalar("tag:yaml.org,2002:str", data, style="|")
    # strings that would read back as another type ("8080", "true", "") are double-quoted, like kubectl
    if dumper.resolve(yaml.ScalarNode, data, (True, False)) != "tag:yaml.org,2002:str":
        return dumper.represent_scalar("tag:yaml.org,2002:str", data, style='"')
    return dumper.represent_str(data)


_ResourceDumper.add_representer(str, _represent_str)


def serialize(resource: StructuredResource) -> str:
    """
    Render a resource as YAML.

    Args:
        resource: Resource to render

    Returns:
        str: Multi-line YAML text, ending with a newline

    Raises:
        SerializationError: If the field tree is cyclic or holds values YAML cannot represent
    """
    try:
        return yaml.dump(
            resource.body,
            Dumper=_ResourceDumper,
            default_flow_style=False,
            sort_keys=False,
            allow_unicode=True,
            indent=YAML_INDENT,
            width=YAML_LINE_WIDTH,
        )
    except RecursionError:
        raise SerializationError(resource.name, "cyclic structure")
    except yaml.YAMLError as e:
        raise SerializationError(resource.name, str(e)) from e
