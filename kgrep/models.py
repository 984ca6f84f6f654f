"""
Data models for kgrep.

This module defines the data structures used throughout kgrep: the matches
returned by the grep engines, the sort orders of the log engine, the
coordinates a resource kind resolves to, and the narrow views of cluster
objects the engines work with.

Key Models:
- Occurrence: A matched line of a text block
- ResourceLine: A matched line of a serialized resource
- LogMessage: A matched line of a container log
- SortOrder: Ordering of log matches
- ResourceKindCoordinates: Group, version and kind to list in a namespace
- StructuredResource: A resource's name, kind and full field tree
- ContainerInfo / PodInfo: The log engine's view of a pod
- GrepSettings: Tuning of the concurrent resource grep

Matches are frozen dataclasses: they are created once per matching line and
never change afterwards.

Example:
    ```python
    line = ResourceLine(resource="configmaps/app-config", line_number=7, text="  db: postgres")
    print(f"{line.resource}[{line.line_number}]: {line.text}")
    ```
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Any, Optional, List

from .exceptions import UnsupportedSortError


@dataclass(frozen=True)
class Occurrence:
    """A line containing the pattern, with its 1-based line number."""
    line_number: int
    text: str


@dataclass(frozen=True)
class ResourceLine:
    """
    A line of a serialized resource containing the pattern.

    Attributes:
        resource: Resource identity, "<kind label>/<name>"
        line_number: 1-based line number in the resource's YAML
        text: The whole matching line
    """
    resource: str
    line_number: int
    text: str


@dataclass(frozen=True)
class LogMessage:
    """
    A line of a container log containing the pattern.

    Attributes:
        pod_name: Name of the pod the log belongs to
        container_name: Name of the container the log belongs to
        text: The whole matching log line
        line_number: 1-based line number in the container's log
    """
    pod_name: str
    container_name: str
    text: str
    line_number: int


class SortOrder(Enum):
    """
    Ordering of log matches.

    BY_DISCOVERY_ORDER keeps the traversal order (pods as listed, containers
    as reported, lines as they appear). BY_MESSAGE_TEXT sorts by the matched
    text, keeping the traversal order among equal texts.
    """
    BY_DISCOVERY_ORDER = "discovery"
    BY_MESSAGE_TEXT = "message"

    @classmethod
    def parse(cls, value: str) -> "SortOrder":
        """
        Parse a user supplied sort order name.

        Accepts "discovery", "message" and the listing-order aliases
        "pod_and_container" and "timestamp", case-insensitively.

        Raises:
            UnsupportedSortError: For any other value, including empty ones
        """
        if isinstance(value, cls):
            return value
        normalized = (value or "").strip().lower().replace("-", "_")
        if normalized in _SORT_ALIASES:
            return _SORT_ALIASES[normalized]
        raise UnsupportedSortError(f"Sorting by {value!r} is not supported")


_SORT_ALIASES = {
    "discovery": SortOrder.BY_DISCOVERY_ORDER,
    "pod_and_container": SortOrder.BY_DISCOVERY_ORDER,
    "timestamp": SortOrder.BY_DISCOVERY_ORDER,
    "message": SortOrder.BY_MESSAGE_TEXT,
}


@dataclass(frozen=True)
class ResourceKindCoordinates:
    """
    Where a resource kind is listed from.

    Attributes:
        namespace: Namespace to list in
        group: API group, empty for the core group
        version: API version within the group
        kind: Kind name, canonical casing when discovery knew it
        namespaced: Whether the kind is namespaced (always assumed)
        plural: REST resource name from discovery, if known
    """
    namespace: str
    group: str
    version: str
    kind: str
    namespaced: bool = True
    plural: Optional[str] = None

    @property
    def api_version(self) -> str:
        return f"{self.group}/{self.version}" if self.group else self.version

    @classmethod
    def from_api_version(cls, namespace: str, api_version: str, kind: str,
                         plural: Optional[str] = None) -> "ResourceKindCoordinates":
        """Split "group/version" (or a bare "version") into coordinates."""
        if "/" in api_version:
            group, version = api_version.split("/", 1)
        else:
            group, version = "", api_version
        return cls(namespace=namespace, group=group, version=version, kind=kind, plural=plural)


@dataclass
class StructuredResource:
    """
    A cluster resource as the engines see it.

    Attributes:
        name: metadata.name of the resource
        kind: Kind of the resource
        body: Full structured form, in the field order the API delivered it
    """
    name: str
    kind: str
    body: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_object(cls, obj: Dict[str, Any], kind: Optional[str] = None) -> "StructuredResource":
        """Wrap a plain mapping as returned by the API."""
        metadata = obj.get("metadata") or {}
        return cls(name=metadata.get("name", ""), kind=obj.get("kind") or kind or "", body=obj)


@dataclass
class ContainerInfo:
    """A container of a pod and whether it is still waiting to start."""
    name: str
    waiting: bool = False


@dataclass
class PodInfo:
    """
    A pod as the log engine sees it.

    Attributes:
        name: Pod name
        namespace: Pod namespace
        containers: Containers in the order the pod status reports them
    """
    name: str
    namespace: str
    containers: List[ContainerInfo] = field(default_factory=list)


@dataclass
class GrepSettings:
    """
    Tuning of the concurrent resource grep.

    Attributes:
        max_workers: Upper bound on concurrent workers (None = one per resource)
        timeout: Seconds to wait for all workers (None = wait forever)
    """
    max_workers: Optional[int] = None
    timeout: Optional[float] = None
