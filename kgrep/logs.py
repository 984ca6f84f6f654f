"""
Grep over container logs.

Walks the pods of a namespace one by one, fetches the log of every container
that has started, and reports the lines containing a literal pattern. Unlike
the resource engine this walk is sequential: with the default sort order the
matches come back exactly in traversal order (pods as listed, containers as
their status reports them, lines as they appear).

Key Components:
- sort_messages: Apply a SortOrder to log matches
- LogGrepper: Grep the logs of one or more namespaces through a pod log store

The pod log store is any object providing:
- list_pods(namespace) -> list of PodInfo
- fetch_log(namespace, pod_name, container_name) -> str

`kgrep.kube.KubePodLogStore` is the implementation backed by a cluster.

Example:
    ```python
    grepper = LogGrepper(KubePodLogStore(kube))
    for message in grepper.grep("prod", "api", "ERROR", SortOrder.BY_MESSAGE_TEXT):
        print(message.pod_name, message.line_number, message.text)
    ```
"""

import logging
from typing import Any, List, Optional, Sequence

from .exceptions import FetchError, KgrepError, UnsupportedSortError
from .grep import match_lines, split_log_lines
from .models import LogMessage, PodInfo, SortOrder

log = logging.getLogger('kgrep')


def sort_messages(messages: List[LogMessage], sort_order: SortOrder) -> List[LogMessage]:
    """
    Order log matches.

    BY_DISCOVERY_ORDER returns the list unchanged; BY_MESSAGE_TEXT returns a
    stable sort on the message text.

    Raises:
        UnsupportedSortError: For anything that is not a SortOrder member
    """
    if sort_order is SortOrder.BY_DISCOVERY_ORDER:
        return messages
    elif sort_order is SortOrder.BY_MESSAGE_TEXT:
        return sorted(messages, key=lambda message: message.text)
    else:
        raise UnsupportedSortError(f"Sorting by {sort_order!r} is not supported")


class LogGrepper:
    """
    Searches container logs through a pod log store.

    Attributes:
        store: Pod log store used to list pods and fetch logs
    """

    def __init__(self, store: Any):
        self.store = store

    def grep(self, namespace: str, pod_filter: Optional[str], pattern: str,
             sort_order: SortOrder = SortOrder.BY_DISCOVERY_ORDER) -> List[LogMessage]:
        """
        Search the logs of the pods in a namespace.

        Args:
            namespace: Namespace whose pods are searched
            pod_filter: Keep only pods whose name contains this text (None or "" keeps all)
            pattern: Literal text to look for
            sort_order: Ordering of the returned matches

        Returns:
            List[LogMessage]: Matches in the requested order

        Raises:
            FetchError: If listing pods or fetching a log fails
            UnsupportedSortError: If sort_order is not a SortOrder member
        """
        # fail before any remote call
        if not isinstance(sort_order, SortOrder):
            raise UnsupportedSortError(f"Sorting by {sort_order!r} is not supported")

        messages: List[LogMessage] = []
        for pod in self._pods(namespace, pod_filter):
            for container in pod.containers:
                if container.waiting:
                    log.debug(f"[logs] skipping waiting container {pod.name}/{container.name}")
                    continue
                text = self._fetch(namespace, pod.name, container.name)
                messages.extend(
                    LogMessage(pod_name=pod.name, container_name=container.name,
                               text=o.text, line_number=o.line_number)
                    for o in match_lines(split_log_lines(text), pattern)
                )

        log.info(f"[logs] {len(messages)} matches in {namespace}")
        return sort_messages(messages, sort_order)

    def grep_namespaces(self, namespaces: Sequence[str], pod_filter: Optional[str], pattern: str,
                        sort_order: SortOrder = SortOrder.BY_DISCOVERY_ORDER) -> List[LogMessage]:
        """Search several namespaces in order and sort the combined matches."""
        messages: List[LogMessage] = []
        for namespace in namespaces:
            messages.extend(self.grep(namespace, pod_filter, pattern, sort_order))
        return sort_messages(messages, sort_order)

    def _pods(self, namespace: str, pod_filter: Optional[str]) -> List[PodInfo]:
        try:
            pods = self.store.list_pods(namespace)
        except KgrepError:
            raise
        except Exception as e:
            raise FetchError(f"error getting pods in {namespace}: {e}") from e
        if not pod_filter:
            return list(pods)
        return [pod for pod in pods if pod_filter in pod.name]

    def _fetch(self, namespace: str, pod_name: str, container_name: str) -> str:
        try:
            return self.store.fetch_log(namespace, pod_name, container_name)
        except KgrepError:
            raise
        except Exception as e:
            raise FetchError(f"error reading logs of {pod_name}/{container_name}: {e}") from e
