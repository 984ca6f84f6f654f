"""
Concurrent grep over many resources.

Each resource is serialized and searched by its own worker thread; the
matches of all workers are collected into one list. The call waits for every
worker before returning and is all-or-nothing: when any resource fails, the
whole call fails and no matches are returned.

The returned list has no ordering across resources, since workers finish in
any order. Within one resource the matches keep their line order. Compare
results as multisets, never as sequences.

Example:
    ```python
    grepper = ResourceGrepper()
    matches = grepper.grep(resources, "configmaps", "postgres")
    ```
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor, wait
from typing import List, Optional, Sequence

from .exceptions import GrepTimeoutError
from .grep import match_lines, split_lines
from .models import GrepSettings, ResourceLine, StructuredResource
from .serializer import serialize

log = logging.getLogger('kgrep')


def grep_resource(resource: StructuredResource, kind_label: str, pattern: str) -> List[ResourceLine]:
    """Serialize one resource and return its matching lines, in line order."""
    identity = f"{kind_label}/{resource.name}"
    lines = split_lines(serialize(resource))
    return [ResourceLine(resource=identity, line_number=o.line_number, text=o.text)
            for o in match_lines(lines, pattern)]


class ResourceGrepper:
    """
    Fans a grep out over resources, one worker per resource.

    Attributes:
        settings: Optional worker bound and timeout
    """

    def __init__(self, settings: Optional[GrepSettings] = None):
        self.settings = settings or GrepSettings()

    def grep(self, resources: Sequence[StructuredResource], kind_label: str, pattern: str) -> List[ResourceLine]:
        """
        Search every resource for `pattern`.

        Args:
            resources: Resources to search
            kind_label: Prefix of the reported resource identity
            pattern: Literal text to look for

        Returns:
            List[ResourceLine]: All matches, unordered across resources

        Raises:
            SerializationError: If any resource cannot be rendered
            GrepTimeoutError: If the workers do not finish within the configured timeout
        """
        if not resources:
            return []

        matches: List[ResourceLine] = []
        lock = threading.Lock()

        def work(resource: StructuredResource) -> None:
            found = grep_resource(resource, kind_label, pattern)
            with lock:
                matches.extend(found)

        workers = len(resources)
        if self.settings.max_workers:
            workers = min(workers, self.settings.max_workers)
        log.debug(f"[engine] {len(resources)} {kind_label} on {workers} workers")

        executor = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="kgrep")
        not_done = set()
        try:
            futures = [executor.submit(work, resource) for resource in resources]
            _, not_done = wait(futures, timeout=self.settings.timeout)
        finally:
            # workers of a timed-out call finish detached
            executor.shutdown(wait=not not_done, cancel_futures=True)

        if not_done:
            raise GrepTimeoutError(
                f"{len(not_done)} of {len(resources)} {kind_label} not searched within {self.settings.timeout}s")

        # first failure in submission order
        for future in futures:
            error = future.exception()
            if error is not None:
                raise error

        log.debug(f"[engine] {len(matches)} matches in {kind_label}")
        return matches
