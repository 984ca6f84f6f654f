"""
Resolution of resource kinds into listable resources.

Turns the (namespace, apiVersion, kind) a user typed into the resources of
that kind in the namespace. The kind is matched case-insensitively against
the cluster's discovery document for the API version, so "pod", "POD" and
"Pod" all list the same pods. Kinds the discovery document does not know
(for example a custom resource missing from the discovery view) are listed
with the caller's spelling unchanged, on a best-effort basis.

Key Components:
- find_descriptor: Locate a kind in a discovery document
- ResourceResolver: Resolve and list resources through a resource store

The resource store is any object providing:
- get_discovery_document(api_version) -> list of {"kind", "name", ...}
- list_namespaced(coordinates) -> list of StructuredResource
- discover_api_version(kind) -> (api_version, descriptor) or None

`kgrep.kube.KubeResourceStore` is the implementation backed by a cluster.

Example:
    ```python
    resolver = ResourceResolver(KubeResourceStore(kube))
    deployments = resolver.resolve("prod", "apps/v1", "deployment")
    ```
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

from .exceptions import KgrepError, ResolutionError
from .models import ResourceKindCoordinates, StructuredResource

log = logging.getLogger('kgrep')


def find_descriptor(document: Sequence[Dict[str, Any]], kind: str) -> Optional[Dict[str, Any]]:
    """Return the first top-level resource descriptor whose kind matches, ignoring case."""
    wanted = kind.lower()
    for descriptor in document:
        if "/" in (descriptor.get("name") or ""):
            continue  # subresources such as pods/log
        if (descriptor.get("kind") or "").lower() == wanted:
            return descriptor
    return None


class ResourceResolver:
    """
    Resolves resource kinds against a resource store.

    Every call talks to the store again; nothing is cached between calls.

    Attributes:
        store: Resource store used for discovery and listing
    """

    def __init__(self, store: Any):
        self.store = store

    def coordinates(self, namespace: str, api_version: Optional[str], kind: str) -> ResourceKindCoordinates:
        """
        Work out where resources of `kind` are listed from.

        Args:
            namespace: Namespace to list in
            api_version: "group/version" or "version"; discovered when None or empty
            kind: Kind name in any casing

        Returns:
            ResourceKindCoordinates: Coordinates with the canonical kind when discovery knew it

        Raises:
            ResolutionError: On invalid input, discovery failure, or an undiscoverable API version
        """
        if not namespace:
            raise ResolutionError("Namespace cannot be empty")
        if not kind or not kind.strip():
            raise ResolutionError("Kind cannot be empty")
        kind = kind.strip()

        if not api_version:
            found = self._call(self.store.discover_api_version, kind)
            if found is None:
                raise ResolutionError(f"could not find API version for kind '{kind}'")
            api_version, descriptor = found
            log.debug(f"[resolver] discovered {descriptor.get('kind')} in {api_version}")
            return ResourceKindCoordinates.from_api_version(
                namespace, api_version, descriptor.get("kind") or kind, descriptor.get("name"))

        parts = api_version.split("/")
        if len(parts) > 2 or not all(part.strip() for part in parts):
            raise ResolutionError(f"Invalid API version '{api_version}': expected 'group/version' or 'version'")

        document = self._call(self.store.get_discovery_document, api_version)
        descriptor = find_descriptor(document, kind)
        if descriptor is None:
            log.debug(f"[resolver] kind '{kind}' not in discovery for {api_version}, using it as given")
            return ResourceKindCoordinates.from_api_version(namespace, api_version, kind)
        return ResourceKindCoordinates.from_api_version(
            namespace, api_version, descriptor["kind"], descriptor.get("name"))

    def resolve(self, namespace: str, api_version: Optional[str], kind: str) -> List[StructuredResource]:
        """
        List the resources of a kind in a namespace.

        Kind spellings that differ only in case return the same resources.

        Raises:
            ResolutionError: If discovery or listing fails; no retry is attempted
        """
        coordinates = self.coordinates(namespace, api_version, kind)
        resources = self._call(self.store.list_namespaced, coordinates)
        log.info(f"[resolver] {len(resources)} {coordinates.kind} in {namespace} ({coordinates.api_version})")
        return resources

    @staticmethod
    def _call(func, *args):
        try:
            return func(*args)
        except KgrepError:
            raise
        except Exception as e:
            raise ResolutionError(f"{e.__class__.__name__}: {e}") from e
