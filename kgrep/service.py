"""
The grep operations kgrep exposes.

Kgrep binds the resolver and both grep engines to one cluster connection and
offers the two operations the command line and the HTTP API are built on:

- grep_resources: search typed kinds (pods, configmaps, secrets,
  serviceaccounts) or any kind found through discovery
- grep_logs: search container logs of one or more namespaces

Both calls are synchronous and either return all matches or raise a single
KgrepError; partial results are never returned.

Example:
    ```python
    kgrep = Kgrep.connect(kubeconfig=None, context=None)
    for line in kgrep.grep_resources("prod", "postgres", kind_label="configmaps"):
        print(line.resource, line.line_number, line.text)
    ```
"""

import logging
from typing import Any, List, Optional, Sequence, Union

from .exceptions import ConfigurationError
from .engine import ResourceGrepper
from .kube import load_kube, KubeResourceStore, KubePodLogStore
from .logs import LogGrepper
from .models import GrepSettings, LogMessage, ResourceLine, SortOrder
from .resources import ResourceResolver
from .constants import DEFAULT_NAMESPACE

log = logging.getLogger('kgrep')


class Kgrep:
    """
    Resource and log grep bound to a resource store and a pod log store.

    Attributes:
        resource_store: Store used for typed listing, discovery and dynamic listing
        resolver: Kind resolver over the resource store
        resource_grepper: Concurrent resource grep engine
        log_grepper: Sequential log grep engine
        default_namespace: Namespace used when a call names none
    """

    def __init__(self, resource_store: Any, pod_store: Any, settings: Optional[GrepSettings] = None,
                 default_namespace: str = DEFAULT_NAMESPACE):
        self.resource_store = resource_store
        self.resolver = ResourceResolver(resource_store)
        self.resource_grepper = ResourceGrepper(settings)
        self.log_grepper = LogGrepper(pod_store)
        self.default_namespace = default_namespace

    @classmethod
    def connect(cls, kubeconfig: Optional[str] = None, context: Optional[str] = None,
                settings: Optional[GrepSettings] = None) -> "Kgrep":
        """Load the Kubernetes configuration and bind kgrep to that cluster."""
        kube = load_kube(kubeconfig, context)
        return cls(KubeResourceStore(kube), KubePodLogStore(kube), settings, kube.namespace)

    def grep_resources(self, namespace: Optional[str], pattern: str, kind_label: Optional[str] = None,
                       api_version: Optional[str] = None, kind: Optional[str] = None) -> List[ResourceLine]:
        """
        Search the resources of one kind in a namespace.

        With `kind`, the kind is resolved through discovery (`api_version`
        is discovered too when omitted) and matches are labelled with
        `kind_label`, defaulting to `kind`. Without `kind`, `kind_label` names
        a typed kind and is the label.

        Args:
            namespace: Namespace to search (None = default namespace)
            pattern: Literal text to look for
            kind_label: Typed kind, or label for a resolved kind
            api_version: API version of `kind`
            kind: Kind to resolve through discovery

        Returns:
            List[ResourceLine]: Matches, unordered across resources

        Raises:
            ConfigurationError: If neither kind nor kind_label is given
            ResolutionError, FetchError, SerializationError, GrepTimeoutError: See the engines
        """
        namespace = namespace or self.default_namespace
        if kind:
            resources = self.resolver.resolve(namespace, api_version, kind)
            label = kind_label or kind
        elif kind_label:
            resources = self.resource_store.list_typed(namespace, kind_label)
            label = kind_label
        else:
            raise ConfigurationError("A kind or a resource type is required")
        log.info(f"[service] grep {len(resources)} {label} in {namespace}")
        return self.resource_grepper.grep(resources, label, pattern)

    def grep_logs(self, namespace: Union[None, str, Sequence[str]], pod_filter: Optional[str], pattern: str,
                  sort_order: Union[str, SortOrder] = SortOrder.BY_DISCOVERY_ORDER) -> List[LogMessage]:
        """
        Search container logs.

        Args:
            namespace: Namespace or list of namespaces (None = default namespace)
            pod_filter: Keep only pods whose name contains this text
            pattern: Literal text to look for
            sort_order: SortOrder member or its name ("discovery", "message", ...)

        Returns:
            List[LogMessage]: Matches in the requested order

        Raises:
            UnsupportedSortError: If the sort order is not recognized
            FetchError: If listing pods or reading a log fails
        """
        if not isinstance(sort_order, SortOrder):
            sort_order = SortOrder.parse(sort_order)
        if not namespace:
            namespaces = [self.default_namespace]
        elif isinstance(namespace, str):
            namespaces = [namespace]
        else:
            namespaces = list(namespace)

        if len(namespaces) == 1:
            return self.log_grepper.grep(namespaces[0], pod_filter, pattern, sort_order)
        return self.log_grepper.grep_namespaces(namespaces, pod_filter, pattern, sort_order)
