"""
Kubernetes client and API interactions for kgrep.

This module provides the interface between kgrep and the Kubernetes API. It
handles configuration loading, typed and dynamic resource listing, API
discovery, pod listing and log fetching, and turns client failures into
kgrep exceptions with messages a user can act on.

Key Components:
- KubeContext: Container for the Kubernetes API clients
- load_kube: Initialize the Kubernetes clients with config loading
- default_namespace: Namespace of the current kubeconfig context
- wrap_kubernetes_error: Describe a client failure for the user
- KubeResourceStore: Discovery, dynamic listing and typed listing
- KubePodLogStore: Pod listing and container log fetching

The module supports both external kubeconfig files and in-cluster
configuration, with automatic fallback between them.

Example:
    ```python
    kube = load_kube(kubeconfig="/path/to/config", context="my-context")
    store = KubeResourceStore(kube)
    document = store.get_discovery_document("apps/v1")
    ```
"""

from __future__ import annotations
import json
import re
import logging
from typing import Optional, Dict, Any, List, Tuple

from kubernetes import client, config
from kubernetes.client import ApiException
from kubernetes.config.config_exception import ConfigException

from .constants import TYPED_KINDS, CORE_API_VERSION, DEFAULT_NAMESPACE
from .exceptions import (
    FetchError, ResolutionError, KubernetesConnectionError, ConfigurationError
)
from .models import ResourceKindCoordinates, StructuredResource, PodInfo
from .pod_processing import pod_to_info
from .resources import find_descriptor

log = logging.getLogger('kgrep')

SERVICE_ACCOUNT_NAMESPACE_FILE = "/var/run/secrets/kubernetes.io/serviceaccount/namespace"

_TYPED_LISTERS = {
    "pods": "list_namespaced_pod",
    "configmaps": "list_namespaced_config_map",
    "secrets": "list_namespaced_secret",
    "serviceaccounts": "list_namespaced_service_account",
}


class KubeContext:
    """
    Container for Kubernetes API clients.

    Attributes:
        core: CoreV1Api client for pods, logs and the typed kinds
        api_client: ApiClient shared by the discovery, custom object and core clients
        namespace: Namespace of the loaded context, used when none is given

    Example:
        ```python
        kube = load_kube(kubeconfig, context)
        pods = kube.core.list_namespaced_pod(namespace=kube.namespace)
        ```
    """

    def __init__(self, core: client.CoreV1Api, api_client: client.ApiClient, namespace: str = DEFAULT_NAMESPACE):
        self.core = core
        self.api_client = api_client
        self.namespace = namespace


def default_namespace(kubeconfig: Optional[str] = None, context: Optional[str] = None) -> str:
    """
    Find the namespace of the current kubeconfig context.

    Falls back to the service account namespace when running in a cluster,
    and to "default" when neither names one.

    Args:
        kubeconfig: Path to kubeconfig file (optional, uses default if None)
        context: Kubernetes context name (optional, uses current context if None)

    Returns:
        str: Namespace name, never empty
    """
    try:
        contexts, active = config.list_kube_config_contexts(config_file=kubeconfig)
        if context:
            active = next((c for c in contexts if c.get('name') == context), active)
        namespace = ((active or {}).get('context') or {}).get('namespace')
        if namespace:
            return namespace
    except (ConfigException, OSError) as e:
        log.debug(f"[kube] no kubeconfig namespace: {e}")
    try:
        with open(SERVICE_ACCOUNT_NAMESPACE_FILE, encoding='utf-8') as f:
            namespace = f.read().strip()
            if namespace:
                return namespace
    except OSError:
        pass
    return DEFAULT_NAMESPACE


def load_kube(kubeconfig: Optional[str] = None, context: Optional[str] = None) -> KubeContext:
    """
    Load and initialize Kubernetes API clients.

    Loads Kubernetes configuration and creates the API clients kgrep needs.
    Supports both external kubeconfig files and in-cluster configuration
    with automatic fallback.

    Args:
        kubeconfig: Path to kubeconfig file (optional, uses default if None)
        context: Kubernetes context name (optional, uses current context if None)

    Returns:
        KubeContext: Initialized context with all API clients

    Raises:
        KubernetesConnectionError: If no Kubernetes configuration can be loaded

    Example:
        ```python
        # Load with default configuration
        kube = load_kube()

        # Load with specific kubeconfig and context
        kube = load_kube("/path/to/config", "my-context")
        ```
    """
    try:
        if kubeconfig or context:
            config.load_kube_config(config_file=kubeconfig, context=context)
        else:
            try:
                config.load_kube_config()
            except (ConfigException, OSError):
                config.load_incluster_config()
    except (ConfigException, OSError) as e:
        raise KubernetesConnectionError(wrap_kubernetes_error(e)) from e

    api_client = client.ApiClient()
    namespace = default_namespace(kubeconfig, context)
    log.debug(f"[kube] loaded configuration, namespace={namespace}")
    return KubeContext(client.CoreV1Api(api_client), api_client, namespace)


def wrap_kubernetes_error(exc: Exception) -> str:
    """
    Describe a Kubernetes client failure in terms a user can act on.

    Recognizes authentication, authorization and missing-configuration
    failures; any other error is described as is.

    Args:
        exc: Exception raised by the kubernetes client

    Returns:
        str: Message for the user, including the original error
    """
    if isinstance(exc, ApiException):
        if exc.status == 401:
            return ("you are not authorized to access the cluster. Please check if you are logged in "
                    f"and your credentials are valid: ({exc.status}) {exc.reason}")
        if exc.status == 403:
            return f"you do not have permission to perform this action in the cluster: ({exc.status}) {exc.reason}"
        return f"({exc.status}) {exc.reason}"

    text = str(exc)
    lowered = text.lower()
    if "kube-config file" in lowered or "service host/port is not set" in lowered:
        return ("no Kubernetes configuration found. Please ensure you have a valid kubeconfig file "
                f"or that your KUBECONFIG environment variable is set: {text}")
    return f"{exc.__class__.__name__}: {text}"


def _with_type_meta(obj: Dict[str, Any], api_version: str, kind: str) -> Dict[str, Any]:
    """List items omit apiVersion and kind; put them first, as kubectl shows them."""
    if obj.get('apiVersion') and obj.get('kind'):
        return obj
    filled = {'apiVersion': obj.get('apiVersion') or api_version, 'kind': obj.get('kind') or kind}
    filled.update((k, v) for k, v in obj.items() if k not in filled)
    return filled


def guess_plural(kind: str) -> str:
    """Plural REST name for a kind discovery does not know, the usual way."""
    lowered = kind.lower()
    if lowered.endswith('s'):
        return lowered + 'es'
    if lowered.endswith('y') and lowered[-2:-1] not in ('a', 'e', 'i', 'o', 'u'):
        return lowered[:-1] + 'ies'
    return lowered + 's'


def snake_case(kind: str) -> str:
    """CamelCase kind to the snake_case used in client method names: ConfigMap -> config_map."""
    return re.sub(r'(?<!^)(?=[A-Z])', '_', kind).lower()


def _decode(response: Any) -> Any:
    # raw responses keep the field order and formats of the wire
    return json.loads(response.data)


class KubeResourceStore:
    """
    Resource store backed by a cluster.

    Every call goes through a generated client method with
    `_preload_content=False`, and the raw JSON body is decoded here. Kinds of
    API groups are listed through CustomObjectsApi, which serves any
    group/version/plural; core kinds through the matching CoreV1Api lister.

    Attributes:
        kube: Kubernetes context used for all calls
    """

    def __init__(self, kube: KubeContext):
        self.kube = kube
        self.core_versions = client.CoreApi(kube.api_client)
        self.group_versions = client.ApisApi(kube.api_client)
        self.custom = client.CustomObjectsApi(kube.api_client)

    def get_discovery_document(self, api_version: str) -> List[Dict[str, Any]]:
        """
        Fetch the resource descriptors served at an API version.

        Raises:
            ResolutionError: If the discovery call fails
        """
        try:
            if '/' in api_version:
                group, version = api_version.split('/', 1)
                response = self.custom.get_api_resources(group, version, _preload_content=False)
            else:
                response = self.kube.core.get_api_resources(_preload_content=False)
            document = _decode(response)
        except Exception as e:
            raise ResolutionError(f"error getting API resources for {api_version}: {wrap_kubernetes_error(e)}") from e
        return list((document or {}).get('resources') or [])

    def discover_api_version(self, kind: str) -> Optional[Tuple[str, Dict[str, Any]]]:
        """
        Find the API version serving a kind, ignoring case.

        The core versions are scanned first, then every group with its
        preferred version first. Versions whose discovery fails are skipped.

        Returns:
            Optional[Tuple[str, Dict[str, Any]]]: (api_version, descriptor), or None when no version serves the kind

        Raises:
            ResolutionError: If the list of API versions cannot be fetched
        """
        try:
            core = _decode(self.core_versions.get_api_versions(_preload_content=False)) or {}
            apis = _decode(self.group_versions.get_api_versions(_preload_content=False)) or {}
            core_versions = core.get('versions') or []
            groups = apis.get('groups') or []
        except Exception as e:
            raise ResolutionError(f"error getting API groups: {wrap_kubernetes_error(e)}") from e

        candidates = [v for v in core_versions if v == CORE_API_VERSION]
        for group in groups:
            preferred = (group.get('preferredVersion') or {}).get('groupVersion')
            versions = [v.get('groupVersion') for v in group.get('versions') or []]
            if preferred:
                candidates.append(preferred)
            candidates.extend(v for v in versions if v and v != preferred)

        for api_version in candidates:
            try:
                document = self.get_discovery_document(api_version)
            except ResolutionError as e:
                log.debug(f"[kube] skipping {api_version}: {e}")
                continue
            descriptor = find_descriptor(document, kind)
            if descriptor is not None:
                return api_version, descriptor
        return None

    def list_namespaced(self, coordinates: ResourceKindCoordinates) -> List[StructuredResource]:
        """
        List the resources at the given coordinates.

        Raises:
            ResolutionError: If the kind cannot be listed or the list call fails
        """
        plural = coordinates.plural or guess_plural(coordinates.kind)
        try:
            if coordinates.group:
                response = self.custom.list_namespaced_custom_object(
                    coordinates.group, coordinates.version, coordinates.namespace, plural,
                    _preload_content=False)
            else:
                lister = getattr(self.kube.core, f"list_namespaced_{snake_case(coordinates.kind)}", None)
                if lister is None:
                    raise ResolutionError(f"no namespaced {coordinates.kind} resources in {coordinates.api_version}")
                response = lister(namespace=coordinates.namespace, _preload_content=False)
            listing = _decode(response)
        except ResolutionError:
            raise
        except Exception as e:
            raise ResolutionError(
                f"error getting {coordinates.kind} resources in {coordinates.namespace}: {wrap_kubernetes_error(e)}"
            ) from e
        return [
            StructuredResource.from_object(
                _with_type_meta(item, coordinates.api_version, coordinates.kind), coordinates.kind)
            for item in (listing or {}).get('items') or []
        ]

    def list_typed(self, namespace: str, kind_label: str) -> List[StructuredResource]:
        """
        List one of the typed kinds (pods, configmaps, secrets, serviceaccounts).

        Raises:
            ConfigurationError: If kind_label is not a typed kind
            FetchError: If the list call fails
        """
        if kind_label not in _TYPED_LISTERS:
            raise ConfigurationError(
                f"Unsupported resource type '{kind_label}', expected one of: {', '.join(_TYPED_LISTERS)}")
        kind = TYPED_KINDS[kind_label]
        lister = getattr(self.kube.core, _TYPED_LISTERS[kind_label])
        try:
            listing = _decode(lister(namespace=namespace, _preload_content=False))
        except Exception as e:
            raise FetchError(f"error getting {kind_label} in {namespace}: {wrap_kubernetes_error(e)}") from e
        return [
            StructuredResource.from_object(_with_type_meta(item, CORE_API_VERSION, kind), kind)
            for item in listing.get('items') or []
        ]


class KubePodLogStore:
    """
    Pod log store backed by a cluster.

    Attributes:
        kube: Kubernetes context used for all calls
    """

    def __init__(self, kube: KubeContext):
        self.kube = kube

    def list_pods(self, namespace: str) -> List[PodInfo]:
        """
        List the pods of a namespace in API order.

        Raises:
            FetchError: If the list call fails
        """
        try:
            pods = self.kube.core.list_namespaced_pod(namespace=namespace).items
        except Exception as e:
            raise FetchError(f"error getting pods in {namespace}: {wrap_kubernetes_error(e)}") from e
        return [pod_to_info(p) for p in pods or []]

    def fetch_log(self, namespace: str, pod_name: str, container_name: str) -> str:
        """
        Fetch the current log of a container, exactly as the API returned it.

        Raises:
            FetchError: If the log cannot be read
        """
        try:
            # preloading would parse a log that happens to be valid JSON
            response = self.kube.core.read_namespaced_pod_log(
                name=pod_name, namespace=namespace, container=container_name, _preload_content=False)
            data = response.data
        except Exception as e:
            raise FetchError(
                f"error reading logs of {pod_name}/{container_name} in {namespace}: {wrap_kubernetes_error(e)}"
            ) from e
        if isinstance(data, bytes):
            return data.decode('utf-8', 'replace')
        return data or ""
