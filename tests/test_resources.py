import pytest

from kgrep.exceptions import ResolutionError
from kgrep.models import ResourceKindCoordinates
from kgrep.resources import ResourceResolver, find_descriptor

from conftest import config_map


def pod(name, namespace="test"):
    return {'apiVersion': 'v1', 'kind': 'Pod', 'metadata': {'name': name, 'namespace': namespace}}


@pytest.fixture
def store(resource_store):
    resource_store.add_descriptor("v1", "Pod", "pods/log")
    resource_store.add_descriptor("v1", "Pod", "pods")
    resource_store.add_descriptor("v1", "ConfigMap", "configmaps")
    resource_store.add_descriptor("apps/v1", "Deployment", "deployments")
    resource_store.add_object("test", "v1", "Pod", pod("pod1"))
    resource_store.add_object("test", "v1", "Pod", pod("pod2"))
    resource_store.add_object("other", "v1", "Pod", pod("elsewhere", "other"))
    return resource_store


def names(resources):
    return [r.name for r in resources]


@pytest.mark.parametrize("kind", ["pod", "Pod", "POD", "pOd"])
def test_kind_resolution_ignores_case(store, kind):
    resolver = ResourceResolver(store)

    assert names(resolver.resolve("test", "v1", kind)) == ["pod1", "pod2"]
    assert store.listed[-1].kind == "Pod"


def test_resolution_uses_canonical_kind_and_plural(store):
    coordinates = ResourceResolver(store).coordinates("test", "v1", "configmap")

    assert coordinates == ResourceKindCoordinates(
        namespace="test", group="", version="v1", kind="ConfigMap", namespaced=True, plural="configmaps")


def test_subresource_descriptors_are_skipped():
    document = [{'kind': 'Pod', 'name': 'pods/log'}, {'kind': 'Pod', 'name': 'pods'}]

    assert find_descriptor(document, "pod") == {'kind': 'Pod', 'name': 'pods'}
    assert find_descriptor(document, "service") is None


def test_api_version_with_group_is_split(store):
    coordinates = ResourceResolver(store).coordinates("test", "apps/v1", "deployment")

    assert (coordinates.group, coordinates.version, coordinates.kind) == ("apps", "v1", "Deployment")
    assert coordinates.api_version == "apps/v1"


def test_unknown_kind_falls_back_to_given_spelling(store):
    store.add_object("test", "example.com/v1", "widget", {'metadata': {'name': 'w1'}})
    resolver = ResourceResolver(store)

    resources = resolver.resolve("test", "example.com/v1", "widget")

    assert names(resources) == ["w1"]
    assert store.listed[-1] == ResourceKindCoordinates(
        namespace="test", group="example.com", version="v1", kind="widget")


def test_resolution_is_restricted_to_namespace(store):
    assert names(ResourceResolver(store).resolve("other", "v1", "Pod")) == ["elsewhere"]
    assert ResourceResolver(store).resolve("empty", "v1", "Pod") == []


def test_missing_api_version_is_discovered(store):
    store.add_object("test", "apps/v1", "Deployment", {'metadata': {'name': 'web'}})

    resources = ResourceResolver(store).resolve("test", None, "DEPLOYMENT")

    assert names(resources) == ["web"]
    assert store.listed[-1].api_version == "apps/v1"
    assert store.listed[-1].plural == "deployments"


def test_undiscoverable_kind_without_api_version_fails(store):
    with pytest.raises(ResolutionError, match="could not find API version for kind 'Gadget'"):
        ResourceResolver(store).resolve("test", None, "Gadget")


def test_discovery_failure_is_a_resolution_error(store):
    def broken(api_version):
        raise ConnectionError("connection refused")
    store.get_discovery_document = broken

    with pytest.raises(ResolutionError, match="connection refused"):
        ResourceResolver(store).resolve("test", "v1", "Pod")
    assert store.listed == []


def test_listing_failure_is_a_resolution_error(store):
    def broken(coordinates):
        raise RuntimeError("server exploded")
    store.list_namespaced = broken

    with pytest.raises(ResolutionError) as exc_info:
        ResourceResolver(store).resolve("test", "v1", "Pod")
    assert isinstance(exc_info.value.__cause__, RuntimeError)


@pytest.mark.parametrize("namespace,api_version,kind", [
    ("", "v1", "Pod"),
    ("test", "v1", ""),
    ("test", "v1", "   "),
    ("test", "a/b/c", "Pod"),
    ("test", "/v1", "Pod"),
    ("test", "apps/", "Pod"),
])
def test_invalid_input_is_rejected(store, namespace, api_version, kind):
    with pytest.raises(ResolutionError):
        ResourceResolver(store).resolve(namespace, api_version, kind)


def test_each_call_resolves_again(store):
    resolver = ResourceResolver(store)
    resolver.resolve("test", "v1", "Pod")
    store.add_object("test", "v1", "Pod", pod("pod3"))

    assert names(resolver.resolve("test", "v1", "Pod")) == ["pod1", "pod2", "pod3"]


def test_config_map_objects_resolve(store):
    store.add_object("test", "v1", "ConfigMap", config_map("app"))

    assert names(ResourceResolver(store).resolve("test", "v1", "configmap")) == ["app"]
