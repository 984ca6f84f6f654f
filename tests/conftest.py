import pytest

from kgrep.models import ContainerInfo, PodInfo, StructuredResource


class FakeResourceStore:
    """In-memory resource store. Objects are keyed by the exact kind spelling they are listed with."""

    def __init__(self):
        self.documents = {}
        self.objects = {}
        self.typed = {}
        self.listed = []

    def add_descriptor(self, api_version, kind, name):
        self.documents.setdefault(api_version, []).append({'kind': kind, 'name': name, 'namespaced': True})

    def add_object(self, namespace, api_version, kind, obj):
        self.objects.setdefault((namespace, api_version, kind), []).append(obj)

    def add_typed(self, namespace, kind_label, obj):
        self.typed.setdefault((namespace, kind_label), []).append(obj)

    def get_discovery_document(self, api_version):
        return list(self.documents.get(api_version, []))

    def discover_api_version(self, kind):
        for api_version, document in self.documents.items():
            for descriptor in document:
                if descriptor['kind'].lower() == kind.lower() and '/' not in descriptor['name']:
                    return api_version, descriptor
        return None

    def list_namespaced(self, coordinates):
        self.listed.append(coordinates)
        key = (coordinates.namespace, coordinates.api_version, coordinates.kind)
        return [StructuredResource.from_object(o, coordinates.kind) for o in self.objects.get(key, [])]

    def list_typed(self, namespace, kind_label):
        return [StructuredResource.from_object(o) for o in self.typed.get((namespace, kind_label), [])]


class FakePodLogStore:
    """In-memory pod log store; fetching an unknown log raises LookupError."""

    def __init__(self):
        self.pods = {}
        self.logs = {}
        self.fetched = []

    def add_pod(self, namespace, name, *containers, waiting=()):
        infos = [ContainerInfo(name=c, waiting=c in waiting) for c in containers]
        self.pods.setdefault(namespace, []).append(PodInfo(name=name, namespace=namespace, containers=infos))

    def add_log(self, namespace, pod, container, text):
        self.logs[(namespace, pod, container)] = text

    def list_pods(self, namespace):
        return list(self.pods.get(namespace, []))

    def fetch_log(self, namespace, pod_name, container_name):
        self.fetched.append((namespace, pod_name, container_name))
        key = (namespace, pod_name, container_name)
        if key not in self.logs:
            raise LookupError(f"logs not found for pod {pod_name}")
        return self.logs[key]


def config_map(name, namespace="test", **data):
    return {
        'apiVersion': 'v1',
        'kind': 'ConfigMap',
        'metadata': {'name': name, 'namespace': namespace},
        'data': dict(data),
    }


@pytest.fixture
def resource_store():
    return FakeResourceStore()


@pytest.fixture
def pod_store():
    """Pods and logs of the two-pod example, fresh for every test."""
    store = FakePodLogStore()
    store.add_pod("test", "pod1", "container1")
    store.add_pod("test", "pod2", "container2")
    store.add_log("test", "pod1", "container1", "Initializing xpto\nxpto initialized\nerror writing to xpto\n")
    store.add_log("test", "pod2", "container2",
                  "Initializing foo\nfoo initialized\nerror writing to foo\n"
                  "Initializing bar\nbar initialized\nerror writing to bar\n")
    return store
