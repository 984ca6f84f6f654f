import pytest

from kgrep.exceptions import FetchError, UnsupportedSortError
from kgrep.logs import LogGrepper, sort_messages
from kgrep.models import LogMessage, SortOrder


def as_tuples(messages):
    return [(m.pod_name, m.container_name, m.text, m.line_number) for m in messages]


def test_discovery_order_follows_traversal(pod_store):
    messages = LogGrepper(pod_store).grep("test", "pod", "initialized", SortOrder.BY_DISCOVERY_ORDER)

    assert as_tuples(messages) == [
        ("pod1", "container1", "xpto initialized", 2),
        ("pod2", "container2", "foo initialized", 2),
        ("pod2", "container2", "bar initialized", 5),
    ]


def test_message_text_order_sorts_by_text(pod_store):
    messages = LogGrepper(pod_store).grep("test", "pod", "initialized", SortOrder.BY_MESSAGE_TEXT)

    assert as_tuples(messages) == [
        ("pod2", "container2", "bar initialized", 5),
        ("pod2", "container2", "foo initialized", 2),
        ("pod1", "container1", "xpto initialized", 2),
    ]


def test_discovery_order_is_the_default(pod_store):
    grepper = LogGrepper(pod_store)

    assert grepper.grep("test", None, "error") == grepper.grep("test", None, "error", SortOrder.BY_DISCOVERY_ORDER)


@pytest.mark.parametrize("pod_filter", [None, ""])
def test_without_pod_filter_every_pod_is_searched(pod_store, pod_filter):
    grepper = LogGrepper(pod_store)

    everything = grepper.grep("test", pod_filter, "error")

    assert everything == grepper.grep("test", "pod1", "error") + grepper.grep("test", "pod2", "error")
    assert {m.pod_name for m in everything} == {"pod1", "pod2"}


def test_pod_filter_is_a_substring_match(pod_store):
    pod_store.add_pod("test", "api-7f9c", "api")
    pod_store.add_log("test", "api-7f9c", "api", "error in api\n")

    messages = LogGrepper(pod_store).grep("test", "7f9", "error")

    assert as_tuples(messages) == [("api-7f9c", "api", "error in api", 1)]
    assert LogGrepper(pod_store).grep("test", "nothing-like-this", "error") == []


def test_pod_filter_excludes_other_pods_before_fetching(pod_store):
    LogGrepper(pod_store).grep("test", "pod2", "error")

    assert pod_store.fetched == [("test", "pod2", "container2")]


def test_waiting_container_contributes_no_matches(pod_store):
    pod_store.add_pod("test", "pod3", "ready", "starting", waiting=("starting",))
    pod_store.add_log("test", "pod3", "ready", "error while ready\n")
    pod_store.add_log("test", "pod3", "starting", "error while starting\n")

    messages = LogGrepper(pod_store).grep("test", "pod3", "error")

    assert as_tuples(messages) == [("pod3", "ready", "error while ready", 1)]
    assert ("test", "pod3", "starting") not in pod_store.fetched


def test_containers_are_searched_in_status_order(pod_store):
    pod_store.add_pod("test", "multi", "b-sidecar", "a-main")
    pod_store.add_log("test", "multi", "b-sidecar", "hit sidecar\n")
    pod_store.add_log("test", "multi", "a-main", "hit main\n")

    messages = LogGrepper(pod_store).grep("test", "multi", "hit")

    assert [m.container_name for m in messages] == ["b-sidecar", "a-main"]


def test_empty_namespace_yields_nothing(pod_store):
    assert LogGrepper(pod_store).grep("empty", None, "error") == []


@pytest.mark.parametrize("sort_order", ["message", None, 1])
def test_unknown_sort_order_fails_before_remote_calls(pod_store, sort_order):
    with pytest.raises(UnsupportedSortError):
        LogGrepper(pod_store).grep("test", None, "error", sort_order)

    assert pod_store.fetched == []


def test_log_fetch_failure_is_a_fetch_error(pod_store):
    pod_store.add_pod("test", "pod9", "gone")

    with pytest.raises(FetchError, match="pod9/gone") as exc_info:
        LogGrepper(pod_store).grep("test", "pod9", "error")
    assert isinstance(exc_info.value.__cause__, LookupError)


def test_pod_listing_failure_is_a_fetch_error(pod_store):
    def broken(namespace):
        raise ConnectionError("connection refused")
    pod_store.list_pods = broken

    with pytest.raises(FetchError, match="error getting pods in test"):
        LogGrepper(pod_store).grep("test", None, "error")


def test_message_text_sort_is_stable():
    messages = [
        LogMessage("b", "c", "same", 1),
        LogMessage("a", "c", "other", 4),
        LogMessage("a", "c", "same", 2),
    ]

    assert sort_messages(messages, SortOrder.BY_MESSAGE_TEXT) == [
        LogMessage("a", "c", "other", 4),
        LogMessage("b", "c", "same", 1),
        LogMessage("a", "c", "same", 2),
    ]


def test_grep_namespaces_concatenates_then_sorts(pod_store):
    pod_store.add_pod("staging", "web", "nginx")
    pod_store.add_log("staging", "web", "nginx", "cache initialized\n")
    grepper = LogGrepper(pod_store)

    in_order = grepper.grep_namespaces(["staging", "test"], None, "initialized")
    by_text = grepper.grep_namespaces(["staging", "test"], None, "initialized", SortOrder.BY_MESSAGE_TEXT)

    assert [m.text for m in in_order] == [
        "cache initialized", "xpto initialized", "foo initialized", "bar initialized"]
    assert [m.text for m in by_text] == [
        "bar initialized", "cache initialized", "foo initialized", "xpto initialized"]


def test_crlf_logs_match_without_carriage_returns(pod_store):
    pod_store.add_pod("test", "win", "iis")
    pod_store.add_log("test", "win", "iis", "Starting\r\nerror: port in use\r\n")

    messages = LogGrepper(pod_store).grep("test", "win", "use")

    assert as_tuples(messages) == [("win", "iis", "error: port in use", 2)]
