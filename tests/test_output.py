import io

from rich.console import Console

from kgrep.models import LogMessage, ResourceLine
from kgrep.output import _line, print_log_messages, print_resource_lines


def plain_console():
    return Console(file=io.StringIO(), force_terminal=False, highlight=False, soft_wrap=True)


def test_resource_lines_are_ordered_by_resource_and_line():
    console = plain_console()
    lines = [
        ResourceLine("pods/web", 12, "    image: nginx:1.25"),
        ResourceLine("pods/api", 9, "    image: nginx:1.24"),
        ResourceLine("pods/web", 3, "  name: nginx-web"),
    ]

    print_resource_lines(lines, "nginx", console)

    assert console.file.getvalue() == (
        "Found 3 occurrence(s) of 'nginx':\n"
        "\n"
        "pods/api[9]:     image: nginx:1.24\n"
        "pods/web[3]:   name: nginx-web\n"
        "pods/web[12]:     image: nginx:1.25\n"
    )


def test_no_resource_lines():
    console = plain_console()

    print_resource_lines([], "nginx", console)

    assert console.file.getvalue() == "No occurrences of 'nginx' found.\n"


def test_log_messages_keep_given_order():
    console = plain_console()
    messages = [
        LogMessage("pod2", "container2", "foo initialized", 2),
        LogMessage("pod1", "container1", "xpto initialized", 2),
    ]

    print_log_messages(messages, "initialized", console)

    assert console.file.getvalue().splitlines() == [
        "pod2/container2[2]: foo initialized",
        "pod1/container1[2]: xpto initialized",
    ]


def test_every_occurrence_is_highlighted():
    text = _line("pods/web[1]:", "nginx uses nginx.conf", "nginx")

    highlighted = [text.plain[span.start:span.end] for span in text.spans if span.style == "bold red"]
    assert highlighted == ["nginx", "nginx"]


def test_markup_in_matched_text_is_printed_literally():
    console = plain_console()

    print_log_messages([LogMessage("p", "c", "[bold]not markup[/bold]", 1)], "markup", console)

    assert console.file.getvalue() == "p/c[1]: [bold]not markup[/bold]\n"
