import threading

import pytest

from ucnscan.messages import (
    FatalMessage,
    MessageLog,
    MessageType,
    decorate_html,
    message_text,
)


@pytest.mark.parametrize(
    "kind, prefix",
    [
        (MessageType.DEBUG, "Debug: "),
        (MessageType.WARNING, "Warning: "),
        (MessageType.CRITICAL, "Critical: "),
        (MessageType.FATAL, "Fatal: "),
    ],
)
def test_message_text_prefixes(kind, prefix):
    assert message_text(kind, "port opened") == prefix + "port opened"


def test_message_text_accepts_plain_ints():
    assert message_text(1, "m") == message_text(MessageType.WARNING, "m")


def test_message_text_unrecognized_kind():
    assert message_text(42, "odd") == "Unrecognized message type: odd"


def test_debug_is_not_decorated():
    assert decorate_html(MessageType.DEBUG, "x") == message_text(MessageType.DEBUG, "x")


def test_warning_is_red():
    text = message_text(MessageType.WARNING, "late")
    assert decorate_html(MessageType.WARNING, "late") == '<FONT color="#FF0000">' + text + "</FONT>"


def test_critical_is_bold_red():
    text = message_text(MessageType.CRITICAL, "lost")
    assert decorate_html(MessageType.CRITICAL, "lost") == (
        '<B><FONT color="#FF0000">' + text + "</FONT></B>"
    )


def test_unrecognized_is_not_decorated():
    assert decorate_html(9, "y") == message_text(9, "y")


def test_log_records_in_order():
    log = MessageLog()
    first = log.post(MessageType.DEBUG, "one")
    second = log.post(MessageType.WARNING, "two")
    assert log.entries() == [first, second]
    assert first == decorate_html(MessageType.DEBUG, "one")


def test_entries_returns_copy():
    log = MessageLog()
    log.post(MessageType.DEBUG, "a")
    snapshot = log.entries()
    snapshot.append("junk")
    assert len(log.entries()) == 1


def test_fatal_raises_and_is_not_recorded():
    log = MessageLog()
    with pytest.raises(FatalMessage, match="Fatal: boom"):
        log.post(MessageType.FATAL, "boom")
    assert log.entries() == []


def test_concurrent_posts_are_all_kept():
    log = MessageLog()

    def worker(n):
        for i in range(50):
            log.post(MessageType.DEBUG, f"{n}-{i}")

    threads = [threading.Thread(target=worker, args=(n,)) for n in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert len(log.entries()) == 200