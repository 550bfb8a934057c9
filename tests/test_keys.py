from instmon.keys import CHAR_LIMIT, LineInput


def test_append_respects_char_limit():
    li = LineInput()
    for ch in "123456":
        assert li.handle(ch) is None
    assert li.value == "1234"[:CHAR_LIMIT]


def test_backspace_removes_last_char():
    li = LineInput()
    li.handle("4")
    li.handle("2")
    li.handle("backspace")
    assert li.value == "4"
    li.handle("backspace")
    li.handle("backspace")
    assert li.value == ""


def test_enter_submits_only_non_empty():
    li = LineInput()
    assert li.handle("enter") is None
    li.handle("7")
    assert li.handle("enter") == "7"
    # submitting leaves clearing to the caller
    assert li.value == "7"


def test_named_keys_are_not_typed():
    li = LineInput()
    for key in ("tab", "up", "ctrl+a", "unknown", "\x01"):
        li.handle(key)
    assert li.value == ""
