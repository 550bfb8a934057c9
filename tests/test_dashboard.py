import pytest

import dashboard
from instmon.render import Frame


def test_put_timeout_accepts_zero_and_fractions():
    assert dashboard.parse_args(["--put-timeout", "0"]).put_timeout == 0.0
    assert dashboard.parse_args(["--put-timeout", "0.25"]).put_timeout == 0.25


def test_parse_args_defaults():
    args = dashboard.parse_args([])
    assert args.instances == 0
    assert args.bus_capacity == 256
    assert args.seed is None
    assert args.log_file is None


@pytest.mark.parametrize("argv", [
    ["--instances", "-1"],
    ["--bus-capacity", "0"],
    ["--hz", "x"],
    ["--put-timeout", "inf"],
    ["--put-timeout", "nan"],
    ["--put-timeout", "-1"],
    ["--put-timeout", "soon"],
])
def test_parse_args_rejects_bad_values(argv):
    with pytest.raises(SystemExit):
        dashboard.parse_args(argv)


def test_frame_to_text_applies_theme():
    frame = Frame(((("Title", "header"),), (("Select > ", "prompt"), ("hint", "placeholder"))))
    text = dashboard.frame_to_text(frame)
    assert text.plain == "Title\nSelect > hint"
    styles = {str(span.style) for span in text.spans}
    assert dashboard.THEME["header"] in styles
    assert dashboard.THEME["placeholder"] in styles


def test_run_without_terminal_exits_nonzero(capsys):
    # pytest captures stdout, so the console is not a terminal
    code = dashboard.run(dashboard.parse_args(["--instances", "2"]))
    assert code == 1
    assert "terminal not available" in capsys.readouterr().err
