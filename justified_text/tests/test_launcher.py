from __future__ import annotations

import io
import json

import pytest

from justified_text import launcher
from justified_text.justifier import JustifiedLine


def _run(argv, text):
    stdout = io.StringIO()
    code = launcher.main(argv, stdin=io.StringIO(text), stdout=stdout)
    return code, stdout.getvalue()


def test_fixed_advance_output_one_line_per_row(tmp_path):
    settings = tmp_path / "justify_settings.json"
    code, output = _run(
        ["--width", "10", "--advance", "1", "--seed", "1", "--show-thin-spaces", "--settings", str(settings)],
        "one two three\n",
    )

    assert code == 0
    rows = output.splitlines()
    assert len(rows) == 2
    assert rows[0].replace(launcher.THIN_SPACE_MARKER, "") == "one two"
    assert rows[0].count(launcher.THIN_SPACE_MARKER) == 1
    assert rows[1] == "three"


def test_reads_text_file_and_settings(tmp_path):
    source = tmp_path / "input.txt"
    source.write_text("alpha beta gamma delta", encoding="utf-8")
    settings = tmp_path / "justify_settings.json"
    settings.write_text(json.dumps({"random_seed": 4}), encoding="utf-8")

    code, first = _run([str(source), "--width", "12", "--advance", "1", "--settings", str(settings)], "")
    _, second = _run([str(source), "--width", "12", "--advance", "1", "--settings", str(settings)], "")

    assert code == 0
    assert first == second
    assert first.splitlines()[-1] == "gamma delta"


def test_width_is_required():
    with pytest.raises(SystemExit) as excinfo:
        _run(["--advance", "1"], "text")
    assert excinfo.value.code == 2


def test_settings_path_env_override(tmp_path, monkeypatch):
    monkeypatch.setenv("JUSTIFIED_TEXT_SETTINGS", str(tmp_path / "custom.json"))
    assert launcher.resolve_settings_path(None) == (tmp_path / "custom.json").resolve()
    assert launcher.resolve_settings_path(str(tmp_path / "cli.json")) == (tmp_path / "cli.json").resolve()


def test_render_lines_drops_separators_and_marks_thin_spaces():
    lines = [
        JustifiedLine(tokens=("a", "b"), text="a \u200ab ", filled=True),
        JustifiedLine(tokens=("c\n",), text="c\n ", hard_break=True),
        JustifiedLine(tokens=("d",), text="d"),
    ]
    assert launcher.render_lines(lines) == "a \u200ab\nc\nd"
    assert launcher.render_lines(lines, show_thin_spaces=True) == "a \u00b7b\nc\nd"


def test_hard_break_prints_a_single_newline():
    code, output = _run(["--width", "100", "--advance", "1"], "a b\n c d\n")
    assert code == 0
    assert output == "a b\nc d\n"


def test_hard_break_inside_token_and_trailing_blank_line():
    # "b\nc" ends its line, so "d" starts the next one.
    _, output = _run(["--width", "100", "--advance", "1"], "a b\nc d\n\n")
    assert output == "a b\nc\nd\n\n"
