"""tests/test_main.py: Tests for the interactive shell."""

import builtins

import pytest
from botdb.__main__ import _fmt_result, _fmt_table, main


def feed(monkeypatch, lines):
    it = iter(lines)

    def fake_input(prompt=""):
        try:
            return next(it)
        except StopIteration:
            raise EOFError

    monkeypatch.setattr(builtins, "input", fake_input)


class TestFormatting:
    def test_fmt_empty_table(self):
        assert _fmt_table([]) == "(0 rows)"

    def test_fmt_table(self):
        out = _fmt_table([{"#": 0, "name": "Rex", "info": None}])
        assert "| # | name | info |" in out
        assert "| 0 | Rex  | null |" in out
        assert out.endswith("(1 row)")

    def test_fmt_results(self):
        assert _fmt_result({"status": "OK", "position": 3}) == "OK: row 3"
        assert _fmt_result({"status": "OK", "positions": [0, 2]}) == "OK: rows 0, 2"
        assert _fmt_result({"status": "OK", "value": "Rex"}) == "Rex"
        assert _fmt_result({"status": "OK", "value": 3}) == "3"
        assert _fmt_result({"status": "OK", "flushed": 1}) == "OK: 1 table flushed"
        assert _fmt_result({"status": "OK"}) == "OK"


class TestRepl:
    def test_session_persists_on_exit(self, tmp_path, monkeypatch, capsys):
        data = tmp_path / "data"
        feed(monkeypatch, [
            "CREATE pets name species",
            "ADD pets Rex dog",
            "LOOKUP pets species bird",
            ".tables",
            "exit",
        ])
        main(["--data-dir", str(data), "--flush-interval", "0"])
        out = capsys.readouterr().out
        assert "OK: row 0" in out
        assert "Error (find)" in out
        assert "  pets" in out
        assert "Bye!" in out
        assert (data / "pets").read_text(encoding="utf-8") == 'name species\n"Rex"\n"dog"\n'

    def test_meta_quit_and_eof(self, tmp_path, monkeypatch, capsys):
        feed(monkeypatch, [".help", ".bogus", ".quit", "SHOW never"])
        main(["--data-dir", str(tmp_path), "--flush-interval", "0"])
        out = capsys.readouterr().out
        assert "Meta-commands" in out
        assert "Unknown meta-command" in out
        assert "Bye!" in out

    def test_bad_encoding_argument(self, tmp_path):
        with pytest.raises(SystemExit):
            main(["--data-dir", str(tmp_path), "--encoding", "xml"])
