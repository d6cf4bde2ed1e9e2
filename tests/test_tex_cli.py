import io
import json
import sys
from pathlib import Path

import pytest

from textree import tex_cli
from textree.tex_cli import MISMATCH, main


def _lines_file(tmp_path: Path, *lines: str) -> Path:
    p = tmp_path / "lines.txt"
    p.write_text("".join(line + "\n" for line in lines), encoding="utf-8")
    return p


def test_prints_dump_and_flattened_line(tmp_path: Path, capsys, clean_env):
    path = _lines_file(tmp_path, "hello", r"\'{e}lan")
    rc = main([str(path)])
    assert rc == 0
    out = capsys.readouterr().out
    assert out.splitlines() == [
        "tree =",
        'Text "hello"',
        "flattened tree = [hello]",
        "tree =",
        "Command \\'",
        "  Group",
        '    Text "e"',
        'Text "lan"',
        "flattened tree = [\\'{e}lan]",
    ]
    assert MISMATCH not in out


def test_empty_line_has_empty_dump(tmp_path: Path, capsys, clean_env):
    rc = main([str(_lines_file(tmp_path, ""))])
    assert rc == 0
    assert capsys.readouterr().out == "tree =\nflattened tree = []\n"


def test_bad_line_is_logged_and_skipped(tmp_path: Path, capsys, caplog, clean_env):
    path = _lines_file(tmp_path, "{oops", "ok")
    rc = main([str(path)])
    assert rc == 1
    out = capsys.readouterr().out
    assert "flattened tree = [ok]" in out
    assert "oops" not in out
    assert "line 1: unterminated group at offset 0" in caplog.text


def test_halt_on_error_stops(tmp_path: Path, capsys, clean_env):
    path = _lines_file(tmp_path, "a}", "ok")
    rc = main([str(path), "--halt-on-error"])
    assert rc == 1
    assert "[ok]" not in capsys.readouterr().out


def test_strict_flag_rejects_trailing_backslash(tmp_path: Path, capsys, clean_env):
    path = _lines_file(tmp_path, "a\\")
    assert main([str(path)]) == 0
    assert "flattened tree = [a\\]" in capsys.readouterr().out
    assert main([str(path), "--strict"]) == 1


def test_strict_from_environment(tmp_path: Path, clean_env):
    clean_env.setenv("TEXTREE_STRICT", "1")
    assert main([str(_lines_file(tmp_path, "a\\"))]) == 1


def test_max_depth_flag(tmp_path: Path, clean_env):
    path = _lines_file(tmp_path, "{{{x}}}")
    assert main([str(path), "--max-depth", "3"]) == 0
    assert main([str(path), "--max-depth", "2"]) == 1


def test_json_and_verify_output(tmp_path: Path, capsys, clean_env):
    rc = main([str(_lines_file(tmp_path, "{x}")), "--json", "--verify"])
    assert rc == 0
    out = capsys.readouterr().out
    assert '"treeVersion": "1.0.0"' in out
    verify_line = [line for line in out.splitlines() if line.startswith('{"verify"')][0]
    assert json.loads(verify_line) == {"verify": {"errors": [], "warnings": []}}


def test_config_file(tmp_path: Path, capsys, clean_env):
    cfg = tmp_path / "opts.json"
    cfg.write_text(json.dumps({"dump_width": 4}), encoding="utf-8")
    rc = main([str(_lines_file(tmp_path, "{x}")), "--config", str(cfg)])
    assert rc == 0
    assert '    Text "x"' in capsys.readouterr().out.splitlines()


def test_reads_stdin(monkeypatch, capsys, clean_env):
    monkeypatch.setattr(sys, "stdin", io.StringIO("a{b}\r\n"))
    assert main([]) == 0
    assert "flattened tree = [a{b}]" in capsys.readouterr().out


def test_mismatch_is_reported(tmp_path: Path, monkeypatch, capsys, clean_env):
    monkeypatch.setattr(tex_cli, "flatten", lambda tree: "something else")
    assert main([str(_lines_file(tmp_path, "hello"))]) == 1
    assert MISMATCH in capsys.readouterr().out


def test_usage_errors(tmp_path: Path, clean_env):
    with pytest.raises(SystemExit) as ex:
        main([str(tmp_path / "missing.txt")])
    assert ex.value.code == 2

    bad_cfg = tmp_path / "bad.json"
    bad_cfg.write_text('{"nope": 1}', encoding="utf-8")
    with pytest.raises(SystemExit) as ex:
        main(["--config", str(bad_cfg)])
    assert ex.value.code == 2

    with pytest.raises(SystemExit) as ex:
        main(["--max-depth", "0"])
    assert ex.value.code == 2


def test_undecodable_line_is_logged_and_skipped(tmp_path: Path, capsys, caplog, clean_env):
    path = tmp_path / "bad.txt"
    path.write_bytes(b"ok\n\xff{x}\nafter\n")
    rc = main([str(path)])
    assert rc == 1
    out = capsys.readouterr().out
    assert "flattened tree = [ok]" in out
    assert "flattened tree = [after]" in out
    assert "line 2: 'utf-8' codec can't decode" in caplog.text


def test_undecodable_line_with_halt_on_error(tmp_path: Path, capsys, clean_env):
    path = tmp_path / "bad.txt"
    path.write_bytes(b"\xfe\nafter\n")
    assert main([str(path), "--halt-on-error"]) == 1
    assert "[after]" not in capsys.readouterr().out


def test_reads_binary_stdin(monkeypatch, capsys, caplog, clean_env):
    stdin = io.TextIOWrapper(io.BytesIO(b"caf\xc3\xa9 {x}\n\xff\nend\n"), encoding="utf-8")
    monkeypatch.setattr(sys, "stdin", stdin)
    assert main([]) == 1
    out = capsys.readouterr().out
    assert "flattened tree = [caf\u00e9 {x}]" in out
    assert "flattened tree = [end]" in out
    assert "<stdin>: line 2" in caplog.text


def test_log_level_choices(tmp_path: Path, clean_env):
    path = _lines_file(tmp_path, "x")
    assert main([str(path), "--log-level", "DEBUG"]) == 0
    for bad in ("root", "verbose"):
        with pytest.raises(SystemExit) as ex:
            main([str(path), "--log-level", bad])
        assert ex.value.code == 2
