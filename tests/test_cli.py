import io
import json
import os
import subprocess
import sys
from pathlib import Path

import pytest

from hclkit import hcl_cli
from hclkit.hcl_errors import HclIOError


@pytest.fixture  # type: ignore[misc]
def hcl_file(tmp_path: Path, security_group_hcl: str) -> Path:
    path = tmp_path / "main.hcl"
    path.write_text(security_group_hcl, encoding="utf-8")
    return path


def test_parse_file_prints_merged_tree(hcl_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
    hcl_cli.main(["parse", str(hcl_file)])
    out = capsys.readouterr().out
    assert out.startswith("Body (merged)\n")
    assert "resource = Blocks" in out
    assert '  resource "security/group" "foobar"' in out


def test_no_merge_json(hcl_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
    hcl_cli.main(["parse", "--no-merge", "--format", "json", str(hcl_file)])
    document = json.loads(capsys.readouterr().out)
    assert document[0]["kind"] == "block"
    assert document[0]["labels"] == ["security/group", "foobar"]
    assert [e["type"] for e in document[0]["body"] if e["kind"] == "block"] == ["allow", "allow"]


def test_reads_stdin(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    monkeypatch.setattr(sys, "stdin", io.StringIO("a = 1\n"))
    hcl_cli.main(["parse", "-f", "json", "-"])
    assert json.loads(capsys.readouterr().out) == {"a": 1}


def test_writes_output_file(hcl_file: Path, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    out_path = tmp_path / "out.json"
    hcl_cli.main(["parse", "-f", "json", str(hcl_file), str(out_path)])
    assert capsys.readouterr().out == ""
    document = json.loads(out_path.read_text(encoding="utf-8"))
    assert list(document) == ["resource"]


def test_run_parse_write_failure(hcl_file: Path, tmp_path: Path) -> None:
    with pytest.raises(HclIOError):
        hcl_cli.run_parse(str(hcl_file), str(tmp_path / "missing" / "out.txt"))


def test_parse_error_exits_with_status_1(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    path = tmp_path / "bad.hcl"
    path.write_text("a = \n", encoding="utf-8")
    with pytest.raises(SystemExit) as exc:
        hcl_cli.main(["parse", str(path)])
    assert exc.value.code == 1
    err = capsys.readouterr().err
    assert err.startswith("error: Expected an expression")
    assert "Line 1, column 5:" in err


def test_merge_error_exits_with_status_1(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    path = tmp_path / "dup.hcl"
    path.write_text("a = 1\na = 2\n", encoding="utf-8")
    with pytest.raises(SystemExit) as exc:
        hcl_cli.main(["parse", str(path)])
    assert exc.value.code == 1
    assert "cannot have multiple entries" in capsys.readouterr().err

    hcl_cli.main(["parse", "--no-merge", str(path)])
    assert capsys.readouterr().out.count("a = Integer") == 2


def test_missing_input_exits_with_status_1(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as exc:
        hcl_cli.main(["parse", str(tmp_path / "nope.hcl")])
    assert exc.value.code == 1
    assert "Cannot read" in capsys.readouterr().err


def test_max_depth_flag(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    path = tmp_path / "deep.hcl"
    path.write_text("a = [[[1]]]\n", encoding="utf-8")
    with pytest.raises(SystemExit):
        hcl_cli.main(["parse", "--max-depth", "2", str(path)])
    assert "Nesting deeper than 2 levels" in capsys.readouterr().err


def test_usage_errors_exit_with_status_2() -> None:
    with pytest.raises(SystemExit) as exc:
        hcl_cli.main([])
    assert exc.value.code == 2
    with pytest.raises(SystemExit) as exc:
        hcl_cli.main(["parse", "--format", "yaml"])
    assert exc.value.code == 2


def test_verbose_flag_sets_debug(hcl_file: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    levels = []
    monkeypatch.setattr(hcl_cli.logging, "basicConfig", lambda **kwargs: levels.append(kwargs["level"]))
    hcl_cli.main(["parse", "--verbose", str(hcl_file)])
    hcl_cli.main(["parse", str(hcl_file)])
    assert levels == [hcl_cli.logging.DEBUG, hcl_cli.logging.WARNING]


def test_hclkit_cli_main_entrypoint_runs(security_group_hcl: str) -> None:
    env = dict(os.environ)
    env["PYTHONPATH"] = os.pathsep.join(filter(None, ["src", env.get("PYTHONPATH")]))
    result = subprocess.run(
        [sys.executable, "-m", "hclkit.hcl_cli", "parse", "-f", "json", "-"],
        input=security_group_hcl.encode(),
        capture_output=True,
        timeout=30,
        env=env,
    )
    assert result.returncode == 0
    assert json.loads(result.stdout)["resource"]["resource"][0]["labels"] == ["security/group", "foobar"]


def test_non_finite_float_json_exits_with_status_1(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    path = tmp_path / "big.hcl"
    path.write_text("a = 1e400\n", encoding="utf-8")
    with pytest.raises(SystemExit) as exc:
        hcl_cli.main(["parse", "-f", "json", str(path)])
    assert exc.value.code == 1
    assert "Invalid number 'inf'" in capsys.readouterr().err
