from __future__ import annotations

from pathlib import Path

from guest_import.cli import main as cli_main

"""Exit code contract: 0 all imported, 2 partial, 1 fatal."""


def test_exit_code_all_success(write_config, write_csv):
    path = write_csv("name,phone_number,amount\nJane,55555,2\nJohn,66666,1\n")
    assert cli_main([str(path), "--dry-run"]) == 0


def test_exit_code_partial(write_config, write_csv):
    path = write_csv("name,phone_number,amount\nJane,55555,2\nJohn,1,1\n")
    assert cli_main([str(path), "--dry-run"]) == 2


def test_exit_code_no_valid_rows(write_config, write_csv):
    path = write_csv("name,phone_number,amount\n,55555,2\n")
    assert cli_main([str(path), "--dry-run"]) == 1


def test_exit_code_structural_error(write_config, write_csv):
    path = write_csv("name,amount\nJane,2\n")
    assert cli_main([str(path), "--dry-run"]) == 1


def test_exit_code_missing_file(write_config, temp_workdir: Path):
    assert cli_main([str(temp_workdir / "data" / "nope.csv"), "--dry-run"]) == 1


def test_exit_code_bad_config(temp_workdir: Path, write_csv, capsys):
    cfg = temp_workdir / "config" / "bad.yml"
    cfg.write_text("flow: bulk\n", encoding="utf-8")
    path = write_csv("name,phone_number,amount\nJane,55555,2\n")
    code = cli_main([str(path), "--config", str(cfg), "--event-id", "e", "--dry-run"])
    assert code == 1
    assert "ERROR config: config validation failed" in capsys.readouterr().out


def test_exit_code_explicit_config_missing(temp_workdir: Path, write_csv, capsys):
    path = write_csv("name,phone_number,amount\nJane,55555,2\n")
    code = cli_main([str(path), "--config", "config/none.yml", "--event-id", "e", "--dry-run"])
    assert code == 1
    assert "config file not found" in capsys.readouterr().out
