"""CLI error-handling tests."""

from __future__ import annotations

from fork_booter.cli import main


def test_missing_required_option_returns_clean_click_error(capsys) -> None:
    exit_code = main(["launch", "--forks", "2"])
    captured = capsys.readouterr()

    assert exit_code == 2
    assert "Missing option" in captured.err
    assert "--config" in captured.err
    assert "Traceback" not in captured.err


def test_unknown_option_returns_clean_click_error(capsys) -> None:
    exit_code = main(["generate-config", "--bogus"])
    captured = capsys.readouterr()

    assert exit_code == 2
    assert "No such option: --bogus" in captured.err
    assert "Traceback" not in captured.err


def test_fork_count_below_one_is_rejected(capsys) -> None:
    exit_code = main(["launch", "--config", "fork-booter.yaml", "--forks", "0"])
    captured = capsys.readouterr()

    assert exit_code == 2
    assert "--forks" in captured.err


def test_missing_launch_configuration_is_reported_without_traceback(tmp_path, capsys) -> None:
    exit_code = main(["launch", "--config", str(tmp_path / "missing.yaml")])
    captured = capsys.readouterr()

    assert exit_code == 1
    assert "missing.yaml" in captured.err
    assert "Traceback" not in captured.err
