"""CLI orchestration integration tests."""

from __future__ import annotations

import json
from pathlib import Path

import yaml
from click.testing import CliRunner
from fork_booter.cli import cli, main
from fork_booter.configuration_model import (
    ClassLoaderConfiguration,
    Classpath,
    ClasspathConfiguration,
    DirectoryScanParameters,
    ForkContext,
    ProviderConfiguration,
    ReporterConfiguration,
    RunOrderParameters,
    StartupConfiguration,
    TestArtifactInfo,
    TestRequest,
)
from fork_booter.serialization import encode
from fork_booter.transport import load_booter_file
from fork_booter.worker_boot import WorkerExitCode


def _write_config(tmp_path: Path, **fork_overrides) -> Path:
    config = {
        "fork": {"temp_directory": "booter", "parallelism": 2, "fork_count": 2, **fork_overrides},
        "startup": {
            "provider_class_name": "my_tests.provider.SuiteProvider",
            "classpath": {"test": ["CP1", "CP2"], "provider": ["SP1"]},
        },
        "provider": {
            "directory_scanner": {"base_directory": "."},
            "reporter": {"reports_directory": "reports"},
            "test_artifact": {"version": "5.0"},
            "properties": {"parallel": "classes"},
        },
    }
    path = tmp_path / "fork-booter.yaml"
    path.write_text(yaml.safe_dump(config), encoding="utf-8")
    return path


def _write_booter_file(tmp_path: Path) -> Path:
    store = encode(
        ProviderConfiguration(
            directory_scan_parameters=DirectoryScanParameters(base_directory=Path(".")),
            run_order_parameters=RunOrderParameters(),
            fail_fast=False,
            reporter_configuration=ReporterConfiguration(reports_directory=Path("reports")),
            test_artifact_info=TestArtifactInfo(version="5.0", classifier="ABC"),
            test_request=TestRequest(),
            provider_properties={"parallel": "classes"},
        ),
        StartupConfiguration(
            provider_class_name="com.provider",
            classpath_configuration=ClasspathConfiguration(
                test_classpath=Classpath(("CP1", "CP2")),
                provider_classpath=Classpath(("SP1", "SP2")),
            ),
            class_loader_configuration=ClassLoaderConfiguration(True, True),
        ),
        ForkContext(fork_number=1),
    )
    booter_file = tmp_path / "booter.properties"
    with booter_file.open("w", encoding="utf-8") as handle:
        store.store(handle)
    return booter_file


def test_generate_config_command_writes_placeholder_file_with_default_name(tmp_path: Path) -> None:
    runner = CliRunner()
    with runner.isolated_filesystem(temp_dir=str(tmp_path)):
        result = runner.invoke(cli, ["generate-config"])
        output_path = Path("fork-booter.yaml").resolve()

        assert result.exit_code == 0
        assert output_path.exists()
        content = output_path.read_text(encoding="utf-8")
        assert "startup:" in content
        assert "provider:" in content
        assert "<REQUIRED>" in content
        assert str(output_path) in result.output


def test_generate_config_command_fails_when_output_file_already_exists(tmp_path: Path) -> None:
    runner = CliRunner()
    output_path = tmp_path / "fork-booter.yaml"
    output_path.write_text("already-there", encoding="utf-8")

    result = runner.invoke(cli, ["generate-config", "--output", str(output_path)])

    assert result.exit_code != 0
    assert "already exists" in str(result.exception).lower()
    assert output_path.read_text(encoding="utf-8") == "already-there"


def test_launch_command_hands_configuration_to_every_fork(tmp_path: Path, monkeypatch) -> None:
    seen: list[dict[str, str]] = []

    def fake_worker(command: tuple[str, ...]) -> int:
        seen.append(load_booter_file(command[4]).as_dict())
        return 0

    monkeypatch.setattr("fork_booter.fork_launch.fork_starter._run_worker_process", fake_worker)
    runner = CliRunner()

    result = runner.invoke(cli, ["launch", "--config", str(_write_config(tmp_path))])

    assert result.exit_code == 0
    assert "fork 1: exit 0" in result.output
    assert "fork 2: exit 0" in result.output
    assert len(seen) == 2
    assert {entries["booter.forkNumber"] for entries in seen} == {"1", "2"}
    assert all(
        entries["startup.providerClassName"] == "my_tests.provider.SuiteProvider"
        for entries in seen
    )
    assert not (tmp_path / "booter").exists() or list((tmp_path / "booter").iterdir()) == []


def test_launch_command_fails_when_a_fork_fails(tmp_path: Path, monkeypatch) -> None:
    def fake_worker(command: tuple[str, ...]) -> int:
        fork_number = load_booter_file(command[4]).get_string("booter.forkNumber")
        return 1 if fork_number == "3" else 0

    monkeypatch.setattr("fork_booter.fork_launch.fork_starter._run_worker_process", fake_worker)

    exit_code = main(["launch", "--config", str(_write_config(tmp_path)), "--forks", "3"])

    assert exit_code == 1


def test_launch_command_reports_invalid_configuration(tmp_path: Path) -> None:
    config_path = tmp_path / "fork-booter.yaml"
    config_path.write_text("startup: {}\n", encoding="utf-8")
    runner = CliRunner()

    result = runner.invoke(cli, ["launch", "--config", str(config_path)])

    assert result.exit_code != 0
    assert "startup.provider_class_name" in str(result.exception)


def test_worker_command_exits_with_transport_failure_for_missing_file(tmp_path: Path) -> None:
    exit_code = main(["worker", str(tmp_path / "absent.properties")])

    assert exit_code == WorkerExitCode.TRANSPORT_FAILURE


def test_worker_command_exits_with_format_failure_for_garbage(tmp_path: Path) -> None:
    booter_file = tmp_path / "garbage.properties"
    booter_file.write_text("no separator here\n", encoding="utf-8")

    exit_code = main(["worker", str(booter_file)])

    assert exit_code == WorkerExitCode.FORMAT_FAILURE


def test_inspect_command_prints_decoded_configuration(tmp_path: Path) -> None:
    runner = CliRunner()

    result = runner.invoke(cli, ["inspect", str(_write_booter_file(tmp_path))])

    assert result.exit_code == 0
    description = json.loads(result.output)
    startup = description["startup_configuration"]
    assert startup["provider_class_name"] == "com.provider"
    assert startup["classpath_configuration"]["test_classpath"]["elements"] == ["CP1", "CP2"]
    assert startup["manifest_only_jar_requested_and_usable"] is True
    assert description["provider_configuration"]["test_artifact_info"]["classifier"] == "ABC"
    assert description["fork_context"]["fork_number"] == 1
    assert description["provider_configuration"]["provider_properties"] == {"parallel": "classes"}


def test_inspect_command_reports_corrupt_booter_file(tmp_path: Path, capsys) -> None:
    booter_file = tmp_path / "booter.properties"
    booter_file.write_text("booter.formatVersion=1\n", encoding="utf-8")

    exit_code = main(["inspect", str(booter_file)])
    captured = capsys.readouterr()

    assert exit_code == 1
    assert "Required booter key is missing" in captured.err
