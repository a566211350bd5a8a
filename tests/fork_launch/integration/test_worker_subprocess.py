"""End-to-end hand-off to a real worker process."""

from __future__ import annotations

import os
import sys
import textwrap
from pathlib import Path

import fork_booter
import pytest
from fork_booter.configuration import ForkSettings
from fork_booter.configuration_model import (
    ClassLoaderConfiguration,
    Classpath,
    ClasspathConfiguration,
    DirectoryScanParameters,
    ProviderConfiguration,
    ReporterConfiguration,
    RunOrderParameters,
    StartupConfiguration,
    TestArtifactInfo,
    TestRequest,
)
from fork_booter.fork_launch import ForkStarter
from fork_booter.worker_boot import WorkerExitCode

_PROVIDER_MODULE = textwrap.dedent(
    """
    from pathlib import Path


    class MarkerProvider:
        def __init__(self, provider_configuration):
            self.reports_directory = Path(
                provider_configuration.reporter_configuration.reports_directory
            )
            self.properties = provider_configuration.provider_properties

        def invoke(self, test_for_fork):
            self.reports_directory.mkdir(parents=True, exist_ok=True)
            marker = self.reports_directory / f"{test_for_fork}.txt"
            marker.write_text(self.properties["greeting"], encoding="utf-8")
            return test_for_fork != "FailingTest"
    """
)


def _startup_configuration(provider_class_name: str) -> StartupConfiguration:
    return StartupConfiguration(
        provider_class_name=provider_class_name,
        classpath_configuration=ClasspathConfiguration(
            test_classpath=Classpath(("CP1",)),
            provider_classpath=Classpath(("SP1",)),
        ),
        class_loader_configuration=ClassLoaderConfiguration(True, False),
    )


def _provider_configuration(reports_directory: Path, test_for_fork: str) -> ProviderConfiguration:
    return ProviderConfiguration(
        directory_scan_parameters=DirectoryScanParameters(base_directory=Path(".")),
        run_order_parameters=RunOrderParameters(),
        fail_fast=False,
        reporter_configuration=ReporterConfiguration(reports_directory=reports_directory),
        test_artifact_info=TestArtifactInfo(version="5.0"),
        test_request=TestRequest(),
        provider_properties={"greeting": "hello\nfrom parent"},
        test_for_fork=test_for_fork,
    )


@pytest.fixture
def provider_path(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    module_directory = tmp_path / "providers"
    module_directory.mkdir()
    (module_directory / "marker_provider.py").write_text(_PROVIDER_MODULE, encoding="utf-8")
    package_root = Path(next(iter(fork_booter.__path__))).parent
    monkeypatch.setenv(
        "PYTHONPATH", os.pathsep.join([str(module_directory), str(package_root)])
    )
    return module_directory


def _starter(tmp_path: Path) -> ForkStarter:
    return ForkStarter(
        ForkSettings(python_executable=sys.executable, temp_directory=tmp_path / "booter")
    )


def test_worker_process_runs_provider_with_decoded_configuration(
    tmp_path: Path, provider_path: Path
) -> None:
    reports = tmp_path / "reports"

    result = _starter(tmp_path).launch(
        _provider_configuration(reports, "PassingTest"),
        _startup_configuration("marker_provider.MarkerProvider"),
    )

    assert result.exit_code == WorkerExitCode.OK
    assert (reports / "PassingTest.txt").read_text(encoding="utf-8") == "hello\nfrom parent"
    assert not result.booter_file.exists()


def test_worker_process_reports_failed_tests(tmp_path: Path, provider_path: Path) -> None:
    result = _starter(tmp_path).launch(
        _provider_configuration(tmp_path / "reports", "FailingTest"),
        _startup_configuration("marker_provider.MarkerProvider"),
    )

    assert result.exit_code == WorkerExitCode.TESTS_FAILED
    assert not result.succeeded


def test_worker_process_reports_unknown_provider(tmp_path: Path, provider_path: Path) -> None:
    result = _starter(tmp_path).launch(
        _provider_configuration(tmp_path / "reports", "PassingTest"),
        _startup_configuration("marker_provider.DoesNotExist"),
    )

    assert result.exit_code == WorkerExitCode.PROVIDER_FAILURE
    assert not result.booter_file.exists()
