"""Booter encoder tests."""

from __future__ import annotations

from pathlib import Path

import pytest
from fork_booter.configuration_model import (
    ClassLoaderConfiguration,
    Classpath,
    ClasspathConfiguration,
    CommandLineOption,
    DirectoryScanParameters,
    ForkContext,
    ProviderConfiguration,
    ReporterConfiguration,
    RunOrder,
    RunOrderParameters,
    Shutdown,
    StartupConfiguration,
    TestArtifactInfo,
    TestListResolver,
    TestRequest,
)
from fork_booter.errors import EncodingError
from fork_booter.serialization.booter_encoder import encode


def _startup_configuration() -> StartupConfiguration:
    return StartupConfiguration(
        provider_class_name="com.provider",
        classpath_configuration=ClasspathConfiguration(
            test_classpath=Classpath(("CP1", "CP2")),
            provider_classpath=Classpath(("SP1", "SP2")),
            additional_classpath=Classpath.empty(),
            enable_assertions=True,
            child_delegation=True,
        ),
        class_loader_configuration=ClassLoaderConfiguration(True, False),
        fail_if_no_tests=False,
        is_forking=True,
    )


def _provider_configuration(**overrides) -> ProviderConfiguration:
    defaults: dict = {
        "directory_scan_parameters": DirectoryScanParameters(
            base_directory=Path("."),
            includes=("**/*Test.java",),
            excludes=(),
            specific_tests=(),
            fail_if_no_tests=True,
            run_order="hourly",
        ),
        "run_order_parameters": RunOrderParameters(RunOrder.BALANCED, None),
        "fail_fast": True,
        "reporter_configuration": ReporterConfiguration(Path("reports"), True),
        "test_artifact_info": TestArtifactInfo("5.0", None),
        "test_request": TestRequest(
            suite_xml_files=("A1", "A2"),
            test_source_directory=Path("TestSrc"),
            test_list_resolver=TestListResolver("aUserRequestedTest#aUserRequestedTestMethod"),
        ),
        "provider_properties": {"parallel": "classes"},
        "main_cli_options": (CommandLineOption.LOGGING_LEVEL_DEBUG, CommandLineOption.SHOW_ERRORS),
        "rerun_failing_tests_count": 2,
        "shutdown": Shutdown.KILL,
        "forked_process_timeout_in_seconds": 0,
    }
    defaults.update(overrides)
    return ProviderConfiguration(**defaults)


def test_encode_writes_namespaced_keys_for_every_field() -> None:
    store = encode(_provider_configuration(), _startup_configuration())

    assert store.get_string("startup.providerClassName") == "com.provider"
    assert store.get_string("startup.classpath.test.size") == "2"
    assert store.get_string("startup.classpath.test.0") == "CP1"
    assert store.get_string("startup.classpath.test.1") == "CP2"
    assert store.get_string("startup.classpath.additional.size") == "0"
    assert store.get_string("startup.classpath.childDelegation") == "true"
    assert store.get_string("startup.classLoader.useManifestOnlyJar") == "false"
    assert store.get_string("startup.isForking") == "true"
    assert store.get_string("provider.reporter.reportsDirectory") == "reports"
    assert store.get_string("provider.directoryScanner.runOrder") == "hourly"
    assert store.get_string("provider.directoryScanner.excludes.size") == "0"
    assert store.get_string("provider.testRequest.suiteXmlFiles.1") == "A2"
    assert store.get_string("provider.testRequest.testListResolver") == (
        "aUserRequestedTest#aUserRequestedTestMethod"
    )
    assert store.get_string("provider.properties.0.key") == "parallel"
    assert store.get_string("provider.properties.0.value") == "classes"
    assert store.get_string("provider.rerunFailingTestsCount") == "2"
    assert store.get_string("provider.forkedProcessTimeoutInSeconds") == "0"
    assert store.get_string("booter.formatVersion") == "1"


def test_enums_are_written_by_stable_name() -> None:
    store = encode(_provider_configuration(), _startup_configuration())

    assert store.get_string("provider.runOrder.strategy") == "BALANCED"
    assert store.get_string("provider.shutdown") == "KILL"
    assert store.get_string("provider.mainCliOptions.0") == "LOGGING_LEVEL_DEBUG"
    assert store.get_string("provider.mainCliOptions.1") == "SHOW_ERRORS"


def test_absent_optional_fields_are_written_as_explicit_sentinels() -> None:
    store = encode(
        _provider_configuration(test_request=TestRequest()),
        _startup_configuration(),
    )

    assert store.get_string("provider.testArtifact.classifier.present") == "false"
    assert "provider.testArtifact.classifier" not in store
    assert store.get_string("provider.runOrder.randomSeed.present") == "false"
    assert store.get_string("provider.testRequest.testSourceDirectory.present") == "false"
    assert store.get_string("provider.testForFork.present") == "false"
    assert store.get_string("booter.pluginPid.present") == "false"


def test_fork_context_is_written_under_booter_namespace() -> None:
    store = encode(
        _provider_configuration(),
        _startup_configuration(),
        ForkContext(fork_number=4, plugin_pid="4242"),
    )

    assert store.get_string("booter.forkNumber") == "4"
    assert store.get_string("booter.pluginPid.present") == "true"
    assert store.get_string("booter.pluginPid") == "4242"


def test_encode_is_deterministic_and_returns_sealed_store() -> None:
    first = encode(_provider_configuration(), _startup_configuration())
    second = encode(_provider_configuration(), _startup_configuration())

    assert first == second
    assert first.to_text() == second.to_text()
    assert first.sealed is True


def test_encode_rejects_arguments_of_the_wrong_type() -> None:
    with pytest.raises(EncodingError, match="startup_configuration"):
        encode(_provider_configuration(), None)  # type: ignore[arg-type]
    with pytest.raises(EncodingError, match="provider_configuration"):
        encode(_startup_configuration(), _startup_configuration())  # type: ignore[arg-type]


def test_encode_rejects_required_value_bypassing_construction_checks() -> None:
    artifact = TestArtifactInfo("5.0")
    object.__setattr__(artifact, "version", None)

    with pytest.raises(EncodingError, match="provider.testArtifact.version"):
        encode(_provider_configuration(test_artifact_info=artifact), _startup_configuration())
