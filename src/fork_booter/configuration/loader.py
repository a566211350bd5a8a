"""Launch configuration loader service."""

from __future__ import annotations

import sys
from collections.abc import Mapping, Sequence
from enum import Enum
from pathlib import Path
from typing import Any, TypeVar

import yaml

from fork_booter.configuration_model import (
    ClassLoaderConfiguration,
    Classpath,
    ClasspathConfiguration,
    CommandLineOption,
    DirectoryScanParameters,
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

from .runtime_settings import ForkSettings, LaunchConfiguration

E = TypeVar("E", bound=Enum)


class ConfigurationError(Exception):
    """Raised when the launch configuration file is invalid."""


def load_configuration(config_path: Path | str) -> LaunchConfiguration:
    """Load and validate the launch configuration file."""
    path = Path(config_path)
    if not path.exists():
        raise ConfigurationError(f"Configuration file not found: {path}")

    text = path.read_text(encoding="utf-8")
    try:
        parsed = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Failed to parse configuration file: {exc}") from exc

    if parsed is None:
        parsed = {}

    if not isinstance(parsed, Mapping):
        raise ConfigurationError("Configuration root must be a mapping.")

    base_path = path.parent
    try:
        fork = _parse_fork_section(parsed.get("fork"), base_path)
        startup = _parse_startup_section(parsed.get("startup"))
        provider = _parse_provider_section(parsed.get("provider"), base_path)
    except EncodingError as exc:
        raise ConfigurationError(str(exc)) from exc

    return LaunchConfiguration(path=path, fork=fork, startup=startup, provider=provider)


def _parse_fork_section(value: Any, base_path: Path) -> ForkSettings:
    section = _optional_mapping(value, "fork")
    python_executable = _optional_string(
        section.get("python_executable"), "fork.python_executable"
    )
    temp_directory = _optional_string(section.get("temp_directory"), "fork.temp_directory")
    return ForkSettings(
        python_executable=python_executable or sys.executable,
        temp_directory=_resolve_path(base_path, temp_directory) if temp_directory else None,
        parallelism=_require_positive_int(section.get("parallelism", 1), "fork.parallelism"),
        fork_count=_require_positive_int(section.get("fork_count", 1), "fork.fork_count"),
        pass_plugin_pid=_require_bool(
            section.get("pass_plugin_pid", True), "fork.pass_plugin_pid"
        ),
    )


def _parse_startup_section(value: Any) -> StartupConfiguration:
    section = _require_mapping(value, "startup")
    provider_class_name = _require_non_empty_string(
        section.get("provider_class_name"), "startup.provider_class_name"
    )
    classpath = _require_mapping(section.get("classpath"), "startup.classpath")
    class_loader = _optional_mapping(section.get("class_loader"), "startup.class_loader")
    return StartupConfiguration(
        provider_class_name=provider_class_name,
        classpath_configuration=ClasspathConfiguration(
            test_classpath=Classpath(
                _normalize_string_sequence(classpath.get("test"), "startup.classpath.test")
            ),
            provider_classpath=Classpath(
                _normalize_string_sequence(
                    classpath.get("provider"), "startup.classpath.provider"
                )
            ),
            additional_classpath=Classpath(
                _normalize_string_sequence(
                    classpath.get("additional"), "startup.classpath.additional"
                )
            ),
            enable_assertions=_require_bool(
                classpath.get("enable_assertions", True), "startup.classpath.enable_assertions"
            ),
            child_delegation=_require_bool(
                classpath.get("child_delegation", False), "startup.classpath.child_delegation"
            ),
        ),
        class_loader_configuration=ClassLoaderConfiguration(
            use_system_class_loader=_require_bool(
                class_loader.get("use_system_class_loader", True),
                "startup.class_loader.use_system_class_loader",
            ),
            use_manifest_only_jar=_require_bool(
                class_loader.get("use_manifest_only_jar", False),
                "startup.class_loader.use_manifest_only_jar",
            ),
        ),
        fail_if_no_tests=_require_bool(
            section.get("fail_if_no_tests", False), "startup.fail_if_no_tests"
        ),
        is_forking=True,
    )


def _parse_provider_section(value: Any, base_path: Path) -> ProviderConfiguration:
    section = _require_mapping(value, "provider")
    return ProviderConfiguration(
        directory_scan_parameters=_parse_directory_scanner(
            section.get("directory_scanner"), base_path
        ),
        run_order_parameters=_parse_run_order(section.get("run_order"), base_path),
        fail_fast=_require_bool(section.get("fail_fast", False), "provider.fail_fast"),
        reporter_configuration=_parse_reporter(section.get("reporter"), base_path),
        test_artifact_info=_parse_test_artifact(section.get("test_artifact")),
        test_request=_parse_test_request(section.get("test_request"), base_path),
        provider_properties=_normalize_properties(section.get("properties")),
        main_cli_options=tuple(
            _parse_enum(option, CommandLineOption, "provider.main_cli_options")
            for option in _normalize_string_sequence(
                section.get("main_cli_options"), "provider.main_cli_options"
            )
        ),
        rerun_failing_tests_count=_require_non_negative_int(
            section.get("rerun_failing_tests_count", 0), "provider.rerun_failing_tests_count"
        ),
        shutdown=_parse_enum(section.get("shutdown", "default"), Shutdown, "provider.shutdown"),
        forked_process_timeout_in_seconds=_require_non_negative_int(
            section.get("forked_process_timeout_in_seconds", 0),
            "provider.forked_process_timeout_in_seconds",
        ),
        test_for_fork=_optional_string(section.get("test_for_fork"), "provider.test_for_fork"),
        read_tests_from_in_stream=_require_bool(
            section.get("read_tests_from_in_stream", False), "provider.read_tests_from_in_stream"
        ),
        skip_after_failure_count=_require_non_negative_int(
            section.get("skip_after_failure_count", 0), "provider.skip_after_failure_count"
        ),
    )


def _parse_directory_scanner(value: Any, base_path: Path) -> DirectoryScanParameters:
    section = _require_mapping(value, "provider.directory_scanner")
    base_directory = _require_non_empty_string(
        section.get("base_directory"), "provider.directory_scanner.base_directory"
    )
    return DirectoryScanParameters(
        base_directory=_resolve_path(base_path, base_directory),
        includes=_normalize_string_sequence(
            section.get("includes"), "provider.directory_scanner.includes"
        ),
        excludes=_normalize_string_sequence(
            section.get("excludes"), "provider.directory_scanner.excludes"
        ),
        specific_tests=_normalize_string_sequence(
            section.get("specific_tests"), "provider.directory_scanner.specific_tests"
        ),
        fail_if_no_tests=_require_bool(
            section.get("fail_if_no_tests", False), "provider.directory_scanner.fail_if_no_tests"
        ),
        run_order=_require_non_empty_string(
            section.get("run_order", RunOrder.FILESYSTEM.value),
            "provider.directory_scanner.run_order",
        ),
    )


def _parse_run_order(value: Any, base_path: Path) -> RunOrderParameters:
    section = _optional_mapping(value, "provider.run_order")
    statistics_file = _optional_string(
        section.get("statistics_file"), "provider.run_order.statistics_file"
    )
    random_seed = section.get("random_seed")
    if random_seed is not None and not isinstance(random_seed, str | int):
        raise ConfigurationError("provider.run_order.random_seed must be a string or integer.")
    return RunOrderParameters(
        run_order=_parse_enum(
            section.get("strategy", "default"), RunOrder, "provider.run_order.strategy"
        ),
        run_order_random_seed=None if random_seed is None else str(random_seed),
        run_statistics_file=(
            _resolve_path(base_path, statistics_file) if statistics_file else None
        ),
    )


def _parse_reporter(value: Any, base_path: Path) -> ReporterConfiguration:
    section = _require_mapping(value, "provider.reporter")
    reports_directory = _require_non_empty_string(
        section.get("reports_directory"), "provider.reporter.reports_directory"
    )
    return ReporterConfiguration(
        reports_directory=_resolve_path(base_path, reports_directory),
        trim_stack_traces=_require_bool(
            section.get("trim_stack_traces", True), "provider.reporter.trim_stack_traces"
        ),
    )


def _parse_test_artifact(value: Any) -> TestArtifactInfo:
    section = _require_mapping(value, "provider.test_artifact")
    version = section.get("version")
    if isinstance(version, int | float) and not isinstance(version, bool):
        version = str(version)
    return TestArtifactInfo(
        version=_require_non_empty_string(version, "provider.test_artifact.version"),
        classifier=_optional_string(
            section.get("classifier"), "provider.test_artifact.classifier"
        ),
    )


def _parse_test_request(value: Any, base_path: Path) -> TestRequest:
    section = _optional_mapping(value, "provider.test_request")
    test_source_directory = _optional_string(
        section.get("test_source_directory"), "provider.test_request.test_source_directory"
    )
    expression = section.get("test_list_resolver") or ""
    if not isinstance(expression, str):
        raise ConfigurationError("provider.test_request.test_list_resolver must be a string.")
    return TestRequest(
        suite_xml_files=_normalize_string_sequence(
            section.get("suite_xml_files"), "provider.test_request.suite_xml_files"
        ),
        test_source_directory=(
            _resolve_path(base_path, test_source_directory) if test_source_directory else None
        ),
        test_list_resolver=TestListResolver(expression.strip()),
    )


def _normalize_properties(value: Any) -> dict[str, str]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ConfigurationError("provider.properties must be a mapping.")
    properties: dict[str, str] = {}
    for key, item in value.items():
        if not isinstance(key, str):
            raise ConfigurationError("provider.properties keys must be strings.")
        if item is None or isinstance(item, Mapping | list):
            raise ConfigurationError(f"provider.properties.{key} must be a scalar value.")
        if isinstance(item, bool):
            item = "true" if item else "false"
        properties[key] = str(item)
    return properties


def _parse_enum(value: Any, enum_type: type[E], field_name: str) -> E:
    if isinstance(value, enum_type):
        return value
    if not isinstance(value, str):
        raise ConfigurationError(f"{field_name} must be a string.")
    candidate = value.strip()
    for member in enum_type:
        if candidate.upper() == member.name or candidate.lower() == member.value:
            return member
    allowed = ", ".join(member.value for member in enum_type)
    raise ConfigurationError(f"{field_name} '{value}' is not one of: {allowed}.")


def _normalize_string_sequence(value: Any, field_name: str) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        stripped = value.strip()
        return (stripped,) if stripped else ()
    if isinstance(value, Sequence):
        normalized = []
        for item in value:
            if not isinstance(item, str):
                raise ConfigurationError(f"{field_name} entries must be strings.")
            stripped = item.strip()
            if stripped:
                normalized.append(stripped)
        return tuple(normalized)
    raise ConfigurationError(f"{field_name} must be a string or list of strings.")


def _resolve_path(base_path: Path, raw_path: str) -> Path:
    candidate = Path(raw_path)
    if not candidate.is_absolute():
        return (base_path / candidate).resolve()
    return candidate


def _require_mapping(value: Any, section_name: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise ConfigurationError(f"Configuration section '{section_name}' is required.")
    return value


def _optional_mapping(value: Any, section_name: str) -> Mapping[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ConfigurationError(f"Configuration section '{section_name}' must be a mapping.")
    return value


def _require_non_empty_string(value: Any, field_name: str) -> str:
    if not isinstance(value, str):
        raise ConfigurationError(f"{field_name} must be a string.")
    stripped = value.strip()
    if not stripped:
        raise ConfigurationError(f"{field_name} must not be empty.")
    return stripped


def _optional_string(value: Any, field_name: str) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ConfigurationError(f"{field_name} must be a string.")
    stripped = value.strip()
    return stripped or None


def _require_bool(value: Any, field_name: str) -> bool:
    if not isinstance(value, bool):
        raise ConfigurationError(f"{field_name} must be true or false.")
    return value


def _require_positive_int(value: Any, field_name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigurationError(f"{field_name} must be an integer.")
    if value <= 0:
        raise ConfigurationError(f"{field_name} must be greater than zero.")
    return value


def _require_non_negative_int(value: Any, field_name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigurationError(f"{field_name} must be an integer.")
    if value < 0:
        raise ConfigurationError(f"{field_name} must not be negative.")
    return value
