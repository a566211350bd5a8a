"""Provider configuration entities handed to the test provider inside the worker."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from fnmatch import fnmatchcase
from pathlib import Path
from types import MappingProxyType

from fork_booter.errors import EncodingError


class RunOrder(str, Enum):
    """Order in which test classes are executed."""

    ALPHABETICAL = "alphabetical"
    REVERSE_ALPHABETICAL = "reversealphabetical"
    RANDOM = "random"
    HOURLY = "hourly"
    FAILEDFIRST = "failedfirst"
    BALANCED = "balanced"
    FILESYSTEM = "filesystem"
    DEFAULT = "default"


class Shutdown(str, Enum):
    """How an abnormally terminated worker is stopped."""

    DEFAULT = "testset"
    EXIT = "exit"
    KILL = "kill"


class CommandLineOption(str, Enum):
    """Build-tool command line flags forwarded to the worker."""

    REACTOR_FAIL_FAST = "reactor-fail-fast"
    REACTOR_FAIL_AT_END = "reactor-fail-at-end"
    REACTOR_FAIL_NEVER = "reactor-fail-never"
    SHOW_ERRORS = "show-errors"
    LOGGING_LEVEL_DEBUG = "logging-level-debug"
    LOGGING_LEVEL_INFO = "logging-level-info"
    LOGGING_LEVEL_WARN = "logging-level-warn"
    LOGGING_LEVEL_ERROR = "logging-level-error"


def _as_tuple(value, field_name: str) -> tuple[str, ...]:
    if value is None or isinstance(value, str):
        raise EncodingError(f"{field_name} must be a sequence of strings.")
    items = tuple(value)
    if any(not isinstance(item, str) for item in items):
        raise EncodingError(f"{field_name} entries must be strings.")
    return items


def _as_path(value, field_name: str) -> Path:
    if value is None:
        raise EncodingError(f"{field_name} is required.")
    return Path(value)


def _as_optional_path(value) -> Path | None:
    return None if value is None else Path(value)


def _require_non_negative(value, field_name: str) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise EncodingError(f"{field_name} must be an integer.")
    if value < 0:
        raise EncodingError(f"{field_name} must not be negative.")


@dataclass(frozen=True)
class DirectoryScanParameters:
    """Where and how the worker scans for test classes."""

    base_directory: Path
    includes: tuple[str, ...] = ()
    excludes: tuple[str, ...] = ()
    specific_tests: tuple[str, ...] = ()
    fail_if_no_tests: bool = False
    run_order: str = RunOrder.FILESYSTEM.value

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "base_directory", _as_path(self.base_directory, "base_directory")
        )
        object.__setattr__(self, "includes", _as_tuple(self.includes, "includes"))
        object.__setattr__(self, "excludes", _as_tuple(self.excludes, "excludes"))
        object.__setattr__(
            self, "specific_tests", _as_tuple(self.specific_tests, "specific_tests")
        )
        if not isinstance(self.run_order, str):
            raise EncodingError("DirectoryScanParameters.run_order must be a string.")


@dataclass(frozen=True)
class RunOrderParameters:
    """Run order strategy plus its optional random seed and statistics file."""

    run_order: RunOrder = RunOrder.DEFAULT
    run_order_random_seed: str | None = None
    run_statistics_file: Path | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.run_order, RunOrder):
            raise EncodingError("RunOrderParameters.run_order must be a RunOrder.")
        object.__setattr__(
            self, "run_statistics_file", _as_optional_path(self.run_statistics_file)
        )


@dataclass(frozen=True)
class ReporterConfiguration:
    """Report output settings."""

    reports_directory: Path
    trim_stack_traces: bool = True

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "reports_directory", _as_path(self.reports_directory, "reports_directory")
        )


@dataclass(frozen=True)
class TestArtifactInfo:
    """Version and classifier of the test framework artifact."""

    __test__ = False

    version: str
    classifier: str | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.version, str):
            raise EncodingError("TestArtifactInfo.version must be a string.")


@dataclass(frozen=True)
class TestListResolver:
    """Filter expression selecting tests, e.g. ``MyTest#shouldWork,!Slow*``.

    Patterns are comma separated ``Class[#method]`` shell-style wildcards; a
    ``!`` prefix excludes. Class patterns match either the fully qualified or
    the simple class name.
    """

    __test__ = False

    expression: str = ""

    def __post_init__(self) -> None:
        if not isinstance(self.expression, str):
            raise EncodingError("TestListResolver.expression must be a string.")

    @property
    def is_empty(self) -> bool:
        return not self._patterns()

    @property
    def included_patterns(self) -> tuple[str, ...]:
        return tuple(pattern for pattern in self._patterns() if not pattern.startswith("!"))

    @property
    def excluded_patterns(self) -> tuple[str, ...]:
        return tuple(pattern[1:] for pattern in self._patterns() if pattern.startswith("!"))

    def should_run(self, class_name: str, method_name: str | None = None) -> bool:
        if any(_matches(p, class_name, method_name) for p in self.excluded_patterns):
            return False
        included = self.included_patterns
        if not included:
            return True
        return any(_matches(pattern, class_name, method_name) for pattern in included)

    def _patterns(self) -> tuple[str, ...]:
        return tuple(part.strip() for part in self.expression.split(",") if part.strip())


def _matches(pattern: str, class_name: str, method_name: str | None) -> bool:
    class_pattern, _, method_pattern = pattern.partition("#")
    simple_name = class_name.rsplit(".", 1)[-1]
    if not (fnmatchcase(class_name, class_pattern) or fnmatchcase(simple_name, class_pattern)):
        return False
    if not method_pattern or method_name is None:
        return True
    return fnmatchcase(method_name, method_pattern)


@dataclass(frozen=True)
class TestRequest:
    """Explicitly requested suites and tests."""

    __test__ = False

    suite_xml_files: tuple[str, ...] = ()
    test_source_directory: Path | None = None
    test_list_resolver: TestListResolver = field(default_factory=TestListResolver)

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "suite_xml_files", _as_tuple(self.suite_xml_files, "suite_xml_files")
        )
        object.__setattr__(
            self, "test_source_directory", _as_optional_path(self.test_source_directory)
        )
        if isinstance(self.test_list_resolver, str):
            object.__setattr__(
                self, "test_list_resolver", TestListResolver(self.test_list_resolver)
            )


@dataclass(frozen=True)
class ProviderConfiguration:  # pylint: disable=too-many-instance-attributes
    """Test-run configuration the worker passes to the instantiated provider."""

    directory_scan_parameters: DirectoryScanParameters
    run_order_parameters: RunOrderParameters
    fail_fast: bool
    reporter_configuration: ReporterConfiguration
    test_artifact_info: TestArtifactInfo
    test_request: TestRequest
    provider_properties: Mapping[str, str] = field(default_factory=dict, hash=False)
    main_cli_options: tuple[CommandLineOption, ...] = ()
    rerun_failing_tests_count: int = 0
    shutdown: Shutdown = Shutdown.DEFAULT
    forked_process_timeout_in_seconds: int = 0
    test_for_fork: str | None = None
    read_tests_from_in_stream: bool = False
    skip_after_failure_count: int = 0

    def __post_init__(self) -> None:
        for name in (
            "directory_scan_parameters",
            "run_order_parameters",
            "reporter_configuration",
            "test_artifact_info",
            "test_request",
        ):
            if getattr(self, name) is None:
                raise EncodingError(f"ProviderConfiguration.{name} is required.")
        properties = dict(self.provider_properties or {})
        for key, value in properties.items():
            if not isinstance(key, str) or not isinstance(value, str):
                raise EncodingError("Provider properties must map strings to strings.")
        object.__setattr__(self, "provider_properties", MappingProxyType(properties))
        options = tuple(self.main_cli_options)
        if any(not isinstance(option, CommandLineOption) for option in options):
            raise EncodingError("main_cli_options entries must be CommandLineOption members.")
        object.__setattr__(self, "main_cli_options", options)
        if not isinstance(self.shutdown, Shutdown):
            raise EncodingError("ProviderConfiguration.shutdown must be a Shutdown member.")
        _require_non_negative(self.rerun_failing_tests_count, "rerun_failing_tests_count")
        _require_non_negative(self.skip_after_failure_count, "skip_after_failure_count")
        _require_non_negative(
            self.forked_process_timeout_in_seconds, "forked_process_timeout_in_seconds"
        )

    @property
    def has_forked_process_timeout(self) -> bool:
        return self.forked_process_timeout_in_seconds > 0


@dataclass(frozen=True)
class ForkContext:
    """Per-launch booter metadata written next to the two configurations."""

    fork_number: int = 1
    plugin_pid: str | None = None

    def __post_init__(self) -> None:
        _require_non_negative(self.fork_number, "fork_number")
