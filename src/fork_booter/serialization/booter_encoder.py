"""Flattening of configuration objects into a property store."""

from __future__ import annotations

from pathlib import Path

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
from fork_booter.errors import EncodingError
from fork_booter.properties import PropertyStore, child_key

from . import booter_keys as keys


def encode(
    provider_configuration: ProviderConfiguration,
    startup_configuration: StartupConfiguration,
    fork_context: ForkContext | None = None,
) -> PropertyStore:
    """Flatten both configurations (and the fork context) into a sealed store.

    The result only depends on the arguments: equal inputs give stores with the
    same entries in the same order.

    Raises:
      EncodingError: If an argument has the wrong type or a required value is missing.
    """
    _require_instance(provider_configuration, ProviderConfiguration, "provider_configuration")
    _require_instance(startup_configuration, StartupConfiguration, "startup_configuration")
    context = fork_context if fork_context is not None else ForkContext()
    _require_instance(context, ForkContext, "fork_context")

    store = PropertyStore()
    store.set_object(keys.BOOTER, context, write_fork_context)
    store.set_object(keys.STARTUP, startup_configuration, write_startup_configuration)
    store.set_object(keys.PROVIDER, provider_configuration, write_provider_configuration)
    return store.seal()


def write_fork_context(store: PropertyStore, prefix: str, context: ForkContext) -> None:
    store.set_int(child_key(prefix, keys.FORMAT_VERSION_KEY), keys.FORMAT_VERSION)
    store.set_int(child_key(prefix, keys.FORK_NUMBER), context.fork_number)
    store.set_nullable_string(child_key(prefix, keys.PLUGIN_PID), context.plugin_pid)


def write_startup_configuration(
    store: PropertyStore, prefix: str, startup: StartupConfiguration
) -> None:
    store.set_string(
        child_key(prefix, keys.PROVIDER_CLASS_NAME),
        _require(startup.provider_class_name, prefix, keys.PROVIDER_CLASS_NAME),
    )
    store.set_object(
        child_key(prefix, keys.CLASSPATH),
        _require(startup.classpath_configuration, prefix, keys.CLASSPATH),
        write_classpath_configuration,
    )
    store.set_object(
        child_key(prefix, keys.CLASS_LOADER),
        _require(startup.class_loader_configuration, prefix, keys.CLASS_LOADER),
        write_class_loader_configuration,
    )
    store.set_boolean(child_key(prefix, keys.FAIL_IF_NO_TESTS), startup.fail_if_no_tests)
    store.set_boolean(child_key(prefix, keys.IS_FORKING), startup.is_forking)


def write_classpath_configuration(
    store: PropertyStore, prefix: str, configuration: ClasspathConfiguration
) -> None:
    for name, classpath in (
        (keys.TEST_CLASSPATH, configuration.test_classpath),
        (keys.PROVIDER_CLASSPATH, configuration.provider_classpath),
        (keys.ADDITIONAL_CLASSPATH, configuration.additional_classpath),
    ):
        store.set_object(
            child_key(prefix, name), _require(classpath, prefix, name), write_classpath
        )
    store.set_boolean(
        child_key(prefix, keys.ENABLE_ASSERTIONS), configuration.enable_assertions
    )
    store.set_boolean(child_key(prefix, keys.CHILD_DELEGATION), configuration.child_delegation)


def write_classpath(store: PropertyStore, prefix: str, classpath: Classpath) -> None:
    store.set_string_list(prefix, classpath.elements)


def write_class_loader_configuration(
    store: PropertyStore, prefix: str, configuration: ClassLoaderConfiguration
) -> None:
    store.set_boolean(
        child_key(prefix, keys.USE_SYSTEM_CLASS_LOADER), configuration.use_system_class_loader
    )
    store.set_boolean(
        child_key(prefix, keys.USE_MANIFEST_ONLY_JAR), configuration.use_manifest_only_jar
    )


def write_provider_configuration(
    store: PropertyStore, prefix: str, provider: ProviderConfiguration
) -> None:
    store.set_object(
        child_key(prefix, keys.DIRECTORY_SCANNER),
        _require(provider.directory_scan_parameters, prefix, keys.DIRECTORY_SCANNER),
        write_directory_scan_parameters,
    )
    store.set_object(
        child_key(prefix, keys.RUN_ORDER),
        _require(provider.run_order_parameters, prefix, keys.RUN_ORDER),
        write_run_order_parameters,
    )
    store.set_object(
        child_key(prefix, keys.REPORTER),
        _require(provider.reporter_configuration, prefix, keys.REPORTER),
        write_reporter_configuration,
    )
    store.set_object(
        child_key(prefix, keys.TEST_ARTIFACT),
        _require(provider.test_artifact_info, prefix, keys.TEST_ARTIFACT),
        write_test_artifact_info,
    )
    store.set_object(
        child_key(prefix, keys.TEST_REQUEST),
        _require(provider.test_request, prefix, keys.TEST_REQUEST),
        write_test_request,
    )
    store.set_object_list(
        child_key(prefix, keys.PROPERTIES),
        list(provider.provider_properties.items()),
        write_property_entry,
    )
    store.set_boolean(child_key(prefix, keys.FAIL_FAST), provider.fail_fast)
    store.set_enum_list(child_key(prefix, keys.MAIN_CLI_OPTIONS), provider.main_cli_options)
    store.set_int(
        child_key(prefix, keys.RERUN_FAILING_TESTS_COUNT), provider.rerun_failing_tests_count
    )
    store.set_int(
        child_key(prefix, keys.SKIP_AFTER_FAILURE_COUNT), provider.skip_after_failure_count
    )
    store.set_enum(child_key(prefix, keys.SHUTDOWN), provider.shutdown)
    store.set_int(
        child_key(prefix, keys.FORKED_PROCESS_TIMEOUT),
        provider.forked_process_timeout_in_seconds,
    )
    store.set_nullable_string(child_key(prefix, keys.TEST_FOR_FORK), provider.test_for_fork)
    store.set_boolean(
        child_key(prefix, keys.READ_TESTS_FROM_IN_STREAM), provider.read_tests_from_in_stream
    )


def write_directory_scan_parameters(
    store: PropertyStore, prefix: str, parameters: DirectoryScanParameters
) -> None:
    store.set_string(
        child_key(prefix, keys.BASE_DIRECTORY),
        _path_text(_require(parameters.base_directory, prefix, keys.BASE_DIRECTORY)),
    )
    store.set_string_list(child_key(prefix, keys.INCLUDES), parameters.includes)
    store.set_string_list(child_key(prefix, keys.EXCLUDES), parameters.excludes)
    store.set_string_list(child_key(prefix, keys.SPECIFIC_TESTS), parameters.specific_tests)
    store.set_boolean(child_key(prefix, keys.FAIL_IF_NO_TESTS), parameters.fail_if_no_tests)
    store.set_string(
        child_key(prefix, keys.RUN_ORDER),
        _require(parameters.run_order, prefix, keys.RUN_ORDER),
    )


def write_run_order_parameters(
    store: PropertyStore, prefix: str, parameters: RunOrderParameters
) -> None:
    store.set_enum(child_key(prefix, keys.RUN_ORDER_STRATEGY), parameters.run_order)
    store.set_nullable_string(
        child_key(prefix, keys.RUN_ORDER_RANDOM_SEED), parameters.run_order_random_seed
    )
    store.set_nullable_string(
        child_key(prefix, keys.RUN_ORDER_STATISTICS_FILE),
        _optional_path_text(parameters.run_statistics_file),
    )


def write_reporter_configuration(
    store: PropertyStore, prefix: str, configuration: ReporterConfiguration
) -> None:
    store.set_string(
        child_key(prefix, keys.REPORTS_DIRECTORY),
        _path_text(_require(configuration.reports_directory, prefix, keys.REPORTS_DIRECTORY)),
    )
    store.set_boolean(child_key(prefix, keys.TRIM_STACK_TRACES), configuration.trim_stack_traces)


def write_test_artifact_info(
    store: PropertyStore, prefix: str, artifact: TestArtifactInfo
) -> None:
    store.set_string(
        child_key(prefix, keys.VERSION), _require(artifact.version, prefix, keys.VERSION)
    )
    store.set_nullable_string(child_key(prefix, keys.CLASSIFIER), artifact.classifier)


def write_test_request(store: PropertyStore, prefix: str, request: TestRequest) -> None:
    store.set_string_list(child_key(prefix, keys.SUITE_XML_FILES), request.suite_xml_files)
    store.set_nullable_string(
        child_key(prefix, keys.TEST_SOURCE_DIRECTORY),
        _optional_path_text(request.test_source_directory),
    )
    resolver = _require(request.test_list_resolver, prefix, keys.TEST_LIST_RESOLVER)
    store.set_string(child_key(prefix, keys.TEST_LIST_RESOLVER), resolver.expression)


def write_property_entry(store: PropertyStore, prefix: str, entry: tuple[str, str]) -> None:
    key, value = entry
    store.set_string(child_key(prefix, keys.PROPERTY_KEY), key)
    store.set_string(child_key(prefix, keys.PROPERTY_VALUE), value)


def _require(value, prefix: str, name: str):
    if value is None:
        raise EncodingError(f"Required value {child_key(prefix, name)} is missing.")
    return value


def _require_instance(value, expected: type, name: str) -> None:
    if not isinstance(value, expected):
        raise EncodingError(f"{name} must be a {expected.__name__}.")


def _path_text(path: Path | str) -> str:
    return str(path)


def _optional_path_text(path: Path | str | None) -> str | None:
    return None if path is None else str(path)
