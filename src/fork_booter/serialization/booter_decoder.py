"""Reconstruction of configuration objects from a property store."""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path
from typing import TypeVar

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
from fork_booter.errors import ConfigurationCorruptError, EncodingError
from fork_booter.properties import PropertyStore, child_key

from . import booter_keys as keys

logger = logging.getLogger(__name__)

T = TypeVar("T")


def decode(store: PropertyStore) -> tuple[ProviderConfiguration, StartupConfiguration]:
    """Rebuild the provider and startup configurations written by ``encode``.

    Keys the decoder does not know are ignored. Required keys are never
    defaulted.

    Raises:
      ConfigurationCorruptError: ``MissingKeyError`` or ``MalformedValueError``
        naming the offending key path.
    """
    _check_format_version(store)
    startup = store.get_object(keys.STARTUP, read_startup_configuration)
    provider = store.get_object(keys.PROVIDER, read_provider_configuration)
    return provider, startup


def decode_fork_context(store: PropertyStore) -> ForkContext:
    """Read the fork number and plugin pid written next to the configurations."""
    return store.get_object(keys.BOOTER, read_fork_context)


def read_fork_context(store: PropertyStore, prefix: str) -> ForkContext:
    return _build(
        prefix,
        ForkContext,
        fork_number=store.get_int(child_key(prefix, keys.FORK_NUMBER)),
        plugin_pid=store.get_nullable_string(child_key(prefix, keys.PLUGIN_PID)),
    )


def read_startup_configuration(store: PropertyStore, prefix: str) -> StartupConfiguration:
    provider_class_name = store.get_string(child_key(prefix, keys.PROVIDER_CLASS_NAME))
    classpath_configuration = store.get_object(
        child_key(prefix, keys.CLASSPATH), read_classpath_configuration
    )
    class_loader_configuration = store.get_object(
        child_key(prefix, keys.CLASS_LOADER), read_class_loader_configuration
    )
    return _build(
        child_key(prefix, keys.PROVIDER_CLASS_NAME),
        StartupConfiguration,
        provider_class_name=provider_class_name,
        classpath_configuration=classpath_configuration,
        class_loader_configuration=class_loader_configuration,
        fail_if_no_tests=store.get_boolean(child_key(prefix, keys.FAIL_IF_NO_TESTS)),
        is_forking=store.get_boolean(child_key(prefix, keys.IS_FORKING)),
    )


def read_classpath_configuration(store: PropertyStore, prefix: str) -> ClasspathConfiguration:
    return _build(
        prefix,
        ClasspathConfiguration,
        test_classpath=store.get_object(child_key(prefix, keys.TEST_CLASSPATH), read_classpath),
        provider_classpath=store.get_object(
            child_key(prefix, keys.PROVIDER_CLASSPATH), read_classpath
        ),
        additional_classpath=store.get_object(
            child_key(prefix, keys.ADDITIONAL_CLASSPATH), read_classpath
        ),
        enable_assertions=store.get_boolean(child_key(prefix, keys.ENABLE_ASSERTIONS)),
        child_delegation=store.get_boolean(child_key(prefix, keys.CHILD_DELEGATION)),
    )


def read_classpath(store: PropertyStore, prefix: str) -> Classpath:
    return Classpath(store.get_string_list(prefix))


def read_class_loader_configuration(
    store: PropertyStore, prefix: str
) -> ClassLoaderConfiguration:
    return ClassLoaderConfiguration(
        use_system_class_loader=store.get_boolean(
            child_key(prefix, keys.USE_SYSTEM_CLASS_LOADER)
        ),
        use_manifest_only_jar=store.get_boolean(child_key(prefix, keys.USE_MANIFEST_ONLY_JAR)),
    )


def read_provider_configuration(store: PropertyStore, prefix: str) -> ProviderConfiguration:
    properties = store.get_object_list(child_key(prefix, keys.PROPERTIES), read_property_entry)
    return _build(
        prefix,
        ProviderConfiguration,
        directory_scan_parameters=store.get_object(
            child_key(prefix, keys.DIRECTORY_SCANNER), read_directory_scan_parameters
        ),
        run_order_parameters=store.get_object(
            child_key(prefix, keys.RUN_ORDER), read_run_order_parameters
        ),
        fail_fast=store.get_boolean(child_key(prefix, keys.FAIL_FAST)),
        reporter_configuration=store.get_object(
            child_key(prefix, keys.REPORTER), read_reporter_configuration
        ),
        test_artifact_info=store.get_object(
            child_key(prefix, keys.TEST_ARTIFACT), read_test_artifact_info
        ),
        test_request=store.get_object(child_key(prefix, keys.TEST_REQUEST), read_test_request),
        provider_properties=dict(properties),
        main_cli_options=store.get_enum_list(
            child_key(prefix, keys.MAIN_CLI_OPTIONS), CommandLineOption
        ),
        rerun_failing_tests_count=store.get_int(
            child_key(prefix, keys.RERUN_FAILING_TESTS_COUNT)
        ),
        shutdown=store.get_enum(child_key(prefix, keys.SHUTDOWN), Shutdown),
        forked_process_timeout_in_seconds=store.get_int(
            child_key(prefix, keys.FORKED_PROCESS_TIMEOUT)
        ),
        test_for_fork=store.get_nullable_string(child_key(prefix, keys.TEST_FOR_FORK)),
        read_tests_from_in_stream=store.get_boolean(
            child_key(prefix, keys.READ_TESTS_FROM_IN_STREAM)
        ),
        skip_after_failure_count=store.get_int(child_key(prefix, keys.SKIP_AFTER_FAILURE_COUNT)),
    )


def read_directory_scan_parameters(
    store: PropertyStore, prefix: str
) -> DirectoryScanParameters:
    return _build(
        prefix,
        DirectoryScanParameters,
        base_directory=Path(store.get_string(child_key(prefix, keys.BASE_DIRECTORY))),
        includes=store.get_string_list(child_key(prefix, keys.INCLUDES)),
        excludes=store.get_string_list(child_key(prefix, keys.EXCLUDES)),
        specific_tests=store.get_string_list(child_key(prefix, keys.SPECIFIC_TESTS)),
        fail_if_no_tests=store.get_boolean(child_key(prefix, keys.FAIL_IF_NO_TESTS)),
        run_order=store.get_string(child_key(prefix, keys.RUN_ORDER)),
    )


def read_run_order_parameters(store: PropertyStore, prefix: str) -> RunOrderParameters:
    statistics_file = store.get_nullable_string(
        child_key(prefix, keys.RUN_ORDER_STATISTICS_FILE)
    )
    return RunOrderParameters(
        run_order=store.get_enum(child_key(prefix, keys.RUN_ORDER_STRATEGY), RunOrder),
        run_order_random_seed=store.get_nullable_string(
            child_key(prefix, keys.RUN_ORDER_RANDOM_SEED)
        ),
        run_statistics_file=None if statistics_file is None else Path(statistics_file),
    )


def read_reporter_configuration(store: PropertyStore, prefix: str) -> ReporterConfiguration:
    return ReporterConfiguration(
        reports_directory=Path(store.get_string(child_key(prefix, keys.REPORTS_DIRECTORY))),
        trim_stack_traces=store.get_boolean(child_key(prefix, keys.TRIM_STACK_TRACES)),
    )


def read_test_artifact_info(store: PropertyStore, prefix: str) -> TestArtifactInfo:
    return TestArtifactInfo(
        version=store.get_string(child_key(prefix, keys.VERSION)),
        classifier=store.get_nullable_string(child_key(prefix, keys.CLASSIFIER)),
    )


def read_test_request(store: PropertyStore, prefix: str) -> TestRequest:
    test_source_directory = store.get_nullable_string(
        child_key(prefix, keys.TEST_SOURCE_DIRECTORY)
    )
    return TestRequest(
        suite_xml_files=store.get_string_list(child_key(prefix, keys.SUITE_XML_FILES)),
        test_source_directory=(
            None if test_source_directory is None else Path(test_source_directory)
        ),
        test_list_resolver=TestListResolver(
            store.get_string(child_key(prefix, keys.TEST_LIST_RESOLVER))
        ),
    )


def read_property_entry(store: PropertyStore, prefix: str) -> tuple[str, str]:
    return (
        store.get_string(child_key(prefix, keys.PROPERTY_KEY)),
        store.get_string(child_key(prefix, keys.PROPERTY_VALUE)),
    )


def _check_format_version(store: PropertyStore) -> None:
    version_key = child_key(keys.BOOTER, keys.FORMAT_VERSION_KEY)
    version = store.get_optional_int(version_key)
    if version is not None and version != keys.FORMAT_VERSION:
        logger.warning(
            "Booter file was written with format version %s, reading it as version %s.",
            version,
            keys.FORMAT_VERSION,
        )


def _build(key: str, factory: Callable[..., T], **fields) -> T:
    """Construct a value object, reporting rejected values against ``key``."""
    try:
        return factory(**fields)
    except EncodingError as exc:
        raise ConfigurationCorruptError(f"Invalid value at {key}: {exc}", key=key) from exc
