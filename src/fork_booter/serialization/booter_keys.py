"""Key names used in booter files.

Top-level namespaces are ``booter``, ``startup`` and ``provider``; every other
name is relative to the namespace of the object holding it, so a reporter
directory ends up under ``provider.reporter.reportsDirectory``.
"""

from __future__ import annotations

FORMAT_VERSION = 1

BOOTER = "booter"
STARTUP = "startup"
PROVIDER = "provider"

FORMAT_VERSION_KEY = "formatVersion"
FORK_NUMBER = "forkNumber"
PLUGIN_PID = "pluginPid"

PROVIDER_CLASS_NAME = "providerClassName"
CLASSPATH = "classpath"
CLASS_LOADER = "classLoader"
FAIL_IF_NO_TESTS = "failIfNoTests"
IS_FORKING = "isForking"

TEST_CLASSPATH = "test"
PROVIDER_CLASSPATH = "provider"
ADDITIONAL_CLASSPATH = "additional"
ENABLE_ASSERTIONS = "enableAssertions"
CHILD_DELEGATION = "childDelegation"

USE_SYSTEM_CLASS_LOADER = "useSystemClassLoader"
USE_MANIFEST_ONLY_JAR = "useManifestOnlyJar"

DIRECTORY_SCANNER = "directoryScanner"
RUN_ORDER = "runOrder"
REPORTER = "reporter"
TEST_ARTIFACT = "testArtifact"
TEST_REQUEST = "testRequest"
PROPERTIES = "properties"
FAIL_FAST = "failFast"
MAIN_CLI_OPTIONS = "mainCliOptions"
RERUN_FAILING_TESTS_COUNT = "rerunFailingTestsCount"
SKIP_AFTER_FAILURE_COUNT = "skipAfterFailureCount"
SHUTDOWN = "shutdown"
FORKED_PROCESS_TIMEOUT = "forkedProcessTimeoutInSeconds"
TEST_FOR_FORK = "testForFork"
READ_TESTS_FROM_IN_STREAM = "readTestsFromInStream"

BASE_DIRECTORY = "baseDirectory"
INCLUDES = "includes"
EXCLUDES = "excludes"
SPECIFIC_TESTS = "specificTests"

RUN_ORDER_STRATEGY = "strategy"
RUN_ORDER_RANDOM_SEED = "randomSeed"
RUN_ORDER_STATISTICS_FILE = "statisticsFile"

REPORTS_DIRECTORY = "reportsDirectory"
TRIM_STACK_TRACES = "trimStackTraces"

VERSION = "version"
CLASSIFIER = "classifier"

SUITE_XML_FILES = "suiteXmlFiles"
TEST_SOURCE_DIRECTORY = "testSourceDirectory"
TEST_LIST_RESOLVER = "testListResolver"

PROPERTY_KEY = "key"
PROPERTY_VALUE = "value"
