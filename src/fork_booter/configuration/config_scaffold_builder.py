"""Launch configuration scaffold generation helpers."""

from __future__ import annotations

from pathlib import Path

DEFAULT_CONFIG_FILENAME = "fork-booter.yaml"

_CONFIG_SCAFFOLD_TEMPLATE = """# Launch configuration template for fork-booter.
# Replace every <REQUIRED> placeholder before running launch.
# Remove or fill <OPTIONAL> entries; relative directories resolve against this file.

fork:
  # python_executable: "<OPTIONAL>"
  # temp_directory: "<OPTIONAL>"
  parallelism: 1
  fork_count: 1
  pass_plugin_pid: true

startup:
  # Importable provider class, e.g. "my_tests.provider.SuiteProvider".
  provider_class_name: "<REQUIRED>"
  fail_if_no_tests: false
  classpath:
    # Entries keep their order; duplicates are allowed.
    test:
      - "<REQUIRED>"
    provider: []
    additional: []
    enable_assertions: true
    child_delegation: false
  class_loader:
    use_system_class_loader: true
    use_manifest_only_jar: false

provider:
  directory_scanner:
    base_directory: "<REQUIRED>"
    includes:
      - "**/Test*"
    excludes: []
    specific_tests: []
    fail_if_no_tests: false
    run_order: "filesystem"
  run_order:
    # One of: alphabetical, reversealphabetical, random, hourly, failedfirst,
    # balanced, filesystem, default.
    strategy: "default"
    # random_seed: "<OPTIONAL>"
    # statistics_file: "<OPTIONAL>"
  reporter:
    reports_directory: "<REQUIRED>"
    trim_stack_traces: true
  test_artifact:
    version: "<REQUIRED>"
    # classifier: "<OPTIONAL>"
  test_request:
    suite_xml_files: []
    # test_source_directory: "<OPTIONAL>"
    # Comma separated Class#method patterns, "!" excludes.
    test_list_resolver: ""
  properties: {}
  fail_fast: false
  main_cli_options: []
  rerun_failing_tests_count: 0
  skip_after_failure_count: 0
  # One of: default, exit, kill.
  shutdown: "default"
  forked_process_timeout_in_seconds: 0
  # test_for_fork: "<OPTIONAL>"
  read_tests_from_in_stream: false
"""


def build_placeholder_configuration() -> str:
    """Build a YAML launch configuration template with placeholders and inline guidance."""
    return _CONFIG_SCAFFOLD_TEMPLATE


def write_placeholder_configuration(output_path: Path | str) -> Path:
    """Write the placeholder launch configuration template to the requested output path.

    Args:
      output_path: Destination file path for the scaffold.

    Returns:
      The resolved destination path.

    Raises:
      FileExistsError: If the destination file already exists.
      OSError: If writing the scaffold fails.
    """
    destination = Path(output_path)
    if destination.exists():
        raise FileExistsError(f"Launch configuration file already exists: {destination.resolve()}")
    destination.write_text(build_placeholder_configuration(), encoding="utf-8")
    return destination.resolve()
