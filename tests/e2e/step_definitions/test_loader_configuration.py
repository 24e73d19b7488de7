"""Step definitions for loader configuration scenarios."""

import json
import os
import subprocess
import sys
from pathlib import Path

import pytest
from pytest_bdd import given, parsers, scenarios, then, when


# Helper functions
def extract_json_from_output(stdout):
    """Extract and parse the JSON document printed on stdout."""
    start = stdout.find("{")
    end = stdout.rfind("}")
    if start == -1 or end == -1:
        return None
    return json.loads(stdout[start : end + 1])


# Load scenarios from the feature file
scenarios("../features/loader_configuration.feature")


@pytest.fixture
def project_root():
    """Get the path of the project root."""
    return Path(__file__).parent.parent.parent.parent


@pytest.fixture
def env_vars():
    """Store environment variables for the test."""
    return {}


@pytest.fixture
def command_result():
    """Store the result of running the loader."""
    return {}


@pytest.fixture
def config_path(temp_dir):
    return temp_dir / "loader.yaml"


# Given steps
@given(parsers.parse('I set environment variable "{var_name}" to "{var_value}"'))
def set_environment_variable(env_vars, var_name, var_value):
    """Set an environment variable for the test."""
    env_vars[var_name] = var_value


@given("I have a config file with content:")
def create_config_file(config_path, docstring):
    """Write the config file used by the loader."""
    config_path.write_text(docstring)


# When steps
def run_loader(project_root, env_vars, command_result, args):
    env = {k: v for k, v in os.environ.items() if k != "DORIS_PASSWORD"}
    env.update(env_vars)
    try:
        result = subprocess.run(
            [sys.executable, "-m", "doris_loader.main", *args],
            capture_output=True,
            text=True,
            timeout=30,
            cwd=project_root,
            env=env,
        )
    except subprocess.TimeoutExpired:
        pytest.fail("Command timed out")

    command_result["returncode"] = result.returncode
    command_result["stdout"] = result.stdout
    command_result["stderr"] = result.stderr


@when("I run the loader with this config file")
def run_with_config_file(project_root, env_vars, command_result, config_path):
    run_loader(
        project_root,
        env_vars,
        command_result,
        ["--config", str(config_path), "--print-config-and-exit"],
    )


@when(parsers.parse('I run the loader with this config file and args "{args}"'))
def run_with_config_file_and_args(
    project_root, env_vars, command_result, config_path, args
):
    run_loader(
        project_root,
        env_vars,
        command_result,
        ["--config", str(config_path), "--print-config-and-exit", *args.split()],
    )


# Then steps
@then(parsers.parse("the exit code should be {code:d}"))
def check_exit_code(command_result, code):
    assert command_result["returncode"] == code, (
        f"Expected exit code {code}, got {command_result['returncode']}. "
        f"stderr: {command_result['stderr']}"
    )


@then(parsers.parse('the config should have "{key}" set to "{expected_value}"'))
def check_config_value(command_result, key, expected_value):
    config_data = extract_json_from_output(command_result["stdout"])
    if config_data is None:
        pytest.fail(f"No JSON config found in stdout: {command_result['stdout']}")

    actual_value = str(config_data.get(key, ""))
    assert actual_value == expected_value, (
        f"Expected {key}='{expected_value}', got {key}='{actual_value}'. "
        f"Full config: {config_data}"
    )


@then(parsers.parse('the output should contain "{expected_text}"'))
def check_output_contains(command_result, expected_text):
    combined_output = command_result["stdout"] + command_result["stderr"]
    assert expected_text in combined_output, (
        f"Expected text '{expected_text}' not found in output. "
        f"stdout: {command_result['stdout']}, stderr: {command_result['stderr']}"
    )
