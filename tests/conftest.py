"""Shared pytest fixtures and configuration."""

import pytest
import tempfile
from pathlib import Path

from doris_loader.options import build_settings, with_username, with_password


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def success_result_json():
    """Sample stream load result of a successful load."""
    return {
        "TxnId": 1001,
        "Label": "load_users_1",
        "Comment": "",
        "TwoPhaseCommit": "false",
        "Status": "Success",
        "Message": "OK",
        "NumberTotalRows": 2,
        "NumberLoadedRows": 2,
        "NumberFilteredRows": 0,
        "NumberUnselectedRows": 0,
        "LoadBytes": 64,
        "LoadTimeMs": 120,
        "BeginTxnTimeMs": 1,
        "StreamLoadPutTimeMs": 3,
        "ReadDataTimeMs": 0,
        "WriteDataTimeMs": 80,
        "CommitAndPublishTimeMs": 30,
    }


@pytest.fixture
def make_settings():
    """Build settings for a local cluster with extra options."""

    def factory(*options, fe_nodes=("127.0.0.1:8030",)):
        return build_settings(
            list(fe_nodes),
            "my_db",
            "users",
            with_username("root"),
            with_password(""),
            *options,
        )

    return factory


@pytest.fixture
def sample_json_file(temp_dir):
    """Line delimited JSON file to load."""
    path = temp_dir / "users.json"
    path.write_text('{"name": "John Doe", "age": 30}\n{"name": "Jane Roe", "age": 31}\n')
    return path
