"""Tests for doris_loader.payload module."""

import pytest

from doris_loader.payload import BytesPayloadSource, FilePayloadSource, PayloadSource


class TestPayloadSource:
    def test_base_source_not_implemented(self):
        """Test that the base PayloadSource cannot be opened."""
        with pytest.raises(NotImplementedError):
            PayloadSource().open()

    def test_file_source_reopens_from_start(self, sample_json_file):
        """Test that a file source can be read again after a full read."""
        source = FilePayloadSource(sample_json_file)

        with source.open() as first:
            data = first.read()
        with source.open() as second:
            assert second.read() == data

        assert data.startswith(b'{"name": "John Doe"')
        assert source.describe() == str(sample_json_file)

    def test_file_source_missing_file(self, temp_dir):
        with pytest.raises(FileNotFoundError):
            FilePayloadSource(temp_dir / "missing.json").open()

    def test_bytes_source_is_seekable(self):
        source = BytesPayloadSource(b"name,age\nJenny,50\n")

        with source.open() as stream:
            assert stream.read() == b"name,age\nJenny,50\n"
            stream.seek(0)
            assert stream.read(4) == b"name"

        assert source.describe() == "<18 bytes>"
