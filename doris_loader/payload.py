"""Payload sources the stream loader reads request bodies from."""

import io
from pathlib import Path
from typing import BinaryIO


class PayloadSource:
    """Base class for stream load payloads.

    A source must be re-readable: every attempt opens it again, and a redirect
    within an attempt rewinds the opened stream, so the stream returned by
    ``open`` has to be seekable. A source must not be shared by loads running
    at the same time.
    """

    def open(self) -> BinaryIO:
        """Open the payload for reading from the start.

        Returns:
            BinaryIO: Seekable binary stream, closed by the caller

        Raises:
            OSError: If the payload cannot be opened
        """
        raise NotImplementedError

    def describe(self) -> str:
        return self.__class__.__name__


class FilePayloadSource(PayloadSource):
    """Payload read from a file on disk."""

    def __init__(self, path: Path | str):
        self.path = Path(path)

    def open(self) -> BinaryIO:
        return self.path.open("rb")

    def describe(self) -> str:
        return str(self.path)


class BytesPayloadSource(PayloadSource):
    """Payload held in memory."""

    def __init__(self, data: bytes):
        self.data = data

    def open(self) -> BinaryIO:
        return io.BytesIO(self.data)

    def describe(self) -> str:
        return f"<{len(self.data)} bytes>"
