"""HTTP client for stream loading data into Doris tables."""

import logging
import time
from pathlib import Path
from typing import BinaryIO

import requests
from pydantic import ValidationError

from doris_loader.errors import ResponseDecodeError
from doris_loader.payload import FilePayloadSource, PayloadSource
from doris_loader.result import LoadResult
from doris_loader.session import StreamLoadSession
from doris_loader.settings import LoadSettings

logger = logging.getLogger(__name__)


class StreamLoader:
    """HTTP client for stream loading payloads through the frontend nodes.

    Every attempt sends one PUT request to the next frontend node in
    round-robin order. Transport failures are retried up to
    ``max_attempts`` times, any decoded result ends the load.
    """

    def __init__(self, settings: LoadSettings):
        """Initialize the stream loader.

        Args:
            settings: Built stream load settings, see ``build_settings``
        """
        self.settings = settings

    def _put_payload(self, fe_node: str, body: BinaryIO) -> requests.Response:
        """Send the payload to a frontend node, following its redirect.

        Args:
            fe_node: Frontend endpoint to send the request to
            body: Opened payload stream

        Returns:
            Response object of the node that absorbed the payload.
        """
        url = self.settings.stream_load_url(fe_node)

        with StreamLoadSession(self.settings) as s:
            logger.debug("Putting payload to %s", url)
            response = s.put(
                url=url,
                data=body,
                headers=self.settings.stream_load_headers(),
                auth=self.settings.auth,
                timeout=self.settings.timeout,
            )

        return response

    def _decode_result(self, response: requests.Response) -> LoadResult:
        try:
            return LoadResult.model_validate_json(response.content)
        except ValidationError as e:
            logger.error(
                "Stream load response is not a valid result, response: %d: %s",
                response.status_code,
                response.text,
            )
            raise ResponseDecodeError(
                f"Stream load response could not be decoded, response code: "
                f"{response.status_code} and text: {response.text}"
            ) from e

    def load(self, payload: PayloadSource) -> LoadResult:
        """Stream load a payload into the configured table.

        The payload is opened again for every attempt. It must not be used by
        another load while this one runs.

        Args:
            payload: Re-readable payload source

        Returns:
            The decoded result; check ``is_success``, a failed load is not
            raised.

        Raises:
            requests.RequestException: The last transport error, once all
                attempts have failed.
            ResponseDecodeError: If the response is not a stream load result.
        """
        fe_nodes = self.settings.fe_nodes
        max_attempts = self.settings.max_attempts
        fe_index = 0
        attempt = 0

        while True:
            if attempt != 0:
                time.sleep(self.settings.retry_delay)

            fe_node = fe_nodes[fe_index]
            fe_index = (fe_index + 1) % len(fe_nodes)
            attempt += 1

            logger.info(
                "Stream loading %s into %s.%s via %s (attempt %d/%d)",
                payload.describe(),
                self.settings.database,
                self.settings.table,
                fe_node,
                attempt,
                max_attempts,
            )
            try:
                with payload.open() as body:
                    response = self._put_payload(fe_node, body)
            except requests.RequestException as e:
                if attempt < max_attempts:
                    logger.warning(
                        "Stream load attempt %d via %s failed: %s", attempt, fe_node, e
                    )
                    continue

                logger.error("Stream load failed after %d attempts: %s", attempt, e)
                raise

            result = self._decode_result(response)
            if result.is_success:
                logger.info(
                    "Stream load finished with label '%s', loaded rows: %d",
                    result.label,
                    result.number_loaded_rows,
                )
            else:
                logger.info(
                    "Stream load finished with status '%s': %s",
                    result.status,
                    result.describe_failure(),
                )
            return result

    def load_file(self, path: Path | str) -> LoadResult:
        """Stream load a file from disk, see ``load``."""
        return self.load(FilePayloadSource(path))
