"""HTTP session that resolves stream load redirects to reachable backends."""

import logging
import socket
from urllib.parse import urlparse

import requests
from requests.auth import HTTPBasicAuth
from requests.utils import get_auth_from_url

from doris_loader import constants
from doris_loader.errors import NoReachableBackendError
from doris_loader.settings import LoadSettings

logger = logging.getLogger(__name__)

_DEFAULT_PORTS = {"http": 80, "https": 443}


def probe_backend(node: str, protocol: str, timeout: float) -> bool:
    """Check whether a backend node accepts TCP connections.

    Args:
        node: Backend endpoint, "host:port"
        protocol: Scheme used to pick the port when the node has none
        timeout: Connect timeout in seconds

    Returns:
        True if a connection could be opened
    """
    host, sep, port = node.rpartition(":")
    if not sep or not port.isdigit():
        host, port = node, str(_DEFAULT_PORTS[protocol])

    try:
        conn = socket.create_connection((host.strip("[]"), int(port)), timeout)
    except OSError as e:
        logger.debug("Backend node %s is not reachable: %s", node, e)
        return False

    conn.close()
    return True


def find_reachable_backend(
    be_nodes: tuple[str, ...],
    protocol: str,
    timeout: float = constants.BACKEND_PROBE_TIMEOUT,
) -> str | None:
    """Return the first backend node, in listed order, that accepts a connection.

    Nodes are probed one after another, so the pick is deterministic and the
    worst case latency grows with the number of nodes.
    """
    for node in be_nodes:
        if probe_backend(node, protocol, timeout):
            return node
    return None


class StreamLoadSession(requests.Session):
    """Session that rewrites stream load redirects to a reachable backend node.

    The frontend node answers a stream load with a redirect to the backend
    that should receive the data. When backend nodes are configured, that
    target is replaced by the first configured backend that is reachable from
    here, keeping the scheme, credentials, database and table.
    """

    def __init__(self, settings: LoadSettings):
        super().__init__()
        self.settings = settings

    def get_redirect_target(self, resp: requests.Response) -> str | None:
        target = super().get_redirect_target(resp)
        if target is None or not self.settings.be_nodes:
            return target

        node = find_reachable_backend(self.settings.be_nodes, self.settings.protocol)
        if node is None:
            logger.warning(
                "None of the backend nodes %s is reachable, redirect to %s failed",
                ", ".join(self.settings.be_nodes),
                urlparse(target).hostname,
            )
            # resolve_redirects never gets to release it
            resp.close()
            raise NoReachableBackendError(
                f"No reachable backend node among: {', '.join(self.settings.be_nodes)}",
                response=resp,
            )

        logger.debug(
            "Rewriting redirect from %s to backend node %s",
            urlparse(target).hostname,
            node,
        )
        return self.settings.backend_url(node)

    def rebuild_auth(
        self, prepared_request: requests.PreparedRequest, response: requests.Response
    ) -> None:
        # requests drops Authorization when the redirect changes host; the
        # backend needs it, taken from the redirect URL or the settings.
        super().rebuild_auth(prepared_request, response)

        username, password = get_auth_from_url(prepared_request.url)
        auth = (username, password) if username else self.settings.auth
        if auth is not None:
            # set the header only, prepare_auth would recompute the body length
            HTTPBasicAuth(*auth)(prepared_request)
