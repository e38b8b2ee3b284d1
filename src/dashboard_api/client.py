"""Dashboard API client: query dispatch, cancellation and error normalization."""

import json
import threading
from typing import Any, Dict, Mapping, Optional

import requests

from dashboard_api.config.loader import DEFAULT_DEBUG_HEADER_PREFIX, ClientConfig
from dashboard_api.errors import ApiError
from dashboard_api.query import Query, serialize_query
from dashboard_api.transport import CancellationScope, RequestsTransport
from dashboard_api.utils.logging import get_logger

logger = get_logger(__name__)

SHARED_LINK_AUTH_HEADER = "X-Shared-Link-Auth"


class ClientContext:
    """Mutable state shared by every request a client issues."""

    def __init__(self, shared_link_auth: Optional[str] = None):
        self._lock = threading.Lock()
        self._scope = CancellationScope()
        self._shared_link_auth = shared_link_auth or None

    @property
    def scope(self) -> CancellationScope:
        with self._lock:
            return self._scope

    @property
    def shared_link_auth(self) -> Optional[str]:
        return self._shared_link_auth

    def set_shared_link_auth(self, token: Optional[str]) -> None:
        """Set the shared-link token; a falsy value clears it."""
        self._shared_link_auth = token or None

    def cancel_all(self) -> None:
        """Abort every request bound to the current scope and start a new one."""
        with self._lock:
            aborted, self._scope = self._scope, CancellationScope()
            aborted.abort()
        logger.debug("Aborted in-flight requests and opened a new cancellation scope")

    def reset(self) -> None:
        """Abort in-flight requests and clear the shared-link token."""
        self.cancel_all()
        self.set_shared_link_auth(None)


class DashboardClient:
    """Issues stats queries against the dashboard API."""

    def __init__(
        self,
        base_url: str = "",
        *,
        context: Optional[ClientContext] = None,
        transport: Optional[Any] = None,
        debug_header_prefix: str = DEFAULT_DEBUG_HEADER_PREFIX,
    ):
        """
        Initialize client.

        Args:
            base_url: Prefix for relative request paths ('' keeps paths as given)
            context: Shared cancellation/auth state. A fresh one is created if None.
            transport: Object with a fetch-like ``fetch`` method. Defaults to RequestsTransport.
            debug_header_prefix: Response headers starting with this are logged
        """
        self.base_url = base_url
        self.context = context or ClientContext()
        self.transport = transport or RequestsTransport()
        self.debug_header_prefix = debug_header_prefix.lower()

    @classmethod
    def from_config(cls, config: ClientConfig, *, transport: Optional[Any] = None) -> "DashboardClient":
        return cls(
            config.base_url,
            context=ClientContext(config.shared_link_auth),
            transport=transport or RequestsTransport(user_agent=config.user_agent),
            debug_header_prefix=config.debug_header_prefix,
        )

    def set_shared_link_auth(self, token: Optional[str]) -> None:
        self.context.set_shared_link_auth(token)

    def cancel_all(self) -> None:
        self.context.cancel_all()

    def serialize_query(self, query: Optional[Query] = None, *extra_query: Mapping[str, Any]) -> str:
        return serialize_query(query, extra_query, auth=self.context.shared_link_auth)

    def _resolve_url(self, url: str) -> str:
        if not self.base_url or url.startswith(("http://", "https://")):
            return url
        return self.base_url.rstrip("/") + "/" + url.lstrip("/")

    def _log_debug_headers(self, url: str, headers: Mapping[str, str]) -> None:
        debug_headers = {
            name: value
            for name, value in headers.items()
            if name.lower().startswith(self.debug_header_prefix)
        }
        if debug_headers:
            logger.info(f"{url} {debug_headers}")

    def get(self, url: str, query: Optional[Query] = None, *extra_query: Mapping[str, Any]) -> Any:
        """
        GET ``url`` with the serialized query and return the decoded JSON body.

        Args:
            url: Request path or absolute URL, without a query string
            query: Query state to serialize
            *extra_query: Override mappings merged on top of the query, in order

        Returns:
            Parsed JSON body of a 2xx response

        Raises:
            ApiError: Non-2xx response with a JSON body
            requests.JSONDecodeError: Non-2xx response whose body is not JSON
            RequestAborted: cancel_all() was called while the request was in flight
            requests.RequestException: Other transport failures
        """
        auth = self.context.shared_link_auth
        headers: Dict[str, str] = {SHARED_LINK_AUTH_HEADER: auth} if auth else {}
        serialized_url = self._resolve_url(url) + serialize_query(query, extra_query, auth=auth)

        logger.debug(f"GET {url}")
        response = self.transport.fetch(
            serialized_url,
            method="GET",
            headers=headers,
            signal=self.context.scope.signal,
        )
        self._log_debug_headers(url, response.headers)

        if not 200 <= response.status_code < 300:
            payload = response.json()
            message = payload.get("error") if isinstance(payload, dict) else None
            logger.warning(f"GET {url} failed with status {response.status_code}: {message}")
            raise ApiError(message, payload, status_code=response.status_code)

        return response.json()

    def put(self, url: str, body: Any) -> requests.Response:
        """PUT a JSON body and return the raw response without interpreting it."""
        resolved = self._resolve_url(url)
        logger.debug(f"PUT {resolved}")
        return self.transport.fetch(
            resolved,
            method="PUT",
            headers={"Content-Type": "application/json"},
            data=json.dumps(body),
        )
