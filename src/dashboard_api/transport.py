"""HTTP transport with abort-signal support."""

import threading
from concurrent.futures import Future
from typing import Callable, Dict, List, Optional

import requests

from dashboard_api.errors import RequestAborted
from dashboard_api.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_USER_AGENT = "dashboard-api/0.1"


class AbortSignal:
    """One-shot flag that notifies listeners when its scope is aborted."""

    def __init__(self):
        self._aborted = False
        self._listeners: List[Callable[[], None]] = []
        self._lock = threading.Lock()

    @property
    def aborted(self) -> bool:
        return self._aborted

    def add_listener(self, listener: Callable[[], None]) -> None:
        """Register ``listener``; it runs at once if the signal already fired."""
        with self._lock:
            if not self._aborted:
                self._listeners.append(listener)
                return
        listener()

    def remove_listener(self, listener: Callable[[], None]) -> None:
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def throw_if_aborted(self) -> None:
        if self._aborted:
            raise RequestAborted("Request aborted")

    def _abort(self) -> None:
        with self._lock:
            if self._aborted:
                return
            self._aborted = True
            listeners, self._listeners = self._listeners, []
        for listener in listeners:
            listener()


class CancellationScope:
    """Groups in-flight requests so they can be aborted together."""

    def __init__(self):
        self.signal = AbortSignal()

    @property
    def aborted(self) -> bool:
        return self.signal.aborted

    def abort(self) -> None:
        self.signal._abort()


class RequestsTransport:
    """Fetch-like transport backed by a requests Session."""

    def __init__(self, session: Optional[requests.Session] = None, *, user_agent: str = DEFAULT_USER_AGENT):
        self.session = session or requests.Session()
        self.user_agent = user_agent

    def _get_headers(self, headers: Optional[Dict[str, str]]) -> Dict[str, str]:
        """Get HTTP headers for a request."""
        merged = {
            "User-Agent": self.user_agent,
            "Accept": "application/json",
        }
        if headers:
            merged.update(headers)
        return merged

    def fetch(
        self,
        url: str,
        *,
        method: str = "GET",
        headers: Optional[Dict[str, str]] = None,
        data: Optional[str] = None,
        signal: Optional[AbortSignal] = None,
    ) -> requests.Response:
        """
        Issue a request and return the response with its body loaded.

        Args:
            url: Fully serialized request URL
            method: HTTP method
            headers: Extra request headers
            data: Encoded request body
            signal: Abort signal; tripping it fails the call at once, even while waiting on the server

        Returns:
            requests.Response of any status code

        Raises:
            RequestAborted: If the signal fired before or during the request
            requests.RequestException: On other transport failures
        """
        request_headers = self._get_headers(headers)
        if signal is None:
            return self.session.request(method, url, headers=request_headers, data=data)

        signal.throw_if_aborted()
        wake = threading.Event()
        signal.add_listener(wake.set)
        try:
            future = self._send_in_background(method, url, request_headers, data)
            future.add_done_callback(lambda _future: wake.set())
            wake.wait()
        finally:
            signal.remove_listener(wake.set)

        if signal.aborted:
            # The worker may still be blocked on the socket; drop its result when it returns
            future.add_done_callback(_discard_response)
            logger.debug(f"Abandoned aborted request {url}")
            raise RequestAborted(f"Request aborted: {url}")
        return future.result()

    def _send_in_background(
        self,
        method: str,
        url: str,
        headers: Dict[str, str],
        data: Optional[str],
    ) -> Future:
        """Run the blocking request on a daemon thread so the caller can stop waiting."""
        future: Future = Future()

        def run() -> None:
            if not future.set_running_or_notify_cancel():
                return
            try:
                future.set_result(self.session.request(method, url, headers=headers, data=data))
            except Exception as e:
                future.set_exception(e)

        threading.Thread(target=run, name="dashboard-api-request", daemon=True).start()
        return future


def _discard_response(future: Future) -> None:
    if future.exception() is None:
        future.result().close()
