"""
One-shot local HTTP listener for the OAuth redirect.

The listener resolves a single Future with the authorization code (or
rejects it with the consent-screen error) and then sets its abort event.
Once the event is set, later requests have no effect. wait() shuts the
server down exactly once, whatever the outcome.
"""

import threading
from concurrent.futures import Future
from concurrent.futures import TimeoutError as FutureTimeout
from http.server import BaseHTTPRequestHandler, HTTPServer
from typing import Optional, Tuple
from urllib.parse import parse_qs, urlsplit

from ..core.logging import get_logger
from ..errors import AuthorizationDenied, AuthTransportError

logger = get_logger(__name__)

SUCCESS_PAGE = (
    '<html lang="en"><body><h1>Authorization complete</h1>'
    "<p>You can close this window and return to the terminal.</p></body></html>"
)
FAILURE_PAGE = '<html lang="en"><body><h1>Authorization failed</h1><p>{reason}</p></body></html>'
MISSING_CODE_PAGE = (
    '<html lang="en"><body><h1>Error</h1><p>No authorization code in the request.</p></body></html>'
)
NOT_FOUND_PAGE = "Not Found"
GONE_PAGE = '<html lang="en"><body><p>This sign-in link has already been used.</p></body></html>'


class _CallbackHandler(BaseHTTPRequestHandler):
    server: "_CallbackServer"

    def do_GET(self):
        status, body = self.server.listener.dispatch(self.path)
        payload = body.encode("utf-8")
        self.send_response(status)
        self.send_header("Content-Type", "text/html; charset=utf-8")
        self.send_header("Content-Length", str(len(payload)))
        self.end_headers()
        self.wfile.write(payload)

    def log_message(self, format, *args):
        logger.debug("callback_request", message=format % args)


class _CallbackServer(HTTPServer):
    def __init__(self, address, handler, listener: "CallbackListener"):
        self.listener = listener
        super().__init__(address, handler)


class CallbackListener:
    """
    Listens on localhost for the single OAuth redirect.

    Usage:
        listener = CallbackListener(port=8080)
        listener.start()
        print(build_url(redirect_uri=listener.redirect_uri))
        code = listener.wait()
    """

    def __init__(self, port: int = 8080, host: str = "localhost"):
        self.result: Future = Future()
        self.aborted = threading.Event()
        self._settle_lock = threading.Lock()
        self._stop_lock = threading.Lock()
        self._stopped = False
        self._thread: Optional[threading.Thread] = None
        self._server = _CallbackServer((host, port), _CallbackHandler, listener=self)

    @property
    def port(self) -> int:
        """Bound port (useful when constructed with port=0)."""
        return self._server.server_address[1]

    @property
    def redirect_uri(self) -> str:
        return f"http://localhost:{self.port}"

    @property
    def is_stopped(self) -> bool:
        return self._stopped

    def start(self) -> None:
        """Start serving in a background thread."""
        if self._thread is not None:
            return
        self._thread = threading.Thread(
            target=self._server.serve_forever,
            kwargs={"poll_interval": 0.1},
            name="oauth-callback",
            daemon=True,
        )
        self._thread.start()
        logger.info("callback_listener_started", port=self.port)

    def dispatch(self, path: str) -> Tuple[int, str]:
        """
        Decide the response for one request path.

        Returns:
            Tuple of (status_code, html_body)
        """
        if self.aborted.is_set():
            return 410, GONE_PAGE

        parsed = urlsplit(path)
        if parsed.path != "/":
            return 404, NOT_FOUND_PAGE

        params = parse_qs(parsed.query)
        error = params.get("error", [None])[0]
        code = params.get("code", [None])[0]

        if error:
            self._settle(error=AuthorizationDenied(error))
            return 400, FAILURE_PAGE.format(reason=f"Authorization error: {error}")

        if code:
            self._settle(code=code)
            return 200, SUCCESS_PAGE

        return 400, MISSING_CODE_PAGE

    def _settle(self, code: Optional[str] = None, error: Optional[Exception] = None) -> bool:
        """Complete the Future once, then raise the abort signal."""
        with self._settle_lock:
            if self.aborted.is_set():
                return False
            if error is not None:
                self.result.set_exception(error)
            else:
                self.result.set_result(code)
            self.aborted.set()
        logger.debug("callback_settled", outcome="error" if error is not None else "code")
        return True

    def wait(self, timeout: Optional[float] = None) -> str:
        """
        Block until the redirect arrives, then stop the server.

        Args:
            timeout: Seconds to wait (None waits forever)

        Returns:
            The authorization code

        Raises:
            AuthorizationDenied: The redirect carried an error parameter
            AuthTransportError: No redirect arrived within the timeout
        """
        self.start()
        try:
            return self.result.result(timeout=timeout)
        except FutureTimeout as e:
            raise AuthTransportError("Timed out waiting for the OAuth redirect") from e
        finally:
            self.stop()

    def stop(self) -> None:
        """Shut the server down. Safe to call more than once."""
        with self._stop_lock:
            if self._stopped:
                return
            self._stopped = True
        self.aborted.set()
        if self._thread is not None:
            self._server.shutdown()
            self._thread.join(timeout=5)
        self._server.server_close()
        logger.info("callback_listener_stopped")
