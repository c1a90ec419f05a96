from __future__ import annotations

import base64
import hashlib
import html
import secrets
import threading
import webbrowser
from concurrent.futures import Future
from http.server import BaseHTTPRequestHandler, HTTPServer
from typing import Callable, Dict, List, Optional, Tuple
from urllib.parse import parse_qs, urlencode, urlparse

import requests
import spotipy
from spotipy.exceptions import SpotifyException

from .config import (
    NUM_RANDOM_BYTES,
    REDIRECT_URI,
    REQUEST_TIMEOUT,
    SPOTIFY_AUTH_URL,
    SPOTIFY_SCOPES,
    SPOTIFY_TOKEN_URL,
)
from .console import logger
from .errors import AuthorizationError
from .models import AuthResult
from .services.spotify import build_client, spotify_preflight

SUCCESS_PAGE = (
    "<html><body><p>Authenticated as: <strong>{user}</strong></p>"
    "<p>Return to your terminal to continue.</p></body></html>"
)
ERROR_PAGE = "<html><body><p><strong>Error</strong>: {error}</p></body></html>"
DONE_PAGE = "<html><body><p>Authorization already completed. You can close this window.</p></body></html>"


def generate_random_bytes(n: int) -> bytes:
    return secrets.token_bytes(n)


def encode_base64_without_padding(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).decode("ascii").rstrip("=")


def generate_random_string(n: int) -> str:
    return encode_base64_without_padding(generate_random_bytes(n))


def build_code_challenge(code_verifier: str) -> str:
    digest = hashlib.sha256(code_verifier.encode("ascii")).digest()
    return encode_base64_without_padding(digest)


class _CallbackServer(HTTPServer):
    def __init__(self, address: Tuple[str, int], coordinator: "AuthorizationCoordinator", path: str):
        self.coordinator = coordinator
        self.callback_path = path
        super().__init__(address, _CallbackHandler)


class _CallbackHandler(BaseHTTPRequestHandler):
    server: _CallbackServer

    def do_GET(self) -> None:
        parsed = urlparse(self.path)
        if parsed.path != self.server.callback_path:
            self.send_response(204)
            self.end_headers()
            return
        status, body = self.server.coordinator.handle_callback(parse_qs(parsed.query))
        payload = body.encode("utf-8")
        self.send_response(status)
        self.send_header("Content-Type", "text/html; charset=utf-8")
        self.send_header("Content-Length", str(len(payload)))
        self.end_headers()
        self.wfile.write(payload)

    def log_message(self, format: str, *args) -> None:
        logger.debug("callback: " + format % args)


class AuthorizationCoordinator:
    """One-shot OAuth authorization code + PKCE handshake with Spotify.

    ``authenticate`` starts a local listener for the redirect, opens the
    authorization URL and blocks until the first callback resolves the
    handoff either way. The coordinator can only be used once.
    """

    def __init__(
        self,
        client_id: str,
        client_secret: Optional[str] = None,
        redirect_uri: str = REDIRECT_URI,
        scope: str = SPOTIFY_SCOPES,
        session: Optional[requests.Session] = None,
        client_factory: Callable[[str], spotipy.Spotify] = build_client,
        open_browser: Callable[[str], object] = webbrowser.open,
    ):
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri
        self.scope = scope
        self._session = session or requests.Session()
        self._client_factory = client_factory
        self._open_browser = open_browser

        self.state = generate_random_string(NUM_RANDOM_BYTES)
        self.code_verifier = generate_random_string(NUM_RANDOM_BYTES)
        self.code_challenge = build_code_challenge(self.code_verifier)

        self._result: Future = Future()
        self._lock = threading.Lock()
        self._consumed = False

    def authorization_url(self) -> str:
        params = {
            "client_id": self.client_id,
            "response_type": "code",
            "redirect_uri": self.redirect_uri,
            "scope": self.scope,
            "state": self.state,
            "code_challenge_method": "S256",
            "code_challenge": self.code_challenge,
        }
        return f"{SPOTIFY_AUTH_URL}?{urlencode(params)}"

    def authenticate(self) -> AuthResult:
        if self._consumed:
            raise AuthorizationError("Authorization has already been attempted")
        self._consumed = True

        server = self._start_listener()
        try:
            url = self.authorization_url()
            logger.info(f"open the following URL in your browser: {url}")
            try:
                self._open_browser(url)
            except webbrowser.Error as exc:
                logger.warning(f"[yellow]Could not open a browser:[/yellow] {exc}")
            return self._result.result()
        finally:
            server.shutdown()
            server.server_close()

    def _start_listener(self) -> _CallbackServer:
        parsed = urlparse(self.redirect_uri)
        address = (parsed.hostname or "127.0.0.1", parsed.port or 80)
        try:
            server = _CallbackServer(address, self, parsed.path or "/")
        except OSError as exc:
            raise AuthorizationError(f"Could not listen on {address[0]}:{address[1]}: {exc}") from exc
        thread = threading.Thread(target=server.serve_forever, name="spotitable-callback", daemon=True)
        thread.start()
        logger.debug(f"Listening for the authorization callback on {self.redirect_uri}")
        return server

    # Callback ------------------------------------------------------------
    def handle_callback(self, params: Dict[str, List[str]]) -> Tuple[int, str]:
        """Resolve the handoff from redirect query parameters; return (status, html)."""
        with self._lock:
            if self._result.done():
                return 200, DONE_PAGE
            try:
                result = self._complete(params)
            except Exception as exc:
                if not isinstance(exc, AuthorizationError):
                    wrapped = AuthorizationError(f"authorization failed: {exc}")
                    wrapped.__cause__ = exc
                    exc = wrapped
                self._result.set_exception(exc)
                status = 400 if params.get("error") else 403
                return status, ERROR_PAGE.format(error=html.escape(str(exc)))
            self._result.set_result(result)
            return 200, SUCCESS_PAGE.format(user=html.escape(result.user_id))

    def _complete(self, params: Dict[str, List[str]]) -> AuthResult:
        errors = params.get("error")
        if errors:
            raise AuthorizationError(errors[0])
        if (params.get("state") or [None])[0] != self.state:
            raise AuthorizationError("state mismatch")
        code = (params.get("code") or [None])[0]
        if not code:
            raise AuthorizationError("no authorization code in callback")

        access_token = self._exchange_code(code)
        client = self._client_factory(access_token)
        try:
            user_id = spotify_preflight(client)
        except (SpotifyException, requests.RequestException, KeyError) as exc:
            raise AuthorizationError(f"could not look up current user: {exc}") from exc
        return AuthResult(user_id=user_id, client=client)

    def _exchange_code(self, code: str) -> str:
        data = {
            "grant_type": "authorization_code",
            "code": code,
            "redirect_uri": self.redirect_uri,
            "code_verifier": self.code_verifier,
        }
        auth = None
        if self.client_secret:
            auth = (self.client_id, self.client_secret)
        else:
            data["client_id"] = self.client_id
        try:
            response = self._session.post(SPOTIFY_TOKEN_URL, data=data, auth=auth, timeout=REQUEST_TIMEOUT)
            response.raise_for_status()
            return response.json()["access_token"]
        except (requests.RequestException, KeyError, ValueError) as exc:
            raise AuthorizationError(f"could not get token: {exc}") from exc


__all__ = [
    "AuthorizationCoordinator",
    "generate_random_bytes",
    "encode_base64_without_padding",
    "generate_random_string",
    "build_code_challenge",
]
