from __future__ import annotations

import random
import socket
import time
from typing import Any, Callable

import requests
from spotipy.exceptions import SpotifyException

from .config import RETRY_BASE_SLEEP, RETRY_MAX_TRIES
from .console import logger


def is_retriable_http_error(err: requests.HTTPError) -> bool:
    status = getattr(err.response, "status_code", None)
    if status is None:
        return False
    if 500 <= status <= 599:
        return True
    return status == 429


def backoff_delay(tries: int) -> float:
    return RETRY_BASE_SLEEP * (2 ** (tries - 1)) + random.uniform(0, 0.2)


def retry_call(func: Callable[..., Any], *args: Any, idempotent: bool = True, **kwargs: Any) -> Any:
    """Generic retry wrapper with exponential backoff for Spotify/Airtable/HTTP errors.

    Pass ``idempotent=False`` for calls that must not be replayed once the
    request may have reached the server. Timeouts and dropped connections are
    then only retried when the connection itself could not be opened.
    """
    tries = 0
    while True:
        tries += 1
        try:
            return func(*args, **kwargs)
        except requests.HTTPError as err:
            status = getattr(err.response, "status_code", None)
            if is_retriable_http_error(err) and tries < RETRY_MAX_TRIES:
                sleep = backoff_delay(tries)
                logger.warning(f"[yellow]HTTP {status}[/yellow] retrying in {sleep:.2f}s")
                time.sleep(sleep)
                continue
            raise
        except (socket.timeout, TimeoutError, requests.Timeout, requests.ConnectionError) as err:
            if not idempotent and not isinstance(err, requests.ConnectTimeout):
                raise
            if tries < RETRY_MAX_TRIES:
                sleep = backoff_delay(tries)
                logger.warning(f"[yellow]Timeout[/yellow] retrying in {sleep:.2f}s")
                time.sleep(sleep)
                continue
            raise
        except SpotifyException as err:
            if err.http_status == 429 and tries < RETRY_MAX_TRIES:
                retry_after = 1.0
                try:
                    retry_after = float((err.headers or {}).get("Retry-After", "1"))
                except (TypeError, ValueError):
                    pass
                sleep = max(retry_after, RETRY_BASE_SLEEP * (2 ** (tries - 1)))
                logger.warning(
                    f"[yellow]Spotify 429[/yellow] retrying in {sleep:.2f}s"
                )
                time.sleep(sleep)
                continue
            if err.http_status is not None and 500 <= err.http_status <= 599 and tries < RETRY_MAX_TRIES:
                sleep = backoff_delay(tries)
                logger.warning(f"[yellow]Spotify {err.http_status}[/yellow] retrying in {sleep:.2f}s")
                time.sleep(sleep)
                continue
            raise


__all__ = ["retry_call", "is_retriable_http_error", "backoff_delay"]
