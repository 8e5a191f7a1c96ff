"""HTTP client layer for compattable."""

from __future__ import annotations

from collections.abc import Iterator, Mapping, Sequence
from concurrent.futures import ThreadPoolExecutor
from contextlib import contextmanager
from contextvars import ContextVar, copy_context
import json
import logging
from typing import Any, Union

import httpx

from ._version import __version__
from .constants import (
    DEFAULT_TIMEOUT_SECONDS,
    DEFAULT_WORKERS,
    FEATURE_DATA_URL,
    SEARCH_QUERY_URL,
)
from .exceptions import CompatError, ContentError, HttpStatusError, NetworkError, RequestTimeoutError
from .parse_search import parse_search_payload

LOGGER = logging.getLogger(__name__)

_SHARED_CLIENT: ContextVar[httpx.Client | None] = ContextVar(
    "compattable_shared_client", default=None
)

FetchResult = Union[Any, CompatError]


def _build_headers() -> dict[str, str]:
    return {
        "User-Agent": f"compattable/{__version__}",
        "Accept": "application/json",
    }


@contextmanager
def use_shared_client(
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
) -> Iterator[httpx.Client]:
    """Provide a reusable HTTP client for all fetches within a CLI run."""
    with httpx.Client(timeout=timeout, follow_redirects=True, headers=_build_headers()) as client:
        token = _SHARED_CLIENT.set(client)
        try:
            yield client
        finally:
            _SHARED_CLIENT.reset(token)


def fetch_text(
    url: str,
    params: Mapping[str, str] | None = None,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
) -> str:
    """GET a document with deterministic behavior and friendly failures."""
    request_params = dict(params or {})
    shared_client = _SHARED_CLIENT.get()
    retry_once = True
    while True:
        LOGGER.debug("Requesting %s params=%s", url, request_params)
        try:
            if shared_client is None or timeout != DEFAULT_TIMEOUT_SECONDS:
                with httpx.Client(
                    timeout=timeout, follow_redirects=True, headers=_build_headers()
                ) as client:
                    response = client.get(url, params=request_params)
            else:
                response = shared_client.get(url, params=request_params)
        except httpx.TimeoutException as exc:
            raise RequestTimeoutError(url) from exc
        except httpx.ConnectError as exc:
            if retry_once:
                retry_once = False
                LOGGER.debug("Connect error for %s, retrying once", url)
                continue
            raise NetworkError(url, cause=exc.__class__.__name__) from exc
        except httpx.RequestError as exc:
            raise NetworkError(url, cause=exc.__class__.__name__) from exc

        LOGGER.info("Response status %s for %s", response.status_code, response.url)
        if response.status_code != 200:
            raise HttpStatusError(response.status_code, str(response.url))

        body = response.text
        if not body.strip():
            raise ContentError(str(response.url))
        return body


def _parse_json_payload(raw: str, url: str) -> Any:
    try:
        return json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ContentError(url) from exc


def fetch_json(
    url: str,
    params: Mapping[str, str] | None = None,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
) -> Any:
    return _parse_json_payload(fetch_text(url, params=params, timeout=timeout), url)


def fetch_search_feature_ids(query: str) -> list[str]:
    """Fetch ordered feature IDs from caniuse search backend."""
    LOGGER.info("Searching feature IDs for '%s'", query)
    return parse_search_payload(fetch_json(SEARCH_QUERY_URL, params={"search": query}))


def fetch_feature_payload(feature_id: str) -> Any:
    """Fetch the raw support-data payload for one feature."""
    LOGGER.info("Fetching data for feature ID %s", feature_id)
    return fetch_json(FEATURE_DATA_URL, params={"type": "support-data", "feat": feature_id})


def _fetch_or_error(feature_id: str) -> FetchResult:
    try:
        return fetch_feature_payload(feature_id)
    except CompatError as exc:
        LOGGER.debug("Fetching %s failed: %s", feature_id, exc)
        return exc


def fetch_feature_payloads(
    feature_ids: Sequence[str],
    *,
    workers: int = DEFAULT_WORKERS,
) -> list[tuple[str, FetchResult]]:
    """Fetch several features in parallel.

    Results keep the order of ``feature_ids``; a failed fetch yields its
    CompatError in place of the payload.
    """
    if not feature_ids:
        return []
    workers = max(1, min(workers, len(feature_ids)))
    if workers == 1:
        return [(feature_id, _fetch_or_error(feature_id)) for feature_id in feature_ids]

    # Each task runs in a copy of the caller's context so the shared client is visible.
    with ThreadPoolExecutor(max_workers=workers) as executor:
        futures = [
            executor.submit(copy_context().run, _fetch_or_error, feature_id)
            for feature_id in feature_ids
        ]
        return [
            (feature_id, future.result()) for feature_id, future in zip(feature_ids, futures)
        ]
