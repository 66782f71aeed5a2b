"""
HTTP helpers.

This module centralizes the minimal HTTP client logic used by the remote document store.

Design goals:
- Small surface area (GET JSON, PUT JSON).
- Deterministic defaults (timeout + User-Agent).
- Raise on non-2xx so callers can decide how to fail (the mirrored store falls back to local).
"""

from __future__ import annotations

from typing import Any

import httpx


DEFAULT_USER_AGENT = "rvplanner/0.1.0 (+https://local)"


def _headers(extra: dict[str, str] | None) -> dict[str, str]:
    request_headers = {"User-Agent": DEFAULT_USER_AGENT}
    if extra:
        request_headers.update(extra)
    return request_headers


def get_json(
    url: str,
    *,
    params: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
    timeout_seconds: float = 10,
) -> Any:
    """GET `url` and return the decoded JSON response.

    A 404 returns None (the document does not exist yet).

    Raises:
        httpx.HTTPError: On transport errors or other non-2xx status codes.
        ValueError: If the response body is not valid JSON.
    """
    with httpx.Client(timeout=timeout_seconds) as client:
        resp = client.get(url, params=params, headers=_headers(headers))
        if resp.status_code == 404:
            return None
        resp.raise_for_status()
        return resp.json()


def put_json(
    url: str,
    *,
    payload: Any,
    headers: dict[str, str] | None = None,
    timeout_seconds: float = 10,
) -> Any:
    """PUT `payload` as a JSON body and return the decoded JSON response (or None if empty).

    Raises:
        httpx.HTTPError: On transport errors or non-2xx status codes.
    """
    with httpx.Client(timeout=timeout_seconds) as client:
        resp = client.put(url, json=payload, headers=_headers(headers))
        resp.raise_for_status()
        if not resp.content:
            return None
        return resp.json()
