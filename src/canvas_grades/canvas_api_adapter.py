"""
Canvas API Adapter

This module provides a dedicated adapter for interacting with the Canvas API.
Every call is an authenticated GET that returns decoded JSON; any non-2xx
status or transport failure is raised as UpstreamError so callers can decide
whether it is fatal for the whole request or only for one course.
"""

import logging
from typing import Any

import requests

from canvas_grades.exceptions import UpstreamError

# Configure logging
logger = logging.getLogger(__name__)

PAGE_SIZE = 100

# Query parameters as (key, value) pairs so repeated keys like include[] survive
Params = list[tuple[str, Any]]


def normalize_canvas_base_url(base_url: str) -> str:
    """Normalize a user-provided Canvas URL to the host root."""
    normalized = base_url.strip().rstrip("/")
    if normalized.lower().endswith("/api/v1"):
        normalized = normalized[: -len("/api/v1")]
    return normalized


class CanvasApiAdapter:
    """
    Adapter for read-only calls against the Canvas LMS REST API.

    The adapter holds no per-request state; the access token is passed on
    every call and never stored.
    """

    def __init__(
        self,
        api_url: str,
        timeout: float = 20,
        session: requests.Session | None = None,
    ):
        """
        Initialize the Canvas API adapter.

        Args:
            api_url: Canvas instance URL, with or without the /api/v1 suffix
            timeout: Per-request timeout in seconds
            session: Optional requests session (one is created if omitted)
        """
        self.api_url = normalize_canvas_base_url(api_url)
        self.timeout = timeout
        self.session = session or requests.Session()

    def fetch_json(self, path: str, token: str, params: Params | None = None) -> Any:
        """
        GET a Canvas API path and return the decoded JSON body.

        Args:
            path: Path relative to /api/v1, e.g. "courses/12/enrollments"
            token: Bearer access token of the caller
            params: Optional query parameters

        Returns:
            Decoded JSON value

        Raises:
            UpstreamError: On transport failure, non-2xx status or non-JSON body
        """
        url = f"{self.api_url}/api/v1/{path.lstrip('/')}"
        headers = {
            "Authorization": f"Bearer {token}",
            "Accept": "application/json",
        }
        try:
            response = self.session.get(
                url, headers=headers, params=params, timeout=self.timeout
            )
        except requests.RequestException as e:
            logger.error(f"Canvas request to {path} failed: {e}")
            raise UpstreamError(None, str(e)) from e

        if not 200 <= response.status_code < 300:
            logger.warning(f"Canvas returned {response.status_code} for {path}")
            raise UpstreamError(response.status_code, response.text)

        try:
            return response.json()
        except ValueError as e:
            raise UpstreamError(response.status_code, response.text) from e


def fetch_all_pages(
    client: CanvasApiAdapter,
    path: str,
    token: str,
    params: Params | None = None,
    per_page: int = PAGE_SIZE,
) -> list[Any]:
    """
    Fetch every page of a list endpoint and concatenate the rows.

    Canvas does not promise a total page count, so a page holding exactly
    `per_page` rows is taken to mean another page may follow; a short or
    empty page ends the walk. Pages are requested sequentially.

    Raises:
        UpstreamError: If any page fails or is not a JSON list
    """
    rows: list[Any] = []
    page = 1
    while True:
        page_params = list(params or []) + [("per_page", per_page), ("page", page)]
        payload = client.fetch_json(path, token, page_params)
        if not isinstance(payload, list):
            raise UpstreamError(None, f"expected a list from {path}, page {page}")
        rows.extend(payload)
        if len(payload) < per_page:
            break
        page += 1
    logger.debug(f"Fetched {len(rows)} rows from {path} over {page} page(s)")
    return rows
