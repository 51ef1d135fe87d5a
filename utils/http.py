"""Simple HTTP helper for fetching JSON from APIs."""

from typing import Any

import requests

from utils.config import Config
from utils.logging import get_logger

logger = get_logger("utils.http")

_DEFAULT_HEADERS = {
    "Accept": "application/json",
    "User-Agent": "calldata-decoder",
}


def fetch_json(
    url: str,
    method: str = "get",
    timeout: int | None = None,
    headers: dict[str, str] | None = None,
    **kwargs: Any,
) -> dict | list | None:
    """Fetch JSON from a URL with error handling.

    Returns the parsed JSON document on success, or None on failure. Failures
    are logged and never retried.
    """
    if timeout is None:
        timeout = Config.get_request_timeout()
    request_headers = dict(_DEFAULT_HEADERS)
    if headers:
        request_headers.update(headers)
    try:
        resp = requests.request(method, url, timeout=timeout, headers=request_headers, **kwargs)
        if resp.status_code != 200:
            logger.error("HTTP %s for %s: %s", resp.status_code, url, resp.text[:200])
            return None
        return resp.json()
    except Exception as e:
        logger.error("Request failed for %s: %s", url, e)
        return None
