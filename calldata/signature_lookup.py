"""Resolve 4-byte function selectors to candidate text signatures.

Checks the local known_selectors table first, then the injected TTL cache,
and finally falls back to the 4byte.directory API and the Sourcify signature
database. Directory entries are unverified and collide, so every candidate is
re-hashed and dropped unless it really produces the selector. Candidates are
ordered most canonical first (oldest submission on 4byte.directory).
"""

import re
from typing import Protocol

from eth_utils import function_signature_to_4byte_selector

from calldata.known_selectors import KNOWN_SELECTORS
from utils.cache import TTLCache
from utils.config import Config
from utils.http import fetch_json
from utils.logging import get_logger

logger = get_logger("calldata.signature_lookup")

_SELECTOR_RE = re.compile(r"0x[0-9a-f]{8}")


class SignatureResolver(Protocol):
    def lookup(self, selector: str) -> list[str]:
        """Return candidate signatures for ``selector``, most canonical first, or []."""
        ...


def normalize_selector(selector: str) -> str:
    """Return the selector as ``0x`` + 8 lowercase hex digits.

    Raises:
        ValueError: if the selector is not 4 bytes of hex.
    """
    text = selector.strip().lower()
    if not text.startswith("0x"):
        text = "0x" + text
    if not _SELECTOR_RE.fullmatch(text):
        raise ValueError(f"Invalid selector {selector!r}. Expected 8 hex characters (4 bytes)")
    return text


def signature_matches_selector(signature: str, selector: str) -> bool:
    return "0x" + function_signature_to_4byte_selector(signature).hex() == selector


class FourByteSignatureResolver:
    """Signature resolver backed by public 4byte directories."""

    def __init__(
        self,
        cache: TTLCache[list[str]] | None = None,
        known_selectors: dict[str, str] | None = None,
        lookup_enabled: bool | None = None,
        fourbyte_url: str | None = None,
        sourcify_url: str | None = None,
    ):
        if cache is None:
            cache = TTLCache(ttl=Config.get_signature_cache_ttl(), max_size=Config.get_signature_cache_max_size())
        self.cache = cache
        self.known_selectors = KNOWN_SELECTORS if known_selectors is None else known_selectors
        self.lookup_enabled = Config.is_signature_lookup_enabled() if lookup_enabled is None else lookup_enabled
        self.fourbyte_url = fourbyte_url or Config.get_fourbyte_api_url()
        self.sourcify_url = sourcify_url or Config.get_sourcify_api_url()

    def lookup(self, selector: str) -> list[str]:
        selector = normalize_selector(selector)

        # 1. Local lookup table (no API call needed)
        if selector in self.known_selectors:
            return [self.known_selectors[selector]]

        # 2. TTL cache from previous API calls, empty results included
        cached = self.cache.get(selector)
        if cached is not None:
            return list(cached)

        if not self.lookup_enabled:
            return []

        # 3. Remote directories
        signatures = self._fetch_remote(selector)
        if signatures is None:
            # network failure: not cached, the next lookup tries again
            return []
        self.cache.set(selector, signatures)
        return list(signatures)

    def _fetch_remote(self, selector: str) -> list[str] | None:
        fourbyte = self._fetch_from_4byte(selector)
        if fourbyte:
            return fourbyte
        sourcify = self._fetch_from_sourcify(selector)
        if sourcify:
            return sourcify
        if fourbyte is None or sourcify is None:
            return None
        return []

    def _fetch_from_4byte(self, selector: str) -> list[str] | None:
        data = fetch_json(self.fourbyte_url, params={"hex_signature": selector})
        if data is None:
            return None

        candidates: list[tuple[str, str]] = []
        try:
            for result in data.get("results") or []:
                signature = (result.get("text_signature") or "").strip()
                if signature and signature_matches_selector(signature, selector):
                    candidates.append((result.get("created_at") or "", signature))
        except (AttributeError, TypeError):
            logger.warning("Unexpected 4byte.directory response for %s", selector)
            return []

        # ISO-8601 timestamps sort chronologically as text
        candidates.sort(key=lambda candidate: candidate[0])
        return list(dict.fromkeys(signature for _, signature in candidates))

    def _fetch_from_sourcify(self, selector: str) -> list[str] | None:
        data = fetch_json(self.sourcify_url, params={"function": selector, "filter": "true"})
        if data is None:
            return None

        try:
            results = data.get("result", {}).get("function", {}).get(selector) or []
            signatures = [
                result.get("name", "").strip()
                for result in results
                if not result.get("filtered") and signature_matches_selector(result.get("name", "").strip(), selector)
            ]
        except (AttributeError, TypeError):
            logger.warning("Unexpected Sourcify response for %s", selector)
            return []
        return list(dict.fromkeys(signatures))

