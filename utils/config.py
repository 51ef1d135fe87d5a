"""
Configuration module for decoder settings and environment variable handling.

This module centralizes configuration settings and provides a consistent
interface for accessing environment variables and other configuration values.
"""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from utils.logging import get_logger

# Load environment variables from .env file
load_dotenv()

logger = get_logger("utils.config")


@dataclass(frozen=True)
class DecoderConfig:
    """Settings that shape a single calldata decoder instance."""

    max_depth: int = 16
    cache_ttl: int = 3600
    cache_max_size: int = 1000
    lookup_enabled: bool = True


class Config:
    """Global configuration handler."""

    # Default values that can be overridden by environment variables
    DEFAULT_TIMEOUT = 30  # seconds
    DEFAULT_CACHE_TTL = 60 * 60  # one hour
    DEFAULT_CACHE_MAX_SIZE = 1000
    DEFAULT_MAX_NESTING_DEPTH = 16
    DEFAULT_FOURBYTE_API_URL = "https://www.4byte.directory/api/v1/signatures/"
    DEFAULT_SOURCIFY_API_URL = "https://api.4byte.sourcify.dev/signature-database/v1/lookup"

    @staticmethod
    def get_env(key: str, default: Optional[str] = None) -> Optional[str]:
        """Get environment variable with fallback to default."""
        return os.getenv(key, default)

    @staticmethod
    def get_env_int(key: str, default: int) -> int:
        """Get environment variable as integer with fallback to default."""
        value = os.getenv(key)
        if value is None:
            return default
        try:
            return int(value)
        except ValueError:
            logger.warning("Invalid integer value for %s: %s. Using default %s", key, value, default)
            return default

    @staticmethod
    def get_env_bool(key: str, default: bool) -> bool:
        """Get environment variable as boolean with fallback to default."""
        value = os.getenv(key)
        if value is None:
            return default
        return value.lower() in ("true", "yes", "1")

    @classmethod
    def get_request_timeout(cls) -> int:
        """Get HTTP request timeout in seconds."""
        return cls.get_env_int("REQUEST_TIMEOUT", cls.DEFAULT_TIMEOUT)

    @classmethod
    def get_signature_cache_ttl(cls) -> int:
        """Get how long a signature lookup stays fresh, in seconds."""
        return cls.get_env_int("SIGNATURE_CACHE_TTL", cls.DEFAULT_CACHE_TTL)

    @classmethod
    def get_signature_cache_max_size(cls) -> int:
        """Get the maximum number of cached selector lookups."""
        return cls.get_env_int("SIGNATURE_CACHE_MAX_SIZE", cls.DEFAULT_CACHE_MAX_SIZE)

    @classmethod
    def get_max_nesting_depth(cls) -> int:
        """Get the maximum depth of nested calls decoded inside bytes parameters."""
        depth = cls.get_env_int("MAX_NESTING_DEPTH", cls.DEFAULT_MAX_NESTING_DEPTH)
        if depth < 0:
            logger.warning("Negative MAX_NESTING_DEPTH %s. Using default %s", depth, cls.DEFAULT_MAX_NESTING_DEPTH)
            return cls.DEFAULT_MAX_NESTING_DEPTH
        return depth

    @classmethod
    def is_signature_lookup_enabled(cls) -> bool:
        """Whether remote signature directories may be queried."""
        return cls.get_env_bool("SIGNATURE_LOOKUP_ENABLED", True)

    @classmethod
    def get_fourbyte_api_url(cls) -> str:
        return cls.get_env("FOURBYTE_API_URL") or cls.DEFAULT_FOURBYTE_API_URL

    @classmethod
    def get_sourcify_api_url(cls) -> str:
        return cls.get_env("SOURCIFY_API_URL") or cls.DEFAULT_SOURCIFY_API_URL

    @classmethod
    def get_decoder_config(cls) -> DecoderConfig:
        """Get the full decoder configuration from the environment."""
        return DecoderConfig(
            max_depth=cls.get_max_nesting_depth(),
            cache_ttl=cls.get_signature_cache_ttl(),
            cache_max_size=cls.get_signature_cache_max_size(),
            lookup_enabled=cls.is_signature_lookup_enabled(),
        )
