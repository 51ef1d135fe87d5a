import functools
import os
import time
from typing import Dict, List
from urllib.parse import urlparse

from dotenv import load_dotenv
from web3 import Web3
from web3.exceptions import ProviderConnectionError
from web3.providers.rpc import HTTPProvider

from utils.chains import Chain
from utils.config import Config
from utils.logging import get_logger

load_dotenv()

logger = get_logger("utils.web3_wrapper")


def retry_with_provider_rotation(func):
    @functools.wraps(func)
    def wrapper(self, *args, **kwargs):
        errors = {}
        for attempt in range(self.max_retries * len(self.provider_urls)):
            try:
                return func(self, *args, **kwargs)
            except Exception as e:
                current_url = self.endpoint_uri
                errors[current_url] = str(e)
                logger.warning("Failed on %s: %s", current_url, e)
                time.sleep(self.backoff_factor * (2**attempt))
                self._rotate_provider()

        raise ProviderConnectionError(
            "All providers failed. Errors:\n" + "\n".join(f"{url}: {err}" for url, err in errors.items())
        )

    return wrapper


def _validate_urls(urls: List[str]) -> List[str]:
    """Drop empty or malformed provider URLs."""
    valid_urls = []
    for url in urls:
        if not url:
            continue
        parsed = urlparse(url)
        if not parsed.scheme or not parsed.netloc:
            logger.warning("Invalid URL format: %s", url)
            continue
        valid_urls.append(url)
    return valid_urls


class Web3Client:
    """Read-only web3 access for one chain, rotating across configured providers."""

    def __init__(self, chain: Chain, max_retries: int = 1, backoff_factor: float = 0.5):
        self.chain = chain
        self.max_retries = max_retries
        self.backoff_factor = backoff_factor
        self.provider_urls = self._get_provider_urls()
        self.endpoint_uri = self.provider_urls[0]
        self.w3 = self._connect(self.endpoint_uri)

    def _get_provider_urls(self) -> List[str]:
        """Get provider URLs for the chain from environment variables"""
        urls = [os.getenv(f"PROVIDER_URL_{self.chain.name.upper()}")]
        for i in range(1, 4):
            urls.append(os.getenv(f"PROVIDER_URL_{self.chain.name.upper()}_{i}"))

        urls = _validate_urls(urls)
        if not urls:
            raise ValueError(f"No providers found for chain {self.chain.name}")
        return urls

    def _connect(self, url: str) -> Web3:
        return Web3(HTTPProvider(url, request_kwargs={"timeout": Config.get_request_timeout()}))

    def _rotate_provider(self) -> None:
        """Switch to the next provider in the list"""
        current_index = self.provider_urls.index(self.endpoint_uri)
        next_index = (current_index + 1) % len(self.provider_urls)
        self.endpoint_uri = self.provider_urls[next_index]
        self.w3 = self._connect(self.endpoint_uri)
        logger.info("Switching to provider: %s", self.endpoint_uri)

    @retry_with_provider_rotation
    def get_transaction_input(self, tx_hash: str) -> str:
        """Return the calldata of a transaction as a 0x-prefixed hex string."""
        tx = self.w3.eth.get_transaction(tx_hash)
        data = tx["input"]
        if isinstance(data, (bytes, bytearray)):
            return "0x" + bytes(data).hex()
        return data if data.startswith("0x") else "0x" + data


class ChainManager:
    _instances: Dict[Chain, Web3Client] = {}

    @classmethod
    def get_client(cls, chain: Chain) -> Web3Client:
        """Get or create Web3Client instance for specified chain"""
        if chain not in cls._instances:
            cls._instances[chain] = Web3Client(chain)
        return cls._instances[chain]
