"""Run decodes in the background and keep only the result of the latest request.

A slow signature lookup can finish after the input that triggered it has
already been replaced. Each submission gets an increasing request id and a
finished decode is published only while its id is still the newest one.
"""

import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable

from calldata.calldata_decoder import CalldataDecoder
from calldata.results import DecodeOutcome
from utils.logging import get_logger

logger = get_logger("calldata.session")

ResultCallback = Callable[[int, DecodeOutcome], None]


class DecodeSession:
    def __init__(self, decoder: CalldataDecoder, on_result: ResultCallback | None = None, max_workers: int = 4):
        self.decoder = decoder
        self.on_result = on_result
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="decode")
        self._lock = threading.Lock()
        self._publish_lock = threading.Lock()
        self._latest_request_id = 0
        self._published: tuple[int, DecodeOutcome] | None = None

    def __enter__(self) -> "DecodeSession":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    @property
    def latest_request_id(self) -> int:
        with self._lock:
            return self._latest_request_id

    @property
    def result(self) -> DecodeOutcome | None:
        """Outcome of the newest request, or None while it is still running."""
        with self._lock:
            if self._published is None or self._published[0] != self._latest_request_id:
                return None
            return self._published[1]

    def submit(self, data: str, signature: str | None = None, has_selector: bool = True) -> Future:
        return self._submit(lambda: self.decoder.decode_calldata(data, signature=signature, has_selector=has_selector))

    def submit_struct(self, definitions: str, data: str, struct_name: str | None = None) -> Future:
        return self._submit(lambda: self.decoder.decode_struct(definitions, data, struct_name=struct_name))

    def close(self) -> None:
        self._executor.shutdown(wait=True)

    def _submit(self, task: Callable[[], DecodeOutcome]) -> Future:
        with self._lock:
            self._latest_request_id += 1
            request_id = self._latest_request_id
        future = self._executor.submit(self._run, request_id, task)
        return future

    def _run(self, request_id: int, task: Callable[[], DecodeOutcome]) -> DecodeOutcome:
        try:
            outcome = task()
        except Exception as e:
            logger.error("Decode request %s failed: %s", request_id, e, exc_info=True)
            outcome = DecodeOutcome.error(f"Unexpected error: {e}")
        self._publish(request_id, outcome)
        return outcome

    def _publish(self, request_id: int, outcome: DecodeOutcome) -> None:
        # held across the check and the callback so callbacks arrive in request order
        with self._publish_lock:
            with self._lock:
                if request_id != self._latest_request_id:
                    logger.debug(
                        "Discarding stale result of request %s (latest is %s)", request_id, self._latest_request_id
                    )
                    return
                self._published = (request_id, outcome)
            if self.on_result is not None:
                self.on_result(request_id, outcome)
