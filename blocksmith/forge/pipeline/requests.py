# blocksmith/forge/pipeline/requests.py
from __future__ import annotations

import logging
from concurrent.futures import CancelledError, Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import dataclass, field
from typing import Callable, Literal, Optional

from blocksmith.forge.errors import RequestError, StateError

logger = logging.getLogger(__name__)

RequestKind = Literal["transform", "generate"]


@dataclass
class PendingRequest:
    """
    Handle for one outstanding image request.

    The worker only ever sees the immutable inputs it was submitted with
    (PNG bytes and the prompt); results come back as bytes.
    """
    kind: RequestKind
    prompt: str
    future: "Future[Optional[bytes]]"
    cancelled: bool = field(default=False)
    on_cancel: Optional[Callable[["PendingRequest"], None]] = field(default=None, repr=False)

    def cancel(self) -> None:
        """
        Drop the request and free the slot. A call already running is left
        to finish; its result is ignored.
        """
        if self.cancelled:
            return
        self.cancelled = True
        self.future.cancel()
        if self.on_cancel is not None:
            self.on_cancel(self)


class RequestRunner:
    """
    At most one request in flight. Submitting while another is outstanding
    raises StateError, which mirrors the UI disabling its buttons.
    """

    def __init__(self) -> None:
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="blocksmith-request")
        self._pending: Optional[PendingRequest] = None

    @property
    def busy(self) -> bool:
        return self._pending is not None

    @property
    def pending(self) -> Optional[PendingRequest]:
        return self._pending

    def submit(self, kind: RequestKind, prompt: str, fn: Callable[[], Optional[bytes]]) -> PendingRequest:
        if self._pending is not None:
            raise StateError(f"a {self._pending.kind} request is already in flight")
        future = self._executor.submit(fn)
        self._pending = PendingRequest(kind=kind, prompt=prompt, future=future, on_cancel=self._release)
        logger.info("submitted %s request", kind)
        return self._pending

    def _release(self, pending: PendingRequest) -> None:
        if self._pending is pending:
            self._pending = None
            logger.info("cancelled %s request", pending.kind)

    def collect(self, pending: PendingRequest, *, timeout: float | None = None) -> Optional[bytes]:
        """
        Wait for `pending` and release the slot.

        Returns the PNG bytes, or None for "no change" (model returned
        nothing, or the request was cancelled). Failures raise RequestError.
        """
        if pending.cancelled:
            return None
        if pending is not self._pending:
            raise StateError("request is not the one in flight")

        try:
            return pending.future.result(timeout=timeout)
        except CancelledError:
            return None
        except FutureTimeoutError as e:
            pending.cancelled = True
            pending.future.cancel()
            logger.warning("%s request timed out after %ss", pending.kind, timeout)
            raise RequestError(f"{pending.kind} request timed out") from e
        except RequestError as e:
            logger.warning("%s request failed: %s: %s", pending.kind, type(e).__name__, e)
            raise
        except Exception as e:
            logger.warning("%s request failed: %s: %s", pending.kind, type(e).__name__, e)
            raise RequestError(f"{pending.kind} request failed: {type(e).__name__}: {e}") from e
        finally:
            self._pending = None

    def shutdown(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None
        self._executor.shutdown(wait=False, cancel_futures=True)
