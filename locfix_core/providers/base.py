"""
Provider adapter base and callback-to-async primitives.

OneShotResult turns a callback API that may fire repeatedly into a single
awaitable answer. Registration owns one platform subscription and releases
it exactly once. ProviderAdapter combines both: subscribe, wait for the
first answer under a timeout, always unsubscribe.
"""

import asyncio
import logging
import threading
from abc import ABC, abstractmethod
from typing import Any, Callable, Optional

from locfix_core.config import AcquisitionConfig
from locfix_core.errors import ProviderDisabledError
from locfix_core.metrics import get_metrics
from locfix_core.proto.location_sample import LocationSample, LocationSource
from .platform import LocationPlatform

logger = logging.getLogger(__name__)


class OneShotResult:
    """
    Set-once completion cell bridging platform callbacks to asyncio.

    Only the first resolve()/fail()/close() takes effect; the rest are
    no-ops. Safe to call from any thread, the future is completed on the
    owning event loop.

    Usage:
        cell = OneShotResult()
        platform.subscribe(lambda fix: cell.resolve(fix))
        fix = await cell.wait()
    """

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop or asyncio.get_running_loop()
        self._future = self._loop.create_future()
        self._lock = threading.Lock()
        self._claimed = False

    @property
    def completed(self) -> bool:
        """True once any resolve/fail/close has been accepted."""
        with self._lock:
            return self._claimed

    def resolve(self, value: Any) -> bool:
        """
        Complete with a value.

        Returns:
            True if this call completed the cell, False if it was already done
        """
        if not self._claim():
            return False
        self._loop.call_soon_threadsafe(self._set_result, value)
        return True

    def fail(self, exc: BaseException) -> bool:
        """
        Complete with an exception raised to the waiter.

        Returns:
            True if this call completed the cell, False if it was already done
        """
        if not self._claim():
            return False
        self._loop.call_soon_threadsafe(self._set_exception, exc)
        return True

    def close(self) -> None:
        """Refuse any later completion (waiter gone)."""
        self._claim()

    async def wait(self) -> Any:
        return await self._future

    def _claim(self) -> bool:
        with self._lock:
            if self._claimed:
                return False
            self._claimed = True
            return True

    def _set_result(self, value: Any) -> None:
        # Waiter may have been cancelled in the meantime
        if not self._future.done():
            self._future.set_result(value)

    def _set_exception(self, exc: BaseException) -> None:
        if not self._future.done():
            self._future.set_exception(exc)


class Registration:
    """
    Scoped platform subscription, released exactly once.

    Usage:
        with Registration(lambda: platform.remove_updates(listener), "gps"):
            await cell.wait()
    """

    def __init__(self, release_fn: Optional[Callable[[], None]], name: str):
        self._release_fn = release_fn
        self.name = name
        self._lock = threading.Lock()
        self._released = False

    @property
    def released(self) -> bool:
        with self._lock:
            return self._released

    def release(self) -> bool:
        """
        Unregister the subscription.

        Returns:
            True on the first call, False on any later call
        """
        with self._lock:
            if self._released:
                return False
            self._released = True

        if self._release_fn is not None:
            self._release_fn()
        logger.debug(f"{self.name}: subscription released")
        return True

    def __enter__(self) -> 'Registration':
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()


class ProviderAdapter(ABC):
    """
    Request one fix from a location source within a deadline.

    request() resolves to None on timeout, missing permission, no fix or
    an ordinary platform failure. Only ProviderDisabledError propagates.
    Cancelling the awaiting task releases the platform subscription.
    """

    source: LocationSource

    def __init__(
        self,
        platform: LocationPlatform,
        config: Optional[AcquisitionConfig] = None,
    ):
        self.platform = platform
        self.config = config or AcquisitionConfig()
        self.metrics = get_metrics()

    @property
    def name(self) -> str:
        return self.source.value

    async def request(self, timeout_ms: Optional[int]) -> Optional[LocationSample]:
        """
        Request a single fix.

        Args:
            timeout_ms: Budget in milliseconds; None waits until the caller
                cancels

        Returns:
            LocationSample tagged with this adapter's source, or None

        Raises:
            ProviderDisabledError: Provider switched off while waiting
        """
        if not self._can_request():
            return None

        cell = OneShotResult()
        logger.info(f"{self.name}: requesting fix"
                    + (f" ({timeout_ms}ms budget)" if timeout_ms is not None else ""))

        try:
            with self._register(cell):
                if timeout_ms is None:
                    sample = await cell.wait()
                else:
                    sample = await asyncio.wait_for(cell.wait(), timeout_ms / 1000.0)
        except asyncio.TimeoutError:
            logger.info(f"{self.name}: no fix within {timeout_ms}ms")
            self.metrics.increment_drop('provider_timeout')
            return None
        except ProviderDisabledError:
            logger.warning(f"{self.name}: provider disabled while waiting for a fix")
            self.metrics.increment_drop('provider_disabled')
            raise
        except asyncio.CancelledError:
            logger.debug(f"{self.name}: request cancelled")
            raise
        except Exception as e:
            logger.warning(f"{self.name}: provider failure: {e}")
            self.metrics.increment_drop('provider_failure')
            return None
        finally:
            cell.close()

        if sample is None:
            logger.info(f"{self.name}: provider answered without a fix")
            self.metrics.increment_drop('provider_no_fix')
            return None

        self.metrics.increment(f'{self.name.lower()}_fixes_received')
        logger.info(f"{self.name}: fix received {sample}")
        return sample

    def _tag(self, sample: Optional[LocationSample]) -> Optional[LocationSample]:
        """Attribute a platform sample to this adapter's source."""
        if sample is None or sample.source is self.source:
            return sample
        return sample.with_source(self.source)

    def _can_request(self) -> bool:
        """Capability pre-check; default requires fine and coarse permission."""
        if not self.platform.has_fine_and_coarse_location_permission():
            logger.warning(f"{self.name}: location permission missing")
            self.metrics.increment_drop('provider_permission_missing')
            return False
        return True

    @abstractmethod
    def _register(self, cell: OneShotResult) -> Registration:
        """Subscribe to the platform, completing cell on the first answer."""
