"""Async-drain probe: versions delivered through a completion callback.

Some integrations only expose their version data through a legacy
asynchronous load operation: the caller passes a completion callback and
gets back a *step handle* -- a cooperative iterator (generator) that must be
advanced until exhausted, or an awaitable. The callback fires at some point
while the handle is being driven.

``AsyncDrainProbe`` drives such an operation to completion before returning
control to the resolver:

1. ``start(callback)`` is invoked on a worker thread and returns the handle.
2. The handle is drained on that thread (``next()`` until exhausted, or
   ``asyncio.run`` for awaitables).
3. The resolver's thread blocks on a ``concurrent.futures.Future`` with a
   bounded timeout, so a callback that never fires (or a handle that never
   finishes) cannot hang the pipeline.

The result is absent on timeout, when the handle completes without the
callback ever being invoked, or when the extractor finds nothing in the
delivered payload. On timeout an iterator handle is closed at its next
step and its worker thread exits. Awaitables and handles that block inside
a single step cannot be interrupted: their daemon worker is abandoned.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import threading
from collections.abc import Callable, Iterable
from concurrent.futures import Future
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Any

from versiontracker.exceptions import ProbeError
from versiontracker.probes.base import Probe, ProbeResult
from versiontracker.probes.capability import (
    CapabilityRegistry,
    default_capabilities,
    read_member,
)
from versiontracker.snapshot.models import VersionInfo

logger = logging.getLogger(__name__)

# Upper bound (seconds) on how long one drain may block the resolver.
DEFAULT_TIMEOUT: float = 30.0

Callback = Callable[..., None]
StartFn = Callable[[Callback], Any]
Extractor = Callable[[Any], ProbeResult]


def drive(handle: Any, cancel: threading.Event | None = None) -> None:
    """Advance a step handle until it completes or ``cancel`` is set.

    Args:
        handle: A generator/iterator, an awaitable, or None (the operation
            completed synchronously inside ``start``).
        cancel: Checked between steps of an iterator handle. Once set, the
            handle is closed (if it supports ``close()``) and left unfinished.
    """
    if handle is None:
        return
    if inspect.isawaitable(handle):
        async def _await() -> None:
            await handle

        asyncio.run(_await())
        return
    if isinstance(handle, Iterable):
        for _ in handle:
            if cancel is not None and cancel.is_set():
                close = getattr(handle, "close", None)
                if callable(close):
                    close()
                return
        return
    raise ProbeError(f"Unsupported step handle: {type(handle).__name__}")


class AsyncDrainProbe(Probe):
    """Drain a callback-driven operation synchronously, with a timeout.

    Args:
        start: Function that registers the completion callback and returns
            the step handle. Returning None without invoking the callback
            means "operation unavailable".
        extract: Maps the delivered payload to a ``ProbeResult``.
        timeout: Maximum seconds to wait for the operation to complete.
        description: Human-readable target for listings and log lines.
    """

    def __init__(
        self,
        start: StartFn,
        extract: Extractor,
        timeout: float = DEFAULT_TIMEOUT,
        description: str = "",
    ) -> None:
        if timeout <= 0:
            raise ValueError("timeout must be positive")
        self.start = start
        self.extract = extract
        self.timeout = timeout
        self.description = description or getattr(start, "__name__", "operation")

    @property
    def kind(self) -> str:
        return "async-drain"

    @property
    def target(self) -> str:
        return self.description

    def probe(self) -> ProbeResult:
        delivered: list[Any] = []
        done: Future[None] = Future()
        cancel = threading.Event()

        def callback(payload: Any = None) -> None:
            delivered.append(payload)

        def worker() -> None:
            try:
                drive(self.start(callback), cancel)
            except BaseException as exc:  # handed over to the waiting thread
                done.set_exception(exc)
            else:
                done.set_result(None)

        thread = threading.Thread(
            target=worker, name=f"drain-{self.description}", daemon=True,
        )
        thread.start()

        try:
            done.result(timeout=self.timeout)
        except FutureTimeoutError:
            cancel.set()
            logger.warning(
                "Timed out after %.1fs waiting for %s", self.timeout, self.description,
            )
            return ProbeResult.absent()
        except ProbeError:
            raise
        except Exception as exc:
            raise ProbeError(f"{self.description} failed: {exc}") from exc

        payloads = [p for p in delivered if p is not None]
        if not payloads:
            logger.warning(
                "%s completed without delivering any data "
                "(possible network problem)", self.description,
            )
            return ProbeResult.absent()
        return self.extract(payloads[-1])

    @classmethod
    def from_capability(
        cls,
        capability_name: str,
        method: str,
        extract: Extractor,
        timeout: float = DEFAULT_TIMEOUT,
        registry: CapabilityRegistry | None = None,
    ) -> AsyncDrainProbe:
        """Build a probe that calls ``method(callback)`` on a registered capability."""

        def start(callback: Callback) -> Any:
            reg = registry if registry is not None else default_capabilities()
            capability = reg.get(capability_name)
            if capability is None:
                logger.warning("Capability not registered: %s", capability_name)
                return None
            operation = getattr(capability, method, None)
            if not callable(operation):
                logger.warning("%s has no callable %s", capability_name, method)
                return None
            return operation(callback)

        return cls(start, extract, timeout=timeout, description=f"{capability_name}.{method}")


# ---------------------------------------------------------------------------
# Payload extractors
# ---------------------------------------------------------------------------


def network_version(network: Any, platform_key: str = "Unity") -> VersionInfo:
    """Read ``DisplayName`` and ``CurrentVersions.<platform_key>`` from a network entry."""
    name = read_member(network, "DisplayName")
    version = read_member(network, f"CurrentVersions.{platform_key}")
    return VersionInfo(
        name=str(name) if name is not None else None,
        version=str(version) if version is not None else None,
    )


def plugin_data_extractor(payload: Any) -> ProbeResult:
    """Extract adapter versions from a mediation plugin-data payload.

    The payload exposes ``MediatedNetworks`` and ``PartnerMicroSdks``
    sequences (as attributes or mapping keys). Each entry carries a
    ``DisplayName`` and a ``CurrentVersions.Unity`` version. Missing
    sequences make the whole result absent; ``None`` entries are skipped.
    """
    infos: list[VersionInfo] = []
    for field_name in ("MediatedNetworks", "PartnerMicroSdks"):
        networks = read_member(payload, field_name)
        if networks is None:
            logger.error("%s not found in plugin data", field_name)
            return ProbeResult.absent()
        for network in networks:
            if network is None:
                continue
            infos.append(network_version(network))
    return ProbeResult.of_components(infos)
