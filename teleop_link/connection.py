"""
ConnectionManager: keeps one logical control connection alive.

State machine:

    DISCONNECTED --connect()--> CONNECTING --open--> CONNECTED
         ^                          |                    |
         +------- close/error ------+---- close/error ---+

Per session (one successful open) the manager owns:
  - the Transport
  - one Coalescer bound to it
  - one handle + ChangeGate per mounted InputSource

All of it is torn down together when the transport closes or errors, and the
pending coalesced value goes with it. A watchdog runs for the manager's whole
life and calls connect() whenever the state is DISCONNECTED: fixed period, no
backoff, no attempt cap.

Everything here runs on the scheduler's loop; nothing is locked.
"""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from functools import partial
from typing import Callable, List, Optional, Sequence

from teleop_link.controllers.types import ControlVector, InputHandle, InputSource, VectorSink
from teleop_link.drive.filters import ChangeGate, Coalescer
from teleop_link.drive.types import LinkConfig
from teleop_link.protocol.types import Message, Transport, TransportError, TransportHandlers
from teleop_link.scheduling import PeriodicTask, Scheduler

logger = logging.getLogger(__name__)


class ConnectionState(Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"


StateListener = Callable[[ConnectionState, ConnectionState], None]


class ConnectionManager:
    def __init__(
        self,
        transport_factory: Callable[[], Transport],
        scheduler: Scheduler,
        sources: Sequence[InputSource] = (),
        *,
        config: LinkConfig = LinkConfig(),
        on_state_change: Optional[StateListener] = None,
    ) -> None:
        self.transport_factory = transport_factory
        self.scheduler = scheduler
        self.sources = list(sources)
        self.config = config
        self.on_state_change = on_state_change

        self._state = ConnectionState.DISCONNECTED
        self._transport: Optional[Transport] = None
        self._coalescer: Optional[Coalescer] = None
        self._handles: List[InputHandle] = []
        self._watchdog: Optional[PeriodicTask] = None
        self._retired: Optional[Transport] = None

        self._connecting_since = 0.0
        self._send_failed = False

        self.attempts = 0
        self.sessions = 0

    # ---- read-only views ----
    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def transport(self) -> Optional[Transport]:
        return self._transport

    @property
    def coalescer(self) -> Optional[Coalescer]:
        return self._coalescer

    @property
    def watchdog_active(self) -> bool:
        return self._watchdog is not None and self._watchdog.active

    # ---- lifecycle ----
    def start(self) -> None:
        """Start the watchdog and make the first connection attempt right away."""
        if self._watchdog is None:
            self._watchdog = self.scheduler.call_every(self.config.reconnect_interval_s, self._watchdog_tick)
        if self._state is ConnectionState.DISCONNECTED:
            self.connect()

    def shutdown(self) -> None:
        """Process teardown: stop the watchdog, then close whatever is open."""
        if self._watchdog is not None:
            self._watchdog.cancel()
            self._watchdog = None
        self.disconnect()

    async def wait_closed(self, timeout_s: float = 1.0) -> None:
        """
        Wait for the last closed transport to finish its close handshake, so the
        device hears that the operator left before the event loop goes away.
        """
        transport, self._retired = self._retired, None
        if transport is None:
            return
        try:
            await asyncio.wait_for(transport.wait_closed(), timeout_s)
        except asyncio.TimeoutError:
            logger.warning("close did not finish within %.1fs", timeout_s)

    def connect(self) -> None:
        if self._transport is not None:
            self.disconnect()

        transport = self.transport_factory()
        self._transport = transport
        self._connecting_since = self.scheduler.time()
        self._send_failed = False
        self.attempts += 1
        self._set_state(ConnectionState.CONNECTING)
        logger.info("Connecting... (attempt %d)", self.attempts)

        handlers = TransportHandlers(
            on_open=partial(self._on_open, transport),
            on_message=partial(self._on_message, transport),
            on_close=partial(self._on_close, transport),
        )
        try:
            transport.open(handlers)
        except TransportError as e:
            self._on_close(transport, e)

    def disconnect(self) -> None:
        transport = self._transport
        if transport is None:
            return
        logger.info("Disconnecting...")
        self._end_session()
        transport.close()
        self._retired = transport

    # ---- transport callbacks ----
    def _on_open(self, transport: Transport) -> None:
        if transport is not self._transport or self._state is not ConnectionState.CONNECTING:
            logger.debug("ignoring open from stale transport")
            return

        self.sessions += 1
        self._coalescer = Coalescer(
            partial(self._transmit, transport),
            self.scheduler,
            self.config.coalesce_interval_s,
        )
        self._set_state(ConnectionState.CONNECTED)
        logger.info("Connected.")

        for source in self.sources:
            sink = self._gated_sink(self._coalescer)
            self._handles.append(source.mount(sink))

    def _on_message(self, transport: Transport, message: Message) -> None:
        if transport is not self._transport:
            return
        # nothing inbound is part of the control contract
        logger.debug("inbound message ignored (%d chars)", len(message))

    def _on_close(self, transport: Transport, error: Optional[TransportError]) -> None:
        if transport is not self._transport:
            logger.debug("ignoring close from stale transport")
            return

        if error is None:
            logger.info("Disconnected.")
        else:
            logger.warning("Disconnected: %s", error)
        self._end_session()

    # ---- session plumbing ----
    def _gated_sink(self, coalescer: Coalescer) -> VectorSink:
        gate = ChangeGate()

        def sink(vector: ControlVector) -> None:
            if gate.admit(vector):
                coalescer.submit(vector)

        return sink

    def _transmit(self, transport: Transport, vector: ControlVector) -> None:
        if transport is not self._transport:
            return
        try:
            transport.send(vector.to_json())
        except TransportError as e:
            logger.warning("send failed: %s", e)
            self._send_failed = True

    def _end_session(self) -> None:
        handles, self._handles = self._handles, []
        for handle in handles:
            handle.detach()

        if self._coalescer is not None:
            self._coalescer.discard()
            self._coalescer = None

        self._transport = None
        self._set_state(ConnectionState.DISCONNECTED)

    def _watchdog_tick(self) -> None:
        if self._state is ConnectionState.CONNECTING:
            waited = self.scheduler.time() - self._connecting_since
            if waited >= self.config.connect_timeout_s:
                logger.warning("connect attempt stuck for %.1fs, abandoning", waited)
                self.disconnect()

        elif self._state is ConnectionState.CONNECTED and self._send_failed:
            self._send_failed = False
            if self._transport is not None and not self._transport.is_open:
                logger.warning("transport no longer open after send failure, reconnecting")
                self.disconnect()

        if self._state is ConnectionState.DISCONNECTED:
            self.connect()

    def _set_state(self, new: ConnectionState) -> None:
        old, self._state = self._state, new
        if old is new:
            return
        logger.debug("state %s -> %s", old.value, new.value)
        if self.on_state_change is not None:
            self.on_state_change(old, new)
