"""Background session worker: owns the core connection and its state machine."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import threading
from collections import deque
from collections.abc import Callable
from typing import Any

from ..config import CoreConfig
from ..constants import (
    AUTH_RETRY_LIMIT,
    AUTH_TIMEOUT_SECONDS,
    COMMAND_QUEUE_SIZE,
    CONNECT_TIMEOUT_SECONDS,
    KEEPALIVE_INTERVAL_SECONDS,
    MAX_FRAME_BYTES,
    READ_CHUNK_BYTES,
    SHUTDOWN_JOIN_TIMEOUT_SECONDS,
)
from ..errors import (
    AuthError,
    InternalError,
    LocalStateError,
    ProtocolError,
    TransportError,
    is_recoverable,
    log_error,
)
from ..logs.logger import logger
from ..model import BufferRegistry, BufKey, Line, LineKind
from ..protocol import (
    Auth,
    AuthResult,
    Command,
    Control,
    FrameDecoder,
    Message,
    Subscribe,
    encode,
)
from .backoff import ReconnectBackoff
from .commands import CommandQueue
from .dispatcher import FrameDispatcher
from .keepalive import Keepalive
from .state import SessionState


class SessionWorker:  # pylint: disable=too-many-instance-attributes
    """Keeps one authenticated connection to the core alive.

    The worker runs an asyncio loop on its own thread. Everything public on
    this class (``start``, ``stop``, ``submit``, ``reconnect``, ``wait_for*``)
    is safe to call from the UI thread.
    """

    def __init__(
        self,
        config: CoreConfig,
        registry: BufferRegistry,
        *,
        backoff: ReconnectBackoff | None = None,
        connect_timeout: float = CONNECT_TIMEOUT_SECONDS,
        auth_timeout: float = AUTH_TIMEOUT_SECONDS,
        keepalive_interval: float = KEEPALIVE_INTERVAL_SECONDS,
        auth_retry_limit: int = AUTH_RETRY_LIMIT,
        command_queue_size: int = COMMAND_QUEUE_SIZE,
        max_frame_bytes: int = MAX_FRAME_BYTES,
    ):
        if auth_retry_limit < 0:
            raise ValueError("auth_retry_limit must be >= 0")
        self.config = config
        self.registry = registry
        _, self.status = registry.status()
        self.backoff = backoff or ReconnectBackoff()
        self.connect_timeout = connect_timeout
        self.auth_timeout = auth_timeout
        self.auth_retry_limit = auth_retry_limit
        self.max_frame_bytes = max_frame_bytes
        self.commands = CommandQueue(command_queue_size, on_drop=self._on_command_dropped)
        self.dispatcher = FrameDispatcher(self)
        self.keepalive = Keepalive(self, keepalive_interval)

        self.state = SessionState.DISCONNECTED
        self.transitions: list[tuple[SessionState, SessionState]] = []
        self._state_cond = threading.Condition()
        self.session_info: dict[str, Any] = {}
        self.auth_failures = 0
        self.last_backoff_delay: float | None = None
        self.fatal_error: BaseException | None = None
        self._last_notice: str | None = None

        self.reader: asyncio.StreamReader | None = None
        self.writer: asyncio.StreamWriter | None = None
        self._decoder = FrameDecoder(max_frame_bytes)
        self._pending: deque[Message] = deque()
        self._deferred_error: ProtocolError | None = None

        self._thread: threading.Thread | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._main_task: asyncio.Task[None] | None = None
        self._retry_event: asyncio.Event | None = None
        self._commands_ready: asyncio.Event | None = None
        self._started = threading.Event()
        self._stop_requested = threading.Event()

    # ------------------------------------------------------------------
    # UI-thread API
    # ------------------------------------------------------------------
    def start(self) -> None:
        if self._thread is not None:
            raise RuntimeError("Session worker already started")
        self._thread = threading.Thread(
            target=self._thread_main, name="distirc-session", daemon=True
        )
        self._thread.start()
        self._started.wait()

    def stop(self, timeout: float = SHUTDOWN_JOIN_TIMEOUT_SECONDS) -> None:
        """Ask the worker to shut down and wait for its thread to exit."""
        self._stop_requested.set()
        self._call_in_loop(self._cancel_main)
        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join(timeout)

    def submit(self, command: Command) -> bool:
        """Queue a command for the core; False when the queue was full."""
        return self.commands.submit(command)

    def send_text(self, target: BufKey, text: str) -> bool:
        return self.submit(Command(target=target, text=text))

    def close_commands(self) -> None:
        """The UI is going away; the worker treats this as a shutdown request."""
        self.commands.close()

    def reconnect(self) -> None:
        """Skip a pending backoff delay, or retry after an auth give-up."""
        logger.log_event("session", "reconnect_requested", level=logging.DEBUG)
        self._call_in_loop(self._request_retry)

    def wait_for(
        self, predicate: Callable[[SessionWorker], bool], timeout: float | None = None
    ) -> bool:
        with self._state_cond:
            return self._state_cond.wait_for(lambda: predicate(self), timeout)

    def wait_for_state(self, state: SessionState, timeout: float | None = None) -> bool:
        return self.wait_for(lambda w: w.state is state, timeout)

    def wait_for_transition(
        self, old: SessionState, new: SessionState, timeout: float | None = None
    ) -> bool:
        return self.wait_for(lambda w: (old, new) in w.transitions, timeout)

    def raise_if_failed(self) -> None:
        """Re-raise a fatal worker error in the calling thread."""
        if self.fatal_error is not None:
            raise self.fatal_error

    @property
    def is_alive(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    # ------------------------------------------------------------------
    # Thread and loop plumbing
    # ------------------------------------------------------------------
    def _thread_main(self) -> None:
        try:
            asyncio.run(self._run())
        finally:
            self._started.set()
        if self.fatal_error is not None:
            # Hand the failure to threading.excepthook.
            raise self.fatal_error

    def _call_in_loop(self, callback: Callable[[], None]) -> None:
        loop = self._loop
        if loop is None:
            return
        try:
            loop.call_soon_threadsafe(callback)
        except RuntimeError:
            # Loop already closed: the worker has exited.
            return

    def _cancel_main(self) -> None:
        if self._main_task is not None and not self._main_task.done():
            self._main_task.cancel()

    @staticmethod
    def _loop_event(event: asyncio.Event | None, where: str) -> asyncio.Event:
        if event is None:
            raise LocalStateError(f"{where} used outside the worker loop")
        return event

    def _request_retry(self) -> None:
        if self._retry_event is not None:
            self._retry_event.set()

    def _wake_commands(self) -> None:
        self._call_in_loop(self._on_commands_changed)

    def _on_commands_changed(self) -> None:
        if self._commands_ready is not None:
            self._commands_ready.set()
        if self.commands.closed:
            self._stop_requested.set()
            self._cancel_main()

    async def _run(self) -> None:
        self._loop = asyncio.get_running_loop()
        self._main_task = asyncio.current_task()
        self._retry_event = asyncio.Event()
        self._commands_ready = asyncio.Event()
        self.commands.set_waker(self._wake_commands)
        self._started.set()
        logger.log_event(
            "session",
            "worker_start",
            level=logging.DEBUG,
            host=self.config.host,
            port=self.config.port,
        )
        try:
            if self._stop_requested.is_set() or self.commands.closed:
                return
            await self._state_machine()
        except asyncio.CancelledError:
            if not self._stop_requested.is_set():
                raise
        except Exception as e:
            self.fatal_error = e
            log_error("Session worker stopped on a fatal error", e)
            logger.log_event(
                "session", "fatal", level=logging.CRITICAL, notified=True, error=str(e)
            )
        finally:
            self.commands.set_waker(None)
            await self._close_transport()
            self._set_state(SessionState.SHUTDOWN)
            logger.log_event("session", "shutdown", level=logging.DEBUG)

    # ------------------------------------------------------------------
    # State machine
    # ------------------------------------------------------------------
    def _set_state(self, new_state: SessionState) -> None:
        with self._state_cond:
            old_state = self.state
            if old_state is new_state:
                return
            self.state = new_state
            self.transitions.append((old_state, new_state))
            self._state_cond.notify_all()
        logger.log_event(
            "session",
            "state_change",
            level=logging.DEBUG,
            old_state=old_state.name,
            new_state=new_state.name,
        )

    async def _state_machine(self) -> None:
        while True:
            try:
                await self._connect()
                await self._authenticate()
                await self._on_ready()
                await self._serve()
            except AuthError as e:
                if not self._handle_auth_rejection(e):
                    await self._close_transport()
                    await self._wait_for_manual_retry()
                    continue
            except (InternalError, OSError) as e:
                if not is_recoverable(e):
                    raise
                self._report_failure(e)
            finally:
                await self._close_transport()
            await self._backoff_wait()

    async def _connect(self) -> None:
        self._set_state(SessionState.CONNECTING)
        host, port = self.config.host, self.config.port
        logger.log_event("session", "connect_start", level=logging.DEBUG, host=host, port=port)
        try:
            self.reader, self.writer = await asyncio.wait_for(
                asyncio.open_connection(host, port), timeout=self.connect_timeout
            )
        except TimeoutError as e:
            raise TransportError(
                f"connect timed out after {self.connect_timeout:g}s",
                data={"host": host, "port": port},
            ) from e
        except OSError as e:
            raise TransportError(
                str(e) or type(e).__name__, data={"host": host, "port": port}
            ) from e
        self._decoder = FrameDecoder(self.max_frame_bytes)
        self._pending.clear()
        self._deferred_error = None
        self.keepalive.on_activity()

    async def _authenticate(self) -> None:
        self._set_state(SessionState.AUTHENTICATING)
        logger.log_event(
            "session",
            "connected",
            level=logging.DEBUG,
            host=self.config.host,
            port=self.config.port,
            user=self.config.user,
        )
        await self.send(Auth(user=self.config.user, password=self.config.password))
        try:
            result = await asyncio.wait_for(
                self._await_auth_result(), timeout=self.auth_timeout
            )
        except TimeoutError as e:
            raise TransportError(
                f"no authentication response within {self.auth_timeout:g}s"
            ) from e
        if not result.ok:
            raise AuthError(result.reason)

    async def _await_auth_result(self) -> AuthResult:
        while True:
            message = await self._next_message(None)
            if isinstance(message, AuthResult):
                return message
            if isinstance(message, Control):
                await self.dispatcher.handle_control(message)
                continue
            raise ProtocolError(
                f"Unexpected {message.type} frame before authentication",
                data={"frame_type": message.type},
            )

    async def _on_ready(self) -> None:
        self._set_state(SessionState.READY)
        self.backoff.reset()
        self.auth_failures = 0
        self._last_notice = None
        self._notice("auth_ok", level=logging.INFO, user=self.config.user)
        await self.send(Subscribe())

    async def _serve(self) -> None:
        read_task = asyncio.create_task(self._read_loop(), name="distirc-read")
        pump_task = asyncio.create_task(self._pump_commands(), name="distirc-commands")
        try:
            done, _ = await asyncio.wait(
                {read_task, pump_task}, return_when=asyncio.FIRST_COMPLETED
            )
        finally:
            for task in (read_task, pump_task):
                task.cancel()
            await asyncio.gather(read_task, pump_task, return_exceptions=True)
        for task in done:
            task.result()
        raise TransportError("Session loop ended unexpectedly")

    async def _read_loop(self) -> None:
        while True:
            try:
                message = await self._next_message(self.keepalive.interval)
            except TimeoutError:
                await self.keepalive.on_silence()
                continue
            await self.dispatcher.dispatch(message)

    async def _pump_commands(self) -> None:
        commands_ready = self._loop_event(self._commands_ready, "command pump")
        while True:
            command = self.commands.pop()
            if command is None:
                commands_ready.clear()
                # A submit may have landed between pop() and clear().
                command = self.commands.pop()
                if command is None:
                    await commands_ready.wait()
                    continue
            await self.send(command)
            logger.log_event(
                "session", "command_sent", level=logging.DEBUG, name=str(command.target)
            )

    def _handle_auth_rejection(self, error: AuthError) -> bool:
        """Report a rejection; True when another automatic attempt is allowed."""
        self.auth_failures += 1
        if self.auth_failures == 1:
            self._notice(
                "auth_rejected",
                level=logging.WARNING,
                kind=LineKind.ERROR,
                reason=error.reason or "no reason given",
            )
        if self.auth_failures <= self.auth_retry_limit:
            logger.log_event(
                "session",
                "auth_retry",
                level=logging.DEBUG,
                failures=self.auth_failures,
                limit=self.auth_retry_limit,
            )
            return True
        logger.log_event(
            "session",
            "auth_retry_exhausted",
            level=logging.WARNING,
            notified=True,
            failures=self.auth_failures,
        )
        return False

    async def _wait_for_manual_retry(self) -> None:
        retry = self._loop_event(self._retry_event, "manual retry wait")
        retry.clear()
        self._set_state(SessionState.DISCONNECTED)
        await retry.wait()
        retry.clear()
        self.auth_failures = 0
        self.backoff.reset()
        self._last_notice = None

    def _report_failure(self, error: Exception) -> None:
        if self.state is SessionState.READY:
            self._notice(
                "connection_lost", level=logging.WARNING, kind=LineKind.ERROR, error=str(error)
            )
        else:
            self._notice(
                "connect_failed",
                level=logging.WARNING,
                kind=LineKind.ERROR,
                dedupe=True,
                host=self.config.host,
                port=self.config.port,
                error=str(error),
            )

    async def _backoff_wait(self) -> None:
        retry = self._loop_event(self._retry_event, "backoff wait")
        self._set_state(SessionState.BACKOFF)
        attempt = self.backoff.attempt + 1
        delay = self.backoff.next_delay()
        self.last_backoff_delay = delay
        logger.log_event(
            "session", "backoff_wait", level=logging.DEBUG, delay=delay, attempt=attempt
        )
        retry.clear()
        with contextlib.suppress(TimeoutError):
            await asyncio.wait_for(retry.wait(), timeout=delay)

    # ------------------------------------------------------------------
    # I/O helpers
    # ------------------------------------------------------------------
    async def send(self, message: Message) -> None:
        writer = self.writer
        if writer is None:
            raise TransportError("Not connected to the core")
        try:
            writer.write(encode(message))
            await writer.drain()
        except OSError as e:
            raise TransportError(f"write failed: {e}") from e

    async def _next_message(self, timeout: float | None) -> Message:
        while not self._pending:
            if self._deferred_error is not None:
                error, self._deferred_error = self._deferred_error, None
                raise error
            data = await self._read_chunk(timeout)
            try:
                for message in self._decoder.iter_messages(data):
                    self._pending.append(message)
            except ProtocolError as e:
                self._deferred_error = e
        return self._pending.popleft()

    async def _read_chunk(self, timeout: float | None) -> bytes:
        reader = self.reader
        if reader is None:
            raise TransportError("Not connected to the core")
        try:
            data = await asyncio.wait_for(reader.read(READ_CHUNK_BYTES), timeout=timeout)
        except OSError as e:
            raise TransportError(f"read failed: {e}") from e
        if not data:
            raise TransportError("Connection closed by core")
        self.keepalive.on_activity()
        return data

    async def _close_transport(self) -> None:
        writer = self.writer
        self.reader = None
        self.writer = None
        self._pending.clear()
        self._deferred_error = None
        if writer is None:
            return
        writer.close()
        with contextlib.suppress(OSError, TimeoutError):
            await asyncio.wait_for(writer.wait_closed(), timeout=1.0)

    # ------------------------------------------------------------------
    # Status notices and metadata
    # ------------------------------------------------------------------
    def _notice(
        self,
        action: str,
        level: int = logging.INFO,
        kind: LineKind = LineKind.STATUS,
        dedupe: bool = False,
        **kwargs: object,
    ) -> None:
        """Post one line to the status buffer and log it without re-posting."""
        text = logger.render("session", action, **kwargs) or action.replace("_", " ")
        if dedupe and text == self._last_notice:
            logger.log_event("session", action, level=logging.DEBUG, human=text, notified=True)
            return
        self._last_notice = text
        self.status.send_front(Line.status(text, kind))
        logger.log_event("session", action, level=level, human=text, notified=True)

    def _on_command_dropped(self, command: Command) -> None:
        text = logger.render(
            "session",
            "command_dropped",
            size=self.commands.maxsize,
            name=str(command.target),
        )
        self.status.send_front(Line.status(text or "command dropped", LineKind.ERROR))
        logger.log_event(
            "session", "command_dropped", level=logging.WARNING, human=text, notified=True
        )

    def update_session_info(self, action: str, data: dict[str, Any]) -> None:
        with self._state_cond:
            self.session_info.update(data)
            self.session_info["last_control"] = action
            self._state_cond.notify_all()
