"""Shutdown coordinator running cleanup handlers around the host close action."""

import asyncio
import inspect
from asyncio import Task
from enum import Enum
from typing import Any, Awaitable, Callable, List, Optional, Sequence

from ..logging import BaseLogger
from .errors import HandlerExecutionError
from .registry import Handler, HandlerRegistry, handler_name
from .signals import SignalSource

CloseAction = Callable[[], Awaitable[Any]]

EXIT_SUCCESS = 0
EXIT_FAILURE = 1


class ShutdownState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    DONE = "done"


class ShutdownCoordinator:
    """Coordinates the shutdown sequence of a single host instance.

    The sequence runs at most once: pre-close handlers in registration order,
    the host close action, then post-close handlers in registration order.
    Handlers never run concurrently with each other.

    A failing handler is logged and recorded in errors, and the sequence
    carries on with the next one. Errors are never raised to the caller of
    trigger, whichever way the shutdown was started.
    """

    def __init__(
        self,
        registry: HandlerRegistry,
        close_action: CloseAction,
        source: SignalSource,
        logger: BaseLogger
    ):
        """
        Initialize the shutdown coordinator.

        Args:
            registry: Registry holding the pre-close and post-close handlers
            close_action: Host action tearing down its own resources
            source: Notification source, used to terminate the process
            logger: Logger instance for logging shutdown events
        """
        self.registry = registry
        self.source = source
        self.logger = logger
        self.errors: List[HandlerExecutionError] = []
        self._close_action = close_action
        self._state = ShutdownState.IDLE
        self._signal: Optional[str] = None
        self._done = asyncio.Event()
        self._signal_tasks: List[Task[bool]] = []

    @property
    def state(self) -> ShutdownState:
        return self._state

    @property
    def signal(self) -> Optional[str]:
        """Signal that triggered the shutdown, None for an explicit close."""
        return self._signal

    @property
    def is_shutting_down(self) -> bool:
        """Check if shutdown has started."""
        return self._state is not ShutdownState.IDLE

    @property
    def exit_code(self) -> int:
        return EXIT_FAILURE if self.errors else EXIT_SUCCESS

    async def wait_for_shutdown(self) -> None:
        """Wait until the shutdown sequence has completed."""
        await self._done.wait()

    def handle_signal(self, signal_name: str) -> Optional[Task[bool]]:
        """
        Start a signal-triggered shutdown. Listeners are plain callables, so
        the sequence is scheduled on the running loop and the task is kept
        until it finishes.

        A synchronous host has no running loop. The whole sequence then runs
        to completion right here with asyncio.run, which for ProcessSignalSource
        means inside the interpreter's signal handler.

        Args:
            signal_name: Name of the delivered signal

        Returns:
            The scheduled task, or None if no event loop was running
        """
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self.logger.log_debug(f"No running event loop, running {signal_name} shutdown synchronously")
            asyncio.run(self.trigger(signal_name))
            return None

        task = loop.create_task(self.trigger(signal_name))
        self._signal_tasks.append(task)
        task.add_done_callback(self._signal_tasks.remove)
        return task

    async def trigger(self, signal: Optional[str] = None) -> bool:
        """
        Run the shutdown sequence if it has not started yet.

        Args:
            signal: Name of the triggering signal, None for an explicit close

        Returns:
            True if this call ran the sequence, False if it was ignored
        """
        if self._state is not ShutdownState.IDLE:
            self.logger.log_debug(
                f"Shutdown already {self._state.value}, ignoring trigger ({signal or 'close'})"
            )
            return False

        self._state = ShutdownState.RUNNING
        self._signal = signal
        self.logger.log_info(f"Starting graceful shutdown ({signal or 'close'})...")

        await self._run_phase("pre-close", self.registry.pre_close, signal)
        await self._run_close_action(signal)
        await self._run_phase("post-close", self.registry.post_close, signal)

        self._state = ShutdownState.DONE
        self._done.set()

        if self.errors:
            self.logger.log_warning(f"Graceful shutdown completed with {len(self.errors)} error(s)")
        else:
            self.logger.log_info("Graceful shutdown completed")

        if signal is not None:
            self.logger.log_info(f"Exiting with code {self.exit_code}")
            self.source.exit(self.exit_code)
        return True

    async def _run_phase(self, phase: str, handlers: Sequence[Handler], signal: Optional[str]) -> None:
        self.logger.log_phase(phase, len(handlers))
        for handler in handlers:
            name = handler_name(handler)
            self.logger.log_debug(f"Executing {phase} handler: {name}")
            try:
                result = handler(signal)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                self._record(HandlerExecutionError(phase, name, signal, e), e)

    async def _run_close_action(self, signal: Optional[str]) -> None:
        try:
            await self._close_action()
        except Exception as e:
            self._record(HandlerExecutionError("close", handler_name(self._close_action), signal, e), e)

    def _record(self, error: HandlerExecutionError, cause: Exception) -> None:
        error.__cause__ = cause
        self.errors.append(error)
        self.logger.log_error(f"Error in {error.phase} handler {error.handler_name}: {str(cause)}")
