"""Signal notification sources and the subscriber that binds them to a coordinator."""

import asyncio
import signal
import sys
import types
from abc import ABC, abstractmethod
from asyncio import AbstractEventLoop
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple, Union

from ..logging import BaseLogger

DEFAULT_SIGNALS: Tuple[str, ...] = ("SIGINT", "SIGTERM")

# Type for signal handlers
SignalHandlerType = Union[Callable[[int, Optional[types.FrameType]], Any], int, None]

Listener = Callable[..., Any]


class SignalSource(ABC):
    """Notification capability delivering named signals to one-shot listeners.

    Any object exposing the same four methods can be used in place of a
    subclass, which is how tests inject a fake source.
    """

    @abstractmethod
    def once(self, signal_name: str, listener: Listener) -> None:
        """Call listener the next time signal_name is delivered, then forget it."""
        pass

    @abstractmethod
    def remove_listener(self, signal_name: str, listener: Listener) -> None:
        """Forget a listener previously passed to once."""
        pass

    @abstractmethod
    def listener_count(self, signal_name: str) -> int:
        """Return the number of listeners waiting for signal_name."""
        pass

    @abstractmethod
    def exit(self, exit_code: int) -> None:
        """Terminate the process."""
        pass


class ProcessSignalSource(SignalSource):
    """SignalSource backed by the operating system signal facility.

    There is one signal table per process, so a single instance should be
    shared by everything in the process (see SignalSourceFactory.get_process_source).
    The first listener for a signal installs a dispatch handler and the
    removal of the last one restores the handler that was there before.
    """

    def __init__(self):
        self._listeners: Dict[str, List[Listener]] = {}
        self._original_handlers: Dict[str, SignalHandlerType] = {}
        self._loop: Optional[AbstractEventLoop] = None

    def once(self, signal_name: str, listener: Listener) -> None:
        sig = self._resolve(signal_name)
        listeners = self._listeners.setdefault(signal_name, [])
        if not listeners:
            self._original_handlers[signal_name] = signal.getsignal(sig)
            signal.signal(sig, self._dispatch)
        listeners.append(listener)

        try:
            self._loop = asyncio.get_running_loop()
        except RuntimeError:
            pass

    def remove_listener(self, signal_name: str, listener: Listener) -> None:
        listeners = self._listeners.get(signal_name)
        if not listeners or listener not in listeners:
            return
        listeners.remove(listener)
        if not listeners:
            self._restore(signal_name)

    def listener_count(self, signal_name: str) -> int:
        return len(self._listeners.get(signal_name, []))

    def exit(self, exit_code: int) -> None:
        sys.exit(exit_code)

    def _dispatch(self, sig_num: int, frame: Optional[types.FrameType]) -> None:
        """
        Handle a delivered signal. Called directly by the interpreter, so
        listeners are handed over to the event loop when one is running.

        Args:
            sig_num: The signal number that was received
            frame: The current stack frame
        """
        signal_name = signal.Signals(sig_num).name
        listeners = self._listeners.get(signal_name, [])
        self._listeners[signal_name] = []
        self._restore(signal_name)

        for listener in listeners:
            if self._loop is not None and self._loop.is_running():
                self._loop.call_soon_threadsafe(listener)
            else:
                listener()

    def _restore(self, signal_name: str) -> None:
        if signal_name not in self._original_handlers:
            return
        original = self._original_handlers.pop(signal_name)
        # getsignal returns None for handlers not installed from Python
        signal.signal(self._resolve(signal_name), original if original is not None else signal.SIG_DFL)

    @staticmethod
    def _resolve(signal_name: str) -> signal.Signals:
        try:
            return signal.Signals[signal_name]
        except KeyError:
            raise ValueError(f"Unknown signal: {signal_name}") from None


class SignalSubscriber:
    """Binds one-shot listeners for a set of signals on a SignalSource.

    A delivered signal is never re-armed: its binding is consumed and the
    signal name is forwarded to on_signal exactly once.
    """

    def __init__(
        self,
        source: SignalSource,
        on_signal: Callable[[str], Any],
        logger: BaseLogger,
        signals: Iterable[str] = DEFAULT_SIGNALS
    ):
        """
        Initialize the subscriber.

        Args:
            source: Notification source to subscribe on
            on_signal: Called with the signal name when a bound signal fires
            logger: Logger instance
            signals: Names of the signals to subscribe to
        """
        self.source = source
        self.logger = logger
        self.signals = tuple(signals)
        self._on_signal = on_signal
        self._bindings: Dict[str, Listener] = {}

    @property
    def bound_signals(self) -> Tuple[str, ...]:
        """Signals that still have a live binding."""
        return tuple(self._bindings)

    def subscribe(self) -> None:
        """Subscribe once for every configured signal that is not already bound."""
        for signal_name in self.signals:
            if signal_name in self._bindings:
                continue
            listener = self._make_listener(signal_name)
            self._bindings[signal_name] = listener
            self.source.once(signal_name, listener)
            self.logger.log_debug(
                f"Subscribed to {signal_name} ({self.source.listener_count(signal_name)} listener(s) on source)"
            )

    def unsubscribe_all(self) -> None:
        """Remove every remaining binding from the source."""
        bindings = list(self._bindings.items())
        self._bindings.clear()
        for signal_name, listener in bindings:
            self.source.remove_listener(signal_name, listener)
            self.logger.log_debug(f"Unsubscribed from {signal_name}")

    def _make_listener(self, signal_name: str) -> Listener:
        def listener(*args: Any) -> None:
            # The source may have delivered after unsubscribe_all ran
            if self._bindings.get(signal_name) is not listener:
                return
            del self._bindings[signal_name]
            self.logger.log_signal(signal_name)
            self._on_signal(signal_name)

        return listener
