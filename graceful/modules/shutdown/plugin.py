"""Installs graceful shutdown on a host application."""

from typing import Any, List, Optional

from ..logging import BaseLogger
from .config import ShutdownConfig
from .coordinator import ShutdownCoordinator, ShutdownState
from .errors import HandlerExecutionError
from .factory import SignalSourceFactory
from .lifecycle import LifecycleGuard
from .registry import Handler, HandlerRegistry
from .signals import SignalSource, SignalSubscriber


class GracefulShutdown:
    """Runs registered handlers around the host close, on signal or explicit close.

    Usage:
        app = Application(logger)
        shutdown = app.register(GracefulShutdown(ShutdownConfig()))
        shutdown.register_pre_close(drain_queue)
        shutdown.register_post_close(flush_metrics)
        await app.ready()
    """

    def __init__(
        self,
        config: Optional[ShutdownConfig] = None,
        registry: Optional[HandlerRegistry] = None,
        logger: Optional[BaseLogger] = None
    ):
        """
        Initialize the plugin.

        Args:
            config: Shutdown configuration, defaults to ShutdownConfig()
            registry: Handler registry, pass one to share it between instances
            logger: Logger instance, defaults to the host's logger on install
        """
        self.config = config or ShutdownConfig()
        self.registry = registry if registry is not None else HandlerRegistry()
        self.source: SignalSource = (
            self.config.handler_event_listener
            if self.config.handler_event_listener is not None
            else SignalSourceFactory.get_process_source()
        )
        self.logger = logger
        self.app: Any = None
        self.coordinator: Optional[ShutdownCoordinator] = None
        self.guard: Optional[LifecycleGuard] = None

    def install(self, app: Any) -> None:
        """Reset the registry if configured, then hook into the host ready and close."""
        if self.app is not None:
            raise RuntimeError("GracefulShutdown is already installed")
        self.app = app
        if self.logger is None:
            self.logger = app.logger

        self.coordinator = ShutdownCoordinator(self.registry, self._close_host, self.source, self.logger)
        subscriber = SignalSubscriber(
            self.source, self.coordinator.handle_signal, self.logger, self.config.signals
        )
        self.guard = LifecycleGuard(
            self.registry, subscriber, self.logger, self.config.reset_handlers_on_init
        )

        self.guard.on_init()
        app.add_hook("on_ready", self.guard.on_start)
        app.set_close_handler(self._on_close)

    def register_pre_close(self, handler: Handler) -> None:
        self.registry.register_pre_close(handler)

    def register_post_close(self, handler: Handler) -> None:
        self.registry.register_post_close(handler)

    graceful_shutdown = register_pre_close
    after_graceful_shutdown = register_post_close

    @property
    def state(self) -> ShutdownState:
        return self._require_coordinator().state

    @property
    def errors(self) -> List[HandlerExecutionError]:
        return self._require_coordinator().errors

    async def wait_for_shutdown(self) -> None:
        await self._require_coordinator().wait_for_shutdown()

    async def _on_close(self) -> None:
        coordinator = self._require_coordinator()
        if not await coordinator.trigger(None):
            # A signal started the sequence first
            await coordinator.wait_for_shutdown()

    async def _close_host(self) -> None:
        try:
            await self.app.teardown()
        finally:
            self.guard.on_teardown()

    def _require_coordinator(self) -> ShutdownCoordinator:
        if self.coordinator is None:
            raise RuntimeError("GracefulShutdown is not installed")
        return self.coordinator
