from .registry import HandlerRegistry
from .signals import SignalSubscriber
from ..logging import BaseLogger


class LifecycleGuard:
    """Keeps repeated start/stop cycles of a host in one process independent.

    The signal source is shared by the whole process, so every instance has to
    remove its own bindings when it closes, and a registry outliving a
    discarded instance has to be emptied when the next one is created.
    """

    def __init__(
        self,
        registry: HandlerRegistry,
        subscriber: SignalSubscriber,
        logger: BaseLogger,
        reset_handlers_on_init: bool = False
    ):
        self.registry = registry
        self.subscriber = subscriber
        self.logger = logger
        self.reset_handlers_on_init = reset_handlers_on_init

    def on_init(self) -> None:
        """Empty the registry if configured. Runs when the host instance is created."""
        if not self.reset_handlers_on_init:
            return
        if len(self.registry):
            self.logger.log_debug(f"Discarding {len(self.registry)} previously registered handler(s)")
        self.registry.reset()

    def on_start(self) -> None:
        """Bind the configured signals. Runs from the host's ready hook."""
        self.subscriber.subscribe()

    def on_teardown(self) -> None:
        """Remove this instance's bindings from the shared source."""
        self.subscriber.unsubscribe_all()
