"""Errors raised by shutdown coordination."""

from typing import Optional


class ShutdownError(Exception):
    pass

class InvalidHandlerError(ShutdownError, TypeError):
    """Raised at registration time when a handler is not callable."""
    pass

class HandlerExecutionError(ShutdownError):
    """Wraps a failure raised while running a shutdown phase."""

    def __init__(self, phase: str, handler_name: str, signal: Optional[str], error: BaseException):
        self.phase = phase
        self.handler_name = handler_name
        self.signal = signal
        self.error = error
        super().__init__(f"{phase} handler {handler_name} failed: {error}")
