"""Ordered storage for pre-close and post-close shutdown handlers."""

from typing import Any, Awaitable, Callable, List, Optional, Tuple, Union

from .errors import InvalidHandlerError

# A handler receives the triggering signal name, or None for an explicit close
Handler = Callable[[Optional[str]], Union[Awaitable[Any], Any]]

_TYPE_NAMES = {
    str: "string",
    bool: "boolean",
    int: "number",
    float: "number",
}


def describe_type(value: Any) -> str:
    """Return a human readable name for the type of value."""
    return _TYPE_NAMES.get(type(value), type(value).__name__)


def handler_name(handler: Handler) -> str:
    """Return a name suitable for log messages."""
    return getattr(handler, "__qualname__", None) or repr(handler)


class HandlerRegistry:
    """Holds the pre-close and post-close handler sequences.
    
    Handlers run in registration order. Registering the same handler twice
    runs it twice.
    """
    
    def __init__(self):
        self._pre_close: List[Handler] = []
        self._post_close: List[Handler] = []
    
    @property
    def pre_close(self) -> Tuple[Handler, ...]:
        return tuple(self._pre_close)
    
    @property
    def post_close(self) -> Tuple[Handler, ...]:
        return tuple(self._post_close)
    
    def register_pre_close(self, handler: Handler) -> None:
        """Register a handler to run before the host close action.
        
        Args:
            handler: Callable receiving the signal name (or None)
            
        Raises:
            InvalidHandlerError: If handler is not callable
        """
        self._validate(handler)
        self._pre_close.append(handler)
    
    def register_post_close(self, handler: Handler) -> None:
        """Register a handler to run after the host close action.
        
        Args:
            handler: Callable receiving the signal name (or None)
            
        Raises:
            InvalidHandlerError: If handler is not callable
        """
        self._validate(handler)
        self._post_close.append(handler)
    
    def reset(self) -> None:
        """Remove every registered handler."""
        self._pre_close.clear()
        self._post_close.clear()
    
    def __len__(self) -> int:
        return len(self._pre_close) + len(self._post_close)
    
    @staticmethod
    def _validate(handler: Any) -> None:
        if not callable(handler):
            raise InvalidHandlerError(f"Expected a function but got a {describe_type(handler)}")
