from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .signals import DEFAULT_SIGNALS

SIGNAL_SOURCE_METHODS = ("once", "remove_listener", "listener_count", "exit")


class ShutdownConfig(BaseModel):
    model_config = ConfigDict(populate_by_name=True, arbitrary_types_allowed=True)

    reset_handlers_on_init: bool = Field(default=False, alias="resetHandlersOnInit")
    # Replacement for the process signal source, mostly useful in tests
    handler_event_listener: Optional[Any] = Field(default=None, alias="handlerEventListener")
    signals: List[str] = Field(default_factory=lambda: list(DEFAULT_SIGNALS))

    @field_validator("handler_event_listener")
    @classmethod
    def validate_event_listener(cls, value: Any) -> Any:
        """Validate that the injected source exposes the signal source interface."""
        if value is None:
            return value
        missing = [name for name in SIGNAL_SOURCE_METHODS if not callable(getattr(value, name, None))]
        if missing:
            raise ValueError(f"handler_event_listener is missing: {', '.join(missing)}")
        return value

    @field_validator("signals")
    @classmethod
    def validate_signals(cls, value: List[str]) -> List[str]:
        signals: List[str] = []
        for name in value:
            name = name.strip().upper()
            if not name.startswith("SIG"):
                raise ValueError(f"Invalid signal name: {name}")
            if name not in signals:
                signals.append(name)
        if not signals:
            raise ValueError("At least one signal is required")
        return signals
