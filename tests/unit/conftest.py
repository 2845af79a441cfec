import asyncio
import pytest
import sys
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple
from unittest.mock import Mock

# Add project root to Python path
root_path = str(Path(__file__).parent.parent.parent)
if root_path not in sys.path:
    sys.path.append(root_path)


class FakeSignalSource:
    """Signal source double recording every call made against it."""

    def __init__(self, fire: Optional[str] = None, delay: float = 0.05):
        self.fire = fire
        self.delay = delay
        self.added: List[Tuple[str, Callable]] = []
        self.removed: List[Tuple[str, Callable]] = []
        self.exit_codes: List[int] = []
        self.listeners: Dict[str, List[Callable]] = {}

    def once(self, signal_name: str, listener: Callable) -> None:
        self.added.append((signal_name, listener))
        self.listeners.setdefault(signal_name, []).append(listener)
        if signal_name == self.fire:
            asyncio.get_running_loop().call_later(self.delay, self.emit, signal_name)

    def remove_listener(self, signal_name: str, listener: Callable) -> None:
        self.removed.append((signal_name, listener))
        listeners = self.listeners.get(signal_name, [])
        if listener in listeners:
            listeners.remove(listener)

    def listener_count(self, signal_name: str) -> int:
        return len(self.listeners.get(signal_name, []))

    def exit(self, exit_code: int) -> None:
        self.exit_codes.append(exit_code)

    def emit(self, signal_name: str) -> None:
        listeners = self.listeners.pop(signal_name, [])
        for listener in listeners:
            listener()


@pytest.fixture
def mock_logger():
    """Create a mock logger."""
    logger = Mock()
    logger.log_info = Mock()
    logger.log_error = Mock()
    logger.log_warning = Mock()
    logger.log_debug = Mock()
    logger.log_signal = Mock()
    logger.log_phase = Mock()
    return logger


@pytest.fixture
def fake_source():
    """Create a signal source that never fires on its own."""
    return FakeSignalSource()


@pytest.fixture
def make_fake_source():
    """Create signal sources that fire a signal some time after subscription."""
    def factory(fire: Optional[str] = None, delay: float = 0.05) -> FakeSignalSource:
        return FakeSignalSource(fire=fire, delay=delay)
    return factory
