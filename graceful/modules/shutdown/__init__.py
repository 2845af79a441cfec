"""Shutdown coordination module for running cleanup handlers around a host close."""

from .config import ShutdownConfig
from .coordinator import ShutdownCoordinator, ShutdownState
from .errors import HandlerExecutionError, InvalidHandlerError, ShutdownError
from .factory import SignalSourceFactory
from .lifecycle import LifecycleGuard
from .plugin import GracefulShutdown
from .registry import HandlerRegistry
from .signals import DEFAULT_SIGNALS, ProcessSignalSource, SignalSource, SignalSubscriber

__all__ = [
    'DEFAULT_SIGNALS',
    'GracefulShutdown',
    'HandlerExecutionError',
    'HandlerRegistry',
    'InvalidHandlerError',
    'LifecycleGuard',
    'ProcessSignalSource',
    'ShutdownConfig',
    'ShutdownCoordinator',
    'ShutdownError',
    'ShutdownState',
    'SignalSource',
    'SignalSourceFactory',
    'SignalSubscriber',
]
