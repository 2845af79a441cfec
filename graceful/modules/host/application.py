"""Minimal host application exposing the hooks shutdown coordination needs."""

import asyncio
import inspect
from asyncio import Task
from typing import Any, Awaitable, Callable, List, Optional, Tuple

from ..logging import BaseLogger, SilentLogger

ReadyHook = Callable[[], Any]
Closer = Callable[[], Any]
CloseHandler = Callable[[], Awaitable[Any]]


class Application:
    """Host with a ready phase, closable resources and a pluggable close handler."""
    
    def __init__(self, logger: Optional[BaseLogger] = None, name: str = "application"):
        """
        Initialize the application.
        
        Args:
            logger: Logger instance, None to run with logging disabled
            name: Name used in log messages
        """
        self.logger = logger if logger is not None else SilentLogger()
        self.name = name
        self._ready_hooks: List[ReadyHook] = []
        self._resources: List[Tuple[str, Closer]] = []
        self._close_handler: Optional[CloseHandler] = None
        self._close_task: Optional[Task[None]] = None
        self._is_ready = False
        self._torn_down = asyncio.Event()
    
    @property
    def is_ready(self) -> bool:
        return self._is_ready
    
    @property
    def is_closed(self) -> bool:
        """Check if the application's own resources have been released."""
        return self._torn_down.is_set()
    
    def register(self, plugin: Any) -> Any:
        """Install a plugin exposing install(app) and return it."""
        plugin.install(self)
        return plugin
    
    def add_hook(self, name: str, hook: ReadyHook) -> None:
        if name != "on_ready":
            raise ValueError(f"Unknown hook: {name}")
        if self._is_ready:
            raise RuntimeError(f"{self.name} is already ready")
        self._ready_hooks.append(hook)
    
    def add_resource(self, name: str, closer: Closer) -> None:
        """Register a resource released by teardown, last registered first."""
        self._resources.append((name, closer))
    
    def set_close_handler(self, handler: CloseHandler) -> None:
        """Route close() through handler, which is expected to call teardown()."""
        if self._close_handler is not None:
            raise RuntimeError(f"{self.name} already has a close handler")
        self._close_handler = handler
    
    async def ready(self) -> None:
        """Run the ready hooks once, in registration order."""
        if self._is_ready:
            return
        for hook in self._ready_hooks:
            result = hook()
            if inspect.isawaitable(result):
                await result
        self._is_ready = True
        self.logger.log_info(f"{self.name} ready")
    
    async def close(self) -> None:
        """Close the application. Concurrent and repeated calls share one close."""
        if self._close_task is None:
            self._close_task = asyncio.ensure_future(self._run_close())
        await self._close_task
    
    async def wait_closed(self) -> None:
        """Wait until teardown has released the application's resources."""
        await self._torn_down.wait()
    
    async def teardown(self) -> None:
        """Release registered resources. Runs at most once."""
        if self._torn_down.is_set():
            return
        self.logger.log_info(f"Closing {self.name}")
        for name, closer in reversed(self._resources):
            try:
                result = closer()
                if inspect.isawaitable(result):
                    await result
                self.logger.log_debug(f"Closed resource: {name}")
            except Exception as e:
                self.logger.log_error(f"Error closing resource {name}: {str(e)}")
        self._torn_down.set()
    
    async def _run_close(self) -> None:
        if self._close_handler is not None:
            await self._close_handler()
        else:
            await self.teardown()
