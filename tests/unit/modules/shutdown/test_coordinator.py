"""Tests for the shutdown coordinator module."""

import asyncio
import pytest
from unittest.mock import AsyncMock

from graceful.modules.shutdown.coordinator import ShutdownCoordinator, ShutdownState
from graceful.modules.shutdown.errors import HandlerExecutionError
from graceful.modules.shutdown.registry import HandlerRegistry


@pytest.fixture
def registry():
    return HandlerRegistry()


@pytest.fixture
def execution_order():
    return []


@pytest.fixture
def coordinator(registry, execution_order, fake_source, mock_logger):
    async def close_host():
        execution_order.append("close")
    return ShutdownCoordinator(registry, close_host, fake_source, mock_logger)


@pytest.mark.asyncio
async def test_shutdown_order(coordinator, registry, execution_order):
    """Test pre-close handlers, host close and post-close handlers run in order."""
    for index in range(3):
        registry.register_pre_close(lambda signal, index=index: execution_order.append(f"pre-{index}"))
    for index in range(2):
        async def post(signal, index=index):
            await asyncio.sleep(0)
            execution_order.append(f"post-{index}")
        registry.register_post_close(post)

    assert await coordinator.trigger() is True

    assert execution_order == ["pre-0", "pre-1", "pre-2", "close", "post-0", "post-1"]
    assert coordinator.state is ShutdownState.DONE


@pytest.mark.asyncio
async def test_handlers_run_sequentially(coordinator, registry, execution_order):
    """Test that a slow handler finishes before the next one starts."""
    async def slow(signal):
        execution_order.append("slow-start")
        await asyncio.sleep(0.05)
        execution_order.append("slow-end")

    async def fast(signal):
        execution_order.append("fast")

    registry.register_pre_close(slow)
    registry.register_pre_close(fast)

    await coordinator.trigger()

    assert execution_order == ["slow-start", "slow-end", "fast", "close"]


@pytest.mark.asyncio
async def test_state_transitions(coordinator, registry):
    states = []
    registry.register_pre_close(lambda signal: states.append(coordinator.state))

    assert coordinator.state is ShutdownState.IDLE
    assert coordinator.is_shutting_down is False
    await coordinator.trigger()

    assert states == [ShutdownState.RUNNING]
    assert coordinator.state is ShutdownState.DONE
    assert coordinator.is_shutting_down is True


@pytest.mark.asyncio
async def test_double_shutdown(coordinator, registry, fake_source, mock_logger):
    """Test that shutdown can only be executed once."""
    execution_count = 0
    def increment_count(signal):
        nonlocal execution_count
        execution_count += 1

    registry.register_pre_close(increment_count)
    registry.register_post_close(increment_count)

    assert await coordinator.trigger("SIGTERM") is True
    assert await coordinator.trigger("SIGINT") is False
    assert await coordinator.trigger() is False

    assert execution_count == 2
    assert coordinator.signal == "SIGTERM"
    assert fake_source.exit_codes == [0]
    mock_logger.log_error.assert_not_called()


@pytest.mark.asyncio
async def test_concurrent_triggers(coordinator, registry, execution_order):
    """Test that racing triggers execute each handler once."""
    async def pre(signal):
        await asyncio.sleep(0.01)
        execution_order.append(f"pre:{signal}")

    registry.register_pre_close(pre)

    results = await asyncio.gather(
        coordinator.trigger("SIGTERM"),
        coordinator.trigger("SIGINT"),
        coordinator.trigger(None),
    )

    assert results == [True, False, False]
    assert execution_order == ["pre:SIGTERM", "close"]


@pytest.mark.asyncio
async def test_handlers_receive_signal(coordinator, registry):
    received = []
    registry.register_pre_close(received.append)
    registry.register_post_close(received.append)

    await coordinator.trigger("SIGTERM")

    assert received == ["SIGTERM", "SIGTERM"]


@pytest.mark.asyncio
async def test_explicit_close_passes_none(coordinator, registry, fake_source):
    """Test that an explicit close passes None and does not exit."""
    received = []
    registry.register_post_close(received.append)

    await coordinator.trigger()

    assert received == [None]
    assert fake_source.exit_codes == []


@pytest.mark.asyncio
async def test_error_handling(coordinator, registry, execution_order, mock_logger):
    """Test that a failing handler is logged and the sequence continues."""
    def raise_error(signal):
        raise ValueError("Test error")

    registry.register_pre_close(raise_error)
    registry.register_pre_close(lambda signal: execution_order.append("pre-after-error"))
    registry.register_post_close(lambda signal: execution_order.append("post"))

    assert await coordinator.trigger() is True

    assert execution_order == ["pre-after-error", "close", "post"]
    assert len(coordinator.errors) == 1
    error = coordinator.errors[0]
    assert isinstance(error, HandlerExecutionError)
    assert error.phase == "pre-close"
    assert error.signal is None
    assert isinstance(error.__cause__, ValueError)
    mock_logger.log_error.assert_called_once_with(
        "Error in pre-close handler test_error_handling.<locals>.raise_error: Test error"
    )


@pytest.mark.asyncio
async def test_error_sets_exit_code(coordinator, registry, fake_source):
    """Test that a signal-triggered shutdown with failures exits with 1."""
    async def raise_error(signal):
        raise RuntimeError("boom")

    registry.register_post_close(raise_error)

    await coordinator.trigger("SIGINT")

    assert coordinator.exit_code == 1
    assert fake_source.exit_codes == [1]


@pytest.mark.asyncio
async def test_close_action_failure(registry, fake_source, mock_logger):
    """Test that post-close handlers run even if the close action fails."""
    close_host = AsyncMock(side_effect=OSError("socket busy"))
    coordinator = ShutdownCoordinator(registry, close_host, fake_source, mock_logger)
    received = []
    registry.register_post_close(received.append)

    await coordinator.trigger()

    close_host.assert_awaited_once()
    assert received == [None]
    assert coordinator.errors[0].phase == "close"


@pytest.mark.asyncio
async def test_handle_signal_schedules_trigger(coordinator, registry, fake_source):
    received = []
    registry.register_post_close(received.append)

    task = coordinator.handle_signal("SIGTERM")
    assert task is not None
    await task

    assert received == ["SIGTERM"]
    assert fake_source.exit_codes == [0]


@pytest.mark.asyncio
async def test_shutdown_event(coordinator):
    """Test shutdown event signaling."""
    async def wait_for_shutdown():
        await coordinator.wait_for_shutdown()
        return True

    task = asyncio.create_task(wait_for_shutdown())

    await asyncio.sleep(0.1)
    assert not task.done()

    await coordinator.trigger()

    assert await task is True


@pytest.mark.asyncio
async def test_logging(coordinator, registry, mock_logger):
    """Test the messages logged during shutdown."""
    registry.register_pre_close(lambda signal: None)

    await coordinator.trigger()

    mock_logger.log_info.assert_any_call("Starting graceful shutdown (close)...")
    mock_logger.log_info.assert_any_call("Graceful shutdown completed")
    mock_logger.log_phase.assert_any_call("pre-close", 1)
    mock_logger.log_phase.assert_any_call("post-close", 0)


def test_handle_signal_without_loop(registry, fake_source, mock_logger):
    """Test that a signal outside an event loop runs the sequence synchronously."""
    closed = []

    async def close_host():
        closed.append("close")

    coordinator = ShutdownCoordinator(registry, close_host, fake_source, mock_logger)
    received = []
    registry.register_pre_close(received.append)

    assert coordinator.handle_signal("SIGINT") is None

    assert received == ["SIGINT"]
    assert closed == ["close"]
    assert coordinator.state is ShutdownState.DONE
    assert fake_source.exit_codes == [0]
    mock_logger.log_debug.assert_any_call("No running event loop, running SIGINT shutdown synchronously")
