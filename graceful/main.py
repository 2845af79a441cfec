import asyncio
from typing import Optional, Tuple

import click
from graceful.modules.host import Application
from graceful.modules.logging import create_logger, BaseLogger
from graceful.modules.shutdown import GracefulShutdown, ShutdownConfig


class GracefulContext:
    """Context object to store CLI state."""
    def __init__(self):
        self.logger: Optional[BaseLogger] = None

pass_context = click.make_pass_decorator(GracefulContext, ensure=True)

@click.group()
@click.option('--output', '-o',
              type=click.Choice(['colorful', 'plain', 'json', 'silent']),
              default='colorful',
              help='Output format (colorful for CLI, plain for CI/file, json for machine parsing)',
              envvar='GRACEFUL_OUTPUT')
@click.option('--log-level', '-l',
              type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']),
              default='INFO',
              help='Set the logging level',
              envvar='GRACEFUL_LOG_LEVEL')
@pass_context
def cli(ctx, output, log_level):
    """Graceful CLI Tool: ordered cleanup on shutdown."""
    ctx.logger = create_logger(output, log_level)


async def _serve(logger: BaseLogger, config: ShutdownConfig, drain_delay: float) -> None:
    app = Application(logger, name="demo")
    shutdown = app.register(GracefulShutdown(config))

    async def drain(signal):
        logger.log_info(f"Draining in-flight work for {drain_delay:.1f}s ({signal or 'close'})")
        await asyncio.sleep(drain_delay)

    def report(signal):
        logger.log_info("Cleanup finished")

    app.add_resource("listener", lambda: logger.log_info("Listener stopped"))
    shutdown.register_pre_close(drain)
    shutdown.register_post_close(report)

    await app.ready()
    logger.log_info(f"Waiting for {', '.join(config.signals)}")
    await app.wait_closed()
    await shutdown.wait_for_shutdown()


@cli.command(name='demo')
@click.option('--signal', '-s', 'signals', multiple=True,
              help='Signal to handle (repeatable, defaults to SIGINT and SIGTERM)')
@click.option('--drain-delay', type=float, default=1.0, show_default=True,
              help='Seconds the demo pre-close handler waits')
@pass_context
def demo(ctx, signals: Tuple[str, ...], drain_delay: float):
    """Run a host that shuts down gracefully on signal."""
    config = ShutdownConfig(signals=list(signals)) if signals else ShutdownConfig()
    asyncio.run(_serve(ctx.logger, config, drain_delay))


def main():
    cli()

if __name__ == '__main__':
    main()
