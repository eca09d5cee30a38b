"""
Command-line interface for mythremote.

This module provides the CLI using Click, supporting configuration via:
1. Environment variables (highest precedence)
2. CLI arguments
3. Config file
4. Default values (lowest precedence)
"""

import asyncio
import signal
import sys
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Any, TypeVar

import click

from mythremote.core.config import (
    Config,
    DEFAULT_CONFIG_PATH,
    ENV_CONFIG_FILE,
    ENV_FRONTEND_ADDRESS,
    ENV_FRONTEND_NAME,
    ENV_FRONTEND_PORT,
    ENV_PROTOCOL_LOG_FILE,
    ENV_SESSION_TIMEOUT,
)
from mythremote.core.logging import get_logger, setup_logging
from mythremote.core.utils import FrontendError
from mythremote.frontend import FrontendRemote, SessionListener, SessionStatus

logger = get_logger()

T = TypeVar("T")


class EchoListener(SessionListener):
    """Prints session events and signals when the session ends."""

    def __init__(self, stop_event: asyncio.Event):
        self.stop_event = stop_event

    def on_status_changed(self, message: str, code: SessionStatus) -> None:
        click.echo(f"[{code!s}] {message}")
        if code in (SessionStatus.DISCONNECTED, SessionStatus.ERROR):
            self.stop_event.set()

    def on_location_changed(self, location: str) -> None:
        click.echo(f"Location: {location}")


def load_config(ctx: click.Context, skip_validation: bool = False) -> Config:
    """Load the configuration for a subcommand and set up logging from it."""
    options = ctx.obj
    try:
        config = Config.load(
            config_file=options["config_file"],
            cli_args=options["cli_args"],
            skip_validation=skip_validation,
        )
    except ValueError as e:
        raise click.ClickException(str(e)) from e

    setup_logging(
        verbosity_level=options["verbose"],
        quiet=options["quiet"],
        protocol_log_file=config.protocol_log_file,
    )
    return config


async def run_with_remote(
    config: Config,
    action: Callable[[FrontendRemote], Awaitable[T]],
    poll_interval: float = 0,
    listener: SessionListener | None = None,
) -> T:
    """
    Connect to the configured frontend, run an action and disconnect.

    Args:
        config: Loaded configuration.
        action: Coroutine function receiving the connected remote.
        poll_interval: Location polling interval in ms (0 disables polling).
        listener: Optional listener for session events.

    Raises:
        click.ClickException: If the connection cannot be established.
    """
    endpoint = config.endpoint()
    async with FrontendRemote(
        timeout=config.session.timeout,
        poll_interval=poll_interval,
        listener=listener,
    ) as remote:
        connect_task = await remote.connect(endpoint)
        if not await connect_task:
            raise click.ClickException(remote.status_text)

        logger.info(remote.status_text)
        return await action(remote)


def run(config: Config, action: Callable[[FrontendRemote], Awaitable[T]]) -> T:
    """Run an action against the frontend from synchronous Click code."""
    try:
        return asyncio.run(run_with_remote(config, action))
    except FrontendError as e:
        raise click.ClickException(str(e)) from e


def require(ok: bool, message: str) -> None:
    if not ok:
        raise click.ClickException(message)


def echo_lines(lines: list[str] | None, message: str) -> None:
    require(lines is not None, message)
    for line in lines or []:
        click.echo(line)


@click.group()
@click.option(
    "-c", "--config",
    "config_file",
    type=click.Path(exists=False, path_type=Path),
    envvar=ENV_CONFIG_FILE,
    default=None,
    help=f"Path to configuration file. [default: {DEFAULT_CONFIG_PATH}] [env: {ENV_CONFIG_FILE}]",
)
@click.option(
    "-a", "--address",
    type=str,
    default=None,
    help=f"Frontend host name or IP address. [env: {ENV_FRONTEND_ADDRESS}]",
)
@click.option(
    "-p", "--port",
    type=int,
    default=None,
    help=f"Frontend network control port. [env: {ENV_FRONTEND_PORT}]",
)
@click.option(
    "-n", "--name",
    type=str,
    default=None,
    help=f"Display name of the frontend. [env: {ENV_FRONTEND_NAME}]",
)
@click.option(
    "-t", "--timeout",
    type=float,
    default=None,
    help=f"Connect and read timeout in ms. [env: {ENV_SESSION_TIMEOUT}]",
)
@click.option(
    "--protocol-log-file",
    type=click.Path(dir_okay=False),
    default=None,
    help=f"Append every protocol line to this file. [env: {ENV_PROTOCOL_LOG_FILE}]",
)
@click.option(
    "-v", "--verbose",
    count=True,
    help="Increase logging verbosity (-v info, -vv debug, -vvv raw traffic).",
)
@click.option(
    "-q", "--quiet",
    is_flag=True,
    default=False,
    help="Suppress all output except errors.",
)
@click.version_option(package_name="mythremote")
@click.pass_context
def main(
    ctx: click.Context,
    config_file: Path | None,
    address: str | None,
    port: int | None,
    name: str | None,
    timeout: float | None,
    protocol_log_file: str | None,
    verbose: int,
    quiet: bool,
) -> None:
    """
    mythremote - Remote control for a MythTV frontend over its network control port.

    Configuration is loaded with the following precedence (highest to lowest):

    \b
    1. Environment variables
    2. CLI arguments
    3. Configuration file
    4. Default values

    Example usage:

    \b
        # Jump to live TV
        mythremote -a 192.168.1.20 jump livetv

        # Pause playback
        mythremote -a lounge.local play speed pause

        # Follow the frontend location until interrupted
        mythremote -a lounge.local watch --interval 1000
    """
    cli_args: dict[str, Any] = {}
    if address is not None:
        cli_args["address"] = address
    if port is not None:
        cli_args["port"] = port
    if name is not None:
        cli_args["name"] = name
    if timeout is not None:
        cli_args["timeout"] = timeout
    if protocol_log_file is not None:
        cli_args["protocol_log_file"] = protocol_log_file

    ctx.obj = {
        "config_file": config_file,
        "cli_args": cli_args,
        "verbose": verbose,
        "quiet": quiet,
    }


@main.command()
@click.argument("location")
@click.pass_context
def jump(ctx: click.Context, location: str) -> None:
    """Jump to a frontend LOCATION such as livetv or mainmenu."""
    config = load_config(ctx)
    ok = run(config, lambda remote: remote.send_jump(location))
    require(ok, f"Jump to {location!r} failed")


@main.command()
@click.argument("keys", nargs=-1, required=True)
@click.pass_context
def key(ctx: click.Context, keys: tuple[str, ...]) -> None:
    """Send one or more KEYS, e.g. `key up up enter`."""
    config = load_config(ctx)

    async def send_keys(remote: FrontendRemote) -> str | None:
        for k in keys:
            if not await remote.send_key(k):
                return k
        return None

    failed = run(config, send_keys)
    require(failed is None, f"Key {failed!r} failed")


@main.command()
@click.argument("subcommand", nargs=-1, required=True)
@click.pass_context
def play(ctx: click.Context, subcommand: tuple[str, ...]) -> None:
    """Send a playback SUBCOMMAND, e.g. `play speed pause`."""
    config = load_config(ctx)
    line = " ".join(subcommand)
    ok = run(config, lambda remote: remote.send_play(line))
    require(ok, f"Play {line!r} failed")


@main.command()
@click.argument("name", nargs=-1, required=True)
@click.pass_context
def query(ctx: click.Context, name: tuple[str, ...]) -> None:
    """Run a query such as `query location` and print the result."""
    config = load_config(ctx)
    what = " ".join(name)
    echo_lines(run(config, lambda remote: remote.query(what)), f"Query {what!r} failed")


@main.command()
@click.argument("text")
@click.pass_context
def text(ctx: click.Context, text: str) -> None:
    """Type TEXT on the frontend one key at a time."""
    config = load_config(ctx)
    ok = run(config, lambda remote: remote.send_text(text))
    require(ok, "Sending text failed")


@main.command()
@click.argument("line", nargs=-1, required=True)
@click.pass_context
def send(ctx: click.Context, line: tuple[str, ...]) -> None:
    """Send a raw command LINE and print the response."""
    config = load_config(ctx)
    command = " ".join(line)
    echo_lines(run(config, lambda remote: remote.send_raw(command)), f"{command!r} failed")


@main.command()
@click.option(
    "-i", "--interval",
    type=float,
    default=None,
    help="Polling interval in ms. [default: session poll interval]",
)
@click.pass_context
def watch(ctx: click.Context, interval: float | None) -> None:
    """Print status and location changes until interrupted."""
    config = load_config(ctx)
    period = interval if interval is not None else config.session.poll_interval
    require(period > 0, "Polling interval must be positive")

    try:
        asyncio.run(watch_frontend(config, period))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
    except FrontendError as e:
        raise click.ClickException(str(e)) from e


async def watch_frontend(config: Config, interval: float) -> None:
    """
    Follow the frontend until a shutdown signal arrives or the session ends.

    Args:
        config: Loaded configuration.
        interval: Polling interval in ms.
    """
    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()

    def signal_handler() -> None:
        logger.info("Shutdown signal received")
        stop_event.set()

    if sys.platform != "win32":
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, signal_handler)

    async def wait_for_stop(remote: FrontendRemote) -> None:
        await remote.poller.check_location()
        await stop_event.wait()

    await run_with_remote(
        config,
        wait_for_stop,
        poll_interval=interval,
        listener=EchoListener(stop_event),
    )


@main.command("generate-config")
@click.pass_context
def generate_config(ctx: click.Context) -> None:
    """Write the effective configuration to the config file and exit."""
    config = load_config(ctx, skip_validation=True)
    target_path = ctx.obj["config_file"] or DEFAULT_CONFIG_PATH
    try:
        config.save(target_path)
    except OSError as e:
        raise click.ClickException(f"Error generating config file: {e}") from e
    click.echo(f"Configuration file generated: {target_path}")


if __name__ == "__main__":
    main()
