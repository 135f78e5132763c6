"""CLI entry point for replsession."""

from __future__ import annotations

import asyncio
import logging
import sys
import threading

import typer

from replsession.config import SessionConfig
from replsession.errors import SessionClosedError, StartupError

app = typer.Typer(
    name="replsession",
    help="Drive a REPL subprocess one line at a time.",
    no_args_is_help=True,
)


def setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )


def _read_stdin(
    loop: asyncio.AbstractEventLoop, lines: asyncio.Queue[str | None]
) -> None:
    """Feed terminal lines to the event loop from a daemon thread."""
    try:
        for line in sys.stdin:
            loop.call_soon_threadsafe(lines.put_nowait, line)
        loop.call_soon_threadsafe(lines.put_nowait, None)
    except RuntimeError:
        # Event loop already closed: the session is over.
        return


async def _interact(command: str, args: list[str], config: SessionConfig) -> int:
    """Bridge the terminal to a console session until either side ends.

    Returns the console's exit code.
    """
    from replsession.session import launch

    session = await launch(command, args, config=config)
    loop = asyncio.get_running_loop()
    stdin_lines: asyncio.Queue[str | None] = asyncio.Queue()
    threading.Thread(
        target=_read_stdin, args=(loop, stdin_lines), daemon=True
    ).start()

    async def _print_output() -> None:
        async for line in session:
            typer.echo(line)

    async def _read_input() -> None:
        while True:
            line = await stdin_lines.get()
            if line is None:
                break
            try:
                await session.send(line.rstrip("\r\n"))
            except SessionClosedError:
                break
        await session.close()

    printer = asyncio.create_task(_print_output())
    reader = asyncio.create_task(_read_input())

    try:
        await printer
    except asyncio.CancelledError:
        session.kill()
        raise
    if not reader.done():
        # The console exited on its own; stop waiting for the terminal.
        reader.cancel()
    code = await session.wait_closed()
    return code if code is not None else 1


def _run(command: str, args: list[str], config: SessionConfig) -> None:
    try:
        code = asyncio.run(_interact(command, args, config))
    except StartupError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)
    except KeyboardInterrupt:
        raise typer.Exit(130)
    raise typer.Exit(code)


@app.command(context_settings={"ignore_unknown_options": True})
def run(
    command: str = typer.Argument(help="Console program to launch."),
    args: list[str] | None = typer.Argument(
        None, help="Arguments for the console program (put them after --)."
    ),
    banner: str | None = typer.Option(
        None, "--banner", "-b", help="Expected text in the first output line."
    ),
    quit_command: str | None = typer.Option(
        None, "--quit", "-q", help="Line that asks the console to exit."
    ),
    config_file: str | None = typer.Option(
        None, "--config", "-c", help="Path to a JSON config file."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Log every line sent and received."
    ),
) -> None:
    """Run a console program and talk to it from the terminal."""
    setup_logging(verbose)

    config = SessionConfig.load(config_file)
    if banner is not None:
        config.banner = banner
    if quit_command is not None:
        config.quit_command = quit_command
    if verbose:
        config.debug = True

    _run(command, list(args or []), config)


@app.command()
def chrome(
    url: str = typer.Argument(help="Page to open in headless Chrome."),
    binary: str | None = typer.Option(
        None, "--binary", help="Chrome executable (default: auto-detect)."
    ),
    config_file: str | None = typer.Option(
        None, "--config", "-c", help="Path to a JSON config file."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Log every line sent and received."
    ),
) -> None:
    """Open a JavaScript console on a page in headless Chrome."""
    from replsession.presets import chrome_config, chrome_repl_command

    setup_logging(verbose)

    config = chrome_config(SessionConfig.load(config_file))
    if verbose:
        config.debug = True

    try:
        command, args = chrome_repl_command(url, binary=binary)
    except StartupError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    _run(command, args, config)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
