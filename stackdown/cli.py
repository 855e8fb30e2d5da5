"""Command-line entrypoint for stackdown."""

import logging
import signal
import sys
import threading
from contextlib import contextmanager

import click

from . import __version__
from .backends import DockerCLI
from .config import load_settings
from .errors import (
    ConfigError,
    DirectoryQueryError,
    InvalidStackName,
    StackRemovalError,
    TeardownCancelled,
)
from .names import validate_stack_names
from .progress import ConsoleSink, JsonSink
from .teardown import ConvergenceWaiter, remove_stacks

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_CANCELLED = 130


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Log debug output to stderr")
@click.version_option(version=__version__, prog_name="stackdown")
@click.pass_context
def main(ctx, verbose):
    """stackdown - tear down Docker swarm stacks."""
    ctx.ensure_object(dict)
    # progress and errors go through the sink; logging is only for -v
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )


@contextmanager
def _cancel_on_signal(cancel: threading.Event):
    """Turn SIGINT/SIGTERM into a cancellation request for the duration of a run."""
    def handler(signum, frame):
        cancel.set()

    if threading.current_thread() is not threading.main_thread():
        yield
        return

    previous = {sig: signal.signal(sig, handler) for sig in (signal.SIGINT, signal.SIGTERM)}
    try:
        yield
    finally:
        for sig, old_handler in previous.items():
            signal.signal(sig, old_handler)


def _fail(message: str, code: int = EXIT_FAILED) -> None:
    click.echo(f"❌ {message}", err=True)
    sys.exit(code)


@main.command("rm")
@click.argument("stacks", nargs=-1, required=True)
@click.option("-d", "--detach/--no-detach", default=True, show_default=True,
              help="Exit immediately instead of waiting for the stack tasks to converge")
@click.option("--context", "docker_context", help="Docker context to use")
@click.option("--config", "config_path", type=click.Path(dir_okay=False), help="Settings file (YAML)")
@click.option("--poll-interval", type=float, help="Initial delay between task polls, in seconds")
@click.option("--wait-timeout", type=float, help="Give up waiting on a stack after this many seconds")
@click.option("--json", "output_json", is_flag=True, help="Output progress as JSON lines")
def rm_cmd(stacks, detach, docker_context, config_path, poll_interval, wait_timeout, output_json):
    """Remove one or more stacks."""
    try:
        validate_stack_names(stacks)
        settings = load_settings(config_path, {
            "docker_context": docker_context,
            "poll_interval": poll_interval,
            "wait_timeout": wait_timeout,
        })
    except (InvalidStackName, ConfigError) as e:
        _fail(str(e))

    docker = DockerCLI.from_settings(settings)
    waiter = ConvergenceWaiter.from_settings(settings)
    sink = JsonSink() if output_json else ConsoleSink()
    cancel = threading.Event()

    try:
        with _cancel_on_signal(cancel):
            remove_stacks(docker, docker, stacks, detach=detach, sink=sink, cancel=cancel, waiter=waiter)
    except StackRemovalError as e:
        _fail(str(e))
    except DirectoryQueryError as e:
        _fail(str(e))
    except (TeardownCancelled, KeyboardInterrupt) as e:
        _fail(str(e) or "teardown cancelled", EXIT_CANCELLED)

    sys.exit(EXIT_OK)


main.add_command(rm_cmd, name="remove")
main.add_command(rm_cmd, name="down")


if __name__ == "__main__":
    main()
