"""Command-line entry point: engine.yml -> SSH shell -> relay loop."""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import IO, BinaryIO, Optional, Union

from .config import Configuration, load_config
from .credentials import load_signer
from .errors import ConfigError, EngineError
from .logs import close_logging, setup_logging
from .relay import RelayLoop, StdinLineReader
from .transport import SessionTransport


async def run_session(
    config: Configuration,
    logger: logging.Logger,
    stdin: Optional[Union[int, IO]] = None,
    stdout: Optional[BinaryIO] = None,
    stderr: Optional[BinaryIO] = None,
) -> None:
    """Connect, open the shell, mirror its output and relay local input."""
    if stdin is None:
        stdin = sys.stdin
    stdout = stdout or sys.stdout.buffer
    stderr = stderr or sys.stderr.buffer

    signer = load_signer(config.private_key_file)

    async with SessionTransport(config, signer) as transport:
        logger.debug("Connected to %s as %s", config.address, config.user)
        session = await transport.open_shell()
        session.mirror(stdout, stderr)

        relay = RelayLoop(
            session.stdin,
            StdinLineReader(stdin),
            config.remote_command,
            debug=config.debug_logging,
            logger=logger,
        )
        await relay.run()


def main(argv: Optional[list[str]] = None) -> int:
    """Run the engine and return the process exit status."""
    parser = argparse.ArgumentParser(
        prog="ssh-engine",
        description="Relay local input to a remote SSH shell configured by engine.yml",
    )
    parser.add_argument(
        "-C",
        "--directory",
        type=Path,
        default=Path("."),
        help="Directory holding engine.yml and engine.log (default: current directory)",
    )
    args = parser.parse_args(argv)

    try:
        config = load_config(args.directory)
    except ConfigError as e:
        print(e)
        return 1

    try:
        logger = setup_logging(config, args.directory)
    except EngineError as e:
        print(e, file=sys.stderr)
        return 1

    try:
        asyncio.run(run_session(config, logger))
    except EngineError as e:
        logger.error("%s", e)
        print(e, file=sys.stderr)
        return 1
    finally:
        close_logging(logger)

    return 0
