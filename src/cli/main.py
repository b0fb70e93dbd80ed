"""Command-line interface for students: connect to the server and save work."""

import argparse
import asyncio
import json
import sys
from pathlib import Path

from loguru import logger

from application.submission import SubmissionOrchestrator
from domain.exceptions import CodegrinderError
from infrastructure.client_config import (
    COOKIE_PREFIX,
    DEFAULT_HOST,
    ClientConfig,
    load_client_config,
    save_client_config,
)
from infrastructure.config import configure_logging
from infrastructure.errors import TransportError
from infrastructure.grinder_client import GrinderClient

INIT_PROMPT = """Please follow these steps:

1.  Open a new tab in your browser and copy this URL into the address bar:

    https://{host}/api/v2/users/me/cookie

2.  The browser will display something of the form:

    {prefix}...

3.  Copy that entire string to the clipboard and paste it below.

Paste here: """


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="grind", description="command-line interface to codegrinder")
    parser.add_argument("--verbose", "-v", action="store_true", help="show debug logging")
    parser.add_argument("--config", type=Path, default=None, help="path to the configuration file")
    subparsers = parser.add_subparsers(dest="command", required=True)

    init = subparsers.add_parser("init", help="connect to the codegrinder server")
    init.add_argument("--host", default=DEFAULT_HOST, help="server host name")

    save = subparsers.add_parser("save", help="save the current problem step to the server")
    save.add_argument("directory", nargs="?", default=".", help="problem directory (default: current)")
    save.add_argument("--comment", "-m", default="saving from command line", help="commit comment")

    return parser


async def command_init(args: argparse.Namespace) -> int:
    """Store the session cookie issued by the auth layer after a browser login."""
    cookie = input(INIT_PROMPT.format(host=args.host, prefix=COOKIE_PREFIX)).strip()
    if not cookie.startswith(COOKIE_PREFIX):
        logger.error(f"The cookie must start with {COOKIE_PREFIX}; perhaps you copied the wrong thing?")
        return 1

    config = ClientConfig(host=args.host, cookie=cookie)
    user = await GrinderClient(config).get_current_user()
    path = save_client_config(config, args.config)
    logger.info(f"Saved configuration to {path}")
    print(json.dumps(user, indent=4))
    return 0


async def command_save(args: argparse.Namespace) -> int:
    try:
        config = load_client_config(args.config)
    except (OSError, ValueError) as e:
        logger.error(f"Unable to load config file ({e}); try running \"grind init\"")
        return 1

    orchestrator = SubmissionOrchestrator(GrinderClient(config))
    saved = await orchestrator.save(args.directory, comment=args.comment)
    state = "closed" if saved.get("closed") else "open"
    print(f"commit {saved.get('id')} saved ({state})")
    return 0


COMMANDS = {
    "init": command_init,
    "save": command_save,
}


def main(argv: list[str] | None = None) -> int:
    """Run one command and translate failures into an exit status."""
    args = build_parser().parse_args(argv)
    configure_logging("DEBUG" if args.verbose else "INFO")

    try:
        return asyncio.run(COMMANDS[args.command](args))
    except CodegrinderError as e:
        logger.error(str(e))
    except TransportError as e:
        logger.error(f"Server request failed: {e}")
    except KeyboardInterrupt:
        logger.warning("Interrupted")
    return 1


if __name__ == "__main__":
    sys.exit(main())
