"""Command-line entry point: print a GitHub token built from the environment."""

import argparse
import json
import logging
import sys

from pydantic import ValidationError

from .auth import token_source_from_config
from .config import Config, setup_logging
from .exceptions import GitHubAuthError

logger = logging.getLogger("github-app-auth.main")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        "github-app-token",
        description=(
            "Generate a GitHub App JWT, installation token, or echo a personal "
            "access token. Credentials come from GITHUB_APP_* variables."
        ),
    )
    parser.add_argument("--installation-id", type=int, help="installation ID")
    parser.add_argument("--base-url", help="GitHub Enterprise Server base URL")
    parser.add_argument(
        "--json",
        action="store_true",
        help="print token, type and expiry as JSON",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    overrides = {}
    if args.installation_id is not None:
        overrides["installation_id"] = args.installation_id
    if args.base_url:
        overrides["base_url"] = args.base_url

    try:
        config = Config(**overrides)
    except ValidationError as e:
        setup_logging()
        logger.error(f"Invalid configuration: {e}")
        return 1

    setup_logging(config.log_level)
    logger.debug(f"Loaded {config!r}")

    try:
        with token_source_from_config(config) as source:
            token = source.token()
    except GitHubAuthError as e:
        logger.error(f"Token generation failed: {e.message}")
        for suggestion in e.suggestions:
            logger.error(f"  - {suggestion}")
        return 1

    if args.json:
        print(
            json.dumps(
                {
                    "token": token.access_token,
                    "token_type": token.token_type,
                    "expiry": token.expiry.isoformat() if token.expiry else None,
                }
            )
        )
    else:
        print(token.access_token)
    return 0


if __name__ == "__main__":
    sys.exit(main())
