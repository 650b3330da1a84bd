"""CLI entrypoints for client provisioning tasks."""

from __future__ import annotations

import argparse
import json
from collections.abc import Sequence

from oauth_server.core.client_secrets import get_client_secret_hasher


def _run_hash_client_secret(secret: str | None) -> int:
    """Hash a client secret for out-of-band provisioning, generating one if absent."""
    hasher = get_client_secret_hasher()
    output: dict[str, str] = {}
    if secret is None:
        secret = hasher.generate_secret()
        output["client_secret"] = secret
    output["hashed_secret"] = hasher.hash_secret(secret)
    print(json.dumps(output))
    return 0


def _build_parser() -> argparse.ArgumentParser:
    """Build command-line parser for supported operational commands."""
    parser = argparse.ArgumentParser(prog="python -m oauth_server.cli")
    subcommands = parser.add_subparsers(dest="command", required=True)

    hash_parser = subcommands.add_parser("hash-client-secret")
    hash_parser.add_argument(
        "--secret",
        default=None,
        help="Secret to hash. A random secret is generated and printed once when omitted.",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run CLI command."""
    parser = _build_parser()
    args = parser.parse_args(argv)
    if args.command == "hash-client-secret":
        return _run_hash_client_secret(secret=args.secret)
    parser.error("Unsupported command")
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
