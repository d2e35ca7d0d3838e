"""CLI entry point for objectacl."""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

import httpx
import yaml

from objectacl.client import ObjectAclClient
from objectacl.config import ObjectAclConfig, load_config
from objectacl.errors import S3Error, ServiceError
from objectacl.logging_config import configure_logging
from objectacl.metrics import init_metrics
from objectacl.models import CannedAcl
from objectacl.transport import HttpxTransport

logger = logging.getLogger("objectacl")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Args:
        argv: Argument list to parse. Defaults to sys.argv[1:].

    Returns:
        Parsed argument namespace.
    """
    parser = argparse.ArgumentParser(
        prog="objectacl",
        description="objectacl - set access control lists on S3-compatible objects",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to YAML configuration file",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Log level (overrides config, default: INFO)",
    )
    parser.add_argument(
        "--log-format",
        type=str,
        default=None,
        choices=["text", "json"],
        help="Log format: 'text' (human-readable) or 'json' (structured)",
    )
    parser.add_argument(
        "--host",
        type=str,
        default=None,
        help="Service host (overrides config, default: s3.amazonaws.com)",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)
    put = subparsers.add_parser("put-object-acl", help="Change the ACL of an object")
    put.add_argument("bucket", help="Bucket name")
    put.add_argument("key", help="Object key")
    source = put.add_mutually_exclusive_group(required=True)
    source.add_argument(
        "--canned",
        choices=[acl.value for acl in CannedAcl],
        help="Canned ACL keyword",
    )
    source.add_argument(
        "--policy",
        type=Path,
        help="YAML or JSON file holding an AccessControlPolicy",
    )
    put.add_argument("--version-id", default=None, help="Object version to modify")
    return parser.parse_args(argv)


def load_policy(path: Path) -> dict[str, Any]:
    """Read a policy file; ``.json`` files are parsed as JSON, anything else as YAML."""
    with open(path, "r") as fh:
        if path.suffix == ".json":
            return json.load(fh)
        return yaml.safe_load(fh) or {}


async def _put_object_acl(config: ObjectAclConfig, args: argparse.Namespace, acl: Any) -> int:
    options = {"versionId": args.version_id} if args.version_id is not None else None

    async with HttpxTransport(
        scheme=config.service.scheme,
        port=config.service.port,
        timeout=config.service.timeout,
    ) as transport:
        client = ObjectAclClient.from_config(transport, config.service)
        try:
            await client.put_object_acl(args.bucket, args.key, acl, options)
        except ServiceError as exc:
            logger.error("Service error: %s", exc)
            return 2
        except S3Error as exc:
            logger.error("Invalid ACL: %s", exc.message)
            return 1
        except httpx.HTTPError as exc:
            logger.error("Request failed: %s: %s", type(exc).__name__, exc)
            return 3
    return 0


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the objectacl CLI.

    Args:
        argv: Argument list to parse. Defaults to sys.argv[1:].
    """
    args = parse_args(argv)

    logging.basicConfig(level=logging.INFO, stream=sys.stderr)

    if args.config is not None:
        try:
            config = load_config(args.config)
        except FileNotFoundError:
            logger.error("Config file not found: %s", args.config)
            sys.exit(1)
        except Exception as exc:
            logger.error("Failed to load config: %s", exc)
            sys.exit(1)
    else:
        config = ObjectAclConfig()

    if args.host is not None:
        config.service.host = args.host
    if args.log_level is not None:
        config.logging.level = args.log_level
    if args.log_format is not None:
        config.logging.format = args.log_format

    configure_logging(level=config.logging.level, fmt=config.logging.format)

    if config.metrics.enabled:
        init_metrics()

    if args.command == "put-object-acl":
        acl: Any = args.canned
        if args.policy is not None:
            try:
                acl = load_policy(args.policy)
            except (OSError, yaml.YAMLError, json.JSONDecodeError) as exc:
                logger.error("Failed to read policy: %s", exc)
                sys.exit(1)
        sys.exit(asyncio.run(_put_object_acl(config, args, acl)))


if __name__ == "__main__":
    main()
