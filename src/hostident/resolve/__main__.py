from getpass import getpass
from typing import List, Optional
import argparse
import asyncio
import logging
import os
import sys

from pydantic import SecretStr

from hostident.app.cli import configure_logging, init_sentry
from hostident.app.config import Settings
from hostident.app.metrics import create_metrics_client
from hostident.model.host import Credential, InvalidHostQuery, ResolvedHost
from hostident.resolve.host import HostResolver

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hostident", description="Resolve the network identity of hosts"
    )
    parser.add_argument(
        "name", nargs="+", help="Host name, host\\instance or IP address to resolve."
    )
    parser.add_argument(
        "--username",
        default=None,
        help="Remote-management user (DOMAIN\\user or user@domain). "
        "Without it the current identity's default credentials are used.",
    )
    parser.add_argument(
        "--password-stdin",
        action="store_true",
        help="Read the password from stdin instead of HOSTIDENT_PASSWORD or a prompt.",
    )
    parser.add_argument(
        "--dns-only",
        action="store_true",
        help="Skip the CIM/WMI queries and only use DNS.",
    )
    parser.add_argument("--ping-timeout", type=float, default=None)
    parser.add_argument("--strategy-timeout", type=float, default=None)
    parser.add_argument(
        "--json", action="store_true", help="Print one JSON object per host."
    )
    return parser


def read_credential(username: Optional[str], password_stdin: bool) -> Optional[Credential]:
    if username is None:
        return None
    if password_stdin:
        password = sys.stdin.readline().rstrip("\r\n")
    else:
        password = os.getenv("HOSTIDENT_PASSWORD")
        if password is None:
            password = getpass(f"Password for {username}: ")
    return Credential(username=username, password=SecretStr(password))


def format_record(record: ResolvedHost, as_json: bool) -> str:
    if as_json:
        return record.model_dump_json(by_alias=True)
    return " ".join(
        f"{key}={value if value is not None else ''}"
        for key, value in record.model_dump(by_alias=True).items()
    )


async def realMain(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = vars(parser.parse_args(argv))
    if args.get("password_stdin") and args.get("username") is None:
        parser.error("--password-stdin requires --username")

    overrides = {}
    if args.get("ping_timeout") is not None:
        overrides["ping_timeout"] = args["ping_timeout"]
    if args.get("strategy_timeout") is not None:
        overrides["strategy_timeout"] = args["strategy_timeout"]
    if args.get("dns_only"):
        overrides["instrumentation_available"] = False
    settings = Settings(**overrides)

    configure_logging(settings.debug)
    init_sentry(settings)

    credential = read_credential(args.get("username"), args.get("password_stdin", False))

    metrics = create_metrics_client(
        settings.metrics_backend,
        host=settings.statsd_host,
        port=settings.statsd_port,
        prefix=settings.statsd_prefix,
        debug=settings.debug,
    )
    await metrics.connect()

    resolver = HostResolver(settings, metrics=metrics)
    names: List[str] = args.get("name", [])

    status = 0
    try:
        for name in names:
            try:
                record = await resolver.resolve(name, credential)
            except InvalidHostQuery as e:
                logger.error("Skipping input: %s", e)
                status = 1
                continue
            print(format_record(record, args.get("json", False)))
    finally:
        await metrics.close()
    return status


def main() -> None:
    sys.exit(asyncio.run(realMain()))


if __name__ == "__main__":
    main()
