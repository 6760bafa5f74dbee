"""Command-line front end for the discovery settings flow."""

from __future__ import annotations

import argparse
import asyncio
import sys
from typing import List, Optional, TextIO

from settings_app import session_store
from settings_app.config import ClientConfig, configure_logging, load_config_from_env
from settings_app.discovery_controller import DiscoveryController
from settings_app.discovery_coordinator import DiscoveryCoordinator
from settings_app.discovery_state import RevokeRequested, ShareRequested
from settings_app.identity_client import HttpIdentityService
from settings_app.phone_format import make_formatter
from settings_app.pid_state import IdentifierKind, normalize_phone_value
from settings_app.redact import redact_text
from settings_app.row_text import format_rows


def _write(output: TextIO, lines: List[str]) -> None:
    for line in lines:
        output.write(line + "\n")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Account discovery settings")
    subparsers = parser.add_subparsers(dest="command", required=True)

    session_parser = subparsers.add_parser("session", help="Store the homeserver session")
    session_parser.add_argument("--homeserver", help="Homeserver base URL")
    session_parser.add_argument("--token", required=True, help="Access token")
    session_parser.add_argument("--identity-server", help="Identity server URL")

    ids_parser = subparsers.add_parser("identity-server", help="Bind or unbind the identity server")
    ids_sub = ids_parser.add_subparsers(dest="action", required=True)
    set_parser = ids_sub.add_parser("set", help="Use an identity server")
    set_parser.add_argument("url", nargs="?", help="Identity server URL (defaults to the configured one)")
    ids_sub.add_parser("clear", help="Disconnect from the identity server")

    discovery_parser = subparsers.add_parser("discovery", help="Show or change discovery sharing")
    discovery_sub = discovery_parser.add_subparsers(dest="action", required=True)
    discovery_sub.add_parser("show", help="Print the discovery screen")
    for name in ("share", "revoke"):
        toggle_parser = discovery_sub.add_parser(name, help=f"{name.capitalize()} an identifier")
        target = toggle_parser.add_mutually_exclusive_group(required=True)
        target.add_argument("--email")
        target.add_argument("--phone")
    return parser


async def _run_discovery(args: argparse.Namespace, config: ClientConfig, output: TextIO) -> int:
    binding = session_store.load_binding(config.state_path)
    if binding is None:
        output.write("no session stored; run `session --token ...` first\n")
        return 2

    async with HttpIdentityService(binding, state_path=config.state_path, timeout_s=config.http_timeout_s) as service:
        coordinator = DiscoveryCoordinator(service)
        controller = DiscoveryController(format_phone=make_formatter(config.default_region))
        coordinator.attach(controller)

        if args.command == "identity-server":
            url = None if args.action == "clear" else (args.url or config.default_identity_server)
            await coordinator.set_identity_server(url)
        else:
            await coordinator.refresh()
            if args.action in {"share", "revoke"}:
                if args.email:
                    kind, value = IdentifierKind.EMAIL, args.email.strip()
                else:
                    kind, value = IdentifierKind.PHONE, normalize_phone_value(args.phone)
                request_type = ShareRequested if args.action == "share" else RevokeRequested
                forwarded = await coordinator.request_toggle(request_type(kind, value))
                if not forwarded:
                    output.write(f"nothing to {args.action}: identifier not listed in a matching state\n")

        _write(output, format_rows(controller.rows))
        if coordinator.last_action_error is not None:
            output.write(f"error: {redact_text(str(coordinator.last_action_error))}\n")
            return 1
    return 0


def _run_session(args: argparse.Namespace, config: ClientConfig, output: TextIO) -> int:
    binding = session_store.SessionBinding(
        homeserver_url=args.homeserver or config.homeserver_url,
        access_token=args.token,
        identity_server_url=args.identity_server or None,
    )
    session_store.save_binding(binding, config.state_path)
    output.write(f"session stored at {config.state_path}\n")
    return 0


def main(argv: Optional[List[str]] = None, output: Optional[TextIO] = None) -> int:
    if argv is None:
        argv = sys.argv[1:]
    stream = output or sys.stdout

    args = _build_parser().parse_args(argv)
    try:
        config = load_config_from_env()
    except ValueError as exc:
        stream.write(f"invalid configuration: {exc}\n")
        return 2
    configure_logging(config.log_level)

    if args.command == "session":
        return _run_session(args, config, stream)
    return asyncio.run(_run_discovery(args, config, stream))


if __name__ == "__main__":
    raise SystemExit(main())
