"""
CLI Module

Architectural Intent:
- Command-line interface for the bouldering backend
- Entry point for serving the API and for operational chores
- Delegates to application use cases via composition root
- Supports --verbose/--debug flags for log level control
"""

import argparse
import sys
import asyncio
import json
import logging
import traceback
from bouldering.infrastructure.logging import configure_logging


def _build_container(config_path):
    from bouldering.composition_root import create_container
    from bouldering.infrastructure.config import load_config

    return create_container(load_config(config_path))


async def async_main():
    parser = argparse.ArgumentParser(
        description="Bouldering Backend: tweet API and storage cleanup worker"
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable verbose output"
    )
    parser.add_argument(
        "--debug", action="store_true", help="Enable debug output with tracebacks"
    )
    parser.add_argument(
        "--json-logs", action="store_true", help="Emit structured JSON logs"
    )
    parser.add_argument(
        "--config", "-c", default=None, help="Path to JSON config (bouldering.json)"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default=None, help="Bind address")
    serve_parser.add_argument("--port", "-p", type=int, default=None, help="Bind port")

    subparsers.add_parser("handlers", help="Show registered event handlers")

    relay_parser = subparsers.add_parser(
        "relay-outbox", help="Dispatch pending events from the outbox"
    )
    relay_parser.add_argument(
        "--limit", "-l", type=int, default=100, help="Maximum events to dispatch"
    )

    purge_parser = subparsers.add_parser(
        "purge", help="Delete every stored object under a prefix"
    )
    purge_parser.add_argument("prefix", help="Storage prefix, e.g. v1/public/u1/t1")

    args = parser.parse_args()

    # Configure logging based on flags
    if args.debug:
        configure_logging(level=logging.DEBUG, json_format=args.json_logs)
    elif args.verbose:
        configure_logging(level=logging.INFO, json_format=args.json_logs)
    else:
        configure_logging(level=logging.WARNING, json_format=args.json_logs)

    verbose = args.verbose or args.debug

    if args.command is None:
        parser.print_help()
        return

    try:
        container = _build_container(args.config)
    except Exception as e:
        print(f"[-] Failed to initialise: {e}")
        if verbose:
            traceback.print_exc()
        sys.exit(1)

    try:
        if args.command == "serve":
            await _serve(container, args.host, args.port)
        elif args.command == "handlers":
            _show_handlers(container)
        elif args.command == "relay-outbox":
            await _relay_outbox(container, args.limit, verbose)
        elif args.command == "purge":
            await _purge(container, args.prefix, verbose)
    finally:
        container.close()


async def _serve(container, host, port):
    from bouldering.presentation.web.app import BoulderingWebApp

    host = host or container.config.web.host
    port = port if port is not None else container.config.web.port

    await container.telemetry.initialize()
    app = BoulderingWebApp(container)
    await app.start(host, port)
    print(f"[*] Bouldering API listening on http://{host}:{app.port}")
    try:
        while True:
            await asyncio.sleep(1)
    except (KeyboardInterrupt, asyncio.CancelledError):
        print("\n[*] Stopping server.")
    finally:
        app.stop()


def _show_handlers(container):
    info = container.event_bus.handler_info()
    if not info:
        print("[*] No event handlers registered.")
        return
    print("[*] Registered event handlers:")
    for event_type, count in sorted(info.items()):
        print(f"  - {event_type}: {count}")


async def _relay_outbox(container, limit, verbose):
    if container.outbox_relay is None:
        print("[-] Outbox is not enabled (set events.use_outbox).")
        sys.exit(1)
    try:
        dispatched = await container.outbox_relay.relay_once(limit=limit)
    except Exception as e:
        print(f"[-] Relay Failed: {e}")
        if verbose:
            traceback.print_exc()
        sys.exit(1)
    print(f"[+] Dispatched {dispatched} event(s).")


async def _purge(container, prefix, verbose):
    print(f"[*] Purging storage prefix {prefix}...")
    try:
        result = await container.purge_storage_prefix.execute(prefix)
    except Exception as e:
        print(f"[-] Purge Failed: {e}")
        if verbose:
            traceback.print_exc()
        sys.exit(1)
    if not result.succeeded:
        print(f"[-] Purge incomplete: {result.deleted_count} deleted, "
              f"{len(result.errors)} failed")
        if verbose:
            print(json.dumps(result.errors, indent=2))
        sys.exit(1)
    print(f"[+] Deleted {result.deleted_count} object(s) under {prefix}.")


def main():
    asyncio.run(async_main())


if __name__ == "__main__":
    main()
