#!/usr/bin/env python3
"""
CLI Gateway - HTTP gateway to whitelisted command line apps
"""
import argparse
import asyncio
import logging
import signal
import sys
from pathlib import Path

from core.config import DEFAULT_LISTEN, GatewayConfig, build_config
from utils.helpers import load_config

DESCRIPTION = """\
A HTTP gateway to command line apps.

Start a HTTP service, and handle routes:
    GET  /{command}/{args...}[?flag=val]
       will run "$ command [--flag val] [args]"
       and response {"stdout": "", "stderr": ""} in JSON or plain output (2>&1).
    POST /
       with data: {"command": "cmd subcmd", "flags": {"k": "v"},
                   "args": ["arg"], "envs": {"K": "V"}}
       will run "$ [K=V] command subcmd [--k v] [arg]"
       and response {"stdout": "", "stderr": ""} in JSON or plain output text.
"""

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cligateway",
        description=DESCRIPTION,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "whitelist",
        nargs="*",
        metavar="cmd",
        help="allowed commands. Make sure they are SAFE to expose.",
    )
    parser.add_argument(
        "--add-dashes",
        action="store_true",
        help="add dashes (-a or --word) to flags if not exist",
    )
    parser.add_argument(
        "--env-key-to-upper",
        action="store_true",
        help="environment variables keys to UPPER",
    )
    parser.add_argument(
        "--resp",
        default=None,
        help="text/json: response output in json {stdout, stderr} or plain text (default: json)",
    )
    parser.add_argument(
        "--http",
        default=None,
        help=f"HTTP service address (default: {DEFAULT_LISTEN})",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="kill commands running longer than this many seconds (default: no limit)",
    )
    parser.add_argument("--verbose", action="store_true", help="print verbose logs")
    parser.add_argument(
        "--config",
        default=None,
        help="Path to optional config YAML file",
    )
    parser.add_argument(
        "--validate-only",
        action="store_true",
        help="Validate and print resolved config, then exit",
    )
    return parser


def parse_cli_args(argv=None):
    """Parse runtime CLI arguments."""
    return build_parser().parse_args(argv)


def setup_logging(file_config: dict):
    """Setup logging based on configuration"""
    log_config = (file_config or {}).get('logging', {}) or {}
    level = getattr(logging, str(log_config.get('level', 'INFO')).upper(), logging.INFO)
    handlers = [logging.StreamHandler(sys.stdout)]

    log_file = log_config.get('file')
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=level,
        format='[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s',
        handlers=handlers,
    )


def print_runtime_summary(config: GatewayConfig, args) -> None:
    print("✅ Config validation passed")
    print(f"config: {args.config}")
    print(f"whitelist: {sorted(config.whitelist)}")
    print(f"listen: {config.listen}")
    print(f"response: {config.response_format}")
    print(f"add_dashes: {config.add_dashes}")
    print(f"env_key_to_upper: {config.env_key_upper}")
    print(f"timeout_seconds: {config.timeout_seconds}")
    print(f"max_request_bytes: {config.max_request_bytes}")
    print(f"verbose: {config.verbose}")


def resolve_config(args):
    """Load the optional YAML file and merge CLI args over it."""
    file_config = load_config(args.config) if args.config else {}
    return file_config, build_config(file_config, args)


async def serve(config: GatewayConfig) -> None:
    from aiohttp import web
    from core.server import create_app

    app = create_app(config)
    # Cancel handlers when the client goes away so their child process is killed.
    runner = web.AppRunner(app, handler_cancellation=True)
    await runner.setup()
    host, port = config.host_port
    site = web.TCPSite(runner, host, port)
    await site.start()

    logger.info(
        "cligateway start:\n"
        "\tListening and serving HTTP on %s\n"
        "\tallowed commands: %s\n"
        "\tresponse in %s",
        config.listen,
        sorted(config.whitelist),
        config.response_format,
    )

    shutdown_event = asyncio.Event()
    loop = asyncio.get_running_loop()

    def _request_shutdown(sig_num: int):
        logger.info("Received signal %s, shutting down...", sig_num)
        shutdown_event.set()

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, _request_shutdown, int(sig))
        except NotImplementedError:
            signal.signal(sig, lambda s, _f: _request_shutdown(int(s)))

    await shutdown_event.wait()
    await runner.cleanup()
    logger.info("✅ Shutdown complete")


async def main(argv=None):
    """Main application entry point"""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        file_config, config = resolve_config(args)
    except (FileNotFoundError, ValueError) as e:
        print(f"❌ {e}", file=sys.stderr)
        parser.print_usage(sys.stderr)
        sys.exit(1)

    if args.validate_only:
        print_runtime_summary(config, args)
        return

    setup_logging(file_config)
    try:
        await serve(config)
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        sys.exit(1)


def run():
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        print("\n👋 Interrupted by user")


if __name__ == "__main__":
    run()
