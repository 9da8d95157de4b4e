"""HTTP surface: aiohttp routes wired to the invocation pipeline.

Routes:
    GET  /{command}/{args...}[?flag=val]
    POST /   {"command": "cmd subcmd", "flags": {...}, "args": [...], "envs": {...}}
"""

from __future__ import annotations

import logging
from typing import Optional

from aiohttp import web

from core.config import GatewayConfig
from core.errors import ClientRequestError, GatewayError
from core.executor import CommandExecutor
from core.formatter import ResponseFormatter, error_response
from core.guard import check_command, sanitize_args
from core.invocation import Invocation
from core.translators import decode_body, from_get, from_post

logger = logging.getLogger(__name__)

@web.middleware
async def error_middleware(request: web.Request, handler):
    """Turn every failure into a single JSON ``{"error": ...}`` body."""
    try:
        return await handler(request)
    except GatewayError as e:
        return error_response(e.status, e.message)
    except web.HTTPException as e:
        if e.status < 400:
            raise
        return error_response(e.status, e.reason)
    except Exception:
        logger.error("Unhandled error for %s %s", request.method, request.path, exc_info=True)
        return error_response(500, "internal server error")


class GatewayHandler:
    """Translate -> guard -> sanitize -> execute -> format, once per request."""

    def __init__(self, config: GatewayConfig, executor, formatter: ResponseFormatter):
        self.config = config
        self.executor = executor
        self.formatter = formatter

    async def handle_get(self, request: web.Request) -> web.StreamResponse:
        invocation = from_get(
            request.match_info["command"],
            request.match_info.get("args", ""),
            list(request.query.items()),
        )
        return await self.run(invocation)

    async def handle_post(self, request: web.Request) -> web.StreamResponse:
        payload = decode_body(await request.read())
        return await self.run(from_post(payload))

    async def run(self, invocation: Invocation) -> web.StreamResponse:
        if not invocation.command:
            raise ClientRequestError("no command given")

        args = invocation.full_args(self.config.add_dashes)
        check_command(invocation.command, args, self.config.whitelist, verbose=self.config.verbose)
        args = sanitize_args(args)

        outcome = await self.executor.run(
            invocation.command,
            args,
            invocation.env_mapping(self.config.env_key_upper),
            combined=self.formatter.combined,
        )
        return self.formatter.format_outcome(outcome)


def create_app(config: GatewayConfig, executor: Optional[object] = None) -> web.Application:
    """Build the gateway application; *executor* is injectable for tests."""
    if executor is None:
        executor = CommandExecutor(timeout_seconds=config.timeout_seconds, verbose=config.verbose)
    handler = GatewayHandler(config, executor, ResponseFormatter(config.response_format))

    app = web.Application(middlewares=[error_middleware], client_max_size=config.max_request_bytes)
    app.router.add_post("/", handler.handle_post)
    app.router.add_get("/{command}", handler.handle_get)
    app.router.add_get("/{command}/{args:.*}", handler.handle_get)
    return app
