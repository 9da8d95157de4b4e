"""
Map executor outcomes and gateway errors to HTTP responses
"""
import logging

from aiohttp import web

from core.errors import ExecutionError
from core.executor import ExecOutcome

logger = logging.getLogger(__name__)

RESPONSE_JSON = "json"
RESPONSE_TEXT = "text"
RESPONSE_FORMATS = (RESPONSE_JSON, RESPONSE_TEXT)


def normalize_response_format(raw: str) -> str:
    """Unknown formats fall back to json."""
    value = str(raw or "").strip().lower()
    if value in RESPONSE_FORMATS:
        return value
    return RESPONSE_JSON


def error_response(status: int, message: str) -> web.Response:
    return web.json_response({"error": message}, status=status)


class ResponseFormatter:
    """Shape a finished run as either JSON ``{stdout, stderr}`` or plain text"""

    def __init__(self, response_format: str = RESPONSE_JSON):
        self.response_format = normalize_response_format(response_format)

    @property
    def combined(self) -> bool:
        """Text responses carry stdout and stderr merged (2>&1)."""
        return self.response_format == RESPONSE_TEXT

    def format_outcome(self, outcome: ExecOutcome) -> web.Response:
        """
        Build the response for an executor outcome

        Failures raise ExecutionError carrying only the reason; captured
        output stays in the logs.
        """
        if not outcome.ok:
            raise ExecutionError(f"failed to run cmd: {outcome.reason}")
        if self.combined:
            body = outcome.raw or outcome.stdout.encode("utf-8")
            return web.Response(body=body, content_type="text/plain")
        return web.json_response({"stdout": outcome.stdout, "stderr": outcome.stderr})
