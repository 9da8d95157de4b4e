"""Whitelist guard and argument sanitizer.

The whitelist is the only authorization boundary: membership is an exact,
case-sensitive string match on the command name. The command name never goes
through the sanitizer, only the argument vector does.
"""

from __future__ import annotations

import logging
from typing import Collection, Iterable, List

from core.errors import CommandForbidden

logger = logging.getLogger(__name__)


def is_allowed(command: str, whitelist: Collection[str]) -> bool:
    return command in whitelist


def check_command(command: str, args: List[str], whitelist: Collection[str], *, verbose: bool = False) -> None:
    """Raise CommandForbidden unless *command* is whitelisted."""
    if is_allowed(command, whitelist):
        return
    if verbose:
        logger.warning("run %r forbidden: not in whitelist, args=%r", command, args)
    raise CommandForbidden()


def sanitize_args(args: Iterable[str]) -> List[str]:
    """Drop blank tokens and trim the rest."""
    cleaned: List[str] = []
    for arg in args:
        token = str(arg).strip()
        if token:
            cleaned.append(token)
    return cleaned
