"""Translate inbound request data into an Invocation.

GET  /{command}/{args...}?flag=value
POST /  {"command": "cmd subcmd", "flags": {"k": "v"}, "args": ["a"], "envs": {"K": "V"}}
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from core.errors import ClientRequestError
from core.invocation import Invocation

QueryItems = Union[Mapping[str, Any], List[Tuple[str, Any]]]


def _query_pairs(query: QueryItems):
    if isinstance(query, Mapping):
        return query.items()
    return query


def from_get(command: str, tail: Optional[str], query: QueryItems) -> Invocation:
    """Build an Invocation from a GET path and its query string.

    The path tail is split on "/" as-is; empty segments survive here and are
    dropped by the sanitizer later. For repeated query keys the first value
    wins; a key sent without a value becomes a valueless flag.
    """
    args = (tail or "").split("/")
    flags: Dict[str, str] = {}
    for key, value in _query_pairs(query):
        if isinstance(value, (list, tuple)):
            if not value:
                continue
            value = value[0]
        if not key or key in flags:
            continue
        flags[str(key)] = "" if value is None else str(value)
    return Invocation(command=command, flags=flags, args=args)


def _string_map(payload: dict, name: str) -> Dict[str, str]:
    value = payload.get(name)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ClientRequestError(f"'{name}' must be an object of strings")
    for k, v in value.items():
        if not isinstance(v, str):
            raise ClientRequestError(f"'{name}.{k}' must be a string")
    return dict(value)


def _string_list(payload: dict, name: str) -> List[str]:
    value = payload.get(name)
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ClientRequestError(f"'{name}' must be an array of strings")
    return list(value)


def from_post(payload: Any) -> Invocation:
    """Build an Invocation from a decoded POST body.

    ``command`` is split on whitespace; the first token is the program and the
    rest become subcommands placed ahead of flags and args.
    """
    if not isinstance(payload, dict):
        raise ClientRequestError("request body must be a JSON object")
    raw_command = payload.get("command")
    if raw_command is None:
        raise ClientRequestError("'command' is required")
    if not isinstance(raw_command, str):
        raise ClientRequestError("'command' must be a string")

    tokens = raw_command.split()
    if not tokens:
        raise ClientRequestError("no command given")

    return Invocation(
        command=tokens[0],
        subcommands=tokens[1:],
        flags=_string_map(payload, "flags"),
        args=_string_list(payload, "args"),
        envs=_string_map(payload, "envs"),
    )


def decode_body(raw: Union[str, bytes]) -> Any:
    """Decode a JSON body, turning parse failures into ClientRequestError."""
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8", errors="replace")
    if not raw.strip():
        raise ClientRequestError("empty body")
    try:
        return json.loads(raw)
    except json.JSONDecodeError as e:
        raise ClientRequestError(f"invalid JSON: {e}") from e
