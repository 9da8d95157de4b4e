"""Gateway configuration: resolved once at startup, read-only afterwards."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, FrozenSet, Iterable, Optional, Tuple

from core.formatter import normalize_response_format

DEFAULT_LISTEN = "localhost:8080"
DEFAULT_MAX_REQUEST_BYTES = 1024 * 1024


@dataclass(frozen=True)
class GatewayConfig:
    whitelist: FrozenSet[str]
    add_dashes: bool = False
    env_key_upper: bool = False
    response_format: str = "json"
    listen: str = DEFAULT_LISTEN
    verbose: bool = False
    timeout_seconds: Optional[float] = None
    max_request_bytes: int = DEFAULT_MAX_REQUEST_BYTES

    @property
    def host_port(self) -> Tuple[Optional[str], int]:
        return parse_listen_address(self.listen)


def parse_listen_address(listen: str) -> Tuple[Optional[str], int]:
    """Split "host:port"; an empty host (":8080") means all interfaces."""
    text = str(listen or "").strip()
    host, sep, port = text.rpartition(":")
    if not sep:
        raise ValueError(f"invalid listen address (expected host:port): {listen!r}")
    try:
        port_num = int(port)
    except ValueError:
        raise ValueError(f"invalid listen port: {listen!r}") from None
    if not 0 <= port_num <= 65535:
        raise ValueError(f"invalid listen port: {listen!r}")
    host = host.strip("[]")
    return (host or None), port_num


def _pick(cli_value: Any, file_value: Any, default: Any) -> Any:
    if cli_value is not None:
        return cli_value
    if file_value is not None:
        return file_value
    return default


def _clean_whitelist(values: Iterable[Any]) -> FrozenSet[str]:
    return frozenset(str(v) for v in values if str(v))


def _max_request_bytes(value: Any) -> int:
    if value is None:
        return DEFAULT_MAX_REQUEST_BYTES
    try:
        return max(1024, int(value))
    except (TypeError, ValueError):
        raise ValueError(f"invalid max_request_bytes: {value!r}") from None


def build_config(file_config: Optional[Dict[str, Any]], args) -> GatewayConfig:
    """Merge the optional YAML ``gateway`` section with CLI args (CLI wins).

    Boolean CLI switches only override when they are set, so a YAML ``true``
    is not undone by an absent flag.
    """
    section = dict((file_config or {}).get("gateway") or {})

    cli_whitelist = list(getattr(args, "whitelist", None) or [])
    whitelist = _clean_whitelist(cli_whitelist or section.get("whitelist") or [])
    if not whitelist:
        raise ValueError("Empty command whitelist: nothing to do.")

    timeout = _pick(getattr(args, "timeout", None), section.get("timeout_seconds"), None)
    timeout = float(timeout) if timeout else None
    if timeout is not None and timeout < 0:
        raise ValueError("timeout must not be negative")

    listen = str(_pick(getattr(args, "http", None), section.get("http"), DEFAULT_LISTEN))
    parse_listen_address(listen)

    return GatewayConfig(
        whitelist=whitelist,
        add_dashes=bool(getattr(args, "add_dashes", False) or section.get("add_dashes", False)),
        env_key_upper=bool(getattr(args, "env_key_to_upper", False) or section.get("env_key_to_upper", False)),
        response_format=normalize_response_format(_pick(getattr(args, "resp", None), section.get("resp"), "json")),
        listen=listen,
        verbose=bool(getattr(args, "verbose", False) or section.get("verbose", False)),
        timeout_seconds=timeout,
        max_request_bytes=_max_request_bytes(section.get("max_request_bytes")),
    )
