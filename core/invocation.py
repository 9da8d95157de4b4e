"""Invocation model: one normalized command execution request.

An invocation reads as::

    [ENV=VAL ...] command [subcommands] [--flag value ...] [args]

Flags and envs are plain dicts, so their order is the insertion order of the
request data (query string order for GET, JSON object order for POST).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Mapping


@dataclass
class Invocation:
    """Normalized command invocation built fresh for every request."""

    command: str
    flags: Dict[str, str] = field(default_factory=dict)
    args: List[str] = field(default_factory=list)
    envs: Dict[str, str] = field(default_factory=dict)
    subcommands: List[str] = field(default_factory=list)  # "pip install" -> ["install"]

    def full_args(self, add_dashes: bool = False) -> List[str]:
        """subcommands + flag strings + positional args, in that order."""
        return [*self.subcommands, *flag_strings(self.flags, add_dashes), *self.args]

    def env_strings(self, upper_keys: bool = False) -> List[str]:
        return env_strings(self.envs, upper_keys)

    def env_mapping(self, upper_keys: bool = False) -> Dict[str, str]:
        return env_mapping(self.envs, upper_keys)


def _dash(key: str) -> str:
    if key.startswith("-"):
        return key
    if len(key) == 1:
        return "-" + key
    return "--" + key


def flag_strings(flags: Mapping[str, str], add_dashes: bool = False) -> List[str]:
    """Flatten flags into argv tokens.

    ``{"a": "", "bee": "1"}`` with add_dashes gives ``["-a", "--bee", "1"]``;
    an empty value marks a valueless (boolean) flag.
    """
    tokens: List[str] = []
    for raw_key, raw_value in flags.items():
        key = str(raw_key).strip()
        value = str(raw_value).strip()
        if add_dashes:
            key = _dash(key)
        tokens.append(key)
        if value:
            tokens.append(value)
    return tokens


def env_mapping(envs: Mapping[str, str], upper_keys: bool = False) -> Dict[str, str]:
    env: Dict[str, str] = {}
    for raw_key, raw_value in envs.items():
        key = str(raw_key).strip()
        if upper_keys:
            key = key.upper()
        env[key] = str(raw_value).strip()
    return env


def env_strings(envs: Mapping[str, str], upper_keys: bool = False) -> List[str]:
    """``{"k": "v"}`` with upper_keys gives ``["K=v"]``."""
    return [f"{key}={value}" for key, value in env_mapping(envs, upper_keys).items()]
