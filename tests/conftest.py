"""Global fixtures for CLI Gateway test suite."""

import asyncio
from typing import Dict, List, Optional, Tuple

import pytest

from core.config import GatewayConfig
from core.executor import ExecOutcome, ExecSuccess


# ── FakeExecutor ──


class FakeExecutor:
    """Test double that records every would-be spawn instead of running it."""

    def __init__(self, outcome: Optional[ExecOutcome] = None):
        self.outcome = outcome or ExecSuccess(stdout="ok\n", stderr="")
        self.calls: List[Tuple[str, List[str], Dict[str, str], bool]] = []

    async def run(
        self,
        command: str,
        args: List[str],
        env: Optional[Dict[str, str]] = None,
        *,
        combined: bool = False,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> ExecOutcome:
        self.calls.append((command, list(args), dict(env or {}), combined))
        return self.outcome

    @property
    def spawn_count(self) -> int:
        return len(self.calls)


def make_config(*whitelist: str, **overrides) -> GatewayConfig:
    return GatewayConfig(whitelist=frozenset(whitelist or ("pwd",)), **overrides)


@pytest.fixture
def fake_executor():
    return FakeExecutor()
