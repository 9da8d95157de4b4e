"""Tests for main.py argument parsing and startup validation."""

from __future__ import annotations

import pytest

from main import main, parse_cli_args, resolve_config


def test_parse_positional_whitelist_and_switches():
    args = parse_cli_args(["--add-dashes", "--env-key-to-upper", "--resp", "text", "--http", ":9000", "pwd", "ls"])
    assert args.whitelist == ["pwd", "ls"]
    assert args.add_dashes is True
    assert args.env_key_to_upper is True
    assert args.resp == "text"
    assert args.http == ":9000"
    assert args.timeout is None


def test_resolve_config_merges_yaml_file(tmp_path):
    cfg = tmp_path / "config.yaml"
    cfg.write_text("gateway:\n  whitelist: [echo]\n  resp: text\n", encoding="utf-8")
    args = parse_cli_args(["--config", str(cfg), "--timeout", "2"])
    _file_config, config = resolve_config(args)
    assert config.whitelist == frozenset({"echo"})
    assert config.response_format == "text"
    assert config.timeout_seconds == 2.0


@pytest.mark.asyncio
async def test_main_exits_on_empty_whitelist(capsys):
    with pytest.raises(SystemExit) as exc_info:
        await main([])
    assert exc_info.value.code == 1
    assert "Empty command whitelist" in capsys.readouterr().err


@pytest.mark.asyncio
async def test_main_validate_only_prints_summary(capsys):
    await main(["--validate-only", "--resp", "text", "pwd"])
    out = capsys.readouterr().out
    assert "Config validation passed" in out
    assert "whitelist: ['pwd']" in out
    assert "response: text" in out
