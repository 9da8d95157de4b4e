"""Tests for core/invocation.py — flag/env flattening and argv order."""

from core.invocation import Invocation, env_mapping, env_strings, flag_strings


class TestFlagStrings:

    def test_add_dashes_short_and_long(self):
        assert flag_strings({"a": "", "bee": "1"}, add_dashes=True) == ["-a", "--bee", "1"]

    def test_without_add_dashes_keys_kept_verbatim(self):
        assert flag_strings({"a": "", "bee": "1"}) == ["a", "bee", "1"]

    def test_existing_dash_not_doubled(self):
        assert flag_strings({"-x": "1", "--long": ""}, add_dashes=True) == ["-x", "1", "--long"]

    def test_keys_and_values_trimmed(self):
        assert flag_strings({" name ": "  v  ", "q": "   "}, add_dashes=True) == ["--name", "v", "-q"]

    def test_insertion_order_preserved(self):
        flags = {"z": "1", "a": "2", "m": ""}
        assert flag_strings(flags) == ["z", "1", "a", "2", "m"]

    def test_empty(self):
        assert flag_strings({}, add_dashes=True) == []


class TestEnvStrings:

    def test_upper_keys(self):
        assert env_strings({"k": "v"}, upper_keys=True) == ["K=v"]

    def test_keys_kept_without_upper(self):
        assert env_strings({"path_x": "/opt"}) == ["path_x=/opt"]

    def test_trimmed(self):
        assert env_strings({" k ": " v "}) == ["k=v"]

    def test_mapping_matches_strings(self):
        envs = {"a": "1", "B": "2"}
        mapping = env_mapping(envs, upper_keys=True)
        assert mapping == {"A": "1", "B": "2"}
        assert env_strings(envs, upper_keys=True) == [f"{k}={v}" for k, v in mapping.items()]


class TestFullArgs:

    def test_flags_precede_args(self):
        inv = Invocation(command="ls", flags={"l": ""}, args=["/tmp"])
        assert inv.full_args(add_dashes=True) == ["-l", "/tmp"]

    def test_subcommands_come_first(self):
        inv = Invocation(
            command="pip",
            subcommands=["install"],
            flags={"upgrade": "", "i": "https://pypi.org/simple"},
            args=["tensorflow"],
        )
        assert inv.full_args(add_dashes=True) == [
            "install",
            "--upgrade",
            "-i",
            "https://pypi.org/simple",
            "tensorflow",
        ]

    def test_defaults_are_not_shared(self):
        first = Invocation(command="a")
        second = Invocation(command="b")
        first.args.append("x")
        first.flags["f"] = ""
        assert second.args == []
        assert second.flags == {}
