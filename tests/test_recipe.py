"""Tests for core/recipe.py — config-driven invocations and transform chains."""

import sys
from pathlib import Path

import pytest

from core.execution import ExitStatus, Outcome
from core.recipe import (
    ToolConfig,
    apply_transforms,
    build_recipe,
    invocation_from_config,
    resolve_check_mode,
    run_recipe,
)
from tests.conftest import requires_bash


def _config(**extra) -> dict:
    cfg = {
        "invocation": {
            "program": "printf",
            "args": ["%s", "x"],
            "cwd": "/tmp",
            "env": {"FOO": "bar baz", "DROP": None},
        }
    }
    cfg.update(extra)
    return cfg


class TestToolConfig:

    def test_defaults(self):
        tools = ToolConfig.from_config({})
        assert (tools.sudo, tools.ssh, tools.shell) == ("sudo", "ssh", "bash")

    def test_overrides_and_blank_values(self):
        tools = ToolConfig.from_config({"tools": {"sudo": "doas", "shell": " "}})
        assert tools.sudo == "doas"
        assert tools.shell == "bash"


class TestInvocationFromConfig:

    def test_full_section(self):
        inv = invocation_from_config(_config())
        assert inv.argv() == ["printf", "%s", "x"]
        assert inv.cwd == "/tmp"
        assert inv.env == {"FOO": "bar baz", "DROP": None}

    def test_args_are_stringified(self):
        inv = invocation_from_config({"invocation": {"program": "sleep", "args": [1]}})
        assert inv.args == ["1"]

    @pytest.mark.parametrize(
        "section, message",
        [
            (None, "invocation section"),
            ({"args": []}, "program"),
            ({"program": "x", "args": "a b"}, "args must be a list"),
            ({"program": "x", "env": ["A"]}, "env must be a mapping"),
        ],
    )
    def test_invalid_sections(self, section, message):
        with pytest.raises(ValueError, match=message):
            invocation_from_config({"invocation": section})


class TestApplyTransforms:

    def test_chain(self):
        cfg = _config(
            transforms=[
                {"escalate": {"user": "deploy"}},
                {"redirect": {"path": "/tmp/out.txt"}},
                {"remote": {"user": "ops", "host": "10.0.0.5", "identity_file": "/keys/id"}},
            ]
        )
        inv = build_recipe(cfg)
        assert inv.args[:3] == ["-i", "/keys/id", "ops@10.0.0.5"]
        assert inv.args[3].startswith("bash -c ")
        assert "sudo -u deploy" in inv.args[3]

    def test_plain_string_escalate_is_root(self):
        inv = apply_transforms(invocation_from_config(_config()), ["escalate"], ToolConfig())
        assert inv.argv()[:2] == ["sudo", "printf"]

    def test_unknown_transform(self):
        with pytest.raises(ValueError, match="unknown transform"):
            build_recipe(_config(transforms=[{"teleport": {}}]))

    def test_missing_option(self):
        with pytest.raises(ValueError, match="identity_file"):
            build_recipe(_config(transforms=[{"remote": {"user": "ops", "host": "10.0.0.5"}}]))

    def test_identity_file_expands_user(self, monkeypatch, tmp_path):
        monkeypatch.setenv("HOME", str(tmp_path))
        inv = build_recipe(
            _config(transforms=[{"remote": {"user": "ops", "host": "10.0.0.5", "identity_file": "~/id"}}])
        )
        assert inv.args[1] == str(Path(tmp_path) / "id")

    def test_transforms_must_be_list(self):
        with pytest.raises(ValueError, match="transforms must be a list"):
            build_recipe(_config(transforms={"escalate": {}}))


class TestRunRecipe:

    def test_check_mode_resolution(self):
        assert resolve_check_mode({}) == "output"
        assert resolve_check_mode({"check": "Status"}) == "status"
        assert resolve_check_mode({"check": "status"}, "full") == "full"
        with pytest.raises(ValueError):
            resolve_check_mode({"check": "nope"})

    def test_output(self):
        cfg = {"invocation": {"program": sys.executable, "args": ["-c", "print('hi')"]}}
        assert run_recipe(cfg) == ("output", "hi\n")

    def test_check_and_full(self):
        cfg = {"invocation": {"program": sys.executable, "args": ["-c", "raise SystemExit(7)"]}}
        assert run_recipe(cfg, "check") == ("check", ExitStatus(code=7))
        mode, outcome = run_recipe(cfg, "full")
        assert mode == "full"
        assert isinstance(outcome, Outcome)
        assert outcome.status.code == 7

    @requires_bash
    def test_redirect_recipe(self, tmp_path):
        out = tmp_path / "out.txt"
        cfg = {
            "invocation": {"program": sys.executable, "args": ["-c", "print('via recipe')"]},
            "transforms": [{"redirect": {"path": str(out)}}],
            "check": "status",
        }
        assert run_recipe(cfg) == ("status", None)
        assert out.read_text(encoding="utf-8") == "via recipe\n"
