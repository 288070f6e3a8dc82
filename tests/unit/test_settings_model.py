"""Unit tests for the typed ``settings.json`` model and hook registration."""

from __future__ import annotations

import json

from ccflow.models.blueprint import HookEvent, HookRegistration
from ccflow.models.settings import (
    ClaudeSettings,
    HookMatcher,
    default_registration,
    register_hook,
)


class TestClaudeSettings:
    def test_empty_input(self):
        assert ClaudeSettings.from_json("").hooks == {}
        assert ClaudeSettings.from_json(b"  \n").hooks == {}

    def test_unknown_keys_survive_round_trip(self):
        raw = '{"permissions": {"allow": ["Read"]}, "model": "opus", "hooks": {}}'
        payload = json.loads(ClaudeSettings.from_json(raw).to_json())
        assert payload["permissions"] == {"allow": ["Read"]}
        assert payload["model"] == "opus"


class TestRegisterHook:
    def test_adds_one_group_per_event(self):
        registration = HookRegistration(
            script="hooks/lint.sh",
            events=[
                HookEvent(event="PostToolUse", commands=["Edit", "Write"]),
                HookEvent(event="Stop"),
            ],
        )

        settings = register_hook(ClaudeSettings(), registration)

        post = settings.hooks["PostToolUse"]
        assert len(post) == 1
        assert post[0].matcher == HookMatcher(tools=["Edit", "Write"])
        assert post[0].hooks[0].command == "./hooks/lint.sh"
        assert settings.hooks["Stop"][0].matcher is None

    def test_is_idempotent(self):
        registration = default_registration("check")
        once = register_hook(ClaudeSettings(), registration)
        twice = register_hook(once, registration)
        assert twice == once

    def test_recognises_existing_registration_without_prefix(self):
        raw = json.dumps({"hooks": {"Stop": [{"hooks": [{"type": "command", "command": "hooks/check.sh"}]}]}})
        settings = register_hook(ClaudeSettings.from_json(raw), default_registration("check"))
        assert len(settings.hooks["Stop"]) == 1

    def test_does_not_mutate_input(self):
        original = ClaudeSettings()
        register_hook(original, default_registration("check"))
        assert original.hooks == {}

    def test_default_registration(self):
        registration = default_registration("verify")
        assert registration.script == "hooks/verify.sh"
        assert [e.event for e in registration.events] == ["Stop"]

    def test_json_omits_absent_matcher(self):
        settings = register_hook(ClaudeSettings(), default_registration("check"))
        payload = json.loads(settings.to_json())
        assert payload["hooks"]["Stop"] == [{"hooks": [{"type": "command", "command": "./hooks/check.sh"}]}]
