"""Typed model of the hub's ``settings.json`` and hook registration merge.

Only the ``hooks`` section is modelled; every other top-level key is carried
through untouched.
"""

from __future__ import annotations

import json

from pydantic import BaseModel, ConfigDict, Field

from ccflow.models.blueprint import HookEvent, HookRegistration

DEFAULT_HOOK_EVENT = "Stop"


class HookCommand(BaseModel):
    model_config = ConfigDict(extra="allow")

    type: str = "command"
    command: str


class HookMatcher(BaseModel):
    model_config = ConfigDict(extra="allow")

    tools: list[str] = Field(default_factory=list)


class HookGroup(BaseModel):
    """One entry in an event's hook list: an optional matcher plus commands."""

    model_config = ConfigDict(extra="allow")

    matcher: HookMatcher | str | None = None
    hooks: list[HookCommand] = Field(default_factory=list)

    def runs(self, script: str) -> bool:
        """Whether this group already invokes *script* (with or without ``./``)."""
        bare = script.removeprefix("./")
        return any(cmd.command in (bare, f"./{bare}") for cmd in self.hooks)


class ClaudeSettings(BaseModel):
    model_config = ConfigDict(extra="allow")

    hooks: dict[str, list[HookGroup]] = Field(default_factory=dict)

    @classmethod
    def from_json(cls, raw: str | bytes) -> ClaudeSettings:
        if not raw or not raw.strip():
            return cls()
        return cls.model_validate_json(raw)

    def to_json(self) -> str:
        payload = self.model_dump(mode="json", exclude_none=True)
        return json.dumps(payload, indent=2) + "\n"


def default_registration(hook_name: str) -> HookRegistration:
    """Registration used for hooks the blueprint's hooks manifest omits."""
    return HookRegistration(
        script=f"hooks/{hook_name}.sh",
        events=[HookEvent(event=DEFAULT_HOOK_EVENT)],
    )


def register_hook(settings: ClaudeSettings, registration: HookRegistration) -> ClaudeSettings:
    """Return a copy of *settings* with *registration* merged in.

    Adds one hook group per event.  Events where the script is already
    registered are left as they are, so merging is idempotent.
    """
    hooks = {event: list(groups) for event, groups in settings.hooks.items()}
    command = f"./{registration.script.removeprefix('./')}"

    for event in registration.events:
        groups = hooks.setdefault(event.event, [])
        if any(group.runs(registration.script) for group in groups):
            continue
        groups.append(
            HookGroup(
                matcher=HookMatcher(tools=list(event.commands)) if event.commands else None,
                hooks=[HookCommand(command=command)],
            )
        )

    return settings.model_copy(update={"hooks": hooks})
