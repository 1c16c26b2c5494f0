"""Named snapshots of which tools are enabled, and switching between them.

A profile stores one ``{key, enabled}`` entry per canonical tool key, so it
survives a tool moving between scopes. Profiles belong to the agent they
were saved for. The store is ``profiles.json`` next to the preferences
file; it is read leniently and written through the config pipeline.
"""

import logging
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Iterable, Optional

from toolkeeper.config_service import ConfigService
from toolkeeper.errors import NoActiveAdapterError, ProfileError, ToolkeeperError
from toolkeeper.models import ConfigScope, Tool, ToolKind, ToolStatus
from toolkeeper.scopes import canonical_key
from toolkeeper.tool_actions import is_toggle_disable
from toolkeeper.tool_manager import ToolManagerService

logger = logging.getLogger(__name__)

PROFILE_SCHEMA = "profile-store"
PROFILE_STORE_VERSION = 2
PROFILE_KINDS: tuple[ToolKind, ...] = (
    ToolKind.SKILL,
    ToolKind.MCP_SERVER,
    ToolKind.HOOK,
    ToolKind.COMMAND,
)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


def key_kind(key: str) -> Optional[ToolKind]:
    try:
        return ToolKind(key.split(":", 1)[0])
    except ValueError:
        return None


@dataclass(frozen=True)
class ProfileToolEntry:
    key: str
    enabled: bool

    def as_dict(self) -> dict[str, Any]:
        return {"key": self.key, "enabled": self.enabled}


@dataclass(frozen=True)
class Profile:
    id: str
    name: str
    tools: tuple[ProfileToolEntry, ...]
    created_at: str
    updated_at: str
    agent_id: Optional[str] = None

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "Profile":
        return cls(
            id=payload["id"],
            name=payload["name"],
            tools=tuple(
                ProfileToolEntry(key=item["key"], enabled=item["enabled"])
                for item in payload["tools"]
            ),
            created_at=payload["createdAt"],
            updated_at=payload["updatedAt"],
            agent_id=payload.get("agentId"),
        )

    def as_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "tools": [entry.as_dict() for entry in self.tools],
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }
        if self.agent_id is not None:
            payload["agentId"] = self.agent_id
        return payload

    @property
    def enabled_count(self) -> int:
        return sum(1 for entry in self.tools if entry.enabled)


@dataclass(frozen=True)
class ProfileStore:
    profiles: tuple[Profile, ...] = ()
    active_profile_id: Optional[str] = None

    def as_dict(self) -> dict[str, Any]:
        return {
            "version": PROFILE_STORE_VERSION,
            "profiles": [profile.as_dict() for profile in self.profiles],
            "activeProfileId": self.active_profile_id,
        }


@dataclass(frozen=True)
class SwitchResult:
    success: bool
    toggled: int = 0
    skipped: int = 0
    failed: int = 0
    errors: tuple[str, ...] = field(default_factory=tuple)


class ProfileService:
    def __init__(
        self, config_service: ConfigService, tool_manager: ToolManagerService, path: Path
    ) -> None:
        self.config_service = config_service
        self.tool_manager = tool_manager
        self.path = path

    @property
    def agent_id(self) -> str:
        adapter = self.config_service.registry.active
        if adapter is None:
            raise NoActiveAdapterError()
        return adapter.adapter_id

    def profiles(self) -> list[Profile]:
        """Profiles of the active agent; profiles saved without an agent count for all."""
        agent = self.agent_id
        return [
            profile
            for profile in self._load().profiles
            if profile.agent_id in (None, agent)
        ]

    def active_profile(self) -> Optional[Profile]:
        store = self._load()
        for profile in store.profiles:
            if profile.id == store.active_profile_id:
                return profile
        return None

    def get_profile(self, name: str) -> Profile:
        for profile in self.profiles():
            if profile.name == name:
                return profile
        raise ProfileError(f"No profile named {name!r}")

    def create_profile(self, name: str) -> Profile:
        name = name.strip()
        if not name:
            raise ProfileError("Profile name must not be empty")
        if any(profile.name == name for profile in self.profiles()):
            raise ProfileError(f"A profile named {name!r} already exists")

        now = _now()
        profile = Profile(
            id=str(uuid.uuid4()),
            name=name,
            tools=tuple(self._snapshot()),
            created_at=now,
            updated_at=now,
            agent_id=self.agent_id,
        )
        store = self._load()
        self._save(replace(store, profiles=(*store.profiles, profile)))
        logger.info("saved profile %s with %d tools", name, len(profile.tools))
        return profile

    def delete_profile(self, name: str) -> Profile:
        profile = self.get_profile(name)
        store = self._load()
        active = None if store.active_profile_id == profile.id else store.active_profile_id
        self._save(
            ProfileStore(
                profiles=tuple(item for item in store.profiles if item.id != profile.id),
                active_profile_id=active,
            )
        )
        return profile

    def switch_profile(self, name: Optional[str]) -> SwitchResult:
        """Toggle tools until they match the profile, then mark it active.

        ``None`` only clears the active profile. Keys with no current tool
        are skipped. Tools are re-read after every toggle because stashing
        or restoring a hook renumbers its siblings.
        """
        store = self._load()
        if name is None:
            self._save(replace(store, active_profile_id=None))
            return SwitchResult(success=True)

        profile = self.get_profile(name)
        toggled = skipped = failed = 0
        errors: list[str] = []
        for entry in profile.tools:
            kind = key_kind(entry.key)
            if kind is None or not self._matching(kind, entry.key):
                skipped += 1
                continue
            changed, error = self._apply(kind, entry)
            toggled += changed
            if error is not None:
                failed += 1
                errors.append(error)

        self._save(replace(self._load(), active_profile_id=profile.id))
        logger.info("switched to profile %s: %d toggled, %d skipped", name, toggled, skipped)
        return SwitchResult(
            success=failed == 0,
            toggled=toggled,
            skipped=skipped,
            failed=failed,
            errors=tuple(errors),
        )

    def update_profile(self, name: str, tools: Iterable[ProfileToolEntry]) -> Profile:
        profile = self.get_profile(name)
        self._update(profile.id, tuple(tools))
        return self.get_profile(name)

    def reconcile_profile(self, name: str) -> tuple[int, int]:
        """Drop entries whose tool no longer exists; returns ``(kept, removed)``."""
        profile = self.get_profile(name)
        current = {entry.key for entry in self._snapshot()}
        kept = tuple(entry for entry in profile.tools if entry.key in current)
        removed = len(profile.tools) - len(kept)
        if removed:
            self._update(profile.id, kept)
        return len(kept), removed

    def sync_tool(self, tool: Tool, enabled: bool) -> None:
        """Record a manual toggle in the active profile, if the active agent owns one."""
        key = canonical_key(tool)

        def change(entries: tuple[ProfileToolEntry, ...]) -> tuple[ProfileToolEntry, ...]:
            if any(entry.key == key for entry in entries):
                return tuple(
                    ProfileToolEntry(key=key, enabled=enabled) if entry.key == key else entry
                    for entry in entries
                )
            return (*entries, ProfileToolEntry(key=key, enabled=enabled))

        self._change_active(change)

    def forget_tool(self, tool: Tool) -> None:
        key = canonical_key(tool)
        self._change_active(lambda entries: tuple(entry for entry in entries if entry.key != key))

    def _change_active(
        self, change: Callable[[tuple[ProfileToolEntry, ...]], tuple[ProfileToolEntry, ...]]
    ) -> None:
        try:
            profile = self.active_profile()
            if profile is None or profile.agent_id not in (None, self.agent_id):
                return
            tools = change(profile.tools)
            if tools != profile.tools:
                self._update(profile.id, tools)
        except ToolkeeperError as exc:
            logger.warning("active profile not updated: %s", exc)

    def _snapshot(self) -> list[ProfileToolEntry]:
        """One entry per key; a key counts as enabled when any of its records is."""
        states: dict[str, bool] = {}
        for kind in PROFILE_KINDS:
            for tool in self._profiled(self.config_service.read_all_tools(kind)):
                key = canonical_key(tool)
                states[key] = states.get(key, False) or is_toggle_disable(tool)
        return [ProfileToolEntry(key=key, enabled=enabled) for key, enabled in states.items()]

    @staticmethod
    def _profiled(tools: Iterable[Tool]) -> list[Tool]:
        return [
            tool
            for tool in tools
            if tool.scope != ConfigScope.MANAGED and tool.status != ToolStatus.ERROR
        ]

    def _matching(self, kind: ToolKind, key: str) -> list[Tool]:
        return [
            tool
            for tool in self._profiled(self.config_service.read_all_tools(kind))
            if canonical_key(tool) == key
        ]

    def _apply(self, kind: ToolKind, entry: ProfileToolEntry) -> tuple[int, Optional[str]]:
        toggled = 0
        for _ in range(len(self._matching(kind, entry.key))):
            stale = [
                tool
                for tool in self._matching(kind, entry.key)
                if is_toggle_disable(tool) != entry.enabled
            ]
            if not stale:
                break
            # Stashed hooks come back newest first so each lands where it was taken from.
            tool = stale[-1] if entry.enabled else stale[0]
            result = self.tool_manager.toggle_tool(tool)
            if not result.success:
                return toggled, result.error or "unknown error"
            toggled += 1
        return toggled, None

    def _update(self, profile_id: str, tools: tuple[ProfileToolEntry, ...]) -> None:
        store = self._load()
        self._save(
            replace(
                store,
                profiles=tuple(
                    replace(profile, tools=tools, updated_at=_now())
                    if profile.id == profile_id
                    else profile
                    for profile in store.profiles
                ),
            )
        )

    def _load(self) -> ProfileStore:
        result = self.config_service.file_store.read_json(self.path)
        if not result.success:
            logger.warning("ignoring %s: %s", self.path, result.error)
            return ProfileStore()
        if result.data is None:
            return ProfileStore()

        validation = self.config_service.schemas.validate(PROFILE_SCHEMA, result.data)
        if not validation.success:
            logger.warning("ignoring %s: %s", self.path, validation.message)
            return ProfileStore()
        return ProfileStore(
            profiles=tuple(Profile.from_dict(item) for item in result.data["profiles"]),
            active_profile_id=result.data.get("activeProfileId"),
        )

    def _save(self, store: ProfileStore) -> None:
        payload = store.as_dict()
        self.config_service.write_config_file(self.path, PROFILE_SCHEMA, lambda _current: payload)
