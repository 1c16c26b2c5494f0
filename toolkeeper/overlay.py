"""Hide hook matcher groups from the agent without its cooperation.

The agent has no per-hook "disabled" flag: any group under ``hooks`` runs.
Disabling therefore moves the group out of ``hooks`` into a parallel
``_disabledHooks`` stash with the same ``{event: [group, ...]}`` shape, and
enabling moves it back. A group lives in exactly one of the two containers,
and an event key is only present while its list is non-empty.

A stashed group remembers the index it was taken from under ``_position``
so that restoring it puts it back in the same place; hooks run in list
order.

All functions mutate and return ``config``; callers hand them the fresh copy
produced by the mutation pipeline. Indexes refer to that copy.
"""

from typing import Any, Optional

from toolkeeper.errors import OverlayIndexError

ACTIVE_KEY = "hooks"
STASH_KEY = "_disabledHooks"
LEGACY_DISABLED_MARKER = "disabled"
POSITION_KEY = "_position"


def _container(config: dict[str, Any], key: str, create: bool) -> dict[str, Any] | None:
    groups = config.get(key)
    if isinstance(groups, dict):
        return groups
    if not create:
        return None
    groups = {}
    config[key] = groups
    return groups


def _take(config: dict[str, Any], key: str, event_name: str, index: int) -> dict[str, Any]:
    groups = _container(config, key, create=False)
    matchers = groups.get(event_name) if groups is not None else None
    if not isinstance(matchers, list) or not 0 <= index < len(matchers):
        raise OverlayIndexError(key, event_name, index)

    group = matchers.pop(index)
    if not matchers:
        del groups[event_name]
    if not groups:
        del config[key]
    return group


def _put(
    config: dict[str, Any],
    key: str,
    event_name: str,
    group: dict[str, Any],
    position: Optional[int] = None,
) -> None:
    groups = _container(config, key, create=True)
    matchers = groups.get(event_name)
    if not isinstance(matchers, list):
        matchers = []
        groups[event_name] = matchers
    if position is None:
        matchers.append(group)
    else:
        matchers.insert(min(position, len(matchers)), group)


def _clean(group: Any) -> dict[str, Any]:
    cleaned = dict(group) if isinstance(group, dict) else {"hooks": []}
    cleaned.pop(LEGACY_DISABLED_MARKER, None)
    cleaned.pop(POSITION_KEY, None)
    return cleaned


def _position(group: Any) -> Optional[int]:
    value = group.get(POSITION_KEY) if isinstance(group, dict) else None
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        return None
    return value


def stash_matcher_group(
    config: dict[str, Any], event_name: str, index: int
) -> dict[str, Any]:
    group = _take(config, ACTIVE_KEY, event_name, index)
    _put(config, STASH_KEY, event_name, {**_clean(group), POSITION_KEY: index})
    return config


def restore_matcher_group(
    config: dict[str, Any], event_name: str, index: int
) -> dict[str, Any]:
    group = _take(config, STASH_KEY, event_name, index)
    _put(config, ACTIVE_KEY, event_name, _clean(group), position=_position(group))
    return config


def remove_matcher_group(
    config: dict[str, Any], event_name: str, index: int, stashed: bool = False
) -> dict[str, Any]:
    _take(config, STASH_KEY if stashed else ACTIVE_KEY, event_name, index)
    return config


def append_matcher_group(
    config: dict[str, Any], event_name: str, group: dict[str, Any], stashed: bool = False
) -> dict[str, Any]:
    _put(config, STASH_KEY if stashed else ACTIVE_KEY, event_name, _clean(group))
    return config
