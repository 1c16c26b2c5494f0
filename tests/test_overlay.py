import pytest

from toolkeeper.errors import OverlayIndexError
from toolkeeper.overlay import (
    ACTIVE_KEY,
    POSITION_KEY,
    STASH_KEY,
    append_matcher_group,
    remove_matcher_group,
    restore_matcher_group,
    stash_matcher_group,
)


def _group(command: str, matcher: str = "") -> dict:
    group = {"hooks": [{"type": "command", "command": command}]}
    if matcher:
        group["matcher"] = matcher
    return group


def _config() -> dict:
    return {
        "model": "opus",
        ACTIVE_KEY: {
            "PreToolUse": [_group("a", "Bash"), _group("b", "Edit")],
            "Stop": [_group("c")],
        },
    }


def _count(config: dict, key: str) -> int:
    return sum(len(groups) for groups in config.get(key, {}).values())


def _stashed(group: dict, position: int) -> dict:
    return {**group, POSITION_KEY: position}


def test_stash_moves_group_and_keeps_totals() -> None:
    config = stash_matcher_group(_config(), "PreToolUse", 1)

    assert _count(config, ACTIVE_KEY) == 2
    assert _count(config, STASH_KEY) == 1
    assert config[STASH_KEY]["PreToolUse"] == [_stashed(_group("b", "Edit"), 1)]
    assert config[ACTIVE_KEY]["PreToolUse"] == [_group("a", "Bash")]
    assert config["model"] == "opus"


def test_stashing_last_group_drops_event_and_container() -> None:
    config = {ACTIVE_KEY: {"Stop": [_group("c")]}}

    stash_matcher_group(config, "Stop", 0)

    assert ACTIVE_KEY not in config
    assert config[STASH_KEY] == {"Stop": [_stashed(_group("c"), 0)]}


def test_restore_round_trip_single_group_event() -> None:
    original = _config()

    config = stash_matcher_group(_config(), "Stop", 0)
    config = restore_matcher_group(config, "Stop", 0)

    assert config == original


@pytest.mark.parametrize("index", [0, 1])
def test_restore_puts_group_back_in_place(index: int) -> None:
    original = _config()

    config = stash_matcher_group(_config(), "PreToolUse", index)
    config = restore_matcher_group(config, "PreToolUse", 0)

    assert config == original


def test_restore_several_groups_keeps_run_order() -> None:
    original = {
        ACTIVE_KEY: {
            "PreToolUse": [_group("a", "Bash"), _group("b", "Edit"), _group("c", "Write")]
        }
    }
    config = {ACTIVE_KEY: {"PreToolUse": list(original[ACTIVE_KEY]["PreToolUse"])}}

    stash_matcher_group(config, "PreToolUse", 2)
    stash_matcher_group(config, "PreToolUse", 0)
    restore_matcher_group(config, "PreToolUse", 1)
    restore_matcher_group(config, "PreToolUse", 0)

    assert config == original


def test_restore_clamps_position_to_shorter_list() -> None:
    config = {
        ACTIVE_KEY: {"Stop": [_group("a")]},
        STASH_KEY: {"Stop": [_stashed(_group("z"), 5)]},
    }

    restore_matcher_group(config, "Stop", 0)

    assert config == {ACTIVE_KEY: {"Stop": [_group("a"), _group("z")]}}


def test_restore_without_position_appends() -> None:
    config = {ACTIVE_KEY: {"Stop": [_group("a")]}, STASH_KEY: {"Stop": [_group("z")]}}

    restore_matcher_group(config, "Stop", 0)

    assert config[ACTIVE_KEY]["Stop"] == [_group("a"), _group("z")]


def test_legacy_disabled_marker_is_dropped_on_move() -> None:
    config = {ACTIVE_KEY: {"Stop": [{**_group("c"), "disabled": True}]}}

    stash_matcher_group(config, "Stop", 0)

    assert config[STASH_KEY]["Stop"] == [_stashed(_group("c"), 0)]


@pytest.mark.parametrize("event_name, index", [("Stop", 1), ("Stop", -1), ("Missing", 0)])
def test_bad_index_raises(event_name: str, index: int) -> None:
    config = _config()

    with pytest.raises(OverlayIndexError):
        stash_matcher_group(config, event_name, index)
    assert config == _config()


def test_remove_from_either_container() -> None:
    config = stash_matcher_group(_config(), "Stop", 0)

    remove_matcher_group(config, "Stop", 0, stashed=True)
    remove_matcher_group(config, "PreToolUse", 0)

    assert STASH_KEY not in config
    assert config[ACTIVE_KEY] == {"PreToolUse": [_group("b", "Edit")]}


def test_append_creates_containers() -> None:
    config: dict = {}

    append_matcher_group(config, "Stop", _group("x"), stashed=True)
    append_matcher_group(config, "Stop", _group("y"))

    assert config == {STASH_KEY: {"Stop": [_group("x")]}, ACTIVE_KEY: {"Stop": [_group("y")]}}
