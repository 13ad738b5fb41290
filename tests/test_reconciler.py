import pytest

from conftest import build_game, build_room, player_state
from splendor_client.services.reconciler import reconcile, short_id


def test_stale_snapshot_rejected_when_game_would_unstart():
    previous = build_room(game=build_game(turn=3))
    incoming = build_room()

    result = reconcile(previous, incoming, "player_connected")

    assert result.accept is False
    assert result.deltas == ["Ignored stale snapshot: player_connected"]


@pytest.mark.parametrize("reason", ["game_started", "player_joined", "whatever", ""])
def test_stale_guard_ignores_reason(reason):
    result = reconcile(build_room(game=build_game()), build_room(), reason)
    assert result.accept is False
    assert len(result.deltas) == 1


def test_first_snapshot_without_previous_is_accepted():
    result = reconcile(None, build_room(), "connected")
    assert result.accept is True
    assert result.deltas == ["Realtime update: connected"]


def test_game_start_emits_started_line_without_turn_line():
    previous = build_room()
    incoming = build_room(game=build_game(turn=1))

    result = reconcile(previous, incoming, "game_started")

    assert result.accept is True
    assert result.deltas == ["Game started"]


def test_turn_change_names_current_player():
    previous = build_room(game=build_game(turn=3, current="p1"))
    incoming = build_room(game=build_game(turn=4, current="p2"))

    result = reconcile(previous, incoming, "action_applied")

    assert result.accept is True
    assert "Turn 4 -> Priya" in result.deltas


def test_turn_change_falls_back_to_short_id():
    previous = build_room(game=build_game(turn=3))
    incoming = build_room(game=build_game(turn=4, current="0123456789abcdef"))

    result = reconcile(previous, incoming, "turn_timeout")

    assert result.deltas[-1] == "Turn 4 -> 0123...ef"


def test_last_action_change_is_summarised():
    previous = build_room(game=build_game(turn=2))
    players = [
        player_state("p1", "Alice", points=3, last_action="take_tokens", white=1, red=2, gold=1),
        player_state("p2", "Priya"),
    ]
    incoming = build_room(game=build_game(turn=2, players=players))

    result = reconcile(previous, incoming, "action_applied")

    assert result.deltas == [
        "Realtime update: action_applied",
        "Alice used take_tokens | P:3 | W1 B0 G0 R2 K0 Gd1",
    ]


def test_unchanged_last_action_is_not_repeated():
    players = [player_state("p1", "Alice", last_action="pass"), player_state("p2", "Priya")]
    previous = build_room(game=build_game(turn=2, players=players))
    incoming = build_room(game=build_game(turn=2, players=players))

    assert reconcile(previous, incoming, "player_connected").deltas == ["A player connected"]


@pytest.mark.parametrize(
    "reason,expected",
    [
        ("player_connected", "A player connected"),
        ("player_disconnected", "A player disconnected"),
        ("game_started", "Game started"),
        ("player_joined", "Player joined. Total players: 2"),
    ],
)
def test_reason_phrases(reason, expected):
    assert reconcile(None, build_room(), reason).deltas[0] == expected


def test_join_detected_from_player_count():
    previous = build_room(players=[{"id": "p1", "name": "Alice"}])
    incoming = build_room()

    result = reconcile(previous, incoming, "sync")

    assert result.deltas == ["Realtime update: sync", "Player joined. Total players: 2"]


@pytest.mark.parametrize("value,expected", [("", "-"), ("abc", "abc"), ("abcdef", "abcdef"), ("abcdefgh", "abcd...gh")])
def test_short_id(value, expected):
    assert short_id(value) == expected
