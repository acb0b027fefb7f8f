"""状态序列化与快照测试"""
import json
import random

from core.actions import Action
from core.game import GameManager
from core.state import CapturedSet, GameState, Phase, PlayerState, table_from_mapping
from server.dto import (
    SnapshotBuilder,
    deserialize_table,
    hydrate_state,
    serialize_state,
    serialize_table,
)


def started(seed=0):
    return GameManager.start(GameState.create(), random.Random(seed))


def choice_state():
    """座位 0 处于手牌二选一"""
    players = (
        PlayerState(id=0, name="P0", hand=(0, 20)),
        PlayerState(id=1, name="P1", hand=(24,), is_ai=True),
        PlayerState(id=2, name="P2", hand=(32,), is_ai=True),
    )
    state = GameState(
        game_id="dto",
        phase=Phase.PLAY_HAND,
        players=players,
        table=table_from_mapping({1: [2, 3]}),
        draw_pile=(36,),
    )
    return GameManager.play_hand_card(state, 0)


class TestTableSerialization:
    """桌面序列化测试"""

    def test_string_keys(self):
        table = table_from_mapping({1: [0, 2], 12: [44]})
        assert serialize_table(table) == {"1": [0, 2], "12": [44]}

    def test_round_trip_preserves_order(self):
        table = table_from_mapping({3: [10, 8, 9], 1: [2]})
        assert deserialize_table(serialize_table(table)) == table

    def test_key_order_irrelevant(self):
        assert deserialize_table({"5": [16], "1": [3, 2]}) == deserialize_table({"1": [3, 2], "5": [16]})


class TestStateSerialization:
    """完整状态序列化测试"""

    def test_round_trip_started(self):
        state = started()
        assert hydrate_state(serialize_state(state)) == state

    def test_json_safe(self):
        state = choice_state()
        payload = json.loads(json.dumps(serialize_state(state)))
        assert hydrate_state(payload) == state

    def test_round_trip_finished(self):
        players = (
            PlayerState(id=0, name="P0", captured=CapturedSet(lights=(0, 8, 28), junk=(2,))),
            PlayerState(id=1, name="P1", go_count=1),
            PlayerState(id=2, name="P2"),
        )
        state = GameManager.resolve_game_end(GameState(game_id="f", players=players))
        assert state.result is not None
        restored = hydrate_state(json.loads(json.dumps(serialize_state(state))))
        assert restored == state
        assert restored.result.penalties == state.result.penalties

    def test_round_trip_mid_turn(self):
        state = GameManager.select_match_target(choice_state(), 3)
        assert hydrate_state(serialize_state(state)) == state


class TestSnapshotBuilder:
    """按座位快照测试"""

    def test_opponent_hands_hidden(self):
        state = started()
        snap = SnapshotBuilder.build(state, seat=1)
        assert snap.players[1]["hand"] == list(state.players[1].hand)
        assert snap.players[0]["hand"] is None
        assert snap.players[2]["hand"] is None
        assert snap.players[0]["handCount"] == 7

    def test_draw_pile_count_only(self):
        snap = SnapshotBuilder.build(started(), seat=0).to_dict()
        assert snap["drawPileCount"] == 21
        assert "drawPile" not in snap

    def test_no_other_hand_card_leaks(self):
        state = started(3)
        text = json.dumps(SnapshotBuilder.build(state, seat=0).to_dict())
        payload = json.loads(text)
        visible = set(payload["players"][0]["hand"])
        for p in payload["players"][1:]:
            assert p["hand"] is None
        assert visible == set(state.players[0].hand)

    def test_pending_only_for_acting_seat(self):
        state = choice_state()
        assert SnapshotBuilder.build(state, seat=0).pending_options == [2, 3]
        assert SnapshotBuilder.build(state, seat=1).pending_options == []

    def test_bomb_options(self):
        players = (
            PlayerState(id=0, name="P0", hand=(0, 1, 2, 20)),
            PlayerState(id=1, name="P1", hand=(4, 5, 6)),
            PlayerState(id=2, name="P2", hand=(32,)),
        )
        state = GameState(
            game_id="b",
            phase=Phase.PLAY_HAND,
            players=players,
            table=table_from_mapping({1: [3], 2: [7]}),
            draw_pile=(36,),
        )
        assert SnapshotBuilder.build(state, seat=0).bomb_options == [1]
        # 非行动座位不下发
        assert SnapshotBuilder.build(state, seat=1).bomb_options == []

    def test_deadline_and_fields(self):
        state = started()
        state = GameManager.apply_action(state, Action.play(state.players[0].hand[0]), seat=0)
        snap = SnapshotBuilder.build(state, seat=0, turn_deadline_ms=1200).to_dict()
        assert snap["turnDeadlineMs"] == 1200
        assert snap["phase"] == state.phase.value
        assert snap["gameId"] == state.game_id
        assert snap["seat"] == 0
