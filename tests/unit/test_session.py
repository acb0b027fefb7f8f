"""三局制系列测试"""
import random

import pytest

from core.game import GameManager
from core.session import ROUNDS_PER_SESSION, GameSession
from core.state import CapturedSet, Difficulty, GameState, Phase, PlayerState


def finished_state(winner_lights=None, game_id="round"):
    """构造一个已终局的状态 (winner_lights 为 None 表示流局)"""
    players = [PlayerState(id=i, name=f"P{i}") for i in range(3)]
    if winner_lights is not None:
        seat, lights = winner_lights
        players[seat] = PlayerState(id=seat, name=f"P{seat}", captured=CapturedSet(lights=lights))
    state = GameState(game_id=game_id, phase=Phase.PLAY_HAND, players=tuple(players))
    return GameManager.resolve_game_end(state)


class TestGameSession:
    """GameSession 测试"""

    def test_new_round(self):
        session = GameSession(Difficulty.EASY)
        state = session.new_round(random.Random(0))
        assert state.phase == Phase.PLAY_HAND
        assert state.difficulty == Difficulty.EASY
        assert state.players[0].is_ai is False
        assert state.players[1].is_ai is True

    def test_record_round(self):
        session = GameSession()
        result = session.record_round(finished_state((1, (0, 8, 28))))
        assert result.round == 0
        assert result.winner == 1
        assert result.points == 3
        assert result.combo_names == ("Three Lights",)
        assert result.payments == {0: 6, 2: 6}
        assert session.scores == [0, 3, 0]
        assert session.current_round == 1

    def test_draw_round(self):
        session = GameSession()
        result = session.record_round(finished_state())
        assert result.winner is None
        assert result.points == 0
        assert session.scores == [0, 0, 0]

    def test_unfinished_round_rejected(self):
        session = GameSession()
        state = session.new_round(random.Random(0))
        with pytest.raises(ValueError):
            session.record_round(state)

    def test_session_over(self):
        session = GameSession()
        for _ in range(ROUNDS_PER_SESSION):
            assert not session.is_over
            session.record_round(finished_state())
        assert session.is_over
        assert len(session.history) == 3
        with pytest.raises(ValueError):
            session.new_round(random.Random(0))
        with pytest.raises(ValueError):
            session.record_round(finished_state())

    def test_ranking(self):
        session = GameSession()
        session.record_round(finished_state((2, (0, 8, 28))))
        session.record_round(finished_state((1, (0, 8, 28, 40))))
        session.record_round(finished_state((2, (0, 8, 28))))
        assert session.ranking() == [(2, 6), (1, 4), (0, 0)]

    def test_ranking_tie_by_seat(self):
        session = GameSession()
        assert session.ranking() == [(0, 0), (1, 0), (2, 0)]

    def test_repr(self):
        session = GameSession(names=("A", "B", "C"))
        text = repr(session)
        assert "0/3 rounds" in text
        assert "A: 0" in text
