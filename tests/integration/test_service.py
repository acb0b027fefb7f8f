"""乐观并发服务测试"""
import random

import pytest

from core.actions import Action
from core.state import Difficulty, Phase
from server.config import ServerConfig
from server.dto import hydrate_state
from server.service import ActionStatus, GameService
from server.store import InMemoryStateStore, StoredMatch


class FakeClock:
    """可手动推进的毫秒时钟"""

    def __init__(self, now: int = 1_000_000):
        self.now = now

    def __call__(self) -> int:
        return self.now


class RacingStore(InMemoryStateStore):
    """条件写入之前，另一个请求抢先更新了版本"""

    def compare_and_set(self, match_id, expected_version, record):
        current = self.load(match_id)
        super().compare_and_set(
            match_id, expected_version,
            StoredMatch(current.state, current.version + 1, current.turn_deadline, current.updated_at),
        )
        return super().compare_and_set(match_id, expected_version, record)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def service(clock):
    return GameService(rng=random.Random(7), clock=clock)


def first_card(service, match_id):
    return service.snapshot(match_id, 0).snapshot.players[0]["hand"][0]


class TestCreateAndSnapshot:
    """创建与快照测试"""

    def test_create(self, service):
        match_id = service.create_match(Difficulty.NORMAL)
        result = service.snapshot(match_id, 0)
        assert result.ok
        assert result.version == 0
        assert result.snapshot.phase == Phase.PLAY_HAND.value
        assert len(result.snapshot.players[0]["hand"]) == 7
        assert result.snapshot.players[1]["hand"] is None

    def test_deadline_countdown(self, service, clock):
        match_id = service.create_match()
        assert service.snapshot(match_id, 0).snapshot.turn_deadline_ms == 30000

        clock.now += 5000
        assert service.snapshot(match_id, 0).snapshot.turn_deadline_ms == 25000

        clock.now += 60000
        assert service.snapshot(match_id, 0).snapshot.turn_deadline_ms == 0

    def test_custom_timeouts(self, clock):
        service = GameService(config=ServerConfig(play_hand_timeout_ms=1000), rng=random.Random(1), clock=clock)
        match_id = service.create_match()
        assert service.snapshot(match_id, 0).snapshot.turn_deadline_ms == 1000

    def test_unknown_match(self, service):
        result = service.snapshot("missing", 0)
        assert result.status == ActionStatus.REJECTED
        assert "missing" in result.error

    def test_all_ai_match_runs_to_end(self, service):
        match_id = service.create_match(Difficulty.HARD, ai_seats=(True, True, True))
        result = service.snapshot(match_id, 0)
        assert result.snapshot.phase == Phase.GAME_OVER.value
        assert result.snapshot.turn_deadline_ms is None


class TestSubmit:
    """动作提交测试"""

    def test_accept(self, service):
        match_id = service.create_match()
        result = service.submit(match_id, 0, Action.play(first_card(service, match_id)), version=0)
        assert result.status == ActionStatus.OK
        assert result.version == 1
        assert service.store.load(match_id).version == 1

        state = hydrate_state(service.store.load(match_id).state)
        # 连续推进后停在人类输入或终局
        assert state.is_finished or state.acting_seat == 0

    def test_stale_version_conflict(self, service):
        match_id = service.create_match()
        card = first_card(service, match_id)

        first = service.submit(match_id, 0, Action.play(card), version=0)
        second = service.submit(match_id, 0, Action.play(card), version=0)

        assert first.status == ActionStatus.OK
        assert second.status == ActionStatus.CONFLICT
        assert second.conflict_reason == "stale-version"
        assert second.version == 1
        assert second.snapshot is None
        # 第二个请求没有被合并
        assert service.store.load(match_id).version == 1

    def test_rule_error_rejected(self, service):
        match_id = service.create_match()
        hand = set(service.snapshot(match_id, 0).snapshot.players[0]["hand"])
        missing = next(cid for cid in range(48) if cid not in hand)

        result = service.submit(match_id, 0, Action.play(missing), version=0)
        assert result.status == ActionStatus.REJECTED
        assert result.error
        assert service.store.load(match_id).version == 0

    def test_wrong_phase_rejected(self, service):
        match_id = service.create_match()
        result = service.submit(match_id, 0, Action.go(), version=0)
        assert result.status == ActionStatus.REJECTED
        assert "go-stop-decision" in result.error

    def test_not_your_turn(self, service):
        match_id = service.create_match()
        result = service.submit(match_id, 1, Action.timeout(), version=0)
        assert result.status == ActionStatus.REJECTED
        assert service.store.load(match_id).version == 0

    def test_timeout_action(self, service):
        match_id = service.create_match()
        result = service.submit(match_id, 0, Action.timeout(), version=0)
        assert result.ok
        assert result.version == 1

    def test_write_race(self, clock):
        service = GameService(store=RacingStore(), rng=random.Random(3), clock=clock)
        match_id = service.create_match()

        result = service.submit(match_id, 0, Action.play(first_card(service, match_id)), version=0)
        assert result.status == ActionStatus.CONFLICT
        assert result.conflict_reason == "write-race"
        assert service.store.load(match_id).version == 1

    def test_submit_payload(self, service):
        match_id = service.create_match()
        card = first_card(service, match_id)
        result = service.submit_payload(match_id, 0, {"type": "play-hand-card", "cardId": card}, version=0)
        assert result.ok

    def test_bad_payload(self, service):
        match_id = service.create_match()
        result = service.submit_payload(match_id, 0, {"type": "fold"}, version=0)
        assert result.status == ActionStatus.REJECTED
        assert "Unknown action type" in result.error

    def test_result_to_dict(self, service):
        match_id = service.create_match()
        d = service.submit(match_id, 0, Action.timeout(), version=5).to_dict()
        assert d["status"] == "conflict"
        assert d["conflictReason"] == "stale-version"
        assert d["snapshot"] is None

    def test_play_through_with_timeouts(self, service):
        match_id = service.create_match(Difficulty.EASY)
        version = 0
        for _ in range(40):
            result = service.submit(match_id, 0, Action.timeout(), version)
            assert result.ok
            version = result.version
            if result.snapshot.phase == Phase.GAME_OVER.value:
                break
        assert result.snapshot.phase == Phase.GAME_OVER.value
