"""
权威端动作服务 (与传输层无关)

乐观并发流程:
    读取 (状态 + 版本) → 版本比较 → 执行动作 + AI 连续推进 → 按原版本条件写入

版本冲突与写入竞争不抛异常，返回 ActionStatus.CONFLICT
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Mapping, Optional, Sequence
import logging
import random

from core.actions import Action
from core.deck import DEFAULT_NAMES
from core.exceptions import GameRuleError
from core.game import GameManager
from core.state import Difficulty, GameState

from .config import ServerConfig
from .dto import SeatSnapshot, SnapshotBuilder, hydrate_state, serialize_state
from .orchestrator import TurnChainer
from .store import InMemoryStateStore, StoredMatch, now_ms

logger = logging.getLogger(__name__)


class ActionStatus(Enum):
    OK = "ok"
    CONFLICT = "conflict"    # 版本过期或写入竞争，客户端需重新获取
    REJECTED = "rejected"    # 规则校验失败，客户端重新选择


STALE_VERSION = "stale-version"
WRITE_RACE = "write-race"


@dataclass
class ActionResult:
    """
    动作提交结果

    Attributes:
        status: 结果状态
        snapshot: 提交者座位的视图 (冲突时为 None)
        version: 当前版本号
        error: 拒绝原因
        conflict_reason: "stale-version" 或 "write-race"
    """
    status: ActionStatus
    snapshot: Optional[SeatSnapshot] = None
    version: Optional[int] = None
    error: Optional[str] = None
    conflict_reason: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == ActionStatus.OK

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "snapshot": self.snapshot.to_dict() if self.snapshot else None,
            "version": self.version,
            "error": self.error,
            "conflictReason": self.conflict_reason,
        }


class GameService:
    """
    对局服务

    Example:
        service = GameService()
        match_id = service.create_match(Difficulty.NORMAL)
        view = service.snapshot(match_id, seat=0)
        result = service.submit(match_id, 0, Action.play(5), view.version)
    """

    def __init__(
        self,
        store: Optional[InMemoryStateStore] = None,
        config: Optional[ServerConfig] = None,
        rng: Optional[random.Random] = None,
        clock: Callable[[], int] = now_ms,
    ):
        self.store = store if store is not None else InMemoryStateStore()
        self.config = config or ServerConfig()
        self.rng = rng or random.Random()
        self.clock = clock
        self.chainer = TurnChainer(self.rng, self.config.max_chain_iterations)

    def create_match(
        self,
        difficulty: Difficulty = Difficulty.NORMAL,
        names: Sequence[str] = DEFAULT_NAMES,
        ai_seats: Sequence[bool] = (False, True, True),
    ) -> str:
        """发牌并保存版本 0，AI 先手时先推进到人类输入"""
        state = GameManager.start(GameState.create(difficulty), self.rng, names, ai_seats)
        state = self.chainer.advance(state)
        self.store.create(state.game_id, self._record(state, version=0))
        logger.info(f"Created match {state.game_id} ({difficulty.value})")
        return state.game_id

    def snapshot(self, match_id: str, seat: int) -> ActionResult:
        """读取座位视图"""
        try:
            stored = self.store.load(match_id)
        except KeyError as e:
            return ActionResult(ActionStatus.REJECTED, error=str(e.args[0]))
        state = hydrate_state(stored.state)
        return ActionResult(
            ActionStatus.OK,
            snapshot=SnapshotBuilder.build(state, seat, self._remaining(stored)),
            version=stored.version,
        )

    def submit(self, match_id: str, seat: int, action: Action, version: int) -> ActionResult:
        """
        提交动作

        Args:
            match_id: 对局 ID
            seat: 提交者座位
            action: 动作
            version: 客户端最后看到的版本号

        Returns:
            ActionResult

        Raises:
            OrchestratorRunawayError: AI 连续推进失控 (不可恢复)
        """
        try:
            stored = self.store.load(match_id)
        except KeyError as e:
            return ActionResult(ActionStatus.REJECTED, error=str(e.args[0]))

        if stored.version != version:
            logger.warning(
                f"Match {match_id}: stale version {version} from seat {seat} "
                f"(current {stored.version})"
            )
            return ActionResult(
                ActionStatus.CONFLICT,
                version=stored.version,
                error=f"Version {version} is stale (current {stored.version})",
                conflict_reason=STALE_VERSION,
            )

        state = hydrate_state(stored.state)
        try:
            state = GameManager.apply_action(state, action, seat, self.rng)
        except GameRuleError as e:
            return ActionResult(ActionStatus.REJECTED, version=stored.version, error=str(e))

        state = self.chainer.advance(state)
        record = self._record(state, version=stored.version + 1)

        if not self.store.compare_and_set(match_id, stored.version, record):
            logger.warning(f"Match {match_id}: lost write race at version {stored.version}")
            return ActionResult(
                ActionStatus.CONFLICT,
                error=f"Match {match_id} was updated concurrently",
                conflict_reason=WRITE_RACE,
            )

        logger.info(
            f"Match {match_id} v{record.version}: seat {seat} {action.action_type.value} "
            f"-> {state.phase.value}"
        )
        return ActionResult(
            ActionStatus.OK,
            snapshot=SnapshotBuilder.build(state, seat, self._remaining(record)),
            version=record.version,
        )

    def submit_payload(
        self, match_id: str, seat: int, payload: Mapping[str, Any], version: int
    ) -> ActionResult:
        """解析请求载荷后提交，格式错误返回 REJECTED"""
        try:
            action = Action.from_dict(dict(payload))
        except ValueError as e:
            return ActionResult(ActionStatus.REJECTED, version=version, error=str(e))
        return self.submit(match_id, seat, action, version)

    # =================== 内部 ===================

    def _record(self, state: GameState, version: int) -> StoredMatch:
        now = self.clock()
        timeout = self.config.deadline_ms(state.phase)
        return StoredMatch(
            state=serialize_state(state),
            version=version,
            turn_deadline=now + timeout if timeout is not None else None,
            updated_at=now,
        )

    def _remaining(self, stored: StoredMatch) -> Optional[int]:
        if stored.turn_deadline is None:
            return None
        return max(0, stored.turn_deadline - self.clock())
