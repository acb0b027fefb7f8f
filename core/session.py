"""
对局系列 (3 局) 管理

每局是独立的 GameState 生命周期，终局后记录结果并累计分数
"""
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple
import logging
import random
import uuid

from .deck import DEFAULT_NAMES, PLAYER_COUNT
from .game import GameManager
from .state import Difficulty, GameState

logger = logging.getLogger(__name__)

ROUNDS_PER_SESSION = 3


@dataclass(frozen=True)
class RoundResult:
    """单局结果"""
    round: int
    winner: Optional[int]
    points: int
    combo_names: Tuple[str, ...]
    payments: Dict[int, int] = field(default_factory=dict)


class GameSession:
    """
    三局制对局系列

    只在每局结束时更新，不会恢复已结束的局
    """

    def __init__(
        self,
        difficulty: Difficulty = Difficulty.NORMAL,
        names: Sequence[str] = DEFAULT_NAMES,
        ai_seats: Sequence[bool] = (False, True, True),
        max_rounds: int = ROUNDS_PER_SESSION,
        session_id: Optional[str] = None,
    ):
        self.session_id = session_id or uuid.uuid4().hex
        self.difficulty = difficulty
        self.names = tuple(names)
        self.ai_seats = tuple(ai_seats)
        self.max_rounds = max_rounds
        self.current_round = 0
        self.scores: List[int] = [0] * PLAYER_COUNT
        self.history: List[RoundResult] = []

    @property
    def is_over(self) -> bool:
        return self.current_round >= self.max_rounds

    def new_round(self, rng: Optional[random.Random] = None) -> GameState:
        """发出新一局 (全新 GameState)"""
        if self.is_over:
            raise ValueError(f"Session {self.session_id} already finished {self.max_rounds} rounds")
        state = GameState.create(self.difficulty)
        return GameManager.start(state, rng, self.names, self.ai_seats)

    def record_round(self, state: GameState) -> RoundResult:
        """
        记录一局结果

        Args:
            state: 已终局的 GameState

        Returns:
            RoundResult
        """
        if not state.is_finished:
            raise ValueError(f"Round is not finished (phase '{state.phase.value}')")
        if self.is_over:
            raise ValueError(f"Session {self.session_id} already finished {self.max_rounds} rounds")

        points = state.result.final_score if state.result else 0
        combos = tuple(state.result.combo_names) if state.result else ()
        if state.winner is not None:
            self.scores[state.winner] += points

        result = RoundResult(
            round=self.current_round,
            winner=state.winner,
            points=points,
            combo_names=combos,
            payments=GameManager.settle(state),
        )
        self.history.append(result)
        self.current_round += 1
        logger.info(
            f"Session {self.session_id} round {result.round + 1}/{self.max_rounds}: "
            f"winner={result.winner} points={points}"
        )
        return result

    def ranking(self) -> List[Tuple[int, int]]:
        """(座位, 累计分) 按分数降序，同分按座位号"""
        return sorted(enumerate(self.scores), key=lambda x: (-x[1], x[0]))

    def __repr__(self) -> str:
        lines = [f"Session {self.session_id} ({self.current_round}/{self.max_rounds} rounds):"]
        for i, (seat, score) in enumerate(self.ranking()):
            lines.append(f"  {i+1}. {self.names[seat]}: {score}")
        return "\n".join(lines)
