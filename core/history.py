"""
战绩记录

保留最近 100 局，提供胜率与平均得分统计
"""
from dataclasses import dataclass, field, asdict
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

from .state import GameState

MAX_RECORDS = 100


@dataclass
class GameRecord:
    """单局战绩 (以某个座位为视角)"""
    result: str  # "win" / "lose" / "draw"
    score: int
    combo_names: List[str]
    turns: int
    difficulty: str
    played_at: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    @classmethod
    def from_state(cls, state: GameState, seat: int) -> 'GameRecord':
        if state.winner is None:
            result = "draw"
        elif state.winner == seat:
            result = "win"
        else:
            result = "lose"
        won = result == "win" and state.result is not None
        return cls(
            result=result,
            score=state.result.final_score if won else 0,
            combo_names=state.result.combo_names if won else [],
            turns=state.turn_count,
            difficulty=state.difficulty.value,
        )

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> 'GameRecord':
        valid_keys = cls.__dataclass_fields__.keys()
        filtered = {k: v for k, v in d.items() if k in valid_keys}
        return cls(**filtered)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class HistoryStats:
    total: int
    wins: int
    losses: int
    draws: int
    win_rate: int   # 百分比 (四舍五入)
    avg_score: int


class GameHistory:
    """
    战绩列表 (最新在前)
    """

    def __init__(self, records: Optional[Sequence[GameRecord]] = None, limit: int = MAX_RECORDS):
        self.limit = limit
        self.records: List[GameRecord] = list(records or [])[:limit]

    def add(self, record: GameRecord):
        self.records.insert(0, record)
        del self.records[self.limit:]

    def stats(self) -> HistoryStats:
        total = len(self.records)
        wins = sum(1 for r in self.records if r.result == "win")
        losses = sum(1 for r in self.records if r.result == "lose")
        draws = sum(1 for r in self.records if r.result == "draw")
        return HistoryStats(
            total=total,
            wins=wins,
            losses=losses,
            draws=draws,
            win_rate=round(wins / total * 100) if total else 0,
            avg_score=round(sum(r.score for r in self.records) / total) if total else 0,
        )

    def clear(self):
        self.records.clear()

    def to_list(self) -> List[Dict[str, Any]]:
        return [r.to_dict() for r in self.records]

    @classmethod
    def from_list(cls, items: Sequence[Dict[str, Any]], limit: int = MAX_RECORDS) -> 'GameHistory':
        return cls([GameRecord.from_dict(d) for d in items], limit=limit)
