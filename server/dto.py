"""
状态序列化与按座位快照

- serialize_state / hydrate_state: 完整 GameState ↔ JSON 兼容字典 (存储用)
- SnapshotBuilder: 按座位生成脱敏视图 (对手手牌永不下发)

桌面以 "月" → 牌列表 的字典存储 (键为字符串)
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence

from core.matching import MatchResolver
from core.scoring import Combo, Penalty, PenaltyType, ScoringResult
from core.state import (
    CapturedSet, Difficulty, GameState, Phase, PlayerState, SpecialEvent, Table, TurnAction,
    table_from_mapping,
)


# =================== 桌面 ===================

def serialize_table(table: Table) -> Dict[str, List[int]]:
    """桌面 → {"月": [牌, ...]}"""
    return {str(month): list(cards) for month, cards in table}


def deserialize_table(data: Mapping[str, Sequence[int]]) -> Table:
    """{"月": [牌, ...]} → 桌面 (保持每月牌的顺序)"""
    return table_from_mapping({int(month): list(cards) for month, cards in data.items()})


# =================== 组件 ===================

def _captured_to_dict(captured: CapturedSet) -> Dict[str, List[int]]:
    return {
        "lights": list(captured.lights),
        "animals": list(captured.animals),
        "ribbons": list(captured.ribbons),
        "junk": list(captured.junk),
    }


def _captured_from_dict(d: Mapping[str, Sequence[int]]) -> CapturedSet:
    return CapturedSet(
        lights=tuple(d.get("lights", ())),
        animals=tuple(d.get("animals", ())),
        ribbons=tuple(d.get("ribbons", ())),
        junk=tuple(d.get("junk", ())),
    )


def _player_to_dict(player: PlayerState) -> Dict[str, Any]:
    return {
        "id": player.id,
        "name": player.name,
        "hand": list(player.hand),
        "captured": _captured_to_dict(player.captured),
        "goCount": player.go_count,
        "sweepCount": player.sweep_count,
        "isAi": player.is_ai,
    }


def _player_from_dict(d: Mapping[str, Any]) -> PlayerState:
    return PlayerState(
        id=d["id"],
        name=d["name"],
        hand=tuple(d.get("hand", ())),
        captured=_captured_from_dict(d.get("captured", {})),
        go_count=d.get("goCount", 0),
        sweep_count=d.get("sweepCount", 0),
        is_ai=d.get("isAi", False),
    )


def _turn_action_to_dict(action: Optional[TurnAction]) -> Optional[Dict[str, Any]]:
    if action is None:
        return None
    return {
        "playedCard": action.played_card,
        "handMatchTarget": action.hand_match_target,
        "drawnCard": action.drawn_card,
        "drawMatchTarget": action.draw_match_target,
        "captured": list(action.captured),
        "events": [e.value for e in action.events],
    }


def _turn_action_from_dict(d: Optional[Mapping[str, Any]]) -> Optional[TurnAction]:
    if d is None:
        return None
    return TurnAction(
        played_card=d.get("playedCard"),
        hand_match_target=d.get("handMatchTarget"),
        drawn_card=d.get("drawnCard"),
        draw_match_target=d.get("drawMatchTarget"),
        captured=tuple(d.get("captured", ())),
        events=tuple(SpecialEvent(e) for e in d.get("events", ())),
    )


def result_to_dict(result: Optional[ScoringResult]) -> Optional[Dict[str, Any]]:
    """计分明细"""
    if result is None:
        return None
    return {
        "baseScore": result.base_score,
        "combos": [
            {"id": c.id, "name": c.name, "points": c.points, "cardIds": list(c.card_ids)}
            for c in result.combos
        ],
        "lightScore": result.light_score,
        "ribbonScore": result.ribbon_score,
        "animalScore": result.animal_score,
        "junkScore": result.junk_score,
        "goMultiplier": result.go_multiplier,
        "finalScore": result.final_score,
        "penalties": [
            {
                "type": p.penalty_type.value,
                "loser": p.loser,
                "multiplier": p.multiplier,
                "description": p.description,
            }
            for p in result.penalties
        ],
    }


def _result_from_dict(d: Optional[Mapping[str, Any]]) -> Optional[ScoringResult]:
    if d is None:
        return None
    return ScoringResult(
        base_score=d["baseScore"],
        combos=tuple(
            Combo(c["id"], c["name"], c["points"], tuple(c["cardIds"]))
            for c in d.get("combos", ())
        ),
        light_score=d["lightScore"],
        ribbon_score=d["ribbonScore"],
        animal_score=d["animalScore"],
        junk_score=d["junkScore"],
        go_multiplier=d["goMultiplier"],
        final_score=d["finalScore"],
        penalties=tuple(
            Penalty(PenaltyType(p["type"]), p["loser"], p.get("multiplier", 2), p.get("description", ""))
            for p in d.get("penalties", ())
        ),
    )


# =================== 完整状态 ===================

def serialize_state(state: GameState) -> Dict[str, Any]:
    """
    完整状态 → JSON 兼容字典

    包含所有手牌与牌堆，只用于存储，不可直接下发给客户端
    """
    return {
        "gameId": state.game_id,
        "phase": state.phase.value,
        "players": [_player_to_dict(p) for p in state.players],
        "table": serialize_table(state.table),
        "drawPile": list(state.draw_pile),
        "turnIndex": state.turn_index,
        "turnCount": state.turn_count,
        "turnAction": _turn_action_to_dict(state.turn_action),
        "pendingOptions": list(state.pending_options),
        "lastEvent": state.last_event.value,
        "difficulty": state.difficulty.value,
        "winner": state.winner,
        "result": result_to_dict(state.result),
        "decider": state.decider,
        "lastCaptured": list(state.last_captured),
    }


def hydrate_state(data: Mapping[str, Any]) -> GameState:
    """JSON 兼容字典 → GameState"""
    return GameState(
        game_id=data["gameId"],
        phase=Phase(data["phase"]),
        players=tuple(_player_from_dict(p) for p in data.get("players", ())),
        table=deserialize_table(data.get("table", {})),
        draw_pile=tuple(data.get("drawPile", ())),
        turn_index=data.get("turnIndex", 0),
        turn_count=data.get("turnCount", 0),
        turn_action=_turn_action_from_dict(data.get("turnAction")),
        pending_options=tuple(data.get("pendingOptions", ())),
        last_event=SpecialEvent(data.get("lastEvent", SpecialEvent.NONE.value)),
        difficulty=Difficulty(data.get("difficulty", Difficulty.NORMAL.value)),
        winner=data.get("winner"),
        result=_result_from_dict(data.get("result")),
        decider=data.get("decider"),
        last_captured=tuple(data.get("lastCaptured", ())),
    )


# =================== 按座位快照 ===================

@dataclass
class SeatSnapshot:
    """
    单个座位可见的状态

    Attributes:
        game_id: 对局 ID
        seat: 请求者座位
        phase: 阶段
        players: 各座位信息 (只有自己的手牌)
        table: 桌面
        draw_pile_count: 牌堆张数 (不含内容)
        turn_index: 当前行动座位
        turn_count: 回合计数
        pending_options: 待选目标 (只对决策座位可见)
        last_event: 最近事件
        winner: 赢家
        result: 得分明细
        decider: Go/Stop 决策座位
        last_captured: 最近吃到的牌
        bomb_options: 本座位可炸弹的月份
        turn_deadline_ms: 剩余限时 (毫秒)
    """
    game_id: str
    seat: int
    phase: str
    players: List[Dict[str, Any]]
    table: Dict[str, List[int]]
    draw_pile_count: int
    turn_index: int
    turn_count: int
    pending_options: List[int] = field(default_factory=list)
    last_event: str = SpecialEvent.NONE.value
    winner: Optional[int] = None
    result: Optional[Dict[str, Any]] = None
    decider: Optional[int] = None
    last_captured: List[int] = field(default_factory=list)
    bomb_options: List[int] = field(default_factory=list)
    turn_deadline_ms: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "gameId": self.game_id,
            "seat": self.seat,
            "phase": self.phase,
            "players": self.players,
            "table": self.table,
            "drawPileCount": self.draw_pile_count,
            "turnIndex": self.turn_index,
            "turnCount": self.turn_count,
            "pendingOptions": self.pending_options,
            "lastEvent": self.last_event,
            "winner": self.winner,
            "result": self.result,
            "decider": self.decider,
            "lastCaptured": self.last_captured,
            "bombOptions": self.bomb_options,
            "turnDeadlineMs": self.turn_deadline_ms,
        }


class SnapshotBuilder:
    """
    快照构建器

    对手手牌只下发张数
    """

    @staticmethod
    def build(
        state: GameState,
        seat: int,
        turn_deadline_ms: Optional[int] = None,
    ) -> SeatSnapshot:
        """
        构建座位视图

        Args:
            state: 完整状态
            seat: 请求者座位
            turn_deadline_ms: 剩余限时

        Returns:
            SeatSnapshot
        """
        players = []
        for p in state.players:
            players.append({
                "id": p.id,
                "name": p.name,
                "handCount": len(p.hand),
                "hand": list(p.hand) if p.id == seat else None,
                "captured": _captured_to_dict(p.captured),
                "goCount": p.go_count,
                "sweepCount": p.sweep_count,
                "isAi": p.is_ai,
            })

        acting = state.acting_seat == seat
        pending: List[int] = []
        if acting and state.phase in (Phase.HAND_MATCH_SELECT, Phase.DRAW_MATCH_SELECT):
            pending = list(state.pending_options)

        bombs: List[int] = []
        if acting and state.phase == Phase.PLAY_HAND:
            bombs = MatchResolver.bomb_options(state.players[seat].hand, state.table_dict())

        return SeatSnapshot(
            game_id=state.game_id,
            seat=seat,
            phase=state.phase.value,
            players=players,
            table=serialize_table(state.table),
            draw_pile_count=len(state.draw_pile),
            turn_index=state.turn_index,
            turn_count=state.turn_count,
            pending_options=pending,
            last_event=state.last_event.value,
            winner=state.winner,
            result=result_to_dict(state.result),
            decider=state.decider,
            last_captured=list(state.last_captured),
            bomb_options=bombs,
            turn_deadline_ms=turn_deadline_ms,
        )
