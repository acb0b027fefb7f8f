"""
特殊事件检测

扫台 / 炸弹 / 全收 的标签判定与抢皮惩罚
"""
from dataclasses import replace
from typing import Iterable, List, Mapping, Sequence, Tuple

from .matching import MatchType
from .state import PlayerState, SpecialEvent

# 每个事件向每位对手抢 1 张皮
PENALTY_EVENTS = frozenset({SpecialEvent.QUAD_MATCH, SpecialEvent.BOMB, SpecialEvent.SWEEP})


def is_sweep(table: Mapping[int, Sequence[int]]) -> bool:
    """吃牌后桌面为空即扫台"""
    return not any(cards for cards in table.values())


def detect_turn_events(
    match_type: MatchType,
    sweep: bool,
    bomb: bool,
) -> List[SpecialEvent]:
    """
    汇总回合事件

    Args:
        match_type: 匹配类型
        sweep: 是否扫台
        bomb: 是否炸弹

    Returns:
        事件列表，无事件时为 [NONE]
    """
    events: List[SpecialEvent] = []

    if bomb:
        events.append(SpecialEvent.BOMB)
    if match_type == MatchType.QUAD:
        events.append(SpecialEvent.QUAD_MATCH)
    if sweep:
        events.append(SpecialEvent.SWEEP)
    if match_type == MatchType.SINGLE and not bomb and not sweep:
        events.append(SpecialEvent.SINGLE_MATCH)

    if not events:
        events.append(SpecialEvent.NONE)
    return events


def penalty_units(events: Iterable[SpecialEvent]) -> int:
    """惩罚单位数: 全收/炸弹/扫台各 1"""
    return sum(1 for e in events if e in PENALTY_EVENTS)


def apply_penalty(
    players: Sequence[PlayerState],
    actor: int,
    units: int,
) -> Tuple[Tuple[PlayerState, ...], List[int]]:
    """
    从每位对手处抢皮

    对手没有皮时跳过，不凭空产生

    Returns:
        (新玩家元组, 抢到的牌)
    """
    if units <= 0:
        return tuple(players), []

    result = list(players)
    stolen: List[int] = []
    gained = result[actor].captured

    for seat, victim in enumerate(players):
        if seat == actor:
            continue
        victim_captured = victim.captured
        for _ in range(units):
            victim_captured, card = victim_captured.pop_junk()
            if card is None:
                break
            stolen.append(card)
        result[seat] = replace(victim, captured=victim_captured)

    if stolen:
        result[actor] = replace(result[actor], captured=gained.with_cards(stolen))
    return tuple(result), stolen


def headline_event(events: Sequence[SpecialEvent]) -> SpecialEvent:
    """选出最显眼的事件用于 UI: 扫台优先，其次第一个事件"""
    if SpecialEvent.SWEEP in events:
        return SpecialEvent.SWEEP
    return events[0] if events else SpecialEvent.NONE
