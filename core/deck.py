"""
洗牌与发牌

三人高斯通: 每人 7 张手牌，桌面 6 张，其余 21 张为牌堆
"""
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple
import random

from .cards import FULL_DECK, card_month
from .state import PlayerState, Table, table_from_mapping

PLAYER_COUNT = 3
HAND_SIZE = 7
TABLE_SIZE = 6

DEFAULT_NAMES: Tuple[str, ...] = ("Player", "AI 1", "AI 2")


@dataclass(frozen=True)
class DealResult:
    """发牌结果"""
    players: Tuple[PlayerState, ...]
    table: Table
    draw_pile: Tuple[int, ...]


def shuffle(cards: Sequence[int], rng: random.Random) -> List[int]:
    """洗牌，返回新列表"""
    deck = list(cards)
    rng.shuffle(deck)
    return deck


def deal(
    rng: Optional[random.Random] = None,
    names: Sequence[str] = DEFAULT_NAMES,
    ai_seats: Sequence[bool] = (False, True, True),
) -> DealResult:
    """
    发牌

    Args:
        rng: 随机源 (None 时新建未播种的 Random)
        names: 三个座位的显示名
        ai_seats: 各座位是否由 AI 控制

    Returns:
        DealResult
    """
    if len(names) != PLAYER_COUNT or len(ai_seats) != PLAYER_COUNT:
        raise ValueError(f"Exactly {PLAYER_COUNT} seats are required")

    rng = rng or random.Random()
    deck = shuffle(FULL_DECK, rng)
    idx = 0

    players = []
    for seat in range(PLAYER_COUNT):
        hand = tuple(sorted(deck[idx:idx + HAND_SIZE]))
        idx += HAND_SIZE
        players.append(PlayerState(
            id=seat,
            name=names[seat],
            hand=hand,
            is_ai=bool(ai_seats[seat]),
        ))

    table: Dict[int, List[int]] = {}
    for cid in deck[idx:idx + TABLE_SIZE]:
        table.setdefault(card_month(cid), []).append(cid)
    idx += TABLE_SIZE

    return DealResult(
        players=tuple(players),
        table=table_from_mapping(table),
        draw_pile=tuple(deck[idx:]),
    )
