"""
花斗 (Hwatu) 牌的定义与编码

高斯通使用 48 张牌:
- 1-12 月各 4 张
- 牌 ID 0-47 按月排列 (月 m 占 ID 4*(m-1) .. 4*(m-1)+3)
- 每月顺序: 光/动物 → 带 → 皮
"""
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, Tuple
import numpy as np


class CardType(Enum):
    """牌类别"""
    LIGHT = "light"      # 光
    ANIMAL = "animal"    # 动物 (열끗)
    RIBBON = "ribbon"    # 带
    JUNK = "junk"        # 皮


class RibbonType(Enum):
    """带的子类别"""
    RED = "red"          # 红带 (1,2,3 月)
    BLUE = "blue"        # 青带 (6,9,10 月)
    EARLY = "early"      # 草带 (4,5,7 月)
    NONE = "none"


@dataclass(frozen=True, slots=True)
class Card:
    """
    不可变卡牌记录

    Attributes:
        id: 牌 ID (0-47)
        month: 月份 (1-12)
        card_type: 类别
        ribbon_type: 带子类别 (非带为 NONE)
        name: 显示名称
        is_double_junk: 双皮 (计 2 张皮)
        is_rain_light: 雨光 (12 月光)
    """
    id: int
    month: int
    card_type: CardType
    ribbon_type: RibbonType
    name: str
    is_double_junk: bool = False
    is_rain_light: bool = False


NUM_CARDS = 48
NUM_MONTHS = 12
CARDS_PER_MONTH = 4

# 月份植物名
MONTH_NAMES: Dict[int, str] = {
    1: "Pine", 2: "Plum", 3: "Cherry", 4: "Wisteria",
    5: "Iris", 6: "Peony", 7: "Clover", 8: "Susuki",
    9: "Chrysanthemum", 10: "Maple", 11: "Paulownia", 12: "Willow",
}

# 高道里 (三只鸟) 所在月份
BIRD_MONTHS: Tuple[int, ...] = (2, 4, 8)

_L, _A, _R, _J = CardType.LIGHT, CardType.ANIMAL, CardType.RIBBON, CardType.JUNK
_RED, _BLUE, _EARLY, _NO = RibbonType.RED, RibbonType.BLUE, RibbonType.EARLY, RibbonType.NONE

# (月, 类别, 带类别, 名称后缀, 双皮, 雨光)
_CARD_DATA: Tuple[Tuple[int, CardType, RibbonType, str, bool, bool], ...] = (
    (1, _L, _NO, "light", False, False),
    (1, _R, _RED, "red ribbon", False, False),
    (1, _J, _NO, "junk", False, False),
    (1, _J, _NO, "junk", False, False),

    (2, _A, _NO, "bush warbler", False, False),
    (2, _R, _RED, "red ribbon", False, False),
    (2, _J, _NO, "junk", False, False),
    (2, _J, _NO, "junk", False, False),

    (3, _L, _NO, "curtain light", False, False),
    (3, _R, _RED, "red ribbon", False, False),
    (3, _J, _NO, "junk", False, False),
    (3, _J, _NO, "junk", False, False),

    (4, _A, _NO, "cuckoo", False, False),
    (4, _R, _EARLY, "plain ribbon", False, False),
    (4, _J, _NO, "junk", False, False),
    (4, _J, _NO, "junk", False, False),

    (5, _A, _NO, "bridge", False, False),
    (5, _R, _EARLY, "plain ribbon", False, False),
    (5, _J, _NO, "junk", False, False),
    (5, _J, _NO, "junk", False, False),

    (6, _A, _NO, "butterflies", False, False),
    (6, _R, _BLUE, "blue ribbon", False, False),
    (6, _J, _NO, "junk", False, False),
    (6, _J, _NO, "junk", False, False),

    (7, _A, _NO, "boar", False, False),
    (7, _R, _EARLY, "plain ribbon", False, False),
    (7, _J, _NO, "junk", False, False),
    (7, _J, _NO, "junk", False, False),

    (8, _L, _NO, "moon light", False, False),
    (8, _A, _NO, "geese", False, False),
    (8, _J, _NO, "junk", False, False),
    (8, _J, _NO, "junk", False, False),

    (9, _A, _NO, "sake cup", False, False),
    (9, _R, _BLUE, "blue ribbon", False, False),
    (9, _J, _NO, "junk", False, False),
    (9, _J, _NO, "junk", False, False),

    (10, _A, _NO, "deer", False, False),
    (10, _R, _BLUE, "blue ribbon", False, False),
    (10, _J, _NO, "junk", False, False),
    (10, _J, _NO, "junk", False, False),

    (11, _L, _NO, "phoenix light", False, False),
    (11, _J, _NO, "junk", False, False),
    (11, _J, _NO, "double junk", True, False),
    (11, _J, _NO, "junk", False, False),

    (12, _L, _NO, "rain light", False, True),
    (12, _A, _NO, "swallow", False, False),
    (12, _R, _NO, "ribbon", False, False),
    (12, _J, _NO, "double junk", True, False),
)

# 全部 48 张 (下标即 ID)
ALL_CARDS: Tuple[Card, ...] = tuple(
    Card(
        id=idx,
        month=month,
        card_type=card_type,
        ribbon_type=ribbon_type,
        name=f"{MONTH_NAMES[month]} {suffix}",
        is_double_junk=double_junk,
        is_rain_light=rain_light,
    )
    for idx, (month, card_type, ribbon_type, suffix, double_junk, rain_light)
    in enumerate(_CARD_DATA)
)

# 牌 ID 全集
FULL_DECK: Tuple[int, ...] = tuple(range(NUM_CARDS))


def get_card(card_id: int) -> Card:
    """按 ID 查牌"""
    if not 0 <= card_id < NUM_CARDS:
        raise KeyError(f"Unknown card id: {card_id}")
    return ALL_CARDS[card_id]


def card_month(card_id: int) -> int:
    return get_card(card_id).month


def card_type(card_id: int) -> CardType:
    return get_card(card_id).card_type


def cards_of_month(month: int) -> List[Card]:
    """指定月份的 4 张牌"""
    return [c for c in ALL_CARDS if c.month == month]


def cards_of_type(kind: CardType) -> List[Card]:
    """指定类别的全部牌"""
    return [c for c in ALL_CARDS if c.card_type == kind]


def is_bird(card_id: int) -> bool:
    """高道里对象 (2, 4, 8 月动物)"""
    card = get_card(card_id)
    return card.card_type == CardType.ANIMAL and card.month in BIRD_MONTHS


def junk_value(card_ids: Iterable[int]) -> int:
    """
    皮的计数值

    双皮按 2 张计算
    """
    return sum(2 if get_card(cid).is_double_junk else 1 for cid in card_ids)


def card_value(card_id: int) -> int:
    """AI 使用的单张价值: 光 > 动物 > 带 > 皮"""
    return _TYPE_VALUE[get_card(card_id).card_type]


_TYPE_VALUE: Dict[CardType, int] = {
    CardType.LIGHT: 20,
    CardType.ANIMAL: 10,
    CardType.RIBBON: 5,
    CardType.JUNK: 1,
}


def cards_to_array(card_ids: Iterable[int]) -> np.ndarray:
    """
    将牌列表转换为 48 维 one-hot 向量

    Args:
        card_ids: 牌 ID 列表

    Returns:
        48 维 float32 数组
    """
    arr = np.zeros(NUM_CARDS, dtype=np.float32)
    ids = list(card_ids)
    if ids:
        arr[ids] = 1
    return arr


def month_counts(card_ids: Iterable[int]) -> np.ndarray:
    """
    按月统计张数

    ID 按月连续排列，直接 reshape 为 (12, 4) 后按行求和

    Returns:
        12 维 int 数组，下标 m-1 对应 m 月
    """
    matrix = cards_to_array(card_ids).reshape(NUM_MONTHS, CARDS_PER_MONTH)
    return matrix.sum(axis=1).astype(np.int64)


def cards_to_str(card_ids: Iterable[int]) -> str:
    """可读字符串，如 "1:light 2:junk" """
    return " ".join(f"{card_month(cid)}:{card_type(cid).value}" for cid in card_ids)
