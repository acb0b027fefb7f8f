"""
计分引擎

将已吃牌转换为分数明细与牌型 (족보) 列表，以及终局结算
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Sequence, Tuple

from .cards import RibbonType, get_card, is_bird, junk_value
from .state import CapturedSet, PlayerState

# 最低 Stop 分数
MIN_STOP_SCORE = 3
# 皮 10 张起计分
JUNK_THRESHOLD = 10
# 动物 5 张起计分
ANIMAL_THRESHOLD = 5
# 带 5 张起计分
RIBBON_THRESHOLD = 5
# 输家皮少于 7 张算皮薄
LOW_JUNK_LIMIT = 7


@dataclass(frozen=True, slots=True)
class Combo:
    """
    已成立的牌型

    Attributes:
        id: 牌型 ID
        name: 显示名
        points: 分数
        card_ids: 构成该牌型的牌
    """
    id: str
    name: str
    points: int
    card_ids: Tuple[int, ...]


class PenaltyType(Enum):
    """结算惩罚类型"""
    NO_LIGHTS = "no-lights"   # 光薄
    LOW_JUNK = "low-junk"     # 皮薄
    GO_BUST = "go-bust"       # Go 薄


@dataclass(frozen=True, slots=True)
class Penalty:
    """针对某个输家的惩罚"""
    penalty_type: PenaltyType
    loser: int
    multiplier: int = 2
    description: str = ""


@dataclass(frozen=True)
class ScoringResult:
    """
    计分结果

    Attributes:
        base_score: 各类别合计 (未乘 Go 倍数)
        combos: 成立的牌型
        light_score / ribbon_score / animal_score / junk_score: 分类别得分
        go_multiplier: 2 ** go_count
        penalties: 结算惩罚 (计分时为空，终局结算时填充)
        final_score: base_score * go_multiplier
    """
    base_score: int
    combos: Tuple[Combo, ...]
    light_score: int
    ribbon_score: int
    animal_score: int
    junk_score: int
    go_multiplier: int
    final_score: int
    penalties: Tuple[Penalty, ...] = field(default=())

    @property
    def combo_names(self) -> List[str]:
        return [c.name for c in self.combos]


_RIBBON_SETS: Tuple[Tuple[RibbonType, str, str], ...] = (
    (RibbonType.RED, "red-ribbons", "Red Ribbons"),
    (RibbonType.BLUE, "blue-ribbons", "Blue Ribbons"),
    (RibbonType.EARLY, "early-ribbons", "Plain Ribbons"),
)


def calculate_score(captured: CapturedSet, go_count: int = 0) -> ScoringResult:
    """
    计算得分

    Args:
        captured: 已吃牌
        go_count: Go 次数

    Returns:
        ScoringResult
    """
    combos: List[Combo] = []

    light = _light_score(captured.lights, combos)
    ribbon = _ribbon_score(captured.ribbons, combos)
    animal = _animal_score(captured.animals, combos)
    junk = _junk_score(captured.junk, combos)

    base = light + ribbon + animal + junk
    multiplier = 2 ** go_count

    return ScoringResult(
        base_score=base,
        combos=tuple(combos),
        light_score=light,
        ribbon_score=ribbon,
        animal_score=animal,
        junk_score=junk,
        go_multiplier=multiplier,
        final_score=base * multiplier,
    )


def penalties_for(winner: PlayerState, loser: PlayerState) -> List[Penalty]:
    """
    判定单个输家的惩罚

    - 光薄: 赢家靠光得分而输家没有光
    - 皮薄: 赢家靠皮得分而输家皮值不足 7
    - Go 薄: 输家喊过 Go
    """
    result = calculate_score(winner.captured, winner.go_count)
    penalties: List[Penalty] = []

    if result.light_score > 0 and not loser.captured.lights:
        penalties.append(Penalty(
            PenaltyType.NO_LIGHTS, loser.id,
            description=f"{loser.name}: no lights",
        ))

    loser_junk = junk_value(loser.captured.junk)
    if result.junk_score > 0 and loser_junk < LOW_JUNK_LIMIT:
        penalties.append(Penalty(
            PenaltyType.LOW_JUNK, loser.id,
            description=f"{loser.name}: junk {loser_junk}",
        ))

    if loser.go_count > 0:
        penalties.append(Penalty(
            PenaltyType.GO_BUST, loser.id,
            description=f"{loser.name}: lost after {loser.go_count} go",
        ))

    return penalties


def settlement(result: ScoringResult, penalties: Sequence[Penalty]) -> int:
    """
    单个输家应付的分数

    Go 倍数与各惩罚倍数连乘
    """
    multiplier = result.go_multiplier
    for p in penalties:
        multiplier *= p.multiplier
    return result.base_score * multiplier


# =================== 内部函数 ===================

def _light_score(lights: Tuple[int, ...], combos: List[Combo]) -> int:
    """光 (互斥: 只取最高档)"""
    count = len(lights)
    if count < 3:
        return 0

    has_rain = any(get_card(cid).is_rain_light for cid in lights)

    if count >= 5:
        combos.append(Combo("five-lights", "Five Lights", 15, lights))
        return 15
    if count == 4:
        if has_rain:
            combos.append(Combo("mixed-four", "Rainy Four Lights", 4, lights))
        else:
            combos.append(Combo("clean-four", "Four Lights", 4, lights))
        return 4
    if has_rain:
        combos.append(Combo("mixed-three", "Rainy Three Lights", 2, lights))
        return 2
    combos.append(Combo("clean-three", "Three Lights", 3, lights))
    return 3


def _ribbon_score(ribbons: Tuple[int, ...], combos: List[Combo]) -> int:
    """带 (三组可叠加，另加张数分)"""
    score = 0

    for ribbon_type, combo_id, name in _RIBBON_SETS:
        members = tuple(cid for cid in ribbons if get_card(cid).ribbon_type == ribbon_type)
        if len(members) >= 3:
            combos.append(Combo(combo_id, name, 3, members[:3]))
            score += 3

    if len(ribbons) >= RIBBON_THRESHOLD:
        extra = len(ribbons) - RIBBON_THRESHOLD + 1
        combos.append(Combo("ribbon-count", f"{len(ribbons)} Ribbons", extra, ribbons))
        score += extra

    return score


def _animal_score(animals: Tuple[int, ...], combos: List[Combo]) -> int:
    """动物 (高道里 + 张数分)"""
    score = 0

    birds = tuple(cid for cid in animals if is_bird(cid))
    if len(birds) >= 3:
        combos.append(Combo("birds", "Godori", 5, birds[:3]))
        score += 5

    if len(animals) >= ANIMAL_THRESHOLD:
        extra = len(animals) - ANIMAL_THRESHOLD + 1
        combos.append(Combo("animal-count", f"{len(animals)} Animals", extra, animals))
        score += extra

    return score


def _junk_score(junk: Tuple[int, ...], combos: List[Combo]) -> int:
    value = junk_value(junk)
    if value < JUNK_THRESHOLD:
        return 0
    points = value - JUNK_THRESHOLD + 1
    combos.append(Combo("junk-count", f"{value} Junk", points, junk))
    return points
