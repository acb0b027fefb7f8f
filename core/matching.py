"""
月份匹配判定

出牌/翻牌与桌面同月牌的匹配规则，所有方法都是纯函数
"""
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Mapping, Optional, Sequence, Tuple
from collections import Counter

from .cards import card_month
from .exceptions import MatchContractError


class MatchType(Enum):
    """匹配结果类型"""
    NO_MATCH = "no-match"          # 同月 0 张 → 放到桌面
    SINGLE = "single-match"        # 同月 1 张 → 直接吃
    CHOICE = "choice"              # 同月 2 张 → 二选一
    QUAD = "quad-match"            # 同月 3 张 → 4 张全收


@dataclass(frozen=True, slots=True)
class MatchResult:
    """
    匹配结果

    Attributes:
        match_type: 类型
        targets: SINGLE 为 1 张，CHOICE 为 2 个候选，QUAD 为 3 张
    """
    match_type: MatchType
    targets: Tuple[int, ...] = ()

    @property
    def needs_choice(self) -> bool:
        return self.match_type == MatchType.CHOICE


TableMapping = Mapping[int, Sequence[int]]


class MatchResolver:
    """
    匹配判定器

    所有方法都是静态方法，无状态
    """

    @staticmethod
    def resolve(table: TableMapping, card_id: int) -> MatchResult:
        """
        判定一张牌与桌面的匹配

        Args:
            table: 月 → 桌面牌
            card_id: 打出或翻出的牌

        Returns:
            MatchResult
        """
        on_table = tuple(table.get(card_month(card_id), ()))
        n = len(on_table)

        if n == 0:
            return MatchResult(MatchType.NO_MATCH)
        if n == 1:
            return MatchResult(MatchType.SINGLE, on_table)
        if n == 2:
            return MatchResult(MatchType.CHOICE, on_table)
        # 正常流程下桌面同月不会有 4 张，按全收处理
        return MatchResult(MatchType.QUAD, on_table)

    @staticmethod
    def execute(
        table: TableMapping,
        card_id: int,
        result: MatchResult,
        target: Optional[int] = None,
    ) -> Tuple[Dict[int, List[int]], List[int]]:
        """
        执行匹配

        Args:
            table: 当前桌面
            card_id: 打出或翻出的牌
            result: resolve 的结果
            target: CHOICE 时选中的目标

        Returns:
            (新桌面, 吃到的牌 (含自己的牌))
        """
        month = card_month(card_id)
        new_table = {m: list(cards) for m, cards in table.items() if cards}

        if result.match_type == MatchType.NO_MATCH:
            new_table.setdefault(month, []).append(card_id)
            return new_table, []

        if result.match_type == MatchType.CHOICE:
            if target is None:
                raise MatchContractError("A target must be chosen for a choice match")
            if target not in result.targets:
                raise MatchContractError(f"Target {target} is not one of {list(result.targets)}")
            remaining = [cid for cid in new_table.get(month, []) if cid != target]
            if remaining:
                new_table[month] = remaining
            else:
                new_table.pop(month, None)
            return new_table, [card_id, target]

        # SINGLE / QUAD: 同月全部吃掉
        new_table.pop(month, None)
        return new_table, [card_id, *result.targets]

    @staticmethod
    def bomb_options(hand: Sequence[int], table: TableMapping) -> List[int]:
        """
        可炸弹的月份

        手牌同月 3 张以上，且桌面有该月的牌

        Returns:
            升序月份列表
        """
        counter = Counter(card_month(cid) for cid in hand)
        return sorted(
            month for month, count in counter.items()
            if count >= 3 and table.get(month)
        )

    @staticmethod
    def stacked_months(table: TableMapping) -> List[int]:
        """桌面上同月叠到 3 张的月份 (UI 提示用)"""
        return sorted(month for month, cards in table.items() if len(cards) == 3)
