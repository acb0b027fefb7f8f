"""
引擎异常定义

分类:
- GameRuleError: 可恢复的规则错误 (阶段不符、目标非法)，调用方重新提示即可
- MatchContractError: 调用方违反匹配执行契约 (select 结果未给目标)
- OrchestratorRunawayError: 自动推进超出迭代上限，属于引擎缺陷
"""
from typing import Iterable, Optional


class GameRuleError(ValueError):
    """规则错误基类 (可恢复)"""


class IllegalTransitionError(GameRuleError):
    """当前阶段不允许该动作"""

    def __init__(self, action: str, expected: Iterable[str], actual: str,
                 message: Optional[str] = None):
        self.action = action
        self.expected = tuple(expected)
        self.actual = actual
        if message is None:
            message = (
                f"Cannot {action} in phase '{actual}' "
                f"(expected {' or '.join(repr(p) for p in self.expected)})"
            )
        super().__init__(message)


class NotYourTurnError(IllegalTransitionError):
    """提交动作的座位不是当前行动者"""

    def __init__(self, action: str, seat: int, acting_seat: Optional[int], phase: str):
        self.seat = seat
        self.acting_seat = acting_seat
        super().__init__(
            action,
            expected=(phase,),
            actual=phase,
            message=f"Seat {seat} cannot {action}: waiting on seat {acting_seat}",
        )


class InvalidTargetError(GameRuleError):
    """卡牌不在手中 / 目标不在候选中 / 月份不可炸弹"""


class MatchContractError(ValueError):
    """select 结果执行时未提供目标"""


class OrchestratorRunawayError(RuntimeError):
    """自动推进超过迭代上限 (状态机缺陷)"""
