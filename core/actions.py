"""
动作类型定义

客户端 → 权威端的动作词汇，只携带最小载荷 (牌 ID / 目标 ID / 月份)
阶段与归属校验在 core.game 中完成
"""
from enum import Enum
from dataclasses import dataclass
from typing import Any, Dict, Optional


class ActionType(Enum):
    """动作类型"""
    PLAY_CARD = "play-hand-card"         # 出手牌
    SELECT_TARGET = "select-match-target"  # 选择匹配目标
    GO = "declare-go"
    STOP = "declare-stop"
    BOMB = "declare-bomb"                # 炸弹 (指定月份)
    TIMEOUT = "timeout"                  # 超时自动处理


@dataclass(frozen=True, slots=True)
class Action:
    """
    不可变动作表示

    Attributes:
        action_type: 动作类型
        card_id: PLAY_CARD 的牌
        target_id: SELECT_TARGET 的目标
        month: BOMB 的月份
    """
    action_type: ActionType
    card_id: Optional[int] = None
    target_id: Optional[int] = None
    month: Optional[int] = None

    @classmethod
    def play(cls, card_id: int) -> 'Action':
        return cls(ActionType.PLAY_CARD, card_id=card_id)

    @classmethod
    def select(cls, target_id: int) -> 'Action':
        return cls(ActionType.SELECT_TARGET, target_id=target_id)

    @classmethod
    def go(cls) -> 'Action':
        return cls(ActionType.GO)

    @classmethod
    def stop(cls) -> 'Action':
        return cls(ActionType.STOP)

    @classmethod
    def bomb(cls, month: int) -> 'Action':
        return cls(ActionType.BOMB, month=month)

    @classmethod
    def timeout(cls) -> 'Action':
        return cls(ActionType.TIMEOUT)

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> 'Action':
        """
        从请求载荷解析

        Args:
            payload: 如 {"type": "play-hand-card", "cardId": 5}

        Raises:
            ValueError: 未知类型或缺少载荷
        """
        try:
            action_type = ActionType(payload.get("type"))
        except ValueError:
            raise ValueError(f"Unknown action type: {payload.get('type')!r}") from None

        required = _REQUIRED_FIELD.get(action_type)
        value = payload.get(required) if required is not None else None
        # bool 是 int 的子类
        if required is not None and (isinstance(value, bool) or not isinstance(value, int)):
            raise ValueError(f"Action '{action_type.value}' requires integer '{required}'")

        return cls(
            action_type=action_type,
            card_id=payload.get("cardId") if action_type == ActionType.PLAY_CARD else None,
            target_id=payload.get("targetId") if action_type == ActionType.SELECT_TARGET else None,
            month=payload.get("month") if action_type == ActionType.BOMB else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {"type": self.action_type.value}
        if self.card_id is not None:
            d["cardId"] = self.card_id
        if self.target_id is not None:
            d["targetId"] = self.target_id
        if self.month is not None:
            d["month"] = self.month
        return d


_REQUIRED_FIELD: Dict[ActionType, str] = {
    ActionType.PLAY_CARD: "cardId",
    ActionType.SELECT_TARGET: "targetId",
    ActionType.BOMB: "month",
}
