"""
服务端配置

规则常量固定在 core 中，这里只放运行参数
"""
from dataclasses import dataclass
from typing import Optional

from core.state import Phase


@dataclass
class ServerConfig:
    """
    服务端配置

    Attributes:
        play_hand_timeout_ms: 出牌限时
        match_select_timeout_ms: 二选一限时
        go_stop_timeout_ms: Go/Stop 限时
        max_chain_iterations: AI 连续推进的迭代上限
    """
    # 各阶段限时 (毫秒)
    play_hand_timeout_ms: int = 30000
    match_select_timeout_ms: int = 15000
    go_stop_timeout_ms: int = 15000

    # 编排器
    max_chain_iterations: int = 200

    def deadline_ms(self, phase: Phase) -> Optional[int]:
        """该阶段的限时，不需要玩家输入的阶段返回 None"""
        if phase == Phase.PLAY_HAND:
            return self.play_hand_timeout_ms
        if phase in (Phase.HAND_MATCH_SELECT, Phase.DRAW_MATCH_SELECT):
            return self.match_select_timeout_ms
        if phase == Phase.GO_STOP_DECISION:
            return self.go_stop_timeout_ms
        return None

    @classmethod
    def from_dict(cls, d: dict) -> 'ServerConfig':
        valid_keys = cls.__dataclass_fields__.keys()
        filtered = {k: v for k, v in d.items() if k in valid_keys}
        return cls(**filtered)
