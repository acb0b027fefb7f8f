"""
AI 决策策略

三个难度:
- EasyAgent: 随机出牌，总是 Stop，从不炸弹
- NormalAgent: 优先吃高价值牌，规则化 Go/Stop
- HardAgent: 记牌 (未见牌按月估计)，综合牌堆与对手威胁决定 Go/Stop

所有决策只读 GameState，不修改状态
"""
from typing import Dict, List, Optional, Sequence
import logging
import random

import numpy as np

from core.actions import Action
from core.cards import CardType, card_month, card_type, card_value, get_card, is_bird, junk_value, month_counts
from core.matching import MatchResolver
from core.scoring import MIN_STOP_SCORE, calculate_score
from core.state import Difficulty, GameState, Phase

logger = logging.getLogger(__name__)

# Normal 难度按桌面牌类别排序的优先级
_CAPTURE_PRIORITY: Dict[CardType, int] = {
    CardType.LIGHT: 10,
    CardType.ANIMAL: 5,
    CardType.RIBBON: 3,
    CardType.JUNK: 1,
}


class Agent:
    """智能体基类"""

    difficulty: Difficulty = Difficulty.EASY

    def __init__(self, name: str = "agent", rng: Optional[random.Random] = None):
        self.name = name
        self.rng = rng or random.Random()

    def choose_card(self, state: GameState, seat: int) -> int:
        """从手牌中选一张出"""
        raise NotImplementedError

    def select_match(self, state: GameState, seat: int, options: Sequence[int]) -> int:
        """二选一"""
        raise NotImplementedError

    def should_go(self, state: GameState, seat: int) -> bool:
        """True 表示 Go，False 表示 Stop"""
        raise NotImplementedError

    def choose_bomb(self, state: GameState, seat: int) -> Optional[int]:
        """返回要炸弹的月份，不炸返回 None"""
        return None

    def act(self, state: GameState, seat: int) -> Action:
        """
        为当前阶段选择动作

        Raises:
            ValueError: 当前阶段不需要该座位决策
        """
        if state.phase == Phase.GO_STOP_DECISION:
            go = self.should_go(state, seat)
            logger.debug(f"{self.name} (seat {seat}) declares {'go' if go else 'stop'}")
            return Action.go() if go else Action.stop()

        if state.phase in (Phase.HAND_MATCH_SELECT, Phase.DRAW_MATCH_SELECT):
            return Action.select(self.select_match(state, seat, state.pending_options))

        if state.phase == Phase.PLAY_HAND:
            month = self.choose_bomb(state, seat)
            if month is not None:
                logger.debug(f"{self.name} (seat {seat}) bombs month {month}")
                return Action.bomb(month)
            return Action.play(self.choose_card(state, seat))

        raise ValueError(f"No decision to make in phase '{state.phase.value}'")


class EasyAgent(Agent):
    """随机智能体"""

    difficulty = Difficulty.EASY

    def __init__(self, name: str = "easy", rng: Optional[random.Random] = None):
        super().__init__(name, rng)

    def choose_card(self, state: GameState, seat: int) -> int:
        hand = state.players[seat].hand
        if not hand:
            raise ValueError(f"Seat {seat} has no cards to play")
        return self.rng.choice(hand)

    def select_match(self, state: GameState, seat: int, options: Sequence[int]) -> int:
        return self.rng.choice(list(options))

    def should_go(self, state: GameState, seat: int) -> bool:
        return False


class NormalAgent(Agent):
    """规则智能体"""

    difficulty = Difficulty.NORMAL

    # Go/Stop 参数
    stop_score = 7
    max_go = 2
    go_probability = 0.4

    def __init__(self, name: str = "normal", rng: Optional[random.Random] = None):
        super().__init__(name, rng)

    def choose_card(self, state: GameState, seat: int) -> int:
        hand = state.players[seat].hand
        if not hand:
            raise ValueError(f"Seat {seat} has no cards to play")

        # 能吃牌的手牌，按桌面同月牌的价值排序
        best_card: Optional[int] = None
        best_priority = 0
        for cid in hand:
            on_table = state.table_cards(card_month(cid))
            if not on_table:
                continue
            priority = sum(_CAPTURE_PRIORITY[card_type(t)] for t in on_table)
            if priority > best_priority:
                best_priority = priority
                best_card = cid

        if best_card is not None:
            return best_card

        # 无法吃牌 → 丢价值最低的
        return min(hand, key=lambda cid: (card_value(cid), cid))

    def select_match(self, state: GameState, seat: int, options: Sequence[int]) -> int:
        return _best_option(options)

    def should_go(self, state: GameState, seat: int) -> bool:
        player = state.players[seat]
        base = calculate_score(player.captured, player.go_count).base_score

        if base >= self.stop_score:
            return False
        if player.go_count >= self.max_go:
            return False
        if base >= MIN_STOP_SCORE and len(player.hand) <= 2:
            return False
        return self.rng.random() < self.go_probability

    def choose_bomb(self, state: GameState, seat: int) -> Optional[int]:
        """只炸桌面含光或动物的月份"""
        for month in _bomb_options(state, seat):
            if any(card_type(t) in (CardType.LIGHT, CardType.ANIMAL) for t in state.table_cards(month)):
                return month
        return None


class HardAgent(NormalAgent):
    """
    记牌智能体

    统计已见牌 (各家已吃 + 桌面 + 自己手牌)，估计每月未见张数
    """

    difficulty = Difficulty.HARD

    # Go/Stop 参数
    max_go = 3
    stop_score = 10
    safe_score = 5
    min_draw_pile = 3
    junk_threat = 8
    # 桌面牌少于等于该值时主动炸弹
    sparse_table = 4

    def __init__(self, name: str = "hard", rng: Optional[random.Random] = None):
        super().__init__(name, rng)

    def unseen_by_month(self, state: GameState, seat: int) -> np.ndarray:
        """
        每月未见张数

        Returns:
            12 维数组，下标 m-1 对应 m 月
        """
        seen: List[int] = [cid for _, cards in state.table for cid in cards]
        for player in state.players:
            seen.extend(player.captured.all_cards())
        seen.extend(state.players[seat].hand)
        return np.clip(4 - month_counts(seen), 0, 4)

    def choose_card(self, state: GameState, seat: int) -> int:
        hand = state.players[seat].hand
        if not hand:
            raise ValueError(f"Seat {seat} has no cards to play")

        unseen = self.unseen_by_month(state, seat)
        best_card = hand[0]
        best_score = -np.inf

        for cid in hand:
            month = card_month(cid)
            on_table = state.table_cards(month)

            if len(on_table) in (1, 3):
                score = sum(card_value(t) for t in on_table) + 5
            elif len(on_table) == 2:
                score = max(card_value(t) for t in on_table) + 3
            else:
                # 丢牌: 未见张数越多，越容易被对手吃到
                score = -card_value(cid) - int(unseen[month - 1]) * 2
                if is_bird(cid):
                    score -= 3

            if score > best_score:
                best_score = score
                best_card = cid

        return best_card

    def select_match(self, state: GameState, seat: int, options: Sequence[int]) -> int:
        return _best_option(options)

    def should_go(self, state: GameState, seat: int) -> bool:
        player = state.players[seat]
        base = calculate_score(player.captured, player.go_count).base_score

        if len(state.draw_pile) <= self.min_draw_pile:
            return False
        if player.go_count >= self.max_go:
            return False
        if base >= self.stop_score:
            return False

        opponent_junk = max(
            junk_value(p.captured.junk) for p in state.players if p.id != seat
        )
        if opponent_junk >= self.junk_threat:
            return False

        # 冲五光
        if len(player.captured.lights) >= 3 and base < 7:
            return True

        return base < self.safe_score

    def choose_bomb(self, state: GameState, seat: int) -> Optional[int]:
        month = super().choose_bomb(state, seat)
        if month is not None:
            return month
        options = _bomb_options(state, seat)
        if options and state.table_count <= self.sparse_table:
            return options[0]
        return None


def _bomb_options(state: GameState, seat: int) -> List[int]:
    return MatchResolver.bomb_options(state.players[seat].hand, state.table_dict())


def _best_option(options: Sequence[int]) -> int:
    """价值最高的候选，同价值优先双皮"""
    return max(options, key=lambda cid: (card_value(cid), get_card(cid).is_double_junk, -cid))


_AGENTS = {
    Difficulty.EASY: EasyAgent,
    Difficulty.NORMAL: NormalAgent,
    Difficulty.HARD: HardAgent,
}


def make_agent(difficulty: Difficulty, rng: Optional[random.Random] = None,
               name: Optional[str] = None) -> Agent:
    """按难度创建智能体"""
    agent_cls = _AGENTS[difficulty]
    if name is None:
        return agent_cls(rng=rng)
    return agent_cls(name=name, rng=rng)
