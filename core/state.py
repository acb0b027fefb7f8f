"""
游戏状态定义

使用不可变数据结构，支持:
- 状态转移返回新快照 (不修改输入)
- 多请求间安全共享
- 易于序列化
"""
from dataclasses import dataclass, field, replace
from typing import Dict, Tuple, Optional, List, Iterable, Mapping, Sequence, TYPE_CHECKING
from enum import Enum
import uuid

from .cards import CardType, get_card

if TYPE_CHECKING:
    from .scoring import ScoringResult


class Phase(Enum):
    """状态机阶段"""
    IDLE = "idle"
    PLAY_HAND = "play-hand"                  # 出手牌
    HAND_MATCH_SELECT = "hand-match-select"  # 手牌二选一
    DRAW = "draw"                            # 翻牌
    DRAW_MATCH_SELECT = "draw-match-select"  # 翻牌二选一
    RESOLVE_CAPTURE = "resolve-capture"      # 结算吃牌
    GO_STOP_DECISION = "go-stop-decision"    # Go / Stop 选择
    GAME_OVER = "game-over"


# 需要等待玩家输入的阶段
INPUT_PHASES: Tuple[Phase, ...] = (
    Phase.PLAY_HAND,
    Phase.HAND_MATCH_SELECT,
    Phase.DRAW_MATCH_SELECT,
    Phase.GO_STOP_DECISION,
)


class SpecialEvent(Enum):
    """特殊事件标签"""
    NONE = "none"
    SINGLE_MATCH = "single-match"   # 一对一吃牌 (仅用于 UI)
    QUAD_MATCH = "quad-match"       # 三张同月全收
    BOMB = "bomb"                   # 炸弹
    SWEEP = "sweep"                 # 扫台


class Difficulty(Enum):
    """AI 难度"""
    EASY = "easy"
    NORMAL = "normal"
    HARD = "hard"


@dataclass(frozen=True)
class CapturedSet:
    """
    玩家已吃的牌 (按类别分组，回合内只追加)

    Attributes:
        lights: 光
        animals: 动物
        ribbons: 带
        junk: 皮
    """
    lights: Tuple[int, ...] = ()
    animals: Tuple[int, ...] = ()
    ribbons: Tuple[int, ...] = ()
    junk: Tuple[int, ...] = ()

    def with_cards(self, card_ids: Iterable[int]) -> 'CapturedSet':
        """按类别追加牌，返回新集合"""
        groups: Dict[CardType, List[int]] = {
            CardType.LIGHT: list(self.lights),
            CardType.ANIMAL: list(self.animals),
            CardType.RIBBON: list(self.ribbons),
            CardType.JUNK: list(self.junk),
        }
        for cid in card_ids:
            groups[get_card(cid).card_type].append(cid)
        return CapturedSet(
            lights=tuple(groups[CardType.LIGHT]),
            animals=tuple(groups[CardType.ANIMAL]),
            ribbons=tuple(groups[CardType.RIBBON]),
            junk=tuple(groups[CardType.JUNK]),
        )

    def pop_junk(self) -> Tuple['CapturedSet', Optional[int]]:
        """取走最后一张皮，没有皮时返回 (self, None)"""
        if not self.junk:
            return self, None
        return replace(self, junk=self.junk[:-1]), self.junk[-1]

    def all_cards(self) -> Tuple[int, ...]:
        return self.lights + self.animals + self.ribbons + self.junk

    def __len__(self) -> int:
        return len(self.lights) + len(self.animals) + len(self.ribbons) + len(self.junk)


@dataclass(frozen=True)
class PlayerState:
    """
    玩家状态

    Attributes:
        id: 座位号
        name: 显示名
        hand: 手牌
        captured: 已吃牌
        go_count: Go 次数
        sweep_count: 扫台次数
        is_ai: 是否 AI 座位
    """
    id: int
    name: str
    hand: Tuple[int, ...] = ()
    captured: CapturedSet = field(default_factory=CapturedSet)
    go_count: int = 0
    sweep_count: int = 0
    is_ai: bool = False


@dataclass(frozen=True)
class TurnAction:
    """
    单回合记录 (回合结束后丢弃)

    played_card 为 None 表示本回合尚未出普通牌 (炸弹之后)
    """
    played_card: Optional[int] = None
    hand_match_target: Optional[int] = None
    drawn_card: Optional[int] = None
    draw_match_target: Optional[int] = None
    captured: Tuple[int, ...] = ()
    events: Tuple[SpecialEvent, ...] = ()


# 桌面: ((月, (牌, ...)), ...) 按月排序，不含空月
Table = Tuple[Tuple[int, Tuple[int, ...]], ...]


def table_from_mapping(table: Mapping[int, Sequence[int]]) -> Table:
    """月 → 牌列表映射转为不可变桌面，去掉空月"""
    return tuple(
        (int(month), tuple(cards))
        for month, cards in sorted(table.items())
        if cards
    )


@dataclass(frozen=True)
class GameState:
    """
    不可变游戏状态

    所有状态转移 (见 core.game) 返回新快照

    Attributes:
        game_id: 对局 ID
        phase: 状态机阶段
        players: 三名玩家
        table: 桌面牌 (按月分组)
        draw_pile: 牌堆 (末尾为顶)
        turn_index: 当前行动座位
        turn_count: 回合计数
        turn_action: 当前回合记录
        pending_options: 待选择的匹配目标
        last_event: 最近事件
        difficulty: AI 难度
        winner: 赢家座位
        result: 赢家最终得分
        decider: 正在选择 Go/Stop 的座位
        last_captured: 最近吃到的牌 (UI 反馈)
    """
    game_id: str
    phase: Phase = Phase.IDLE
    players: Tuple[PlayerState, ...] = ()
    table: Table = ()
    draw_pile: Tuple[int, ...] = ()
    turn_index: int = 0
    turn_count: int = 0
    turn_action: Optional[TurnAction] = None
    pending_options: Tuple[int, ...] = ()
    last_event: SpecialEvent = SpecialEvent.NONE
    difficulty: Difficulty = Difficulty.NORMAL
    winner: Optional[int] = None
    result: Optional['ScoringResult'] = None
    decider: Optional[int] = None
    last_captured: Tuple[int, ...] = ()

    @classmethod
    def create(
        cls,
        difficulty: Difficulty = Difficulty.NORMAL,
        game_id: Optional[str] = None,
    ) -> 'GameState':
        """创建 idle 状态 (尚未发牌)"""
        return cls(game_id=game_id or uuid.uuid4().hex, difficulty=difficulty)

    def table_dict(self) -> Dict[int, List[int]]:
        """桌面牌字典 (可修改副本)"""
        return {month: list(cards) for month, cards in self.table}

    def table_cards(self, month: int) -> Tuple[int, ...]:
        for m, cards in self.table:
            if m == month:
                return cards
        return ()

    @property
    def table_count(self) -> int:
        return sum(len(cards) for _, cards in self.table)

    @property
    def current_player(self) -> PlayerState:
        return self.players[self.turn_index]

    @property
    def acting_seat(self) -> Optional[int]:
        """需要做决定的座位 (Go/Stop 阶段为 decider)"""
        if self.phase == Phase.GO_STOP_DECISION:
            return self.decider
        if self.phase in (Phase.IDLE, Phase.GAME_OVER):
            return None
        return self.turn_index

    @property
    def is_finished(self) -> bool:
        return self.phase == Phase.GAME_OVER

    @property
    def awaiting_input(self) -> bool:
        return self.phase in INPUT_PHASES
