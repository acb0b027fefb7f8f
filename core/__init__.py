"""
Core Layer - 纯规则引擎 (无 I/O)

Modules:
    cards: 48 张牌目录与编码
    deck: 洗牌与发牌
    matching: 月份匹配判定
    events: 特殊事件与抢皮
    scoring: 计分与结算
    state: 游戏状态
    actions: 动作类型
    game: 回合状态机
    session: 三局制系列
    history: 战绩
"""
from .cards import (
    Card,
    CardType,
    RibbonType,
    ALL_CARDS,
    FULL_DECK,
    get_card,
    card_month,
    card_type,
    junk_value,
    cards_to_array,
    month_counts,
)

from .deck import (
    PLAYER_COUNT,
    HAND_SIZE,
    TABLE_SIZE,
    DealResult,
    deal,
)

from .matching import (
    MatchType,
    MatchResult,
    MatchResolver,
)

from .events import (
    is_sweep,
    detect_turn_events,
    penalty_units,
    apply_penalty,
)

from .scoring import (
    MIN_STOP_SCORE,
    Combo,
    Penalty,
    PenaltyType,
    ScoringResult,
    calculate_score,
    penalties_for,
    settlement,
)

from .state import (
    Phase,
    SpecialEvent,
    Difficulty,
    CapturedSet,
    PlayerState,
    TurnAction,
    GameState,
)

from .actions import ActionType, Action

from .game import GameManager

from .session import ROUNDS_PER_SESSION, RoundResult, GameSession

from .history import GameRecord, GameHistory

from .exceptions import (
    GameRuleError,
    IllegalTransitionError,
    NotYourTurnError,
    InvalidTargetError,
    MatchContractError,
    OrchestratorRunawayError,
)

__all__ = [
    # cards
    "Card",
    "CardType",
    "RibbonType",
    "ALL_CARDS",
    "FULL_DECK",
    "get_card",
    "card_month",
    "card_type",
    "junk_value",
    "cards_to_array",
    "month_counts",
    # deck
    "PLAYER_COUNT",
    "HAND_SIZE",
    "TABLE_SIZE",
    "DealResult",
    "deal",
    # matching
    "MatchType",
    "MatchResult",
    "MatchResolver",
    # events
    "is_sweep",
    "detect_turn_events",
    "penalty_units",
    "apply_penalty",
    # scoring
    "MIN_STOP_SCORE",
    "Combo",
    "Penalty",
    "PenaltyType",
    "ScoringResult",
    "calculate_score",
    "penalties_for",
    "settlement",
    # state
    "Phase",
    "SpecialEvent",
    "Difficulty",
    "CapturedSet",
    "PlayerState",
    "TurnAction",
    "GameState",
    # actions
    "ActionType",
    "Action",
    # game
    "GameManager",
    # session
    "ROUNDS_PER_SESSION",
    "RoundResult",
    "GameSession",
    # history
    "GameRecord",
    "GameHistory",
    # exceptions
    "GameRuleError",
    "IllegalTransitionError",
    "NotYourTurnError",
    "InvalidTargetError",
    "MatchContractError",
    "OrchestratorRunawayError",
]
