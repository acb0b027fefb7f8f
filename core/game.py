"""
游戏管理器 - 回合状态机

所有转移都是纯函数: 输入 GameState，返回新 GameState
校验失败时抛出 GameRuleError 子类，输入状态不受影响

阶段流转:
    idle → play-hand → [hand-match-select] → draw → [draw-match-select]
         → resolve-capture → [go-stop-decision] → play-hand (下一家) ... → game-over
"""
from dataclasses import replace
from typing import Callable, Dict, List, Optional, Sequence
import logging
import random

from .actions import Action, ActionType
from .cards import card_month
from .deck import DEFAULT_NAMES, PLAYER_COUNT, deal
from .events import apply_penalty, detect_turn_events, headline_event, is_sweep, penalty_units
from .exceptions import IllegalTransitionError, InvalidTargetError, NotYourTurnError
from .matching import MatchResolver, MatchResult, MatchType
from .scoring import MIN_STOP_SCORE, Penalty, ScoringResult, calculate_score, penalties_for, settlement
from .state import GameState, Phase, PlayerState, SpecialEvent, TurnAction, table_from_mapping

logger = logging.getLogger(__name__)


def _require(state: GameState, action: str, *phases: Phase) -> None:
    if state.phase not in phases:
        raise IllegalTransitionError(action, [p.value for p in phases], state.phase.value)


def _with_player(players: Sequence[PlayerState], seat: int, player: PlayerState):
    result = list(players)
    result[seat] = player
    return tuple(result)


class GameManager:
    """
    高斯通状态机

    所有方法都是静态方法，无状态
    """

    @staticmethod
    def start(
        state: GameState,
        rng: Optional[random.Random] = None,
        names: Sequence[str] = DEFAULT_NAMES,
        ai_seats: Sequence[bool] = (False, True, True),
    ) -> GameState:
        """发牌并进入第一家的 play-hand"""
        _require(state, "start", Phase.IDLE)
        dealt = deal(rng, names, ai_seats)
        return replace(
            state,
            phase=Phase.PLAY_HAND,
            players=dealt.players,
            table=dealt.table,
            draw_pile=dealt.draw_pile,
            turn_index=0,
            turn_count=1,
        )

    @staticmethod
    def play_hand_card(state: GameState, card_id: int) -> GameState:
        """
        出一张手牌

        二选一时进入 hand-match-select，否则立即吃牌并进入 draw
        """
        _require(state, "play a card", Phase.PLAY_HAND)
        player = state.current_player
        if card_id not in player.hand:
            raise InvalidTargetError(f"Card {card_id} is not in seat {player.id}'s hand")

        player = replace(player, hand=tuple(c for c in player.hand if c != card_id))
        players = _with_player(state.players, state.turn_index, player)
        table = state.table_dict()
        match = MatchResolver.resolve(table, card_id)

        if match.needs_choice:
            return replace(
                state,
                players=players,
                phase=Phase.HAND_MATCH_SELECT,
                pending_options=match.targets,
                turn_action=TurnAction(played_card=card_id),
            )

        new_table, captured = MatchResolver.execute(table, card_id, match)
        events = (SpecialEvent.QUAD_MATCH,) if match.match_type == MatchType.QUAD else ()

        return replace(
            state,
            players=players,
            table=table_from_mapping(new_table),
            phase=Phase.DRAW,
            pending_options=(),
            turn_action=TurnAction(
                played_card=card_id,
                hand_match_target=captured[1] if len(captured) > 1 else None,
                captured=tuple(captured),
                events=events,
            ),
            last_event=_match_event(match),
        )

    @staticmethod
    def select_match_target(state: GameState, target_id: int) -> GameState:
        """二选一: 从 pending_options 中选一张"""
        _require(state, "select a match target", Phase.HAND_MATCH_SELECT, Phase.DRAW_MATCH_SELECT)
        if target_id not in state.pending_options:
            raise InvalidTargetError(
                f"Target {target_id} is not one of {list(state.pending_options)}"
            )

        action = state.turn_action or TurnAction()
        from_hand = state.phase == Phase.HAND_MATCH_SELECT
        card_id = action.played_card if from_hand else action.drawn_card

        match = MatchResult(MatchType.CHOICE, state.pending_options)
        new_table, captured = MatchResolver.execute(state.table_dict(), card_id, match, target_id)
        captured_all = action.captured + tuple(captured)

        if from_hand:
            new_action = replace(action, hand_match_target=target_id, captured=captured_all)
            next_phase = Phase.DRAW
        else:
            new_action = replace(action, draw_match_target=target_id, captured=captured_all)
            next_phase = Phase.RESOLVE_CAPTURE

        return replace(
            state,
            table=table_from_mapping(new_table),
            phase=next_phase,
            pending_options=(),
            turn_action=new_action,
            last_event=SpecialEvent.SINGLE_MATCH,
        )

    @staticmethod
    def draw_card(state: GameState) -> GameState:
        """
        翻牌堆顶

        牌堆为空时直接进入 resolve-capture (drawn_card 为 None)，不是错误
        """
        _require(state, "draw", Phase.DRAW)
        action = state.turn_action or TurnAction()

        if not state.draw_pile:
            return replace(
                state,
                phase=Phase.RESOLVE_CAPTURE,
                turn_action=replace(action, drawn_card=None),
            )

        drawn = state.draw_pile[-1]
        draw_pile = state.draw_pile[:-1]
        table = state.table_dict()
        match = MatchResolver.resolve(table, drawn)

        if match.needs_choice:
            return replace(
                state,
                draw_pile=draw_pile,
                phase=Phase.DRAW_MATCH_SELECT,
                pending_options=match.targets,
                turn_action=replace(action, drawn_card=drawn),
            )

        new_table, captured = MatchResolver.execute(table, drawn, match)
        events = action.events
        if match.match_type == MatchType.QUAD:
            events = events + (SpecialEvent.QUAD_MATCH,)

        return replace(
            state,
            draw_pile=draw_pile,
            table=table_from_mapping(new_table),
            phase=Phase.RESOLVE_CAPTURE,
            pending_options=(),
            turn_action=replace(
                action,
                drawn_card=drawn,
                draw_match_target=captured[1] if len(captured) > 1 else None,
                captured=action.captured + tuple(captured),
                events=events,
            ),
            last_event=_match_event(match) if captured else state.last_event,
        )

    @staticmethod
    def resolve_capture(state: GameState) -> GameState:
        """
        结算本回合吃牌

        分类入账 → 扫台判定 → 抢皮 → 重新计分 → Go/Stop / 终局 / 下一家
        """
        _require(state, "resolve captures", Phase.RESOLVE_CAPTURE)
        action = state.turn_action or TurnAction()
        seat = state.turn_index
        captured = action.captured

        player = state.players[seat]
        sweep = bool(captured) and is_sweep(state.table_dict())
        player = replace(
            player,
            captured=player.captured.with_cards(captured),
            sweep_count=player.sweep_count + (1 if sweep else 0),
        )
        players = _with_player(state.players, seat, player)

        if SpecialEvent.QUAD_MATCH in action.events:
            match_type = MatchType.QUAD
        elif captured:
            match_type = MatchType.SINGLE
        else:
            match_type = MatchType.NO_MATCH
        events = detect_turn_events(match_type, sweep=sweep, bomb=False)
        # 手牌与翻牌各自全收时各计一次
        extra_quads = action.events.count(SpecialEvent.QUAD_MATCH) - 1
        if extra_quads > 0:
            events.extend([SpecialEvent.QUAD_MATCH] * extra_quads)

        players, _ = apply_penalty(players, seat, penalty_units(events))
        score = calculate_score(players[seat].captured, players[seat].go_count)
        last_event = headline_event(events)

        if score.base_score >= MIN_STOP_SCORE:
            logger.debug(f"Seat {seat} reached {score.base_score} points, go/stop decision")
            return replace(
                state,
                players=players,
                phase=Phase.GO_STOP_DECISION,
                decider=seat,
                turn_action=replace(action, events=tuple(events)),
                last_event=last_event,
                last_captured=captured,
            )

        state = replace(
            state,
            players=players,
            turn_action=None,
            last_event=last_event,
            last_captured=captured,
        )
        if not state.draw_pile:
            return GameManager.resolve_game_end(state)
        return GameManager.advance_turn(state)

    @staticmethod
    def declare_go(state: GameState) -> GameState:
        """
        Go: 决策者 go_count + 1 后继续

        炸弹之后的 Go (本回合尚未出普通牌) 回到同一家的 play-hand
        """
        _require(state, "declare go", Phase.GO_STOP_DECISION)
        seat = state.decider if state.decider is not None else state.turn_index
        player = state.players[seat]
        player = replace(player, go_count=player.go_count + 1)
        bomb_pending = state.turn_action is None or state.turn_action.played_card is None

        state = replace(
            state,
            players=_with_player(state.players, seat, player),
            decider=None,
            last_event=SpecialEvent.NONE,
        )

        if not state.draw_pile:
            return GameManager.resolve_game_end(state)

        if bomb_pending and player.hand:
            return replace(state, phase=Phase.PLAY_HAND, turn_action=None)

        return GameManager.advance_turn(replace(state, turn_action=None))

    @staticmethod
    def declare_stop(state: GameState) -> GameState:
        """Stop: 决策者获胜，按当前 Go 倍数计分"""
        _require(state, "declare stop", Phase.GO_STOP_DECISION)
        seat = state.decider if state.decider is not None else state.turn_index
        logger.debug(f"Seat {seat} declared stop")
        return replace(
            state,
            phase=Phase.GAME_OVER,
            winner=seat,
            result=_final_result(state.players, seat),
            decider=None,
            pending_options=(),
        )

    @staticmethod
    def declare_bomb(state: GameState, month: int) -> GameState:
        """
        炸弹: 手牌同月 3 张 + 桌面同月牌全部吃掉

        炸弹不消耗出牌义务，未达 Stop 分数时回到同一家的 play-hand
        """
        _require(state, "declare a bomb", Phase.PLAY_HAND)
        seat = state.turn_index
        player = state.players[seat]
        table = state.table_dict()

        if month not in MatchResolver.bomb_options(player.hand, table):
            raise InvalidTargetError(f"Month {month} is not a bomb option for seat {seat}")

        bomb_cards = tuple(c for c in player.hand if card_month(c) == month)
        table_cards = tuple(table.pop(month, ()))
        captured = bomb_cards + table_cards

        sweep = is_sweep(table)
        player = replace(
            player,
            hand=tuple(c for c in player.hand if card_month(c) != month),
            captured=player.captured.with_cards(captured),
            sweep_count=player.sweep_count + (1 if sweep else 0),
        )
        players = _with_player(state.players, seat, player)

        events = detect_turn_events(MatchType.NO_MATCH, sweep=sweep, bomb=True)
        players, _ = apply_penalty(players, seat, penalty_units(events))
        score = calculate_score(players[seat].captured, players[seat].go_count)
        logger.debug(f"Seat {seat} bombed month {month}, base score {score.base_score}")

        state = replace(
            state,
            players=players,
            table=table_from_mapping(table),
            turn_action=TurnAction(captured=captured, events=tuple(events)),
            last_event=SpecialEvent.BOMB,
            last_captured=captured,
        )

        if score.base_score >= MIN_STOP_SCORE:
            return replace(state, phase=Phase.GO_STOP_DECISION, decider=seat)

        if not players[seat].hand:
            return GameManager.advance_turn(replace(state, turn_action=None))

        return replace(state, phase=Phase.PLAY_HAND)

    @staticmethod
    def timeout(state: GameState, rng: Optional[random.Random] = None) -> GameState:
        """
        超时自动处理

        play-hand 随机出牌，二选一取第一个候选，Go/Stop 自动 Stop
        """
        if state.phase == Phase.PLAY_HAND:
            rng = rng or random.Random()
            return GameManager.play_hand_card(state, rng.choice(state.current_player.hand))
        if state.phase in (Phase.HAND_MATCH_SELECT, Phase.DRAW_MATCH_SELECT):
            return GameManager.select_match_target(state, state.pending_options[0])
        if state.phase == Phase.GO_STOP_DECISION:
            return GameManager.declare_stop(state)
        if state.phase == Phase.DRAW:
            return GameManager.draw_card(state)
        if state.phase == Phase.RESOLVE_CAPTURE:
            return GameManager.resolve_capture(state)
        raise IllegalTransitionError(
            "time out",
            [p.value for p in Phase if p not in (Phase.IDLE, Phase.GAME_OVER)],
            state.phase.value,
        )

    @staticmethod
    def advance_turn(state: GameState) -> GameState:
        """
        轮到下一家

        跳过手牌已空的座位 (炸弹可能提前打空)，全部为空则终局
        """
        next_seat = (state.turn_index + 1) % PLAYER_COUNT
        tries = 0
        while not state.players[next_seat].hand and tries < PLAYER_COUNT:
            next_seat = (next_seat + 1) % PLAYER_COUNT
            tries += 1

        if tries >= PLAYER_COUNT:
            return GameManager.resolve_game_end(state)

        return replace(
            state,
            phase=Phase.PLAY_HAND,
            turn_index=next_seat,
            turn_count=state.turn_count + 1,
            turn_action=None,
            pending_options=(),
            decider=None,
        )

    @staticmethod
    def resolve_game_end(state: GameState) -> GameState:
        """
        终局: 基础分最高且达到 Stop 分数的座位获胜

        同分时座位号小者优先，无人达标则流局
        """
        best_seat: Optional[int] = None
        best_score = -1
        for seat, player in enumerate(state.players):
            base = calculate_score(player.captured, player.go_count).base_score
            if base > best_score:
                best_score = base
                best_seat = seat

        finished = replace(
            state,
            phase=Phase.GAME_OVER,
            turn_action=None,
            pending_options=(),
            decider=None,
        )

        if best_seat is None or best_score < MIN_STOP_SCORE:
            logger.debug("Round ended in a draw")
            return replace(finished, winner=None, result=None)

        logger.debug(f"Round over, seat {best_seat} wins with base {best_score}")
        return replace(
            finished,
            winner=best_seat,
            result=_final_result(state.players, best_seat),
        )

    @staticmethod
    def settle(state: GameState) -> Dict[int, int]:
        """
        终局结算表

        Returns:
            输家座位 → 应付分数 (流局为空)
        """
        _require(state, "settle", Phase.GAME_OVER)
        if state.winner is None or state.result is None:
            return {}
        return {
            loser.id: settlement(
                state.result,
                [p for p in state.result.penalties if p.loser == loser.id],
            )
            for loser in state.players
            if loser.id != state.winner
        }

    @staticmethod
    def apply_action(
        state: GameState,
        action: Action,
        seat: Optional[int] = None,
        rng: Optional[random.Random] = None,
    ) -> GameState:
        """
        执行动作

        Args:
            state: 当前状态
            action: 动作
            seat: 提交动作的座位 (None 表示不校验归属)
            rng: 超时随机出牌使用的随机源

        Returns:
            新状态
        """
        if state.phase in (Phase.IDLE, Phase.GAME_OVER):
            raise IllegalTransitionError(
                action.action_type.value,
                [p.value for p in Phase if p not in (Phase.IDLE, Phase.GAME_OVER)],
                state.phase.value,
                message=f"Game is not in progress (phase '{state.phase.value}')",
            )
        if seat is not None and seat != state.acting_seat:
            raise NotYourTurnError(action.action_type.value, seat, state.acting_seat, state.phase.value)

        handler = _DISPATCH.get(action.action_type)
        if handler is None:
            raise TypeError(f"Unhandled action type: {action.action_type!r}")
        return handler(state, action, rng)


def _match_event(match: MatchResult) -> SpecialEvent:
    if match.match_type == MatchType.QUAD:
        return SpecialEvent.QUAD_MATCH
    if match.match_type == MatchType.SINGLE:
        return SpecialEvent.SINGLE_MATCH
    return SpecialEvent.NONE


def _final_result(players: Sequence[PlayerState], winner: int) -> ScoringResult:
    """赢家得分 + 各输家惩罚"""
    champion = players[winner]
    result = calculate_score(champion.captured, champion.go_count)
    penalties: List[Penalty] = []
    for loser in players:
        if loser.id != winner:
            penalties.extend(penalties_for(champion, loser))
    return replace(result, penalties=tuple(penalties))


def _require_payload(value: Optional[int], field_name: str, action: Action) -> int:
    if value is None:
        raise InvalidTargetError(f"Action '{action.action_type.value}' is missing '{field_name}'")
    return value


_DISPATCH: Dict[ActionType, Callable[[GameState, Action, Optional[random.Random]], GameState]] = {
    ActionType.PLAY_CARD: lambda s, a, rng: GameManager.play_hand_card(
        s, _require_payload(a.card_id, "card_id", a)),
    ActionType.SELECT_TARGET: lambda s, a, rng: GameManager.select_match_target(
        s, _require_payload(a.target_id, "target_id", a)),
    ActionType.GO: lambda s, a, rng: GameManager.declare_go(s),
    ActionType.STOP: lambda s, a, rng: GameManager.declare_stop(s),
    ActionType.BOMB: lambda s, a, rng: GameManager.declare_bomb(
        s, _require_payload(a.month, "month", a)),
    ActionType.TIMEOUT: lambda s, a, rng: GameManager.timeout(s, rng),
}
