#!/usr/bin/env python3
"""
对战脚本

Usage:
    python scripts/play.py --mode watch                 # 观看 AI 对战
    python scripts/play.py --mode play                  # 与两名 AI 进行三局制对战
    python scripts/play.py --mode play --difficulty hard --seed 7
"""
import argparse
import json
import logging
import random
import sys
from pathlib import Path
from typing import List, Optional
import time

# 添加项目根目录到路径
ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(ROOT))

from core.actions import Action, ActionType
from core.cards import cards_to_str, get_card
from core.exceptions import GameRuleError
from core.game import GameManager
from core.history import GameHistory, GameRecord
from core.matching import MatchResolver
from core.session import GameSession
from core.state import Difficulty, GameState, Phase
from agents import make_agent
from server.orchestrator import TurnChainer

logging.basicConfig(
    level=logging.INFO,
    format="%(message)s",
)
logger = logging.getLogger(__name__)

HUMAN_SEAT = 0


def parse_args():
    parser = argparse.ArgumentParser(description="Gostop Play")

    parser.add_argument(
        "--mode",
        type=str,
        default="watch",
        choices=["watch", "play"],
        help="Mode: watch AI or play against AI",
    )
    parser.add_argument(
        "--difficulty",
        type=str,
        default="normal",
        choices=[d.value for d in Difficulty],
        help="AI difficulty",
    )
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument("--delay", type=float, default=0.5, help="Delay between moves")
    parser.add_argument("--games", type=int, default=1, help="Number of games (watch mode)")
    parser.add_argument("--history", type=str, default=None, help="History JSON file (play mode)")

    return parser.parse_args()


def card_label(card_id: int) -> str:
    card = get_card(card_id)
    return f"[{card_id:2d}] {card.name}"


def print_game_state(state: GameState, viewer: Optional[int]):
    """打印游戏状态 (viewer 为 None 时显示所有手牌)"""
    print("\n" + "=" * 60)
    print(f"回合 {state.turn_count}  阶段: {state.phase.value}  牌堆: {len(state.draw_pile)}")
    print("-" * 60)

    for player in state.players:
        marker = ">" if player.id == state.acting_seat else " "
        captured = player.captured
        summary = (
            f"光 {len(captured.lights)} 动物 {len(captured.animals)} "
            f"带 {len(captured.ribbons)} 皮 {len(captured.junk)}"
        )
        if viewer is None or player.id == viewer:
            print(f"{marker}[{player.name}] 手牌: {cards_to_str(player.hand)}")
        else:
            print(f"{marker} {player.name}  手牌数: {len(player.hand)}")
        print(f"    已吃: {summary}  Go: {player.go_count}")

    print("-" * 60)
    for month, cards in state.table:
        print(f"  {month:2d} 月: {', '.join(card_label(c) for c in cards)}")
    if state.last_event.value != "none":
        print(f"\n事件: {state.last_event.value}")
    print("=" * 60)


def print_result(state: GameState):
    print("\n" + "=" * 60)
    if state.winner is None:
        print("流局 (无人达到 3 分)")
    else:
        result = state.result
        print(f"胜者: {state.players[state.winner].name}  得分: {result.final_score}")
        if result.combos:
            print(f"牌型: {', '.join(result.combo_names)}")
        for seat, amount in GameManager.settle(state).items():
            print(f"  {state.players[seat].name} 支付 {amount}")
    print("=" * 60)


def watch_game(args, rng: random.Random):
    """观看 AI 对战"""
    difficulty = Difficulty(args.difficulty)
    agents = [make_agent(difficulty, rng, name=f"AI_{i}") for i in range(3)]

    for game_idx in range(args.games):
        print(f"\n{'='*60}")
        print(f"Game {game_idx + 1}/{args.games}")
        print("=" * 60)

        state = GameManager.start(
            GameState.create(difficulty), rng,
            names=[a.name for a in agents], ai_seats=(True, True, True),
        )

        while not state.is_finished:
            if state.phase == Phase.DRAW:
                state = GameManager.draw_card(state)
                continue
            if state.phase == Phase.RESOLVE_CAPTURE:
                state = GameManager.resolve_capture(state)
                continue

            print_game_state(state, viewer=None)
            seat = state.acting_seat
            action = agents[seat].act(state, seat)
            print(f"\n{agents[seat].name}: {action_to_str(action)}")
            state = GameManager.apply_action(state, action, seat, rng)
            time.sleep(args.delay)

        print_result(state)


def action_to_str(action: Action) -> str:
    """动作转字符串"""
    if action.action_type == ActionType.PLAY_CARD:
        return f"出牌 {card_label(action.card_id)}"
    if action.action_type == ActionType.SELECT_TARGET:
        return f"选择 {card_label(action.target_id)}"
    if action.action_type == ActionType.BOMB:
        return f"炸弹 {action.month} 月"
    return action.action_type.value


def prompt_choice(prompt: str, options: List[int]) -> Optional[int]:
    """读取输入，'q' 返回 None"""
    while True:
        choice = input(prompt).strip()
        if choice.lower() == 'q':
            return None
        try:
            value = int(choice)
        except ValueError:
            print("请输入数字")
            continue
        if value in options:
            return value
        print("无效选择，请重试")


def human_action(state: GameState) -> Optional[Action]:
    """人类座位的输入"""
    player = state.players[HUMAN_SEAT]

    if state.phase == Phase.GO_STOP_DECISION:
        answer = input("\nGo 还是 Stop? [g/s]: ").strip().lower()
        if answer == 'q':
            return None
        return Action.go() if answer.startswith("g") else Action.stop()

    if state.phase in (Phase.HAND_MATCH_SELECT, Phase.DRAW_MATCH_SELECT):
        print("\n可选目标:")
        for cid in state.pending_options:
            print(f"  {card_label(cid)}")
        target = prompt_choice("请选择目标编号 (或输入 'q' 退出): ", list(state.pending_options))
        return None if target is None else Action.select(target)

    bombs = MatchResolver.bomb_options(player.hand, state.table_dict())
    print("\n手牌:")
    for cid in player.hand:
        print(f"  {card_label(cid)}")
    if bombs:
        print(f"可炸弹月份: {bombs} (输入 100+月份 炸弹)")
    options = list(player.hand) + [100 + m for m in bombs]
    choice = prompt_choice("\n请选择出牌编号 (或输入 'q' 退出): ", options)
    if choice is None:
        return None
    if choice >= 100:
        return Action.bomb(choice - 100)
    return Action.play(choice)


def play_game(args, rng: random.Random):
    """三局制对战"""
    difficulty = Difficulty(args.difficulty)
    session = GameSession(difficulty, names=("你", "AI 1", "AI 2"))
    chainer = TurnChainer(rng)

    history_path = Path(args.history) if args.history else None
    history = GameHistory()
    if history_path and history_path.exists():
        history = GameHistory.from_list(json.loads(history_path.read_text()))

    while not session.is_over:
        print(f"\n{'='*60}")
        print(f"Round {session.current_round + 1}/{session.max_rounds}")
        print("=" * 60)

        state = chainer.advance(session.new_round(rng))

        while not state.is_finished:
            print_game_state(state, viewer=HUMAN_SEAT)
            action = human_action(state)
            if action is None:
                print("退出游戏")
                return
            try:
                state = GameManager.apply_action(state, action, HUMAN_SEAT, rng)
            except GameRuleError as e:
                print(f"无效动作: {e}")
                continue
            state = chainer.advance(state)

        print_result(state)
        session.record_round(state)
        history.add(GameRecord.from_state(state, HUMAN_SEAT))

    print(f"\n{session}")

    stats = history.stats()
    print(f"战绩: {stats.wins} 胜 / {stats.losses} 负 / {stats.draws} 流局  胜率 {stats.win_rate}%")
    if history_path:
        history_path.write_text(json.dumps(history.to_list(), ensure_ascii=False, indent=2))


def main():
    args = parse_args()
    rng = random.Random(args.seed)

    print("=" * 60)
    print("Gostop 高斯通")
    print("=" * 60)

    if args.mode == "watch":
        watch_game(args, rng)
    elif args.mode == "play":
        play_game(args, rng)


if __name__ == "__main__":
    main()
