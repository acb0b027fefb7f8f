"""
AI 回合连续推进

人类动作之后，连续执行 AI 座位的决策，直到轮到人类输入或终局
"""
from typing import Dict, Optional
import logging
import random

from agents.policy import Agent, make_agent
from core.exceptions import OrchestratorRunawayError
from core.game import GameManager
from core.state import GameState, Phase

logger = logging.getLogger(__name__)

MAX_CHAIN_ITERATIONS = 200


class TurnChainer:
    """
    回合编排器

    - draw / resolve-capture 不需要输入，所有座位都自动推进
    - AI 座位按难度策略决策
    - 人类座位在需要输入的阶段停下
    """

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        max_iterations: int = MAX_CHAIN_ITERATIONS,
    ):
        self.rng = rng or random.Random()
        self.max_iterations = max_iterations
        self._agents: Dict[int, Agent] = {}

    def agent_for(self, state: GameState, seat: int) -> Agent:
        agent = self._agents.get(seat)
        if agent is None or agent.difficulty != state.difficulty:
            agent = make_agent(state.difficulty, self.rng)
            self._agents[seat] = agent
        return agent

    def step(self, state: GameState) -> Optional[GameState]:
        """
        推进一步

        Returns:
            新状态，需要等待人类输入时返回 None
        """
        if state.phase == Phase.DRAW:
            return GameManager.draw_card(state)
        if state.phase == Phase.RESOLVE_CAPTURE:
            return GameManager.resolve_capture(state)

        seat = state.acting_seat
        if seat is None or not state.players[seat].is_ai:
            return None

        action = self.agent_for(state, seat).act(state, seat)
        logger.debug(f"AI seat {seat} -> {action.action_type.value}")
        return GameManager.apply_action(state, action, seat, self.rng)

    def advance(self, state: GameState) -> GameState:
        """
        连续推进直到人类输入或终局

        Raises:
            OrchestratorRunawayError: 超过迭代上限 (状态机缺陷)
        """
        for _ in range(self.max_iterations):
            if state.phase in (Phase.IDLE, Phase.GAME_OVER):
                return state
            next_state = self.step(state)
            if next_state is None:
                return state
            state = next_state

        if state.phase in (Phase.IDLE, Phase.GAME_OVER):
            return state

        logger.error(
            f"Game {state.game_id} exceeded {self.max_iterations} chained steps "
            f"(phase '{state.phase.value}', turn {state.turn_count})"
        )
        raise OrchestratorRunawayError(
            f"Turn chaining exceeded {self.max_iterations} iterations in game {state.game_id}"
        )
