"""
Agents Layer - AI 决策策略

Modules:
    policy: 三个难度的智能体
"""
from .policy import (
    Agent,
    EasyAgent,
    NormalAgent,
    HardAgent,
    make_agent,
)

__all__ = [
    "Agent",
    "EasyAgent",
    "NormalAgent",
    "HardAgent",
    "make_agent",
]
