"""
Server Layer - 权威端

Modules:
    config: 运行参数
    dto: 状态序列化与按座位快照
    orchestrator: AI 回合连续推进
    store: 带版本号的状态存储
    service: 乐观并发动作服务
"""
from .config import ServerConfig
from .dto import (
    SeatSnapshot,
    SnapshotBuilder,
    serialize_table,
    deserialize_table,
    serialize_state,
    hydrate_state,
)
from .orchestrator import TurnChainer
from .store import StoredMatch, InMemoryStateStore
from .service import ActionStatus, ActionResult, GameService

__all__ = [
    "ServerConfig",
    "SeatSnapshot",
    "SnapshotBuilder",
    "serialize_table",
    "deserialize_table",
    "serialize_state",
    "hydrate_state",
    "TurnChainer",
    "StoredMatch",
    "InMemoryStateStore",
    "ActionStatus",
    "ActionResult",
    "GameService",
]
