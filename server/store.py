"""
带版本号的状态存储

每局保存序列化状态 + 版本号 + 回合截止时间 + 更新时间
更新只能以 compare-and-set 方式按版本号进行
"""
from dataclasses import dataclass, field
from typing import Any, Dict, Optional
import threading
import time


def now_ms() -> int:
    return int(time.time() * 1000)


@dataclass(frozen=True)
class StoredMatch:
    """
    存储记录

    Attributes:
        state: serialize_state 的结果
        version: 版本号 (每次写入 +1)
        turn_deadline: 绝对截止时间 (毫秒时间戳)，无限时为 None
        updated_at: 更新时间 (毫秒时间戳)
    """
    state: Dict[str, Any]
    version: int = 0
    turn_deadline: Optional[int] = None
    updated_at: int = field(default_factory=now_ms)


class InMemoryStateStore:
    """
    进程内存储

    compare_and_set 在锁内比较版本号，保证同一版本只有一次写入成功
    """

    def __init__(self):
        self._records: Dict[str, StoredMatch] = {}
        self._lock = threading.Lock()

    def create(self, match_id: str, record: StoredMatch):
        with self._lock:
            if match_id in self._records:
                raise KeyError(f"Match {match_id} already exists")
            self._records[match_id] = record

    def load(self, match_id: str) -> StoredMatch:
        with self._lock:
            try:
                return self._records[match_id]
            except KeyError:
                raise KeyError(f"Unknown match: {match_id}") from None

    def compare_and_set(self, match_id: str, expected_version: int, record: StoredMatch) -> bool:
        """
        条件写入

        Returns:
            版本号匹配并写入成功返回 True，否则 False (不修改记录)
        """
        with self._lock:
            current = self._records.get(match_id)
            if current is None or current.version != expected_version:
                return False
            self._records[match_id] = record
            return True

    def __contains__(self, match_id: str) -> bool:
        with self._lock:
            return match_id in self._records

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)
