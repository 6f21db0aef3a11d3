"""セッション単位の実行中フラグ。"""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from omitt.models.errors import RequestInProgressError


class InFlightGuard:
    """要件の分析・検証を、セッションごとに同時に1つだけ実行させる。

    実行中に次の要求が来た場合は待たせずに拒否する。
    待機するタスクがいないため、ロックは解放と同時に破棄する。
    """

    def __init__(self) -> None:
        self._session_locks: dict[str, asyncio.Lock] = {}

    def is_busy(self, session_id: str) -> bool:
        lock = self._session_locks.get(session_id)
        return lock is not None and lock.locked()

    @asynccontextmanager
    async def hold(self, session_id: str) -> AsyncIterator[None]:
        """実行中フラグを立てる。

        Raises:
            RequestInProgressError: 同一セッションで既に実行中の場合。
        """
        if self.is_busy(session_id):
            raise RequestInProgressError(session_id)
        lock = self._session_locks.setdefault(session_id, asyncio.Lock())
        try:
            async with lock:
                yield
        finally:
            self._session_locks.pop(session_id, None)
