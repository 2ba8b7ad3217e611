"""ActiveSessionStore - 带空闲过期的活跃会话映射

把本地会话 ID 映射到远端 Agent 会话 ID：
- 由组合根创建并注入，不是模块级单例
- 时钟可注入，测试可以直接推进时间
- 过期在读取时惰性判定，cleanup_expired() 批量清理
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from uuid import uuid4

logger = logging.getLogger(__name__)

DEFAULT_SESSION_TTL = timedelta(minutes=30)


@dataclass
class ActiveSession:
    id: str
    remote_session_id: str
    created_at: datetime
    last_activity: datetime


class ActiveSessionStore:
    def __init__(
        self,
        *,
        ttl: timedelta = DEFAULT_SESSION_TTL,
        clock: Callable[[], datetime] = lambda: datetime.now(UTC),
    ) -> None:
        self._ttl = ttl
        self._clock = clock
        self._sessions: dict[str, ActiveSession] = {}

    def create(self, remote_session_id: str) -> ActiveSession:
        now = self._clock()
        session = ActiveSession(
            id=uuid4().hex,
            remote_session_id=remote_session_id,
            created_at=now,
            last_activity=now,
        )
        self._sessions[session.id] = session
        logger.info(
            "active_session_created",
            extra={"session_id": session.id, "remote_session_id": remote_session_id},
        )
        return session

    def get(self, session_id: str) -> ActiveSession | None:
        """读取会话并刷新活跃时间；已过期的会话被移除并返回 None"""
        session = self._sessions.get(session_id)
        if session is None:
            return None

        now = self._clock()
        if self._is_expired(session, now):
            del self._sessions[session_id]
            logger.info("active_session_expired", extra={"session_id": session_id})
            return None

        session.last_activity = now
        return session

    def switch(self, session_id: str, remote_session_id: str) -> ActiveSession:
        """把会话切换到新的远端会话；本地会话不存在或已过期时新建"""
        session = self.get(session_id)
        if session is None:
            return self.create(remote_session_id)
        session.remote_session_id = remote_session_id
        return session

    def delete(self, session_id: str) -> None:
        self._sessions.pop(session_id, None)

    def cleanup_expired(self) -> int:
        now = self._clock()
        expired = [sid for sid, session in self._sessions.items() if self._is_expired(session, now)]
        for sid in expired:
            del self._sessions[sid]
        if expired:
            logger.info("active_sessions_cleaned", extra={"count": len(expired)})
        return len(expired)

    def active_count(self) -> int:
        return len(self._sessions)

    def _is_expired(self, session: ActiveSession, now: datetime) -> bool:
        return now - session.last_activity > self._ttl
