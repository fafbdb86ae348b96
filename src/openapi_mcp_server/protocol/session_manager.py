#!/usr/bin/env python3
# src/openapi_mcp_server/protocol/session_manager.py
"""
MCP session bookkeeping.

Sessions only record who initialized and when; tool calls are stateless.
"""

import logging
import time
import uuid
from typing import Any

logger = logging.getLogger(__name__)


class SessionManager:
    """Track initialized MCP sessions, evicting the least recently active at capacity."""

    def __init__(self, max_sessions: int = 1000, max_age: float = 3600):
        self.sessions: dict[str, dict[str, Any]] = {}
        self.max_sessions = max_sessions
        self.max_age = max_age

    def create_session(self, client_info: dict[str, Any], protocol_version: str) -> str:
        self.cleanup_expired()
        if len(self.sessions) >= self.max_sessions:
            oldest = min(self.sessions, key=lambda sid: self.sessions[sid]["last_activity"])
            del self.sessions[oldest]
            logger.debug(f"Evicted oldest session {oldest[:8]}... (max_sessions reached)")

        session_id = uuid.uuid4().hex
        now = time.time()
        self.sessions[session_id] = {
            "id": session_id,
            "client_info": client_info,
            "protocol_version": protocol_version,
            "created_at": now,
            "last_activity": now,
        }
        logger.debug(f"Created session {session_id[:8]}... for {client_info.get('name', 'unknown')}")
        return session_id

    def get_session(self, session_id: str) -> dict[str, Any] | None:
        return self.sessions.get(session_id)

    def update_activity(self, session_id: str) -> None:
        if session_id in self.sessions:
            self.sessions[session_id]["last_activity"] = time.time()

    def terminate(self, session_id: str) -> bool:
        """Drop a session; False if it was unknown."""
        return self.sessions.pop(session_id, None) is not None

    def cleanup_expired(self) -> None:
        now = time.time()
        expired = [sid for sid, session in self.sessions.items() if now - session["last_activity"] > self.max_age]
        for sid in expired:
            del self.sessions[sid]
            logger.debug(f"Cleaned up expired session {sid[:8]}...")
