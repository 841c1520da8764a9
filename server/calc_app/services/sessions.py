from __future__ import annotations

import logging
import threading
from typing import Dict, Optional

from calc_app.services.engine import ExpressionEngine, NumberFormat

logger = logging.getLogger("calc_app.sessions")


class SessionEngineStore:
    """
    In-memory expression engines keyed by sessionId.

    Engines are created on first use and live until the session is cleared
    or the process exits.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._engines: Dict[str, ExpressionEngine] = {}

    def get(self, session_id: str) -> Optional[ExpressionEngine]:
        with self._lock:
            return self._engines.get(session_id)

    def get_or_create(self, session_id: str, number_format: NumberFormat | None = None) -> ExpressionEngine:
        with self._lock:
            engine = self._engines.get(session_id)
            if engine is None:
                engine = ExpressionEngine(number_format)
                self._engines[session_id] = engine
                logger.info("session.created", extra={"session_id": session_id})
            return engine

    def clear(self, session_id: str) -> bool:
        with self._lock:
            removed = self._engines.pop(session_id, None) is not None
        if removed:
            logger.info("session.reset", extra={"session_id": session_id})
        return removed


engine_store = SessionEngineStore()
