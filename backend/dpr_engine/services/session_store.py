"""
session_store.py — in-memory registry of what-if simulation sessions

Lifecycle:
  CREATED  (history length 1)  --run_simulation-->  ACTIVE (history > 1)
  CREATED / ACTIVE  --close / idle expiry-->  CLOSED (removed, never resurrected)

The store lock guards the session map only; each session carries its own
lock so simulations on different sessions never wait on each other.
"""

import logging
import threading
import uuid
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, List, Optional

from dpr_engine.models.document import DPRDocument
from dpr_engine.models.simulation import SimulationScenario, SimulationSession
from dpr_engine.services.errors import SessionNotFound
from dpr_engine.services.feature_extractor import FeatureExtractor
from dpr_engine.services.probability_model import ProbabilityModel
from dpr_engine.services.risk_engine import RiskIdentifier
from dpr_engine.services.scenario_scoring import BASELINE_SCENARIO_NAME, score_scenario

logger = logging.getLogger("dpr-sessions")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SessionStore:
    """
    Holds one SimulationSession per exploration.

    ``idle_ttl_seconds``: sessions untouched for longer than this are evicted
    on the next store access. ``None`` (default) keeps sessions until closed.
    """

    def __init__(
        self,
        extractor: Optional[FeatureExtractor] = None,
        model: Optional[ProbabilityModel] = None,
        risk_identifier: Optional[RiskIdentifier] = None,
        idle_ttl_seconds: Optional[float] = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        if idle_ttl_seconds is not None and idle_ttl_seconds <= 0:
            raise ValueError(f"idle_ttl_seconds must be positive, got {idle_ttl_seconds}")
        self.extractor = extractor or FeatureExtractor()
        self.model = model or ProbabilityModel()
        self.risk_identifier = risk_identifier or RiskIdentifier()
        self.idle_ttl_seconds = idle_ttl_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._sessions: Dict[str, SimulationSession] = {}

    # -----------------------------------------------------------------------
    # Create / lookup / close
    # -----------------------------------------------------------------------

    def create_session(self, document: DPRDocument) -> SimulationSession:
        """
        Build and register a baseline session for ``document``.

        Raises ContentUnavailable (from the extractor) when the document has
        no extracted content.
        """
        features = self.extractor.extract(document)
        risks = self.risk_identifier.identify(features)
        baseline = score_scenario(
            self.model,
            BASELINE_SCENARIO_NAME,
            {},
            features,
            risks,
            recommendations=["This is your current project plan"],
        )

        now = self._clock()
        session = SimulationSession(
            session_id=f"sim_{uuid.uuid4().hex}",
            dpr_id=document.id,
            baseline_features=features,
            baseline_risk_factors=tuple(risks),
            current_scenario=baseline,
            scenario_history=[baseline],
            created_at=now,
            last_updated=now,
        )
        with self._lock:
            self._evict_idle_locked()
            self._sessions[session.session_id] = session

        logger.info(
            f"Session {session.session_id} created for DPR {document.id} "
            f"(baseline {baseline.completion_probability:.2f}%, {len(risks)} risks)",
            extra={"session_id": session.session_id, "dpr_id": document.id},
        )
        return session

    def get(self, session_id: str) -> Optional[SimulationSession]:
        with self._lock:
            self._evict_idle_locked()
            return self._sessions.get(session_id)

    def require(self, session_id: str) -> SimulationSession:
        """Like ``get`` but raises SessionNotFound for unknown ids."""
        session = self.get(session_id)
        if session is None:
            raise SessionNotFound(session_id)
        return session

    def is_open(self, session_id: str) -> bool:
        return self.get(session_id) is not None

    def close(self, session_id: str) -> bool:
        """Remove a session. True if it existed."""
        with self._lock:
            removed = self._sessions.pop(session_id, None) is not None
        if removed:
            logger.info(f"Session {session_id} closed", extra={"session_id": session_id})
        return removed

    def active_count(self) -> int:
        with self._lock:
            self._evict_idle_locked()
            return len(self._sessions)

    # -----------------------------------------------------------------------
    # Mutation (caller holds session.lock)
    # -----------------------------------------------------------------------

    def record_scenario(self, session: SimulationSession, scenario: SimulationScenario) -> None:
        """Append ``scenario`` to the history and make it current."""
        session.scenario_history.append(scenario)
        session.current_scenario = scenario
        session.last_updated = max(session.last_updated, self._clock())

    # -----------------------------------------------------------------------
    # Idle expiry
    # -----------------------------------------------------------------------

    def evict_idle(self) -> List[str]:
        """Drop sessions idle past the TTL; returns the evicted ids."""
        with self._lock:
            return self._evict_idle_locked()

    def _evict_idle_locked(self) -> List[str]:
        if self.idle_ttl_seconds is None:
            return []
        cutoff = self._clock() - timedelta(seconds=self.idle_ttl_seconds)
        expired = [sid for sid, s in self._sessions.items() if s.last_updated < cutoff]
        for sid in expired:
            del self._sessions[sid]
            logger.info(f"Session {sid} expired after {self.idle_ttl_seconds:g}s idle", extra={"session_id": sid})
        return expired
