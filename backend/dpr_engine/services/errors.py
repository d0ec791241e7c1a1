"""Exceptions raised by the feasibility and simulation engines."""


class DPREngineError(Exception):
    """Base class for every engine error."""


class ContentUnavailable(DPREngineError):
    """The DPR has no extracted content yet; it is not ready for scoring."""

    def __init__(self, dpr_id: str = ""):
        self.dpr_id = dpr_id
        super().__init__(f"DPR content not available for feature extraction: {dpr_id or '<unknown>'}")


class FeasibilityError(DPREngineError):
    """Scoring itself failed (as opposed to the document not being ready)."""


class SessionNotFound(DPREngineError):
    """Unknown, closed or expired simulation session id."""

    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(f"Simulation session not found: {session_id}")
