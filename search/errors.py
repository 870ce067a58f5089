"""Exceptions raised by the search service for misuse of its contract."""


class SearchError(Exception):
    """Base class for search service errors."""


class UnknownSessionError(SearchError):
    """Raised when a session handle does not refer to an open session."""

    def __init__(self, session_id: str):
        super().__init__(f"Unknown search session: {session_id}")
        self.session_id = session_id


class UnknownMatchError(SearchError):
    """Raised when a match id is outside the current result set."""

    def __init__(self, match_id: int, query_id: int):
        super().__init__(f"No result {match_id} in result set {query_id}")
        self.match_id = match_id
        self.query_id = query_id
