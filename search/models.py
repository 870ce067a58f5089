"""Models for the search engine."""

import os
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Dict, Any, Optional, Tuple, Union


class SearchScope(Enum):
    """What a search root points at."""
    SINGLE_FILE = "single-file"
    SUBTREE = "subtree"


class SearchMode(Enum):
    """Available search modes."""
    TEXT = "text"
    NAME = "name"


class SessionState(Enum):
    """Lifecycle states of a result session."""
    IDLE = "idle"
    SCANNING = "scanning"
    READY = "ready"


@dataclass(frozen=True)
class SearchRoot:
    """Absolute path searched by one session, with its scope."""
    path: str
    scope: SearchScope

    @classmethod
    def from_path(cls, path: str) -> 'SearchRoot':
        """Resolve a path into a search root.

        A path that does not exist is treated as a subtree; walking it later
        simply yields nothing.
        """
        absolute = os.path.abspath(os.path.expanduser(path))
        scope = SearchScope.SINGLE_FILE if os.path.isfile(absolute) else SearchScope.SUBTREE
        return cls(path=absolute, scope=scope)

    @property
    def base_dir(self) -> str:
        """Directory that relative paths are computed against."""
        if self.scope == SearchScope.SINGLE_FILE:
            return os.path.dirname(self.path)
        return self.path


@dataclass(frozen=True)
class Candidate:
    """A filesystem entry discovered during traversal."""
    path: str
    name: str
    relative_path: str
    size: int
    modified: float
    is_directory: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            'path': self.path,
            'name': self.name,
            'relative_path': self.relative_path,
            'size': self.size,
            'modified': self.modified,
            'is_directory': self.is_directory
        }


@dataclass
class MatchResult:
    """One located occurrence of a pattern inside a file.

    ``context`` starts out holding only the trimmed matched line. The context
    loader replaces it once and flips ``context_loaded``; nothing else mutates
    a match after the scan that produced it.
    """
    file_path: str
    line: int     # 1-based
    column: int   # 1-based
    text: str
    context: List[str] = field(default_factory=list)
    context_loaded: bool = False
    match_id: int = 0

    def __post_init__(self):
        if not self.context:
            self.context = [self.text]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            'match_id': self.match_id,
            'file': self.file_path,
            'line': self.line,
            'column': self.column,
            'text': self.text,
            'context': list(self.context),
            'context_loaded': self.context_loaded
        }


@dataclass(frozen=True)
class ScoredCandidate:
    """A candidate ranked against a fuzzy query."""
    candidate: Candidate
    score: int
    matched_indices: Tuple[int, ...] = ()
    searchable_text: str = ""
    match_id: int = 0

    @property
    def name_indices(self) -> Tuple[int, ...]:
        """Matched indices that fall inside the display name."""
        limit = len(self.candidate.name)
        return tuple(i for i in self.matched_indices if i < limit)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        result = self.candidate.to_dict()
        result.update({
            'match_id': self.match_id,
            'score': self.score,
            'matched_indices': list(self.matched_indices),
            'name_indices': list(self.name_indices)
        })
        return result


ResultItem = Union[MatchResult, ScoredCandidate]


@dataclass
class ResultSet:
    """Results for one query string.

    A new query always produces a new ResultSet. The only state that moves
    afterwards is the ``displayed`` pagination cursor (and the lazily loaded
    context of the matches it owns).
    """
    query: str
    query_id: int
    mode: SearchMode
    items: List[ResultItem] = field(default_factory=list)
    truncated: bool = False
    limit: int = 0
    displayed: int = 0

    @property
    def total(self) -> int:
        return len(self.items)

    @property
    def has_more(self) -> bool:
        return self.displayed < len(self.items)

    @property
    def count_label(self) -> str:
        """Result count as shown to the operator, e.g. ``"1000+"`` when capped."""
        if self.truncated:
            return f"{self.limit}+"
        return str(len(self.items))

    def reset_cursor(self, initial: int) -> None:
        self.displayed = min(initial, len(self.items))

    def advance(self, increment: int) -> int:
        """Move the pagination cursor forward, clamped to the result count."""
        self.displayed = min(self.displayed + increment, len(self.items))
        return self.displayed

    def visible(self) -> List[ResultItem]:
        return self.items[:self.displayed]


@dataclass(frozen=True)
class ResultSnapshot:
    """Immutable view of a session's current results handed to callers."""
    session_id: str
    query: str
    query_id: int
    mode: SearchMode
    state: SessionState
    total: int
    displayed: int
    truncated: bool
    count_label: str
    has_more: bool
    items: Tuple[ResultItem, ...] = ()
    elapsed_ms: Optional[float] = None

    @classmethod
    def from_result_set(
        cls,
        session_id: str,
        result_set: ResultSet,
        state: SessionState,
        elapsed_ms: Optional[float] = None
    ) -> 'ResultSnapshot':
        """Capture the visible page of a result set."""
        return cls(
            session_id=session_id,
            query=result_set.query,
            query_id=result_set.query_id,
            mode=result_set.mode,
            state=state,
            total=result_set.total,
            displayed=result_set.displayed,
            truncated=result_set.truncated,
            count_label=result_set.count_label,
            has_more=result_set.has_more,
            items=tuple(result_set.visible()),
            elapsed_ms=elapsed_ms
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            'session_id': self.session_id,
            'query': self.query,
            'query_id': self.query_id,
            'mode': self.mode.value,
            'state': self.state.value,
            'total': self.total,
            'displayed': self.displayed,
            'truncated': self.truncated,
            'count_label': self.count_label,
            'has_more': self.has_more,
            'elapsed_ms': self.elapsed_ms,
            'results': [item.to_dict() for item in self.items]
        }
