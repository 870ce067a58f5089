"""Search module: live text search and fuzzy file-name ranking."""

from .errors import SearchError, UnknownSessionError, UnknownMatchError
from .models import (
    SearchScope,
    SearchMode,
    SessionState,
    SearchRoot,
    Candidate,
    MatchResult,
    ScoredCandidate,
    ResultSet,
    ResultSnapshot
)
from .path_filter import ExclusionRule, ExclusionRuleSet, PathFilter, parse_ignore_file
from .tree_walker import TreeWalker
from .line_scanner import LineScanner, ScanOptions, CompiledPattern, FileScan
from .fuzzy_ranker import FuzzyRanker
from .context_loader import ContextLoader
from .result_session import ResultSession
from .search_service import SearchService, SearchServiceInterface

__all__ = [
    # Errors
    'SearchError',
    'UnknownSessionError',
    'UnknownMatchError',

    # Models
    'SearchScope',
    'SearchMode',
    'SessionState',
    'SearchRoot',
    'Candidate',
    'MatchResult',
    'ScoredCandidate',
    'ResultSet',
    'ResultSnapshot',

    # Traversal
    'ExclusionRule',
    'ExclusionRuleSet',
    'PathFilter',
    'parse_ignore_file',
    'TreeWalker',

    # Matching
    'LineScanner',
    'ScanOptions',
    'CompiledPattern',
    'FileScan',
    'FuzzyRanker',
    'ContextLoader',

    # Sessions
    'ResultSession',
    'SearchService',
    'SearchServiceInterface'
]
