"""Result session: one root, successive queries, paginated results."""

import asyncio
import logging
import os
import time
from dataclasses import replace
from typing import List, Optional, Dict, Any, Union, Tuple

from config.search_options import SearchOptions
from config.search_settings import SearchSettings

from .context_loader import ContextLoader
from .errors import UnknownMatchError
from .fuzzy_ranker import FuzzyRanker
from .line_scanner import LineScanner, ScanOptions
from .models import (
    Candidate,
    MatchResult,
    ResultItem,
    ResultSet,
    ResultSnapshot,
    ScoredCandidate,
    SearchMode,
    SearchRoot,
    SearchScope,
    SessionState
)
from .path_filter import ExclusionRuleSet, PathFilter
from .tree_walker import TreeWalker

logger = logging.getLogger(__name__)

OptionsArg = Union[SearchOptions, Dict[str, Any], None]


class ResultSession:
    """
    Owns the current query for one search root and its paginated results.

    Every query is tagged with a generation number when it starts. When a
    query finishes after a newer one has started, its results are dropped
    rather than published, so callers only ever observe the latest query.
    File reads already in flight are allowed to complete; remaining batches
    of a superseded scan are not started.

    In name mode the root is enumerated once, on the first query, and the
    resulting candidate list is re-ranked for every later query.
    """

    def __init__(
        self,
        session_id: str,
        root: SearchRoot,
        settings: Optional[SearchSettings] = None,
        walker: Optional[TreeWalker] = None,
        scanner: Optional[LineScanner] = None,
        ranker: Optional[FuzzyRanker] = None,
        context_loader: Optional[ContextLoader] = None
    ):
        """
        Initialize a session.

        Args:
            session_id: Handle callers use to address this session
            root: Search root, fixed for the session's lifetime
            settings: Effective settings (defaults when omitted)
            walker: Tree walker override, built from settings when omitted
            scanner: Line scanner override
            ranker: Fuzzy ranker override
            context_loader: Context loader override
        """
        self.session_id = session_id
        self.root = root
        self.settings = settings or SearchSettings()
        self.walker = walker or self._build_walker()
        self.scanner = scanner or LineScanner(per_file_limit=self.settings.per_file_match_limit)
        self.ranker = ranker or FuzzyRanker()
        self.context_loader = context_loader or ContextLoader()

        self.state = SessionState.IDLE
        self.result_set = ResultSet(query='', query_id=0, mode=SearchMode.TEXT)
        self.options = self.settings.to_options()
        self.elapsed_ms: Optional[float] = None

        self._generation = 0
        self._name_candidates: Optional[Tuple[Candidate, ...]] = None
        self._enumeration_lock = asyncio.Lock()
        self._previews: Dict[int, List[str]] = {}

    def _build_walker(self) -> TreeWalker:
        rules = ExclusionRuleSet.load(
            self.root.base_dir,
            self.settings.exclude_patterns,
            ignore_file_name=self.settings.ignore_file_name,
            respect_ignore_file=self.settings.respect_ignore_file
        )
        path_filter = PathFilter(rules, include_hidden=self.settings.include_hidden)
        return TreeWalker(
            path_filter,
            max_depth=self.settings.max_depth,
            follow_symlinks=self.settings.follow_symlinks,
            include_directories=self.settings.include_directories
        )

    @property
    def generation(self) -> int:
        return self._generation

    def _is_current(self, query_id: int) -> bool:
        return query_id == self._generation

    async def search(self, query: str, mode: SearchMode = SearchMode.TEXT,
                     options: OptionsArg = None) -> Optional[ResultSnapshot]:
        """
        Run a query, replacing the current result set when it completes.

        Args:
            query: Pattern (text mode) or fuzzy query (name mode)
            mode: Text search over file contents, or name ranking
            options: Per-query overrides of the session settings

        Returns:
            Snapshot of the new results, or None if a newer query started
            before this one finished

        Raises:
            ValueError: If an option override is out of range; the current
                results and any running query are left untouched
        """
        if isinstance(options, SearchOptions):
            effective = options
        else:
            effective = self.settings.to_options().merged(options)

        self._generation += 1
        query_id = self._generation
        self.state = SessionState.SCANNING
        started = time.perf_counter()

        if mode == SearchMode.NAME:
            result_set = await self._search_names(query, query_id, effective)
        else:
            result_set = await self._search_text(query, query_id, effective)

        if not self._is_current(query_id):
            logger.debug(f"Discarding stale results for query {query!r} (generation {query_id})")
            return None

        result_set.items = self._assign_match_ids(result_set.items)
        result_set.reset_cursor(self.settings.initial_batch_size)

        self.result_set = result_set
        self.options = effective
        self._previews = {}
        self.elapsed_ms = round((time.perf_counter() - started) * 1000, 2)
        self.state = SessionState.READY

        logger.debug(
            f"Query {query!r} ({mode.value}) produced {result_set.count_label} results "
            f"in {self.elapsed_ms}ms"
        )
        return self.snapshot()

    async def _search_text(self, query: str, query_id: int, options: SearchOptions) -> ResultSet:
        result_set = ResultSet(query=query, query_id=query_id, mode=SearchMode.TEXT,
                               limit=options.max_results)
        if not query.strip():
            return result_set

        candidates = await self.walker.walk(self.root)
        files = [c for c in candidates if self._is_scannable(c)]
        compiled = self.scanner.compile(
            query,
            ScanOptions(case_sensitive=options.case_sensitive, whole_word=options.whole_word)
        )

        cap = options.max_results
        batch_size = self.settings.scan_batch_size
        matches: List[MatchResult] = []

        for offset in range(0, len(files), batch_size):
            if not self._is_current(query_id):
                # Superseded; the result is discarded by the caller anyway
                return result_set

            batch = files[offset:offset + batch_size]
            scans = await asyncio.gather(*(
                self.scanner.scan_file(c.path, compiled, options.max_file_size) for c in batch
            ))
            for scan in scans:
                matches.extend(scan.matches)
                if self.root.scope == SearchScope.SINGLE_FILE and scan.capped:
                    result_set.truncated = True
                    result_set.limit = min(self.scanner.per_file_limit, cap)

            if len(matches) >= cap:
                files_remaining = offset + batch_size < len(files)
                if len(matches) > cap or files_remaining:
                    result_set.truncated = True
                    result_set.limit = cap
                matches = matches[:cap]
                break

        result_set.items = list(matches)
        return result_set

    def _is_scannable(self, candidate: Candidate) -> bool:
        if candidate.is_directory:
            return False
        extensions = self.settings.text_extensions
        if extensions is None or self.root.scope == SearchScope.SINGLE_FILE:
            return True
        return os.path.splitext(candidate.name)[1].lower() in extensions

    async def _search_names(self, query: str, query_id: int, options: SearchOptions) -> ResultSet:
        candidates = await self.candidates()
        if not self._is_current(query_id):
            return ResultSet(query=query, query_id=query_id, mode=SearchMode.NAME)

        ranked = await asyncio.to_thread(self.ranker.rank, candidates, query)
        cap = options.max_results
        return ResultSet(
            query=query,
            query_id=query_id,
            mode=SearchMode.NAME,
            items=list(ranked[:cap]),
            truncated=len(ranked) > cap,
            limit=cap
        )

    async def candidates(self) -> Tuple[Candidate, ...]:
        """Full enumeration of the root, computed once and then reused."""
        async with self._enumeration_lock:
            if self._name_candidates is None:
                self._name_candidates = tuple(await self.walker.walk(self.root))
                logger.info(f"Enumerated {len(self._name_candidates)} files under {self.root.path}")
            return self._name_candidates

    def refresh_candidates(self) -> None:
        """Forget the cached enumeration so the next name query walks again."""
        self._name_candidates = None

    @staticmethod
    def _assign_match_ids(items: List[ResultItem]) -> List[ResultItem]:
        numbered: List[ResultItem] = []
        for index, item in enumerate(items):
            if isinstance(item, ScoredCandidate):
                item = replace(item, match_id=index)
            else:
                item.match_id = index
            numbered.append(item)
        return numbered

    def load_more(self) -> ResultSnapshot:
        """Advance the pagination cursor without rescanning."""
        self.result_set.advance(self.settings.load_more_batch_size)
        return self.snapshot()

    async def load_context(self, match_id: int, context_size: Optional[int] = None) -> List[str]:
        """
        Surrounding lines for one result of the current result set.

        Text matches are loaded once and cached on the match; name results
        get a preview of the start of the file.

        Args:
            match_id: Index of the result within the current result set
            context_size: Lines per side; the query's option when omitted

        Returns:
            Context lines, or a single placeholder line if the file is gone

        Raises:
            UnknownMatchError: If match_id is not in the current result set
        """
        result_set = self.result_set
        if match_id < 0 or match_id >= result_set.total:
            raise UnknownMatchError(match_id, result_set.query_id)

        size = self.options.context_size if context_size is None else context_size
        item = result_set.items[match_id]

        if isinstance(item, MatchResult):
            return await self.context_loader.materialize(item, size)

        if item.candidate.is_directory:
            return []
        if match_id not in self._previews:
            self._previews[match_id] = await self.context_loader.load_preview_async(
                item.candidate.path, size
            )
        return list(self._previews[match_id])

    def snapshot(self) -> ResultSnapshot:
        """Snapshot of the current result set and pagination state."""
        return ResultSnapshot.from_result_set(
            self.session_id, self.result_set, self.state, self.elapsed_ms
        )

    def close(self) -> None:
        """Release cached state; in-flight queries complete as stale."""
        self._generation += 1
        self._name_candidates = None
        self._previews = {}
        self.result_set = ResultSet(query='', query_id=0, mode=SearchMode.TEXT)
        self.state = SessionState.IDLE
