"""Search service: session handles over the search engine."""

from abc import ABC, abstractmethod
from collections import OrderedDict
from typing import List, Dict, Any, Optional, Union
import logging
import uuid

from config.config_service import ConfigurationService
from config.search_options import SearchOptions
from config.search_settings import SearchSettings

from .errors import SearchError, UnknownSessionError
from .models import ResultSnapshot, SearchMode, SearchRoot
from .result_session import ResultSession

logger = logging.getLogger(__name__)

DEFAULT_MAX_SESSIONS = 32


class SearchServiceInterface(ABC):
    """Interface for search services."""

    @abstractmethod
    async def search(
        self,
        root: Optional[str],
        query: str,
        mode: Union[SearchMode, str] = SearchMode.TEXT,
        options: Union[SearchOptions, Dict[str, Any], None] = None,
        session_id: Optional[str] = None
    ) -> Optional[ResultSnapshot]:
        """
        Run a query against a root.

        Args:
            root: Directory or file to search; ignored when session_id is given
            query: Pattern (text mode) or fuzzy query (name mode)
            mode: ``text`` or ``name``
            options: Per-query option overrides
            session_id: Existing session to reuse

        Returns:
            Snapshot of the results, or None if superseded by a newer query
        """
        pass

    @abstractmethod
    def load_more(self, session_id: str) -> ResultSnapshot:
        """
        Extend the visible page of a session's results.

        Args:
            session_id: Session handle

        Returns:
            Snapshot with the pagination cursor advanced
        """
        pass

    @abstractmethod
    async def load_context(
        self,
        session_id: str,
        match_id: int,
        context_size: Optional[int] = None
    ) -> List[str]:
        """
        Load the lines surrounding one result.

        Args:
            session_id: Session handle
            match_id: Result index within the session's current results
            context_size: Lines wanted on each side

        Returns:
            Context lines
        """
        pass

    @abstractmethod
    def close_session(self, session_id: str) -> bool:
        """
        Close a session and release its state.

        Args:
            session_id: Session handle

        Returns:
            True if a session was closed
        """
        pass


class SearchService(SearchServiceInterface):
    """Keeps independent result sessions addressed by explicit handles.

    At most ``max_sessions`` sessions are kept; opening one more closes the
    least recently used.
    """

    def __init__(
        self,
        settings: Optional[SearchSettings] = None,
        config_service: Optional[ConfigurationService] = None,
        max_sessions: int = DEFAULT_MAX_SESSIONS
    ):
        """
        Initialize search service.

        Args:
            settings: Settings for every session; when omitted each session
                reads the settings file under its own root
            config_service: Service providing the process-wide defaults
            max_sessions: Number of open sessions kept before the least
                recently used one is closed
        """
        self.config_service = config_service or ConfigurationService()
        self.settings = settings
        self.max_sessions = max_sessions
        self.sessions: 'OrderedDict[str, ResultSession]' = OrderedDict()

    def get_settings(self) -> SearchSettings:
        """Settings applied when a session has no settings of its own."""
        if self.settings is not None:
            return self.settings
        return self.config_service.get_settings()

    def _settings_for(self, root: SearchRoot) -> SearchSettings:
        if self.settings is not None:
            return self.settings
        try:
            return ConfigurationService(root.base_dir).get_settings()
        except ValueError as e:
            logger.warning(f"Ignoring settings under {root.base_dir}: {e}")
            return self.get_settings()

    def open_session(self, root: str) -> str:
        """
        Open a session for a search root.

        Args:
            root: Directory or file path

        Returns:
            New session handle
        """
        search_root = SearchRoot.from_path(root)
        session_id = str(uuid.uuid4())
        self.sessions[session_id] = ResultSession(
            session_id, search_root, self._settings_for(search_root)
        )
        logger.info(f"Opened session {session_id} for {search_root.path} ({search_root.scope.value})")

        while len(self.sessions) > self.max_sessions:
            oldest = next(iter(self.sessions))
            logger.info(f"Evicting least recently used session {oldest}")
            self.close_session(oldest)
        return session_id

    def get_session(self, session_id: str) -> ResultSession:
        session = self.sessions.get(session_id)
        if session is None:
            raise UnknownSessionError(session_id)
        self.sessions.move_to_end(session_id)
        return session

    async def search(
        self,
        root: Optional[str],
        query: str,
        mode: Union[SearchMode, str] = SearchMode.TEXT,
        options: Union[SearchOptions, Dict[str, Any], None] = None,
        session_id: Optional[str] = None
    ) -> Optional[ResultSnapshot]:
        """Run a query, opening a session for the root if no handle is given."""
        if isinstance(mode, str):
            try:
                mode = SearchMode(mode)
            except ValueError:
                raise SearchError(f"Unknown search mode: {mode}")

        opened = session_id is None
        if opened:
            if not root:
                raise SearchError("Either a root path or a session id is required")
            session_id = self.open_session(root)

        session = self.get_session(session_id)
        try:
            return await session.search(query, mode, options)
        except ValueError:
            if opened:
                # Invalid options; do not keep a session the caller never saw
                self.close_session(session_id)
            raise

    def load_more(self, session_id: str) -> ResultSnapshot:
        return self.get_session(session_id).load_more()

    async def load_context(
        self,
        session_id: str,
        match_id: int,
        context_size: Optional[int] = None
    ) -> List[str]:
        return await self.get_session(session_id).load_context(match_id, context_size)

    def snapshot(self, session_id: str) -> ResultSnapshot:
        """Current results of a session without running anything."""
        return self.get_session(session_id).snapshot()

    def close_session(self, session_id: str) -> bool:
        session = self.sessions.pop(session_id, None)
        if session is None:
            return False
        session.close()
        logger.info(f"Closed session {session_id}")
        return True

    def close_all(self) -> None:
        for session_id in list(self.sessions):
            self.close_session(session_id)
