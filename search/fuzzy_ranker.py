"""Fuzzy ranking of file candidates against a typed query."""

import logging
import re
from typing import List, Optional, Sequence, Tuple

from .models import Candidate, ScoredCandidate

logger = logging.getLogger(__name__)

SEPARATOR_PATTERN = re.compile(r'[\s\-_/.\\]')

EXACT_BASE = 1000
MATCH_BONUS = 16
CONSECUTIVE_BASE = 500
CONSECUTIVE_RUN_WEIGHT = 50
WORD_START_BONUS = 100
SPAN_PENALTY = 2
POSITION_BONUS_MAX = 50

SUBSEQUENCE_BASE = 50
SUBSEQUENCE_CHAR_BONUS = 5
SUBSEQUENCE_GAP_PENALTY = 10

BOUNDARY_BONUS = 50
CAMEL_BONUS = 30
ADJACENT_BONUS = 20
GAP_PENALTY = 2
POSITION_PENALTY_DIVISOR = 10

DEFAULT_ITERATION_BUDGET = 20000

Match = Tuple[int, Tuple[int, ...]]


class _BudgetExhausted(Exception):
    pass


def searchable_text(candidate: Candidate) -> str:
    """Text a candidate is ranked on: display name, then relative path."""
    return f"{candidate.name} {candidate.relative_path}"


def fold_case(text: str) -> str:
    """Lower-case text character by character, keeping its length.

    Characters whose lower-case form is longer than one character (such as
    U+0130) are kept as they are, so indices into the result are indices into
    the original text.
    """
    return ''.join(c.lower() if len(c.lower()) == 1 else c for c in text)


def is_separator(char: str) -> bool:
    return SEPARATOR_PATTERN.match(char) is not None


def is_word_start(text: str, index: int) -> bool:
    return index == 0 or is_separator(text[index - 1])


def is_camel_boundary(text: str, index: int) -> bool:
    """True at an uppercase letter that follows a lowercase one."""
    if index == 0:
        return False
    previous = text[index - 1]
    current = text[index]
    return previous.islower() and current.isupper()


def position_bonus(index: int, text_length: int) -> int:
    """Bonus favoring matches near the start of the text."""
    if text_length == 0:
        return 0
    return max(0, POSITION_BONUS_MAX - (index * POSITION_BONUS_MAX) // text_length)


class FuzzyRanker:
    """
    Scores candidates with a three-tier strategy.

    1. Exact substring: the whole query appears contiguously.
    2. Consecutive partial: greedy left-to-right match from each start,
       rewarding the longest consecutive run.
    3. Subsequence: the best-scoring ordered placement of every query
       character, found by a memoized search with an iteration budget.

    Tier 3 is only reached when tiers 1 and 2 produce nothing. Matching is
    case-insensitive; the original casing is kept for camel-case detection.
    """

    def __init__(self, iteration_budget: int = DEFAULT_ITERATION_BUDGET):
        """
        Initialize the ranker.

        Args:
            iteration_budget: Upper bound on subsequence search steps per
                candidate before falling back to the leftmost placement
        """
        self.iteration_budget = iteration_budget

    def rank(self, candidates: Sequence[Candidate], query: str) -> List[ScoredCandidate]:
        """
        Rank candidates against a query.

        Args:
            candidates: Candidates in their stable traversal order
            query: Text typed by the operator

        Returns:
            Matching candidates sorted by descending score; ties keep the
            input order. A blank query returns every candidate unscored.
        """
        if not query.strip():
            return [
                ScoredCandidate(candidate=c, score=0, searchable_text=searchable_text(c))
                for c in candidates
            ]

        lowered_query = fold_case(query)
        scored: List[ScoredCandidate] = []
        for candidate in candidates:
            text = searchable_text(candidate)
            match = self.score(text, lowered_query)
            if match is None:
                continue
            score, indices = match
            scored.append(ScoredCandidate(
                candidate=candidate,
                score=score,
                matched_indices=indices,
                searchable_text=text
            ))

        # sorted() is stable, so equal scores keep traversal order
        return sorted(scored, key=lambda s: -s.score)

    def score(self, text: str, query: str) -> Optional[Match]:
        """
        Score one text against an already case-folded query.

        Args:
            text: Searchable text in its original casing
            query: Case-folded, non-empty query (see fold_case)

        Returns:
            (score, matched indices), or None when the text does not match
        """
        if not query or len(query) > len(text):
            return None

        lowered = fold_case(text)

        match = self._exact_match(lowered, query)
        if match is not None:
            return match

        match = self._consecutive_match(lowered, query)
        if match is not None:
            return match

        match = self._subsequence_match(text, lowered, query)
        if match is not None and match[0] > 0:
            return match
        return None

    def _exact_match(self, lowered: str, query: str) -> Optional[Match]:
        index = lowered.find(query)
        if index == -1:
            return None
        score = EXACT_BASE + MATCH_BONUS * len(query) + position_bonus(index, len(lowered))
        return score, tuple(range(index, index + len(query)))

    def _consecutive_match(self, lowered: str, query: str) -> Optional[Match]:
        best: Optional[Match] = None

        for start in range(len(lowered) - len(query) + 1):
            indices: List[int] = []
            query_pos = 0
            run = 0
            longest_run = 0
            for pos in range(start, len(lowered)):
                if lowered[pos] == query[query_pos]:
                    indices.append(pos)
                    query_pos += 1
                    run += 1
                    longest_run = max(longest_run, run)
                    if query_pos == len(query):
                        break
                else:
                    run = 0

            if query_pos < len(query):
                # Later starts see a shorter suffix and cannot complete either
                break

            score = CONSECUTIVE_BASE + longest_run * CONSECUTIVE_RUN_WEIGHT
            if is_word_start(lowered, start):
                score += WORD_START_BONUS
            score += position_bonus(start, len(lowered))
            score -= (indices[-1] - indices[0] + 1) * SPAN_PENALTY

            if score > 0 and (best is None or score > best[0]):
                best = (score, tuple(indices))

        return best

    def _subsequence_match(self, text: str, lowered: str, query: str) -> Optional[Match]:
        try:
            indices = self._best_placement(text, lowered, query)
        except _BudgetExhausted:
            logger.debug(f"Subsequence search budget exhausted for {text!r}, using leftmost placement")
            indices = self._leftmost_placement(lowered, query)

        if indices is None:
            return None

        score = SUBSEQUENCE_BASE + SUBSEQUENCE_CHAR_BONUS * len(indices)
        for previous, current in zip(indices, indices[1:]):
            score -= (current - previous - 1) * SUBSEQUENCE_GAP_PENALTY
        return max(0, score), indices

    def _best_placement(self, text: str, lowered: str, query: str) -> Optional[Tuple[int, ...]]:
        """Highest-scoring placement of every query character, or None."""
        memo = {}
        steps = [0]
        text_length = len(lowered)
        query_length = len(query)

        def char_score(index: int, previous: int) -> int:
            value = 0
            if is_word_start(lowered, index):
                value += BOUNDARY_BONUS
            if is_camel_boundary(text, index):
                value += CAMEL_BONUS
            if previous >= 0:
                if index == previous + 1:
                    value += ADJACENT_BONUS
                value -= (index - previous - 1) * GAP_PENALTY
            value -= index // POSITION_PENALTY_DIVISOR
            return value

        def best_from(previous: int, query_index: int) -> Optional[Match]:
            if query_index == query_length:
                return 0, ()
            key = (previous, query_index)
            if key in memo:
                return memo[key]

            best: Optional[Match] = None
            last_start = text_length - (query_length - query_index)
            target = query[query_index]
            for index in range(previous + 1, last_start + 1):
                steps[0] += 1
                if steps[0] > self.iteration_budget:
                    raise _BudgetExhausted()
                if lowered[index] != target:
                    continue
                rest = best_from(index, query_index + 1)
                if rest is None:
                    continue
                total = char_score(index, previous) + rest[0]
                if best is None or total > best[0]:
                    best = (total, (index,) + rest[1])

            memo[key] = best
            return best

        result = best_from(-1, 0)
        return result[1] if result else None

    @staticmethod
    def _leftmost_placement(lowered: str, query: str) -> Optional[Tuple[int, ...]]:
        indices = []
        position = 0
        for char in query:
            position = lowered.find(char, position)
            if position == -1:
                return None
            indices.append(position)
            position += 1
        return tuple(indices)

    @staticmethod
    def highlight(text: str, indices: Sequence[int], open_marker: str = '[',
                  close_marker: str = ']') -> str:
        """
        Wrap matched characters in markers, merging adjacent ones.

        Args:
            text: Text that was ranked
            indices: Matched character indices; out-of-range ones are ignored
            open_marker: Inserted before each matched run
            close_marker: Inserted after each matched run

        Returns:
            Text with matched runs wrapped
        """
        matched = {i for i in indices if 0 <= i < len(text)}
        if not matched:
            return text

        parts = []
        inside = False
        for i, char in enumerate(text):
            if i in matched and not inside:
                parts.append(open_marker)
                inside = True
            elif i not in matched and inside:
                parts.append(close_marker)
                inside = False
            parts.append(char)
        if inside:
            parts.append(close_marker)
        return ''.join(parts)
