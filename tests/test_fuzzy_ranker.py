"""Tests for the fuzzy ranker."""

import unittest

from search.fuzzy_ranker import (
    FuzzyRanker,
    fold_case,
    is_camel_boundary,
    position_bonus,
    searchable_text
)
from search.models import Candidate


def make_candidate(relative_path):
    name = relative_path.split('/')[-1]
    return Candidate(
        path='/project/' + relative_path,
        name=name,
        relative_path=relative_path,
        size=10,
        modified=0.0
    )


class TestFuzzyRanker(unittest.TestCase):
    """Test scoring and ordering of candidates."""

    def setUp(self):
        self.ranker = FuzzyRanker()

    def assert_indices_follow_query(self, scored, query):
        """Assert one matched index per query character, in order."""
        indices = scored.matched_indices
        self.assertEqual(len(indices), len(query))
        self.assertEqual(list(indices), sorted(set(indices)))
        text = scored.searchable_text
        for index, char in zip(indices, query.lower()):
            self.assertEqual(text[index].lower(), char)

    def test_abbreviation_matches_word_starts(self):
        """Test that an abbreviation lands on the words it abbreviates."""
        candidates = [make_candidate('src/ErrorInvalidInput.ts')]
        ranked = self.ranker.rank(candidates, 'ErrInv')

        self.assertEqual(len(ranked), 1)
        self.assertGreater(ranked[0].score, 0)
        # E, r, r then I, n, v of "Invalid"
        self.assertEqual(ranked[0].matched_indices, (0, 1, 2, 5, 6, 7))
        self.assert_indices_follow_query(ranked[0], 'ErrInv')

    def test_exact_substring_scores_highest(self):
        """Test that exact substrings outrank partial matches."""
        candidates = [
            make_candidate('lib/m_a_i_n.py'),
            make_candidate('lib/domain.txt'),
            make_candidate('lib/main.py'),
        ]
        ranked = self.ranker.rank(candidates, 'main')

        self.assertEqual(ranked[0].candidate.name, 'main.py')
        self.assertEqual(ranked[1].candidate.name, 'domain.txt')
        self.assertEqual(ranked[2].candidate.name, 'm_a_i_n.py')
        self.assertGreaterEqual(ranked[1].score, 1000)
        self.assertLess(ranked[2].score, 1000)

    def test_matched_indices_follow_query(self):
        """Test that matched characters spell out the query."""
        candidates = [
            make_candidate('src/components/UserProfileCard.tsx'),
            make_candidate('src/utils/parse_config.py'),
            make_candidate('README.md'),
        ]
        for query in ('upc', 'pconf', 'readme', 'src'):
            for scored in self.ranker.rank(candidates, query):
                self.assert_indices_follow_query(scored, query)

    def test_non_matching_candidates_are_excluded(self):
        """Test that candidates without the query characters are dropped."""
        ranked = self.ranker.rank([make_candidate('abc.txt')], 'xyz')
        self.assertEqual(ranked, [])

    def test_query_longer_than_text(self):
        """Test that a query longer than the text never matches."""
        self.assertIsNone(self.ranker.score('ab', 'abcdef'))

    def test_empty_query_passes_everything_through(self):
        """Test that a blank query returns every candidate unscored."""
        candidates = [make_candidate('b.txt'), make_candidate('a.txt'), make_candidate('c/d.txt')]
        for query in ('', '   '):
            ranked = self.ranker.rank(candidates, query)
            self.assertEqual([s.candidate for s in ranked], candidates)
            self.assertTrue(all(s.score == 0 for s in ranked))
            self.assertTrue(all(s.matched_indices == () for s in ranked))

    def test_ties_keep_input_order(self):
        """Test that equal scores keep traversal order."""
        candidates = [make_candidate('b/foo.txt'), make_candidate('a/foo.txt')]
        ranked = self.ranker.rank(candidates, 'foo')

        self.assertEqual(ranked[0].score, ranked[1].score)
        self.assertEqual([s.candidate for s in ranked], candidates)

    def test_ranking_is_deterministic(self):
        """Test that ranking the same input twice gives the same result."""
        candidates = [make_candidate(p) for p in (
            'src/app.py', 'src/api.py', 'tests/test_app.py', 'docs/apple.md', 'app/main.py'
        )]
        first = self.ranker.rank(candidates, 'ap')
        second = self.ranker.rank(candidates, 'ap')
        self.assertEqual(first, second)

    def test_query_is_case_insensitive(self):
        """Test that query casing does not change the score."""
        candidates = [make_candidate('Makefile')]
        self.assertEqual(
            self.ranker.rank(candidates, 'MAKE')[0].score,
            self.ranker.rank(candidates, 'make')[0].score
        )

    def test_widely_spread_characters_are_excluded(self):
        """Test that scattered characters score zero and are excluded."""
        text = 'a' + 'x' * 400 + 'b'
        self.assertIsNone(self.ranker.score(text, 'ab'))

    def test_searchable_text(self):
        """Test the text a candidate is ranked on."""
        self.assertEqual(searchable_text(make_candidate('src/a.py')), 'a.py src/a.py')

    def test_bonuses_are_measured_at_each_start_offset(self):
        """Test that a word-boundary start outranks a later but tighter match."""
        candidates = [make_candidate('a__y'), make_candidate('za_y')]
        ranked = self.ranker.rank(candidates, 'ay')

        self.assertEqual([s.candidate.name for s in ranked], ['za_y', 'a__y'])
        self.assertEqual([s.score for s in ranked], [694, 692])
        self.assertEqual(ranked[0].matched_indices, (1, 3))

    def test_characters_that_lengthen_when_lowered(self):
        """Test that a dotted capital I does not shift or break matched indices."""
        candidate = Candidate(
            path='/project/q',
            name='q',
            relative_path='İa' + 'x' * 300 + 'z',
            size=1,
            modified=0.0
        )
        ranked = self.ranker.rank([candidate], 'az')

        self.assertEqual(len(ranked), 1)
        self.assert_indices_follow_query(ranked[0], 'az')
        self.assertEqual(ranked[0].matched_indices, (3, 304))

    def test_scoring_with_lengthening_characters(self):
        """Test scoring text that holds a dotted capital I."""
        text = 'q İa' + 'x' * 400 + 'z'
        self.assertIsNone(self.ranker.score(text, 'az'))

        text = 'q İaBz'
        score, indices = self.ranker.score(text, 'abz')
        self.assertGreater(score, 0)
        self.assertEqual([text[i].lower() for i in indices], ['a', 'b', 'z'])

    def test_highlight_after_lengthening_characters(self):
        """Test that highlighting marks the matched character, not its neighbor."""
        ranked = self.ranker.rank([make_candidate('İa.txt')], 'a')

        self.assertEqual(ranked[0].matched_indices, (1,))
        self.assertEqual(
            FuzzyRanker.highlight(ranked[0].candidate.name, ranked[0].name_indices),
            'İ[a].txt'
        )

    def test_fold_case_keeps_length(self):
        """Test that case folding never changes the text length."""
        self.assertEqual(fold_case('İAb'), 'İab')
        self.assertEqual(len(fold_case('İ' * 5)), 5)


class TestSubsequenceSearch(unittest.TestCase):
    """Test the subsequence fallback used for scattered queries."""

    def test_best_placement_prefers_word_start_and_adjacency(self):
        """Test that the placement prefers a word start and adjacent characters."""
        ranker = FuzzyRanker()
        self.assertEqual(ranker._best_placement('abxAb', 'abxab', 'ab'), (0, 1))

    def test_camel_case_boundary_wins_over_scattered_letters(self):
        """Test that camel-case boundaries are preferred."""
        ranker = FuzzyRanker()
        # "ei" can land on e(1)+i(3) in "xeki" or on the capital E and I of "EvtId"
        text = 'xekiEvtId'
        placement = ranker._best_placement(text, text.lower(), 'ei')
        self.assertEqual(placement, (4, 7))

    def test_no_placement(self):
        """Test that a missing character yields no placement."""
        ranker = FuzzyRanker()
        self.assertIsNone(ranker._best_placement('abc', 'abc', 'cz'))

    def test_budget_exhaustion_uses_leftmost_placement(self):
        """Test the leftmost fallback when the step budget runs out."""
        ranker = FuzzyRanker(iteration_budget=1)
        self.assertEqual(ranker._subsequence_match('abxAb', 'abxab', 'ab'), (60, (0, 1)))

    def test_gap_penalty_floors_at_zero(self):
        """Test that large gaps floor the score at zero."""
        ranker = FuzzyRanker()
        score, indices = ranker._subsequence_match('a-----b', 'a-----b', 'ab')
        self.assertEqual(indices, (0, 6))
        self.assertEqual(score, 10)

        score, _ = ranker._subsequence_match('a' + '-' * 20 + 'b', 'a' + '-' * 20 + 'b', 'ab')
        self.assertEqual(score, 0)


class TestHelpers(unittest.TestCase):
    """Test highlighting and scoring helpers."""

    def test_highlight_merges_adjacent_characters(self):
        """Test that adjacent matches share one marker pair."""
        self.assertEqual(
            FuzzyRanker.highlight('ErrorInvalid', (0, 1, 2, 5, 6, 7)),
            '[Err]or[Inv]alid'
        )

    def test_highlight_custom_markers_and_out_of_range(self):
        """Test custom markers and out-of-range indices."""
        self.assertEqual(FuzzyRanker.highlight('abc', (2, 9), '<b>', '</b>'), 'ab<b>c</b>')
        self.assertEqual(FuzzyRanker.highlight('abc', ()), 'abc')

    def test_name_indices(self):
        """Test matched indices restricted to the display name."""
        ranked = FuzzyRanker().rank([make_candidate('src/ErrorInvalidInput.ts')], 'ts')
        self.assertEqual(ranked[0].matched_indices, (18, 19))
        self.assertEqual(ranked[0].name_indices, (18, 19))

    def test_position_bonus(self):
        """Test the position bonus."""
        self.assertEqual(position_bonus(0, 10), 50)
        self.assertEqual(position_bonus(5, 10), 25)
        self.assertEqual(position_bonus(10, 10), 0)

    def test_camel_boundary(self):
        """Test camel-case boundary detection."""
        self.assertTrue(is_camel_boundary('fooBar', 3))
        self.assertFalse(is_camel_boundary('foobar', 3))
        self.assertFalse(is_camel_boundary('FOO', 1))
        self.assertFalse(is_camel_boundary('Foo', 0))


if __name__ == '__main__':
    unittest.main()
