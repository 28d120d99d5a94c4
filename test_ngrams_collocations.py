import math
import unittest

from tbx_core.models import Sentence, Token
from tbx_search.token_search import SearchQuery, search
from tbx_stats.ngrams import count_ngrams, ngram_source, clamp_order
from tbx_stats.collocations import (
    AssociationMeasure,
    find_collocations,
    pmi,
    t_score,
)


def sentence_of(forms, lemmas=None):
    return Sentence(tuple(
        Token(i + 1, form, lemmas[i] if lemmas else form)
        for i, form in enumerate(forms)
    ))


CAT_CORPUS = [sentence_of(["the", "cat", "sat"]), sentence_of(["a", "cat", "ran"])]


class TestNgrams(unittest.TestCase):
    def test_01_bigrams(self):
        pairs = count_ngrams([sentence_of(["the", "cat", "sat"])], n=2)
        self.assertEqual(pairs, [("the cat", 1), ("cat sat", 1)])

    def test_02_short_sentence(self):
        self.assertEqual(count_ngrams([sentence_of(["alone"])], n=2), [])

    def test_03_no_cross_sentence_windows(self):
        pairs = dict(count_ngrams(CAT_CORPUS, n=2))
        self.assertNotIn("sat a", pairs)
        self.assertEqual(len(pairs), 4)

    def test_04_lowercased_forms(self):
        pairs = count_ngrams([sentence_of(["The", "Cat"]), sentence_of(["the", "cat"])], n=2)
        self.assertEqual(pairs, [("the cat", 2)])

    def test_05_order_clamped(self):
        self.assertEqual(clamp_order(0), 1)
        self.assertEqual(clamp_order(9), 5)
        unigrams = count_ngrams(CAT_CORPUS, n=0)
        self.assertEqual(unigrams[0], ("cat", 2))

    def test_06_top_limit_and_ties(self):
        """Ties keep first-seen order"""
        pairs = count_ngrams(CAT_CORPUS, n=1, top=3)
        self.assertEqual(pairs, [("cat", 2), ("the", 1), ("sat", 1)])

    def test_07_source_from_search(self):
        result = search(CAT_CORPUS, SearchQuery("ran"))
        self.assertEqual(ngram_source(CAT_CORPUS, result), [CAT_CORPUS[1]])

    def test_08_empty_search_falls_back_to_corpus(self):
        result = search(CAT_CORPUS, SearchQuery("dog"))
        self.assertEqual(ngram_source(CAT_CORPUS, result), CAT_CORPUS)
        self.assertEqual(ngram_source(CAT_CORPUS, None), CAT_CORPUS)


class TestCollocations(unittest.TestCase):
    def test_01_cooccurrence_counts(self):
        rows = find_collocations(CAT_CORPUS, "cat", window=1)
        self.assertEqual({r.token: r.count for r in rows}, {"the": 1, "sat": 1, "a": 1, "ran": 1})

    def test_02_pmi_value(self):
        """f(cat)=2, N=6, c=1, f(sat)=1 gives log2(3)"""
        rows = {r.token: r for r in find_collocations(CAT_CORPUS, "cat", window=1)}
        self.assertAlmostEqual(rows["sat"].pmi, math.log2(3))

    def test_03_t_score_formula(self):
        """(c - f(t)f(c)/N) / sqrt(c)"""
        rows = {r.token: r for r in find_collocations(CAT_CORPUS, "cat", window=1)}
        self.assertAlmostEqual(rows["sat"].t_score, 1 - 2 / 6)
        self.assertAlmostEqual(t_score(4, 2, 3, 12), (4 - 0.5) / 2)

    def test_04_window_clipped(self):
        rows = find_collocations([sentence_of(["cat", "x"])], "cat", window=5)
        self.assertEqual([(r.token, r.count) for r in rows], [("x", 1)])

    def test_05_lemma_target(self):
        corpus = [sentence_of(["Cats", "purr"], lemmas=["cat", "_"])]
        rows = find_collocations(corpus, "CAT", window=1)
        self.assertEqual([r.token for r in rows], ["purr"])

    def test_06_empty_target_and_missing_target(self):
        self.assertEqual(find_collocations(CAT_CORPUS, "  "), [])
        self.assertEqual(find_collocations(CAT_CORPUS, "dog"), [])

    def test_07_sort_by_measure(self):
        corpus = [
            sentence_of(["cat", "the"]),
            sentence_of(["the", "cat"]),
            sentence_of(["cat", "the"]),
            sentence_of(["the", "dog"]),
            sentence_of(["cat", "meows"]),
        ]
        by_pmi = find_collocations(corpus, "cat", window=1, measure="pmi")
        by_t = find_collocations(corpus, "cat", window=1, measure="t-score")
        self.assertEqual(by_pmi[0].token, "meows")
        self.assertEqual(by_t[0].token, "the")

    def test_08_measure_parsing(self):
        self.assertIs(AssociationMeasure.parse("tscore"), AssociationMeasure.T_SCORE)
        self.assertIs(AssociationMeasure.parse("T_SCORE"), AssociationMeasure.T_SCORE)
        with self.assertRaises(ValueError):
            AssociationMeasure.parse("dice")

    def test_09_denominator_floor(self):
        self.assertAlmostEqual(pmi(1, 0, 0, 8), 3.0)

    def test_10_top(self):
        rows = find_collocations(CAT_CORPUS, "cat", window=1, top=2)
        self.assertEqual(len(rows), 2)


if __name__ == "__main__":
    unittest.main()
