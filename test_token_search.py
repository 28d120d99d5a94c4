import unittest

from tbx_core.models import Sentence, Token
from tbx_search.corpus_index import build_index
from tbx_search.token_search import (
    SearchQuery,
    SearchResult,
    SearchHit,
    MatchTarget,
    MatcherKind,
    compile_matcher,
    wildcard_to_regex,
    search,
    paginate,
)


def sentence_of(forms, lemmas=None, upos=None, deprels=None, feats=None):
    tokens = []
    for i, form in enumerate(forms):
        tokens.append(Token(
            id=i + 1,
            form=form,
            lemma=lemmas[i] if lemmas else form.lower(),
            upos=upos[i] if upos else "X",
            feats=feats[i] if feats else {},
            head=0,
            deprel=deprels[i] if deprels else "dep",
        ))
    return Sentence(tuple(tokens))


RUNNERS = sentence_of(["run", "running", "Runner", "sprint"])


class TestWildcardMatcher(unittest.TestCase):
    def test_01_matcher_kinds(self):
        self.assertIs(compile_matcher("").kind, MatcherKind.MATCH_ALL)
        self.assertIs(compile_matcher("dog").kind, MatcherKind.LITERAL)
        self.assertIs(compile_matcher("d?g*").kind, MatcherKind.PATTERN)

    def test_02_metacharacters_escaped(self):
        """Only * and ? are wildcards"""
        matcher = compile_matcher("a.b*")
        self.assertTrue(matcher.matches("a.bc"))
        self.assertFalse(matcher.matches("axbc"))
        self.assertEqual(wildcard_to_regex("a+?"), r"a\+.")

    def test_03_whole_token(self):
        matcher = compile_matcher("run*")
        self.assertTrue(matcher.matches("runner"))
        self.assertFalse(matcher.matches("outrun"))

    def test_04_question_mark(self):
        matcher = compile_matcher("c?t")
        self.assertTrue(matcher.matches("cat"))
        self.assertFalse(matcher.matches("cart"))


class TestSearch(unittest.TestCase):
    def matched_forms(self, query, sentence=RUNNERS):
        result = search([sentence], query)
        if not result:
            return set()
        return {sentence.tokens[p].form for p in result.hits[0].matches}

    def test_01_prefix_wildcard(self):
        """run* matches run, running and Runner but not sprint"""
        self.assertEqual(self.matched_forms(SearchQuery("run*")), {"run", "running", "Runner"})

    def test_02_substring(self):
        self.assertEqual(
            self.matched_forms(SearchQuery("un", substring=True)),
            {"run", "running", "Runner"}
        )

    def test_03_case_sensitive(self):
        self.assertEqual(
            self.matched_forms(SearchQuery("Run*", case_sensitive=True)),
            {"Runner"}
        )

    def test_04_literal_whole_token(self):
        self.assertEqual(self.matched_forms(SearchQuery("RUN")), {"run"})

    def test_05_empty_pattern_matches_filtered_tokens(self):
        sentence = sentence_of(["a", "b", "c"], upos=["DET", "NOUN", "NOUN"])
        self.assertEqual(self.matched_forms(SearchQuery("", upos={"NOUN"}), sentence), {"b", "c"})

    def test_06_lemma_target(self):
        sentence = sentence_of(["went", "goes"], lemmas=["go", "_"])
        query = SearchQuery("go*", target=MatchTarget.LEMMA)
        self.assertEqual(self.matched_forms(query, sentence), {"went", "goes"})

    def test_07_deprel_filter(self):
        sentence = sentence_of(["a", "b"], deprels=["nsubj", "obj"])
        self.assertEqual(self.matched_forms(SearchQuery(deprels={"obj"}), sentence), {"b"})

    def test_08_feature_filter(self):
        """Feature value matches as a case-insensitive substring"""
        sentence = sentence_of(
            ["a", "b", "c"],
            feats=[{"Case": "Nom"}, {"Case": "Acc"}, {}]
        )
        self.assertEqual(self.matched_forms(SearchQuery(feat_key="Case"), sentence), {"a", "b"})
        self.assertEqual(
            self.matched_forms(SearchQuery(feat_key="Case", feat_value="nom"), sentence),
            {"a"}
        )

    def test_09_length_bounds(self):
        """A five token sentence against inclusive bounds"""
        five = sentence_of(["a", "b", "c", "d", "e"])
        for bounds, expected in [((1, 5), 1), ((5, 100), 1), ((1, 4), 0), ((6, 100), 0)]:
            query = SearchQuery(len_min=bounds[0], len_max=bounds[1])
            self.assertEqual(len(search([five], query)), expected, bounds)

    def test_10_no_match(self):
        result = search([RUNNERS], SearchQuery("walk*"))
        self.assertEqual(len(result), 0)
        self.assertFalse(result)

    def test_11_uids_and_order(self):
        """Hits keep corpus order and use sentence positions"""
        corpus = [sentence_of(["dog"]), sentence_of(["cat"]), sentence_of(["dog", "Dog"])]
        result = search(corpus, SearchQuery("dog"))
        self.assertEqual(result.sentence_uids, [0, 2])
        self.assertEqual(result.hits[1].matches, (0, 1))
        self.assertEqual(result.token_count, 3)

    def test_12_pattern_trimmed(self):
        self.assertEqual(SearchQuery("  run*  ").pattern, "run*")

    def test_13_empty_corpus(self):
        self.assertEqual(len(search([], SearchQuery("x"))), 0)

    def test_14_indexed_uids_kept_for_subsequences(self):
        """Hits over a slice of indexed sentences report their corpus uids"""
        index = build_index([sentence_of(["a"]), sentence_of(["b"]), sentence_of(["c"])])
        result = search(index.sentences[1:], SearchQuery("c"))
        self.assertEqual(result.sentence_uids, [2])


class TestPagination(unittest.TestCase):
    def setUp(self):
        self.result = SearchResult(tuple(SearchHit(i, (0,)) for i in range(45)))

    def test_01_first_page(self):
        page = paginate(self.result, 1, 20)
        self.assertEqual(len(page.hits), 20)
        self.assertEqual(page.total, 45)
        self.assertEqual(page.total_pages, 3)

    def test_02_last_page(self):
        page = paginate(self.result, 3, 20)
        self.assertEqual([hit.uid for hit in page.hits], [40, 41, 42, 43, 44])
        self.assertEqual(page.page, 3)

    def test_03_beyond_last_page(self):
        """A page past the data is empty and reported as the last page"""
        page = paginate(self.result, 4, 20)
        self.assertEqual(page.hits, ())
        self.assertEqual(page.page, 3)

    def test_04_empty_result(self):
        page = paginate(SearchResult(), 1, 20)
        self.assertEqual(page.total_pages, 1)
        self.assertEqual(page.hits, ())

    def test_05_page_below_one(self):
        page = paginate(self.result, 0, 20)
        self.assertEqual(page.page, 1)
        self.assertEqual(page.hits[0].uid, 0)


if __name__ == "__main__":
    unittest.main()
