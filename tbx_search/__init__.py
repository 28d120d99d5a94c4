"""
TBX Search - Corpus Index and Token Search

This package builds the inverted index over a loaded corpus, evaluates
filtered wildcard token searches and holds the published corpus
snapshot.

Modules:
    corpus_index: Hit lists, frequency tables and category sets
    token_search: Query evaluation and pagination
    session: Corpus snapshots with atomic reload

University of Athens - Nikolaos Lavidas
"""

from tbx_search.corpus_index import (
    CorpusIndex,
    build_index,
    finalize_sentences,
)

from tbx_search.token_search import (
    SearchQuery,
    SearchHit,
    SearchResult,
    ResultPage,
    MatchTarget,
    MatcherKind,
    WildcardMatcher,
    compile_matcher,
    search,
    paginate,
)

from tbx_search.session import (
    CorpusSnapshot,
    CorpusSession,
)

__all__ = [
    "CorpusIndex",
    "build_index",
    "finalize_sentences",
    "SearchQuery",
    "SearchHit",
    "SearchResult",
    "ResultPage",
    "MatchTarget",
    "MatcherKind",
    "WildcardMatcher",
    "compile_matcher",
    "search",
    "paginate",
    "CorpusSnapshot",
    "CorpusSession",
]
