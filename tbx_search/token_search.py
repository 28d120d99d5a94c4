"""
TBX Search Token Search - Filtered Wildcard Token Search

This module evaluates a token query against the sentence sequence:

- sentence length bounds
- UPOS, dependency relation and morphological feature filters
- wildcard pattern (* and ?) over the form or lemma, whole token or
  substring, case sensitive or not

Results keep corpus order: one hit per sentence with at least one
matching token, listing the matching token positions. Pagination over
a result is pure slicing.

University of Athens - Nikolaos Lavidas
"""

from __future__ import annotations
import math
import re
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Any, Iterable, Iterator, Tuple, FrozenSet

from tbx_core.models import Sentence, Token
from tbx_core.logging_monitoring import timed

logger = logging.getLogger(__name__)

DEFAULT_LEN_MIN = 1
DEFAULT_LEN_MAX = 9999
DEFAULT_PAGE_SIZE = 20


class MatchTarget(Enum):
    FORM = "form"
    LEMMA = "lemma"


class MatcherKind(Enum):
    MATCH_ALL = "match_all"
    LITERAL = "literal"
    PATTERN = "pattern"
    NEVER = "never"


@dataclass(frozen=True)
class SearchQuery:
    """A token query: pattern plus linguistic filters"""
    pattern: str = ""
    target: MatchTarget = MatchTarget.FORM
    case_sensitive: bool = False
    substring: bool = False
    upos: FrozenSet[str] = frozenset()
    deprels: FrozenSet[str] = frozenset()
    feat_key: str = ""
    feat_value: str = ""
    len_min: int = DEFAULT_LEN_MIN
    len_max: int = DEFAULT_LEN_MAX

    def __post_init__(self):
        object.__setattr__(self, "pattern", self.pattern.strip())
        object.__setattr__(self, "target", MatchTarget(self.target))
        object.__setattr__(self, "upos", frozenset(self.upos))
        object.__setattr__(self, "deprels", frozenset(self.deprels))
        object.__setattr__(self, "feat_key", self.feat_key.strip())
        object.__setattr__(self, "feat_value", self.feat_value.strip())

    def subject(self, token: Token) -> str:
        """The string the pattern is matched against"""
        value = token.lemma_or_form if self.target is MatchTarget.LEMMA else token.form
        return value if self.case_sensitive else value.lower()

    def accepts_token(self, token: Token) -> bool:
        """Apply UPOS, deprel and feature filters in that order"""
        if self.upos and token.upos not in self.upos:
            return False
        if self.deprels and token.deprel not in self.deprels:
            return False
        if self.feat_key:
            value = token.feats.get(self.feat_key)
            if not value:
                return False
            if self.feat_value and self.feat_value.lower() not in value.lower():
                return False
        return True

    def accepts_length(self, length: int) -> bool:
        return self.len_min <= length <= self.len_max

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "pattern": self.pattern,
            "target": self.target.value,
            "case_sensitive": self.case_sensitive,
            "substring": self.substring,
            "upos": sorted(self.upos),
            "deprels": sorted(self.deprels),
            "feat_key": self.feat_key,
            "feat_value": self.feat_value,
            "len_min": self.len_min,
            "len_max": self.len_max,
        }


@dataclass(frozen=True)
class WildcardMatcher:
    """
    A pattern compiled once per query.

    MATCH_ALL for an empty pattern, LITERAL when the pattern has no
    wildcard, PATTERN for a compiled regular expression and NEVER when
    compilation failed.
    """
    kind: MatcherKind
    literal: str = ""
    regex: Optional[re.Pattern] = None
    substring: bool = False

    def matches(self, subject: str) -> bool:
        if self.kind is MatcherKind.MATCH_ALL:
            return True
        if self.kind is MatcherKind.LITERAL:
            return self.literal in subject if self.substring else self.literal == subject
        if self.kind is MatcherKind.PATTERN:
            if self.substring:
                return self.regex.search(subject) is not None
            return self.regex.fullmatch(subject) is not None
        return False


def wildcard_to_regex(pattern: str) -> str:
    """Escape a pattern and turn * and ? back into wildcards"""
    escaped = re.escape(pattern)
    return escaped.replace(r"\*", ".*").replace(r"\?", ".")


def compile_matcher(pattern: str, case_sensitive: bool = False, substring: bool = False) -> WildcardMatcher:
    """Compile a search pattern into a matcher"""
    if not pattern:
        return WildcardMatcher(MatcherKind.MATCH_ALL)

    if "*" not in pattern and "?" not in pattern:
        literal = pattern if case_sensitive else pattern.lower()
        return WildcardMatcher(MatcherKind.LITERAL, literal=literal, substring=substring)

    flags = 0 if case_sensitive else re.IGNORECASE
    try:
        regex = re.compile(wildcard_to_regex(pattern), flags)
    except re.error as e:
        logger.debug(f"Pattern {pattern!r} did not compile: {e}")
        return WildcardMatcher(MatcherKind.NEVER)

    return WildcardMatcher(MatcherKind.PATTERN, regex=regex, substring=substring)


@dataclass(frozen=True)
class SearchHit:
    """Matching token positions within one sentence"""
    uid: int
    matches: Tuple[int, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {"uid": self.uid, "matches": list(self.matches)}


@dataclass(frozen=True)
class SearchResult:
    """Search hits in corpus order"""
    hits: Tuple[SearchHit, ...] = ()
    query: Optional[SearchQuery] = None

    def __len__(self) -> int:
        return len(self.hits)

    def __iter__(self) -> Iterator[SearchHit]:
        return iter(self.hits)

    def __bool__(self) -> bool:
        return bool(self.hits)

    @property
    def sentence_uids(self) -> List[int]:
        return [hit.uid for hit in self.hits]

    @property
    def token_count(self) -> int:
        """Number of matching tokens across all sentences"""
        return sum(len(hit.matches) for hit in self.hits)


@dataclass(frozen=True)
class ResultPage:
    """One page of a search result"""
    hits: Tuple[SearchHit, ...]
    page: int
    page_size: int
    total: int
    total_pages: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "hits": [hit.to_dict() for hit in self.hits],
            "page": self.page,
            "page_size": self.page_size,
            "total": self.total,
            "total_pages": self.total_pages,
        }


def search(sentences: Iterable[Sentence], query: SearchQuery) -> SearchResult:
    """
    Evaluate a query against the sentence sequence.

    Hits carry the uid assigned by the index builder; sentences that
    were never indexed fall back to their position in `sentences`.
    """
    matcher = compile_matcher(query.pattern, query.case_sensitive, query.substring)
    hits: List[SearchHit] = []

    with timed(logger, "search", pattern=query.pattern):
        if matcher.kind is not MatcherKind.NEVER:
            for offset, sentence in enumerate(sentences):
                uid = sentence.uid if sentence.uid is not None else offset
                if not query.accepts_length(len(sentence.tokens)):
                    continue

                matches = tuple(
                    position
                    for position, token in enumerate(sentence.tokens)
                    if query.accepts_token(token) and matcher.matches(query.subject(token))
                )
                if matches:
                    hits.append(SearchHit(uid, matches))

    logger.info(f"Search {query.pattern!r}: {len(hits)} sentence(s) matched")
    return SearchResult(tuple(hits), query)


def paginate(result: SearchResult, page: int = 1, page_size: int = DEFAULT_PAGE_SIZE) -> ResultPage:
    """
    Slice one page out of a result.

    The page number reported back is clamped to [1, total_pages]; the
    slice itself is taken at the requested page and is empty when that
    page lies beyond the data.
    """
    page_size = max(1, page_size)
    total = len(result.hits)
    total_pages = max(1, math.ceil(total / page_size))

    requested = max(1, page)
    start = (requested - 1) * page_size
    hits = result.hits[start:start + page_size]

    return ResultPage(
        hits=hits,
        page=min(requested, total_pages),
        page_size=page_size,
        total=total,
        total_pages=total_pages,
    )
