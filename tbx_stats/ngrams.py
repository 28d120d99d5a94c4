"""
TBX Stats N-grams - Contiguous Form N-gram Counts

Counts every window of n consecutive tokens inside each sentence
(windows never cross sentence boundaries) over lower-cased surface
forms joined by a single space. Ties in count keep first-seen order.

University of Athens - Nikolaos Lavidas
"""

from __future__ import annotations
import logging
from collections import Counter
from typing import List, Optional, Sequence, Tuple

from tbx_core.models import Sentence
from tbx_core.logging_monitoring import timed
from tbx_search.token_search import SearchResult

logger = logging.getLogger(__name__)

MIN_N = 1
MAX_N = 5
DEFAULT_N = 2
DEFAULT_TOP = 30


def clamp_order(n: int) -> int:
    """Clamp the n-gram order to [1, 5]"""
    return min(MAX_N, max(MIN_N, n))


def ngram_source(sentences: Sequence[Sentence], result: Optional[SearchResult] = None) -> List[Sentence]:
    """Sentences referenced by a search result, or the whole corpus when it is absent or empty"""
    if result:
        return [sentences[uid] for uid in result.sentence_uids]
    return list(sentences)


def count_ngrams(sentences: Sequence[Sentence], n: int = DEFAULT_N, top: int = DEFAULT_TOP) -> List[Tuple[str, int]]:
    """Return the `top` most frequent n-grams as (ngram, count) pairs"""
    n = clamp_order(n)
    top = max(1, top)
    freq: Counter = Counter()

    with timed(logger, "count ngrams", n=n):
        for sentence in sentences:
            forms = [token.form.lower() for token in sentence.tokens]
            for start in range(len(forms) - n + 1):
                freq[" ".join(forms[start:start + n])] += 1

    logger.debug(f"{len(freq)} distinct {n}-grams")
    return freq.most_common(top)
