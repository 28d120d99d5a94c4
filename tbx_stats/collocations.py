"""
TBX Stats Collocations - Window Co-occurrence Statistics

For a target lemma (or form where the lemma is absent) this module
counts every token type found within a symmetric window around each
target occurrence, without crossing sentence boundaries, and scores
it against corpus-wide marginal frequencies:

    PMI     = log2(c * N / max(1, f(target) * f(ctx)))
    E       = f(target) * f(ctx) / N
    t-score = (c - E) / sqrt(max(1, c))

The t-score divides by sqrt(c), not by the textbook variance term.

University of Athens - Nikolaos Lavidas
"""

from __future__ import annotations
import math
import logging
from collections import Counter
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Any, Iterable, Union

from tbx_core.models import Sentence
from tbx_core.logging_monitoring import timed

logger = logging.getLogger(__name__)

DEFAULT_WINDOW = 2
DEFAULT_TOP = 30


class AssociationMeasure(Enum):
    PMI = "pmi"
    T_SCORE = "t-score"

    @classmethod
    def parse(cls, value: Union[str, "AssociationMeasure"]) -> "AssociationMeasure":
        if isinstance(value, cls):
            return value
        normalized = str(value).strip().lower().replace("_", "-")
        if normalized == "tscore":
            normalized = cls.T_SCORE.value
        try:
            return cls(normalized)
        except ValueError:
            raise ValueError(f"Unknown association measure '{value}'") from None


@dataclass(frozen=True)
class CollocationRow:
    """Association statistics for one context token type"""
    token: str
    count: int
    pmi: float
    t_score: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "token": self.token,
            "count": self.count,
            "pmi": self.pmi,
            "t_score": self.t_score,
        }


def pmi(cooc: int, target_freq: int, ctx_freq: int, total: int) -> float:
    """Pointwise mutual information with a floor of 1 on the marginal product"""
    return math.log2(cooc * total / max(1, target_freq * ctx_freq))


def t_score(cooc: int, target_freq: int, ctx_freq: int, total: int) -> float:
    """Observed minus expected co-occurrence over sqrt(max(1, c))"""
    expected = target_freq * ctx_freq / total if total else 0.0
    return (cooc - expected) / math.sqrt(max(1, cooc))


def find_collocations(
    sentences: Iterable[Sentence],
    target: str,
    window: int = DEFAULT_WINDOW,
    top: int = DEFAULT_TOP,
    measure: Union[str, AssociationMeasure] = AssociationMeasure.PMI
) -> List[CollocationRow]:
    """
    Score the context types of a target within a symmetric window.

    All four columns are computed for every row; `measure` only decides
    the descending sort order (ties keep first-seen order).
    """
    measure = AssociationMeasure.parse(measure)
    target = target.strip().lower()
    if not target:
        return []

    window = max(1, window)
    top = max(1, top)

    total_tokens = 0
    target_count = 0
    marginal: Counter = Counter()
    cooc: Counter = Counter()

    with timed(logger, "collocations", target=target, window=window):
        for sentence in sentences:
            keys = [token.lemma_or_form.lower() for token in sentence.tokens]
            total_tokens += len(keys)
            marginal.update(keys)

            for idx, key in enumerate(keys):
                if key != target:
                    continue
                target_count += 1
                start = max(0, idx - window)
                end = min(len(keys) - 1, idx + window)
                for j in range(start, end + 1):
                    if j != idx:
                        cooc[keys[j]] += 1

    rows = []
    for ctx, count in cooc.items():
        ctx_freq = marginal.get(ctx) or 1
        rows.append(CollocationRow(
            token=ctx,
            count=count,
            pmi=pmi(count, target_count, ctx_freq, total_tokens),
            t_score=t_score(count, target_count, ctx_freq, total_tokens),
        ))

    if measure is AssociationMeasure.PMI:
        rows.sort(key=lambda row: row.pmi, reverse=True)
    else:
        rows.sort(key=lambda row: row.t_score, reverse=True)

    logger.info(f"Collocations for {target!r}: f={target_count}, {len(rows)} context types")
    return rows[:top]
