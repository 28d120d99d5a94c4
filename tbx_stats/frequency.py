"""
TBX Stats Frequency - Frequency Lists and Dependency Arcs

Data behind the frequency charts (top UPOS tags, lemmas, forms) and the
dependency arc view of a single sentence.

University of Athens - Nikolaos Lavidas
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, List, Optional, Any, Tuple

from tbx_core.models import Sentence
from tbx_search.corpus_index import CorpusIndex

FREQUENCY_KINDS = ("upos", "lemma", "form")
DEFAULT_LIMITS = {"upos": 30, "lemma": 25, "form": 25}


@dataclass(frozen=True)
class DependencyArc:
    """A head -> dependent edge, as token positions within the sentence"""
    head: int
    dependent: int
    deprel: str

    def to_dict(self) -> Dict[str, Any]:
        return {"head": self.head, "dependent": self.dependent, "deprel": self.deprel}


def top_frequencies(index: CorpusIndex, kind: str, limit: Optional[int] = None) -> List[Tuple[str, int]]:
    """Most frequent entries of a frequency table, first-seen order on ties"""
    if kind not in FREQUENCY_KINDS:
        raise ValueError(f"Unknown frequency kind '{kind}'. Use one of: {', '.join(FREQUENCY_KINDS)}")
    if limit is None:
        limit = DEFAULT_LIMITS[kind]
    return index.counts(kind).most_common(max(1, limit))


def dependency_arcs(sentence: Sentence) -> List[DependencyArc]:
    """Arcs for every token whose head is an ordinal present in the sentence"""
    positions = {
        token.id: position
        for position, token in enumerate(sentence.tokens)
        if token.id is not None
    }

    arcs = []
    for position, token in enumerate(sentence.tokens):
        if not token.head or token.head < 0 or token.head not in positions:
            continue
        arcs.append(DependencyArc(positions[token.head], position, token.deprel))
    return arcs
