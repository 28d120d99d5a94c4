"""
TBX Search Corpus Index - Inverted Hit Lists and Frequency Tables

This module finalizes a loaded sentence sequence (uid, id and text
defaults) and derives the read-only corpus index from it in a single
pass over the tokens:

- form and lemma hit lists: lower-cased key -> [(uid, position), ...]
- form, lemma and UPOS frequency tables
- observed UPOS tags, dependency relations and feature keys

The index is rebuilt wholesale for every corpus load.

University of Athens - Nikolaos Lavidas
"""

from __future__ import annotations
import logging
from collections import Counter
from dataclasses import dataclass, replace
from typing import Dict, List, FrozenSet, Iterable, Tuple, Any

from tbx_core.models import Sentence
from tbx_core.logging_monitoring import timed

logger = logging.getLogger(__name__)

Hit = Tuple[int, int]


@dataclass(frozen=True)
class CorpusIndex:
    """Read-only index over a frozen sentence sequence"""
    sentences: Tuple[Sentence, ...]
    form_hits: Dict[str, List[Hit]]
    lemma_hits: Dict[str, List[Hit]]
    form_counts: Counter
    lemma_counts: Counter
    upos_counts: Counter
    feat_keys: FrozenSet[str]
    upos_set: FrozenSet[str]
    deprel_set: FrozenSet[str]

    @property
    def sentence_count(self) -> int:
        """Number of indexed sentences"""
        return len(self.sentences)

    @property
    def token_count(self) -> int:
        """Total number of indexed tokens"""
        return sum(self.form_counts.values())

    def hits(self, key: str, by: str = "form") -> List[Hit]:
        """Occurrences of a form or lemma, in corpus order"""
        table = self.lemma_hits if by == "lemma" else self.form_hits
        return list(table.get(key.lower(), []))

    def counts(self, kind: str) -> Counter:
        """Frequency table for 'form', 'lemma' or 'upos'"""
        tables = {
            "form": self.form_counts,
            "lemma": self.lemma_counts,
            "upos": self.upos_counts,
        }
        if kind not in tables:
            raise ValueError(f"Unknown frequency table '{kind}'")
        return tables[kind]

    def filter_options(self) -> Dict[str, List[str]]:
        """Sorted values for populating search filters"""
        return {
            "upos": sorted(self.upos_set),
            "deprel": sorted(self.deprel_set),
            "feat_keys": sorted(self.feat_keys),
        }

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary (summary only)"""
        return {
            "sentences": self.sentence_count,
            "tokens": self.token_count,
            "forms": len(self.form_counts),
            "lemmas": len(self.lemma_counts),
            "upos": len(self.upos_counts),
            "feat_keys": len(self.feat_keys),
            "deprels": len(self.deprel_set),
        }


def finalize_sentences(sentences: Iterable[Sentence]) -> Tuple[Sentence, ...]:
    """Assign uid = position and fill id/text defaults from metadata"""
    finalized = []
    for uid, sentence in enumerate(sentences):
        finalized.append(replace(
            sentence,
            uid=uid,
            id=sentence.id or sentence.meta.get("sent_id") or f"s-{uid}",
            text=sentence.text or sentence.meta.get("text", ""),
        ))
    return tuple(finalized)


def build_index(sentences: Iterable[Sentence]) -> CorpusIndex:
    """Build the corpus index over the loaded sentence sequence"""
    form_hits: Dict[str, List[Hit]] = {}
    lemma_hits: Dict[str, List[Hit]] = {}
    form_counts: Counter = Counter()
    lemma_counts: Counter = Counter()
    upos_counts: Counter = Counter()
    feat_keys = set()
    upos_set = set()
    deprel_set = set()

    with timed(logger, "build index"):
        finalized = finalize_sentences(sentences)

        for sentence in finalized:
            for position, token in enumerate(sentence.tokens):
                form_key = token.form.lower()
                lemma_key = token.lemma_or_form.lower()
                hit = (sentence.uid, position)

                form_hits.setdefault(form_key, []).append(hit)
                lemma_hits.setdefault(lemma_key, []).append(hit)
                form_counts[form_key] += 1
                lemma_counts[lemma_key] += 1

                if token.upos:
                    upos_set.add(token.upos)
                    upos_counts[token.upos] += 1
                if token.deprel:
                    deprel_set.add(token.deprel)
                feat_keys.update(token.feats)

    index = CorpusIndex(
        sentences=finalized,
        form_hits=form_hits,
        lemma_hits=lemma_hits,
        form_counts=form_counts,
        lemma_counts=lemma_counts,
        upos_counts=upos_counts,
        feat_keys=frozenset(feat_keys),
        upos_set=frozenset(upos_set),
        deprel_set=frozenset(deprel_set),
    )
    logger.info(
        f"Index built: {index.sentence_count} sentences, {index.token_count} tokens, "
        f"{len(form_counts)} forms, {len(lemma_counts)} lemmas"
    )
    return index
