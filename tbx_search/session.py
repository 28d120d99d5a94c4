"""
TBX Search Session - Published Corpus Snapshots

A CorpusSnapshot bundles the frozen sentence sequence with the index
built from it. A CorpusSession holds the currently published snapshot
and replaces it as a unit: a reload loads and indexes off to the side,
then swaps the reference. Queries holding the previous snapshot keep
working against it.

University of Athens - Nikolaos Lavidas
"""

from __future__ import annotations
import logging
import threading
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Any, Iterable, Mapping, Tuple

from tbx_core.models import Sentence
from tbx_io.corpus_loader import load_corpus, FetchFunction, SplitProgressCallback
from tbx_io.conllu_io import DEFAULT_PROGRESS_INTERVAL
from tbx_search.corpus_index import CorpusIndex, build_index

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CorpusSnapshot:
    """Frozen sentences plus their index"""
    index: CorpusIndex
    splits: Tuple[str, ...] = ()
    loaded_at: datetime = field(default_factory=datetime.now)

    @classmethod
    def from_sentences(cls, sentences: Iterable[Sentence], splits: Iterable[str] = ()) -> "CorpusSnapshot":
        return cls(index=build_index(sentences), splits=tuple(splits))

    @property
    def sentences(self) -> Tuple[Sentence, ...]:
        return self.index.sentences

    def get_sentence(self, uid: int) -> Sentence:
        """Sentence by uid"""
        if uid < 0 or uid >= len(self.sentences):
            raise IndexError(f"No sentence with uid {uid}")
        return self.sentences[uid]

    def summary(self) -> Dict[str, Any]:
        """Corpus overview"""
        per_split = Counter(sentence.split for sentence in self.sentences)
        return {
            "splits": list(self.splits),
            "sentences_per_split": dict(per_split),
            "loaded_at": self.loaded_at.isoformat(),
            **self.index.to_dict(),
        }


class CorpusSession:
    """Holds the published corpus snapshot"""

    def __init__(self, snapshot: Optional[CorpusSnapshot] = None):
        self._snapshot = snapshot
        self._lock = threading.Lock()

    @property
    def snapshot(self) -> Optional[CorpusSnapshot]:
        """Currently published snapshot, None before the first load"""
        return self._snapshot

    @property
    def is_loaded(self) -> bool:
        return self._snapshot is not None

    def publish(self, snapshot: CorpusSnapshot) -> CorpusSnapshot:
        """Replace the published snapshot"""
        with self._lock:
            self._snapshot = snapshot
        logger.info(f"Published corpus snapshot: {snapshot.index.sentence_count} sentences")
        return snapshot

    async def reload(
        self,
        splits: Mapping[str, str],
        fetch: Optional[FetchFunction] = None,
        on_progress: Optional[SplitProgressCallback] = None,
        progress_interval: int = DEFAULT_PROGRESS_INTERVAL
    ) -> CorpusSnapshot:
        """
        Load the given splits, index them and publish the result.

        On RetrievalError the previous snapshot stays published.
        """
        sentences: List[Sentence] = await load_corpus(splits, fetch, on_progress, progress_interval)
        snapshot = CorpusSnapshot.from_sentences(sentences, splits.keys())
        return self.publish(snapshot)
