"""
TBX Core Models - Treebank Domain Objects

This module defines the immutable records produced by the CoNLL-U parser
and consumed by the index, search and statistics components:

- Token: one annotated word line of a sentence block
- Sentence: one sentence block with its metadata and tokens

Tokens and sentences are never modified after construction. The index
builder derives finalized copies (uid, id, text) with dataclasses.replace.

University of Athens - Nikolaos Lavidas
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Any, Tuple


NO_VALUE = "_"


@dataclass(frozen=True)
class Token:
    """
    A single token line of a CoNLL-U sentence block.

    Only the first eight columns are interpreted; MISC is carried as an
    opaque string. Numeric columns that fail to parse are None.
    """
    id: Optional[int]
    form: str
    lemma: str = ""
    upos: str = ""
    xpos: str = ""
    feats: Dict[str, str] = field(default_factory=dict)
    head: Optional[int] = None
    deprel: str = ""
    misc: str = ""

    @property
    def lemma_or_form(self) -> str:
        """Lemma, falling back to the surface form when absent"""
        if self.lemma and self.lemma != NO_VALUE:
            return self.lemma
        return self.form

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "id": self.id,
            "form": self.form,
            "lemma": self.lemma,
            "upos": self.upos,
            "xpos": self.xpos,
            "feats": dict(self.feats),
            "head": self.head,
            "deprel": self.deprel,
            "misc": self.misc,
        }


@dataclass(frozen=True)
class Sentence:
    """
    A sentence block of a CoNLL-U corpus.

    `uid` is the position of the sentence in the loaded corpus and is
    assigned when the index is built; before that it is None. `id` and
    `text` are finalized at the same time from the metadata.
    """
    tokens: Tuple[Token, ...]
    split: str = ""
    meta: Dict[str, str] = field(default_factory=dict)
    uid: Optional[int] = None
    id: str = ""
    text: str = ""

    def __len__(self) -> int:
        return len(self.tokens)

    @property
    def length(self) -> int:
        """Number of tokens"""
        return len(self.tokens)

    @property
    def forms(self) -> List[str]:
        """Surface forms in token order"""
        return [t.form for t in self.tokens]

    def to_dict(self, include_tokens: bool = True) -> Dict[str, Any]:
        """Convert to dictionary"""
        result: Dict[str, Any] = {
            "uid": self.uid,
            "id": self.id,
            "text": self.text,
            "split": self.split,
            "length": self.length,
            "meta": dict(self.meta),
        }
        if include_tokens:
            result["tokens"] = [t.to_dict() for t in self.tokens]
        return result
