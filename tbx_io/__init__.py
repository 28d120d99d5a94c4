"""
TBX IO - Corpus Input

This package reads CoNLL-U corpora and retrieves named splits from
local files or URLs.

Modules:
    conllu_io: Tolerant CoNLL-U reader
    corpus_loader: Sequential multi-split loading

University of Athens - Nikolaos Lavidas
"""

from tbx_io.conllu_io import (
    CoNLLUReader,
    ParseProgress,
    parse_conllu_string,
    parse_conllu_file,
    parse_feats,
)

from tbx_io.corpus_loader import (
    SourceFetcher,
    load_corpus,
    load_corpus_sync,
    select_splits,
)

__version__ = "1.0.0"
__author__ = "Nikolaos Lavidas"

__all__ = [
    "CoNLLUReader",
    "ParseProgress",
    "parse_conllu_string",
    "parse_conllu_file",
    "parse_feats",
    "SourceFetcher",
    "load_corpus",
    "load_corpus_sync",
    "select_splits",
]
