"""
TBX Stats - Corpus Statistics

Modules:
    ngrams: Contiguous n-gram counts
    collocations: PMI and t-score collocation statistics
    frequency: Frequency lists and dependency arcs

University of Athens - Nikolaos Lavidas
"""

from tbx_stats.ngrams import count_ngrams, ngram_source

from tbx_stats.collocations import (
    AssociationMeasure,
    CollocationRow,
    find_collocations,
)

from tbx_stats.frequency import (
    DependencyArc,
    top_frequencies,
    dependency_arcs,
)

__all__ = [
    "count_ngrams",
    "ngram_source",
    "AssociationMeasure",
    "CollocationRow",
    "find_collocations",
    "DependencyArc",
    "top_frequencies",
    "dependency_arcs",
]
