"""
TBX Core Errors - Exception Taxonomy

Only RetrievalError is meant to cross the boundary between the corpus
engine and its callers. Malformed rows, failed wildcard patterns and
degenerate statistics are absorbed by the components themselves.

University of Athens - Nikolaos Lavidas
"""

from __future__ import annotations
from typing import Optional


class CorpusError(Exception):
    """Base class for corpus engine errors"""


class RetrievalError(CorpusError):
    """Raised when the raw text of a split cannot be fetched"""
    
    def __init__(self, split: str, source: Optional[str] = None, message: str = ""):
        self.split = split
        self.source = source
        self.message = message
        
        detail = f"Failed to retrieve split '{split}'"
        if source:
            detail += f" from {source}"
        if message:
            detail += f": {message}"
        super().__init__(detail)
    
    def to_dict(self):
        """Convert to dictionary"""
        return {
            "split": self.split,
            "source": self.source,
            "message": self.message,
        }
