"""
TBX API - FastAPI Application Package

This package provides a REST API over one corpus session: loading,
search, n-grams, collocations and frequency lists.

Modules:
    app: FastAPI application
    routes_corpus: Corpus query endpoints

University of Athens - Nikolaos Lavidas
"""

from tbx_api.app import (
    create_app,
    get_app,
    APIConfig,
)

from tbx_api.routes_corpus import router as corpus_router

__version__ = "1.0.0"
__author__ = "Nikolaos Lavidas"

__all__ = [
    "create_app",
    "get_app",
    "APIConfig",
    "corpus_router",
]
