"""
TBX API App - FastAPI Application

This module provides the FastAPI application serving one corpus
session to a presentation front end.

University of Athens - Nikolaos Lavidas
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from tbx_search.session import CorpusSession

logger = logging.getLogger(__name__)

_app: Optional[FastAPI] = None


@dataclass
class APIConfig:
    """Configuration for the API"""
    title: str = "Treebank Explorer API"

    description: str = "Search, n-gram and collocation queries over a CoNLL-U corpus"

    version: str = "1.0.0"

    debug: bool = False

    cors_origins: List[str] = field(default_factory=lambda: ["*"])

    cors_allow_methods: List[str] = field(default_factory=lambda: ["*"])

    cors_allow_headers: List[str] = field(default_factory=lambda: ["*"])

    api_prefix: str = "/api/v1"

    docs_url: str = "/docs"

    openapi_url: str = "/openapi.json"

    split_sources: Dict[str, str] = field(default_factory=dict)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    logger.info("Starting Treebank Explorer API")

    app.state.initialized = True

    yield

    logger.info("Shutting down Treebank Explorer API")

    app.state.initialized = False


def create_app(config: Optional[APIConfig] = None, session: Optional[CorpusSession] = None) -> FastAPI:
    """Create FastAPI application"""
    global _app

    config = config or APIConfig()

    app = FastAPI(
        title=config.title,
        description=config.description,
        version=config.version,
        debug=config.debug,
        docs_url=config.docs_url,
        openapi_url=config.openapi_url,
        lifespan=lifespan
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_methods=config.cors_allow_methods,
        allow_headers=config.cors_allow_headers,
    )

    app.state.config = config
    app.state.session = session or CorpusSession()

    from tbx_api.routes_corpus import router as corpus_router

    app.include_router(corpus_router, prefix=f"{config.api_prefix}/corpus", tags=["Corpus"])

    @app.get("/")
    async def root():
        """Root endpoint"""
        return {
            "name": config.title,
            "version": config.version,
            "status": "running",
            "docs": config.docs_url
        }

    @app.get("/health")
    async def health():
        """Health check endpoint"""
        return {
            "status": "healthy",
            "version": config.version,
            "corpus_loaded": app.state.session.is_loaded
        }

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        """Handle HTTP exceptions"""
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error": True,
                "message": exc.detail,
                "status_code": exc.status_code
            }
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle general exceptions"""
        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={
                "error": True,
                "message": "Internal server error",
                "status_code": 500
            }
        )

    _app = app

    return app


def get_app() -> Optional[FastAPI]:
    """Get the current FastAPI application"""
    return _app
