"""
TBX API Routes Corpus - Corpus Query Endpoints

This module provides REST API endpoints for loading a corpus and
running search, n-gram, collocation and frequency queries over the
published snapshot of the application's corpus session.

University of Athens - Nikolaos Lavidas
"""

from __future__ import annotations
import logging
from typing import Dict, List, Optional, Any

from fastapi import APIRouter, HTTPException, Query, Path, Request
from pydantic import BaseModel, Field

from tbx_core.config_runtime import get_runtime_config
from tbx_core.errors import RetrievalError
from tbx_io.corpus_loader import select_splits
from tbx_search.session import CorpusSession, CorpusSnapshot
from tbx_search.token_search import SearchQuery, MatchTarget, search, paginate
from tbx_stats.ngrams import count_ngrams, ngram_source
from tbx_stats.collocations import find_collocations
from tbx_stats.frequency import top_frequencies, dependency_arcs, FREQUENCY_KINDS

logger = logging.getLogger(__name__)

router = APIRouter()


def get_session(request: Request) -> CorpusSession:
    """Corpus session of the running application"""
    return request.app.state.session


def require_snapshot(request: Request) -> CorpusSnapshot:
    """Published snapshot, 409 when no corpus has been loaded"""
    snapshot = get_session(request).snapshot
    if snapshot is None:
        raise HTTPException(status_code=409, detail="No corpus loaded")
    return snapshot


class LoadRequest(BaseModel):
    """Schema for loading splits"""
    splits: Optional[List[str]] = Field(None, description="Split names to load, every configured split when omitted")
    sources: Optional[Dict[str, str]] = Field(None, description="Split name to path or URL, overrides configuration")


class SearchRequest(BaseModel):
    """Schema for a token search"""
    pattern: str = Field("", description="Wildcard pattern, empty matches every filtered token")
    target: MatchTarget = Field(MatchTarget.FORM, description="Match against form or lemma")
    case_sensitive: bool = False
    substring: bool = False
    upos: List[str] = Field(default_factory=list)
    deprels: List[str] = Field(default_factory=list)
    feat_key: str = ""
    feat_value: str = ""
    len_min: int = Field(1, ge=0)
    len_max: int = Field(9999, ge=0)
    page: int = Field(1, ge=1)
    page_size: int = Field(20, ge=1, le=500)

    def to_query(self) -> SearchQuery:
        return SearchQuery(
            pattern=self.pattern,
            target=self.target,
            case_sensitive=self.case_sensitive,
            substring=self.substring,
            upos=frozenset(self.upos),
            deprels=frozenset(self.deprels),
            feat_key=self.feat_key,
            feat_value=self.feat_value,
            len_min=self.len_min,
            len_max=self.len_max,
        )


class NgramRequest(BaseModel):
    """Schema for n-gram counts"""
    n: int = Field(2, description="N-gram order, clamped to 1..5")
    top: int = Field(30, ge=1)
    search: Optional[SearchRequest] = Field(None, description="Restrict to the sentences matched by this search")


class CollocationRequest(BaseModel):
    """Schema for collocation statistics"""
    target: str = Field(..., description="Target lemma or form")
    window: int = Field(2, ge=1)
    top: int = Field(30, ge=1)
    measure: str = Field("pmi", description="'pmi' or 't-score'")


class SearchHitResponse(BaseModel):
    """Schema for one matched sentence"""
    uid: int
    id: str
    split: str
    text: str
    forms: List[str]
    matches: List[int]


class SearchResponse(BaseModel):
    """Schema for a page of search results"""
    total: int
    page: int
    page_size: int
    total_pages: int
    hits: List[SearchHitResponse]


@router.post("/load")
async def load(request: Request, body: LoadRequest):
    """Load splits and publish a new snapshot"""
    sources = (
        body.sources
        or request.app.state.config.split_sources
        or get_runtime_config().get_split_sources()
    )
    try:
        splits = select_splits(body.splits or list(sources), sources)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    try:
        snapshot = await get_session(request).reload(splits)
    except RetrievalError as e:
        raise HTTPException(status_code=502, detail=str(e))

    return snapshot.summary()


@router.get("/summary")
async def summary(request: Request):
    """Overview of the loaded corpus"""
    return require_snapshot(request).summary()


@router.get("/filters")
async def filters(request: Request):
    """Values for the UPOS, deprel and feature filters"""
    return require_snapshot(request).index.filter_options()


@router.post("/search", response_model=SearchResponse)
async def run_search(request: Request, body: SearchRequest):
    """Search tokens and return one page of matching sentences"""
    snapshot = require_snapshot(request)
    result = search(snapshot.sentences, body.to_query())
    page = paginate(result, body.page, body.page_size)

    hits = []
    for hit in page.hits:
        sentence = snapshot.sentences[hit.uid]
        hits.append(SearchHitResponse(
            uid=hit.uid,
            id=sentence.id,
            split=sentence.split,
            text=sentence.text,
            forms=sentence.forms,
            matches=list(hit.matches),
        ))

    return SearchResponse(
        total=page.total,
        page=page.page,
        page_size=page.page_size,
        total_pages=page.total_pages,
        hits=hits,
    )


@router.post("/ngrams")
async def ngrams(request: Request, body: NgramRequest):
    """Most frequent n-grams of the corpus or of a search result"""
    snapshot = require_snapshot(request)
    result = search(snapshot.sentences, body.search.to_query()) if body.search else None
    pairs = count_ngrams(ngram_source(snapshot.sentences, result), body.n, body.top)
    return [{"ngram": ngram, "count": count} for ngram, count in pairs]


@router.post("/collocations")
async def collocations(request: Request, body: CollocationRequest):
    """Collocates of a target with PMI and t-score"""
    snapshot = require_snapshot(request)
    try:
        rows = find_collocations(snapshot.sentences, body.target, body.window, body.top, body.measure)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return [row.to_dict() for row in rows]


@router.get("/frequencies/{kind}")
async def frequencies(
    request: Request,
    kind: str = Path(..., description="upos, lemma or form"),
    limit: Optional[int] = Query(None, ge=1, le=1000, description="Maximum entries")
):
    """Frequency list for charts"""
    if kind not in FREQUENCY_KINDS:
        raise HTTPException(status_code=404, detail=f"Unknown frequency kind '{kind}'")
    snapshot = require_snapshot(request)
    return [{"value": value, "count": count} for value, count in top_frequencies(snapshot.index, kind, limit)]


@router.get("/sentences/{uid}")
async def get_sentence(request: Request, uid: int = Path(..., ge=0)) -> Dict[str, Any]:
    """Sentence with tokens and dependency arcs"""
    snapshot = require_snapshot(request)
    try:
        sentence = snapshot.get_sentence(uid)
    except IndexError:
        raise HTTPException(status_code=404, detail=f"Sentence {uid} not found")

    result = sentence.to_dict()
    result["arcs"] = [arc.to_dict() for arc in dependency_arcs(sentence)]
    return result
