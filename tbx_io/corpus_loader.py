"""
TBX IO Corpus Loader - Multi-Split Corpus Retrieval

This module fetches the raw text of each named split (HTTP via aiohttp,
or a local file), parses it and concatenates the splits in request
order. Splits load one after another; the first retrieval failure
aborts the whole load with a RetrievalError naming the split.

University of Athens - Nikolaos Lavidas
"""

from __future__ import annotations
import asyncio
import functools
import logging
from pathlib import Path
from typing import (
    Dict, List, Optional, Iterable, Mapping,
    Callable, Awaitable
)

import aiohttp

from tbx_core.errors import RetrievalError
from tbx_core.models import Sentence
from tbx_core.logging_monitoring import timed
from tbx_io.conllu_io import CoNLLUReader, DEFAULT_PROGRESS_INTERVAL

logger = logging.getLogger(__name__)

DEFAULT_FETCH_TIMEOUT = 60

FetchFunction = Callable[[str], Awaitable[str]]
SplitProgressCallback = Callable[[str, float], None]


def is_remote(source: str) -> bool:
    """True for http(s) sources"""
    return source.startswith(("http://", "https://"))


async def fetch_url(url: str, timeout: float = DEFAULT_FETCH_TIMEOUT) -> str:
    """Fetch the text behind a URL"""
    client_timeout = aiohttp.ClientTimeout(total=timeout)
    async with aiohttp.ClientSession(timeout=client_timeout) as session:
        async with session.get(url) as response:
            response.raise_for_status()
            return await response.text()


async def read_local(path: str, encoding: str = "utf-8") -> str:
    """Read a local file without blocking the event loop"""
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, Path(path).read_text, encoding)


class SourceFetcher:
    """Default retrieval collaborator for local paths and URLs"""

    def __init__(self, timeout: float = DEFAULT_FETCH_TIMEOUT, encoding: str = "utf-8"):
        self.timeout = timeout
        self.encoding = encoding

    async def __call__(self, source: str) -> str:
        if is_remote(source):
            return await fetch_url(source, self.timeout)
        return await read_local(source, self.encoding)


def select_splits(names: Iterable[str], sources: Mapping[str, str]) -> Dict[str, str]:
    """Pick the requested split names out of the configured sources"""
    selected: Dict[str, str] = {}
    for name in names:
        if name not in sources:
            raise ValueError(f"Unknown split '{name}'. Available: {', '.join(sources) or 'none'}")
        selected[name] = sources[name]
    return selected


async def load_corpus(
    splits: Mapping[str, str],
    fetch: Optional[FetchFunction] = None,
    on_progress: Optional[SplitProgressCallback] = None,
    progress_interval: int = DEFAULT_PROGRESS_INTERVAL
) -> List[Sentence]:
    """
    Load and parse several splits into one sentence sequence.

    Args:
        splits: split name -> source (path or URL), loaded in mapping order
        fetch: async retrieval function; defaults to SourceFetcher()
        on_progress: receives (split, fraction) notifications
        progress_interval: lines between progress notifications

    Raises:
        RetrievalError: when a split cannot be fetched
    """
    fetch = fetch or SourceFetcher()
    reader = CoNLLUReader(progress_interval)
    sentences: List[Sentence] = []

    for split, source in splits.items():
        try:
            text = await fetch(source)
        except Exception as e:
            logger.error(f"Retrieval failed for split '{split}' ({source}): {e}")
            raise RetrievalError(split, source, str(e)) from e

        with timed(logger, f"parse split {split}", split=split):
            progress = functools.partial(on_progress, split) if on_progress else None
            split_sentences = reader.read_string(text, split, progress)

        logger.info(f"{split}: parsed {len(split_sentences)} sentences")
        sentences.extend(split_sentences)

    return sentences


def load_corpus_sync(
    splits: Mapping[str, str],
    fetch: Optional[FetchFunction] = None,
    on_progress: Optional[SplitProgressCallback] = None,
    progress_interval: int = DEFAULT_PROGRESS_INTERVAL
) -> List[Sentence]:
    """Blocking wrapper around load_corpus for command line use"""
    return asyncio.run(load_corpus(splits, fetch, on_progress, progress_interval))
