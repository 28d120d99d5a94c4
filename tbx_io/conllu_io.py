"""
TBX IO CoNLL-U - Tolerant CoNLL-U Reader

This module turns the raw text of one corpus split into Sentence
records. The reader never rejects a corpus: token lines with fewer
than eight columns are dropped, unparsable numbers become None and
blocks without token lines produce no sentence.

Reading is exposed as a lazy event stream (ParseProgress and Sentence
items) so that progress reporting stays a side channel of parsing.

University of Athens - Nikolaos Lavidas
"""

from __future__ import annotations
import re
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import (
    Dict, List, Optional, Tuple, Union,
    Callable, Iterator
)

from tbx_core.models import Sentence, Token

logger = logging.getLogger(__name__)


CONLLU_MIN_FIELDS = 8
CONLLU_FIELDS = ["ID", "FORM", "LEMMA", "UPOS", "XPOS", "FEATS", "HEAD", "DEPREL", "DEPS", "MISC"]
MISC_COLUMN = 9
EMPTY_FEATS = ("_", "-")
DEFAULT_PROGRESS_INTERVAL = 500

_LINE_BREAK_RE = re.compile(r"\r\n|\r|\n")
_META_RE = re.compile(r"^#\s*([^=]+)=\s*(.*)$")
_WS_RE = re.compile(r"\s+")

ProgressCallback = Callable[[float], None]


@dataclass(frozen=True)
class ParseProgress:
    """Advisory progress notification for one split"""
    split: str
    fraction: float


@dataclass
class _SentenceBuilder:
    """Accumulator for the sentence block currently being read"""
    split: str
    tokens: List[Token] = field(default_factory=list)
    meta: Dict[str, str] = field(default_factory=dict)

    def build(self) -> Sentence:
        return Sentence(tokens=tuple(self.tokens), split=self.split, meta=dict(self.meta))


def parse_int(value: str) -> Optional[int]:
    """Parse an integer column, None when it is not a number"""
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def parse_feats(feats_str: str) -> Dict[str, str]:
    """
    Parse a FEATS column.

    "Case=Nom|Number=Sing" -> {"Case": "Nom", "Number": "Sing"}.
    "_" and "-" mean no features. Segments missing a key or a value
    are dropped.
    """
    feats: Dict[str, str] = {}
    if not feats_str or feats_str in EMPTY_FEATS:
        return feats

    for segment in feats_str.split("|"):
        key, _, value = segment.partition("=")
        if key and value:
            feats[key] = value
    return feats


def parse_meta(line: str) -> Tuple[Optional[str], str]:
    """Parse a '# key = value' comment line"""
    match = _META_RE.match(line)
    if not match:
        return None, ""

    key = _WS_RE.sub("_", match.group(1).strip())
    if not key:
        return None, ""
    return key, match.group(2).strip()


def parse_token_line(fields: List[str]) -> Token:
    """Build a Token from the columns of a token line"""
    return Token(
        id=parse_int(fields[0]),
        form=fields[1],
        lemma=fields[2],
        upos=fields[3],
        xpos=fields[4],
        feats=parse_feats(fields[5]),
        head=parse_int(fields[6]),
        deprel=fields[7],
        misc=fields[MISC_COLUMN] if len(fields) > MISC_COLUMN else "",
    )


class CoNLLUReader:
    """Reader for CoNLL-U format"""

    def __init__(self, progress_interval: int = DEFAULT_PROGRESS_INTERVAL):
        self.progress_interval = max(1, progress_interval)
        self.malformed_rows = 0

    def iter_events(self, text: str, split: str = "") -> Iterator[Union[ParseProgress, Sentence]]:
        """
        Iterate over parse events of one split.

        Yields Sentence records in source order, interleaved with
        ParseProgress notifications every `progress_interval` lines and
        a final notification of 1.0.
        """
        self.malformed_rows = 0
        lines = _LINE_BREAK_RE.split(text) if text else []
        total = len(lines)
        current: Optional[_SentenceBuilder] = None

        for line_no, line in enumerate(lines):
            if line_no and line_no % self.progress_interval == 0:
                yield ParseProgress(split, line_no / total)

            if not line.strip():
                if current is not None and current.tokens:
                    yield current.build()
                current = None
                continue

            if current is None:
                current = _SentenceBuilder(split)

            if line.startswith("#"):
                key, value = parse_meta(line)
                if key:
                    current.meta[key] = value
                continue

            fields = line.split("\t")
            if len(fields) < CONLLU_MIN_FIELDS:
                self.malformed_rows += 1
                continue

            current.tokens.append(parse_token_line(fields))

        if current is not None and current.tokens:
            yield current.build()

        if self.malformed_rows:
            logger.debug(f"Split '{split}': skipped {self.malformed_rows} malformed rows")

        yield ParseProgress(split, 1.0)

    def read_string(
        self,
        text: str,
        split: str = "",
        on_progress: Optional[ProgressCallback] = None
    ) -> List[Sentence]:
        """Read CoNLL-U text and return its sentences"""
        sentences: List[Sentence] = []
        for event in self.iter_events(text, split):
            if isinstance(event, Sentence):
                sentences.append(event)
            elif on_progress is not None:
                on_progress(event.fraction)
        return sentences

    def read_file(
        self,
        file_path: Union[str, Path],
        split: str = "",
        encoding: str = "utf-8",
        on_progress: Optional[ProgressCallback] = None
    ) -> List[Sentence]:
        """Read a CoNLL-U file and return its sentences"""
        file_path = Path(file_path)

        with open(file_path, "r", encoding=encoding) as f:
            content = f.read()

        return self.read_string(content, split or file_path.stem, on_progress)


def parse_conllu_string(
    text: str,
    split: str = "",
    on_progress: Optional[ProgressCallback] = None
) -> List[Sentence]:
    """Parse CoNLL-U text into sentences"""
    return CoNLLUReader().read_string(text, split, on_progress)


def parse_conllu_file(
    file_path: Union[str, Path],
    split: str = "",
    on_progress: Optional[ProgressCallback] = None
) -> List[Sentence]:
    """Parse a CoNLL-U file into sentences"""
    return CoNLLUReader().read_file(file_path, split, on_progress=on_progress)
