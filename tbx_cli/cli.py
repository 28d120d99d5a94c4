"""
TBX CLI - Main Command Line Interface

This module provides the command line front end of the treebank
explorer: load splits, run token searches, count n-grams, compute
collocations, list frequencies and start the API server.

University of Athens - Nikolaos Lavidas
"""

from __future__ import annotations
import logging
import sys
import json
from typing import Dict, Optional, List, Any
import argparse

from tbx_core.config_runtime import RuntimeConfig, get_runtime_config
from tbx_core.errors import RetrievalError
from tbx_core.logging_monitoring import setup_logging
from tbx_io.corpus_loader import load_corpus_sync, select_splits
from tbx_search.session import CorpusSnapshot
from tbx_search.token_search import SearchQuery, MatchTarget, search, paginate
from tbx_stats.ngrams import count_ngrams, ngram_source
from tbx_stats.collocations import find_collocations, AssociationMeasure
from tbx_stats.frequency import top_frequencies, FREQUENCY_KINDS

logger = logging.getLogger(__name__)

EXIT_RETRIEVAL_ERROR = 2


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser"""
    parser = argparse.ArgumentParser(
        prog="tbx",
        description="Treebank Explorer CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  tbx --splits train dev info
  tbx search "run*" --upos VERB --page 2
  tbx search --feat-key Case --feat-value nom --target lemma
  tbx ngrams "cat*" -n 3 --top 20      (n-grams of sentences matching cat*)
  tbx collocations cat --window 1 --measure t-score
  tbx freq upos
  tbx --source train=corpus/train.conllu search dog
  tbx serve --port 8000
        """
    )

    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose output")
    parser.add_argument("--debug", action="store_true", help="Enable debug output")
    parser.add_argument("--json-logs", action="store_true", help="Emit logs as JSON lines")
    parser.add_argument("--config", type=str, help="Path to configuration file")
    parser.add_argument("--version", action="version", version="%(prog)s 1.0.0")

    parser.add_argument(
        "--splits",
        nargs="+",
        help="Split names to load (default: every configured split)"
    )
    parser.add_argument(
        "--source",
        action="append",
        default=[],
        metavar="NAME=PATH_OR_URL",
        help="Add or override a split source"
    )
    parser.add_argument("--format", choices=["table", "json"], default="table", help="Output format")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("info", help="Load the corpus and show a summary")

    search_parser = subparsers.add_parser("search", help="Search tokens")
    add_search_arguments(search_parser)
    search_parser.add_argument("--page", type=int, default=1, help="Result page")
    search_parser.add_argument("--page-size", type=int, help="Sentences per page")

    ngram_parser = subparsers.add_parser("ngrams", help="Count n-grams")
    ngram_parser.add_argument("-n", type=int, help="N-gram order (1-5)")
    ngram_parser.add_argument("--top", type=int, help="Number of n-grams")
    add_search_arguments(ngram_parser)

    colloc_parser = subparsers.add_parser("collocations", help="Collocation statistics")
    colloc_parser.add_argument("target", help="Target lemma or form")
    colloc_parser.add_argument("--window", type=int, help="Window radius")
    colloc_parser.add_argument("--top", type=int, help="Number of collocates")
    colloc_parser.add_argument(
        "--measure",
        choices=[m.value for m in AssociationMeasure],
        help="Sort order"
    )

    freq_parser = subparsers.add_parser("freq", help="Frequency lists")
    freq_parser.add_argument("kind", choices=FREQUENCY_KINDS, help="Frequency table")
    freq_parser.add_argument("--limit", type=int, help="Number of entries")

    server_parser = subparsers.add_parser("serve", help="Start the API server")
    server_parser.add_argument("--host", help="Bind address")
    server_parser.add_argument("--port", type=int, help="Port")

    return parser


def add_search_arguments(parser: argparse.ArgumentParser):
    """Arguments shared by search and ngrams"""
    parser.add_argument("pattern", nargs="?", default="", help="Wildcard pattern (* and ?)")
    parser.add_argument("--target", choices=[t.value for t in MatchTarget], default="form")
    parser.add_argument("--case-sensitive", action="store_true")
    parser.add_argument("--substring", action="store_true", help="Match anywhere inside the token")
    parser.add_argument("--upos", nargs="+", default=[], help="Allowed UPOS tags")
    parser.add_argument("--deprel", nargs="+", default=[], help="Allowed dependency relations")
    parser.add_argument("--feat-key", default="", help="Required feature name")
    parser.add_argument("--feat-value", default="", help="Substring of the feature value")
    parser.add_argument("--len-min", type=int, help="Minimum sentence length")
    parser.add_argument("--len-max", type=int, help="Maximum sentence length")


def build_query(args, config: RuntimeConfig) -> SearchQuery:
    """SearchQuery from parsed arguments"""
    len_min = args.len_min if args.len_min is not None else config.get_setting("search", "len_min", 1)
    len_max = args.len_max if args.len_max is not None else config.get_setting("search", "len_max", 9999)
    return SearchQuery(
        pattern=args.pattern,
        target=MatchTarget(args.target),
        case_sensitive=args.case_sensitive,
        substring=args.substring,
        upos=frozenset(args.upos),
        deprels=frozenset(args.deprel),
        feat_key=args.feat_key,
        feat_value=args.feat_value,
        len_min=len_min,
        len_max=len_max,
    )


def has_search_filters(args) -> bool:
    """True when any search argument narrows the token set"""
    return bool(
        args.pattern or args.upos or args.deprel or args.feat_key
        or args.len_min is not None or args.len_max is not None
    )


def resolve_sources(args, config: RuntimeConfig) -> Dict[str, str]:
    """Configured split sources with command line overrides"""
    sources = config.get_split_sources()
    for item in args.source:
        name, sep, source = item.partition("=")
        if not sep or not name or not source:
            raise ValueError(f"Invalid --source '{item}', expected NAME=PATH_OR_URL")
        sources[name] = source

    names = args.splits or list(sources)
    return select_splits(names, sources)


def load_snapshot(args, config: RuntimeConfig) -> CorpusSnapshot:
    """Load the requested splits and build the index"""
    splits = resolve_sources(args, config)

    def report(split: str, fraction: float):
        logger.info(f"Loading {split}: {int(fraction * 100)}%")

    sentences = load_corpus_sync(
        splits,
        on_progress=report,
        progress_interval=config.get_setting("corpus", "progress_interval", 500)
    )
    return CorpusSnapshot.from_sentences(sentences, splits.keys())


def print_rows(headers: List[str], rows: List[List[Any]], output_format: str):
    """Print rows as an aligned table or JSON"""
    if output_format == "json":
        print(json.dumps([dict(zip(headers, row)) for row in rows], ensure_ascii=False, indent=2))
        return

    if not rows:
        print("No data.")
        return

    cells = [[str(c) for c in row] for row in rows]
    widths = [max(len(h), *(len(row[i]) for row in cells)) for i, h in enumerate(headers)]
    print("  ".join(h.ljust(w) for h, w in zip(headers, widths)))
    print("  ".join("-" * w for w in widths))
    for row in cells:
        print("  ".join(c.ljust(w) for c, w in zip(row, widths)))


def handle_info_command(args, snapshot: CorpusSnapshot):
    """Handle info command"""
    summary = snapshot.summary()
    if args.format == "json":
        print(json.dumps(summary, ensure_ascii=False, indent=2))
        return

    print(f"Splits: {', '.join(summary['splits'])}")
    for split, count in summary["sentences_per_split"].items():
        print(f"  {split}: {count} sentences")
    print(f"Sentences: {summary['sentences']}")
    print(f"Tokens: {summary['tokens']}")
    print(f"Distinct forms: {summary['forms']}, lemmas: {summary['lemmas']}, UPOS: {summary['upos']}")


def handle_search_command(args, snapshot: CorpusSnapshot, config: RuntimeConfig):
    """Handle search command"""
    result = search(snapshot.sentences, build_query(args, config))
    page_size = args.page_size or config.get_setting("search", "page_size", 20)
    page = paginate(result, args.page, page_size)

    if args.format == "json":
        payload = page.to_dict()
        payload["sentences"] = [
            snapshot.sentences[hit.uid].to_dict(include_tokens=False) for hit in page.hits
        ]
        print(json.dumps(payload, ensure_ascii=False, indent=2))
        return

    print(f"{page.total} sentence(s) matched, page {page.page}/{page.total_pages}")
    for hit in page.hits:
        sentence = snapshot.sentences[hit.uid]
        marked = [
            f"[{token.form}]" if position in hit.matches else token.form
            for position, token in enumerate(sentence.tokens)
        ]
        print(f"{sentence.id} | {sentence.split} | {len(sentence)} tokens")
        print(f"  {' '.join(marked)}")


def handle_ngrams_command(args, snapshot: CorpusSnapshot, config: RuntimeConfig):
    """Handle ngrams command"""
    result = search(snapshot.sentences, build_query(args, config)) if has_search_filters(args) else None
    n = args.n if args.n is not None else config.get_setting("ngrams", "n", 2)
    top = args.top if args.top is not None else config.get_setting("ngrams", "top", 30)

    pairs = count_ngrams(ngram_source(snapshot.sentences, result), n, top)
    print_rows(["ngram", "count"], [list(pair) for pair in pairs], args.format)


def handle_collocations_command(args, snapshot: CorpusSnapshot, config: RuntimeConfig):
    """Handle collocations command"""
    window = args.window if args.window is not None else config.get_setting("collocations", "window", 2)
    top = args.top if args.top is not None else config.get_setting("collocations", "top", 30)
    measure = args.measure or config.get_setting("collocations", "measure", "pmi")

    rows = find_collocations(snapshot.sentences, args.target, window, top, measure)
    if args.format == "json":
        print_rows(["token", "count", "pmi", "t_score"], [[r.token, r.count, r.pmi, r.t_score] for r in rows], "json")
    else:
        print_rows(
            ["token", "count", "pmi", "t-score"],
            [[r.token, r.count, f"{r.pmi:.2f}", f"{r.t_score:.2f}"] for r in rows],
            "table"
        )


def handle_freq_command(args, snapshot: CorpusSnapshot):
    """Handle freq command"""
    pairs = top_frequencies(snapshot.index, args.kind, args.limit)
    print_rows([args.kind, "count"], [list(pair) for pair in pairs], args.format)


def handle_server_command(args, config: RuntimeConfig):
    """Handle serve command"""
    import uvicorn
    from tbx_api.app import create_app, APIConfig

    host = args.host or config.get_setting("server", "host", "127.0.0.1")
    port = args.port or config.get_setting("server", "port", 8000)

    app = create_app(APIConfig(split_sources=resolve_sources(args, config)))
    print(f"Starting server on {host}:{port}...")
    uvicorn.run(app, host=host, port=port)


def cli(args: Optional[List[str]] = None) -> int:
    """Main CLI entry point"""
    parser = create_parser()
    parsed_args = parser.parse_args(args)

    setup_logging(parsed_args.verbose, parsed_args.debug, parsed_args.json_logs)

    if not parsed_args.command:
        parser.print_help()
        return 0

    if parsed_args.config:
        RuntimeConfig.reset()
        config = RuntimeConfig(config_file=parsed_args.config)
    else:
        config = get_runtime_config()

    try:
        if parsed_args.command == "serve":
            handle_server_command(parsed_args, config)
            return 0

        snapshot = load_snapshot(parsed_args, config)

        if parsed_args.command == "info":
            handle_info_command(parsed_args, snapshot)
        elif parsed_args.command == "search":
            handle_search_command(parsed_args, snapshot, config)
        elif parsed_args.command == "ngrams":
            handle_ngrams_command(parsed_args, snapshot, config)
        elif parsed_args.command == "collocations":
            handle_collocations_command(parsed_args, snapshot, config)
        elif parsed_args.command == "freq":
            handle_freq_command(parsed_args, snapshot)
        else:
            parser.print_help()

        return 0

    except RetrievalError as e:
        logger.error(str(e))
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_RETRIEVAL_ERROR
    except KeyboardInterrupt:
        print("\nInterrupted.")
        return 130
    except Exception as e:
        logger.error(f"Error: {e}", exc_info=parsed_args.debug)
        print(f"Error: {e}", file=sys.stderr)
        return 1


def main():
    """Main entry point"""
    sys.exit(cli())


if __name__ == "__main__":
    main()
