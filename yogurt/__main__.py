from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from tabulate import tabulate

from .config import YogurtConfig
from .conllu import read_conllu, results_to_conllu
from .errors import TaggerConfigurationError, YogurtError
from .pipeline import SentenceAnalysis, YogurtPipeline
from .tagger import UNCONFIGURED_MESSAGE, UnconfiguredTagger

TASK_CHOICES = ("lexemize", "tag", "oracle", "info", "config")
OUTPUT_FORMATS = ("table", "tsv", "json")


def _log(message: str) -> None:
    print(f"[yogurt] {message}", file=sys.stderr)


def _read_input(path: Optional[str]) -> str:
    if not path or path == "-":
        return sys.stdin.read()
    return Path(path).read_text(encoding="utf-8")


def _write_output(path: Optional[str], text: str) -> None:
    if not path or path == "-":
        sys.stdout.write(text)
        return
    Path(path).write_text(text, encoding="utf-8")


def _config_from_args(args: argparse.Namespace) -> YogurtConfig:
    tagger_options: Dict[str, Any] = {}
    for option in ("lexicon", "weights", "tag", "default"):
        value = getattr(args, option, None)
        if value is not None:
            tagger_options[option] = value
    return YogurtConfig.from_settings(
        language=getattr(args, "language", None),
        rules_file=getattr(args, "rules", None),
        rules_url=getattr(args, "rules_url", None),
        tagger=getattr(args, "tagger", None),
        tagger_options=tagger_options or None,
        debug=args.debug or None,
    )


def build_parser() -> argparse.ArgumentParser:
    from . import __version__

    parser = argparse.ArgumentParser(
        prog="yogurt",
        description="Rule-based lexemization and arc-standard dependency parsing.",
    )
    parser.add_argument("-V", "--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--debug", action="store_true", help="Enable verbose debug logging")
    subparsers = parser.add_subparsers(dest="task", required=False)

    parent_parser = argparse.ArgumentParser(add_help=False)
    parent_parser.add_argument("--debug", action="store_true", help="Enable verbose debug logging")

    def add_rules_args(p: argparse.ArgumentParser) -> None:
        p.add_argument("--language", default=None, help="Language code or name of the bundled rule table (default: en)")
        p.add_argument("--rules", default=None, metavar="PATH", help="Custom JSON rule table")
        p.add_argument("--rules-url", default=None, metavar="URL", help="Download a JSON rule table (cached)")

    def add_io_args(p: argparse.ArgumentParser, what: str) -> None:
        p.add_argument("--input", default=None, help=f"{what} (default: STDIN)")
        p.add_argument("--output", default=None, help="Output file (default: STDOUT)")

    # lexemize ----------------------------------------------------------------
    lexemize_parser = subparsers.add_parser(
        "lexemize",
        help="Split text into canonical lexemes, one sentence per line",
        parents=[parent_parser],
    )
    add_io_args(lexemize_parser, "Plain text file, one sentence per line")
    add_rules_args(lexemize_parser)
    lexemize_parser.add_argument("--format", choices=OUTPUT_FORMATS, default="table", help="Output format")

    # tag ---------------------------------------------------------------------
    tag_parser = subparsers.add_parser(
        "tag",
        help="Lexemize and tag text, one sentence per line",
        parents=[parent_parser],
    )
    add_io_args(tag_parser, "Plain text file, one sentence per line")
    add_rules_args(tag_parser)
    tag_parser.add_argument("--format", choices=OUTPUT_FORMATS, default="table", help="Output format")
    tag_parser.add_argument("--tagger", default=None, help="Tagger name (see `yogurt info`)")
    tag_parser.add_argument("--lexicon", default=None, metavar="PATH", help="Lexicon file for the lexicon tagger")
    tag_parser.add_argument("--default", default=None, metavar="TAG", help="Fallback tag for the lexicon tagger")
    tag_parser.add_argument("--weights", default=None, metavar="PATH", help="Weights file for the perceptron tagger")
    tag_parser.add_argument("--tag", default=None, metavar="TAG", help="Tag assigned by the constant tagger")

    # oracle ------------------------------------------------------------------
    oracle_parser = subparsers.add_parser(
        "oracle",
        help="Rebuild CoNLL-U gold trees with the arc-standard static oracle",
        parents=[parent_parser],
    )
    add_io_args(oracle_parser, "CoNLL-U file")
    oracle_parser.add_argument(
        "--max-moves-factor",
        type=int,
        default=None,
        help="Parser move ceiling per token (default: 2)",
    )

    # info --------------------------------------------------------------------
    info_parser = subparsers.add_parser(
        "info",
        help="List taggers and rule-table statistics",
        parents=[parent_parser],
    )
    add_rules_args(info_parser)

    # config ------------------------------------------------------------------
    config_parser = subparsers.add_parser("config", help="Configure yogurt settings", parents=[parent_parser])
    config_parser.add_argument("--set-default-tagger", metavar="NAME", help="Set the default tagger")
    config_parser.add_argument("--set-default-language", metavar="LANG", help="Set the default rule-table language")
    config_parser.add_argument(
        "--set-rules-url",
        metavar="URL",
        help="Set a URL to download the rule table from (empty string to clear)",
    )
    config_parser.add_argument("--show", action="store_true", help="Show current configuration")
    return parser


def _lexeme_rows(analyses: List[SentenceAnalysis]) -> List[List[Any]]:
    rows = []
    for analysis in analyses:
        for lexeme in analysis.lexemes:
            rows.append([analysis.sent_id, lexeme.raw, lexeme.norm, lexeme.start, lexeme.end])
    return rows


def _token_rows(analyses: List[SentenceAnalysis]) -> List[List[Any]]:
    rows = []
    for analysis in analyses:
        for token in analysis.tokens:
            pos = token.part_of_speech
            rows.append([analysis.sent_id, token.raw, token.lemma, pos.value, pos.upos])
    return rows


def _render(analyses: List[SentenceAnalysis], rows: List[List[Any]], headers: List[str], fmt: str) -> str:
    if fmt == "json":
        return json.dumps([analysis.to_dict() for analysis in analyses], indent=2, ensure_ascii=False) + "\n"
    if fmt == "tsv":
        lines = ["\t".join(headers)]
        lines.extend("\t".join(str(value) for value in row) for row in rows)
        return "\n".join(lines) + "\n"
    return tabulate(rows, headers=headers) + "\n"


def _report_failures(analyses: List[SentenceAnalysis]) -> int:
    failed = [analysis for analysis in analyses if analysis.error is not None]
    for analysis in failed:
        _log(f"sentence {analysis.sent_id}: {analysis.error}")
    return 1 if failed else 0


def run_lexemize(args: argparse.Namespace) -> int:
    pipeline = YogurtPipeline(_config_from_args(args))
    text = _read_input(args.input)
    analyses = []
    for n, lexemes in enumerate(pipeline.lexemizer.lexemize_lines(text), start=1):
        line = text[lexemes[0].start:lexemes[-1].end] if lexemes else ""
        analyses.append(SentenceAnalysis(text=line, lexemes=lexemes, sent_id=f"s{n}"))
    rows = _lexeme_rows(analyses)
    _write_output(args.output, _render(analyses, rows, ["sent", "raw", "norm", "start", "end"], args.format))
    return 0


def run_tag(args: argparse.Namespace) -> int:
    pipeline = YogurtPipeline(_config_from_args(args))
    if isinstance(pipeline.tagger, UnconfiguredTagger):
        raise TaggerConfigurationError(UNCONFIGURED_MESSAGE)
    analyses = pipeline.analyze_lines(_read_input(args.input))
    rows = _token_rows(analyses)
    _write_output(args.output, _render(analyses, rows, ["sent", "raw", "lemma", "xpos", "upos"], args.format))
    return _report_failures(analyses)


def run_oracle(args: argparse.Namespace) -> int:
    config = _config_from_args(args)
    if args.max_moves_factor is not None:
        config.max_moves_factor = args.max_moves_factor
    pipeline = YogurtPipeline(config)
    sentences = read_conllu(_read_input(args.input))
    analyses = pipeline.replay_gold_all(sentences)
    parsed = [analysis for analysis in analyses if analysis.parse is not None]
    output = results_to_conllu(
        [analysis.parse for analysis in parsed],
        texts=[analysis.text or None for analysis in parsed],
    )
    _write_output(args.output, output)
    complete = sum(1 for analysis in parsed if analysis.parse.ok)
    _log(
        f"{len(analyses)} sentence(s): {complete} complete, "
        f"{len(parsed) - complete} incomplete, {len(analyses) - len(parsed)} failed"
    )
    return _report_failures(analyses)


def run_info(args: argparse.Namespace) -> int:
    from .tagger import list_taggers

    taggers = list_taggers()
    rows = [
        [name, spec.description, ", ".join(sorted(spec.options)) or "-"]
        for name, spec in sorted(taggers.items())
    ]
    print("Taggers:")
    print(tabulate(rows, headers=["name", "description", "options"]))
    print()
    pipeline = YogurtPipeline(_config_from_args(args))
    stats = pipeline.rules.stats()
    print("Rule table:")
    print(tabulate([[key, value] for key, value in stats.items()], headers=["field", "value"]))
    return 0


def run_config(args: argparse.Namespace) -> int:
    """Run config command to manage yogurt configuration."""
    from .language_utils import resolve_language_code
    from .storage import (
        get_config_file,
        get_default_language,
        get_default_tagger,
        get_rules_url,
        set_default_language,
        set_default_tagger,
        set_rules_url,
    )
    from .tagger import get_tagger_spec

    changed = False
    if args.set_default_tagger:
        if get_tagger_spec(args.set_default_tagger) is None:
            _log(f"Unknown tagger '{args.set_default_tagger}'")
            return 1
        set_default_tagger(args.set_default_tagger)
        _log(f"Default tagger set to: {args.set_default_tagger}")
        changed = True
    if args.set_default_language:
        code = resolve_language_code(args.set_default_language)
        set_default_language(code)
        _log(f"Default language set to: {code}")
        changed = True
    if args.set_rules_url is not None:
        set_rules_url(args.set_rules_url or None)
        if args.set_rules_url:
            _log(f"Rule table URL set to: {args.set_rules_url}")
        else:
            _log("Rule table URL cleared")
        changed = True
    if changed:
        _log(f"Configuration saved to: {get_config_file()}")
        if not args.show:
            return 0

    print("Current yogurt configuration:")
    print(f"  Config file: {get_config_file(create_dir=False)}")
    print(f"  Default tagger: {get_default_tagger() or 'unconfigured'}")
    print(f"  Default language: {get_default_language() or 'en'}")
    print(f"  Rule table URL: {get_rules_url() or '(none)'}")
    return 0


def main(argv: list[str] | None = None) -> int:
    if argv is None:
        argv = sys.argv[1:]
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.task:
        parser.error("No task specified. Use one of: " + ", ".join(TASK_CHOICES))

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.WARNING,
        format="[yogurt] %(levelname)s %(name)s: %(message)s",
    )

    handlers = {
        "lexemize": run_lexemize,
        "tag": run_tag,
        "oracle": run_oracle,
        "info": run_info,
        "config": run_config,
    }
    try:
        return handlers[args.task](args)
    except YogurtError as exc:
        _log(str(exc))
        return 1
    except OSError as exc:
        _log(f"I/O error: {exc}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
