"""
yogurt: rule-based lexemization and arc-standard dependency parsing.

Text is split into canonical lexemes with a longest-match rule table, tagged
with Penn Treebank parts of speech by a pluggable tagger, and turned into a
dependency tree by a shift-reduce parser driven by a move policy.
"""

__version__ = "0.1.0"

from yogurt.config import YogurtConfig
from yogurt.doc import ROOT, Lexeme, Token, TokenArc
from yogurt.errors import YogurtError
from yogurt.lexemizer import Lexemizer, lexemize
from yogurt.parser import (
    Move,
    ParseResult,
    ParserState,
    ParseStatus,
    ScriptedPolicy,
    StaticOracle,
    Transition,
    TransitionParser,
)
from yogurt.pipeline import SentenceAnalysis, YogurtPipeline
from yogurt.rules import RuleTable
from yogurt.tagger import create_tagger
from yogurt.tags import GrammaticalFunction, PartOfSpeech

__all__ = [
    "GrammaticalFunction",
    "Lexeme",
    "Lexemizer",
    "Move",
    "ParseResult",
    "ParseStatus",
    "ParserState",
    "PartOfSpeech",
    "ROOT",
    "RuleTable",
    "ScriptedPolicy",
    "SentenceAnalysis",
    "StaticOracle",
    "Token",
    "TokenArc",
    "Transition",
    "TransitionParser",
    "YogurtConfig",
    "YogurtError",
    "YogurtPipeline",
    "__version__",
    "create_tagger",
    "lexemize",
]
