from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Optional, Sequence

from .config import YogurtConfig
from .conllu import GoldSentence
from .doc import Lexeme, Token
from .errors import YogurtError
from .lexemizer import Lexemizer
from .parser import MovePolicy, ParseResult, StaticOracle, TransitionParser
from .rules import RuleTable
from .storage import fetch_rule_table
from .tagger import Tagger, create_tagger, tag_lexemes

logger = logging.getLogger(__name__)

PolicyFactory = Callable[[Sequence[Token]], MovePolicy]


@dataclass
class SentenceAnalysis:
    """Everything produced for one sentence; ``error`` is set when a stage failed."""

    text: str
    lexemes: List[Lexeme] = field(default_factory=list)
    tokens: List[Token] = field(default_factory=list)
    parse: Optional[ParseResult] = None
    error: Optional[YogurtError] = None
    sent_id: str = ""

    @property
    def ok(self) -> bool:
        return self.error is None and (self.parse is None or self.parse.ok)

    def to_dict(self) -> dict:
        result = {
            "text": self.text,
            "lexemes": [lexeme.to_dict() for lexeme in self.lexemes],
            "tokens": [token.to_dict() for token in self.tokens],
        }
        if self.sent_id:
            result["sent_id"] = self.sent_id
        if self.parse is not None:
            result["parse"] = self.parse.to_dict()
        if self.error is not None:
            result["error"] = str(self.error)
        return result


def load_rule_table(config: YogurtConfig) -> RuleTable:
    """Rule table for ``config``: explicit file, then URL, then the bundled table for the language."""
    if config.rules_file is not None:
        return RuleTable.from_file(config.rules_file)
    if config.rules_url:
        return fetch_rule_table(config.rules_url)
    return RuleTable.for_language(config.language)


class YogurtPipeline:
    """Text -> lexemes -> tokens -> arcs.

    The rule table and the tagger are resolved from the config on first use,
    so replaying gold trees needs neither.
    """

    def __init__(
        self,
        config: Optional[YogurtConfig] = None,
        *,
        rules: Optional[RuleTable] = None,
        tagger: Optional[Tagger] = None,
    ) -> None:
        self.config = config or YogurtConfig()
        self._rules = rules
        self._lexemizer: Optional[Lexemizer] = None
        self._tagger = tagger
        self.parser = TransitionParser(max_moves_factor=self.config.max_moves_factor)

    @property
    def rules(self) -> RuleTable:
        if self._rules is None:
            self._rules = load_rule_table(self.config)
            logger.debug("Using rule table %r", self._rules)
        return self._rules

    @property
    def lexemizer(self) -> Lexemizer:
        if self._lexemizer is None:
            self._lexemizer = Lexemizer(self.rules)
        return self._lexemizer

    @property
    def tagger(self) -> Tagger:
        if self._tagger is None:
            self._tagger = create_tagger(self.config.tagger, **self.config.tagger_options)
            logger.debug("Using tagger %s", getattr(self._tagger, "name", self._tagger))
        return self._tagger

    def lexemize(self, text: str) -> List[Lexeme]:
        return self.lexemizer.lexemize(text)

    def tag(self, lexemes: Sequence[Lexeme]) -> List[Token]:
        return tag_lexemes(self.tagger, lexemes)

    def parse(self, tokens: Sequence[Token], policy: MovePolicy) -> ParseResult:
        return self.parser.parse(tokens, policy)

    def analyze(self, text: str, policy: Optional[MovePolicy] = None) -> SentenceAnalysis:
        """
        Run every stage on one sentence. Parsing only happens when a move
        policy is given; errors propagate to the caller.
        """
        analysis = SentenceAnalysis(text=text)
        analysis.lexemes = self.lexemize(text)
        analysis.tokens = self.tag(analysis.lexemes)
        if policy is not None:
            analysis.parse = self.parse(analysis.tokens, policy)
        return analysis

    def analyze_lines(
        self,
        text: str,
        policy_factory: Optional[PolicyFactory] = None,
    ) -> List[SentenceAnalysis]:
        """
        Batch mode: one sentence per non-blank line. A failing sentence keeps
        the stages it completed, records the error and does not stop the batch.
        """
        analyses = []
        for n, line in enumerate((line for line in text.splitlines() if line.strip()), start=1):
            analysis = SentenceAnalysis(text=line.strip(), sent_id=f"s{n}")
            try:
                analysis.lexemes = self.lexemize(line)
                analysis.tokens = self.tag(analysis.lexemes)
                if policy_factory is not None:
                    analysis.parse = self.parse(analysis.tokens, policy_factory(analysis.tokens))
            except YogurtError as exc:
                logger.warning("Sentence %s failed: %s", analysis.sent_id, exc)
                analysis.error = exc
            analyses.append(analysis)
        return analyses

    def replay_gold(self, sentence: GoldSentence) -> SentenceAnalysis:
        """Rebuild a gold tree with the static oracle."""
        analysis = SentenceAnalysis(text=sentence.text, sent_id=sentence.sent_id)
        analysis.tokens = sentence.tokens()
        oracle = StaticOracle(sentence.heads, sentence.labels())
        analysis.parse = self.parse(analysis.tokens, oracle)
        return analysis

    def replay_gold_all(self, sentences: Iterable[GoldSentence]) -> List[SentenceAnalysis]:
        analyses = []
        for sentence in sentences:
            try:
                analyses.append(self.replay_gold(sentence))
            except YogurtError as exc:
                logger.warning("Sentence %s failed: %s", sentence.sent_id or "?", exc)
                analyses.append(SentenceAnalysis(text=sentence.text, sent_id=sentence.sent_id, error=exc))
        return analyses
