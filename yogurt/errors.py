"""
Exception hierarchy for yogurt.

Library code raises these; the command-line driver turns them into a
``[yogurt]`` message on stderr and a non-zero exit status.
"""

from __future__ import annotations

from typing import Optional, Sequence


class YogurtError(Exception):
    """Base class for all yogurt errors."""


class RuleTableError(YogurtError):
    """A rule table could not be loaded or is internally inconsistent."""


class LanguageNotSupportedError(YogurtError):
    """No rule table is available for the requested language."""


class LexemizationError(YogurtError):
    """The per-segment lexemization loop failed to make progress."""

    def __init__(self, segment: str, iterations: int) -> None:
        super().__init__(
            f"lexemization of segment {segment!r} did not terminate after {iterations} passes"
        )
        self.segment = segment
        self.iterations = iterations


class TaggerConfigurationError(YogurtError):
    """No usable tagger is configured, or its configuration is malformed."""


class TaggerContractError(YogurtError):
    """A tagger returned a token sequence that does not line up with its input."""

    def __init__(self, expected: int, actual: int, tagger: Optional[str] = None) -> None:
        who = f"tagger '{tagger}'" if tagger else "tagger"
        super().__init__(f"{who} returned {actual} tokens for {expected} lexemes")
        self.expected = expected
        self.actual = actual
        self.tagger = tagger


class ParserError(YogurtError):
    """Base class for transition parser failures."""


class ParserConfigurationError(ParserError):
    """The parser was set up with an unusable setting."""


class IllegalMoveError(ParserError):
    """A move was attempted whose precondition does not hold."""

    def __init__(self, move: str, reason: str) -> None:
        super().__init__(f"illegal {move}: {reason}")
        self.move = move
        self.reason = reason


class InvalidLabelError(ParserError):
    """An arc label is not a grammatical function."""


class TreeInvariantError(ParserError):
    """The accumulated arcs do not form a single tree rooted at ROOT."""

    def __init__(self, message: str, nodes: Sequence[int] = ()) -> None:
        super().__init__(message)
        self.nodes = tuple(nodes)


class MoveLimitExceededError(ParserError):
    """The move-selection policy exceeded the move ceiling for the sentence."""

    def __init__(self, limit: int, tokens: int) -> None:
        super().__init__(f"move ceiling of {limit} reached for a sentence of {tokens} tokens")
        self.limit = limit
        self.tokens = tokens


class ConllUError(YogurtError):
    """Malformed CoNLL-U input."""

    def __init__(self, message: str, line_number: Optional[int] = None) -> None:
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)
        self.line_number = line_number


class TaggingError(YogurtError):
    """A configured tagger could not assign a tag to a lexeme."""
