"""
Rule-based lexemization.

Text is split on whitespace and every segment is peeled apart with the rule
table: an exact special-case match consumes whatever is left of the segment,
otherwise the longest prefix or the longest suffix is split off and the loop
continues on the remainder, and anything left unmatched is emitted verbatim.
"""

from __future__ import annotations

import logging
import re
from typing import Iterator, List, Optional

from .doc import Lexeme
from .errors import LexemizationError
from .normalization import normalize_key
from .rules import RuleTable

logger = logging.getLogger(__name__)

_SEGMENT_RE = re.compile(r"\S+")


class Lexemizer:
    """Splits text into canonical lexemes using a shared :class:`RuleTable`."""

    def __init__(self, rules: Optional[RuleTable] = None) -> None:
        self.rules = rules if rules is not None else RuleTable.english()

    def lexemize(self, text: str) -> List[Lexeme]:
        lexemes: List[Lexeme] = []
        for match in _SEGMENT_RE.finditer(text):
            lexemes.extend(self.lexemize_segment(match.group(), offset=match.start()))
        return lexemes

    def lexemize_lines(self, text: str) -> Iterator[List[Lexeme]]:
        """Yield one lexeme list per non-blank line, with offsets into ``text``."""
        offset = 0
        for line in text.splitlines(keepends=True):
            if line.strip():
                yield [
                    lexeme
                    for match in _SEGMENT_RE.finditer(line)
                    for lexeme in self.lexemize_segment(match.group(), offset=offset + match.start())
                ]
            offset += len(line)

    def lexemize_segment(self, segment: str, offset: int = 0) -> List[Lexeme]:
        """
        Lexemize one whitespace-free segment.

        Prefix lexemes are collected in ``head`` and suffix lexemes in
        ``tail`` (in stripping order, i.e. right to left); the final order is
        head, middle, reversed tail, which is the left-to-right order of the
        original text.
        """
        if not segment:
            return []
        head: List[Lexeme] = []
        middle: List[Lexeme] = []
        tail: List[Lexeme] = []
        start = offset
        end = offset + len(segment)
        remainder = segment
        limit = len(segment) + 1
        passes = 0

        while remainder:
            passes += 1
            if passes > limit:
                raise LexemizationError(segment, limit)

            expansion = self.rules.lookup_special(remainder)
            if expansion is not None:
                middle.append(Lexeme(raw=remainder, norm=expansion[0], start=start, end=end))
                middle.extend(Lexeme(raw="", norm=value, start=end, end=end) for value in expansion[1:])
                logger.debug("special %r -> %s", remainder, list(expansion))
                break

            prefix_match = self.rules.longest_prefix_match(remainder)
            if prefix_match is not None:
                prefix, remainder = prefix_match
                head.append(Lexeme(raw=prefix, norm=normalize_key(prefix), start=start, end=start + len(prefix)))
                start += len(prefix)
                continue

            suffix_match = self.rules.longest_suffix_match(remainder)
            if suffix_match is not None:
                suffix, remainder = suffix_match
                tail.append(Lexeme(raw=suffix, norm=normalize_key(suffix), start=end - len(suffix), end=end))
                end -= len(suffix)
                continue

            middle.append(Lexeme(raw=remainder, norm=normalize_key(remainder), start=start, end=end))
            break

        tail.reverse()
        return head + middle + tail


def lexemize(text: str, rules: Optional[RuleTable] = None) -> List[Lexeme]:
    return Lexemizer(rules).lexemize(text)
