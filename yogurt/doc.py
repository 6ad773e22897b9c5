from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union

from .tags import GrammaticalFunction, PartOfSpeech


@dataclass(frozen=True)
class Lexeme:
    """A normalized lexical unit: the raw span it came from plus its canonical value.

    ``start``/``end`` are character offsets into the lexemized text. When a
    special rule expands one span into several lexemes, the first lexeme owns
    the raw span and the others are continuations with an empty raw span.
    """

    raw: str
    norm: str
    start: int = 0
    end: int = 0

    @property
    def is_continuation(self) -> bool:
        return self.raw == "" and self.norm != ""

    def to_dict(self) -> dict:
        return {"raw": self.raw, "norm": self.norm, "start": self.start, "end": self.end}


@dataclass(frozen=True)
class Token:
    """A canonical lemma with its part-of-speech tag."""

    lemma: str
    part_of_speech: PartOfSpeech
    raw: str = ""

    @classmethod
    def from_lexeme(cls, lexeme: Lexeme, part_of_speech: PartOfSpeech) -> "Token":
        return cls(lemma=lexeme.norm, part_of_speech=part_of_speech, raw=lexeme.raw)

    def to_dict(self) -> dict:
        result = {"lemma": self.lemma, "pos": self.part_of_speech.value}
        if self.raw:
            result["raw"] = self.raw
        return result


class _Root(Enum):
    ROOT = "ROOT"

    def __repr__(self) -> str:
        return "ROOT"


# Synthetic governing node with no backing token
ROOT = _Root.ROOT

TokenIndex = Union[int, _Root]


def is_root(index: TokenIndex) -> bool:
    return index is ROOT


def index_to_conllu(index: TokenIndex) -> int:
    """CoNLL-U numbering: ROOT is 0, tokens are 1-based."""
    return 0 if is_root(index) else int(index) + 1


def index_from_conllu(value: int) -> TokenIndex:
    return ROOT if value == 0 else value - 1


@dataclass(frozen=True)
class TokenArc:
    parent: TokenIndex
    child: TokenIndex
    label: GrammaticalFunction

    def to_dict(self) -> dict:
        return {
            "parent": "ROOT" if is_root(self.parent) else self.parent,
            "child": "ROOT" if is_root(self.child) else self.child,
            "label": self.label.value,
        }
