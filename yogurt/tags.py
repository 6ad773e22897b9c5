"""
Closed tag vocabularies.

``PartOfSpeech`` holds the Penn Treebank tag set (Jurafsky & Martin, SLP3
chapter 8). ``GrammaticalFunction`` holds dependency labels. The two are kept
apart: a part-of-speech tag is never accepted as an arc label.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, Optional

# Standard UD UPOS tags
STANDARD_UPOS = {
    "ADJ", "ADP", "ADV", "AUX", "CCONJ", "DET", "INTJ", "NOUN", "NUM",
    "PART", "PRON", "PROPN", "PUNCT", "SCONJ", "SYM", "VERB", "X",
}


class PartOfSpeech(Enum):
    CC = "CC"          # coordinating conjunction
    CD = "CD"          # cardinal number
    DT = "DT"          # determiner
    EX = "EX"          # existential there
    FW = "FW"          # foreign word
    IN = "IN"          # preposition/subordinating conjunction
    JJ = "JJ"          # adjective
    JJR = "JJR"        # comparative adjective
    JJS = "JJS"        # superlative adjective
    LS = "LS"          # list item marker
    MD = "MD"          # modal
    NN = "NN"          # singular or mass noun
    NNS = "NNS"        # noun plural
    NNP = "NNP"        # proper noun, singular
    NNPS = "NNPS"      # proper noun, plural
    PDT = "PDT"        # predeterminer
    POS = "POS"        # possessive ending
    PRP = "PRP"        # personal pronoun
    PRP_S = "PRP$"     # possessive pronoun
    RB = "RB"          # adverb
    RBR = "RBR"        # comparative adverb
    RBS = "RBS"        # superlative adverb
    RP = "RP"          # particle
    SYM = "SYM"        # symbol
    TO = "TO"          # to
    UH = "UH"          # interjection
    VB = "VB"          # verb base form
    VBD = "VBD"        # verb past tense
    VBG = "VBG"        # verb gerund
    VBN = "VBN"        # verb past participle
    VBP = "VBP"        # verb non-3sg present
    VBZ = "VBZ"        # verb 3sg present
    WDT = "WDT"        # wh-determiner
    WP = "WP"          # wh-pronoun
    WP_S = "WP$"       # wh-possessive
    WRB = "WRB"        # wh-adverb
    DOLLAR = "$"
    HASH = "#"
    LQUOTE = "``"
    RQUOTE = "''"
    LPAREN = "-LRB-"
    RPAREN = "-RRB-"
    COMMA = ","
    ENDPUNC = "."
    MIDPUNC = ":"

    @classmethod
    def parse(cls, value: str) -> "PartOfSpeech":
        """Look up a tag by PTB string (``PRP$``) or member name (``PRP_S``)."""
        text = value.strip()
        try:
            return cls(text)
        except ValueError:
            pass
        try:
            return cls[text.upper()]
        except KeyError:
            raise ValueError(f"Unknown part-of-speech tag: {value!r}") from None

    @property
    def upos(self) -> str:
        return PTB_TO_UPOS[self]


class GrammaticalFunction(Enum):
    ROOT = "root"
    DEP = "dep"          # unspecified dependency
    # Clausal argument relations
    NSUBJ = "nsubj"      # nominal subject
    DOBJ = "obj"         # direct object
    IOBJ = "iobj"        # indirect object
    CCOMP = "ccomp"      # clausal complement
    XCOMP = "xcomp"      # open clausal complement
    # Nominal modifier relations
    NMOD = "nmod"        # nominal modifier
    AMOD = "amod"        # adjectival modifier
    NUMMOD = "nummod"    # numeric modifier
    APPOS = "appos"      # appositional modifier
    DET = "det"          # determiner
    ADVMOD = "advmod"    # adverbial modifier
    OBL = "obl"          # oblique nominal
    CASE = "case"        # case marker
    # Other notable relations
    AUX = "aux"
    COP = "cop"
    MARK = "mark"
    COMPOUND = "compound"
    CONJ = "conj"        # conjunct
    CC = "cc"            # coordinating conjunction
    PUNCT = "punct"

    @classmethod
    def parse(cls, value: str) -> "GrammaticalFunction":
        """Look up a label by UD relation (``nsubj``, ``obl:tmod``) or member name."""
        text = value.strip()
        base = text.split(":", 1)[0].lower()
        if base == "dobj":
            base = "obj"
        try:
            return cls(base)
        except ValueError:
            pass
        try:
            return cls[text.upper()]
        except KeyError:
            raise ValueError(f"Unknown grammatical function: {value!r}") from None

    @classmethod
    def parse_or_dep(cls, value: Optional[str]) -> "GrammaticalFunction":
        if not value or value == "_":
            return cls.DEP
        try:
            return cls.parse(value)
        except ValueError:
            return cls.DEP


PTB_TO_UPOS: Dict[PartOfSpeech, str] = {
    PartOfSpeech.CC: "CCONJ",
    PartOfSpeech.CD: "NUM",
    PartOfSpeech.DT: "DET",
    PartOfSpeech.EX: "PRON",
    PartOfSpeech.FW: "X",
    PartOfSpeech.IN: "ADP",
    PartOfSpeech.JJ: "ADJ",
    PartOfSpeech.JJR: "ADJ",
    PartOfSpeech.JJS: "ADJ",
    PartOfSpeech.LS: "X",
    PartOfSpeech.MD: "AUX",
    PartOfSpeech.NN: "NOUN",
    PartOfSpeech.NNS: "NOUN",
    PartOfSpeech.NNP: "PROPN",
    PartOfSpeech.NNPS: "PROPN",
    PartOfSpeech.PDT: "DET",
    PartOfSpeech.POS: "PART",
    PartOfSpeech.PRP: "PRON",
    PartOfSpeech.PRP_S: "PRON",
    PartOfSpeech.RB: "ADV",
    PartOfSpeech.RBR: "ADV",
    PartOfSpeech.RBS: "ADV",
    PartOfSpeech.RP: "ADP",
    PartOfSpeech.SYM: "SYM",
    PartOfSpeech.TO: "PART",
    PartOfSpeech.UH: "INTJ",
    PartOfSpeech.VB: "VERB",
    PartOfSpeech.VBD: "VERB",
    PartOfSpeech.VBG: "VERB",
    PartOfSpeech.VBN: "VERB",
    PartOfSpeech.VBP: "VERB",
    PartOfSpeech.VBZ: "VERB",
    PartOfSpeech.WDT: "DET",
    PartOfSpeech.WP: "PRON",
    PartOfSpeech.WP_S: "PRON",
    PartOfSpeech.WRB: "ADV",
    PartOfSpeech.DOLLAR: "SYM",
    PartOfSpeech.HASH: "SYM",
    PartOfSpeech.LQUOTE: "PUNCT",
    PartOfSpeech.RQUOTE: "PUNCT",
    PartOfSpeech.LPAREN: "PUNCT",
    PartOfSpeech.RPAREN: "PUNCT",
    PartOfSpeech.COMMA: "PUNCT",
    PartOfSpeech.ENDPUNC: "PUNCT",
    PartOfSpeech.MIDPUNC: "PUNCT",
}

# Shape-based tags for single punctuation lexemes
PUNCTUATION_SHAPES: Dict[str, PartOfSpeech] = {
    ".": PartOfSpeech.ENDPUNC,
    "..": PartOfSpeech.ENDPUNC,
    "...": PartOfSpeech.ENDPUNC,
    "?": PartOfSpeech.ENDPUNC,
    "!": PartOfSpeech.ENDPUNC,
    ",": PartOfSpeech.COMMA,
    ";": PartOfSpeech.MIDPUNC,
    ":": PartOfSpeech.MIDPUNC,
    "(": PartOfSpeech.LPAREN,
    ")": PartOfSpeech.RPAREN,
    "$": PartOfSpeech.DOLLAR,
    "#": PartOfSpeech.HASH,
    "&": PartOfSpeech.CC,
    "@": PartOfSpeech.SYM,
}

# Coarse fallback when a treebank carries no Penn Treebank XPOS
UPOS_TO_PTB: Dict[str, PartOfSpeech] = {
    "ADJ": PartOfSpeech.JJ,
    "ADP": PartOfSpeech.IN,
    "ADV": PartOfSpeech.RB,
    "AUX": PartOfSpeech.MD,
    "CCONJ": PartOfSpeech.CC,
    "DET": PartOfSpeech.DT,
    "INTJ": PartOfSpeech.UH,
    "NOUN": PartOfSpeech.NN,
    "NUM": PartOfSpeech.CD,
    "PART": PartOfSpeech.RP,
    "PRON": PartOfSpeech.PRP,
    "PROPN": PartOfSpeech.NNP,
    "PUNCT": PartOfSpeech.ENDPUNC,
    "SCONJ": PartOfSpeech.IN,
    "SYM": PartOfSpeech.SYM,
    "VERB": PartOfSpeech.VB,
    "X": PartOfSpeech.FW,
}
