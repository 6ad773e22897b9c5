"""
CoNLL-U reading and writing.

Reading yields gold trees that the static oracle can replay; writing turns a
:class:`~yogurt.parser.ParseResult` into the ten-column format. A special-case
expansion ("I'll" -> "i", "will") is written as a multiword token range whose
parts carry the canonical forms.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence

from .doc import Token, TokenIndex, index_from_conllu, index_to_conllu, is_root
from .errors import ConllUError
from .parser import ParseResult
from .tags import UPOS_TO_PTB, GrammaticalFunction, PartOfSpeech

DEFAULT_GENERATOR = "yogurt"


@dataclass
class GoldSentence:
    forms: List[str] = field(default_factory=list)
    lemmas: List[str] = field(default_factory=list)
    upos: List[str] = field(default_factory=list)
    xpos: List[str] = field(default_factory=list)
    heads: List[TokenIndex] = field(default_factory=list)
    deprels: List[str] = field(default_factory=list)
    sent_id: str = ""
    text: str = ""
    meta: Dict[str, str] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.forms)

    def labels(self) -> List[GrammaticalFunction]:
        return [GrammaticalFunction.parse_or_dep(rel) for rel in self.deprels]

    def tokens(self) -> List[Token]:
        """Tokens for the parser: lowercased form as lemma, PTB tag from XPOS or UPOS."""
        tokens = []
        for i, form in enumerate(self.forms):
            tokens.append(Token(lemma=form.lower(), part_of_speech=self._tag(i), raw=form))
        return tokens

    def _tag(self, i: int) -> PartOfSpeech:
        xpos = self.xpos[i]
        if xpos and xpos != "_":
            try:
                return PartOfSpeech.parse(xpos)
            except ValueError:
                pass
        fallback = UPOS_TO_PTB.get(self.upos[i])
        if fallback is None:
            raise ConllUError(
                f"token {i + 1} of sentence '{self.sent_id or '?'}' has no usable XPOS/UPOS "
                f"({xpos!r}/{self.upos[i]!r})"
            )
        return fallback


def read_conllu(conllu_text: str) -> List[GoldSentence]:
    """Parse CoNLL-U text; multiword ranges and empty nodes are skipped."""
    sentences: List[GoldSentence] = []
    current: Optional[GoldSentence] = None

    def _close(line_number: int) -> None:
        nonlocal current
        if current is None:
            return
        if current.forms:
            _check_heads(current, line_number)
            sentences.append(current)
        current = None

    for line_number, raw_line in enumerate(conllu_text.splitlines(), start=1):
        line = raw_line.rstrip("\r\n")
        if not line.strip():
            _close(line_number)
            continue
        if current is None:
            current = GoldSentence()
        if line.startswith("#"):
            key, sep, value = line[1:].partition("=")
            key = key.strip()
            if sep:
                value = value.strip()
                if key == "sent_id":
                    current.sent_id = value
                elif key == "text":
                    current.text = value
                else:
                    current.meta[key] = value
            continue
        cols = line.split("\t")
        if len(cols) != 10:
            raise ConllUError(f"expected 10 tab-separated columns, found {len(cols)}", line_number)
        token_id = cols[0]
        if "-" in token_id or "." in token_id:
            continue
        try:
            position = int(token_id)
        except ValueError:
            raise ConllUError(f"invalid token id {token_id!r}", line_number) from None
        if position != len(current.forms) + 1:
            raise ConllUError(f"token id {position} out of sequence", line_number)
        head_text = cols[6]
        if head_text == "_":
            raise ConllUError(f"token {position} has no head", line_number)
        try:
            head = int(head_text)
        except ValueError:
            raise ConllUError(f"invalid head {head_text!r}", line_number) from None
        current.forms.append(cols[1])
        current.lemmas.append(cols[2])
        current.upos.append(cols[3])
        current.xpos.append(cols[4])
        current.heads.append(index_from_conllu(head))
        current.deprels.append(cols[7])
    _close(len(conllu_text.splitlines()) + 1)
    return sentences


def _check_heads(sentence: GoldSentence, line_number: int) -> None:
    size = len(sentence.forms)
    for i, head in enumerate(sentence.heads):
        if is_root(head):
            continue
        if not 0 <= head < size:
            raise ConllUError(
                f"token {i + 1} of sentence '{sentence.sent_id or '?'}' points to missing head {head + 1}",
                line_number,
            )


def _escape(value: str) -> str:
    return value if value else "_"


def _format_token_line(
    token_id: int,
    token: Token,
    form: str,
    head: Optional[TokenIndex],
    label: Optional[GrammaticalFunction],
) -> str:
    head_value = "_" if head is None else str(index_to_conllu(head))
    deprel = label.value if label is not None else "_"
    misc = "_"
    if token.raw and token.raw != form:
        misc = f"Raw={token.raw}"
    pos = token.part_of_speech
    return (
        f"{token_id}\t{_escape(form)}\t{_escape(token.lemma)}\t{pos.upos}\t{pos.value}\t"
        f"_\t{head_value}\t{deprel}\t_\t{misc}"
    )


def sentence_to_conllu(
    result: ParseResult,
    *,
    sent_id: Optional[str] = None,
    text: Optional[str] = None,
) -> str:
    """Ten-column lines for one parsed sentence, terminated by a blank line."""
    lines: List[str] = []
    if sent_id:
        lines.append(f"# sent_id = {sent_id}")
    if text:
        lines.append(f"# text = {text}")
    if not result.ok:
        lines.append("# incomplete = yes")
    heads = result.heads()
    labels = result.labels()
    tokens = result.tokens
    i = 0
    while i < len(tokens):
        token = tokens[i]
        j = i + 1
        while j < len(tokens) and not tokens[j].raw:
            j += 1
        if j - i > 1 and token.raw:
            # Expansion of one raw span into several canonical forms
            lines.append(f"{i + 1}-{j}\t{token.raw}\t_\t_\t_\t_\t_\t_\t_\t_")
            for k in range(i, j):
                lines.append(_format_token_line(k + 1, tokens[k], tokens[k].lemma, heads[k], labels[k]))
        else:
            for k in range(i, j):
                form = tokens[k].raw or tokens[k].lemma
                lines.append(_format_token_line(k + 1, tokens[k], form, heads[k], labels[k]))
        i = j
    lines.append("")
    return "\n".join(lines) + "\n"


def results_to_conllu(
    results: Iterable[ParseResult],
    *,
    texts: Optional[Sequence[Optional[str]]] = None,
    generator: str = DEFAULT_GENERATOR,
    sent_id_prefix: str = "s",
) -> str:
    parts: List[str] = []
    if generator:
        parts.append(f"# generator = {generator}\n")
    for n, result in enumerate(results, start=1):
        text = texts[n - 1] if texts is not None and n - 1 < len(texts) else None
        parts.append(sentence_to_conllu(result, sent_id=f"{sent_id_prefix}{n}", text=text))
    return "".join(parts)
