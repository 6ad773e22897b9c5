"""
Arc-standard shift-reduce dependency parser.

The parser state is a queue of unattached token indices, a stack that starts
as ``[ROOT]``, and one head slot per token. Three moves change it:

* SHIFT      - move the front of the queue onto the stack
* LEFT-ARC   - top of the stack governs the item below it, which is removed
* RIGHT-ARC  - item below the top governs the top, which is popped

Which move to take is decided by a :class:`MovePolicy` (an oracle, a
classifier, or a fixed script); the parser only checks legality.
Pseudocode follows Nivre's arc-standard system
(https://www.diva-portal.org/smash/get/diva2:661423/FULLTEXT01.pdf).
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Deque, Dict, Iterable, Iterator, List, Optional, Protocol, Sequence, Tuple

from .doc import ROOT, Token, TokenArc, TokenIndex, is_root
from .errors import (
    IllegalMoveError,
    InvalidLabelError,
    MoveLimitExceededError,
    ParserConfigurationError,
    TreeInvariantError,
)
from .tags import GrammaticalFunction

logger = logging.getLogger(__name__)


class Move(Enum):
    SHIFT = "SHIFT"
    LEFT_ARC = "LEFT-ARC"
    RIGHT_ARC = "RIGHT-ARC"


@dataclass(frozen=True)
class Transition:
    move: Move
    label: Optional[GrammaticalFunction] = None

    def __post_init__(self) -> None:
        if self.move is Move.SHIFT:
            if self.label is not None:
                raise InvalidLabelError("SHIFT does not take a label")
        elif not isinstance(self.label, GrammaticalFunction):
            raise InvalidLabelError(
                f"{self.move.value} needs a GrammaticalFunction label, got {self.label!r}"
            )

    def __str__(self) -> str:
        if self.label is None:
            return self.move.value
        return f"{self.move.value}:{self.label.value}"

    @classmethod
    def parse(cls, text: str) -> "Transition":
        """Parse ``SHIFT``, ``LEFT-ARC:nsubj`` or ``RIGHT-ARC:root`` style strings."""
        name, _, label = text.strip().partition(":")
        key = name.strip().upper().replace("_", "-")
        try:
            move = Move(key)
        except ValueError:
            raise ValueError(f"Unknown move: {text!r}") from None
        if move is Move.SHIFT:
            return cls(move)
        return cls(move, GrammaticalFunction.parse(label) if label else GrammaticalFunction.DEP)


SHIFT = Transition(Move.SHIFT)


def left_arc(label: GrammaticalFunction) -> Transition:
    return Transition(Move.LEFT_ARC, label)


def right_arc(label: GrammaticalFunction) -> Transition:
    return Transition(Move.RIGHT_ARC, label)


def _check_label(label: object) -> GrammaticalFunction:
    if not isinstance(label, GrammaticalFunction):
        raise InvalidLabelError(
            f"arc labels must be GrammaticalFunction values, got {type(label).__name__} {label!r}"
        )
    return label


class ParserState:
    """Queue, stack and head slots for one sentence.

    ``heads[i]`` holds ``(parent, label)`` once token ``i`` has been attached;
    a token leaves the stack the moment it gets a head, so no token can be
    recorded as a child twice.
    """

    def __init__(self, size: int) -> None:
        if size < 0:
            raise ValueError("sentence size must be non-negative")
        self.size = size
        self.queue: Deque[int] = deque(range(size))
        self.stack: List[TokenIndex] = [ROOT]
        self.heads: List[Optional[Tuple[TokenIndex, GrammaticalFunction]]] = [None] * size
        self.history: List[Transition] = []

    def __repr__(self) -> str:
        return f"ParserState(stack={self.stack!r}, queue={list(self.queue)!r}, attached={self.attached_count})"

    @property
    def attached_count(self) -> int:
        return sum(1 for head in self.heads if head is not None)

    @property
    def is_terminal(self) -> bool:
        return not self.queue and len(self.stack) == 1 and is_root(self.stack[0])

    @property
    def arcs(self) -> Tuple[TokenArc, ...]:
        """Arcs ordered by child index."""
        return tuple(
            TokenArc(parent=head[0], child=child, label=head[1])
            for child, head in enumerate(self.heads)
            if head is not None
        )

    def dangling(self) -> Tuple[int, ...]:
        """Token indices that have no governor."""
        return tuple(i for i, head in enumerate(self.heads) if head is None)

    def can_shift(self) -> bool:
        return bool(self.queue)

    def can_left_arc(self) -> bool:
        return len(self.stack) >= 2 and not is_root(self.stack[-2])

    def can_right_arc(self) -> bool:
        return len(self.stack) >= 2

    def valid_moves(self) -> List[Move]:
        valid = []
        if self.can_shift():
            valid.append(Move.SHIFT)
        if self.can_left_arc():
            valid.append(Move.LEFT_ARC)
        if self.can_right_arc():
            valid.append(Move.RIGHT_ARC)
        return valid

    def shift(self) -> None:
        if not self.queue:
            raise IllegalMoveError("SHIFT", "the queue is empty")
        self.stack.append(self.queue.popleft())
        self.history.append(SHIFT)

    def left_arc(self, label: GrammaticalFunction) -> TokenArc:
        label = _check_label(label)
        if len(self.stack) < 2:
            raise IllegalMoveError("LEFT-ARC", "the stack holds fewer than two entries")
        child = self.stack[-2]
        if is_root(child):
            raise IllegalMoveError("LEFT-ARC", "ROOT cannot become a child")
        parent = self.stack[-1]
        arc = self._attach(parent, child, label)
        del self.stack[-2]
        self.history.append(Transition(Move.LEFT_ARC, label))
        return arc

    def right_arc(self, label: GrammaticalFunction) -> TokenArc:
        label = _check_label(label)
        if len(self.stack) < 2:
            raise IllegalMoveError("RIGHT-ARC", "the stack holds fewer than two entries")
        parent = self.stack[-2]
        # ROOT is always at the bottom, so the top of a two-entry stack is a token
        child = self.stack[-1]
        arc = self._attach(parent, child, label)
        self.stack.pop()
        self.history.append(Transition(Move.RIGHT_ARC, label))
        return arc

    def apply(self, transition: Transition) -> Optional[TokenArc]:
        if transition.move is Move.SHIFT:
            self.shift()
            return None
        if transition.move is Move.LEFT_ARC:
            return self.left_arc(transition.label)
        return self.right_arc(transition.label)

    def _attach(self, parent: TokenIndex, child: TokenIndex, label: GrammaticalFunction) -> TokenArc:
        if is_root(child):
            raise TreeInvariantError("ROOT cannot be a child")
        if self.heads[child] is not None:
            raise TreeInvariantError(f"token {child} already has a head", nodes=(child,))
        self.heads[child] = (parent, label)
        return TokenArc(parent=parent, child=child, label=label)


class MovePolicy(Protocol):
    """Chooses the next transition; ``None`` means the policy has nothing more to do."""

    def next_transition(self, state: ParserState) -> Optional[Transition]:
        ...


class ScriptedPolicy:
    """Replays a fixed sequence of transitions."""

    def __init__(self, transitions: Iterable[Transition | str]) -> None:
        self.transitions: List[Transition] = [
            t if isinstance(t, Transition) else Transition.parse(t) for t in transitions
        ]
        self._iter: Iterator[Transition] = iter(self.transitions)

    def next_transition(self, state: ParserState) -> Optional[Transition]:
        return next(self._iter, None)


class StaticOracle:
    """
    Arc-standard static oracle over a gold tree.

    ``heads[i]`` is the gold head of token ``i`` (``ROOT`` or a token index),
    ``labels[i]`` its gold label. Non-projective trees cannot be produced by
    arc-standard; the oracle then returns ``None`` and the parse ends
    incomplete.
    """

    def __init__(
        self,
        heads: Sequence[TokenIndex],
        labels: Optional[Sequence[GrammaticalFunction]] = None,
    ) -> None:
        self.heads = list(heads)
        self.labels = list(labels) if labels is not None else [GrammaticalFunction.DEP] * len(self.heads)
        if len(self.labels) != len(self.heads):
            raise ValueError("heads and labels must have the same length")
        self._children: Dict[TokenIndex, List[int]] = {}
        for child, head in enumerate(self.heads):
            self._children.setdefault(head, []).append(child)

    def _has_all_children(self, state: ParserState, node: TokenIndex) -> bool:
        return all(state.heads[child] is not None for child in self._children.get(node, ()))

    def next_transition(self, state: ParserState) -> Optional[Transition]:
        if len(state.heads) != len(self.heads):
            raise ValueError("oracle and parser state disagree on sentence length")
        if len(state.stack) >= 2:
            top = state.stack[-1]
            second = state.stack[-2]
            if not is_root(second) and self.heads[second] == top:
                return Transition(Move.LEFT_ARC, self.labels[second])
            if self.heads[top] == second and self._has_all_children(state, top):
                return Transition(Move.RIGHT_ARC, self.labels[top])
        if state.queue:
            return SHIFT
        return None


class ParseStatus(Enum):
    COMPLETE = "complete"
    INCOMPLETE = "incomplete"


@dataclass(frozen=True)
class ParseResult:
    """Outcome of parsing one sentence.

    An ``INCOMPLETE`` result keeps whatever arcs were built and lists the
    tokens left without a governor in ``dangling``.
    """

    tokens: Tuple[Token, ...]
    arcs: Tuple[TokenArc, ...]
    status: ParseStatus
    dangling: Tuple[int, ...] = ()
    transitions: Tuple[Transition, ...] = field(default_factory=tuple)

    @property
    def ok(self) -> bool:
        return self.status is ParseStatus.COMPLETE

    def heads(self) -> List[Optional[TokenIndex]]:
        result: List[Optional[TokenIndex]] = [None] * len(self.tokens)
        for arc in self.arcs:
            result[arc.child] = arc.parent
        return result

    def labels(self) -> List[Optional[GrammaticalFunction]]:
        result: List[Optional[GrammaticalFunction]] = [None] * len(self.tokens)
        for arc in self.arcs:
            result[arc.child] = arc.label
        return result

    def to_dict(self) -> dict:
        return {
            "status": self.status.value,
            "tokens": [token.to_dict() for token in self.tokens],
            "arcs": [arc.to_dict() for arc in self.arcs],
            "dangling": list(self.dangling),
            "transitions": [str(t) for t in self.transitions],
        }


def validate_tree(arcs: Iterable[TokenArc], size: int) -> None:
    """
    Check that ``arcs`` form one tree over ``size`` tokens rooted at ROOT:
    every token is a child exactly once, ROOT is never a child, and
    following heads from any token reaches ROOT without a cycle.
    """
    heads: Dict[int, TokenIndex] = {}
    for arc in arcs:
        if is_root(arc.child):
            raise TreeInvariantError("ROOT appears as a child")
        if not 0 <= arc.child < size:
            raise TreeInvariantError(f"child index {arc.child} out of range", nodes=(arc.child,))
        if not is_root(arc.parent) and not 0 <= arc.parent < size:
            raise TreeInvariantError(f"parent index {arc.parent} out of range", nodes=(arc.parent,))
        if arc.child in heads:
            raise TreeInvariantError(f"token {arc.child} has more than one head", nodes=(arc.child,))
        heads[arc.child] = arc.parent
    missing = [i for i in range(size) if i not in heads]
    if missing:
        raise TreeInvariantError(f"tokens without a head: {missing}", nodes=missing)
    reaches_root = set()
    for start in range(size):
        path = []
        node: TokenIndex = start
        while not is_root(node) and node not in reaches_root:
            if node in path:
                cycle = path[path.index(node):]
                raise TreeInvariantError(f"cycle through tokens {cycle}", nodes=cycle)
            path.append(node)
            node = heads[node]
        reaches_root.update(path)


class TransitionParser:
    """Drives a :class:`ParserState` with a move policy until it terminates."""

    def __init__(self, max_moves_factor: int = 2) -> None:
        # A complete arc-standard parse takes exactly 2n moves; smaller factors cap partial parses
        if isinstance(max_moves_factor, bool) or not isinstance(max_moves_factor, int):
            raise ParserConfigurationError(
                f"max_moves_factor must be an integer, got {max_moves_factor!r}"
            )
        if max_moves_factor < 1:
            raise ParserConfigurationError(f"max_moves_factor must be at least 1, got {max_moves_factor}")
        self.max_moves_factor = max_moves_factor

    def move_limit(self, size: int) -> int:
        return self.max_moves_factor * size

    def parse(self, tokens: Sequence[Token], policy: MovePolicy) -> ParseResult:
        state = ParserState(len(tokens))
        limit = self.move_limit(len(tokens))
        while not state.is_terminal:
            transition = policy.next_transition(state)
            if transition is None:
                break
            if len(state.history) >= limit:
                raise MoveLimitExceededError(limit, len(tokens))
            state.apply(transition)
            logger.debug("%s -> %r", transition, state)
        return self.finish(tokens, state)

    @staticmethod
    def finish(tokens: Sequence[Token], state: ParserState) -> ParseResult:
        arcs = state.arcs
        if state.is_terminal:
            validate_tree(arcs, len(tokens))
            return ParseResult(
                tokens=tuple(tokens),
                arcs=arcs,
                status=ParseStatus.COMPLETE,
                transitions=tuple(state.history),
            )
        dangling = state.dangling()
        logger.warning(
            "Incomplete parse: %d of %d tokens without a governor", len(dangling), len(tokens)
        )
        return ParseResult(
            tokens=tuple(tokens),
            arcs=arcs,
            status=ParseStatus.INCOMPLETE,
            dangling=dangling,
            transitions=tuple(state.history),
        )
