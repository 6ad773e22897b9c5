"""
Part-of-speech tagging boundary.

Any object with a ``tag(lexemes) -> List[Token]`` method is a tagger. The
pipeline never trusts a tagger blindly: :func:`tag_lexemes` checks that the
result lines up one-to-one with the input. When nothing is configured the
:class:`UnconfiguredTagger` refuses to run instead of inventing tags.

Taggers are created by name through a small registry, so third-party
packages can add their own via the ``yogurt.taggers`` entry-point group.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from importlib import metadata
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Protocol, Sequence, Tuple

from .doc import Lexeme, Token
from .errors import TaggerConfigurationError, TaggerContractError, TaggingError
from .tags import PUNCTUATION_SHAPES, PartOfSpeech

logger = logging.getLogger(__name__)


class Tagger(Protocol):
    """Protocol that every tagger implements."""

    name: str

    def tag(self, lexemes: Sequence[Lexeme]) -> List[Token]:
        """Return one token per lexeme, in the same order."""
        ...


def tag_lexemes(tagger: Tagger, lexemes: Sequence[Lexeme]) -> List[Token]:
    """Run ``tagger`` and enforce the one-token-per-lexeme contract."""
    tokens = list(tagger.tag(lexemes))
    if len(tokens) != len(lexemes):
        raise TaggerContractError(len(lexemes), len(tokens), getattr(tagger, "name", None))
    return tokens


def shape_tag(norm: str) -> Optional[PartOfSpeech]:
    """Tags that follow from the surface shape alone (punctuation, numbers)."""
    if norm in PUNCTUATION_SHAPES:
        return PUNCTUATION_SHAPES[norm]
    if norm in ('"', "'"):
        return PartOfSpeech.RQUOTE
    if norm == "'s":
        return PartOfSpeech.POS
    stripped = norm.replace(",", "").replace(".", "", 1)
    if stripped.isdigit():
        return PartOfSpeech.CD
    return None


def _coerce_tag(value: PartOfSpeech | str, source: str) -> PartOfSpeech:
    """Turn a configured tag into a :class:`PartOfSpeech`, blaming ``source`` on failure."""
    if isinstance(value, PartOfSpeech):
        return value
    if not isinstance(value, str):
        raise TaggerConfigurationError(f"{source}: expected a tag string, got {value!r}")
    try:
        return PartOfSpeech.parse(value)
    except ValueError as exc:
        raise TaggerConfigurationError(f"{source}: {exc}") from None


def _load_json_object(path: Path, what: str) -> Dict[str, Any]:
    try:
        with path.open("r", encoding="utf-8") as handle:
            data = json.load(handle)
    except FileNotFoundError:
        raise TaggerConfigurationError(f"{what} not found: {path}") from None
    except json.JSONDecodeError as exc:
        raise TaggerConfigurationError(f"{what} {path} is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise TaggerConfigurationError(f"{what} {path} must be a JSON object")
    return data


UNCONFIGURED_MESSAGE = (
    "No tagger configured. Choose one with --tagger or "
    "`yogurt config --set-default-tagger NAME`."
)


class UnconfiguredTagger:
    """Placeholder that fails fast: silently wrong tags would corrupt parses."""

    name = "unconfigured"

    def tag(self, lexemes: Sequence[Lexeme]) -> List[Token]:
        raise TaggerConfigurationError(UNCONFIGURED_MESSAGE)


class ConstantTagger:
    """Assigns the same tag to every lexeme."""

    name = "constant"

    def __init__(self, tag: PartOfSpeech | str = PartOfSpeech.NN) -> None:
        self.part_of_speech = _coerce_tag(tag, "constant tagger")

    def tag(self, lexemes: Sequence[Lexeme]) -> List[Token]:
        return [Token.from_lexeme(lexeme, self.part_of_speech) for lexeme in lexemes]


class LexiconTagger:
    """Table lookup on the canonical form, with shape rules and an optional default."""

    name = "lexicon"

    def __init__(
        self,
        lexicon: Mapping[str, PartOfSpeech | str],
        default: Optional[PartOfSpeech | str] = None,
        use_shape: bool = True,
    ) -> None:
        self.lexicon: Dict[str, PartOfSpeech] = {
            word.lower(): _coerce_tag(tag, f"lexicon entry {word!r}") for word, tag in lexicon.items()
        }
        self.default = None if default is None else _coerce_tag(default, "default tag")
        self.use_shape = use_shape

    @classmethod
    def from_file(cls, path: Path | str, **kwargs: Any) -> "LexiconTagger":
        path = Path(path)
        data = _load_json_object(path, "lexicon")
        if "default" in data and "default" not in kwargs:
            kwargs["default"] = data["default"]
        lexicon = data.get("lexicon", {k: v for k, v in data.items() if k != "default"})
        if not isinstance(lexicon, dict):
            raise TaggerConfigurationError(f"lexicon {path}: 'lexicon' must map words to tags")
        return cls(lexicon, **kwargs)

    def lookup(self, norm: str) -> Optional[PartOfSpeech]:
        tag = self.lexicon.get(norm)
        if tag is None and self.use_shape:
            tag = shape_tag(norm)
        return tag if tag is not None else self.default

    def tag(self, lexemes: Sequence[Lexeme]) -> List[Token]:
        tokens = []
        for lexeme in lexemes:
            tag = self.lookup(lexeme.norm)
            if tag is None:
                raise TaggingError(f"'{lexeme.norm}' is not in the lexicon and no default tag is set")
            tokens.append(Token.from_lexeme(lexeme, tag))
        return tokens


def _word_shape(word: str) -> str:
    shape = []
    for char in word:
        if char.isupper():
            kind = "X"
        elif char.islower():
            kind = "x"
        elif char.isdigit():
            kind = "d"
        else:
            kind = char
        if not shape or shape[-1] != kind:
            shape.append(kind)
    return "".join(shape)


class PerceptronTagger:
    """
    Greedy left-to-right averaged-perceptron tagger.

    Only inference is provided; weights come from a JSON file of the form
    ``{"tags": [...], "weights": {feature: {tag: weight}}, "tagdict": {word: tag}}``.
    Unambiguous words listed in ``tagdict`` bypass the model.
    """

    name = "perceptron"
    START = ("-START-", "-START2-")
    END = ("-END-", "-END2-")

    def __init__(
        self,
        weights: Mapping[str, Mapping[str, float]],
        tags: Sequence[PartOfSpeech | str],
        tagdict: Optional[Mapping[str, PartOfSpeech | str]] = None,
    ) -> None:
        if not tags:
            raise TaggerConfigurationError("perceptron tagger needs a non-empty tag set")
        if not isinstance(weights, Mapping):
            raise TaggerConfigurationError("perceptron weights must map features to per-tag weights")
        self.tags: Tuple[PartOfSpeech, ...] = tuple(_coerce_tag(t, "perceptron tag set") for t in tags)
        self.weights: Dict[str, Dict[PartOfSpeech, float]] = {}
        for feature, by_tag in weights.items():
            try:
                self.weights[feature] = {
                    _coerce_tag(tag, f"weights of {feature!r}"): float(w) for tag, w in by_tag.items()
                }
            except (AttributeError, TypeError, ValueError) as exc:
                raise TaggerConfigurationError(f"malformed weights for feature {feature!r}: {exc}") from exc
        self.tagdict: Dict[str, PartOfSpeech] = {
            word: _coerce_tag(t, f"tagdict entry {word!r}") for word, t in (tagdict or {}).items()
        }

    @classmethod
    def from_file(cls, path: Path | str) -> "PerceptronTagger":
        data = _load_json_object(Path(path), "perceptron weights")
        return cls(data.get("weights", {}), data.get("tags", []), data.get("tagdict"))

    @staticmethod
    def features(
        i: int,
        word: str,
        context: Sequence[str],
        prev: str,
        prev2: str,
        surface: Optional[str] = None,
    ) -> Dict[str, int]:
        """
        Feature set for position ``i``; ``context`` is padded with START/END markers.

        ``surface`` is the raw spelling used for the shape feature, since
        ``word`` is already lowercased.
        """
        feats: Dict[str, int] = {}

        def add(name: str, *args: str) -> None:
            key = " ".join((name,) + tuple(args))
            feats[key] = feats.get(key, 0) + 1

        i += len(PerceptronTagger.START)
        add("bias")
        add("i suffix", word[-3:])
        add("i pref1", word[:1])
        add("i shape", _word_shape(surface or word))
        add("i-1 tag", prev)
        add("i-2 tag", prev2)
        add("i tag+i-2 tag", prev, prev2)
        add("i word", context[i])
        add("i-1 tag+i word", prev, context[i])
        add("i-1 word", context[i - 1])
        add("i-1 suffix", context[i - 1][-3:])
        add("i-2 word", context[i - 2])
        add("i+1 word", context[i + 1])
        add("i+1 suffix", context[i + 1][-3:])
        add("i+2 word", context[i + 2])
        return feats

    def predict(self, feats: Mapping[str, int]) -> PartOfSpeech:
        scores: Dict[PartOfSpeech, float] = {tag: 0.0 for tag in self.tags}
        for feat, value in feats.items():
            by_tag = self.weights.get(feat)
            if not by_tag or value == 0:
                continue
            for tag, weight in by_tag.items():
                if tag in scores:
                    scores[tag] += value * weight
        # Ties go to the tag listed first
        return max(self.tags, key=lambda tag: scores[tag])

    def tag(self, lexemes: Sequence[Lexeme]) -> List[Token]:
        words = [lexeme.norm for lexeme in lexemes]
        context = list(self.START) + words + list(self.END)
        prev, prev2 = self.START
        tokens = []
        for i, lexeme in enumerate(lexemes):
            tag = self.tagdict.get(lexeme.norm)
            if tag is None:
                # Continuations have no raw span of their own
                feats = self.features(i, lexeme.norm, context, prev, prev2, surface=lexeme.raw or lexeme.norm)
                tag = self.predict(feats)
            tokens.append(Token.from_lexeme(lexeme, tag))
            prev2 = prev
            prev = tag.value
        return tokens


# ----------------------------------------------------------------------
# Registry
# ----------------------------------------------------------------------

TaggerFactory = Callable[..., Tagger]


@dataclass(frozen=True)
class TaggerSpec:
    """Specification describing how to instantiate and expose a tagger."""

    name: str
    description: str
    factory: TaggerFactory
    options: Dict[str, str] = field(default_factory=dict)
    is_hidden: bool = False


_TAGGER_REGISTRY: Dict[str, TaggerSpec] = {}
_ENTRY_POINTS_LOADED = False


def register_tagger(spec: TaggerSpec) -> None:
    """Register a tagger in the registry."""
    _TAGGER_REGISTRY[spec.name.lower()] = spec


def _load_entry_point_taggers() -> None:
    global _ENTRY_POINTS_LOADED
    if _ENTRY_POINTS_LOADED:
        return
    _ENTRY_POINTS_LOADED = True
    try:
        eps = metadata.entry_points().select(group="yogurt.taggers")
    except Exception as exc:  # pragma: no cover - depends on runtime env
        logger.debug("Unable to read tagger entry points: %s", exc)
        return
    for ep in eps:
        try:
            spec = ep.load()
        except Exception as exc:
            logger.warning("Failed to load tagger entry point '%s': %s", ep.name, exc)
            continue
        if not isinstance(spec, TaggerSpec):
            logger.warning("Entry point '%s' did not return a TaggerSpec instance", ep.name)
            continue
        if spec.name.lower() in _TAGGER_REGISTRY:
            logger.warning("Entry point '%s' shadows built-in tagger '%s'; ignored", ep.name, spec.name)
            continue
        register_tagger(spec)


def get_tagger_spec(name: str) -> Optional[TaggerSpec]:
    _load_entry_point_taggers()
    return _TAGGER_REGISTRY.get(name.lower())


def list_taggers(include_hidden: bool = False) -> Dict[str, TaggerSpec]:
    _load_entry_point_taggers()
    if include_hidden:
        return dict(_TAGGER_REGISTRY)
    return {name: spec for name, spec in _TAGGER_REGISTRY.items() if not spec.is_hidden}


def create_tagger(name: Optional[str], **options: Any) -> Tagger:
    """Instantiate a registered tagger; options with value ``None`` are dropped."""
    if not name:
        return UnconfiguredTagger()
    spec = get_tagger_spec(name)
    if spec is None:
        available = ", ".join(sorted(list_taggers()))
        raise TaggerConfigurationError(f"Unknown tagger '{name}'. Available: {available}")
    kwargs = {key: value for key, value in options.items() if value is not None}
    try:
        return spec.factory(**kwargs)
    except TypeError as exc:
        raise TaggerConfigurationError(f"Invalid options for tagger '{name}': {exc}") from exc


def _lexicon_factory(lexicon: Optional[str] = None, default: Optional[str] = None, **kwargs: Any) -> LexiconTagger:
    if not lexicon:
        raise TaggerConfigurationError("The lexicon tagger needs a lexicon file (--lexicon)")
    if default is not None:
        kwargs["default"] = default
    return LexiconTagger.from_file(lexicon, **kwargs)


def _perceptron_factory(weights: Optional[str] = None) -> PerceptronTagger:
    if not weights:
        raise TaggerConfigurationError("The perceptron tagger needs a weights file (--weights)")
    return PerceptronTagger.from_file(weights)


register_tagger(
    TaggerSpec(
        name="unconfigured",
        description="Refuses to tag; used when no tagger is configured.",
        factory=UnconfiguredTagger,
        is_hidden=True,
    )
)
register_tagger(
    TaggerSpec(
        name="constant",
        description="Assigns one fixed tag to every lexeme.",
        factory=ConstantTagger,
        options={"tag": "Penn Treebank tag to assign (default NN)"},
    )
)
register_tagger(
    TaggerSpec(
        name="lexicon",
        description="Looks tags up in a JSON lexicon, with punctuation/number shape rules.",
        factory=_lexicon_factory,
        options={"lexicon": "path to a JSON word->tag lexicon", "default": "tag for unknown words"},
    )
)
register_tagger(
    TaggerSpec(
        name="perceptron",
        description="Greedy averaged-perceptron tagger loaded from a JSON weights file.",
        factory=_perceptron_factory,
        options={"weights": "path to the JSON weights file"},
    )
)
