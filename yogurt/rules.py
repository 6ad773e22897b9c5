"""
Rule tables for the lexemizer.

A rule table holds three things: a prefix set, a suffix set and a map of
special-case expansions (``"i'll" -> ("i", "will")``). Tables are loaded from
JSON, normalized once, and never mutated afterwards, so a single instance can
be shared by every lexemization in the process.

JSON layout::

    {
      "language": "en",
      "prefixes": ["(", "...", ...],
      "suffixes": [")", "'s", ...],
      "families": [{"words": [...], "forms": [[ending, [outputs]]], "norms": {...}, "except": {...}}],
      "special": {"n.y.": ["new york"], ...},
      "exact": ["dr.", "e.g.", ...]
    }

Family entries expand to ``special[word + ending] = outputs`` with ``{word}``
replaced by the word (or its entry in ``norms``). Explicit ``special`` and
``exact`` entries override family-generated ones.
"""

from __future__ import annotations

import json
import logging
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from .errors import LanguageNotSupportedError, RuleTableError
from .normalization import normalize_key, transliterate_char

logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).parent / "data"

# ISO 639-1 code -> bundled rule table file
BUILTIN_TABLES: Dict[str, str] = {
    "en": "english.json",
}


def _window_lengths(chars: Iterable[str], limit: int) -> List[int]:
    """
    Cumulative normalized lengths of the first characters of ``chars``.

    ``lengths[i]`` is the normalized length of the first ``i`` characters.
    Scanning stops at the first character that takes the total past
    ``limit``, so only a bounded window of a long segment is normalized.
    """
    lengths = [0]
    for char in chars:
        lengths.append(lengths[-1] + len(transliterate_char(char).lower()))
        if lengths[-1] > limit:
            break
    return lengths


class RuleTable:
    """Immutable prefix / suffix / special-case tables with longest-match lookups."""

    __slots__ = (
        "_language",
        "_name",
        "_prefixes",
        "_suffixes",
        "_special",
        "_max_prefix",
        "_max_suffix",
        "_max_special",
    )

    def __init__(
        self,
        prefixes: Iterable[str],
        suffixes: Iterable[str],
        special: Mapping[str, Sequence[str]],
        *,
        language: str = "",
        name: str = "",
    ) -> None:
        prefix_set = frozenset(self._checked_affixes(prefixes, "prefix"))
        suffix_set = frozenset(self._checked_affixes(suffixes, "suffix"))
        special_map: Dict[str, Tuple[str, ...]] = {}
        for key, values in special.items():
            norm = normalize_key(key)
            if not norm:
                raise RuleTableError(f"special rule key {key!r} is empty after normalization")
            expansion = tuple(values)
            if not expansion or any(not v for v in expansion):
                raise RuleTableError(f"special rule {key!r} must expand to non-empty values")
            existing = special_map.get(norm)
            if existing is not None and existing != expansion:
                raise RuleTableError(
                    f"special rule {key!r} collides with another key normalizing to {norm!r}"
                )
            special_map[norm] = expansion

        object.__setattr__(self, "_language", language)
        object.__setattr__(self, "_name", name)
        object.__setattr__(self, "_prefixes", prefix_set)
        object.__setattr__(self, "_suffixes", suffix_set)
        object.__setattr__(self, "_special", MappingProxyType(special_map))
        object.__setattr__(self, "_max_prefix", max((len(p) for p in prefix_set), default=0))
        object.__setattr__(self, "_max_suffix", max((len(s) for s in suffix_set), default=0))
        object.__setattr__(self, "_max_special", max((len(k) for k in special_map), default=0))

    def __setattr__(self, name, value):
        raise AttributeError("RuleTable is immutable")

    def __delattr__(self, name):
        raise AttributeError("RuleTable is immutable")

    @staticmethod
    def _checked_affixes(values: Iterable[str], kind: str) -> List[str]:
        result = []
        for value in values:
            norm = normalize_key(value)
            if not norm:
                raise RuleTableError(f"empty {kind} in rule table")
            result.append(norm)
        return result

    def __repr__(self) -> str:
        return (
            f"RuleTable(name={self._name!r}, language={self._language!r}, "
            f"prefixes={len(self._prefixes)}, suffixes={len(self._suffixes)}, "
            f"special={len(self._special)})"
        )

    @property
    def language(self) -> str:
        return self._language

    @property
    def name(self) -> str:
        return self._name

    @property
    def prefix_set(self) -> frozenset:
        return self._prefixes

    @property
    def suffix_set(self) -> frozenset:
        return self._suffixes

    @property
    def special_map(self) -> Mapping[str, Tuple[str, ...]]:
        return self._special

    def stats(self) -> Dict[str, object]:
        return {
            "name": self._name,
            "language": self._language,
            "prefixes": len(self._prefixes),
            "suffixes": len(self._suffixes),
            "special": len(self._special),
        }

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def lookup_special(self, segment: str) -> Optional[Tuple[str, ...]]:
        """Exact match of the normalized segment against the special-case map."""
        if not segment:
            return None
        if _window_lengths(segment, self._max_special)[-1] > self._max_special:
            return None
        return self._special.get(normalize_key(segment))

    def longest_prefix_match(self, segment: str) -> Optional[Tuple[str, str]]:
        """
        Return ``(matched_prefix, remainder)`` for the longest prefix of
        ``segment`` whose normalized form is in the prefix set.

        Candidate lengths are scanned from longest to shortest, so ``"..."``
        wins over ``"."`` when both are in the table.
        """
        if not segment or not self._prefixes:
            return None
        leading = _window_lengths(segment, self._max_prefix)
        for i in range(len(leading) - 1, 0, -1):
            if leading[i] > self._max_prefix or leading[i] == 0:
                continue
            candidate = segment[:i]
            if normalize_key(candidate) in self._prefixes:
                return candidate, segment[i:]
        return None

    def longest_suffix_match(self, segment: str) -> Optional[Tuple[str, str]]:
        """
        Return ``(matched_suffix, remainder)`` for the longest suffix of
        ``segment`` whose normalized form is in the suffix set.

        Candidate lengths are scanned from longest to shortest, which is the
        same as scanning start positions left to right.
        """
        if not segment or not self._suffixes:
            return None
        trailing = _window_lengths(reversed(segment), self._max_suffix)
        for j in range(len(trailing) - 1, 0, -1):
            if trailing[j] > self._max_suffix or trailing[j] == 0:
                continue
            i = len(segment) - j
            candidate = segment[i:]
            if normalize_key(candidate) in self._suffixes:
                return candidate, segment[:i]
        return None

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    @classmethod
    def from_dict(cls, data: dict, *, name: Optional[str] = None) -> "RuleTable":
        if not isinstance(data, dict):
            raise RuleTableError("rule table must be a JSON object")
        special: Dict[str, List[str]] = {}
        for family in data.get("families", []):
            special.update(expand_family(family))
        explicit = data.get("special", {})
        if not isinstance(explicit, dict):
            raise RuleTableError("'special' must map keys to lists of canonical values")
        for key, values in explicit.items():
            if isinstance(values, str):
                values = [values]
            special[key] = list(values)
        for key in data.get("exact", []):
            special[key] = [key]
        table = cls(
            data.get("prefixes", []),
            data.get("suffixes", []),
            special,
            language=data.get("language", ""),
            name=name or data.get("name", ""),
        )
        logger.debug("Loaded %r", table)
        return table

    @classmethod
    def from_file(cls, path: Path | str) -> "RuleTable":
        path = Path(path)
        try:
            with path.open("r", encoding="utf-8") as handle:
                data = json.load(handle)
        except FileNotFoundError:
            raise RuleTableError(f"rule table not found: {path}") from None
        except json.JSONDecodeError as exc:
            raise RuleTableError(f"rule table {path} is not valid JSON: {exc}") from exc
        return cls.from_dict(data, name=data.get("name") or path.stem)

    @classmethod
    def english(cls) -> "RuleTable":
        """The bundled English table, shared process-wide."""
        return _load_builtin("en")

    @classmethod
    def for_language(cls, language: str) -> "RuleTable":
        from .language_utils import resolve_language_code

        code = resolve_language_code(language)
        if code not in BUILTIN_TABLES:
            raise LanguageNotSupportedError(
                f"no rule table for language '{language}' (available: {', '.join(sorted(BUILTIN_TABLES))})"
            )
        return _load_builtin(code)


def expand_family(family: dict) -> Dict[str, List[str]]:
    """Expand a contraction family into ``key -> outputs`` special rules."""
    words = family.get("words")
    forms = family.get("forms")
    if not words or not forms:
        raise RuleTableError("rule family needs non-empty 'words' and 'forms'")
    norms = family.get("norms", {})
    excluded = family.get("except", {})
    result: Dict[str, List[str]] = {}
    for form in forms:
        if len(form) != 2:
            raise RuleTableError(f"malformed family form: {form!r}")
        ending, outputs = form
        skip = set(excluded.get(ending, ()))
        for word in words:
            if word in skip:
                continue
            canonical = norms.get(word, word)
            result[word + ending] = [out.replace("{word}", canonical) for out in outputs]
    return result


@lru_cache(maxsize=None)
def _load_builtin(code: str) -> RuleTable:
    filename = BUILTIN_TABLES[code]
    return RuleTable.from_file(DATA_DIR / filename)
