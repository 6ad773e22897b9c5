from __future__ import annotations

import re
from typing import Dict, Optional

import pycountry

from .errors import LanguageNotSupportedError

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def _normalize_name(value: str) -> str:
    return _NON_ALNUM.sub("", value.lower())


_LANGUAGE_BY_CODE: Dict[str, object] = {}
_LANGUAGE_BY_NAME: Dict[str, object] = {}
for _lang in pycountry.languages:
    for _attr in ("alpha_2", "alpha_3", "bibliographic", "terminology"):
        _code = getattr(_lang, _attr, None)
        if _code:
            _LANGUAGE_BY_CODE.setdefault(_code.lower(), _lang)
    for _attr in ("name", "common_name", "inverted_name"):
        _name = getattr(_lang, _attr, None)
        if _name:
            _LANGUAGE_BY_NAME.setdefault(_normalize_name(_name), _lang)


def _lookup_language(value: str):
    key = value.strip().lower()
    if key in _LANGUAGE_BY_CODE:
        return _LANGUAGE_BY_CODE[key]
    normalized = _normalize_name(value)
    if normalized in _LANGUAGE_BY_NAME:
        return _LANGUAGE_BY_NAME[normalized]
    try:
        return pycountry.languages.lookup(value.strip())
    except LookupError:
        return None


def resolve_language_code(value: Optional[str]) -> str:
    """
    Resolve a language code or name to its ISO 639-1 code.

    ``"en"``, ``"eng"`` and ``"English"`` all resolve to ``"en"``. Languages
    without a two-letter code resolve to their three-letter code.

    Raises:
        LanguageNotSupportedError: if pycountry does not know the language.
    """
    if not value or not value.strip():
        raise LanguageNotSupportedError("no language given")
    lang = _lookup_language(value)
    if lang is None:
        raise LanguageNotSupportedError(f"unknown language '{value}'")
    code = getattr(lang, "alpha_2", None) or getattr(lang, "alpha_3")
    return code.lower()
