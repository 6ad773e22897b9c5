import pytest

from yogurt.normalization import normalize_key, transliterate, transliterate_char


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("Hello", "hello"),
        ("Café", "cafe"),
        ("NAÏVE", "naive"),
        ("Straße", "strasse"),
        ("I’ll", "i'll"),
        ("“quoted”", '"quoted"'),
        ("wait…", "wait..."),
        ("Œuvre", "oeuvre"),
    ],
)
def test_normalize_key(raw, expected):
    assert normalize_key(raw) == expected


def test_ascii_passes_through():
    assert transliterate("plain ASCII, 123!") == "plain ASCII, 123!"


def test_characters_without_ascii_rendering_are_kept():
    assert normalize_key("Ж") == "ж"
    assert transliterate("漢字") == "漢字"


def test_lone_combining_mark_is_dropped():
    assert transliterate_char("́") == ""
    assert normalize_key("é") == "e"
