import json

import pytest

from yogurt.errors import LanguageNotSupportedError, RuleTableError
from yogurt.rules import RuleTable, expand_family


@pytest.fixture
def dots():
    return RuleTable(prefixes=[".", "..", "..."], suffixes=[".", "..", "...", "'s"], special={})


def test_longest_prefix_wins(dots):
    assert dots.longest_prefix_match("...hi") == ("...", "hi")
    assert dots.longest_prefix_match("..hi") == ("..", "hi")
    assert dots.longest_prefix_match("hi") is None


def test_longest_suffix_wins(dots):
    assert dots.longest_suffix_match("hi...") == ("...", "hi")
    assert dots.longest_suffix_match("John's") == ("'s", "John")
    assert dots.longest_suffix_match("hi") is None


def test_prefix_may_consume_whole_segment(dots):
    assert dots.longest_prefix_match("...") == ("...", "")


def test_lookups_are_normalized():
    table = RuleTable(prefixes=["“"], suffixes=["’s"], special={"N.Y.": ["new york"]})
    assert '"' in table.prefix_set
    assert table.longest_suffix_match("Bob's") == ("'s", "Bob")
    assert table.longest_suffix_match("Bob’s") == ("’s", "Bob")
    assert table.lookup_special("n.y.") == ("new york",)
    assert table.lookup_special("N.Y.") == ("new york",)
    assert table.lookup_special("") is None


def test_table_is_immutable(dots):
    with pytest.raises(AttributeError):
        dots.language = "fr"
    with pytest.raises(TypeError):
        dots.special_map["x"] = ("y",)
    assert isinstance(dots.prefix_set, frozenset)


def test_empty_keys_rejected():
    with pytest.raises(RuleTableError):
        RuleTable(prefixes=[""], suffixes=[], special={})
    with pytest.raises(RuleTableError):
        RuleTable(prefixes=[], suffixes=[], special={"": ["x"]})
    with pytest.raises(RuleTableError):
        RuleTable(prefixes=[], suffixes=[], special={"x": []})


def test_normalization_collision_rejected():
    with pytest.raises(RuleTableError):
        RuleTable(prefixes=[], suffixes=[], special={"I'll": ["i", "will"], "i’ll": ["ill"]})
    # Same expansion under two spellings is fine
    table = RuleTable(prefixes=[], suffixes=[], special={"I'll": ["i", "will"], "i’ll": ["i", "will"]})
    assert len(table.special_map) == 1


def test_expand_family():
    family = {
        "words": ["ca", "do"],
        "norms": {"ca": "can"},
        "forms": [["n't", ["{word}", "not"]], ["nt", ["{word}", "not"]]],
        "except": {"nt": ["do"]},
    }
    assert expand_family(family) == {
        "can't": ["can", "not"],
        "cant": ["can", "not"],
        "don't": ["do", "not"],
    }


def test_expand_family_requires_words_and_forms():
    with pytest.raises(RuleTableError):
        expand_family({"words": ["a"]})


def test_explicit_entries_override_families():
    table = RuleTable.from_dict(
        {
            "families": [{"words": ["it"], "forms": [["'s", ["{word}", "'s"]]]}],
            "special": {"it's": ["it", "is"]},
            "exact": ["dr."],
        }
    )
    assert table.lookup_special("it's") == ("it", "is")
    assert table.lookup_special("Dr.") == ("dr.",)


def test_from_file(tmp_path):
    path = tmp_path / "tiny.json"
    path.write_text(json.dumps({"prefixes": ["("], "suffixes": [")"], "special": {"gonna": ["going", "to"]}}))
    table = RuleTable.from_file(path)
    assert table.name == "tiny"
    assert table.stats()["special"] == 1


def test_from_file_errors(tmp_path):
    with pytest.raises(RuleTableError):
        RuleTable.from_file(tmp_path / "missing.json")
    bad = tmp_path / "bad.json"
    bad.write_text("{not json")
    with pytest.raises(RuleTableError):
        RuleTable.from_file(bad)


def test_english_is_shared():
    assert RuleTable.english() is RuleTable.english()
    table = RuleTable.english()
    assert table.language == "en"
    assert table.lookup_special("I'll") == ("i", "will")
    assert table.lookup_special("can't") == ("can", "not")
    assert table.lookup_special("won't") == ("will", "not")
    assert table.lookup_special("ain't") == ("am", "not")
    assert table.lookup_special("n.y.") == ("new york",)
    # 'were' is a word, not a contraction
    assert table.lookup_special("were") is None


@pytest.mark.parametrize("language", ["en", "eng", "English"])
def test_for_language_english(language):
    assert RuleTable.for_language(language) is RuleTable.english()


def test_for_language_unsupported():
    with pytest.raises(LanguageNotSupportedError):
        RuleTable.for_language("fr")
    with pytest.raises(LanguageNotSupportedError):
        RuleTable.for_language("klingonese-not-a-language")
