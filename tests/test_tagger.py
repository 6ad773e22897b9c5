import json

import pytest

from yogurt.doc import Lexeme, Token
from yogurt.errors import TaggerConfigurationError, TaggerContractError, TaggingError
from yogurt.lexemizer import lexemize
from yogurt.tagger import (
    ConstantTagger,
    LexiconTagger,
    PerceptronTagger,
    TaggerSpec,
    UnconfiguredTagger,
    create_tagger,
    get_tagger_spec,
    list_taggers,
    register_tagger,
    shape_tag,
    tag_lexemes,
)
from yogurt.tags import PartOfSpeech


class _DroppingTagger:
    name = "dropping"

    def tag(self, lexemes):
        return [Token.from_lexeme(lexeme, PartOfSpeech.NN) for lexeme in lexemes[:-1]]


def test_contract_enforced():
    lexemes = lexemize("two words")
    with pytest.raises(TaggerContractError) as excinfo:
        tag_lexemes(_DroppingTagger(), lexemes)
    assert excinfo.value.expected == 2
    assert excinfo.value.actual == 1
    assert "dropping" in str(excinfo.value)


def test_constant_tagger_keeps_lemma_and_raw():
    tokens = tag_lexemes(ConstantTagger("VB"), lexemize("I'll go"))
    assert [t.lemma for t in tokens] == ["i", "will", "go"]
    assert [t.raw for t in tokens] == ["I'll", "", "go"]
    assert {t.part_of_speech for t in tokens} == {PartOfSpeech.VB}


def test_unconfigured_tagger_refuses():
    with pytest.raises(TaggerConfigurationError):
        UnconfiguredTagger().tag(lexemize("hi"))


@pytest.mark.parametrize(
    "norm, tag",
    [(",", PartOfSpeech.COMMA), ("...", PartOfSpeech.ENDPUNC), ("'s", PartOfSpeech.POS),
     ("3.50", PartOfSpeech.CD), ("1,000", PartOfSpeech.CD), ("dog", None)],
)
def test_shape_tag(norm, tag):
    assert shape_tag(norm) is tag


def test_lexicon_tagger():
    tagger = LexiconTagger({"i": "PRP", "will": "MD", "go": "VB"})
    tokens = tagger.tag(lexemize("I'll go."))
    assert [t.part_of_speech for t in tokens] == [
        PartOfSpeech.PRP, PartOfSpeech.MD, PartOfSpeech.VB, PartOfSpeech.ENDPUNC,
    ]


def test_lexicon_tagger_unknown_word():
    with pytest.raises(TaggingError):
        LexiconTagger({"go": "VB"}).tag(lexemize("stop"))
    tokens = LexiconTagger({"go": "VB"}, default="NN").tag(lexemize("stop"))
    assert tokens[0].part_of_speech is PartOfSpeech.NN


def test_lexicon_tagger_from_file(tmp_path):
    path = tmp_path / "lexicon.json"
    path.write_text(json.dumps({"lexicon": {"cat": "NN"}, "default": "FW"}))
    tagger = LexiconTagger.from_file(path)
    assert [t.part_of_speech for t in tagger.tag(lexemize("cat purrs"))] == [PartOfSpeech.NN, PartOfSpeech.FW]


def test_perceptron_features_are_padded():
    context = list(PerceptronTagger.START) + ["the", "cat"] + list(PerceptronTagger.END)
    feats = PerceptronTagger.features(0, "the", context, "-START-", "-START2-")
    assert feats["bias"] == 1
    assert "i-1 word -START2-" in feats
    assert "i-2 word -START-" in feats
    assert "i+1 word cat" in feats
    assert "i+2 word -END-" in feats


def test_perceptron_shape_comes_from_raw_spelling():
    context = list(PerceptronTagger.START) + ["paris"] + list(PerceptronTagger.END)
    assert "i shape Xx" in PerceptronTagger.features(0, "paris", context, "-START-", "-START2-", surface="Paris")
    assert "i shape x" in PerceptronTagger.features(0, "paris", context, "-START-", "-START2-")
    tagger = PerceptronTagger({"i shape Xx": {"NNP": 1.0}}, ["NN", "NNP"])
    tokens = tagger.tag(lexemize("Paris paris"))
    assert [t.part_of_speech for t in tokens] == [PartOfSpeech.NNP, PartOfSpeech.NN]


def test_bad_tags_are_configuration_errors():
    with pytest.raises(TaggerConfigurationError, match="NOPE"):
        ConstantTagger("NOPE")
    with pytest.raises(TaggerConfigurationError, match="'cat'"):
        LexiconTagger({"cat": "NOPE"})
    with pytest.raises(TaggerConfigurationError):
        LexiconTagger({"cat": "NN"}, default=7)
    with pytest.raises(TaggerConfigurationError):
        PerceptronTagger({"bias": {"NN": "heavy"}}, ["NN"])
    with pytest.raises(TaggerConfigurationError):
        PerceptronTagger({"bias": {"NN": 1.0}}, ["NN"], tagdict={"the": "XX"})


@pytest.mark.parametrize("content", ["{not json", "[1, 2]"])
def test_malformed_tagger_files(tmp_path, content):
    path = tmp_path / "bad.json"
    path.write_text(content)
    with pytest.raises(TaggerConfigurationError):
        LexiconTagger.from_file(path)
    with pytest.raises(TaggerConfigurationError):
        PerceptronTagger.from_file(path)
    with pytest.raises(TaggerConfigurationError):
        LexiconTagger.from_file(tmp_path / "missing.json")


def test_flat_lexicon_file_with_default(tmp_path):
    path = tmp_path / "lexicon.json"
    path.write_text(json.dumps({"cat": "NN", "default": "FW"}))
    tagger = LexiconTagger.from_file(path)
    assert "default" not in tagger.lexicon
    assert tagger.default is PartOfSpeech.FW


def test_perceptron_tagger_uses_weights_and_tagdict():
    weights = {
        "i suffix cat": {"NN": 2.0, "VB": 0.5},
        "i-1 tag DT": {"NN": 1.0},
        "bias": {"VB": 0.1},
    }
    tagger = PerceptronTagger(weights, ["NN", "VB", "DT"], tagdict={"the": "DT"})
    tokens = tagger.tag(lexemize("the cat"))
    assert [t.part_of_speech for t in tokens] == [PartOfSpeech.DT, PartOfSpeech.NN]


def test_perceptron_ties_go_to_first_tag():
    tagger = PerceptronTagger({}, ["JJ", "NN"])
    assert tagger.tag(lexemize("blue"))[0].part_of_speech is PartOfSpeech.JJ


def test_perceptron_from_file(tmp_path):
    path = tmp_path / "weights.json"
    path.write_text(json.dumps({"tags": ["NN"], "weights": {}, "tagdict": {}}))
    assert PerceptronTagger.from_file(path).tags == (PartOfSpeech.NN,)
    with pytest.raises(TaggerConfigurationError):
        PerceptronTagger.from_file(tmp_path / "missing.json")


def test_registry_lists_builtins():
    names = set(list_taggers())
    assert {"constant", "lexicon", "perceptron"} <= names
    assert "unconfigured" not in names
    assert "unconfigured" in list_taggers(include_hidden=True)


def test_create_tagger():
    assert isinstance(create_tagger(None), UnconfiguredTagger)
    tagger = create_tagger("constant", tag="JJ", unused=None)
    assert tagger.part_of_speech is PartOfSpeech.JJ
    with pytest.raises(TaggerConfigurationError):
        create_tagger("no-such-tagger")
    with pytest.raises(TaggerConfigurationError):
        create_tagger("lexicon")
    with pytest.raises(TaggerConfigurationError):
        create_tagger("constant", bogus="x")


def test_register_custom_tagger():
    register_tagger(TaggerSpec(name="Shout", description="test", factory=lambda: ConstantTagger("UH")))
    assert get_tagger_spec("shout") is not None
    assert create_tagger("SHOUT").tag([Lexeme("hey", "hey")])[0].part_of_speech is PartOfSpeech.UH
