import pytest

from yogurt.doc import ROOT, Lexeme, Token, TokenArc, index_from_conllu, index_to_conllu, is_root
from yogurt.tags import PTB_TO_UPOS, STANDARD_UPOS, GrammaticalFunction, PartOfSpeech


def test_part_of_speech_parse():
    assert PartOfSpeech.parse("PRP$") is PartOfSpeech.PRP_S
    assert PartOfSpeech.parse("prp_s") is PartOfSpeech.PRP_S
    assert PartOfSpeech.parse("-LRB-") is PartOfSpeech.LPAREN
    with pytest.raises(ValueError):
        PartOfSpeech.parse("NOUN")


def test_every_tag_maps_to_standard_upos():
    assert set(PTB_TO_UPOS) == set(PartOfSpeech)
    assert set(PTB_TO_UPOS.values()) <= STANDARD_UPOS


def test_grammatical_function_parse():
    assert GrammaticalFunction.parse("nsubj") is GrammaticalFunction.NSUBJ
    assert GrammaticalFunction.parse("obl:tmod") is GrammaticalFunction.OBL
    assert GrammaticalFunction.parse("dobj") is GrammaticalFunction.DOBJ
    with pytest.raises(ValueError):
        GrammaticalFunction.parse("NN")
    assert GrammaticalFunction.parse_or_dep("_") is GrammaticalFunction.DEP
    assert GrammaticalFunction.parse_or_dep("reparandum") is GrammaticalFunction.DEP


def test_root_indexing():
    assert is_root(ROOT)
    assert not is_root(0)
    assert index_to_conllu(ROOT) == 0
    assert index_to_conllu(0) == 1
    assert index_from_conllu(0) is ROOT
    assert index_from_conllu(3) == 2


def test_value_types_to_dict():
    lexeme = Lexeme(raw="I'll", norm="i", start=0, end=4)
    assert lexeme.to_dict() == {"raw": "I'll", "norm": "i", "start": 0, "end": 4}
    token = Token(lemma="i", part_of_speech=PartOfSpeech.PRP, raw="I'll")
    assert token.to_dict() == {"lemma": "i", "pos": "PRP", "raw": "I'll"}
    arc = TokenArc(parent=ROOT, child=0, label=GrammaticalFunction.ROOT)
    assert arc.to_dict() == {"parent": "ROOT", "child": 0, "label": "root"}


def test_token_from_lexeme():
    token = Token.from_lexeme(Lexeme(raw="", norm="will", start=4, end=4), PartOfSpeech.MD)
    assert token.lemma == "will"
    assert token.raw == ""
