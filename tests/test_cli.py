import io
import json

import pytest

from yogurt.__main__ import main

GOLD = (
    "# sent_id = g1\n# text = dogs bark\n"
    "1\tdogs\tdog\tNOUN\tNNS\t_\t2\tnsubj\t_\t_\n"
    "2\tbark\tbark\tVERB\tVBP\t_\t0\troot\t_\t_\n"
    "\n"
)


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    monkeypatch.setenv("YOGURT_CONFIG_DIR", str(tmp_path / "cfg"))


def _stdin(monkeypatch, text):
    monkeypatch.setattr("sys.stdin", io.StringIO(text))


def test_lexemize_tsv(monkeypatch, capsys):
    _stdin(monkeypatch, "I'll go.\n")
    assert main(["lexemize", "--format", "tsv"]) == 0
    lines = capsys.readouterr().out.splitlines()
    assert lines[0] == "sent\traw\tnorm\tstart\tend"
    assert lines[1:] == ["s1\tI'll\ti\t0\t4", "s1\t\twill\t4\t4", "s1\tgo\tgo\t5\t7", "s1\t.\t.\t7\t8"]


def test_lexemize_json(tmp_path, capsys):
    source = tmp_path / "in.txt"
    source.write_text("N.Y. rocks\n", encoding="utf-8")
    assert main(["lexemize", "--input", str(source), "--format", "json"]) == 0
    data = json.loads(capsys.readouterr().out)
    assert data[0]["text"] == "N.Y. rocks"
    assert [lexeme["norm"] for lexeme in data[0]["lexemes"]] == ["new york", "rocks"]


def test_lexemize_table(monkeypatch, capsys):
    _stdin(monkeypatch, "hi\n")
    assert main(["lexemize"]) == 0
    assert "norm" in capsys.readouterr().out


def test_tag_without_tagger_fails(monkeypatch, capsys):
    _stdin(monkeypatch, "hi\n")
    assert main(["tag"]) == 1
    assert "[yogurt] No tagger configured" in capsys.readouterr().err


def test_tag_with_constant_tagger(monkeypatch, capsys):
    _stdin(monkeypatch, "hi there\n")
    assert main(["tag", "--tagger", "constant", "--tag", "UH", "--format", "tsv"]) == 0
    lines = capsys.readouterr().out.splitlines()
    assert lines[1] == "s1\thi\thi\tUH\tINTJ"


def test_tag_reports_failed_sentences(tmp_path, monkeypatch, capsys):
    lexicon = tmp_path / "lexicon.json"
    lexicon.write_text(json.dumps({"hi": "UH"}), encoding="utf-8")
    _stdin(monkeypatch, "hi\nbye\n")
    assert main(["tag", "--tagger", "lexicon", "--lexicon", str(lexicon), "--format", "tsv"]) == 1
    captured = capsys.readouterr()
    assert "s1\thi\thi\tUH\tINTJ" in captured.out
    assert "[yogurt] sentence s2:" in captured.err


@pytest.mark.parametrize(
    "option, content, message",
    [
        ("--lexicon", "{not json", "is not valid JSON"),
        ("--lexicon", json.dumps({"cat": "NOPE"}), "Unknown part-of-speech tag: 'NOPE'"),
        ("--weights", "{not json", "is not valid JSON"),
        ("--weights", json.dumps({"tags": ["NN"], "weights": {"bias": {"NN": "x"}}}), "malformed weights"),
    ],
)
def test_tag_with_broken_tagger_file(tmp_path, monkeypatch, capsys, option, content, message):
    path = tmp_path / "tagger.json"
    path.write_text(content, encoding="utf-8")
    tagger = "lexicon" if option == "--lexicon" else "perceptron"
    _stdin(monkeypatch, "cat\n")
    assert main(["tag", "--tagger", tagger, option, str(path)]) == 1
    err = capsys.readouterr().err
    assert err.startswith("[yogurt] ")
    assert message in err
    assert "Traceback" not in err


def test_tag_with_unknown_constant_tag(monkeypatch, capsys):
    _stdin(monkeypatch, "cat\n")
    assert main(["tag", "--tagger", "constant", "--tag", "NOPE"]) == 1
    assert "[yogurt] constant tagger: Unknown part-of-speech tag: 'NOPE'" in capsys.readouterr().err


def test_oracle_rejects_bad_move_factor(tmp_path, capsys):
    source = tmp_path / "gold.conllu"
    source.write_text(GOLD, encoding="utf-8")
    assert main(["oracle", "--input", str(source), "--max-moves-factor", "0"]) == 1
    assert "[yogurt] max_moves_factor must be at least 1" in capsys.readouterr().err


def test_stored_move_factor_must_be_an_integer(tmp_path, monkeypatch, capsys):
    config_dir = tmp_path / "cfg"
    config_dir.mkdir()
    (config_dir / "config.json").write_text(json.dumps({"max_moves_factor": "3"}), encoding="utf-8")
    _stdin(monkeypatch, GOLD)
    assert main(["oracle"]) == 1
    assert "[yogurt] max_moves_factor must be an integer, got '3'" in capsys.readouterr().err


def test_oracle(tmp_path, capsys):
    source = tmp_path / "gold.conllu"
    source.write_text(GOLD, encoding="utf-8")
    target = tmp_path / "out.conllu"
    assert main(["oracle", "--input", str(source), "--output", str(target)]) == 0
    output = target.read_text(encoding="utf-8")
    assert "1\tdogs\tdogs\tNOUN\tNNS\t_\t2\tnsubj\t_\t_" in output
    assert "1 sentence(s): 1 complete, 0 incomplete, 0 failed" in capsys.readouterr().err


def test_oracle_malformed_input(monkeypatch, capsys):
    _stdin(monkeypatch, "1\tbroken\n")
    assert main(["oracle"]) == 1
    assert capsys.readouterr().err.startswith("[yogurt] line 1:")


def test_info(capsys):
    assert main(["info"]) == 0
    out = capsys.readouterr().out
    assert "perceptron" in out
    assert "english" in out


def test_config_roundtrip(capsys):
    assert main(["config", "--set-default-tagger", "constant", "--set-default-language", "English"]) == 0
    assert main(["config", "--show"]) == 0
    out = capsys.readouterr().out
    assert "Default tagger: constant" in out
    assert "Default language: en" in out


def test_config_rejects_unknown_tagger(capsys):
    assert main(["config", "--set-default-tagger", "nope"]) == 1


def test_no_task_exits():
    with pytest.raises(SystemExit):
        main([])
