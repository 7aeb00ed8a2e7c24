import json

from conftest import NOW
from vocab_cards import Card, export_csv, export_json, parse_rows, read_csv_rows, write_export


def sample_cards():
    return [
        Card(word="cat", ipa="/kæt/", audio="https://x/cat.mp3", meaning="feline",
             example="The cat sat.", ease=2.6, interval=2, due=NOW, id="c1"),
        Card(word="dog", due=NOW + 1, id="d1"),
    ]


def test_export_json_contains_every_field():
    text = export_json(sample_cards())
    assert text.startswith("[\n  {")
    data = json.loads(text)
    assert data[0] == {
        "id": "c1", "word": "cat", "ipa": "/kæt/", "audio": "https://x/cat.mp3",
        "meaning": "feline", "example": "The cat sat.", "ease": 2.6, "interval": 2, "due": NOW,
    }
    assert data[1]["ipa"] == ""


def test_export_csv_layout():
    lines = export_csv(sample_cards()).split("\n")
    assert lines == [
        "word,ipa,audio,meaning,example,ease,interval,due",
        f"cat,/kæt/,https://x/cat.mp3,feline,The cat sat.,2.6,2,{NOW}",
        f"dog,,,,,2.5,0,{NOW + 1}",
    ]


def test_export_csv_empty_collection():
    assert export_csv([]) == "word,ipa,audio,meaning,example,ease,interval,due"


def test_csv_export_reimports_content():
    cards = parse_rows(read_csv_rows(export_csv(sample_cards())), now=NOW + 9)
    assert [(card.word, card.ipa, card.meaning, card.example) for card in cards] == [
        ("cat", "/kæt/", "feline", "The cat sat."),
        ("dog", "", "", ""),
    ]
    assert all(card.interval == 0 and card.due == NOW + 9 for card in cards)


def test_json_export_reimports_content():
    cards = parse_rows(json.loads(export_json(sample_cards())), now=NOW)
    assert [(card.word, card.audio) for card in cards] == [("cat", "https://x/cat.mp3"), ("dog", "")]
    assert cards[0].id != "c1"


def test_write_export_picks_format(tmp_path):
    json_result = write_export(sample_cards(), tmp_path / "out.json")
    csv_result = write_export(sample_cards(), tmp_path / "out.csv")

    assert json_result == {"success": True, "message": "Exported 2 cards to out.json", "count": 2}
    assert csv_result["success"] is True
    assert json.loads((tmp_path / "out.json").read_text(encoding="utf-8"))[1]["word"] == "dog"
    assert (tmp_path / "out.csv").read_text(encoding="utf-8").startswith("word,ipa,")


def test_write_export_failure(tmp_path):
    result = write_export(sample_cards(), tmp_path / "missing" / "out.csv")
    assert result["success"] is False
    assert result["count"] == 0
