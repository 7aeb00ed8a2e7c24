import json

import pytest

from conftest import NOW
from vocab_cards import STORAGE_KEY, Card, CardStore, open_store


def write_blob(store, value):
    store.conn.execute("INSERT OR REPLACE INTO kv (key, value) VALUES (?, ?)", (STORAGE_KEY, value))
    store.conn.commit()


def test_empty_store_loads_nothing(store):
    assert store.cards == []
    assert len(store) == 0


def test_cards_persist_across_reopen(tmp_path, make_card):
    path = tmp_path / "cards.db"
    cat = make_card("cat", meaning="feline", ease=1.9, interval=3)
    with open_store(path) as store:
        store.add(cat)
        store.add_cards([make_card("dog"), make_card("eel")])

    with open_store(path) as store:
        assert [card.word for card in store.cards] == ["cat", "dog", "eel"]
        assert store.get(cat.id) == cat


def test_every_change_is_written(store, make_card):
    card = make_card("cat")
    store.add(card)
    store.replace(Card(word="cat", id=card.id, ease=2.7, interval=6, due=NOW + 1))

    raw, = store.conn.execute("SELECT value FROM kv WHERE key = ?", (STORAGE_KEY,)).fetchone()
    saved, = json.loads(raw)
    assert (saved["id"], saved["ease"], saved["interval"], saved["due"]) == (card.id, 2.7, 6, NOW + 1)


def test_replace_keeps_position(store, make_card):
    cards = [make_card("a"), make_card("b"), make_card("c")]
    store.add_cards(cards)
    store.replace(Card(word="b", id=cards[1].id, interval=4))
    assert [(card.word, card.interval) for card in store.cards] == [("a", 0), ("b", 4), ("c", 0)]


def test_replace_unknown_card(store, make_card):
    with pytest.raises(KeyError):
        store.replace(make_card("ghost"))


def test_cards_returns_a_copy(store, make_card):
    store.add(make_card("cat"))
    store.cards.clear()
    assert len(store) == 1


@pytest.mark.parametrize("blob", ["{not json", '{"word": "cat"}', "null", "42"])
def test_corrupt_blob_starts_empty(store, blob):
    write_blob(store, blob)
    assert store.load() == []


def test_load_skips_bad_items_and_fills_defaults(store):
    write_blob(store, json.dumps([
        {"word": "cat", "id": "1", "ease": "2.1", "interval": "3", "due": 5},
        "junk",
        {"word": "   "},
        {"word": "dog", "ease": "abc"},
        {"Word": "eel"},
        {"word": "fox"},
    ]))
    cards = store.load()
    assert [card.word for card in cards] == ["cat", "fox"]
    assert (cards[0].ease, cards[0].interval, cards[0].due) == (2.1, 3, 5)
    assert cards[1].id and cards[1].ease == 2.5 and cards[1].interval == 0


def test_load_makes_duplicate_ids_unique(store):
    write_blob(store, json.dumps([{"word": "a", "id": "x"}, {"word": "b", "id": "x"}]))
    first, second = store.load()
    assert first.id == "x"
    assert second.id != "x"


def test_stores_with_different_keys_are_separate(tmp_path, make_card):
    path = tmp_path / "cards.db"
    with CardStore(path, key="deck-a") as store:
        store.load()
        store.add(make_card("cat"))
    with CardStore(path, key="deck-b") as store:
        assert store.load() == []


def test_load_skips_out_of_range_numbers(store):
    write_blob(store, '[{"word": "a", "due": 1e400}, {"word": "b", "interval": Infinity}, {"word": "c"}]')
    assert [card.word for card in store.load()] == ["c"]


def test_load_clamps_scheduling_state(store):
    write_blob(store, json.dumps([{"word": "cat", "ease": 0.5, "interval": -4, "due": 5}]))
    card, = store.load()
    assert (card.ease, card.interval) == (1.3, 0)
