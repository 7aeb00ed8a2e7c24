import io
import json
import urllib.error

import pytest

import vocab_cards


NOW = 1_700_000_000_000


class FakeResponse(io.BytesIO):
    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()


class FakeLookup:
    """Records lookups and answers from a fixed table."""

    def __init__(self, entries=None):
        self.entries = entries or {}
        self.calls = []

    def __call__(self, word):
        self.calls.append(word)
        return dict(self.entries.get(word, vocab_cards.EMPTY_LOOKUP))


@pytest.fixture
def store():
    with vocab_cards.CardStore(":memory:") as store:
        store.load()
        yield store


@pytest.fixture
def make_card():
    def _make(word="cat", **kwargs):
        kwargs.setdefault("due", NOW)
        return vocab_cards.Card(word=word, **kwargs)
    return _make


@pytest.fixture
def fake_urlopen(monkeypatch):
    """Route urlopen to a callable returning a payload or raising."""
    requests = []

    def install(handler):
        def urlopen(url, timeout=None):
            requests.append((url, timeout))
            result = handler(url)
            if isinstance(result, BaseException):
                raise result
            if isinstance(result, bytes):
                return FakeResponse(result)
            return FakeResponse(json.dumps(result).encode("utf-8"))

        monkeypatch.setattr(vocab_cards.urllib.request, "urlopen", urlopen)
        return requests

    return install


def http_error(url, code):
    return urllib.error.HTTPError(url, code, "error", {}, None)
