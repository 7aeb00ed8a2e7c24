import socket
import urllib.error

import pytest

from conftest import http_error
from vocab_cards import EMPTY_LOOKUP, lookup_word


SAMPLE = [{
    "word": "hello",
    "phonetics": [
        {"audio": ""},
        {"text": "/həˈləʊ/", "audio": ""},
        {"text": "/hɛˈloʊ/", "audio": "https://api.dictionaryapi.dev/media/hello-us.mp3"},
    ],
    "meanings": [
        {"partOfSpeech": "noun", "definitions": [
            {"definition": "\"Hello!\" or an equivalent greeting."},
            {"definition": "second"},
        ]},
        {"partOfSpeech": "verb", "definitions": [{"definition": "To greet."}]},
    ],
}]


def test_lookup_extracts_first_matches(fake_urlopen):
    requests = fake_urlopen(lambda url: SAMPLE)
    assert lookup_word("hello") == {
        "ipa": "/həˈləʊ/",
        "audio": "https://api.dictionaryapi.dev/media/hello-us.mp3",
        "meaning": "\"Hello!\" or an equivalent greeting.",
    }
    url, timeout = requests[0]
    assert url == "https://api.dictionaryapi.dev/api/v2/entries/en/hello"
    assert timeout is not None


def test_lookup_percent_encodes_word(fake_urlopen):
    requests = fake_urlopen(lambda url: [])
    lookup_word("AC/DC é")
    assert requests[0][0].endswith("/en/AC%2FDC%20%C3%A9")


def test_lookup_404_returns_empty(fake_urlopen):
    fake_urlopen(lambda url: http_error(url, 404))
    assert lookup_word("zzyzx") == EMPTY_LOOKUP


@pytest.mark.parametrize("failure", [
    urllib.error.URLError("no route"),
    socket.timeout("timed out"),
    TimeoutError(),
    ConnectionResetError(),
])
def test_lookup_network_errors_return_empty(fake_urlopen, failure):
    fake_urlopen(lambda url: failure)
    assert lookup_word("cat") == EMPTY_LOOKUP


@pytest.mark.parametrize("payload", [
    b"<html>not json</html>",
    b"\xff\xfe",
    {"title": "No Definitions Found"},
    [],
    ["junk"],
    [{"phonetics": None, "meanings": [{"definitions": []}]}],
    [{"phonetics": [{"text": 5, "audio": None}], "meanings": ["junk"]}],
    [{"phonetics": 5, "meanings": []}],
    [{"phonetics": True, "meanings": {"definitions": []}}],
])
def test_lookup_unexpected_payloads_return_empty(fake_urlopen, payload):
    fake_urlopen(lambda url: payload)
    assert lookup_word("cat") == EMPTY_LOOKUP


def test_lookup_partial_entry(fake_urlopen):
    fake_urlopen(lambda url: [{"phonetics": [{"audio": "https://x/a.mp3"}]}])
    assert lookup_word("cat") == {"ipa": "", "audio": "https://x/a.mp3", "meaning": ""}


def test_lookup_blank_word_skips_network(fake_urlopen):
    requests = fake_urlopen(lambda url: SAMPLE)
    assert lookup_word("   ") == EMPTY_LOOKUP
    assert requests == []


def test_lookup_result_is_a_fresh_dict(fake_urlopen):
    fake_urlopen(lambda url: http_error(url, 500))
    result = lookup_word("cat")
    result["ipa"] = "changed"
    assert EMPTY_LOOKUP["ipa"] == ""
