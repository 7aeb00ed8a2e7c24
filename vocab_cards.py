#!/usr/bin/env python3
"""
Vocabulary Cards Trainer
Imports word lists (CSV/JSON), fills missing phonetics and definitions from a
dictionary lookup, and schedules reviews with a simplified single-factor
spaced-repetition rule.

Usage:
  python vocab_cards.py                      # Normal mode
  python vocab_cards.py --test               # Test mode (1000x speed: 1 day = 86.4s)
  python vocab_cards.py --no-autocomplete    # Skip dictionary lookups on import
  python vocab_cards.py --verbose            # Debug logging
"""

import json
import http.client
import logging
import math
import re
import sqlite3
import sys
import time
import urllib.error
import urllib.parse
import urllib.request
import uuid
from dataclasses import asdict, dataclass, field, replace
from pathlib import Path
from typing import Callable, Iterable, Iterator

logger = logging.getLogger(__name__)

# =============================================================================
# Configuration
# =============================================================================

# Test mode: enabled via --test flag
# In test mode, time runs 1000x faster (1 day = 86.4 seconds)
TEST_MODE = "--test" in sys.argv
TIME_SCALE = 1000 if TEST_MODE else 1

# Dictionary lookups on import can be disabled with --no-autocomplete
AUTO_COMPLETE = "--no-autocomplete" not in sys.argv

# Database file path - handle PyInstaller frozen executable
if getattr(sys, 'frozen', False):
    APP_DIR = Path(sys.executable).parent
else:
    APP_DIR = Path(__file__).parent

DB_PATH = APP_DIR / ("vocab_cards_test.db" if TEST_MODE else "vocab_cards.db")

# The whole collection lives under this single key in the key-value store
STORAGE_KEY = "vocabCards"

DAY_MS = 24 * 60 * 60 * 1000

DEFAULT_EASE = 2.5
MIN_EASE = 1.3

RATINGS = ('again', 'hard', 'good')

DICTIONARY_API_URL = "https://api.dictionaryapi.dev/api/v2/entries/en/{word}"
LOOKUP_TIMEOUT = 10

# Candidate column names, tried in order
WORD_KEYS = ('word', 'Word', 'term', 'Term')
FIELD_KEYS = {
    'ipa': ('ipa', 'IPA'),
    'audio': ('audio', 'Audio'),
    'meaning': ('meaning', 'Meaning'),
    'example': ('example', 'Example'),
}

EXPORT_FIELDS = ['word', 'ipa', 'audio', 'meaning', 'example', 'ease', 'interval', 'due']


def now_ms() -> int:
    """Current time in milliseconds since the epoch."""
    return int(time.time() * 1000)


def new_card_id() -> str:
    return uuid.uuid4().hex


class ImportFileError(Exception):
    """Raised when an import file cannot be read or parsed."""


# =============================================================================
# Data Model
# =============================================================================


@dataclass
class Card:
    """
    One vocabulary item under review.

    Content fields use the empty string for "absent". Scheduling state:
    - ease: difficulty multiplier, never below MIN_EASE
    - interval: days until the next review (0 = never rated)
    - due: milliseconds since epoch when the card becomes reviewable
    """
    word: str
    ipa: str = ''
    audio: str = ''
    meaning: str = ''
    example: str = ''
    ease: float = DEFAULT_EASE
    interval: int = 0
    due: int = field(default_factory=now_ms)
    id: str = field(default_factory=new_card_id)

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> 'Card':
        """Build a card from a persisted dict, filling defaults for missing keys."""
        def text(key):
            value = data.get(key)
            return '' if value is None else str(value)

        ease = data.get('ease')
        interval = data.get('interval')
        due = data.get('due')
        return cls(
            id=text('id') or new_card_id(),
            word=text('word').strip(),
            ipa=text('ipa'),
            audio=text('audio'),
            meaning=text('meaning'),
            example=text('example'),
            ease=max(float(ease), MIN_EASE) if ease not in (None, '') else DEFAULT_EASE,
            interval=max(int(interval), 0) if interval not in (None, '') else 0,
            due=int(due) if due not in (None, '') else now_ms(),
        )


# =============================================================================
# Scheduling
# =============================================================================
#
# Simplified single-factor variant of SuperMemo-2. Each card carries one
# easiness factor (ease) and the current interval in days.
#
#   again -> ease = max(ease - 0.2, 1.3), interval = 1
#   hard  -> ease = ease + 0.05,          interval = max(1, ceil(interval * 1.2))
#   good  -> ease = ease + 0.1,           interval = ceil(interval * ease), or 2 if new
#
# The next review is due `interval` days from the time of rating. Only the
# "again" path clamps; ease may grow without bound on repeated good/hard.
# =============================================================================


def apply_rating(card: Card, rating: str, now: int | None = None, day_ms: int = DAY_MS) -> Card:
    """
    Reschedule a card from the user's self-rating.

    Args:
        card: Card being reviewed (not modified)
        rating: One of 'again', 'hard', 'good'
        now: Rating time in ms since epoch (defaults to the current time)
        day_ms: Length of one interval day in ms

    Returns:
        A new Card with updated ease, interval and due. Unknown ratings are
        ignored and the input card is returned as-is.
    """
    ease = card.ease
    interval = card.interval

    if rating == 'again':
        ease = max(ease - 0.2, MIN_EASE)
        interval = 1
    elif rating == 'hard':
        ease = ease + 0.05
        interval = max(1, math.ceil(interval * 1.2))
    elif rating == 'good':
        ease = ease + 0.1
        interval = math.ceil(interval * ease) if interval > 0 else 2
    else:
        logger.debug("Ignoring unknown rating %r for card %s", rating, card.id)
        return card

    if now is None:
        now = now_ms()
    return replace(card, ease=ease, interval=interval, due=now + interval * day_ms)


def is_due(card: Card, now: int) -> bool:
    return card.due <= now


def due_cards(cards: Iterable[Card], now: int | None = None) -> list:
    """All due cards, in collection order."""
    if now is None:
        now = now_ms()
    return [card for card in cards if is_due(card, now)]


def pick_next(cards: Iterable[Card], now: int | None = None) -> Card | None:
    """
    Select the card to show next.

    The first card in collection order whose due time has passed wins; cards
    are not ranked by due time. Returns None when nothing is due.
    """
    if now is None:
        now = now_ms()
    for card in cards:
        if is_due(card, now):
            return card
    return None


def collection_stats(cards: list, now: int | None = None) -> dict:
    """Get collection statistics. Returns dict."""
    if now is None:
        now = now_ms()
    total = len(cards)
    return {
        'total': total,
        'due': len(due_cards(cards, now)),
        'new': sum(1 for card in cards if card.interval == 0),
        'avg_ease': sum(card.ease for card in cards) / total if total else 0.0,
    }


# Largest unit first; the countdown is shown in whole units
TIME_UNITS = (('d', DAY_MS), ('h', 60 * 60 * 1000), ('min', 60 * 1000))


def format_time_until(due: int, now: int | None = None) -> str:
    """Countdown until a card is due, e.g. "now", "45min", "3h" or "12d"."""
    if now is None:
        now = now_ms()
    remaining = due - now
    if remaining <= 0:
        return "now"

    # Compressed days in --test mode are only seconds long
    if TEST_MODE and remaining < 60 * 1000:
        return f"{remaining / 1000:.1f}s"

    for suffix, unit_ms in TIME_UNITS:
        if remaining >= unit_ms:
            return f"{remaining // unit_ms}{suffix}"
    return "0min"


# =============================================================================
# Dictionary API Lookup (Free Dictionary API)
# =============================================================================

EMPTY_LOOKUP = {'ipa': '', 'audio': '', 'meaning': ''}


def _extract_entry(data) -> dict:
    """Pull phonetics, audio and the first definition out of an API response."""
    result = dict(EMPTY_LOOKUP)
    if not isinstance(data, list) or not data or not isinstance(data[0], dict):
        return result
    entry = data[0]

    phonetics = entry.get('phonetics')
    if not isinstance(phonetics, list):
        phonetics = []
    phonetics = [p for p in phonetics if isinstance(p, dict)]
    # First entry with a textual IPA wins; audio is chosen independently
    for phonetic in phonetics:
        text = phonetic.get('text')
        if isinstance(text, str) and text:
            result['ipa'] = text
            break
    for phonetic in phonetics:
        audio = phonetic.get('audio')
        if isinstance(audio, str) and audio:
            result['audio'] = audio
            break

    meanings = entry.get('meanings') or []
    if isinstance(meanings, list) and meanings and isinstance(meanings[0], dict):
        definitions = meanings[0].get('definitions') or []
        if isinstance(definitions, list) and definitions and isinstance(definitions[0], dict):
            definition = definitions[0].get('definition')
            if isinstance(definition, str):
                result['meaning'] = definition

    return result


def lookup_word(word: str, timeout: float = LOOKUP_TIMEOUT) -> dict:
    """
    Look up a word using the Free Dictionary API.
    Returns dict with 'ipa', 'audio' and 'meaning'; every field is an empty
    string when the word is unknown or the request fails.

    API: https://dictionaryapi.dev/
    """
    word = word.strip()
    if not word:
        return dict(EMPTY_LOOKUP)

    url = DICTIONARY_API_URL.format(word=urllib.parse.quote(word, safe=''))

    try:
        with urllib.request.urlopen(url, timeout=timeout) as response:
            data = json.loads(response.read().decode('utf-8'))
    except urllib.error.HTTPError as e:
        logger.debug("Dictionary lookup for %r returned HTTP %s", word, e.code)
        return dict(EMPTY_LOOKUP)
    except (OSError, ValueError, http.client.HTTPException) as e:
        # URLError, timeouts, bad JSON and bad encodings all land here
        logger.warning("Dictionary lookup for %r failed: %s", word, e)
        return dict(EMPTY_LOOKUP)

    return _extract_entry(data)


# =============================================================================
# Record Parsing
# =============================================================================


def read_csv_rows(text: str) -> list:
    """
    Parse a simple CSV string into a list of dicts keyed by the header names.
    Lines are split on bare commas; quoted or escaped commas are not supported.
    Missing trailing values become empty strings.
    """
    text = text.strip()
    if not text:
        return []
    lines = re.split(r'\r?\n', text)
    headers = [h.strip() for h in lines[0].split(',')]
    rows = []
    for line in lines[1:]:
        values = line.split(',')
        rows.append({
            header: (values[idx] if idx < len(values) else '').strip()
            for idx, header in enumerate(headers)
        })
    return rows


def read_json_rows(text: str) -> list:
    """Parse a JSON array of objects. Anything other than an array yields no rows."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ImportFileError(f"Invalid JSON: {e}") from e
    if not isinstance(data, list):
        return []
    return [row for row in data if isinstance(row, dict)]


def read_import_file(path) -> list:
    """Read raw rows from a .json or CSV file."""
    path = Path(path)
    try:
        text = path.read_text(encoding='utf-8-sig')
    except (OSError, UnicodeDecodeError) as e:
        raise ImportFileError(f"Cannot read {path.name}: {e}") from e

    if path.suffix.lower() == '.json':
        return read_json_rows(text)
    return read_csv_rows(text)


def pick_field(row: dict, keys: Iterable[str]) -> str:
    """Return the first non-empty trimmed value among the candidate keys."""
    for key in keys:
        value = row.get(key)
        if value is None or isinstance(value, (dict, list)):
            continue
        value = str(value).strip()
        if value:
            return value
    return ''


def iter_cards(
    rows: Iterable[dict],
    now: int | None = None,
    lookup: Callable[[str], dict] | None = None,
    auto_complete: bool = False,
) -> Iterator[Card]:
    """
    Turn raw rows into new cards, one at a time.

    Rows without a word are skipped. With auto_complete on, missing ipa,
    audio or meaning fields are filled from lookup(word); imported values
    are never overwritten.
    """
    if now is None:
        now = now_ms()

    for row in rows:
        word = pick_field(row, WORD_KEYS)
        if not word:
            continue

        card = Card(word=word, due=now, **{
            name: pick_field(row, keys) for name, keys in FIELD_KEYS.items()
        })

        if auto_complete and lookup and not (card.ipa and card.meaning and card.audio):
            fetched = lookup(card.word)
            card.ipa = card.ipa or fetched.get('ipa', '')
            card.audio = card.audio or fetched.get('audio', '')
            card.meaning = card.meaning or fetched.get('meaning', '')

        yield card


def parse_rows(rows, now=None, lookup=None, auto_complete=False) -> list:
    """Parse raw rows into a list of new cards. See iter_cards."""
    return list(iter_cards(rows, now=now, lookup=lookup, auto_complete=auto_complete))


# =============================================================================
# Export
# =============================================================================


def export_rows(cards: Iterable[Card]) -> list:
    """Raw-row form of the collection, keyed by EXPORT_FIELDS."""
    return [{name: getattr(card, name) for name in EXPORT_FIELDS} for card in cards]


def export_json(cards: Iterable[Card]) -> str:
    """Serialize every card field as a pretty-printed JSON array."""
    return json.dumps([card.to_dict() for card in cards], indent=2, ensure_ascii=False)


def export_csv(cards: Iterable[Card]) -> str:
    """
    Serialize the collection as CSV with a fixed header row.
    Values are joined with bare commas to match the importer.
    """
    lines = [','.join(EXPORT_FIELDS)]
    for row in export_rows(cards):
        lines.append(','.join('' if row[name] is None else str(row[name]) for name in EXPORT_FIELDS))
    return '\n'.join(lines)


def write_export(cards, path) -> dict:
    """
    Write the collection to a .json or .csv file.
    Returns dict with 'success' (bool), 'message' (str), 'count' (int).
    """
    path = Path(path)
    cards = list(cards)
    content = export_json(cards) if path.suffix.lower() == '.json' else export_csv(cards)
    try:
        path.write_text(content, encoding='utf-8')
    except OSError as e:
        logger.error("Export to %s failed: %s", path, e)
        return {'success': False, 'message': f"Could not write {path.name}: {e}", 'count': 0}
    return {
        'success': True,
        'message': f"Exported {len(cards)} card{'s' if len(cards) != 1 else ''} to {path.name}",
        'count': len(cards),
    }


# =============================================================================
# Storage
# =============================================================================


class CardStore:
    """
    Key-value backed card collection.

    The whole collection is one JSON array stored under a single key in a
    sqlite3 table. It is read once by load() and rewritten on every change.
    """

    def __init__(self, path=":memory:", key: str = STORAGE_KEY):
        self.path = path
        self.key = key
        self.conn = sqlite3.connect(str(path))
        self.conn.execute("""
            CREATE TABLE IF NOT EXISTS kv (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL
            )
        """)
        self.conn.commit()
        self._cards = []

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def __len__(self):
        return len(self._cards)

    @property
    def cards(self) -> list:
        return list(self._cards)

    def load(self) -> list:
        """Read the collection; a missing or corrupt blob starts empty."""
        self._cards = []
        row = self.conn.execute("SELECT value FROM kv WHERE key = ?", (self.key,)).fetchone()
        if row is None:
            return self.cards

        try:
            data = json.loads(row[0])
        except json.JSONDecodeError:
            logger.debug("Discarding unparsable collection under %r", self.key)
            return self.cards
        if not isinstance(data, list):
            logger.debug("Discarding non-list collection under %r", self.key)
            return self.cards

        seen = set()
        for item in data:
            if not isinstance(item, dict):
                continue
            try:
                card = Card.from_dict(item)
            except (TypeError, ValueError, OverflowError):
                logger.debug("Skipping malformed card %r", item)
                continue
            if not card.word:
                continue
            if card.id in seen:
                card.id = new_card_id()
            seen.add(card.id)
            self._cards.append(card)
        return self.cards

    def save(self) -> None:
        value = json.dumps([card.to_dict() for card in self._cards], ensure_ascii=False)
        self.conn.execute("INSERT OR REPLACE INTO kv (key, value) VALUES (?, ?)", (self.key, value))
        self.conn.commit()

    def get(self, card_id: str) -> Card | None:
        for card in self._cards:
            if card.id == card_id:
                return card
        return None

    def add(self, card: Card) -> None:
        self.add_cards([card])

    def add_cards(self, cards: Iterable[Card]) -> None:
        self._cards.extend(cards)
        self.save()

    def replace(self, card: Card) -> None:
        """Swap in an updated card with the same id, keeping its position."""
        for idx, existing in enumerate(self._cards):
            if existing.id == card.id:
                self._cards[idx] = card
                self.save()
                return
        raise KeyError(card.id)

    def close(self) -> None:
        self.conn.close()


def open_store(path=DB_PATH) -> CardStore:
    """Open the store at path and load the collection."""
    store = CardStore(path)
    store.load()
    return store


# =============================================================================
# Import
# =============================================================================


def import_file(store: CardStore, path, lookup=lookup_word, auto_complete=None, now=None) -> dict:
    """
    Import a CSV or JSON word list into the store.
    Returns dict with 'success' (bool), 'message' (str), 'count' (int).

    Cards are appended as they are parsed, so an interrupted import keeps
    what was already added. A malformed file leaves the store unchanged.
    auto_complete defaults to the --no-autocomplete setting.
    """
    if auto_complete is None:
        auto_complete = AUTO_COMPLETE

    try:
        rows = read_import_file(path)
    except ImportFileError as e:
        logger.error("Failed to parse %s: %s", path, e)
        return {'success': False, 'message': str(e), 'count': 0}

    count = 0
    for card in iter_cards(rows, now=now, lookup=lookup, auto_complete=auto_complete):
        store.add(card)
        count += 1

    skipped = len(rows) - count
    message = f"Imported {count} card{'s' if count != 1 else ''}"
    if skipped:
        message += f" ({skipped} row{'s' if skipped != 1 else ''} without a word skipped)"
    return {'success': True, 'message': message, 'count': count}


# =============================================================================
# Review Session
# =============================================================================


class ReviewSession:
    """
    Tracks which card is shown and whether its answer is visible.

    Ratings are applied through apply_rating and written back to the store;
    the next card is picked again after every change. on_card_changed is
    called with the newly shown card (or None), e.g. to play pronunciation.
    """

    def __init__(self, store: CardStore, clock=now_ms, day_ms: int = DAY_MS, on_card_changed=None):
        self.store = store
        self.clock = clock
        self.day_ms = day_ms
        self.on_card_changed = on_card_changed
        self.current = None
        self.answer_visible = False
        self.reviewed = 0

    def refresh(self) -> Card | None:
        """Re-select the current card from the store."""
        card = pick_next(self.store.cards, self.clock())
        if card is not self.current:
            self.current = card
            self.answer_visible = False
            if self.on_card_changed:
                self.on_card_changed(card)
        return self.current

    def toggle_answer(self) -> bool:
        if self.current is not None:
            self.answer_visible = not self.answer_visible
        return self.answer_visible

    def rate(self, rating: str) -> Card | None:
        """Apply a rating to the current card. Returns the updated card."""
        if self.current is None:
            return None
        if rating not in RATINGS:
            logger.debug("Ignoring unknown rating %r", rating)
            return self.current

        updated = apply_rating(self.current, rating, now=self.clock(), day_ms=self.day_ms)
        self.store.replace(updated)
        self.reviewed += 1
        self.refresh()
        return updated

    def import_file(self, path, lookup=lookup_word, auto_complete=None) -> dict:
        result = import_file(self.store, path, lookup=lookup, auto_complete=auto_complete, now=self.clock())
        self.refresh()
        return result


# =============================================================================
# CLI Commands
# =============================================================================

RATING_KEYS = {'1': 'again', '2': 'hard', '3': 'good'}


def cmd_import(session: ReviewSession) -> None:
    """Import a CSV or JSON word list."""
    path = input("File path (.csv or .json): ").strip()
    if not path:
        return
    if AUTO_COMPLETE:
        print("  Looking up missing fields...")
    result = session.import_file(path)
    prefix = "" if result['success'] else "Import failed: "
    print(f"{prefix}{result['message']}")


def cmd_pending(session: ReviewSession) -> None:
    """Show all cards due for review."""
    cards = due_cards(session.store.cards, session.clock())
    if not cards:
        print("\nNo cards due for review. Great job!")
        return

    print(f"\n--- Due Now: {len(cards)} card(s) ---")
    for card in cards:
        status = "new" if card.interval == 0 else f"interval {card.interval}d"
        print(f"  - {card.word} [{status}]")


def cmd_review(session: ReviewSession) -> None:
    """Start an interactive review session for due cards."""
    card = session.refresh()
    if card is None:
        print("\nNo cards due for review. Import a word list or wait for the next review.")
        return

    print("\n--- Review Session ---")
    print("Rating: (1) Again  (2) Hard  (3) Good  (q) Quit\n")

    start = session.reviewed
    while session.current is not None:
        card = session.current
        print(f"Word: {card.word}")
        if card.ipa:
            print(f"  {card.ipa}")
        if card.audio:
            print(f"  Audio: {card.audio}")
        input("  [Press Enter to see meaning...]")
        session.toggle_answer()
        if card.meaning:
            print(f"  Meaning: {card.meaning}")
        if card.example:
            print(f"  Example: {card.example}")

        while True:
            key = input("  Your rating (1/2/3/q): ").strip().lower()
            if key == 'q':
                print(f"\nSession ended. Reviewed {session.reviewed - start} card(s).")
                return
            if key in RATING_KEYS:
                break
            print("  Invalid input. Please enter 1, 2, 3, or q.")

        updated = session.rate(RATING_KEYS[key])
        print(f"  -> Next review in {updated.interval} day(s)\n")

    print(f"Session complete! Reviewed {session.reviewed - start} card(s).")


def cmd_list(session: ReviewSession) -> None:
    """List all cards in the collection."""
    cards = session.store.cards
    if not cards:
        print("\nNo cards yet. Use 'import' to add a word list!")
        return

    now = session.clock()
    print(f"\n--- All Cards ({len(cards)}) ---")
    for card in cards:
        ipa_str = f" {card.ipa}" if card.ipa else ""
        print(f"  {card.word}{ipa_str}: {card.meaning}")
        print(f"    interval: {card.interval}d, ease: {card.ease:.2f}, "
              f"next: {format_time_until(card.due, now)}")


def cmd_stats(session: ReviewSession) -> None:
    """Show collection statistics."""
    stats = collection_stats(session.store.cards, session.clock())
    print(f"\n--- Statistics ---")
    print(f"  Total cards: {stats['total']}")
    print(f"  Never rated: {stats['new']}")
    print(f"  Due now: {stats['due']}")
    if stats['total']:
        print(f"  Average ease: {stats['avg_ease']:.2f}")


def cmd_export(session: ReviewSession) -> None:
    """Export the collection as JSON or CSV."""
    path = input("Export path (.json or .csv): ").strip()
    if not path:
        return
    result = write_export(session.store.cards, path)
    print(result['message'])


def show_help() -> None:
    """Display available commands."""
    print("""
--- Vocabulary Cards ---
Commands:
  import  - Import a CSV or JSON word list
  pending - Show cards due for review
  review  - Start a review session
  list    - List all cards
  stats   - Show statistics
  export  - Export cards to JSON or CSV
  help    - Show this help message
  exit    - Quit the program
""")


def main() -> None:
    """Main entry point for the CLI application."""
    logging.basicConfig(
        level=logging.DEBUG if "--verbose" in sys.argv else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    print("=" * 40)
    print("  Vocabulary Cards Trainer")
    print("=" * 40)
    if TEST_MODE:
        print("  *** TEST MODE (1000x speed) ***")
        print("  1 day = 86.4s")
        print("=" * 40)
    print("Type 'help' for available commands.\n")

    store = open_store(DB_PATH)
    session = ReviewSession(store, day_ms=DAY_MS // TIME_SCALE)

    commands = {
        'import': cmd_import,
        'pending': cmd_pending,
        'review': cmd_review,
        'list': cmd_list,
        'stats': cmd_stats,
        'export': cmd_export,
        'help': lambda _: show_help(),
    }

    try:
        while True:
            try:
                user_input = input("> ").strip().lower()
            except EOFError:
                break

            if not user_input:
                continue

            if user_input in ('exit', 'quit', 'q'):
                print("Goodbye!")
                break

            if user_input in commands:
                commands[user_input](session)
            else:
                print(f"Unknown command: '{user_input}'. Type 'help' for available commands.")

    finally:
        store.close()


if __name__ == "__main__":
    main()
