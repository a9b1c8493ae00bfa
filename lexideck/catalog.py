import json
from pathlib import Path

from django.db import transaction
from django.utils import timezone
import structlog

from srs.data.repos import create_schedule, reset_all

from .models import Deck, Word

logger = structlog.get_logger()

DATA_DIR = Path(__file__).resolve().parent / "data"
SAMPLE_FILE = "sample_deck.json"

WORD_FIELDS = (
    "word",
    "meaning",
    "part_of_speech",
    "phonetic",
    "example",
    "example_meaning",
    "mnemonic",
    "notes",
)


def add_word(deck, now=None, **fields):
    """Create a word together with its NEW card schedule."""
    now = now or timezone.now()
    with transaction.atomic():
        word = Word.objects.create(deck=deck, created_at=now, **fields)
        create_schedule(word, now=now)
    logger.info("word_added", deck_id=str(deck.pk), word_id=str(word.pk), word=word.word)
    return word


def mark_familiar(word, familiar=True):
    word.is_familiar = familiar
    word.save(update_fields=["is_familiar", "updated_at"])
    logger.info("word_familiar_changed", word_id=str(word.pk), familiar=familiar)
    return word


def delete_word(word):
    """Remove a word and its card; its review history is kept for statistics."""
    word_id = str(word.pk)
    word.delete()
    logger.info("word_deleted", word_id=word_id)


def delete_deck(deck):
    """Remove a deck with all its words and cards; review history is kept."""
    deck_id = str(deck.pk)
    rows, _ = deck.delete()
    logger.info("deck_deleted", deck_id=deck_id, rows_deleted=rows)
    return rows


def resolve_data_file(file_name):
    path = Path(file_name)
    if not path.is_absolute():
        path = DATA_DIR / path
    return path


def load_deck_file(file_name=SAMPLE_FILE):
    """
    Load decks from a JSON file of the form
    {"decks": [{"name": ..., "words": [{"word": ..., "meaning": ...}]}]}.
    """
    path = resolve_data_file(file_name)
    with open(path, encoding="utf-8") as f:
        payload = json.load(f)

    decks = []
    with transaction.atomic():
        for entry in payload["decks"]:
            deck = Deck.objects.create(
                name=entry["name"],
                description=entry.get("description", ""),
                theme=entry.get("theme", ""),
            )
            for item in entry.get("words", []):
                add_word(deck, **{k: item[k] for k in WORD_FIELDS if k in item})
            decks.append(deck)

    logger.info("deck_file_loaded", file=str(path), deck_count=len(decks))
    return decks


def reset_data():
    logs, rows = reset_all()
    logger.info("data_reset", review_logs_deleted=logs, rows_deleted=rows)
    return logs, rows
