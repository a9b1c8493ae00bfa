import uuid

from django.db import models
from django.utils import timezone


class Deck(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=100)
    description = models.TextField(blank=True)
    theme = models.CharField(max_length=32, blank=True)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["created_at"]

    def __str__(self):
        return self.name


class Word(models.Model):
    """
    A vocabulary entry. Its scheduling state lives in srs.CardSchedule,
    which shares this primary key.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    deck = models.ForeignKey(Deck, related_name="words", on_delete=models.CASCADE)
    word = models.CharField(max_length=128, db_index=True)
    meaning = models.TextField()
    part_of_speech = models.CharField(max_length=32, blank=True)
    phonetic = models.CharField(max_length=128, blank=True)
    example = models.TextField(blank=True)
    example_meaning = models.TextField(blank=True)
    mnemonic = models.TextField(blank=True)
    notes = models.TextField(blank=True)
    # Familiar words are never queued for review again
    is_familiar = models.BooleanField(default=False)
    is_important = models.BooleanField(default=False)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["created_at"]
        indexes = [
            models.Index(fields=["deck", "is_familiar"]),
        ]

    def __str__(self):
        return self.word
