from django.db import models
from django.utils import timezone

from ..domain.enums import Rating, State

STATE_CHOICES = [(s.value, s.name.title()) for s in State]
RATING_CHOICES = [(r.value, r.name.title()) for r in Rating]


class CardSchedule(models.Model):
    word = models.OneToOneField(
        "lexideck.Word",
        primary_key=True,
        related_name="schedule",
        on_delete=models.CASCADE,
    )
    # copy of word.deck so the by-deck due query stays on one index
    deck = models.ForeignKey(
        "lexideck.Deck",
        related_name="schedules",
        on_delete=models.CASCADE,
    )
    due = models.DateTimeField(default=timezone.now)  # UTC
    state = models.PositiveSmallIntegerField(choices=STATE_CHOICES, default=State.NEW)
    stability = models.FloatField(null=True)
    difficulty = models.FloatField(null=True)
    elapsed_days = models.FloatField(default=0)
    scheduled_days = models.PositiveIntegerField(default=0)
    reps = models.PositiveIntegerField(default=0)
    lapses = models.PositiveIntegerField(default=0)
    step = models.PositiveSmallIntegerField(null=True)
    last_review = models.DateTimeField(null=True)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        indexes = [
            models.Index(fields=["due"]),
            models.Index(fields=["state", "due"]),
            models.Index(fields=["deck", "due"]),
        ]


class ReviewLog(models.Model):
    """
    Append-only; rows are removed only by a bulk data reset.

    Cards and decks are referenced by id rather than by foreign key, so
    deleting a word or a deck leaves its review history in place.
    """

    card_id = models.UUIDField()
    deck_id = models.UUIDField()
    rating = models.PositiveSmallIntegerField(choices=RATING_CHOICES)
    state = models.PositiveSmallIntegerField(choices=STATE_CHOICES)
    due = models.DateTimeField()
    stability = models.FloatField(null=True)
    difficulty = models.FloatField(null=True)
    elapsed_days = models.FloatField()
    last_elapsed_days = models.FloatField()
    scheduled_days = models.PositiveIntegerField()
    review = models.DateTimeField(default=timezone.now)
    new_state = models.PositiveSmallIntegerField(choices=STATE_CHOICES)
    new_due = models.DateTimeField()

    class Meta:
        indexes = [
            models.Index(fields=["card_id", "review"]),
            models.Index(fields=["deck_id", "review"]),
            models.Index(fields=["review"]),
        ]

    def save(self, *args, **kwargs):
        if self.pk is not None:
            raise ValueError("review logs are immutable")
        super().save(*args, **kwargs)
