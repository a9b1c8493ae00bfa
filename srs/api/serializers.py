from rest_framework import serializers

from ..domain.enums import RATING_LABELS, Rating, State
from ..utils.time import to_local_iso


class ReviewInSerializer(serializers.Serializer):
    card_id = serializers.UUIDField()
    rating = serializers.ChoiceField(choices=[r.value for r in Rating])

    def validate_rating(self, value):
        return Rating(value)


class DueQuerySerializer(serializers.Serializer):
    until = serializers.DateTimeField(required=False)  # ISO-8601
    deck = serializers.UUIDField(required=False)


class SessionQuerySerializer(serializers.Serializer):
    deck = serializers.UUIDField(required=False)
    new_limit = serializers.IntegerField(min_value=0, max_value=1000, required=False)
    review_limit = serializers.IntegerField(min_value=0, max_value=10000, required=False)


def card_payload(card, retrievability=None):
    data = {
        "card_id": card.id,
        "state": card.state.name.lower(),
        "due_utc": card.due.isoformat(),
        "due_local": to_local_iso(card.due),
        "stability": card.stability,
        "difficulty": card.difficulty,
        "elapsed_days": card.elapsed_days,
        "scheduled_days": card.scheduled_days,
        "reps": card.reps,
        "lapses": card.lapses,
        "step": card.step,
        "last_review_utc": card.last_review.isoformat() if card.last_review else None,
    }
    if retrievability is not None:
        data["retrievability"] = retrievability
    return data


def preview_payload(preview):
    return {
        "rating_label": RATING_LABELS[preview.rating],
        "state": State(preview.card.state).name.lower(),
        "due_utc": preview.due.isoformat(),
        "due_local": to_local_iso(preview.due),
        "interval_seconds": int(preview.interval.total_seconds()),
        "scheduled_days": preview.card.scheduled_days,
    }
