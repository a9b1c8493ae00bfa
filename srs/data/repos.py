from django.db import transaction
from django.utils import timezone

from lexideck.models import Deck

from ..domain.cards import Card
from ..domain.enums import Rating, State
from .models import CardSchedule, ReviewLog

CARD_FIELDS = (
    "due",
    "stability",
    "difficulty",
    "elapsed_days",
    "scheduled_days",
    "reps",
    "lapses",
    "step",
    "last_review",
)


def create_schedule(word, now=None):
    """New cards are due immediately."""
    now = now or timezone.now()
    return CardSchedule.objects.create(
        word=word, deck_id=word.deck_id, due=now, state=State.NEW, created_at=now
    )


def get_schedule(card_id):
    return CardSchedule.objects.select_related("word").get(pk=card_id)


def get_schedule_for_update(card_id):
    """
    Fetch a schedule row and lock it until the surrounding transaction ends.
    Must be called inside transaction.atomic().
    """
    return CardSchedule.objects.select_for_update().get(pk=card_id)


def to_card(sched):
    return Card(
        id=str(sched.pk),
        due=sched.due,
        created_at=sched.created_at,
        state=State(sched.state),
        stability=sched.stability,
        difficulty=sched.difficulty,
        elapsed_days=sched.elapsed_days,
        scheduled_days=sched.scheduled_days,
        reps=sched.reps,
        lapses=sched.lapses,
        last_review=sched.last_review,
        step=sched.step,
    )


def apply_card(sched, card):
    for name in CARD_FIELDS:
        setattr(sched, name, getattr(card, name))
    sched.state = int(card.state)
    sched.save(update_fields=list(CARD_FIELDS) + ["state"])
    return sched


def persist_review(sched, log):
    return ReviewLog.objects.create(
        card_id=sched.pk,
        deck_id=sched.deck_id,
        rating=int(log.rating),
        state=int(log.state),
        due=log.due,
        stability=log.stability,
        difficulty=log.difficulty,
        elapsed_days=log.elapsed_days,
        last_elapsed_days=log.last_elapsed_days,
        scheduled_days=log.scheduled_days,
        review=log.review,
        new_state=int(log.new_state),
        new_due=log.new_due,
    )


def _queueable(deck_id=None):
    qs = CardSchedule.objects.filter(word__is_familiar=False)
    if deck_id is not None:
        qs = qs.filter(deck_id=deck_id)
    return qs


def due_schedules(until, deck_id=None):
    """Reviewed cards due by `until`, oldest due first."""
    return (
        _queueable(deck_id)
        .exclude(state=State.NEW)
        .filter(due__lte=until)
        .order_by("due")
    )


def new_schedules(deck_id=None):
    return _queueable(deck_id).filter(state=State.NEW).order_by("created_at", "word__created_at")


def active_schedules(deck_id=None):
    """Cards still being learned: new, learning and relearning."""
    return (
        _queueable(deck_id)
        .filter(state__in=[State.NEW, State.LEARNING, State.RELEARNING])
        .order_by("due")
    )


def schedules_for_deck(deck_id):
    return CardSchedule.objects.filter(deck_id=deck_id)


def logs_for_deck(deck_id=None):
    qs = ReviewLog.objects.all()
    if deck_id is not None:
        qs = qs.filter(deck_id=deck_id)
    return qs.order_by("review")


def passed_count(logs):
    return logs.exclude(rating=Rating.AGAIN).count()


def reset_all():
    """Bulk data reset. The only path that deletes review logs."""
    with transaction.atomic():
        logs, _ = ReviewLog.objects.all().delete()
        decks, _ = Deck.objects.all().delete()
    return logs, decks
