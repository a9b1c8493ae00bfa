from django.apps import apps
from django.db import transaction
from django.utils import timezone
import structlog

from ..data.models import CardSchedule
from ..data.repos import (
    apply_card,
    get_schedule,
    get_schedule_for_update,
    persist_review,
    to_card,
)
from ..domain.enums import Rating
from ..utils.time import to_local_iso

logger = structlog.get_logger()


class CardNotFound(Exception):
    def __init__(self, card_id):
        super().__init__(f"card {card_id} not found")
        self.card_id = card_id


def get_scheduler():
    """Scheduler built from settings.SRS_SCHEDULER when the app loads."""
    return apps.get_app_config("srs").scheduler


def reset_scheduler():
    return apps.get_app_config("srs").build_scheduler()


def record_review(card_id, rating, now=None, scheduler=None):
    """
    Apply one rating to a card: lock the schedule row, compute the next
    state, persist it and append the review log in a single transaction.
    """
    rating = Rating(rating)
    scheduler = scheduler or get_scheduler()
    now = now or timezone.now()

    logger.info("review_received", card_id=str(card_id), rating=rating.name)

    with transaction.atomic():
        try:
            sched = get_schedule_for_update(card_id)
        except CardSchedule.DoesNotExist:
            raise CardNotFound(card_id)

        outcome = scheduler.schedule_review(to_card(sched), rating, now)
        apply_card(sched, outcome.card)
        persist_review(sched, outcome.log)

    logger.info(
        "review_scheduled",
        card_id=str(card_id),
        rating=rating.name,
        state=outcome.card.state.name,
        previous_state=outcome.log.state.name,
        stability=round(outcome.card.stability, 4),
        difficulty=round(outcome.card.difficulty, 4),
        scheduled_days=outcome.card.scheduled_days,
        next_review_utc=outcome.card.due.isoformat(),
        next_review_local=to_local_iso(outcome.card.due),
    )
    return outcome


def load_card(card_id):
    try:
        return to_card(get_schedule(card_id))
    except CardSchedule.DoesNotExist:
        raise CardNotFound(card_id)


def preview_review(card_id, now=None, scheduler=None):
    """Outcome of each rating for a card, nothing persisted."""
    scheduler = scheduler or get_scheduler()
    now = now or timezone.now()
    card = load_card(card_id)
    return card, scheduler.get_review_previews(card, now)


def card_retrievability(card, now=None, scheduler=None):
    scheduler = scheduler or get_scheduler()
    return scheduler.get_retrievability(card, now or timezone.now())
