from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import List, Tuple

from django.utils import timezone

from lexideck.models import Deck

from ..data.repos import logs_for_deck, passed_count, schedules_for_deck
from ..domain.enums import State
from ..utils.time import local_date


class DeckNotFound(Exception):
    def __init__(self, deck_id):
        super().__init__(f"deck {deck_id} not found")
        self.deck_id = deck_id


@dataclass
class DeckStatistics:
    today_review_count: int
    retention_rate: int
    learned_cards: int
    total_cards: int
    progress_percentage: int
    streak: int
    forecast: List[Tuple[date, int]] = field(default_factory=list)


def percentage(part, whole):
    return round(part * 100 / whole) if whole else 0


def study_streak(review_days, today):
    """
    Consecutive days with at least one review, ending today; a streak that
    ended yesterday still counts until today is over.
    """
    day = today
    if day not in review_days:
        day = today - timedelta(days=1)
    streak = 0
    while day in review_days:
        streak += 1
        day -= timedelta(days=1)
    return streak


def due_forecast(due_dates, today, days):
    """Number of cards falling due on each of the next `days` local days."""
    counts = {today + timedelta(days=i): 0 for i in range(1, days + 1)}
    for due in due_dates:
        if due in counts:
            counts[due] += 1
    return sorted(counts.items())


def deck_statistics(deck_id, now=None, forecast_days=7):
    if not Deck.objects.filter(pk=deck_id).exists():
        raise DeckNotFound(deck_id)
    now = now or timezone.now()
    today = local_date(now)

    schedules = schedules_for_deck(deck_id).filter(word__is_familiar=False)
    logs = logs_for_deck(deck_id)

    review_times = list(logs.values_list("review", flat=True))
    review_days = {local_date(t) for t in review_times}
    total_logs = len(review_times)

    total_cards = schedules.count()
    learned = schedules.exclude(state=State.NEW)
    learned_cards = learned.count()

    return DeckStatistics(
        today_review_count=sum(1 for t in review_times if local_date(t) == today),
        retention_rate=percentage(passed_count(logs), total_logs),
        learned_cards=learned_cards,
        total_cards=total_cards,
        progress_percentage=percentage(learned_cards, total_cards),
        streak=study_streak(review_days, today),
        forecast=due_forecast(
            [local_date(d) for d in learned.values_list("due", flat=True)],
            today,
            forecast_days,
        ),
    )
