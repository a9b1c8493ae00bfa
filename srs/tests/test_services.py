import logging
import uuid
from datetime import date, datetime, timedelta, timezone

import pytest
from django.apps import apps
from django.conf import settings as dj_settings

from lexideck.catalog import add_word, mark_familiar, reset_data
from lexideck.models import Deck
from srs.config import SchedulerParameters
from srs.data.models import CardSchedule, ReviewLog
from srs.data.repos import active_schedules, due_schedules, new_schedules, to_card
from srs.domain.enums import Rating, State
from srs.domain.logic import ReviewScheduler
from srs.services.queues import build_session_queue
from srs.services.reviews import (
    CardNotFound,
    get_scheduler,
    preview_review,
    record_review,
    reset_scheduler,
)
from srs.services.stats import DeckNotFound, deck_statistics, due_forecast, study_streak

logger = logging.getLogger(__name__)

# 12:00 in the learners' timezone (UTC+8)
NOW = datetime(2024, 5, 1, 4, 0, tzinfo=timezone.utc)


@pytest.fixture
def deck():
    return Deck.objects.create(name="TEM-8")


@pytest.fixture
def words(deck):
    return [
        add_word(deck, word=w, meaning=m, now=NOW - timedelta(days=1) + timedelta(minutes=i))
        for i, (w, m) in enumerate([("abate", "减弱"), ("cogent", "有说服力的"), ("lucid", "清晰的")])
    ]


# Reviews

@pytest.mark.django_db
def test_add_word_creates_new_schedule(words):
    sched = CardSchedule.objects.get(pk=words[0].pk)
    card = to_card(sched)

    assert card.state == State.NEW
    assert card.reps == 0
    assert card.last_review is None
    assert card.stability is None


@pytest.mark.django_db
def test_schedule_and_logs_carry_the_deck(deck, words):
    other = Deck.objects.create(name="Other")
    stray = add_word(other, word="zeal", meaning="热情", now=NOW)
    record_review(words[0].pk, Rating.AGAIN, now=NOW)
    record_review(stray.pk, Rating.AGAIN, now=NOW)

    assert CardSchedule.objects.get(pk=words[0].pk).deck_id == deck.pk
    log = ReviewLog.objects.get(card_id=words[0].pk)
    assert log.deck_id == deck.pk

    later = NOW + timedelta(minutes=5)
    assert [s.pk for s in due_schedules(later, deck.pk)] == [words[0].pk]
    assert [s.pk for s in due_schedules(later, other.pk)] == [stray.pk]


@pytest.mark.django_db
def test_record_review_persists_card_and_log(words):
    card_id = words[0].pk
    outcome = record_review(card_id, Rating.GOOD, now=NOW)

    sched = CardSchedule.objects.get(pk=card_id)
    assert sched.state == State.LEARNING
    assert sched.due == NOW + timedelta(minutes=10)
    assert sched.reps == 1
    assert sched.last_review == NOW
    assert sched.stability == pytest.approx(outcome.card.stability)

    logs = list(ReviewLog.objects.filter(card_id=card_id))
    assert len(logs) == 1
    assert logs[0].rating == Rating.GOOD
    assert logs[0].state == State.NEW
    assert logs[0].new_state == State.LEARNING
    assert logs[0].review == NOW
    logger.info("✓ Passed: review persisted with one log")


@pytest.mark.django_db
def test_each_review_appends_exactly_one_log(words):
    card_id = words[0].pk
    record_review(card_id, Rating.AGAIN, now=NOW)
    record_review(card_id, Rating.GOOD, now=NOW + timedelta(minutes=1))
    record_review(card_id, Rating.GOOD, now=NOW + timedelta(minutes=11))

    sched = CardSchedule.objects.get(pk=card_id)
    assert ReviewLog.objects.filter(card_id=card_id).count() == 3
    assert sched.reps + sched.lapses == 3
    assert sched.state == State.REVIEW


@pytest.mark.django_db
def test_record_review_accepts_int_rating(words):
    outcome = record_review(words[0].pk, 4, now=NOW)
    assert outcome.card.state == State.REVIEW


@pytest.mark.django_db
def test_record_review_unknown_card():
    with pytest.raises(CardNotFound):
        record_review(uuid.uuid4(), Rating.GOOD, now=NOW)
    assert ReviewLog.objects.count() == 0


@pytest.mark.django_db
def test_record_review_with_injected_scheduler(words):
    scheduler = ReviewScheduler(SchedulerParameters(learning_steps=(timedelta(minutes=3),)))
    outcome = record_review(words[0].pk, Rating.AGAIN, now=NOW, scheduler=scheduler)
    assert outcome.card.due == NOW + timedelta(minutes=3)


@pytest.mark.django_db
def test_preview_does_not_persist(words):
    card_id = words[0].pk
    card, previews = preview_review(card_id, now=NOW)

    assert set(previews) == set(Rating)
    assert previews[Rating.AGAIN].interval == timedelta(minutes=1)
    assert card.state == State.NEW
    assert CardSchedule.objects.get(pk=card_id).state == State.NEW
    assert ReviewLog.objects.count() == 0


def test_scheduler_follows_settings(settings):
    settings.SRS_SCHEDULER = {"desired_retention": 0.8, "enable_fuzzing": False}
    assert get_scheduler().parameters.desired_retention == 0.8

    settings.SRS_SCHEDULER = {}
    assert get_scheduler().parameters == SchedulerParameters()


def test_scheduler_lives_on_the_app_config():
    config = apps.get_app_config("srs")
    assert get_scheduler() is config.scheduler
    assert get_scheduler() is get_scheduler()

    rebuilt = reset_scheduler()
    assert rebuilt is config.scheduler
    assert rebuilt.parameters == SchedulerParameters.from_mapping(dj_settings.SRS_SCHEDULER)


# Queues

@pytest.mark.django_db
def test_due_and_new_queries_exclude_familiar(words):
    record_review(words[0].pk, Rating.AGAIN, now=NOW)
    record_review(words[1].pk, Rating.AGAIN, now=NOW)
    mark_familiar(words[1])

    later = NOW + timedelta(minutes=5)
    assert [s.pk for s in due_schedules(later)] == [words[0].pk]
    assert [s.pk for s in new_schedules()] == [words[2].pk]
    assert {s.pk for s in active_schedules()} == {words[0].pk, words[2].pk}
    assert list(due_schedules(NOW - timedelta(days=1))) == []


@pytest.mark.django_db
def test_session_queue_puts_due_cards_before_new(deck, words):
    record_review(words[2].pk, Rating.AGAIN, now=NOW)
    record_review(words[0].pk, Rating.HARD, now=NOW)

    queue = build_session_queue(deck_id=deck.pk, now=NOW + timedelta(hours=1))

    # oldest due first: AGAIN (1 min) before HARD (5.5 min)
    assert queue.due == [str(words[2].pk), str(words[0].pk)]
    assert queue.learning == []
    assert queue.new == [str(words[1].pk)]
    assert queue.card_ids == queue.due + queue.new
    assert len(queue) == 3


@pytest.mark.django_db
def test_session_queue_keeps_unfinished_learning_cards(deck, words):
    record_review(words[0].pk, Rating.GOOD, now=NOW)  # next step in 10 min
    record_review(words[1].pk, Rating.AGAIN, now=NOW)  # next step in 1 min

    queue = build_session_queue(deck_id=deck.pk, now=NOW + timedelta(seconds=30))

    assert queue.due == []
    # soonest step first
    assert queue.learning == [str(words[1].pk), str(words[0].pk)]
    assert queue.new == [str(words[2].pk)]
    assert queue.card_ids == queue.learning + queue.new

    later = build_session_queue(deck_id=deck.pk, now=NOW + timedelta(minutes=5))
    assert later.due == [str(words[1].pk)]
    assert later.learning == [str(words[0].pk)]


@pytest.mark.django_db
def test_session_queue_review_limit_covers_learning(deck, words):
    record_review(words[0].pk, Rating.AGAIN, now=NOW)
    record_review(words[1].pk, Rating.GOOD, now=NOW)

    queue = build_session_queue(deck_id=deck.pk, now=NOW + timedelta(minutes=2), review_limit=1)

    assert queue.due == [str(words[0].pk)]
    assert queue.learning == []


@pytest.mark.django_db
def test_session_queue_limits_and_deck_filter(deck, words):
    other = Deck.objects.create(name="Other")
    add_word(other, word="zeal", meaning="热情", now=NOW)

    queue = build_session_queue(deck_id=deck.pk, now=NOW, new_limit=2)
    assert len(queue.new) == 2
    assert queue.due == []

    everything = build_session_queue(now=NOW)
    assert len(everything.new) == 4


# Statistics

def test_study_streak():
    today = date(2024, 5, 1)
    yesterday = date(2024, 4, 30)
    assert study_streak({today, yesterday, date(2024, 4, 29)}, today) == 3
    assert study_streak({yesterday}, today) == 1
    assert study_streak({date(2024, 4, 28)}, today) == 0
    assert study_streak(set(), today) == 0


def test_due_forecast_covers_following_days():
    today = date(2024, 5, 1)
    forecast = due_forecast([date(2024, 5, 2), date(2024, 5, 2), date(2024, 5, 9), today], today, 7)

    assert [d for d, _ in forecast] == [today + timedelta(days=i) for i in range(1, 8)]
    assert forecast[0] == (date(2024, 5, 2), 2)
    assert sum(count for _, count in forecast) == 2


@pytest.mark.django_db
def test_deck_statistics(deck, words):
    yesterday = NOW - timedelta(days=1)
    record_review(words[0].pk, Rating.GOOD, now=yesterday)
    record_review(words[0].pk, Rating.GOOD, now=NOW)
    record_review(words[1].pk, Rating.AGAIN, now=NOW)

    stats = deck_statistics(deck.pk, now=NOW)

    assert stats.today_review_count == 2
    assert stats.retention_rate == 67
    assert stats.learned_cards == 2
    assert stats.total_cards == 3
    assert stats.progress_percentage == 67
    assert stats.streak == 2
    assert len(stats.forecast) == 7
    assert sum(count for _, count in stats.forecast) <= stats.learned_cards


@pytest.mark.django_db
def test_deck_statistics_empty_deck(deck):
    stats = deck_statistics(deck.pk, now=NOW)
    assert stats.retention_rate == 0
    assert stats.progress_percentage == 0
    assert stats.streak == 0


@pytest.mark.django_db
def test_deck_statistics_unknown_deck():
    with pytest.raises(DeckNotFound):
        deck_statistics(uuid.uuid4(), now=NOW)


# Reset

@pytest.mark.django_db
def test_reset_removes_logs_and_cards(words):
    record_review(words[0].pk, Rating.GOOD, now=NOW)
    reset_data()

    assert ReviewLog.objects.count() == 0
    assert CardSchedule.objects.count() == 0
    assert Deck.objects.count() == 0


@pytest.mark.django_db
def test_review_logs_are_immutable(words):
    record_review(words[0].pk, Rating.GOOD, now=NOW)
    log = ReviewLog.objects.get()
    log.rating = Rating.EASY
    with pytest.raises(ValueError):
        log.save()
