from django.utils import timezone
from rest_framework import status, views
from rest_framework.exceptions import NotFound
from rest_framework.response import Response
import structlog

from ..data.repos import due_schedules
from ..domain.enums import RATING_LABELS
from ..services.queues import build_session_queue
from ..services.reviews import (
    CardNotFound,
    card_retrievability,
    load_card,
    preview_review,
    record_review,
)
from ..services.stats import DeckNotFound, deck_statistics
from ..utils.time import to_local_iso
from .serializers import (
    DueQuerySerializer,
    ReviewInSerializer,
    SessionQuerySerializer,
    card_payload,
    preview_payload,
)

logger = structlog.get_logger()


class ReviewView(views.APIView):
    def post(self, request):
        s = ReviewInSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        card_id = s.validated_data["card_id"]
        rating = s.validated_data["rating"]

        try:
            outcome = record_review(card_id, rating)
        except CardNotFound as e:
            raise NotFound(str(e))

        logger.info(
            "review_api_response",
            card_id=str(card_id),
            rating=rating.name,
            state=outcome.card.state.name,
            next_review_utc=outcome.card.due.isoformat(),
            status=status.HTTP_201_CREATED,
        )

        data = card_payload(outcome.card)
        data["rating_label"] = RATING_LABELS[rating]
        return Response(data, status=status.HTTP_201_CREATED)


class CardDetailView(views.APIView):
    def get(self, request, card_id):
        try:
            card = load_card(card_id)
        except CardNotFound as e:
            raise NotFound(str(e))
        return Response(card_payload(card, retrievability=card_retrievability(card)))


class PreviewView(views.APIView):
    def get(self, request, card_id):
        try:
            card, previews = preview_review(card_id)
        except CardNotFound as e:
            raise NotFound(str(e))

        return Response(
            {
                "card_id": card.id,
                "previews": {
                    rating.name.lower(): preview_payload(preview)
                    for rating, preview in previews.items()
                },
            }
        )


class DueCardsView(views.APIView):
    def get(self, request):
        qs = DueQuerySerializer(data=request.query_params)
        qs.is_valid(raise_exception=True)
        until = qs.validated_data.get("until") or timezone.now()
        deck_id = qs.validated_data.get("deck")

        results = [
            str(pk) for pk in due_schedules(until, deck_id).values_list("pk", flat=True)
        ]

        logger.info(
            "due_cards_api_response",
            deck_id=str(deck_id) if deck_id else None,
            until_utc=until.isoformat(),
            card_count=len(results),
        )

        return Response(
            {
                "until_utc": until.isoformat(),
                "until_local": to_local_iso(until),
                "card_ids": results,
            }
        )


class SessionView(views.APIView):
    def get(self, request):
        qs = SessionQuerySerializer(data=request.query_params)
        qs.is_valid(raise_exception=True)

        queue = build_session_queue(
            deck_id=qs.validated_data.get("deck"),
            new_limit=qs.validated_data.get("new_limit"),
            review_limit=qs.validated_data.get("review_limit"),
        )
        return Response(
            {
                "due": queue.due,
                "learning": queue.learning,
                "new": queue.new,
                "card_ids": queue.card_ids,
            }
        )


class DeckStatsView(views.APIView):
    def get(self, request, deck_id):
        try:
            stats = deck_statistics(deck_id)
        except DeckNotFound as e:
            raise NotFound(str(e))

        return Response(
            {
                "deck_id": str(deck_id),
                "today_review_count": stats.today_review_count,
                "retention_rate": stats.retention_rate,
                "learned_cards": stats.learned_cards,
                "total_cards": stats.total_cards,
                "progress_percentage": stats.progress_percentage,
                "streak": stats.streak,
                "forecast": [
                    {"date": day.isoformat(), "count": count}
                    for day, count in stats.forecast
                ],
            }
        )
