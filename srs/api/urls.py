from django.urls import path
from .views import (
    CardDetailView,
    DeckStatsView,
    DueCardsView,
    PreviewView,
    ReviewView,
    SessionView,
)

urlpatterns = [
    path("reviews", ReviewView.as_view(), name="review"),
    path("cards/<uuid:card_id>", CardDetailView.as_view(), name="card-detail"),
    path("cards/<uuid:card_id>/previews", PreviewView.as_view(), name="card-previews"),
    path("due-cards", DueCardsView.as_view(), name="due-cards"),
    path("session", SessionView.as_view(), name="session"),
    path("decks/<uuid:deck_id>/stats", DeckStatsView.as_view(), name="deck-stats"),
]
