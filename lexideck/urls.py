from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .views import DeckViewSet, WordViewSet, initialize_data, reset_all_data

router = DefaultRouter(trailing_slash=False)
router.register("decks", DeckViewSet, basename="deck")
router.register("words", WordViewSet, basename="word")

urlpatterns = [
    path("api/init", initialize_data, name="initialize-data"),
    path("api/reset", reset_all_data, name="reset-data"),
    path("api/", include("srs.api.urls")),
    path("api/", include(router.urls)),
]
