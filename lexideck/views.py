from django.core.management import call_command
from django.shortcuts import get_object_or_404
from rest_framework import status, viewsets
from rest_framework.decorators import action, api_view
from rest_framework.response import Response
import structlog

from .catalog import (
    SAMPLE_FILE,
    add_word,
    delete_deck,
    delete_word,
    mark_familiar,
    reset_data,
)
from .models import Deck, Word
from .serializers import (
    DeckSerializer,
    FamiliarSerializer,
    InitDataSerializer,
    WordSerializer,
)

logger = structlog.get_logger()


@api_view(["POST"])
def initialize_data(request):
    s = InitDataSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    file_name = s.validated_data.get("file", SAMPLE_FILE)

    logger.info("initialize_data", file=file_name)
    call_command("init_data", file=file_name)
    return Response(
        {"message": f"Data initialized successfully from {file_name}"},
        status=status.HTTP_200_OK,
    )


@api_view(["POST"])
def reset_all_data(request):
    """Delete every deck, card and review log."""
    logs, rows = reset_data()
    return Response(
        {"review_logs_deleted": logs, "rows_deleted": rows},
        status=status.HTTP_200_OK,
    )


UUID_PATTERN = "[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}"


class DeckViewSet(viewsets.ViewSet):
    """
    Decks and the words they contain.
    """

    lookup_value_regex = UUID_PATTERN

    def list(self, request):
        decks = Deck.objects.all()
        return Response(DeckSerializer(decks, many=True).data)

    def create(self, request):
        s = DeckSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        deck = s.save()
        logger.info("deck_created", deck_id=str(deck.pk), name=deck.name)
        return Response(DeckSerializer(deck).data, status=status.HTTP_201_CREATED)

    def retrieve(self, request, pk=None):
        deck = get_object_or_404(Deck, pk=pk)
        return Response(DeckSerializer(deck).data)

    def destroy(self, request, pk=None):
        deck = get_object_or_404(Deck, pk=pk)
        delete_deck(deck)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["get", "post"])
    def words(self, request, pk=None):
        """
        GET lists the deck's words with their review state;
        POST adds a word as a new card.
        """
        deck = get_object_or_404(Deck, pk=pk)
        if request.method == "GET":
            words = deck.words.select_related("schedule")
            return Response(WordSerializer(words, many=True).data)

        s = WordSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        word = add_word(deck, **s.validated_data)
        return Response(WordSerializer(word).data, status=status.HTTP_201_CREATED)


class WordViewSet(viewsets.ViewSet):
    lookup_value_regex = UUID_PATTERN

    def retrieve(self, request, pk=None):
        word = get_object_or_404(Word.objects.select_related("schedule"), pk=pk)
        return Response(WordSerializer(word).data)

    def destroy(self, request, pk=None):
        word = get_object_or_404(Word, pk=pk)
        delete_word(word)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["post"])
    def familiar(self, request, pk=None):
        """Mark a word familiar (or unmark it); familiar words leave all queues."""
        word = get_object_or_404(Word.objects.select_related("schedule"), pk=pk)
        s = FamiliarSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        mark_familiar(word, s.validated_data["familiar"])
        return Response(WordSerializer(word).data)
