from rest_framework import serializers

from srs.domain.enums import State

from .models import Deck, Word


class DeckSerializer(serializers.ModelSerializer):
    word_count = serializers.SerializerMethodField()

    class Meta:
        model = Deck
        fields = ["id", "name", "description", "theme", "created_at", "word_count"]
        read_only_fields = ["id", "created_at"]

    def get_word_count(self, deck):
        return deck.words.count()


class WordSerializer(serializers.ModelSerializer):
    state = serializers.SerializerMethodField()
    due = serializers.DateTimeField(source="schedule.due", read_only=True)

    class Meta:
        model = Word
        fields = [
            "id",
            "deck",
            "word",
            "meaning",
            "part_of_speech",
            "phonetic",
            "example",
            "example_meaning",
            "mnemonic",
            "notes",
            "is_familiar",
            "is_important",
            "created_at",
            "state",
            "due",
        ]
        read_only_fields = ["id", "deck", "is_familiar", "created_at"]

    def get_state(self, word):
        return State(word.schedule.state).name.lower()


class FamiliarSerializer(serializers.Serializer):
    familiar = serializers.BooleanField(default=True)


class InitDataSerializer(serializers.Serializer):
    file = serializers.CharField(required=False, max_length=255)

    def validate_file(self, value):
        if "/" in value or "\\" in value or value.startswith("."):
            raise serializers.ValidationError("Only file names inside the data directory are allowed.")
        return value
