from django.core.management.base import BaseCommand, CommandError

from lexideck.catalog import SAMPLE_FILE, load_deck_file, reset_data


class Command(BaseCommand):
    help = "Reset all decks, cards and review logs, then load decks from a JSON file"

    def add_arguments(self, parser):
        parser.add_argument(
            "--file", default=SAMPLE_FILE, help="JSON file name to load decks from"
        )
        parser.add_argument(
            "--keep", action="store_true", help="Load on top of existing data"
        )

    def handle(self, *args, **options):
        if not options["keep"]:
            reset_data()
            self.stdout.write(self.style.SUCCESS("All existing deck data has been deleted"))

        file_name = options["file"]
        try:
            decks = load_deck_file(file_name)
        except (OSError, KeyError, ValueError) as e:
            raise CommandError(f"Error loading data from {file_name}: {e}") from e

        word_count = sum(deck.words.count() for deck in decks)
        self.stdout.write(
            self.style.SUCCESS(
                f"Loaded {len(decks)} deck(s), {word_count} word(s) from {file_name}"
            )
        )
