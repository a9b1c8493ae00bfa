from dataclasses import dataclass, field
from typing import List

from django.conf import settings
from django.utils import timezone
import structlog

from ..data.repos import active_schedules, due_schedules, new_schedules
from ..domain.enums import State

logger = structlog.get_logger()


@dataclass
class SessionQueue:
    due: List[str] = field(default_factory=list)
    learning: List[str] = field(default_factory=list)
    new: List[str] = field(default_factory=list)

    @property
    def card_ids(self):
        return self.due + self.learning + self.new

    def __len__(self):
        return len(self.due) + len(self.learning) + len(self.new)


def build_session_queue(deck_id=None, now=None, new_limit=None, review_limit=None):
    """
    Cards for one study session, in three groups:

    - due: reviewed cards due by now, oldest due first
    - learning: learning and relearning cards whose next step is still
      ahead, so an unfinished group is not dropped from the session
    - new: unseen cards in the order they were added

    `review_limit` caps due and learning cards together. Familiar words are
    never included.
    """
    now = now or timezone.now()
    if new_limit is None:
        new_limit = settings.SRS_NEW_CARDS_PER_SESSION
    if review_limit is None:
        review_limit = settings.SRS_REVIEWS_PER_SESSION

    due = [str(pk) for pk in due_schedules(now, deck_id).values_list("pk", flat=True)[:review_limit]]
    learning_limit = max(review_limit - len(due), 0)
    learning = (
        active_schedules(deck_id)
        .exclude(state=State.NEW)
        .filter(due__gt=now)
        .values_list("pk", flat=True)[:learning_limit]
    )
    new = new_schedules(deck_id).values_list("pk", flat=True)[:new_limit]
    queue = SessionQueue(
        due=due,
        learning=[str(pk) for pk in learning],
        new=[str(pk) for pk in new],
    )

    logger.info(
        "session_queue_built",
        deck_id=str(deck_id) if deck_id else None,
        due_count=len(queue.due),
        learning_count=len(queue.learning),
        new_count=len(queue.new),
    )
    return queue
