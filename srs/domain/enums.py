from enum import IntEnum


class Rating(IntEnum):
    AGAIN = 1
    HARD = 2
    GOOD = 3
    EASY = 4


class State(IntEnum):
    NEW = 0
    LEARNING = 1
    REVIEW = 2
    RELEARNING = 3


RATING_LABELS = {
    Rating.AGAIN: "忘记",
    Rating.HARD: "困难",
    Rating.GOOD: "良好",
    Rating.EASY: "简单",
}
