"""Word-list profanity filter for comments."""

import re
from collections.abc import Iterable
from typing import Final

DEFAULT_BLOCKED_WORDS: Final[tuple[str, ...]] = (
    # Korean
    "시발", "씨발", "개새끼", "새끼", "병신", "빙신", "지랄", "염병",
    "존나", "졸라", "엿먹어", "미친놈", "미친년", "닥쳐", "꺼져", "뒤져",
    "니애미", "느금마", "엠창", "한남충", "김치녀", "틀딱", "급식충", "찐따",
    # English
    "fuck", "shit", "bitch", "asshole", "bastard", "cunt", "slut", "whore",
    "retard", "nigger", "faggot",
)

_WHITESPACE: Final[re.Pattern[str]] = re.compile(r"\s")


class ProfanityFilter:
    """Substring match against a blocked word list.

    Text is checked both as written and with all whitespace removed, so
    spaced-out words ("개 새 끼") are caught too.
    """

    def __init__(self, words: Iterable[str] = DEFAULT_BLOCKED_WORDS, extra: Iterable[str] = ()):
        self.words = tuple(
            dict.fromkeys(w.strip().lower() for w in (*words, *extra) if w.strip())
        )

    def contains_profanity(self, text: str | None) -> bool:
        if not text:
            return False
        lowered = text.lower()
        collapsed = _WHITESPACE.sub("", lowered)
        return any(word in lowered or word in collapsed for word in self.words)
