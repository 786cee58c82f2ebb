"""Decide whether a free-text reply accepts an offered suggestion."""

from __future__ import annotations

from typing import Any, Iterable

from askflow.core.domain.answer import reply_value

DEFAULT_AFFIRMATIVE_WORDS: tuple[str, ...] = ("yes", "y", "yep", "yup", "ok")


class AffirmativeMatcher:
    """Match "yes"-like replies against a configurable word set.

    Only the first whitespace-delimited token is considered, so
    ``"Yes please"`` counts while ``"well, yes"`` does not. A literal ``True``
    (e.g. a structured "yes" button) is affirmative without text parsing.

    Example:
        >>> matcher = AffirmativeMatcher()
        >>> matcher.matches("Yep, that one")
        True
        >>> matcher.matches("no")
        False
    """

    def __init__(self, words: Iterable[str] | None = None) -> None:
        source = DEFAULT_AFFIRMATIVE_WORDS if words is None else words
        self._words = frozenset(w.casefold() for w in source)

    @property
    def words(self) -> frozenset[str]:
        return self._words

    def extend(self, words: Iterable[str]) -> "AffirmativeMatcher":
        """Return a matcher that also accepts ``words``."""
        return AffirmativeMatcher([*self._words, *words])

    def matches(self, reply: Any) -> bool:
        value = reply_value(reply)
        if value is True:
            return True
        if not isinstance(value, str):
            return False

        tokens = value.split()
        if not tokens:
            return False
        return tokens[0].casefold() in self._words
