"""Hook masking blacklisted words in raw input."""

import re
from typing import Iterable, List, Optional, Pattern, Tuple

from ultra_robust_bbcode.shared import get_logger

from .base import Hook


class CensorHook(Hook):
    """Replace every whole-word occurrence of a blacklisted word.

    Matching is case-insensitive and skips bracketed markup, so a word that
    is also a tag name never alters the tags themselves. Each letter of a
    censored word is replaced by the single character ``replacement``, so
    the masked text keeps its original length.

    Examples:
        >>> hook = CensorHook(["darn"])
        >>> hook.before_parse("Darn it, darnation")
        '**** it, darnation'
        >>> CensorHook(["quote"]).before_parse("[quote]no quote[/quote]")
        '[quote]no *****[/quote]'
    """

    name = "censor"

    def __init__(
        self,
        words: Optional[Iterable[str]] = None,
        replacement: str = "*",
        correlation_id: Optional[str] = None,
        brackets: Tuple[str, str] = ("[", "]")
    ) -> None:
        if not replacement:
            raise ValueError("replacement cannot be empty")
        if len(replacement) != 1:
            raise ValueError("replacement must be a single character")

        self.replacement = replacement
        self._words: List[str] = []
        self._pattern: Optional[Pattern[str]] = None
        open_, close = (re.escape(bracket) for bracket in brackets)
        self._markup = re.compile(rf"{open_}[^{open_}{close}]*{close}")
        self.logger = get_logger(__name__, correlation_id, "censor_hook")
        self.add_words(words or [])

    @property
    def words(self) -> List[str]:
        return list(self._words)

    def add_words(self, words: Iterable[str]) -> "CensorHook":
        """Add words to the blacklist, ignoring blanks and duplicates."""
        for word in words:
            word = word.strip().lower()
            if word and word not in self._words:
                self._words.append(word)

        if self._words:
            # Longest first so overlapping entries mask the whole phrase
            alternatives = sorted(self._words, key=len, reverse=True)
            self._pattern = re.compile(
                r"\b(?:" + "|".join(re.escape(w) for w in alternatives) + r")\b",
                re.IGNORECASE,
            )
        return self

    def censor(self, content: str) -> str:
        """Return ``content`` with blacklisted words outside markup masked."""
        if self._pattern is None:
            return content

        count = 0

        def _mask(match: "re.Match[str]") -> str:
            nonlocal count
            count += 1
            return self.replacement * len(match.group(0))

        pieces: List[str] = []
        position = 0
        for markup in self._markup.finditer(content):
            pieces.append(self._pattern.sub(_mask, content[position:markup.start()]))
            pieces.append(markup.group(0))
            position = markup.end()
        pieces.append(self._pattern.sub(_mask, content[position:]))

        if count:
            self.logger.debug("Censored words", extra={"censored_count": count})
        return "".join(pieces)

    def before_parse(self, content: str) -> str:
        return self.censor(content)

    def before_strip(self, content: str) -> str:
        return self.censor(content)
