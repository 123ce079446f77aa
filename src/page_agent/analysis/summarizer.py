"""
Heuristic extractive summarization.

Builds a short summary paragraph from the leading prose sentences of the
body text and picks key points by word-frequency salience. No model is
involved; the same text always gives the same result.
"""

import re
from collections import Counter
from dataclasses import dataclass

from page_agent.analysis.text import content_words, dedupe_key, split_sentences
from page_agent.config.settings import AnalysisSettings
from page_agent.utils.logging import get_logger

logger = get_logger(__name__)

PLACEHOLDER_SUMMARY = "Not enough readable content to summarize this page."


@dataclass(frozen=True)
class Summary:
    """Summary paragraph and key points for one body text."""

    summary: str
    key_points: tuple[str, ...] = ()


class Summarizer:
    """
    Reduces body text to a summary and a bounded list of key points.

    Example:
        >>> summarizer = Summarizer(max_key_points=3)
        >>> result = summarizer.summarize(body_text)
        >>> print(result.summary)
    """

    # Lines shorter than this are treated as headings or labels, not prose
    MIN_PROSE_WORDS = 5

    BOILERPLATE_RE = re.compile(
        r"\b(cookies?|copyright|all rights reserved|newsletter|privacy policy|"
        r"terms of (use|service)|sign in|log in|subscribe)\b|©",
        re.I,
    )

    def __init__(
        self,
        min_content_length: int = 40,
        max_summary_length: int = 320,
        max_key_points: int = 5,
        key_point_min_length: int = 40,
        key_point_max_length: int = 240,
    ) -> None:
        """
        Initialize summarizer.

        Args:
            min_content_length: Shorter text gets the placeholder summary
            max_summary_length: Maximum summary length in characters
            max_key_points: Maximum number of key points
            key_point_min_length: Shortest sentence eligible as a key point
            key_point_max_length: Longest sentence eligible as a key point
        """
        self.min_content_length = min_content_length
        self.max_summary_length = max_summary_length
        self.max_key_points = max_key_points
        self.key_point_min_length = key_point_min_length
        self.key_point_max_length = key_point_max_length

    @classmethod
    def from_settings(cls, settings: AnalysisSettings) -> "Summarizer":
        """Create a summarizer from analysis settings."""
        return cls(
            min_content_length=settings.min_content_length,
            max_summary_length=settings.max_summary_length,
            max_key_points=settings.max_key_points,
            key_point_min_length=settings.key_point_min_length,
            key_point_max_length=settings.key_point_max_length,
        )

    def summarize(self, text: str) -> Summary:
        """
        Summarize body text.

        Args:
            text: Extracted body text, one block per line

        Returns:
            Summary; the placeholder and no key points when the text is
            shorter than min_content_length
        """
        text = text or ""
        if len(text.strip()) < self.min_content_length or not text.strip():
            return Summary(summary=PLACEHOLDER_SUMMARY)

        lines = [line.strip() for line in text.splitlines() if line.strip()]

        return Summary(
            summary=self._build_summary(lines),
            key_points=self._select_key_points(lines),
        )

    def _build_summary(self, lines: list[str]) -> str:
        prose = [
            sentence
            for line in lines
            if len(line.split()) >= self.MIN_PROSE_WORDS
            for sentence in split_sentences(line)
        ]
        if not prose:
            prose = [s for line in lines for s in split_sentences(line)]

        parts: list[str] = []
        total = 0
        for sentence in prose:
            added = len(sentence) + (1 if parts else 0)
            if total + added > self.max_summary_length:
                break
            parts.append(sentence)
            total += added

        if parts:
            return " ".join(parts)

        return self._truncate(prose[0])

    def _truncate(self, sentence: str) -> str:
        """Cut an over-long sentence at a word boundary."""
        limit = self.max_summary_length - 3
        cut = sentence[:limit]

        last_space = cut.rfind(" ")
        if last_space > limit * 0.5:
            cut = cut[:last_space]

        return cut.rstrip(" ,;:-") + "..."

    def _select_key_points(self, lines: list[str]) -> tuple[str, ...]:
        if self.max_key_points <= 0:
            return ()

        frequencies = Counter(
            word for line in lines for word in content_words(line))

        candidates: list[str] = []
        seen: set[str] = set()
        for line in lines:
            for sentence in split_sentences(line):
                if not self._is_candidate(sentence):
                    continue
                key = dedupe_key(sentence)
                if key in seen:
                    continue
                seen.add(key)
                candidates.append(sentence)

        scores = [self._salience(sentence, frequencies)
                  for sentence in candidates]

        # Highest salience first, earlier sentence wins ties
        ranked = sorted(range(len(candidates)),
                        key=lambda i: (-scores[i], i))
        chosen = sorted(ranked[: self.max_key_points])

        return tuple(candidates[i] for i in chosen)

    def _is_candidate(self, sentence: str) -> bool:
        if not self.key_point_min_length <= len(sentence) <= self.key_point_max_length:
            return False
        if sentence.endswith("?"):
            return False
        return not self.BOILERPLATE_RE.search(sentence)

    def _salience(self, sentence: str, frequencies: Counter) -> float:
        """Mean document frequency of the sentence's distinct content words."""
        words = set(content_words(sentence))
        if not words:
            return 0.0
        return sum(frequencies[word] for word in words) / len(words)
