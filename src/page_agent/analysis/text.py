"""
Text helpers shared by the summarizer and the action extractor.
"""

import re

from page_agent.extraction.page_parser import collapse_whitespace

# Sentence boundary: terminal punctuation (optionally closed by a quote or
# bracket), whitespace, then something that can open a sentence
SENTENCE_ENDINGS = re.compile(
    r"(?:(?<=[.!?])|(?<=[.!?][\"')\]]))\s+(?=[\"'(\[]?[A-Z0-9])"
)

WORD_RE = re.compile(r"[a-z0-9][a-z0-9'-]*")

STOP_WORDS = frozenset({
    "a", "an", "the", "is", "are", "was", "were", "be", "been", "being",
    "have", "has", "had", "do", "does", "did", "will", "would", "could",
    "should", "may", "might", "must", "shall", "can", "need",
    "to", "of", "in", "for", "on", "with", "at", "by", "from", "as",
    "into", "through", "during", "before", "after", "above", "below",
    "between", "under", "again", "further", "then", "once", "here",
    "there", "when", "where", "why", "how", "all", "each", "few", "more",
    "most", "other", "some", "such", "no", "nor", "not", "only", "own",
    "same", "so", "than", "too", "very", "just", "and", "but", "if", "or",
    "because", "until", "while", "about", "against", "also",
    "what", "which", "who", "whom", "this", "that", "these", "those",
    "am", "i", "me", "my", "we", "our", "ours", "you", "your", "yours",
    "he", "him", "his", "she", "her", "hers", "it", "its", "they", "them",
    "their", "theirs", "any", "both", "it's", "don't", "can't", "up", "out",
})


def split_sentences(text: str) -> list[str]:
    """Split one line of text into trimmed, non-empty sentences."""
    return [s.strip() for s in SENTENCE_ENDINGS.split(text) if s.strip()]


def content_words(text: str) -> list[str]:
    """Lower-cased words of a text with stop words and short tokens removed."""
    return [
        word for word in WORD_RE.findall(text.lower())
        if word not in STOP_WORDS and len(word) > 2 and not word.isdigit()
    ]


def dedupe_key(text: str) -> str:
    """Comparison key: case-insensitive, whitespace-normalized."""
    return collapse_whitespace(text).casefold()
