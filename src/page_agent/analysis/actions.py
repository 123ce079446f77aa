"""
Action item detection.

Scans body text for calls to action: sentences and list items that open
with an imperative verb, or that carry directive phrasing such as
"you should" or "make sure".
"""

import re

from page_agent.analysis.text import dedupe_key, split_sentences
from page_agent.config.settings import AnalysisSettings
from page_agent.extraction.page_parser import collapse_whitespace
from page_agent.utils.logging import get_logger

logger = get_logger(__name__)


class ActionExtractor:
    """
    Extracts a bounded, deduplicated list of action phrases.

    Example:
        >>> extractor = ActionExtractor()
        >>> extractor.extract("Intro text.\\n- Review the pricing page")
        ('Review the pricing page',)
    """

    ACTION_VERBS = frozenset({
        "add", "apply", "approve", "archive", "ask", "assign", "attend",
        "avoid", "back", "book", "build", "buy", "call", "cancel", "check",
        "choose", "claim", "clean", "click", "close", "collect", "compare",
        "complete", "configure", "confirm", "connect", "contact", "copy",
        "create", "decide", "define", "delete", "deploy", "discuss",
        "document", "download", "draft", "email", "enable", "enroll",
        "ensure", "enter", "estimate", "explore", "file", "fill", "finalize",
        "find", "fix", "follow", "forward", "get", "grab", "identify",
        "implement", "install", "invite", "join", "keep", "launch", "learn",
        "list", "log", "make", "mark", "measure", "meet", "migrate", "move",
        "notify", "open", "order", "organize", "pay", "plan", "prepare",
        "prioritize", "publish", "purchase", "read", "reach", "record",
        "register", "remember", "remove", "renew", "reply", "report",
        "request", "reserve", "reset", "resolve", "restart", "review", "run",
        "save", "schedule", "select", "send", "set", "setup", "share",
        "shop", "sign", "start", "stop", "submit", "subscribe", "switch",
        "take", "test", "track", "try", "turn", "update", "upgrade",
        "upload", "use", "validate", "verify", "visit", "vote", "watch",
        "write",
    })

    # Also common sentence-opening nouns or adverbs ("Back in 2019", "Use of
    # force"); these count only when an object or particle follows
    AMBIGUOUS_VERBS = frozenset({
        "back", "book", "copy", "document", "email", "file", "list", "log",
        "mark", "order", "plan", "record", "report", "set", "shop", "sign",
        "switch", "test", "track", "turn", "use", "watch",
    })

    OBJECT_WORDS = frozenset({
        "a", "an", "the", "this", "that", "these", "those", "your", "our",
        "my", "their", "its", "it", "them", "all", "any", "each", "every",
        "some", "up", "out", "down", "off", "on",
    })

    # Particles accepted only after specific verbs ("log in", "sign in")
    PHRASAL_PARTICLES = {
        "log": frozenset({"in", "into"}),
        "sign": frozenset({"in", "into"}),
    }

    DIRECTIVE_RE = re.compile(
        r"\b(you (should|must|need to|have to|will need to|ought to)|"
        r"make sure|be sure to|don'?t forget to|do not forget to|remember to|"
        r"we (strongly )?recommend|it is recommended|action required|"
        r"next steps?|to-?do)\b",
        re.I,
    )

    # Bullets, numbering and checkboxes in front of list items
    BULLET_RE = re.compile(r"^(?:[-*+•‣▪◦–—]|\d{1,3}[.)]|\[[ xX]?\])\s+")

    POLITE_PREFIX_RE = re.compile(r"^(please|kindly)\s+", re.I)

    MIN_WORDS = 3

    def __init__(
        self,
        max_items: int = 8,
        min_length: int = 12,
        max_length: int = 160,
    ) -> None:
        """
        Initialize action extractor.

        Args:
            max_items: Maximum number of action items returned
            min_length: Shortest phrase kept, in characters
            max_length: Longest phrase kept, in characters
        """
        self.max_items = max_items
        self.min_length = min_length
        self.max_length = max_length

    @classmethod
    def from_settings(cls, settings: AnalysisSettings) -> "ActionExtractor":
        """Create an extractor from analysis settings."""
        return cls(
            max_items=settings.max_action_items,
            min_length=settings.action_min_length,
            max_length=settings.action_max_length,
        )

    def extract(self, text: str) -> tuple[str, ...]:
        """
        Extract action phrases from body text.

        Args:
            text: Extracted body text, one block per line

        Returns:
            Action phrases in order of first appearance; empty when the
            text holds no calls to action
        """
        if self.max_items <= 0 or not text:
            return ()

        items: list[str] = []
        seen: set[str] = set()

        for line in text.splitlines():
            line = self.BULLET_RE.sub("", line.strip())

            for sentence in split_sentences(line):
                candidate = collapse_whitespace(sentence)
                if not self.is_action(candidate):
                    continue

                key = dedupe_key(candidate)
                if key in seen:
                    continue

                seen.add(key)
                items.append(candidate)
                if len(items) >= self.max_items:
                    return tuple(items)

        return tuple(items)

    def is_action(self, phrase: str) -> bool:
        """Check whether a single phrase reads as a call to action."""
        if not self.min_length <= len(phrase) <= self.max_length:
            return False
        if len(phrase.split()) < self.MIN_WORDS or phrase.endswith("?"):
            return False

        if self.DIRECTIVE_RE.search(phrase):
            return True

        words = [
            word.strip(".,:;!\"'()").lower()
            for word in self.POLITE_PREFIX_RE.sub("", phrase).split()[:2]
        ]
        verb = words[0]
        if verb not in self.ACTION_VERBS:
            return False
        if verb not in self.AMBIGUOUS_VERBS:
            return True

        following = words[1] if len(words) > 1 else ""
        return following in self.OBJECT_WORDS or following in self.PHRASAL_PARTICLES.get(verb, ())
