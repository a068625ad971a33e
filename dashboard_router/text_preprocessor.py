"""Normalize, correct and expand free-text dashboard queries."""

import logging
import re
from typing import Dict, List, Optional

from .models import PreprocessResult, SpellCorrection

logger = logging.getLogger(__name__)

MAX_EXPANSIONS = 5
MAX_SUGGESTIONS = 3
MAX_SUGGESTION_DISTANCE = 2


# Exact-token corrections. Context is never considered, so "its" always
# becomes "it's" and "were" always becomes "we're".
CORRECTIONS: Dict[str, str] = {
    # Contractions missing their apostrophe
    "whats": "what's",
    "dont": "don't",
    "wont": "won't",
    "cant": "can't",
    "didnt": "didn't",
    "doesnt": "doesn't",
    "isnt": "isn't",
    "arent": "aren't",
    "havent": "haven't",
    "hasnt": "hasn't",
    "wouldnt": "wouldn't",
    "couldnt": "couldn't",
    "shouldnt": "shouldn't",
    "youre": "you're",
    "theyre": "they're",
    "hes": "he's",
    "shes": "she's",
    "its": "it's",
    "were": "we're",
    "thats": "that's",
    "ive": "i've",
    "youve": "you've",
    "weve": "we've",
    "theyve": "they've",

    # Common typos
    "habbit": "habit",
    "habbits": "habits",
    "excersize": "exercise",
    "excercise": "exercise",
    "calender": "calendar",
    "recieve": "receive",
    "acheive": "achieve",
    "beleive": "believe",
    "seperate": "separate",
    "occured": "occurred",
    "untill": "until",
    "wich": "which",
    "teh": "the",
    "taht": "that",
    "nad": "and",
    "adn": "and",
    "waht": "what",
    "wnat": "want",
    "ahve": "have",
    "hvae": "have",
    "todya": "today",
    "tommorow": "tomorrow",
    "tommorrow": "tomorrow",
    "yestarday": "yesterday",
    "minuets": "minutes",
    "mintues": "minutes",

    # App names and app vocabulary
    "pomadoro": "pomodoro",
    "pomidoro": "pomodoro",
    "pommodoro": "pomodoro",
    "streek": "streak",
    "streks": "streaks",
    "habts": "habits",
    "favroite": "favorite",
    "favourtie": "favorite",
    "picutre": "picture",
    "picutres": "pictures",
    "phoot": "photo",
    "photoes": "photos",
}

SYNONYMS: Dict[str, List[str]] = {
    # General verbs
    "show": ["display", "view", "see", "look at", "check"],
    "get": ["fetch", "retrieve", "find", "show", "display"],
    "list": ["show", "display", "enumerate", "get all"],
    "count": ["how many", "number of", "total", "amount"],
    "create": ["make", "add", "new", "build"],
    "delete": ["remove", "clear", "erase", "destroy"],
    "update": ["change", "modify", "edit", "alter"],

    # Time
    "today": ["today's", "current day", "this day"],
    "yesterday": ["yesterday's", "previous day", "last day"],
    "tomorrow": ["tomorrow's", "next day", "following day"],
    "now": ["current", "present", "at this moment"],
    "recent": ["latest", "newest", "most recent", "last"],

    # App vocabulary
    "habits": ["routines", "dailies", "daily habits"],
    "streak": ["chain", "consecutive days", "run"],
    "notes": ["memos", "reminders", "ideas", "thoughts"],
    "picture": ["photo", "image", "pic"],
    "pictures": ["photos", "images", "pics", "gallery"],
    "favorite": ["starred", "liked", "saved", "bookmarked"],
    "favorites": ["starred items", "liked items", "saved items"],
    "timer": ["pomodoro", "focus session", "work session"],
    "break": ["rest", "pause", "intermission"],
    "dogs": ["puppies", "pups", "canines"],
    "space": ["cosmos", "universe", "astronomy", "nasa"],
}

# Typographic punctuation folded to ASCII
_PUNCTUATION = str.maketrans({
    "‘": "'",
    "’": "'",
    "“": '"',
    "”": '"',
})


def normalize_text(text: str) -> str:
    """
    Normalize text for matching.

    Lowercases, trims, collapses whitespace, folds typographic quotes and
    ellipsis to ASCII, and removes spaces around apostrophes and hyphens.

    Args:
        text: Raw input text

    Returns:
        Normalized text
    """
    text = text.lower().strip()
    text = re.sub(r"\s+", " ", text)
    text = text.translate(_PUNCTUATION).replace("…", "...")
    text = re.sub(r"\s*'\s*", "'", text)
    text = re.sub(r"\s*-\s*", "-", text)
    return text


def levenshtein_distance(a: str, b: str) -> int:
    """Edit distance between two strings (insert, delete, substitute)."""
    if a == b:
        return 0
    if not a:
        return len(b)
    if not b:
        return len(a)

    previous = list(range(len(b) + 1))
    for i, char_a in enumerate(a, 1):
        current = [i]
        for j, char_b in enumerate(b, 1):
            cost = 0 if char_a == char_b else 1
            current.append(min(
                previous[j] + 1,         # deletion
                current[j - 1] + 1,      # insertion
                previous[j - 1] + cost,  # substitution
            ))
        previous = current
    return previous[-1]


def _whole_word(term: str) -> "re.Pattern[str]":
    # Apostrophes and hyphens count as word characters so "today" never matches inside "today's"
    return re.compile(rf"(?<![\w'-]){re.escape(term)}(?![\w'-])")


class TextPreprocessor:
    """Table-driven query preprocessor: normalize, spell-correct, expand synonyms."""

    def __init__(
        self,
        corrections: Optional[Dict[str, str]] = None,
        synonyms: Optional[Dict[str, List[str]]] = None,
        max_expansions: int = MAX_EXPANSIONS
    ):
        """
        Initialize the preprocessor.

        Args:
            corrections: Misspelling -> correction table (defaults to CORRECTIONS)
            synonyms: Term -> synonyms table (defaults to SYNONYMS)
            max_expansions: Cap on the number of expanded query variants
        """
        self.corrections = {k.lower(): v for k, v in (corrections or CORRECTIONS).items()}
        self.synonyms = {k.lower(): list(v) for k, v in (synonyms or SYNONYMS).items()}
        self.max_expansions = max_expansions
        self._patterns: Dict[str, "re.Pattern[str]"] = {}

    def preprocess(self, query: str) -> PreprocessResult:
        """
        Run the full pipeline on a query.

        Never raises. Empty or whitespace-only input yields an empty
        normalized string with no corrections or expansions.

        Args:
            query: Raw user query

        Returns:
            PreprocessResult with original, normalized, corrections and expansions
        """
        original = query
        if not isinstance(query, str) or not query.strip():
            return PreprocessResult(original=original, normalized="")

        normalized = normalize_text(query)
        corrections: List[SpellCorrection] = []
        normalized = self._correct_spelling(normalized, corrections)
        expansions = self._expand_synonyms(normalized)

        if corrections or expansions:
            logger.debug(
                "Query preprocessed: %r -> %r",
                original,
                normalized,
                extra={
                    "component": "TextPreprocessor",
                    "action": "preprocess",
                    "original": original,
                    "normalized": normalized,
                    "corrections": [f"{c.original} -> {c.corrected}" for c in corrections],
                    "expansions": expansions,
                },
            )

        return PreprocessResult(
            original=original,
            normalized=normalized,
            corrections=corrections,
            expansions=expansions,
        )

    def is_misspelled(self, word: str) -> bool:
        """Return True if the word is a known misspelling (case-insensitive)."""
        return word.lower() in self.corrections

    def get_suggestions(self, word: str) -> List[str]:
        """
        Suggest corrections for a possibly misspelled word.

        Args:
            word: Word to look up

        Returns:
            Up to three corrections whose misspelling lies within edit
            distance 2 of the word, nearest first
        """
        lower_word = word.lower()
        candidates = []
        for mistake, correction in self.corrections.items():
            distance = levenshtein_distance(lower_word, mistake)
            if distance <= MAX_SUGGESTION_DISTANCE:
                candidates.append((distance, correction))

        candidates.sort(key=lambda c: c[0])
        suggestions: List[str] = []
        for _, correction in candidates:
            if correction not in suggestions:
                suggestions.append(correction)
            if len(suggestions) >= MAX_SUGGESTIONS:
                break
        return suggestions

    def _pattern(self, term: str) -> "re.Pattern[str]":
        pattern = self._patterns.get(term)
        if pattern is None:
            pattern = _whole_word(term)
            self._patterns[term] = pattern
        return pattern

    def _correct_spelling(self, text: str, corrections: List[SpellCorrection]) -> str:
        words = text.split(" ")
        corrected_words = []
        for word in words:
            correction = self.corrections.get(word)
            if correction is not None and correction != word:
                corrections.append(SpellCorrection(
                    original=word,
                    corrected=correction,
                    distance=levenshtein_distance(word, correction),
                ))
                corrected_words.append(correction)
            else:
                corrected_words.append(word)
        corrected = " ".join(corrected_words)

        # Multi-word entries
        for mistake, correction in self.corrections.items():
            if " " not in mistake:
                continue
            pattern = self._pattern(mistake)
            if pattern.search(corrected):
                corrected = pattern.sub(correction, corrected)
                corrections.append(SpellCorrection(
                    original=mistake,
                    corrected=correction,
                    distance=levenshtein_distance(mistake, correction),
                ))

        return corrected

    def _expand_synonyms(self, text: str) -> List[str]:
        expansions: List[str] = []

        def add_variants(term: str) -> bool:
            pattern = self._pattern(term)
            if not pattern.search(text):
                return False
            for synonym in self.synonyms[term]:
                expanded = pattern.sub(synonym, text)
                if expanded != text and expanded not in expansions:
                    expansions.append(expanded)
                    if len(expansions) >= self.max_expansions:
                        return True
            return False

        seen = set()
        for word in text.split(" "):
            if word in self.synonyms and word not in seen:
                seen.add(word)
                if add_variants(word):
                    return expansions

        for term in self.synonyms:
            if " " in term and add_variants(term):
                return expansions

        return expansions


# Default instance; the preprocessor is stateless apart from its pattern cache
_default_preprocessor = TextPreprocessor()


def preprocess(query: str) -> PreprocessResult:
    """Preprocess a query with the default tables."""
    return _default_preprocessor.preprocess(query)
