"""Readability statistics for README documents.

Markdown is rendered to HTML, cleaned into plain sentences and scored with
the Flesch reading ease formula:

    206.835 - 1.015 * (words / sentences) - 84.6 * (syllables / words)

Syllables are estimated with a regex heuristic rather than a dictionary, so
scores are approximate for unusual words.
"""

import html
import math
import re

from markdown_it import MarkdownIt

# Closing tags of block elements that end a sentence
FULL_STOP_TAGS = ["li", "p", "h1", "h2", "h3", "h4", "h5", "h6", "dd"]

# Words the heuristic gets wrong
PROBLEM_WORDS = {
    "simile": 3,
    "forever": 3,
    "shoreline": 2,
}

# Counted as two syllables but should be one
SUB_SYLLABLES = [
    re.compile(pattern)
    for pattern in (
        r"cial",
        r"tia",
        r"cius",
        r"cious",
        r"giu",
        r"ion",
        r"iou",
        r"sia$",
        r"[^aeiuoyt]{2,}ed$",
        r".ely$",
        r"[cg]h?e[rsd]?$",
        r"rved?$",
        r"[aeiouy][dt]es?$",
        r"[aeiouy][^aeiouydt]e[rsd]?$",
        r"^[dr]e[aeiou][^aeiou]+$",  # deal, deign
        r"[aeiouy]rse$",  # purse, hearse
    )
]

# Counted as one syllable but should be two
ADD_SYLLABLES = [
    re.compile(pattern)
    for pattern in (
        r"ia",
        r"riet",
        r"dien",
        r"iu",
        r"io",
        r"ii",
        r"[aeiouym]bl$",
        r"[aeiou]{3}",
        r"^mc",
        r"ism$",
        r"([^aeiouy])\1l$",
        r"[^l]lien",
        r"^coa[dglx].",
        r"[^gq]ua[^auieo]",
        r"dnt$",
        r"uity$",
        r"ie(r|st)$",
    )
]

# Single syllable prefixes and suffixes
PREFIX_SUFFIX = [
    re.compile(pattern)
    for pattern in (
        r"^un",
        r"^fore",
        r"ly$",
        r"less$",
        r"ful$",
        r"ers?$",
        r"ings?$",
    )
]

_TERMINATORS = re.compile(r"[.!?]+")
_WORD_CHAR = re.compile(r"[A-Za-z0-9]")
# Whole whitespace-delimited tokens holding an "@", matched from token start
_EMAIL_TOKEN = re.compile(r"(?<!\S)[^\s@]*@\S*")

_markdown = MarkdownIt("commonmark")


def render_markdown(markdown: str) -> str:
    """Render markdown source to HTML."""
    return _markdown.render(markdown)


def clean_text(text: str) -> str:
    """Reduce HTML or plain text to terminator-separated sentences.

    Args:
        text: HTML (as rendered from markdown) or plain text.

    Returns:
        Whitespace-normalised text where every sentence ends with ``". "``
        and the final sentence ends with ``"."``.
    """
    for tag in FULL_STOP_TAGS:
        text = text.replace(f"</{tag}>", ".")

    text = re.sub(r"<[^>]+>", "", text)  # Strip tags
    text = html.unescape(text)
    text = re.sub(r"[,:;()/&+]|--", " ", text)  # Punctuation counts as space
    text = re.sub(r"[.!?]", ".", text)  # Unify terminators
    text = re.sub(r"^\s+", "", text)
    # Periods inside email addresses must not end a sentence
    text = _EMAIL_TOKEN.sub(lambda match: match.group().replace(".", ""), text)
    text = re.sub(r" *(\r\n|\n|\r) *", ".", text)  # Line breaks end sentences
    text = re.sub(r"\.\.+", ".", text)  # Duplicated terminators
    text = re.sub(r" *\.", ". ", text)  # Pad terminators
    text = re.sub(r"\s+", " ", text)
    text = re.sub(r"\s+$", "", text)

    if not text.endswith("."):
        text += "."
    return text


def words(text: str) -> list[str]:
    """Split cleaned text into word tokens.

    A token is any whitespace-separated run that holds at least one letter
    or digit, so stray terminators are not counted as words.
    """
    return [token for token in text.split() if _WORD_CHAR.search(token)]


def word_count(text: str) -> int:
    return len(words(text)) or 1


def sentence_count(text: str) -> int:
    segments = [segment for segment in _TERMINATORS.split(text) if segment.strip()]
    return len(segments) or 1


def syllable_count(word: str) -> int:
    """Estimate the number of syllables in a word.

    Args:
        word: A single token; non-letters are ignored.

    Returns:
        Estimated syllables, at least 1.
    """
    word = re.sub(r"[^a-z]", "", word.lower())
    if word in PROBLEM_WORDS:
        return PROBLEM_WORDS[word]

    # Remove prefixes and suffixes and count how many were taken
    prefix_suffix_count = 0
    for pattern in PREFIX_SUFFIX:
        if pattern.search(word):
            word = pattern.sub("", word, count=1)
            prefix_suffix_count += 1

    word_parts = [part for part in re.split(r"[^aeiouy]+", word) if part.strip()]
    count = len(word_parts) + prefix_suffix_count

    for pattern in SUB_SYLLABLES:
        if pattern.search(word):
            count -= 1
    for pattern in ADD_SYLLABLES:
        if pattern.search(word):
            count += 1

    return count or 1


def average_words_per_sentence(text: str) -> float:
    return word_count(text) / sentence_count(text)


def average_syllables_per_word(text: str) -> float:
    tokens = words(text)
    syllables = sum(syllable_count(token) for token in tokens)
    return (syllables or 1) / (len(tokens) or 1)


def flesch_reading_ease(text: str) -> float:
    """Compute the Flesch reading ease of a text, rounded to one decimal.

    Args:
        text: HTML or plain text; it is cleaned first.

    Returns:
        Reading ease. Typical prose falls in 0-100, but the formula is
        unbounded in both directions.
    """
    text = clean_text(text)
    ease = (
        206.835
        - 1.015 * average_words_per_sentence(text)
        - 84.6 * average_syllables_per_word(text)
    )
    # Round half up, not to even
    return math.floor(ease * 10 + 0.5) / 10


def normalize_ease(ease: float) -> float:
    """Fold a reading ease score into [0, 1].

    The score is divided by 100 and made positive; anything still above 1 is
    divided by 10 until it fits. This is not monotonic: an ease of 120 maps
    to 0.12, below an ease of 90.
    """
    score = abs(ease / 100)
    while score > 1:
        score /= 10
    return score
