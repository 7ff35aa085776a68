"""Phrase heuristics for short user replies.

These run before, or instead of, a completion call when a reply is short and
conventional ("yes", "looks good, approved").
"""

from __future__ import annotations

import re

__all__ = ["is_affirmative", "is_approval", "is_bare_affirmative", "is_cancellation", "looks_like_change_request"]

_WORD = re.compile(r"[a-z0-9']+")

AFFIRMATIVE_PHRASES = (
    "yes",
    "yeah",
    "yep",
    "yup",
    "sure",
    "ok",
    "okay",
    "proceed",
    "go ahead",
    "continue",
    "do it",
    "generate",
    "generate it",
    "sounds good",
    "let's go",
    "lets go",
    "please do",
    "correct",
)

NEGATIONS = frozenset(
    {"no", "not", "don't", "dont", "doesnt", "isnt", "nope", "wait", "stop", "never", "hold", "cancel"}
)

APPROVAL_PHRASES = (
    "approved",
    "approve",
    "i approve",
    "looks good",
    "look good",
    "looks great",
    "lgtm",
    "perfect",
    "ship it",
    "that's great",
    "thats great",
    "love it",
    "good to go",
    "all good",
    "no changes",
    "happy with it",
)

CHANGE_MARKERS = frozenset(
    {
        "change",
        "make",
        "shorter",
        "longer",
        "add",
        "remove",
        "replace",
        "rewrite",
        "revise",
        "update",
        "edit",
        "fix",
        "instead",
        "tweak",
        "adjust",
        "mention",
        "include",
        "delete",
        "less",
        "more",
        "but",
    }
)

CANCEL_PHRASES = ("cancel", "nevermind", "never mind", "stop", "quit", "forget it")

FILLER_WORDS = frozenset(
    {"please", "thanks", "thank", "you", "that's", "thats", "fine", "great", "it", "then", "now", "and", "all", "good"}
)


def _normalize(text: str) -> str:
    return " ".join(_WORD.findall(text.casefold().replace("’", "'")))


def _contains_phrase(normalized: str, phrase: str) -> bool:
    return f" {phrase} " in f" {normalized} "


def _is_negation(word: str) -> bool:
    return word in NEGATIONS or word.endswith("n't")


def is_affirmative(text: str) -> bool:
    """Whether a reply explicitly agrees to proceed.

    Example:
        >>> is_affirmative("Yes, go ahead")
        True
        >>> is_affirmative("no, not yet")
        False
    """
    normalized = _normalize(text)
    if not normalized:
        return False
    if NEGATIONS.intersection(normalized.split()):
        return False
    return any(_contains_phrase(normalized, phrase) for phrase in AFFIRMATIVE_PHRASES)


def is_bare_affirmative(text: str) -> bool:
    """Whether a reply agrees to proceed and says nothing else.

    Example:
        >>> is_bare_affirmative("Yes please, go ahead!")
        True
        >>> is_bare_affirmative("yes, and the CEO is Bob")
        False
    """
    if not is_affirmative(text):
        return False
    remainder = f" {_normalize(text)} "
    for phrase in sorted(AFFIRMATIVE_PHRASES, key=len, reverse=True):
        while f" {phrase} " in remainder:
            remainder = remainder.replace(f" {phrase} ", " ")
    return all(word in FILLER_WORDS for word in remainder.split())


def is_approval(text: str) -> bool:
    """Whether review feedback approves the asset without asking for changes.

    Negated phrases ("not approved", "this isn't perfect") are never approvals.

    Example:
        >>> is_approval("looks good, approved")
        True
        >>> is_approval("looks good but make the headline shorter")
        False
        >>> is_approval("I don't approve")
        False
    """
    normalized = _normalize(text)
    matched = [phrase for phrase in APPROVAL_PHRASES if _contains_phrase(normalized, phrase)]
    if not matched:
        return False
    remainder = f" {normalized} "
    for phrase in sorted(matched, key=len, reverse=True):
        remainder = remainder.replace(f" {phrase} ", " ")
    words = remainder.split()
    if any(_is_negation(word) for word in words):
        return False
    return not CHANGE_MARKERS.intersection(words)


def looks_like_change_request(text: str) -> bool:
    """Whether feedback contains an edit instruction such as "change" or "shorter"."""
    return bool(CHANGE_MARKERS.intersection(_normalize(text).split()))


def is_cancellation(text: str) -> bool:
    """Whether a reply asks to abandon the current workflow."""
    normalized = _normalize(text)
    return any(_contains_phrase(normalized, phrase) for phrase in CANCEL_PHRASES)
