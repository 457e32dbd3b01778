"""Fuzzy matching and ranking of commands.

The scorer is a subsequence matcher in the style of fzf/skim: every query
character must appear in the target in order, and the score rewards matches
that are contiguous, that start at word boundaries (after a separator, at a
camelCase hump, at the start of the text) and penalises gaps.  Matching is
smart-case: a query with no uppercase letters matches case-insensitively.

Only ranking quality depends on the exact constants.  The properties callers
rely on are that prefix and substring matches outrank scattered ones and that
a query which is not a subsequence never matches.
"""

from collections.abc import Iterable

from cmdstash.models import Command, SearchHit

SCORE_MATCH = 16
SCORE_GAP_START = -3
SCORE_GAP_EXTENSION = -1
BONUS_BOUNDARY = SCORE_MATCH // 2
BONUS_NON_WORD = SCORE_MATCH // 2
BONUS_CAMEL = BONUS_BOUNDARY + SCORE_GAP_EXTENSION
BONUS_CONSECUTIVE = -(SCORE_GAP_START + SCORE_GAP_EXTENSION)
BONUS_FIRST_CHAR_MULTIPLIER = 2

_NEG = float("-inf")

_NON_WORD, _LOWER, _UPPER, _DIGIT = range(4)


def _char_class(ch: str) -> int:
    if ch.islower():
        return _LOWER
    if ch.isupper():
        return _UPPER
    if ch.isdigit():
        return _DIGIT
    if ch.isalpha():
        return _LOWER
    return _NON_WORD


def _bonus(prev: int, cur: int) -> int:
    if prev == _NON_WORD and cur != _NON_WORD:
        return BONUS_BOUNDARY
    if (prev == _LOWER and cur == _UPPER) or (prev != _DIGIT and cur == _DIGIT):
        return BONUS_CAMEL
    if cur == _NON_WORD:
        return BONUS_NON_WORD
    return 0


def _fold(text: str) -> str:
    """Lowercase per character, keeping characters whose lowercase form is longer."""
    folded = []
    for ch in text:
        lower = ch.lower()
        folded.append(lower if len(lower) == 1 else ch)
    return "".join(folded)


def _is_subsequence(target: str, query: str) -> bool:
    it = iter(target)
    return all(ch in it for ch in query)


def fuzzy_score(target: str, query: str) -> int | None:
    """Score ``query`` against ``target``; None if it does not match at all."""
    if not query:
        return None
    case_sensitive = any(ch.isupper() for ch in query)
    haystack = target if case_sensitive else _fold(target)
    if not _is_subsequence(haystack, query):
        return None

    n = len(target)
    bonuses: list[int] = []
    prev = _NON_WORD
    for ch in target:
        cur = _char_class(ch)
        bonuses.append(_bonus(prev, cur))
        prev = cur

    # prev_row[j]: best score with the previous query char matched at j.
    # prev_chain[j]: bonus carried by the consecutive run ending at j.
    prev_row: list[float] = [_NEG] * n
    prev_chain: list[int] = [0] * n
    for i, qch in enumerate(query):
        row: list[float] = [_NEG] * n
        chain: list[int] = [0] * n
        gap_carry = _NEG
        for j in range(n):
            if j >= 2 and prev_row[j - 2] != _NEG:
                gap_carry = max(gap_carry + SCORE_GAP_EXTENSION, prev_row[j - 2] + SCORE_GAP_START)
            elif gap_carry != _NEG:
                gap_carry += SCORE_GAP_EXTENSION
            if haystack[j] != qch:
                continue
            bonus = bonuses[j]
            if i == 0:
                row[j] = SCORE_MATCH + bonus * BONUS_FIRST_CHAR_MULTIPLIER
                chain[j] = bonus
                continue
            best = _NEG
            if j >= 1 and prev_row[j - 1] != _NEG:
                run_bonus = max(bonus, prev_chain[j - 1], BONUS_CONSECUTIVE)
                best = prev_row[j - 1] + SCORE_MATCH + run_bonus
                chain[j] = run_bonus
            if gap_carry != _NEG and gap_carry + SCORE_MATCH + bonus > best:
                best = gap_carry + SCORE_MATCH + bonus
                chain[j] = bonus
            row[j] = best
        prev_row, prev_chain = row, chain

    score = max(prev_row, default=_NEG)
    return None if score == _NEG else int(score)


def score_command(command: Command, query: str) -> int:
    """Return the better of the name and body scores, 0 if neither matches."""
    name_score = fuzzy_score(command.name, query) or 0
    body_score = fuzzy_score(command.body, query) or 0
    return max(name_score, body_score)


def rank(candidates: Iterable[tuple[str, Command]], query: str) -> list[SearchHit]:
    """Rank ``(project_name, command)`` pairs by relevance to ``query``.

    Non-matching commands are dropped.  Ties keep their input order.
    """
    hits = []
    for project, command in candidates:
        score = score_command(command, query)
        if score > 0:
            hits.append(SearchHit(project=project, command=command, score=score))
    hits.sort(key=lambda hit: hit.score, reverse=True)
    return hits
