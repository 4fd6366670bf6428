"""
Waypoint query parser.

Turns free text such as ``"3 daisies and 2 clovers; \"red oak\""`` into an
ordered list of :class:`WaypointDescription` objects. Each description holds
a requested count and one or more feature terms; consecutive nouns group
into a single description and any other word, a count, or a clause break
closes it.
"""

from __future__ import annotations

import re
import unicodedata
from typing import Iterable, List, NamedTuple, Optional

from .autocorrect import SpeciesCorrector
from .errors import AmountTooLarge, AmountTooSmall
from .logging import module_logger
from .models import MAX_AMOUNT, MIN_AMOUNT, WaypointDescription
from .tagging import Tagger, is_common_noun

logger = module_logger(service='nature', component='query_parser')

WORD = 'word'
PHRASE = 'phrase'
BREAK = 'break'

NUMBER_WORDS = {
    'one': 1,
    'two': 2,
    'three': 3,
    'four': 4,
    'five': 5,
    'six': 6,
    'seven': 7,
    'eight': 8,
    'nine': 9,
    'ten': 10,
}
QUANTIFIERS = frozenset({'all', 'every'})

_TOKEN_RE = re.compile(r'"([^"]*)"|([;.!?\n]+)|([\w\'-]+)')
_INTEGER_RE = re.compile(r'^[-+]?\d+$')


class Token(NamedTuple):
    kind: str
    text: str


def normalize(text: str) -> str:
    """Fold diacritics and lowercase."""
    decomposed = unicodedata.normalize('NFKD', text or '')
    stripped = ''.join(ch for ch in decomposed if not unicodedata.combining(ch))
    return stripped.lower()


def tokenize(text: str) -> List[Token]:
    tokens: List[Token] = []
    for match in _TOKEN_RE.finditer(normalize(text)):
        phrase, brk, word = match.groups()
        if phrase is not None:
            phrase = ' '.join(phrase.split())
            if phrase:
                tokens.append(Token(PHRASE, phrase))
        elif brk is not None:
            tokens.append(Token(BREAK, brk))
        else:
            word = word.strip("'")
            if not _INTEGER_RE.match(word):
                word = word.strip("-")
            if word:
                tokens.append(Token(WORD, word))
    return tokens


def validate_amount(amount: int) -> int:
    if amount > MAX_AMOUNT:
        raise AmountTooLarge(
            f'Requested {amount} waypoints; at most {MAX_AMOUNT} are allowed',
            details={'amount': amount, 'maximum': MAX_AMOUNT},
        )
    if amount < MIN_AMOUNT:
        raise AmountTooSmall(
            f'Requested {amount} waypoints; at least {MIN_AMOUNT} is required',
            details={'amount': amount, 'minimum': MIN_AMOUNT},
        )
    return amount


def parse_count(word: str) -> Optional[int]:
    """Return the count a token denotes, or None when it is not a count."""
    if _INTEGER_RE.match(word):
        return validate_amount(int(word))
    if word in NUMBER_WORDS:
        return NUMBER_WORDS[word]
    if word in QUANTIFIERS:
        return MAX_AMOUNT
    return None


def _clauses(tokens: Iterable[Token]) -> List[List[Token]]:
    clauses: List[List[Token]] = [[]]
    for token in tokens:
        if token.kind == BREAK:
            clauses.append([])
        else:
            clauses[-1].append(token)
    return [clause for clause in clauses if clause]


class QueryParser:
    """Parse waypoint requests with a part-of-speech tagger and optional autocorrect."""

    def __init__(self, tagger: Tagger, corrector: Optional[SpeciesCorrector] = None) -> None:
        self._tagger = tagger
        self._corrector = corrector

    def parse(self, text: str) -> List[WaypointDescription]:
        descriptions: List[WaypointDescription] = []
        for clause in _clauses(tokenize(text)):
            descriptions.extend(self._parse_clause(clause))
        logger.debug('query_parsed', extra={'descriptions': [d.label for d in descriptions]})
        return descriptions

    def _parse_clause(self, clause: List[Token]) -> List[WaypointDescription]:
        words = [token.text for token in clause if token.kind == WORD]
        tags = iter([tag for _, tag in self._tagger.tag(words)] if words else [])

        closed: List[WaypointDescription] = []
        current = WaypointDescription()

        def close() -> WaypointDescription:
            if current.has_features():
                current.create_label()
                closed.append(current)
            return WaypointDescription()

        for token in clause:
            if token.kind == PHRASE:
                current.add_feature(token.text)
                continue

            tag = next(tags, '')
            count = parse_count(token.text)
            if count is not None:
                if current.has_features() or current.amount_was_set:
                    current = close()
                current.set_max_amount(count)
            elif is_common_noun(tag):
                current.add_feature(self._correct(token.text))
            elif current.has_features():
                current = close()

        close()
        return closed

    def _correct(self, feature: str) -> str:
        if self._corrector is None:
            return feature
        return self._corrector.correct(feature)


__all__ = [
    'Token',
    'QueryParser',
    'NUMBER_WORDS',
    'QUANTIFIERS',
    'normalize',
    'tokenize',
    'parse_count',
    'validate_amount',
]
