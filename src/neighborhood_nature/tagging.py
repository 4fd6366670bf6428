"""Part-of-speech tagging for waypoint queries."""

from __future__ import annotations

from typing import List, Protocol, Sequence, Tuple

from .errors import TaggerUnavailable
from .logging import module_logger

logger = module_logger(service='nature', component='tagging')

# Penn Treebank tags for singular and plural common nouns
NOUN_TAGS = frozenset({'NN', 'NNS'})


class Tagger(Protocol):
    def tag(self, tokens: Sequence[str]) -> List[Tuple[str, str]]:
        ...


class NltkTagger:
    """Tag tokens with NLTK's averaged perceptron tagger.

    The tagger model is loaded lazily by NLTK on first use. A missing model is
    reported as ``TaggerUnavailable`` rather than downloaded on the request
    path; run ``python -m nltk.downloader averaged_perceptron_tagger_eng``
    when deploying.
    """

    def __init__(self, language: str = 'eng') -> None:
        self._language = language

    def tag(self, tokens: Sequence[str]) -> List[Tuple[str, str]]:
        if not tokens:
            return []
        import nltk

        try:
            return [(token, tag) for token, tag in nltk.pos_tag(list(tokens), lang=self._language)]
        except LookupError as exc:
            logger.error('tagger_model_missing', extra={'error': str(exc).strip().splitlines()[0] if str(exc).strip() else ''})
            raise TaggerUnavailable(
                'Part-of-speech tagger model is not installed',
                details={'resource': 'averaged_perceptron_tagger_eng'},
            ) from exc


def is_common_noun(tag: str) -> bool:
    return tag in NOUN_TAGS


__all__ = ['Tagger', 'NltkTagger', 'NOUN_TAGS', 'is_common_noun']
