"""Autocorrect feature terms against a corpus of known species names."""

from __future__ import annotations

import difflib
import json
from pathlib import Path
from typing import Iterable, List, Optional

from .logging import module_logger

logger = module_logger(service='nature', component='autocorrect')

SPECIES_DATA_FILE = Path(__file__).resolve().parent / 'data' / 'species.json'


def load_species_data(path: Optional[Path] = None) -> dict:
    """Read the bundled species data file, returning an empty mapping on failure."""
    data_path = Path(path) if path else SPECIES_DATA_FILE
    try:
        with open(data_path, 'r', encoding='utf-8') as f:
            return json.load(f)
    except (OSError, json.JSONDecodeError) as exc:
        logger.warning('species_data_unavailable', extra={'path': str(data_path), 'error': str(exc)})
        return {}


def load_species_corpus(path: Optional[Path] = None) -> List[str]:
    return [str(name).lower() for name in load_species_data(path).get('species', [])]


class SpeciesCorrector:
    """Replace misspelled feature terms with the closest known species name."""

    def __init__(self, corpus: Iterable[str], cutoff: float = 0.8) -> None:
        self._corpus = sorted({term.lower() for term in corpus if term})
        self._known = set(self._corpus)
        self._cutoff = cutoff

    @classmethod
    def from_data_file(cls, path: Optional[Path] = None, cutoff: float = 0.8) -> 'SpeciesCorrector':
        return cls(load_species_corpus(path), cutoff=cutoff)

    def correct(self, term: str) -> str:
        if not term or term in self._known or ' ' in term:
            return term
        matches = difflib.get_close_matches(term, self._corpus, n=1, cutoff=self._cutoff)
        if not matches:
            return term
        logger.debug('feature_corrected', extra={'original': term, 'corrected': matches[0]})
        return matches[0]


__all__ = ['SpeciesCorrector', 'load_species_corpus', 'load_species_data', 'SPECIES_DATA_FILE']
