"""Shared fixtures: a static tagger, literal observation results and a fake geocoder."""

from __future__ import annotations

from types import SimpleNamespace
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import httpx
import pytest

from neighborhood_nature.config import NatureConfig
from neighborhood_nature.database import NatureDatabase
from neighborhood_nature.geocoding import ZipCodeGeocoder
from neighborhood_nature.http.controller import NatureController
from neighborhood_nature.models import Coordinate
from neighborhood_nature.observations import ObservationClient
from neighborhood_nature.query_parser import QueryParser
from neighborhood_nature.services.nature_service import NatureService
from neighborhood_nature.species_lookup import SpeciesLookup

# Coordinates as they come back from the lookup, keyed by feature
DAISY = (-87.629454, 41.848653)
CLOVER = (-87.635604, 41.855967)
BELLFLOWER = (-87.64748, 41.843539)
TREE_AND_LICHEN = (-87.622235, 41.897219)

LITERAL_LOCATIONS: Dict[str, List[Tuple[float, float]]] = {
    'daisy': [DAISY],
    'clover': [CLOVER],
    'bellflower': [BELLFLOWER],
    'tree': [TREE_AND_LICHEN],
    'lichen': [TREE_AND_LICHEN],
    'raspberry': [(-87.63, 41.85), (-87.64, 41.86), (-87.65, 41.87)],
}

_TAGS = {
    'a': 'DT',
    'an': 'DT',
    'the': 'DT',
    'some': 'DT',
    'and': 'CC',
    'or': 'CC',
    'i': 'PRP',
    'want': 'VBP',
    'see': 'VB',
    'to': 'TO',
    'near': 'IN',
    'by': 'IN',
    'quickly': 'RB',
    'very': 'RB',
    'red': 'JJ',
    'big': 'JJ',
    'pretty': 'JJ',
}


class StaticTagger:
    """Tag from a fixed table; unknown words are nouns, digits are numbers."""

    def __init__(self, tags: Optional[Dict[str, str]] = None, default: str = 'NN') -> None:
        self._tags = dict(_TAGS)
        self._tags.update(tags or {})
        self._default = default
        self.calls: List[List[str]] = []

    def tag(self, tokens: Sequence[str]) -> List[Tuple[str, str]]:
        self.calls.append(list(tokens))
        tagged = []
        for token in tokens:
            if token.lstrip('+-').isdigit():
                tagged.append((token, 'CD'))
            elif token.endswith('s') and token not in self._tags:
                tagged.append((token, 'NNS'))
            else:
                tagged.append((token, self._tags.get(token, self._default)))
        return tagged


def _unused_transport(request: httpx.Request) -> httpx.Response:
    return httpx.Response(404)


class LiteralObservationClient(ObservationClient):
    """Serve fixed coordinates per feature without rounding them."""

    def __init__(self, config: NatureConfig, locations: Optional[Dict[str, Iterable[Tuple[float, float]]]] = None):
        super().__init__(config, client=httpx.Client(transport=httpx.MockTransport(_unused_transport)))
        self._locations = {k: list(v) for k, v in (locations or LITERAL_LOCATIONS).items()}
        self.calls: List[Tuple[str, object, str]] = []

    def fetch(self, feature, label, bounding_box, start_date):
        self.calls.append((feature, bounding_box, start_date))
        return [Coordinate(x, y, label, feature) for x, y in self._locations.get(feature, [])]


class FakeNominatim:
    """Stand-in for geopy's Nominatim returning a fixed location."""

    def __init__(self, boundingbox: Optional[List[str]] = None, found: bool = True) -> None:
        self.boundingbox = boundingbox or ['41.80', '41.90', '-87.70', '-87.60']
        self.found = found
        self.queries: List[str] = []

    def geocode(self, query, exactly_one=True, timeout=None):
        self.queries.append(query)
        if not self.found:
            return None
        return SimpleNamespace(
            latitude=41.85,
            longitude=-87.65,
            raw={'boundingbox': list(self.boundingbox)},
        )


@pytest.fixture
def config(tmp_path) -> NatureConfig:
    return NatureConfig(overrides={
        'database_path': str(tmp_path / 'nature.db'),
        'autocorrect_enabled': False,
        'route_result_limit': 10,
        'route_search_radius_miles': 15.0,
    })


@pytest.fixture
def database(config) -> NatureDatabase:
    db = NatureDatabase(config.database_path)
    yield db
    db.close()


@pytest.fixture
def tagger() -> StaticTagger:
    return StaticTagger()


@pytest.fixture
def observations(config) -> LiteralObservationClient:
    return LiteralObservationClient(config)


@pytest.fixture
def geocoder(config) -> ZipCodeGeocoder:
    return ZipCodeGeocoder(config, geocoder=FakeNominatim())


def build_controller(config, database, observations=None, geocoder=None, tagger=None) -> NatureController:
    service = NatureService(
        config,
        database,
        observations or LiteralObservationClient(config),
        QueryParser(tagger or StaticTagger()),
        geocoder=geocoder or ZipCodeGeocoder(config, geocoder=FakeNominatim()),
        lookup=SpeciesLookup.from_data_file(),
    )
    return NatureController(service)


@pytest.fixture
def controller(config, database, observations, geocoder) -> NatureController:
    return build_controller(config, database, observations, geocoder)
