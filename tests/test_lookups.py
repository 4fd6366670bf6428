import pytest
from geopy.exc import GeocoderTimedOut

from conftest import FakeNominatim

from neighborhood_nature.autocorrect import SpeciesCorrector, load_species_corpus, load_species_data
from neighborhood_nature.errors import TaggerUnavailable
from neighborhood_nature.geocoding import ZIP_BOX_HALF_WIDTH, ZipCodeGeocoder, format_zip_code
from neighborhood_nature.species_lookup import SpeciesLookup
from neighborhood_nature.tagging import NltkTagger, is_common_noun


def test_bundled_corpus_has_lookup_species():
    corpus = load_species_corpus()
    assert {'daisy', 'clover', 'bellflower', 'tree', 'lichen'} <= set(corpus)


def test_unreadable_data_file_is_empty(tmp_path):
    assert load_species_data(tmp_path / 'missing.json') == {}
    assert SpeciesLookup.from_data_file(tmp_path / 'missing.json').names() == []


@pytest.mark.parametrize('term, expected', [
    ('dasy', 'daisy'),
    ('clovr', 'clover'),
    ('daisy', 'daisy'),
    ('red oak', 'red oak'),
    ('xylophone', 'xylophone'),
])
def test_corrector(term, expected):
    assert SpeciesCorrector.from_data_file().correct(term) == expected


def test_lookup_is_case_insensitive_and_copies():
    lookup = SpeciesLookup({'Daisy': [{'latitude': 1.0, 'longitude': 2.0}]})
    result = lookup.lookup(' DAISY ')
    result[0]['latitude'] = 99.0
    assert lookup.lookup('daisy') == [{'latitude': 1.0, 'longitude': 2.0}]


@pytest.mark.parametrize('value, expected', [('2134', '02134'), (' 60616 ', '60616'), (7, '00007')])
def test_format_zip_code(value, expected):
    assert format_zip_code(value) == expected


def test_format_zip_code_rejects_non_digits():
    with pytest.raises(ValueError):
        format_zip_code('6o616')


def test_geocoder_uses_point_when_no_bounds(config):
    nominatim = FakeNominatim()
    nominatim.boundingbox = []
    bounds = ZipCodeGeocoder(config, geocoder=nominatim).bounds('60616')
    assert bounds.max_x - bounds.min_x == pytest.approx(2 * ZIP_BOX_HALF_WIDTH)
    assert (bounds.center.x, bounds.center.y) == pytest.approx((-87.65, 41.85))


def test_geocoder_failure_gives_no_bounds(config):
    class TimingOut:
        def geocode(self, *args, **kwargs):
            raise GeocoderTimedOut('slow')

    assert ZipCodeGeocoder(config, geocoder=TimingOut()).bounds('60616') is None


def test_noun_tags():
    assert is_common_noun('NN') and is_common_noun('NNS')
    assert not is_common_noun('NNP')
    assert not is_common_noun('VB')


def test_missing_tagger_model_is_reported(monkeypatch):
    nltk = pytest.importorskip('nltk')

    def missing(*args, **kwargs):
        raise LookupError('Resource averaged_perceptron_tagger_eng not found.')

    monkeypatch.setattr(nltk, 'pos_tag', missing)
    with pytest.raises(TaggerUnavailable):
        NltkTagger().tag(['daisy'])
    assert NltkTagger().tag([]) == []
