import pytest

from conftest import StaticTagger

from neighborhood_nature.autocorrect import SpeciesCorrector
from neighborhood_nature.errors import AmountTooLarge, AmountTooSmall, TaggerUnavailable
from neighborhood_nature.models import MAX_AMOUNT
from neighborhood_nature.query_parser import BREAK, PHRASE, WORD, QueryParser, Token, normalize, tokenize


@pytest.fixture
def parser():
    return QueryParser(StaticTagger())


def _summary(descriptions):
    return [(d.max_amount, d.features, d.label) for d in descriptions]


def test_normalize_folds_diacritics_and_case():
    assert normalize('Pâquerette CAFÉ') == 'paquerette cafe'


def test_tokenize_keeps_quoted_phrases_and_breaks():
    assert tokenize('"Red  Oak", moss; fern!') == [
        Token(PHRASE, 'red oak'),
        Token(WORD, 'moss'),
        Token(BREAK, ';'),
        Token(WORD, 'fern'),
        Token(BREAK, '!'),
    ]


def test_semicolons_separate_waypoints(parser):
    result = parser.parse('daisy;clover;bellflower')
    assert [d.features for d in result] == [['daisy'], ['clover'], ['bellflower']]
    assert [d.label for d in result] == ['daisy', 'clover', 'bellflower']


def test_counts_attach_to_following_features(parser):
    result = parser.parse('3 daisies and 2 clovers')
    assert _summary(result) == [
        (3, ['daisies'], '3 daisies'),
        (2, ['clovers'], '2 clovers'),
    ]


def test_consecutive_nouns_group_into_one_description(parser):
    result = parser.parse('tree lichen')
    assert len(result) == 1
    assert result[0].features == ['tree', 'lichen']
    assert result[0].label == 'tree,lichen'


def test_commas_do_not_split_descriptions(parser):
    result = parser.parse('3 daisy, clover')
    assert _summary(result) == [(3, ['daisy', 'clover'], '3 daisy,clover')]


def test_spelled_out_numbers(parser):
    result = parser.parse('two maples. seven ferns')
    assert [d.max_amount for d in result] == [2, 7]


def test_quantifiers_request_the_maximum(parser):
    result = parser.parse('all robins')
    assert result[0].max_amount == MAX_AMOUNT
    assert result[0].label == f'{MAX_AMOUNT} robins'


def test_non_noun_words_close_a_description(parser):
    result = parser.parse('I want to see daisy near the pond')
    assert [d.features for d in result] == [['daisy'], ['pond']]


def test_only_non_nouns_parse_to_nothing(parser):
    assert parser.parse('the and quickly to') == []


@pytest.mark.parametrize('text', ['', '   ', ';;;', '...!?'])
def test_empty_input_parses_to_nothing(parser, text):
    assert parser.parse(text) == []


def test_quoted_phrase_is_one_feature(parser):
    result = parser.parse('"red oak" near pond')
    assert [d.features for d in result] == [['red oak'], ['pond']]


def test_count_too_large_raises(parser):
    with pytest.raises(AmountTooLarge) as exc_info:
        parser.parse('daisy; 11 clovers')
    assert exc_info.value.status == 413


@pytest.mark.parametrize('text', ['0 daisies', '-2 daisies'])
def test_count_too_small_raises(parser, text):
    with pytest.raises(AmountTooSmall):
        parser.parse(text)


def test_repeated_count_restarts_description(parser):
    result = parser.parse('3 5 daisies')
    assert _summary(result) == [(5, ['daisies'], '5 daisies')]


def test_count_after_features_starts_new_description(parser):
    result = parser.parse('oak 4 moss')
    assert _summary(result) == [(5, ['oak'], 'oak'), (4, ['moss'], '4 moss')]


def test_tagger_sees_each_clause():
    tagger = StaticTagger()
    QueryParser(tagger).parse('3 daisies; "red oak" moss')
    assert tagger.calls == [['3', 'daisies'], ['moss']]


def test_autocorrect_replaces_unknown_features():
    parser = QueryParser(StaticTagger(), SpeciesCorrector(['daisy', 'clover'], cutoff=0.8))
    result = parser.parse('dasy; clover')
    assert [d.features for d in result] == [['daisy'], ['clover']]


def test_autocorrect_leaves_unmatched_features():
    parser = QueryParser(StaticTagger(), SpeciesCorrector(['daisy'], cutoff=0.8))
    assert parser.parse('lighthouse')[0].features == ['lighthouse']


def test_missing_tagger_is_fatal():
    class BrokenTagger:
        def tag(self, tokens):
            raise TaggerUnavailable('Part-of-speech tagger model is not installed')

    with pytest.raises(TaggerUnavailable):
        QueryParser(BrokenTagger()).parse('daisy')
