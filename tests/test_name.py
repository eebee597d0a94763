import pytest

from munge.name import (
    Hashed,
    Literal,
    as_name,
    fnv1a_hash,
    fnv1a_matches,
    tag_from_int,
    tag_to_int,
    tag_to_str,
)


def test_fnv1a_engine_variant():
    assert fnv1a_hash(b'all_fly_snowspeeder') == 0x266561d8
    assert fnv1a_hash('all_fly_snowspeeder') == 0x266561d8
    assert fnv1a_matches(0x266561d8, 'all_fly_snowspeeder')


def test_fnv1a_empty_is_offset_basis():
    assert fnv1a_hash(b'') == 2166136261


def test_fnv1a_folds_case():
    assert fnv1a_hash('ALL_FLY_SNOWSPEEDER') == fnv1a_hash('all_fly_snowspeeder')


def test_fnv1a_is_not_lowercase():
    """The OR with 0x20 turns the underscore (0x5f) into 0x7f."""
    assert fnv1a_hash('a_b') == fnv1a_hash(b'a\x7fb')


def test_tag_int_conversion():
    assert tag_from_int(0x5f544d46) == b'FMT_'
    assert tag_to_int(b'FMT_') == 0x5f544d46
    assert tag_to_int(tag_from_int(0xd8616526)) == 0xd8616526


def test_tag_to_str():
    assert tag_to_str(b'NAME') == 'NAME'
    assert tag_to_str(b'lvl_') == 'lvl_'
    assert tag_to_str(tag_from_int(0x266561d8)) == '0x266561d8'


def test_literal():
    name = Literal('NAME')

    assert name.tag == b'NAME'
    assert name.matches(b'NAME')
    assert not name.matches(b'NAMF')


def test_literal_prefix():
    prefix = Literal('FM')

    assert prefix.is_prefix_of(b'FMT_')
    assert not prefix.matches(b'FMT_')

    with pytest.raises(ValueError):
        prefix.tag


def test_literal_wrong_length():
    with pytest.raises(ValueError):
        Literal('TOOLONG')

    with pytest.raises(ValueError):
        Literal(b'')


def test_hashed():
    name = Hashed.from_string('all_fly_snowspeeder')

    assert name.value == 0x266561d8
    assert name.tag == b'\xd8\x61\x65\x26'
    assert name.matches(b'\xd8\x61\x65\x26')
    assert str(name) == '0x266561d8'


def test_hashed_out_of_range():
    with pytest.raises(ValueError):
        Hashed(1 << 32)


def test_as_name():
    assert as_name('NAME') == Literal(b'NAME')
    assert as_name(0x266561d8) == Hashed(0x266561d8)

    hashed = Hashed(1)
    assert as_name(hashed) is hashed

    with pytest.raises(ValueError):
        as_name(1.5)
