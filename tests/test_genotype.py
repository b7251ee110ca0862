"""Tests for genotype resolution and inheritance."""

import pytest

from equigen.config import profile_from_dict
from equigen.exceptions import ConfigurationError, GenotypeError
from equigen.genotype import GenotypeResolver, MAX_REDRAW_ATTEMPTS
from equigen.random_source import NumpyRandomSource, SequenceRandomSource


def _profile(sample_profile_dict, allele_weights, **overrides):
    sample_profile_dict['allele_weights'] = allele_weights
    sample_profile_dict.update(overrides)
    return profile_from_dict(sample_profile_dict)


def test_resolve_covers_profile_loci(sample_profile):
    """Test that every weighted locus and configured modifier is resolved."""
    genotype = GenotypeResolver(NumpyRandomSource(1)).resolve(sample_profile)
    assert set(sample_profile.allele_weights) <= set(genotype)
    assert isinstance(genotype['sooty'], bool)
    assert isinstance(genotype['flaxen'], bool)
    assert 'roan' not in genotype
    assert 'rabicano' not in genotype


def test_resolve_seeded_determinism(sample_profile):
    """Test that the same seed yields the same genotype."""
    first = GenotypeResolver(NumpyRandomSource(42)).resolve(sample_profile)
    second = GenotypeResolver(NumpyRandomSource(42)).resolve(sample_profile)
    assert first == second


def test_resolve_unseeded_variety(sample_profile):
    """Test that unseeded resolution is not constant."""
    resolver = GenotypeResolver()
    results = {tuple(sorted(resolver.resolve(sample_profile).items())) for _ in range(10)}
    assert len(results) >= 2


def test_zero_weight_allele_never_drawn(sample_profile_dict):
    """Test that zero-weight alleles never appear."""
    profile = _profile(sample_profile_dict, {'agouti': {'A': 1, 'a': 0}})
    resolver = GenotypeResolver(NumpyRandomSource(3))
    for _ in range(1000):
        assert resolver.resolve(profile)['agouti'] == 'A/A'


def test_pairs_are_normalized(sample_profile_dict):
    """Test that drawn pairs use catalog order regardless of draw order."""
    profile = _profile(sample_profile_dict, {'extension': {'E': 1, 'e': 1}})
    # First draw picks e, second picks E
    genotype = GenotypeResolver(SequenceRandomSource([0.9, 0.1])).resolve(profile)
    assert genotype['extension'] == 'E/e'


def test_disallowed_pair_redrawn(sample_profile_dict):
    """Test that disallowed pairs are re-drawn."""
    profile = _profile(
        sample_profile_dict,
        {'frame_overo': {'O': 1, 'n': 1}},
        boolean_modifiers_prevalence={},
        disallowed_combinations={'frame_overo': ['O/O']},
    )
    # O/O first, then O/n
    rng = SequenceRandomSource([0.1, 0.1, 0.1, 0.9])
    assert GenotypeResolver(rng).resolve(profile)['frame_overo'] == 'O/n'


def test_disallowed_pair_exhausts_attempts(sample_profile_dict):
    """Test that an unavoidable disallowed pair raises ConfigurationError."""
    profile = _profile(
        sample_profile_dict,
        {'frame_overo': {'O': 1, 'n': 0}},
        disallowed_combinations={'frame_overo': ['O/O']},
    )
    rng = SequenceRandomSource([0.5])
    with pytest.raises(ConfigurationError):
        GenotypeResolver(rng).resolve(profile)
    assert rng.calls == 2 * MAX_REDRAW_ATTEMPTS


def test_seeded_resolve_never_produces_disallowed(sample_profile):
    """Test that O/O never appears when disallowed."""
    resolver = GenotypeResolver(NumpyRandomSource(11))
    for _ in range(300):
        assert resolver.resolve(sample_profile)['frame_overo'] != 'O/O'


def test_inherit_mendelian_gametes(sample_profile_dict):
    """Test that each parent contributes one allele."""
    profile = _profile(sample_profile_dict, {'extension': {'E': 1, 'e': 1}}, boolean_modifiers_prevalence={})
    resolver = GenotypeResolver(NumpyRandomSource(5))
    sire = {'extension': 'E/E'}
    dam = {'extension': 'e/e'}
    for _ in range(50):
        assert resolver.inherit(sire, dam, profile)['extension'] == 'E/e'


def test_inherit_heterozygous_parents_can_produce_recessive(sample_profile_dict):
    """Test that two carriers can produce every genotype."""
    profile = _profile(sample_profile_dict, {'extension': {'E': 1, 'e': 1}}, boolean_modifiers_prevalence={})
    resolver = GenotypeResolver(NumpyRandomSource(9))
    seen = {resolver.inherit({'extension': 'E/e'}, {'extension': 'E/e'}, profile)['extension'] for _ in range(200)}
    assert seen == {'E/E', 'E/e', 'e/e'}


def test_inherit_missing_parent_locus_drawn_from_profile(sample_profile_dict):
    """Test that loci a parent lacks come from breed weights."""
    profile = _profile(sample_profile_dict, {'extension': {'E': 1, 'e': 1}, 'gray': {'G': 0, 'g': 1}})
    foal = GenotypeResolver(NumpyRandomSource(2)).inherit({'extension': 'E/E'}, {'extension': 'e/e'}, profile)
    assert foal['gray'] == 'g/g'


def test_inherit_locus_outside_profile_and_one_parent_omitted(sample_profile_dict):
    """Test that a locus only one parent carries is dropped when the breed has no weights for it."""
    profile = _profile(sample_profile_dict, {'extension': {'E': 1, 'e': 1}})
    foal = GenotypeResolver(NumpyRandomSource(2)).inherit(
        {'extension': 'E/E', 'roan': 'Rn/rn'}, {'extension': 'e/e'}, profile
    )
    assert 'roan' not in foal


def test_inherit_disallowed_pair_redrawn(sample_profile_dict):
    """Test that two frame overo parents never produce O/O."""
    profile = _profile(
        sample_profile_dict,
        {'frame_overo': {'O': 1, 'n': 1}},
        disallowed_combinations={'frame_overo': ['O/O']},
    )
    resolver = GenotypeResolver(NumpyRandomSource(13))
    for _ in range(100):
        assert resolver.inherit({'frame_overo': 'O/n'}, {'frame_overo': 'O/n'}, profile)['frame_overo'] != 'O/O'


def test_inherit_unavoidable_disallowed_pair(sample_profile_dict):
    """Test that parents who can only produce a disallowed pair raise ConfigurationError."""
    profile = _profile(
        sample_profile_dict,
        {'frame_overo': {'O': 1, 'n': 1}},
        disallowed_combinations={'frame_overo': ['O/O']},
    )
    with pytest.raises(ConfigurationError):
        GenotypeResolver(NumpyRandomSource(1)).inherit({'frame_overo': 'O/O'}, {'frame_overo': 'O/O'}, profile)


def test_inherit_modifiers(sample_profile_dict):
    """Test boolean modifier inheritance."""
    profile = _profile(sample_profile_dict, {'extension': {'E': 1}}, boolean_modifiers_prevalence={})
    resolver = GenotypeResolver(NumpyRandomSource(4))

    both = resolver.inherit({'sooty': True}, {'sooty': True}, profile)
    assert both['sooty'] is True

    neither = resolver.inherit({'sooty': False}, {'sooty': False}, profile)
    assert neither['sooty'] is False

    # One parent known, no breed prevalence: the known value passes on
    one = resolver.inherit({'pangare': True}, {}, profile)
    assert one['pangare'] is True

    # Neither parent known, no prevalence: absent
    assert 'rabicano' not in resolver.inherit({}, {}, profile)


def test_inherit_rejects_malformed_parent(sample_profile):
    """Test that malformed parent genotypes raise GenotypeError."""
    with pytest.raises(GenotypeError):
        GenotypeResolver().inherit({'extension': 'E/X'}, {'extension': 'E/e'}, sample_profile)
