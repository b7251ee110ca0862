"""Tests for phenotype resolution."""

import pytest

from equigen.config import profile_from_dict
from equigen.exceptions import ConfigurationError, GenotypeError, ValidationError
from equigen.phenotype import (
    COLOR_RULES,
    PhenotypeEngine,
    age_dependent_key,
    gray_stage,
    leopard_age_band,
)
from equigen.random_source import NumpyRandomSource


CHESTNUT = {'extension': 'e/e', 'agouti': 'A/A'}
BAY = {'extension': 'E/e', 'agouti': 'A/a'}
BLACK = {'extension': 'E/E', 'agouti': 'a/a'}


@pytest.fixture
def engine():
    """Seeded phenotype engine."""
    return PhenotypeEngine(NumpyRandomSource(42))


def _color(engine, profile, genotype, age=5):
    return engine.resolve(genotype, profile, age).final_display_color


@pytest.mark.parametrize('genotype,expected', [
    (CHESTNUT, 'Chestnut'),
    (BAY, 'Bay'),
    (BLACK, 'Black'),
])
def test_base_colors(engine, sample_profile, genotype, expected):
    """Test extension/agouti base colors."""
    phenotype = engine.resolve(genotype, sample_profile, 5)
    assert phenotype.final_display_color == expected
    assert phenotype.base_color == expected


def test_extension_masks_agouti(engine, sample_profile):
    """Test that e/e is chestnut whatever the agouti pair."""
    assert _color(engine, sample_profile, {'extension': 'e/e', 'agouti': 'a/a'}) == 'Chestnut'


@pytest.mark.parametrize('base,cream,expected', [
    (CHESTNUT, 'Cr/n', 'Palomino'),
    (CHESTNUT, 'Cr/Cr', 'Cremello'),
    (BAY, 'Cr/n', 'Buckskin'),
    (BAY, 'Cr/Cr', 'Perlino'),
    (BLACK, 'Cr/n', 'Smoky Black'),
    (BLACK, 'Cr/Cr', 'Smoky Cream'),
])
def test_cream_dilution(engine, sample_profile, base, cream, expected):
    """Test single and double cream names."""
    assert _color(engine, sample_profile, {**base, 'cream': cream}) == expected


@pytest.mark.parametrize('genotype,expected', [
    ({**BAY, 'dun': 'D/nd2'}, 'Bay Dun'),
    ({**BLACK, 'dun': 'D/D'}, 'Grulla'),
    ({**CHESTNUT, 'dun': 'D/nd2'}, 'Red Dun'),
    ({**CHESTNUT, 'cream': 'Cr/n', 'dun': 'D/nd2'}, 'Dunalino'),
    ({**BAY, 'cream': 'Cr/n', 'dun': 'D/nd2'}, 'Dunskin'),
])
def test_dun_names(engine, sample_profile, genotype, expected):
    """Test dun dilution names."""
    assert _color(engine, sample_profile, genotype) == expected


def test_non_dun_descriptor(engine, sample_profile):
    """Test that nd1 adds a primitive markings descriptor."""
    color = _color(engine, sample_profile, {**CHESTNUT, 'dun': 'nd1/nd1'})
    assert color == 'Chestnut (Non-Dun 1 - Primitive Markings)'
    assert _color(engine, sample_profile, {**CHESTNUT, 'dun': 'nd2/nd2'}) == 'Chestnut'


def test_champagne_silver_pearl(engine, sample_profile):
    """Test the later dilutions."""
    assert _color(engine, sample_profile, {**CHESTNUT, 'champagne': 'Ch/n'}) == 'Gold Champagne'
    assert _color(engine, sample_profile, {**BAY, 'champagne': 'Ch/n', 'cream': 'Cr/n'}) == 'Amber Cream Champagne'
    assert _color(engine, sample_profile, {**BLACK, 'silver': 'Z/n'}) == 'Silver Black'
    # Silver needs black pigment to show
    assert _color(engine, sample_profile, {**CHESTNUT, 'silver': 'Z/Z'}) == 'Chestnut'
    assert _color(engine, sample_profile, {**CHESTNUT, 'pearl': 'prl/prl'}) == 'Apricot'
    assert _color(engine, sample_profile, {**CHESTNUT, 'cream': 'Cr/n', 'pearl': 'prl/n'}) == 'Palomino Pearl'
    # A single pearl allele without cream is invisible
    assert _color(engine, sample_profile, {**BAY, 'pearl': 'prl/n'}) == 'Bay'


def test_mushroom_only_on_chestnut(engine, sample_profile):
    """Test mushroom dilution."""
    assert _color(engine, sample_profile, {**CHESTNUT, 'mushroom': 'Mu/n'}) == 'Mushroom Chestnut'
    assert _color(engine, sample_profile, {**BAY, 'mushroom': 'Mu/n'}) == 'Bay'


def test_boolean_modifiers(engine, sample_profile):
    """Test sooty, flaxen and pangare."""
    assert _color(engine, sample_profile, {**BAY, 'sooty': True}) == 'Sooty Bay'
    assert _color(engine, sample_profile, {**CHESTNUT, 'flaxen': True}) == 'Flaxen Chestnut'
    assert _color(engine, sample_profile, {**BAY, 'flaxen': True}) == 'Bay'
    assert _color(engine, sample_profile, {**BAY, 'pangare': True}) == 'Bay Pangare'
    assert _color(engine, sample_profile, {**BAY, 'sooty': False}) == 'Bay'


def test_roan(engine, sample_profile):
    """Test roan names by base color."""
    assert _color(engine, sample_profile, {**BAY, 'roan': 'Rn/rn'}) == 'Bay Roan'
    assert _color(engine, sample_profile, {**BLACK, 'roan': 'Rn/rn'}) == 'Blue Roan'
    assert _color(engine, sample_profile, {**CHESTNUT, 'roan': 'Rn/rn'}) == 'Red Roan'


def test_white_patterns(engine, sample_profile):
    """Test spotting descriptors."""
    assert _color(engine, sample_profile, {**BAY, 'tobiano': 'TO/to'}) == 'Bay Tobiano'
    assert _color(engine, sample_profile, {**BAY, 'frame_overo': 'O/n'}) == 'Bay Frame Overo'
    assert _color(engine, sample_profile, {**BAY, 'sabino': 'SB1/n'}) == 'Bay Sabino'
    assert _color(engine, sample_profile, {**BAY, 'splash_white': 'SW1/SW2'}) == 'Bay Splash White 1 Splash White 2'
    assert _color(engine, sample_profile, {**BAY, 'eden_white': 'EDXW3/n'}) == 'Bay Eden White 3'
    assert _color(engine, sample_profile, {**BAY, 'dominant_white': 'W20/w'}) == 'Bay Minimal White'
    assert _color(engine, sample_profile, {**BAY, 'dominant_white': 'W5/w'}) == 'Bay Dominant White'


def test_homozygous_frame_overo_never_named(engine, sample_profile):
    """Test that O/O is not rendered as frame overo."""
    assert 'Frame Overo' not in _color(engine, sample_profile, {**BAY, 'frame_overo': 'O/O'})


def test_w13_overrides_everything(engine, sample_profile):
    """Test that W13 renders solid white regardless of other loci."""
    genotype = {**BAY, 'cream': 'Cr/n', 'tobiano': 'TO/to', 'gray': 'G/g',
                'dominant_white': 'W13/w', 'sooty': True, 'rabicano': True}
    assert _color(engine, sample_profile, genotype) == 'White'


def test_gray_stages_by_age(engine, sample_profile):
    """Test that gray names change with age but keep the tone."""
    genotype = {**BLACK, 'gray': 'G/g'}
    young = _color(engine, sample_profile, genotype, age=3)
    older = _color(engine, sample_profile, genotype, age=8)
    assert young != older
    assert 'Steel' in young
    assert 'Steel' in older
    assert engine.resolve(genotype, sample_profile, 3).base_color == \
        engine.resolve(genotype, sample_profile, 8).base_color == 'Black'
    assert _color(engine, sample_profile, genotype, age=20) == 'Fleabitten Gray'
    assert _color(engine, sample_profile, {**CHESTNUT, 'gray': 'G/G'}, age=1) == 'Rose Gray'


def test_gray_replaces_patterns(engine, sample_profile):
    """Test that graying hides spotting and late descriptors."""
    genotype = {**BAY, 'gray': 'G/g', 'tobiano': 'TO/to', 'rabicano': True, 'dun': 'nd1/nd1'}
    assert _color(engine, sample_profile, genotype, age=2) == 'Steel Gray'


def test_rabicano(engine, sample_profile):
    """Test the rabicano descriptor on non-grays."""
    assert _color(engine, sample_profile, {**BAY, 'rabicano': True}) == 'Bay Rabicano'


def test_leopard_complex(engine, sample_profile):
    """Test leopard complex patterns."""
    assert _color(engine, sample_profile, {**BAY, 'leopard_complex': 'LP/LP'}) == 'Bay Snowcap Appaloosa'
    assert _color(engine, sample_profile, {**BAY, 'leopard_complex': 'LP/LP', 'pattern_1': 'PATN1/patn1'}) \
        == 'Bay Fewspot Leopard Appaloosa'
    assert _color(engine, sample_profile, {**BAY, 'leopard_complex': 'LP/lp', 'pattern_1': 'PATN1/PATN1'}) \
        == 'Bay Leopard Appaloosa'

    young = _color(engine, sample_profile, {**BAY, 'leopard_complex': 'LP/lp'}, age=2)
    old = _color(engine, sample_profile, {**BAY, 'leopard_complex': 'LP/lp'}, age=10)
    assert 'Light' in young
    assert 'Heavy' in old


def test_leopard_markings_resolved_for_carriers(engine, sample_profile):
    """Test that mottling and striping are only set for LP carriers."""
    carrier = engine.resolve({**BAY, 'leopard_complex': 'LP/lp'}, sample_profile, 5)
    assert carrier.markings.mottling is True
    assert carrier.markings.striping is True

    plain = engine.resolve(BAY, sample_profile, 5)
    assert plain.markings.mottling is None
    assert plain.markings.striping is None


def test_bloody_shoulder_only_for_grays(engine, sample_profile):
    """Test that bloody shoulder is a boolean for grays and unset otherwise."""
    gray = engine.resolve({**BAY, 'gray': 'G/g'}, sample_profile, 5)
    assert isinstance(gray.markings.bloody_shoulder, bool)
    assert engine.resolve(BAY, sample_profile, 5).markings.bloody_shoulder is None


def test_shade_fallback(engine, sample_profile):
    """Test shade lookup by color, then base color, then Default."""
    bay = engine.resolve(BAY, sample_profile, 5)
    assert bay.shade in ('standard', 'dark')
    black = engine.resolve(BLACK, sample_profile, 5)
    assert black.shade == 'standard'
    buckskin = engine.resolve({**BAY, 'cream': 'Cr/n'}, sample_profile, 5)
    assert buckskin.shade in ('standard', 'dark')


def test_missing_shade_table(engine, sample_profile_dict):
    """Test that an unresolvable shade raises ConfigurationError."""
    sample_profile_dict['shade_bias'] = {'Chestnut': {'standard': 1}}
    profile = profile_from_dict(sample_profile_dict)
    with pytest.raises(ConfigurationError):
        engine.resolve(BLACK, profile, 5)


def test_leg_markings_respect_maximum(engine, sample_profile_dict):
    """Test that no more than max_legs_marked legs are marked."""
    sample_profile_dict['marking_bias'] = {
        'face': {'star': 1},
        'legs_general_probability': 1.0,
        'leg_specific_probabilities': {'sock': 1},
        'max_legs_marked': 2,
    }
    profile = profile_from_dict(sample_profile_dict)
    markings = engine.resolve(BAY, profile, 5).markings
    assert markings.face == 'star'
    assert markings.marked_legs == 2
    assert markings.legs == {'LF': 'sock', 'RF': 'sock', 'LH': 'none', 'RH': 'none'}


def test_no_leg_markings_at_zero_probability(engine, sample_profile_dict):
    """Test that a zero leg probability leaves every leg unmarked."""
    sample_profile_dict['marking_bias']['legs_general_probability'] = 0.0
    profile = profile_from_dict(sample_profile_dict)
    for _ in range(20):
        assert engine.resolve(BAY, profile, 5).markings.marked_legs == 0


def test_seeded_determinism(sample_profile):
    """Test that the same seed gives the same phenotype."""
    genotype = {**BAY, 'tobiano': 'TO/to', 'leopard_complex': 'LP/lp'}
    first = PhenotypeEngine(NumpyRandomSource(8)).resolve(genotype, sample_profile, 6)
    second = PhenotypeEngine(NumpyRandomSource(8)).resolve(genotype, sample_profile, 6)
    assert first == second


def test_invalid_inputs(engine, sample_profile):
    """Test that bad ages and genotypes are rejected."""
    with pytest.raises(ValidationError):
        engine.resolve(BAY, sample_profile, -1)
    with pytest.raises(ValidationError):
        engine.resolve(BAY, sample_profile, True)
    with pytest.raises(GenotypeError):
        engine.resolve({'extension': 'E/Q'}, sample_profile, 5)


def test_missing_loci_treated_as_absent(engine, sample_profile):
    """Test that an empty genotype renders as black."""
    assert _color(engine, sample_profile, {}) == 'Black'


def test_rerender_same_band_keeps_phenotype(engine, sample_profile):
    """Test that aging within a stage only updates the age."""
    genotype = {**BAY, 'tobiano': 'TO/to'}
    phenotype = engine.resolve(genotype, sample_profile, 2)
    aged = engine.rerender(phenotype, genotype, sample_profile, 9)
    assert aged.final_display_color == phenotype.final_display_color
    assert aged.shade == phenotype.shade
    assert aged.markings == phenotype.markings
    assert aged.age_years == 9


def test_rerender_gray_keeps_markings(engine, sample_profile):
    """Test that graying changes the color but keeps birth markings."""
    genotype = {**BLACK, 'gray': 'G/g'}
    phenotype = engine.resolve(genotype, sample_profile, 0)
    aged = engine.rerender(phenotype, genotype, sample_profile, 8)
    assert aged.final_display_color == 'Steel Light Dapple Gray'
    assert aged.markings.face == phenotype.markings.face
    assert aged.markings.legs == phenotype.markings.legs
    assert aged.markings.bloody_shoulder == phenotype.markings.bloody_shoulder


def test_rerender_leopard_keeps_pattern(sample_profile):
    """Test that aging a leopard carrier only changes its band."""
    genotype = {**BAY, 'leopard_complex': 'LP/lp'}
    for seed in range(30):
        engine = PhenotypeEngine(NumpyRandomSource(seed))
        phenotype = engine.resolve(genotype, sample_profile, 4)
        aged = engine.rerender(phenotype, genotype, sample_profile, 5)
        assert phenotype.leopard_pattern is not None
        assert aged.leopard_pattern == phenotype.leopard_pattern
        assert aged.final_display_color == phenotype.final_display_color.replace('Light', 'Moderate')
        assert aged.to_dict()['leopard_pattern'] == phenotype.leopard_pattern


def test_age_helpers():
    """Test gray stage, leopard band and age key helpers."""
    assert [gray_stage(age) for age in (0, 3, 4, 7, 10, 13)] == [0, 0, 1, 2, 3, 4]
    assert [leopard_age_band(age) for age in (1, 4, 6, 8.5)] == ['Light', 'Light', 'Moderate', 'Heavy']
    assert age_dependent_key(BAY, 3) == (None, None)
    assert age_dependent_key({**BAY, 'gray': 'G/g'}, 3) == (0, None)
    assert age_dependent_key({**BAY, 'leopard_complex': 'LP/lp'}, 10) == (None, 'Heavy')


def test_custom_rule_table(sample_profile):
    """Test that the engine runs only the rules it is given."""
    base_only = tuple(rule for rule in COLOR_RULES if rule.name == 'base_color')
    engine = PhenotypeEngine(NumpyRandomSource(1), rules=base_only)
    assert engine.resolve({**BAY, 'cream': 'Cr/n', 'tobiano': 'TO/to'}, sample_profile, 5).final_display_color == 'Bay'
