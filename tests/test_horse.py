"""Tests for the Horse model."""

import pytest

from equigen.models.horse import Horse
from equigen.models.phenotype import Markings, Phenotype
from equigen.models.traits import TraitSet
from equigen.phenotype import PhenotypeEngine
from equigen.random_source import NumpyRandomSource


GRAY_GENOTYPE = {'extension': 'E/E', 'agouti': 'a/a', 'gray': 'G/g'}


def _phenotype(color='Bay', age=4):
    return Phenotype(color, 'standard', Markings(face='star'), 'Bay', age)


def _horse(**overrides):
    kwargs = dict(
        name='Comet',
        sex='female',
        age_years=4,
        breed='Test Breed',
        genotype={'extension': 'E/e', 'agouti': 'A/a'},
        phenotype=_phenotype(),
    )
    kwargs.update(overrides)
    return Horse(**kwargs)


def test_horse_creation():
    """Test default fields."""
    horse = _horse()
    assert horse.traits == TraitSet()
    assert horse.stats == {}
    assert horse.bond_score == 50
    assert horse.health == 'Good'
    assert not horse.is_foal


def test_horse_validation():
    """Test constructor validation."""
    with pytest.raises(ValueError):
        _horse(sex='gelding')
    with pytest.raises(ValueError):
        _horse(age_years=-1)
    with pytest.raises(ValueError):
        _horse(sire_id=3, dam_id=3)
    with pytest.raises(ValueError):
        _horse(horse_id=3, sire_id=3, dam_id=4)
    with pytest.raises(ValueError):
        _horse(bond_score=101)
    with pytest.raises(ValueError):
        _horse(stress_level=-5)


def test_is_foal():
    """Test that horses with a parent are foals."""
    assert _horse(sire_id=1, dam_id=2).is_foal


def test_competition_entry():
    """Test the mapping handed to the scorer."""
    horse = _horse(
        horse_id=9,
        stats={'speed': 70},
        traits=TraitSet(positive=['calm'], hidden=['night_vision']),
        health='Excellent',
    )
    entry = horse.competition_entry(training_score=12, tack={'saddle_bonus': 3}, rider={'bonus_percent': 0.05})
    assert entry['id'] == 9
    assert entry['stats'] == {'speed': 70}
    assert entry['epigenetic_modifiers'] == {'positive': ['calm'], 'negative': [], 'hidden': ['night_vision']}
    assert entry['training_score'] == 12
    assert entry['tack'] == {'saddle_bonus': 3}
    assert entry['rider'] == {'bonus_percent': 0.05}
    assert entry['health'] == 'Excellent'


def test_to_dict():
    """Test serialization."""
    data = _horse(sire_id=1, dam_id=2).to_dict()
    assert data['name'] == 'Comet'
    assert data['phenotype']['final_display_color'] == 'Bay'
    assert data['phenotype']['markings']['face'] == 'star'
    assert data['ratings'] is None
    assert data['sire_id'] == 1


def test_rerender_phenotype_on_aging(sample_profile):
    """Test that aging a gray changes its color and age."""
    engine = PhenotypeEngine(NumpyRandomSource(6))
    phenotype = engine.resolve(GRAY_GENOTYPE, sample_profile, 2)
    horse = _horse(genotype=GRAY_GENOTYPE, phenotype=phenotype, age_years=2)

    assert horse.rerender_phenotype(engine, sample_profile, 3) is False
    assert horse.age_years == 3
    assert horse.rerender_phenotype(engine, sample_profile, 8) is True
    assert horse.phenotype.final_display_color == 'Steel Light Dapple Gray'
    assert horse.phenotype.markings.face == phenotype.markings.face
