"""
Horse Breeding Generation Core

Main API:
    GenotypeResolver - Breed-weighted genotypes and foal inheritance
    PhenotypeEngine - Coat color, shade and markings from a genotype
    TraitInheritanceEngine - Epigenetic traits for foals
    TraitEffectRegistry - Trait -> gameplay modifier catalog
    CompetitionScorer - Discipline scoring and ranking
    HorseFactory - Store horses and foals for one breed
    load_breed_profile - Breed profile loading helper
"""

from .breeding import HorseFactory
from .competition import CompetitionScorer, CompetitionResult
from .config import BreedGeneticProfile, load_breed_profile, load_breed_profiles, profile_from_dict
from .effects import TraitEffectRegistry, load_trait_effects
from .exceptions import EquigenError, ConfigurationError, ValidationError, GenotypeError
from .genotype import GenotypeResolver
from .inheritance import TraitInheritanceEngine
from .phenotype import PhenotypeEngine
from .random_source import RandomSource, NumpyRandomSource, SequenceRandomSource

__all__ = [
    'HorseFactory',
    'CompetitionScorer', 'CompetitionResult',
    'BreedGeneticProfile', 'load_breed_profile', 'load_breed_profiles', 'profile_from_dict',
    'TraitEffectRegistry', 'load_trait_effects',
    'EquigenError', 'ConfigurationError', 'ValidationError', 'GenotypeError',
    'GenotypeResolver',
    'TraitInheritanceEngine',
    'PhenotypeEngine',
    'RandomSource', 'NumpyRandomSource', 'SequenceRandomSource',
]
__version__ = '0.1.0'
