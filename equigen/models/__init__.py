"""Domain models for equigen."""

from .locus import Locus, LOCI, BOOLEAN_MODIFIERS, Genotype, validate_genotype, normalize_genotype
from .traits import TraitCategory, TraitSet, RARE_TRAITS, OPPOSING_TRAITS, trait_category
from .phenotype import Markings, Phenotype, LEGS
from .horse import Horse

__all__ = [
    'Locus', 'LOCI', 'BOOLEAN_MODIFIERS', 'Genotype', 'validate_genotype', 'normalize_genotype',
    'TraitCategory', 'TraitSet', 'RARE_TRAITS', 'OPPOSING_TRAITS', 'trait_category',
    'Markings', 'Phenotype', 'LEGS',
    'Horse',
]
