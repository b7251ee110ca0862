"""Horse creation for store purchases and breeding."""

import logging
from typing import Any, Dict, Optional, Sequence

from .config import BreedGeneticProfile, load_breed_profile
from .exceptions import ValidationError
from .genotype import GenotypeResolver
from .inheritance import TraitInheritanceEngine, merge_trait_sets
from .models.horse import Horse
from .phenotype import PhenotypeEngine
from .random_source import RandomSource, NumpyRandomSource
from .ratings import calculate_foal_ratings, generate_store_ratings
from .temperament import determine_foal_temperament, determine_store_temperament

logger = logging.getLogger(__name__)


class HorseFactory:
    """Orchestrates the generation engines to build complete horses for one breed."""

    def __init__(self, profile: BreedGeneticProfile, seed: Optional[int] = None):
        """
        Initialize factory.

        Args:
            profile: Breed profile for every horse this factory creates
            seed: Optional seed; a seeded factory produces the same horses in
                the same order
        """
        self.profile = profile
        self.seed = seed
        self.rng: RandomSource = NumpyRandomSource(seed)
        self.genotype_resolver = GenotypeResolver(self.rng)
        self.phenotype_engine = PhenotypeEngine(self.rng)
        self.inheritance_engine = TraitInheritanceEngine(self.rng)

    @classmethod
    def from_config(cls, config_path: str, seed: Optional[int] = None) -> 'HorseFactory':
        """
        Create a factory from a breed profile file.

        Args:
            config_path: Path to YAML/JSON breed profile
            seed: Optional seed

        Returns:
            HorseFactory for that breed
        """
        return cls(load_breed_profile(config_path), seed=seed)

    def create_store_horse(
        self,
        name: str,
        sex: str,
        age_years: float,
        stats: Optional[Dict[str, float]] = None
    ) -> Horse:
        """
        Create a horse with no parents from the breed's distributions.

        Raises:
            ConfigurationError: If the profile lacks a table the horse needs
        """
        rng = self.rng
        genotype = self.genotype_resolver.resolve(self.profile, rng=rng)
        phenotype = self.phenotype_engine.resolve(genotype, self.profile, age_years, rng=rng)

        horse = Horse(
            name=name,
            sex=sex,
            age_years=age_years,
            breed=self.profile.name,
            genotype=genotype,
            phenotype=phenotype,
            temperament=determine_store_temperament(self.profile.temperament_weights, rng),
            ratings=generate_store_ratings(self.profile.rating_profiles, rng),
            stats=stats,
        )
        logger.info("Created store horse %s: %s", name, phenotype.final_display_color)
        return horse

    def breed_foal(
        self,
        sire: Horse,
        dam: Horse,
        dam_bond_score: float,
        dam_stress_level: float,
        name: str,
        sex: Optional[str] = None,
        seed: Optional[int] = None,
        lineage: Optional[Sequence[Dict[str, Any]]] = None,
        feed_quality: float = 50
    ) -> Horse:
        """
        Breed a foal from a sire and a dam.

        Args:
            sire: Male parent
            dam: Female parent
            dam_bond_score: Dam's bond score at breeding, 0-100
            dam_stress_level: Dam's stress level at breeding, 0-100
            name: Foal name
            sex: Foal sex; drawn at random when omitted
            seed: Optional seed making this foal reproducible on its own
            lineage: Ancestor records for birth-condition traits
            feed_quality: Gestation feed quality, 0-100

        Returns:
            Newborn foal (age 0)

        Raises:
            ValidationError: If the parents or dam state are invalid
            ConfigurationError: If the foal's breed profile is incomplete
        """
        if sire.sex != 'male' or dam.sex != 'female':
            raise ValidationError("Sire must be male and dam must be female")
        if sire is dam or (sire.horse_id is not None and sire.horse_id == dam.horse_id):
            raise ValidationError("Sire and dam must be different horses")

        rng = NumpyRandomSource(seed) if seed is not None else self.rng

        traits = self.inheritance_engine.calculate(
            dam_traits=dam.traits.all_traits(),
            sire_traits=sire.traits.all_traits(),
            dam_bond_score=dam_bond_score,
            dam_stress_level=dam_stress_level,
            rng=rng,
        )
        birth_traits = self.inheritance_engine.apply_at_birth(
            dam_stress_level,
            lineage=lineage,
            feed_quality=feed_quality,
            rng=rng,
        )

        genotype = self.genotype_resolver.inherit(sire.genotype, dam.genotype, self.profile, rng=rng)
        phenotype = self.phenotype_engine.resolve(genotype, self.profile, 0, rng=rng)

        if sex is None:
            sex = 'male' if rng.next() < 0.5 else 'female'

        foal = Horse(
            name=name,
            sex=sex,
            age_years=0,
            breed=self.profile.name,
            genotype=genotype,
            phenotype=phenotype,
            traits=merge_trait_sets(traits, birth_traits),
            temperament=determine_foal_temperament(
                sire.temperament, dam.temperament, self.profile.temperament_weights, rng
            ),
            ratings=calculate_foal_ratings(sire.ratings, dam.ratings, self.profile.rating_profiles, rng),
            sire_id=sire.horse_id,
            dam_id=dam.horse_id,
        )
        logger.info(
            "Foaled %s (%s x %s): %s, traits %s",
            name, sire.name, dam.name, phenotype.final_display_color, foal.traits.to_dict()
        )
        return foal
