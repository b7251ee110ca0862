"""Genotype resolution for store horses and foals."""

import logging
from typing import Dict, Optional

from .config import BreedGeneticProfile
from .exceptions import ConfigurationError
from .models.locus import LOCI, BOOLEAN_MODIFIERS, Genotype, alleles_of, validate_genotype
from .random_source import RandomSource, NumpyRandomSource, weighted_choice, bernoulli

logger = logging.getLogger(__name__)

MAX_REDRAW_ATTEMPTS = 10


class GenotypeResolver:
    """Assigns allele pairs to loci from breed allele weights."""

    def __init__(self, rng: Optional[RandomSource] = None):
        """
        Initialize resolver.

        Args:
            rng: Default random source. A fresh entropy-backed source is
                used when omitted.
        """
        self.rng = rng if rng is not None else NumpyRandomSource()

    def resolve(self, profile: BreedGeneticProfile, rng: Optional[RandomSource] = None) -> Genotype:
        """
        Draw a full genotype for a horse of the given breed.

        Each locus listed in the profile's allele weights gets two
        independent weighted draws. Loci absent from the profile are
        omitted from the result.

        Args:
            profile: Breed genetic profile
            rng: Random source for this call (defaults to the resolver's)

        Returns:
            Genotype mapping of locus -> pair, plus boolean modifiers

        Raises:
            ConfigurationError: If a weight table is empty or all-zero, or a
                disallowed pair keeps being drawn
        """
        rng = rng if rng is not None else self.rng
        genotype: Genotype = {}

        for locus_name in profile.allele_weights:
            genotype[locus_name] = self._draw_pair(profile, locus_name, rng)

        for modifier in BOOLEAN_MODIFIERS:
            if modifier in profile.boolean_modifiers_prevalence:
                genotype[modifier] = bernoulli(profile.boolean_modifiers_prevalence[modifier], rng)

        logger.debug("Resolved genotype for %s: %s", profile.name, genotype)
        return genotype

    def inherit(
        self,
        sire: Genotype,
        dam: Genotype,
        profile: BreedGeneticProfile,
        rng: Optional[RandomSource] = None
    ) -> Genotype:
        """
        Produce a foal genotype from two parents.

        Each parent passes one allele per locus (a gamete). A locus that
        either parent lacks is drawn from the foal's breed profile instead.

        Args:
            sire: Sire genotype
            dam: Dam genotype
            profile: Foal's breed profile
            rng: Random source for this call

        Returns:
            Foal genotype

        Raises:
            GenotypeError: If a parent genotype is malformed
            ConfigurationError: If a breed weight table is unusable
        """
        rng = rng if rng is not None else self.rng
        validate_genotype(sire)
        validate_genotype(dam)

        loci = [name for name in LOCI if name in sire or name in dam or name in profile.allele_weights]
        genotype: Genotype = {}

        for locus_name in loci:
            sire_alleles = alleles_of(sire, locus_name)
            dam_alleles = alleles_of(dam, locus_name)

            if not sire_alleles or not dam_alleles:
                if locus_name in profile.allele_weights:
                    genotype[locus_name] = self._draw_pair(profile, locus_name, rng)
                continue

            locus = LOCI[locus_name]
            pair = None
            for _ in range(MAX_REDRAW_ATTEMPTS):
                candidate = locus.format_pair(
                    self._gamete(sire_alleles, rng),
                    self._gamete(dam_alleles, rng),
                )
                if not profile.is_disallowed(locus_name, candidate):
                    pair = candidate
                    break
            if pair is None:
                raise ConfigurationError(
                    f"Parents can only produce disallowed {locus_name} pairs for breed {profile.name}"
                )
            genotype[locus_name] = pair

        for modifier in BOOLEAN_MODIFIERS:
            value = self._inherit_modifier(modifier, sire, dam, profile, rng)
            if value is not None:
                genotype[modifier] = value

        logger.debug("Inherited foal genotype for %s: %s", profile.name, genotype)
        return genotype

    @staticmethod
    def _gamete(alleles, rng: RandomSource) -> str:
        return alleles[0] if rng.next() < 0.5 else alleles[1]

    def _draw_pair(self, profile: BreedGeneticProfile, locus_name: str, rng: RandomSource) -> str:
        locus = LOCI[locus_name]
        weights = profile.allele_weights[locus_name]

        for _ in range(MAX_REDRAW_ATTEMPTS):
            try:
                pair = locus.format_pair(weighted_choice(weights, rng), weighted_choice(weights, rng))
            except ConfigurationError as e:
                raise ConfigurationError(f"Cannot resolve locus {locus_name} for breed {profile.name}: {e}") from e
            if not profile.is_disallowed(locus_name, pair):
                return pair
            logger.debug("Re-drawing disallowed %s pair %s", locus_name, pair)

        raise ConfigurationError(
            f"Could not draw an allowed {locus_name} pair for breed {profile.name} "
            f"after {MAX_REDRAW_ATTEMPTS} attempts"
        )

    @staticmethod
    def _inherit_modifier(
        modifier: str,
        sire: Dict,
        dam: Dict,
        profile: BreedGeneticProfile,
        rng: RandomSource
    ) -> Optional[bool]:
        sire_value = sire.get(modifier)
        dam_value = dam.get(modifier)
        prevalence = profile.boolean_modifiers_prevalence.get(modifier)

        if sire_value is None and dam_value is None:
            if prevalence is None:
                return None
            return bernoulli(prevalence, rng)

        if sire_value is not None and dam_value is not None:
            if sire_value == dam_value:
                return sire_value
            return rng.next() < 0.5

        # One parent unknown: coin flip between the known parent and breed prevalence
        known = sire_value if sire_value is not None else dam_value
        if rng.next() < 0.5:
            return known
        if prevalence is None:
            return known
        return bernoulli(prevalence, rng)
