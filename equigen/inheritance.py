"""Epigenetic trait inheritance for foals."""

import logging
from collections import Counter
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from .exceptions import ValidationError
from .models.traits import (
    RARE_TRAITS,
    TraitCategory,
    TraitSet,
    discipline_affinity_trait,
    opposites_of,
    trait_category,
)
from .random_source import RandomSource, NumpyRandomSource

logger = logging.getLogger(__name__)

# Inheritance chance bounds after bond/stress shifts
MIN_CHANCE = 0.05
MAX_CHANCE = 0.95

POSITIVE_BASE_CHANCE = 0.50
NEGATIVE_BASE_CHANCE = 0.40
LATENT_CHANCE = 0.20

# Environmental traits: (trait, bond coefficient, stress coefficient) over scores scaled to [0, 1]
ENVIRONMENTAL_TRAITS: Tuple[Tuple[str, float, float], ...] = (
    ('people_trusting', 0.30, -0.20),
    ('calm', 0.15, -0.15),
    ('nervous', -0.10, 0.30),
    ('fragile', -0.05, 0.15),
)

# Rare traits: (trait, base chance, ideal-conditions weight, poor-conditions weight)
# Ideal conditions = bond * (1 - stress); poor conditions = stress * (1 - bond)
RARE_TRAIT_CHANCES: Tuple[Tuple[str, float, float, float], ...] = (
    ('legendary_bloodline', 0.005, 0.025, 0.0),
    ('weather_immunity', 0.01, 0.05, 0.0),
    ('night_vision', 0.01, 0.03, 0.0),
    ('extreme_resilience', 0.005, 0.02, 0.0),
    ('burnout', 0.005, 0.0, 0.06),
)

# Birth-condition thresholds
LOW_STRESS_THRESHOLD = 20
PREMIUM_FEED_THRESHOLD = 80
HIGH_STRESS_THRESHOLD = 80
POOR_FEED_THRESHOLD = 30
HIGH_INBREEDING_REPEATS = 4
MODERATE_INBREEDING_REPEATS = 2
DISCIPLINE_AFFINITY_ANCESTORS = 3
LEGACY_TALENT_ANCESTORS = 4


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


def inheritance_chances(bond_score: float, stress_level: float) -> Tuple[float, float]:
    """
    Chance of passing on a positive and a negative parent trait.

    Bond pushes positive traits up and negative traits down; stress does the
    reverse. Both are measured relative to a neutral score of 50.

    Returns:
        (positive chance, negative chance), each within [MIN_CHANCE, MAX_CHANCE]
    """
    bond_factor = (bond_score - 50) / 50
    stress_factor = (stress_level - 50) / 50
    positive = POSITIVE_BASE_CHANCE + 0.25 * bond_factor - 0.25 * stress_factor
    negative = NEGATIVE_BASE_CHANCE - 0.20 * bond_factor + 0.30 * stress_factor
    return _clamp(positive, MIN_CHANCE, MAX_CHANCE), _clamp(negative, MIN_CHANCE, MAX_CHANCE)


def _assemble(candidates: Iterable[Tuple[str, str]]) -> TraitSet:
    """
    Build a TraitSet from (trait, bucket) candidates in priority order.

    Duplicates are dropped and a trait whose opposite was already accepted is
    dropped rather than replaced.
    """
    buckets: Dict[str, List[str]] = {'positive': [], 'negative': [], 'hidden': []}
    accepted = set()

    for trait, bucket in candidates:
        if trait in accepted:
            continue
        blocked = [other for other in opposites_of(trait) if other in accepted]
        if blocked:
            logger.debug("Dropping %s, conflicts with %s", trait, blocked[0])
            continue
        accepted.add(trait)
        buckets[bucket].append(trait)

    return TraitSet(**buckets)


def merge_trait_sets(*trait_sets: TraitSet) -> TraitSet:
    """
    Merge trait sets in priority order.

    Earlier sets win on duplicates and opposing pairs; hidden traits stay hidden.
    """
    candidates = []
    for trait_set in trait_sets:
        candidates.extend((trait, 'positive') for trait in trait_set.positive)
        candidates.extend((trait, 'negative') for trait in trait_set.negative)
        candidates.extend((trait, 'hidden') for trait in trait_set.hidden)
    return _assemble(candidates)


class TraitInheritanceEngine:
    """Draws offspring epigenetic traits from parent traits and dam state."""

    def __init__(self, rng: Optional[RandomSource] = None):
        """
        Initialize engine.

        Args:
            rng: Default random source for unseeded calls
        """
        self.rng = rng if rng is not None else NumpyRandomSource()

    def calculate(
        self,
        dam_traits: Optional[Sequence[str]] = None,
        sire_traits: Optional[Sequence[str]] = None,
        dam_bond_score: Optional[float] = None,
        dam_stress_level: Optional[float] = None,
        seed: Optional[int] = None,
        rng: Optional[RandomSource] = None
    ) -> TraitSet:
        """
        Calculate a foal's epigenetic traits.

        Every call consumes the same number of random draws for parent trait
        lists of the same length, so seeded calls with different bond or
        stress values see the same rolls.

        Args:
            dam_traits: Dam's traits (may be empty)
            sire_traits: Sire's traits (may be empty)
            dam_bond_score: Dam's bond score, 0-100
            dam_stress_level: Dam's stress level, 0-100
            seed: Optional seed; a seeded call ignores every other random source
            rng: Random source for unseeded calls

        Returns:
            Offspring TraitSet

        Raises:
            ValidationError: If any input is missing, mistyped or out of range
        """
        self._validate(dam_traits, sire_traits, dam_bond_score, dam_stress_level, seed)

        if seed is not None:
            source = NumpyRandomSource(seed)
        else:
            source = rng if rng is not None else self.rng

        positive_chance, negative_chance = inheritance_chances(dam_bond_score, dam_stress_level)
        bond = dam_bond_score / 100
        stress = dam_stress_level / 100

        candidates: List[Tuple[str, str]] = []

        # Inherited traits; both parents are subject to the dam's in-utero state
        for trait in [*dam_traits, *sire_traits]:
            inherit_roll = source.next()
            latent_roll = source.next()
            category = trait_category(trait)
            if category is None:
                logger.warning("Ignoring parent trait outside the catalog: %s", trait)
                continue
            chance = positive_chance if category is TraitCategory.POSITIVE else negative_chance
            if inherit_roll >= chance:
                continue
            if trait in RARE_TRAITS or latent_roll < LATENT_CHANCE:
                candidates.append((trait, 'hidden'))
            else:
                candidates.append((trait, category.value))

        # Environmental traits depend only on bond and stress
        for trait, bond_coefficient, stress_coefficient in ENVIRONMENTAL_TRAITS:
            chance = _clamp(bond_coefficient * bond + stress_coefficient * stress)
            if source.next() < chance:
                candidates.append((trait, trait_category(trait).value))

        # Rare traits always start hidden
        ideal = bond * (1 - stress)
        poor = stress * (1 - bond)
        for trait, base, ideal_weight, poor_weight in RARE_TRAIT_CHANCES:
            if source.next() < base + ideal_weight * ideal + poor_weight * poor:
                candidates.append((trait, 'hidden'))

        result = _assemble(candidates)
        logger.debug(
            "Calculated foal traits (bond=%s, stress=%s, seed=%s): %s",
            dam_bond_score, dam_stress_level, seed, result.to_dict()
        )
        return result

    @staticmethod
    def _validate(dam_traits, sire_traits, dam_bond_score, dam_stress_level, seed) -> None:
        if dam_traits is None or sire_traits is None or dam_bond_score is None or dam_stress_level is None:
            raise ValidationError("Missing required breeding parameters")

        if not isinstance(dam_traits, (list, tuple)) or not isinstance(sire_traits, (list, tuple)):
            raise ValidationError("Parent traits must be lists")

        if not all(isinstance(trait, str) for trait in [*dam_traits, *sire_traits]):
            raise ValidationError("Parent traits must be lists of strings")

        if not _is_number(dam_bond_score) or not _is_number(dam_stress_level):
            raise ValidationError("Bond scores and stress levels must be numbers")

        if not (0 <= dam_bond_score <= 100) or not (0 <= dam_stress_level <= 100):
            raise ValidationError("Bond scores must be between 0-100, stress levels between 0-100")

        if seed is not None and (isinstance(seed, bool) or not isinstance(seed, int)):
            raise ValidationError("Seed must be an integer")

    def apply_at_birth(
        self,
        mare_stress_level: Optional[float],
        lineage: Optional[Sequence[Dict[str, Any]]] = None,
        feed_quality: float = 50,
        stress_level: Optional[float] = None,
        rng: Optional[RandomSource] = None
    ) -> TraitSet:
        """
        Traits arising from conditions at birth rather than parent traits.

        Args:
            mare_stress_level: Dam's stress level at foaling, 0-100
            lineage: Ancestor records with 'id' and either 'discipline' or
                'discipline_scores' (discipline -> score)
            feed_quality: Feed quality during gestation, 0-100
            stress_level: Foaling environment stress; defaults to the mare's
            rng: Random source for this call

        Returns:
            TraitSet with positive and negative traits (nothing hidden)

        Raises:
            ValidationError: If the mare stress level is missing or invalid
        """
        if mare_stress_level is None:
            raise ValidationError("Mare stress level is required")
        if not _is_number(mare_stress_level) or not _is_number(feed_quality):
            raise ValidationError("Stress levels and feed quality must be numbers")
        environment_stress = mare_stress_level if stress_level is None else stress_level
        if not _is_number(environment_stress):
            raise ValidationError("Stress levels and feed quality must be numbers")

        source = rng if rng is not None else self.rng
        lineage = list(lineage or [])
        candidates: List[Tuple[str, str]] = []

        def roll(trait: str, chance: float) -> None:
            if source.next() < chance:
                candidates.append((trait, trait_category(trait).value))

        # Calm gestation with premium feed
        if environment_stress <= LOW_STRESS_THRESHOLD and feed_quality >= PREMIUM_FEED_THRESHOLD:
            roll('resilient', 0.75)
            roll('people_trusting', 0.60)

        # Inbreeding
        repeats = self.max_ancestor_repeats(lineage)
        if repeats >= HIGH_INBREEDING_REPEATS:
            roll('fragile', 0.80)
        if repeats >= MODERATE_INBREEDING_REPEATS:
            roll('reactive', 0.40)
            roll('low_immunity', 0.35)

        # Discipline specialization
        discipline, count = self.dominant_discipline(lineage)
        if discipline is not None and count >= DISCIPLINE_AFFINITY_ANCESTORS:
            roll(discipline_affinity_trait(discipline), 0.70)
            if count >= LEGACY_TALENT_ANCESTORS:
                roll('legacy_talent', 0.40)

        if mare_stress_level >= HIGH_STRESS_THRESHOLD:
            roll('nervous', 0.40)

        if feed_quality <= POOR_FEED_THRESHOLD:
            roll('low_immunity', 0.30)

        result = _assemble(candidates)
        logger.debug("Birth-condition traits: %s", result.to_dict())
        return result

    @staticmethod
    def max_ancestor_repeats(lineage: Sequence[Dict[str, Any]]) -> int:
        """Largest number of times a single ancestor id appears in the lineage."""
        counts = Counter(ancestor.get('id') for ancestor in lineage if ancestor.get('id') is not None)
        return max(counts.values(), default=0)

    @staticmethod
    def dominant_discipline(lineage: Sequence[Dict[str, Any]]) -> Tuple[Optional[str], int]:
        """
        Most common ancestor discipline.

        An ancestor's discipline is its 'discipline' field, or the
        top-scoring entry of 'discipline_scores' when that field is absent.

        Returns:
            (discipline, number of ancestors), or (None, 0) for no data
        """
        counts: Counter = Counter()
        for ancestor in lineage:
            discipline = ancestor.get('discipline')
            scores = ancestor.get('discipline_scores')
            if not discipline and scores:
                discipline = max(scores, key=scores.get)
            if discipline:
                counts[discipline] += 1

        if not counts:
            return None, 0
        return counts.most_common(1)[0]
