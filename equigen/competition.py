"""Competition scoring and ranking."""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from .effects import TraitEffectRegistry
from .exceptions import ValidationError
from .models.traits import TraitSet, discipline_affinity_trait
from .random_source import RandomSource, NumpyRandomSource

logger = logging.getLogger(__name__)

# Discipline -> stats weighted 50/30/20
DISCIPLINE_STATS: Dict[str, Tuple[str, str, str]] = {
    'Racing': ('speed', 'stamina', 'focus'),
    'Show Jumping': ('precision', 'focus', 'stamina'),
    'Dressage': ('precision', 'focus', 'coordination'),
    'Cross Country': ('stamina', 'agility', 'boldness'),
    'Endurance': ('stamina', 'focus', 'balance'),
    'Reining': ('agility', 'focus', 'balance'),
    'Driving': ('balance', 'coordination', 'precision'),
    'Trail': ('focus', 'boldness', 'balance'),
    'Eventing': ('stamina', 'agility', 'precision'),
}

STAT_WEIGHTS = (0.5, 0.3, 0.2)

HEALTH_MODIFIERS: Dict[str, float] = {
    'Excellent': 0.05,
    'Very Good': 0.03,
    'Good': 0.0,
    'Fair': -0.03,
    'Bad': -0.05,
}

AFFINITY_BONUS = 5
MAX_RIDER_BONUS = 0.10
MAX_RIDER_PENALTY = 0.08
LUCK_RANGE = 0.09
PLACEMENTS = ('1st', '2nd', '3rd')


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


@dataclass
class CompetitionResult:
    """One entrant's outcome in a ranked competition."""
    horse_id: Any
    name: Optional[str]
    score: int
    placement: Optional[str] = None


class CompetitionScorer:
    """
    Scores horses for a discipline.

    Entries are mappings (see ``Horse.competition_entry``) with optional keys
    ``stats``, ``epigenetic_modifiers``, ``training_score``, ``tack``
    (``saddle_bonus``, ``bridle_bonus``), ``rider`` (``bonus_percent``,
    ``penalty_percent``) and ``health``. Missing keys count as zero or neutral.
    """

    def __init__(self, registry: Optional[TraitEffectRegistry] = None, rng: Optional[RandomSource] = None):
        self.registry = registry if registry is not None else TraitEffectRegistry()
        self.rng = rng if rng is not None else NumpyRandomSource()

    @staticmethod
    def _entry(horse: Any) -> Mapping[str, Any]:
        if hasattr(horse, 'competition_entry'):
            horse = horse.competition_entry()
        if not isinstance(horse, Mapping):
            raise ValidationError("Horse object is required")
        return horse

    @staticmethod
    def _check_discipline(discipline: Any) -> Tuple[str, str, str]:
        if not isinstance(discipline, str) or not discipline:
            raise ValidationError("Discipline is required and must be a string")
        if discipline not in DISCIPLINE_STATS:
            raise ValidationError(f"Unknown discipline: {discipline}")
        return DISCIPLINE_STATS[discipline]

    @staticmethod
    def positive_traits(horse: Mapping[str, Any]) -> List[str]:
        modifiers = horse.get('epigenetic_modifiers')
        if modifiers is None:
            return []
        if isinstance(modifiers, TraitSet):
            return list(modifiers.positive)
        return list(modifiers.get('positive') or [])

    @staticmethod
    def expressed_traits(horse: Mapping[str, Any]) -> List[str]:
        """Positive and negative traits of an entry; hidden traits never count."""
        modifiers = horse.get('epigenetic_modifiers')
        if modifiers is None:
            return []
        if isinstance(modifiers, TraitSet):
            return modifiers.expressed()
        return [*(modifiers.get('positive') or []), *(modifiers.get('negative') or [])]

    def stat_score(self, horse: Any, discipline: str, stat_boost: Optional[Mapping[str, float]] = None) -> float:
        """
        Weighted 50/30/20 base over the discipline's stats.

        Args:
            horse: Competition entry
            discipline: Discipline name
            stat_boost: Flat additions per stat (e.g. from trait effects)

        Returns:
            Weighted stat score; missing stats count as 0
        """
        entry = self._entry(horse)
        stat_names = self._check_discipline(discipline)
        stats = entry.get('stats') or {}
        stat_boost = stat_boost or {}

        total = 0.0
        for stat, weight in zip(stat_names, STAT_WEIGHTS):
            value = stats.get(stat)
            value = value if _is_number(value) else 0
            total += (value + stat_boost.get(stat, 0)) * weight
        return total

    @staticmethod
    def health_modifier(health: Optional[str]) -> float:
        """Percentage adjustment for a health rating; unknown ratings are neutral."""
        return HEALTH_MODIFIERS.get(health, 0.0)

    @staticmethod
    def apply_rider_modifiers(score: float, bonus_percent: float = 0, penalty_percent: float = 0) -> float:
        """
        Apply a rider's bonus and penalty as fractions of the score.

        Raises:
            ValidationError: If the score is negative or a percentage is out of range
        """
        if not _is_number(score) or score < 0:
            raise ValidationError("Score must be a non-negative number")
        if not _is_number(bonus_percent) or not (0 <= bonus_percent <= MAX_RIDER_BONUS):
            raise ValidationError(f"Bonus percent must be between 0 and {MAX_RIDER_BONUS:.2f}")
        if not _is_number(penalty_percent) or not (0 <= penalty_percent <= MAX_RIDER_PENALTY):
            raise ValidationError(f"Penalty percent must be between 0 and {MAX_RIDER_PENALTY:.2f}")
        return score + score * bonus_percent - score * penalty_percent

    def is_eligible(self, horse: Any, discipline: str) -> bool:
        """True when the entry has at least one numeric stat used by the discipline."""
        try:
            entry = self._entry(horse)
            stat_names = self._check_discipline(discipline)
        except ValidationError:
            return False
        stats = entry.get('stats') or {}
        return any(_is_number(stats.get(stat)) for stat in stat_names)

    def score(self, horse: Any, discipline: str, rng: Optional[RandomSource] = None) -> int:
        """
        Score a horse for one discipline.

        Args:
            horse: Horse or competition entry mapping
            discipline: Discipline name
            rng: Random source for the luck roll

        Returns:
            Integer score

        Raises:
            ValidationError: If the entry or discipline is invalid
        """
        entry = self._entry(horse)
        self._check_discipline(discipline)
        rng = rng if rng is not None else self.rng

        traits = self.expressed_traits(entry)
        effects = self.registry.combine(traits)

        subtotal = self.stat_score(entry, discipline, effects.get('baseStatBoost'))

        if discipline_affinity_trait(discipline) in self.positive_traits(entry):
            subtotal += AFFINITY_BONUS

        training = entry.get('training_score') or 0
        tack = entry.get('tack') or {}
        subtotal += training + (tack.get('saddle_bonus') or 0) + (tack.get('bridle_bonus') or 0)

        rider = entry.get('rider') or {}
        total = self.apply_rider_modifiers(
            max(0.0, subtotal),
            rider.get('bonus_percent') or 0,
            rider.get('penalty_percent') or 0,
        )

        total *= 1 + self.health_modifier(entry.get('health', 'Good'))

        trait_modifier = effects.get('competitionScoreModifier', 0)
        trait_modifier += (effects.get('disciplineModifiers') or {}).get(discipline, 0)
        total *= 1 + trait_modifier

        luck = rng.next() * (2 * LUCK_RANGE) - LUCK_RANGE
        total *= 1 + luck

        final = round(total)
        logger.debug(
            "Scored %s in %s: %s (traits=%s, trait modifier=%.3f, luck=%.3f)",
            entry.get('name'), discipline, final, traits, trait_modifier, luck
        )
        return final

    def rank(self, horses: Sequence[Any], discipline: str, rng: Optional[RandomSource] = None) -> List[CompetitionResult]:
        """
        Score and rank a field of entrants.

        The top three receive 1st, 2nd and 3rd placements; ties keep entry order.

        Raises:
            ValidationError: If any entrant or the discipline is invalid
        """
        self._check_discipline(discipline)
        results = []
        for horse in horses:
            entry = self._entry(horse)
            results.append(CompetitionResult(
                horse_id=entry.get('id'),
                name=entry.get('name'),
                score=self.score(entry, discipline, rng=rng),
            ))

        results.sort(key=lambda result: result.score, reverse=True)
        for placement, result in zip(PLACEMENTS, results):
            result.placement = placement

        logger.info("Ranked %d entrants in %s", len(results), discipline)
        return results
