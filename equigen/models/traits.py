"""Epigenetic trait catalog and TraitSet model."""

from enum import Enum
from typing import Dict, FrozenSet, List, Optional, Tuple
from dataclasses import dataclass, field


class TraitCategory(Enum):
    """Where an expressed trait is filed."""
    POSITIVE = "positive"
    NEGATIVE = "negative"


DISCIPLINE_AFFINITY_PREFIX = "discipline_affinity_"

TRAIT_CATEGORIES: Dict[str, TraitCategory] = {
    # Positive
    'resilient': TraitCategory.POSITIVE,
    'calm': TraitCategory.POSITIVE,
    'bold': TraitCategory.POSITIVE,
    'intelligent': TraitCategory.POSITIVE,
    'athletic': TraitCategory.POSITIVE,
    'trainability_boost': TraitCategory.POSITIVE,
    'people_trusting': TraitCategory.POSITIVE,
    'legacy_talent': TraitCategory.POSITIVE,
    # Negative
    'nervous': TraitCategory.NEGATIVE,
    'lazy': TraitCategory.NEGATIVE,
    'fragile': TraitCategory.NEGATIVE,
    'aggressive': TraitCategory.NEGATIVE,
    'stubborn': TraitCategory.NEGATIVE,
    'reactive': TraitCategory.NEGATIVE,
    'low_immunity': TraitCategory.NEGATIVE,
    # Rare
    'legendary_bloodline': TraitCategory.POSITIVE,
    'weather_immunity': TraitCategory.POSITIVE,
    'night_vision': TraitCategory.POSITIVE,
    'extreme_resilience': TraitCategory.POSITIVE,
    'burnout': TraitCategory.NEGATIVE,
}

RARE_TRAITS: FrozenSet[str] = frozenset({
    'legendary_bloodline', 'weather_immunity', 'night_vision', 'extreme_resilience', 'burnout',
})

OPPOSING_TRAITS: Tuple[Tuple[str, str], ...] = (
    ('calm', 'nervous'),
    ('calm', 'aggressive'),
    ('bold', 'nervous'),
    ('resilient', 'fragile'),
    ('athletic', 'fragile'),
    ('intelligent', 'lazy'),
    ('trainability_boost', 'stubborn'),
    ('legendary_bloodline', 'burnout'),
)


def trait_category(trait: str) -> Optional[TraitCategory]:
    """Category of a trait, or None for names outside the catalog."""
    if trait in TRAIT_CATEGORIES:
        return TRAIT_CATEGORIES[trait]
    if trait.startswith(DISCIPLINE_AFFINITY_PREFIX) and len(trait) > len(DISCIPLINE_AFFINITY_PREFIX):
        return TraitCategory.POSITIVE
    return None


def opposites_of(trait: str) -> List[str]:
    """Traits that cannot coexist with the given one."""
    result = []
    for first, second in OPPOSING_TRAITS:
        if trait == first:
            result.append(second)
        elif trait == second:
            result.append(first)
    return result


def discipline_affinity_trait(discipline: str) -> str:
    """Trait name granting affinity for a discipline, e.g. 'Show Jumping' -> discipline_affinity_show_jumping."""
    key = '_'.join(discipline.strip().lower().split())
    return f"{DISCIPLINE_AFFINITY_PREFIX}{key}"


@dataclass
class TraitSet:
    """Offspring epigenetic traits split by expression."""
    positive: List[str] = field(default_factory=list)
    negative: List[str] = field(default_factory=list)
    hidden: List[str] = field(default_factory=list)

    def __post_init__(self):
        """Validate uniqueness and mutual exclusion."""
        seen = set()
        for trait in self.all_traits():
            if trait in seen:
                raise ValueError(f"Trait '{trait}' appears more than once")
            seen.add(trait)
        for first, second in OPPOSING_TRAITS:
            if first in seen and second in seen:
                raise ValueError(f"Opposing traits '{first}' and '{second}' cannot coexist")

    def all_traits(self) -> List[str]:
        """Every trait, visible first then hidden."""
        return [*self.positive, *self.negative, *self.hidden]

    def expressed(self) -> List[str]:
        """Traits currently affecting gameplay."""
        return [*self.positive, *self.negative]

    def __contains__(self, trait: str) -> bool:
        return trait in self.positive or trait in self.negative or trait in self.hidden

    def to_dict(self) -> Dict[str, List[str]]:
        return {
            'positive': list(self.positive),
            'negative': list(self.negative),
            'hidden': list(self.hidden),
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Optional[List[str]]]]) -> 'TraitSet':
        """
        Build a TraitSet from persisted epigenetic modifiers.

        Missing or null lists are treated as empty.
        """
        data = data or {}
        return cls(
            positive=list(data.get('positive') or []),
            negative=list(data.get('negative') or []),
            hidden=list(data.get('hidden') or []),
        )
