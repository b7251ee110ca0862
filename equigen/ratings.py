"""Conformation and gait ratings."""

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

from .exceptions import ConfigurationError
from .random_source import RandomSource

CONFORMATION_ATTRIBUTES = ('head', 'neck', 'shoulders', 'back', 'hindquarters', 'legs', 'hooves')
GAIT_ATTRIBUTES = ('walk', 'trot', 'canter', 'gallop')
GAITING = 'gaiting'

MIN_RATING = 1
MAX_RATING = 100
MISSING_PARENT_RATING = 50
FOAL_TWEAK_RANGE = 5


@dataclass
class Ratings:
    """Conformation and gait scores, each 1-100."""
    conformation: Dict[str, int] = field(default_factory=dict)
    gaits: Dict[str, Optional[int]] = field(default_factory=dict)  # 'gaiting' is None for non-gaited breeds

    def to_dict(self) -> Dict[str, Dict[str, Optional[int]]]:
        return {'conformation': dict(self.conformation), 'gaits': dict(self.gaits)}


def _clamp_rating(value: float) -> int:
    return max(MIN_RATING, min(MAX_RATING, round(value)))


def _attribute_profile(rating_profiles: Mapping[str, Any], group: str, attribute: str) -> Mapping[str, float]:
    profile = (rating_profiles.get(group) or {}).get(attribute)
    if profile is None:
        raise ConfigurationError(f"rating_profiles.{group} has no entry for '{attribute}'")
    return profile


def _is_gaited(rating_profiles: Mapping[str, Any]) -> bool:
    return bool(rating_profiles.get('is_gaited_breed')) and GAITING in (rating_profiles.get('gaits') or {})


def generate_attribute_score(profile: Mapping[str, float], rng: RandomSource) -> int:
    """Uniform score within one standard deviation of the breed mean."""
    return _clamp_rating(profile['mean'] + (rng.next() * 2 - 1) * profile['std_dev'])


def generate_store_ratings(rating_profiles: Optional[Mapping[str, Any]], rng: RandomSource) -> Ratings:
    """
    Generate ratings for a store horse from breed rating profiles.

    Args:
        rating_profiles: Breed 'rating_profiles' with conformation and gaits
        rng: Random source

    Returns:
        Ratings; gaiting is None unless the breed is gaited

    Raises:
        ConfigurationError: If the breed lacks a profile for any attribute
    """
    if not rating_profiles:
        raise ConfigurationError("Breed profile has no rating_profiles")

    ratings = Ratings()
    for attribute in CONFORMATION_ATTRIBUTES:
        profile = _attribute_profile(rating_profiles, 'conformation', attribute)
        ratings.conformation[attribute] = generate_attribute_score(profile, rng)

    for attribute in GAIT_ATTRIBUTES:
        profile = _attribute_profile(rating_profiles, 'gaits', attribute)
        ratings.gaits[attribute] = generate_attribute_score(profile, rng)

    if _is_gaited(rating_profiles):
        ratings.gaits[GAITING] = generate_attribute_score(rating_profiles['gaits'][GAITING], rng)
    else:
        ratings.gaits[GAITING] = None

    return ratings


def _foal_attribute(sire_score: Optional[int], dam_score: Optional[int], profile: Mapping[str, float], rng: RandomSource) -> int:
    sire_score = MISSING_PARENT_RATING if sire_score is None else sire_score
    dam_score = MISSING_PARENT_RATING if dam_score is None else dam_score
    parent_average = (sire_score + dam_score) / 2
    breed_influence = (rng.next() * 2 - 1) * profile['std_dev']
    tweak = int(rng.next() * (FOAL_TWEAK_RANGE * 2 + 1)) - FOAL_TWEAK_RANGE
    return _clamp_rating(parent_average + breed_influence + tweak)


def calculate_foal_ratings(
    sire: Optional[Ratings],
    dam: Optional[Ratings],
    rating_profiles: Optional[Mapping[str, Any]],
    rng: RandomSource
) -> Ratings:
    """
    Derive foal ratings from the parents' ratings.

    Each attribute is the parents' average (a missing parent score counts
    as 50), shifted by up to one breed standard deviation and a further
    tweak of at most 5 points, then clamped to 1-100.

    Raises:
        ConfigurationError: If the foal's breed lacks a profile for any attribute
    """
    if not rating_profiles:
        raise ConfigurationError("Breed profile has no rating_profiles")
    sire = sire or Ratings()
    dam = dam or Ratings()

    ratings = Ratings()
    for attribute in CONFORMATION_ATTRIBUTES:
        profile = _attribute_profile(rating_profiles, 'conformation', attribute)
        ratings.conformation[attribute] = _foal_attribute(
            sire.conformation.get(attribute), dam.conformation.get(attribute), profile, rng
        )

    for attribute in GAIT_ATTRIBUTES:
        profile = _attribute_profile(rating_profiles, 'gaits', attribute)
        ratings.gaits[attribute] = _foal_attribute(sire.gaits.get(attribute), dam.gaits.get(attribute), profile, rng)

    if _is_gaited(rating_profiles):
        ratings.gaits[GAITING] = _foal_attribute(
            sire.gaits.get(GAITING), dam.gaits.get(GAITING), rating_profiles['gaits'][GAITING], rng
        )
    else:
        ratings.gaits[GAITING] = None

    return ratings
