"""Temperament draws for store horses and foals."""

import logging
from typing import Dict, Mapping, Optional

from .exceptions import ConfigurationError
from .random_source import RandomSource, weighted_choice

logger = logging.getLogger(__name__)

PARENTAL_INFLUENCE_BONUS = 15


def _require_weights(weights: Optional[Mapping[str, float]], context: str) -> None:
    if not weights:
        raise ConfigurationError(f"Breed profile has no temperament_weights for {context}")


def determine_store_temperament(weights: Optional[Mapping[str, float]], rng: RandomSource) -> str:
    """
    Draw a temperament from the breed's temperament weights.

    Raises:
        ConfigurationError: If the breed defines no temperament weights
    """
    _require_weights(weights, "store horse")
    return weighted_choice(weights, rng)


def determine_foal_temperament(
    sire_temperament: Optional[str],
    dam_temperament: Optional[str],
    weights: Optional[Mapping[str, float]],
    rng: RandomSource
) -> str:
    """
    Draw a foal temperament, biased toward the parents' temperaments.

    Each parent temperament that the breed table knows gets a flat bonus;
    a temperament shared by both parents gets it twice. Parent temperaments
    outside the table are ignored.

    Raises:
        ConfigurationError: If the breed defines no temperament weights
    """
    _require_weights(weights, "foal")
    adjusted: Dict[str, float] = dict(weights)

    for temperament in (sire_temperament, dam_temperament):
        if temperament in adjusted:
            adjusted[temperament] += PARENTAL_INFLUENCE_BONUS
        elif temperament is not None:
            logger.debug("Parent temperament %s not in breed table, ignoring", temperament)

    return weighted_choice(adjusted, rng)
