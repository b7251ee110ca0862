"""Breed profile loading and validation for equigen."""

import json
import math
import yaml
from pathlib import Path
from typing import Dict, List, Any, Optional
from dataclasses import dataclass, field

from .exceptions import ConfigurationError, GenotypeError
from .models.locus import LOCI, BOOLEAN_MODIFIERS
from .models.phenotype import LEGS


DEFAULT_SHADE_BUCKET = "Default"

ADVANCED_MARKING_MULTIPLIERS = (
    'snowflake_probability_multiplier',
    'frost_probability_multiplier',
    'mottling_probability_multiplier',
    'striping_probability_multiplier',
    'bloody_shoulder_probability_multiplier',
)


@dataclass
class MarkingBias:
    """Face and leg marking weights for a breed."""
    face: Dict[str, float]
    legs_general_probability: float  # Chance that any single leg is marked
    leg_specific_probabilities: Dict[str, float]
    max_legs_marked: int = 4


@dataclass
class BreedGeneticProfile:
    """Validated genetic configuration for one breed."""
    name: str
    allele_weights: Dict[str, Dict[str, float]]
    shade_bias: Dict[str, Dict[str, float]]
    marking_bias: MarkingBias
    advanced_markings_bias: Dict[str, float] = field(default_factory=dict)
    boolean_modifiers_prevalence: Dict[str, float] = field(default_factory=dict)
    disallowed_combinations: Dict[str, List[str]] = field(default_factory=dict)
    temperament_weights: Dict[str, float] = field(default_factory=dict)
    rating_profiles: Dict[str, Any] = field(default_factory=dict)
    raw_config: Dict[str, Any] = field(default_factory=dict, repr=False)

    def multiplier(self, name: str) -> float:
        """Advanced marking multiplier, 1.0 when the breed does not set it."""
        return self.advanced_markings_bias.get(name, 1.0)

    def is_disallowed(self, locus: str, pair: str) -> bool:
        return pair in self.disallowed_combinations.get(locus, [])


def read_config_file(config_path: str) -> Any:
    path = Path(config_path)

    if not path.exists():
        raise ConfigurationError(f"Configuration file not found: {config_path}")

    try:
        with open(path, 'r') as f:
            if path.suffix.lower() == '.json':
                return json.load(f)
            return yaml.safe_load(f)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Failed to parse configuration file: {e}") from e
    except OSError as e:
        raise ConfigurationError(f"Failed to read configuration file: {e}") from e


def load_breed_profile(config_path: str) -> BreedGeneticProfile:
    """
    Load and validate a single breed profile from a YAML or JSON file.

    Args:
        config_path: Path to profile file

    Returns:
        Validated BreedGeneticProfile

    Raises:
        ConfigurationError: If the file doesn't exist or the profile is invalid
    """
    return profile_from_dict(read_config_file(config_path))


def load_breed_profiles(config_path: str) -> Dict[str, BreedGeneticProfile]:
    """
    Load several breed profiles keyed by breed name.

    The file holds a mapping of breed name -> profile body; the key becomes
    the profile name when the body does not set one.
    """
    raw = read_config_file(config_path)
    if not isinstance(raw, dict) or not raw:
        raise ConfigurationError("Breed profile file must map breed names to profiles")

    profiles = {}
    for breed_name, body in raw.items():
        if not isinstance(body, dict):
            raise ConfigurationError(f"Profile for breed {breed_name} must be a dictionary")
        body = dict(body)
        body.setdefault('name', breed_name)
        profiles[breed_name] = profile_from_dict(body)
    return profiles


def profile_from_dict(raw_config: Dict[str, Any]) -> BreedGeneticProfile:
    """Validate a raw profile mapping and build the typed profile."""
    validate_profile(raw_config)
    return build_profile(raw_config)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _validate_weight_table(table: Any, context: str) -> None:
    """Weights must be finite non-negative numbers with a positive total."""
    if not isinstance(table, dict) or not table:
        raise ConfigurationError(f"{context} must be a non-empty dictionary")
    for key, weight in table.items():
        if not _is_number(weight) or not math.isfinite(weight) or weight < 0:
            raise ConfigurationError(f"{context}.{key} must be a finite non-negative number, got {weight!r}")
    if sum(table.values()) <= 0:
        raise ConfigurationError(f"{context} has zero total weight")


def _validate_probability(value: Any, context: str) -> None:
    if not _is_number(value) or not (0.0 <= value <= 1.0):
        raise ConfigurationError(f"{context} must be a number between 0.0 and 1.0")


def validate_profile(config: Dict[str, Any]) -> None:
    """
    Validate breed profile structure and values.

    Args:
        config: Raw profile dictionary

    Raises:
        ConfigurationError: If validation fails
    """
    if not isinstance(config, dict):
        raise ConfigurationError("Breed profile must be a dictionary")

    required_fields = ['name', 'allele_weights', 'shade_bias', 'marking_bias']
    for field_name in required_fields:
        if field_name not in config:
            raise ConfigurationError(f"Missing required field: {field_name}")

    if not isinstance(config['name'], str) or not config['name']:
        raise ConfigurationError("name must be a non-empty string")

    # Allele weights: every locus and allele must come from the catalog
    allele_weights = config['allele_weights']
    if not isinstance(allele_weights, dict) or not allele_weights:
        raise ConfigurationError("allele_weights must be a non-empty dictionary")
    for locus_name, weights in allele_weights.items():
        if locus_name not in LOCI:
            raise ConfigurationError(f"allele_weights references unknown locus: {locus_name}")
        _validate_weight_table(weights, f"allele_weights.{locus_name}")
        for allele in weights:
            if allele not in LOCI[locus_name].alleles:
                raise ConfigurationError(f"allele_weights.{locus_name} has unknown allele: {allele}")

    # Shade bias
    shade_bias = config['shade_bias']
    if not isinstance(shade_bias, dict) or not shade_bias:
        raise ConfigurationError("shade_bias must be a non-empty dictionary")
    for color_name, shades in shade_bias.items():
        _validate_weight_table(shades, f"shade_bias.{color_name}")

    # Marking bias
    marking_bias = config['marking_bias']
    if not isinstance(marking_bias, dict):
        raise ConfigurationError("marking_bias must be a dictionary")
    for field_name in ['face', 'legs_general_probability', 'leg_specific_probabilities']:
        if field_name not in marking_bias:
            raise ConfigurationError(f"marking_bias missing required field: {field_name}")
    _validate_weight_table(marking_bias['face'], "marking_bias.face")
    _validate_probability(marking_bias['legs_general_probability'], "marking_bias.legs_general_probability")
    _validate_weight_table(marking_bias['leg_specific_probabilities'], "marking_bias.leg_specific_probabilities")
    max_legs = marking_bias.get('max_legs_marked', len(LEGS))
    if not isinstance(max_legs, int) or isinstance(max_legs, bool) or not (0 <= max_legs <= len(LEGS)):
        raise ConfigurationError(f"marking_bias.max_legs_marked must be an integer between 0 and {len(LEGS)}")

    # Advanced marking multipliers (optional)
    advanced = config.get('advanced_markings_bias', {}) or {}
    if not isinstance(advanced, dict):
        raise ConfigurationError("advanced_markings_bias must be a dictionary")
    for key, value in advanced.items():
        if key not in ADVANCED_MARKING_MULTIPLIERS:
            raise ConfigurationError(f"advanced_markings_bias has unknown multiplier: {key}")
        if not _is_number(value) or value < 0:
            raise ConfigurationError(f"advanced_markings_bias.{key} must be a non-negative number")

    # Boolean modifier prevalence (optional)
    prevalence = config.get('boolean_modifiers_prevalence', {}) or {}
    if not isinstance(prevalence, dict):
        raise ConfigurationError("boolean_modifiers_prevalence must be a dictionary")
    for modifier, value in prevalence.items():
        if modifier not in BOOLEAN_MODIFIERS:
            raise ConfigurationError(f"boolean_modifiers_prevalence has unknown modifier: {modifier}")
        _validate_probability(value, f"boolean_modifiers_prevalence.{modifier}")

    # Disallowed combinations (optional)
    disallowed = config.get('disallowed_combinations', {}) or {}
    if not isinstance(disallowed, dict):
        raise ConfigurationError("disallowed_combinations must be a dictionary")
    for locus_name, pairs in disallowed.items():
        if locus_name not in LOCI:
            raise ConfigurationError(f"disallowed_combinations references unknown locus: {locus_name}")
        if not isinstance(pairs, list):
            raise ConfigurationError(f"disallowed_combinations.{locus_name} must be a list")
        for pair in pairs:
            try:
                LOCI[locus_name].parse_pair(pair)
            except GenotypeError as e:
                raise ConfigurationError(f"disallowed_combinations.{locus_name}: {e}") from e

    # Temperament weights (optional here, required by the temperament resolver)
    if config.get('temperament_weights'):
        _validate_weight_table(config['temperament_weights'], "temperament_weights")

    # Rating profiles (optional here, required by the ratings generator)
    rating_profiles = config.get('rating_profiles', {}) or {}
    if not isinstance(rating_profiles, dict):
        raise ConfigurationError("rating_profiles must be a dictionary")
    for group in ['conformation', 'gaits']:
        if group not in rating_profiles:
            continue
        attributes = rating_profiles[group]
        if not isinstance(attributes, dict):
            raise ConfigurationError(f"rating_profiles.{group} must be a dictionary")
        for attr, stat in attributes.items():
            if not isinstance(stat, dict) or 'mean' not in stat or 'std_dev' not in stat:
                raise ConfigurationError(f"rating_profiles.{group}.{attr} must have 'mean' and 'std_dev'")
            if not _is_number(stat['mean']) or not _is_number(stat['std_dev']) or stat['std_dev'] < 0:
                raise ConfigurationError(f"rating_profiles.{group}.{attr} has invalid mean/std_dev")
    if 'is_gaited_breed' in rating_profiles and not isinstance(rating_profiles['is_gaited_breed'], bool):
        raise ConfigurationError("rating_profiles.is_gaited_breed must be a boolean")


def build_profile(raw_config: Dict[str, Any]) -> BreedGeneticProfile:
    """
    Build BreedGeneticProfile from a validated raw profile.

    Args:
        raw_config: Validated profile dictionary

    Returns:
        BreedGeneticProfile object
    """
    mb = raw_config['marking_bias']
    marking_bias = MarkingBias(
        face=dict(mb['face']),
        legs_general_probability=float(mb['legs_general_probability']),
        leg_specific_probabilities=dict(mb['leg_specific_probabilities']),
        max_legs_marked=mb.get('max_legs_marked', len(LEGS)),
    )

    disallowed = {
        locus_name: [LOCI[locus_name].format_pair(*LOCI[locus_name].parse_pair(p)) for p in pairs]
        for locus_name, pairs in (raw_config.get('disallowed_combinations') or {}).items()
    }

    return BreedGeneticProfile(
        name=raw_config['name'],
        allele_weights={locus: dict(weights) for locus, weights in raw_config['allele_weights'].items()},
        shade_bias={color: dict(shades) for color, shades in raw_config['shade_bias'].items()},
        marking_bias=marking_bias,
        advanced_markings_bias=dict(raw_config.get('advanced_markings_bias') or {}),
        boolean_modifiers_prevalence=dict(raw_config.get('boolean_modifiers_prevalence') or {}),
        disallowed_combinations=disallowed,
        temperament_weights=dict(raw_config.get('temperament_weights') or {}),
        rating_profiles=dict(raw_config.get('rating_profiles') or {}),
        raw_config=raw_config,
    )
