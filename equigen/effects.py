"""Trait effect catalog mapping epigenetic traits to gameplay modifiers."""

import copy
import logging
from typing import Any, Dict, Iterable, List, Optional

from .config import read_config_file
from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

TraitEffect = Dict[str, Any]

DEFAULT_TRAIT_EFFECTS: Dict[str, TraitEffect] = {
    # ===== POSITIVE TRAITS =====
    'resilient': {
        'suppressTemperamentDrift': True,
        'trainingStressReduction': 0.15,
        'trainingConsistencyBonus': 0.10,
        'competitionStressResistance': 0.15,
        'competitionScoreModifier': 0.03,
        'stressRecoveryRate': 1.25,
        'injuryRecoveryBonus': 0.20,
        'disciplineModifiers': {'Cross Country': 0.05, 'Endurance': 0.06, 'Racing': 0.04},
    },
    'calm': {
        'suppressTemperamentDrift': True,
        'trainingStressReduction': 0.20,
        'trainingFocusBonus': 0.15,
        'competitionStressResistance': 0.25,
        'competitionFocusBonus': 0.10,
        'competitionScoreModifier': 0.025,
        'baseStressReduction': 5,
        'temperamentStability': True,
        'disciplineModifiers': {'Dressage': 0.05, 'Driving': 0.04, 'Trail': 0.03},
    },
    'bold': {
        'trainingConfidenceBonus': 0.15,
        'newExperienceAdaptation': 0.25,
        'competitionConfidenceBoost': 5,
        'competitionScoreModifier': 0.035,
        'competitionNerveBonus': 0.20,
        'explorationBonus': True,
        'disciplineModifiers': {'Show Jumping': 0.06, 'Cross Country': 0.05, 'Racing': 0.04},
    },
    'intelligent': {
        'trainingXpModifier': 0.25,
        'statGainChanceModifier': 0.15,
        'trainingTimeReduction': 0.10,
        'competitionScoreModifier': 0.03,
        'learningBonus': 0.25,
        'problemSolvingBonus': True,
        'memoryBonus': True,
        'disciplineModifiers': {'Dressage': 0.06, 'Reining': 0.05, 'Eventing': 0.04},
    },
    'athletic': {
        'physicalTrainingBonus': 0.20,
        'staminaTrainingBonus': 0.25,
        'competitionScoreModifier': 0.05,
        'physicalBonus': 0.15,
        'enduranceBonus': 0.20,
        'baseStatBoost': {'stamina': 2, 'agility': 2, 'balance': 1},
        'disciplineModifiers': {'Racing': 0.07, 'Show Jumping': 0.06, 'Cross Country': 0.06},
    },
    'trainability_boost': {
        'trainingXpModifier': 0.30,
        'statGainChanceModifier': 0.20,
        'trainingSuccessRate': 0.25,
        'competitionScoreModifier': 0.04,
        'consistencyBonus': 0.30,
        'learningAcceleration': True,
        'adaptabilityBonus': True,
        'disciplineModifiers': {'Dressage': 0.07, 'Reining': 0.06, 'Driving': 0.05},
    },
    'people_trusting': {
        'bondingRateModifier': 0.25,
        'handlingEaseBonus': 0.20,
        'competitionScoreModifier': 0.01,
        'groomInteractionBonus': True,
    },
    'legacy_talent': {
        'trainingXpModifier': 0.15,
        'competitionScoreModifier': 0.04,
        'prestigeBonus': True,
    },

    # ===== NEGATIVE TRAITS =====
    'nervous': {
        'trainingStressIncrease': 0.25,
        'trainingInconsistency': 0.15,
        'competitionStressRisk': 10,
        'competitionScoreModifier': -0.04,
        'competitionNervePenalty': 0.25,
        'stressAccumulation': 1.20,
        'temperamentInstability': True,
        'disciplineModifiers': {'Racing': -0.06, 'Show Jumping': -0.05, 'Eventing': -0.04},
    },
    'lazy': {
        'trainingXpModifier': -0.20,
        'trainingMotivationPenalty': 0.25,
        'trainingTimeIncrease': 0.15,
        'competitionScoreModifier': -0.035,
        'endurancePenalty': 0.20,
        'activityAvoidance': True,
        'motivationDecay': 0.10,
        'disciplineModifiers': {'Endurance': -0.08, 'Cross Country': -0.06, 'Racing': -0.05},
    },
    'fragile': {
        'trainingInjuryRisk': 0.30,
        'trainingIntensityLimit': 0.20,
        'competitionScoreModifier': -0.035,
        'injuryRisk': 0.30,
        'performanceInconsistency': 0.25,
        'injuryRecoveryPenalty': 0.30,
        'stressRecoveryPenalty': 0.15,
        'disciplineModifiers': {'Cross Country': -0.08, 'Show Jumping': -0.06, 'Racing': -0.05},
    },
    'aggressive': {
        'trainingDifficultyIncrease': 0.25,
        'trainerSafetyRisk': True,
        'competitionScoreModifier': -0.045,
        'controlPenalty': 0.35,
        'disqualificationRisk': 0.15,
        'socialDifficulty': True,
        'unpredictableBehavior': True,
        'disciplineModifiers': {'Dressage': -0.08, 'Driving': -0.07, 'Trail': -0.06},
    },
    'stubborn': {
        'trainingXpModifier': -0.15,
        'trainingResistance': 0.30,
        'newSkillPenalty': 0.25,
        'competitionScoreModifier': -0.03,
        'adaptabilityPenalty': 0.20,
        'commandResistance': True,
        'routinePreference': True,
        'disciplineModifiers': {'Dressage': -0.06, 'Reining': -0.05, 'Eventing': -0.04},
    },
    'reactive': {
        'trainingStressIncrease': 0.15,
        'competitionScoreModifier': -0.02,
        'spookRisk': 0.20,
        'disciplineModifiers': {'Trail': -0.05, 'Dressage': -0.03},
    },
    'low_immunity': {
        'illnessRisk': 0.25,
        'injuryRecoveryPenalty': 0.15,
        'competitionScoreModifier': -0.02,
    },

    # ===== RARE TRAITS =====
    'legendary_bloodline': {
        'trainingXpModifier': 0.50,
        'statGainChanceModifier': 0.30,
        'eliteTrainingAccess': True,
        'competitionScoreModifier': 0.08,
        'prestigeBonus': True,
        'baseStatBoost': {'stamina': 3, 'agility': 3, 'balance': 2, 'focus': 2},
        'breedingValueBonus': 0.50,
        'traitInheritanceBonus': 0.25,
        'disciplineModifiers': {
            'Racing': 0.10, 'Dressage': 0.08, 'Show Jumping': 0.08, 'Cross Country': 0.08,
            'Endurance': 0.08, 'Reining': 0.06, 'Driving': 0.06, 'Trail': 0.06, 'Eventing': 0.08,
        },
    },
    'weather_immunity': {
        'weatherPenaltyImmunity': True,
        'competitionScoreModifier': 0.02,
        'disciplineModifiers': {'Endurance': 0.05, 'Cross Country': 0.04, 'Trail': 0.04},
    },
    'night_vision': {
        'lowLightPenaltyImmunity': True,
        'competitionScoreModifier': 0.015,
        'disciplineModifiers': {'Trail': 0.05, 'Endurance': 0.03},
    },
    'extreme_resilience': {
        'illnessResistance': 0.50,
        'injuryRecoveryBonus': 0.40,
        'competitionStressResistance': 0.30,
        'competitionScoreModifier': 0.02,
        'disciplineModifiers': {'Endurance': 0.06, 'Cross Country': 0.05, 'Eventing': 0.04},
    },
    'burnout': {
        'statGainBlocked': True,
        'trainingXpModifier': -0.50,
        'trainingMotivationPenalty': 0.50,
        'competitionScoreModifier': -0.10,
        'performanceDecline': 0.30,
        'extendedRestRequired': True,
        'stressRecoveryPenalty': 0.40,
        'activityAvoidance': True,
        'motivationDecay': 0.25,
        'disciplineModifiers': {
            'Racing': -0.12, 'Dressage': -0.10, 'Show Jumping': -0.10, 'Cross Country': -0.12,
            'Endurance': -0.15, 'Reining': -0.08, 'Driving': -0.08, 'Trail': -0.06, 'Eventing': -0.10,
        },
    },
}


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _validate_effect(trait: str, effect: Any) -> None:
    if not isinstance(effect, dict):
        raise ConfigurationError(f"Effects for trait {trait} must be a dictionary")
    for key, value in effect.items():
        if isinstance(value, bool) or _is_number(value):
            continue
        if isinstance(value, dict):
            for sub_key, sub_value in value.items():
                if not _is_number(sub_value):
                    raise ConfigurationError(f"{trait}.{key}.{sub_key} must be a number, got {sub_value!r}")
            continue
        raise ConfigurationError(f"{trait}.{key} must be a number, boolean or mapping, got {value!r}")


class TraitEffectRegistry:
    """Static catalog of trait -> gameplay modifiers with a merge operator."""

    def __init__(self, effects: Optional[Dict[str, TraitEffect]] = None):
        """
        Initialize registry.

        Args:
            effects: Trait effect catalog. Defaults to the built-in catalog.
        """
        catalog = DEFAULT_TRAIT_EFFECTS if effects is None else effects
        for trait, effect in catalog.items():
            _validate_effect(trait, effect)
        self._effects = copy.deepcopy(catalog)

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> 'TraitEffectRegistry':
        """
        Create a registry from a configuration mapping.

        The mapping may either be the catalog itself or wrap it under a
        'trait_effects' key.
        """
        if not isinstance(config, dict):
            raise ConfigurationError("Trait effect configuration must be a dictionary")
        catalog = config.get('trait_effects', config)
        if not isinstance(catalog, dict) or not catalog:
            raise ConfigurationError("trait_effects must be a non-empty dictionary")
        return cls(catalog)

    def effects_of(self, trait: str) -> Optional[TraitEffect]:
        """
        Effects for a single trait.

        Returns:
            A copy of the trait's effects, or None for unknown names
        """
        effect = self._effects.get(trait)
        if effect is None:
            return None
        return copy.deepcopy(effect)

    def has_effect(self, trait: str, effect_name: str) -> bool:
        return effect_name in self._effects.get(trait, {})

    def known_traits(self) -> List[str]:
        return list(self._effects)

    def combine(self, traits: Iterable[str]) -> TraitEffect:
        """
        Merge the effects of several traits.

        Booleans are OR-ed, numbers summed, and nested mappings summed per
        key over the union of keys. Unknown trait names are skipped.

        Args:
            traits: Trait names, known or unknown

        Returns:
            Combined effect dictionary (empty when nothing matched)
        """
        combined: TraitEffect = {}

        for trait in traits or []:
            effect = self._effects.get(trait)
            if effect is None:
                logger.debug("Skipping trait without effects: %s", trait)
                continue

            for key, value in effect.items():
                if isinstance(value, bool):
                    combined[key] = bool(combined.get(key, False)) or value
                elif _is_number(value):
                    combined[key] = combined.get(key, 0) + value
                else:
                    merged = dict(combined.get(key, {}))
                    for sub_key, sub_value in value.items():
                        merged[sub_key] = merged.get(sub_key, 0) + sub_value
                    combined[key] = merged

        return combined


def load_trait_effects(config_path: str) -> TraitEffectRegistry:
    """
    Load a trait effect catalog from a YAML or JSON file.

    Raises:
        ConfigurationError: If the file is missing or the catalog is invalid
    """
    return TraitEffectRegistry.from_config(read_config_file(config_path))
