"""Shared fixtures for equigen tests."""

import copy
import pytest

from equigen.config import profile_from_dict


SAMPLE_PROFILE = {
    'name': 'Test Breed',
    'allele_weights': {
        'extension': {'E': 0.6, 'e': 0.4},
        'agouti': {'A': 0.5, 'a': 0.5},
        'cream': {'Cr': 0.1, 'n': 0.9},
        'dun': {'D': 0.05, 'nd1': 0.15, 'nd2': 0.8},
        'gray': {'G': 0.1, 'g': 0.9},
        'tobiano': {'TO': 0.1, 'to': 0.9},
        'frame_overo': {'O': 0.1, 'n': 0.9},
    },
    'shade_bias': {
        'Chestnut': {'light': 0.3, 'standard': 0.5, 'dark': 0.2},
        'Bay': {'standard': 0.6, 'dark': 0.4},
        'Default': {'standard': 1.0},
    },
    'marking_bias': {
        'face': {'none': 0.5, 'star': 0.3, 'blaze': 0.2},
        'legs_general_probability': 0.3,
        'leg_specific_probabilities': {'coronet': 0.5, 'sock': 0.3, 'stocking': 0.2},
        'max_legs_marked': 2,
    },
    'advanced_markings_bias': {
        'bloody_shoulder_probability_multiplier': 2.0,
    },
    'boolean_modifiers_prevalence': {
        'sooty': 0.2,
        'flaxen': 0.1,
    },
    'disallowed_combinations': {
        'frame_overo': ['O/O'],
    },
    'temperament_weights': {
        'Calm': 40,
        'Spirited': 30,
        'Nervous': 10,
        'Bold': 20,
    },
    'rating_profiles': {
        'conformation': {
            attr: {'mean': 70, 'std_dev': 8}
            for attr in ('head', 'neck', 'shoulders', 'back', 'hindquarters', 'legs', 'hooves')
        },
        'gaits': {
            attr: {'mean': 65, 'std_dev': 10}
            for attr in ('walk', 'trot', 'canter', 'gallop')
        },
        'is_gaited_breed': False,
    },
}


@pytest.fixture
def sample_profile_dict():
    """Raw breed profile mapping (a fresh copy per test)."""
    return copy.deepcopy(SAMPLE_PROFILE)


@pytest.fixture
def sample_profile(sample_profile_dict):
    """Validated BreedGeneticProfile."""
    return profile_from_dict(sample_profile_dict)
