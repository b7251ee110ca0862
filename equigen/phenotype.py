"""Phenotype resolution: coat color, shade and markings from a genotype."""

import logging
from dataclasses import dataclass, field, replace
from typing import Callable, List, Optional, Tuple

from .config import BreedGeneticProfile, DEFAULT_SHADE_BUCKET
from .exceptions import ConfigurationError, ValidationError
from .models.locus import Genotype, alleles_of, validate_genotype
from .models.phenotype import LEGS, Markings, Phenotype
from .random_source import RandomSource, NumpyRandomSource, weighted_choice, bernoulli

logger = logging.getLogger(__name__)

# Upper age bound (inclusive) of each gray stage; anything older is fleabitten
GRAY_STAGE_LIMITS = (3, 6, 9, 12)

# Upper age bound (inclusive) of the light and moderate leopard bands
LEOPARD_AGE_LIMITS = (4, 8)

BLOODY_SHOULDER_BASE_PROBABILITY = 0.001
LEOPARD_MARKING_BASE_PROBABILITY = 1.0

# Base color -> (champagne tone, double cream name)
CHAMPAGNE_FAMILIES = {
    'Chestnut': ('Gold', 'Cremello'),
    'Bay': ('Amber', 'Perlino'),
    'Black': ('Classic', 'Smoky Cream'),
}

ROAN_NAMES = {
    'Chestnut': 'Red Roan',
    'Bay': 'Bay Roan',
    'Black': 'Blue Roan',
}


def has_allele(genotype: Genotype, locus: str, allele: str) -> bool:
    return allele in alleles_of(genotype, locus)


def is_homozygous(genotype: Genotype, locus: str, allele: str) -> bool:
    return alleles_of(genotype, locus) == [allele, allele]


def is_heterozygous(genotype: Genotype, locus: str, allele: str) -> bool:
    alleles = alleles_of(genotype, locus)
    return len(alleles) == 2 and alleles.count(allele) == 1


def gray_stage(age_years: float) -> int:
    """Index of the gray stage for an age (0 = youngest)."""
    for index, limit in enumerate(GRAY_STAGE_LIMITS):
        if age_years <= limit:
            return index
    return len(GRAY_STAGE_LIMITS)


def leopard_age_band(age_years: float) -> str:
    if age_years <= LEOPARD_AGE_LIMITS[0]:
        return 'Light'
    if age_years <= LEOPARD_AGE_LIMITS[1]:
        return 'Moderate'
    return 'Heavy'


def age_dependent_key(genotype: Genotype, age_years: float) -> Tuple[Optional[int], Optional[str]]:
    """
    Age-sensitive part of a phenotype.

    Two ages with the same key render the same color name for this genotype,
    so a stored phenotype only needs re-rendering when the key changes.

    Returns:
        (gray stage or None, leopard age band or None)
    """
    stage = gray_stage(age_years) if has_allele(genotype, 'gray', 'G') else None
    band = None
    if genotype.get('leopard_complex') == 'LP/lp' and not has_allele(genotype, 'pattern_1', 'PATN1'):
        band = leopard_age_band(age_years)
    return stage, band


@dataclass
class ColorState:
    """Working state threaded through the color rules."""
    genotype: Genotype
    profile: BreedGeneticProfile
    age_years: float
    rng: RandomSource
    base_color: str = ''
    color: str = ''
    shade_key: str = ''
    prefixes: List[str] = field(default_factory=list)
    descriptors: List[str] = field(default_factory=list)
    dun_descriptor: Optional[str] = None
    all_white: bool = False
    gray: bool = False
    bloody_shoulder: Optional[bool] = None
    leopard_pattern: Optional[str] = None

    def set_color(self, name: str, shade_key: Optional[str] = None) -> None:
        self.color = name
        self.shade_key = shade_key if shade_key is not None else name

    def add_descriptor(self, descriptor: str) -> None:
        if descriptor not in self.descriptors:
            self.descriptors.append(descriptor)

    def display_name(self) -> str:
        parts = []
        for part in [*self.prefixes, self.color, *self.descriptors]:
            if part and part not in parts:
                parts.append(part)
        return ' '.join(parts)


@dataclass(frozen=True)
class ColorRule:
    """One stage of the color pipeline: a predicate and a transformation."""
    name: str
    applies: Callable[[ColorState], bool]
    apply: Callable[[ColorState], None]
    overrides: bool = False  # Stop evaluating later rules once this fires


# ===== Base color and dilutions =====

def _apply_base_color(state: ColorState) -> None:
    # e/e masks agouti entirely
    if is_homozygous(state.genotype, 'extension', 'e'):
        state.base_color = 'Chestnut'
    elif has_allele(state.genotype, 'agouti', 'A'):
        state.base_color = 'Bay'
    else:
        state.base_color = 'Black'
    state.set_color(state.base_color)


def _apply_mushroom(state: ColorState) -> None:
    state.set_color('Mushroom Chestnut', 'Mushroom')


def _apply_cream(state: ColorState) -> None:
    double = is_homozygous(state.genotype, 'cream', 'Cr')
    names = {
        'Chestnut': ('Palomino', 'Cremello'),
        'Bay': ('Buckskin', 'Perlino'),
        'Black': ('Smoky Black', 'Smoky Cream'),
    }[state.base_color]
    state.set_color(names[1] if double else names[0])


def _apply_dun(state: ColorState) -> None:
    dun_names = {
        'Black': 'Grulla',
        'Smoky Black': 'Grulla',
        'Bay': 'Bay Dun',
        'Buckskin': 'Dunskin',
        'Chestnut': 'Red Dun',
        'Mushroom Chestnut': 'Red Dun',
        'Palomino': 'Dunalino',
    }
    state.set_color(dun_names.get(state.color, f"{state.color} Dun"))


def _apply_non_dun(state: ColorState) -> None:
    if is_homozygous(state.genotype, 'dun', 'nd1'):
        state.dun_descriptor = '(Non-Dun 1 - Primitive Markings)'
    else:
        state.dun_descriptor = '(Non-Dun 2 - Faint Primitive Markings)'


def _apply_champagne(state: ColorState) -> None:
    tone, double_name = CHAMPAGNE_FAMILIES[state.base_color]
    dun = 'Dun ' if has_allele(state.genotype, 'dun', 'D') else ''

    if is_homozygous(state.genotype, 'cream', 'Cr'):
        state.set_color(f"Ivory {dun}Champagne ({double_name})", f"{tone} Cream {dun}Champagne")
    elif is_heterozygous(state.genotype, 'cream', 'Cr'):
        state.set_color(f"{tone} Cream {dun}Champagne")
    else:
        state.set_color(f"{tone} {dun}Champagne")


def _apply_silver(state: ColorState) -> None:
    # Silver only dilutes black pigment, so chestnut bases carry it invisibly
    shade_key = state.shade_key.replace('Classic', 'Black').replace('Amber', 'Bay')
    state.set_color(f"Silver {state.color}", f"Silver {shade_key}")


def _pearl_expressed(state: ColorState) -> bool:
    genotype = state.genotype
    single_cream = is_heterozygous(genotype, 'cream', 'Cr')
    return is_homozygous(genotype, 'pearl', 'prl') or (is_heterozygous(genotype, 'pearl', 'prl') and single_cream)


def _apply_pearl(state: ColorState) -> None:
    genotype = state.genotype
    homozygous = is_homozygous(genotype, 'pearl', 'prl')

    if is_homozygous(genotype, 'cream', 'Cr'):
        # Visually indistinguishable from the double dilute
        state.set_color(f"{state.color} (Pearl)", f"{state.shade_key} (Pearl)")
    elif is_heterozygous(genotype, 'cream', 'Cr'):
        single_cream_names = (
            'Palomino', 'Buckskin', 'Smoky Black',
            'Gold Cream Champagne', 'Amber Cream Champagne', 'Classic Cream Champagne',
        )
        if state.color in single_cream_names:
            state.set_color(f"{state.color} Pearl")
        else:
            descriptor = 'Homozygous Pearl Cream' if homozygous else 'Pearl Cream'
            state.set_color(f"{state.color} {descriptor}", f"{state.shade_key} {descriptor}")
    elif state.color == 'Chestnut':
        state.set_color('Apricot')
    else:
        state.set_color(f"{state.color} Pearl", f"{state.shade_key} Pearl")


# ===== Boolean modifiers =====

def _apply_sooty(state: ColorState) -> None:
    state.prefixes.append('Sooty')
    state.shade_key = f"Sooty {state.shade_key}"


def _apply_flaxen(state: ColorState) -> None:
    if state.color in ('Chestnut', 'Mushroom Chestnut'):
        state.set_color(f"Flaxen {state.color}")
    else:
        state.add_descriptor('Flaxen')


def _apply_pangare(state: ColorState) -> None:
    state.add_descriptor('Pangare')


def _apply_roan(state: ColorState) -> None:
    roan = ROAN_NAMES[state.base_color]
    kept = [word for word in state.color.split()
            if any(key in word for key in ('Dun', 'Champagne', 'Pearl')) and word not in roan.split()]
    name = ' '.join([roan, *kept])
    if state.color.startswith('Flaxen ') and state.base_color == 'Chestnut':
        name = f"Flaxen {name}"
    state.set_color(name, roan)


# ===== White patterns =====

def _dominant_white_alleles(state: ColorState) -> List[str]:
    return [a for a in alleles_of(state.genotype, 'dominant_white') if a != 'w']


def _apply_all_white(state: ColorState) -> None:
    # W13 hides every pigment and pattern; nothing after this can change the name
    state.prefixes = []
    state.descriptors = []
    state.dun_descriptor = None
    state.all_white = True
    state.set_color('White', 'Dominant White')


def _apply_dominant_white(state: ColorState) -> None:
    if 'W20' in _dominant_white_alleles(state):
        state.add_descriptor('Minimal White')
    else:
        state.add_descriptor('Dominant White')


def _apply_frame_overo(state: ColorState) -> None:
    state.add_descriptor('Frame Overo')


def _apply_tobiano(state: ColorState) -> None:
    state.add_descriptor('Tobiano')


def _apply_sabino(state: ColorState) -> None:
    state.add_descriptor('Sabino')


def _apply_splash_white(state: ColorState) -> None:
    for allele in alleles_of(state.genotype, 'splash_white'):
        if allele != 'n':
            state.add_descriptor(f"Splash White {allele[len('SW'):]}")


def _apply_eden_white(state: ColorState) -> None:
    for allele in alleles_of(state.genotype, 'eden_white'):
        if allele != 'n':
            state.add_descriptor(f"Eden White {allele[len('EDXW'):]}")


# ===== Leopard complex, gray, late descriptors =====

def _apply_leopard_complex(state: ColorState) -> None:
    genotype = state.genotype
    pattern_1 = has_allele(genotype, 'pattern_1', 'PATN1')

    if is_homozygous(genotype, 'leopard_complex', 'LP'):
        pattern = 'Fewspot Leopard Appaloosa' if pattern_1 else 'Snowcap Appaloosa'
    elif pattern_1:
        pattern = 'Leopard Appaloosa'
    else:
        # Drawn once; later ages only move the band
        if state.leopard_pattern is None:
            profile = state.profile
            flake_weights = {
                'Snowflake': 0.5 * profile.multiplier('snowflake_probability_multiplier'),
                'Frost': 0.5 * profile.multiplier('frost_probability_multiplier'),
            }
            if sum(flake_weights.values()) > 0:
                flake = weighted_choice(flake_weights, state.rng)
            else:
                flake = 'Snowflake' if state.rng.next() < 0.5 else 'Frost'
            underlying = 'Blanket Appaloosa' if state.rng.next() < 0.5 else 'Varnish Roan Appaloosa'
            state.leopard_pattern = f"{flake} {underlying}"
        pattern = f"{leopard_age_band(state.age_years)} {state.leopard_pattern}"

    state.add_descriptor(pattern)
    state.shade_key = pattern


def _apply_gray(state: ColorState) -> None:
    tone = 'Rose' if state.base_color == 'Chestnut' else 'Steel'
    stage = gray_stage(state.age_years)
    names = (
        f"{tone} Gray",
        f"{tone} Dark Dapple Gray",
        f"{tone} Light Dapple Gray",
        'White Gray',
        'Fleabitten Gray',
    )
    # Graying replaces every earlier color, pattern and modifier name
    state.prefixes = []
    state.descriptors = []
    state.gray = True
    state.set_color(names[stage])

    chance = BLOODY_SHOULDER_BASE_PROBABILITY * state.profile.multiplier('bloody_shoulder_probability_multiplier')
    state.bloody_shoulder = bernoulli(chance, state.rng)


def _apply_rabicano(state: ColorState) -> None:
    state.add_descriptor('Rabicano')


def _apply_dun_descriptor(state: ColorState) -> None:
    state.add_descriptor(state.dun_descriptor)


COLOR_RULES: Tuple[ColorRule, ...] = (
    ColorRule('base_color', lambda s: True, _apply_base_color),
    ColorRule(
        'mushroom',
        lambda s: s.base_color == 'Chestnut' and has_allele(s.genotype, 'mushroom', 'Mu'),
        _apply_mushroom,
    ),
    ColorRule('cream', lambda s: has_allele(s.genotype, 'cream', 'Cr'), _apply_cream),
    ColorRule('dun', lambda s: has_allele(s.genotype, 'dun', 'D'), _apply_dun),
    ColorRule(
        'non_dun',
        lambda s: not has_allele(s.genotype, 'dun', 'D') and has_allele(s.genotype, 'dun', 'nd1'),
        _apply_non_dun,
    ),
    ColorRule('champagne', lambda s: has_allele(s.genotype, 'champagne', 'Ch'), _apply_champagne),
    ColorRule(
        'silver',
        lambda s: s.base_color != 'Chestnut' and has_allele(s.genotype, 'silver', 'Z'),
        _apply_silver,
    ),
    ColorRule('pearl', _pearl_expressed, _apply_pearl),
    ColorRule('sooty', lambda s: s.genotype.get('sooty') is True, _apply_sooty),
    ColorRule(
        'flaxen',
        lambda s: s.base_color == 'Chestnut' and s.genotype.get('flaxen') is True,
        _apply_flaxen,
    ),
    ColorRule('pangare', lambda s: s.genotype.get('pangare') is True, _apply_pangare),
    ColorRule('roan', lambda s: has_allele(s.genotype, 'roan', 'Rn'), _apply_roan),
    ColorRule(
        'all_white',
        lambda s: 'W13' in _dominant_white_alleles(s),
        _apply_all_white,
        overrides=True,
    ),
    ColorRule('dominant_white', lambda s: bool(_dominant_white_alleles(s)), _apply_dominant_white),
    # O/O is lethal and never named
    ColorRule(
        'frame_overo',
        lambda s: is_heterozygous(s.genotype, 'frame_overo', 'O'),
        _apply_frame_overo,
    ),
    ColorRule('tobiano', lambda s: has_allele(s.genotype, 'tobiano', 'TO'), _apply_tobiano),
    ColorRule('sabino', lambda s: has_allele(s.genotype, 'sabino', 'SB1'), _apply_sabino),
    ColorRule(
        'splash_white',
        lambda s: any(a != 'n' for a in alleles_of(s.genotype, 'splash_white')),
        _apply_splash_white,
    ),
    ColorRule(
        'eden_white',
        lambda s: any(a != 'n' for a in alleles_of(s.genotype, 'eden_white')),
        _apply_eden_white,
    ),
    ColorRule('leopard_complex', lambda s: has_allele(s.genotype, 'leopard_complex', 'LP'), _apply_leopard_complex),
    ColorRule('gray', lambda s: has_allele(s.genotype, 'gray', 'G'), _apply_gray),
    # Gray masks rabicano ticking and primitive markings
    ColorRule('rabicano', lambda s: s.genotype.get('rabicano') is True and not s.gray, _apply_rabicano),
    ColorRule('dun_descriptor', lambda s: s.dun_descriptor is not None and not s.gray, _apply_dun_descriptor),
)


class PhenotypeEngine:
    """Resolves color, shade and markings for a genotype at a given age."""

    def __init__(self, rng: Optional[RandomSource] = None, rules: Tuple[ColorRule, ...] = COLOR_RULES):
        """
        Initialize engine.

        Args:
            rng: Default random source for shade and marking draws
            rules: Ordered color rule table
        """
        self.rng = rng if rng is not None else NumpyRandomSource()
        self.rules = rules

    def resolve(
        self,
        genotype: Genotype,
        profile: BreedGeneticProfile,
        age_years: float,
        rng: Optional[RandomSource] = None
    ) -> Phenotype:
        """
        Resolve a complete phenotype.

        Args:
            genotype: Horse genotype (missing loci are treated as absent)
            profile: Breed profile supplying shade and marking tables
            age_years: Age at evaluation time
            rng: Random source for this call

        Returns:
            Fully populated Phenotype

        Raises:
            GenotypeError: If the genotype is malformed
            ValidationError: If age_years is not a non-negative number
            ConfigurationError: If the profile has no shade table for the
                resolved color and no default bucket
        """
        if isinstance(age_years, bool) or not isinstance(age_years, (int, float)) or age_years < 0:
            raise ValidationError(f"age_years must be a non-negative number, got {age_years!r}")
        validate_genotype(genotype)
        rng = rng if rng is not None else self.rng

        state = self.resolve_color(genotype, profile, age_years, rng)
        final_color = state.display_name()
        shade = self._resolve_shade(state, final_color, profile, rng)
        markings = self._resolve_markings(state, profile, rng)

        phenotype = Phenotype(
            final_display_color=final_color,
            shade=shade,
            markings=markings,
            base_color=state.base_color,
            age_years=age_years,
            leopard_pattern=state.leopard_pattern,
        )
        logger.debug("Resolved phenotype for %s at age %s: %s", genotype, age_years, phenotype)
        return phenotype

    def rerender(
        self,
        phenotype: Phenotype,
        genotype: Genotype,
        profile: BreedGeneticProfile,
        age_years: float,
        rng: Optional[RandomSource] = None
    ) -> Phenotype:
        """
        Re-evaluate an existing phenotype at a new age.

        Face and leg markings and the leopard pattern are fixed at birth and
        carried over. The color and shade are recomputed only when the age
        moves the genotype into a different gray stage or leopard band;
        otherwise the phenotype is returned with just its age updated.
        """
        if isinstance(age_years, bool) or not isinstance(age_years, (int, float)) or age_years < 0:
            raise ValidationError(f"age_years must be a non-negative number, got {age_years!r}")
        if age_dependent_key(genotype, phenotype.age_years) == age_dependent_key(genotype, age_years):
            return replace(phenotype, age_years=age_years)

        rng = rng if rng is not None else self.rng
        state = self.resolve_color(genotype, profile, age_years, rng, phenotype.leopard_pattern)
        final_color = state.display_name()
        markings = replace(phenotype.markings, legs=dict(phenotype.markings.legs))
        if state.gray and markings.bloody_shoulder is None:
            markings.bloody_shoulder = state.bloody_shoulder

        logger.debug("Re-rendered %s as %s at age %s", phenotype.final_display_color, final_color, age_years)
        return Phenotype(
            final_display_color=final_color,
            shade=self._resolve_shade(state, final_color, profile, rng),
            markings=markings,
            base_color=state.base_color,
            age_years=age_years,
            leopard_pattern=state.leopard_pattern,
        )

    def resolve_color(
        self,
        genotype: Genotype,
        profile: BreedGeneticProfile,
        age_years: float,
        rng: RandomSource,
        leopard_pattern: Optional[str] = None
    ) -> ColorState:
        """
        Run the color rule table and return the final working state.

        A leopard_pattern from an earlier rendering is reused instead of
        drawing a new flake and underlying pattern.
        """
        state = ColorState(
            genotype=genotype, profile=profile, age_years=age_years, rng=rng, leopard_pattern=leopard_pattern
        )
        for rule in self.rules:
            if not rule.applies(state):
                continue
            rule.apply(state)
            if rule.overrides:
                logger.debug("Color rule %s overrides remaining rules", rule.name)
                break
        return state

    @staticmethod
    def _resolve_shade(state: ColorState, final_color: str, profile: BreedGeneticProfile, rng: RandomSource) -> str:
        for key in (final_color, state.shade_key, state.base_color, DEFAULT_SHADE_BUCKET):
            if key in profile.shade_bias:
                return weighted_choice(profile.shade_bias[key], rng)
        raise ConfigurationError(
            f"Breed {profile.name} has no shade_bias entry for '{final_color}' and no "
            f"'{DEFAULT_SHADE_BUCKET}' bucket"
        )

    @staticmethod
    def _resolve_markings(state: ColorState, profile: BreedGeneticProfile, rng: RandomSource) -> Markings:
        bias = profile.marking_bias
        markings = Markings(face=weighted_choice(bias.face, rng))

        marked = 0
        for leg in LEGS:
            if marked < bias.max_legs_marked and rng.next() < bias.legs_general_probability:
                marking = weighted_choice(bias.leg_specific_probabilities, rng)
                markings.legs[leg] = marking
                if marking != 'none':
                    marked += 1

        if has_allele(state.genotype, 'leopard_complex', 'LP'):
            markings.mottling = bernoulli(
                LEOPARD_MARKING_BASE_PROBABILITY * profile.multiplier('mottling_probability_multiplier'), rng
            )
            markings.striping = bernoulli(
                LEOPARD_MARKING_BASE_PROBABILITY * profile.multiplier('striping_probability_multiplier'), rng
            )

        if state.gray:
            markings.bloody_shoulder = state.bloody_shoulder

        return markings
