"""Locus catalog and genotype helpers for equigen."""

from typing import Dict, List, Tuple, Union, Any
from dataclasses import dataclass

from ..exceptions import GenotypeError


AlleleValue = Union[str, bool]
Genotype = Dict[str, AlleleValue]  # locus -> "X/y", modifier -> bool


@dataclass(frozen=True)
class Locus:
    """A genetic position with a fixed allele alphabet."""
    name: str
    alleles: Tuple[str, ...]  # Rendering order: variant alleles first, wild type last
    description: str = ""

    def __post_init__(self):
        """Validate locus data."""
        if len(self.alleles) < 2:
            raise ValueError(f"Locus {self.name} must define at least two alleles")
        if len(set(self.alleles)) != len(self.alleles):
            raise ValueError(f"Locus {self.name} has duplicate alleles")

    def rank(self, allele: str) -> int:
        """Position of an allele in the rendering order."""
        try:
            return self.alleles.index(allele)
        except ValueError:
            raise GenotypeError(f"Unknown allele '{allele}' for locus {self.name}") from None

    def format_pair(self, allele1: str, allele2: str) -> str:
        """
        Render an unordered allele pair consistently.

        Args:
            allele1: First allele
            allele2: Second allele

        Returns:
            Pair string such as "E/e", ordered by the locus alphabet
        """
        first, second = sorted((allele1, allele2), key=self.rank)
        return f"{first}/{second}"

    def parse_pair(self, pair: str) -> Tuple[str, str]:
        """
        Split and validate a pair string.

        Raises:
            GenotypeError: If the pair is malformed or uses unknown alleles
        """
        if not isinstance(pair, str):
            raise GenotypeError(f"Locus {self.name} pair must be a string, got {pair!r}")
        parts = pair.split('/')
        if len(parts) != 2:
            raise GenotypeError(f"Locus {self.name} pair must look like 'X/y', got '{pair}'")
        for allele in parts:
            self.rank(allele)
        return parts[0], parts[1]


LOCI: Dict[str, Locus] = {
    locus.name: locus for locus in [
        Locus('extension', ('E', 'e'), "Black pigment production (MC1R)"),
        Locus('agouti', ('A', 'a'), "Restricts black pigment to the points"),
        Locus('cream', ('Cr', 'n'), "Dosage-dependent dilution"),
        Locus('dun', ('D', 'nd1', 'nd2'), "Dun dilution and primitive markings"),
        Locus('gray', ('G', 'g'), "Progressive graying with age"),
        Locus('roan', ('Rn', 'rn'), "Classic roan"),
        Locus('tobiano', ('TO', 'to'), "Tobiano white spotting"),
        Locus('frame_overo', ('O', 'n'), "Frame overo white spotting, lethal when homozygous"),
        Locus('sabino', ('SB1', 'n'), "Sabino-1 white spotting"),
        Locus('splash_white', ('SW1', 'SW2', 'SW3', 'n'), "Splash white spotting"),
        Locus('eden_white', ('EDXW1', 'EDXW2', 'EDXW3', 'n'), "Eden white spotting"),
        Locus('dominant_white', ('W13', 'W5', 'W10', 'W22', 'W20', 'w'), "KIT dominant white variants"),
        Locus('leopard_complex', ('LP', 'lp'), "Appaloosa leopard complex"),
        Locus('pattern_1', ('PATN1', 'patn1'), "Leopard pattern-1 modifier"),
        Locus('silver', ('Z', 'n'), "Silver dilution of black pigment"),
        Locus('champagne', ('Ch', 'n'), "Champagne dilution"),
        Locus('pearl', ('prl', 'n'), "Pearl dilution, recessive"),
        Locus('mushroom', ('Mu', 'n'), "Mushroom dilution of red pigment"),
    ]
}

BOOLEAN_MODIFIERS: Tuple[str, ...] = ('sooty', 'flaxen', 'pangare', 'rabicano')


def get_locus(name: str) -> Locus:
    """Look up a locus by name, rejecting identifiers outside the catalog."""
    try:
        return LOCI[name]
    except KeyError:
        raise GenotypeError(f"Unknown locus: {name}") from None


def validate_genotype(genotype: Dict[str, Any]) -> Genotype:
    """
    Validate a genotype mapping.

    Args:
        genotype: Mapping of locus -> pair string and modifier -> bool

    Returns:
        The same mapping

    Raises:
        GenotypeError: If a key is outside the catalog or a value is malformed
    """
    if not isinstance(genotype, dict):
        raise GenotypeError(f"Genotype must be a dictionary, got {type(genotype).__name__}")

    for key, value in genotype.items():
        if key in BOOLEAN_MODIFIERS:
            if not isinstance(value, bool):
                raise GenotypeError(f"Modifier {key} must be a boolean, got {value!r}")
            continue
        get_locus(key).parse_pair(value)

    return genotype


def normalize_genotype(genotype: Dict[str, Any]) -> Genotype:
    """Return a validated copy with every pair rendered in catalog order."""
    validate_genotype(genotype)
    normalized: Genotype = {}
    for key, value in genotype.items():
        if key in BOOLEAN_MODIFIERS:
            normalized[key] = value
        else:
            locus = LOCI[key]
            normalized[key] = locus.format_pair(*locus.parse_pair(value))
    return normalized


def alleles_of(genotype: Genotype, locus: str) -> List[str]:
    """Alleles present at a locus, or an empty list when the locus is absent."""
    pair = genotype.get(locus)
    if not isinstance(pair, str):
        return []
    return pair.split('/')
