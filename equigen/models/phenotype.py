"""Phenotype and marking models."""

from typing import Dict, Optional, Any
from dataclasses import dataclass, field

LEGS = ('LF', 'RF', 'LH', 'RH')


def _unmarked_legs() -> Dict[str, str]:
    return {leg: 'none' for leg in LEGS}


@dataclass
class Markings:
    """Face, leg and appaloosa markings."""
    face: str = 'none'
    legs: Dict[str, str] = field(default_factory=_unmarked_legs)
    mottling: Optional[bool] = None  # Only resolved for leopard complex carriers
    striping: Optional[bool] = None
    bloody_shoulder: Optional[bool] = None  # Only resolved for grays

    def __post_init__(self):
        if set(self.legs) != set(LEGS):
            raise ValueError(f"legs must define exactly {LEGS}, got {sorted(self.legs)}")

    @property
    def marked_legs(self) -> int:
        return sum(1 for marking in self.legs.values() if marking != 'none')

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {'face': self.face, 'legs': dict(self.legs)}
        if self.mottling is not None:
            result['mottling'] = self.mottling
        if self.striping is not None:
            result['striping'] = self.striping
        if self.bloody_shoulder is not None:
            result['bloody_shoulder'] = self.bloody_shoulder
        return result


@dataclass
class Phenotype:
    """Visually resolved appearance of a horse at a given age."""
    final_display_color: str
    shade: str
    markings: Markings
    base_color: str  # Chestnut, Bay or Black before any modifier
    age_years: float
    leopard_pattern: Optional[str] = None  # Flake and underlying appaloosa pattern, fixed at birth

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            'final_display_color': self.final_display_color,
            'shade': self.shade,
            'markings': self.markings.to_dict(),
            'base_color': self.base_color,
            'age_years': self.age_years,
        }
        if self.leopard_pattern is not None:
            result['leopard_pattern'] = self.leopard_pattern
        return result
