"""Horse model for equigen."""

from typing import Any, Dict, Optional, TYPE_CHECKING

from .locus import Genotype
from .phenotype import Phenotype
from .traits import TraitSet

if TYPE_CHECKING:
    from ..config import BreedGeneticProfile
    from ..phenotype import PhenotypeEngine
    from ..random_source import RandomSource
    from ..ratings import Ratings


SEXES = ('male', 'female')


class Horse:
    """A horse with its genotype, resolved phenotype, traits and lineage."""

    def __init__(
        self,
        name: str,
        sex: str,
        age_years: float,
        breed: str,
        genotype: Genotype,
        phenotype: Phenotype,
        traits: Optional[TraitSet] = None,
        temperament: Optional[str] = None,
        ratings: Optional['Ratings'] = None,
        stats: Optional[Dict[str, float]] = None,
        sire_id: Optional[Any] = None,
        dam_id: Optional[Any] = None,
        horse_id: Optional[Any] = None,
        bond_score: float = 50,
        stress_level: float = 0,
        health: str = 'Good'
    ):
        """
        Initialize a horse.

        Args:
            name: Display name
            sex: 'male' or 'female'
            age_years: Age in years
            breed: Breed profile name
            genotype: Genotype mapping
            phenotype: Phenotype resolved at age_years
            traits: Epigenetic traits (empty for store horses)
            temperament: Temperament name
            ratings: Conformation and gait ratings
            stats: Competition stats (speed, stamina, focus, ...)
            sire_id: ID of the sire (None for store horses)
            dam_id: ID of the dam (None for store horses)
            horse_id: Optional ID (assigned by the caller's persistence layer)
            bond_score: Current bond score, 0-100
            stress_level: Current stress level, 0-100
            health: Health rating used by competition scoring
        """
        self.name = name
        self.sex = sex
        self.age_years = age_years
        self.breed = breed
        self.genotype = genotype
        self.phenotype = phenotype
        self.traits = traits if traits is not None else TraitSet()
        self.temperament = temperament
        self.ratings = ratings
        self.stats = stats if stats is not None else {}
        self.sire_id = sire_id
        self.dam_id = dam_id
        self.horse_id = horse_id
        self.bond_score = bond_score
        self.stress_level = stress_level
        self.health = health

        if sex not in SEXES:
            raise ValueError(f"sex must be one of {SEXES}, got {sex!r}")
        if age_years < 0:
            raise ValueError(f"age_years must be non-negative, got {age_years}")
        if sire_id is not None and sire_id == dam_id:
            raise ValueError("A horse cannot have the same sire and dam")
        if horse_id is not None and horse_id in (sire_id, dam_id):
            raise ValueError("Horse cannot be its own parent")
        if not (0 <= bond_score <= 100) or not (0 <= stress_level <= 100):
            raise ValueError("bond_score and stress_level must be between 0 and 100")

    @property
    def is_foal(self) -> bool:
        return self.sire_id is not None or self.dam_id is not None

    def rerender_phenotype(
        self,
        engine: 'PhenotypeEngine',
        profile: 'BreedGeneticProfile',
        age_years: float,
        rng: Optional['RandomSource'] = None
    ) -> bool:
        """
        Age the horse and refresh its phenotype.

        Args:
            engine: Phenotype engine
            profile: The horse's breed profile
            age_years: New age
            rng: Random source for any re-drawn shade

        Returns:
            True if the displayed color changed
        """
        previous = self.phenotype.final_display_color
        self.phenotype = engine.rerender(self.phenotype, self.genotype, profile, age_years, rng=rng)
        self.age_years = age_years
        return self.phenotype.final_display_color != previous

    def competition_entry(
        self,
        training_score: float = 0,
        tack: Optional[Dict[str, float]] = None,
        rider: Optional[Dict[str, float]] = None
    ) -> Dict[str, Any]:
        """
        Mapping consumed by CompetitionScorer.

        Args:
            training_score: Discipline training score
            tack: 'saddle_bonus' / 'bridle_bonus'
            rider: 'bonus_percent' / 'penalty_percent'
        """
        return {
            'id': self.horse_id,
            'name': self.name,
            'stats': dict(self.stats),
            'epigenetic_modifiers': self.traits.to_dict(),
            'training_score': training_score,
            'tack': dict(tack or {}),
            'rider': dict(rider or {}),
            'health': self.health,
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.horse_id,
            'name': self.name,
            'sex': self.sex,
            'age_years': self.age_years,
            'breed': self.breed,
            'genotype': dict(self.genotype),
            'phenotype': self.phenotype.to_dict(),
            'epigenetic_modifiers': self.traits.to_dict(),
            'temperament': self.temperament,
            'ratings': self.ratings.to_dict() if self.ratings is not None else None,
            'stats': dict(self.stats),
            'sire_id': self.sire_id,
            'dam_id': self.dam_id,
        }
