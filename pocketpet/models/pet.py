# pocketpet/models/pet.py
import random
from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Dict, List, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, PrivateAttr, field_validator
from pydantic.alias_generators import to_camel

from pocketpet.core.clock import as_utc, utcnow

VITALS = ("hunger", "happiness", "health", "energy", "cleanliness", "loneliness")

Timestamp = Annotated[datetime, AfterValidator(as_utc)]


def clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(high, value))


class PetType(str, Enum):
    CAT = "cat"
    DOG = "dog"
    BIRD = "bird"
    RABBIT = "rabbit"


class PetStatus(str, Enum):
    IDLE = "idle"
    EATING = "eating"
    PLAYING = "playing"
    SLEEPING = "sleeping"
    SICK = "sick"
    HOSPITAL = "hospital"
    VACATION = "vacation"


# States owned by a running timed action
TIMED_STATES = (PetStatus.EATING, PetStatus.PLAYING, PetStatus.SLEEPING)


class SicknessType(str, Enum):
    NONE = "none"
    COLD = "cold"
    STOMACH = "stomach"
    SADNESS = "sadness"
    FATIGUE = "fatigue"


class EvolutionStage(str, Enum):
    BABY = "baby"
    CHILD = "child"
    TEEN = "teen"
    ADULT = "adult"


class ItemCategory(str, Enum):
    FOODS = "foods"
    APPLIANCES = "appliances"


class RecordModel(BaseModel):
    # Persisted names are camelCase, attributes stay snake_case
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class Sickness(RecordModel):
    is_sick: bool = False
    type: SicknessType = SicknessType.NONE
    severity: float = 0
    duration: int = 0  # resolve passes spent sick

    def clear(self):
        self.is_sick = False
        self.type = SicknessType.NONE
        self.severity = 0
        self.duration = 0


class Evolution(RecordModel):
    stage: EvolutionStage = EvolutionStage.BABY
    next_evolution: Optional[int] = 30  # age in minutes, None once adult


class Hospital(RecordModel):
    is_in_hospital: bool = False
    admission_time: Optional[Timestamp] = None
    treatment_duration: int = 0  # minutes


class Vacation(RecordModel):
    is_on_vacation: bool = False
    start_time: Optional[Timestamp] = None
    duration: int = 0  # minutes
    destination: str = ""


class Inventory(RecordModel):
    foods: List[str] = Field(default_factory=list)
    appliances: List[str] = Field(default_factory=list)

    @field_validator("foods", "appliances")
    @classmethod
    def _dedupe(cls, value: List[str]) -> List[str]:
        return list(dict.fromkeys(value))

    def owns(self, category: ItemCategory, item_id: str) -> bool:
        return item_id in getattr(self, category.value)

    def add(self, category: ItemCategory, item_id: str) -> bool:
        """Appends item_id to the category set. Returns False if it was already there."""
        items = getattr(self, category.value)
        if item_id in items:
            return False
        items.append(item_id)
        return True


class PetRecord(RecordModel):
    name: str = "Buddy"
    pet_type: PetType = Field(default=PetType.CAT, frozen=True)

    hunger: float = 80
    happiness: float = 80
    health: float = 100
    energy: float = 80
    cleanliness: float = 100
    loneliness: float = 0

    age: float = 0  # minutes
    birth_time: Timestamp = Field(default_factory=utcnow, frozen=True)
    last_interaction: Optional[Timestamp] = None
    last_fed: Optional[Timestamp] = None
    last_played: Optional[Timestamp] = None
    last_slept: Optional[Timestamp] = None
    last_cleaned: Optional[Timestamp] = None
    last_medicine: Optional[Timestamp] = None

    money: int = 100
    state: PetStatus = PetStatus.IDLE

    sickness: Sickness = Field(default_factory=Sickness)
    evolution: Evolution = Field(default_factory=Evolution)
    hospital: Hospital = Field(default_factory=Hospital)
    vacation: Vacation = Field(default_factory=Vacation)
    inventory: Inventory = Field(default_factory=Inventory)

    # Runtime bookkeeping for timed actions, never persisted
    _state_version: int = PrivateAttr(default=0)
    _active_action: Optional[PetStatus] = PrivateAttr(default=None)

    @field_validator(*VITALS)
    @classmethod
    def _clamp_vital(cls, value: float) -> float:
        return clamp(value)

    @field_validator("money")
    @classmethod
    def _non_negative_money(cls, value: int) -> int:
        return max(0, value)

    @property
    def state_version(self) -> int:
        return self._state_version

    @property
    def active_action(self) -> Optional[PetStatus]:
        return self._active_action

    @property
    def is_away(self) -> bool:
        return self.hospital.is_in_hospital or self.vacation.is_on_vacation

    @property
    def action_in_progress(self) -> bool:
        return self._active_action is not None and self._active_action == self.state

    def transition(self, status: PetStatus, restart: bool = False):
        """Set the state, bumping the version so timed actions started earlier notice."""
        if restart or status != self.state:
            self._state_version += 1
        self.state = status

    def begin_action(self, status: PetStatus) -> int:
        self.transition(status, restart=True)
        self._active_action = status
        return self._state_version

    def end_action(self):
        self._active_action = None

    def clamp_vitals(self):
        for vital in VITALS:
            setattr(self, vital, clamp(getattr(self, vital)))

    def snapshot(self) -> Dict[str, Any]:
        """JSON-ready dict using the persisted (camelCase) field names."""
        return self.model_dump(mode="json", by_alias=True)


def create_new_pet(now: Optional[datetime] = None, rng: Optional[random.Random] = None,
                   name: str = "Buddy") -> PetRecord:
    now = now or utcnow()
    rng = rng or random.Random()
    return PetRecord(
        name=name,
        pet_type=rng.choice(list(PetType)),
        birth_time=now,
        last_interaction=now,
    )
