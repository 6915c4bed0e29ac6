# pocketpet/models/status.py
from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from pocketpet.core.clock import minutes_between
from pocketpet.models.pet import EvolutionStage, PetRecord, PetStatus


class PetStatusView(BaseModel):
    """Read model for display collaborators; nothing here feeds back into the simulation."""
    name: str
    state: PetStatus
    stage: EvolutionStage
    mood: str
    age: str
    last_fed: str
    last_played: str
    last_cleaned: str
    is_night: bool
    game_minutes: float


def pet_mood(record: PetRecord) -> str:
    average = (record.hunger + record.happiness + record.health + record.energy) / 4
    if average > 80:
        return "Happy"
    if average > 60:
        return "Content"
    if average > 40:
        return "Okay"
    if average > 20:
        return "Sad"
    return "Critical"


def format_age(minutes: float) -> str:
    minutes = int(minutes)
    hours = minutes // 60
    days = hours // 24
    if days > 0:
        return f"{days}d {hours % 24}h"
    if hours > 0:
        return f"{hours}h {minutes % 60}m"
    return f"{minutes}m"


def time_since(timestamp: Optional[datetime], now: datetime) -> str:
    if timestamp is None:
        return "Never"
    minutes = minutes_between(timestamp, now)
    if minutes < 1:
        return "Just now"
    if minutes < 60:
        return f"{minutes}m ago"
    hours = minutes // 60
    if hours < 24:
        return f"{hours}h ago"
    return f"{hours // 24}d ago"


def build_status(record: PetRecord, now: datetime, is_night: bool, game_minutes: float) -> PetStatusView:
    return PetStatusView(
        name=record.name,
        state=record.state,
        stage=record.evolution.stage,
        mood=pet_mood(record),
        age=format_age(record.age),
        last_fed=time_since(record.last_fed, now),
        last_played=time_since(record.last_played, now),
        last_cleaned=time_since(record.last_cleaned, now),
        is_night=is_night,
        game_minutes=game_minutes,
    )
