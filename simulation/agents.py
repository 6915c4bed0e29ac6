# simulation/agents.py
from abc import ABC, abstractmethod
from typing import Optional, Tuple, Dict
from pocketpet.models.pet import PetRecord, PetStatus, TIMED_STATES
import random


class BaseAgent(ABC):
    def __init__(self, agent_id: str, rng: Optional[random.Random] = None):
        self.agent_id = agent_id
        self.rng = rng or random.Random()

    @abstractmethod
    def choose_action(self, pet: PetRecord) -> Optional[Tuple[str, Dict]]:
        """
        Decides an action based on the pet's current record.
        Returns: Tuple of (action_name, action_params_dict) or None for no action.
        Example: ("purchase", {"item_id": "premium_meat", "category": "foods"})
        """
        pass


class NurturingAgent(BaseAgent):
    def choose_action(self, pet: PetRecord) -> Optional[Tuple[str, Dict]]:
        if pet.is_away or pet.state in TIMED_STATES:
            return None  # Let the current activity finish

        # Prioritize critical needs
        if pet.sickness.is_sick:
            if pet.sickness.severity > 50 and pet.money >= 50:
                return ("send_to_hospital", {})
            if pet.money >= 20 and pet.state == PetStatus.SICK:
                return ("give_medicine", {})
        if pet.hunger < 30:
            if pet.money >= 80:
                return ("purchase", {"item_id": "premium_meat", "category": "foods"})
            return ("feed", {})
        if pet.energy < 30:
            return ("sleep", {})
        if pet.cleanliness < 40:
            return ("clean", {})
        if pet.happiness < 40:
            return ("play", {})

        # Proactive care
        if pet.loneliness >= 50 and pet.money >= 150:
            return ("send_on_vacation", {})
        if pet.hunger < 60 and self.rng.random() < 0.7:
            return ("feed", {})
        if pet.happiness < 70 and pet.energy >= 40 and self.rng.random() < 0.6:
            return ("play", {})
        if pet.energy >= 60 and pet.money < 60 and self.rng.random() < 0.5:
            return ("earn_money", {})

        return None  # No action if pet is generally okay


class RandomAgent(BaseAgent):
    def choose_action(self, pet: PetRecord) -> Optional[Tuple[str, Dict]]:
        if self.rng.random() < 0.3:  # Sometimes does nothing
            return None

        item_id, category = self.rng.choice(
            [("happy_candy", "foods"), ("health_milk", "foods"), ("flower_pot", "appliances")])
        possible_actions = [
            ("feed", {}),
            ("play", {}),
            ("sleep", {}),
            ("clean", {}),
            ("earn_money", {}),
            ("give_medicine", {}),
            ("purchase", {"item_id": item_id, "category": category}),
        ]
        return self.rng.choice(possible_actions)


class NeglectfulAgent(BaseAgent):
    """Only steps in when the pet is close to collapse."""

    def choose_action(self, pet: PetRecord) -> Optional[Tuple[str, Dict]]:
        if pet.is_away:
            return None
        if pet.hunger < 10:
            return ("feed", {})
        if pet.health < 15 and pet.sickness.is_sick:
            return ("give_medicine", {})
        return None
