# pocketpet/models/catalog.py
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from pocketpet.models.pet import ItemCategory


class ShopItem(BaseModel):
    item_id: str
    name: str
    price: int
    category: ItemCategory
    # One-shot vital deltas applied on purchase (foods only)
    effects: Dict[str, float] = Field(default_factory=dict)


SHOP_ITEMS: List[ShopItem] = [
    ShopItem(item_id="premium_meat", name="Premium Meat", price=30, category=ItemCategory.FOODS,
             effects={"hunger": 40, "health": 10}),
    ShopItem(item_id="birthday_cake", name="Birthday Cake", price=50, category=ItemCategory.FOODS,
             effects={"hunger": 20, "happiness": 30}),
    ShopItem(item_id="health_milk", name="Health Milk", price=25, category=ItemCategory.FOODS,
             effects={"hunger": 15, "health": 20}),
    ShopItem(item_id="happy_candy", name="Happy Candy", price=20, category=ItemCategory.FOODS,
             effects={"hunger": 10, "happiness": 25}),
    ShopItem(item_id="pizza_slice", name="Pizza Slice", price=35, category=ItemCategory.FOODS,
             effects={"hunger": 30, "happiness": 15}),
    ShopItem(item_id="magic_apple", name="Magic Apple", price=40, category=ItemCategory.FOODS,
             effects={"hunger": 25, "health": 25}),

    ShopItem(item_id="super_ball", name="Super Ball", price=60, category=ItemCategory.APPLIANCES),
    ShopItem(item_id="comfort_chair", name="Comfort Chair", price=80, category=ItemCategory.APPLIANCES),
    ShopItem(item_id="flower_pot", name="Flower Pot", price=40, category=ItemCategory.APPLIANCES),
    ShopItem(item_id="mini_playground", name="Mini Playground", price=120, category=ItemCategory.APPLIANCES),
    ShopItem(item_id="garden_set", name="Garden Set", price=70, category=ItemCategory.APPLIANCES),
    ShopItem(item_id="pet_mansion", name="Pet Mansion", price=150, category=ItemCategory.APPLIANCES),
]

_ITEMS_BY_ID = {item.item_id: item for item in SHOP_ITEMS}


def get_item(item_id: str) -> Optional[ShopItem]:
    return _ITEMS_BY_ID.get(item_id)


def items_in(category: ItemCategory) -> List[ShopItem]:
    return [item for item in SHOP_ITEMS if item.category == category]
