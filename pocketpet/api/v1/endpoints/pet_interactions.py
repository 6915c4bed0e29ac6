# pocketpet/api/v1/endpoints/pet_interactions.py
from typing import List

from fastapi import APIRouter, Body, HTTPException, Request
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from pocketpet.models.catalog import SHOP_ITEMS, ShopItem
from pocketpet.models.pet import ItemCategory, PetRecord
from pocketpet.models.status import PetStatusView
from pocketpet.services.session import PetSession

router = APIRouter()


class ActionResult(BaseModel):  # Pydantic model for action responses
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    action: str
    accepted: bool
    pet: PetRecord


class PurchaseRequest(BaseModel):  # Pydantic model for request body
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    item_id: str
    category: ItemCategory


def get_session(request: Request) -> PetSession:
    session = getattr(request.app.state, "session", None)
    if session is None or not session.running:
        raise HTTPException(status_code=503, detail="Pet session is not running")
    return session


def _result(session: PetSession, action: str, accepted: bool) -> ActionResult:
    return ActionResult(action=action, accepted=accepted, pet=session.record)


@router.get("/pet", response_model=PetRecord, response_model_by_alias=True)
async def get_pet_endpoint(request: Request):
    """Get the current state of the pet."""
    return get_session(request).record


@router.get("/pet/status", response_model=PetStatusView)
async def get_pet_status_endpoint(request: Request):
    """Mood, age and day/night summary for display."""
    return get_session(request).status()


@router.post("/pet/feed", response_model=ActionResult, response_model_by_alias=True)
async def feed_pet_endpoint(request: Request):
    session = get_session(request)
    return _result(session, "feed", session.feed())


@router.post("/pet/play", response_model=ActionResult, response_model_by_alias=True)
async def play_with_pet_endpoint(request: Request):
    session = get_session(request)
    return _result(session, "play", session.play())


@router.post("/pet/sleep", response_model=ActionResult, response_model_by_alias=True)
async def put_pet_to_sleep_endpoint(request: Request):
    session = get_session(request)
    return _result(session, "sleep", session.sleep())


@router.post("/pet/clean", response_model=ActionResult, response_model_by_alias=True)
async def clean_pet_endpoint(request: Request):
    session = get_session(request)
    return _result(session, "clean", session.clean())


@router.post("/pet/medicine", response_model=ActionResult, response_model_by_alias=True)
async def give_medicine_endpoint(request: Request):
    session = get_session(request)
    return _result(session, "medicine", session.give_medicine())


@router.post("/pet/hospital", response_model=ActionResult, response_model_by_alias=True)
async def send_to_hospital_endpoint(request: Request):
    session = get_session(request)
    return _result(session, "hospital", session.send_to_hospital())


@router.post("/pet/vacation", response_model=ActionResult, response_model_by_alias=True)
async def send_on_vacation_endpoint(request: Request):
    session = get_session(request)
    return _result(session, "vacation", session.send_on_vacation())


@router.post("/pet/work", response_model=ActionResult, response_model_by_alias=True)
async def earn_money_endpoint(request: Request):
    session = get_session(request)
    return _result(session, "work", session.earn_money())


@router.post("/pet/purchase", response_model=ActionResult, response_model_by_alias=True)
async def purchase_endpoint(request: Request, payload: PurchaseRequest = Body(...)):
    session = get_session(request)
    return _result(session, "purchase", session.purchase(payload.item_id, payload.category))


@router.post("/pet/reset", response_model=PetRecord, response_model_by_alias=True)
async def reset_pet_endpoint(request: Request):
    """Discard the current pet and start over with a new one."""
    return await get_session(request).reset()


@router.get("/shop", response_model=List[ShopItem])
async def list_shop_items_endpoint():
    return SHOP_ITEMS
