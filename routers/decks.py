from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response

from core.deps import get_current_user_id, get_deck_service
from schemas.deck import DeckCreateIn, DeckOut, DeckUpdateIn, PageOut, page_out
from services.deck_service import DeckService

router = APIRouter(prefix="/decks", tags=["decks"])


@router.post("", response_model=DeckOut, status_code=201)
async def create_deck(
    data: DeckCreateIn,
    user_id: UUID = Depends(get_current_user_id),
    svc: DeckService = Depends(get_deck_service),
):
    deck = svc.create_deck(user_id=user_id, name=data.name, description=data.description)
    return DeckOut.model_validate(deck, from_attributes=True)


@router.get("", response_model=PageOut[DeckOut])
async def list_decks(
    page: int = Query(0, ge=0),
    size: int = Query(20, ge=1, le=100),
    user_id: UUID = Depends(get_current_user_id),
    svc: DeckService = Depends(get_deck_service),
):
    return page_out(svc.get_decks(user_id=user_id, page=page, size=size), DeckOut)


@router.get("/{deck_id}", response_model=DeckOut)
async def get_deck(
    deck_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    svc: DeckService = Depends(get_deck_service),
):
    return DeckOut.model_validate(svc.get_deck(deck_id=deck_id, user_id=user_id), from_attributes=True)


@router.put("/{deck_id}", response_model=DeckOut)
async def update_deck(
    deck_id: UUID,
    data: DeckUpdateIn,
    user_id: UUID = Depends(get_current_user_id),
    svc: DeckService = Depends(get_deck_service),
):
    deck = svc.update_deck(deck_id=deck_id, user_id=user_id, name=data.name, description=data.description)
    return DeckOut.model_validate(deck, from_attributes=True)


@router.delete("/{deck_id}", status_code=204)
async def delete_deck(
    deck_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    svc: DeckService = Depends(get_deck_service),
):
    svc.delete_deck(deck_id=deck_id, user_id=user_id)
    return Response(status_code=204)
