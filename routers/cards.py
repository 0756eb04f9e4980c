from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response

from core.deps import get_card_service, get_current_user_id
from schemas.deck import CardCreateIn, CardOut, CardUpdateIn, PageOut, page_out
from services.card_service import CardService

router = APIRouter(prefix="/decks/{deck_id}/cards", tags=["cards"])


@router.get("", response_model=PageOut[CardOut])
async def list_cards(
    deck_id: UUID,
    page: int = Query(0, ge=0),
    size: int = Query(20, ge=1, le=100),
    user_id: UUID = Depends(get_current_user_id),
    svc: CardService = Depends(get_card_service),
):
    return page_out(svc.get_cards(deck_id=deck_id, user_id=user_id, page=page, size=size), CardOut)


@router.post("", response_model=CardOut, status_code=201)
async def create_card(
    deck_id: UUID,
    data: CardCreateIn,
    user_id: UUID = Depends(get_current_user_id),
    svc: CardService = Depends(get_card_service),
):
    card = svc.create_card(deck_id=deck_id, user_id=user_id, question=data.question, answer=data.answer)
    return CardOut.model_validate(card, from_attributes=True)


@router.put("/{card_id}", response_model=CardOut)
async def update_card(
    deck_id: UUID,
    card_id: UUID,
    data: CardUpdateIn,
    user_id: UUID = Depends(get_current_user_id),
    svc: CardService = Depends(get_card_service),
):
    card = svc.update_card(
        deck_id=deck_id,
        card_id=card_id,
        user_id=user_id,
        question=data.question,
        answer=data.answer,
    )
    return CardOut.model_validate(card, from_attributes=True)


@router.delete("/{card_id}", status_code=204)
async def delete_card(
    deck_id: UUID,
    card_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    svc: CardService = Depends(get_card_service),
):
    svc.delete_card(deck_id=deck_id, card_id=card_id, user_id=user_id)
    return Response(status_code=204)
