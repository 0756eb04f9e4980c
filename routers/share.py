from uuid import UUID

from fastapi import APIRouter, Body, Depends, Response

from core.deps import get_current_user_id, get_share_service
from schemas.deck import DeckOut
from schemas.share import ImportSharedDeckIn, SharedDeckOut, ShareOut
from services.share_service import ShareService

router = APIRouter(tags=["share"])


@router.post("/decks/{deck_id}/share", response_model=ShareOut, status_code=201)
async def share_deck(
    deck_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    svc: ShareService = Depends(get_share_service),
):
    link = svc.generate_share_token(deck_id=deck_id, user_id=user_id)
    return ShareOut.model_validate(link, from_attributes=True)


@router.get("/share/{token}", response_model=SharedDeckOut)
async def shared_deck(
    token: UUID,
    _: UUID = Depends(get_current_user_id),
    svc: ShareService = Depends(get_share_service),
):
    return SharedDeckOut.model_validate(svc.get_shared_deck(token), from_attributes=True)


@router.post("/share/{token}/import", response_model=DeckOut, status_code=201)
async def import_shared_deck(
    token: UUID,
    data: ImportSharedDeckIn | None = Body(default=None),
    user_id: UUID = Depends(get_current_user_id),
    svc: ShareService = Depends(get_share_service),
):
    deck = svc.import_shared_deck(
        token=token,
        user_id=user_id,
        new_name=data.new_name if data else None,
        new_description=data.new_description if data else None,
    )
    return DeckOut.model_validate(deck, from_attributes=True)


@router.delete("/share/{token}", status_code=204)
async def revoke_share_token(
    token: UUID,
    user_id: UUID = Depends(get_current_user_id),
    svc: ShareService = Depends(get_share_service),
):
    svc.revoke_share_token(token=token, user_id=user_id)
    return Response(status_code=204)
