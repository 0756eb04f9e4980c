from uuid import UUID

from fastapi import APIRouter, Depends

from core.deps import get_card_service, get_current_user_id, get_study_service
from schemas.deck import CardOut
from schemas.study import StudyAnswerIn, StudyAnswerOut
from services.card_service import CardService
from services.study_service import StudyService

router = APIRouter(prefix="/study", tags=["study"])


@router.get("/{deck_id}/cards", response_model=list[CardOut])
async def study_cards(
    deck_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    svc: CardService = Depends(get_card_service),
):
    cards = svc.get_all_cards(deck_id=deck_id, user_id=user_id)
    return [CardOut.model_validate(card, from_attributes=True) for card in cards]


@router.post("/{deck_id}/answer", response_model=StudyAnswerOut)
async def answer(
    deck_id: UUID,
    data: StudyAnswerIn,
    user_id: UUID = Depends(get_current_user_id),
    svc: StudyService = Depends(get_study_service),
):
    percent = svc.process_study_answer(deck_id=deck_id, user_id=user_id, card_id=data.card_id, status=data.status)
    return StudyAnswerOut(learned_percent=percent)
