from uuid import UUID

from pydantic import BaseModel

from domain.entities import StudyStatus


class StudyAnswerIn(BaseModel):
    card_id: UUID
    status: StudyStatus


class StudyAnswerOut(BaseModel):
    learned_percent: int
