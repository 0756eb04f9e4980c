from uuid import UUID

from pydantic import BaseModel, ConfigDict, constr, field_validator


class ShareOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    token: UUID
    url: str


class SharedDeckOut(BaseModel):
    """Preview of a shared deck: no cards, no owner."""

    model_config = ConfigDict(from_attributes=True)

    name: str
    description: str | None = None
    card_count: int


class ImportSharedDeckIn(BaseModel):
    new_name: constr(strip_whitespace=True, min_length=1, max_length=90)
    new_description: constr(strip_whitespace=True, max_length=200) | None = None

    @field_validator("new_description", mode="before")
    @classmethod
    def _empty_description_to_none(cls, value: str | None):
        if isinstance(value, str):
            return value.strip() or None
        return value
