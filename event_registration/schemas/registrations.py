from datetime import datetime

from pydantic import BaseModel, Field, field_serializer

from event_registration.schemas.events import format_timestamp


class RegistrationCreate(BaseModel):
    name: str | None = None
    email: str | None = None


class RegistrationOut(BaseModel):
    id: int
    event_id: int = Field(serialization_alias="eventId")
    name: str
    email: str
    created_at: datetime = Field(serialization_alias="createdAt")

    class Config:
        from_attributes = True

    @field_serializer("created_at")
    def serialize_created_at(self, value: datetime) -> str:
        return format_timestamp(value)
