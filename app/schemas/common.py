"""Shared schema building blocks"""
from datetime import datetime, timezone
from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


def to_naive_utc(value: datetime) -> datetime:
    """Store every timestamp as naive UTC, matching the database columns"""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


UTCDateTime = Annotated[datetime, AfterValidator(to_naive_utc)]


class CamelModel(BaseModel):
    """camelCase on the wire, snake_case in Python; readable from ORM objects"""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class StrictCamelModel(CamelModel):
    """Request bodies: unknown keys are rejected at the boundary"""
    model_config = ConfigDict(extra="forbid")


class MessageResponse(CamelModel):
    message: str


class CountResponse(CamelModel):
    count: int
