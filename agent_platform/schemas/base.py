from datetime import datetime, timezone
from typing import Annotated

from pydantic import AfterValidator, BaseModel
from pydantic.alias_generators import to_camel


def _as_utc(value: datetime) -> datetime:
    # columns hold naive UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


UtcDateTime = Annotated[datetime, AfterValidator(_as_utc)]


class CamelModel(BaseModel):
    """Snake_case attributes in Python, camelCase keys on the wire."""

    model_config = {"alias_generator": to_camel, "populate_by_name": True, "from_attributes": True}


class MessageResponse(CamelModel):
    success: bool = True
    message: str
