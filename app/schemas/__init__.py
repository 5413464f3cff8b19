# Pydantic schemas
from app.schemas.common import CamelModel, StrictCamelModel, MessageResponse, CountResponse, UTCDateTime

__all__ = [
    "CamelModel",
    "StrictCamelModel",
    "MessageResponse",
    "CountResponse",
    "UTCDateTime",
]
