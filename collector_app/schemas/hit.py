"""
Data models for recorded hits.
"""

from datetime import datetime, time

from pydantic import BaseModel, ConfigDict, Field

from collector_app.models.hit import MAX_FIELD_LENGTH


def _now() -> time:
    return datetime.now().time()


class HitEvent(BaseModel):
    """
    Fields extracted from one POST request.

    domain/path/user/timezone come from the form body, address from the
    connection; the body can never set it.
    """

    domain: str = Field("", max_length=MAX_FIELD_LENGTH, description="Site the hit belongs to")
    path: str = Field("", max_length=MAX_FIELD_LENGTH, description="Page path that was viewed")
    user: str = Field("", max_length=MAX_FIELD_LENGTH, description="Caller-supplied user identifier")
    timezone: str = Field("", max_length=MAX_FIELD_LENGTH, description="Caller timezone, optional")

    # Request metadata
    address: str = Field(..., max_length=MAX_FIELD_LENGTH, description="Remote address as host:port")
    created: time = Field(default_factory=_now, description="Server time of the insert")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "domain": "example.com",
                "path": "/home",
                "user": "alice",
                "timezone": "UTC",
                "address": "10.0.0.5:443",
                "created": "10:30:00",
            }
        }
    )


class StoredHit(BaseModel):
    """What the store reports back after an insert"""

    id: int
    rowcount: int
