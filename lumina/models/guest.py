"""Guest directory models."""

import re
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

PHONE_PATTERN = r"^9\d{8}$"
_PHONE_RE = re.compile(PHONE_PATTERN)


def is_valid_phone(phone: str) -> bool:
    """Check a phone string against the 9-digit mobile format."""
    return bool(_PHONE_RE.match(phone))


class GuestEntry(BaseModel):
    """One invited person in the guest directory."""

    guest_id: str = Field(..., description="Unique guest ID (UUID)")
    name: str = Field(..., min_length=1, description="Display name")
    phone: str = Field(..., pattern=PHONE_PATTERN, description="9-digit phone number")
    used: bool = Field(default=False, description="True once the guest has entered")
    used_at: datetime | None = Field(default=None, description="First entry timestamp")


class GuestCreate(BaseModel):
    """Data required to add a guest to the directory."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1)
    phone: str

    @field_validator("phone")
    @classmethod
    def normalize_phone(cls, value: str) -> str:
        """Drop separators and enforce the 9-digit format."""
        digits = re.sub(r"\D", "", value)
        if not is_valid_phone(digits):
            raise ValueError("phone must be 9 digits starting with 9")
        return digits
