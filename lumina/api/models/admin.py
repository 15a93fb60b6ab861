"""API models for admin endpoints."""

from pydantic import BaseModel, ConfigDict, Field


class CredentialsUpdate(BaseModel):
    """New admin username and password."""

    model_config = ConfigDict(str_strip_whitespace=True)

    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=8)


class StockUpdate(BaseModel):
    stock: int = Field(..., ge=0)


class ScanRequest(BaseModel):
    """Ticket ID read by the door scanner or typed by hand."""

    ticket_id: str = Field(..., min_length=1)


class ResetConfirmRequest(BaseModel):
    """Second step of the factory reset."""

    reset_token: str
    confirmation_phrase: str = Field(..., description='Must be exactly "RESET"')


class ResetResult(BaseModel):
    success: bool = True
    deleted: dict[str, int] = Field(
        default_factory=dict, description="Records removed or reset per collection"
    )
