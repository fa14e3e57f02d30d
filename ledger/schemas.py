"""
Pydantic request/response schemas for the Bet Ledger API.

Using explicit schemas instead of raw dicts prevents mass-assignment
vulnerabilities on ORM models and generates accurate OpenAPI docs.

Request fields are deliberately loose (``str | float``): the normalizer in
``ledger.core`` is the only place that decides what a valid bet is, so the
API reports the same per-field errors as the CSV importer.
"""

from __future__ import annotations

from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from ledger.core.record import FIELD_KEYS

RawValue = Optional[Union[float, str]]


# ---------------------------------------------------------------------------
# Bet create / update
# ---------------------------------------------------------------------------

class BetCreate(BaseModel):
    """
    Payload for POST /api/bets.

    Keys are camelCase to match the dashboard form.  ``potentialReturn`` and
    ``profit`` are accepted but ignored; both are derived server-side.
    """

    model_config = ConfigDict(
        extra="ignore",
        json_schema_extra={
            "example": {
                "placedAt": "2024-03-09",
                "fixture": "Arsenal v Chelsea",
                "selection": "Saka 1+ SOT",
                "bookmaker": "Bet365",
                "stakeType": "NORMAL",
                "stake": "10",
                "odds": "6/4",
                "result": "OPEN",
            }
        },
    )

    fixture: Optional[str] = None
    selection: Optional[str] = None
    bookmaker: Optional[str] = None
    stakeType: Optional[str] = None
    betType: Optional[str] = None
    playerPropMarket: Optional[str] = None
    stake: RawValue = None
    odds: RawValue = None
    result: Optional[str] = None
    cashOutValue: RawValue = None
    placedAt: Optional[str] = None

    def to_raw(self) -> dict:
        return self.model_dump()


class BetUpdate(BetCreate):
    """Payload for PUT /api/bets/{bet_id}.  Only the fields sent are changed."""

    def to_raw(self) -> dict:
        return {k: v for k, v in self.model_dump(exclude_unset=True).items() if k in FIELD_KEYS}


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------

class BetResponse(BaseModel):
    """A stored bet, derived values included."""

    id: int
    fixture: str
    selection: str
    bookmaker: str
    stakeType: str
    betType: str
    playerPropMarket: Optional[str] = None
    stake: float
    odds: float
    potentialReturn: float
    result: str
    cashOutValue: Optional[float] = None
    profit: Optional[float] = None
    placedAt: str


class BetPageResponse(BaseModel):
    """Structure for GET /api/bets."""

    total: int
    page: int
    page_size: int
    pages: int
    bets: list[BetResponse]


class FieldErrorResponse(BaseModel):
    field: str
    message: str


class ValidationFailure(BaseModel):
    """Failure detail when a bet has hard-fail fields."""

    message: str = Field("Bet rejected")
    errors: list[FieldErrorResponse]


class RejectedBetResponse(BaseModel):
    """Body of the 422 response; FastAPI nests the failure under ``detail``."""

    detail: ValidationFailure
