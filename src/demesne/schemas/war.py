from datetime import datetime

from pydantic import BaseModel, Field


class PartyRead(BaseModel):
    kind: str = Field(..., description="Kind of party (player, kingdom, barony...)")
    id: int = Field(..., description="Id of the party")
    name: str = Field(..., description='Display name, or "Unknown"')


class BattleSummary(BaseModel):
    id: int = Field(..., description="Primary key")
    name: str | None = Field(None, description="Battle name")
    status: str = Field(..., description="Battle status code")
    casualty_ratio: float = Field(..., ge=0.0, description="Casualties over troops committed")


class WarSummary(BaseModel):
    id: int = Field(..., description="Primary key")
    name: str = Field(..., description="War name")
    casus_belli: str = Field(..., description="Justification code")
    status: str = Field(..., description="War status code")
    is_active: bool = Field(..., description="Whether fighting continues")
    attacker: PartyRead | None = Field(None, description="Attacking party")
    defender: PartyRead | None = Field(None, description="Defending party")
    war_score_balance: int = Field(..., description="Attacker score minus defender score")
    duration_days: int = Field(..., ge=0, description="Days since declaration")
    battles: list[BattleSummary] = Field(default_factory=list, description="Battles fought")


class TruceRead(BaseModel):
    treaty_id: int = Field(..., description="Peace treaty primary key")
    war_id: int = Field(..., description="War the treaty ended")
    treaty_type: str = Field(..., description="Treaty type code")
    truce_expires_at: datetime = Field(..., description="When the truce lapses")
    days_remaining: int = Field(..., ge=0, description="Whole days left on the truce")
