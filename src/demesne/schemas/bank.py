from datetime import datetime

from pydantic import BaseModel, Field


class BankTransactionRead(BaseModel):
    id: int = Field(..., description="Primary key")
    type: str = Field(..., description="deposit or withdrawal")
    amount: int = Field(..., ge=0, description="Gold moved")
    signed_amount: int = Field(..., description="Amount as applied to the balance")
    balance_after: int = Field(..., description="Balance once the entry was applied")
    description: str | None = Field(None, description="Ledger note")
    created_at: datetime | None = Field(None, description="When the entry was recorded")


class BankAccountSummary(BaseModel):
    id: int = Field(..., description="Primary key")
    player_id: int = Field(..., description="Account holder")
    location_type: str = Field(..., description="Kind of settlement holding the account")
    location_id: int = Field(..., description="Id of that settlement")
    location_name: str = Field(..., description='Settlement name, or "Unknown"')
    balance: int = Field(..., description="Gold held")
    recent_transactions: list[BankTransactionRead] = Field(
        default_factory=list, description="Newest ledger entries first"
    )
