from datetime import datetime

from pydantic import BaseModel, Field


class ReferralRead(BaseModel):
    id: int = Field(..., description="Primary key")
    referred_username: str = Field(..., description='Referred player, or "Unknown"')
    status: str = Field(..., description="pending/qualified/rewarded")
    reward_amount: int = Field(..., ge=0, description="Gold paid to the referrer")
    qualified_at: datetime | None = Field(None, description="When the referral qualified")
    rewarded_at: datetime | None = Field(None, description="When the reward was paid")


class ReferralStats(BaseModel):
    total: int = Field(..., ge=0, description="Referrals made")
    pending: int = Field(..., ge=0, description="Referrals still pending")
    qualified: int = Field(..., ge=0, description="Referrals qualified but not yet paid")
    rewarded: int = Field(..., ge=0, description="Referrals paid out")
    total_earned: int = Field(..., ge=0, description="Gold earned from rewarded referrals")
    referrals: list[ReferralRead] = Field(default_factory=list, description="Newest first")
