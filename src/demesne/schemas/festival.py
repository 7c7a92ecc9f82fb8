from datetime import datetime

from pydantic import BaseModel, Field


class FestivalSummary(BaseModel):
    id: int = Field(..., description="Primary key")
    name: str = Field(..., description="Festival name")
    festival_type: str = Field(..., description="Festival type slug")
    status: str = Field(..., description="Festival status code")
    location_name: str = Field(..., description='Host location, or "Unknown"')
    starts_at: datetime = Field(..., description="Opening time")
    ends_at: datetime = Field(..., description="Closing time")
    days_remaining: int = Field(..., ge=0, description="Whole days until closing")
    attendance_count: int = Field(..., ge=0, description="Visitors so far")
    net_revenue: int = Field(..., description="Gold earned minus spent by participants")
