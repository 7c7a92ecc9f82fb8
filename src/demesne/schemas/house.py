from datetime import datetime

from pydantic import BaseModel, Field


class HouseStatus(BaseModel):
    id: int = Field(..., description="Primary key")
    player_id: int = Field(..., description="Owner")
    name: str = Field(..., description="House name")
    tier: str = Field(..., description="cottage/house/manor")
    location_name: str = Field(..., description='Settlement name, or "Unknown"')
    condition: int = Field(..., ge=0, le=100, description="Upkeep condition")
    storage_capacity: int = Field(..., ge=0, description="Item slots available")
    storage_used: int = Field(..., ge=0, description="Items stored")
    room_count: int = Field(..., ge=0, description="Rooms built")
    max_rooms: int = Field(..., ge=0, description="Rooms allowed by the tier")
    upkeep_due_at: datetime = Field(..., description="When upkeep falls due")
    is_upkeep_overdue: bool = Field(..., description="Whether upkeep is overdue")
    days_until_upkeep: int = Field(..., ge=0, description="Whole days before upkeep falls due")
    are_buffs_disabled: bool = Field(..., description="Condition too low for buffs")
    are_portals_disabled: bool = Field(..., description="Condition too low for portals")
    is_storage_disabled: bool = Field(..., description="Condition too low for storage")
    is_abandoned: bool = Field(..., description="Condition has reached zero")
