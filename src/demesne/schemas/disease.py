from pydantic import BaseModel, Field


class OutbreakSummary(BaseModel):
    id: int = Field(..., description="Primary key")
    disease_name: str = Field(..., description="Illness name")
    severity: str = Field(..., description="minor/moderate/severe/plague")
    status: str = Field(..., description="Outbreak status code")
    location_name: str = Field(..., description='Affected location, or "Unknown"')
    infected_count: int = Field(..., ge=0, description="Currently infected")
    recovered_count: int = Field(..., ge=0, description="Recovered")
    death_count: int = Field(..., ge=0, description="Dead")
    mortality_ratio: float = Field(..., ge=0.0, le=1.0, description="Deaths over resolved cases")
    duration_days: int = Field(..., ge=0, description="Days since the outbreak began")
    is_quarantined: bool = Field(..., description="Whether a quarantine is in force")


class PlayerHealth(BaseModel):
    player_id: int = Field(..., description="Player")
    active_infections: list[str] = Field(
        default_factory=list, description="Slugs of illnesses the player carries"
    )
    immunities: list[str] = Field(
        default_factory=list, description="Slugs of illnesses the player is immune to"
    )
