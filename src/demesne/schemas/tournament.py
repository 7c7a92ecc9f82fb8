from pydantic import BaseModel, Field


class CompetitorStanding(BaseModel):
    competitor_id: int = Field(..., description="Competitor primary key")
    username: str = Field(..., description="Competitor username")
    status: str = Field(..., description="Competitor status code")
    wins: int = Field(..., ge=0, description="Bouts won")
    losses: int = Field(..., ge=0, description="Bouts lost")
    win_rate: float = Field(..., ge=0.0, le=100.0, description="Percent of bouts won")


class TournamentSummary(BaseModel):
    id: int = Field(..., description="Primary key")
    name: str = Field(..., description="Tournament name")
    tournament_type: str = Field(..., description="Tournament type slug")
    status: str = Field(..., description="Tournament status code")
    location_name: str = Field(..., description='Host location, or "Unknown"')
    competitor_count: int = Field(..., ge=0, description="Entrants")
    max_participants: int = Field(..., ge=0, description="Bracket size")
    is_full: bool = Field(..., description="Whether the bracket is full")
    is_registration_open: bool = Field(..., description="Whether entries are accepted")
    standings: list[CompetitorStanding] = Field(
        default_factory=list, description="Most wins first"
    )
