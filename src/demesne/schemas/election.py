from datetime import datetime

from pydantic import BaseModel, Field


class CandidateStanding(BaseModel):
    candidate_id: int = Field(..., description="Candidate primary key")
    player_id: int = Field(..., description="Candidate player")
    username: str = Field(..., description="Candidate username")
    vote_count: int = Field(..., ge=0, description="Ballots received")
    vote_share: float = Field(..., ge=0.0, description="Percent of ballots cast")


class ElectionSummary(BaseModel):
    id: int = Field(..., description="Primary key")
    role: str = Field(..., description="Role being contested")
    status: str = Field(..., description="Election status code")
    domain_name: str = Field(..., description='Seat being contested, or "Unknown"')
    is_open: bool = Field(..., description="Open and inside the voting window")
    voting_ends_at: datetime | None = Field(None, description="End of balloting")
    quorum_progress: float = Field(..., ge=0.0, le=100.0, description="Percent of quorum")
    turnout_display: str = Field(..., description='e.g. "3/5"')
    candidates: list[CandidateStanding] = Field(
        default_factory=list, description="Active candidates, most votes first"
    )
