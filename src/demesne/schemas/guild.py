from pydantic import BaseModel, Field


class GuildMemberRead(BaseModel):
    player_id: int = Field(..., description="Member")
    username: str = Field(..., description="Member's username")
    rank: str = Field(..., description="Rank code")
    rank_display: str = Field(..., description="Rank for display")
    contribution: int = Field(..., ge=0, description="Contribution points")
    has_voting_rights: bool = Field(..., description="Whether the member may vote")


class GuildSummary(BaseModel):
    id: int = Field(..., description="Primary key")
    name: str = Field(..., description="Guild name")
    skill_display: str = Field(..., description="Primary skill for display")
    level: int = Field(..., ge=1, description="Guild level")
    level_progress: float = Field(..., description="Percent of the way to the next level")
    location_name: str = Field(..., description='Seat name, or "Unknown"')
    member_count: int = Field(..., ge=0, description="Members")
    master_count: int = Field(..., ge=0, description="Members with voting rights")
    can_accept_members: bool = Field(..., description="Active and public")
    has_active_election: bool = Field(..., description="Nomination or voting under way")
    combined_effects: dict[str, int] = Field(
        default_factory=dict, description="Summed benefit effects"
    )
    members: list[GuildMemberRead] = Field(default_factory=list, description="Highest rank first")
