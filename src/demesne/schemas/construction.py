from pydantic import BaseModel, Field


class ConstructionStatus(BaseModel):
    id: int = Field(..., description="Primary key")
    description: str = Field(..., description='e.g. "Upgrading Mill to Level 3"')
    project_type_display: str = Field(..., description='Project type, or "Unknown"')
    status: str = Field(..., description="Project status code")
    progress: int = Field(..., ge=0, description="Percent of requirements gathered")
    location_name: str = Field(..., description='Settlement name, or "Unknown"')
    requirements_met: bool = Field(..., description="Whether every requirement is covered")
    remaining_seconds: int | None = Field(
        None, description="Seconds left on the construction timer, if it is running"
    )
