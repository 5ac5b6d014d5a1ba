"""
Pydantic models for API request/response validation.
"""

from datetime import date
from typing import Optional, List, Literal
from pydantic import BaseModel, Field, ConfigDict, model_validator

from agentsport.database.models import (
    UserRole,
    PlayerStatus,
    ApplicationStatus,
)


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    message: str


# --- Auth Schemas ---


class AgentDataRequest(BaseModel):
    """Agent a registering player claims: an existing agent id, or an email to invite."""

    id: Optional[int] = None
    email: Optional[str] = None
    name: Optional[str] = None


class RegisterRequest(BaseModel):
    """Request to register a new account."""

    model_config = ConfigDict(populate_by_name=True)

    email: str
    password: str = Field(min_length=6)
    role: UserRole
    first_name: Optional[str] = Field(default=None, alias="firstName")
    last_name: Optional[str] = Field(default=None, alias="lastName")
    agency_name: Optional[str] = Field(default=None, alias="agencyName")
    club_name: Optional[str] = Field(default=None, alias="clubName")
    representation_mode: Optional[Literal["FREE", "REPRESENTED"]] = Field(
        default=None, alias="representationMode"
    )
    agent_data: Optional[AgentDataRequest] = Field(default=None, alias="agentData")

    @model_validator(mode="after")
    def _check_agent_data(self):
        if "@" not in self.email:
            raise ValueError("A valid email address is required")
        if self.representation_mode == "REPRESENTED":
            data = self.agent_data
            if data is None or (data.id is None and not (data.email or "").strip()):
                raise ValueError(
                    "agentData with an agent id or email is required when representationMode is REPRESENTED"
                )
        return self


class LoginRequest(BaseModel):
    """Request to log in with email and password."""

    email: str
    password: str


class UserResponse(BaseModel):
    """Authenticated user."""

    id: int
    email: str
    role: str


class AuthResponse(BaseModel):
    """Tokens issued on login/registration."""

    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    user: UserResponse
    representation_status: Optional[str] = None


# --- Club Catalog Schemas ---


class ClubCatalogResponse(BaseModel):
    """Club catalog entry."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    official_name: str
    short_name: Optional[str] = None
    country: Optional[str] = None
    city: Optional[str] = None
    logo_url: Optional[str] = None
    is_verified: bool


class ProposeClubRequest(BaseModel):
    """Proposal for a new catalog club."""

    name: str


# --- Agent Schemas ---


class CreateAgentRequest(BaseModel):
    """Superadmin request to create an agent account."""

    model_config = ConfigDict(populate_by_name=True)

    email: str
    password: str = Field(min_length=6)
    agency_name: str = Field(alias="agencyName")


class UpdateAgentRequest(BaseModel):
    """Editable agency profile fields."""

    model_config = ConfigDict(populate_by_name=True)

    agency_name: Optional[str] = Field(default=None, alias="agencyName")
    slug: Optional[str] = None
    logo: Optional[str] = None
    phone: Optional[str] = None
    location: Optional[str] = None
    bio: Optional[str] = None
    website: Optional[str] = None


class AgentResponse(BaseModel):
    """Full agency profile (owner/superadmin view)."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    agency_name: str
    slug: str
    logo: Optional[str] = None
    phone: Optional[str] = None
    location: Optional[str] = None
    bio: Optional[str] = None
    website: Optional[str] = None
    plan: str
    status: str


class PublicAgentResponse(BaseModel):
    """Agency card shown in the public directory."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    agency_name: str
    slug: str
    logo: Optional[str] = None
    location: Optional[str] = None
    bio: Optional[str] = None


class RepresentationResponse(BaseModel):
    """Representation state of a player after an agent action."""

    player_id: int
    representation_status: str
    agent_id: Optional[int] = None


# --- Player Schemas ---


class CreatePlayerRequest(BaseModel):
    """Roster entry added by an agent."""

    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    position: str = Field(min_length=1)
    birth_date: date
    nationality: Optional[str] = None
    foot: Optional[str] = None
    height: Optional[float] = None
    weight: Optional[float] = None
    avatar_url: Optional[str] = None
    video_url: Optional[str] = None
    status: PlayerStatus = PlayerStatus.SIGNED


class UpdatePlayerRequest(BaseModel):
    """Partial roster entry update."""

    first_name: Optional[str] = None
    last_name: Optional[str] = None
    position: Optional[str] = None
    birth_date: Optional[date] = None
    nationality: Optional[str] = None
    foot: Optional[str] = None
    height: Optional[float] = None
    weight: Optional[float] = None
    avatar_url: Optional[str] = None
    video_url: Optional[str] = None
    status: Optional[PlayerStatus] = None


class PlayerResponse(BaseModel):
    """Player as seen by the owning agent."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    first_name: str
    last_name: str
    position: Optional[str] = None
    birth_date: Optional[date] = None
    nationality: Optional[str] = None
    foot: Optional[str] = None
    height: Optional[float] = None
    weight: Optional[float] = None
    avatar_url: Optional[str] = None
    video_url: Optional[str] = None
    status: str
    representation_status: str
    agent_id: Optional[int] = None
    user_id: Optional[int] = None


class PublicPlayerResponse(BaseModel):
    """Public player profile."""

    id: int
    first_name: str
    last_name: str
    position: Optional[str] = None
    nationality: Optional[str] = None
    birth_date: Optional[date] = None
    age: Optional[int] = None
    height: Optional[float] = None
    weight: Optional[float] = None
    foot: Optional[str] = None
    avatar_url: Optional[str] = None
    video_url: Optional[str] = None
    agency_name: Optional[str] = None


class PortfolioAgent(BaseModel):
    """Agency header of a public portfolio page."""

    agency_name: str
    slug: str
    logo: Optional[str] = None
    contact_email: Optional[str] = None


class AgentPortfolioResponse(BaseModel):
    """Public portfolio: agency plus its represented players."""

    agent: PortfolioAgent
    players: List[PublicPlayerResponse]


# --- Application Schemas ---


class CreateApplicationRequest(BaseModel):
    """Player request to be represented by an agent."""

    model_config = ConfigDict(populate_by_name=True)

    agent_id: int = Field(alias="agentId")
    message: Optional[str] = None


class UpdateApplicationStatusRequest(BaseModel):
    """Agent decision on an application."""

    status: ApplicationStatus


class ApplicationResponse(BaseModel):
    """Application between a player and an agent."""

    id: int
    player_id: int
    agent_id: int
    status: str
    message: Optional[str] = None
    player_name: Optional[str] = None
    agency_name: Optional[str] = None
    created_at: Optional[str] = None


# --- Invitation Schemas ---


class InvitationDetailsResponse(BaseModel):
    """Public-facing invitation details for the agent registration page."""

    player_name: str
    target_email: str
    target_name: str
    status: str
