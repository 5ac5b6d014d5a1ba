"""
SQLAlchemy ORM models for the AgentSport system.
"""

import enum
from sqlalchemy import (
    Column,
    Integer,
    String,
    Text,
    Boolean,
    Float,
    Date,
    DateTime,
    ForeignKey,
    UniqueConstraint,
    CheckConstraint,
    Index,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from agentsport.database.db import Base


class UserRole(str, enum.Enum):
    """Account role enum."""

    SUPERADMIN = "superadmin"
    AGENT = "agent"
    PLAYER = "player"
    CLUB = "club"


class AgentPlan(str, enum.Enum):
    """Agency subscription plan."""

    FREE = "free"
    PRO = "pro"
    ENTERPRISE = "enterprise"


class AgentStatus(str, enum.Enum):
    """Agency account status."""

    ACTIVE = "active"
    INACTIVE = "inactive"
    PENDING = "pending"


class PlayerStatus(str, enum.Enum):
    """Roster bucket an agent files a player under."""

    SIGNED = "signed"
    WATCHLIST = "watchlist"
    CONTACTED = "contacted"
    PRIORITY = "priority"


class RepresentationStatus(str, enum.Enum):
    """Whether and how a player is claimed by an agent."""

    FREE_AGENT = "FREE_AGENT"
    PENDING_CONFIRMATION = "PENDING_CONFIRMATION"
    PENDING_INVITATION = "PENDING_INVITATION"
    REPRESENTED = "REPRESENTED"


class InvitationStatus(str, enum.Enum):
    """Agent invitation status enum."""

    PENDING = "pending"
    ACCEPTED = "accepted"


class ApplicationStatus(str, enum.Enum):
    """Player-to-agent application status."""

    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


def _in_check(column: str, enum_cls) -> str:
    values = ", ".join(f"'{member.value}'" for member in enum_cls)
    return f"{column} IN ({values})"


class User(Base):
    """User accounts with email-based authentication."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String, nullable=False, unique=True)
    password_hash = Column(String, nullable=False)
    role = Column(
        String, default=UserRole.AGENT.value, nullable=False, server_default=UserRole.AGENT.value
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    agent = relationship(
        "Agent", back_populates="user", uselist=False, cascade="all, delete-orphan"
    )
    player = relationship("Player", back_populates="user", uselist=False)
    club = relationship(
        "Club", back_populates="user", uselist=False, cascade="all, delete-orphan"
    )

    __table_args__ = (
        CheckConstraint(_in_check("role", UserRole), name="ck_users_role"),
        Index("idx_users_email", "email"),
    )


class Agent(Base):
    """Representation agencies. Always owned by exactly one user."""

    __tablename__ = "agents"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    agency_name = Column(String, nullable=False)
    slug = Column(String(120), nullable=False, unique=True)  # Public portfolio URL segment
    logo = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    location = Column(String, nullable=True)
    bio = Column(Text, nullable=True)
    website = Column(String, nullable=True)
    plan = Column(
        String, default=AgentPlan.FREE.value, nullable=False, server_default=AgentPlan.FREE.value
    )
    status = Column(
        String, default=AgentStatus.ACTIVE.value, nullable=False, server_default=AgentStatus.ACTIVE.value
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    user = relationship("User", back_populates="agent")
    players = relationship("Player", back_populates="agent")

    __table_args__ = (
        UniqueConstraint("user_id", name="uq_agents_user"),
        CheckConstraint(_in_check("plan", AgentPlan), name="ck_agents_plan"),
        CheckConstraint(_in_check("status", AgentStatus), name="ck_agents_status"),
    )


class Player(Base):
    """Player profiles.

    Created either by an agent adding a roster entry, or by a player
    self-registering (in which case ``user_id`` is set).
    """

    __tablename__ = "players"

    id = Column(Integer, primary_key=True, autoincrement=True)
    first_name = Column(String, nullable=False)
    last_name = Column(String, default="", nullable=False, server_default="")
    position = Column(String, nullable=True)
    nationality = Column(String, nullable=True)
    birth_date = Column(Date, nullable=True)
    height = Column(Float, nullable=True)  # cm
    weight = Column(Float, nullable=True)  # kg
    foot = Column(String, nullable=True)
    avatar_url = Column(String, nullable=True)
    video_url = Column(String, nullable=True)
    status = Column(
        String, default=PlayerStatus.SIGNED.value, nullable=False, server_default=PlayerStatus.SIGNED.value
    )
    representation_status = Column(
        String,
        default=RepresentationStatus.FREE_AGENT.value,
        nullable=False,
        server_default=RepresentationStatus.FREE_AGENT.value,
    )
    agent_id = Column(Integer, ForeignKey("agents.id", ondelete="SET NULL"), nullable=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    agent = relationship("Agent", back_populates="players")
    user = relationship("User", back_populates="player")
    invitations = relationship(
        "AgentInvitation", back_populates="player", cascade="all, delete-orphan"
    )
    applications = relationship(
        "Application", back_populates="player", cascade="all, delete-orphan"
    )

    __table_args__ = (
        UniqueConstraint("user_id", name="uq_players_user"),
        CheckConstraint(_in_check("status", PlayerStatus), name="ck_players_status"),
        CheckConstraint(
            _in_check("representation_status", RepresentationStatus),
            name="ck_players_representation_status",
        ),
        Index("idx_players_agent", "agent_id"),
        Index("idx_players_representation", "representation_status"),
    )


class AgentInvitation(Base):
    """Invitation extended on behalf of a player to a not-yet-registered agent.

    Invitations never expire. Status transitions: pending → accepted.
    """

    __tablename__ = "agent_invitations"

    id = Column(Integer, primary_key=True, autoincrement=True)
    target_email = Column(String, nullable=False)
    target_name = Column(String, nullable=False)
    token = Column(String(64), nullable=False, unique=True)
    status = Column(
        String, default=InvitationStatus.PENDING.value, nullable=False, server_default=InvitationStatus.PENDING.value
    )
    player_id = Column(Integer, ForeignKey("players.id", ondelete="CASCADE"), nullable=False)
    accepted_agent_id = Column(
        Integer, ForeignKey("agents.id", ondelete="SET NULL"), nullable=True
    )
    accepted_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    player = relationship("Player", back_populates="invitations")
    accepted_agent = relationship("Agent", foreign_keys=[accepted_agent_id])

    __table_args__ = (
        CheckConstraint(
            _in_check("status", InvitationStatus), name="ck_agent_invitations_status"
        ),
        Index("idx_agent_invitations_email_status", "target_email", "status"),
        Index("idx_agent_invitations_player", "player_id"),
    )


class ClubCatalog(Base):
    """Canonical, de-duplicated list of known clubs."""

    __tablename__ = "club_catalog"

    id = Column(Integer, primary_key=True, autoincrement=True)
    official_name = Column(String, nullable=False)
    short_name = Column(String, nullable=True)
    country = Column(String, nullable=True)
    city = Column(String, nullable=True)
    logo_url = Column(String, nullable=True)
    is_verified = Column(Boolean, default=False, nullable=False, server_default="false")
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (Index("idx_club_catalog_official_name", "official_name"),)


class Club(Base):
    """Club accounts (one per club user), distinct from the catalog."""

    __tablename__ = "clubs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    club_name = Column(String, nullable=False)
    category = Column(String, nullable=True)  # e.g. "Primera Nacional"
    contact_name = Column(String, nullable=True)
    contact_phone = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    user = relationship("User", back_populates="club")

    __table_args__ = (UniqueConstraint("user_id", name="uq_clubs_user"),)


class Application(Base):
    """Representation requests sent by a player to an agent."""

    __tablename__ = "applications"

    id = Column(Integer, primary_key=True, autoincrement=True)
    player_id = Column(Integer, ForeignKey("players.id", ondelete="CASCADE"), nullable=False)
    agent_id = Column(Integer, ForeignKey("agents.id", ondelete="CASCADE"), nullable=False)
    status = Column(
        String, default=ApplicationStatus.PENDING.value, nullable=False, server_default=ApplicationStatus.PENDING.value
    )
    message = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    player = relationship("Player", back_populates="applications")
    agent = relationship("Agent")

    __table_args__ = (
        CheckConstraint(
            _in_check("status", ApplicationStatus), name="ck_applications_status"
        ),
        Index("idx_applications_player", "player_id"),
        Index("idx_applications_agent_status", "agent_id", "status"),
    )
