"""001_initial_schema

Revision ID: 001
Revises:
Create Date: 2025-03-02 10:00:00.000000

Initial AgentSport schema: users, agencies, players, agent invitations,
the club catalog, club accounts and player applications.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("email", sa.String(), nullable=False, unique=True),
        sa.Column("password_hash", sa.String(), nullable=False),
        sa.Column("role", sa.String(), nullable=False, server_default="agent"),
        *_timestamps(),
        sa.CheckConstraint(
            "role IN ('superadmin', 'agent', 'player', 'club')", name="ck_users_role"
        ),
    )
    op.create_index("idx_users_email", "users", ["email"])

    op.create_table(
        "agents",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("agency_name", sa.String(), nullable=False),
        sa.Column("slug", sa.String(120), nullable=False, unique=True),
        sa.Column("logo", sa.String(), nullable=True),
        sa.Column("phone", sa.String(), nullable=True),
        sa.Column("location", sa.String(), nullable=True),
        sa.Column("bio", sa.Text(), nullable=True),
        sa.Column("website", sa.String(), nullable=True),
        sa.Column("plan", sa.String(), nullable=False, server_default="free"),
        sa.Column("status", sa.String(), nullable=False, server_default="active"),
        *_timestamps(),
        sa.UniqueConstraint("user_id", name="uq_agents_user"),
        sa.CheckConstraint("plan IN ('free', 'pro', 'enterprise')", name="ck_agents_plan"),
        sa.CheckConstraint("status IN ('active', 'inactive', 'pending')", name="ck_agents_status"),
    )

    op.create_table(
        "players",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("first_name", sa.String(), nullable=False),
        sa.Column("last_name", sa.String(), nullable=False, server_default=""),
        sa.Column("position", sa.String(), nullable=True),
        sa.Column("nationality", sa.String(), nullable=True),
        sa.Column("birth_date", sa.Date(), nullable=True),
        sa.Column("height", sa.Float(), nullable=True),
        sa.Column("weight", sa.Float(), nullable=True),
        sa.Column("foot", sa.String(), nullable=True),
        sa.Column("avatar_url", sa.String(), nullable=True),
        sa.Column("video_url", sa.String(), nullable=True),
        sa.Column("status", sa.String(), nullable=False, server_default="signed"),
        sa.Column("representation_status", sa.String(), nullable=False, server_default="FREE_AGENT"),
        sa.Column("agent_id", sa.Integer(), sa.ForeignKey("agents.id", ondelete="SET NULL"), nullable=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("user_id", name="uq_players_user"),
        sa.CheckConstraint(
            "status IN ('signed', 'watchlist', 'contacted', 'priority')", name="ck_players_status"
        ),
        sa.CheckConstraint(
            "representation_status IN "
            "('FREE_AGENT', 'PENDING_CONFIRMATION', 'PENDING_INVITATION', 'REPRESENTED')",
            name="ck_players_representation_status",
        ),
    )
    op.create_index("idx_players_agent", "players", ["agent_id"])
    op.create_index("idx_players_representation", "players", ["representation_status"])

    op.create_table(
        "agent_invitations",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("target_email", sa.String(), nullable=False),
        sa.Column("target_name", sa.String(), nullable=False),
        sa.Column("token", sa.String(64), nullable=False, unique=True),
        sa.Column("status", sa.String(), nullable=False, server_default="pending"),
        sa.Column("player_id", sa.Integer(), sa.ForeignKey("players.id", ondelete="CASCADE"), nullable=False),
        sa.Column(
            "accepted_agent_id", sa.Integer(), sa.ForeignKey("agents.id", ondelete="SET NULL"), nullable=True
        ),
        sa.Column("accepted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.CheckConstraint("status IN ('pending', 'accepted')", name="ck_agent_invitations_status"),
    )
    op.create_index(
        "idx_agent_invitations_email_status", "agent_invitations", ["target_email", "status"]
    )
    op.create_index("idx_agent_invitations_player", "agent_invitations", ["player_id"])

    op.create_table(
        "club_catalog",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("official_name", sa.String(), nullable=False),
        sa.Column("short_name", sa.String(), nullable=True),
        sa.Column("country", sa.String(), nullable=True),
        sa.Column("city", sa.String(), nullable=True),
        sa.Column("logo_url", sa.String(), nullable=True),
        sa.Column("is_verified", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
    )
    op.create_index("idx_club_catalog_official_name", "club_catalog", ["official_name"])

    op.create_table(
        "clubs",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("club_name", sa.String(), nullable=False),
        sa.Column("category", sa.String(), nullable=True),
        sa.Column("contact_name", sa.String(), nullable=True),
        sa.Column("contact_phone", sa.String(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("user_id", name="uq_clubs_user"),
    )

    op.create_table(
        "applications",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("player_id", sa.Integer(), sa.ForeignKey("players.id", ondelete="CASCADE"), nullable=False),
        sa.Column("agent_id", sa.Integer(), sa.ForeignKey("agents.id", ondelete="CASCADE"), nullable=False),
        sa.Column("status", sa.String(), nullable=False, server_default="pending"),
        sa.Column("message", sa.Text(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint(
            "status IN ('pending', 'accepted', 'rejected')", name="ck_applications_status"
        ),
    )
    op.create_index("idx_applications_player", "applications", ["player_id"])
    op.create_index("idx_applications_agent_status", "applications", ["agent_id", "status"])


def downgrade() -> None:
    for table in ("applications", "clubs", "club_catalog", "agent_invitations", "players", "agents", "users"):
        op.drop_table(table)
