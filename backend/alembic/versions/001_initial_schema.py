"""Initial schema — teams, users, skills, projects, tasks, invitations.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-17

teams.manager_id and users.team_id reference each other: teams is created
without its manager FK, which is added once users exists.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "teams",
        sa.Column("id", sa.BigInteger, primary_key=True, autoincrement=True),
        sa.Column("team_name", sa.String(255), nullable=False, unique=True),
        sa.Column("manager_id", sa.BigInteger, nullable=True, unique=True),
    )

    op.create_table(
        "users",
        sa.Column("id", sa.BigInteger, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(255), nullable=True),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("role", sa.String(20), nullable=False, server_default="engineer"),
        sa.Column("team_id", sa.BigInteger, sa.ForeignKey("teams.id", ondelete="SET NULL"), nullable=True),
        sa.Column("availability", sa.String(20), nullable=False, server_default="available"),
        sa.CheckConstraint("role IN ('admin', 'manager', 'engineer')", name="chk_users_role"),
        sa.CheckConstraint("availability IN ('available', 'busy')", name="chk_users_availability"),
    )
    op.create_index("ix_users_team_id", "users", ["team_id"])

    op.create_foreign_key(
        "fk_teams_manager", "teams", "users",
        ["manager_id"], ["id"], ondelete="SET NULL",
    )

    op.create_table(
        "skills",
        sa.Column("id", sa.BigInteger, primary_key=True, autoincrement=True),
        sa.Column("skill_name", sa.String(100), nullable=False),
        sa.Column("is_verified", sa.Boolean, nullable=False, server_default=sa.false()),
    )
    op.create_index(
        "uq_skills_skill_name_lower", "skills",
        [sa.text("lower(skill_name)")], unique=True,
    )

    op.create_table(
        "skill_aliases",
        sa.Column("alias_name", sa.String(100), primary_key=True),
        sa.Column("skill_id", sa.BigInteger, sa.ForeignKey("skills.id", ondelete="CASCADE"), nullable=False),
    )
    op.create_index("ix_skill_aliases_skill_id", "skill_aliases", ["skill_id"])

    op.create_table(
        "user_skills",
        sa.Column("user_id", sa.BigInteger, sa.ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("skill_id", sa.BigInteger, sa.ForeignKey("skills.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("proficiency", sa.String(20), nullable=False),
        sa.CheckConstraint(
            "proficiency IN ('beginner', 'intermediate', 'expert')",
            name="chk_user_skills_proficiency",
        ),
    )

    op.create_table(
        "projects",
        sa.Column("id", sa.BigInteger, primary_key=True, autoincrement=True),
        sa.Column("project_name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("team_id", sa.BigInteger, sa.ForeignKey("teams.id", ondelete="CASCADE"), nullable=False),
        sa.Column("archived", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("archived_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("idx_projects_team_archived", "projects", ["team_id", "archived"])

    op.create_table(
        "tasks",
        sa.Column("id", sa.BigInteger, primary_key=True, autoincrement=True),
        sa.Column("project_id", sa.BigInteger, sa.ForeignKey("projects.id", ondelete="CASCADE"), nullable=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="open"),
        sa.Column("priority", sa.String(20), nullable=False, server_default="medium"),
        sa.Column("assignee_id", sa.BigInteger, sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("archived", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("archived_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("status IN ('open', 'in_progress', 'done')", name="chk_tasks_status"),
        sa.CheckConstraint(
            "priority IN ('low', 'medium', 'high', 'critical')", name="chk_tasks_priority",
        ),
    )
    op.create_index("idx_tasks_project_archived", "tasks", ["project_id", "archived"])
    op.create_index("idx_tasks_assignee_status", "tasks", ["assignee_id", "status"])

    op.create_table(
        "task_required_skills",
        sa.Column("task_id", sa.BigInteger, sa.ForeignKey("tasks.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("skill_id", sa.BigInteger, sa.ForeignKey("skills.id", ondelete="CASCADE"), primary_key=True),
    )

    op.create_table(
        "invitations",
        sa.Column("id", sa.BigInteger, primary_key=True, autoincrement=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("invitation_token", sa.String(255), nullable=False, unique=True),
        sa.Column("role_to_invite", sa.String(20), nullable=False),
        sa.Column("inviter_id", sa.BigInteger, sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("team_id", sa.BigInteger, sa.ForeignKey("teams.id", ondelete="SET NULL"), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("status IN ('pending', 'accepted', 'expired')", name="chk_status"),
    )
    op.create_index("ix_invitations_team_id", "invitations", ["team_id"])
    op.create_index(
        "uq_invitations_pending_email", "invitations", ["email"],
        unique=True, postgresql_where=sa.text("status = 'pending'"),
    )


def downgrade() -> None:
    op.drop_table("invitations")
    op.drop_table("task_required_skills")
    op.drop_table("tasks")
    op.drop_table("projects")
    op.drop_table("user_skills")
    op.drop_table("skill_aliases")
    op.drop_table("skills")
    op.drop_constraint("fk_teams_manager", "teams", type_="foreignkey")
    op.drop_table("users")
    op.drop_table("teams")
