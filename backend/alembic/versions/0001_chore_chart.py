"""create chore chart tables

Revision ID: 0001_chore_chart
Revises:
Create Date: 2026-10-19 00:00:00.000000
"""

from alembic import op
import sqlalchemy as sa

revision = "0001_chore_chart"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("Id", sa.Integer(), primary_key=True),
        sa.Column("Username", sa.String(length=120), nullable=False),
        sa.Column("PasswordHash", sa.String(length=255), nullable=False),
        sa.Column("Role", sa.String(length=20), nullable=False),
        sa.Column("Name", sa.String(length=120), nullable=False),
        sa.Column("FamilyId", sa.Integer(), nullable=False),
        sa.Column("ParentId", sa.Integer(), sa.ForeignKey("users.Id"), nullable=True),
        sa.Column("Points", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("ProfilePhoto", sa.String(length=512), nullable=True),
        sa.Column("FailedLoginCount", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("LockedUntil", sa.DateTime(), nullable=True),
        sa.Column("CreatedAt", sa.DateTime(), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.CheckConstraint("Points >= 0", name="ck_users_points_non_negative"),
        sa.CheckConstraint("Role IN ('parent', 'child')", name="ck_users_role"),
    )
    op.create_index("ix_users_Id", "users", ["Id"])
    op.create_index("ix_users_Username", "users", ["Username"], unique=True)
    op.create_index("ix_users_FamilyId", "users", ["FamilyId"])
    op.create_index("ix_users_ParentId", "users", ["ParentId"])

    op.create_table(
        "user_sessions",
        sa.Column("Id", sa.Integer(), primary_key=True),
        sa.Column("UserId", sa.Integer(), sa.ForeignKey("users.Id"), nullable=False),
        sa.Column("TokenId", sa.String(length=64), nullable=False),
        sa.Column("CreatedAt", sa.DateTime(), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.Column("ExpiresAt", sa.DateTime(), nullable=False),
        sa.Column("RevokedAt", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_user_sessions_Id", "user_sessions", ["Id"])
    op.create_index("ix_user_sessions_UserId", "user_sessions", ["UserId"])
    op.create_index("ix_user_sessions_TokenId", "user_sessions", ["TokenId"], unique=True)

    op.create_table(
        "chores",
        sa.Column("Id", sa.Integer(), primary_key=True),
        sa.Column("Title", sa.String(length=200), nullable=False),
        sa.Column("Points", sa.Integer(), nullable=False),
        sa.Column("ImageUrl", sa.String(length=512), nullable=True),
        sa.Column("Frequency", sa.String(length=20), nullable=False, server_default="daily"),
        sa.Column("UserId", sa.Integer(), nullable=False),
        sa.Column("IsDurationChore", sa.Boolean(), nullable=False, server_default=sa.text("0")),
        sa.Column("Duration", sa.Integer(), nullable=True),
        sa.Column("RequiresProof", sa.Boolean(), nullable=False, server_default=sa.text("0")),
        sa.Column("CreatedAt", sa.DateTime(), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.CheckConstraint("Frequency IN ('daily', 'weekly')", name="ck_chores_frequency"),
    )
    op.create_index("ix_chores_Id", "chores", ["Id"])
    op.create_index("ix_chores_UserId", "chores", ["UserId"])

    op.create_table(
        "rewards",
        sa.Column("Id", sa.Integer(), primary_key=True),
        sa.Column("Title", sa.String(length=200), nullable=False),
        sa.Column("Points", sa.Integer(), nullable=False),
        sa.Column("ImageUrl", sa.String(length=512), nullable=True),
        sa.Column("Claimed", sa.Boolean(), nullable=False, server_default=sa.text("0")),
        sa.Column("UserId", sa.Integer(), nullable=False),
        sa.Column("CreatedAt", sa.DateTime(), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
    )
    op.create_index("ix_rewards_Id", "rewards", ["Id"])
    op.create_index("ix_rewards_UserId", "rewards", ["UserId"])

    op.create_table(
        "achievements",
        sa.Column("Id", sa.Integer(), primary_key=True),
        sa.Column("Title", sa.String(length=200), nullable=False),
        sa.Column("Icon", sa.String(length=120), nullable=False),
        sa.Column("Unlocked", sa.Boolean(), nullable=False, server_default=sa.text("0")),
        sa.Column("UserId", sa.Integer(), nullable=False),
    )
    op.create_index("ix_achievements_Id", "achievements", ["Id"])
    op.create_index("ix_achievements_UserId", "achievements", ["UserId"])

    op.create_table(
        "chore_completions",
        sa.Column("Id", sa.Integer(), primary_key=True),
        sa.Column("ChoreId", sa.Integer(), nullable=False),
        sa.Column("UserId", sa.Integer(), nullable=False),
        sa.Column("Points", sa.Integer(), nullable=False),
        sa.Column("ProofImageUrl", sa.String(length=512), nullable=True),
        sa.Column("Status", sa.String(length=20), nullable=False, server_default="pending"),
        sa.Column("ReviewedBy", sa.Integer(), nullable=True),
        sa.Column("ReviewedAt", sa.DateTime(), nullable=True),
        sa.Column("CompletedAt", sa.DateTime(), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
    )
    op.create_index("ix_chore_completions_Id", "chore_completions", ["Id"])
    op.create_index("ix_chore_completions_ChoreId", "chore_completions", ["ChoreId"])
    op.create_index("ix_chore_completions_UserId", "chore_completions", ["UserId"])
    op.create_index("ix_chore_completions_CompletedAt", "chore_completions", ["CompletedAt"])
    op.create_index("ix_chore_completions_user_status", "chore_completions", ["UserId", "Status"])

    op.create_table(
        "reward_claims",
        sa.Column("Id", sa.Integer(), primary_key=True),
        sa.Column("RewardId", sa.Integer(), nullable=False),
        sa.Column("UserId", sa.Integer(), nullable=False),
        sa.Column("Points", sa.Integer(), nullable=False),
        sa.Column("Status", sa.String(length=20), nullable=False, server_default="pending"),
        sa.Column("ReviewedBy", sa.Integer(), nullable=True),
        sa.Column("ReviewedAt", sa.DateTime(), nullable=True),
        sa.Column("ClaimedAt", sa.DateTime(), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
    )
    op.create_index("ix_reward_claims_Id", "reward_claims", ["Id"])
    op.create_index("ix_reward_claims_RewardId", "reward_claims", ["RewardId"])
    op.create_index("ix_reward_claims_UserId", "reward_claims", ["UserId"])
    op.create_index("ix_reward_claims_user_status", "reward_claims", ["UserId", "Status"])


def downgrade() -> None:
    op.drop_table("reward_claims")
    op.drop_table("chore_completions")
    op.drop_table("achievements")
    op.drop_table("rewards")
    op.drop_table("chores")
    op.drop_table("user_sessions")
    op.drop_table("users")
