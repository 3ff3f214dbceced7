"""Create user and profile tables."""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa


revision = "20261019_01"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "user",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("age", sa.Integer()),
        sa.Column("is_active", sa.Boolean(), server_default=sa.true()),
        sa.UniqueConstraint("email", name="uq_user_email"),
    )

    op.create_table(
        "profile",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column(
            "user_id",
            sa.String(length=36),
            sa.ForeignKey("user.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("github_username", sa.String(length=255)),
        sa.Column("twitter_handle", sa.String(length=255)),
        sa.UniqueConstraint("user_id", name="uq_profile_user_id"),
    )


def downgrade() -> None:
    op.drop_table("profile")
    op.drop_table("user")
