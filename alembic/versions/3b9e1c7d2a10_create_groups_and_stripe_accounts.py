"""create groups, group_memberships and stripe_accounts

Revision ID: 3b9e1c7d2a10
Revises:
Create Date: 2026-10-18 00:00:00.000000

"""

from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "3b9e1c7d2a10"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "stripe_accounts",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("access_token", sa.Text(), nullable=False),
        sa.Column("refresh_token", sa.Text(), nullable=False),
        sa.Column("token_type", sa.String(length=32), nullable=False),
        sa.Column("stripe_publishable_key", sa.String(length=255), nullable=False),
        sa.Column("stripe_user_id", sa.String(length=255), nullable=False),
        sa.Column("scope", sa.String(length=64), nullable=False),
    )
    op.create_table(
        "groups",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("is_host", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column(
            "stripe_account_id",
            sa.Integer(),
            sa.ForeignKey("stripe_accounts.id"),
            nullable=True,
            unique=True,
        ),
    )
    op.create_table(
        "group_memberships",
        sa.Column(
            "group_id", sa.Integer(), sa.ForeignKey("groups.id"), primary_key=True
        ),
        sa.Column("user_id", sa.String(length=320), primary_key=True),
        sa.Column("role", sa.String(length=32), nullable=False),
    )


def downgrade() -> None:
    op.drop_table("group_memberships")
    op.drop_table("groups")
    op.drop_table("stripe_accounts")
