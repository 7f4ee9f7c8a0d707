"""Initial schema: ranking tables, global stats and newsletter subscribers

Revision ID: 3f1c2a9d7b10
Revises:
Create Date: 2026-10-19 00:00:00.000000

Creates ranked_users, ranked_repositories, ranked_topics, global_stats and
newsletter_subscribers. The identity columns get named unique indexes so the
maintenance scripts and the contribution pipeline can rely on them.
"""
from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "3f1c2a9d7b10"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
    ]


def upgrade() -> None:
    # --- ranked_users ---
    op.create_table(
        "ranked_users",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("username", sa.String(39), nullable=False),
        sa.Column("name", sa.String(255), nullable=True),
        sa.Column("avatar_url", sa.String(500), nullable=True),
        sa.Column("bio", sa.Text(), nullable=True),
        sa.Column("location", sa.String(255), nullable=True),
        sa.Column("company", sa.String(255), nullable=True),
        sa.Column("blog", sa.String(500), nullable=True),
        sa.Column("followers", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("following", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("public_repos", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_stars", sa.Integer(), nullable=False, server_default="0"),
        *_timestamps(),
    )
    op.create_index("uq_ranked_users_username", "ranked_users", ["username"], unique=True)
    op.create_index("ix_ranked_users_total_stars", "ranked_users", ["total_stars"])

    # --- ranked_repositories ---
    op.create_table(
        "ranked_repositories",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("full_name", sa.String(140), nullable=False),
        sa.Column("owner", sa.String(39), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("language", sa.String(100), nullable=True),
        sa.Column("stars", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("forks", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("watchers", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("open_issues", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("size", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_private", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column("html_url", sa.String(500), nullable=False),
        *_timestamps(),
    )
    op.create_index(
        "uq_ranked_repositories_full_name", "ranked_repositories", ["full_name"], unique=True
    )
    op.create_index("ix_ranked_repositories_stars", "ranked_repositories", ["stars"])

    # --- ranked_topics ---
    op.create_table(
        "ranked_topics",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("name", sa.String(50), nullable=False),
        sa.Column("display_name", sa.String(100), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("featured", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column("curated", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column("score", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("repositories", sa.Integer(), nullable=False, server_default="0"),
        *_timestamps(),
    )
    op.create_index("uq_ranked_topics_name", "ranked_topics", ["name"], unique=True)
    op.create_index("ix_ranked_topics_score", "ranked_topics", ["score"])

    # --- global_stats (singleton row) ---
    op.create_table(
        "global_stats",
        sa.Column("id", sa.String(20), primary_key=True),
        sa.Column("total_badge_requests", sa.Integer(), nullable=False, server_default="0"),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
    )
    op.execute("INSERT INTO global_stats (id, total_badge_requests) VALUES ('global', 0)")

    # --- newsletter_subscribers ---
    op.create_table(
        "newsletter_subscribers",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default="true"),
        sa.Column(
            "subscribed_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.Column("unsubscribed_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("email", name="uq_newsletter_subscribers_email"),
    )


def downgrade() -> None:
    op.drop_table("newsletter_subscribers")
    op.drop_table("global_stats")
    op.drop_index("ix_ranked_topics_score", table_name="ranked_topics")
    op.drop_index("uq_ranked_topics_name", table_name="ranked_topics")
    op.drop_table("ranked_topics")
    op.drop_index("ix_ranked_repositories_stars", table_name="ranked_repositories")
    op.drop_index("uq_ranked_repositories_full_name", table_name="ranked_repositories")
    op.drop_table("ranked_repositories")
    op.drop_index("ix_ranked_users_total_stars", table_name="ranked_users")
    op.drop_index("uq_ranked_users_username", table_name="ranked_users")
    op.drop_table("ranked_users")
