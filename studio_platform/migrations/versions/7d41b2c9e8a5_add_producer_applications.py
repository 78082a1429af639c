"""add producer applications

Revision ID: 7d41b2c9e8a5
Revises: 3a7c1e9d2b40
Create Date: 2026-10-19 12:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "7d41b2c9e8a5"
down_revision = "3a7c1e9d2b40"
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "producer_applications",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("country", sa.String(length=100)),
        sa.Column("genres", sa.JSON(), nullable=False),
        sa.Column("bio", sa.Text(), nullable=False),
        sa.Column("image", sa.String(length=512)),
        sa.Column("spotify_url", sa.String(length=512)),
        sa.Column("apple_music_url", sa.String(length=512)),
        sa.Column("instagram_url", sa.String(length=512)),
        sa.Column("youtube_url", sa.String(length=512)),
        sa.Column("website_url", sa.String(length=512)),
        sa.Column("status", sa.String(length=16), nullable=False, server_default="pending"),
        sa.Column("admin_notes", sa.Text()),
        sa.Column("reviewed_by_id", sa.Integer()),
        sa.Column("reviewed_at", sa.DateTime(timezone=True)),
        sa.Column("producer_id", sa.Integer()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["reviewed_by_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["producer_id"], ["producers.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_producer_applications_user_id"), "producer_applications", ["user_id"])
    op.create_index(op.f("ix_producer_applications_status"), "producer_applications", ["status"])


def downgrade():
    op.drop_index(op.f("ix_producer_applications_status"), table_name="producer_applications")
    op.drop_index(op.f("ix_producer_applications_user_id"), table_name="producer_applications")
    op.drop_table("producer_applications")
