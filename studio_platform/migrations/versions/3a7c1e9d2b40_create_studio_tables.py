"""create studio tables

Revision ID: 3a7c1e9d2b40
Revises:
Create Date: 2026-10-19 10:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "3a7c1e9d2b40"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("display_name", sa.String(length=120)),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("role", sa.String(length=32), nullable=False, server_default="customer"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_users_email"), "users", ["email"], unique=True)

    op.create_table(
        "producers",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer()),
        sa.Column("slug", sa.String(length=120), nullable=False),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("email", sa.String(length=255)),
        sa.Column("bio", sa.Text()),
        sa.Column("genre", sa.String(length=255)),
        sa.Column("country", sa.String(length=64)),
        sa.Column("image", sa.String(length=512)),
        sa.Column("spotify_url", sa.String(length=512)),
        sa.Column("apple_music_url", sa.String(length=512)),
        sa.Column("instagram_url", sa.String(length=512)),
        sa.Column("youtube_url", sa.String(length=512)),
        sa.Column("discord_user_id", sa.String(length=64)),
        sa.Column("stripe_connect_account_id", sa.String(length=128)),
        sa.Column("stripe_connect_onboarded_at", sa.DateTime(timezone=True)),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("slug"),
    )
    op.create_index(op.f("ix_producers_user_id"), "producers", ["user_id"], unique=True)
    op.create_index(op.f("ix_producers_email"), "producers", ["email"])
    op.create_index(op.f("ix_producers_discord_user_id"), "producers", ["discord_user_id"], unique=True)

    op.create_table(
        "producer_google_tokens",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("access_token", sa.Text(), nullable=False),
        sa.Column("refresh_token", sa.Text()),
        sa.Column("token_expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id"),
    )

    op.create_table(
        "song_requests",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("user_email", sa.String(length=255), nullable=False),
        sa.Column("song_idea", sa.Text(), nullable=False, server_default=""),
        sa.Column("tier", sa.String(length=32), nullable=False),
        sa.Column("price", sa.Numeric(10, 2), nullable=False),
        sa.Column("status", sa.String(length=32), nullable=False, server_default="pending_payment"),
        sa.Column("stripe_session_id", sa.String(length=255)),
        sa.Column("payment_intent_id", sa.String(length=255)),
        sa.Column("platform_fee_cents", sa.Integer()),
        sa.Column("producer_payout_cents", sa.Integer()),
        sa.Column("acceptance_deadline", sa.DateTime(timezone=True)),
        sa.Column("refunded_at", sa.DateTime(timezone=True)),
        sa.Column("producer_paid_at", sa.DateTime(timezone=True)),
        sa.Column("payout_method", sa.String(length=32)),
        sa.Column("payout_transfer_id", sa.String(length=255)),
        sa.Column("wants_recorded_stems", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("wants_analog", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("wants_mixing", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("wants_mastering", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("number_of_revisions", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("assigned_producer_id", sa.Integer()),
        sa.Column("blocked_producer_ids", sa.JSON(), nullable=False),
        sa.Column("genre_category", sa.String(length=32)),
        sa.Column("complexity_level", sa.String(length=32)),
        sa.Column("file_urls", sa.JSON(), nullable=False),
        sa.Column("producer_checklist", sa.JSON()),
        sa.Column("cancellation_reason", sa.Text()),
        sa.Column("cancellation_requested_at", sa.DateTime(timezone=True)),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["assigned_producer_id"], ["producers.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_song_requests_user_id"), "song_requests", ["user_id"])
    op.create_index(op.f("ix_song_requests_status"), "song_requests", ["status"])
    op.create_index(op.f("ix_song_requests_stripe_session_id"), "song_requests", ["stripe_session_id"])
    op.create_index(op.f("ix_song_requests_assigned_producer_id"), "song_requests", ["assigned_producer_id"])

    op.create_table(
        "song_revisions",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("song_request_id", sa.Integer(), nullable=False),
        sa.Column("revision_number", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(length=32), nullable=False, server_default="pending"),
        sa.Column("client_notes", sa.Text()),
        sa.Column("client_feedback", sa.Text()),
        sa.Column("wants_meeting", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("meeting_link", sa.String(length=512)),
        sa.Column("drive_link", sa.String(length=512)),
        sa.Column("drive_folder_id", sa.String(length=255)),
        sa.Column("requested_at", sa.DateTime(timezone=True)),
        sa.Column("delivered_at", sa.DateTime(timezone=True)),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.ForeignKeyConstraint(["song_request_id"], ["song_requests.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("song_request_id", "revision_number", name="uq_revision_number"),
    )
    op.create_index(op.f("ix_song_revisions_song_request_id"), "song_revisions", ["song_request_id"])

    op.create_table(
        "revision_messages",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("revision_id", sa.Integer(), nullable=False),
        sa.Column("sender_id", sa.Integer(), nullable=False),
        sa.Column("sender_role", sa.String(length=32), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.ForeignKeyConstraint(["revision_id"], ["song_revisions.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["sender_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_revision_messages_revision_id"), "revision_messages", ["revision_id"])

    op.create_table(
        "purchases",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("product_id", sa.String(length=64), nullable=False),
        sa.Column("product_name", sa.String(length=255), nullable=False),
        sa.Column("product_type", sa.String(length=32), nullable=False, server_default="song_request"),
        sa.Column("product_category", sa.String(length=64)),
        sa.Column("price", sa.Numeric(10, 2), nullable=False),
        sa.Column("status", sa.String(length=32), nullable=False, server_default="processing"),
        sa.Column("download_url", sa.String(length=1024)),
        sa.Column("song_idea", sa.Text()),
        sa.Column("file_urls", sa.JSON(), nullable=False),
        sa.Column("stripe_session_id", sa.String(length=255)),
        sa.Column("purchase_date", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("stripe_session_id"),
    )
    op.create_index(op.f("ix_purchases_user_id"), "purchases", ["user_id"])
    op.create_index(op.f("ix_purchases_product_id"), "purchases", ["product_id"])


def downgrade():
    op.drop_index(op.f("ix_purchases_product_id"), table_name="purchases")
    op.drop_index(op.f("ix_purchases_user_id"), table_name="purchases")
    op.drop_table("purchases")
    op.drop_index(op.f("ix_revision_messages_revision_id"), table_name="revision_messages")
    op.drop_table("revision_messages")
    op.drop_index(op.f("ix_song_revisions_song_request_id"), table_name="song_revisions")
    op.drop_table("song_revisions")
    op.drop_index(op.f("ix_song_requests_assigned_producer_id"), table_name="song_requests")
    op.drop_index(op.f("ix_song_requests_stripe_session_id"), table_name="song_requests")
    op.drop_index(op.f("ix_song_requests_status"), table_name="song_requests")
    op.drop_index(op.f("ix_song_requests_user_id"), table_name="song_requests")
    op.drop_table("song_requests")
    op.drop_table("producer_google_tokens")
    op.drop_index(op.f("ix_producers_discord_user_id"), table_name="producers")
    op.drop_index(op.f("ix_producers_email"), table_name="producers")
    op.drop_index(op.f("ix_producers_user_id"), table_name="producers")
    op.drop_table("producers")
    op.drop_index(op.f("ix_users_email"), table_name="users")
    op.drop_table("users")
