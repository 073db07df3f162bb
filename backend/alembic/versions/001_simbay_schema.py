# backend/alembic/versions/001_simbay_schema.py
"""SimBay schema: profiles, bookings, ledger, announcements, inbox

Revision ID: 001_simbay_schema
Revises:
Create Date: 2026-10-17 00:00:00.000000
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "001_simbay_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _create_extension_prefer_extensions_schema(extension_name: str) -> None:
    """Create extension using extensions schema when available."""

    bind = op.get_bind()
    if bind is None or bind.dialect.name != "postgresql":
        return

    op.execute(
        f"""
        DO $$
        DECLARE
            extensions_schema_exists BOOLEAN;
            extension_installed BOOLEAN;
        BEGIN
            SELECT EXISTS (
                SELECT 1 FROM pg_namespace WHERE nspname = 'extensions'
            ) INTO extensions_schema_exists;

            SELECT EXISTS (
                SELECT 1 FROM pg_extension WHERE extname = '{extension_name}'
            ) INTO extension_installed;

            IF NOT extension_installed THEN
                IF extensions_schema_exists THEN
                    EXECUTE 'CREATE EXTENSION IF NOT EXISTS {extension_name} WITH SCHEMA extensions';
                ELSE
                    EXECUTE 'CREATE EXTENSION IF NOT EXISTS {extension_name}';
                END IF;
            END IF;
        END
        $$;
        """
    )


def upgrade() -> None:
    """Create all SimBay tables."""
    print("Creating SimBay tables...")

    bind = op.get_bind()
    dialect_name = bind.dialect.name if bind is not None else "postgresql"
    is_postgres = dialect_name == "postgresql"

    op.create_table(
        "profiles",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("name", sa.String(120), nullable=False, server_default=""),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("phone", sa.String(40), nullable=True),
        sa.Column("role", sa.String(20), nullable=False, server_default="user"),
        sa.Column("profile_picture_url", sa.String(1024), nullable=True),
        sa.Column("active_until", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("role IN ('user', 'admin')", name="ck_profiles_role"),
    )
    op.create_index("ix_profiles_email", "profiles", ["email"], unique=True)

    print("Creating bookings table...")
    op.create_table(
        "bookings",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("simulator", sa.String(10), nullable=False),
        sa.Column("start_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["user_id"], ["profiles.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("simulator", "start_time", name="uq_bookings_simulator_start"),
        sa.CheckConstraint("simulator IN ('east', 'west')", name="ck_bookings_simulator"),
        sa.CheckConstraint("end_time > start_time", name="ck_bookings_time_order"),
    )
    op.create_index("ix_bookings_user_id", "bookings", ["user_id"])
    op.create_index(
        "ix_bookings_simulator_window", "bookings", ["simulator", "start_time", "end_time"]
    )
    op.create_index("ix_bookings_user_end", "bookings", ["user_id", "end_time"])

    if is_postgres:
        # Storage-level guarantee that two windows on one simulator never intersect
        _create_extension_prefer_extensions_schema("btree_gist")
        op.execute(
            """
            ALTER TABLE bookings
              ADD CONSTRAINT ck_bookings_two_hour_window
              CHECK (end_time - start_time = interval '2 hours')
            """
        )
        op.execute(
            """
            ALTER TABLE bookings
              ADD CONSTRAINT bookings_no_overlap_per_simulator
              EXCLUDE USING gist (
                simulator WITH =,
                tstzrange(start_time, end_time, '[)') WITH &&
              )
            """
        )

    print("Creating user_transactions table...")
    op.create_table(
        "user_transactions",
        sa.Column("id", sa.String(26), nullable=False),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("booking_id", sa.Integer(), nullable=True),
        sa.Column("type", sa.String(20), nullable=False),
        sa.Column("amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column("created_by", sa.String(64), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["user_id"], ["profiles.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["booking_id"], ["bookings.id"]),
        sa.CheckConstraint(
            "type IN ('guest_fee', 'payment', 'adjustment')", name="ck_user_transactions_type"
        ),
        sa.CheckConstraint(
            "booking_id IS NULL OR type = 'guest_fee'",
            name="ck_user_transactions_booking_only_for_guest_fee",
        ),
    )
    op.create_index("ix_user_transactions_user_id", "user_transactions", ["user_id"])
    op.create_index("ix_user_transactions_booking_id", "user_transactions", ["booking_id"])
    op.create_index(
        "ix_user_transactions_user_created", "user_transactions", ["user_id", "created_at"]
    )

    print("Creating tournament_messages table...")
    op.create_table(
        "tournament_messages",
        sa.Column("id", sa.String(26), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_by", sa.String(64), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )

    print("Creating contact_messages and membership_inquiries tables...")
    op.create_table(
        "contact_messages",
        sa.Column("id", sa.String(26), nullable=False),
        sa.Column("user_id", sa.String(64), nullable=True),
        sa.Column("user_name", sa.String(120), nullable=True),
        sa.Column("user_email", sa.String(255), nullable=True),
        sa.Column("user_phone", sa.String(40), nullable=True),
        sa.Column("issue_type", sa.String(50), nullable=False),
        sa.Column("subject", sa.String(200), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("photo_url", sa.String(1024), nullable=True),
        sa.Column(
            "submitted_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column("is_read", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_resolved", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("admin_notes", sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_contact_messages_user_id", "contact_messages", ["user_id"])
    op.create_index("ix_contact_messages_submitted_at", "contact_messages", ["submitted_at"])

    op.create_table(
        "membership_inquiries",
        sa.Column("id", sa.String(26), nullable=False),
        sa.Column("name", sa.String(120), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("phone", sa.String(40), nullable=True),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column(
            "submitted_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column("is_read", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_resolved", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("admin_notes", sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_membership_inquiries_submitted_at", "membership_inquiries", ["submitted_at"]
    )

    print("SimBay tables created")


def downgrade() -> None:
    """Drop all SimBay tables."""
    print("Dropping SimBay tables...")

    op.drop_index("ix_membership_inquiries_submitted_at", table_name="membership_inquiries")
    op.drop_table("membership_inquiries")

    op.drop_index("ix_contact_messages_submitted_at", table_name="contact_messages")
    op.drop_index("ix_contact_messages_user_id", table_name="contact_messages")
    op.drop_table("contact_messages")

    op.drop_table("tournament_messages")

    op.drop_index("ix_user_transactions_user_created", table_name="user_transactions")
    op.drop_index("ix_user_transactions_booking_id", table_name="user_transactions")
    op.drop_index("ix_user_transactions_user_id", table_name="user_transactions")
    op.drop_table("user_transactions")

    # Dropping the table drops the exclusion and window constraints with it
    op.drop_index("ix_bookings_user_end", table_name="bookings")
    op.drop_index("ix_bookings_simulator_window", table_name="bookings")
    op.drop_index("ix_bookings_user_id", table_name="bookings")
    op.drop_table("bookings")

    op.drop_index("ix_profiles_email", table_name="profiles")
    op.drop_table("profiles")
