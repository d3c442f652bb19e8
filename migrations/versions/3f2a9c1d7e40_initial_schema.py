"""initial schema

Revision ID: 3f2a9c1d7e40
Revises:
Create Date: 2026-10-17 09:00:00.000000

"""
from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "3f2a9c1d7e40"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamp(name: str, nullable: bool = False) -> sa.Column:
    return sa.Column(name, sa.DateTime(timezone=True), nullable=nullable)


def upgrade() -> None:
    """Create identity, catalog, listing, payment and engagement tables."""
    op.create_table(
        "identity",
        sa.Column("id", sa.String(length=64), nullable=False),
        sa.Column("kind", sa.String(length=16), nullable=False),
        _timestamp("created_at"),
        sa.Column("superseded_by", sa.String(length=64), nullable=True),
        _timestamp("merged_at", nullable=True),
        sa.ForeignKeyConstraint(["superseded_by"], ["identity.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_table(
        "billing_customer",
        sa.Column("identity_id", sa.String(length=64), nullable=False),
        sa.Column("customer_id", sa.Text(), nullable=False),
        _timestamp("created_at"),
        sa.ForeignKeyConstraint(["identity_id"], ["identity.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("identity_id"),
        sa.UniqueConstraint("customer_id"),
    )
    op.create_table(
        "city",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("slug", sa.String(length=120), nullable=False),
        _timestamp("created_at"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("slug"),
    )
    op.create_table(
        "category",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("section", sa.String(length=32), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("slug", sa.String(length=120), nullable=False),
        sa.Column("icon", sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("slug"),
    )
    op.create_index("ix_category_section", "category", ["section"])

    op.create_table(
        "listing",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("owner_id", sa.String(length=64), nullable=False),
        sa.Column("city_id", sa.Integer(), nullable=False),
        sa.Column("category_id", sa.Integer(), nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("price", sa.Text(), nullable=True),
        sa.Column("location", sa.Text(), nullable=True),
        sa.Column("images", sa.JSON(), nullable=False),
        sa.Column("contact_info", sa.JSON(), nullable=False),
        sa.Column("votes", sa.Integer(), nullable=False),
        sa.Column("reactions", sa.JSON(), nullable=False),
        sa.Column("payment_token", sa.String(length=255), nullable=False),
        sa.Column("provider_payment_id", sa.Text(), nullable=True),
        _timestamp("created_at"),
        _timestamp("expires_at"),
        _timestamp("comments_close_at"),
        sa.Column("active", sa.Boolean(), nullable=False),
        sa.ForeignKeyConstraint(["owner_id"], ["identity.id"]),
        sa.ForeignKeyConstraint(["city_id"], ["city.id"]),
        sa.ForeignKeyConstraint(["category_id"], ["category.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("payment_token"),
    )
    op.create_index("ix_listing_owner_id", "listing", ["owner_id"])
    op.create_index(
        "ix_listing_browse",
        "listing",
        ["city_id", "category_id", "active", "expires_at"],
    )

    op.create_table(
        "contact_view",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("listing_id", sa.Integer(), nullable=False),
        sa.Column("viewer_id", sa.String(length=64), nullable=True),
        _timestamp("created_at"),
        sa.ForeignKeyConstraint(["listing_id"], ["listing.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["viewer_id"], ["identity.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_contact_view_listing_id", "contact_view", ["listing_id"])

    op.create_table(
        "checkout_intent",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("identity_id", sa.String(length=64), nullable=False),
        sa.Column("action", sa.String(length=16), nullable=False),
        sa.Column("listing_id", sa.Integer(), nullable=True),
        sa.Column("token", sa.String(length=255), nullable=True),
        sa.Column("amount_cents", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(length=16), nullable=False),
        _timestamp("created_at"),
        _timestamp("expires_at"),
        sa.ForeignKeyConstraint(["identity_id"], ["identity.id"]),
        sa.ForeignKeyConstraint(["listing_id"], ["listing.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("token"),
    )
    op.create_index("ix_checkout_intent_identity_id", "checkout_intent", ["identity_id"])

    op.create_table(
        "payment_redemption",
        sa.Column("token", sa.String(length=255), nullable=False),
        sa.Column("listing_id", sa.Integer(), nullable=False),
        sa.Column("identity_id", sa.String(length=64), nullable=False),
        sa.Column("action", sa.String(length=16), nullable=False),
        sa.Column("provider_payment_id", sa.Text(), nullable=True),
        sa.Column("amount_cents", sa.Integer(), nullable=True),
        _timestamp("created_at"),
        sa.ForeignKeyConstraint(["listing_id"], ["listing.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["identity_id"], ["identity.id"]),
        sa.PrimaryKeyConstraint("token"),
    )
    op.create_index("ix_payment_redemption_listing_id", "payment_redemption", ["listing_id"])
    op.create_index("ix_payment_redemption_identity_id", "payment_redemption", ["identity_id"])

    op.create_table(
        "listing_vote",
        sa.Column("listing_id", sa.Integer(), nullable=False),
        sa.Column("identity_id", sa.String(length=64), nullable=False),
        sa.Column("value", sa.SmallInteger(), nullable=False),
        sa.Column("session_id", sa.Text(), nullable=True),
        _timestamp("created_at"),
        sa.CheckConstraint("value IN (1, -1)", name="ck_listing_vote_value"),
        sa.ForeignKeyConstraint(["listing_id"], ["listing.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["identity_id"], ["identity.id"]),
        sa.PrimaryKeyConstraint("listing_id", "identity_id"),
    )
    op.create_index("ix_listing_vote_listing_id", "listing_vote", ["listing_id"])

    op.create_table(
        "listing_reaction",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("listing_id", sa.Integer(), nullable=False),
        sa.Column("identity_id", sa.String(length=64), nullable=True),
        sa.Column("reaction_key", sa.String(length=32), nullable=False),
        _timestamp("created_at"),
        sa.ForeignKeyConstraint(["listing_id"], ["listing.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["identity_id"], ["identity.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_listing_reaction_listing_id", "listing_reaction", ["listing_id"])

    op.create_table(
        "comment",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("listing_id", sa.Integer(), nullable=False),
        sa.Column("author_id", sa.String(length=64), nullable=True),
        sa.Column("session_id", sa.Text(), nullable=True),
        sa.Column("text", sa.Text(), nullable=False),
        _timestamp("created_at"),
        sa.ForeignKeyConstraint(["listing_id"], ["listing.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["author_id"], ["identity.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_comment_listing_id", "comment", ["listing_id"])


def downgrade() -> None:
    """Drop every table created by this revision."""
    for index, table in (
        ("ix_comment_listing_id", "comment"),
        ("ix_listing_reaction_listing_id", "listing_reaction"),
        ("ix_listing_vote_listing_id", "listing_vote"),
        ("ix_payment_redemption_identity_id", "payment_redemption"),
        ("ix_payment_redemption_listing_id", "payment_redemption"),
        ("ix_checkout_intent_identity_id", "checkout_intent"),
        ("ix_contact_view_listing_id", "contact_view"),
        ("ix_listing_browse", "listing"),
        ("ix_listing_owner_id", "listing"),
        ("ix_category_section", "category"),
    ):
        op.drop_index(index, table_name=table)
    for table in (
        "comment",
        "listing_reaction",
        "listing_vote",
        "payment_redemption",
        "checkout_intent",
        "contact_view",
        "listing",
        "category",
        "city",
        "billing_customer",
        "identity",
    ):
        op.drop_table(table)
