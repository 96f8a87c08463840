"""initial schema: users, weddings, team, guests, vendors, budget

Revision ID: 4c1f2a9e7b10
Revises: 
Create Date: 2026-10-19 10:12:44.318207

"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '4c1f2a9e7b10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

ENUMS = {
    "permissionlevelenum": ("view", "edit"),
    "invitationstatusenum": ("pending", "accepted"),
    "rsvpstatusenum": ("pending", "confirmed", "declined"),
    "decisionstatusenum": ("Analisando", "Contratado", "Recusado"),
}


def _enum(name: str) -> sa.Enum:
    """En PostgreSQL los tipos se crean una sola vez antes de las tablas (se reutilizan)."""
    if op.get_bind().dialect.name == "postgresql":
        return postgresql.ENUM(*ENUMS[name], name=name, create_type=False)
    return sa.Enum(*ENUMS[name], name=name)


def upgrade() -> None:
    """Create every table of the planner."""
    bind = op.get_bind()
    if bind.dialect.name == "postgresql":
        for name, values in ENUMS.items():
            postgresql.ENUM(*values, name=name).create(bind, checkfirst=True)
    permission_level = _enum("permissionlevelenum")
    invitation_status = _enum("invitationstatusenum")
    rsvp_status = _enum("rsvpstatusenum")
    decision_status = _enum("decisionstatusenum")

    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("email", sa.String(length=254), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("is_verified", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("verification_token", sa.String(length=12), nullable=True),
        sa.Column("verification_token_expires_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_users_id", "users", ["id"])
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "refresh_tokens",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("token", sa.String(length=512), nullable=False),
        sa.Column("expires_at", sa.DateTime(), nullable=False),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
    )
    op.create_index("ix_refresh_tokens_id", "refresh_tokens", ["id"])
    op.create_index("ix_refresh_tokens_user_id", "refresh_tokens", ["user_id"])
    op.create_index("ix_refresh_tokens_token", "refresh_tokens", ["token"], unique=True)

    op.create_table(
        "password_reset_tokens",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("token", sa.String(length=12), nullable=False),
        sa.Column("expires_at", sa.DateTime(), nullable=False),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
    )
    op.create_index("ix_password_reset_tokens_id", "password_reset_tokens", ["id"])
    op.create_index("ix_password_reset_tokens_user_id", "password_reset_tokens", ["user_id"])

    op.create_table(
        "weddings",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("owner_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("groom_name", sa.String(length=120), nullable=False),
        sa.Column("bride_name", sa.String(length=120), nullable=False),
        sa.Column("wedding_date", sa.Date(), nullable=True),
        sa.Column("website_slug", sa.String(length=255), nullable=False),
        sa.Column("wedding_style", sa.String(length=120), nullable=True),
        sa.Column("color_palette", sa.JSON(), nullable=False),
        sa.Column("ceremony_location", sa.String(length=255), nullable=True),
        sa.Column("ceremony_location_maps", sa.String(length=512), nullable=True),
        sa.Column("reception_location", sa.String(length=255), nullable=True),
        sa.Column("reception_location_maps", sa.String(length=512), nullable=True),
        sa.Column("has_civil_ceremony", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("civil_ceremony_date", sa.Date(), nullable=True),
        sa.Column("civil_ceremony_location", sa.String(length=255), nullable=True),
        sa.Column("alternative_dates", sa.JSON(), nullable=False),
        sa.Column("estimated_guests", sa.Integer(), nullable=True),
        sa.Column("estimated_budget", sa.Numeric(12, 2), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_weddings_id", "weddings", ["id"])
    op.create_index("ix_weddings_owner_id", "weddings", ["owner_id"])
    op.create_index("ix_weddings_website_slug", "weddings", ["website_slug"], unique=True)

    op.create_table(
        "wedding_users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("wedding_id", sa.Integer(), sa.ForeignKey("weddings.id", ondelete="CASCADE"), nullable=False),
        sa.Column("permission_level", permission_level, nullable=False),
        sa.Column("relationship", sa.String(length=120), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        sa.UniqueConstraint("user_id", "wedding_id", name="uq_wedding_users_user_wedding"),
    )
    op.create_index("ix_wedding_users_id", "wedding_users", ["id"])
    op.create_index("ix_wedding_users_user_id", "wedding_users", ["user_id"])
    op.create_index("ix_wedding_users_wedding_id", "wedding_users", ["wedding_id"])

    op.create_table(
        "wedding_invitations",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("wedding_id", sa.Integer(), sa.ForeignKey("weddings.id", ondelete="CASCADE"), nullable=False),
        sa.Column("email", sa.String(length=254), nullable=False),
        sa.Column("invitation_token", sa.String(length=128), nullable=False),
        sa.Column("status", invitation_status, nullable=False),
        sa.Column("permission_level", permission_level, nullable=False),
        sa.Column("relationship", sa.String(length=120), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        sa.UniqueConstraint("wedding_id", "email", name="uq_wedding_invitations_wedding_email"),
    )
    op.create_index("ix_wedding_invitations_id", "wedding_invitations", ["id"])
    op.create_index("ix_wedding_invitations_wedding_id", "wedding_invitations", ["wedding_id"])
    op.create_index("ix_wedding_invitations_email", "wedding_invitations", ["email"])
    op.create_index("ix_wedding_invitations_invitation_token", "wedding_invitations", ["invitation_token"], unique=True)

    op.create_table(
        "wedding_site_details",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("wedding_id", sa.Integer(), sa.ForeignKey("weddings.id", ondelete="CASCADE"), nullable=False, unique=True),
        sa.Column("our_story", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_wedding_site_details_id", "wedding_site_details", ["id"])

    op.create_table(
        "guests",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("wedding_id", sa.Integer(), sa.ForeignKey("weddings.id", ondelete="CASCADE"), nullable=False),
        sa.Column("full_name", sa.String(length=160), nullable=False),
        sa.Column("contact_info", sa.String(length=255), nullable=True),
        sa.Column("guest_group", sa.String(length=120), nullable=True),
        sa.Column("created_by", sa.Integer(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("rsvp_token", sa.String(length=64), nullable=False),
        sa.Column("rsvp_status", rsvp_status, nullable=True),
        sa.Column("guest_message", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_guests_id", "guests", ["id"])
    op.create_index("ix_guests_wedding_id", "guests", ["wedding_id"])
    op.create_index("ix_guests_full_name", "guests", ["full_name"])
    op.create_index("ix_guests_rsvp_token", "guests", ["rsvp_token"], unique=True)

    op.create_table(
        "vendors",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("wedding_id", sa.Integer(), sa.ForeignKey("weddings.id", ondelete="CASCADE"), nullable=False),
        sa.Column("vendor_name", sa.String(length=160), nullable=False),
        sa.Column("category", sa.String(length=120), nullable=True),
        sa.Column("status", sa.String(length=60), nullable=True),
        sa.Column("contact_name", sa.String(length=160), nullable=True),
        sa.Column("phone", sa.String(length=40), nullable=True),
        sa.Column("email", sa.String(length=254), nullable=True),
        sa.Column("website", sa.String(length=512), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_vendors_id", "vendors", ["id"])
    op.create_index("ix_vendors_wedding_id", "vendors", ["wedding_id"])

    op.create_table(
        "budget_items",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("wedding_id", sa.Integer(), sa.ForeignKey("weddings.id", ondelete="CASCADE"), nullable=False),
        sa.Column("vendor_id", sa.Integer(), sa.ForeignKey("vendors.id", ondelete="SET NULL"), nullable=True),
        sa.Column("category", sa.String(length=120), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("final_value", sa.Numeric(12, 2), nullable=False),
        sa.Column("paid_value", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("decision_status", decision_status, nullable=False),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_budget_items_id", "budget_items", ["id"])
    op.create_index("ix_budget_items_wedding_id", "budget_items", ["wedding_id"])
    op.create_index("ix_budget_items_vendor_id", "budget_items", ["vendor_id"])
    op.create_index("ix_budget_items_wedding_status", "budget_items", ["wedding_id", "decision_status"])


def downgrade() -> None:
    """Drop every table (children first) and the enum types."""
    for table in (
        "budget_items",
        "vendors",
        "guests",
        "wedding_site_details",
        "wedding_invitations",
        "wedding_users",
        "weddings",
        "password_reset_tokens",
        "refresh_tokens",
        "users",
    ):
        op.drop_table(table)

    bind = op.get_bind()
    if bind.dialect.name == "postgresql":
        for name, values in ENUMS.items():
            postgresql.ENUM(*values, name=name).drop(bind, checkfirst=True)
