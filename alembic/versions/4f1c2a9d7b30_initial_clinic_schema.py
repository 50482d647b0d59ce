"""Initial schema for the veterinary clinic backend.

Revision ID: 4f1c2a9d7b30
Revises:
Create Date: 2026-10-19 09:12:40.118204

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "4f1c2a9d7b30"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

user_role = sa.Enum("doctor", "secretary", "client", name="userrole")
appointment_status = sa.Enum(
    "Scheduled", "completed", "cancelled", "pending", "confirmed", name="appointmentstatus"
)
appointment_frequency = sa.Enum("once", "weekly", "monthly", "3months", "6months", name="appointmentfrequency")
bill_status = sa.Enum("unpaid", "paid", name="billstatus")


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("user_id", sa.String(length=26), primary_key=True),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("name", sa.String(length=100)),
        sa.Column("role", user_role, nullable=False, server_default="client"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "owners",
        sa.Column("owner_id", sa.String(length=26), primary_key=True),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("address", sa.String(length=255)),
        sa.Column("contact", sa.String(length=32)),
        sa.Column("user_id", sa.String(length=26), sa.ForeignKey("users.user_id", ondelete="SET NULL")),
        *_timestamps(),
    )

    op.create_table(
        "pets",
        sa.Column("pet_id", sa.String(length=26), primary_key=True),
        sa.Column(
            "owner_id",
            sa.String(length=26),
            sa.ForeignKey("owners.owner_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("species", sa.String(length=50)),
        sa.Column("sex", sa.String(length=10)),
        sa.Column("color", sa.String(length=50)),
        sa.Column("birthday", sa.Date()),
        *_timestamps(),
    )

    op.create_table(
        "inventory",
        sa.Column("item_id", sa.String(length=26), primary_key=True),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("category", sa.String(length=60)),
        sa.Column("quantity", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("price", sa.Numeric(10, 2), nullable=False),
        sa.Column("expiry_date", sa.Date()),
        *_timestamps(),
        sa.CheckConstraint("price >= 0", name="ck_inventory_price_non_negative"),
    )

    op.create_table(
        "diagnoses",
        sa.Column("diagnosis_id", sa.String(length=26), primary_key=True),
        sa.Column("pet_id", sa.String(length=26), sa.ForeignKey("pets.pet_id", ondelete="CASCADE"), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("vaccination", sa.String(length=120)),
        sa.Column("weight", sa.Numeric(6, 2)),
        sa.Column("temperature", sa.Numeric(4, 1)),
        sa.Column("test", sa.Text()),
        sa.Column("dx", sa.Text()),
        sa.Column("rx", sa.Text()),
        sa.Column("remarks", sa.Text()),
        sa.Column("follow_up_date", sa.Date()),
        sa.Column("created_by", sa.String(length=26), sa.ForeignKey("users.user_id", ondelete="SET NULL")),
        *_timestamps(),
    )

    op.create_table(
        "diagnosis_medications",
        sa.Column("medication_id", sa.String(length=26), primary_key=True),
        sa.Column(
            "diagnosis_id",
            sa.String(length=26),
            sa.ForeignKey("diagnoses.diagnosis_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "inventory_id",
            sa.String(length=26),
            sa.ForeignKey("inventory.item_id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column("quantity", sa.Integer(), nullable=False),
    )

    op.create_table(
        "appointments",
        sa.Column("appointment_id", sa.String(length=26), primary_key=True),
        sa.Column("pet_id", sa.String(length=26), sa.ForeignKey("pets.pet_id", ondelete="CASCADE"), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("time", sa.Time(), nullable=False),
        sa.Column("frequency", appointment_frequency, nullable=False, server_default="once"),
        sa.Column("reason", sa.Text()),
        sa.Column("status", appointment_status, nullable=False, server_default="Scheduled"),
        sa.Column("sms_1d_sent", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("sms_sameday_sent", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_by", sa.String(length=26), sa.ForeignKey("users.user_id", ondelete="SET NULL")),
        *_timestamps(),
    )
    op.create_index("ix_appointments_date_status", "appointments", ["date", "status"])

    op.create_table(
        "billing",
        sa.Column("bill_id", sa.String(length=26), primary_key=True),
        sa.Column("pet_id", sa.String(length=26), sa.ForeignKey("pets.pet_id", ondelete="RESTRICT"), nullable=False),
        sa.Column(
            "diagnosis_id",
            sa.String(length=26),
            sa.ForeignKey("diagnoses.diagnosis_id", ondelete="SET NULL"),
        ),
        sa.Column("consultation_fee", sa.Numeric(10, 2), nullable=False),
        sa.Column("total_cost", sa.Numeric(12, 2), nullable=False),
        sa.Column("status", bill_status, nullable=False, server_default="unpaid"),
        *_timestamps(),
        sa.CheckConstraint("consultation_fee >= 0", name="ck_billing_fee_non_negative"),
    )

    op.create_table(
        "billing_items",
        sa.Column("bill_item_id", sa.String(length=26), primary_key=True),
        sa.Column(
            "bill_id",
            sa.String(length=26),
            sa.ForeignKey("billing.bill_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("inventory_id", sa.String(length=26), nullable=False),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("unit_price", sa.Numeric(10, 2), nullable=False),
        sa.Column("subtotal", sa.Numeric(12, 2), nullable=False),
    )


def downgrade() -> None:
    op.drop_table("billing_items")
    op.drop_table("billing")
    op.drop_index("ix_appointments_date_status", table_name="appointments")
    op.drop_table("appointments")
    op.drop_table("diagnosis_medications")
    op.drop_table("diagnoses")
    op.drop_table("inventory")
    op.drop_table("pets")
    op.drop_table("owners")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")

    bind = op.get_bind()
    for enum_type in (bill_status, appointment_status, appointment_frequency, user_role):
        enum_type.drop(bind, checkfirst=True)
