"""create_fleet_tables

Revision ID: a1f3c9d27e40
Revises:
Create Date: 2026-10-19 09:12:41.208311

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = 'a1f3c9d27e40'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    # =========================
    # user
    # =========================
    op.create_table(
        "user",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("email", sa.String(length=120), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("role", sa.String(length=30), nullable=False, server_default="admin"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("last_login_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.text("now()")),
        sa.UniqueConstraint("email", name="user_email_key"),
    )

    # =========================
    # cars
    # =========================
    op.create_table(
        "cars",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("model", sa.String(length=100), nullable=False),
        sa.Column("purchase_date", sa.Date(), nullable=False),
        sa.Column("purchase_price", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("road_tax_expiry", sa.Date(), nullable=False),
        sa.Column("insurance_expiry", sa.Date(), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="Idle"),
        sa.Column("image_url", sa.String(length=500), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.text("now()")),
        sa.CheckConstraint("status in ('Idle','On Rent','Maintenance')", name="ck_cars_status"),
        sa.CheckConstraint("purchase_price >= 0", name="ck_cars_purchase_price"),
    )
    op.create_index("ix_cars_status", "cars", ["status"])
    op.create_index("ix_cars_created_at", "cars", ["created_at"])

    # =========================
    # transactions
    # car_id survives car deletion (set null)
    # =========================
    op.create_table(
        "transactions",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("car_id", sa.Uuid(), nullable=True),
        sa.Column("transaction_type", sa.String(length=20), nullable=False),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.text("now()")),
        sa.ForeignKeyConstraint(
            ["car_id"], ["cars.id"], name="fk_transactions_car", ondelete="SET NULL"
        ),
        sa.CheckConstraint(
            "transaction_type in ('Rental','Maintenance')", name="ck_transactions_type"
        ),
        sa.CheckConstraint("amount >= 0", name="ck_transactions_amount"),
    )
    op.create_index("ix_transactions_car_id", "transactions", ["car_id"])
    op.create_index("ix_transactions_transaction_type", "transactions", ["transaction_type"])
    op.create_index("ix_transactions_created_at", "transactions", ["created_at"])


def downgrade():
    op.drop_index("ix_transactions_created_at", table_name="transactions")
    op.drop_index("ix_transactions_transaction_type", table_name="transactions")
    op.drop_index("ix_transactions_car_id", table_name="transactions")
    op.drop_table("transactions")

    op.drop_index("ix_cars_created_at", table_name="cars")
    op.drop_index("ix_cars_status", table_name="cars")
    op.drop_table("cars")

    op.drop_table("user")
