"""invoice tracker baseline: invoices, contracts, forecasts and tombstones

Revision ID: 20261001_0001
Revises:
Create Date: 2026-10-01 00:00:01
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "20261001_0001"
down_revision = None
branch_labels = None
depends_on = None


def _audit_columns() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "invoices",
        sa.Column("id", sa.String(length=32), nullable=False),
        sa.Column("invoice_number", sa.String(length=64), nullable=False, server_default=""),
        sa.Column("invoice_type", sa.String(length=20), nullable=False),
        sa.Column("client", sa.String(length=255), nullable=False),
        sa.Column("customer_contract", sa.String(length=128), nullable=False, server_default=""),
        sa.Column("oracle_contract", sa.String(length=128), nullable=False, server_default=""),
        sa.Column("po_number", sa.String(length=128), nullable=False, server_default=""),
        sa.Column("invoice_date", sa.String(length=10), nullable=False),
        sa.Column("due_date", sa.String(length=10), nullable=False),
        sa.Column("amount_due", sa.Numeric(14, 2), nullable=False),
        sa.Column("currency", sa.String(length=3), nullable=False),
        sa.Column("frequency", sa.String(length=20), nullable=False),
        sa.Column("upload_date", sa.String(length=10), nullable=True),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("payment_date", sa.String(length=10), nullable=True),
        sa.Column("pdf_path", sa.String(length=512), nullable=True),
        sa.Column("pdf_original_name", sa.String(length=255), nullable=True),
        sa.Column("services", sa.Text(), nullable=True),
        *_audit_columns(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_invoices_invoice_number", "invoices", ["invoice_number"])
    op.create_index("idx_invoices_client_contract", "invoices", ["client", "customer_contract"])
    op.create_index("idx_invoices_status", "invoices", ["status"])

    op.create_table(
        "contracts",
        sa.Column("id", sa.String(length=32), nullable=False),
        sa.Column("contract_name", sa.String(length=128), nullable=False),
        sa.Column("contract_value", sa.Numeric(14, 2), nullable=False),
        sa.Column("currency", sa.String(length=3), nullable=False),
        *_audit_columns(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("contract_name"),
    )

    op.create_table(
        "expected_invoices",
        sa.Column("id", sa.String(length=32), nullable=False),
        sa.Column("client", sa.String(length=255), nullable=False),
        sa.Column("customer_contract", sa.String(length=128), nullable=False, server_default=""),
        sa.Column("invoice_type", sa.String(length=20), nullable=False),
        sa.Column("expected_amount", sa.Numeric(14, 2), nullable=False),
        sa.Column("currency", sa.String(length=3), nullable=False),
        sa.Column("expected_date", sa.String(length=10), nullable=False),
        sa.Column("frequency", sa.String(length=20), nullable=False),
        sa.Column("last_invoice_number", sa.String(length=64), nullable=True),
        sa.Column("last_invoice_date", sa.String(length=10), nullable=True),
        sa.Column("acknowledged", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("acknowledged_date", sa.String(length=10), nullable=True),
        *_audit_columns(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "idx_expected_invoices_group", "expected_invoices", ["client", "customer_contract", "expected_date"]
    )
    op.create_index("idx_expected_invoices_acknowledged", "expected_invoices", ["acknowledged"])

    op.create_table(
        "dismissed_expected_invoices",
        sa.Column("id", sa.String(length=32), nullable=False),
        sa.Column("client", sa.String(length=255), nullable=False),
        sa.Column("customer_contract", sa.String(length=128), nullable=False, server_default=""),
        sa.Column("invoice_type", sa.String(length=20), nullable=False),
        sa.Column("expected_date", sa.String(length=10), nullable=False),
        sa.Column("dismissed_date", sa.String(length=10), nullable=False),
        sa.Column("dismissed_by", sa.String(length=128), nullable=True),
        *_audit_columns(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "client",
            "customer_contract",
            "invoice_type",
            "expected_date",
            name="uq_dismissed_expected_invoices_key",
        ),
    )


def downgrade() -> None:
    op.drop_table("dismissed_expected_invoices")
    op.drop_index("idx_expected_invoices_acknowledged", table_name="expected_invoices")
    op.drop_index("idx_expected_invoices_group", table_name="expected_invoices")
    op.drop_table("expected_invoices")
    op.drop_table("contracts")
    op.drop_index("idx_invoices_status", table_name="invoices")
    op.drop_index("idx_invoices_client_contract", table_name="invoices")
    op.drop_index("idx_invoices_invoice_number", table_name="invoices")
    op.drop_table("invoices")
