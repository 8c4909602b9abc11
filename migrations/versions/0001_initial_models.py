"""initial models

Every table in app.models: Mobbex webhook history, store orders with their
notes and items, catalog plan filters, and the security / error logs.

"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op


revision: str = "0001_initial_models"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _text(name: str) -> sa.Column:
    return sa.Column(name, sa.String(), nullable=False, server_default="")


def upgrade() -> None:
    op.create_table(
        "mobbex_transaction",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("order_id", sa.String(), nullable=False),
        _text("payment_id"),
        _text("checkout_uid"),
        _text("entity_uid"),
        _text("entity_name"),
        _text("parent"),
        _text("operation_type"),
        _text("childs"),
        _text("description"),
        sa.Column("status_code", sa.Integer(), nullable=True),
        _text("status_message"),
        _text("source_name"),
        _text("source_type"),
        _text("source_reference"),
        _text("source_number"),
        _text("source_expiration"),
        _text("source_installment"),
        _text("installment_name"),
        sa.Column("installment_amount", sa.Float(), nullable=True),
        sa.Column("installment_count", sa.Integer(), nullable=True),
        _text("source_url"),
        _text("cardholder"),
        _text("customer"),
        sa.Column("total", sa.Float(), nullable=True),
        _text("currency"),
        _text("risk_analysis"),
        _text("data"),
        _text("created"),
        _text("updated"),
        sa.Column("stored_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_mobbex_transaction_order_id", "mobbex_transaction", ["order_id"])
    op.create_index("ix_mobbex_transaction_payment_id", "mobbex_transaction", ["payment_id"])

    op.create_table(
        "shop_order",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("status", sa.String(), nullable=False, server_default="pending"),
        sa.Column("total", sa.Float(), nullable=False, server_default="0"),
        sa.Column("currency", sa.String(), nullable=False, server_default="ARS"),
        sa.Column("payment_method", sa.String(), nullable=False, server_default="mobbex"),
        sa.Column("payment_method_title", sa.String(), nullable=False, server_default="Mobbex"),
        sa.Column("transaction_id", sa.String(), nullable=True),
        sa.Column("paid_at", sa.DateTime(), nullable=True),
        sa.Column("meta", sa.String(), nullable=False, server_default="{}"),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_shop_order_status", "shop_order", ["status"])
    op.create_index("ix_shop_order_transaction_id", "shop_order", ["transaction_id"])

    op.create_table(
        "order_note",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("order_id", sa.Integer(), sa.ForeignKey("shop_order.id"), nullable=False),
        sa.Column("note", sa.String(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_order_note_order_id", "order_note", ["order_id"])

    op.create_table(
        "order_line_item",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("order_id", sa.Integer(), sa.ForeignKey("shop_order.id"), nullable=False),
        sa.Column("product_id", sa.Integer(), nullable=True),
        sa.Column("name", sa.String(), nullable=False, server_default=""),
        sa.Column("quantity", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("total", sa.Float(), nullable=False, server_default="0"),
    )
    op.create_index("ix_order_line_item_order_id", "order_line_item", ["order_id"])
    op.create_index("ix_order_line_item_product_id", "order_line_item", ["product_id"])

    op.create_table(
        "order_fee_item",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("order_id", sa.Integer(), sa.ForeignKey("shop_order.id"), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("amount", sa.Float(), nullable=False),
        sa.Column("total", sa.Float(), nullable=False),
    )
    op.create_index("ix_order_fee_item_order_id", "order_fee_item", ["order_id"])

    for table in ("product_category", "product"):
        columns = [
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("name", sa.String(), nullable=False, server_default=""),
        ]
        if table == "product":
            columns += [
                sa.Column("price", sa.Float(), nullable=False, server_default="0"),
                sa.Column("category_ids", sa.String(), nullable=True),
            ]
        columns += [
            sa.Column("common_plans", sa.String(), nullable=True),
            sa.Column("advanced_plans", sa.String(), nullable=True),
            sa.Column("ahora_plans", sa.String(), nullable=True),
        ]
        op.create_table(table, *columns)

    op.create_table(
        "security_logs",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("event", sa.String(), nullable=False),
        sa.Column("ip", sa.String(), nullable=True),
        sa.Column("endpoint", sa.String(), nullable=True),
        sa.Column("detail", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_security_logs_event", "security_logs", ["event"])

    op.create_table(
        "error_logs",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("endpoint", sa.String(), nullable=True),
        sa.Column("method", sa.String(), nullable=True),
        sa.Column("error_message", sa.String(), nullable=True),
        sa.Column("stack_trace", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )


def downgrade() -> None:
    op.drop_table("error_logs")
    op.drop_index("ix_security_logs_event", table_name="security_logs")
    op.drop_table("security_logs")
    op.drop_table("product")
    op.drop_table("product_category")
    op.drop_index("ix_order_fee_item_order_id", table_name="order_fee_item")
    op.drop_table("order_fee_item")
    op.drop_index("ix_order_line_item_product_id", table_name="order_line_item")
    op.drop_index("ix_order_line_item_order_id", table_name="order_line_item")
    op.drop_table("order_line_item")
    op.drop_index("ix_order_note_order_id", table_name="order_note")
    op.drop_table("order_note")
    op.drop_index("ix_shop_order_transaction_id", table_name="shop_order")
    op.drop_index("ix_shop_order_status", table_name="shop_order")
    op.drop_table("shop_order")
    op.drop_index("ix_mobbex_transaction_payment_id", table_name="mobbex_transaction")
    op.drop_index("ix_mobbex_transaction_order_id", table_name="mobbex_transaction")
    op.drop_table("mobbex_transaction")
