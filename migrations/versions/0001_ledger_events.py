"""ledger events

Revision ID: 0001
Revises: None
Create Date: 2026-10-19

This migration creates the audit table for the stability core:

- ledger_events: one row per accepted state mutation (price updates,
  risk engine updates, vault and token movements, pause changes)
"""

from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the ledger_events table and its lookup indexes."""

    op.create_table(
        "ledger_events",
        sa.Column("event_id", sa.String(length=64), primary_key=True),
        sa.Column("sequence", sa.BigInteger(), nullable=False),
        sa.Column("kind", sa.String(length=64), nullable=False),
        sa.Column("actor", sa.String(length=128), nullable=False),
        sa.Column("event_ts", sa.BigInteger(), nullable=False),
        sa.Column("payload_json", postgresql.JSONB, nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    )

    op.create_index("idx_ledger_events_sequence", "ledger_events", ["sequence"])
    op.create_index("idx_ledger_events_kind_sequence", "ledger_events", ["kind", "sequence"])
    op.create_index("idx_ledger_events_actor", "ledger_events", ["actor"])


def downgrade() -> None:
    """Drop the ledger_events table."""

    op.drop_index("idx_ledger_events_actor", table_name="ledger_events")
    op.drop_index("idx_ledger_events_kind_sequence", table_name="ledger_events")
    op.drop_index("idx_ledger_events_sequence", table_name="ledger_events")
    op.drop_table("ledger_events")
