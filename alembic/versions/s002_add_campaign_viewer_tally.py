"""Add campaign-wide viewer tally

Revision ID: s002_campaign_viewer_tally
Revises: s001_create_spotlight
Create Date: 2025-11-10

The frequency cap applies per campaign across all of its placements, so the
per-placement ledger in sponsor_viewer_daily cannot decide billability on its
own. This table counts each viewer once per campaign/day.
"""

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = 's002_campaign_viewer_tally'
down_revision = 's001_create_spotlight'
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'sponsor_viewer_campaign_daily',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('campaign_id', sa.String(), sa.ForeignKey('sponsor_campaigns.id', ondelete='CASCADE'), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('viewer_key', sa.String(255), nullable=False),
        sa.Column('view_count', sa.Integer(), nullable=False, server_default=sa.text('0')),
        sa.UniqueConstraint('campaign_id', 'date', 'viewer_key', name='uq_sponsor_viewer_campaign_daily_key'),
    )
    op.create_index(
        'ix_sponsor_viewer_campaign_daily_campaign_id',
        'sponsor_viewer_campaign_daily',
        ['campaign_id'],
    )

    # Backfill from the per-placement ledger so caps hold for today's viewers.
    op.execute(
        """
        INSERT INTO sponsor_viewer_campaign_daily (id, campaign_id, date, viewer_key, view_count)
        SELECT 'vwc_' || MIN(id), campaign_id, date, viewer_key, SUM(view_count)
        FROM sponsor_viewer_daily
        GROUP BY campaign_id, date, viewer_key
        """
    )


def downgrade() -> None:
    op.drop_index('ix_sponsor_viewer_campaign_daily_campaign_id', table_name='sponsor_viewer_campaign_daily')
    op.drop_table('sponsor_viewer_campaign_daily')
