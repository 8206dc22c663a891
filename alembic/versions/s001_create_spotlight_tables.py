"""Create spotlight tables

Revision ID: s001_create_spotlight
Revises:
Create Date: 2025-09-01

This migration creates every table used by the Spotlight service:
- sponsor_campaigns / sponsor_creatives: served inventory
- sponsor_metrics_daily / sponsor_viewer_daily: tracking rollups and frequency ledger
- sponsor_portal_tokens: sponsor analytics access
- sponsor_quotes, sponsor_promo_codes, sponsor_promo_redemptions, sponsor_leads: sales flow
"""

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = 's001_create_spotlight'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'sponsor_campaigns',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('sponsor_name', sa.String(200), nullable=False),
        sa.Column('headline', sa.Text(), nullable=True),
        sa.Column('subline', sa.Text(), nullable=True),
        sa.Column('cta_text', sa.String(100), nullable=True),
        sa.Column('click_url', sa.Text(), nullable=False),

        # Targeting
        sa.Column('placements', sa.JSON(), nullable=False),
        sa.Column('tags', sa.JSON(), nullable=False),

        # Scheduling
        sa.Column('start_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('end_at', sa.DateTime(timezone=True), nullable=False),

        # Serving
        sa.Column('priority', sa.Integer(), nullable=False, server_default=sa.text('0')),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.text('true')),
        sa.Column('is_sponsored', sa.Boolean(), nullable=False, server_default=sa.text('true')),
        sa.Column('freq_cap_per_user_per_day', sa.Integer(), nullable=False, server_default=sa.text('0')),

        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('NOW()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('NOW()')),
    )
    op.create_index(
        'idx_sponsor_campaigns_serving',
        'sponsor_campaigns',
        ['is_active', 'start_at', 'end_at'],
    )

    op.create_table(
        'sponsor_creatives',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('campaign_id', sa.String(), sa.ForeignKey('sponsor_campaigns.id', ondelete='CASCADE'), nullable=False),
        sa.Column('placement', sa.String(50), nullable=False),
        sa.Column('image_desktop_url', sa.Text(), nullable=True),
        sa.Column('image_mobile_url', sa.Text(), nullable=True),
        sa.Column('logo_url', sa.Text(), nullable=True),
        sa.Column('alt', sa.String(255), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('NOW()')),
    )
    op.create_index('ix_sponsor_creatives_campaign_id', 'sponsor_creatives', ['campaign_id'])

    # Daily rollups; creative_id is '' rather than NULL so the unique key holds
    op.create_table(
        'sponsor_metrics_daily',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('campaign_id', sa.String(), sa.ForeignKey('sponsor_campaigns.id', ondelete='CASCADE'), nullable=False),
        sa.Column('creative_id', sa.String(), nullable=False, server_default=sa.text("''")),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('placement', sa.String(50), nullable=False),
        sa.Column('raw_views', sa.Integer(), nullable=False, server_default=sa.text('0')),
        sa.Column('billable_impressions', sa.Integer(), nullable=False, server_default=sa.text('0')),
        sa.Column('unique_users', sa.Integer(), nullable=False, server_default=sa.text('0')),
        sa.Column('clicks', sa.Integer(), nullable=False, server_default=sa.text('0')),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('NOW()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('NOW()')),
        sa.UniqueConstraint('campaign_id', 'creative_id', 'date', 'placement', name='uq_sponsor_metrics_daily_key'),
    )
    op.create_index('ix_sponsor_metrics_daily_campaign_id', 'sponsor_metrics_daily', ['campaign_id'])
    op.create_index('ix_sponsor_metrics_daily_date', 'sponsor_metrics_daily', ['date'])
    op.create_index('ix_sponsor_metrics_daily_placement', 'sponsor_metrics_daily', ['placement'])

    # Unique-user ledger: one row per viewer per campaign/placement/day
    op.create_table(
        'sponsor_viewer_daily',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('campaign_id', sa.String(), sa.ForeignKey('sponsor_campaigns.id', ondelete='CASCADE'), nullable=False),
        sa.Column('placement', sa.String(50), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('viewer_key', sa.String(255), nullable=False),
        sa.Column('view_count', sa.Integer(), nullable=False, server_default=sa.text('0')),
        sa.UniqueConstraint('campaign_id', 'placement', 'date', 'viewer_key', name='uq_sponsor_viewer_daily_key'),
    )
    op.create_index('ix_sponsor_viewer_daily_campaign_id', 'sponsor_viewer_daily', ['campaign_id'])

    op.create_table(
        'sponsor_portal_tokens',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('campaign_id', sa.String(), sa.ForeignKey('sponsor_campaigns.id', ondelete='CASCADE'), nullable=False),
        sa.Column('lead_id', sa.String(), nullable=True),
        sa.Column('token', sa.String(64), nullable=False, unique=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.text('true')),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('emailed_to', sa.String(255), nullable=True),
        sa.Column('subscribed_to_reports', sa.Boolean(), nullable=False, server_default=sa.text('false')),
        sa.Column('last_accessed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('NOW()')),
    )
    op.create_index('ix_sponsor_portal_tokens_campaign_id', 'sponsor_portal_tokens', ['campaign_id'])
    op.create_index('ix_sponsor_portal_tokens_lead_id', 'sponsor_portal_tokens', ['lead_id'])

    op.create_table(
        'sponsor_quotes',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('package_code', sa.String(50), nullable=False),
        sa.Column('duration', sa.String(10), nullable=False),
        sa.Column('num_weeks', sa.Integer(), nullable=False, server_default=sa.text('1')),
        sa.Column('num_days', sa.Integer(), nullable=False, server_default=sa.text('1')),
        sa.Column('selected_dates', sa.JSON(), nullable=False),
        sa.Column('start_date', sa.String(10), nullable=True),
        sa.Column('end_date', sa.String(10), nullable=True),
        sa.Column('add_ons', sa.JSON(), nullable=False),
        sa.Column('base_price_cents', sa.Integer(), nullable=False),
        sa.Column('addons_cents', sa.Integer(), nullable=False, server_default=sa.text('0')),
        sa.Column('subtotal_cents', sa.Integer(), nullable=False),
        sa.Column('promo_savings_cents', sa.Integer(), nullable=False, server_default=sa.text('0')),
        sa.Column('total_cents', sa.Integer(), nullable=False),
        sa.Column('currency', sa.String(3), nullable=False, server_default=sa.text("'CAD'")),
        sa.Column('promo_code', sa.String(50), nullable=True),
        sa.Column('promo_applied', sa.Boolean(), nullable=False, server_default=sa.text('false')),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('NOW()')),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
    )

    op.create_table(
        'sponsor_promo_codes',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('code', sa.String(50), nullable=False, unique=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('discount_type', sa.String(20), nullable=False),
        sa.Column('discount_value', sa.Numeric(10, 2), nullable=False),
        sa.Column('applicable_packages', sa.JSON(), nullable=True),
        sa.Column('max_uses', sa.Integer(), nullable=True),
        sa.Column('current_uses', sa.Integer(), nullable=False, server_default=sa.text('0')),
        sa.Column('min_purchase_amount', sa.Numeric(10, 2), nullable=False, server_default=sa.text('0')),
        sa.Column('valid_from', sa.DateTime(timezone=True), nullable=False),
        sa.Column('valid_to', sa.DateTime(timezone=True), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.text('true')),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('NOW()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('NOW()')),
    )
    op.create_index('ix_sponsor_promo_codes_code', 'sponsor_promo_codes', ['code'])

    op.create_check_constraint(
        'check_discount_type',
        'sponsor_promo_codes',
        "discount_type IN ('percentage', 'fixed_amount', 'free_days')"
    )
    op.create_check_constraint(
        'check_usage_within_cap',
        'sponsor_promo_codes',
        "max_uses IS NULL OR current_uses <= max_uses"
    )

    op.create_table(
        'sponsor_promo_redemptions',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('promo_code', sa.String(50), nullable=False),
        sa.Column('promo_code_id', sa.String(), sa.ForeignKey('sponsor_promo_codes.id', ondelete='SET NULL'), nullable=True),
        sa.Column('sponsor_email', sa.String(255), nullable=False),
        sa.Column('lead_id', sa.String(), nullable=True),
        sa.Column('applied_discount_cents', sa.Integer(), nullable=False, server_default=sa.text('0')),
        sa.Column('redemption_key', sa.String(320), nullable=True, unique=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('NOW()')),
    )
    op.create_index('ix_sponsor_promo_redemptions_promo_code', 'sponsor_promo_redemptions', ['promo_code'])
    op.create_index('ix_sponsor_promo_redemptions_promo_code_id', 'sponsor_promo_redemptions', ['promo_code_id'])
    op.create_index('ix_sponsor_promo_redemptions_sponsor_email', 'sponsor_promo_redemptions', ['sponsor_email'])
    op.create_index('ix_sponsor_promo_redemptions_lead_id', 'sponsor_promo_redemptions', ['lead_id'])

    op.create_table(
        'sponsor_leads',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('quote_id', sa.String(), nullable=True),

        # Contact
        sa.Column('business_name', sa.String(200), nullable=False),
        sa.Column('contact_name', sa.String(200), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('instagram', sa.String(100), nullable=True),
        sa.Column('website', sa.Text(), nullable=True),

        # Selection
        sa.Column('package_code', sa.String(50), nullable=False),
        sa.Column('duration', sa.String(10), nullable=False),
        sa.Column('num_weeks', sa.Integer(), nullable=False, server_default=sa.text('1')),
        sa.Column('num_days', sa.Integer(), nullable=False, server_default=sa.text('1')),
        sa.Column('selected_dates', sa.JSON(), nullable=False),
        sa.Column('start_date', sa.String(10), nullable=True),
        sa.Column('end_date', sa.String(10), nullable=True),
        sa.Column('add_ons', sa.JSON(), nullable=False),

        # Pricing (cents)
        sa.Column('currency', sa.String(3), nullable=False, server_default=sa.text("'CAD'")),
        sa.Column('base_price_cents', sa.Integer(), nullable=False),
        sa.Column('addons_cents', sa.Integer(), nullable=False, server_default=sa.text('0')),
        sa.Column('subtotal_cents', sa.Integer(), nullable=False),
        sa.Column('promo_savings_cents', sa.Integer(), nullable=False, server_default=sa.text('0')),
        sa.Column('total_cents', sa.Integer(), nullable=False),
        sa.Column('promo_applied', sa.Boolean(), nullable=False, server_default=sa.text('false')),
        sa.Column('promo_code', sa.String(50), nullable=True),

        # Campaign brief
        sa.Column('objective', sa.Text(), nullable=True),
        sa.Column('budget_range', sa.String(100), nullable=True),
        sa.Column('ack_exclusive', sa.Boolean(), nullable=False, server_default=sa.text('false')),
        sa.Column('ack_guarantee', sa.Boolean(), nullable=False, server_default=sa.text('false')),

        # Creative
        sa.Column('desktop_asset_url', sa.Text(), nullable=True),
        sa.Column('mobile_asset_url', sa.Text(), nullable=True),
        sa.Column('creative_links', sa.Text(), nullable=True),
        sa.Column('comments', sa.Text(), nullable=True),

        sa.Column('payload', sa.JSON(), nullable=False),

        # Review
        sa.Column('status', sa.String(20), nullable=False, server_default=sa.text("'new'")),
        sa.Column('admin_notes', sa.Text(), nullable=True),
        sa.Column('approved_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('approved_by', sa.String(100), nullable=True),
        sa.Column('campaign_id', sa.String(), nullable=True),

        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('NOW()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('NOW()')),
    )
    op.create_index('ix_sponsor_leads_quote_id', 'sponsor_leads', ['quote_id'])
    op.create_index('ix_sponsor_leads_email', 'sponsor_leads', ['email'])
    op.create_index('ix_sponsor_leads_status', 'sponsor_leads', ['status'])

    op.create_check_constraint(
        'check_lead_status',
        'sponsor_leads',
        "status IN ('new', 'reviewing', 'approved', 'onboarding_sent', 'rejected')"
    )


def downgrade() -> None:
    op.drop_table('sponsor_leads')
    op.drop_table('sponsor_promo_redemptions')
    op.drop_table('sponsor_promo_codes')
    op.drop_table('sponsor_quotes')
    op.drop_table('sponsor_portal_tokens')
    op.drop_table('sponsor_viewer_daily')
    op.drop_table('sponsor_metrics_daily')
    op.drop_table('sponsor_creatives')
    op.drop_table('sponsor_campaigns')
