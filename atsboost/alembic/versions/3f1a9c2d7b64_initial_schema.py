"""initial_schema

Revision ID: 3f1a9c2d7b64
Revises:
Create Date: 2026-10-19 10:12:41.228907

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f1a9c2d7b64'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create all application tables."""
    op.create_table(
        'users',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('username', sa.String(100), nullable=False, unique=True, index=True),
        sa.Column('email', sa.String(255), nullable=False, unique=True, index=True),
        sa.Column('password', sa.String(255), nullable=False),
        sa.Column('name', sa.String(255), nullable=True),
        sa.Column('role', sa.String(20), nullable=False, server_default='user'),
        sa.Column('is_active', sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column('email_verified', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('verification_token', sa.String(100), nullable=True, index=True),
        sa.Column('verification_expires', sa.DateTime, nullable=True),
        sa.Column('reset_token', sa.String(100), nullable=True, index=True),
        sa.Column('reset_token_expires', sa.DateTime, nullable=True),
        sa.Column('last_login', sa.DateTime, nullable=True),
        sa.Column('created_at', sa.DateTime, nullable=False),
    )

    op.create_table(
        'plans',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('name', sa.String(100), nullable=False, unique=True),
        sa.Column('description', sa.Text, nullable=False, server_default=''),
        sa.Column('price', sa.Float, nullable=False, server_default='0'),
        sa.Column('interval', sa.String(20), nullable=False, server_default='monthly'),
        sa.Column('features', sa.JSON, nullable=False),
        sa.Column('is_active', sa.Boolean, nullable=False, server_default=sa.true()),
    )

    op.create_table(
        'cvs',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('user_id', sa.String(36), sa.ForeignKey('users.id'), nullable=True, index=True),
        sa.Column('file_name', sa.String(255), nullable=False),
        sa.Column('file_type', sa.String(100), nullable=False),
        sa.Column('file_size', sa.Integer, nullable=False, server_default='0'),
        sa.Column('content', sa.Text, nullable=False, server_default=''),
        sa.Column('title', sa.String(255), nullable=True),
        sa.Column('target_position', sa.String(255), nullable=True),
        sa.Column('target_industry', sa.String(255), nullable=True),
        sa.Column('job_description', sa.Text, nullable=True),
        sa.Column('is_guest', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('upload_method', sa.String(20), nullable=False, server_default='web'),
        sa.Column('created_at', sa.DateTime, nullable=False),
        sa.Column('updated_at', sa.DateTime, nullable=False),
    )

    op.create_table(
        'ats_scores',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('cv_id', sa.String(36), sa.ForeignKey('cvs.id'), nullable=False, unique=True),
        sa.Column('score', sa.Integer, nullable=False),
        sa.Column('skills_score', sa.Integer, nullable=False, server_default='0'),
        sa.Column('context_score', sa.Integer, nullable=False, server_default='0'),
        sa.Column('format_score', sa.Integer, nullable=False, server_default='0'),
        sa.Column('rating', sa.String(30), nullable=False, server_default=''),
        sa.Column('strengths', sa.JSON, nullable=False),
        sa.Column('improvements', sa.JSON, nullable=False),
        sa.Column('issues', sa.JSON, nullable=False),
        sa.Column('skills_found', sa.JSON, nullable=False),
        sa.Column('sa_keywords_found', sa.JSON, nullable=False),
        sa.Column('bbbee_detected', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('nqf_detected', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('ai_analysis', sa.JSON, nullable=True),
        sa.Column('created_at', sa.DateTime, nullable=False),
    )

    op.create_table(
        'sa_profiles',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('user_id', sa.String(36), sa.ForeignKey('users.id'), nullable=False, unique=True),
        sa.Column('province', sa.String(50), nullable=True),
        sa.Column('city', sa.String(100), nullable=True),
        sa.Column('bbbee_status', sa.String(50), nullable=True),
        sa.Column('bbbee_level', sa.Integer, nullable=True),
        sa.Column('nqf_level', sa.Integer, nullable=True),
        sa.Column('languages', sa.JSON, nullable=False),
        sa.Column('preferred_industries', sa.JSON, nullable=False),
        sa.Column('preferred_job_types', sa.JSON, nullable=False),
        sa.Column('whatsapp_number', sa.String(20), nullable=True),
        sa.Column('whatsapp_verified', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('whatsapp_notifications', sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column('whatsapp_code_hash', sa.String(64), nullable=True),
        sa.Column('whatsapp_code_expires', sa.DateTime, nullable=True),
        sa.Column('updated_at', sa.DateTime, nullable=False),
    )

    op.create_table(
        'employers',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('user_id', sa.String(36), sa.ForeignKey('users.id'), nullable=False, unique=True),
        sa.Column('company_name', sa.String(255), nullable=False),
        sa.Column('industry', sa.String(100), nullable=True),
        sa.Column('location', sa.String(255), nullable=True),
        sa.Column('bbbee_level', sa.Integer, nullable=True),
        sa.Column('website', sa.String(255), nullable=True),
        sa.Column('description', sa.Text, nullable=False, server_default=''),
        sa.Column('created_at', sa.DateTime, nullable=False),
    )

    op.create_table(
        'job_postings',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('employer_id', sa.String(36), sa.ForeignKey('employers.id'), nullable=False, index=True),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('description', sa.Text, nullable=False, server_default=''),
        sa.Column('location', sa.String(255), nullable=True),
        sa.Column('province', sa.String(50), nullable=True),
        sa.Column('industry', sa.String(100), nullable=True),
        sa.Column('employment_type', sa.String(30), nullable=False, server_default='full_time'),
        sa.Column('experience_level', sa.String(30), nullable=True),
        sa.Column('required_skills', sa.JSON, nullable=False),
        sa.Column('preferred_skills', sa.JSON, nullable=False),
        sa.Column('salary_min', sa.Integer, nullable=True),
        sa.Column('salary_max', sa.Integer, nullable=True),
        sa.Column('nqf_level', sa.Integer, nullable=True),
        sa.Column('bbbee_requirement', sa.String(20), nullable=False, server_default='none'),
        sa.Column('is_remote', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('is_active', sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime, nullable=False),
    )

    op.create_table(
        'job_matches',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('job_id', sa.String(36), sa.ForeignKey('job_postings.id'), nullable=False, index=True),
        sa.Column('cv_id', sa.String(36), sa.ForeignKey('cvs.id'), nullable=False, index=True),
        sa.Column('user_id', sa.String(36), sa.ForeignKey('users.id'), nullable=False, index=True),
        sa.Column('match_score', sa.Integer, nullable=False, server_default='0'),
        sa.Column('status', sa.String(20), nullable=False, server_default='applied'),
        sa.Column('created_at', sa.DateTime, nullable=False),
        sa.UniqueConstraint('job_id', 'cv_id', name='uq_job_matches_job_cv'),
    )

    op.create_table(
        'subscriptions',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('user_id', sa.String(36), sa.ForeignKey('users.id'), nullable=False, index=True),
        sa.Column('plan_id', sa.String(36), sa.ForeignKey('plans.id'), nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('current_period_start', sa.DateTime, nullable=True),
        sa.Column('current_period_end', sa.DateTime, nullable=True),
        sa.Column('scans_used', sa.Integer, nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime, nullable=False),
    )

    op.create_table(
        'premium_seeker_profiles',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('user_id', sa.String(36), sa.ForeignKey('users.id'), nullable=False, unique=True),
        sa.Column('cv_id', sa.String(36), sa.ForeignKey('cvs.id'), nullable=False),
        sa.Column('is_active', sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column('experience_level', sa.String(20), nullable=True),
        sa.Column('skills', sa.JSON, nullable=False),
        sa.Column('expected_salary_min', sa.Integer, nullable=True),
        sa.Column('expected_salary_max', sa.Integer, nullable=True),
        sa.Column('preferred_locations', sa.JSON, nullable=False),
        sa.Column('preferred_industries', sa.JSON, nullable=False),
        sa.Column('open_to_remote', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('open_to_relocation', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('available_from', sa.Date, nullable=True),
        sa.Column('created_at', sa.DateTime, nullable=False),
    )

    op.create_table(
        'premium_job_matches',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('job_id', sa.String(36), sa.ForeignKey('job_postings.id'), nullable=False, index=True),
        sa.Column('seeker_id', sa.String(36), sa.ForeignKey('users.id'), nullable=False, index=True),
        sa.Column('recruiter_id', sa.String(36), sa.ForeignKey('users.id'), nullable=False, index=True),
        sa.Column('cv_id', sa.String(36), sa.ForeignKey('cvs.id'), nullable=False),
        sa.Column('match_score', sa.Integer, nullable=False),
        sa.Column('score_breakdown', sa.JSON, nullable=False),
        sa.Column('match_reasons', sa.JSON, nullable=False),
        sa.Column('matched_skills', sa.JSON, nullable=False),
        sa.Column('skill_gaps', sa.JSON, nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='pending_payment'),
        sa.Column('job_seeker_paid', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('recruiter_paid', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('communication_enabled', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime, nullable=False),
        sa.Column('updated_at', sa.DateTime, nullable=False),
        sa.UniqueConstraint('job_id', 'seeker_id', name='uq_premium_matches_job_seeker'),
    )

    op.create_table(
        'payment_transactions',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('transaction_id', sa.String(64), nullable=False, unique=True, index=True),
        sa.Column('user_id', sa.String(36), sa.ForeignKey('users.id'), nullable=False, index=True),
        sa.Column('payment_type', sa.String(30), nullable=False),
        sa.Column('amount', sa.Float, nullable=False),
        sa.Column('currency', sa.String(3), nullable=False, server_default='ZAR'),
        sa.Column('status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('match_id', sa.String(36), sa.ForeignKey('premium_job_matches.id'), nullable=True),
        sa.Column('subscription_id', sa.String(36), sa.ForeignKey('subscriptions.id'), nullable=True),
        sa.Column('provider', sa.String(20), nullable=False, server_default='payfast'),
        sa.Column('provider_payment_id', sa.String(100), nullable=True),
        sa.Column('failure_reason', sa.Text, nullable=True),
        sa.Column('extra_data', sa.JSON, nullable=False),
        sa.Column('expires_at', sa.DateTime, nullable=True),
        sa.Column('paid_at', sa.DateTime, nullable=True),
        sa.Column('refunded_at', sa.DateTime, nullable=True),
        sa.Column('created_at', sa.DateTime, nullable=False),
    )

    op.create_table(
        'notifications',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('user_id', sa.String(36), sa.ForeignKey('users.id'), nullable=False, index=True),
        sa.Column('type', sa.String(50), nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('message', sa.Text, nullable=False),
        sa.Column('priority', sa.String(10), nullable=False, server_default='normal'),
        sa.Column('is_read', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('extra_data', sa.JSON, nullable=False),
        sa.Column('created_at', sa.DateTime, nullable=False),
    )


def downgrade() -> None:
    """Drop all application tables."""
    op.drop_table('notifications')
    op.drop_table('payment_transactions')
    op.drop_table('premium_job_matches')
    op.drop_table('premium_seeker_profiles')
    op.drop_table('subscriptions')
    op.drop_table('job_matches')
    op.drop_table('job_postings')
    op.drop_table('employers')
    op.drop_table('sa_profiles')
    op.drop_table('ats_scores')
    op.drop_table('cvs')
    op.drop_table('plans')
    op.drop_table('users')
