"""initial schema: users, communities, memberships, job posts

Revision ID: 0001_initial
Revises:
Create Date: 2025-09-22

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '0001_initial'
down_revision = None
branch_labels = None
depends_on = None


user_role = sa.Enum('USER', 'ADMIN', name='user_role')
community_status = sa.Enum('ACTIVE', 'INACTIVE', 'ARCHIVED', name='community_status')
community_role = sa.Enum('OWNER', 'ADMIN', 'MODERATOR', 'MEMBER', name='community_role')
job_post_type = sa.Enum('GLOBAL', 'COMMUNITY', 'DESIGNATED', name='job_post_type')
job_post_category = sa.Enum('SKY', 'LADDER', name='job_post_category')
ladder_type = sa.Enum('MOVING_GOODS', 'ON_SITE', name='ladder_type')
work_date_type = sa.Enum('URGENT', 'TODAY', 'TOMORROW', 'CUSTOM_DATE', name='work_date_type')
payment_method = sa.Enum('SIGNATURE', 'DIRECT_PAYMENT', 'CASH', name='payment_method')
loading_unloading_service = sa.Enum('NONE', 'LOADING', 'UNLOADING', 'BOTH', name='loading_unloading_service')
travel_distance = sa.Enum('WITHIN_JURISDICTION', 'OUTSIDE_JURISDICTION', name='travel_distance')


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        'user',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('kakao_id', sa.BigInteger(), nullable=True),
        sa.Column('email', sa.String(320), nullable=True),
        sa.Column('name', sa.String(100), nullable=True),
        sa.Column('nickname', sa.String(100), nullable=True),
        sa.Column('role', user_role, nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_user_kakao_id', 'user', ['kakao_id'], unique=True)
    op.create_index('ix_user_email', 'user', ['email'], unique=True)

    op.create_table(
        'community',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('title', sa.String(100), nullable=False),
        sa.Column('description', sa.String(500), nullable=True),
        sa.Column('slug', sa.String(50), nullable=False),
        sa.Column('status', community_status, nullable=False),
        sa.Column('is_private', sa.Boolean(), nullable=False),
        sa.Column('max_members', sa.Integer(), nullable=True),
        sa.Column('default_work_fee', sa.Numeric(5, 2), nullable=True),
        sa.Column('default_support_fee', sa.Numeric(5, 2), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_community_slug', 'community', ['slug'], unique=True)

    op.create_table(
        'community_member',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('user.id', ondelete='CASCADE'), nullable=False),
        sa.Column('community_id', sa.Integer(), sa.ForeignKey('community.id', ondelete='CASCADE'), nullable=False),
        sa.Column('role', community_role, nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('joined_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('invited_by', sa.Integer(), sa.ForeignKey('user.id', ondelete='SET NULL'), nullable=True),
        sa.UniqueConstraint('user_id', 'community_id', name='uq_community_member_user_community'),
    )
    op.create_index('ix_community_member_user_id', 'community_member', ['user_id'])
    op.create_index('ix_community_member_community_id', 'community_member', ['community_id'])

    op.create_table(
        'job_post',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('type', job_post_type, nullable=False),
        sa.Column('category', job_post_category, nullable=False),
        sa.Column('author_id', sa.Integer(), sa.ForeignKey('user.id', ondelete='CASCADE'), nullable=False),
        sa.Column('community_id', sa.Integer(), sa.ForeignKey('community.id', ondelete='CASCADE'), nullable=True),
        sa.Column('designated_user_id', sa.Integer(), sa.ForeignKey('user.id', ondelete='CASCADE'), nullable=True),
        # SKY
        sa.Column('equipment_type', sa.String(50), nullable=True),
        sa.Column('equipment_lengths', sa.JSON(), nullable=True),
        # LADDER
        sa.Column('ladder_type', ladder_type, nullable=True),
        sa.Column('machine_type', sa.String(100), nullable=True),
        sa.Column('luggage_volume', sa.String(20), nullable=True),
        sa.Column('work_floor', sa.Integer(), nullable=True),
        sa.Column('overall_height', sa.Integer(), nullable=True),
        sa.Column('ladder_work_duration', sa.String(50), nullable=True),
        sa.Column('ladder_work_hours', sa.Integer(), nullable=True),
        sa.Column('moving_fee', sa.Numeric(12, 2), nullable=True),
        sa.Column('on_site_fee', sa.Numeric(12, 2), nullable=True),
        # scheduling
        sa.Column('work_date_type', work_date_type, nullable=True),
        sa.Column('work_date', sa.Date(), nullable=True),
        sa.Column('arrival_time', sa.String(5), nullable=True),
        sa.Column('work_schedule', sa.String(100), nullable=True),
        sa.Column('custom_hours', sa.Integer(), nullable=True),
        # pricing
        sa.Column('work_cost', sa.Numeric(12, 2), nullable=False),
        sa.Column('is_night_work', sa.Boolean(), nullable=False),
        sa.Column('price_adjustment', sa.Integer(), nullable=True),
        sa.Column('with_fee', sa.Boolean(), nullable=False),
        sa.Column('total_work_fee', sa.Numeric(12, 2), nullable=True),
        sa.Column('unit_price_fee', sa.Numeric(12, 2), nullable=True),
        sa.Column('community_work_fee', sa.Numeric(5, 2), nullable=True),
        sa.Column('community_support_fee', sa.Numeric(5, 2), nullable=True),
        # payment
        sa.Column('payment_method', payment_method, nullable=False),
        sa.Column('expected_payment_date', sa.String(50), nullable=False),
        # contact
        sa.Column('site_address', sa.Text(), nullable=False),
        sa.Column('contact_number', sa.String(30), nullable=False),
        sa.Column('work_contents', sa.Text(), nullable=True),
        sa.Column('delivery_info', sa.Text(), nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_job_post_author_id', 'job_post', ['author_id'])
    op.create_index('ix_job_post_community_id', 'job_post', ['community_id'])
    op.create_index('ix_job_post_designated_user_id', 'job_post', ['designated_user_id'])
    op.create_index('ix_job_post_created_at', 'job_post', ['created_at'])
    op.create_index('ix_job_post_type_created', 'job_post', ['type', 'created_at'])

    op.create_table(
        'job_post_options',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('job_post_id', sa.Integer(), sa.ForeignKey('job_post.id', ondelete='CASCADE'), nullable=False),
        sa.Column('loading_unloading_service', loading_unloading_service, nullable=True),
        sa.Column('travel_distance', travel_distance, nullable=True),
        sa.Column('dump_service', sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint('job_post_id'),
    )


def downgrade() -> None:
    op.drop_table('job_post_options')
    op.drop_index('ix_job_post_type_created', table_name='job_post')
    op.drop_index('ix_job_post_created_at', table_name='job_post')
    op.drop_index('ix_job_post_designated_user_id', table_name='job_post')
    op.drop_index('ix_job_post_community_id', table_name='job_post')
    op.drop_index('ix_job_post_author_id', table_name='job_post')
    op.drop_table('job_post')
    op.drop_index('ix_community_member_community_id', table_name='community_member')
    op.drop_index('ix_community_member_user_id', table_name='community_member')
    op.drop_table('community_member')
    op.drop_index('ix_community_slug', table_name='community')
    op.drop_table('community')
    op.drop_index('ix_user_email', table_name='user')
    op.drop_index('ix_user_kakao_id', table_name='user')
    op.drop_table('user')

    bind = op.get_bind()
    for enum in (
        travel_distance, loading_unloading_service, payment_method, work_date_type, ladder_type,
        job_post_category, job_post_type, community_role, community_status, user_role,
    ):
        enum.drop(bind, checkfirst=True)
