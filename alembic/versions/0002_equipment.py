"""equipment: vehicles registered by users

Revision ID: 0002_equipment
Revises: 0001_initial
Create Date: 2025-09-30

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '0002_equipment'
down_revision = '0001_initial'
branch_labels = None
depends_on = None


# free-text fields copied from the vehicle-registry lookup
REGISTRY_COLUMNS = (
    'result_cd',
    'result_mg',
    'car_regno',
    'adm_regno',
    'erase_date',
    'car_name',
    'car_type',
    'car_vinary_no',
    'mover_type',
    'use',
    'model_year',
    'color',
    'source_gb',
    'first_reg_date',
    'detail_type',
    'product_date',
    'last_owner',
    'regno',
    'locate_use',
    'check_exp_date',
    'confirm_date',
    'close_date',
    'print_name',
    'gd_count',
    'resp_owner_data_info',
    'main_no',
    'sub_no',
    'detail_reg_no',
    'detail_regdate',
    'receipt_no',
    'main_chk',
    'gdetail_text',
    'eb_count',
    'resp_mortgage_data_info',
    'eb_no',
    'mortgage_no',
    'mortgagee_name',
    'mortgagee_addr',
    'mortgagor_name',
    'mortgagor_addr',
    'debtor_name',
    'debtor_addr',
    'bond_amount',
    'mortgage_date',
    'mortgage_erase',
    'mortgage_close',
    'ed1_count',
    'resp_mortgage_dt1_info',
    'rangking',
    'eb_detail_gb',
    'edetail_regdate',
    'edetail_text',
    'ed2_count',
    'resp_mortgage_dt2_info',
    'edetail_type',
    'edetail_carno',
    'edetail_setdate',
    'edetail_erase_date',
)


def upgrade() -> None:
    op.create_table(
        'equipment',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('user.id', ondelete='CASCADE'), nullable=False),
        sa.Column('type', sa.String(100), nullable=False),
        sa.Column('tonnage', sa.String(50), nullable=False),
        sa.Column('length', sa.Text(), nullable=True),
        sa.Column('axle_length', sa.Text(), nullable=True),
        sa.Column('height', sa.String(50), nullable=False),
        sa.Column('options', sa.Text(), nullable=True),
        *[sa.Column(name, sa.Text(), nullable=True) for name in REGISTRY_COLUMNS],
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_equipment_user_id', 'equipment', ['user_id'])
    op.create_index('ix_equipment_type', 'equipment', ['type'])
    op.create_index('ix_equipment_created_at', 'equipment', ['created_at'])


def downgrade() -> None:
    op.drop_index('ix_equipment_created_at', table_name='equipment')
    op.drop_index('ix_equipment_type', table_name='equipment')
    op.drop_index('ix_equipment_user_id', table_name='equipment')
    op.drop_table('equipment')
