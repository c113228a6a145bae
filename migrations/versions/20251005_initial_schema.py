"""Initial expense approval schema

Revision ID: 20251005_initial
Revises: 
Create Date: 2025-10-05 10:12:41.118204

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '20251005_initial'
down_revision = None
branch_labels = None
depends_on = None


user_role = sa.Enum('ADMIN', 'MANAGER', 'EMPLOYEE', name='user_role')
expense_status = sa.Enum('DRAFT', 'PENDING', 'APPROVED', 'REJECTED', name='expense_status')
approval_decision = sa.Enum('APPROVED', 'REJECTED', name='approval_decision')


def upgrade():
    op.create_table(
        'companies',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(length=255), nullable=False, unique=True),
        sa.Column('country', sa.String(length=120), nullable=False),
        sa.Column('currency_code', sa.String(length=10), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
    )

    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('role', user_role, nullable=False),
        sa.Column('company_id', sa.Integer(), sa.ForeignKey('companies.id'), nullable=False),
        sa.Column('manager_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('is_manager_approver', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_company_id', 'users', ['company_id'])

    op.create_table(
        'expenses',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('company_id', sa.Integer(), sa.ForeignKey('companies.id'), nullable=False),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('category', sa.String(length=120), nullable=False),
        sa.Column('original_amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('original_currency', sa.String(length=10), nullable=False),
        sa.Column('converted_amount', sa.Numeric(12, 2), nullable=True),
        sa.Column('exchange_rate', sa.Numeric(12, 6), nullable=True),
        sa.Column('status', expense_status, nullable=False),
        sa.Column('current_approver_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('version_id', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_expenses_company_id', 'expenses', ['company_id'])
    op.create_index('ix_expenses_user_id', 'expenses', ['user_id'])
    op.create_index('ix_expenses_category', 'expenses', ['category'])
    op.create_index('ix_expenses_status', 'expenses', ['status'])
    op.create_index('ix_expenses_current_approver_id', 'expenses', ['current_approver_id'])

    op.create_table(
        'expense_lines',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('expense_id', sa.Integer(), sa.ForeignKey('expenses.id'), nullable=False),
        sa.Column('description', sa.String(length=255), nullable=False),
        sa.Column('amount', sa.Numeric(12, 2), nullable=False),
    )
    op.create_index('ix_expense_lines_expense_id', 'expense_lines', ['expense_id'])

    op.create_table(
        'attachments',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('expense_id', sa.Integer(), sa.ForeignKey('expenses.id'), nullable=False),
        sa.Column('filename', sa.String(length=255), nullable=False),
        sa.Column('url', sa.String(length=512), nullable=False),
        sa.Column('content_type', sa.String(length=120), nullable=False),
        sa.Column('size', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_attachments_expense_id', 'attachments', ['expense_id'])

    op.create_table(
        'approval_rules',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('company_id', sa.Integer(), sa.ForeignKey('companies.id'), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('conditions', sa.JSON(), nullable=False),
        sa.Column('approvers', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_approval_rules_company_id', 'approval_rules', ['company_id'])

    op.create_table(
        'approval_history',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('expense_id', sa.Integer(), sa.ForeignKey('expenses.id'), nullable=False),
        sa.Column('approver_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('decision', approval_decision, nullable=False),
        sa.Column('comment', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_approval_history_expense_id', 'approval_history', ['expense_id'])
    op.create_index('ix_approval_history_approver_id', 'approval_history', ['approver_id'])


def downgrade():
    op.drop_index('ix_approval_history_approver_id', table_name='approval_history')
    op.drop_index('ix_approval_history_expense_id', table_name='approval_history')
    op.drop_table('approval_history')
    op.drop_index('ix_approval_rules_company_id', table_name='approval_rules')
    op.drop_table('approval_rules')
    op.drop_index('ix_attachments_expense_id', table_name='attachments')
    op.drop_table('attachments')
    op.drop_index('ix_expense_lines_expense_id', table_name='expense_lines')
    op.drop_table('expense_lines')
    op.drop_index('ix_expenses_current_approver_id', table_name='expenses')
    op.drop_index('ix_expenses_status', table_name='expenses')
    op.drop_index('ix_expenses_category', table_name='expenses')
    op.drop_index('ix_expenses_user_id', table_name='expenses')
    op.drop_index('ix_expenses_company_id', table_name='expenses')
    op.drop_table('expenses')
    op.drop_index('ix_users_company_id', table_name='users')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')
    op.drop_table('companies')

    bind = op.get_bind()
    approval_decision.drop(bind, checkfirst=True)
    expense_status.drop(bind, checkfirst=True)
    user_role.drop(bind, checkfirst=True)
