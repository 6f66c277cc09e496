"""Create receptionist tables

Revision ID: create_receptionist_tables
Revises:
Create Date: 2026-10-01

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = 'create_receptionist_tables'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Clients (tenants) and the phone lines they own
    op.create_table(
        'clients',
        sa.Column('id', sa.String(length=100), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('company', sa.String(length=255), nullable=True),
        sa.Column('sales_phone', sa.String(length=50), nullable=True),
        sa.Column('rentals_phone', sa.String(length=50), nullable=True),
        sa.Column('service_phone', sa.String(length=50), nullable=True),
        sa.Column('parts_phone', sa.String(length=50), nullable=True),
        sa.Column('billing_phone', sa.String(length=50), nullable=True),
        sa.Column('vapi_assistant_id', sa.String(length=255), nullable=True),
        sa.Column('custom_prompt', sa.Text(), nullable=True),
        sa.Column('additional_context', sa.Text(), nullable=True),
        sa.Column('first_message_template', sa.Text(), nullable=True),
        sa.Column('agent_name', sa.String(length=50), nullable=False, server_default='Tex'),
        sa.Column('enable_inventory', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('enable_transfers', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id')
    )

    op.create_table(
        'client_phone_lines',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('client_id', sa.String(length=100), nullable=False),
        sa.Column('vapi_phone_number_id', sa.String(length=255), nullable=False),
        sa.Column('phone_number', sa.String(length=50), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['client_id'], ['clients.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_client_phone_lines_id'), 'client_phone_lines', ['id'], unique=False)
    op.create_index(op.f('ix_client_phone_lines_client_id'), 'client_phone_lines', ['client_id'], unique=False)
    op.create_index(
        op.f('ix_client_phone_lines_vapi_phone_number_id'),
        'client_phone_lines',
        ['vapi_phone_number_id'],
        unique=True,
    )

    # Calls keyed by the voice runtime's call id
    op.create_table(
        'calls',
        sa.Column('id', sa.String(length=255), nullable=False),
        sa.Column('client_id', sa.String(length=100), nullable=True),
        sa.Column('phone_number_id', sa.String(length=255), nullable=True),
        sa.Column('caller_phone', sa.String(length=50), nullable=True),
        sa.Column('call_type', sa.String(length=50), nullable=True),
        sa.Column('started_at', sa.DateTime(), nullable=True),
        sa.Column('ended_at', sa.DateTime(), nullable=True),
        sa.Column('duration_seconds', sa.Integer(), nullable=True),
        sa.Column('status', sa.String(length=50), nullable=True),
        sa.Column('ended_reason', sa.String(length=255), nullable=True),
        sa.Column('transferred_to', sa.String(length=50), nullable=True),
        sa.Column('contact_counted', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('transcript', sa.Text(), nullable=True),
        sa.Column('summary', sa.Text(), nullable=True),
        sa.Column('recording_url', sa.Text(), nullable=True),
        sa.Column('stereo_recording_url', sa.Text(), nullable=True),
        sa.Column('success_score', sa.Integer(), nullable=True),
        sa.Column('cost_total', sa.Float(), nullable=True),
        sa.Column('cost_transport', sa.Float(), nullable=True),
        sa.Column('cost_stt', sa.Float(), nullable=True),
        sa.Column('cost_llm', sa.Float(), nullable=True),
        sa.Column('cost_tts', sa.Float(), nullable=True),
        sa.Column('cost_vapi', sa.Float(), nullable=True),
        sa.Column('llm_prompt_tokens', sa.Integer(), nullable=True),
        sa.Column('llm_completion_tokens', sa.Integer(), nullable=True),
        sa.Column('tts_characters', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint(
            'success_score IS NULL OR (success_score >= 1 AND success_score <= 10)',
            name='ck_calls_success_score_range',
        ),
        sa.ForeignKeyConstraint(['client_id'], ['clients.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_calls_client_id'), 'calls', ['client_id'], unique=False)
    op.create_index(op.f('ix_calls_caller_phone'), 'calls', ['caller_phone'], unique=False)
    op.create_index(op.f('ix_calls_status'), 'calls', ['status'], unique=False)

    op.create_table(
        'call_structured_data',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('call_id', sa.String(length=255), nullable=False),
        sa.Column('caller_name', sa.String(length=255), nullable=True),
        sa.Column('caller_company', sa.String(length=255), nullable=True),
        sa.Column('caller_phone', sa.String(length=50), nullable=True),
        sa.Column('caller_email', sa.String(length=255), nullable=True),
        sa.Column('intent_category', sa.String(length=50), nullable=True),
        sa.Column('intent_subcategory', sa.String(length=255), nullable=True),
        sa.Column('machine_make', sa.String(length=100), nullable=True),
        sa.Column('machine_model', sa.String(length=100), nullable=True),
        sa.Column('machine_year', sa.Integer(), nullable=True),
        sa.Column('machine_serial', sa.String(length=100), nullable=True),
        sa.Column('machine_category', sa.String(length=100), nullable=True),
        sa.Column('location', sa.String(length=255), nullable=True),
        sa.Column('timing', sa.String(length=255), nullable=True),
        sa.Column('urgency', sa.String(length=20), nullable=True),
        sa.Column('outcome_type', sa.String(length=50), nullable=True),
        sa.Column('outcome_transferred_to', sa.String(length=50), nullable=True),
        sa.Column('outcome_next_step', sa.Text(), nullable=True),
        sa.Column('outcome_scheduled_callback_time', sa.String(length=255), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('raw_json', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['call_id'], ['calls.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_call_structured_data_id'), 'call_structured_data', ['id'], unique=False)
    op.create_index(op.f('ix_call_structured_data_call_id'), 'call_structured_data', ['call_id'], unique=True)
    op.create_index(
        op.f('ix_call_structured_data_intent_category'), 'call_structured_data', ['intent_category'], unique=False
    )
    op.create_index(op.f('ix_call_structured_data_machine_make'), 'call_structured_data', ['machine_make'], unique=False)
    op.create_index(op.f('ix_call_structured_data_urgency'), 'call_structured_data', ['urgency'], unique=False)
    op.create_index(op.f('ix_call_structured_data_outcome_type'), 'call_structured_data', ['outcome_type'], unique=False)

    # Known callers, one row per phone number
    op.create_table(
        'contacts',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('phone_number', sa.String(length=50), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=True),
        sa.Column('company', sa.String(length=255), nullable=True),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('status', sa.String(length=50), nullable=True, server_default='New'),
        sa.Column('last_machine', sa.String(length=255), nullable=True),
        sa.Column('total_calls', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('first_call_at', sa.DateTime(), nullable=True),
        sa.Column('last_call_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_contacts_id'), 'contacts', ['id'], unique=False)
    op.create_index(op.f('ix_contacts_phone_number'), 'contacts', ['phone_number'], unique=True)
    op.create_index(op.f('ix_contacts_company'), 'contacts', ['company'], unique=False)
    op.create_index(op.f('ix_contacts_last_call_at'), 'contacts', ['last_call_at'], unique=False)

    op.create_table(
        'callback_requests',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('client_id', sa.String(length=100), nullable=False),
        sa.Column('call_id', sa.String(length=255), nullable=True),
        sa.Column('customer_name', sa.String(length=255), nullable=True),
        sa.Column('customer_phone', sa.String(length=50), nullable=False),
        sa.Column('preferred_time', sa.String(length=255), nullable=False),
        sa.Column('reason', sa.Text(), nullable=True),
        sa.Column('department', sa.String(length=50), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='pending'),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('completed_at', sa.DateTime(), nullable=True),
        sa.CheckConstraint(
            "status IN ('pending', 'completed', 'cancelled')",
            name='ck_callback_requests_status',
        ),
        sa.ForeignKeyConstraint(['client_id'], ['clients.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_callback_requests_id'), 'callback_requests', ['id'], unique=False)
    op.create_index(op.f('ix_callback_requests_client_id'), 'callback_requests', ['client_id'], unique=False)
    op.create_index(op.f('ix_callback_requests_call_id'), 'callback_requests', ['call_id'], unique=False)

    # Equipment on the lot
    op.create_table(
        'inventory',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('model', sa.String(length=255), nullable=False),
        sa.Column('category', sa.String(length=100), nullable=False),
        sa.Column('available', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('price_per_day', sa.Float(), nullable=False),
        sa.Column('condition', sa.String(length=20), nullable=True),
        sa.Column('year', sa.Integer(), nullable=True),
        sa.Column('specs', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_inventory_id'), 'inventory', ['id'], unique=False)
    op.create_index(op.f('ix_inventory_model'), 'inventory', ['model'], unique=False)
    op.create_index(op.f('ix_inventory_category'), 'inventory', ['category'], unique=False)


def downgrade() -> None:
    op.drop_index(op.f('ix_inventory_category'), table_name='inventory')
    op.drop_index(op.f('ix_inventory_model'), table_name='inventory')
    op.drop_index(op.f('ix_inventory_id'), table_name='inventory')
    op.drop_table('inventory')

    op.drop_index(op.f('ix_callback_requests_call_id'), table_name='callback_requests')
    op.drop_index(op.f('ix_callback_requests_client_id'), table_name='callback_requests')
    op.drop_index(op.f('ix_callback_requests_id'), table_name='callback_requests')
    op.drop_table('callback_requests')

    op.drop_index(op.f('ix_contacts_last_call_at'), table_name='contacts')
    op.drop_index(op.f('ix_contacts_company'), table_name='contacts')
    op.drop_index(op.f('ix_contacts_phone_number'), table_name='contacts')
    op.drop_index(op.f('ix_contacts_id'), table_name='contacts')
    op.drop_table('contacts')

    op.drop_index(op.f('ix_call_structured_data_outcome_type'), table_name='call_structured_data')
    op.drop_index(op.f('ix_call_structured_data_urgency'), table_name='call_structured_data')
    op.drop_index(op.f('ix_call_structured_data_machine_make'), table_name='call_structured_data')
    op.drop_index(op.f('ix_call_structured_data_intent_category'), table_name='call_structured_data')
    op.drop_index(op.f('ix_call_structured_data_call_id'), table_name='call_structured_data')
    op.drop_index(op.f('ix_call_structured_data_id'), table_name='call_structured_data')
    op.drop_table('call_structured_data')

    op.drop_index(op.f('ix_calls_status'), table_name='calls')
    op.drop_index(op.f('ix_calls_caller_phone'), table_name='calls')
    op.drop_index(op.f('ix_calls_client_id'), table_name='calls')
    op.drop_table('calls')

    op.drop_index(op.f('ix_client_phone_lines_vapi_phone_number_id'), table_name='client_phone_lines')
    op.drop_index(op.f('ix_client_phone_lines_client_id'), table_name='client_phone_lines')
    op.drop_index(op.f('ix_client_phone_lines_id'), table_name='client_phone_lines')
    op.drop_table('client_phone_lines')

    op.drop_table('clients')
