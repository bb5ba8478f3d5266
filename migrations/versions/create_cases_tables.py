"""create cases and case child tables

Revision ID: c4a5e6f7d8b9
Revises:
Create Date: 2025-10-01

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect

# revision identifiers, used by Alembic.
revision = 'c4a5e6f7d8b9'
down_revision = None
branch_labels = None
depends_on = None


def _child_table(name, *columns):
    op.create_table(
        name,
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('case_id', sa.Integer(), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False, server_default='0'),
        *columns,
        sa.ForeignKeyConstraint(['case_id'], ['cases.id'], name=f'fk_{name}_case_id', ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id', name=f'pk_{name}')
    )
    op.create_index(f'ix_{name}_case_id', name, ['case_id'])


def upgrade():
    conn = op.get_bind()
    inspector = inspect(conn)
    tables = inspector.get_table_names()

    if 'user' not in tables:
        op.create_table(
            'user',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('username', sa.String(length=80), nullable=False),
            sa.Column('email', sa.String(length=120), nullable=False),
            sa.Column('password_hash', sa.String(length=256), nullable=True),
            sa.Column('first_name', sa.String(length=80), nullable=False),
            sa.Column('last_name', sa.String(length=80), nullable=False),
            sa.Column('role', sa.String(length=20), nullable=False, server_default='social_worker'),
            sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
            sa.Column('last_login', sa.DateTime(), nullable=True),
            sa.PrimaryKeyConstraint('id', name='pk_user'),
            sa.UniqueConstraint('username', name='uq_user_username'),
            sa.UniqueConstraint('email', name='uq_user_email')
        )

    if 'cases' not in tables:
        text_columns = [
            # Identity
            ('first_name', 100), ('middle_name', 100), ('last_name', 100), ('nickname', 100),
            ('sex', 20), ('age', 10), ('status', 50), ('civil_status', 50), ('religion', 100),
            ('nationality', 100), ('birthplace', 255),
            # Addresses
            ('present_address', 500), ('provincial_address', 500), ('barangay', 100),
            ('municipality', 100), ('province', 100),
            # Referral
            ('source_of_referral', 255), ('other_source_of_referral', 255),
            ('address_and_tel', 500), ('relation_to_client', 100),
            # Program
            ('case_type', 100), ('program_type', 100), ('assigned_house_parent', 255),
            ('admission_month', 20), ('admission_year', 10),
            ('marriage_date_place', 255),
            ('guardian_relation', 100), ('guardian_deceased', 50),
        ]
        for parent in ('father', 'mother', 'guardian'):
            text_columns += [
                (f'{parent}_name', 255), (f'{parent}_age', 10), (f'{parent}_education', 255),
                (f'{parent}_occupation', 255), (f'{parent}_other_skills', 255),
                (f'{parent}_address', 500), (f'{parent}_income', 100), (f'{parent}_living', 50),
            ]
        narrative_columns = [
            'client_description', 'parents_description', 'problem_presented', 'brief_history',
            'economic_situation', 'medical_history', 'family_background', 'assessment',
            'recommendation',
        ]

        op.create_table(
            'cases',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('name', sa.String(length=255), nullable=True),
            sa.Column('created_by_id', sa.Integer(), nullable=True),
            sa.Column('birthdate', sa.Date(), nullable=True),
            sa.Column('date_of_referral', sa.Date(), nullable=True),
            *[sa.Column(name, sa.String(length=length), nullable=True) for name, length in text_columns],
            sa.Column('married_in_church', sa.Boolean(), nullable=True),
            sa.Column('live_in_common_law', sa.Boolean(), nullable=True),
            sa.Column('civil_marriage', sa.Boolean(), nullable=True),
            sa.Column('separated', sa.Boolean(), nullable=True),
            *[sa.Column(name, sa.Text(), nullable=True) for name in narrative_columns],
            sa.Column('checklist', sa.JSON(), nullable=True),
            sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
            sa.Column('last_updated', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
            sa.ForeignKeyConstraint(['created_by_id'], ['user.id'], name='fk_cases_created_by_id', ondelete='SET NULL'),
            sa.PrimaryKeyConstraint('id', name='pk_cases')
        )

    if 'family_members' not in tables:
        _child_table(
            'family_members',
            sa.Column('name', sa.String(length=255), nullable=True),
            sa.Column('relation', sa.String(length=100), nullable=True),
            sa.Column('age', sa.String(length=10), nullable=True),
            sa.Column('sex', sa.String(length=20), nullable=True),
            sa.Column('status', sa.String(length=50), nullable=True),
            sa.Column('education', sa.String(length=255), nullable=True),
            sa.Column('address', sa.String(length=500), nullable=True),
            sa.Column('occupation', sa.String(length=255), nullable=True),
            sa.Column('income', sa.String(length=100), nullable=True),
        )

    if 'extended_family' not in tables:
        _child_table(
            'extended_family',
            sa.Column('name', sa.String(length=255), nullable=True),
            sa.Column('relationship', sa.String(length=100), nullable=True),
            sa.Column('age', sa.String(length=10), nullable=True),
            sa.Column('sex', sa.String(length=20), nullable=True),
            sa.Column('status', sa.String(length=50), nullable=True),
            sa.Column('education', sa.String(length=255), nullable=True),
            sa.Column('occupation', sa.String(length=255), nullable=True),
            sa.Column('income', sa.String(length=100), nullable=True),
        )

    if 'educational_attainment' not in tables:
        _child_table(
            'educational_attainment',
            sa.Column('level', sa.String(length=100), nullable=True),
            sa.Column('school_name', sa.String(length=255), nullable=True),
            sa.Column('school_address', sa.String(length=500), nullable=True),
            sa.Column('year_completed', sa.String(length=20), nullable=True),
        )

    if 'sacramental_records' not in tables:
        _child_table(
            'sacramental_records',
            sa.Column('sacrament', sa.String(length=100), nullable=True),
            sa.Column('date_received', sa.Date(), nullable=True),
            sa.Column('place_parish', sa.String(length=255), nullable=True),
        )

    if 'agencies_persons' not in tables:
        _child_table(
            'agencies_persons',
            sa.Column('name', sa.String(length=255), nullable=True),
            sa.Column('address_date_duration', sa.String(length=500), nullable=True),
            sa.Column('services_received', sa.Text(), nullable=True),
        )

    if 'life_skills' not in tables:
        _child_table(
            'life_skills',
            sa.Column('activity', sa.String(length=255), nullable=True),
            sa.Column('date_completed', sa.Date(), nullable=True),
            sa.Column('performance_rating', sa.String(length=50), nullable=True),
            sa.Column('notes', sa.Text(), nullable=True),
        )

    if 'vital_signs' not in tables:
        _child_table(
            'vital_signs',
            sa.Column('date_recorded', sa.Date(), nullable=True),
            sa.Column('blood_pressure', sa.String(length=20), nullable=True),
            sa.Column('heart_rate', sa.String(length=20), nullable=True),
            sa.Column('temperature', sa.String(length=20), nullable=True),
            sa.Column('weight', sa.String(length=20), nullable=True),
            sa.Column('height', sa.String(length=20), nullable=True),
            sa.Column('notes', sa.Text(), nullable=True),
        )


def downgrade():
    for name in ('vital_signs', 'life_skills', 'agencies_persons', 'sacramental_records',
                 'educational_attainment', 'extended_family', 'family_members'):
        op.drop_index(f'ix_{name}_case_id', table_name=name)
        op.drop_table(name)
    op.drop_table('cases')
    op.drop_table('user')
