"""initial schema

Revision ID: 3c1f0a9d2b7e
Revises: 
Create Date: 2026-10-18 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '3c1f0a9d2b7e'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

memberrole = sa.Enum('member', 'fellowship_manager', name='memberrole')
gender = sa.Enum('male', 'female', name='gender')
registrationmode = sa.Enum('new_member', 'readmission', name='registrationmode')
tagtype = sa.Enum('system', 'custom', name='tagtype')
eventtype = sa.Enum('tuesday_fellowship', 'thursday_phaneroo', name='eventtype')
attendancemethod = sa.Enum('qr', 'fellowship_number', 'manual', name='attendancemethod')
pendingstatus = sa.Enum('pending', 'approved', 'rejected', name='pendingstatus')
emailstatus = sa.Enum('pending', 'processing', 'completed', 'failed', name='emailstatus')


def _timestamps(updated: bool = False):
    cols = [sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False)]
    if updated:
        cols.append(sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False))
    return cols


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'courses',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(200), nullable=False, unique=True),
        sa.Column('code', sa.String(20), nullable=False, unique=True),
        sa.Column('duration_years', sa.Integer(), nullable=False),
        *_timestamps(),
    )
    op.create_table(
        'regions',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(100), nullable=False, unique=True),
        *_timestamps(),
    )
    op.create_table(
        'residences',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(150), nullable=False, unique=True),
        *_timestamps(),
    )
    op.create_table(
        'academic_periods',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('academic_year', sa.String(9), nullable=False),
        sa.Column('period_number', sa.Integer(), nullable=False),
        sa.Column('period_name', sa.String(100), nullable=False),
        sa.Column('start_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('end_date', sa.DateTime(timezone=True), nullable=False),
        *_timestamps(updated=True),
        sa.UniqueConstraint('academic_year', 'period_number', name='uq_academic_period_year_number'),
    )
    op.create_index('ix_academic_periods_start_end', 'academic_periods', ['start_date', 'end_date'])

    op.create_table(
        'members',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('full_name', sa.String(150), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('phone_number', sa.String(30), nullable=False),
        sa.Column('gender', gender, nullable=False),
        sa.Column('fellowship_number', sa.String(6), nullable=False),
        sa.Column('password', sa.String(255), nullable=False),
        sa.Column('qr_code', sa.String(64), nullable=False),
        sa.Column('role', memberrole, nullable=False),
        sa.Column('registration_mode', registrationmode, nullable=False),
        sa.Column('registration_date', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('initial_year_of_study', sa.Integer(), nullable=True),
        sa.Column('initial_semester', sa.Integer(), nullable=True),
        sa.Column('course_id', sa.Integer(), sa.ForeignKey('courses.id'), nullable=True),
        sa.Column('region_id', sa.Integer(), sa.ForeignKey('regions.id'), nullable=False),
        sa.Column('residence_id', sa.Integer(), sa.ForeignKey('residences.id'), nullable=True),
        sa.Column('hostel_name', sa.String(150), nullable=True),
        sa.Column('is_deleted', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('failed_login_attempts', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('locked_until', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(updated=True),
    )
    op.create_index('ix_members_email', 'members', ['email'], unique=True)
    op.create_index('ix_members_fellowship_number', 'members', ['fellowship_number'], unique=True)
    op.create_index('ix_members_qr_code', 'members', ['qr_code'], unique=True)

    op.create_table(
        'tags',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('color', sa.String(7), nullable=True),
        sa.Column('type', tagtype, nullable=False),
        sa.Column('is_system', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('show_on_registration', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_by', sa.String(50), nullable=True),
        *_timestamps(updated=True),
    )
    op.create_index('ix_tags_name', 'tags', ['name'], unique=True)

    # no unique key on active rows; one active row per (member, tag) is kept by the service layer
    op.create_table(
        'member_tags',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('member_id', sa.Integer(), sa.ForeignKey('members.id'), nullable=False),
        sa.Column('tag_id', sa.Integer(), sa.ForeignKey('tags.id'), nullable=False),
        sa.Column('assigned_by', sa.String(50), nullable=False),
        sa.Column('assigned_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('removed_by', sa.String(50), nullable=True),
        sa.Column('removed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
    )
    op.create_index('ix_member_tags_member_id', 'member_tags', ['member_id'])
    op.create_index('ix_member_tags_tag_id', 'member_tags', ['tag_id'])
    op.create_index('ix_member_tags_member_tag_active', 'member_tags', ['member_id', 'tag_id', 'is_active'])

    op.create_table(
        'events',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('start_time', sa.String(5), nullable=False),
        sa.Column('end_time', sa.String(5), nullable=False),
        sa.Column('type', eventtype, nullable=False),
        sa.Column('venue', sa.String(200), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('allow_guest_checkin', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('is_recurring', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('recurrence_rule', sa.String(255), nullable=True),
        sa.Column('created_by', sa.Integer(), sa.ForeignKey('members.id'), nullable=True),
        *_timestamps(updated=True),
    )
    op.create_index('ix_events_date', 'events', ['date'])

    op.create_table(
        'attendances',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('member_id', sa.Integer(), sa.ForeignKey('members.id'), nullable=False),
        sa.Column('event_id', sa.Integer(), sa.ForeignKey('events.id'), nullable=False),
        sa.Column('method', attendancemethod, nullable=False),
        sa.Column('checked_in_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('recorded_by', sa.Integer(), sa.ForeignKey('members.id'), nullable=True),
        sa.Column('synced_offline', sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
        sa.UniqueConstraint('member_id', 'event_id', name='uq_attendance_member_event'),
    )
    op.create_index('ix_attendances_member_id', 'attendances', ['member_id'])
    op.create_index('ix_attendances_event_id', 'attendances', ['event_id'])

    op.create_table(
        'guest_attendances',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('event_id', sa.Integer(), sa.ForeignKey('events.id'), nullable=False),
        sa.Column('guest_name', sa.String(150), nullable=False),
        sa.Column('guest_phone', sa.String(30), nullable=True),
        sa.Column('purpose', sa.Text(), nullable=True),
        sa.Column('checked_in_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('recorded_by', sa.Integer(), sa.ForeignKey('members.id'), nullable=True),
    )
    op.create_index('ix_guest_attendances_event_id', 'guest_attendances', ['event_id'])

    op.create_table(
        'event_volunteers',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('event_id', sa.Integer(), sa.ForeignKey('events.id'), nullable=False),
        sa.Column('member_id', sa.Integer(), sa.ForeignKey('members.id'), nullable=False),
        sa.Column('assigned_by', sa.Integer(), sa.ForeignKey('members.id'), nullable=True),
        sa.Column('assigned_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint('event_id', 'member_id', name='uq_event_volunteer'),
    )
    op.create_index('ix_event_volunteers_event_id', 'event_volunteers', ['event_id'])
    op.create_index('ix_event_volunteers_member_id', 'event_volunteers', ['member_id'])

    op.create_table(
        'ministry_teams',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(150), nullable=False, unique=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('leader_id', sa.Integer(), sa.ForeignKey('members.id'), nullable=True),
        sa.Column('leader_tag_name', sa.String(120), nullable=False),
        sa.Column('member_tag_name', sa.String(120), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(updated=True),
    )
    op.create_table(
        'ministry_team_members',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('team_id', sa.Integer(), sa.ForeignKey('ministry_teams.id'), nullable=False),
        sa.Column('member_id', sa.Integer(), sa.ForeignKey('members.id'), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('joined_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint('team_id', 'member_id', name='uq_team_member'),
    )
    op.create_index('ix_ministry_team_members_team_id', 'ministry_team_members', ['team_id'])
    op.create_index('ix_ministry_team_members_member_id', 'ministry_team_members', ['member_id'])

    op.create_table(
        'family_groups',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(150), nullable=False, unique=True),
        sa.Column('region_id', sa.Integer(), sa.ForeignKey('regions.id'), nullable=False),
        sa.Column('family_head_id', sa.Integer(), sa.ForeignKey('members.id'), nullable=True),
        sa.Column('head_tag_name', sa.String(120), nullable=False),
        sa.Column('member_tag_name', sa.String(120), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(updated=True),
    )
    op.create_table(
        'family_members',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('family_id', sa.Integer(), sa.ForeignKey('family_groups.id'), nullable=False),
        sa.Column('member_id', sa.Integer(), sa.ForeignKey('members.id'), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('joined_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint('family_id', 'member_id', name='uq_family_member'),
    )
    op.create_index('ix_family_members_family_id', 'family_members', ['family_id'])
    op.create_index('ix_family_members_member_id', 'family_members', ['member_id'])

    op.create_table(
        'registration_tokens',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('token', sa.String(64), nullable=False),
        sa.Column('label', sa.String(150), nullable=True),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('max_uses', sa.Integer(), nullable=True),
        sa.Column('used_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_by', sa.Integer(), sa.ForeignKey('members.id'), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_registration_tokens_token', 'registration_tokens', ['token'], unique=True)

    op.create_table(
        'pending_members',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('token_id', sa.Integer(), sa.ForeignKey('registration_tokens.id'), nullable=True),
        sa.Column('full_name', sa.String(150), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('phone_number', sa.String(30), nullable=False),
        sa.Column('gender', gender, nullable=False),
        sa.Column('registration_mode', registrationmode, nullable=False),
        sa.Column('course_id', sa.Integer(), sa.ForeignKey('courses.id'), nullable=True),
        sa.Column('region_id', sa.Integer(), sa.ForeignKey('regions.id'), nullable=False),
        sa.Column('residence_id', sa.Integer(), sa.ForeignKey('residences.id'), nullable=True),
        sa.Column('hostel_name', sa.String(150), nullable=True),
        sa.Column('initial_year_of_study', sa.Integer(), nullable=True),
        sa.Column('initial_semester', sa.Integer(), nullable=True),
        sa.Column('tag_ids', sa.JSON(), nullable=True),
        sa.Column('status', pendingstatus, nullable=False),
        sa.Column('reviewed_by', sa.Integer(), sa.ForeignKey('members.id'), nullable=True),
        sa.Column('reviewed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('review_note', sa.Text(), nullable=True),
        sa.Column('member_id', sa.Integer(), sa.ForeignKey('members.id'), nullable=True),
        sa.Column('submitted_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_pending_members_email', 'pending_members', ['email'])
    op.create_index('ix_pending_members_status', 'pending_members', ['status'])

    op.create_table(
        'email_queue',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('subject', sa.String(255), nullable=False),
        sa.Column('html', sa.Text(), nullable=True),
        sa.Column('text', sa.Text(), nullable=False),
        sa.Column('status', emailstatus, nullable=False),
        sa.Column('attempts', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('last_attempt', sa.DateTime(timezone=True), nullable=True),
        sa.Column('error', sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_email_queue_status', 'email_queue', ['status'])


def downgrade() -> None:
    """Downgrade schema."""
    for table in (
        'email_queue', 'pending_members', 'registration_tokens',
        'family_members', 'family_groups', 'ministry_team_members', 'ministry_teams',
        'event_volunteers', 'guest_attendances', 'attendances', 'events',
        'member_tags', 'tags', 'members',
        'academic_periods', 'residences', 'regions', 'courses',
    ):
        op.drop_table(table)

    bind = op.get_bind()
    for enum in (
        emailstatus, pendingstatus, attendancemethod, eventtype,
        tagtype, registrationmode, gender, memberrole,
    ):
        enum.drop(bind, checkfirst=True)
