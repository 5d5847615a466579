"""Initial LMS schema: accounts, classes, subjects, materials, messaging

Revision ID: a1c4e7f20b31
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'a1c4e7f20b31'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create every table the application uses."""
    op.create_table(
        'classes',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('description', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_classes_id', 'classes', ['id'])
    op.create_index('ix_classes_name', 'classes', ['name'], unique=True)

    op.create_table(
        'users',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('hashed_password', sa.String(), nullable=False),
        sa.Column('contact_no', sa.String(), nullable=False),
        sa.Column('profile_pic', sa.String(), nullable=True),
        sa.Column('role', sa.String(), nullable=False),
        sa.Column('status', sa.String(), nullable=False),
        sa.Column('roll_no', sa.String(), nullable=True),
        sa.Column('class_id', sa.String(), sa.ForeignKey('classes.id'), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_users_id', 'users', ['id'])
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_role', 'users', ['role'])
    op.create_index('ix_users_status', 'users', ['status'])
    op.create_index('ix_users_class_id', 'users', ['class_id'])

    op.create_table(
        'class_teachers',
        sa.Column('class_id', sa.String(), sa.ForeignKey('classes.id'), nullable=False),
        sa.Column('teacher_id', sa.String(), sa.ForeignKey('users.id'), nullable=False),
        sa.PrimaryKeyConstraint('class_id', 'teacher_id'),
    )

    op.create_table(
        'subjects',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('description', sa.String(), nullable=True),
        sa.Column('class_id', sa.String(), sa.ForeignKey('classes.id'), nullable=False),
        sa.Column('teacher_id', sa.String(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name', 'class_id', name='uq_subject_name_class'),
    )
    op.create_index('ix_subjects_id', 'subjects', ['id'])
    op.create_index('ix_subjects_name', 'subjects', ['name'])
    op.create_index('ix_subjects_class_id', 'subjects', ['class_id'])
    op.create_index('ix_subjects_teacher_id', 'subjects', ['teacher_id'])

    op.create_table(
        'materials',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('title', sa.String(), nullable=False),
        sa.Column('description', sa.String(), nullable=True),
        sa.Column('type', sa.String(), nullable=False),
        sa.Column('file_url', sa.String(), nullable=False),
        sa.Column('subject_id', sa.String(), sa.ForeignKey('subjects.id'), nullable=False),
        sa.Column('created_by', sa.String(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_materials_id', 'materials', ['id'])
    op.create_index('ix_materials_subject_id', 'materials', ['subject_id'])

    op.create_table(
        'communications',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('sender_id', sa.String(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('recipient_id', sa.String(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('class_id', sa.String(), sa.ForeignKey('classes.id'), nullable=True),
        sa.Column('subject_id', sa.String(), sa.ForeignKey('subjects.id'), nullable=True),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('status', sa.String(), nullable=False),
        sa.Column('parent_id', sa.String(), sa.ForeignKey('communications.id'), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_communications_id', 'communications', ['id'])
    op.create_index('ix_communications_sender_id', 'communications', ['sender_id'])
    op.create_index('ix_communications_recipient_id', 'communications', ['recipient_id'])
    op.create_index('ix_communications_subject_id', 'communications', ['subject_id'])

    op.create_table(
        'notification_outbox',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('event', sa.String(), nullable=False),
        sa.Column('material_id', sa.String(), sa.ForeignKey('materials.id'), nullable=False),
        sa.Column('status', sa.String(), nullable=False),
        sa.Column('attempts', sa.Integer(), nullable=False),
        sa.Column('last_error', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('delivered_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_notification_outbox_id', 'notification_outbox', ['id'])
    op.create_index('ix_notification_outbox_material_id', 'notification_outbox', ['material_id'])
    op.create_index('ix_notification_outbox_status', 'notification_outbox', ['status'])


def downgrade() -> None:
    """Drop every table, children first."""
    op.drop_table('notification_outbox')
    op.drop_table('communications')
    op.drop_table('materials')
    op.drop_table('subjects')
    op.drop_table('class_teachers')
    op.drop_table('users')
    op.drop_table('classes')
