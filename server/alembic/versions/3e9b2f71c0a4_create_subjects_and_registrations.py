"""Create subjects and registrations

Revision ID: 3e9b2f71c0a4
Revises:
Create Date: 2026-10-19 09:12:44.305118

"""

from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "3e9b2f71c0a4"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

KINDS = ("event", "home_group", "serving")


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "subjects",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("kind", sa.Enum(*KINDS, name="subject_kind"), nullable=False),
        sa.Column("title", sa.VARCHAR(), nullable=False),
        sa.Column("location", sa.VARCHAR(), nullable=True),
        sa.Column("starts_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("description", sa.VARCHAR(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_subjects_kind"), "subjects", ["kind"], unique=False)
    op.create_index(op.f("ix_subjects_title"), "subjects", ["title"], unique=False)

    op.create_table(
        "registrations",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("kind", sa.Enum(*KINDS, name="registration_kind"), nullable=False),
        sa.Column("subject_id", sa.Integer(), nullable=False),
        sa.Column("email", sa.VARCHAR(), nullable=False),
        sa.Column("name", sa.VARCHAR(), nullable=True),
        sa.Column("phone", sa.VARCHAR(), nullable=True),
        sa.Column(
            "status",
            sa.Enum("pending", "confirmed", "declined", name="registration_status"),
            nullable=False,
            server_default="pending",
        ),
        sa.Column("user_id", sa.VARCHAR(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["subject_id"], ["subjects.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "kind", "subject_id", "email", name="uq_registrations_kind_subject_email"
        ),
    )
    op.create_index(op.f("ix_registrations_kind"), "registrations", ["kind"], unique=False)
    op.create_index(
        op.f("ix_registrations_subject_id"), "registrations", ["subject_id"], unique=False
    )
    op.create_index(op.f("ix_registrations_email"), "registrations", ["email"], unique=False)
    op.create_index(
        op.f("ix_registrations_user_id"), "registrations", ["user_id"], unique=False
    )
    op.create_index(
        "idx_registrations_kind_status", "registrations", ["kind", "status"], unique=False
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index("idx_registrations_kind_status", table_name="registrations")
    op.drop_index(op.f("ix_registrations_user_id"), table_name="registrations")
    op.drop_index(op.f("ix_registrations_email"), table_name="registrations")
    op.drop_index(op.f("ix_registrations_subject_id"), table_name="registrations")
    op.drop_index(op.f("ix_registrations_kind"), table_name="registrations")
    op.drop_table("registrations")
    op.drop_index(op.f("ix_subjects_title"), table_name="subjects")
    op.drop_index(op.f("ix_subjects_kind"), table_name="subjects")
    op.drop_table("subjects")

    sa.Enum(name="registration_status").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="registration_kind").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="subject_kind").drop(op.get_bind(), checkfirst=True)
