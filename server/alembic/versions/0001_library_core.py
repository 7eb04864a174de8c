"""Library core tables: members, attendance, dues and the activity log."""

from alembic import op
import sqlalchemy as sa


revision = "0001_library_core"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "admins",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("uid", sa.String(length=64), nullable=False, unique=True),
        sa.Column("email", sa.String(length=255), nullable=False, unique=True),
        sa.Column("full_name", sa.String(length=255), nullable=True),
        sa.Column("hashed_password", sa.String(length=255), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("NOW()")),
    )
    op.create_index("ix_admins_uid", "admins", ["uid"])
    op.create_index("ix_admins_email", "admins", ["email"])

    member_status = sa.Enum("active", "inactive", name="member_status")
    op.create_table(
        "members",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("uid", sa.String(length=64), nullable=False, unique=True),
        sa.Column("name", sa.String(length=150), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False, unique=True),
        sa.Column("phone", sa.String(length=25), nullable=False),
        sa.Column("address", sa.String(length=255), nullable=True),
        sa.Column("join_date", sa.Date(), nullable=False),
        sa.Column("seat_number", sa.String(length=20), nullable=True),
        sa.Column("locker_number", sa.String(length=20), nullable=True),
        sa.Column("shift", sa.String(length=30), nullable=True),
        sa.Column("monthly_fee", sa.Integer(), nullable=False),
        sa.Column("status", member_status, nullable=False, server_default="active"),
        sa.Column("profile_pic", sa.Text(), nullable=True),
        sa.Column("hashed_password", sa.String(length=255), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("NOW()")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("NOW()")),
    )
    op.create_index("ix_members_uid", "members", ["uid"])
    op.create_index("ix_members_email", "members", ["email"])

    op.create_table(
        "attendance",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("member_id", sa.Integer(), nullable=False),
        sa.Column("member_name", sa.String(length=150), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("entry_time", sa.Time(), nullable=False),
        sa.Column("exit_time", sa.Time(), nullable=True),
        sa.Column("duration", sa.Integer(), nullable=True),
        sa.Column("open_slot", sa.String(length=40), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("NOW()")),
        sa.UniqueConstraint("open_slot", name="uq_attendance_open_slot"),
    )
    op.create_index("ix_attendance_member_id", "attendance", ["member_id"])
    op.create_index("ix_attendance_date", "attendance", ["date"])

    fee_status = sa.Enum("pending", "overdue", "paid", name="fee_status")
    op.create_table(
        "dues",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("member_id", sa.Integer(), nullable=False),
        sa.Column("member_name", sa.String(length=150), nullable=False),
        sa.Column("period_start", sa.Date(), nullable=False),
        sa.Column("period_end", sa.Date(), nullable=False),
        sa.Column("amount", sa.Integer(), nullable=False),
        sa.Column("due_date", sa.Date(), nullable=False),
        sa.Column("status", fee_status, nullable=False, server_default="pending"),
        sa.Column("paid_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("receipt_number", sa.String(length=40), nullable=True, unique=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("NOW()")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("NOW()")),
        sa.UniqueConstraint("member_id", "period_start", name="uq_dues_member_period_start"),
    )
    op.create_index("ix_dues_member_id", "dues", ["member_id"])
    op.create_index("ix_dues_due_date", "dues", ["due_date"])

    activity_type = sa.Enum("entry", "exit", "payment", "member_added", "member_removed", name="activity_type")
    op.create_table(
        "activities",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("type", activity_type, nullable=False),
        sa.Column("member_id", sa.Integer(), nullable=False),
        sa.Column("member_name", sa.String(length=150), nullable=False),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("NOW()")),
        sa.Column("details", sa.String(length=500), nullable=True),
    )
    op.create_index("ix_activities_member_id", "activities", ["member_id"])
    op.create_index("ix_activities_timestamp", "activities", ["timestamp"])


def downgrade() -> None:
    op.drop_index("ix_activities_timestamp", table_name="activities")
    op.drop_index("ix_activities_member_id", table_name="activities")
    op.drop_table("activities")
    op.drop_index("ix_dues_due_date", table_name="dues")
    op.drop_index("ix_dues_member_id", table_name="dues")
    op.drop_table("dues")
    op.drop_index("ix_attendance_date", table_name="attendance")
    op.drop_index("ix_attendance_member_id", table_name="attendance")
    op.drop_table("attendance")
    op.drop_index("ix_members_email", table_name="members")
    op.drop_index("ix_members_uid", table_name="members")
    op.drop_table("members")
    op.drop_index("ix_admins_email", table_name="admins")
    op.drop_index("ix_admins_uid", table_name="admins")
    op.drop_table("admins")

    bind = op.get_bind()
    for enum_name in ("activity_type", "fee_status", "member_status"):
        sa.Enum(name=enum_name).drop(bind, checkfirst=True)
