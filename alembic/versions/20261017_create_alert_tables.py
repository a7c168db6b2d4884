"""Create users, cards, alerts, alert channels and audit tables."""

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "20261017_create_alert_tables"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("email", sa.String(length=255), nullable=False, unique=True),
        sa.Column("first_name", sa.String(length=100)),
        sa.Column("last_name", sa.String(length=100)),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("is_superuser", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
    )
    op.create_table(
        "cards",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("creator_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("is_shared", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("archived", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
    )
    op.create_index("ix_cards_creator_id", "cards", ["creator_id"])

    op.create_table(
        "alerts",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("creator_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("card_id", sa.Integer(), sa.ForeignKey("cards.id"), nullable=False),
        sa.Column("alert_condition", sa.Enum("rows", "goal", name="alertcondition"), nullable=False),
        sa.Column("alert_first_only", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("alert_above_goal", sa.Boolean()),
        *_timestamps(),
    )
    op.create_index("ix_alerts_creator_id", "alerts", ["creator_id"])
    op.create_index("ix_alerts_card_id", "alerts", ["card_id"])

    op.create_table(
        "alert_channels",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("alert_id", sa.Integer(), sa.ForeignKey("alerts.id", ondelete="CASCADE"), nullable=False),
        sa.Column("channel_type", sa.Enum("email", "chat", name="channeltype"), nullable=False),
        sa.Column("enabled", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column(
            "schedule_type",
            sa.Enum("hourly", "daily", "weekly", name="scheduletype"),
            nullable=False,
            server_default="hourly",
        ),
        sa.Column("schedule_hour", sa.SmallInteger()),
        sa.Column("schedule_day", sa.String(length=3)),
        sa.Column("details", sa.JSON()),
        *_timestamps(),
    )
    op.create_index("ix_alert_channels_alert_id", "alert_channels", ["alert_id"])

    op.create_table(
        "alert_channel_recipients",
        sa.Column(
            "channel_id",
            sa.Integer(),
            sa.ForeignKey("alert_channels.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    )

    op.create_table(
        "audit_logs",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("actor", sa.String(length=100), nullable=False),
        sa.Column("action", sa.String(length=100), nullable=False),
        sa.Column("entity", sa.String(length=100), nullable=False),
        sa.Column("entity_id", sa.Integer(), nullable=False),
        sa.Column("data_json", sa.JSON(), nullable=False),
        sa.Column("at", sa.DateTime(timezone=True), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_audit_logs_entity", "audit_logs", ["entity", "entity_id"])


def downgrade() -> None:
    op.drop_index("ix_audit_logs_entity", table_name="audit_logs")
    op.drop_table("audit_logs")
    op.drop_table("alert_channel_recipients")
    op.drop_index("ix_alert_channels_alert_id", table_name="alert_channels")
    op.drop_table("alert_channels")
    op.drop_index("ix_alerts_card_id", table_name="alerts")
    op.drop_index("ix_alerts_creator_id", table_name="alerts")
    op.drop_table("alerts")
    op.drop_index("ix_cards_creator_id", table_name="cards")
    op.drop_table("cards")
    op.drop_table("users")
    op.execute("DROP TYPE IF EXISTS scheduletype")
    op.execute("DROP TYPE IF EXISTS channeltype")
    op.execute("DROP TYPE IF EXISTS alertcondition")
