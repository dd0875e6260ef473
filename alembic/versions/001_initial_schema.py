"""Initial schema: words, word variants and translation sessions.

Revision ID: 001
Revises:
Create Date: 2026-10-17
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

_JSON = sa.JSON().with_variant(JSONB(), "postgresql")


def upgrade() -> None:
    # ── 1. Words ──────────────────────────────────────────────────
    op.create_table(
        "words",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("word", sa.String(255), nullable=False),
        sa.Column("source_language", sa.String(16), nullable=False),
        sa.Column("target_language", sa.String(16), nullable=False),
        sa.Column("translations", _JSON, nullable=False, server_default="[]"),
        sa.Column("transliteration", sa.Text, nullable=True),
        sa.Column("audio_source_file", sa.Text, nullable=True),
        sa.Column("audio_target_file", sa.Text, nullable=True),
        sa.Column("image_file", sa.Text, nullable=True),
        sa.Column("image_prompt", sa.Text, nullable=True),
        sa.Column("mnemonic_keyword", sa.Text, nullable=True),
        sa.Column("mnemonic_sentence", sa.Text, nullable=True),
        sa.Column("character_guide_id", sa.Integer, nullable=True),
        sa.Column("translation_override_at", sa.DateTime, nullable=True),
        sa.Column("translation_status", sa.String(20), nullable=False, server_default="PENDING"),
        sa.Column("audio_status", sa.String(20), nullable=False, server_default="PENDING"),
        sa.Column("image_status", sa.String(20), nullable=False, server_default="PENDING"),
        sa.Column("created_at", sa.DateTime, server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime, server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint(
            "word", "source_language", "target_language", name="uq_words_word_languages"
        ),
    )

    # ── 2. Word variants ──────────────────────────────────────────
    op.create_table(
        "word_variants",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "word_id",
            sa.Integer,
            sa.ForeignKey("words.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("kind", sa.String(20), nullable=False),
        sa.Column("payload", _JSON, nullable=False, server_default="{}"),
        sa.Column("is_current", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("user_created", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime, server_default=sa.func.now(), nullable=False),
    )
    op.create_index("idx_word_variants_word_kind", "word_variants", ["word_id", "kind"])

    # ── 3. Translation sessions ───────────────────────────────────
    op.create_table(
        "translation_sessions",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("word", sa.String(255), nullable=False),
        sa.Column("source_language", sa.String(16), nullable=False),
        sa.Column("target_language", sa.String(16), nullable=False),
        sa.Column("enable_translation", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("enable_audio", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("enable_image", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("enable_sentence", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("override_translation", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("status", sa.String(20), nullable=False, server_default="PENDING"),
        sa.Column("session_data", sa.Text, nullable=True),
        sa.Column("zip_file_path", sa.Text, nullable=True),
        sa.Column("completed_at", sa.DateTime, nullable=True),
        sa.Column("cancelled_at", sa.DateTime, nullable=True),
        sa.Column("cancellation_reason", sa.Text, nullable=True),
        sa.Column("created_at", sa.DateTime, server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime, server_default=sa.func.now(), nullable=False),
    )
    op.create_index("idx_translation_sessions_status", "translation_sessions", ["status"])
    op.create_index("idx_translation_sessions_created", "translation_sessions", ["created_at"])


def downgrade() -> None:
    op.drop_table("translation_sessions")
    op.drop_table("word_variants")
    op.drop_table("words")
