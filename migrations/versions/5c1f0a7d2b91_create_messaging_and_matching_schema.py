"""create messaging and matching schema

Revision ID: 5c1f0a7d2b91
Revises:
Create Date: 2026-10-19 09:12:44.120531

"""
from typing import Sequence, Union

from alembic import op

# revision identifiers, used by Alembic.
revision: str = '5c1f0a7d2b91'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema.

    users and profiles belong to the identity service and must already exist.
    """
    op.execute("""
        CREATE TABLE IF NOT EXISTS conversations (
            id SERIAL PRIMARY KEY,
            created_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT NOW(),
            updated_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT NOW()
        )
    """)

    op.execute("""
        CREATE TABLE IF NOT EXISTS conversation_participants (
            id SERIAL PRIMARY KEY,
            conversation_id INTEGER NOT NULL REFERENCES conversations(id),
            user_id VARCHAR(255) NOT NULL REFERENCES users(id),
            last_read TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_participant_conversation_user UNIQUE (conversation_id, user_id)
        )
    """)

    op.execute("""
        CREATE TABLE IF NOT EXISTS messages (
            id SERIAL PRIMARY KEY,
            conversation_id INTEGER NOT NULL REFERENCES conversations(id),
            sender_id VARCHAR(255) NOT NULL REFERENCES users(id),
            content TEXT NOT NULL,
            created_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT NOW(),
            status VARCHAR(20) NOT NULL DEFAULT 'sent'
                CONSTRAINT ck_messages_status CHECK (status IN ('sent', 'delivered', 'read'))
        )
    """)

    op.execute("""
        CREATE TABLE IF NOT EXISTS swipes (
            id SERIAL PRIMARY KEY,
            swiper_id VARCHAR(255) NOT NULL REFERENCES users(id),
            swiped_id VARCHAR(255) NOT NULL REFERENCES users(id),
            direction VARCHAR(10) NOT NULL
                CONSTRAINT ck_swipes_direction CHECK (direction IN ('left', 'right')),
            created_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_swipes_swiper_swiped UNIQUE (swiper_id, swiped_id),
            CONSTRAINT ck_swipes_no_self_swipe CHECK (swiper_id <> swiped_id)
        )
    """)

    op.execute("""
        CREATE TABLE IF NOT EXISTS friend_requests (
            id SERIAL PRIMARY KEY,
            sender_id VARCHAR(255) NOT NULL REFERENCES users(id),
            receiver_id VARCHAR(255) NOT NULL REFERENCES users(id),
            status VARCHAR(20) NOT NULL DEFAULT 'pending'
                CONSTRAINT ck_friend_requests_status
                CHECK (status IN ('pending', 'accepted', 'rejected')),
            created_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT NOW()
        )
    """)

    op.execute('CREATE INDEX IF NOT EXISTS ix_conversation_participants_conversation_id ON conversation_participants(conversation_id)')
    op.execute('CREATE INDEX IF NOT EXISTS ix_conversation_participants_user_id ON conversation_participants(user_id)')
    op.execute('CREATE INDEX IF NOT EXISTS ix_conversations_updated_at ON conversations(updated_at DESC)')
    op.execute('CREATE INDEX IF NOT EXISTS idx_messages_conversation_id_id ON messages(conversation_id, id)')
    op.execute('CREATE INDEX IF NOT EXISTS ix_swipes_swiper_id ON swipes(swiper_id)')
    op.execute('CREATE INDEX IF NOT EXISTS ix_swipes_swiped_id ON swipes(swiped_id)')
    op.execute('CREATE INDEX IF NOT EXISTS ix_friend_requests_sender_id ON friend_requests(sender_id)')
    op.execute('CREATE INDEX IF NOT EXISTS ix_friend_requests_receiver_id ON friend_requests(receiver_id)')


def downgrade() -> None:
    """Downgrade schema."""
    op.execute('DROP TABLE IF EXISTS friend_requests')
    op.execute('DROP TABLE IF EXISTS swipes')
    op.execute('DROP TABLE IF EXISTS messages')
    op.execute('DROP TABLE IF EXISTS conversation_participants')
    op.execute('DROP TABLE IF EXISTS conversations')
