"""Create users and payments tables for plan billing"""
from __future__ import annotations

from alembic import op

from certistage.core.models import Payment, User

# revision identifiers, used by Alembic.
revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None

# Payments reference users, so they are created after and dropped before them.
_TABLES = [User.__table__, Payment.__table__]


def upgrade() -> None:
    bind = op.get_bind()
    for table in _TABLES:
        table.create(bind=bind, checkfirst=True)


def downgrade() -> None:
    bind = op.get_bind()
    for table in reversed(_TABLES):
        table.drop(bind=bind, checkfirst=True)
