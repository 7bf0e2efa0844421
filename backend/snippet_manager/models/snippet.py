"""
Snippet Manager Backend: Snippet Model
======================================

What:  ORM model for the `snippets` table.

Relationships:
    - user_id   → users.id    ON DELETE CASCADE (snippets die with their owner)
    - folder_id → folders.id  ON DELETE SET NULL (folder removal unfiles them)
    - tags: read-only view through `snippet_tags`. Writes to the association
      go through the tag reconciler in `stores.tags`, never through this
      relationship.
"""

import uuid
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import DateTime, ForeignKey, Index, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from snippet_manager.database import Base
from snippet_manager.models.tag import Tag, snippet_tags


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Snippet(Base):
    __tablename__ = "snippets"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    language: Mapped[str] = mapped_column(Text, nullable=False)
    code: Mapped[str] = mapped_column(Text, nullable=False)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    folder_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("folders.id", ondelete="SET NULL"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )

    tags: Mapped[List[Tag]] = relationship(
        Tag,
        secondary=snippet_tags,
        order_by=Tag.name,
        viewonly=True,
    )

    __table_args__ = (
        Index("idx_snippets_folder_id", "folder_id"),
        Index("idx_snippets_user_id", "user_id"),
    )

    @property
    def tag_names(self) -> List[str]:
        return [tag.name for tag in self.tags]

    def __repr__(self) -> str:
        return f"<Snippet(id={self.id}, title='{self.title}', language='{self.language}')>"
