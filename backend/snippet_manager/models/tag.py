"""
Snippet Manager Backend: Tag Model and snippet_tags Association
===============================================================

Tags are a shared vocabulary: one row per distinct name, created lazily on
first use and never deleted by the application. `snippet_tags` links
snippets to tags; both foreign keys cascade, so removing either side removes
the link.
"""

import uuid

from sqlalchemy import Column, ForeignKey, Table, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from snippet_manager.database import Base

snippet_tags = Table(
    "snippet_tags",
    Base.metadata,
    Column(
        "snippet_id",
        Uuid,
        ForeignKey("snippets.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "tag_id",
        Uuid,
        ForeignKey("tags.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    comment="Association table between snippets and tags",
)


class Tag(Base):
    __tablename__ = "tags"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(Text, nullable=False, unique=True)

    def __repr__(self) -> str:
        return f"<Tag(id={self.id}, name='{self.name}')>"
