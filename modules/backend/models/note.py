"""
Note Model.

A note is a named rich-text document positioned in a forest by parent_id.
"""

from sqlalchemy import Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from modules.backend.models.base import Base, IntegerIdMixin, TimestampMixin


class Note(IntegerIdMixin, TimestampMixin, Base):
    """
    Note database model.

    parent_id deliberately carries no foreign key: a note whose parent
    no longer exists is an orphan and is displayed as a root.
    Acyclicity of the parent_id graph is enforced by NoteService.move_note.
    """

    __tablename__ = "notes"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    parent_id: Mapped[int | None] = mapped_column(Integer, nullable=True, index=True)
    content: Mapped[str] = mapped_column(Text, nullable=False, default="")

    def __repr__(self) -> str:
        return f"<Note(id={self.id}, name={self.name!r}, parent_id={self.parent_id})>"
