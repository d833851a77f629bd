"""
Image Model.

Binary assets embedded by reference in note content. Immutable once stored.
"""

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from modules.backend.models.base import Base, UnixCreatedMixin, UUIDMixin


class Image(UUIDMixin, UnixCreatedMixin, Base):
    """Image database model; `data` holds the payload base64-encoded."""

    __tablename__ = "images"

    filename: Mapped[str] = mapped_column(String(255), nullable=False)
    mimetype: Mapped[str] = mapped_column(String(127), nullable=False)
    data: Mapped[str] = mapped_column(Text, nullable=False)

    def __repr__(self) -> str:
        return f"<Image(id={self.id}, filename={self.filename!r})>"
