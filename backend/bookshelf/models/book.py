"""Book model."""
import uuid
from typing import Optional

from sqlalchemy import Integer, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from bookshelf.database import Base


class Book(Base):
    """Book model. The id is chosen by the client, never by the server."""

    __tablename__ = "book"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True)
    name: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    author: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    year: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    def __repr__(self) -> str:
        return f"<Book(id={self.id}, name={self.name}, year={self.year})>"
