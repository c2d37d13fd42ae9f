"""SQLAlchemy models for the blog document store."""

import re
import uuid

from sqlalchemy import Text, Uuid
from sqlalchemy.engine import Dialect
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.types import TypeDecorator

from core.database import Base

_ESCAPED = re.compile(r"\\(.)", re.DOTALL)


class NulSafeText(TypeDecorator[str]):
    """Text that survives a round trip through Postgres, which rejects U+0000.

    Backslashes are doubled and NUL is stored as ``\\0``; reads undo both.
    """

    impl = Text
    cache_ok = True

    def process_bind_param(self, value: str | None, dialect: Dialect) -> str | None:
        if value is None:
            return None
        return value.replace("\\", "\\\\").replace("\x00", "\\0")

    def process_result_value(self, value: str | None, dialect: Dialect) -> str | None:
        if value is None:
            return None
        return _ESCAPED.sub(
            lambda m: "\x00" if m.group(1) == "0" else m.group(1), value
        )


class BlogDocument(Base):
    """A stored blog record.

    The primary key is assigned at insert time by the store layer and is
    never taken from a caller.
    """

    __tablename__ = "blog"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    author_id: Mapped[str] = mapped_column(NulSafeText, nullable=False)
    content: Mapped[str] = mapped_column(NulSafeText, nullable=False)
    title: Mapped[str] = mapped_column(NulSafeText, nullable=False)

    def __repr__(self) -> str:
        return f"<BlogDocument id={self.id} author_id={self.author_id!r}>"
