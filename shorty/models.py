from datetime import datetime

from sqlalchemy import DateTime, func
from sqlmodel import Field, SQLModel


class Link(SQLModel, table=True):
    __tablename__ = "links"

    id: int | None = Field(default=None, primary_key=True)
    original_url: str
    short_name: str = Field(unique=True, index=True, max_length=32)


class LinkVisit(SQLModel, table=True):
    __tablename__ = "link_visits"

    id: int | None = Field(default=None, primary_key=True)
    link_id: int = Field(foreign_key="links.id", ondelete="CASCADE", index=True)
    # Время визита ставит база при вставке
    created_at: datetime | None = Field(
        default=None,
        nullable=False,
        sa_type=DateTime(timezone=True),
        sa_column_kwargs={"server_default": func.now()},
    )
    ip: str = ""
    user_agent: str = ""
    referer: str = ""
    status: int
