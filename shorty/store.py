import logging

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, select

from shorty.errors import ConflictError, NotFoundError, StorageFailure
from shorty.models import Link, LinkVisit

logger = logging.getLogger(__name__)

# SQLSTATE unique_violation в PostgreSQL
UNIQUE_VIOLATION = "23505"


def is_unique_violation(error, column="short_name"):
    """Проверяет, что IntegrityError вызван уникальным индексом на column"""
    orig = getattr(error, "orig", None)
    code = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    if code is not None:
        if code != UNIQUE_VIOLATION:
            return False
        diag = getattr(orig, "diag", None)
        constraint = getattr(diag, "constraint_name", None) or ""
        return not constraint or column in constraint
    # SQLite: "UNIQUE constraint failed: links.short_name"
    message = str(orig or error)
    return "UNIQUE constraint failed" in message and column in message


class LinkStore:
    """Доступ к таблицам links и link_visits.

    Каждый метод открывает свою сессию: одна операция - одна транзакция.
    Ошибки SQLAlchemy наружу не выходят, они переводятся в ошибки сервиса.
    """

    def __init__(self, engine):
        self.engine = engine

    def _fail(self, action, error):
        logger.error("Error %s: %s", action, error)
        return StorageFailure()

    def count_links(self):
        try:
            with Session(self.engine) as session:
                return session.exec(select(func.count()).select_from(Link)).one()
        except SQLAlchemyError as e:
            raise self._fail("counting links", e)

    def list_links(self, offset=None, limit=None):
        statement = select(Link).order_by(Link.id)
        if offset is not None:
            statement = statement.offset(offset)
        if limit is not None:
            statement = statement.limit(limit)
        try:
            with Session(self.engine) as session:
                return list(session.exec(statement).all())
        except SQLAlchemyError as e:
            raise self._fail("listing links", e)

    def get_link(self, link_id):
        try:
            with Session(self.engine) as session:
                link = session.get(Link, link_id)
        except SQLAlchemyError as e:
            raise self._fail(f"getting link {link_id}", e)
        if link is None:
            raise NotFoundError()
        return link

    def get_link_by_code(self, code):
        try:
            with Session(self.engine) as session:
                link = session.exec(select(Link).where(Link.short_name == code)).first()
        except SQLAlchemyError as e:
            raise self._fail(f"getting link by code {code!r}", e)
        if link is None:
            raise NotFoundError()
        return link

    def create_link(self, original_url, short_name):
        link = Link(original_url=original_url, short_name=short_name)
        try:
            with Session(self.engine, expire_on_commit=False) as session:
                session.add(link)
                session.commit()
                session.refresh(link)
        except IntegrityError as e:
            if is_unique_violation(e):
                raise ConflictError("short_name")
            raise self._fail("creating link", e)
        except SQLAlchemyError as e:
            raise self._fail("creating link", e)
        return link

    def update_link(self, link_id, original_url, short_name):
        try:
            with Session(self.engine, expire_on_commit=False) as session:
                link = session.get(Link, link_id)
                if link is None:
                    raise NotFoundError()
                link.original_url = original_url
                link.short_name = short_name
                session.add(link)
                session.commit()
                session.refresh(link)
        except IntegrityError as e:
            if is_unique_violation(e):
                raise ConflictError("short_name")
            raise self._fail(f"updating link {link_id}", e)
        except SQLAlchemyError as e:
            raise self._fail(f"updating link {link_id}", e)
        return link

    def delete_link(self, link_id):
        """Удаляет ссылку, возвращает количество удаленных строк"""
        try:
            with Session(self.engine) as session:
                link = session.get(Link, link_id)
                if link is None:
                    return 0
                session.delete(link)
                session.commit()
                return 1
        except SQLAlchemyError as e:
            raise self._fail(f"deleting link {link_id}", e)

    def count_visits(self):
        try:
            with Session(self.engine) as session:
                return session.exec(select(func.count()).select_from(LinkVisit)).one()
        except SQLAlchemyError as e:
            raise self._fail("counting link visits", e)

    def list_visits(self, offset=None, limit=None):
        statement = select(LinkVisit).order_by(LinkVisit.id)
        if offset is not None:
            statement = statement.offset(offset)
        if limit is not None:
            statement = statement.limit(limit)
        try:
            with Session(self.engine) as session:
                return list(session.exec(statement).all())
        except SQLAlchemyError as e:
            raise self._fail("listing link visits", e)

    def create_visit(self, link_id, ip, user_agent, referer, status):
        visit = LinkVisit(
            link_id=link_id,
            ip=ip or "",
            user_agent=user_agent or "",
            referer=referer or "",
            status=status,
        )
        try:
            with Session(self.engine, expire_on_commit=False) as session:
                session.add(visit)
                session.commit()
                session.refresh(visit)
        except SQLAlchemyError as e:
            raise self._fail(f"recording visit for link {link_id}", e)
        return visit
