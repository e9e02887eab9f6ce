from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from shorty.errors import ConflictError, NotFoundError, StorageFailure
from shorty.store import is_unique_violation


class PgError(Exception):
    def __init__(self, pgcode, constraint_name):
        super().__init__("pg error")
        self.pgcode = pgcode
        self.diag = type("Diag", (), {"constraint_name": constraint_name})()


def test_unique_violation_postgres():
    error = IntegrityError("INSERT", {}, PgError("23505", "ix_links_short_name"))
    assert is_unique_violation(error)

    error = IntegrityError("INSERT", {}, PgError("23503", "link_visits_link_id_fkey"))
    assert not is_unique_violation(error)


def test_unique_violation_sqlite():
    error = IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed: links.short_name"))
    assert is_unique_violation(error)

    error = IntegrityError("INSERT", {}, Exception("NOT NULL constraint failed: links.original_url"))
    assert not is_unique_violation(error)


def test_create_and_get(store):
    link = store.create_link("https://example.com", "abc")

    assert link.id is not None
    assert store.get_link(link.id).short_name == "abc"
    assert store.get_link_by_code("abc").id == link.id


def test_duplicate_code_is_conflict(store):
    store.create_link("https://example.com", "abc")
    with pytest.raises(ConflictError):
        store.create_link("https://example.org", "abc")
    assert store.count_links() == 1


def test_missing_rows(store):
    with pytest.raises(NotFoundError):
        store.get_link(42)
    with pytest.raises(NotFoundError):
        store.get_link_by_code("nope")
    with pytest.raises(NotFoundError):
        store.update_link(42, "https://example.com", "abc")
    assert store.delete_link(42) == 0


def test_ids_increase_and_list_is_ordered(store):
    ids = [store.create_link("https://example.com", f"code{i}").id for i in range(5)]

    assert ids == sorted(ids)
    assert [link.id for link in store.list_links()] == ids
    assert [link.id for link in store.list_links(offset=1, limit=2)] == ids[1:3]


def test_storage_errors_are_hidden(store, monkeypatch):
    def broken_session(*args, **kwargs):
        raise OperationalError("SELECT", {}, Exception("connection refused"))

    monkeypatch.setattr("shorty.store.Session", broken_session)

    with pytest.raises(StorageFailure) as excinfo:
        store.count_links()
    assert "connection refused" not in str(excinfo.value)


def test_visit_created_at_set_by_database(store):
    link = store.create_link("https://example.com", "abc")
    before = datetime.now(timezone.utc).replace(microsecond=0) - timedelta(seconds=1)

    visit = store.create_visit(link_id=link.id, ip="", user_agent="", referer="", status=302)

    created_at = visit.created_at
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=timezone.utc)
    assert before <= created_at <= datetime.now(timezone.utc) + timedelta(seconds=1)
