import re
from collections import namedtuple
from datetime import timezone
from urllib.parse import urlparse

from shorty.errors import InvalidInput
from shorty.ranges import MAX_INT

SHORT_NAME_RE = re.compile(r"^[A-Za-z0-9_-]{3,32}$")
ID_RE = re.compile(r"[0-9]+")

LinkInput = namedtuple("LinkInput", ["original_url", "short_name"])


def is_absolute_url(value):
    try:
        parsed = urlparse(value)
    except ValueError:
        return False
    return bool(parsed.scheme and parsed.netloc)


def validate_link_input(data):
    """Проверяет тело запроса на создание/обновление ссылки.

    Возвращает LinkInput с обрезанным short_name (пустая строка, если
    код не передан) или бросает InvalidInput со списком полей.
    """
    if not isinstance(data, dict):
        raise InvalidInput("request body must be a JSON object")

    errors = {}

    original_url = data.get("original_url")
    if original_url is None or original_url == "":
        errors["original_url"] = "required"
    elif not isinstance(original_url, str) or not is_absolute_url(original_url):
        errors["original_url"] = "must be a valid absolute URL"

    short_name = data.get("short_name")
    if short_name is None:
        short_name = ""
    elif not isinstance(short_name, str):
        errors["short_name"] = "must be a string"
    else:
        short_name = short_name.strip()
        if short_name and not SHORT_NAME_RE.match(short_name):
            errors["short_name"] = "must be 3-32 characters of [A-Za-z0-9_-]"

    if errors:
        raise InvalidInput("invalid fields: " + ", ".join(sorted(errors)), details=errors)

    return LinkInput(original_url=original_url, short_name=short_name)


def parse_id(raw):
    if not ID_RE.fullmatch(raw) or not 0 < int(raw) <= MAX_INT:
        raise InvalidInput("invalid id")
    return int(raw)


def link_to_dict(link, base_url):
    return {
        "id": link.id,
        "original_url": link.original_url,
        "short_name": link.short_name,
        "short_url": f"{base_url}/r/{link.short_name}",
    }


def format_timestamp(value):
    # SQLite теряет tzinfo, время в базе всегда UTC
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def visit_to_dict(visit):
    return {
        "id": visit.id,
        "link_id": visit.link_id,
        "created_at": format_timestamp(visit.created_at),
        "ip": visit.ip,
        "user_agent": visit.user_agent,
        "status": visit.status,
    }
