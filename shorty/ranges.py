import json
from collections import namedtuple

from shorty.errors import InvalidRange

# Диапазон и id должны помещаться в BIGINT
MAX_INT = 2**63 - 1

# Первые 10 записей: правая граница не включается
DEFAULT_RANGE = (0, 10)

Page = namedtuple("Page", ["rows", "content_range"])


def parse_range(raw):
    """Разбирает диапазон вида "[from,to]"

    >>> parse_range("[0,9]")
    (0, 9)
    """
    try:
        value = json.loads(raw.strip())
    except (AttributeError, ValueError):
        raise InvalidRange()

    if not isinstance(value, list) or len(value) != 2:
        raise InvalidRange()
    # bool - подкласс int, но [true,false] диапазоном не считаем
    if not all(isinstance(v, int) and not isinstance(v, bool) for v in value):
        raise InvalidRange()

    start, end = value
    if start < 0 or end < 0 or end < start or end > MAX_INT:
        raise InvalidRange()
    return start, end


def content_range(resource, start, count, total):
    if count <= 0:
        return f"{resource} */{total}"
    return f"{resource} {start}-{start + count - 1}/{total}"


class RangeQuery:
    """Постраничная выборка с заголовком Content-Range.

    count и fetch(offset, limit) - функции хранилища. Общее количество
    запрашивается на каждый вызов; между count и fetch нет общей
    транзакции, поэтому при параллельной записи числа могут разойтись.
    """

    def __init__(self, resource, count, fetch):
        self.resource = resource
        self.count = count
        self.fetch = fetch

    def execute(self, bounds, inclusive=False):
        total = self.count()
        start, end = bounds

        limit = end - start
        if inclusive:
            limit += 1
        if limit < 0:
            raise InvalidRange()

        if total == 0 or limit == 0 or start >= total:
            return Page([], f"{self.resource} */{total}")

        # Дальше total строк все равно нет
        limit = min(limit, total - start)

        rows = self.fetch(offset=start, limit=limit)
        return Page(rows, content_range(self.resource, start, len(rows), total))

    def execute_all(self):
        """Все записи без пагинации"""
        total = self.count()
        rows = self.fetch()
        return Page(rows, content_range(self.resource, 0, len(rows), total))
