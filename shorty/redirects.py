import logging

from flask import redirect

from shorty.errors import NotFoundError

logger = logging.getLogger(__name__)

REDIRECT_STATUS = 302


class RedirectResolver:
    def __init__(self, store, status=REDIRECT_STATUS):
        self.store = store
        self.status = status

    def resolve(self, code, ip="", user_agent="", referer=""):
        code = (code or "").strip()
        if not code:
            raise NotFoundError()

        link = self.store.get_link_by_code(code)

        # Визит пишем по возможности: ошибка записи не мешает редиректу
        try:
            self.store.create_visit(
                link_id=link.id,
                ip=ip,
                user_agent=user_agent,
                referer=referer,
                status=self.status,
            )
        except Exception as e:
            logger.warning("Failed to record visit for %r: %s", code, e)

        return redirect(link.original_url, code=self.status)
