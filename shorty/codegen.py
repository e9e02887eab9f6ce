import logging
import secrets
import string

from shorty.errors import ConflictError, GenerationExhausted

logger = logging.getLogger(__name__)

ALPHABET = string.digits + string.ascii_uppercase + string.ascii_lowercase
CODE_LENGTH = 7
MAX_ATTEMPTS = 10


def random_code(length=CODE_LENGTH):
    # secrets.choice выбирает индекс через randbelow, без смещения по модулю
    return "".join(secrets.choice(ALPHABET) for _ in range(length))


class CodeGenerator:
    """Создает ссылки, подбирая свободный короткий код, если его не передали"""

    def __init__(self, store, make_code=random_code, max_attempts=MAX_ATTEMPTS):
        self.store = store
        self.make_code = make_code
        self.max_attempts = max_attempts

    def create(self, original_url, short_name=""):
        short_name = (short_name or "").strip()
        if short_name:
            # Явный код: одна попытка, конфликт отдается клиенту как есть
            return self.store.create_link(original_url, short_name)

        for attempt in range(1, self.max_attempts + 1):
            candidate = self.make_code()
            try:
                return self.store.create_link(original_url, candidate)
            except ConflictError:
                logger.info("Short code collision on attempt %d: %s", attempt, candidate)

        logger.error("Gave up generating short code after %d attempts", self.max_attempts)
        raise GenerationExhausted()
