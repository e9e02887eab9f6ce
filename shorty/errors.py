import sentry_sdk
from werkzeug.exceptions import HTTPException


class ShortyError(Exception):
    """Базовая ошибка сервиса: HTTP-статус и сообщение для клиента"""

    status_code = 500
    message = "internal server error"

    def __init__(self, message=None, details=None):
        super().__init__(message or self.message)
        if message:
            self.message = message
        self.details = details

    def to_dict(self):
        body = {"error": self.message}
        if self.details:
            body["details"] = self.details
        return body


class InvalidInput(ShortyError):
    status_code = 400
    message = "invalid input"


class InvalidRange(InvalidInput):
    message = "invalid range"


class NotFoundError(ShortyError):
    status_code = 404
    message = "not found"


class ConflictError(ShortyError):
    status_code = 409
    message = "short_name already in use"

    def __init__(self, field="short_name"):
        super().__init__(f"{field} already in use", details={field: "already in use"})
        self.field = field


class GenerationExhausted(ShortyError):
    message = "failed to generate unique short_name"


class StorageFailure(ShortyError):
    message = "internal server error"


def register_error_handlers(app):
    @app.errorhandler(ShortyError)
    def handle_shorty_error(error):
        return error.to_dict(), error.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        if error.code == 404:
            return {"error": "not found"}, 404
        return {"error": error.name.lower()}, error.code

    @app.errorhandler(Exception)
    def handle_unexpected(error):
        app.logger.exception("Unhandled error: %s", error)
        # Без SENTRY_DSN это no-op
        sentry_sdk.capture_exception(error)
        return {"error": "internal server error"}, 500
