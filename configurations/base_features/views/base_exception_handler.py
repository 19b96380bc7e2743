import logging

logger = logging.getLogger(__name__)


class BaseExceptionHandlerMixin:
    """Turns any exception raised inside a view into the shared error envelope."""

    def handle_exception(self, e):
        if hasattr(e, "message"):
            error = e.message
        elif hasattr(e, "detail"):
            error = e.detail
        elif hasattr(e, "errors"):
            error = e.errors
        elif hasattr(e, "error"):
            error = e.error
        else:
            error = str(e)

        status_code = getattr(e, "status_code", None) or getattr(e, "status", None)
        if not isinstance(status_code, int):
            status_code = 500

        if status_code >= 500:
            logger.exception("[%s] unhandled error: %s", self.__class__.__name__, e)
        else:
            logger.warning("[%s] %s: %s", self.__class__.__name__, status_code, error)

        if isinstance(error, dict) or isinstance(error, list):
            return self.format_response(errors=error, status_code=status_code)
        errors = {"error": str(error)}
        code = getattr(e, "code", None)
        if isinstance(code, str):
            errors["code"] = code
        return self.format_response(errors=errors, status_code=status_code)
