class DomainException(Exception):
    default_message = "Ошибка. Попробуйте ещё раз."

    def __init__(self, message: str | None = None, code: str | None = None):
        self.message = message or self.default_message
        self.code = code
        super().__init__(self.message)


class ValidationError(DomainException):
    default_message = "Заполните все поля"


class NetworkTimeout(DomainException):
    default_message = "Сервер не отвечает. Попробуйте ещё раз."


class Unauthorized(DomainException):
    default_message = "Сессия истекла. Войдите снова."


class Forbidden(DomainException):
    default_message = "Недостаточно прав"


class Conflict(DomainException):
    pass


class ServerError(DomainException):
    pass


class AuthRequired(DomainException):
    """Гость попытался выполнить действие, доступное только после входа"""
    default_message = "Войдите, чтобы продолжить"


class OrderNotFoundError(DomainException):
    pass


class InvalidStatusTransitionError(Conflict):
    def __init__(self, current: str, requested: str):
        self.current = current
        self.requested = requested
        super().__init__(
            f"Нельзя сменить статус заказа {current} -> {requested}",
            code="INVALID_TRANSITION",
        )


class ProductNotFoundError(DomainException):
    pass


def user_message(error: Exception) -> str:
    """Текст для уведомления; у не доменных ошибок подробности не показываем"""
    if isinstance(error, DomainException):
        return error.message
    return DomainException.default_message
