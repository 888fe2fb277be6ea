from typing import List, Optional


class PromotionError(Exception):
    """Базовая ошибка, которую API отдаёт клиенту"""

    status_code = 500
    code = "internal_error"

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class ValidationError(PromotionError):
    status_code = 400
    code = "validation_error"


class MalformedIdError(PromotionError):
    status_code = 400
    code = "malformed_id"

    def __init__(self, detail: str = "Invalid promotion ID"):
        super().__init__(detail)


class NotFoundError(PromotionError):
    status_code = 404
    code = "not_found"

    def __init__(self, detail: str = "Promotion not found"):
        super().__init__(detail)


class ConflictError(PromotionError):
    """Проверка уникальности нашла пересечения с другими акциями"""

    status_code = 409
    code = "conflict"

    def __init__(self, conflicts: List[str], detail: Optional[str] = None):
        super().__init__(detail or "Promotion validation failed")
        self.conflicts = list(conflicts)


class InternalError(PromotionError):
    def __init__(self, detail: str = "Internal server error"):
        super().__init__(detail)
