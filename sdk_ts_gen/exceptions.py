"""
Ошибки генерации SDK
"""

from typing import Optional


class GenerationError(Exception):
    """Базовая ошибка генератора - прерывает весь запуск"""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class DocumentLoadError(GenerationError):
    """Документ не удалось прочитать или разобрать"""

    def __init__(self, message: str, source: Optional[str] = None):
        self.source = source
        super().__init__(f"{source}: {message}" if source else message)


class UnresolvedReferenceError(GenerationError):
    """Ссылка $ref, нужная для рендеринга, не найдена"""

    def __init__(self, ref: str, reason: str = "reference not found"):
        self.ref = ref
        super().__init__(f"{ref}: {reason}")


class MissingOperationIdError(GenerationError):
    """У операции нет operationId - имя метода не из чего построить"""

    def __init__(self, method: str, path: str):
        self.method = method
        self.path = path
        super().__init__(f"{method} {path}: operationId is required")
