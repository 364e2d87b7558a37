"""
Excepción común de escritura en base de datos para los repositorios.
"""
from typing import Optional


class DatabaseWriteException(Exception):
    """
    Excepción lanzada cuando falla una operación de escritura en BD.

    Attributes:
        message: Descripción del error
        inner_exception: Excepción original (si existe)
        entry_id: Entrada afectada (log_id o audit_id, si aplica)
    """

    def __init__(
        self,
        message: str,
        inner_exception: Optional[Exception] = None,
        entry_id: Optional[str] = None
    ):
        super().__init__(message)
        self.message = message
        self.inner_exception = inner_exception
        self.entry_id = entry_id

    def __str__(self) -> str:
        result = self.message
        if self.entry_id:
            result += f" (Entrada: {self.entry_id})"
        if self.inner_exception:
            result += f" - Error original: {self.inner_exception}"
        return result
