"""
Interfaz del registro de auditoría de intercambios (Dependency Inversion Principle).
"""
from abc import ABC, abstractmethod
import random
import string
import time

from ..dto.audit_dto import AuditRecordDTO, AuditUpdateDTO

_BASE36 = string.digits + string.ascii_lowercase


def to_base36(value: int) -> str:
    """Convierte un entero no negativo a base 36 (minúsculas)."""
    if value == 0:
        return "0"
    digitos = []
    while value:
        value, resto = divmod(value, 36)
        digitos.append(_BASE36[resto])
    return ''.join(reversed(digitos))


class IAuditStore(ABC):
    """Registro auditable de cada intercambio de datos."""

    def generate_exchange_id(self, prefix: str) -> str:
        """
        Genera un id de intercambio "PREFIX-<ms base36>-<6 aleatorios>" en mayúsculas.

        Las implementaciones pueden sobrescribirlo; esta versión basta para
        memoria y SQL Server.
        """
        millis = to_base36(int(time.time() * 1000))
        aleatorio = ''.join(random.choices(_BASE36, k=6))
        return f"{prefix}-{millis}-{aleatorio}".upper()

    @abstractmethod
    def create_record(self, record: AuditRecordDTO) -> str:
        """
        Crea el registro de auditoría.

        Returns:
            Identificador del registro (audit_id)
        """
        pass

    @abstractmethod
    def update_record(self, audit_id: str, update: AuditUpdateDTO) -> None:
        """Cierra el registro con el resultado exitoso."""
        pass

    @abstractmethod
    def fail_record(self, audit_id: str, error_code: str, message: str) -> None:
        """Cierra el registro como fallido."""
        pass
