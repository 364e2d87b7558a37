"""
Value Object para el contexto de tienda (tenant + identidad de auditoría).

Se adjunta a cada importación de archivo o contenido de la tienda.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Optional

from pos_exchange.domain.exceptions.domain_exception import ValueObjectValidationException

MANUAL_IMPORT_SENTINEL = "manual-import"


@dataclass(frozen=True)
class StoreContext:
    """
    Contexto de tienda.

    Attributes:
        store_id: Identificador de la tienda
        pos_integration_id: Integración POS que origina los archivos
        company_id: Compañía dueña de la tienda
        user_id: Usuario que dispara la importación (opcional)
    """
    store_id: str
    pos_integration_id: str
    company_id: str
    user_id: Optional[str] = None

    def __post_init__(self):
        """Validaciones de integridad"""
        for campo in ("store_id", "pos_integration_id", "company_id"):
            valor = getattr(self, campo)
            if not valor or not str(valor).strip():
                raise ValueObjectValidationException(f"{campo} no puede estar vacío")

    @classmethod
    def minimal(cls, store_id: str) -> StoreContext:
        """
        Contexto mínimo para importaciones manuales de tiendas sin registro.

        Usa identificadores centinela para integración y compañía, de modo que
        una importación manual nunca falle solo por falta de contexto.
        """
        return cls(
            store_id=store_id,
            pos_integration_id=MANUAL_IMPORT_SENTINEL,
            company_id=MANUAL_IMPORT_SENTINEL,
        )

    @property
    def is_minimal(self) -> bool:
        return (
            self.pos_integration_id == MANUAL_IMPORT_SENTINEL
            and self.company_id == MANUAL_IMPORT_SENTINEL
        )

    def __str__(self) -> str:
        return f"{self.store_id} ({self.company_id}/{self.pos_integration_id})"
