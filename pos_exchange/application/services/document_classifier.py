"""
Utilidades de hash y clasificación de documentos.

- compute_hash / hash_file: SHA-256 hex del contenido.
- detect_data_category: categoría de auditoría por nombre de archivo.
- sniff_document_type: pre-clasificación barata por el elemento raíz.
"""
from __future__ import annotations
from pathlib import Path
from typing import Optional, Union
import hashlib
import re

from pos_exchange.domain.value_objects.processing_status import DataCategory, DocumentType

_CHUNK_SIZE = 64 * 1024

# Primer elemento que no sea declaración, comentario ni DOCTYPE
_ROOT_TAG_RE = re.compile(r'<\s*([A-Za-z_][\w.\-:]*)')

# Orden relevante: la primera regla que coincide gana
_CATEGORY_RULES = (
    (('tlog', 'trans'), DataCategory.TRANSACTION),
    (('dept',), DataCategory.DEPARTMENT),
    (('tender', 'payment'), DataCategory.TENDER_TYPE),
    (('tax',), DataCategory.TAX_RATE),
    (('price', 'item', 'plu'), DataCategory.PRICEBOOK),
    (('emp', 'cashier'), DataCategory.EMPLOYEE),
)


def compute_hash(content: Union[bytes, str]) -> str:
    """SHA-256 hex del contenido (str se codifica en UTF-8)."""
    if isinstance(content, str):
        content = content.encode('utf-8')
    return hashlib.sha256(content).hexdigest()


def hash_file(path: Union[str, Path]) -> str:
    """SHA-256 hex de un archivo leído por bloques."""
    h = hashlib.sha256()
    with open(path, 'rb') as f:
        for bloque in iter(lambda: f.read(_CHUNK_SIZE), b''):
            h.update(bloque)
    return h.hexdigest()


def detect_data_category(file_name: str) -> DataCategory:
    """Infiere la categoría de datos a partir del nombre de archivo."""
    nombre = (file_name or '').lower()
    for claves, categoria in _CATEGORY_RULES:
        if any(k in nombre for k in claves):
            return categoria
    return DataCategory.SYSTEM_CONFIG


def find_root_name(content: str) -> Optional[str]:
    """
    Nombre local del elemento raíz (sin prefijo de namespace), o None.

    Ignora la declaración XML, comentarios y DOCTYPE.
    """
    if not content:
        return None
    pos = 0
    while True:
        inicio = content.find('<', pos)
        if inicio < 0:
            return None
        for apertura, cierre in (('<?', '?>'), ('<!--', '-->'), ('<!', '>')):
            if content.startswith(apertura, inicio):
                fin = content.find(cierre, inicio + len(apertura))
                if fin < 0:
                    return None
                pos = fin + len(cierre)
                break
        else:
            m = _ROOT_TAG_RE.match(content, inicio)
            if not m:
                return None
            return m.group(1).split(':')[-1]


def sniff_document_type(
    content: str,
    default: DocumentType = DocumentType.TRANSACTION_DOCUMENT
) -> DocumentType:
    """
    Pre-clasificación para el pre-registro en file log.

    No valida el documento; si no reconoce la raíz retorna `default`.
    """
    tipo = DocumentType.from_root_name(find_root_name(content) or '')
    return tipo or default
