"""
Coincidencia de nombres de archivo contra patrones glob simples.

Solo '*' y '?' tienen significado; cualquier otro carácter se compara
literalmente (nunca se acepta sintaxis regex del usuario).
"""
from __future__ import annotations
from pathlib import Path
from typing import Dict, Iterable, List, Pattern, Sequence
import logging
import os
import re

logger = logging.getLogger(__name__)

_cache: Dict[str, Pattern[str]] = {}


def glob_to_regex(pattern: str) -> Pattern[str]:
    """
    Compila un glob a regex insensible a mayúsculas (se evalúa con fullmatch).

    '*' -> '.*', '?' -> '.', el resto escapado.
    """
    compiled = _cache.get(pattern)
    if compiled is not None:
        return compiled

    partes = []
    for ch in pattern.lower():
        if ch == '*':
            partes.append('.*')
        elif ch == '?':
            partes.append('.')
        else:
            partes.append(re.escape(ch))
    compiled = re.compile(''.join(partes), re.IGNORECASE | re.DOTALL)
    _cache[pattern] = compiled
    return compiled


def matches_any(file_name: str, patterns: Iterable[str]) -> bool:
    """True si el nombre (en minúsculas) coincide con al menos un patrón."""
    nombre = file_name.lower()
    return any(glob_to_regex(p).fullmatch(nombre) for p in patterns)


def list_matching_files(directory: Path, patterns: Sequence[str]) -> List[Path]:
    """
    Lista archivos regulares del directorio que coinciden con los patrones.

    Returns:
        Rutas ordenadas por nombre

    Raises:
        OSError: Si el directorio no se puede listar
    """
    encontrados: List[Path] = []
    with os.scandir(directory) as it:
        for entry in it:
            try:
                if not entry.is_file():
                    continue
            except OSError:
                logger.debug("No se pudo inspeccionar '%s', se omite", entry.name)
                continue
            if matches_any(entry.name, patterns):
                encontrados.append(Path(entry.path))
    encontrados.sort(key=lambda p: p.name)
    return encontrados
