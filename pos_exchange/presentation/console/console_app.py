"""
Console Runner para el intercambio de archivos POS.

- Lee configuración.
- Resuelve dependencias.
- Ejecuta modos --watch (watchers por tienda) o --import (importación manual).
"""
from __future__ import annotations
import argparse
import json
import logging
import sys
import time
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from pos_exchange.domain.entities.watcher import WatcherConfig
from pos_exchange.domain.value_objects.processing_status import ProcessingStatus
from pos_exchange.domain.value_objects.store_context import StoreContext
from pos_exchange.infrastructure.config.settings import AppConfig, WatcherDefaultsConfig, get_config
from pos_exchange.infrastructure.di.container import ApplicationContainer

logger = logging.getLogger("console_app")

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s - %(message)s"


def configurar_logging(config: AppConfig) -> None:
    """Consola + archivo UTF-8 en la carpeta de logs."""
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    try:
        config.paths.logs_dir.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(config.paths.log_file, encoding="utf-8"))
    except OSError as e:
        print(f"No se pudo crear el log en archivo ({e}); solo consola", file=sys.stderr)

    logging.basicConfig(
        level=logging.DEBUG if config.is_development else logging.INFO,
        format=LOG_FORMAT,
        handlers=handlers,
    )


def load_store_definitions(
    path: Path,
    defaults: Optional[WatcherDefaultsConfig] = None,
) -> List[Tuple[WatcherConfig, StoreContext]]:
    """
    Lee stores.json y construye (WatcherConfig, StoreContext) por tienda.

    Formato:
        {"stores": [{"store_id": "S1", "watch_path": "...", "processed_path": "...",
                     "error_path": "...", "file_patterns": ["*.xml"],
                     "poll_interval_seconds": 30,
                     "pos_integration_id": "...", "company_id": "..."}]}
    También se acepta una lista en la raíz. Los campos faltantes de patrones
    e intervalo toman los valores de WatcherDefaultsConfig.

    Raises:
        ValueError: Si el archivo no tiene el formato esperado
    """
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    items = data.get("stores") if isinstance(data, dict) else data
    if not isinstance(items, list):
        raise ValueError(f"'{path}' debe contener una lista de tiendas (o {{'stores': [...]}})")

    definiciones: List[Tuple[WatcherConfig, StoreContext]] = []
    for item in items:
        item = _aplicar_defaults(item, defaults)
        config = WatcherConfig.from_dict(item)
        context = StoreContext(
            store_id=config.store_id,
            pos_integration_id=str(item.get("pos_integration_id") or item.get("posIntegrationId") or ""),
            company_id=str(item.get("company_id") or item.get("companyId") or ""),
            user_id=item.get("user_id") or item.get("userId"),
        )
        definiciones.append((config, context))

    logger.info("Tiendas cargadas desde %s: %d", path, len(definiciones))
    return definiciones


def _aplicar_defaults(item: Dict[str, Any], defaults: Optional[WatcherDefaultsConfig]) -> Dict[str, Any]:
    if defaults is None:
        return item
    item = dict(item)
    if "file_patterns" not in item and "filePatterns" not in item:
        item["file_patterns"] = defaults.file_patterns
    if "poll_interval_seconds" not in item and "pollIntervalSeconds" not in item:
        item["poll_interval_seconds"] = defaults.poll_interval_seconds
    return item


def _log_result(result) -> None:
    logger.info(
        "Resultado: %s | %s | tipo=%s | registros=%s | %d ms%s",
        result.status.value, result.file_name, result.document_type,
        result.record_count, result.processing_time_ms,
        f" | {result.error_message}" if result.error_message else "",
    )


def run_watch(container: ApplicationContainer, stores_file: Path) -> None:
    registry = container.watcher_registry()
    defaults = container.config().watchers

    iniciados = 0
    for config, context in load_store_definitions(stores_file, defaults):
        try:
            registry.start_watching(config, context)
            iniciados += 1
        except Exception:
            logger.exception("No se pudo iniciar el watcher de la tienda %s", config.store_id)

    if not iniciados:
        logger.warning("No se iniciaron watchers (verifique %s)", stores_file)
        return

    logger.info(f"Monitoreando {iniciados} tiendas. Presione Ctrl+C para salir.")
    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        logger.info("Deteniendo watchers...")


def run_import(container: ApplicationContainer, file_path: Path, store_id: str,
               file_type: Optional[str] = None) -> int:
    result = container.watcher_registry().queue_manual_import(store_id, file_path, file_type)
    _log_result(result)
    return 1 if result.status == ProcessingStatus.FAILED else 0


def main(argv: Optional[List[str]] = None) -> int:
    """
    Watchers de todas las tiendas definidas:
    python -m pos_exchange.presentation.console.console_app --watch --stores stores.json

    Importación manual de un archivo:
    python -m pos_exchange.presentation.console.console_app --import TLOG.xml --store-id S1

    Reporte Excel al salir:
    --report reports/procesamiento.xlsx
    """
    parser = argparse.ArgumentParser(description="POS File Exchange Runner (NAXML)")
    mode = parser.add_mutually_exclusive_group(required=True)
    mode.add_argument("--watch", action="store_true", help="Observa las carpetas de todas las tiendas")
    mode.add_argument("--import", dest="import_file", type=str, help="Importa un archivo puntual")

    parser.add_argument("--stores", type=str, help="Archivo JSON de tiendas (override de STORES_FILE)")
    parser.add_argument("--store-id", type=str, help="Tienda destino para --import")
    parser.add_argument("--type", dest="file_type", type=str, help="Tipo de archivo indicado (informativo)")
    parser.add_argument("--report", type=str, help="Ruta del reporte Excel a generar al terminar")

    args = parser.parse_args(argv)

    config = get_config()
    configurar_logging(config)
    container = ApplicationContainer(config)
    report = container.processing_report() if args.report else None

    exit_code = 0
    try:
        if args.watch:
            stores_file = Path(args.stores) if args.stores else config.watchers.stores_file
            if stores_file is None:
                parser.error("--watch requiere --stores o STORES_FILE en .env")
            logger.info("Ejecutando en modo --watch (%s), Ctrl+C para salir", stores_file)
            run_watch(container, stores_file)
        else:
            if not args.store_id:
                parser.error("--import requiere --store-id")
            exit_code = run_import(container, Path(args.import_file), args.store_id, args.file_type)
    finally:
        try:
            container.shutdown()
            logger.info("Watchers detenidos y conexiones cerradas correctamente")
        except Exception:
            logger.exception("Error en el apagado")
        if report is not None:
            report.write_excel(Path(args.report), container.watcher_registry().get_all_statuses())

    return exit_code


if __name__ == "__main__":
    sys.exit(main())
