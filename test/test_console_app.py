import json
from unittest.mock import MagicMock, patch

import pytest

from pos_exchange.domain.value_objects.processing_status import ProcessingStatus
from pos_exchange.infrastructure.config.settings import WatcherDefaultsConfig
from pos_exchange.presentation.console import console_app
from pos_exchange.presentation.console.console_app import load_store_definitions, run_import


# --- Tests para load_store_definitions ---
def test_load_store_definitions_formato_stores(tmp_path):
    ruta = tmp_path / "stores.json"
    ruta.write_text(json.dumps({"stores": [{
        "store_id": "S1",
        "watch_path": str(tmp_path / "in"),
        "processed_path": str(tmp_path / "ok"),
        "file_patterns": ["*.xml", "*.XML"],
        "poll_interval_seconds": 30,
        "pos_integration_id": "pos-1",
        "company_id": "c-1",
    }]}), encoding="utf-8")

    [(config, context)] = load_store_definitions(ruta)

    assert config.store_id == "S1"
    assert config.file_patterns == ("*.xml", "*.XML")
    assert config.poll_interval_seconds == 30
    assert context.pos_integration_id == "pos-1"
    assert context.user_id is None


def test_load_store_definitions_camel_case_y_defaults(tmp_path, monkeypatch):
    """
    Verifica las claves camelCase y que patrones/intervalo faltantes toman los defaults.
    """
    monkeypatch.chdir(tmp_path)
    ruta = tmp_path / "stores.json"
    ruta.write_text(json.dumps([{
        "storeId": "S2",
        "watchPath": "/data/s2",
        "posIntegrationId": "pos-2",
        "companyId": "c-2",
        "userId": "u-2",
    }]), encoding="utf-8")
    defaults = WatcherDefaultsConfig(DEFAULT_POLL_INTERVAL_SECONDS=15, DEFAULT_FILE_PATTERNS="*.xml,*.naxml")

    [(config, context)] = load_store_definitions(ruta, defaults)

    assert config.watch_path == "/data/s2"
    assert config.poll_interval_seconds == 15
    assert config.file_patterns == ("*.xml", "*.naxml")
    assert context.company_id == "c-2"
    assert context.user_id == "u-2"


def test_load_store_definitions_formato_invalido(tmp_path):
    ruta = tmp_path / "stores.json"
    ruta.write_text(json.dumps({"tiendas": {}}), encoding="utf-8")
    with pytest.raises(ValueError):
        load_store_definitions(ruta)


# --- Tests para run_import / main ---
def test_run_import_codigo_de_salida():
    container = MagicMock()
    resultado = MagicMock(status=ProcessingStatus.FAILED, processing_time_ms=3, error_message="x")
    container.watcher_registry.return_value.queue_manual_import.return_value = resultado

    assert run_import(container, "doc.xml", "S1") == 1
    container.watcher_registry.return_value.queue_manual_import.assert_called_once_with("S1", "doc.xml", None)

    resultado.status = ProcessingStatus.SKIPPED
    assert run_import(container, "doc.xml", "S1") == 0


def test_main_import_requiere_store_id():
    with patch.object(console_app, "configurar_logging"), \
         patch.object(console_app, "ApplicationContainer"):
        with pytest.raises(SystemExit):
            console_app.main(["--import", "doc.xml"])
