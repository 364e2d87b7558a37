import pytest

from pos_exchange.domain.entities.watcher import WatcherConfig
from pos_exchange.domain.exceptions.domain_exception import ValueObjectValidationException


# --- Tests para WatcherConfig ---
def test_patrones_como_texto_se_separan_por_coma():
    """
    Verifica que un str no se descompone en caracteres sueltos ('*' aceptaría todo).
    """
    config = WatcherConfig(store_id="s", watch_path="/w", file_patterns="*.xml")
    assert config.file_patterns == ("*.xml",)

    varios = WatcherConfig(store_id="s", watch_path="/w", file_patterns=" *.xml, tlog_??.dat ,")
    assert varios.file_patterns == ("*.xml", "tlog_??.dat")


def test_patrones_lista_se_guarda_como_tupla():
    config = WatcherConfig(store_id="s", watch_path="/w", file_patterns=["*.xml", "*.naxml"])
    assert config.file_patterns == ("*.xml", "*.naxml")


@pytest.mark.parametrize("patrones", ["", " , ", [], None])
def test_sin_patrones_validos(patrones):
    with pytest.raises(ValueObjectValidationException):
        WatcherConfig(store_id="s", watch_path="/w", file_patterns=patrones)


def test_intervalo_invalido():
    with pytest.raises(ValueObjectValidationException):
        WatcherConfig(store_id="s", watch_path="/w", poll_interval_seconds=0)


def test_from_dict_camel_case():
    config = WatcherConfig.from_dict({"storeId": "S9", "watchPath": "/in", "filePatterns": "*.xml,*.dat",
                                      "pollIntervalSeconds": "5"})
    assert config.store_id == "S9"
    assert config.file_patterns == ("*.xml", "*.dat")
    assert config.poll_interval_seconds == 5.0
