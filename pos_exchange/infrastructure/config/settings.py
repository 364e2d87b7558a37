"""
Configuración principal de la aplicación usando Pydantic v2.
"""
from pathlib import Path
from typing import List, Any
import os

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic.functional_validators import field_validator


class DatabaseConfig(BaseSettings):
    """
    Configuración de base de datos (Pydantic v2).

    Todos los campos son opcionales: sin servidor configurado se usa el
    almacenamiento en memoria.
    """
    driver: str = Field(default='ODBC Driver 17 for SQL Server', alias='SQL_DRIVER')
    server: str = Field(default='', alias='SQL_SERVER')
    database: str = Field(default='', alias='SQL_DATABASE')
    username: str = Field(default='', alias='SQL_USERNAME')
    password: str = Field(default='', alias='SQL_PASSWORD')
    trusted: int = Field(default=0, alias='SQL_TRUSTED')

    # Lee .env automáticamente
    model_config = SettingsConfigDict(
        env_file='.env',
        env_file_encoding='utf-8',
        extra='ignore',
    )

    @property
    def is_configured(self) -> bool:
        return bool(self.server and self.database)

    @property
    def connection_string(self) -> str:
        """Genera el connection string para SQL Server"""
        if self.trusted == 1:
            return (
                f"DRIVER={{{self.driver}}};"
                f"SERVER={self.server};"
                f"DATABASE={self.database};"
                f"Trusted_Connection=yes;"
            )
        return (
            f"DRIVER={{{self.driver}}};"
            f"SERVER={self.server};"
            f"DATABASE={self.database};"
            f"UID={self.username};"
            f"PWD={self.password}"
        )


class StorageConfig(BaseSettings):
    """
    Backend del file log y la auditoría.
    """
    backend: str = Field(default='memory', alias='STORAGE_BACKEND')
    file_log_table: str = Field(default='PosFileLog', alias='FILE_LOG_TABLE')
    audit_table: str = Field(default='PosDataExchangeAudit', alias='AUDIT_TABLE')

    model_config = SettingsConfigDict(
        env_file='.env',
        env_file_encoding='utf-8',
        extra='ignore',
    )

    @field_validator('backend', mode='before')
    @classmethod
    def validate_backend(cls, v: Any) -> str:
        valor = str(v or 'memory').strip().lower()
        if valor not in ('memory', 'sqlserver'):
            raise ValueError(f"STORAGE_BACKEND no soportado: '{v}' (use memory o sqlserver)")
        return valor

    @field_validator('file_log_table', 'audit_table')
    @classmethod
    def validate_table_name(cls, v: str) -> str:
        # Los nombres se interpolan en SQL: solo identificadores simples
        if not v.replace('_', '').replace('.', '').isalnum():
            raise ValueError(f"Nombre de tabla inválido: '{v}'")
        return v

    @property
    def uses_sql_server(self) -> bool:
        return self.backend == 'sqlserver'


class WatcherDefaultsConfig(BaseSettings):
    """
    Valores por defecto de los watchers (se aplican a stores.json).
    """
    poll_interval_seconds: float = Field(default=60, alias='DEFAULT_POLL_INTERVAL_SECONDS')
    # Lista separada por comas, ej: "*.xml,tlog_??.dat"
    file_patterns_raw: str = Field(default='*.xml', alias='DEFAULT_FILE_PATTERNS')
    stores_file: Path | None = Field(default=None, alias='STORES_FILE')

    model_config = SettingsConfigDict(
        env_file='.env',
        env_file_encoding='utf-8',
        extra='ignore',
    )

    @field_validator('poll_interval_seconds')
    @classmethod
    def validate_intervalo(cls, v: float) -> float:
        if v <= 0:
            raise ValueError('El intervalo de sondeo debe ser mayor a 0')
        return v

    @property
    def file_patterns(self) -> List[str]:
        return [p.strip() for p in self.file_patterns_raw.split(',') if p.strip()]


class PathConfig(BaseSettings):
    """
    Configuración de rutas/carpetas de la aplicación.
    """
    base_dir: Path = Field(default_factory=lambda: Path(__file__).resolve().parents[3], alias='BASE_DIR')
    logs_dir: Path | None = Field(default=None, alias='LOGS_DIR')
    reports_dir: Path | None = Field(default=None, alias='REPORTS_DIR')

    model_config = SettingsConfigDict(
        env_file='.env',
        env_file_encoding='utf-8',
        extra='ignore',
    )

    def __init__(self, **data: Any):
        super().__init__(**data)
        if self.logs_dir is None:
            object.__setattr__(self, 'logs_dir', self.base_dir / 'logs')
        if self.reports_dir is None:
            object.__setattr__(self, 'reports_dir', self.base_dir / 'reports')

    @field_validator('base_dir', 'logs_dir', 'reports_dir', mode='before')
    @classmethod
    def validate_and_expand_path(cls, v: Any) -> Path:
        """Valida y expande rutas (maneja ~, variables de entorno, etc.)"""
        if v is None:
            return v
        v_str = str(v).strip().strip('"').strip("'")
        expanded = os.path.expandvars(os.path.expanduser(v_str))
        return Path(expanded).resolve()

    @property
    def log_file(self) -> Path:
        return self.logs_dir / 'POS-FILE-EXCHANGE-LOG.txt'


class AppConfig(BaseSettings):
    """
    Configuración general de la aplicación (Pydantic v2).
    """
    environment: str = Field(default='DEV', alias='APP_ENV')

    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    watchers: WatcherDefaultsConfig = Field(default_factory=WatcherDefaultsConfig)
    paths: PathConfig = Field(default_factory=PathConfig)

    model_config = SettingsConfigDict(
        env_file='.env',
        env_file_encoding='utf-8',
        extra='ignore',
    )

    @property
    def is_production(self) -> bool:
        return self.environment.upper() in ('PRD', 'PROD', 'PRODUCTION')

    @property
    def is_development(self) -> bool:
        return self.environment.upper() in ('DEV', 'DEVELOPMENT')


# Singleton
_config_instance: AppConfig | None = None

def get_config() -> AppConfig:
    global _config_instance
    if _config_instance is None:
        _config_instance = AppConfig()
    return _config_instance

def reload_config() -> AppConfig:
    global _config_instance
    _config_instance = AppConfig()
    return _config_instance
