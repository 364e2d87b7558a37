"""
Abstracción de conexión a base de datos (Dependency Inversion Principle).

Los repositorios de file log y auditoría dependen de IDatabaseConnection;
SqlServerConnection es la implementación sobre pyodbc.
"""
from abc import ABC, abstractmethod
from typing import Any, List, Optional
from contextlib import contextmanager
import pyodbc
import logging
import threading

from ..config.settings import DatabaseConfig


logger = logging.getLogger(__name__)


class IDatabaseConnection(ABC):
    """
    Interfaz para conexiones a base de datos.
    """

    @abstractmethod
    def connect(self) -> None:
        """Establece la conexión a la base de datos"""
        pass

    @abstractmethod
    def close(self) -> None:
        """Cierra la conexión a la base de datos"""
        pass

    @abstractmethod
    def is_connected(self) -> bool:
        """Verifica si la conexión está activa"""
        pass

    @abstractmethod
    def execute_query(self, query: str, params: Optional[List[Any]] = None) -> List[Any]:
        """
        Ejecuta una query SELECT y retorna las filas.

        Raises:
            ValueError: Si la query no es un SELECT
        """
        pass

    @abstractmethod
    def execute_scalar(self, query: str, params: Optional[List[Any]] = None) -> Optional[Any]:
        """Ejecuta una query y retorna un único valor escalar (o None)."""
        pass

    @abstractmethod
    def execute_non_query(self, query: str, params: Optional[List[Any]] = None) -> int:
        """
        Ejecuta INSERT/UPDATE/DELETE con commit.

        Returns:
            Número de filas afectadas
        """
        pass

    @abstractmethod
    @contextmanager
    def transaction(self):
        """
        Context manager para transacciones.

        Usage:
            with connection.transaction():
                connection.execute_non_query(...)
        """
        pass


class SqlServerConnection(IDatabaseConnection):
    """Implementación de conexión para SQL Server usando pyodbc"""

    def __init__(self, config: DatabaseConfig):
        self._config = config
        self._connection: Optional[pyodbc.Connection] = None
        # RLock: los timers de varias tiendas comparten esta conexión
        self._lock = threading.RLock()

    def connect(self) -> None:
        with self._lock:
            try:
                if self._connection is not None:
                    logger.debug("Conexión ya existente, reutilizando")
                    return

                logger.info("Estableciendo conexión a SQL Server (%s/%s)...",
                            self._config.server, self._config.database)
                self._connection = pyodbc.connect(self._config.connection_string)
                logger.info("Conexión a SQL Server establecida correctamente")

            except pyodbc.Error as e:
                logger.error(f"Error al conectar a SQL Server: {e}", exc_info=True)
                raise ConnectionError(f"No se pudo conectar a la base de datos: {e}")

    def close(self) -> None:
        """Cierra la conexión en forma idempotente"""
        with self._lock:
            if self._connection is None:
                return
            try:
                self._connection.close()
                logger.debug("Conexión a SQL Server cerrada correctamente")
            except pyodbc.Error as e:
                logger.warning(f"Error al cerrar conexión (ignorado): {e}")
            finally:
                self._connection = None

    def is_connected(self) -> bool:
        return self._connection is not None

    def _get_cursor(self) -> pyodbc.Cursor:
        if not self.is_connected():
            self.connect()
        return self._connection.cursor()

    def execute_query(self, query: str, params: Optional[List[Any]] = None) -> List[Any]:
        query_clean = query.strip().upper()
        if not query_clean.startswith('SELECT') and not query_clean.startswith('WITH'):
            raise ValueError("execute_query solo acepta queries SELECT o WITH (CTEs)")

        with self._lock:
            cursor = self._get_cursor()
            try:
                cursor.execute(query, params or [])
                rows = cursor.fetchall()
                logger.debug(f"Query ejecutada, {len(rows)} filas retornadas")
                return rows
            except pyodbc.Error as e:
                logger.error(f"Error ejecutando query: {e}\nQuery: {query}", exc_info=True)
                raise
            finally:
                cursor.close()

    def execute_scalar(self, query: str, params: Optional[List[Any]] = None) -> Optional[Any]:
        with self._lock:
            cursor = self._get_cursor()
            try:
                cursor.execute(query, params or [])
                row = cursor.fetchone()
                return row[0] if row else None
            except pyodbc.Error as e:
                logger.error(f"Error ejecutando scalar query: {e}\nQuery: {query}", exc_info=True)
                raise
            finally:
                cursor.close()

    def execute_non_query(self, query: str, params: Optional[List[Any]] = None) -> int:
        with self._lock:
            cursor = self._get_cursor()
            try:
                cursor.execute(query, params or [])
                self._connection.commit()
                rows_affected = cursor.rowcount
                logger.debug(f"Non-query ejecutada, {rows_affected} filas afectadas")
                return rows_affected
            except pyodbc.IntegrityError:
                # Conflicto de unicidad: lo traduce el repositorio
                self._connection.rollback()
                raise
            except pyodbc.Error as e:
                logger.error(f"Error ejecutando non-query: {e}\nQuery: {query}", exc_info=True)
                self._connection.rollback()
                raise
            finally:
                cursor.close()

    @contextmanager
    def transaction(self):
        with self._lock:
            if not self.is_connected():
                self.connect()
            try:
                yield self
                self._connection.commit()
                logger.debug("Transacción confirmada (commit)")
            except Exception as e:
                self._connection.rollback()
                logger.error(f"Transacción revertida (rollback) por error: {e}", exc_info=True)
                raise

    def __enter__(self):
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
