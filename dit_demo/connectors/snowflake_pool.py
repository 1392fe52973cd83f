"""
Snowflake Connection Pool Manager

Manages a small connection pool for the demo steps with retry logic and
periodic health checks. Blocking connector calls run in an executor so the
step runner stays async.
"""

import logging
from typing import Dict, Optional, Any, List, cast
from contextlib import asynccontextmanager
import asyncio
from datetime import datetime
from concurrent.futures import Executor, ThreadPoolExecutor

import snowflake.connector
from snowflake.connector import DictCursor, SnowflakeConnection
from snowflake.connector.errors import (
    OperationalError,
)

from dit_demo.config import settings

logger = logging.getLogger(__name__)


class PoolExhaustedError(RuntimeError):
    """Raised when every pooled connection is checked out."""


class SnowflakeConnectionPool:
    """
    Connection pool for Snowflake with health monitoring and retry logic.

    The demo issues statements strictly in sequence, so the default pool holds
    a single connection; session context set with USE ... statements then
    carries across statements of a step.
    """

    def __init__(
        self,
        account: str,
        user: str,
        password: Optional[str] = None,
        warehouse: Optional[str] = None,
        database: Optional[str] = None,
        schema: Optional[str] = None,
        role: Optional[str] = None,
        pool_size: int = 1,
        max_overflow: int = 0,
        recycle: int = 3600,
        max_retries: int = 3,
        retry_delay: float = 1.0,
        *,
        executor: Executor | None = None,
        owns_executor: bool = False,
        connect_login_timeout: int | None = None,
        connect_network_timeout: int | None = None,
        connect_socket_timeout: int | None = None,
        session_parameters: Optional[Dict[str, Any]] = None,
    ):
        """
        Initialize Snowflake connection pool.

        Args:
            account: Snowflake account identifier
            user: Username
            password: Password
            warehouse: Default warehouse
            database: Default database
            schema: Default schema
            role: Default role
            pool_size: Base pool size
            max_overflow: Max additional connections
            recycle: Recycle connections after N seconds
            max_retries: Max retry attempts for transient failures
            retry_delay: Delay between retries in seconds
        """
        self.account = account
        self.user = user
        self.password = password
        self.warehouse = warehouse
        self.database = database
        self.schema = schema
        self.role = role

        self.pool_size = pool_size
        self.max_overflow = max_overflow
        self.recycle = recycle
        self.max_retries = max_retries
        self.retry_delay = retry_delay

        self._pool: List[SnowflakeConnection] = []
        self._in_use: Dict[int, SnowflakeConnection] = {}
        self._connection_times: Dict[int, datetime] = {}
        self._last_health_check: Dict[int, datetime] = {}
        self._lock = asyncio.Lock()
        self._initialized = False
        self._executor: Executor | None = executor
        self._owns_executor: bool = bool(owns_executor)
        self._connect_login_timeout = (
            int(connect_login_timeout)
            if connect_login_timeout is not None
            else settings.SNOWFLAKE_CONNECT_LOGIN_TIMEOUT
        )
        self._connect_network_timeout = (
            int(connect_network_timeout)
            if connect_network_timeout is not None
            else settings.SNOWFLAKE_CONNECT_NETWORK_TIMEOUT
        )
        self._connect_socket_timeout = (
            int(connect_socket_timeout)
            if connect_socket_timeout is not None
            else settings.SNOWFLAKE_CONNECT_SOCKET_TIMEOUT
        )
        self._session_parameters: Dict[str, Any] = dict(session_parameters or {})
        self._health_check_interval_seconds: float = 30.0

        logger.info(
            f"Initialized Snowflake pool: {user}@{account}, "
            f"pool_size={pool_size}, max_overflow={max_overflow}"
        )

    def _run_in_executor(self, func, *args):
        loop = asyncio.get_running_loop()
        return loop.run_in_executor(self._executor, func, *args)

    def max_connections(self) -> int:
        return int(self.pool_size) + int(self.max_overflow)

    async def initialize(self):
        """Initialize the connection pool by creating base connections."""
        if self._initialized:
            return

        async with self._lock:
            if self._initialized:
                return

            logger.info("Creating initial Snowflake connections...")

            tasks = [self._create_connection() for _ in range(int(self.pool_size))]
            connections = await asyncio.gather(*tasks, return_exceptions=True)

            errors = []
            for conn in connections:
                if isinstance(conn, BaseException):
                    logger.error(f"Failed to create initial connection: {conn}")
                    errors.append(conn)
                else:
                    self._pool.append(conn)
                    self._connection_times[id(conn)] = datetime.now()
                    self._last_health_check[id(conn)] = datetime.now()

            if errors and not self._pool:
                raise errors[0]

            self._initialized = True
            logger.info(
                f"Connection pool initialized with {len(self._pool)} connections"
            )

    def _get_connection_params(self) -> Dict[str, Any]:
        """Get connection parameters for snowflake.connector."""
        session_params: Dict[str, Any] = {"QUERY_TAG": settings.SNOWFLAKE_QUERY_TAG}
        session_params.update(self._session_parameters)
        params = {
            "account": self.account,
            "user": self.user,
            "paramstyle": "qmark",
            "login_timeout": self._connect_login_timeout,
            "network_timeout": self._connect_network_timeout,
            "socket_timeout": self._connect_socket_timeout,
            "session_parameters": {
                **session_params,
            },
        }

        if self.password:
            params["password"] = self.password

        if self.warehouse:
            params["warehouse"] = self.warehouse
        if self.database:
            params["database"] = self.database
        if self.schema:
            params["schema"] = self.schema
        if self.role:
            params["role"] = self.role

        return params

    async def _create_connection(self) -> SnowflakeConnection:
        """
        Create a new Snowflake connection with retry logic.

        Returns:
            SnowflakeConnection: New connection

        Raises:
            OperationalError: If connection fails after retries
        """
        params = self._get_connection_params()

        for attempt in range(self.max_retries):
            try:
                conn = cast(
                    SnowflakeConnection,
                    await self._run_in_executor(
                        lambda: snowflake.connector.connect(**params)
                    ),
                )

                logger.debug(f"Created new Snowflake connection: {id(conn)}")
                return conn

            except OperationalError as e:
                if attempt < self.max_retries - 1:
                    logger.warning(
                        f"Connection attempt {attempt + 1} failed, retrying: {e}"
                    )
                    await asyncio.sleep(self.retry_delay * (attempt + 1))
                else:
                    logger.error(
                        f"Failed to create connection after {self.max_retries} attempts"
                    )
                    raise

        raise RuntimeError("Failed to create Snowflake connection")

    async def _is_connection_valid(self, conn: SnowflakeConnection) -> bool:
        """
        Check if a connection is still valid.

        Closed or expired connections are invalid; open ones are checked with
        SELECT 1 at most once per health check interval.
        """
        try:
            if conn.is_closed():
                return False

            conn_id = id(conn)
            if conn_id in self._connection_times:
                age = (datetime.now() - self._connection_times[conn_id]).total_seconds()
                if age > self.recycle:
                    logger.debug(f"Connection {conn_id} expired (age: {age}s)")
                    return False

            last = self._last_health_check.get(conn_id)
            if (
                last is None
                or (datetime.now() - last).total_seconds()
                >= self._health_check_interval_seconds
            ):
                cursor = await self._run_in_executor(conn.cursor)
                try:
                    await self._run_in_executor(cursor.execute, "SELECT 1")
                finally:
                    await self._run_in_executor(cursor.close)
                self._last_health_check[conn_id] = datetime.now()

            return True

        except Exception as e:
            logger.debug(f"Connection validation failed: {e}")
            return False

    def _forget(self, conn: SnowflakeConnection) -> None:
        try:
            conn.close()
        except Exception as e:
            logger.debug(f"Error closing connection {id(conn)}: {e}")
        self._connection_times.pop(id(conn), None)
        self._last_health_check.pop(id(conn), None)

    @asynccontextmanager
    async def get_connection(self):
        """
        Get a connection from the pool (async context manager).

        Usage:
            async with pool.get_connection() as conn:
                cursor = conn.cursor()
                cursor.execute("SELECT 1")

        Yields:
            SnowflakeConnection: Connection from pool
        """
        if not self._initialized:
            await self.initialize()

        conn = None

        try:
            while conn is None:
                candidate: Optional[SnowflakeConnection] = None

                async with self._lock:
                    if self._pool:
                        candidate = self._pool.pop()
                    elif len(self._in_use) >= self.max_connections():
                        raise PoolExhaustedError(
                            f"Connection pool exhausted "
                            f"(max: {self.max_connections()})"
                        )

                if candidate is None:
                    candidate = await self._create_connection()
                    now = datetime.now()
                    self._connection_times[id(candidate)] = now
                    self._last_health_check[id(candidate)] = now

                if await self._is_connection_valid(candidate):
                    conn = candidate
                else:
                    self._forget(candidate)

            async with self._lock:
                self._in_use[id(conn)] = conn

            yield conn

        finally:
            if conn is not None:
                async with self._lock:
                    self._in_use.pop(id(conn), None)
                    self._pool.append(conn)

    async def execute_query(
        self,
        query: str,
        params: Optional[object] = None,
    ) -> List[tuple]:
        """
        Execute a query and return results.

        Args:
            query: SQL query to execute
            params: Query parameters (qmark binding)

        Returns:
            List of result tuples
        """
        results, _ = await self.execute_query_with_info(query, params)
        return results

    async def execute_query_with_info(
        self,
        query: str,
        params: Optional[object] = None,
        *,
        fetch: bool = True,
    ) -> tuple[List[tuple], dict[str, Any]]:
        """
        Execute a query and return results + execution info.

        Returns:
            (results, info) where info includes:
              - query_id: Snowflake QUERY_ID (cursor.sfqid) when available
              - rowcount: cursor.rowcount (may be -1 depending on statement)
              - columns: result column names
        """
        async with self.get_connection() as conn:
            cursor = await self._run_in_executor(conn.cursor)
            try:
                if params is None:
                    await self._run_in_executor(cursor.execute, query)
                else:
                    await self._run_in_executor(cursor.execute, query, params)

                description = getattr(cursor, "description", None) or []
                info = {
                    "query_id": getattr(cursor, "sfqid", None),
                    "rowcount": getattr(cursor, "rowcount", None),
                    "columns": [col[0] for col in description],
                }
                results: List[tuple] = []
                if fetch:
                    results = await self._run_in_executor(cursor.fetchall)

                return results, info
            finally:
                await self._run_in_executor(cursor.close)

    async def fetch_dicts(
        self, query: str, params: Optional[object] = None
    ) -> List[Dict[str, Any]]:
        """Execute a query and return rows keyed by column name."""
        async with self.get_connection() as conn:
            cursor = await self._run_in_executor(conn.cursor, DictCursor)
            try:
                if params is None:
                    await self._run_in_executor(cursor.execute, query)
                else:
                    await self._run_in_executor(cursor.execute, query, params)
                return await self._run_in_executor(cursor.fetchall)
            finally:
                await self._run_in_executor(cursor.close)

    async def get_pool_stats(self) -> Dict[str, Any]:
        """
        Get connection pool statistics.

        Returns:
            Dict with pool statistics
        """
        async with self._lock:
            return {
                "pool_size": self.pool_size,
                "max_overflow": self.max_overflow,
                "available": len(self._pool),
                "in_use": len(self._in_use),
                "total": len(self._pool) + len(self._in_use),
                "initialized": self._initialized,
            }

    async def close_all(self):
        """Close all connections in the pool."""
        async with self._lock:
            logger.info("Closing all Snowflake connections...")

            for conn in [*self._pool, *self._in_use.values()]:
                self._forget(conn)

            self._pool.clear()
            self._in_use.clear()
            self._initialized = False

            logger.info("All connections closed")

        if self._owns_executor and self._executor is not None:
            self._executor.shutdown(wait=False)  # type: ignore[attr-defined]
            self._executor = None
            self._owns_executor = False


# Global connection pool instance
_default_pool: Optional[SnowflakeConnectionPool] = None


def get_default_pool(role: Optional[str] = None) -> SnowflakeConnectionPool:
    """
    Get or create the default Snowflake connection pool.

    The pool connects without a database/schema so it can run the setup and
    teardown steps; steps set their own context with USE statements. The
    demo warehouse is the session default so a replaced connection can still
    run queries.

    Args:
        role: Role for new connections (defaults to SNOWFLAKE_ROLE)

    Returns:
        SnowflakeConnectionPool: Default pool instance
    """
    global _default_pool

    if _default_pool is None:
        _default_pool = SnowflakeConnectionPool(
            account=settings.SNOWFLAKE_ACCOUNT,
            user=settings.SNOWFLAKE_USER,
            password=settings.SNOWFLAKE_PASSWORD,
            role=role or settings.SNOWFLAKE_ROLE,
            warehouse=settings.DEMO_WAREHOUSE,
            max_retries=settings.SNOWFLAKE_CONNECT_MAX_RETRIES,
            executor=ThreadPoolExecutor(max_workers=1, thread_name_prefix="sf-demo"),
            owns_executor=True,
        )

    return _default_pool


async def close_default_pool():
    """Close the default connection pool."""
    global _default_pool
    if _default_pool is not None:
        await _default_pool.close_all()
        _default_pool = None
