"""
数据库连接和管理模块
封装 DuckDB 连接、表结构以及按表名的通用增删改查操作

数据库表说明：
- users: 应用用户（与认证身份 auth_user_id 一一对应）
- ingredients: 配料目录（由菜单管理流程维护，本服务只读）
- products: 菜单披萨（只读）
- promotions: 首页促销（只读）
- cart_line / cart_line_modifier: 购物车条目及其配料修饰
- orders / order_line / order_line_modifier: 订单快照
- logs: 业务审计日志
"""

import json
import re
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Generator, Iterable, List, Optional, Sequence

import duckdb
import structlog

from .exceptions import BaseApplicationError, DatabaseError, RecordNotFoundError
from ..config.settings import settings

logger = structlog.get_logger(__name__)

# 完整的表结构定义
# 金额统一使用最小货币单位的整数（BIGINT），避免浮点精度问题
SCHEMA_SQL = r"""
CREATE SEQUENCE IF NOT EXISTS users_id_seq;
CREATE TABLE IF NOT EXISTS users (
  id INTEGER DEFAULT nextval('users_id_seq') PRIMARY KEY,
  auth_user_id TEXT UNIQUE NOT NULL,
  full_name TEXT,
  role TEXT DEFAULT 'CLIENT',
  created_at TIMESTAMP DEFAULT now()
);

CREATE SEQUENCE IF NOT EXISTS ingredients_id_seq;
CREATE TABLE IF NOT EXISTS ingredients (
  id INTEGER DEFAULT nextval('ingredients_id_seq') PRIMARY KEY,
  name TEXT NOT NULL,
  category TEXT,
  extra_charge BIGINT DEFAULT 0 CHECK(extra_charge >= 0),
  active BOOLEAN DEFAULT TRUE,
  created_at TIMESTAMP DEFAULT now()
);

CREATE SEQUENCE IF NOT EXISTS products_id_seq;
CREATE TABLE IF NOT EXISTS products (
  id INTEGER DEFAULT nextval('products_id_seq') PRIMARY KEY,
  name TEXT NOT NULL,
  description TEXT,
  price BIGINT NOT NULL CHECK(price >= 0),
  tag TEXT,
  image_url TEXT,
  created_at TIMESTAMP DEFAULT now()
);

CREATE SEQUENCE IF NOT EXISTS promotions_id_seq;
CREATE TABLE IF NOT EXISTS promotions (
  id INTEGER DEFAULT nextval('promotions_id_seq') PRIMARY KEY,
  title TEXT NOT NULL,
  subtitle TEXT,
  badge TEXT,
  image_url TEXT,
  sort_order INTEGER DEFAULT 0,
  is_active BOOLEAN DEFAULT TRUE,
  starts_at TIMESTAMP,
  ends_at TIMESTAMP,
  created_at TIMESTAMP DEFAULT now()
);

CREATE SEQUENCE IF NOT EXISTS cart_line_id_seq;
CREATE TABLE IF NOT EXISTS cart_line (
  id INTEGER DEFAULT nextval('cart_line_id_seq') PRIMARY KEY,
  user_id INTEGER NOT NULL,
  base_product_id INTEGER,  -- 为空表示完全自定义的披萨
  display_name TEXT NOT NULL,
  size TEXT CHECK(size IN ('SMALL','MEDIUM','LARGE')) NOT NULL,
  crust_style TEXT,
  crust_edge TEXT,
  quantity INTEGER NOT NULL CHECK(quantity > 0),
  unit_price BIGINT NOT NULL CHECK(unit_price >= 0),
  subtotal BIGINT NOT NULL,  -- 始终等于 unit_price * quantity
  created_at TIMESTAMP DEFAULT now()
);

CREATE INDEX IF NOT EXISTS idx_cart_line_user ON cart_line(user_id);

CREATE SEQUENCE IF NOT EXISTS cart_line_modifier_id_seq;
CREATE TABLE IF NOT EXISTS cart_line_modifier (
  id INTEGER DEFAULT nextval('cart_line_modifier_id_seq') PRIMARY KEY,
  cart_line_id INTEGER NOT NULL,
  ingredient_id INTEGER NOT NULL,
  kind TEXT CHECK(kind IN ('INCLUDED','EXTRA','EXCLUDED')) NOT NULL,
  extra_charge BIGINT DEFAULT 0
);

CREATE UNIQUE INDEX IF NOT EXISTS uniq_cart_line_ingredient ON cart_line_modifier(cart_line_id, ingredient_id);

CREATE SEQUENCE IF NOT EXISTS orders_id_seq;
CREATE TABLE IF NOT EXISTS orders (
  id INTEGER DEFAULT nextval('orders_id_seq') PRIMARY KEY,
  client_id INTEGER NOT NULL,
  status TEXT CHECK(status IN ('PENDING','ACCEPTED','REJECTED','PREPARING','ON_THE_WAY','DELIVERED','CANCELED')) NOT NULL,
  total BIGINT NOT NULL,  -- 下单时的快照，之后不再重算
  delivery_address TEXT,
  channel TEXT,
  assigned_agent_id INTEGER,  -- 由外部履约系统分配
  created_at TIMESTAMP DEFAULT now()
);

CREATE INDEX IF NOT EXISTS idx_orders_client ON orders(client_id);

CREATE SEQUENCE IF NOT EXISTS order_line_id_seq;
CREATE TABLE IF NOT EXISTS order_line (
  id INTEGER DEFAULT nextval('order_line_id_seq') PRIMARY KEY,
  order_id INTEGER NOT NULL,
  base_product_id INTEGER,
  display_name TEXT NOT NULL,
  size TEXT NOT NULL,
  quantity INTEGER NOT NULL,
  unit_price BIGINT NOT NULL,
  subtotal BIGINT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_order_line_order ON order_line(order_id);

CREATE SEQUENCE IF NOT EXISTS order_line_modifier_id_seq;
CREATE TABLE IF NOT EXISTS order_line_modifier (
  id INTEGER DEFAULT nextval('order_line_modifier_id_seq') PRIMARY KEY,
  order_line_id INTEGER NOT NULL,
  ingredient_id INTEGER NOT NULL,
  kind TEXT CHECK(kind IN ('INCLUDED','EXTRA','EXCLUDED')) NOT NULL,
  extra_charge BIGINT DEFAULT 0
);

CREATE UNIQUE INDEX IF NOT EXISTS uniq_order_line_ingredient ON order_line_modifier(order_line_id, ingredient_id);

CREATE SEQUENCE IF NOT EXISTS logs_id_seq;
CREATE TABLE IF NOT EXISTS logs (
  log_id INTEGER DEFAULT nextval('logs_id_seq') PRIMARY KEY,
  user_id INTEGER,
  actor_id INTEGER,
  action TEXT,
  detail_json JSON,
  created_at TIMESTAMP DEFAULT now()
);

CREATE INDEX IF NOT EXISTS idx_logs_user ON logs(user_id);
CREATE INDEX IF NOT EXISTS idx_logs_action ON logs(action);
"""

# 允许通过通用接口访问的表
TABLES = frozenset({
    "users",
    "ingredients",
    "products",
    "promotions",
    "cart_line",
    "cart_line_modifier",
    "orders",
    "order_line",
    "order_line_modifier",
    "logs",
})

_IDENTIFIER = re.compile(r"^[a-z_][a-z0-9_]*$")


def _check_table(table: str) -> str:
    if table not in TABLES:
        raise DatabaseError(f"Unknown table: {table}")
    return table


def _check_column(column: str) -> str:
    if not _IDENTIFIER.match(column):
        raise DatabaseError(f"Invalid column name: {column}")
    return column


def _where_clause(filters: Optional[Dict[str, Any]]) -> tuple:
    """把 {列: 值} 过滤条件转换为 WHERE 子句，列表值转换为 IN"""
    if not filters:
        return "", []
    parts = []
    params: List[Any] = []
    for column, value in filters.items():
        _check_column(column)
        if isinstance(value, (list, tuple, set, frozenset)):
            values = list(value)
            placeholders = ",".join("?" for _ in values)
            parts.append(f"{column} IN ({placeholders})")
            params.extend(values)
        elif value is None:
            parts.append(f"{column} IS NULL")
        else:
            parts.append(f"{column} = ?")
            params.append(value)
    return " WHERE " + " AND ".join(parts), params


def _order_clause(order_by: Optional[Sequence[str]]) -> str:
    """order_by 元素形如 "created_at" 或 "-created_at"（降序）"""
    if not order_by:
        return ""
    parts = []
    for item in order_by:
        if item.startswith("-"):
            parts.append(f"{_check_column(item[1:])} DESC")
        else:
            parts.append(f"{_check_column(item)} ASC")
    return " ORDER BY " + ", ".join(parts)


def _has_empty_in(filters: Optional[Dict[str, Any]]) -> bool:
    return any(
        isinstance(v, (list, tuple, set, frozenset)) and not v
        for v in (filters or {}).values()
    )


class DatabaseManager:
    """数据库管理器，封装所有数据库操作"""

    def __init__(self, db_path: str = None):
        self._connection: Optional[duckdb.DuckDBPyConnection] = None
        self._lock = threading.RLock()
        self.db_path = db_path or self._get_db_path_from_settings()

    def _get_db_path_from_settings(self) -> str:
        """从设置中获取数据库路径"""
        db_url = settings.database_url
        if db_url.startswith("duckdb://"):
            return db_url.replace("duckdb://", "", 1)
        return db_url

    @property
    def connection(self) -> duckdb.DuckDBPyConnection:
        """获取数据库连接"""
        with self._lock:
            if self._connection is None:
                if self.db_path != ":memory:":
                    Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
                try:
                    self._connection = duckdb.connect(self.db_path)
                except duckdb.Error as e:
                    raise DatabaseError(f"Failed to connect database: {e}")
                self._init_schema()
            return self._connection

    def get_connection(self) -> duckdb.DuckDBPyConnection:
        return self.connection

    def _init_schema(self):
        """初始化数据库表结构"""
        try:
            self._connection.execute(SCHEMA_SQL)
        except duckdb.Error as e:
            raise DatabaseError(f"Failed to initialize schema: {e}")

    def init_database(self):
        """初始化数据库"""
        self.get_connection()

    def reset(self, db_path: str = None):
        """关闭当前连接，下次访问时重新连接（测试中配合 :memory: 使用）"""
        with self._lock:
            if self._connection is not None:
                self._connection.close()
            self._connection = None
            if db_path is not None:
                self.db_path = db_path

    @contextmanager
    def transaction(self) -> Generator[duckdb.DuckDBPyConnection, None, None]:
        """
        数据库事务上下文管理器

        事务期间持有连接锁，事务内调用的通用方法共享同一连接
        """
        with self._lock:
            conn = self.connection
            conn.execute("BEGIN")
            try:
                yield conn
                conn.execute("COMMIT")
            except Exception as e:
                try:
                    conn.execute("ROLLBACK")
                except duckdb.Error:
                    pass  # 事务可能已被驱动中止
                if isinstance(e, BaseApplicationError):
                    raise
                if "conflict" in str(e).lower():
                    raise DatabaseError("系统繁忙，请稍后重试", details={"retryable": True})
                raise DatabaseError(f"数据库操作失败: {e}")

    def _execute(self, query: str, params: list = None) -> duckdb.DuckDBPyConnection:
        try:
            con = self.connection
            return con.execute(query, params or [])
        except duckdb.Error as e:
            raise DatabaseError(f"Query execution failed: {e}")

    def execute_query(self, query: str, params: list = None) -> list:
        """执行查询并返回结果"""
        with self._lock:
            return self._execute(query, params).fetchall()

    def execute_one(self, query: str, params: list = None) -> Optional[tuple]:
        """执行查询并返回单条结果"""
        with self._lock:
            return self._execute(query, params).fetchone()

    def fetch_dicts(self, query: str, params: list = None) -> List[Dict[str, Any]]:
        """执行查询并以字典列表返回"""
        with self._lock:
            cur = self._execute(query, params)
            rows = cur.fetchall()
            columns = [d[0] for d in cur.description]
        return [dict(zip(columns, row)) for row in rows]

    # ---- 按表名的通用操作 ----

    def insert(self, table: str, values: Dict[str, Any], returning: str = "id") -> Any:
        """插入一行并返回主键"""
        _check_table(table)
        columns = [_check_column(c) for c in values]
        placeholders = ",".join("?" for _ in columns)
        query = (
            f"INSERT INTO {table}({', '.join(columns)}) VALUES ({placeholders}) "
            f"RETURNING {_check_column(returning)}"
        )
        row = self.execute_one(query, list(values.values()))
        if not row:
            raise DatabaseError(f"Insert into {table} returned no id")
        return row[0]

    def select(self, table: str, filters: Dict[str, Any] = None,
               order_by: Sequence[str] = None, columns: Iterable[str] = None) -> List[Dict[str, Any]]:
        """按条件查询多行"""
        _check_table(table)
        if _has_empty_in(filters):
            return []
        cols = ", ".join(_check_column(c) for c in columns) if columns else "*"
        where, params = _where_clause(filters)
        query = f"SELECT {cols} FROM {table}{where}{_order_clause(order_by)}"
        return self.fetch_dicts(query, params)

    def select_one(self, table: str, filters: Dict[str, Any]) -> Dict[str, Any]:
        """查询恰好一行，否则抛出 RecordNotFoundError"""
        rows = self.select(table, filters)
        if len(rows) != 1:
            raise RecordNotFoundError(
                f"Expected exactly one row in {table}, got {len(rows)}",
                details={"table": table, "filters": {k: str(v) for k, v in filters.items()}},
            )
        return rows[0]

    def update_by_id(self, table: str, record_id: Any, values: Dict[str, Any]) -> None:
        """按主键更新"""
        _check_table(table)
        assignments = ", ".join(f"{_check_column(c)} = ?" for c in values)
        self.execute_query(
            f"UPDATE {table} SET {assignments} WHERE id = ?",
            list(values.values()) + [record_id],
        )

    def delete_where(self, table: str, filters: Dict[str, Any]) -> None:
        """按条件删除；不允许无条件删除整表"""
        _check_table(table)
        if not filters:
            raise DatabaseError(f"Refusing to delete from {table} without filters")
        if _has_empty_in(filters):
            return
        where, params = _where_clause(filters)
        self.execute_query(f"DELETE FROM {table}{where}", params)

    def delete_by_id(self, table: str, record_id: Any) -> None:
        self.delete_where(table, {"id": record_id})

    def log_action(self, user_id: Optional[int], action: str,
                   detail: Dict[str, Any], actor_id: Optional[int] = None) -> None:
        """写入业务审计日志；写入失败只记录运行日志，不影响业务"""
        try:
            self.insert("logs", {
                "user_id": user_id,
                "actor_id": actor_id if actor_id is not None else user_id,
                "action": action,
                "detail_json": json.dumps(detail, default=str),
            }, returning="log_id")
        except DatabaseError as e:
            logger.warning("Failed to write audit log", action=action, user_id=user_id, error=str(e))


# 全局数据库管理器实例
db_manager = DatabaseManager()
