"""
测试配置文件
提供测试所需的fixtures：每个测试使用全新的内存数据库
"""

import pytest
from fastapi.testclient import TestClient

from ..app import create_app
from ..core.database import db_manager
from ..core.exceptions import DatabaseError
from ..core.security import create_access_token


@pytest.fixture
def test_db():
    """内存测试数据库"""
    db_manager.reset(":memory:")
    db_manager.init_database()
    yield db_manager
    db_manager.reset()


@pytest.fixture
def ingredients(test_db):
    """示例配料目录"""
    rows = {
        "tomato": ("Salsa de tomate", "sauce", 0, True),
        "cheese": ("Mozzarella", "cheese", 3000, True),
        "pepperoni": ("Pepperoni", "protein", 4000, True),
        "mushroom": ("Champiñones", "vegetable", 2500, True),
        "olive": ("Aceitunas", "vegetable", 2000, False),
    }
    ids = {}
    for key, (name, category, extra_charge, active) in rows.items():
        ids[key] = test_db.insert("ingredients", {
            "name": name,
            "category": category,
            "extra_charge": extra_charge,
            "active": active,
        })
    return ids


@pytest.fixture
def products(test_db):
    """示例菜单披萨"""
    return {
        "hawaiana": test_db.insert("products", {
            "name": "Hawaiana",
            "description": "Jamón y piña",
            "price": 32000,
            "tag": "Clásica",
        }),
        "pepperoni": test_db.insert("products", {
            "name": "Pepperoni Lovers",
            "description": "Doble pepperoni",
            "price": 36000,
        }),
    }


@pytest.fixture
def sample_user(test_db):
    """示例用户"""
    user_id = test_db.insert("users", {"auth_user_id": "auth-user-123", "full_name": "Laura Gómez"})
    return {"user_id": user_id, "auth_user_id": "auth-user-123"}


@pytest.fixture
def other_user(test_db):
    """另一个用户"""
    user_id = test_db.insert("users", {"auth_user_id": "auth-user-456", "full_name": "Andrés Ruiz"})
    return {"user_id": user_id, "auth_user_id": "auth-user-456"}


@pytest.fixture
def auth_headers(sample_user):
    """认证请求头"""
    token = create_access_token(sample_user["auth_user_id"])
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def client(test_db):
    """测试客户端"""
    return TestClient(create_app())


@pytest.fixture
def fail_inserts(test_db, monkeypatch):
    """
    让指定表的插入失败

    用法: fail_inserts("order_line", lambda values: values["display_name"] == "x")
    """
    original = test_db.insert

    def install(table, predicate=lambda values: True):
        def insert(tbl, values, returning="id"):
            if tbl == table and predicate(values):
                raise DatabaseError(f"simulated failure inserting into {tbl}")
            return original(tbl, values, returning=returning)

        monkeypatch.setattr(test_db, "insert", insert)

    return install


@pytest.fixture
def fail_deletes(test_db, monkeypatch):
    """让指定表的删除失败"""
    original = test_db.delete_where

    def install(table):
        def delete_where(tbl, filters):
            if tbl == table:
                raise DatabaseError(f"simulated failure deleting from {tbl}")
            return original(tbl, filters)

        monkeypatch.setattr(test_db, "delete_where", delete_where)

    return install


@pytest.fixture
def promotions(test_db):
    """示例促销"""
    return {
        "dos_por_uno": test_db.insert("promotions", {
            "title": "2x1 los martes",
            "subtitle": "Todas las Zas medianas",
            "badge": "HOY",
            "sort_order": 2,
        }),
        "envio": test_db.insert("promotions", {
            "title": "Envío gratis",
            "sort_order": 1,
        }),
        "vencida": test_db.insert("promotions", {
            "title": "Promo de lanzamiento",
            "sort_order": 0,
            "is_active": False,
        }),
    }
