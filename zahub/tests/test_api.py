"""
API 端到端测试
"""

from ..core.exceptions import DatabaseError
from ..core.security import create_access_token
from ..services.order_service import order_service

API = "/api/v1"


class TestAuthentication:
    """认证测试"""

    def test_missing_token(self, client):
        response = client.get(f"{API}/cart")
        assert response.status_code == 401
        assert response.json()["error_code"] == "NOT_AUTHENTICATED"

    def test_invalid_token(self, client):
        response = client.get(f"{API}/cart", headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 401
        assert response.json()["error_code"] == "NOT_AUTHENTICATED"

    def test_identity_without_profile(self, client):
        headers = {"Authorization": f"Bearer {create_access_token('auth-desconocido')}"}
        response = client.get(f"{API}/cart", headers=headers)
        assert response.status_code == 401

    def test_register_then_profile(self, client):
        headers = {"Authorization": f"Bearer {create_access_token('auth-nuevo')}"}

        response = client.post(f"{API}/users/me", json={"full_name": "Camila Torres"}, headers=headers)
        assert response.status_code == 200
        assert response.json()["data"]["full_name"] == "Camila Torres"

        response = client.get(f"{API}/users/me", headers=headers)
        assert response.status_code == 200
        assert response.json()["data"]["auth_user_id"] == "auth-nuevo"

    def test_register_short_name(self, client):
        headers = {"Authorization": f"Bearer {create_access_token('auth-nuevo')}"}
        response = client.post(f"{API}/users/me", json={"full_name": "Al"}, headers=headers)
        assert response.status_code == 400
        assert response.json()["error_code"] == "VALIDATION_ERROR"


class TestCatalogApi:
    """目录接口测试"""

    def test_ingredients_grouped_by_category(self, client, ingredients):
        response = client.get(f"{API}/catalog/ingredients")
        assert response.status_code == 200

        data = response.json()["data"]
        assert list(data.keys()) == ["sauce", "cheese", "protein", "vegetable"]
        # 下架配料不展示
        assert [ing["name"] for ing in data["vegetable"]] == ["Champiñones"]

    def test_products(self, client, products):
        response = client.get(f"{API}/catalog/products")
        assert [p["name"] for p in response.json()["data"]] == ["Hawaiana", "Pepperoni Lovers"]

        response = client.get(f"{API}/catalog/products/9999")
        assert response.status_code == 404
        assert response.json()["error_code"] == "PRODUCT_NOT_FOUND"

    def test_options(self, client):
        data = client.get(f"{API}/catalog/options").json()["data"]
        assert {s["size"]: s["base_price"] for s in data["sizes"]} == {
            "SMALL": 22000,
            "MEDIUM": 28000,
            "LARGE": 35000,
        }
        assert "Delgada" in data["crust_styles"]


class TestBuildsApi:
    """组装接口测试"""

    def test_quote(self, client, ingredients):
        response = client.post(f"{API}/builds/quote", json={
            "size": "MEDIUM",
            "selections": [
                {"ingredient_id": ingredients["cheese"], "kind": "EXTRA"},
                {"ingredient_id": ingredients["pepperoni"], "kind": "INCLUDED"},
                {"ingredient_id": ingredients["mushroom"], "kind": "EXCLUDED"},
            ],
        })
        assert response.status_code == 200
        assert response.json()["data"]["unit_price"] == 31000

    def test_toggle_cycle(self, client, ingredients):
        cheese = ingredients["cheese"]
        body = {"size": "SMALL", "selections": [], "ingredient_id": cheese}
        kinds = []
        prices = []
        for _ in range(4):
            data = client.post(f"{API}/builds/toggle", json=body).json()["data"]
            body["selections"] = data["selections"]
            kinds.append([s["kind"] for s in data["selections"]])
            prices.append(data["unit_price"])

        assert kinds == [["INCLUDED"], ["EXTRA"], ["EXCLUDED"], []]
        assert prices == [22000, 25000, 22000, 22000]

    def test_invalid_size(self, client):
        response = client.post(f"{API}/builds/quote", json={"size": "FAMILY"})
        assert response.status_code == 422


class TestCartFlow:
    """购物车到下单完整流程"""

    def test_add_update_checkout(self, client, auth_headers, ingredients):
        response = client.post(f"{API}/cart/lines", headers=auth_headers, json={
            "size": "MEDIUM",
            "crust_style": "Delgada",
            "crust_edge": "Queso",
            "display_name": "Mi Za",
            "selections": [
                {"ingredient_id": ingredients["cheese"], "kind": "EXTRA"},
                {"ingredient_id": ingredients["pepperoni"], "kind": "INCLUDED"},
                {"ingredient_id": ingredients["mushroom"], "kind": "EXCLUDED"},
            ],
        })
        assert response.status_code == 200
        line = response.json()["data"]
        assert line["unit_price"] == 31000

        response = client.patch(f"{API}/cart/lines/{line['id']}", headers=auth_headers, json={"quantity": 2})
        assert response.json()["data"]["line"]["subtotal"] == 62000

        cart = client.get(f"{API}/cart", headers=auth_headers).json()["data"]
        assert cart["total"] == 62000
        assert cart["currency"] == "COP"

        response = client.post(f"{API}/orders/checkout", headers=auth_headers)
        assert response.status_code == 200
        order = response.json()["data"]
        assert order == {"order_id": order["order_id"], "status": "PENDING", "total": 62000, "line_count": 1}

        cart = client.get(f"{API}/cart", headers=auth_headers).json()["data"]
        assert cart["lines"] == []

        detail = client.get(f"{API}/orders/{order['order_id']}", headers=auth_headers).json()["data"]
        assert detail["lines"][0]["quantity"] == 2
        assert len(detail["lines"][0]["modifiers"]) == 3

        orders = client.get(f"{API}/orders", headers=auth_headers).json()["data"]
        assert [o["id"] for o in orders] == [order["order_id"]]

    def test_zero_quantity_removes_line(self, client, auth_headers, products):
        line = client.post(f"{API}/cart/products", headers=auth_headers,
                           json={"product_id": products["hawaiana"]}).json()["data"]

        response = client.patch(f"{API}/cart/lines/{line['id']}", headers=auth_headers, json={"quantity": 0})
        assert response.json()["data"] == {"line": None, "removed": True}
        assert client.get(f"{API}/cart", headers=auth_headers).json()["data"]["lines"] == []

    def test_remove_unknown_line(self, client, auth_headers):
        response = client.delete(f"{API}/cart/lines/9999", headers=auth_headers)
        assert response.status_code == 404
        assert response.json()["error_code"] == "CART_LINE_NOT_FOUND"

    def test_clear_cart(self, client, auth_headers, products):
        for _ in range(2):
            client.post(f"{API}/cart/products", headers=auth_headers, json={"product_id": products["hawaiana"]})

        response = client.delete(f"{API}/cart", headers=auth_headers)
        assert response.json()["data"] == {"removed": 2}

    def test_checkout_empty_cart(self, client, auth_headers):
        response = client.post(f"{API}/orders/checkout", headers=auth_headers)
        assert response.status_code == 400
        assert response.json()["error_code"] == "EMPTY_CART"

    def test_other_users_order_hidden(self, client, auth_headers, other_user, products):
        client.post(f"{API}/cart/products", headers=auth_headers, json={"product_id": products["hawaiana"]})
        order_id = client.post(f"{API}/orders/checkout", headers=auth_headers).json()["data"]["order_id"]

        other_headers = {"Authorization": f"Bearer {create_access_token(other_user['auth_user_id'])}"}
        response = client.get(f"{API}/orders/{order_id}", headers=other_headers)
        assert response.status_code == 404


class TestHealth:
    """健康检查"""

    def test_health(self, client):
        assert client.get("/health").json()["status"] == "healthy"


class TestPromotionsApi:
    """促销接口测试"""

    def test_active_promotions_in_display_order(self, client, promotions):
        response = client.get(f"{API}/catalog/promotions")
        assert response.status_code == 200

        data = response.json()["data"]
        assert [p["title"] for p in data] == ["Envío gratis", "2x1 los martes"]
        assert data[1]["badge"] == "HOY"

    def test_promotion_detail(self, client, promotions):
        response = client.get(f"{API}/catalog/promotions/{promotions['dos_por_uno']}")
        assert response.status_code == 200

        data = response.json()["data"]
        assert data["subtitle"] == "Todas las Zas medianas"
        assert data["starts_at"] is None

    def test_unknown_promotion(self, client, promotions):
        response = client.get(f"{API}/catalog/promotions/9999")
        assert response.status_code == 404
        assert response.json()["error_code"] == "PROMOTION_NOT_FOUND"


class TestCheckoutReadBack:
    """下单后回读失败"""

    def test_order_placed_even_if_read_back_fails(self, client, auth_headers, products, test_db, monkeypatch):
        client.post(f"{API}/cart/products", headers=auth_headers, json={"product_id": products["hawaiana"]})

        def failing_get_order(user_id, order_id):
            raise DatabaseError("simulated read failure")

        monkeypatch.setattr(order_service, "get_order", failing_get_order)

        response = client.post(f"{API}/orders/checkout", headers=auth_headers)

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["status"] == "PENDING"
        assert data["total"] is None
        assert len(test_db.select("orders", {"id": data["order_id"]})) == 1
