"""Tests for ZaloPay checkout and callback handling."""

import json
from datetime import datetime, timezone
from urllib.parse import parse_qs

from conftest import API, ZALOPAY_KEY1, ZALOPAY_KEY2, shipping_address

from services.payment_service.zalopay import VN_TZ, ZaloPayClient, make_app_trans_id, sign


def checkout(client, headers, product_id, quantity=1):
    body = {
        "items": [{"type": "product", "item_id": product_id, "quantity": quantity}],
        "shipping_address": shipping_address(),
        "payment_method": "zalopay",
    }
    return client.post(f"{API}/orders/", json=body, headers=headers)


def callback_body(app_trans_id, key=ZALOPAY_KEY2, server_time=1_700_000_000_000):
    data = json.dumps(
        {
            "app_id": 2553,
            "app_trans_id": app_trans_id,
            "zp_trans_id": 240101000001,
            "server_time": server_time,
            "amount": 110_000,
        }
    )
    return {"data": data, "mac": sign(key, data), "type": 1}


class TestZaloPayCheckout:
    def test_checkout_returns_payment_url(self, client, customer, make_product, zalopay):
        _, headers = customer
        product_id = make_product(price=100_000)

        response = checkout(client, headers, product_id)

        assert response.status_code == 201
        order = response.json()
        assert order["order_url"] == zalopay.response["order_url"]
        assert order["payment_method"] == "zalopay"
        assert order["payment_status"] == "pending"

        sent = parse_qs(zalopay.requests[0].content.decode())
        assert sent["amount"] == [str(order["total"])]
        assert sent["description"] == [f"Thanh toán đơn hàng #{order['order_number']}"]
        assert sent["callback_url"] == ["https://petshop.test/api/v1/payment/zalopay/callback"]
        assert sent["app_trans_id"][0].endswith(f"_{order['id']}")

        transaction = client.get(f"{API}/payment/transaction/{order['id']}", headers=headers).json()
        assert transaction["status"] == "pending"
        assert transaction["zp_trans_token"] == "zp-token-123"
        assert transaction["amount"] == order["total"]

    def test_cod_orders_skip_the_gateway(self, client, customer, make_product, zalopay):
        _, headers = customer
        body = {
            "items": [{"type": "product", "item_id": make_product(), "quantity": 1}],
            "shipping_address": shipping_address(),
        }

        response = client.post(f"{API}/orders/", json=body, headers=headers)

        assert response.status_code == 201
        assert response.json()["payment_method"] == "cod"
        assert response.json()["order_url"] is None
        assert zalopay.requests == []

    def test_gateway_rejection(self, client, customer, make_product, zalopay):
        _, headers = customer
        zalopay.response = {"return_code": 2, "return_message": "Giao dịch thất bại"}

        response = checkout(client, headers, make_product())

        assert response.status_code == 400
        assert response.json() == {"message": "Giao dịch thất bại", "errorCode": "PAYMENT_GATEWAY_ERROR"}

    def test_create_order_endpoint(self, client, customer, make_product, zalopay):
        _, headers = customer
        order = client.post(
            f"{API}/orders/",
            json={
                "items": [{"type": "product", "item_id": make_product(), "quantity": 1}],
                "shipping_address": shipping_address(),
            },
            headers=headers,
        ).json()

        response = client.post(
            f"{API}/payment/zalopay/create-order",
            json={"order_id": order["id"], "amount": order["total"], "description": "Retry payment"},
            headers=headers,
        )

        assert response.status_code == 201
        assert response.json()["zp_trans_token"] == "zp-token-123"
        assert response.json()["app_trans_id"].endswith(f"_{order['id']}")

    def test_repeat_create_order_reuses_pending_payment(self, client, customer, make_product, zalopay):
        _, headers = customer
        order = checkout(client, headers, make_product()).json()

        response = client.post(
            f"{API}/payment/zalopay/create-order",
            json={"order_id": order["id"], "amount": order["total"], "description": "Retry payment"},
            headers=headers,
        )

        assert response.status_code == 201
        assert response.json()["order_url"] == order["order_url"]
        assert response.json()["zp_trans_token"] == "zp-token-123"
        assert len(zalopay.requests) == 1

    def test_create_order_refused_once_paid(self, client, customer, make_product, zalopay):
        _, headers = customer
        order = checkout(client, headers, make_product()).json()
        transaction = client.get(f"{API}/payment/transaction/{order['id']}", headers=headers).json()
        client.post(f"{API}/payment/zalopay/callback", json=callback_body(transaction["app_trans_id"]))

        response = client.post(
            f"{API}/payment/zalopay/create-order",
            json={"order_id": order["id"], "amount": order["total"], "description": "Pay again"},
            headers=headers,
        )

        assert response.status_code == 400
        assert response.json()["errorCode"] == "PAYMENT_GATEWAY_ERROR"
        assert len(zalopay.requests) == 1

    def test_create_order_for_missing_order(self, client, customer, zalopay):
        _, headers = customer
        response = client.post(
            f"{API}/payment/zalopay/create-order",
            json={"order_id": 42, "amount": 1000, "description": "Nothing"},
            headers=headers,
        )
        assert response.status_code == 404
        assert zalopay.requests == []

    def test_missing_transaction(self, client, customer):
        _, headers = customer
        response = client.get(f"{API}/payment/transaction/77", headers=headers)
        assert response.status_code == 404
        assert response.json()["message"] == "Transaction not found"


class TestZaloPayCallback:
    def _paid_order(self, client, headers, product_id):
        order = checkout(client, headers, product_id).json()
        transaction = client.get(f"{API}/payment/transaction/{order['id']}", headers=headers).json()
        return order, transaction

    def test_valid_callback_marks_order_paid(self, client, customer, make_product, zalopay):
        _, headers = customer
        order, transaction = self._paid_order(client, headers, make_product())

        response = client.post(
            f"{API}/payment/zalopay/callback", json=callback_body(transaction["app_trans_id"])
        )

        assert response.status_code == 200
        assert response.json() == {"return_code": 1, "return_message": "OK"}

        paid = client.get(f"{API}/orders/{order['id']}", headers=headers).json()
        assert paid["payment_status"] == "paid"
        assert paid["paid_at"] is not None
        # Payment does not move the fulfilment status
        assert paid["status"] == "pending"

        updated = client.get(f"{API}/payment/transaction/{order['id']}", headers=headers).json()
        assert updated["status"] == "success"
        assert updated["zp_transaction_id"] == "240101000001"
        assert updated["payment_time"] is not None

    def test_invalid_mac_changes_nothing(self, client, customer, make_product, zalopay):
        _, headers = customer
        order, transaction = self._paid_order(client, headers, make_product())

        response = client.post(
            f"{API}/payment/zalopay/callback",
            json=callback_body(transaction["app_trans_id"], key="wrong-key"),
        )

        assert response.status_code == 400
        assert response.json() == {"return_code": -1, "return_message": "Invalid callback"}
        assert client.get(f"{API}/orders/{order['id']}", headers=headers).json()["payment_status"] == "pending"
        assert client.get(f"{API}/payment/transaction/{order['id']}", headers=headers).json()["status"] == "pending"

    def test_missing_fields(self, client):
        response = client.post(f"{API}/payment/zalopay/callback", json={"mac": "abc"})
        assert response.status_code == 400
        assert response.json() == {"return_code": -1, "return_message": "Missing data or mac"}

    def test_malformed_payload_is_rejected(self, client, zalopay):
        data = "not-json"
        response = client.post(
            f"{API}/payment/zalopay/callback", json={"data": data, "mac": sign(ZALOPAY_KEY2, data)}
        )
        assert response.status_code == 400

    def test_unknown_transaction_is_acknowledged(self, client, customer, make_product, zalopay):
        _, headers = customer
        order, _ = self._paid_order(client, headers, make_product())

        response = client.post(f"{API}/payment/zalopay/callback", json=callback_body("240101_999"))

        assert response.status_code == 200
        assert response.json() == {"return_code": 1, "return_message": "OK"}
        # Signed but unmatched callbacks touch no order or transaction
        assert client.get(f"{API}/orders/{order['id']}", headers=headers).json()["payment_status"] == "pending"
        assert client.get(f"{API}/payment/transaction/{order['id']}", headers=headers).json()["status"] == "pending"


class TestSigning:
    def _client(self):
        return ZaloPayClient(
            app_id="2553",
            key1=ZALOPAY_KEY1,
            key2=ZALOPAY_KEY2,
            endpoint="https://sb-openapi.zalopay.vn/v2/create",
            callback_url="https://petshop.test/callback",
        )

    def test_order_request_mac(self):
        request = self._client().build_order_request("240101_5", 110_000, "Pay", app_time=1704067200000)

        expected = sign(ZALOPAY_KEY1, "2553|240101_5|monito_user|110000|1704067200000|{}|[]")
        assert request["mac"] == expected
        assert request["item"] == "[]"
        assert request["embed_data"] == "{}"
        assert request["bank_code"] == ""

    def test_callback_verification_uses_key2(self):
        gateway = self._client()
        data = '{"app_trans_id":"240101_5"}'
        assert gateway.verify_callback(data, sign(ZALOPAY_KEY2, data))
        assert not gateway.verify_callback(data, sign(ZALOPAY_KEY1, data))
        assert not gateway.verify_callback(data, "")

    def test_app_trans_id_uses_vietnam_date(self):
        # 18:00 UTC on Dec 31 is already Jan 1 in Vietnam
        now = datetime(2023, 12, 31, 18, 0, tzinfo=timezone.utc)
        assert make_app_trans_id(42, now) == "240101_42"
        assert make_app_trans_id(7, datetime(2024, 3, 5, 9, 0, tzinfo=VN_TZ)) == "240305_7"
