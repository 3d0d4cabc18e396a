"""
ZaloPay gateway client.

Requests are signed with key1 over the pipe-joined order fields; callbacks
are authenticated with key2 over the raw `data` string the gateway posts.
"""
import hashlib
import hmac
import json
import time
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import httpx
import structlog

from shared.config import settings

logger = structlog.get_logger(__name__)

# app_trans_id must be prefixed with the current date in Vietnam time
VN_TZ = timezone(timedelta(hours=7))
APP_USER = "monito_user"
CALLBACK_PATH = "/payment/zalopay/callback"
REQUEST_TIMEOUT = 10.0


class ZaloPayError(Exception):
    pass


def sign(key: str, message: str) -> str:
    return hmac.new(key.encode(), message.encode(), hashlib.sha256).hexdigest()


def make_app_trans_id(order_id: int, now: Optional[datetime] = None) -> str:
    now = now or datetime.now(VN_TZ)
    return f"{now.astimezone(VN_TZ):%y%m%d}_{order_id}"


@dataclass
class ZaloPayGatewayResult:
    order_url: str
    app_trans_id: str
    zp_trans_token: str


class ZaloPayClient:
    def __init__(
        self,
        app_id: str,
        key1: str,
        key2: str,
        endpoint: str,
        callback_url: str,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.app_id = app_id
        self.key1 = key1
        self.key2 = key2
        self.endpoint = endpoint
        self.callback_url = callback_url
        self.transport = transport

    @classmethod
    def from_settings(cls) -> "ZaloPayClient":
        return cls(
            app_id=settings.ZALOPAY_APP_ID,
            key1=settings.ZALOPAY_KEY1,
            key2=settings.ZALOPAY_KEY2,
            endpoint=settings.ZALOPAY_ENDPOINT,
            callback_url=f"{settings.NGROK_URL}{settings.BASE_PATH}{CALLBACK_PATH}",
        )

    def build_order_request(
        self,
        app_trans_id: str,
        amount: int,
        description: str,
        app_time: Optional[int] = None,
    ) -> dict:
        request_data = {
            "app_id": self.app_id,
            "app_trans_id": app_trans_id,
            "app_user": APP_USER,
            "app_time": app_time if app_time is not None else int(time.time() * 1000),
            "item": json.dumps([]),
            "embed_data": json.dumps({}),
            "amount": amount,
            "description": description,
            "bank_code": "",
            "callback_url": self.callback_url,
        }
        mac_input = "|".join(
            str(request_data[key])
            for key in ("app_id", "app_trans_id", "app_user", "amount", "app_time", "embed_data", "item")
        )
        request_data["mac"] = sign(self.key1, mac_input)
        return request_data

    async def create_order(self, app_trans_id: str, amount: int, description: str) -> ZaloPayGatewayResult:
        request_data = self.build_order_request(app_trans_id, amount, description)
        try:
            async with httpx.AsyncClient(transport=self.transport, timeout=REQUEST_TIMEOUT) as client:
                resp = await client.post(self.endpoint, data=request_data)
                payload = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            raise ZaloPayError(f"ZaloPay request failed: {e}") from e

        logger.info(
            "zalopay_create_order_response",
            app_trans_id=app_trans_id,
            return_code=payload.get("return_code"),
            return_message=payload.get("return_message"),
        )
        zp_trans_token = payload.get("zp_trans_token")
        if not zp_trans_token:
            raise ZaloPayError(payload.get("return_message") or "ZaloPay returned no transaction token")

        return ZaloPayGatewayResult(
            order_url=payload.get("order_url", ""),
            app_trans_id=app_trans_id,
            zp_trans_token=zp_trans_token,
        )

    def verify_callback(self, data: str, mac: str) -> bool:
        return hmac.compare_digest(sign(self.key2, data).encode(), mac.encode())


def get_zalopay_client() -> ZaloPayClient:
    """FastAPI dependency; overridden in tests with a mock transport."""
    return ZaloPayClient.from_settings()
