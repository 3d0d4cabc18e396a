from typing import Optional

import httpx

from shared.config import settings

ONES = ["", "một", "hai", "ba", "bốn", "năm", "sáu", "bảy", "tám", "chín"]
TENS = [
    "", "mười", "hai mươi", "ba mươi", "bốn mươi",
    "năm mươi", "sáu mươi", "bảy mươi", "tám mươi", "chín mươi",
]

# Spelling stops at hundreds of millions
MAX_SPOKEN_AMOUNT = 1_000_000_000


def _below_thousand(n: int) -> str:
    hundred, remainder = divmod(n, 100)
    ten, unit = divmod(remainder, 10)
    words = ""

    if hundred > 0:
        words += ONES[hundred] + " trăm "
        if remainder > 0 and ten == 0:
            words += "lẻ "

    if ten > 1:
        words += TENS[ten] + (" " + ONES[unit] if unit else "")
    elif ten == 1:
        words += "mười" + (" " + ONES[unit] if unit else "")
    elif unit > 0:
        words += ONES[unit]

    return words.strip()


def number_to_vietnamese_words(num: int) -> str:
    """Spells a non-negative amount below one billion in Vietnamese."""
    if not 0 <= num < MAX_SPOKEN_AMOUNT:
        raise ValueError(f"Amount out of range: {num}")
    if num == 0:
        return "không"

    million = num // 1_000_000
    thousand = (num % 1_000_000) // 1_000
    below_thousand = num % 1_000
    words = ""

    if million > 0:
        words += _below_thousand(million) + " triệu "

    if thousand > 0:
        words += _below_thousand(thousand) + " nghìn "
    elif million > 0:
        words += "không nghìn "

    if below_thousand > 0:
        words += _below_thousand(below_thousand)

    return words.strip()


def payment_success_message(amount: int) -> str:
    return f"Thanh toán thành công {number_to_vietnamese_words(amount)} đồng"


class GoogleTTSClient:
    def __init__(self, api_key: str, endpoint: str, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.api_key = api_key
        self.endpoint = endpoint
        self.transport = transport

    @classmethod
    def from_settings(cls) -> "GoogleTTSClient":
        return cls(api_key=settings.GOOGLE_API_KEY, endpoint=settings.GOOGLE_TTS_ENDPOINT)

    async def synthesize(self, text: str) -> str:
        """Returns base64 MP3 audio for `text` in a Vietnamese female voice."""
        body = {
            "input": {"text": text},
            "voice": {"languageCode": "vi-VN", "ssmlGender": "FEMALE"},
            "audioConfig": {"audioEncoding": "MP3"},
        }
        async with httpx.AsyncClient(transport=self.transport, timeout=10.0) as client:
            resp = await client.post(
                self.endpoint,
                params={"key": self.api_key},
                json=body,
                headers={"X-Goog-Api-Key": self.api_key},
            )
            resp.raise_for_status()
            return resp.json()["audioContent"]


def get_tts_client() -> GoogleTTSClient:
    return GoogleTTSClient.from_settings()
