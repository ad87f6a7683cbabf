# backend/utils/payment_gateway.py
import httpx
import logging
import random
import string
import time
from urllib.parse import urljoin
from config import settings
from schemas.order import PaymentMethod, PaymentResult

logger = logging.getLogger(__name__)


class HttpPaymentGateway:
    """Charges through a remote payment API; card data is passed through untouched."""

    def __init__(self, api_url: str = None, api_key: str = None, client: httpx.Client = None):
        self.api_url = api_url or settings.PAYMENT_API_URL
        self.api_key = api_key or settings.PAYMENT_API_KEY
        self.charge_url = urljoin(self.api_url, "/api/v1/charges")
        self._owns_client = client is None
        self.client = client or httpx.Client(timeout=settings.PAYMENT_TIMEOUT_SECONDS)

    def close(self):
        # Injected clients belong to the caller
        if self._owns_client:
            self.client.close()

    def charge(self, amount: float, method: PaymentMethod) -> PaymentResult:
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}",
        }
        payload = {
            # Amount in minor units, as payment APIs expect
            "amount": int(round(amount * 100)),
            "method": method.model_dump(exclude_none=True),
        }
        try:
            response = self.client.post(self.charge_url, json=payload, headers=headers)

            # Client errors are declines (card refused, limit, validation)
            if 400 <= response.status_code < 500:
                message = _error_message(response)
                logger.info(f"Payment declined ({response.status_code}): {message}")
                return PaymentResult(success=False, message=message)

            response.raise_for_status()
            data = response.json()
        except (httpx.RequestError, httpx.HTTPStatusError, ValueError) as e:
            logger.error(f"Payment gateway error: {e}")
            raise

        if not data.get("success", False):
            return PaymentResult(success=False, message=data.get("message") or "Payment declined by bank")
        return PaymentResult(
            success=True,
            transaction_id=data.get("transactionId") or data.get("transaction_id"),
        )


def _error_message(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    return data.get("message") or data.get("error") or f"HTTP {response.status_code}"


class SimulatedPaymentGateway:
    """In-process stand-in used when no payment API is configured."""

    def __init__(self, success_rate: float = None, rng: random.Random = None):
        self.success_rate = settings.PAYMENT_SUCCESS_RATE if success_rate is None else success_rate
        self.rng = rng or random.Random()

    def close(self):
        pass

    def charge(self, amount: float, method: PaymentMethod) -> PaymentResult:
        if self.rng.random() >= self.success_rate:
            return PaymentResult(success=False, message="Payment declined by bank")
        suffix = "".join(self.rng.choices(string.ascii_lowercase + string.digits, k=9))
        return PaymentResult(success=True, transaction_id=f"TXN_{int(time.time() * 1000)}_{suffix}")


# FastAPI dependency, one gateway per request; tests override it with a fake gateway
def get_payment_gateway():
    gateway = HttpPaymentGateway() if settings.PAYMENT_API_URL else SimulatedPaymentGateway()
    try:
        yield gateway
    finally:
        gateway.close()
