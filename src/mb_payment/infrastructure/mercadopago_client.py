"""Mercado Pago REST client (PIX payments).

Endpoints used:
  POST /v1/payments                 create a PIX payment (X-Idempotency-Key)
  GET  /v1/payments/{id}            payment details
  GET  /v1/payments/search          lookup by external_reference

Reads and the idempotent create are retried on transport errors; provider
answers (any HTTP status) are never retried here.
"""

import logging
from typing import Any

import httpx

from config.settings import PaymentProviderConfig, settings
from src.mb_common.errors import PaymentLookupError, PaymentProviderError
from src.mb_common.http_client import TRANSPORT_ERRORS
from src.mb_common.retry import call_with_retry
from src.mb_payment.domain.models import ProviderPayment

logger = logging.getLogger(__name__)


def provider_error_message(details: Any, default: str = "Failed to create PIX payment") -> str:
    """Best human message from a provider error body: message, then cause[], then raw text."""
    if isinstance(details, str):
        return details or default
    if isinstance(details, dict):
        if details.get("message"):
            return str(details["message"])
        causes = details.get("cause")
        if isinstance(causes, list) and causes:
            parts = [
                str(c.get("description") or c.get("message"))
                for c in causes
                if isinstance(c, dict) and (c.get("description") or c.get("message"))
            ]
            if parts:
                return ", ".join(parts)
    return default


def _parse_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text


class MercadoPagoClient:
    def __init__(
        self,
        config: PaymentProviderConfig,
        http: httpx.AsyncClient,
        max_retries: int | None = None,
        retry_delay: float | None = None,
    ) -> None:
        self._config = config
        self._http = http
        self._max_retries = settings.HTTP_MAX_RETRIES if max_retries is None else max_retries
        self._retry_delay = (
            settings.HTTP_RETRY_DELAY_SECONDS if retry_delay is None else retry_delay
        )

    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self._config.access_token}"}

    async def _send(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        url = f"{self._config.base_url}{path}"
        headers = {**self._headers(), **kwargs.pop("headers", {})}
        return await call_with_retry(
            lambda: self._http.request(method, url, headers=headers, **kwargs),
            retries=self._max_retries,
            delay=self._retry_delay,
            retry_on=TRANSPORT_ERRORS,
            description=f"mercadopago {method} {path}",
        )

    async def create_payment(
        self, payload: dict[str, Any], idempotency_key: str
    ) -> ProviderPayment:
        try:
            response = await self._send(
                "POST",
                "/v1/payments",
                json=payload,
                headers={"X-Idempotency-Key": idempotency_key},
            )
        except httpx.HTTPError as exc:
            raise PaymentProviderError(
                f"Payment provider unreachable: {exc}", 502
            ) from exc

        body = _parse_body(response)
        logger.info("Mercado Pago create payment -> %d", response.status_code)
        if not response.is_success:
            logger.error("Mercado Pago rejected payment: %s", body)
            raise PaymentProviderError(
                provider_error_message(body),
                response.status_code,
                details={"details": body, "statusCode": response.status_code},
            )
        if not isinstance(body, dict):
            raise PaymentProviderError(
                "Invalid response from Mercado Pago", 502, details={"details": body}
            )
        return ProviderPayment.from_api(body)

    async def find_payment(self, payment_id: str) -> ProviderPayment | None:
        """Payment details, None when the provider does not know the id."""
        try:
            response = await self._send("GET", f"/v1/payments/{payment_id}")
        except httpx.HTTPError as exc:
            raise PaymentLookupError(payment_id, str(exc) or exc.__class__.__name__) from exc
        if response.status_code == 404:
            return None
        if not response.is_success:
            logger.error("Mercado Pago lookup %s failed: %s", payment_id, response.text)
            raise PaymentLookupError(payment_id, f"HTTP {response.status_code}: {response.text}")
        body = _parse_body(response)
        if not isinstance(body, dict):
            raise PaymentLookupError(payment_id, "malformed payment body")
        return ProviderPayment.from_api(body)

    async def get_payment(self, payment_id: str) -> ProviderPayment:
        payment = await self.find_payment(payment_id)
        if payment is None:
            raise PaymentLookupError(payment_id, "payment not found")
        return payment

    async def search_by_reference(self, external_reference: str) -> ProviderPayment | None:
        """Most recent payment carrying `external_reference`, if any."""
        try:
            response = await self._send(
                "GET",
                "/v1/payments/search",
                params={
                    "external_reference": external_reference,
                    "sort": "date_created",
                    "criteria": "desc",
                },
            )
        except httpx.HTTPError as exc:
            raise PaymentLookupError(external_reference, str(exc)) from exc
        if not response.is_success:
            raise PaymentLookupError(
                external_reference, f"HTTP {response.status_code}: {response.text}"
            )
        body = _parse_body(response)
        results = body.get("results") if isinstance(body, dict) else None
        if not results:
            return None
        return ProviderPayment.from_api(results[0])
