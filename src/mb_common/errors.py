"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Configuration
  2xxx: Validation
  3xxx: Payment provider
  4xxx: Token engine
  9xxx: System

Every AppError is rendered by the app-level exception handler into the
ApiResponse envelope. `details` (upstream error bodies) goes into `data`
so nothing the provider told us is dropped.
"""

from typing import Any


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
        details: Any = None,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        self.details = details
        super().__init__(message)


# --- 1xxx: Configuration ---

class ConfigurationError(AppError):
    def __init__(self, missing: list[str]) -> None:
        super().__init__(
            1001,
            f"Server misconfigured: missing {', '.join(missing)}",
            500,
        )
        self.missing = missing


# --- 2xxx: Validation ---

class ValidationError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(2000, detail, 400)


class InvalidAmountError(AppError):
    def __init__(self, amount: object) -> None:
        super().__init__(
            2001, f"Invalid amount: {amount!r} (must be between R$ 0,01 and R$ 100.000,00)", 400
        )


class MissingFieldError(AppError):
    def __init__(self, field: str) -> None:
        super().__init__(2002, f"{field} is required", 400)


class InvalidNotificationUrlError(AppError):
    def __init__(self, url: str) -> None:
        super().__init__(
            2003,
            "Invalid notification URL. Set PUBLIC_BASE_URL to a valid URL "
            "(e.g. https://your-domain.com or an ngrok tunnel for development).",
            400,
            details={"invalidUrl": url},
        )


class DuplicateWithdrawalError(AppError):
    def __init__(self, burn_queue_id: str) -> None:
        super().__init__(
            2004,
            "This burn transaction was already used for a withdrawal",
            409,
            details={"burnQueueId": burn_queue_id},
        )


# --- 3xxx: Payment provider ---

class PaymentProviderError(AppError):
    """Non-2xx from Mercado Pago, passed through with the provider's status."""

    def __init__(self, message: str, status_code: int, details: Any = None) -> None:
        http_status = status_code if 400 <= status_code < 600 else 502
        super().__init__(3001, message, http_status, details=details)
        self.status_code = status_code


class PaymentCodeMissingError(AppError):
    def __init__(self, payment_id: str | None) -> None:
        super().__init__(
            3002,
            "PIX code was not generated. Check that the Mercado Pago account "
            "has a registered PIX key.",
            500,
            details={"paymentId": payment_id},
        )


class PaymentLookupError(AppError):
    """Could not fetch payment details. The provider redelivers."""

    def __init__(self, payment_id: str, detail: str) -> None:
        super().__init__(
            3003, f"Could not fetch payment {payment_id}: {detail}", 502
        )


class MissingPaymentMetadataError(AppError):
    """Approved payment without usable metadata. Not retried."""

    def __init__(self, payment_id: str, field: str) -> None:
        super().__init__(
            3004, f"Payment {payment_id} has no {field} in metadata", 400
        )


# --- 4xxx: Token engine ---

class TokenEngineError(AppError):
    def __init__(self, message: str, details: Any = None) -> None:
        super().__init__(4001, message, 502, details=details)


class ConfirmationTimeoutError(AppError):
    """Submitted but not mined within the polling ceiling. Not a failure."""

    def __init__(self, queue_id: str) -> None:
        super().__init__(
            4002,
            "Transaction not mined within the timeout period.",
            408,
            details={"queueId": queue_id},
        )
        self.queue_id = queue_id


# --- 9xxx: System ---

class RateLimitError(AppError):
    def __init__(self, retry_after: int | None = None) -> None:
        super().__init__(
            9001,
            "Rate limit exceeded",
            429,
            details={"retryAfter": retry_after} if retry_after else None,
        )
        self.retry_after = retry_after


class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)
