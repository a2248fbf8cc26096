"""FastAPI dependencies for the PIX deposit and withdrawal flows.

The webhook and the polling fallback both need the token gateway (they mint),
so engine configuration is required for every payment endpoint except
withdrawals, which need the engine but not Mercado Pago.
"""

from typing import Annotated

from fastapi import Depends

from config.settings import PaymentProviderConfig, settings
from src.mb_chain.api.dependencies import get_token_gateway
from src.mb_chain.application.gateway import TokenGateway
from src.mb_common.http_client import get_http_client
from src.mb_payment.application.intent_service import PaymentIntentService
from src.mb_payment.application.reconciler import PaymentReconciler
from src.mb_payment.application.withdrawal_service import WithdrawalService
from src.mb_payment.domain.repository import PaymentProviderProtocol
from src.mb_payment.infrastructure.mercadopago_client import MercadoPagoClient


def get_payment_config() -> PaymentProviderConfig:
    return settings.payment_config()


def get_payment_provider(
    config: Annotated[PaymentProviderConfig, Depends(get_payment_config)],
) -> PaymentProviderProtocol:
    return MercadoPagoClient(config, get_http_client())


def get_reconciler(
    provider: Annotated[PaymentProviderProtocol, Depends(get_payment_provider)],
    gateway: Annotated[TokenGateway, Depends(get_token_gateway)],
) -> PaymentReconciler:
    return PaymentReconciler(provider, gateway)


def get_intent_service(
    config: Annotated[PaymentProviderConfig, Depends(get_payment_config)],
    provider: Annotated[PaymentProviderProtocol, Depends(get_payment_provider)],
) -> PaymentIntentService:
    return PaymentIntentService(config, provider)


def get_polling_intent_service(
    config: Annotated[PaymentProviderConfig, Depends(get_payment_config)],
    provider: Annotated[PaymentProviderProtocol, Depends(get_payment_provider)],
    reconciler: Annotated[PaymentReconciler, Depends(get_reconciler)],
) -> PaymentIntentService:
    """Status queries settle approved payments, so they carry the reconciler."""
    return PaymentIntentService(config, provider, reconciler=reconciler)


def get_withdrawal_service(
    gateway: Annotated[TokenGateway, Depends(get_token_gateway)],
) -> WithdrawalService:
    return WithdrawalService(gateway)
