"""Unit tests for PaymentIntentService with mock provider and repository."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from config.settings import PaymentProviderConfig
from src.mb_common.errors import (
    InvalidAmountError,
    InvalidNotificationUrlError,
    MissingFieldError,
    PaymentCodeMissingError,
    PaymentProviderError,
)
from src.mb_payment.application.intent_service import (
    PaymentIntentService,
    build_notification_url,
    idempotency_key,
)
from src.mb_payment.application.schemas import WebhookAck
from src.mb_payment.domain.models import PaymentIntent, ProviderPayment


def fake_db() -> MagicMock:
    db = MagicMock()
    db.commit = AsyncMock()
    db.rollback = AsyncMock()
    return db


def _config(public_base_url: str = "https://megabolsa.app/") -> PaymentProviderConfig:
    return PaymentProviderConfig(
        base_url="https://mp.test",
        access_token="tok",
        public_base_url=public_base_url,
        payer_email="user@megabolsa.com",
        description="Fundos para Megabolsa",
    )


def _pix_payment(status: str = "pending", qr: str | None = "00020126") -> ProviderPayment:
    return ProviderPayment(
        id="p1",
        status=status,
        status_detail="pending_waiting_transfer" if status == "pending" else "accredited",
        transaction_amount=10.5,
        metadata={"recipient_address": "0xABC", "amount_brl": "10.50"},
        qr_code=qr,
        qr_code_base64=qr and "iVBORw0K",
    )


def _service(
    config: PaymentProviderConfig | None = None, reconciler: AsyncMock | None = None
) -> tuple[PaymentIntentService, AsyncMock, AsyncMock]:
    provider = AsyncMock()
    provider.create_payment.return_value = _pix_payment()
    repo = AsyncMock()
    repo.get_by_idempotency_key.return_value = None
    repo.insert.side_effect = lambda db, intent: intent
    svc = PaymentIntentService(config or _config(), provider, reconciler=reconciler, repo=repo)
    return svc, provider, repo


class TestCreateIntent:
    async def test_creates_pix_charge(self) -> None:
        svc, provider, repo = _service()
        db = fake_db()

        result = await svc.create_intent(db, "10.50", "0xABC", request_id="r-1")

        assert result.payment_id == "p1"
        assert result.preference_id == "p1"
        assert result.qr_code == "00020126"
        assert result.amount == "10.50"
        assert result.amount_cents == 1050
        assert result.status == "pending"
        db.commit.assert_awaited_once()

        payload, key = provider.create_payment.await_args.args
        assert key == idempotency_key("0xABC", 1050, "r-1")
        assert payload["transaction_amount"] == 10.5
        assert payload["payment_method_id"] == "pix"
        assert payload["payer"] == {"email": "user@megabolsa.com"}
        assert payload["external_reference"] == key
        assert payload["metadata"] == {
            "recipient_address": "0xABC",
            "amount_brl": "10.50",
            "conversion_rate": "1",
        }
        assert payload["notification_url"] == "https://megabolsa.app/api/pix/webhook"

        stored: PaymentIntent = repo.insert.await_args.args[1]
        assert stored.idempotency_key == key
        assert stored.amount_cents == 1050

    async def test_replay_returns_stored_intent(self) -> None:
        svc, provider, repo = _service()
        key = idempotency_key("0xABC", 1050, "r-1")
        repo.get_by_idempotency_key.return_value = PaymentIntent(
            id="p-old",
            idempotency_key=key,
            recipient_address="0xABC",
            amount_cents=1050,
            status="pending",
            qr_code="stored-qr",
        )

        result = await svc.create_intent(fake_db(), "10.50", "0xABC", request_id="r-1")

        assert result.payment_id == "p-old"
        assert result.qr_code == "stored-qr"
        provider.create_payment.assert_not_awaited()
        repo.get_by_idempotency_key.assert_awaited_once()
        assert repo.get_by_idempotency_key.await_args.args[1] == key

    async def test_without_request_id_every_call_is_new(self) -> None:
        svc, provider, _ = _service()

        await svc.create_intent(fake_db(), "10", "0xABC")
        await svc.create_intent(fake_db(), "10", "0xABC")

        first_key = provider.create_payment.await_args_list[0].args[1]
        second_key = provider.create_payment.await_args_list[1].args[1]
        assert first_key != second_key

    async def test_local_base_url_omits_webhook(self) -> None:
        svc, provider, _ = _service(_config("http://localhost:3000"))

        await svc.create_intent(fake_db(), "5", "0xABC")

        payload = provider.create_payment.await_args.args[0]
        assert "notification_url" not in payload

    async def test_ngrok_tunnel_keeps_webhook(self) -> None:
        svc, provider, _ = _service(_config("http://abcd.ngrok.io"))

        await svc.create_intent(fake_db(), "5", "0xABC")

        payload = provider.create_payment.await_args.args[0]
        assert payload["notification_url"] == "http://abcd.ngrok.io/api/pix/webhook"

    async def test_invalid_base_url_fails_before_provider(self) -> None:
        svc, provider, _ = _service(_config("megabolsa"))

        with pytest.raises(InvalidNotificationUrlError) as exc_info:
            await svc.create_intent(fake_db(), "5", "0xABC")
        assert exc_info.value.details == {"invalidUrl": "megabolsa/api/pix/webhook"}
        provider.create_payment.assert_not_awaited()

    @pytest.mark.parametrize("amount", ["abc", "0", "0.001", "-5", "100000.01"])
    async def test_invalid_amount(self, amount: str) -> None:
        svc, provider, _ = _service()

        with pytest.raises(InvalidAmountError):
            await svc.create_intent(fake_db(), amount, "0xABC")
        provider.create_payment.assert_not_awaited()

    async def test_missing_fields(self) -> None:
        svc, _, _ = _service()
        with pytest.raises(MissingFieldError):
            await svc.create_intent(fake_db(), None, "0xABC")
        with pytest.raises(MissingFieldError):
            await svc.create_intent(fake_db(), "10", "")

    async def test_provider_error_propagates(self) -> None:
        svc, provider, repo = _service()
        provider.create_payment.side_effect = PaymentProviderError("bad payer", 400)

        with pytest.raises(PaymentProviderError):
            await svc.create_intent(fake_db(), "10", "0xABC")
        repo.insert.assert_not_awaited()

    async def test_missing_pix_code(self) -> None:
        svc, provider, repo = _service()
        provider.create_payment.return_value = _pix_payment(qr=None)

        with pytest.raises(PaymentCodeMissingError):
            await svc.create_intent(fake_db(), "10", "0xABC")
        repo.insert.assert_not_awaited()

    async def test_insert_failure_rolls_back(self) -> None:
        svc, _, repo = _service()
        repo.insert.side_effect = RuntimeError("db down")
        db = fake_db()

        with pytest.raises(RuntimeError):
            await svc.create_intent(db, "10", "0xABC")
        db.rollback.assert_awaited_once()
        db.commit.assert_not_awaited()


class TestQueryIntent:
    async def test_approved_payment_is_reconciled(self) -> None:
        reconciler = AsyncMock()
        reconciler.reconcile_payment.return_value = WebhookAck(
            message="Tokens sent successfully", queue_id="q9"
        )
        svc, provider, _ = _service(reconciler=reconciler)
        provider.find_payment.return_value = _pix_payment("approved")
        db = fake_db()

        result = await svc.query_intent(db, "p1")

        assert result.status == "approved"
        assert result.payment_id == "p1"
        assert result.queue_id == "q9"
        reconciler.reconcile_payment.assert_awaited_once_with(db, provider.find_payment.return_value)

    async def test_rejected_payment_recorded(self) -> None:
        svc, provider, repo = _service()
        provider.find_payment.return_value = _pix_payment("rejected")
        db = fake_db()

        result = await svc.query_intent(db, "p1")

        assert result.status == "rejected"
        repo.update_status.assert_awaited_once_with(db, "p1", "rejected")
        db.commit.assert_awaited_once()

    async def test_pending_payment_not_recorded(self) -> None:
        svc, provider, repo = _service()
        provider.find_payment.return_value = _pix_payment("pending")

        result = await svc.query_intent(fake_db(), "p1")

        assert result.status == "pending"
        assert result.status_detail == "pending_waiting_transfer"
        repo.update_status.assert_not_awaited()

    async def test_unknown_id_falls_back_to_reference_search(self) -> None:
        svc, provider, repo = _service()
        provider.find_payment.return_value = None
        repo.get_by_id.return_value = PaymentIntent(
            id="p1", idempotency_key="key-1", recipient_address="0xABC",
            amount_cents=1000, status="pending",
        )
        provider.search_by_reference.return_value = _pix_payment("pending")

        result = await svc.query_intent(fake_db(), "p1")

        provider.search_by_reference.assert_awaited_once_with("key-1")
        assert result.status == "pending"

    async def test_nothing_found_is_pending(self) -> None:
        svc, provider, repo = _service()
        provider.find_payment.return_value = None
        repo.get_by_id.return_value = None
        provider.search_by_reference.return_value = None

        result = await svc.query_intent(fake_db(), "ref-123")

        provider.search_by_reference.assert_awaited_once_with("ref-123")
        assert result.status == "pending"
        assert result.payment_id == "ref-123"

    async def test_missing_id(self) -> None:
        svc, _, _ = _service()
        with pytest.raises(MissingFieldError):
            await svc.query_intent(fake_db(), "")


class TestNotificationUrl:
    def test_trailing_slash_removed(self) -> None:
        assert build_notification_url("https://x.app/") == "https://x.app/api/pix/webhook"

    @pytest.mark.parametrize("base", ["", "megabolsa", "ftp://x.app", "http://"])
    def test_invalid(self, base: str) -> None:
        with pytest.raises(InvalidNotificationUrlError):
            build_notification_url(base)

    def test_idempotency_key_is_deterministic(self) -> None:
        assert idempotency_key("0xA", 100, "r") == idempotency_key("0xA", 100, "r")
        assert idempotency_key("0xA", 100, "r") != idempotency_key("0xA", 101, "r")
        assert len(idempotency_key("0xA", 100, "r")) == 64
