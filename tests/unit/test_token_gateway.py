"""Tests for TokenGateway: mint/burn submission and optional confirmation."""

import httpx
import pytest

from config.settings import EngineConfig
from src.mb_chain.application.gateway import TokenGateway
from src.mb_chain.domain.poller import TransactionPoller
from src.mb_chain.infrastructure.engine_client import EngineClient
from src.mb_common.enums import TxState
from src.mb_common.errors import MissingFieldError, ValidationError

CONFIG = EngineConfig(
    base_url="https://engine.test",
    secret_key="sk_test",
    backend_wallet_address="0xBACKEND",
    chain_id=84532,
    token_address="0xTOKEN",
    poll_interval_seconds=0,
    poll_max_attempts=3,
)


class FakeEngine:
    """Routes engine calls: writes answer `write`, status reads pop from `statuses`."""

    def __init__(self, write: httpx.Response | Exception, statuses: list[str] | None = None) -> None:
        self.write = write
        self.statuses = list(statuses or [])
        self.status_calls = 0
        self.writes: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        if request.method == "POST":
            self.writes.append(request)
            if isinstance(self.write, Exception):
                raise self.write
            return self.write
        self.status_calls += 1
        status = self.statuses.pop(0) if self.statuses else "queued"
        body = {"status": status}
        if status == "errored":
            body["errorMessage"] = "execution reverted"
        return httpx.Response(200, json={"result": body})


def _gateway(engine: FakeEngine) -> TokenGateway:
    http = httpx.AsyncClient(transport=httpx.MockTransport(engine))
    client = EngineClient(CONFIG, http, max_retries=0, retry_delay=0)
    poller = TransactionPoller(client, max_attempts=CONFIG.poll_max_attempts, interval=0)
    return TokenGateway(client, poller)


def _queued(queue_id: str = "q1") -> httpx.Response:
    return httpx.Response(200, json={"result": {"queueId": queue_id}})


class TestMint:
    async def test_without_wait_returns_queue_id(self) -> None:
        engine = FakeEngine(_queued())

        result = await _gateway(engine).mint("0xABC", 10)

        assert result.success is True
        assert result.queue_id == "q1"
        assert result.is_mined is None
        assert engine.status_calls == 0

    async def test_wait_until_mined(self) -> None:
        engine = FakeEngine(_queued(), statuses=["queued", "mined"])

        result = await _gateway(engine).mint("0xABC", "100", wait_for_confirmation=True)

        assert result.success is True
        assert result.is_mined is True
        assert engine.status_calls == 2

    async def test_wait_unconfirmed_is_not_failure(self) -> None:
        engine = FakeEngine(_queued(), statuses=["queued"] * 10)

        result = await _gateway(engine).mint("0xABC", 100, wait_for_confirmation=True)

        assert result.success is True
        assert result.is_mined is False
        assert engine.status_calls == CONFIG.poll_max_attempts

    async def test_wait_terminal_failure(self) -> None:
        engine = FakeEngine(_queued(), statuses=["sent", "errored"])

        result = await _gateway(engine).mint("0xABC", 100, wait_for_confirmation=True)

        assert result.success is False
        assert result.is_mined is False
        assert result.queue_id == "q1"
        assert result.error == "execution reverted"

    async def test_engine_rejection_carries_body(self) -> None:
        engine = FakeEngine(httpx.Response(400, text="backend wallet not found"))

        result = await _gateway(engine).mint("0xABC", 10)

        assert result.success is False
        assert result.queue_id is None
        assert result.error == "backend wallet not found"

    async def test_transport_failure_is_reported(self) -> None:
        engine = FakeEngine(httpx.ReadTimeout("no answer"))

        result = await _gateway(engine).mint("0xABC", 10)

        assert result.success is False
        assert result.error
        assert len(engine.writes) == 1

    async def test_missing_queue_id(self) -> None:
        engine = FakeEngine(httpx.Response(200, json={"result": {}}))

        result = await _gateway(engine).mint("0xABC", 10)

        assert result.success is False
        assert "queueId" in (result.error or "")

    async def test_empty_address(self) -> None:
        with pytest.raises(MissingFieldError):
            await _gateway(FakeEngine(_queued())).mint("", 10)

    @pytest.mark.parametrize("amount", [-1, "1.5", "abc", True, 2.0])
    async def test_invalid_amounts(self, amount: object) -> None:
        engine = FakeEngine(_queued())
        with pytest.raises(ValidationError):
            await _gateway(engine).mint("0xABC", amount)  # type: ignore[arg-type]
        assert engine.writes == []

    async def test_zero_is_a_valid_amount(self) -> None:
        result = await _gateway(FakeEngine(_queued())).mint("0xABC", 0)
        assert result.success is True


class TestBurn:
    async def test_burn_from_user_wallet(self) -> None:
        engine = FakeEngine(_queued("b1"), statuses=["mined"])

        result = await _gateway(engine).burn("0xUSER", 5, wait_for_confirmation=True)

        assert result.success is True
        assert result.is_mined is True
        assert engine.writes[0].headers["x-backend-wallet-address"] == "0xUSER"
        assert engine.writes[0].url.path.endswith("/erc20/transfer")

    async def test_empty_from_address(self) -> None:
        with pytest.raises(MissingFieldError):
            await _gateway(FakeEngine(_queued())).burn("", 5)


class TestAwaitConfirmation:
    async def test_existing_queue_id(self) -> None:
        engine = FakeEngine(_queued(), statuses=["mined"])

        status = await _gateway(engine).await_confirmation("client-burn")

        assert status.state is TxState.MINED
        assert engine.writes == []
