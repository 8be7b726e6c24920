import pytest
from eth_account import Account
from eth_account.typed_transactions import TypedTransaction
from web3.exceptions import TimeExhausted

from autobridge.chain import Web3Transport, create_web3_with_proxy
from autobridge.errors import TransportError
from autobridge.models import FeeQuote
from fakes import DESTINATION

PRIVATE_KEY = "0x" + "22" * 32


def make_transport(chain_id=1337):
    w3 = create_web3_with_proxy("http://127.0.0.1:8545")
    return Web3Transport(w3, PRIVATE_KEY, DESTINATION, chain_id=chain_id, confirmation_timeout=3)


@pytest.mark.asyncio
async def test_configured_chain_id_skips_rpc():
    transport = make_transport(chain_id=8008135)
    assert await transport.get_network_id() == 8008135


@pytest.mark.asyncio
async def test_receipt_is_mapped_to_confirmation(monkeypatch):
    transport = make_transport()
    receipt = {"status": 1, "blockNumber": 12, "gasUsed": 50000, "logs": [{"address": DESTINATION}]}
    monkeypatch.setattr(transport.w3.eth, "wait_for_transaction_receipt", lambda tx_hash, timeout: receipt)

    confirmation = await transport.await_confirmation("0xabc")
    assert confirmation.status == 1
    assert confirmation.block_number == 12
    assert confirmation.gas_used == 50000
    assert len(confirmation.logs) == 1


@pytest.mark.asyncio
async def test_confirmation_timeout_becomes_transport_error(monkeypatch):
    transport = make_transport()
    seen = {}

    def never_mined(tx_hash, timeout):
        seen["timeout"] = timeout
        raise TimeExhausted("not mined")

    monkeypatch.setattr(transport.w3.eth, "wait_for_transaction_receipt", never_mined)
    with pytest.raises(TransportError):
        await transport.await_confirmation("0xabc")
    assert seen["timeout"] == 3


def test_tx_params_carry_eip1559_fees():
    transport = make_transport()
    params = transport._tx_params(5, FeeQuote(max_fee_per_gas=300, max_priority_fee_per_gas=100, base_fee_per_gas=100))
    assert params == {
        "from": transport.address,
        "value": 5,
        "maxFeePerGas": 300,
        "maxPriorityFeePerGas": 100,
    }


@pytest.mark.asyncio
async def test_submit_action_signs_with_pending_nonce(monkeypatch):
    transport = make_transport(chain_id=1337)
    nonce_calls = []
    sent = []

    def get_transaction_count(address, block_identifier):
        nonce_calls.append((address, block_identifier))
        return 7

    def send_raw_transaction(raw):
        sent.append(raw)
        return b"\x11" * 32

    monkeypatch.setattr(transport.w3.eth, "get_transaction_count", get_transaction_count)
    monkeypatch.setattr(transport.w3.eth, "estimate_gas", lambda tx, *args, **kwargs: 50000)
    monkeypatch.setattr(transport.w3.eth, "send_raw_transaction", send_raw_transaction)

    fee = FeeQuote(max_fee_per_gas=300, max_priority_fee_per_gas=100, base_fee_per_gas=100)
    tx_hash = await transport.submit_action(10 ** 15, fee)

    assert tx_hash == "0x" + "11" * 32
    assert nonce_calls == [(transport.address, "pending")]
    assert len(sent) == 1
    assert Account.recover_transaction(sent[0]) == transport.address

    tx = TypedTransaction.from_bytes(sent[0]).as_dict()
    assert tx["nonce"] == 7
    assert tx["chainId"] == 1337
    assert tx["value"] == 10 ** 15
    assert tx["gas"] == 50000
    assert tx["maxFeePerGas"] == 300
    assert tx["maxPriorityFeePerGas"] == 100


@pytest.mark.asyncio
async def test_estimate_cost_uses_deposit_call(monkeypatch):
    transport = make_transport()
    seen = {}

    def estimate_gas(tx, *args, **kwargs):
        seen.update(tx)
        return 42000

    monkeypatch.setattr(transport.w3.eth, "estimate_gas", estimate_gas)
    fee = FeeQuote(max_fee_per_gas=300, max_priority_fee_per_gas=100, base_fee_per_gas=100)

    assert await transport.estimate_cost(5, fee) == 42000
    assert seen["value"] == 5
    assert seen["to"] == DESTINATION


@pytest.mark.asyncio
async def test_block_and_gas_price_reads(monkeypatch):
    transport = make_transport()
    monkeypatch.setattr(transport.w3.eth, "get_block", lambda block_identifier: {"baseFeePerGas": 100, "id": block_identifier})
    monkeypatch.setattr(type(transport.w3.eth), "gas_price", property(lambda self: 800))

    block = await transport.get_latest_block()
    assert block["id"] == "latest"
    assert await transport.get_current_gas_price() == 800
