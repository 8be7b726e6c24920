import asyncio
from typing import Optional

from eth_account import Account
from eth_account.signers.local import LocalAccount
from web3 import Web3, HTTPProvider
from web3.exceptions import TimeExhausted

from config import RPC_REQUEST_TIMEOUT
from autobridge.errors import TransportError
from autobridge.events import INBOX_MIN_ABI
from autobridge.models import Confirmation, FeeQuote


def create_web3_with_proxy(rpc_url: str, proxy: Optional[str] = None) -> Web3:
    kwargs = {"timeout": RPC_REQUEST_TIMEOUT}
    if proxy:
        kwargs["proxies"] = {"http": proxy, "https": proxy}
    return Web3(HTTPProvider(rpc_url, request_kwargs=kwargs))


class Web3Transport:
    def __init__(self, w3: Web3, private_key: str, destination: str,
                 chain_id: Optional[int] = None, confirmation_timeout: float = 600):
        self.w3 = w3
        self.account: LocalAccount = Account.from_key(private_key)
        self.destination = Web3.to_checksum_address(destination)
        self.contract = w3.eth.contract(address=self.destination, abi=INBOX_MIN_ABI)
        self.confirmation_timeout = confirmation_timeout
        self._chain_id = chain_id

    @property
    def address(self) -> str:
        return self.account.address

    async def get_latest_block(self):
        return await asyncio.to_thread(self.w3.eth.get_block, "latest")

    async def get_current_gas_price(self) -> int:
        return await asyncio.to_thread(lambda: self.w3.eth.gas_price)

    async def get_network_id(self) -> int:
        if self._chain_id is None:
            self._chain_id = await asyncio.to_thread(lambda: self.w3.eth.chain_id)
        return self._chain_id

    def _tx_params(self, value_wei: int, fee: FeeQuote) -> dict:
        return {
            "from": self.address,
            "value": value_wei,
            "maxFeePerGas": fee.max_fee_per_gas,
            "maxPriorityFeePerGas": fee.max_priority_fee_per_gas,
        }

    async def estimate_cost(self, value_wei: int, fee: FeeQuote) -> Optional[int]:
        params = self._tx_params(value_wei, fee)
        return await asyncio.to_thread(self.contract.functions.depositEth().estimate_gas, params)

    async def submit_action(self, value_wei: int, fee: FeeQuote) -> str:
        params = self._tx_params(value_wei, fee)
        # БЕРЕМО NONCE З 'pending'
        params["nonce"] = await asyncio.to_thread(self.w3.eth.get_transaction_count, self.address, "pending")
        params["chainId"] = await self.get_network_id()

        tx = await asyncio.to_thread(self.contract.functions.depositEth().build_transaction, params)
        signed_tx = self.account.sign_transaction(tx)
        tx_hash = await asyncio.to_thread(self.w3.eth.send_raw_transaction, signed_tx.raw_transaction)
        return self.w3.to_hex(tx_hash)

    async def await_confirmation(self, tx_hash: str) -> Confirmation:
        try:
            receipt = await asyncio.to_thread(
                self.w3.eth.wait_for_transaction_receipt, tx_hash, timeout=self.confirmation_timeout
            )
        except TimeExhausted as e:
            raise TransportError(f"Не дочекались підтвердження за {self.confirmation_timeout:g}с: {tx_hash}") from e

        return Confirmation(
            status=receipt.get("status", 0),
            tx_hash=tx_hash,
            block_number=receipt.get("blockNumber"),
            gas_used=receipt.get("gasUsed"),
            logs=tuple(receipt.get("logs") or ()),
        )
