from decimal import Decimal
from typing import Optional

from web3 import Web3

from autobridge.models import FeeQuote

BASE_FEE_MULTIPLIER = 2     # запас на ріст base fee за кілька блоків
LEGACY_TIP_DIVISOR = 8


def priority_fee_wei(priority_fee_gwei) -> int:
    return int(Web3.to_wei(Decimal(str(priority_fee_gwei)), "gwei"))


def eip1559_quote(base_fee: int, priority_wei: int) -> FeeQuote:
    return FeeQuote(
        max_fee_per_gas=BASE_FEE_MULTIPLIER * base_fee + priority_wei,
        max_priority_fee_per_gas=priority_wei,
        base_fee_per_gas=base_fee,
    )


def legacy_quote(gas_price: int) -> FeeQuote:
    return FeeQuote(
        max_fee_per_gas=gas_price,
        max_priority_fee_per_gas=gas_price // LEGACY_TIP_DIVISOR,
    )


def _base_fee_of(block) -> Optional[int]:
    if block is None:
        return None
    base_fee = block.get("baseFeePerGas")
    return None if base_fee is None else int(base_fee)


class ChainGasOracle:
    def __init__(self, transport, priority_fee_gwei):
        self.transport = transport
        self.priority_wei = priority_fee_wei(priority_fee_gwei)

    async def quote(self) -> FeeQuote:
        block = await self.transport.get_latest_block()
        base_fee = _base_fee_of(block)
        if base_fee is None:
            gas_price = await self.transport.get_current_gas_price()
            return legacy_quote(int(gas_price))
        return eip1559_quote(base_fee, self.priority_wei)
