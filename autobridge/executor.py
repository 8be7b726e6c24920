import random
from decimal import Decimal
from typing import Optional

from web3 import Web3

from autobridge.events import extract_inbox_events
from autobridge.models import AttemptOutcome, FeeQuote, OutcomeKind
from autobridge.progress import format_eth, format_gwei, utc_stamp


def draw_amount_wei(min_amount_eth: Decimal, max_amount_eth: Decimal, rng: random.Random) -> int:
    amount_eth = rng.uniform(float(min_amount_eth), float(max_amount_eth))
    amount_wei = int(Web3.to_wei(Decimal(f"{amount_eth:.18f}"), "ether"))
    # float може трохи вийти за межі діапазону
    low = int(Web3.to_wei(min_amount_eth, "ether"))
    high = int(Web3.to_wei(max_amount_eth, "ether"))
    return min(max(amount_wei, low), high)


class DepositExecutor:
    def __init__(self, transport, oracle, destination: str,
                 min_amount_eth: Decimal, max_amount_eth: Decimal,
                 rng: Optional[random.Random] = None):
        self.transport = transport
        self.oracle = oracle
        self.destination = destination
        self.min_amount_eth = Decimal(min_amount_eth)
        self.max_amount_eth = Decimal(max_amount_eth)
        self.rng = rng or random.Random()

    async def _estimate_gas(self, amount_wei: int, fee: FeeQuote) -> Optional[int]:
        # Лише для інформації, відправку не блокує
        try:
            return await self.transport.estimate_cost(amount_wei, fee)
        except Exception:
            return None

    def _print_summary(self, amount_wei: int, fee: FeeQuote, gas_estimate: Optional[int]):
        print(f"[{utc_stamp()}] 🚀 Відправка депозиту...")
        print(f"From   : {self.transport.address}")
        print(f"Proxy  : {self.destination}")
        print(f"Value  : {format_eth(amount_wei)}")
        if gas_estimate:
            print(f"Gas est: {gas_estimate}")
        print(f"Fees   : maxFee={format_gwei(fee.max_fee_per_gas)}, tip={format_gwei(fee.max_priority_fee_per_gas)}")

    async def attempt(self) -> AttemptOutcome:
        amount_wei = draw_amount_wei(self.min_amount_eth, self.max_amount_eth, self.rng)
        fee = None
        gas_estimate = None
        tx_hash = None

        try:
            fee = await self.oracle.quote()
            gas_estimate = await self._estimate_gas(amount_wei, fee)
            self._print_summary(amount_wei, fee, gas_estimate)

            tx_hash = await self.transport.submit_action(amount_wei, fee)
            print(f"[Tx ✅] Відправлено: {tx_hash}")
            confirmation = await self.transport.await_confirmation(tx_hash)
        except Exception as e:
            print(f"[{utc_stamp()}] [Error ❌] {e}")
            return AttemptOutcome(
                kind=OutcomeKind.TRANSPORT_ERROR,
                amount_wei=amount_wei,
                fee=fee,
                tx_hash=tx_hash,
                gas_estimate=gas_estimate,
                error=str(e) or type(e).__name__,
            )

        if confirmation.status != 1:
            print(f"[Deposit ❌] Status: FAILED, TX: {confirmation.tx_hash}")
            return AttemptOutcome(
                kind=OutcomeKind.ON_CHAIN_FAILURE,
                amount_wei=amount_wei,
                fee=fee,
                tx_hash=confirmation.tx_hash,
                block_number=confirmation.block_number,
                gas_used=confirmation.gas_used,
                gas_estimate=gas_estimate,
                error="transaction reverted",
            )

        print(f"[Deposit ✅] Status: SUCCESS, {format_eth(amount_wei)}, TX: {confirmation.tx_hash}")
        events = extract_inbox_events(confirmation.logs, self.destination)
        for event in events:
            print(f"↳ BlockchainEvent: id={event.message_num}, data=0x{event.data.hex()}")

        return AttemptOutcome(
            kind=OutcomeKind.CONFIRMED,
            amount_wei=amount_wei,
            fee=fee,
            tx_hash=confirmation.tx_hash,
            block_number=confirmation.block_number,
            gas_used=confirmation.gas_used,
            gas_estimate=gas_estimate,
            events=tuple(events),
        )
