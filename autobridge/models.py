from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple


class OutcomeKind(Enum):
    CONFIRMED = "confirmed"
    ON_CHAIN_FAILURE = "on_chain_failure"
    TRANSPORT_ERROR = "transport_error"


@dataclass(frozen=True)
class FeeQuote:
    max_fee_per_gas: int
    max_priority_fee_per_gas: int
    base_fee_per_gas: Optional[int] = None

    @property
    def is_legacy(self) -> bool:
        return self.base_fee_per_gas is None


@dataclass(frozen=True)
class InboxEvent:
    message_num: int
    data: bytes


@dataclass(frozen=True)
class Confirmation:
    status: int
    tx_hash: str
    block_number: Optional[int] = None
    gas_used: Optional[int] = None
    logs: Tuple = ()


@dataclass(frozen=True)
class AttemptOutcome:
    kind: OutcomeKind
    amount_wei: int
    fee: Optional[FeeQuote] = None
    tx_hash: Optional[str] = None
    block_number: Optional[int] = None
    gas_used: Optional[int] = None
    gas_estimate: Optional[int] = None
    events: Tuple[InboxEvent, ...] = field(default_factory=tuple)
    error: Optional[str] = None

    @property
    def confirmed(self) -> bool:
        return self.kind is OutcomeKind.CONFIRMED
