from typing import Iterable, List, Optional

from eth_abi import decode
from eth_abi.exceptions import DecodingError
from web3 import Web3

from autobridge.models import InboxEvent

INBOX_MIN_ABI = [
    {"inputs": [], "name": "depositEth", "outputs": [], "stateMutability": "payable", "type": "function"}
]

# InboxMessageDelivered(uint256 indexed messageNum, bytes data)
INBOX_MESSAGE_DELIVERED_SIGNATURE = "InboxMessageDelivered(uint256,bytes)"
INBOX_MESSAGE_DELIVERED_TOPIC = bytes(Web3.keccak(text=INBOX_MESSAGE_DELIVERED_SIGNATURE))


def _as_bytes(value) -> bytes:
    if isinstance(value, str):
        return bytes.fromhex(value[2:] if value.startswith("0x") else value)
    return bytes(value)


def decode_inbox_event(log) -> Optional[InboxEvent]:
    topics = [_as_bytes(t) for t in log["topics"]]
    if not topics or topics[0] != INBOX_MESSAGE_DELIVERED_TOPIC:
        return None
    message_num = int.from_bytes(topics[1], "big")
    (data,) = decode(["bytes"], _as_bytes(log["data"]))
    return InboxEvent(message_num=message_num, data=data)


def extract_inbox_events(logs: Iterable, destination: str) -> List[InboxEvent]:
    """
    Події InboxMessageDelivered лише від контракту-проксі. Логи інших контрактів
    ігноруються, биті логи мовчки пропускаються.
    """
    events = []
    for log in logs or ():
        address = log.get("address") if hasattr(log, "get") else None
        if not address or str(address).lower() != destination.lower():
            continue
        try:
            event = decode_inbox_event(log)
        except (DecodingError, ValueError, TypeError, KeyError, IndexError):
            continue
        if event is not None:
            events.append(event)
    return events
