import asyncio
import signal
import sys
import traceback

from config import CONFIG_PATH
from autobridge.chain import Web3Transport, create_web3_with_proxy
from autobridge.errors import ConfigurationError
from autobridge.executor import DepositExecutor
from autobridge.gas import ChainGasOracle
from autobridge.progress import ConsoleProgress
from autobridge.scheduler import QuotaScheduler
from autobridge.settings import load_private_key, load_settings


def print_banner(settings, wallet_address: str, chain_id: int):
    print("================ Daily Auto Bridge FHENIX TESTNET =================")
    print(f"Wallet: {wallet_address}")
    print(f"Proxy : {settings.destination}")
    print(f"Chain : {chain_id}")
    print(f"Daily target: {settings.min_per_day}..{settings.max_per_day}")
    print(f"ETH range   : {settings.min_amount_eth}..{settings.max_amount_eth}")
    print(f"PriorityFee : {settings.priority_fee_gwei} gwei")
    print(f"Delay sec   : {settings.min_delay_seconds}..{settings.max_delay_seconds}")
    print(f"Day starts  : UTC{settings.boundary_offset_minutes:+d} хв")
    print("===================================================================")


def install_stop_handlers(scheduler: QuotaScheduler):
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, scheduler.stop)
        except NotImplementedError:
            # Windows: лишається KeyboardInterrupt
            pass


async def main(config_path: str = CONFIG_PATH):
    settings = load_settings(config_path)
    private_key = load_private_key()

    w3 = create_web3_with_proxy(settings.rpc_url, settings.http_proxy)
    transport = Web3Transport(
        w3,
        private_key,
        settings.destination,
        chain_id=settings.chain_id,
        confirmation_timeout=settings.confirmation_timeout,
    )
    chain_id = await transport.get_network_id()
    print_banner(settings, transport.address, chain_id)

    oracle = ChainGasOracle(transport, settings.priority_fee_gwei)
    executor = DepositExecutor(
        transport,
        oracle,
        settings.destination,
        settings.min_amount_eth,
        settings.max_amount_eth,
    )
    scheduler = QuotaScheduler.from_settings(settings, executor, progress=ConsoleProgress())
    install_stop_handlers(scheduler)
    await scheduler.run()


def run() -> int:
    try:
        asyncio.run(main())
    except ConfigurationError as e:
        print(f"❌ Помилка конфігурації: {e}")
        return 1
    except KeyboardInterrupt:
        print("\n👋 Зупинено користувачем")
        return 0
    except Exception as e:
        print("\n❌ CRITICAL ERROR:")
        print(f"{type(e).__name__}: {e}")
        traceback.print_exc()
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(run())
