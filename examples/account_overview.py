"""Check credentials by reading balances and open orders.

Reads KRAKEN_API_KEY / KRAKEN_API_SECRET from the environment or .env.
Read-only: nothing is placed or cancelled.
"""

import asyncio

from krakenclient import Config, RestClient
from krakenclient.utils.exceptions import ConfigurationError
from krakenclient.utils.logger import logger


async def account_overview():
    """Print server time, balances and open orders."""
    logger.info("=" * 70)
    logger.info("Kraken account overview")
    logger.info("=" * 70)

    if not Config.validate():
        logger.error(
            "API credentials not found!\n"
            "Please set KRAKEN_API_KEY and KRAKEN_API_SECRET in .env file"
        )
        return

    async with RestClient() as client:
        server_time = await client.server_time()
        if not server_time.ok:
            logger.error(f"Server time failed: {server_time.error or server_time.transport_error}")
            return
        logger.info(f"Server time: {server_time.result['rfc1123']}")

        try:
            balance = await client.balance()
        except ConfigurationError as e:
            logger.error(f"Bad credentials configuration: {e}")
            return

        if not balance.ok:
            logger.error(f"Balance failed: {balance.error or balance.transport_error}")
            return

        for asset, amount in sorted(balance.result.items()):
            logger.info(f"  {asset:>8}: {amount}")

        open_orders = await client.open_orders()
        if open_orders.ok:
            orders = open_orders.result.get("open", {})
            logger.info(f"{len(orders)} open orders")
            for txid, order in orders.items():
                logger.info(f"  {txid}: {order.get('descr', {}).get('order')}")
        else:
            logger.error(f"OpenOrders failed: {open_orders.error or open_orders.transport_error}")


if __name__ == "__main__":
    asyncio.run(account_overview())
