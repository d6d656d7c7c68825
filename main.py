"""
Storefront client entry point.
Connects to the configured backend, loads the catalogue and, when
credentials are given, signs in and lists orders.

    python main.py [email password]
"""

import asyncio
import sys

from loguru import logger

from storefront import StorefrontAPI
from storefront.services.errors import ServiceError
from storefront.settings import global_settings


async def main(argv: list[str]) -> None:
    """Main entry"""
    logger.remove()
    logger.add(sys.stderr, level=global_settings.log_level)

    logger.info("Starting storefront client...")
    api = await StorefrontAPI.connect()

    try:
        categories = await api.categories.get_all()
        logger.info(f"Loaded {len(categories)} categories")

        products = await api.products.get_all()
        logger.info(f"Loaded {len(products)} products")

        if len(argv) >= 2:
            email, password = argv[0], argv[1]
            session = await api.auth.login(email, password)
            logger.info(f"Signed in as {session.get('user', {}).get('name', email)}")

            orders = await api.orders.get_all()
            logger.info(f"Loaded {len(orders)} orders")

            await api.auth.logout()

    except ServiceError as e:
        logger.error(f"API error: {e}")
    finally:
        logger.info(f"Health: {api.get_health_status()}")
        await api.close()
        logger.info("Storefront client stopped")


if __name__ == "__main__":
    asyncio.run(main(sys.argv[1:]))
