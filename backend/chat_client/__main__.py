"""
Terminal chat driver: reads lines from stdin, prints replies.

    python -m chat_client
"""

import asyncio
import logging
import sys

from config import runtime_config
from logging_config import setup_logging
from .reconnect import DisplayMessage, ReconnectionClient

logger = logging.getLogger(__name__)


def _print_reply(message: DisplayMessage) -> None:
    print(f"\nEliza: {message.text}\n", flush=True)


async def _chat_loop() -> None:
    client = ReconnectionClient.from_config(on_message=_print_reply)
    client.start()
    loop = asyncio.get_running_loop()

    try:
        while True:
            line = await loop.run_in_executor(None, sys.stdin.readline)
            if not line:
                break
            if line.strip().lower() in {"exit", "quit"}:
                break
            await client.send(line.strip())
    finally:
        await client.close()


def main() -> None:
    setup_logging(runtime_config.log_level)
    print("Chat with Eliza (type 'exit' to quit)")
    try:
        asyncio.run(_chat_loop())
    except KeyboardInterrupt:
        logger.info("Interrupted")


if __name__ == "__main__":
    main()
