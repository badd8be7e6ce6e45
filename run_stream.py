#!/usr/bin/env python
"""
Run the notification stream for one user.

Location: run_stream.py
Purpose: Entry point that streams fills/closed positions to Telegram
Relevant files: src/kuma_session/session.py, config.yml, .env

Usage:
    python run_stream.py --user_id 123456789
    python run_stream.py --user_id 123456789 --sandbox --log_level DEBUG

Credentials come from KUMA_WALLET, KUMA_API_KEY, KUMA_API_SECRET,
KUMA_SESSION_KEY and KUMA_LANG; the bot token from TELEGRAM_BOT_TOKEN.
"""

import argparse
import asyncio
import logging
import os
import signal
from pathlib import Path

import yaml


def load_config():
    """Load configuration from config.yml"""
    config_path = Path(__file__).parent / "config.yml"
    if config_path.exists():
        with open(config_path) as f:
            return yaml.safe_load(f) or {}
    return {}


def main():
    config = load_config()
    stream_config = config.get("stream", {})
    logging_config = config.get("logging", {})

    parser = argparse.ArgumentParser(description="Run the Kuma notification stream")
    parser.add_argument("--user_id", type=int, required=True)
    parser.add_argument("--sandbox", action="store_true", default=config.get("sandbox", False))
    parser.add_argument("--reconnect_delay", type=float, default=stream_config.get("reconnect_delay", 45.0))
    parser.add_argument("--texts", default=config.get("texts"))
    parser.add_argument("--log_level", default=logging_config.get("level", "INFO"))
    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    # Import after parsing args
    from kuma_session import (
        ConnectionConfig, KumaSession, ReconnectPolicy, TelegramSink, load_locales,
    )

    async def run():
        session = KumaSession.from_env(
            user_id=args.user_id,
            config=ConnectionConfig.for_sandbox() if args.sandbox else ConnectionConfig(),
            locales=load_locales(args.texts) if args.texts else None,
            reconnect_policy=ReconnectPolicy(delay=args.reconnect_delay),
        )
        sink = TelegramSink(os.getenv("TELEGRAM_BOT_TOKEN", ""))

        loop = asyncio.get_running_loop()

        def shutdown_handler():
            logging.info("Shutting down...")
            asyncio.create_task(session.close())

        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, shutdown_handler)

        try:
            await session.watch(sink)
        except Exception as e:
            logging.error(f"Error in event stream: {e}")
        finally:
            await session.close()
            await sink.close()

    asyncio.run(run())


if __name__ == "__main__":
    main()
