"""Telegram messaging helper."""

from __future__ import annotations

from typing import Optional

import httpx
import structlog

from .checker import CheckReport
from .config import Settings
from .summariser import build_summary

LOGGER = structlog.get_logger(__name__)


def format_message(report: CheckReport, share_link: Optional[str] = None) -> str:
    """Build a human-friendly message for Telegram."""
    lines = [build_summary(report)]
    if share_link:
        lines.append("")
        lines.append(f"Open: {share_link}")
    return "\n".join(lines).strip()


async def post_to_telegram(
    settings: Settings,
    text: str,
    *,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> None:
    """Send the composed message to Telegram."""
    if not settings.telegram_enabled:
        raise RuntimeError("Telegram delivery needs TIDE_AGENT_TELEGRAM_BOT_TOKEN and TIDE_AGENT_TELEGRAM_CHAT_ID")

    payload = {
        "chat_id": settings.telegram_chat_id,
        "text": text,
        "disable_web_page_preview": True,
    }

    url = f"{settings.telegram_api_endpoint}/sendMessage"
    LOGGER.info("telegram.send.start", chat_id=settings.telegram_chat_id)

    async with httpx.AsyncClient(timeout=15.0, transport=transport) as client:
        response = await client.post(url, json=payload)
    if response.is_success:
        LOGGER.info("telegram.send.success")
        return
    LOGGER.error("telegram.send.failed", status_code=response.status_code, body=response.text)
    raise RuntimeError(f"Telegram send failed with {response.status_code}: {response.text}")
