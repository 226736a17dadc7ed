from __future__ import annotations

from typing import Iterable

from aiogram import Bot
from aiogram.client.default import DefaultBotProperties
from aiogram.enums import ParseMode
from loguru import logger

from santa.services.reporter import Notification, compose_notifications


def create_bot(token: str) -> Bot:
    return Bot(token=token, default=DefaultBotProperties(parse_mode=ParseMode.HTML))


class TelegramNotifier:
    """Delivers each giver's match as a private Telegram message.

    The participant contact handle is used as the chat id.
    """

    def __init__(self, bot) -> None:
        self.bot = bot

    async def send(self, notifications: Iterable[Notification]) -> int:
        delivered = 0
        for notification in notifications:
            try:
                await self.bot.send_message(
                    notification.contact,
                    notification.text,
                    parse_mode=ParseMode.HTML,
                )
            except Exception as exc:
                logger.bind(giver=notification.giver, contact=notification.contact).warning(
                    "Failed to send assignment DM: {error}", error=str(exc)
                )
                continue
            delivered += 1
        return delivered


async def notify_draw(token: str, result) -> int:
    notifications = compose_notifications(
        result.pairs, result.participants, result.budget, result.currency
    )
    bot = create_bot(token)
    try:
        delivered = await TelegramNotifier(bot).send(notifications)
    finally:
        await bot.session.close()

    logger.bind(delivered=delivered, total=len(result.pairs)).info("Secret Santa messages sent")
    return delivered
