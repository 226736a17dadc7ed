from santa.bot.notifier import TelegramNotifier, create_bot, notify_draw

__all__ = ["TelegramNotifier", "create_bot", "notify_draw"]
