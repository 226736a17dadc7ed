import asyncio

from santa.bot import notifier
from santa.bot.notifier import TelegramNotifier, notify_draw
from santa.core.config import DrawConfig
from santa.services.draw import run_draw
from santa.services.reporter import Notification
from santa.services.strategies import SearchConfig


class FakeSession:
    def __init__(self):
        self.closed = False

    async def close(self):
        self.closed = True


class FakeBot:
    def __init__(self, failing=()):
        self.failing = set(failing)
        self.sent = []
        self.session = FakeSession()

    async def send_message(self, chat_id, text, parse_mode=None):
        if chat_id in self.failing:
            raise RuntimeError("Forbidden: bot was blocked by the user")
        self.sent.append((chat_id, text))


def test_sends_one_message_per_notification():
    bot = FakeBot()
    notifications = [
        Notification(giver="Alice", contact="1001", text="Secret Santa: You're giving a gift to Bob!"),
        Notification(giver="Bob", contact="1002", text="Secret Santa: You're giving a gift to Alice!"),
    ]

    delivered = asyncio.run(TelegramNotifier(bot).send(notifications))

    assert delivered == 2
    assert bot.sent[0] == ("1001", "Secret Santa: You're giving a gift to Bob!")


def test_failed_delivery_does_not_stop_the_rest():
    bot = FakeBot(failing={"1001"})
    notifications = [
        Notification(giver="Alice", contact="1001", text="a"),
        Notification(giver="Bob", contact="1002", text="b"),
    ]

    delivered = asyncio.run(TelegramNotifier(bot).send(notifications))

    assert delivered == 1
    assert bot.sent == [("1002", "b")]


def test_notify_draw_closes_bot_session(monkeypatch):
    bot = FakeBot()
    monkeypatch.setattr(notifier, "create_bot", lambda token: bot)
    config = DrawConfig(participants=["Alice 1001", "Bob 1002", "Carol"], budget=10)
    result = run_draw(config, "graph_cycle", SearchConfig(seed=3))

    delivered = asyncio.run(notify_draw("123:token", result))

    assert delivered == 2
    assert bot.session.closed
    assert all("Budget: 10" in text for _, text in bot.sent)
