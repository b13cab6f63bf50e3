import pytest

from ai_logic.processor import Dispatcher
from ai_logic.session import InMemorySessionStore
from models import ChatEntry, SessionCredentials

FAR_FUTURE_MS = 4102444800000  # 2100-01-01


@pytest.fixture
def google_tokens():
    return {
        "access_token": "ya29.test",
        "refresh_token": "1//refresh",
        "expiry_date": FAR_FUTURE_MS,
    }


@pytest.fixture
def store(google_tokens):
    return InMemorySessionStore(
        tokens={"google": google_tokens},
        chats={
            "-100555": ChatEntry(id=-100555, type="supergroup", title="Family Group"),
            "42": ChatEntry(id=42, type="private", title="Alice", username="alice_w"),
        },
    )


@pytest.fixture
def empty_store():
    return InMemorySessionStore()


@pytest.fixture
def dispatcher(store):
    return Dispatcher(store)


@pytest.fixture
def credentials():
    return SessionCredentials(
        telegram_token="123:abc",
        slack_token="xoxb-test",
        discord_token="discord-test",
        user_guild_id="999",
        microsoft_tokens={"access_token": "graph-token"},
        shopify_config={"store_url": "demo.myshopify.com", "access_token": "shpat_test"},
    )
