import pytest
import respx
from httpx import Response
from nitan_mcp.core.errors import ToolFailure
from nitan_mcp.core.site_state import SiteState
from nitan_mcp.core.tools.topics import (
    discourse_list_hot_topics,
    discourse_list_top_topics,
    discourse_read_topic,
)

BASE = "https://forum.example.com"


@pytest.fixture(autouse=True)
def utc(monkeypatch):
    monkeypatch.delenv("NITAN_TIMEZONE", raising=False)


@pytest.fixture
def site():
    state = SiteState()
    state.select_site(BASE)
    return state


def _topic_payload():
    return {
        "id": 42,
        "slug": "amex-gold",
        "title": "Amex Gold",
        "posts_count": 3,
        "views": 100,
        "like_count": 5,
        "category_id": 5,
        "created_at": "2025-09-20T14:03:25.000Z",
        "post_stream": {
            "posts": [
                {
                    "post_number": 1,
                    "username": "alice",
                    "created_at": "2025-09-20T14:03:25.000Z",
                    "cooked": "<p>Hello <b>world</b></p>",
                    "like_count": 2,
                },
                {
                    "post_number": 2,
                    "username": "bob",
                    "created_at": "2025-09-21T01:00:00.000Z",
                    "cooked": "<p>" + "x" * 2500 + "</p>",
                    "like_count": 0,
                },
            ]
        },
    }


def _topic_list(n=3):
    return {
        "topic_list": {
            "topics": [
                {
                    "id": i,
                    "slug": f"topic-{i}",
                    "title": f"Topic {i}",
                    "views": 10 * i,
                    "posts_count": i,
                    "like_count": None,
                    "category_id": 15,
                    "tags": ["tag"],
                    "created_at": "2025-10-01T08:30:00Z",
                }
                for i in range(1, n + 1)
            ]
        }
    }


@pytest.mark.asyncio
@respx.mock
async def test_read_topic(site):
    respx.get(f"{BASE}/t/42.json").mock(return_value=Response(200, json=_topic_payload()))

    result = await discourse_read_topic(site, 42)

    assert result["topic_id"] == 42
    assert result["url"] == f"{BASE}/t/amex-gold/42"
    assert result["category"] == "信用卡"
    assert result["created_at"] == "2025-09-20 14:03"
    first, second = result["posts"]
    assert first["cooked"] == "Hello world"
    assert first["username"] == "alice"
    assert len(second["cooked"]) == 2000


@pytest.mark.asyncio
@respx.mock
async def test_read_topic_from_post_number_and_limit(site):
    route = respx.get(f"{BASE}/t/42/2.json").mock(
        return_value=Response(200, json=_topic_payload())
    )

    result = await discourse_read_topic(site, 42, post_number=2, max_posts=1)

    assert route.called
    assert len(result["posts"]) == 1


@pytest.mark.asyncio
@respx.mock
async def test_read_topic_not_found(site):
    respx.get(f"{BASE}/t/1.json").mock(
        return_value=Response(404, json={"errors": ["not found"]})
    )

    with pytest.raises(ToolFailure) as exc:
        await discourse_read_topic(site, 1)

    assert str(exc.value).startswith("Failed to read topic: 404")


@pytest.mark.asyncio
@respx.mock
async def test_hot_topics_are_summarized_and_cached(site):
    route = respx.get(f"{BASE}/hot.json").mock(
        return_value=Response(200, json=_topic_list())
    )

    first = await discourse_list_hot_topics(site, limit=2)
    second = await discourse_list_hot_topics(site, limit=2)

    assert route.call_count == 1
    assert first == second
    assert first[0] == {
        "id": 1,
        "title": "Topic 1",
        "url": f"{BASE}/t/topic-1/1",
        "views": 10,
        "posts_count": 1,
        "like_count": 0,
        "category": "旅行",
        "tags": ["tag"],
        "created_at": "2025-10-01 08:30",
    }
    assert len(first) == 2


@pytest.mark.asyncio
@respx.mock
async def test_top_topics_period(site):
    route = respx.get(f"{BASE}/top/monthly.json").mock(
        return_value=Response(200, json=_topic_list(1))
    )

    topics = await discourse_list_top_topics(site, period="monthly")

    assert route.called
    assert "tags" not in topics[0]
    assert topics[0]["id"] == 1


@pytest.mark.asyncio
async def test_top_topics_invalid_period(site):
    with pytest.raises(ToolFailure) as exc:
        await discourse_list_top_topics(site, period="hourly")
    assert "Invalid period" in str(exc.value)


@pytest.mark.asyncio
@respx.mock
async def test_hot_topics_tolerate_bare_topic_list(site):
    respx.get(f"{BASE}/hot.json").mock(
        return_value=Response(200, json={"topics": [{"id": 9}]})
    )

    topics = await discourse_list_hot_topics(site)

    assert topics[0]["title"] == "Topic 9"
    assert topics[0]["url"] == f"{BASE}/t/9/9"
    assert topics[0]["category"] is None


@pytest.mark.asyncio
@respx.mock
@pytest.mark.parametrize("stream", [None, "broken", ["not", "a", "dict"], {"posts": "x"}])
async def test_read_topic_with_malformed_post_stream(site, stream):
    payload = _topic_payload()
    payload["post_stream"] = stream
    respx.get(f"{BASE}/t/42.json").mock(return_value=Response(200, json=payload))

    result = await discourse_read_topic(site, 42)

    assert result["topic_id"] == 42
    assert result["posts"] == []


@pytest.mark.asyncio
@respx.mock
async def test_null_topic_list_falls_back_to_top_level(site):
    respx.get(f"{BASE}/hot.json").mock(
        return_value=Response(200, json={"topic_list": None, "topics": [{"id": 3}]})
    )

    topics = await discourse_list_hot_topics(site)

    assert [t["id"] for t in topics] == [3]
