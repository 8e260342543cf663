import pytest
import respx
from httpx import Response
from nitan_mcp.core.errors import ToolFailure
from nitan_mcp.core.site_state import SiteState
from nitan_mcp.core.tools.site import discourse_list_categories, discourse_select_site
from nitan_mcp.core.tools.users import discourse_list_user_posts

BASE = "https://forum.example.com"


@pytest.fixture
def site():
    state = SiteState()
    state.select_site(BASE)
    return state


@pytest.mark.asyncio
@respx.mock
async def test_list_user_posts(site, monkeypatch):
    monkeypatch.delenv("NITAN_TIMEZONE", raising=False)
    route = respx.get(f"{BASE}/user_actions.json").mock(
        return_value=Response(
            200,
            json={
                "user_actions": [
                    {
                        "post_id": 100 + i,
                        "topic_id": 7,
                        "post_number": i,
                        "slug": "dp",
                        "title": "Data points",
                        "excerpt": f"reply {i}",
                        "created_at": "2025-10-02T10:15:59.123Z",
                    }
                    for i in range(1, 4)
                ]
            },
        )
    )

    posts = await discourse_list_user_posts(site, "alice", limit=2)

    params = route.calls[0].request.url.params
    assert params["username"] == "alice"
    assert params["filter"] == "4,5"
    assert posts == [
        {
            "post_id": 101,
            "topic_id": 7,
            "title": "Data points",
            "url": f"{BASE}/t/dp/7/1",
            "excerpt": "reply 1",
            "created_at": "2025-10-02 10:15",
        },
        {
            "post_id": 102,
            "topic_id": 7,
            "title": "Data points",
            "url": f"{BASE}/t/dp/7/2",
            "excerpt": "reply 2",
            "created_at": "2025-10-02 10:15",
        },
    ]


@pytest.mark.asyncio
@respx.mock
async def test_list_user_posts_empty_payload(site):
    respx.get(f"{BASE}/user_actions.json").mock(return_value=Response(200, json={}))
    assert await discourse_list_user_posts(site, "nobody") == []


@pytest.mark.asyncio
async def test_select_site_tool_switches_active_site(site):
    result = await discourse_select_site(site, "https://other.example.com/latest")

    assert result == {"site": "https://other.example.com", "selected": True}
    assert site.current_origin == "https://other.example.com"


@pytest.mark.asyncio
async def test_select_site_tool_rejects_invalid_url(site):
    with pytest.raises(ToolFailure) as exc:
        await discourse_select_site(site, "not-a-url")

    assert str(exc.value).startswith("Failed to select site: Invalid site URL")
    assert site.current_origin == BASE


@pytest.mark.asyncio
async def test_list_categories_tool(site):
    tree = await discourse_list_categories(site)

    rewards = next(c for c in tree if c["id"] == 12)
    assert rewards["name"] == "玩卡"
    assert {c["name"] for c in rewards["subcategories"]} >= {"信用卡", "银行账户"}
