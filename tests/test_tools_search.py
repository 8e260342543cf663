import pytest
import respx
from httpx import Response
from nitan_mcp.core.errors import ToolFailure
from nitan_mcp.core.site_state import SiteState
from nitan_mcp.core.tools.search import build_search_query, discourse_search

BASE = "https://forum.example.com"


@pytest.fixture
def site():
    state = SiteState()
    state.select_site(BASE + "/")
    return state


def _search_payload():
    return {
        "topics": [
            {"id": 10, "slug": "chase-sapphire", "title": "Chase Sapphire"},
            {"id": 11, "slug": "amex-plat", "title": "Amex Platinum"},
            {"id": 12, "slug": "no-blurb", "title": "No blurb"},
        ],
        "posts": [
            {"topic_id": 10, "post_number": 3, "blurb": "first match"},
            {"topic_id": 10, "post_number": 7, "blurb": "second match"},
            {"topic_id": 11, "blurb": "op match"},
        ],
    }


def test_build_search_query_composes_filters():
    q = build_search_query(
        query="sapphire",
        author="alice",
        after="2025-10-01",
        before="2025-10-08",
        category_id=12,
        order="latest",
    )
    assert q == "sapphire @alice after:2025-10-01 before:2025-10-08 category:12 order:latest"


def test_build_search_query_relevance_is_implicit():
    assert build_search_query(query="hotel") == "hotel"
    assert build_search_query(author="@bob") == "@bob"


@pytest.mark.asyncio
@respx.mock
async def test_search_shapes_results(site):
    route = respx.get(f"{BASE}/search.json").mock(
        return_value=Response(200, json=_search_payload())
    )

    items = await discourse_search(site, "sapphire")

    params = route.calls[0].request.url.params
    assert params["expanded"] == "true"
    assert params["q"] == "sapphire"

    assert items[0] == {
        "topic_id": 10,
        "url": f"{BASE}/t/chase-sapphire/10/3",
        "title": "Chase Sapphire",
        "post_number": 3,
        "blurb": "first match",
    }
    assert items[1]["post_number"] == 1
    assert items[1]["url"] == f"{BASE}/t/amex-plat/11/1"
    assert items[2] == {
        "topic_id": 12,
        "url": f"{BASE}/t/no-blurb/12",
        "title": "No blurb",
    }


@pytest.mark.asyncio
@respx.mock
async def test_search_with_category_and_limit(site):
    route = respx.get(f"{BASE}/search.json").mock(
        return_value=Response(200, json=_search_payload())
    )

    items = await discourse_search(
        site, "hyatt", category="旅行", order="likes", max_results=1
    )

    assert route.calls[0].request.url.params["q"] == "hyatt category:15 order:likes"
    assert len(items) == 1


@pytest.mark.asyncio
async def test_search_unknown_category_fails_without_request(site):
    with respx.mock:
        with pytest.raises(ToolFailure) as exc:
            await discourse_search(site, "x", category="不存在")
        assert not respx.calls
    assert 'Category "不存在" not found' in str(exc.value)


@pytest.mark.asyncio
async def test_search_invalid_order(site):
    with pytest.raises(ToolFailure):
        await discourse_search(site, "x", order="random")


@pytest.mark.asyncio
@respx.mock
async def test_search_http_error_is_rendered(site):
    respx.get(f"{BASE}/search.json").mock(
        return_value=Response(403, json={"errors": ["You are not permitted"]})
    )

    with pytest.raises(ToolFailure) as exc:
        await discourse_search(site, "x")

    assert str(exc.value).startswith("Search failed: 403 GET")
    assert "You are not permitted" in str(exc.value)


@pytest.mark.asyncio
async def test_search_requires_selected_site():
    with pytest.raises(ToolFailure) as exc:
        await discourse_search(SiteState(), "x")
    assert "No site selected" in str(exc.value)
