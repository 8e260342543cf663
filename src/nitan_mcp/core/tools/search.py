from __future__ import annotations

from typing import Any, Dict, List, Optional
from urllib.parse import urlencode

from nitan_mcp.core.categories import get_category_by_name
from nitan_mcp.core.errors import ForumClientError, ToolFailure
from nitan_mcp.core.site_state import SiteState
from nitan_mcp.core.tools._topics import clamp, failure, topic_url

SEARCH_ORDERS = ("relevance", "likes", "latest", "views", "latest_topic")
MAX_SEARCH_RESULTS = 50


def build_search_query(
    *,
    query: str = "",
    author: Optional[str] = None,
    after: Optional[str] = None,
    before: Optional[str] = None,
    category_id: Optional[int] = None,
    order: str = "relevance",
) -> str:
    """Compose Discourse's advanced search syntax from the individual filters."""
    parts: List[str] = []
    if query:
        parts.append(query.strip())
    if author:
        parts.append(f"@{author.lstrip('@')}")
    if after:
        parts.append(f"after:{after}")
    if before:
        parts.append(f"before:{before}")
    if category_id is not None:
        parts.append(f"category:{category_id}")
    if order != "relevance":
        parts.append(f"order:{order}")
    return " ".join(p for p in parts if p)


def _first_post_per_topic(posts: List[Any]) -> Dict[int, Dict[str, Any]]:
    by_topic: Dict[int, Dict[str, Any]] = {}
    for post in posts:
        if not isinstance(post, dict):
            continue
        topic_id = post.get("topic_id")
        if topic_id and post.get("blurb") and topic_id not in by_topic:
            by_topic[topic_id] = {
                "blurb": post["blurb"],
                "post_number": post.get("post_number") or 1,
            }
    return by_topic


async def discourse_search(
    site: SiteState,
    query: str = "",
    *,
    max_results: int = 50,
    order: str = "relevance",
    category: Optional[str] = None,
    author: Optional[str] = None,
    after: Optional[str] = None,
    before: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """
    Search topics on the selected forum.

    - order: relevance (default), likes, latest, views or latest_topic
    - category: Chinese category name, e.g. 玩卡, 旅行, 理财 (see discourse_list_categories)
    - author: username filter
    - after/before: dates as YYYY-MM-DD
    """
    if order not in SEARCH_ORDERS:
        raise ToolFailure(
            f"Invalid order {order!r}. Expected one of: {', '.join(SEARCH_ORDERS)}"
        )

    category_id: Optional[int] = None
    if category:
        info = get_category_by_name(category)
        if info is None:
            raise ToolFailure(
                f'Category "{category}" not found. Please use a valid Chinese category name.'
            )
        category_id = info.id

    max_results = clamp(max_results, 1, MAX_SEARCH_RESULTS)
    full_query = build_search_query(
        query=query,
        author=author,
        after=after,
        before=before,
        category_id=category_id,
        order=order,
    )

    try:
        base, client = site.ensure_selected_site()
        data = await client.get(
            "/search.json?" + urlencode({"expanded": "true", "q": full_query})
        )
    except ForumClientError as exc:
        raise failure("Search failed", exc) from exc

    data = data if isinstance(data, dict) else {}
    topics = [t for t in data.get("topics") or [] if isinstance(t, dict)]
    first_posts = _first_post_per_topic(data.get("posts") or [])

    items: List[Dict[str, Any]] = []
    for topic in topics[:max_results]:
        post = first_posts.get(topic.get("id"))
        item: Dict[str, Any] = {
            "topic_id": topic.get("id"),
            "url": topic_url(
                base,
                topic.get("slug"),
                topic.get("id"),
                post["post_number"] if post else None,
            ),
            "title": topic.get("title"),
        }
        if post:
            item["post_number"] = post["post_number"]
            item["blurb"] = post["blurb"]
        items.append(item)
    return items
