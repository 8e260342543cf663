from __future__ import annotations

from typing import Any, Dict, List, Optional

from nitan_mcp.core.categories import category_name
from nitan_mcp.core.errors import ForumClientError, ToolFailure
from nitan_mcp.core.site_state import SiteState
from nitan_mcp.core.tools._topics import (
    clamp,
    failure,
    strip_html,
    topic_list,
    topic_summary,
    topic_url,
)
from nitan_mcp.utils.timestamps import format_timestamp

TOP_PERIODS = ("daily", "weekly", "monthly", "quarterly", "yearly", "all")

# Topic lists change slowly; short caching keeps repeated tool calls cheap.
HOT_TOPICS_TTL_SECONDS = 60.0
TOP_TOPICS_TTL_SECONDS = 300.0


async def discourse_read_topic(
    site: SiteState,
    topic_id: int,
    *,
    post_number: Optional[int] = None,
    max_posts: int = 20,
) -> Dict[str, Any]:
    """
    Read a topic and its posts. Pass post_number to start from a specific post.
    Post bodies are returned as plain text (HTML stripped, truncated).
    """
    max_posts = clamp(max_posts, 1, 100)
    path = f"/t/{topic_id}.json"
    if post_number:
        path = f"/t/{topic_id}/{post_number}.json"

    try:
        base, client = site.ensure_selected_site()
        topic = await client.get(path)
    except ForumClientError as exc:
        raise failure("Failed to read topic", exc) from exc

    if not isinstance(topic, dict):
        raise ToolFailure(f"Failed to read topic: unexpected response for {path}")

    stream = topic.get("post_stream")
    raw_posts = stream.get("posts") if isinstance(stream, dict) else None
    if not isinstance(raw_posts, list):
        raw_posts = []
    posts = [p for p in raw_posts if isinstance(p, dict)]
    category_id = topic.get("category_id")

    return {
        "topic_id": topic.get("id"),
        "title": topic.get("title"),
        "url": topic_url(base, topic.get("slug"), topic.get("id")),
        "posts_count": topic.get("posts_count"),
        "views": topic.get("views"),
        "like_count": topic.get("like_count"),
        "category": category_name(category_id) if category_id else None,
        "created_at": format_timestamp(topic.get("created_at")),
        "posts": [
            {
                "post_number": p.get("post_number"),
                "username": p.get("username"),
                "created_at": format_timestamp(p.get("created_at")),
                "cooked": strip_html(p.get("cooked")),
                "like_count": p.get("like_count"),
            }
            for p in posts[:max_posts]
        ],
    }


async def discourse_list_hot_topics(
    site: SiteState, *, limit: int = 10
) -> List[Dict[str, Any]]:
    """List the forum's currently hot topics."""
    limit = clamp(limit, 1, 50)
    try:
        base, client = site.ensure_selected_site()
        data = await client.get_cached("/hot.json", HOT_TOPICS_TTL_SECONDS)
    except ForumClientError as exc:
        raise failure("Failed to fetch hot topics", exc) from exc

    return [topic_summary(base, t, with_tags=True) for t in topic_list(data)[:limit]]


async def discourse_list_top_topics(
    site: SiteState, *, period: str = "weekly", limit: int = 10
) -> List[Dict[str, Any]]:
    """
    List top topics for a period: daily, weekly (default), monthly, quarterly,
    yearly or all.
    """
    if period not in TOP_PERIODS:
        raise ToolFailure(
            f"Invalid period {period!r}. Expected one of: {', '.join(TOP_PERIODS)}"
        )
    limit = clamp(limit, 1, 50)
    try:
        base, client = site.ensure_selected_site()
        data = await client.get_cached(f"/top/{period}.json", TOP_TOPICS_TTL_SECONDS)
    except ForumClientError as exc:
        raise failure("Failed to fetch top topics", exc) from exc

    return [topic_summary(base, t) for t in topic_list(data)[:limit]]
