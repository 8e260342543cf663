from __future__ import annotations

from typing import Any, Dict, List
from urllib.parse import urlencode

from nitan_mcp.core.errors import ForumClientError
from nitan_mcp.core.site_state import SiteState
from nitan_mcp.core.tools._topics import clamp, failure, topic_url
from nitan_mcp.utils.timestamps import format_timestamp

# Discourse user action types: 4 = new topic, 5 = reply
POST_ACTION_FILTER = "4,5"


async def discourse_list_user_posts(
    site: SiteState, username: str, *, limit: int = 20
) -> List[Dict[str, Any]]:
    """List a user's recent topics and replies, newest first."""
    limit = clamp(limit, 1, 50)
    query = urlencode({"username": username, "filter": POST_ACTION_FILTER})
    try:
        base, client = site.ensure_selected_site()
        data = await client.get(f"/user_actions.json?{query}")
    except ForumClientError as exc:
        raise failure("Failed to fetch user posts", exc) from exc

    actions = data.get("user_actions") if isinstance(data, dict) else None
    actions = [a for a in actions or [] if isinstance(a, dict)]

    return [
        {
            "post_id": a.get("post_id"),
            "topic_id": a.get("topic_id"),
            "title": a.get("title"),
            "url": topic_url(
                base, a.get("slug"), a.get("topic_id"), a.get("post_number")
            ),
            "excerpt": a.get("excerpt"),
            "created_at": format_timestamp(a.get("created_at") or ""),
        }
        for a in actions[:limit]
    ]
