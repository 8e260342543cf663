"""
Shared helpers for shaping Discourse topic payloads into tool output.
"""

import re
from typing import Any, Dict, List, Optional

from nitan_mcp.core.categories import category_name
from nitan_mcp.core.errors import ToolFailure
from nitan_mcp.utils.timestamps import format_timestamp

_HTML_TAG_RE = re.compile(r"<[^>]*>")
MAX_COOKED_CHARS = 2000


def clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, int(value)))


def failure(prefix: str, exc: Exception) -> ToolFailure:
    return ToolFailure(f"{prefix}: {exc}")


def topic_list(payload: Any) -> List[Dict[str, Any]]:
    """Extract topics from a /hot.json or /top/*.json payload."""
    if not isinstance(payload, dict):
        return []
    container = payload.get("topic_list")
    if container is None:
        container = payload
    topics = container.get("topics") if isinstance(container, dict) else None
    if not isinstance(topics, list):
        return []
    return [t for t in topics if isinstance(t, dict)]


def topic_url(base: str, slug: Optional[str], topic_id: Any, post_number: Any = None) -> str:
    url = f"{base}/t/{slug or topic_id}/{topic_id}"
    if post_number:
        url = f"{url}/{post_number}"
    return url


def topic_summary(base: str, topic: Dict[str, Any], *, with_tags: bool = False) -> Dict[str, Any]:
    topic_id = topic.get("id")
    category_id = topic.get("category_id")
    summary: Dict[str, Any] = {
        "id": topic_id,
        "title": topic.get("title") or topic.get("fancy_title") or f"Topic {topic_id}",
        "url": topic_url(base, topic.get("slug"), topic_id),
        "views": topic.get("views") or 0,
        "posts_count": topic.get("posts_count") or 0,
        "like_count": topic.get("like_count") or 0,
        "category": category_name(category_id) if category_id else None,
    }
    if with_tags:
        summary["tags"] = topic.get("tags") or []
    summary["created_at"] = format_timestamp(topic.get("created_at") or "")
    return summary


def strip_html(cooked: Optional[str]) -> Optional[str]:
    if cooked is None:
        return None
    return _HTML_TAG_RE.sub("", cooked)[:MAX_COOKED_CHARS]
