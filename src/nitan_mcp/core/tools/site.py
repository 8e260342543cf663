from typing import Any, Dict, List

from nitan_mcp.core.categories import get_category_tree
from nitan_mcp.core.errors import ForumClientError
from nitan_mcp.core.site_state import SiteState
from nitan_mcp.core.tools._topics import failure


async def discourse_select_site(site: SiteState, url: str) -> Dict[str, Any]:
    """
    Select the Discourse site that subsequent tool calls query.
    Accepts any URL on the site; it is reduced to its origin.
    """
    try:
        origin, _client = site.select_site(url)
    except ForumClientError as exc:
        raise failure("Failed to select site", exc) from exc
    return {"site": origin, "selected": True}


async def discourse_list_categories(site: SiteState) -> List[Dict[str, Any]]:
    """
    List the forum's top-level categories with their subcategories.
    Category names are what discourse_search's `category` filter expects.
    """
    return get_category_tree()
