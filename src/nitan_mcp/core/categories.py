"""
Static category table for uscardforum.com.
Categories rarely change, so lookups never hit the network.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class CategoryInfo:
    id: int
    name: str
    slug: str = ""
    description: Optional[str] = None
    parent_id: Optional[int] = None

    def as_dict(self) -> Dict[str, Any]:
        return {k: v for k, v in asdict(self).items() if v not in (None, "")}


def _top(id: int, name: str, slug: str, description: str) -> CategoryInfo:
    return CategoryInfo(id=id, name=name, slug=slug, description=description)


def _sub(id: int, name: str, slug: str, parent_id: int) -> CategoryInfo:
    return CategoryInfo(id=id, name=name, slug=slug, parent_id=parent_id)


_ALL = (
    _top(12, "玩卡", "rewards", "信用卡/银行账户/点数里程/信用分数等"),
    _sub(5, "信用卡", "credit-cards", 12),
    _sub(6, "银行账户", "bank-accounts", 12),
    _sub(32, "信用分数", "credit-score", 12),
    _sub(56, "Refer专区", "special", 12),
    _top(15, "旅行", "travel", "常旅客/飞行体验/住宿体验/景点游记攻略等"),
    _sub(38, "航空常旅客", "airline-programs", 15),
    _sub(7, "酒店常旅客", "hotel-programs", 15),
    _sub(17, "游记攻略", "trip-report", 15),
    _sub(50, "租车", "car-rental", 15),
    _sub(58, "驴友", "travel-friends", 15),
    _top(9, "理财", "investment", "股市房产等投资问题"),
    _sub(13, "股市投资", "stock-market", 9),
    _sub(14, "房地产", "real-estate", 9),
    _sub(10, "税务", "tax", 9),
    _sub(43, "加密货币", "coins", 9),
    _top(20, "败家", "shopping", "折扣信息/好物使用体验"),
    _sub(26, "好物推荐", "good-stuff", 20),
    _sub(21, "购物折扣", "deals", 20),
    _sub(23, "电子产品", "tech", 20),
    _sub(25, "汽车", "", 20),
    _sub(44, "手机卡", "wireless-services", 20),
    _top(51, "生活", "life", "美好生活的点点滴滴"),
    _sub(22, "吃货", "foodie", 51),
    _sub(47, "影音娱乐", "movies", 51),
    _sub(49, "游戏", "games", 51),
    _sub(55, "健康", "health", 51),
    _sub(52, "园艺种菜", "", 51),
    _sub(37, "宠物", "pets", 51),
    _sub(53, "体育", "", 51),
    _sub(60, "育儿", "children", 51),
    _sub(62, "社会新闻", "news-in-the-us", 51),
    _sub(45, "回国or留美", "china-us-comparison", 51),
    _top(18, "法律", "laws", "签证/身份/出入境禁令等问题"),
    _sub(19, "签证与身份（美国）", "visa", 18),
    _sub(61, "签证与身份（美国以外）", "visa-other-countries-and-regions", 18),
    _sub(27, "新政", "orders", 18),
    _top(28, "情感", "feelings", "各种情感想要倾诉"),
    _sub(29, "爱情", "love", 28),
    _sub(31, "鹊桥", "piebridge", 28),
    _top(33, "搬砖", "jobs", "找工作/职场/求学/学术圈"),
    _sub(34, "面经", "interviews", 33),
    _sub(36, "内推", "job-refer", 33),
    _sub(48, "学术", "academics", 33),
    _sub(54, "求学", "study", 33),
    _top(57, "文艺", "literature-and-art", "文艺创作"),
    _top(1, "闲聊", "", "不需要类别或不适合任何其他现有类别的话题"),
    # restricted
    _top(68, "白金", "", "仅白金会员可见"),
    _top(67, "钛金", "", "仅钛金会员可见"),
    _top(63, "性爱", "", "性爱话题收容类别"),
    _top(42, "吵架", "politics", "广义的政治话题"),
    _top(3, "公告", "announcements", "论坛公告"),
    _top(65, "测试", "test", "测试分类"),
    _top(66, "私密", "private", "私密分类"),
)

CATEGORIES: Dict[int, CategoryInfo] = {c.id: c for c in _ALL}


def get_category_by_id(category_id: int) -> Optional[CategoryInfo]:
    return CATEGORIES.get(category_id)


def get_category_by_name(name: str) -> Optional[CategoryInfo]:
    """Case-insensitive lookup by display name."""
    wanted = (name or "").strip().lower()
    for cat in CATEGORIES.values():
        if cat.name.lower() == wanted:
            return cat
    return None


def get_top_level_categories() -> List[CategoryInfo]:
    return [c for c in CATEGORIES.values() if c.parent_id is None]


def get_subcategories(parent_id: int) -> List[CategoryInfo]:
    return [c for c in CATEGORIES.values() if c.parent_id == parent_id]


def category_name(category_id: int) -> str:
    cat = CATEGORIES.get(category_id)
    return cat.name if cat else f"Category {category_id}"


def get_category_tree() -> List[Dict[str, Any]]:
    tree = []
    for top in get_top_level_categories():
        entry = top.as_dict()
        entry["subcategories"] = [c.as_dict() for c in get_subcategories(top.id)]
        tree.append(entry)
    return tree


__all__ = [
    "CategoryInfo",
    "CATEGORIES",
    "get_category_by_id",
    "get_category_by_name",
    "get_top_level_categories",
    "get_subcategories",
    "category_name",
    "get_category_tree",
]
