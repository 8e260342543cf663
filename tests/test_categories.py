from nitan_mcp.core.categories import (
    CATEGORIES,
    category_name,
    get_category_by_id,
    get_category_by_name,
    get_subcategories,
    get_top_level_categories,
)


def test_lookup_by_id_and_name():
    assert get_category_by_id(15).name == "旅行"
    assert get_category_by_id(9999) is None
    assert get_category_by_name(" 理财 ").id == 9
    assert get_category_by_name("refer专区").id == 56
    assert get_category_by_name("unknown") is None


def test_category_name_falls_back_to_id():
    assert category_name(42) == "吵架"
    assert category_name(777) == "Category 777"


def test_hierarchy():
    top_ids = {c.id for c in get_top_level_categories()}
    assert {12, 15, 9, 20, 51, 18, 28, 33, 57, 1} <= top_ids
    assert all(c.parent_id is None for c in get_top_level_categories())
    assert {c.id for c in get_subcategories(18)} == {19, 61, 27}


def test_every_parent_exists():
    for cat in CATEGORIES.values():
        if cat.parent_id is not None:
            assert cat.parent_id in CATEGORIES
