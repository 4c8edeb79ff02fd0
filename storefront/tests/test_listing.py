"""Tests for client-side filtering and sorting of a rendered listing."""

import json

import pytest
from bs4 import BeautifulSoup

from storefront.listing import (
    _set_hidden,
    apply_filters_and_sort,
    is_hidden,
    is_option_visible,
    listing_item_payload,
    read_listing_items,
    render_listing,
)


def visible_titles(container):
    return [li.get_text() for li in container.find_all("li") if not is_hidden(li)]


class TestRenderAndRead:
    """Tests for render_listing and read_listing_items."""

    def test_payload(self, sample_items):
        payload = json.loads(listing_item_payload(sample_items[0]))
        assert payload == {
            "title": "Compact Widget",
            "price": 10.0,
            "filters": {"colour": "red", "size": "compact"},
        }

    def test_round_trip_through_markup(self, sample_items):
        ul = render_listing(sample_items).find("ul")
        items = read_listing_items(ul)
        assert [i.data["title"] for i in items] == ["Compact Widget", "Large Widget", "Blue Gadget"]
        assert [i.original_index for i in items] == [0, 1, 2]
        assert ul.find("a")["href"] == "/products/compact-widget/"

    def test_invalid_payload_skipped(self):
        soup = BeautifulSoup(
            "<ul><li data-filter-item='{bad'>x</li>"
            "<li data-filter-item='{\"title\": \"ok\"}'>ok</li></ul>",
            "html.parser",
        )
        items = read_listing_items(soup.find("ul"))
        assert len(items) == 1
        assert items[0].original_index == 0


class TestApplyFiltersAndSort:
    """Tests for apply_filters_and_sort."""

    @pytest.fixture
    def listing(self, sample_items):
        ul = render_listing(sample_items).find("ul")
        return ul, read_listing_items(ul)

    def test_filter_hides_non_matching(self, listing):
        ul, items = listing
        count = apply_filters_and_sort(items, ul, {"colour": "red"}, "default")
        assert count == 2
        assert visible_titles(ul) == ["Compact Widget", "Large Widget"]

    def test_sort_reorders_matches(self, listing):
        ul, items = listing
        apply_filters_and_sort(items, ul, {"colour": "red"}, "price-desc")
        assert visible_titles(ul) == ["Large Widget", "Compact Widget"]

    def test_clearing_restores_original_order(self, listing):
        ul, items = listing
        apply_filters_and_sort(items, ul, {"colour": "red"}, "name-desc")
        count = apply_filters_and_sort(items, ul, {}, "default")
        assert count == 3
        assert visible_titles(ul) == ["Compact Widget", "Large Widget", "Blue Gadget"]

    def test_no_container_leaves_order(self, listing):
        ul, items = listing
        assert apply_filters_and_sort(items, None, {"size": "compact"}, "name-asc") == 2
        assert visible_titles(ul) == ["Compact Widget", "Blue Gadget"]

    def test_unknown_sort_key(self, listing):
        ul, items = listing
        assert apply_filters_and_sort(items, ul, None, "bogus") == 3
        assert visible_titles(ul) == ["Compact Widget", "Large Widget", "Blue Gadget"]

    def test_filter_matching_nothing_hides_everything(self, listing):
        ul, items = listing
        assert apply_filters_and_sort(items, ul, {"colour": "green"}, "default") == 0
        assert visible_titles(ul) == []

    def test_existing_style_preserved(self):
        soup = BeautifulSoup('<li style="color: red">x</li>', "html.parser")
        li = soup.find("li")
        _set_hidden(li, True)
        assert is_hidden(li)
        assert "color: red" in li["style"]
        _set_hidden(li, False)
        assert li["style"] == "color: red"


class TestIsOptionVisible:
    """Tests for is_option_visible."""

    @pytest.fixture
    def items(self, sample_items):
        return read_listing_items(render_listing(sample_items).find("ul"))

    def test_option_that_narrows_results(self, items):
        assert is_option_visible(items, {}, "colour", "red", 3)

    def test_active_option_always_visible(self, items):
        assert is_option_visible(items, {"colour": "red"}, "colour", "red", 2)

    def test_swap_within_filtered_group(self, items):
        assert is_option_visible(items, {"colour": "red"}, "colour", "blue", 2)

    def test_option_with_no_results_hidden(self, items):
        assert not is_option_visible(items, {"colour": "blue"}, "size", "large", 1)

    def test_option_that_changes_nothing_hidden(self, items):
        assert not is_option_visible(items, {"size": "large"}, "colour", "red", 1)
