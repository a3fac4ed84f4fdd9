import pytest

from erp_console.pagination import PageWindow, paginate, total_pages


def test_empty_list_has_one_empty_page():
    page = paginate([], 1, 10)
    assert page.visible == []
    assert page.total_pages == 1
    assert page.first_index == 0


@pytest.mark.parametrize("page_size", [1, 3, 7, 10, 25])
def test_walking_every_page_covers_items_once(page_size):
    items = list(range(23))
    pages = total_pages(len(items), page_size)
    walked = []
    for number in range(1, pages + 1):
        visible = paginate(items, number, page_size).visible
        assert len(visible) <= page_size
        walked.extend(visible)
    assert walked == items


def test_slice_indexes():
    page = paginate(list("abcdefghijk"), 2, 5)
    assert page.visible == list("fghij")
    assert (page.first_index, page.last_index) == (5, 10)
    assert page.total_pages == 3


def test_page_past_end_is_empty():
    assert paginate([1, 2, 3], 4, 2).visible == []


def test_invalid_arguments():
    with pytest.raises(ValueError):
        paginate([1], 0, 10)
    with pytest.raises(ValueError):
        paginate([1], 1, 0)


def test_navigation_clamps():
    window = PageWindow(page_size=10)
    assert window.previous(35) == 1
    assert window.next(35) == 2
    assert window.go_to(99, 35) == 4
    assert window.next(35) == 4


def test_refresh_that_shrinks_list_resets_to_first_page():
    window = PageWindow(page=4, page_size=10)
    assert window.on_refresh(35) == 4
    assert window.on_refresh(12) == 1


def test_filter_change_resets():
    window = PageWindow(page=3, page_size=7)
    window.reset()
    assert window.page == 1


def test_window_survives_store_round_trip():
    window = PageWindow.from_dict(PageWindow(page=2, page_size=7).to_dict())
    assert window == PageWindow(page=2, page_size=7)
    assert PageWindow.from_dict(None, page_size=7) == PageWindow(page=1, page_size=7)
