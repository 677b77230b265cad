"""
Unit tests for client-side pagination
"""
import pytest

from courtage.utils.pagination import PaginationState, Paginator


class TestPaginator:
    """Test Paginator navigation"""

    def setup_method(self):
        """Setup test fixtures"""
        self.paginator = Paginator(list(range(1, 26)), items_per_page=10)

    def test_first_page(self):
        assert self.paginator.paginated_data == list(range(1, 11))
        assert self.paginator.pagination == PaginationState(
            current_page=1, items_per_page=10, total_items=25, total_pages=3
        )

    def test_last_page_is_partial(self):
        self.paginator.go_to_page(3)
        assert self.paginator.paginated_data == list(range(21, 26))
        assert self.paginator.display_range() == (21, 25)

    @pytest.mark.parametrize("page,expected", [(0, 1), (-3, 1), (2, 2), (99, 3)])
    def test_go_to_page_clamps(self, page, expected):
        self.paginator.go_to_page(page)
        assert self.paginator.pagination.current_page == expected

    def test_next_and_prev_stay_in_bounds(self):
        self.paginator.prev_page()
        assert self.paginator.pagination.current_page == 1

        for _ in range(5):
            self.paginator.next_page()
        assert self.paginator.pagination.current_page == 3

        self.paginator.prev_page()
        assert self.paginator.pagination.current_page == 2

    def test_set_items_per_page_resets_page(self):
        self.paginator.go_to_page(2)
        self.paginator.set_items_per_page(0)
        assert self.paginator.pagination.items_per_page == 1
        assert self.paginator.pagination.current_page == 1
        assert self.paginator.total_pages == 25

    def test_new_data_length_resets_page(self):
        self.paginator.go_to_page(3)
        self.paginator.set_items(list(range(25)))
        assert self.paginator.pagination.current_page == 3

        self.paginator.set_items(list(range(30)))
        assert self.paginator.pagination.current_page == 1

    def test_empty_list(self):
        paginator = Paginator([])
        paginator.go_to_page(4)
        paginator.next_page()
        assert paginator.paginated_data == []
        assert paginator.pagination.total_pages == 0
        assert paginator.pagination.current_page == 1
        assert paginator.display_range() == (0, 0)
        assert paginator.visible_pages() == []


class TestVisiblePages:
    """Test the page-number window"""

    def test_window_centred_on_current_page(self):
        paginator = Paginator(list(range(100)), items_per_page=10)
        paginator.go_to_page(5)
        assert paginator.visible_pages() == [3, 4, 5, 6, 7]

    def test_window_at_start(self):
        paginator = Paginator(list(range(100)), items_per_page=10)
        assert paginator.visible_pages() == [1, 2, 3, 4, 5]

    def test_window_shifted_at_end(self):
        paginator = Paginator(list(range(100)), items_per_page=10)
        paginator.go_to_page(10)
        assert paginator.visible_pages() == [6, 7, 8, 9, 10]

    def test_fewer_pages_than_window(self):
        paginator = Paginator(list(range(25)), items_per_page=10)
        paginator.go_to_page(2)
        assert paginator.visible_pages() == [1, 2, 3]
