import pytest

from pnpkit.ordering import OrderedItem, OrderedItems, ordered


def test_ordered_builds_item():
    item = ordered(3, "x")
    assert item == OrderedItem(order=3, value="x")


def test_get_returns_values_sorted_by_order():
    items = OrderedItems([ordered(2, "b"), ordered(-1, "a"), ordered(10, "c")])
    assert items.get() == ["a", "b", "c"]


def test_get_sorts_in_place():
    items = OrderedItems([ordered(5, "late"), ordered(1, "early")])
    items.get()
    assert [item.order for item in items] == [1, 5]


def test_get_on_empty():
    assert OrderedItems().get() == []


@pytest.mark.parametrize(
    "orders",
    [[3, 1, 2], [0, 0, 0], [9, -9, 4, 4, 1]],
)
def test_get_keeps_every_value_and_is_sorted(orders):
    items = OrderedItems(ordered(order, (order, index)) for index, order in enumerate(orders))
    values = items.get()
    assert sorted(values) == sorted((order, index) for index, order in enumerate(orders))
    assert [value[0] for value in values] == sorted(orders)