from types import SimpleNamespace

import pytest

from app.core.exceptions import ValidationError
from app.services.ordering import apply_reorder


def _items(*ids):
    return [SimpleNamespace(id=item_id, order=index) for index, item_id in enumerate(ids)]


def test_reorder_assigns_dense_positions():
    items = _items(1, 2, 3)

    apply_reorder(items, [3, 1, 2], "INVALID_OBJECTIVES")

    assert {item.id: item.order for item in items} == {3: 0, 1: 1, 2: 2}


@pytest.mark.parametrize("ordered_ids", [[1, 2], [1, 2, 3, 4], [1, 1, 2], [1, 2, 9]])
def test_reorder_rejects_mismatched_ids_and_leaves_order(ordered_ids):
    items = _items(1, 2, 3)

    with pytest.raises(ValidationError) as exc_info:
        apply_reorder(items, ordered_ids, "INVALID_QUESTIONS")

    assert exc_info.value.code == "INVALID_QUESTIONS"
    assert [item.order for item in items] == [0, 1, 2]
