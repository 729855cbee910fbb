from __future__ import annotations

from yaml_source.domain.cursor import ItemCursor


def test_cursor_walks_items_and_stops_at_end():
    cursor = ItemCursor([{"id": 1}, {"id": 2}])

    assert len(cursor) == 2
    assert cursor.current() == {"id": 1}
    cursor.advance()
    assert cursor.current() == {"id": 2}
    cursor.advance()
    assert cursor.at_end() is True
    assert cursor.current() is None

    cursor.advance()
    assert cursor.position == 2


def test_empty_cursor_is_at_end():
    cursor = ItemCursor([])
    assert cursor.at_end() is True
    assert cursor.current() is None
