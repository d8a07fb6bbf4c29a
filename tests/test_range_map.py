"""Tests for the address and range indexes."""
from breakpad_symbolizer.range_map import AddressMap, RangeMap


def _build_ranges():
    ranges = RangeMap()
    for start, size in [(0, 2), (2, 1), (3, 1), (6, 1), (7, 1)]:
        ranges.insert(start, size, f"range@{start}")
    return ranges


def test_retrieve_containing_range():
    ranges = _build_ranges()
    assert ranges.retrieve(3) == "range@3"


def test_retrieve_gap_returns_none():
    ranges = _build_ranges()
    assert ranges.retrieve(5) is None


def test_retrieve_inclusive_upper_bound():
    """The range end (start + size) is still inside the range."""
    ranges = RangeMap()
    ranges.insert(0x100, 0x10, "func")
    assert ranges.retrieve(0x100) == "func"
    assert ranges.retrieve(0x110) == "func"
    assert ranges.retrieve(0x111) is None


def test_retrieve_before_first_range():
    ranges = RangeMap()
    ranges.insert(0x100, 0x10, "func")
    assert ranges.retrieve(0xff) is None


def test_retrieve_empty():
    assert RangeMap().retrieve(0) is None
    assert AddressMap().retrieve(0x1234) is None


def test_insert_order_does_not_matter():
    ranges = RangeMap()
    ranges.insert(0x300, 0x10, "c")
    ranges.insert(0x100, 0x10, "a")
    assert ranges.retrieve(0x305) == "c"
    ranges.insert(0x200, 0x10, "b")
    assert ranges.retrieve(0x205) == "b"
    assert ranges.retrieve(0x105) == "a"
    assert len(ranges) == 3


def test_reinsert_same_start_replaces():
    ranges = RangeMap()
    ranges.insert(0x100, 0x10, "old")
    ranges.insert(0x100, 0x20, "new")
    assert len(ranges) == 1
    assert ranges.retrieve(0x118) == "new"


def test_unique_containing_range_for_many_ranges():
    """Every address inside a range resolves to that range only."""
    ranges = RangeMap()
    layout = [(start, 0x0f) for start in range(0, 0x1000, 0x20)]
    for start, size in layout:
        ranges.insert(start, size, start)

    for start, size in layout:
        for address in (start, start + 7, start + size):
            assert ranges.retrieve(address) == start
        assert ranges.retrieve(start + size + 1) is None


def test_address_map_has_no_upper_bound():
    points = AddressMap()
    points.insert(0x1000, "first")
    points.insert(0x2000, "second")
    assert points.retrieve(0x0fff) is None
    assert points.retrieve(0x1000) == "first"
    assert points.retrieve(0x1fff) == "first"
    assert points.retrieve(0xffffffff) == "second"


def test_iteration_in_address_order():
    points = AddressMap()
    for address in (0x30, 0x10, 0x20):
        points.insert(address, hex(address))
    assert [a for a, _ in points] == [0x10, 0x20, 0x30]


def test_range_map_iterates_range_items():
    ranges = RangeMap()
    ranges.insert(0x20, 4, "b")
    ranges.insert(0x10, 2, "a")
    assert [(start, entry.item, entry.size) for start, entry in ranges] == [
        (0x10, "a", 2),
        (0x20, "b", 4),
    ]
    assert not isinstance(ranges, AddressMap)


def test_floor_key_and_get():
    points = AddressMap()
    points.insert(0x100, "x")
    assert points.floor_key(0xff) is None
    assert points.floor_key(0x180) == 0x100
    assert points.get(0x100) == "x"
    assert points.get(0x180) is None
