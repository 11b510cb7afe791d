"""Tests for the favorites list."""

import asyncio

import pytest

from simple_calorie.domain.errors import NotFoundError, ValidationError
from simple_calorie.services.favorites import FavoritesList
from tests.conftest import FixedClock, InMemoryDocumentBackend


def _favorite(name: str, amount: float = 100, **extra: object) -> dict[str, object]:
    return {"id": name, "name": name, "calories": 50, "amount": amount, **extra}


def _build(names: list[str]) -> tuple[FavoritesList, InMemoryDocumentBackend]:
    backend = InMemoryDocumentBackend()
    clock = FixedClock()
    favorites = FavoritesList(backend, clock=clock)
    for name in names:
        asyncio.run(favorites.add(_favorite(name)))
        clock.advance(seconds=1)
    return favorites, backend


def _orders(favorites: FavoritesList) -> dict[str, float]:
    return {fav.id: fav.sort_order for fav in asyncio.run(favorites.list())}


def test_add_appends_after_max_order() -> None:
    favorites, _ = _build(["A", "B", "C"])

    assert _orders(favorites) == {"A": 1, "B": 2, "C": 3}


def test_add_records_dates_and_snapshot() -> None:
    clock = FixedClock()
    favorites = FavoritesList(InMemoryDocumentBackend(), clock=clock)

    entry = asyncio.run(
        favorites.add(
            {
                "name": "Latte",
                "calories": 120,
                "amount": 0.3,
                "unit": "l",
                "category": "drinks",
            }
        )
    )

    assert entry.added_date == clock.today()
    assert entry.timestamp == clock.current
    assert entry.unit == "l"
    assert entry.category == "drinks"
    assert entry.id


@pytest.mark.parametrize("missing_id", [None, ""])
def test_add_assigns_id_when_supplied_id_is_empty(missing_id: object) -> None:
    favorites, backend = _build([])

    entry = asyncio.run(
        favorites.add({"id": missing_id, "name": "Tea", "calories": 1})
    )

    assert entry.id
    assert entry.id != missing_id
    assert list(backend.tables["favorites"]) == [entry.id]


def test_add_rejects_invalid_item() -> None:
    favorites, backend = _build([])

    with pytest.raises(ValidationError):
        asyncio.run(favorites.add({"name": "No calories"}))

    assert backend.writes == []


def test_remove_leaves_gaps() -> None:
    favorites, _ = _build(["A", "B", "C"])

    asyncio.run(favorites.remove("B"))
    asyncio.run(favorites.add(_favorite("D")))

    assert _orders(favorites) == {"A": 1, "C": 3, "D": 4}


def test_list_is_sorted_and_matches_added_minus_removed() -> None:
    favorites, _ = _build(["A", "B", "C", "D"])
    asyncio.run(favorites.set_order("A", 10))
    asyncio.run(favorites.remove("C"))

    listed = asyncio.run(favorites.list())

    assert [fav.id for fav in listed] == ["B", "D", "A"]
    orders = [fav.sort_order for fav in listed]
    assert orders == sorted(orders)


def test_set_order_missing_raises_not_found() -> None:
    favorites, _ = _build(["A"])

    with pytest.raises(NotFoundError):
        asyncio.run(favorites.set_order("missing", 3))


def test_move_to_top_shifts_others() -> None:
    favorites, _ = _build(["A", "B", "C"])

    asyncio.run(favorites.move_to_top("C"))

    assert _orders(favorites) == {"C": 0, "A": 2, "B": 3}
    assert [fav.id for fav in asyncio.run(favorites.list())] == ["C", "A", "B"]


def test_move_to_top_makes_target_strict_minimum() -> None:
    favorites, _ = _build(["A", "B", "C"])
    asyncio.run(favorites.set_order("B", 0))
    asyncio.run(favorites.set_order("C", -4))

    asyncio.run(favorites.move_to_top("A"))

    orders = _orders(favorites)
    assert all(orders["A"] < value for key, value in orders.items() if key != "A")


def test_move_to_top_writes_one_batch() -> None:
    favorites, backend = _build(["A", "B", "C"])
    backend.writes.clear()

    asyncio.run(favorites.move_to_top("B"))

    assert len(backend.writes) == 1
    assert sorted(backend.writes[0][1]) == ["A", "B", "C"]


def test_move_to_top_missing_raises_without_writes() -> None:
    favorites, backend = _build(["A"])
    backend.writes.clear()

    with pytest.raises(NotFoundError):
        asyncio.run(favorites.move_to_top("missing"))

    assert backend.writes == []


def test_move_to_bottom_places_after_max() -> None:
    favorites, _ = _build(["A", "B", "C"])

    asyncio.run(favorites.move_to_bottom("A"))

    assert _orders(favorites) == {"A": 4, "B": 2, "C": 3}
    assert [fav.id for fav in asyncio.run(favorites.list())] == ["B", "C", "A"]


def test_move_to_bottom_missing_raises() -> None:
    favorites, _ = _build(["A"])

    with pytest.raises(NotFoundError):
        asyncio.run(favorites.move_to_bottom("missing"))


def test_swap_exchanges_only_two_entries() -> None:
    favorites, _ = _build(["A", "B", "C", "D"])
    before = asyncio.run(favorites.list())

    asyncio.run(favorites.swap("A", "C"))

    after = {fav.id: fav for fav in asyncio.run(favorites.list())}
    assert after["A"].sort_order == 3
    assert after["C"].sort_order == 1
    for fav in before:
        if fav.id not in {"A", "C"}:
            assert after[fav.id] == fav


def test_swap_missing_raises() -> None:
    favorites, backend = _build(["A"])
    backend.writes.clear()

    with pytest.raises(NotFoundError):
        asyncio.run(favorites.swap("A", "missing"))

    assert backend.writes == []


def test_membership_reports_exact_and_different_amount() -> None:
    favorites = FavoritesList(InMemoryDocumentBackend(), clock=FixedClock())
    asyncio.run(favorites.add(_favorite("Milk", amount=200) | {"id": "m1"}))

    same = asyncio.run(favorites.membership("Milk", 200))
    other = asyncio.run(favorites.membership("Milk", 300))
    any_amount = asyncio.run(favorites.membership("Milk"))
    missing = asyncio.run(favorites.membership("Bread", 200))

    assert (same.exact, same.different_amount) == (True, False)
    assert (other.exact, other.different_amount) == (False, True)
    assert (any_amount.exact, any_amount.different_amount) == (True, False)
    assert (missing.exact, missing.different_amount) == (False, False)


def test_membership_with_both_amounts_saved() -> None:
    favorites = FavoritesList(InMemoryDocumentBackend(), clock=FixedClock())
    asyncio.run(favorites.add(_favorite("Milk", amount=200) | {"id": "m1"}))
    asyncio.run(favorites.add(_favorite("Milk", amount=500) | {"id": "m2"}))

    result = asyncio.run(favorites.membership("Milk", 200))

    assert result.exact is True
    assert result.different_amount is True


def test_set_order_rejects_non_numeric() -> None:
    favorites, backend = _build(["A"])
    backend.writes.clear()

    with pytest.raises(ValidationError):
        asyncio.run(favorites.set_order("A", "first"))  # type: ignore[arg-type]

    assert backend.writes == []
