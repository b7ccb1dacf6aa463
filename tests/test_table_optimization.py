import pytest

from restaurant_booking.services.table_optimization import (
    table_optimization_service,
)
from restaurant_booking.utils.enums import CombinationStatus
from restaurant_booking.utils.exceptions import InvalidArgumentError


@pytest.fixture
def tables(storage):
    """Столы на 2, 4 и 6 мест"""
    for number, capacity in ((1, 2), (2, 4), (3, 6)):
        storage.add_table(number, capacity)
    return storage.tables


def test_optimal_table_exact_fit(tables):
    table = table_optimization_service.find_optimal_table(tables, 4)

    assert table.capacity == 4
    assert table.is_optimal


def test_optimal_table_smallest_that_fits(tables):
    table = table_optimization_service.find_optimal_table(tables, 3)

    assert table.capacity == 4
    assert not table.is_optimal


def test_optimal_table_none_when_party_too_big(tables):
    assert table_optimization_service.find_optimal_table(tables, 7) is None


def test_optimal_table_ties_keep_input_order(storage):
    first = storage.add_table(5, 4)
    storage.add_table(6, 4)

    table = table_optimization_service.find_optimal_table(storage.tables, 4)

    assert table.id == first.id


def test_rank_tables_orders_by_wasted_seats(tables):
    ranked = table_optimization_service.rank_tables(tables, 4)

    assert [table.capacity for table in ranked] == [4, 6]
    assert [table.is_optimal for table in ranked] == [True, False]


def test_rank_tables_without_exact_fit(tables):
    ranked = table_optimization_service.rank_tables(tables, 5)

    assert [table.capacity for table in ranked] == [6]
    assert not ranked[0].is_optimal


def test_rank_tables_empty_input():
    assert table_optimization_service.rank_tables([], 2) == []


@pytest.mark.parametrize('party_size', [0, -3, 1.5, True])
def test_bad_party_size_rejected(tables, party_size):
    with pytest.raises(InvalidArgumentError):
        table_optimization_service.rank_tables(tables, party_size)
    with pytest.raises(InvalidArgumentError):
        table_optimization_service.find_optimal_table(tables, party_size)


def test_combinations_not_supported(tables):
    result = table_optimization_service.suggest_table_combinations(tables, 10)

    assert result.status == CombinationStatus.NOT_SUPPORTED
    assert result.combinations == []


def test_utilization(tables):
    utilization = table_optimization_service.calculate_utilization(
        tables[1],
        3,
    )

    assert utilization.utilization_percent == 75
    assert utilization.wasted_seats == 1


def test_utilization_rejects_zero_capacity(tables):
    tables[0].capacity = 0

    with pytest.raises(InvalidArgumentError):
        table_optimization_service.calculate_utilization(tables[0], 2)
