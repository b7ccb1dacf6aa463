from typing import Any, Optional, Sequence

from restaurant_booking.schemas.availability import (
    TableCombinations,
    Utilization,
)
from restaurant_booking.schemas.table import RankedTable
from restaurant_booking.utils.exceptions import InvalidArgumentError


def _to_ranked(table: Any, is_optimal: bool) -> RankedTable:
    ranked = RankedTable.model_validate(table)
    ranked.is_optimal = is_optimal
    return ranked


def _check_party_size(party_size: Any) -> None:
    if (
        isinstance(party_size, bool)
        or not isinstance(party_size, int)
        or party_size <= 0
    ):
        raise InvalidArgumentError(
            'Количество гостей должно быть положительным целым числом, '
            f'получено: {party_size!r}',
        )


class TableOptimizationService:
    """Сервис подбора столов под размер компании.

    Лучшим считается стол с наименьшим числом пустующих мест.
    """

    @staticmethod
    def find_optimal_table(
        tables: Sequence[Any],
        party_size: int,
    ) -> Optional[RankedTable]:
        """Находит самый маленький стол, вмещающий компанию.

        При равной вместимости выбирается стол, идущий раньше во входном
        списке. Стол помечается оптимальным только при точном совпадении
        вместимости и количества гостей.

        Returns:
            RankedTable или None, если ни один стол не подходит

        """
        _check_party_size(party_size)
        best = None
        for table in tables:
            if table.capacity < party_size:
                continue
            if best is None or table.capacity < best.capacity:
                best = table
        if best is None:
            return None
        return _to_ranked(best, best.capacity == party_size)

    @staticmethod
    def rank_tables(
        tables: Sequence[Any],
        party_size: int,
    ) -> list[RankedTable]:
        """Упорядочивает подходящие столы по числу пустующих мест.

        Столы, которые не вмещают компанию, отбрасываются.
        """
        _check_party_size(party_size)
        suitable = sorted(
            (table for table in tables if table.capacity >= party_size),
            key=lambda table: table.capacity - party_size,
        )
        return [
            _to_ranked(
                table,
                index == 0 and table.capacity == party_size,
            )
            for index, table in enumerate(suitable)
        ]

    @staticmethod
    def suggest_table_combinations(
        tables: Sequence[Any],
        party_size: int,
    ) -> TableCombinations:
        """Подбор комбинаций столов для большой компании.

        Объединение столов не поддерживается, результат всегда пустой.
        """
        _check_party_size(party_size)
        return TableCombinations()

    @staticmethod
    def calculate_utilization(table: Any, party_size: int) -> Utilization:
        """Считает процент заполнения стола и число пустующих мест."""
        if table.capacity <= 0:
            raise InvalidArgumentError(
                'Вместимость стола должна быть положительной, '
                f'получено: {table.capacity!r}',
            )
        return Utilization(
            utilization_percent=party_size / table.capacity * 100,
            wasted_seats=table.capacity - party_size,
        )


table_optimization_service = TableOptimizationService()
