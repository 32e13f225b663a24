from typing import Any, Iterable, Mapping

from bodyshop.core.errors import InvalidServiceDuration


def total_duration(services: Iterable[Mapping[str, Any]]) -> int:
    """Sum of ``duration_minutes`` over the selected services (0 when empty)."""
    total = 0
    for service in services:
        minutes = service.get("duration_minutes")
        if isinstance(minutes, bool) or not isinstance(minutes, int) or minutes <= 0:
            raise InvalidServiceDuration(
                f"Service {service.get('id')} has an invalid duration: {minutes!r}"
            )
        total += minutes
    return total


def total_price(services: Iterable[Mapping[str, Any]]) -> float:
    return float(sum(service.get("price") or 0 for service in services))
