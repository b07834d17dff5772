"""Exception hierarchy for the PR units map core."""


class PRUnitsMapError(Exception):
    """Base exception for all core errors."""


class InsufficientPoints(PRUnitsMapError):
    """A path or route needs at least two points."""

    def __init__(self, count: int):
        self.count = count
        super().__init__(f"At least 2 points are required, got {count}")


class ProviderError(PRUnitsMapError):
    """An external provider produced nothing usable."""

    def __init__(self, provider: str, reason: str):
        self.provider = provider
        self.reason = reason
        super().__init__(f"{provider}: {reason}")


class RoutingError(ProviderError):
    """The road-routing provider failed."""


class UnknownRoutePoint(PRUnitsMapError):
    """A route reference does not name a known unit or city."""

    def __init__(self, ref: str):
        self.ref = ref
        super().__init__(f"Unknown route point: '{ref}'")


class UnitNotFound(PRUnitsMapError):
    """No unit with the given id exists in the store."""

    def __init__(self, unit_id: str):
        self.unit_id = unit_id
        super().__init__(f"Unit not found: '{unit_id}'")
