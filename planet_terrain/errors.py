# planet_terrain/errors.py

"""Exceptions raised when a caller breaks the sampling contract."""


class InvalidDetailLevelError(ValueError):
    """Raised for any detail level other than macro (0) or meso (1)."""


class CoordinateOutOfBoundsError(ValueError):
    """Raised for coordinates outside the configured map or chunk subdivision."""


__all__ = ["InvalidDetailLevelError", "CoordinateOutOfBoundsError"]
