"""Domain entities for internal representation.

Pure frozen dataclasses with no framework dependencies.
"""

from .response_record import ResponseRecord

__all__ = ["ResponseRecord"]
