"""Predefined error category tags.

Categories are plain strings so applications can define their own tags next to
these. Use a dotted namespace (``"myapp.authentication"``) to avoid clashes.
"""

from __future__ import annotations

from typing import Final, TypeAlias

Category: TypeAlias = str

# Default when no explicit tag or classifier produced a result.
UNKNOWN: Final[Category] = "faultline.unknown"

INITIALIZATION: Final[Category] = "faultline.initialization"
VALIDATION: Final[Category] = "faultline.validation"
NOT_FOUND: Final[Category] = "faultline.not_found"
