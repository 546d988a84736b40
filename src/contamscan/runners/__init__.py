"""External tool runner adapters."""

from contamscan.runners.mash import MashRunner

__all__ = ["MashRunner"]
