"""lantern package root."""

from lantern.exceptions import LanternError, NeverRaise, NeverThrown
from lantern.invariants import never

__all__ = ["__version__", "LanternError", "NeverRaise", "NeverThrown", "never"]

__version__ = "0.1.0"
