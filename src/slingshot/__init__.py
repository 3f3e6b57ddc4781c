"""Slingshot - convert Visual Studio solutions into NAnt and NMAKE build scripts."""

from .driver import convert_solution, load_graph, render_solution
from .errors import SlingshotError

__version__ = "0.1.0"

__all__ = [
    "SlingshotError",
    "__version__",
    "convert_solution",
    "load_graph",
    "render_solution",
]
