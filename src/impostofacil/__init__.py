"""impostofacil - tax reform impact simulator and knowledge base tooling."""

from .version import __version__

__all__ = ["__version__"]
