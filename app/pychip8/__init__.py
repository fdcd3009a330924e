from .__version__ import __version__, __version_string__

__all__ = ["__version__", "__version_string__"]
