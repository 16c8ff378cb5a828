"""Metadata for markrec."""

__all__ = [
    "__title__",
    "__version__",
    "__description__",
    "__requires_python__",
]

__title__ = "markrec"
__version__ = "0.1.0"
__description__ = (
    "Recommend books and movies from the sibling recommendations of everything "
    "you have already marked."
)
__requires_python__ = ">=3.9"
