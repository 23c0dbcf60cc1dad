"""Metadata for image_resolver."""

__all__ = [
    "__title__",
    "__version__",
    "__description__",
    "__credits__",
    "__requires_python__",
]

__title__ = "image_resolver"
__version__ = "0.1.0"
__description__ = (
    "Find the best representative image behind a link and download it, "
    "even from hosts that block naive HTTP clients."
)
__credits__ = [
    {"name": "Matthew D. Martin", "email": "matthewdeanmartin@users.noreply.github.com"}
]
__requires_python__ = ">=3.9"
