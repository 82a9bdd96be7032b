"""Replacement text factories for uploaded images.

These factories create functions that build the Markdown written over an
image reference once its upload succeeded.
"""

from typing import Callable, TYPE_CHECKING

if TYPE_CHECKING:
    from one_picgo.core.models import ImageReference

ImageTransform = Callable[["ImageReference", str], str]


def empty_alt() -> ImageTransform:
    """Create a transform producing `![](url)`, dropping the alt text.

    Returns:
        A transform function (reference, remote_url) -> markdown
    """
    def transform(reference: "ImageReference", remote_url: str) -> str:
        return f"![]({remote_url})"
    return transform


def keep_alt() -> ImageTransform:
    """Create a transform producing `![alt](url)` with the original alt text.

    Returns:
        A transform function (reference, remote_url) -> markdown
    """
    def transform(reference: "ImageReference", remote_url: str) -> str:
        return f"![{reference.alt_text}]({remote_url})"
    return transform
