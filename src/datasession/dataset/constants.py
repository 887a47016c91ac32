"""Reserved description values."""

from typing import Final

__all__ = ["GENERATING_DESCRIPTION", "PREVIEW_DESCRIPTION"]


# Shown while a description is generated, never sent or persisted
GENERATING_DESCRIPTION: Final = "Generating description..."

# Stand-in text the preview dialog uses before the user wrote anything
PREVIEW_DESCRIPTION: Final = "Preview dataset"
