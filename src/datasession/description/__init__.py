"""Description module for datasession.

Asks the backend to describe the session dataset while protecting text the
user types in the meantime.
"""

from .exceptions import GenerationFailedError
from .generator import DescriptionGenerator

__all__ = ["DescriptionGenerator", "GenerationFailedError"]
