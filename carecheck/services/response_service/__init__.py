"""Response Service: merges detection and severity into one payload.

Components:
- composer.py: compose() and the ComposedResponse shape
- resources.py: Localized messages, crisis recommendations, hotlines
"""

from .composer import ComposedResponse, compose
from .resources import crisis_message, crisis_recommendations, emergency_contacts

__all__ = [
    "ComposedResponse",
    "compose",
    "crisis_message",
    "crisis_recommendations",
    "emergency_contacts",
]
