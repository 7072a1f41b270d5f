"""
Editor session state
"""

from .form_session import FormSessionController, FORM_FIELDS

__all__ = [
    "FormSessionController",
    "FORM_FIELDS",
]
