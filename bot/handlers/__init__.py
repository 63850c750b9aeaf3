"""Aggregate bot handlers for dispatch registration."""

from .common import CommonHandlers, setup_common_handlers
from .join import JoinHandlers, setup_join_handlers
from .admin import AdminHandlers, setup_admin_handlers
from .form import FormHandlers, setup_form_handlers

__all__ = [
    "CommonHandlers",
    "setup_common_handlers",
    "JoinHandlers",
    "setup_join_handlers",
    "AdminHandlers",
    "setup_admin_handlers",
    "FormHandlers",
    "setup_form_handlers",
]
