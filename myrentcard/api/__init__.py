"""
API blueprints for MyRentCard.
"""
from myrentcard.api import (
    auth_api,
    references_api,
    verification_api,
    contacts_api,
    message_templates_api,
    communication_api
)

__all__ = [
    'auth_api',
    'references_api',
    'verification_api',
    'contacts_api',
    'message_templates_api',
    'communication_api'
]
