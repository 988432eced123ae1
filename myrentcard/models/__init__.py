"""
Database models for MyRentCard.
"""
from myrentcard.models.base import db, generate_uuid
from myrentcard.models.user import User, TenantProfile, LandlordProfile
from myrentcard.models.reference import TenantReference, ReferenceVerification
from myrentcard.models.contact import RecipientContact, TenantMessageTemplate
from myrentcard.models.communication import (
    CommunicationTemplate, CommunicationLog,
    TenantContactPreferences, TenantBlockedContact
)
from myrentcard.models.audit import AuditLog

__all__ = [
    'db',
    'generate_uuid',
    'User',
    'TenantProfile',
    'LandlordProfile',
    'TenantReference',
    'ReferenceVerification',
    'RecipientContact',
    'TenantMessageTemplate',
    'CommunicationTemplate',
    'CommunicationLog',
    'TenantContactPreferences',
    'TenantBlockedContact',
    'AuditLog',
]
