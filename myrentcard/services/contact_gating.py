"""
Contact-preference gating for landlord-to-tenant communication.
"""
import logging
from myrentcard.models import db, TenantContactPreferences, TenantBlockedContact
from myrentcard.utils.constants import COMMUNICATION_TYPES

logger = logging.getLogger(__name__)


def get_preferences(tenant_id):
    """Stored preferences, or an unsaved default row (everything allowed)."""
    preferences = TenantContactPreferences.query.filter_by(tenant_id=tenant_id).first()
    if preferences is None:
        preferences = TenantContactPreferences(
            tenant_id=tenant_id,
            allow_landlord_contact=True,
            allow_email=True,
            allow_phone=True,
            allow_sms=True,
            preferred_method='email'
        )
    return preferences


def is_contact_blocked(tenant_id, landlord_id=None, email=None, phone=None):
    """
    Whether any active block of the tenant matches the landlord, e-mail or phone.
    Expired temporary blocks are removed as they are found.
    """
    blocks = TenantBlockedContact.query.filter_by(tenant_id=tenant_id).all()
    blocked = False
    removed = False

    for block in blocks:
        if block.is_expired():
            db.session.delete(block)
            removed = True
            continue
        if landlord_id is not None and block.landlord_id == landlord_id:
            blocked = True
        elif email and block.blocked_email and block.blocked_email.lower() == email.lower():
            blocked = True
        elif phone and block.blocked_phone and block.blocked_phone == phone:
            blocked = True

    if removed:
        db.session.commit()
    return blocked


def can_contact_tenant(tenant_id, landlord, communication_type):
    """
    Decide whether a landlord may reach a tenant over a channel.
    Returns (allowed, reason).
    """
    if communication_type not in COMMUNICATION_TYPES:
        return False, f"Unsupported communication type: {communication_type}"

    preferences = get_preferences(tenant_id)
    if not preferences.allow_landlord_contact:
        return False, 'Tenant is not accepting landlord contact'
    if not preferences.allows(communication_type):
        return False, f"Tenant has disabled {communication_type} contact"

    user = landlord.user
    if is_contact_blocked(tenant_id, landlord_id=landlord.id,
                          email=user.email if user else None,
                          phone=user.phone if user else None):
        logger.info("Landlord %s is blocked by tenant %s", landlord.id, tenant_id)
        return False, 'Tenant has blocked contact from this landlord'

    return True, None
