"""
Landlord-to-tenant communication API routes.
Templates and logs for landlords, contact preferences and blocks for tenants.
"""
import json
import logging
from datetime import datetime
from flask import Blueprint, request, jsonify
from flask_login import current_user
from myrentcard.models import (
    db, TenantProfile, CommunicationTemplate, CommunicationLog,
    TenantContactPreferences, TenantBlockedContact
)
from myrentcard.utils.auth import (
    api_login_required, tenant_required, landlord_required,
    get_current_tenant, get_current_landlord, verify_resource_ownership,
    log_audit, clean_str, parse_bool
)
from myrentcard.utils.constants import (
    COMMUNICATION_TYPES, COMMUNICATION_STATUSES, DEFAULT_COMMUNICATION_TEMPLATE_CATEGORY, BLOCK_TYPES
)
from myrentcard.services.contact_gating import get_preferences, can_contact_tenant

logger = logging.getLogger(__name__)

bp = Blueprint('communication_api', __name__)


def _parse_int(value):
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _parse_datetime(value):
    if not value:
        return None
    try:
        return datetime.fromisoformat(str(value).replace('Z', '+00:00')).replace(tzinfo=None)
    except ValueError:
        return None


# =============================================================================
# COMMUNICATION TEMPLATES (landlord)
# =============================================================================

def _get_owned_template(template_id):
    template = db.get_or_404(CommunicationTemplate, template_id)
    if not verify_resource_ownership(template):
        return None
    return template


@bp.route('/api/landlord/communication-templates', methods=['GET'])
@landlord_required
def list_templates():
    """Active templates of the current landlord."""
    query = CommunicationTemplate.query.filter_by(landlord_id=get_current_landlord().id, is_active=True)

    category = (request.args.get('category') or '').strip()
    if category:
        query = query.filter_by(category=category)

    templates = query.order_by(CommunicationTemplate.title.asc()).all()
    return jsonify([t.to_dict() for t in templates])


@bp.route('/api/landlord/communication-templates', methods=['POST'])
@landlord_required
def create_template():
    """Create a communication template."""
    data = request.json or {}
    title = clean_str(data, 'title')
    body = clean_str(data, 'body')

    if not title:
        return jsonify({'error': 'Title is required'}), 400
    if not body:
        return jsonify({'error': 'Message body is required'}), 400
    if 'tags' in data and not isinstance(data.get('tags') or [], list):
        return jsonify({'error': 'Tags must be a list'}), 400

    template = CommunicationTemplate(
        landlord_id=get_current_landlord().id,
        title=title,
        subject=clean_str(data, 'subject'),
        body=body,
        category=clean_str(data, 'category') or DEFAULT_COMMUNICATION_TEMPLATE_CATEGORY,
        tags=json.dumps(data.get('tags') or []),
        is_active=True
    )
    db.session.add(template)
    db.session.commit()

    log_audit(current_user.id, 'communication_template_created', 'communication_template', template.id)
    return jsonify(template.to_dict()), 201


@bp.route('/api/landlord/communication-templates/<int:template_id>', methods=['PUT', 'PATCH'])
@landlord_required
def update_template(template_id):
    """Update a communication template."""
    template = _get_owned_template(template_id)
    if template is None:
        return jsonify({'error': 'Access denied'}), 403

    data = request.json or {}
    if 'title' in data and not clean_str(data, 'title'):
        return jsonify({'error': 'Title is required'}), 400
    if 'body' in data and not clean_str(data, 'body'):
        return jsonify({'error': 'Message body is required'}), 400
    if 'tags' in data and not isinstance(data.get('tags') or [], list):
        return jsonify({'error': 'Tags must be a list'}), 400

    if 'title' in data:
        template.title = clean_str(data, 'title')
    if 'subject' in data:
        template.subject = clean_str(data, 'subject')
    if 'body' in data:
        template.body = clean_str(data, 'body')
    if 'category' in data:
        template.category = clean_str(data, 'category') or DEFAULT_COMMUNICATION_TEMPLATE_CATEGORY
    if 'tags' in data:
        template.tags = json.dumps(data.get('tags') or [])
    if 'isActive' in data:
        template.is_active = bool(parse_bool(data.get('isActive')))

    db.session.commit()
    log_audit(current_user.id, 'communication_template_updated', 'communication_template', template.id)
    return jsonify(template.to_dict())


@bp.route('/api/landlord/communication-templates/<int:template_id>', methods=['DELETE'])
@landlord_required
def delete_template(template_id):
    """Delete a communication template."""
    template = _get_owned_template(template_id)
    if template is None:
        return jsonify({'error': 'Access denied'}), 403

    db.session.delete(template)
    db.session.commit()
    log_audit(current_user.id, 'communication_template_deleted', 'communication_template', template_id)
    return jsonify({'success': True})


# =============================================================================
# COMMUNICATION LOGS
# =============================================================================

@bp.route('/api/communication-logs', methods=['GET'])
@api_login_required
def list_logs():
    """Logs sent by the current landlord, or received by the current tenant."""
    landlord = get_current_landlord()
    tenant = get_current_tenant()

    if landlord is not None:
        query = CommunicationLog.query.filter_by(landlord_id=landlord.id)
        tenant_id = _parse_int(request.args.get('tenantId'))
        if tenant_id is not None:
            query = query.filter_by(tenant_id=tenant_id)
    elif tenant is not None:
        query = CommunicationLog.query.filter_by(tenant_id=tenant.id)
    else:
        return jsonify({'error': 'Access denied'}), 403

    property_id = _parse_int(request.args.get('propertyId'))
    if property_id is not None:
        query = query.filter_by(property_id=property_id)

    logs = query.order_by(CommunicationLog.created_at.desc(), CommunicationLog.id.desc()).all()
    return jsonify([log.to_dict() for log in logs])


@bp.route('/api/communication-logs', methods=['POST'])
@landlord_required
def send_communication():
    """Record a message to a tenant, if the tenant accepts it."""
    landlord = get_current_landlord()
    data = request.json or {}

    tenant_id = _parse_int(data.get('tenantId'))
    communication_type = data.get('communicationType')
    message = clean_str(data, 'message')

    if tenant_id is None or db.session.get(TenantProfile, tenant_id) is None:
        return jsonify({'error': 'Tenant not found'}), 404
    if communication_type not in COMMUNICATION_TYPES:
        return jsonify({'error': 'Communication type must be one of: ' + ', '.join(COMMUNICATION_TYPES)}), 400
    if not message:
        return jsonify({'error': 'Message is required'}), 400

    allowed, reason = can_contact_tenant(tenant_id, landlord, communication_type)
    if not allowed:
        return jsonify({'error': reason}), 403

    template = None
    template_id = _parse_int(data.get('templateId'))
    if template_id is not None:
        template = db.session.get(CommunicationTemplate, template_id)
        if template is None or template.landlord_id != landlord.id:
            return jsonify({'error': 'Template not found'}), 404

    metadata = data.get('metadata')
    log = CommunicationLog(
        landlord_id=landlord.id,
        tenant_id=tenant_id,
        property_id=_parse_int(data.get('propertyId')),
        interest_id=_parse_int(data.get('interestId')),
        template_id=template.id if template else None,
        communication_type=communication_type,
        subject=clean_str(data, 'subject'),
        message=message,
        status='sent',
        extra_data=json.dumps(metadata) if isinstance(metadata, dict) else None
    )
    thread_id = clean_str(data, 'threadId')
    if thread_id:
        log.thread_id = thread_id

    if template is not None:
        template.usage_count = (template.usage_count or 0) + 1

    db.session.add(log)
    db.session.commit()

    logger.info("Landlord %s sent %s to tenant %s", landlord.id, communication_type, tenant_id)
    log_audit(current_user.id, 'communication_sent', 'communication_log', log.id,
              {'tenant_id': tenant_id, 'type': communication_type})
    return jsonify(log.to_dict()), 201


@bp.route('/api/communication-logs/<int:log_id>/status', methods=['PATCH', 'PUT'])
@landlord_required
def update_log_status(log_id):
    """Update the delivery status of a sent message."""
    log = db.get_or_404(CommunicationLog, log_id)
    if not verify_resource_ownership(log):
        return jsonify({'error': 'Access denied'}), 403

    status = (request.json or {}).get('status')
    if status not in COMMUNICATION_STATUSES:
        return jsonify({'error': 'Status must be one of: ' + ', '.join(COMMUNICATION_STATUSES)}), 400

    log.status = status
    db.session.commit()
    return jsonify(log.to_dict())


@bp.route('/api/communication-logs/thread/<thread_id>', methods=['GET'])
@api_login_required
def get_thread(thread_id):
    """Messages of one conversation thread visible to the current user."""
    query = CommunicationLog.query.filter_by(thread_id=thread_id)

    landlord = get_current_landlord()
    tenant = get_current_tenant()
    if landlord is not None:
        query = query.filter_by(landlord_id=landlord.id)
    elif tenant is not None:
        query = query.filter_by(tenant_id=tenant.id)
    else:
        return jsonify({'error': 'Access denied'}), 403

    logs = query.order_by(CommunicationLog.created_at.asc(), CommunicationLog.id.asc()).all()
    return jsonify([log.to_dict() for log in logs])


# =============================================================================
# CONTACT GATING (landlord view)
# =============================================================================

@bp.route('/api/landlord/can-contact-tenant', methods=['POST'])
@landlord_required
def check_can_contact():
    """Whether the current landlord may reach a tenant over a channel."""
    data = request.json or {}
    tenant_id = _parse_int(data.get('tenantId'))
    if tenant_id is None or db.session.get(TenantProfile, tenant_id) is None:
        return jsonify({'error': 'Tenant not found'}), 404

    allowed, reason = can_contact_tenant(tenant_id, get_current_landlord(),
                                         data.get('communicationType') or 'email')
    return jsonify({'canContact': allowed, 'reason': reason})


@bp.route('/api/landlord/tenant/<int:tenant_id>/contact-preferences', methods=['GET'])
@landlord_required
def landlord_view_preferences(tenant_id):
    """A tenant's contact preferences as a landlord sees them."""
    db.get_or_404(TenantProfile, tenant_id)
    return jsonify({'preferences': get_preferences(tenant_id).to_dict()})


# =============================================================================
# CONTACT PREFERENCES AND BLOCKS (tenant)
# =============================================================================

@bp.route('/api/tenant/contact-preferences', methods=['GET'])
@tenant_required
def get_contact_preferences():
    """Current tenant's contact preferences (defaults when never saved)."""
    return jsonify(get_preferences(get_current_tenant().id).to_dict())


@bp.route('/api/tenant/contact-preferences', methods=['PUT', 'PATCH'])
@tenant_required
def update_contact_preferences():
    """Save the current tenant's contact preferences."""
    tenant = get_current_tenant()
    data = request.json or {}

    preferred_method = data.get('preferredMethod')
    if preferred_method is not None and preferred_method not in COMMUNICATION_TYPES:
        return jsonify({'error': 'Preferred method must be one of: ' + ', '.join(COMMUNICATION_TYPES)}), 400

    preferences = get_preferences(tenant.id)
    if preferences.id is None:
        db.session.add(preferences)

    for key, attr in (('allowLandlordContact', 'allow_landlord_contact'),
                      ('allowEmail', 'allow_email'),
                      ('allowPhone', 'allow_phone'),
                      ('allowSms', 'allow_sms')):
        if key in data:
            setattr(preferences, attr, bool(parse_bool(data.get(key))))
    if preferred_method is not None:
        preferences.preferred_method = preferred_method

    db.session.commit()
    log_audit(current_user.id, 'contact_preferences_updated', 'tenant_contact_preferences', preferences.id)
    return jsonify(preferences.to_dict())


@bp.route('/api/tenant/blocked-contacts', methods=['GET'])
@tenant_required
def list_blocked_contacts():
    """Current tenant's blocks, newest first."""
    blocks = TenantBlockedContact.query.filter_by(tenant_id=get_current_tenant().id).order_by(
        TenantBlockedContact.created_at.desc(), TenantBlockedContact.id.desc()
    ).all()
    return jsonify([b.to_dict() for b in blocks])


@bp.route('/api/tenant/blocked-contacts', methods=['POST'])
@tenant_required
def block_contact():
    """Block a landlord, an e-mail address or a phone number."""
    data = request.json or {}
    landlord_id = _parse_int(data.get('landlordId'))
    blocked_email = clean_str(data, 'blockedEmail')
    blocked_phone = clean_str(data, 'blockedPhone')
    block_type = data.get('blockType') or 'permanent'

    if landlord_id is None and not blocked_email and not blocked_phone:
        return jsonify({'error': 'A landlord, email or phone number to block is required'}), 400
    if block_type not in BLOCK_TYPES:
        return jsonify({'error': 'Block type must be one of: ' + ', '.join(BLOCK_TYPES)}), 400

    blocked_until = _parse_datetime(data.get('blockedUntil'))
    if block_type == 'temporary' and blocked_until is None:
        return jsonify({'error': 'Temporary blocks need a valid blockedUntil date'}), 400

    block = TenantBlockedContact(
        tenant_id=get_current_tenant().id,
        landlord_id=landlord_id,
        blocked_email=blocked_email.lower() if blocked_email else None,
        blocked_phone=blocked_phone,
        block_type=block_type,
        blocked_until=blocked_until if block_type == 'temporary' else None,
        reason=clean_str(data, 'reason')
    )
    db.session.add(block)
    db.session.commit()

    log_audit(current_user.id, 'contact_blocked', 'tenant_blocked_contact', block.id)
    return jsonify(block.to_dict()), 201


@bp.route('/api/tenant/blocked-contacts/<int:block_id>', methods=['DELETE'])
@tenant_required
def unblock_contact(block_id):
    """Remove a block."""
    block = db.get_or_404(TenantBlockedContact, block_id)
    if not verify_resource_ownership(block):
        return jsonify({'error': 'Access denied'}), 403

    db.session.delete(block)
    db.session.commit()
    log_audit(current_user.id, 'contact_unblocked', 'tenant_blocked_contact', block_id)
    return jsonify({'success': True})
