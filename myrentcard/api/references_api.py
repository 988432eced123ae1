"""
Tenant reference API routes.
"""
import logging
from datetime import datetime
from flask import Blueprint, request, jsonify, current_app
from flask_login import current_user
from myrentcard.models import db, TenantProfile, TenantReference
from myrentcard.models.base import isoformat
from myrentcard.utils.auth import (
    tenant_required, landlord_required, get_current_tenant,
    verify_resource_ownership, validate_email, log_audit
)
from myrentcard.utils.constants import REFERENCE_RELATIONSHIPS
from myrentcard.services.verification import issue_verification, build_verification_url
from myrentcard.services.communication.email import send_reference_verification_email

logger = logging.getLogger(__name__)

bp = Blueprint('references_api', __name__)

REQUIRED_FIELDS = (('name', 'Name'), ('email', 'Email'), ('phone', 'Phone'))


def _validate_reference_payload(data, partial=False):
    """Return an error message for invalid reference input, or None."""
    for key, label in REQUIRED_FIELDS:
        if (not partial or key in data) and not str(data.get(key) or '').strip():
            return f"{label} is required"

    if (not partial or 'relationship' in data) and data.get('relationship') not in REFERENCE_RELATIONSHIPS:
        return 'Relationship must be one of: ' + ', '.join(REFERENCE_RELATIONSHIPS)

    if 'email' in data and not validate_email(str(data.get('email') or '').strip()):
        return 'Please enter a valid email address'

    return None


def _get_owned_reference(reference_id):
    reference = db.get_or_404(TenantReference, reference_id)
    if not verify_resource_ownership(reference):
        return None
    return reference


@bp.route('/api/tenant/references/<int:tenant_id>', methods=['GET'])
@tenant_required
def list_references(tenant_id):
    """List the current tenant's references."""
    tenant = get_current_tenant()
    if tenant.id != tenant_id:
        return jsonify({'error': 'Access denied'}), 403

    references = tenant.references.order_by(TenantReference.id.asc()).all()
    return jsonify([r.to_dict() for r in references])


@bp.route('/api/tenant/references', methods=['POST'])
@tenant_required
def create_reference():
    """Add a reference to the current tenant's RentCard."""
    data = request.json or {}
    error = _validate_reference_payload(data)
    if error:
        return jsonify({'error': error}), 400

    reference = TenantReference(
        tenant_id=get_current_tenant().id,
        name=str(data['name']).strip(),
        relationship=data['relationship'],
        email=str(data['email']).strip().lower(),
        phone=str(data['phone']).strip(),
        notes=str(data.get('notes') or '').strip() or None
    )

    db.session.add(reference)
    db.session.commit()

    log_audit(current_user.id, 'reference_created', 'tenant_reference', reference.id)
    return jsonify(reference.to_dict()), 201


@bp.route('/api/tenant/references/<int:reference_id>', methods=['PUT', 'PATCH'])
@tenant_required
def update_reference(reference_id):
    """Update a reference. Verification fields are server-managed and ignored."""
    reference = _get_owned_reference(reference_id)
    if reference is None:
        return jsonify({'error': 'Access denied'}), 403

    data = request.json or {}
    error = _validate_reference_payload(data, partial=True)
    if error:
        return jsonify({'error': error}), 400

    if 'name' in data:
        reference.name = str(data['name']).strip()
    if 'relationship' in data:
        reference.relationship = data['relationship']
    if 'email' in data:
        reference.email = str(data['email']).strip().lower()
    if 'phone' in data:
        reference.phone = str(data['phone']).strip()
    if 'notes' in data:
        reference.notes = str(data.get('notes') or '').strip() or None

    db.session.commit()
    log_audit(current_user.id, 'reference_updated', 'tenant_reference', reference.id)
    return jsonify(reference.to_dict())


@bp.route('/api/tenant/references/<int:reference_id>', methods=['DELETE'])
@tenant_required
def delete_reference(reference_id):
    """Delete a reference."""
    reference = _get_owned_reference(reference_id)
    if reference is None:
        return jsonify({'error': 'Access denied'}), 403

    db.session.delete(reference)
    db.session.commit()
    log_audit(current_user.id, 'reference_deleted', 'tenant_reference', reference_id)
    return jsonify({'success': True})


@bp.route('/api/tenant/references/<int:reference_id>/verify', methods=['POST'])
@tenant_required
def verify_reference(reference_id):
    """Mark a reference verified without going through the e-mailed link."""
    reference = _get_owned_reference(reference_id)
    if reference is None:
        return jsonify({'error': 'Access denied'}), 403

    if not reference.is_verified:
        reference.mark_verified()
        db.session.commit()
        log_audit(current_user.id, 'reference_verified_manually', 'tenant_reference', reference.id)

    return jsonify(reference.to_dict())


@bp.route('/api/tenant/references/<int:reference_id>/send-verification', methods=['POST'])
@tenant_required
def send_verification(reference_id):
    """Issue a fresh verification link and e-mail it to the reference."""
    reference = _get_owned_reference(reference_id)
    if reference is None:
        return jsonify({'error': 'Access denied'}), 403

    if reference.is_verified:
        return jsonify({'error': 'Reference is already verified'}), 400

    ttl_hours = current_app.config['VERIFICATION_TOKEN_TTL_HOURS']
    verification = issue_verification(reference, ttl_hours=ttl_hours)
    verification_url = build_verification_url(current_app.config['APP_BASE_URL'], verification.token)

    result = send_reference_verification_email(
        reference,
        current_user.full_name,
        verification_url,
        current_app.config.get('RESEND_API_KEY'),
        current_app.config['EMAIL_FROM'],
        expires_in_hours=ttl_hours
    )

    if not result.get('success'):
        db.session.rollback()
        logger.error("Verification email for reference %s failed: %s", reference.id, result.get('error'))
        return jsonify({'error': 'Failed to send verification email'}), 502

    if not result.get('skipped'):
        verification.email_sent_at = datetime.utcnow()
    db.session.commit()

    log_audit(current_user.id, 'reference_verification_sent', 'tenant_reference', reference.id)
    return jsonify({
        'success': True,
        'reference': reference.to_dict(),
        'verificationUrl': verification_url,
        'expiresAt': isoformat(verification.expires_at)
    })


@bp.route('/api/landlord/tenant/<int:tenant_id>/references', methods=['GET'])
@landlord_required
def landlord_view_references(tenant_id):
    """References of a tenant as a landlord sees them, including feedback."""
    tenant = db.get_or_404(TenantProfile, tenant_id)
    references = tenant.references.order_by(TenantReference.id.asc()).all()
    return jsonify({
        'tenantId': tenant.id,
        'tenantName': tenant.display_name,
        'references': [r.to_dict(include_feedback=True) for r in references]
    })
