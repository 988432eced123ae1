"""
Tenant contact book API routes.
"""
from datetime import datetime
from flask import Blueprint, request, jsonify
from flask_login import current_user
from myrentcard.models import db, RecipientContact
from myrentcard.utils.auth import (
    tenant_required, get_current_tenant, verify_resource_ownership,
    validate_email, log_audit, clean_str, parse_bool
)
from myrentcard.utils.constants import CONTACT_TYPES

bp = Blueprint('contacts_api', __name__, url_prefix='/api/tenant/contacts')


def _validate_contact_payload(data, partial=False):
    if (not partial or 'name' in data) and not clean_str(data, 'name'):
        return 'Name is required'
    if 'contactType' in data and data.get('contactType') not in CONTACT_TYPES:
        return 'Contact type must be one of: ' + ', '.join(CONTACT_TYPES)
    email = clean_str(data, 'email')
    if email and not validate_email(email):
        return 'Please enter a valid email address'
    return None


def _get_owned_contact(contact_id):
    contact = db.get_or_404(RecipientContact, contact_id)
    if not verify_resource_ownership(contact):
        return None
    return contact


@bp.route('', methods=['GET'])
@tenant_required
def list_contacts():
    """List contacts, optionally filtered by type (category) and favourite flag."""
    query = RecipientContact.query.filter_by(tenant_id=get_current_tenant().id)

    category = (request.args.get('category') or '').strip()
    if category:
        query = query.filter_by(contact_type=category)

    is_favorite = parse_bool(request.args.get('isFavorite'))
    if is_favorite is not None:
        query = query.filter_by(is_favorite=is_favorite)

    contacts = query.order_by(RecipientContact.is_favorite.desc(), RecipientContact.name.asc()).all()
    return jsonify([c.to_dict() for c in contacts])


@bp.route('', methods=['POST'])
@tenant_required
def create_contact():
    """Add a contact."""
    data = request.json or {}
    error = _validate_contact_payload(data)
    if error:
        return jsonify({'error': error}), 400

    contact = RecipientContact(
        tenant_id=get_current_tenant().id,
        name=clean_str(data, 'name'),
        email=clean_str(data, 'email'),
        phone=clean_str(data, 'phone'),
        company=clean_str(data, 'company'),
        contact_type=data.get('contactType') or 'landlord',
        property_address=clean_str(data, 'propertyAddress'),
        notes=clean_str(data, 'notes'),
        is_favorite=bool(parse_bool(data.get('isFavorite')))
    )

    db.session.add(contact)
    db.session.commit()

    log_audit(current_user.id, 'contact_created', 'recipient_contact', contact.id)
    return jsonify(contact.to_dict()), 201


@bp.route('/<int:contact_id>', methods=['PUT', 'PATCH'])
@tenant_required
def update_contact(contact_id):
    """Update a contact."""
    contact = _get_owned_contact(contact_id)
    if contact is None:
        return jsonify({'error': 'Access denied'}), 403

    data = request.json or {}
    error = _validate_contact_payload(data, partial=True)
    if error:
        return jsonify({'error': error}), 400

    if 'name' in data:
        contact.name = clean_str(data, 'name')
    if 'email' in data:
        contact.email = clean_str(data, 'email')
    if 'phone' in data:
        contact.phone = clean_str(data, 'phone')
    if 'company' in data:
        contact.company = clean_str(data, 'company')
    if 'contactType' in data:
        contact.contact_type = data['contactType']
    if 'propertyAddress' in data:
        contact.property_address = clean_str(data, 'propertyAddress')
    if 'notes' in data:
        contact.notes = clean_str(data, 'notes')
    if 'isFavorite' in data:
        contact.is_favorite = bool(parse_bool(data.get('isFavorite')))

    db.session.commit()
    log_audit(current_user.id, 'contact_updated', 'recipient_contact', contact.id)
    return jsonify(contact.to_dict())


@bp.route('/<int:contact_id>', methods=['DELETE'])
@tenant_required
def delete_contact(contact_id):
    """Delete a contact."""
    contact = _get_owned_contact(contact_id)
    if contact is None:
        return jsonify({'error': 'Access denied'}), 403

    db.session.delete(contact)
    db.session.commit()
    log_audit(current_user.id, 'contact_deleted', 'recipient_contact', contact_id)
    return jsonify({'success': True})


@bp.route('/<int:contact_id>/contacted', methods=['POST'])
@tenant_required
def record_contact(contact_id):
    """Bump the usage counter after the tenant shared with this contact."""
    contact = _get_owned_contact(contact_id)
    if contact is None:
        return jsonify({'error': 'Access denied'}), 403

    contact.contact_count = (contact.contact_count or 0) + 1
    contact.last_contacted_at = datetime.utcnow()
    db.session.commit()
    return jsonify(contact.to_dict())
