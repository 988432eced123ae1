"""
Tenant message template API routes.
"""
import json
from flask import Blueprint, request, jsonify
from flask_login import current_user
from sqlalchemy import case
from myrentcard.models import db, TenantMessageTemplate
from myrentcard.utils.auth import (
    tenant_required, get_current_tenant, verify_resource_ownership,
    log_audit, clean_str, parse_bool
)
from myrentcard.utils.constants import MESSAGE_TEMPLATE_CATEGORIES

bp = Blueprint('message_templates_api', __name__, url_prefix='/api/tenant/message-templates')


def _validate_template_payload(data, partial=False):
    if (not partial or 'templateName' in data) and not clean_str(data, 'templateName'):
        return 'Template name is required'
    if (not partial or 'body' in data) and not clean_str(data, 'body'):
        return 'Message body is required'
    if 'category' in data and data.get('category') not in MESSAGE_TEMPLATE_CATEGORIES:
        return 'Category must be one of: ' + ', '.join(MESSAGE_TEMPLATE_CATEGORIES)
    if 'variables' in data and not isinstance(data.get('variables') or [], list):
        return 'Variables must be a list'
    return None


def _get_owned_template(template_id):
    template = db.get_or_404(TenantMessageTemplate, template_id)
    if not verify_resource_ownership(template):
        return None
    return template


@bp.route('', methods=['GET'])
@tenant_required
def list_templates():
    """List templates: defaults first, then by category and name."""
    query = TenantMessageTemplate.query.filter_by(tenant_id=get_current_tenant().id)

    category = (request.args.get('category') or '').strip()
    if category:
        query = query.filter_by(category=category)

    templates = query.order_by(
        case((TenantMessageTemplate.is_default.is_(True), 0), else_=1),
        TenantMessageTemplate.category.asc(),
        TenantMessageTemplate.template_name.asc()
    ).all()
    return jsonify([t.to_dict() for t in templates])


@bp.route('', methods=['POST'])
@tenant_required
def create_template():
    """Create a template."""
    data = request.json or {}
    error = _validate_template_payload(data)
    if error:
        return jsonify({'error': error}), 400

    template = TenantMessageTemplate(
        tenant_id=get_current_tenant().id,
        template_name=clean_str(data, 'templateName'),
        subject=clean_str(data, 'subject'),
        body=clean_str(data, 'body'),
        category=data.get('category') or 'custom',
        variables=json.dumps(data.get('variables') or []),
        is_default=bool(parse_bool(data.get('isDefault')))
    )

    db.session.add(template)
    db.session.commit()

    log_audit(current_user.id, 'message_template_created', 'tenant_message_template', template.id)
    return jsonify(template.to_dict()), 201


@bp.route('/<int:template_id>', methods=['PUT', 'PATCH'])
@tenant_required
def update_template(template_id):
    """Update a template."""
    template = _get_owned_template(template_id)
    if template is None:
        return jsonify({'error': 'Access denied'}), 403

    data = request.json or {}
    error = _validate_template_payload(data, partial=True)
    if error:
        return jsonify({'error': error}), 400

    if 'templateName' in data:
        template.template_name = clean_str(data, 'templateName')
    if 'subject' in data:
        template.subject = clean_str(data, 'subject')
    if 'body' in data:
        template.body = clean_str(data, 'body')
    if 'category' in data:
        template.category = data['category']
    if 'variables' in data:
        template.variables = json.dumps(data.get('variables') or [])
    if 'isDefault' in data:
        template.is_default = bool(parse_bool(data.get('isDefault')))

    db.session.commit()
    log_audit(current_user.id, 'message_template_updated', 'tenant_message_template', template.id)
    return jsonify(template.to_dict())


@bp.route('/<int:template_id>', methods=['DELETE'])
@tenant_required
def delete_template(template_id):
    """Delete a template."""
    template = _get_owned_template(template_id)
    if template is None:
        return jsonify({'error': 'Access denied'}), 403

    db.session.delete(template)
    db.session.commit()
    log_audit(current_user.id, 'message_template_deleted', 'tenant_message_template', template_id)
    return jsonify({'success': True})


@bp.route('/<int:template_id>/use', methods=['POST'])
@tenant_required
def record_usage(template_id):
    """Bump the usage counter when a template is sent."""
    template = _get_owned_template(template_id)
    if template is None:
        return jsonify({'error': 'Access denied'}), 403

    template.usage_count = (template.usage_count or 0) + 1
    db.session.commit()
    return jsonify(template.to_dict())
