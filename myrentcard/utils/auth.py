"""
Authentication and authorization utilities for MyRentCard.
Implements session-backed access control, input validation and audit logging.
"""
import re
import json
import logging
from functools import wraps
from flask import request, jsonify, has_request_context
from flask_login import current_user
from myrentcard.models import db, AuditLog

logger = logging.getLogger(__name__)


def validate_email(email):
    """Validate email format."""
    pattern = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'
    return bool(re.match(pattern, email or ''))


def validate_password(password):
    """
    Validate password strength.
    Returns (is_valid, error_message)
    """
    if len(password) < 8:
        return False, "Password must be at least 8 characters"
    if not re.search(r'[A-Za-z]', password):
        return False, "Password must contain at least one letter"
    if not re.search(r'\d', password):
        return False, "Password must contain at least one number"
    return True, None


def log_audit(user_id, action, resource_type=None, resource_id=None, details=None):
    """Create an audit log entry. Failures are logged, never raised."""
    try:
        ip_address = None
        user_agent = None
        if has_request_context():
            ip_address = request.remote_addr
            user_agent = request.user_agent.string[:255] if request.user_agent else None

        log = AuditLog(
            user_id=user_id,
            action=action,
            resource_type=resource_type,
            resource_id=str(resource_id) if resource_id is not None else None,
            details=json.dumps(details) if details else None,
            ip_address=ip_address,
            user_agent=user_agent
        )
        db.session.add(log)
        db.session.commit()
    except Exception:
        db.session.rollback()
        logger.exception("Audit log error for action %s", action)


def api_login_required(f):
    """Decorator for API endpoints that require authentication."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not current_user.is_authenticated:
            logger.warning("Unauthenticated API request to %s", request.path)
            return jsonify({'error': 'Authentication required'}), 401
        return f(*args, **kwargs)
    return decorated_function


def tenant_required(f):
    """Decorator for endpoints only a tenant account may call."""
    @wraps(f)
    @api_login_required
    def decorated_function(*args, **kwargs):
        if not current_user.is_tenant or current_user.tenant_profile is None:
            return jsonify({'error': 'Tenant account required'}), 403
        return f(*args, **kwargs)
    return decorated_function


def landlord_required(f):
    """Decorator for endpoints only a landlord account may call."""
    @wraps(f)
    @api_login_required
    def decorated_function(*args, **kwargs):
        if not current_user.is_landlord or current_user.landlord_profile is None:
            return jsonify({'error': 'Landlord account required'}), 403
        return f(*args, **kwargs)
    return decorated_function


def get_current_tenant():
    """Tenant profile of the logged-in user, or None."""
    if current_user.is_authenticated and current_user.is_tenant:
        return current_user.tenant_profile
    return None


def get_current_landlord():
    """Landlord profile of the logged-in user, or None."""
    if current_user.is_authenticated and current_user.is_landlord:
        return current_user.landlord_profile
    return None


def verify_resource_ownership(resource):
    """
    Verify that the current user owns the resource.
    Tenant-owned rows carry tenant_id, landlord-owned rows carry landlord_id.
    """
    landlord = get_current_landlord()
    if landlord is not None and hasattr(resource, 'landlord_id'):
        return resource.landlord_id == landlord.id

    tenant = get_current_tenant()
    if tenant is not None and hasattr(resource, 'tenant_id'):
        return resource.tenant_id == tenant.id

    return False


def clean_str(data, key):
    """Stripped string value from a JSON payload, or None when blank."""
    value = data.get(key)
    if value is None:
        return None
    return str(value).strip() or None


def parse_bool(value):
    """Interpret JSON booleans and query-string flags."""
    if isinstance(value, bool):
        return value
    if value is None:
        return None
    return str(value).strip().lower() in ('1', 'true', 'yes', 'on')
