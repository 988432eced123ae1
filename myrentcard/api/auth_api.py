"""
Session authentication API routes.
"""
from datetime import datetime
from flask import Blueprint, request, jsonify
from flask_login import login_user, logout_user, current_user
from sqlalchemy.exc import IntegrityError
from myrentcard.models import db, User, TenantProfile, LandlordProfile
from myrentcard.utils.auth import api_login_required, validate_email, validate_password, log_audit
from myrentcard.utils.constants import USER_TYPES

bp = Blueprint('auth_api', __name__, url_prefix='/api/auth')


@bp.route('/register', methods=['POST'])
def register():
    """Create a tenant or landlord account and log it in."""
    data = request.json or {}
    email = (data.get('email') or '').strip().lower()
    password = data.get('password') or ''
    first_name = (data.get('firstName') or '').strip()
    last_name = (data.get('lastName') or '').strip()
    user_type = (data.get('userType') or '').strip()

    errors = []

    if not email or not validate_email(email):
        errors.append("Please enter a valid email address")
    elif User.query.filter_by(email=email).first():
        errors.append("An account with this email already exists")

    if user_type not in USER_TYPES:
        errors.append("Account type must be tenant or landlord")
    if not first_name:
        errors.append("First name is required")
    if not last_name:
        errors.append("Last name is required")

    is_valid, password_error = validate_password(password)
    if not is_valid:
        errors.append(password_error)

    if errors:
        return jsonify({'error': errors[0], 'errors': errors}), 400

    user = User(
        email=email,
        first_name=first_name,
        last_name=last_name,
        phone=(data.get('phone') or '').strip() or None,
        user_type=user_type
    )
    user.set_password(password)

    if user_type == 'tenant':
        user.tenant_profile = TenantProfile()
    else:
        user.landlord_profile = LandlordProfile(
            company_name=(data.get('companyName') or '').strip() or None
        )

    try:
        db.session.add(user)
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        return jsonify({'error': 'An account with this email already exists'}), 400

    log_audit(user.id, 'user_registered', details={'user_type': user_type})
    login_user(user)
    return jsonify({'success': True, 'user': user.to_dict()}), 201


@bp.route('/login', methods=['POST'])
def login():
    """Log in with e-mail and password."""
    data = request.json or {}
    email = (data.get('email') or '').strip().lower()
    password = data.get('password') or ''

    user = User.query.filter_by(email=email).first()

    if user and user.check_password(password):
        user.last_login_at = datetime.utcnow()
        db.session.commit()

        login_user(user, remember=bool(data.get('remember')))
        log_audit(user.id, 'user_login')
        return jsonify({'success': True, 'user': user.to_dict()})

    log_audit(None, 'failed_login', details={'email': email})
    return jsonify({'error': 'Invalid email or password'}), 401


@bp.route('/logout', methods=['POST'])
@api_login_required
def logout():
    """Log out the current session."""
    log_audit(current_user.id, 'user_logout')
    logout_user()
    return jsonify({'success': True})


@bp.route('/me', methods=['GET'])
@api_login_required
def me():
    """Current user with the tenant or landlord profile."""
    result = current_user.to_dict()
    profile = current_user.tenant_profile or current_user.landlord_profile
    result['profile'] = profile.to_dict() if profile else None
    return jsonify(result)
