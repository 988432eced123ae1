"""
Public reference-verification API (no login; the token is the credential).
"""
from flask import Blueprint, request, jsonify, current_app
from myrentcard.services.verification import validate_token, submit_verification
from myrentcard.services.communication.email import send_reference_verified_email
from myrentcard.utils.auth import log_audit

bp = Blueprint('verification_api', __name__, url_prefix='/api/tenant-references/verify')


@bp.route('/validate/<token>', methods=['GET'])
def validate(token):
    """Check a verification link before the form is shown."""
    return jsonify(validate_token(token))


@bp.route('/submit/<token>', methods=['POST'])
def submit(token):
    """Record the reference's rating and comments; the link is then spent."""
    data = request.get_json(silent=True) or {}
    reference, verification = submit_verification(token, data)

    tenant = reference.tenant
    log_audit(None, 'reference_verification_submitted', 'tenant_reference', reference.id,
              {'rating': verification.rating})

    if current_app.config.get('RESEND_API_KEY'):
        send_reference_verified_email(reference, tenant.user, current_app.config['RESEND_API_KEY'],
                                      current_app.config['EMAIL_FROM'])

    return jsonify({
        'success': True,
        'tenantName': tenant.display_name,
        'reference': reference.to_dict()
    })
