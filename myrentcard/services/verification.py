"""
Reference verification links: issuing, validating and consuming one-time tokens.

A token is a single-use capability. Validation is a read; submission consumes
the token with a conditional update on ``status='pending'`` so only one
submission can ever succeed for a given link.
"""
import logging
import secrets
from datetime import datetime, timedelta
from myrentcard.models import db, ReferenceVerification
from myrentcard.models.base import isoformat
from myrentcard.utils.constants import VERIFICATION_RATINGS, MAX_VERIFICATION_COMMENT_LENGTH

logger = logging.getLogger(__name__)

INVALID_TOKEN = 'INVALID_TOKEN'
EXPIRED_TOKEN = 'EXPIRED_TOKEN'
ALREADY_VERIFIED = 'ALREADY_VERIFIED'
VALIDATION_ERROR = 'VALIDATION_ERROR'

INVALID_TOKEN_MESSAGE = 'This verification link is not valid'
EXPIRED_TOKEN_MESSAGE = 'This verification link has expired'
ALREADY_VERIFIED_MESSAGE = 'This reference was already verified'


class VerificationError(Exception):
    """Token or feedback problem, carrying a structured error code."""

    def __init__(self, code, message, status_code=400):
        super().__init__(message)
        self.code = code
        self.message = message
        self.status_code = status_code

    def to_dict(self):
        # "error" mirrors "message" for clients that only read that key
        return {'code': self.code, 'message': self.message, 'error': self.message}


def build_verification_url(base_url, token):
    """Public page the reference opens from the e-mail."""
    return f"{base_url.rstrip('/')}/references/verify/{token}"


def issue_verification(reference, ttl_hours=24):
    """Create a fresh link for a reference; older pending links stop working."""
    ReferenceVerification.query.filter_by(
        reference_id=reference.id, status='pending'
    ).update({'status': 'expired'}, synchronize_session=False)

    verification = ReferenceVerification(
        reference_id=reference.id,
        token=secrets.token_urlsafe(32),
        status='pending',
        expires_at=datetime.utcnow() + timedelta(hours=ttl_hours)
    )
    db.session.add(verification)
    db.session.flush()
    return verification


def get_verification(token):
    """Look up a usable verification by token or raise VerificationError."""
    verification = None
    if token:
        verification = ReferenceVerification.query.filter_by(token=token).first()

    if verification is None:
        raise VerificationError(INVALID_TOKEN, INVALID_TOKEN_MESSAGE, 404)

    if verification.status == 'completed':
        raise VerificationError(ALREADY_VERIFIED, ALREADY_VERIFIED_MESSAGE, 409)

    if verification.status == 'pending' and verification.is_expired():
        verification.status = 'expired'
        db.session.commit()

    if verification.status == 'expired':
        raise VerificationError(EXPIRED_TOKEN, EXPIRED_TOKEN_MESSAGE, 410)

    return verification


def validate_token(token):
    """Reference data shown on the verification page."""
    verification = get_verification(token)
    reference = verification.reference

    result = reference.to_dict()
    result.update({
        'tenantName': reference.tenant.display_name,
        'tokenValid': True,
        'tokenExpiry': isoformat(verification.expires_at),
    })
    return result


def validate_feedback(data):
    """
    Check a submitted rating and comment.
    Returns (rating, comments); raises VerificationError on bad input.
    """
    rating = data.get('rating')
    if rating not in VERIFICATION_RATINGS:
        raise VerificationError(VALIDATION_ERROR, 'Rating must be one of: ' + ', '.join(VERIFICATION_RATINGS), 400)

    comments = data.get('comments')
    if not isinstance(comments, str) or not comments.strip():
        raise VerificationError(VALIDATION_ERROR, 'Please provide some comments', 400)
    if len(comments) > MAX_VERIFICATION_COMMENT_LENGTH:
        raise VerificationError(VALIDATION_ERROR, 'Comments must be less than 500 characters', 400)

    return rating, comments.strip()


def _parse_reference_id(value):
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def submit_verification(token, data):
    """
    Record a reference's feedback and consume the token.
    Returns (reference, verification).
    """
    verification = get_verification(token)
    reference = verification.reference

    if _parse_reference_id(data.get('referenceId')) != reference.id:
        raise VerificationError(VALIDATION_ERROR, 'Reference does not match this verification link', 400)

    rating, comments = validate_feedback(data)

    if reference.is_verified:
        raise VerificationError(ALREADY_VERIFIED, ALREADY_VERIFIED_MESSAGE, 409)

    now = datetime.utcnow()
    consumed = ReferenceVerification.query.filter_by(
        id=verification.id, status='pending'
    ).update({
        'status': 'completed',
        'completed_at': now,
        'rating': rating,
        'comments': comments,
    }, synchronize_session=False)

    if consumed != 1:
        db.session.rollback()
        logger.warning("Verification %s was consumed concurrently", verification.id)
        raise VerificationError(ALREADY_VERIFIED, ALREADY_VERIFIED_MESSAGE, 409)

    reference.is_verified = True
    reference.verification_date = now
    db.session.commit()
    db.session.refresh(verification)

    logger.info("Reference %s verified with rating %s", reference.id, rating)
    return reference, verification
