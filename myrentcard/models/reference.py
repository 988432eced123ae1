"""
Tenant reference and reference verification models.
"""
from datetime import datetime
from myrentcard.models.base import db, isoformat


class TenantReference(db.Model):
    """Reference listed by a tenant on their RentCard."""
    __tablename__ = 'tenant_references'

    id = db.Column(db.Integer, primary_key=True)
    tenant_id = db.Column(db.Integer, db.ForeignKey('tenant_profiles.id', ondelete='CASCADE'),
                          nullable=False, index=True)

    # Contact info
    name = db.Column(db.String(255), nullable=False)
    relationship = db.Column(db.String(50), nullable=False)  # see REFERENCE_RELATIONSHIPS
    email = db.Column(db.String(255), nullable=False)
    phone = db.Column(db.String(50), nullable=False)
    notes = db.Column(db.Text)

    # Verification status (set by the server only)
    is_verified = db.Column(db.Boolean, default=False, nullable=False)
    verification_date = db.Column(db.DateTime)

    # Timestamps
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    verifications = db.relationship('ReferenceVerification', backref='reference', lazy='dynamic',
                                    cascade='all, delete-orphan',
                                    order_by='ReferenceVerification.created_at.desc()')

    def mark_verified(self):
        self.is_verified = True
        self.verification_date = datetime.utcnow()

    def latest_feedback(self):
        """Most recent completed verification, if any."""
        return self.verifications.filter_by(status='completed').first()

    def to_dict(self, include_feedback=False):
        result = {
            'id': self.id,
            'tenantId': self.tenant_id,
            'name': self.name,
            'relationship': self.relationship,
            'email': self.email,
            'phone': self.phone,
            'notes': self.notes,
            'isVerified': bool(self.is_verified),
            'verificationDate': isoformat(self.verification_date),
        }
        if include_feedback:
            feedback = self.latest_feedback()
            result['feedback'] = feedback.feedback_dict() if feedback else None
        return result


class ReferenceVerification(db.Model):
    """One-time verification link sent to a reference."""
    __tablename__ = 'reference_verifications'

    id = db.Column(db.Integer, primary_key=True)
    reference_id = db.Column(db.Integer, db.ForeignKey('tenant_references.id', ondelete='CASCADE'),
                             nullable=False, index=True)

    # Secure token for URL
    token = db.Column(db.String(64), unique=True, nullable=False, index=True)

    # Status: pending, completed, expired
    status = db.Column(db.String(20), default='pending', nullable=False)

    # Timestamps
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    expires_at = db.Column(db.DateTime, nullable=False)
    completed_at = db.Column(db.DateTime)
    email_sent_at = db.Column(db.DateTime)

    # Feedback submitted by the reference
    rating = db.Column(db.String(20))  # excellent, good, fair, poor
    comments = db.Column(db.Text)

    def is_expired(self, now=None):
        return (now or datetime.utcnow()) > self.expires_at

    def feedback_dict(self):
        return {
            'rating': self.rating,
            'comments': self.comments,
            'submittedAt': isoformat(self.completed_at),
        }

    def to_dict(self):
        return {
            'id': self.id,
            'referenceId': self.reference_id,
            'status': self.status,
            'createdAt': isoformat(self.created_at),
            'expiresAt': isoformat(self.expires_at),
            'completedAt': isoformat(self.completed_at),
            'emailSentAt': isoformat(self.email_sent_at),
        }
