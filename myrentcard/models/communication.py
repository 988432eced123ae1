"""
Landlord-to-tenant communication: templates, logs, preferences and blocks.
"""
import json
from datetime import datetime
from myrentcard.models.base import db, generate_uuid, isoformat


class CommunicationTemplate(db.Model):
    """Landlord message template."""
    __tablename__ = 'communication_templates'

    id = db.Column(db.Integer, primary_key=True)
    landlord_id = db.Column(db.Integer, db.ForeignKey('landlord_profiles.id', ondelete='CASCADE'),
                            nullable=False, index=True)

    title = db.Column(db.String(255), nullable=False)
    subject = db.Column(db.String(255))
    body = db.Column(db.Text, nullable=False)
    category = db.Column(db.String(50), default='general', nullable=False)
    tags = db.Column(db.Text)  # JSON array
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    usage_count = db.Column(db.Integer, default=0, nullable=False)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'landlordId': self.landlord_id,
            'title': self.title,
            'subject': self.subject,
            'body': self.body,
            'category': self.category,
            'tags': json.loads(self.tags) if self.tags else [],
            'isActive': bool(self.is_active),
            'usageCount': self.usage_count or 0,
            'createdAt': isoformat(self.created_at),
            'updatedAt': isoformat(self.updated_at),
        }


class CommunicationLog(db.Model):
    """Record of a message a landlord sent to a tenant."""
    __tablename__ = 'communication_logs'

    id = db.Column(db.Integer, primary_key=True)
    landlord_id = db.Column(db.Integer, db.ForeignKey('landlord_profiles.id', ondelete='CASCADE'),
                            nullable=False, index=True)
    tenant_id = db.Column(db.Integer, db.ForeignKey('tenant_profiles.id', ondelete='CASCADE'),
                          nullable=False, index=True)
    property_id = db.Column(db.Integer, index=True)
    interest_id = db.Column(db.Integer)
    template_id = db.Column(db.Integer, db.ForeignKey('communication_templates.id', ondelete='SET NULL'))

    communication_type = db.Column(db.String(20), nullable=False)  # email, phone, sms
    subject = db.Column(db.String(255))
    message = db.Column(db.Text, nullable=False)
    status = db.Column(db.String(20), default='sent', nullable=False)
    thread_id = db.Column(db.String(36), default=generate_uuid, index=True)
    # "metadata" is reserved on declarative models
    extra_data = db.Column('metadata', db.Text)  # JSON object

    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)

    def to_dict(self):
        return {
            'id': self.id,
            'landlordId': self.landlord_id,
            'tenantId': self.tenant_id,
            'propertyId': self.property_id,
            'interestId': self.interest_id,
            'templateId': self.template_id,
            'communicationType': self.communication_type,
            'subject': self.subject,
            'message': self.message,
            'status': self.status,
            'threadId': self.thread_id,
            'metadata': json.loads(self.extra_data) if self.extra_data else {},
            'createdAt': isoformat(self.created_at),
        }


class TenantContactPreferences(db.Model):
    """How (and whether) landlords may reach a tenant."""
    __tablename__ = 'tenant_contact_preferences'

    id = db.Column(db.Integer, primary_key=True)
    tenant_id = db.Column(db.Integer, db.ForeignKey('tenant_profiles.id', ondelete='CASCADE'),
                          nullable=False, unique=True, index=True)

    allow_landlord_contact = db.Column(db.Boolean, default=True, nullable=False)
    allow_email = db.Column(db.Boolean, default=True, nullable=False)
    allow_phone = db.Column(db.Boolean, default=True, nullable=False)
    allow_sms = db.Column(db.Boolean, default=True, nullable=False)
    preferred_method = db.Column(db.String(20), default='email')

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def allows(self, communication_type):
        return {
            'email': self.allow_email,
            'phone': self.allow_phone,
            'sms': self.allow_sms,
        }.get(communication_type, False)

    def to_dict(self):
        return {
            'id': self.id,
            'tenantId': self.tenant_id,
            'allowLandlordContact': bool(self.allow_landlord_contact),
            'allowEmail': bool(self.allow_email),
            'allowPhone': bool(self.allow_phone),
            'allowSms': bool(self.allow_sms),
            'preferredMethod': self.preferred_method,
            'updatedAt': isoformat(self.updated_at),
        }


class TenantBlockedContact(db.Model):
    """Landlord, e-mail or phone number a tenant has blocked."""
    __tablename__ = 'tenant_blocked_contacts'

    id = db.Column(db.Integer, primary_key=True)
    tenant_id = db.Column(db.Integer, db.ForeignKey('tenant_profiles.id', ondelete='CASCADE'),
                          nullable=False, index=True)
    landlord_id = db.Column(db.Integer, db.ForeignKey('landlord_profiles.id', ondelete='CASCADE'))
    blocked_email = db.Column(db.String(255))
    blocked_phone = db.Column(db.String(50))

    block_type = db.Column(db.String(20), default='permanent', nullable=False)  # permanent, temporary
    blocked_until = db.Column(db.DateTime)
    reason = db.Column(db.Text)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def is_expired(self, now=None):
        if self.block_type != 'temporary' or not self.blocked_until:
            return False
        return (now or datetime.utcnow()) > self.blocked_until

    def to_dict(self):
        return {
            'id': self.id,
            'tenantId': self.tenant_id,
            'landlordId': self.landlord_id,
            'blockedEmail': self.blocked_email,
            'blockedPhone': self.blocked_phone,
            'blockType': self.block_type,
            'blockedUntil': isoformat(self.blocked_until),
            'reason': self.reason,
            'createdAt': isoformat(self.created_at),
        }
