"""
Tenant-side contact book and message templates.
"""
import json
from datetime import datetime
from myrentcard.models.base import db, isoformat


class RecipientContact(db.Model):
    """Landlord or agent a tenant shares their RentCard with."""
    __tablename__ = 'recipient_contacts'

    id = db.Column(db.Integer, primary_key=True)
    tenant_id = db.Column(db.Integer, db.ForeignKey('tenant_profiles.id', ondelete='CASCADE'),
                          nullable=False, index=True)

    name = db.Column(db.String(255), nullable=False)
    email = db.Column(db.String(255))
    phone = db.Column(db.String(50))
    company = db.Column(db.String(255))
    contact_type = db.Column(db.String(50), default='landlord', nullable=False)
    property_address = db.Column(db.String(500))
    notes = db.Column(db.Text)
    is_favorite = db.Column(db.Boolean, default=False, nullable=False)

    # Usage
    contact_count = db.Column(db.Integer, default=0, nullable=False)
    last_contacted_at = db.Column(db.DateTime)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'tenantId': self.tenant_id,
            'name': self.name,
            'email': self.email,
            'phone': self.phone,
            'company': self.company,
            'contactType': self.contact_type,
            'propertyAddress': self.property_address,
            'notes': self.notes,
            'isFavorite': bool(self.is_favorite),
            'contactCount': self.contact_count or 0,
            'lastContactedAt': isoformat(self.last_contacted_at),
            'createdAt': isoformat(self.created_at),
            'updatedAt': isoformat(self.updated_at),
        }


class TenantMessageTemplate(db.Model):
    """Reusable message a tenant sends alongside a shared RentCard."""
    __tablename__ = 'tenant_message_templates'

    id = db.Column(db.Integer, primary_key=True)
    tenant_id = db.Column(db.Integer, db.ForeignKey('tenant_profiles.id', ondelete='CASCADE'),
                          nullable=False, index=True)

    template_name = db.Column(db.String(255), nullable=False)
    subject = db.Column(db.String(255))
    body = db.Column(db.Text, nullable=False)
    category = db.Column(db.String(50), default='custom', nullable=False)
    variables = db.Column(db.Text)  # JSON array
    is_default = db.Column(db.Boolean, default=False, nullable=False)
    usage_count = db.Column(db.Integer, default=0, nullable=False)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'tenantId': self.tenant_id,
            'templateName': self.template_name,
            'subject': self.subject,
            'body': self.body,
            'category': self.category,
            'variables': json.loads(self.variables) if self.variables else [],
            'isDefault': bool(self.is_default),
            'usageCount': self.usage_count or 0,
            'createdAt': isoformat(self.created_at),
            'updatedAt': isoformat(self.updated_at),
        }
