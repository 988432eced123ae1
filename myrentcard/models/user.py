"""
User and profile models for authentication and tenant/landlord ownership.
"""
from datetime import datetime
from flask_login import UserMixin
from werkzeug.security import generate_password_hash, check_password_hash
from myrentcard.models.base import db, isoformat


class User(UserMixin, db.Model):
    """Account for a tenant or a landlord."""
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    user_type = db.Column(db.String(20), nullable=False)  # tenant, landlord
    first_name = db.Column(db.String(100), nullable=False)
    last_name = db.Column(db.String(100), nullable=False)
    phone = db.Column(db.String(50))

    # Timestamps
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    last_login_at = db.Column(db.DateTime)

    # Relationships
    tenant_profile = db.relationship('TenantProfile', backref='user', uselist=False,
                                     cascade='all, delete-orphan')
    landlord_profile = db.relationship('LandlordProfile', backref='user', uselist=False,
                                       cascade='all, delete-orphan')

    def set_password(self, password):
        self.password_hash = generate_password_hash(password, method='pbkdf2:sha256')

    def check_password(self, password):
        return check_password_hash(self.password_hash, password)

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}"

    @property
    def is_tenant(self):
        return self.user_type == 'tenant'

    @property
    def is_landlord(self):
        return self.user_type == 'landlord'

    def to_dict(self):
        result = {
            'id': self.id,
            'email': self.email,
            'userType': self.user_type,
            'firstName': self.first_name,
            'lastName': self.last_name,
            'phone': self.phone,
            'createdAt': isoformat(self.created_at),
        }
        if self.tenant_profile:
            result['tenantId'] = self.tenant_profile.id
        if self.landlord_profile:
            result['landlordId'] = self.landlord_profile.id
        return result


class TenantProfile(db.Model):
    """RentCard owner profile; references, contacts and templates hang off it."""
    __tablename__ = 'tenant_profiles'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'),
                        nullable=False, unique=True, index=True)

    references = db.relationship('TenantReference', backref='tenant', lazy='dynamic',
                                 cascade='all, delete-orphan')

    @property
    def display_name(self):
        return self.user.full_name if self.user else 'the tenant'

    def to_dict(self):
        return {
            'id': self.id,
            'userId': self.user_id,
            'name': self.display_name,
        }


class LandlordProfile(db.Model):
    """Landlord profile; owns communication templates and logs."""
    __tablename__ = 'landlord_profiles'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'),
                        nullable=False, unique=True, index=True)
    company_name = db.Column(db.String(255))

    def to_dict(self):
        return {
            'id': self.id,
            'userId': self.user_id,
            'companyName': self.company_name,
        }
