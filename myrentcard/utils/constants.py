"""
Constants used throughout the application.
"""
REFERENCE_RELATIONSHIPS = {
    'previous_landlord': 'Previous Landlord',
    'current_landlord': 'Current Landlord',
    'employer': 'Employer',
    'personal': 'Personal Reference',
    'professional': 'Professional Reference',
    'roommate': 'Roommate',
    'family': 'Family Member',
}

VERIFICATION_RATINGS = {
    'excellent': 'Excellent - Highly recommend',
    'good': 'Good - Recommend',
    'fair': 'Fair - Neutral recommendation',
    'poor': 'Poor - Would not recommend',
}

DEFAULT_VERIFICATION_RATING = 'good'
MAX_VERIFICATION_COMMENT_LENGTH = 500

CONTACT_TYPES = ('landlord', 'property_manager', 'real_estate_agent', 'other')

MESSAGE_TEMPLATE_CATEGORIES = ('initial_inquiry', 'follow_up', 'application', 'custom')

COMMUNICATION_TYPES = ('email', 'phone', 'sms')
COMMUNICATION_STATUSES = ('sent', 'delivered', 'failed', 'read')
DEFAULT_COMMUNICATION_TEMPLATE_CATEGORY = 'general'

BLOCK_TYPES = ('permanent', 'temporary')

USER_TYPES = ('tenant', 'landlord')


def relationship_label(relationship):
    """Human label for a reference relationship; unknown values pass through."""
    return REFERENCE_RELATIONSHIPS.get(relationship, relationship)


def rating_label(rating):
    """Human label for a verification rating; unknown values pass through."""
    return VERIFICATION_RATINGS.get(rating, rating)
