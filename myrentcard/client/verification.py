"""
Reference verification flow as seen by the person giving the reference.

The flow validates the link once, shows the read-only reference details with a
rating/comments form, and submits the feedback. It is a small state machine:

    loading -> error | already_verified | form
    form -> submitting -> success | form

``error``, ``already_verified`` and ``success`` are terminal; the only action
they offer is closing the window.
"""
import logging
from myrentcard.client.errors import ApiError, FlowStateError
from myrentcard.client.notifications import Notifier
from myrentcard.utils.constants import (
    VERIFICATION_RATINGS, DEFAULT_VERIFICATION_RATING, MAX_VERIFICATION_COMMENT_LENGTH,
    relationship_label, rating_label
)

logger = logging.getLogger(__name__)

# Flow states
LOADING = 'loading'
ERROR = 'error'
ALREADY_VERIFIED_STATE = 'already_verified'
FORM = 'form'
SUBMITTING = 'submitting'
SUCCESS = 'success'

TERMINAL_STATES = (ERROR, ALREADY_VERIFIED_STATE, SUCCESS)
CLOSE_WINDOW = 'close_window'

# Error codes returned by the verification endpoints
INVALID_TOKEN = 'INVALID_TOKEN'
EXPIRED_TOKEN = 'EXPIRED_TOKEN'
ALREADY_VERIFIED = 'ALREADY_VERIFIED'
TOKEN_ERROR_CODES = (INVALID_TOKEN, EXPIRED_TOKEN, ALREADY_VERIFIED)

DEFAULT_VALIDATION_ERROR = 'Invalid or expired verification link'
DEFAULT_SUBMIT_ERROR = 'Failed to submit verification'

EXPIRED_NOTE = ('Verification links expire after 24 hours for security reasons. '
                'Please contact the tenant to request a new verification link.')
ALREADY_VERIFIED_NOTE = 'You have already verified this reference. No further action is needed.'


def classify_error(error):
    """
    Map a failed validation to EXPIRED_TOKEN, ALREADY_VERIFIED or INVALID_TOKEN.
    The structured ``code`` wins; older servers only send a message, so fall
    back to looking for "expired" and then "already verified" in it.
    """
    code = getattr(error, 'code', None)
    if code in TOKEN_ERROR_CODES:
        return code

    message = (getattr(error, 'message', None) or str(error) or '').lower()
    if 'expired' in message:
        return EXPIRED_TOKEN
    if 'already verified' in message:
        return ALREADY_VERIFIED
    return INVALID_TOKEN


def tenant_name_or_default(name):
    return name or 'the tenant'


class ProgressTracker:
    """Cosmetic progress for the validation request: 10% steps up to 90%, then 100%."""

    STEP = 10
    CEILING = 90

    def __init__(self, on_change=None):
        self.value = 0
        self.on_change = on_change

    def _set(self, value):
        self.value = value
        if self.on_change is not None:
            self.on_change(value)

    def advance(self):
        if self.value < self.CEILING:
            self._set(min(self.value + self.STEP, self.CEILING))
        return self.value

    def complete(self):
        self._set(100)
        return self.value

    def reset(self):
        self._set(0)


class TokenValidator:
    """Validates a verification link with a single GET."""

    def __init__(self, client, progress=None):
        self.client = client
        self.progress = progress if progress is not None else ProgressTracker()

    @staticmethod
    def validate_path(token):
        return f"/api/tenant-references/verify/validate/{token}"

    def validate(self, token):
        """Reference details for the token. Raises ApiError (or NetworkError) on failure."""
        if not token:
            raise ValueError('A verification token is required')

        self.progress.advance()
        try:
            return self.client.get(self.validate_path(token))
        finally:
            self.progress.complete()


class VerificationForm:
    """Rating and comments for one reference; the reference fields are read-only."""

    def __init__(self, reference):
        self._reference = dict(reference)
        self.rating = DEFAULT_VERIFICATION_RATING
        self.comments = ''
        self.errors = {}

    @property
    def reference_id(self):
        return self._reference.get('id')

    @property
    def reference_name(self):
        return self._reference.get('name')

    @property
    def relationship(self):
        return self._reference.get('relationship')

    @property
    def relationship_label(self):
        return relationship_label(self.relationship)

    @property
    def tenant_name(self):
        return self._reference.get('tenantName')

    @property
    def rating_label(self):
        return rating_label(self.rating)

    @staticmethod
    def rating_options():
        return list(VERIFICATION_RATINGS.items())

    def validate(self):
        """Populate ``errors``; returns True when the form can be submitted."""
        errors = {}
        if self.rating not in VERIFICATION_RATINGS:
            errors['rating'] = 'Please select a rating'

        comments = self.comments if isinstance(self.comments, str) else ''
        if not comments.strip():
            errors['comments'] = 'Please provide some comments'
        elif len(comments) > MAX_VERIFICATION_COMMENT_LENGTH:
            errors['comments'] = 'Comments must be less than 500 characters'

        self.errors = errors
        return not errors

    def to_payload(self):
        return {
            'referenceId': self.reference_id,
            'rating': self.rating,
            'comments': self.comments,
        }


class VerificationFlow:
    """
    Drives one verification page for one token.

    ``start()`` validates the link and leaves ``loading`` exactly once.
    ``submit()`` validates input locally, then posts it; a failed post returns
    to the form so the reference can try again.
    """

    def __init__(self, client, token, notifier=None, progress=None):
        self.client = client
        self.token = token
        self.notifier = notifier if notifier is not None else Notifier()
        self.validator = TokenValidator(client, progress)

        self.state = LOADING
        self.reference = None
        self.form = None
        self.error_code = None
        self.error_message = None
        self.tenant_name = None
        self.is_submitting = False

    @property
    def progress(self):
        return self.validator.progress.value

    @property
    def is_terminal(self):
        return self.state in TERMINAL_STATES

    @property
    def actions(self):
        return [CLOSE_WINDOW] if self.is_terminal else []

    @staticmethod
    def submit_path(token):
        return f"/api/tenant-references/verify/submit/{token}"

    def start(self):
        """Validate the token and leave ``loading``. Without a token nothing happens."""
        if self.state != LOADING:
            raise FlowStateError(f"Verification already started (state: {self.state})")
        if not self.token:
            return self.state

        try:
            data = self.validator.validate(self.token)
        except ApiError as e:
            self.error_code = classify_error(e)
            self.error_message = e.message or DEFAULT_VALIDATION_ERROR
            logger.warning("Verification link rejected (%s): %s", self.error_code, self.error_message)
            self.notifier.error('Verification Error', self.error_message)
            self.state = ALREADY_VERIFIED_STATE if self.error_code == ALREADY_VERIFIED else ERROR
            return self.state

        self.reference = data or {}
        self.tenant_name = self.reference.get('tenantName')
        self.notifier.success('Verification Link Valid', self.success_message)
        if self.reference.get('isVerified'):
            self.state = ALREADY_VERIFIED_STATE
            return self.state

        self.form = VerificationForm(self.reference)
        self.state = FORM
        return self.state

    def submit(self, rating=None, comments=None):
        """
        Send the feedback once. Returns True on success.
        Invalid input never reaches the network; ``form.errors`` says why.
        """
        if self.is_submitting:
            return False
        if self.state != FORM or self.form is None:
            raise FlowStateError(f"Cannot submit in state: {self.state}")

        if rating is not None:
            self.form.rating = rating
        if comments is not None:
            self.form.comments = comments
        if not self.form.validate():
            return False

        self.is_submitting = True
        self.state = SUBMITTING
        self.notifier.success('Submitting Verification', 'Please wait while we process your verification...')
        try:
            result = self.client.post(self.submit_path(self.token), self.form.to_payload())
        except ApiError as e:
            message = e.message or DEFAULT_SUBMIT_ERROR
            logger.error("Verification submit failed: %s", message)
            self.notifier.error('Verification Error', message)
            self.state = FORM
            return False
        finally:
            self.is_submitting = False

        if result and result.get('tenantName'):
            self.tenant_name = result['tenantName']
        self.form = None
        self.state = SUCCESS
        self.notifier.success('Verification Successful', self.success_message)
        return True

    @property
    def success_message(self):
        return f"Thank you for verifying your reference for {tenant_name_or_default(self.tenant_name)}."

    @property
    def title(self):
        if self.state == LOADING:
            return 'Validating Verification Link'
        if self.state == ERROR:
            return 'Verification Error'
        if self.state == ALREADY_VERIFIED_STATE:
            return 'Already Verified'
        if self.state == SUCCESS:
            return 'Verification Successful'
        return 'Reference Verification'

    @property
    def note(self):
        """Extra explanation shown in terminal panels."""
        if self.state == ERROR and self.error_code == EXPIRED_TOKEN:
            return EXPIRED_NOTE
        if self.state == ALREADY_VERIFIED_STATE:
            return ALREADY_VERIFIED_NOTE
        if self.state == ERROR:
            return 'If you believe this is an error, please contact the tenant who sent you this verification request.'
        if self.state == SUCCESS:
            return f"{self.success_message} Your feedback has been recorded."
        return None
