"""
Email sending services using Resend API.
"""
import logging
import requests

logger = logging.getLogger(__name__)

RESEND_URL = "https://api.resend.com/emails"


def _send_via_resend(to_email, subject, html_content, text_content, resend_api_key, from_email):
    try:
        response = requests.post(
            RESEND_URL,
            headers={
                "Authorization": f"Bearer {resend_api_key}",
                "Content-Type": "application/json"
            },
            json={
                "from": from_email,
                "to": [to_email],
                "subject": subject,
                "html": html_content,
                "text": text_content
            },
            timeout=30
        )

        if response.status_code == 200:
            return {'success': True, 'message_id': response.json().get('id')}
        logger.error("Resend rejected email to %s: %s", to_email, response.text)
        return {'success': False, 'error': response.text}

    except requests.RequestException as e:
        logger.error("Resend request failed for %s: %s", to_email, e)
        return {'success': False, 'error': str(e)}


def send_reference_verification_email(reference, tenant_name, verification_url, resend_api_key,
                                      from_email, expires_in_hours=24):
    """Send the one-time verification link to a reference."""

    if not reference.email:
        return {'success': False, 'error': 'Reference email not available'}

    if not resend_api_key:
        # Development preview: no provider configured, surface the link in the log
        logger.info("Resend not configured; verification link for reference %s: %s",
                    reference.id, verification_url)
        return {'success': True, 'skipped': True}

    subject = f"Reference Verification Request from {tenant_name}"

    html_content = f"""
    <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
        <h2 style="color: #4a6ee0;">RentCard Reference Verification</h2>

        <p>Hello {reference.name},</p>

        <p>{tenant_name} has listed you as a reference on their RentCard profile.</p>

        <p>Please take a moment to verify this reference by clicking the button below:</p>

        <p style="text-align: center; margin: 30px 0;">
            <a href="{verification_url}" style="background-color: #4a6ee0; color: white; padding: 12px 24px; text-decoration: none; border-radius: 4px; font-weight: bold;">Verify Reference</a>
        </p>

        <p style="color: #666; font-size: 14px;">This verification link will expire in {expires_in_hours} hours.</p>

        <p style="color: #666; font-size: 14px;">If you did not expect this email, please disregard it.</p>

        <hr style="border: none; border-top: 1px solid #eee; margin: 30px 0;">

        <p style="color: #999; font-size: 12px;">This is an automated email from MyRentCard. Please do not reply.</p>
    </div>
    """

    text_content = (
        f"Hello {reference.name},\n\n"
        f"{tenant_name} has listed you as a reference on their RentCard profile.\n\n"
        f"Please verify this reference by visiting the following link:\n{verification_url}\n\n"
        f"This verification link will expire in {expires_in_hours} hours.\n\n"
        "If you did not expect this email, please disregard it.\n\n"
        "- The MyRentCard Team"
    )

    return _send_via_resend(reference.email, subject, html_content, text_content,
                            resend_api_key, from_email)


def send_reference_verified_email(reference, tenant_user, resend_api_key, from_email):
    """Let the tenant know one of their references has responded."""

    if not resend_api_key:
        return {'success': False, 'error': 'Resend API key not configured'}

    if not tenant_user or not tenant_user.email:
        return {'success': False, 'error': 'Tenant email not available'}

    subject = f"{reference.name} verified your reference"

    html_content = f"""
    <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
        <h2 style="color: #4a6ee0;">Reference Verified</h2>

        <p>Hi {tenant_user.first_name},</p>

        <p>{reference.name} has completed the verification of your reference. It now shows as verified on your RentCard.</p>

        <hr style="border: none; border-top: 1px solid #eee; margin: 30px 0;">

        <p style="color: #999; font-size: 12px;">This email was sent by MyRentCard.</p>
    </div>
    """

    text_content = (
        f"Hi {tenant_user.first_name},\n\n"
        f"{reference.name} has completed the verification of your reference. "
        "It now shows as verified on your RentCard.\n\n- The MyRentCard Team"
    )

    return _send_via_resend(tenant_user.email, subject, html_content, text_content,
                            resend_api_key, from_email)
