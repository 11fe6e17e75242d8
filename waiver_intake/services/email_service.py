import resend
from flask import render_template, current_app

from waiver_intake.errors import NotificationError


class EmailService:

    AFTERCARE_TEMPLATE = "emails/aftercare.html"
    AFTERCARE_SUBJECT = "Aftercare & Healing Guide — Broken Art Tattoo"
    REVIEW_URL = "https://g.page/r/CTIC7Zd1etmgEBE/review"

    @staticmethod
    def first_name(name):
        """First whitespace-delimited token of the full name, or a generic greeting."""
        parts = (name or "").strip().split()
        return parts[0] if parts else "there"

    @staticmethod
    def send_email(to, subject, html_content):
        """
        Sends one email through Resend.
        Returns the provider message id; raises NotificationError on any failure.
        """
        api_key = current_app.config.get('RESEND_API_KEY')
        if not api_key:
            raise NotificationError("Missing RESEND_API_KEY")

        resend.api_key = api_key

        if isinstance(to, str):
            to = [to]

        params = {
            "from": current_app.config.get('FROM_EMAIL'),
            "to": to,
            "subject": subject,
            "html": html_content,
        }
        reply_to = current_app.config.get('REPLY_TO')
        if reply_to:
            params["reply_to"] = reply_to

        try:
            response = resend.Emails.send(params)
        except Exception as e:
            raise NotificationError(f"Resend error: {e}") from e

        # Resend SDK returns a dict like {'id': '...'} or an object
        if isinstance(response, dict):
            return response.get('id')
        return getattr(response, 'id', None)

    @staticmethod
    def render_aftercare(name=None):
        return render_template(
            EmailService.AFTERCARE_TEMPLATE,
            first_name=EmailService.first_name(name),
            review_url=EmailService.REVIEW_URL,
        )

    @staticmethod
    def send_aftercare_email(to, name=None):
        try:
            html_content = EmailService.render_aftercare(name)
        except Exception as e:
            raise NotificationError(f"Template error: {e}") from e

        message_id = EmailService.send_email(to, EmailService.AFTERCARE_SUBJECT, html_content)
        current_app.logger.info(f"Aftercare email sent to {to} (id={message_id})")
        return message_id
