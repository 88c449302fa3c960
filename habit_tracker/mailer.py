import logging
import smtplib
from email.message import EmailMessage
from flask import current_app
from markupsafe import escape

logger = logging.getLogger(__name__)


def send_mail(to, subject, html):
    """Send an HTML e-mail. Returns True when the message was handed off.

    Without MAIL_SERVER configured the message is only logged. Failures are
    logged and reported as False; callers never see the exception.
    """
    config = current_app.config
    if not config.get("MAIL_SERVER"):
        logger.info(f"Mail delivery disabled, would send '{subject}' to {to}")
        return True

    message = EmailMessage()
    message["From"] = config["MAIL_SENDER"]
    message["To"] = to
    message["Subject"] = subject
    message.set_content("This message requires an HTML capable mail client.")
    message.add_alternative(html, subtype="html")
    try:
        with smtplib.SMTP(config["MAIL_SERVER"], config["MAIL_PORT"], timeout=10) as smtp:
            if config.get("MAIL_USE_TLS"):
                smtp.starttls()
            if config.get("MAIL_USERNAME"):
                smtp.login(config["MAIL_USERNAME"], config["MAIL_PASSWORD"])
            smtp.send_message(message)
        logger.info(f"Mail '{subject}' sent to {to}")
        return True
    except (smtplib.SMTPException, OSError) as e:
        logger.error(f"Failed to send mail to {to}: {str(e)}")
        return False


def send_reminder_mail(email, habit_name):
    html = f"""
    <div style="font-family: Arial, sans-serif; max-width: 500px; margin: 40px auto; text-align: center;">
      <h2 style="color: #2563eb;">Reminder for Task</h2>
      <p style="font-size: 18px;">Your habit <strong>{escape(habit_name)}</strong> is not done yet.<br>Kindly complete it today.</p>
      <p style="font-size: 14px; color: #666;">If you didn't set this habit, you can ignore this email.</p>
    </div>
    """
    return send_mail(email, "Habit reminder - Habit Tracker", html)


def send_verification_mail(email, otp):
    html = f"<h1>Your verification OTP for Habit Tracker is {otp}</h1>"
    return send_mail(email, "Verify your email - Habit Tracker", html)
