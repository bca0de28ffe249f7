import smtplib
import os
from datetime import datetime
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from jinja2 import Environment, FileSystemLoader, select_autoescape
from loguru import logger
from app.core.config import settings

TEMPLATE_DIR = os.path.join(os.path.dirname(os.path.dirname(__file__)), "templates", "email")

_env = Environment(
    loader=FileSystemLoader(TEMPLATE_DIR),
    autoescape=select_autoescape(["html"]),
)


# Helper to get template
def get_template(template_name):
    return _env.get_template(template_name)


# Helper to send email via SMTP
def send_email_via_smtp(to_email, subject, html_content):
    # Only HOST is required; user/pass are optional (Mailpit)
    if not settings.SMTP_HOST:
        logger.warning(f"SMTP host not configured. Skipping email to {to_email}.")
        return

    try:
        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = f"{settings.EMAILS_FROM_NAME} <{settings.EMAILS_FROM_EMAIL}>"
        msg["To"] = to_email
        msg.attach(MIMEText(html_content, "html"))

        logger.info(f"Connecting to SMTP: {settings.SMTP_HOST}:{settings.SMTP_PORT}")

        with smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT) as server:
            server.ehlo()

            # TLS only on submission ports; Mailpit on 1025 runs plain
            if settings.SMTP_PORT in [587, 2525]:
                server.starttls()
                server.ehlo()

            if settings.SMTP_USER and settings.SMTP_PASSWORD:
                server.login(settings.SMTP_USER, settings.SMTP_PASSWORD)

            server.sendmail(settings.EMAILS_FROM_EMAIL, to_email, msg.as_string())

        logger.success(f"Email sent to {to_email}")
    except Exception as e:
        logger.error(f"Failed to send email to {to_email}: {e}")


# ---------------------------------------------------------
# 1. WELCOME EMAIL (after signup)
# ---------------------------------------------------------
def send_welcome_email(data: dict):
    """data requires: name, email"""
    try:
        template = get_template("welcome.html")
        html_content = template.render(
            name=data.get("name"),
            email=data.get("email"),
            login_url=f"{settings.FRONTEND_URL}/login",
        )
        send_email_via_smtp(data.get("email"), "Welcome to Hostel Management", html_content)
    except Exception as e:
        logger.error(f"Error preparing welcome email: {e}")


# ---------------------------------------------------------
# 2. REGISTRATION REVIEWED (approved / rejected)
# ---------------------------------------------------------
def send_registration_reviewed_email(data: dict):
    """data requires: name, email, status; review_notes optional"""
    try:
        approved = data.get("status") == "approved"
        template = get_template("registration_approved.html" if approved else "registration_rejected.html")
        html_content = template.render(
            name=data.get("name"),
            review_notes=data.get("review_notes"),
            review_date=datetime.now().strftime("%d-%m-%Y"),
            dashboard_url=f"{settings.FRONTEND_URL}/dashboard",
        )
        subject = (
            "Your hostel registration has been approved"
            if approved else "Action Required: hostel registration returned"
        )
        send_email_via_smtp(data.get("email"), subject, html_content)
    except Exception as e:
        logger.error(f"Error preparing registration review email: {e}")


# ---------------------------------------------------------
# 3. ROOM ASSIGNED
# ---------------------------------------------------------
def send_room_assigned_email(data: dict):
    """data requires: name, email, room_number, floor"""
    try:
        template = get_template("room_assigned.html")
        html_content = template.render(
            name=data.get("name"),
            room_number=data.get("room_number"),
            floor=data.get("floor"),
            dashboard_url=f"{settings.FRONTEND_URL}/dashboard",
        )
        send_email_via_smtp(data.get("email"), f"Room {data.get('room_number')} assigned", html_content)
    except Exception as e:
        logger.error(f"Error preparing room assignment email: {e}")
