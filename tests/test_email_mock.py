import pytest
from unittest.mock import patch, MagicMock

from app.core.config import settings
from app.services.email_service import (
    get_template,
    send_registration_reviewed_email,
    send_room_assigned_email,
    send_welcome_email,
)


@pytest.fixture
def smtp_configured(monkeypatch):
    monkeypatch.setattr(settings, "SMTP_HOST", "smtp.example.com")
    monkeypatch.setattr(settings, "SMTP_PORT", 2525)
    monkeypatch.setattr(settings, "SMTP_USER", "mailer")
    monkeypatch.setattr(settings, "SMTP_PASSWORD", "secret")


@patch("app.services.email_service.smtplib.SMTP")
def test_send_welcome_email(mock_smtp, smtp_configured):
    mock_server_instance = MagicMock()
    mock_smtp.return_value.__enter__.return_value = mock_server_instance

    send_welcome_email({"name": "Test Student", "email": "test@example.com"})

    mock_smtp.assert_called_with("smtp.example.com", 2525)
    mock_server_instance.starttls.assert_called()
    mock_server_instance.login.assert_called_with("mailer", "secret")
    recipient = mock_server_instance.sendmail.call_args[0][1]
    assert recipient == "test@example.com"


@patch("app.services.email_service.smtplib.SMTP")
def test_send_rejection_email_includes_notes(mock_smtp, smtp_configured):
    mock_server_instance = MagicMock()
    mock_smtp.return_value.__enter__.return_value = mock_server_instance

    send_registration_reviewed_email({
        "name": "John Smith",
        "email": "john@example.com",
        "status": "rejected",
        "review_notes": "Photo missing",
    })

    recipient = mock_server_instance.sendmail.call_args[0][1]
    assert recipient == "john@example.com"


@patch("app.services.email_service.smtplib.SMTP")
def test_send_room_assigned_email(mock_smtp, smtp_configured):
    mock_server_instance = MagicMock()
    mock_smtp.return_value.__enter__.return_value = mock_server_instance

    send_room_assigned_email({"name": "Jane", "email": "jane@example.com", "room_number": "204", "floor": "2"})

    mock_server_instance.sendmail.assert_called()
    assert mock_server_instance.sendmail.call_args[0][1] == "jane@example.com"


@patch("app.services.email_service.smtplib.SMTP")
def test_no_smtp_host_skips_sending(mock_smtp, monkeypatch):
    monkeypatch.setattr(settings, "SMTP_HOST", None)
    send_welcome_email({"name": "Nobody", "email": "nobody@example.com"})
    mock_smtp.assert_not_called()


@patch("app.services.email_service.smtplib.SMTP")
def test_smtp_failure_is_swallowed(mock_smtp, smtp_configured):
    mock_smtp.side_effect = ConnectionRefusedError("down")
    # Must not raise: emails run as background tasks after the response
    send_welcome_email({"name": "Test", "email": "test@example.com"})


def test_templates_render():
    approved = get_template("registration_approved.html").render(
        name="Ama", review_notes=None, review_date="01-01-2026", dashboard_url="http://x/dashboard"
    )
    assert "Ama" in approved and "approved" in approved

    rejected = get_template("registration_rejected.html").render(
        name="<b>Kofi</b>", review_notes="Photo missing", review_date="01-01-2026", dashboard_url="http://x"
    )
    assert "Photo missing" in rejected
    assert "&lt;b&gt;Kofi&lt;/b&gt;" in rejected

    room = get_template("room_assigned.html").render(name="Yaw", room_number="101", floor="1", dashboard_url="http://x")
    assert "101" in room
