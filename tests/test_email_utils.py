import smtplib
import unittest
from unittest import mock

from bodyshop.core.config import Settings
from bodyshop.utils.email_utils import send_booking_status_email

BOOKING = {
    "id": 7,
    "booking_date": "2030-05-06",
    "start_time": "09:00",
    "end_time": "10:15",
    "status": "in_progress",
}


class TestBookingStatusEmail(unittest.TestCase):

    def settings(self, **overrides):
        return Settings(JWT_SECRET_KEY="test-secret", **overrides)

    def test_skipped_without_smtp(self):
        with mock.patch("bodyshop.utils.email_utils.send_email") as send:
            self.assertFalse(send_booking_status_email(self.settings(), "jane@example.com", BOOKING))
        send.assert_not_called()

    def test_sends_status_summary(self):
        settings = self.settings(SMTP_SERVER="smtp.example.com", SMTP_USER="shop@example.com")
        with mock.patch("bodyshop.utils.email_utils.send_email") as send:
            self.assertTrue(send_booking_status_email(settings, "jane@example.com", BOOKING))

        _, to_email, subject, body = send.call_args.args
        self.assertEqual(to_email, "jane@example.com")
        self.assertEqual(subject, "Work on your vehicle has started")
        self.assertIn("09:00 - 10:15", body)
        self.assertIn("in progress", body)

    def test_smtp_failure_is_not_raised(self):
        settings = self.settings(SMTP_SERVER="smtp.example.com")
        with mock.patch(
            "bodyshop.utils.email_utils.send_email", side_effect=smtplib.SMTPException("refused")
        ):
            self.assertFalse(send_booking_status_email(settings, "jane@example.com", BOOKING))
