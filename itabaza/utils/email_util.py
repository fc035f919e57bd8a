# /itabaza/utils/email_util.py
import smtplib
import ssl
from dataclasses import dataclass
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from html import escape
from typing import Optional

from flask import current_app

from itabaza.utils.room_assignment import assign_room, room_key


@dataclass
class EmailResult:
    """Outcome of a single send. Transport errors end up here, not as exceptions."""
    success: bool
    message: str
    sent_to: Optional[str] = None

    def to_dict(self):
        data = {'success': self.success, 'message': self.message}
        if self.sent_to:
            data['sentTo'] = self.sent_to
        return data


def build_venue(appointment: dict) -> dict:
    """Where the consultation happens: the meeting link, or the hospital and room."""
    portal_url = current_app.config.get('VIDEO_CALL_PORTAL_URL')
    if appointment.get('consultation_type') == 'video-call':
        url = portal_url
        if appointment.get('payment_status') and appointment.get('video_call_url'):
            url = appointment['video_call_url']
        return {
            'type': 'Video Call',
            'url': url,
            'location': 'Online Meeting',
        }
    return {
        'type': 'In-Person Visit',
        'url': portal_url,
        'location': current_app.config.get('HOSPITAL_NAME'),
        'room': assign_room(room_key(appointment.get('patient_id'), appointment.get('appointment_date'))),
    }


def _detail_row(label, value, style=''):
    return (
        f'<tr><td style="padding: 8px 0; border-bottom: 1px solid #eee;"><strong>{label}:</strong></td>'
        f'<td style="padding: 8px 0; border-bottom: 1px solid #eee;{style}">{value}</td></tr>'
    )


def build_confirmation_email(patient_name: str, doctor_name: str, appointment: dict):
    """Returns (subject, plain_text, html) for an appointment confirmation."""
    is_video = appointment.get('consultation_type') == 'video-call'
    consultation_text = 'Video Call' if is_video else 'In-Person'
    payment_text = 'Paid' if appointment.get('payment_status') else 'Pending'
    status = appointment.get('status') or 'pending'
    time = appointment.get('appointment_time') or appointment.get('slot_time') or 'To be confirmed'
    problem = appointment.get('problem_description') or 'Not specified'
    venue = build_venue(appointment)
    venue_line = venue['location'] + (f" - {venue['room']}" if venue.get('room') else '')

    subject = f"iTABAZA {consultation_text} Appointment Confirmation"

    intro = f"Your {consultation_text} appointment has been {'confirmed' if status == 'confirmed' else 'received'}."
    if payment_text == 'Pending':
        intro += " It will be confirmed after completing payment."

    text = f"""
    Hello {patient_name},

    {intro}

    Patient: {patient_name}
    Doctor: Dr. {doctor_name}
    Problem Description: {problem}
    Date: {appointment.get('appointment_date')}
    Time: {time}
    Type: {consultation_text}
    Status: {status}
    Venue: {venue_line} ({venue['url']})
    Payment Status: {payment_text}

    Thank you for choosing iTABAZA!
    """

    if is_video:
        instructions = """
        <h4 style="color: #1976d2; margin-top: 0;">Video Call Instructions</h4>
        <ul>
          <li>Ensure you have a stable internet connection</li>
          <li>Find a quiet, well-lit environment</li>
          <li>Have your medical history ready</li>
          <li>Join the call 5 minutes before your appointment time</li>
        </ul>
        """
    else:
        instructions = f"""
        <h4 style="color: #2e7d32; margin-top: 0;">In-Person Visit Instructions</h4>
        <ul>
          <li>Arrive 15 minutes before your appointment time</li>
          <li>Bring your ID and any relevant medical documents</li>
          <li>Your assigned room is: <strong>{escape(venue.get('room') or 'To be assigned')}</strong></li>
        </ul>
        """

    status_color = '#28a745' if status == 'confirmed' else '#ffc107'
    payment_color = '#28a745' if payment_text == 'Paid' else '#ffc107'
    rows = ''.join([
        _detail_row('Patient', escape(patient_name)),
        _detail_row('Doctor', f"Dr. {escape(doctor_name)}"),
        _detail_row('Problem Description', escape(problem)),
        _detail_row('Date', escape(str(appointment.get('appointment_date')))),
        _detail_row('Time', escape(str(time))),
        _detail_row('Type', consultation_text),
        _detail_row('Status', escape(status), f' color: {status_color}; font-weight: bold;'),
        _detail_row(
            'Venue',
            f'{escape(venue_line)}<br><a href="{escape(venue["url"] or "")}">{escape(venue["url"] or "")}</a>',
        ),
        _detail_row('Payment Status', payment_text, f' color: {payment_color}; font-weight: bold;'),
    ])

    html = f"""
    <html>
      <body style="font-family: Helvetica, Arial, sans-serif; color: #333;">
        <h1 style="color: #0077c0;">iTABAZA</h1>
        <h2>Hello, {escape(patient_name)}!</h2>
        <p>{escape(intro)}</p>
        <table style="width: 100%; border-collapse: collapse;">{rows}</table>
        {instructions}
        <p>If you have any questions or need to reschedule, please contact our customer service team.</p>
        <p>Thank you for choosing iTABAZA!</p>
      </body>
    </html>
    """
    return subject, text, html


def _send(recipient_email: str, subject: str, text: str, html: Optional[str] = None) -> EmailResult:
    config = current_app.config
    mail_server = config.get('MAIL_SERVER')
    mail_port = config.get('MAIL_PORT', 587)
    mail_username = config.get('MAIL_USERNAME')
    mail_password = config.get('MAIL_PASSWORD')
    sender_email = config.get('MAIL_DEFAULT_SENDER') or mail_username

    if not all([mail_server, mail_port, mail_username, mail_password]):
        current_app.logger.error("Email server is not configured. Cannot send email.")
        return EmailResult(False, 'Email server is not configured')

    message = MIMEMultipart("alternative")
    message["Subject"] = subject
    message["From"] = sender_email
    message["To"] = recipient_email
    message.attach(MIMEText(text, "plain"))
    if html:
        message.attach(MIMEText(html, "html"))

    try:
        with smtplib.SMTP(mail_server, mail_port, timeout=config.get('MAIL_TIMEOUT', 10)) as server:
            if config.get('MAIL_USE_TLS', True):
                server.starttls(context=ssl.create_default_context())
            server.login(mail_username, mail_password)
            server.sendmail(sender_email, recipient_email, message.as_string())
    except (smtplib.SMTPException, OSError) as e:
        current_app.logger.error(f"Failed to send email to {recipient_email}: {e}")
        return EmailResult(False, f'Failed to send email: {e}')

    current_app.logger.info(f"Successfully sent '{subject}' to {recipient_email}")
    return EmailResult(True, 'Email sent successfully', sent_to=recipient_email)


def send_appointment_confirmation(patient_email: str, patient_name: str, doctor_name: str,
                                  appointment: dict) -> EmailResult:
    """Build and send one confirmation email for an appointment."""
    subject, text, html = build_confirmation_email(patient_name, doctor_name, appointment)
    result = _send(patient_email, subject, text, html)
    if result.success:
        result.message = 'Confirmation email sent successfully'
    return result


def send_otp_email(recipient_email: str, otp: str) -> EmailResult:
    text = f"""
    Your iTABAZA verification code is: {otp}

    The code expires in 10 minutes. If you did not request it, ignore this email.
    """
    return _send(recipient_email, "Here is your OTP for iTABAZA Login", text)
