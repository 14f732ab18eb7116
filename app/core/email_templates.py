"""
HTML bodies for the confirmation and admin notification emails.

Each renderer is a pure function of the stored record and returns
``(subject, html)``. Submitted values are HTML-escaped.
"""

from html import escape
from datetime import datetime

from app.models.application import Application
from app.models.inquiry import Inquiry
from app.models.subscription import Subscription

BRAND = "Next Stop China"

_STYLE = """
    body { font-family: Arial, sans-serif; line-height: 1.6; color: #333; max-width: 600px; margin: 0 auto; padding: 20px; }
    .header { background: linear-gradient(135deg, #667eea 0%, #764ba2 100%); color: white; padding: 30px; text-align: center; border-radius: 10px 10px 0 0; }
    .admin-header { background: #ff6b6b; color: white; padding: 20px; text-align: center; border-radius: 10px 10px 0 0; }
    .content { background: #f9f9f9; padding: 30px; border-radius: 0 0 10px 10px; }
    .highlight { background: #e8f4fd; padding: 15px; border-left: 4px solid #667eea; margin: 20px 0; }
    .footer { text-align: center; margin-top: 30px; color: #666; font-size: 14px; }
"""


def _e(value, default="Not specified") -> str:
    if value is None or value == "":
        return default
    return escape(str(value))


def _yes_no(flag: bool) -> str:
    return "✅ Provided" if flag else "❌ Not yet"


def _page(title: str, header_class: str, heading: str, body: str) -> str:
    return f"""<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>{title}</title>
  <style>{_STYLE}</style>
</head>
<body>
  <div class="{header_class}"><h1>{heading}</h1></div>
  <div class="content">
{body}
  </div>
  <div class="footer">
    <p>&copy; {datetime.now().year} {BRAND}. All rights reserved.</p>
    <p>Making education dreams come true.</p>
  </div>
</body>
</html>
"""


def inquiry_confirmation(inquiry: Inquiry):
    subject = f"Thank you for contacting {BRAND}!"
    body = f"""
    <p>Dear {_e(inquiry.firstName)},</p>
    <p>Thank you for reaching out to us! We have received your message and our team will get back to you within 24 hours.</p>
    <div class="highlight">
      <strong>Your Message Summary:</strong><br>
      <strong>Name:</strong> {_e(inquiry.fullName)}<br>
      <strong>Email:</strong> {_e(inquiry.email)}<br>
      <strong>Phone:</strong> {_e(inquiry.phone)}<br>
      <strong>Country:</strong> {_e(inquiry.country)}<br>
      <strong>Interested Program:</strong> {_e(inquiry.program)}<br>
      <strong>Message:</strong> {_e(inquiry.message)}
    </div>
    <p>Best regards,<br>The {BRAND} Team</p>"""
    return subject, _page("Thank you for contacting us!", "header", f"Thank You for Contacting {BRAND}!", body)


def inquiry_admin_notice(inquiry: Inquiry):
    subject = f"New Contact Form Submission - {inquiry.fullName}"
    body = f"""
    <div class="highlight">
      <h3>Contact Information:</h3>
      <p><strong>Name:</strong> {_e(inquiry.fullName)}</p>
      <p><strong>Email:</strong> {_e(inquiry.email)}</p>
      <p><strong>Phone:</strong> {_e(inquiry.phone)}</p>
      <p><strong>Country:</strong> {_e(inquiry.country)}</p>
      <p><strong>Interested Program:</strong> {_e(inquiry.program)}</p>
    </div>
    <div class="highlight">
      <h3>Message:</h3>
      <p>{_e(inquiry.message)}</p>
    </div>
    <p><strong>Submitted:</strong> {_e(inquiry.createdAt)}<br>
    <strong>IP Address:</strong> {_e(inquiry.ipAddress)}<br>
    <strong>Record ID:</strong> {_e(inquiry.id)}</p>"""
    return subject, _page("New Contact Form Submission", "admin-header", "New Contact Form Submission", body)


def application_confirmation(application: Application):
    personal = application.personalInfo
    program = application.program
    subject = f"Application Received - {BRAND}"
    body = f"""
    <p>Dear {_e(personal.firstName)},</p>
    <p>Thank you for submitting your application! Our admissions team will review it and get back to you within 2 weeks.</p>
    <div class="highlight">
      <strong>Application Summary:</strong><br>
      <strong>Reference:</strong> {_e(application.id)}<br>
      <strong>Degree Level:</strong> {_e(program.degreeLevel)}<br>
      <strong>Preferred Program:</strong> {_e(program.preferredProgram)}<br>
      <strong>Preferred University:</strong> {_e(program.preferredUniversity)}<br>
      <strong>Preferred Start:</strong> {_e(program.startDate)}
    </div>
    <p>Please keep your transcripts, passport, language test results and recommendation letters ready.</p>
    <p>Best regards,<br>The {BRAND} Admissions Team</p>"""
    return subject, _page("Application Received", "header", "Application Received!", body)


def application_admin_notice(application: Application):
    personal = application.personalInfo
    academic = application.academic
    program = application.program
    documents = application.documents
    additional = application.additional
    subject = f"New Application Submission - {application.fullName}"
    body = f"""
    <div class="highlight">
      <h3>Personal Information:</h3>
      <p><strong>Name:</strong> {_e(application.fullName)}<br>
      <strong>Email:</strong> {_e(personal.email)}<br>
      <strong>Phone:</strong> {_e(personal.phone)}<br>
      <strong>Nationality:</strong> {_e(personal.nationality)}<br>
      <strong>Date of Birth:</strong> {_e(personal.dateOfBirth)} (age {application.age})</p>
    </div>
    <div class="highlight">
      <h3>Academic Background:</h3>
      <p><strong>Current Education:</strong> {_e(academic.currentEducation)}<br>
      <strong>Institution:</strong> {_e(academic.institution)}<br>
      <strong>GPA:</strong> {_e(academic.gpa)}<br>
      <strong>Graduation Year:</strong> {_e(academic.graduationYear)}<br>
      <strong>Field of Study:</strong> {_e(academic.fieldOfStudy)}</p>
    </div>
    <div class="highlight">
      <h3>Program Preferences:</h3>
      <p><strong>Degree Level:</strong> {_e(program.degreeLevel)}<br>
      <strong>Preferred Program:</strong> {_e(program.preferredProgram)}<br>
      <strong>Preferred University:</strong> {_e(program.preferredUniversity)}<br>
      <strong>Destination:</strong> {_e(program.country)}<br>
      <strong>Start Date:</strong> {_e(program.startDate)}</p>
    </div>
    <div class="highlight">
      <h3>Documents:</h3>
      <p>Transcript: {_yes_no(documents.transcript)}<br>
      Passport: {_yes_no(documents.passport)}<br>
      Language Test: {_yes_no(documents.languageTest)}<br>
      Recommendation: {_yes_no(documents.recommendation)}</p>
    </div>
    <div class="highlight">
      <h3>Additional Information:</h3>
      <p><strong>Scholarship Interest:</strong> {_e(additional.scholarshipInterest)}<br>
      <strong>Personal Statement:</strong> {_e(additional.personalStatement)}<br>
      <strong>Previous Experience:</strong> {_e(additional.previousExperience)}</p>
    </div>
    <p><strong>Submitted:</strong> {_e(application.createdAt)}<br>
    <strong>Record ID:</strong> {_e(application.id)}</p>"""
    return subject, _page("New Application Submission", "admin-header", "New Application Submission", body)


def newsletter_confirmation(subscription: Subscription):
    subject = f"Welcome to {BRAND} Newsletter!"
    body = f"""
    <p>Hello,</p>
    <p>Thank you for subscribing! You'll be the first to hear about new scholarships, university admission deadlines and study-abroad tips.</p>
    <p>If you didn't sign up, you can unsubscribe at any time.</p>
    <p>Best regards,<br>The {BRAND} Team</p>"""
    return subject, _page("Welcome to our newsletter", "header", "Welcome Aboard!", body)


def _subscriber_notice(subscription: Subscription, title: str, heading: str, when_label: str) -> str:
    body = f"""
    <div class="highlight">
      <h3>Subscriber Details:</h3>
      <p><strong>Email:</strong> {_e(subscription.email)}<br>
      <strong>Source:</strong> {_e(subscription.source)}<br>
      <strong>{when_label}:</strong> {_e(subscription.updatedAt)}<br>
      <strong>IP Address:</strong> {_e(subscription.ipAddress)}</p>
    </div>"""
    return _page(title, "admin-header", heading, body)


def newsletter_admin_notice(subscription: Subscription):
    subject = f"New Newsletter Subscription - {subscription.email}"
    return subject, _subscriber_notice(subscription, "New Newsletter Subscription", "New Newsletter Subscriber", "Subscribed")


def newsletter_resubscribe_admin_notice(subscription: Subscription):
    """Sent instead of the new-subscriber notice when a past subscriber returns."""
    subject = f"Newsletter Resubscription - {subscription.email}"
    return subject, _subscriber_notice(subscription, "Newsletter Resubscription", "Returning Newsletter Subscriber", "Resubscribed")
