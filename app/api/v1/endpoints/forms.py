"""
Form submission routes: contact, application, newsletter subscribe and
unsubscribe.

Every route answers with the {success, message, data?, errors?} envelope.
Email delivery problems never change the response; the record is already
stored by the time any email is attempted.
"""

from fastapi import APIRouter, Depends, Request, status
import logging

from app.api.v1.dependencies import get_intake_pipeline
from app.api.v1.responses import envelope, error_response
from app.core.exceptions import DuplicateKeyError, NotFoundError, ValidationError
from app.core.intake import IntakePipeline, get_client_info
from app.models.application import ApplicationSubmission
from app.models.inquiry import InquirySubmission
from app.models.subscription import NewsletterRequest, UnsubscribeRequest

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/contact", status_code=status.HTTP_201_CREATED)
async def submit_contact_form(
    request: Request,
    submission: InquirySubmission,
    pipeline: IntakePipeline = Depends(get_intake_pipeline),
):
    """Store a contact inquiry and email the visitor and the admin."""
    logger.info("📝 Contact form submission received")

    try:
        inquiry = await pipeline.submit_inquiry(submission, get_client_info(request))
    except ValidationError as e:
        return error_response(status.HTTP_400_BAD_REQUEST, e.message, errors=e.errors)
    except DuplicateKeyError:
        return error_response(status.HTTP_400_BAD_REQUEST, "A contact form with this email already exists")
    except Exception as e:
        logger.error(f"❌ Contact form submission error: {str(e)}")
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to submit contact form", error=e)

    return envelope(
        "Contact form submitted successfully! We will get back to you within 24 hours.",
        data={
            "id": inquiry.id,
            "fullName": inquiry.fullName,
            "email": inquiry.email,
        },
        status_code=status.HTTP_201_CREATED,
    )


@router.post("/application", status_code=status.HTTP_201_CREATED)
async def submit_application_form(
    request: Request,
    submission: ApplicationSubmission,
    pipeline: IntakePipeline = Depends(get_intake_pipeline),
):
    """Store a program application and email the applicant and the admin."""
    logger.info("📝 Application form submission received")

    try:
        application = await pipeline.submit_application(submission, get_client_info(request))
    except ValidationError as e:
        return error_response(status.HTTP_400_BAD_REQUEST, e.message, errors=e.errors)
    except DuplicateKeyError:
        return error_response(status.HTTP_400_BAD_REQUEST, "An application with this email already exists")
    except Exception as e:
        logger.error(f"❌ Application form submission error: {str(e)}")
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to submit application", error=e)

    return envelope(
        "Application submitted successfully! We will review your application and get back to you within 2 weeks.",
        data={
            "id": application.id,
            "fullName": application.fullName,
            "email": application.personalInfo.email,
            "program": application.program.preferredProgram,
            "degreeLevel": application.program.degreeLevel,
        },
        status_code=status.HTTP_201_CREATED,
    )


SUBSCRIBE_MESSAGES = {
    "subscribed": "Successfully subscribed to our newsletter! Check your email for confirmation.",
    "already_subscribed": "You are already subscribed to our newsletter!",
    "resubscribed": "Welcome back! You have been resubscribed to our newsletter.",
}


@router.post("/newsletter")
async def subscribe_newsletter(
    request: Request,
    subscription_request: NewsletterRequest,
    pipeline: IntakePipeline = Depends(get_intake_pipeline),
):
    """
    Subscribe to the newsletter.

    201 for a new subscription, 200 when already subscribed or reactivated.
    """
    logger.info(f"📝 Newsletter subscription received: {subscription_request.email} ({subscription_request.source})")

    try:
        outcome = await pipeline.subscribe(subscription_request, get_client_info(request))
    except DuplicateKeyError:
        return error_response(status.HTTP_400_BAD_REQUEST, "This email is already subscribed")
    except Exception as e:
        logger.error(f"❌ Newsletter subscription error: {str(e)}")
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to subscribe to newsletter", error=e)

    return envelope(
        SUBSCRIBE_MESSAGES[outcome.status],
        data={"email": outcome.subscription.email, "status": outcome.status},
        status_code=status.HTTP_201_CREATED if outcome.created else status.HTTP_200_OK,
    )


@router.post("/newsletter/unsubscribe")
async def unsubscribe_newsletter(
    unsubscribe_request: UnsubscribeRequest,
    pipeline: IntakePipeline = Depends(get_intake_pipeline),
):
    try:
        outcome = await pipeline.unsubscribe(unsubscribe_request.email)
    except NotFoundError as e:
        return error_response(status.HTTP_404_NOT_FOUND, e.message)
    except Exception as e:
        logger.error(f"❌ Newsletter unsubscribe error: {str(e)}")
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to unsubscribe from newsletter", error=e)

    if outcome.status == "already_unsubscribed":
        message = "You are already unsubscribed from our newsletter"
    else:
        message = "You have been successfully unsubscribed from our newsletter"

    return envelope(message, data={"email": outcome.subscription.email, "status": outcome.status})
