"""Booking and gift card e-mails delivered after the response is sent."""

from __future__ import annotations

import logging
import smtplib
from email.message import EmailMessage
from pathlib import Path
from typing import Iterable

from fastapi import BackgroundTasks
from jinja2 import Environment, FileSystemLoader, TemplateError, select_autoescape

from tablebook.core.config import get_settings
from tablebook.models.booking import Booking
from tablebook.models.gift_card import GiftCard
from tablebook.models.restaurant import Restaurant
from tablebook.services.errors import NotificationDeliveryFailed

logger = logging.getLogger(__name__)

_TEMPLATE_DIR = Path(__file__).resolve().parents[1] / "templates"
_ENV = Environment(
    loader=FileSystemLoader(_TEMPLATE_DIR),
    autoescape=select_autoescape(["html", "xml"]),
)


def schedule_email(
    background_tasks: BackgroundTasks,
    *,
    recipients: Iterable[str],
    subject: str,
    html_body: str,
) -> None:
    """Queue an email to be delivered asynchronously."""
    recipients_list = [addr for addr in recipients if addr]
    if not recipients_list:
        logger.debug("No recipients provided for email; skipping")
        return
    settings = get_settings()
    if not settings.smtp_host or not settings.smtp_port:
        logger.debug("SMTP disabled; skipping email to %s", ", ".join(recipients_list))
        return
    background_tasks.add_task(send_email, recipients_list, subject, html_body)


def build_booking_confirmation_email(
    *, booking: Booking, restaurant: Restaurant
) -> tuple[str, str]:
    subject = f"Booking confirmation {booking.confirmation_code} - {restaurant.name}"
    template = _ENV.get_template("booking_confirmation.html")
    html_body = template.render(
        restaurant_name=restaurant.name,
        restaurant_address=restaurant.address,
        restaurant_phone=restaurant.contact_phone,
        customer_name=booking.customer_name,
        confirmation_code=booking.confirmation_code,
        date=booking.date.strftime("%d/%m/%Y"),
        time=booking.time,
        guests=booking.guests,
        special_requests=booking.special_requests,
    )
    return subject, html_body


def notify_booking_confirmation(
    booking: Booking, restaurant: Restaurant, background_tasks: BackgroundTasks
) -> None:
    try:
        subject, html_body = build_booking_confirmation_email(
            booking=booking, restaurant=restaurant
        )
    except TemplateError:
        logger.exception(
            "Failed to render confirmation email for booking %s",
            booking.confirmation_code,
        )
        return
    schedule_email(
        background_tasks,
        recipients=[booking.customer_email],
        subject=subject,
        html_body=html_body,
    )


def build_gift_card_emails(
    *, card: GiftCard, restaurant: Restaurant
) -> list[tuple[str, str, str]]:
    """Recipient and sender messages as ``(address, subject, html_body)``."""
    context = {
        "restaurant_name": restaurant.name,
        "restaurant_address": restaurant.address,
        "restaurant_phone": restaurant.contact_phone,
        "recipient_name": card.recipient_name,
        "sender_name": card.sender_name,
        "code": card.code,
        "amount": f"{card.amount:.2f}",
        "currency": card.currency.upper(),
        "message": card.message,
        "expires_on": card.expires_on.strftime("%d/%m/%Y"),
    }
    recipient_body = _ENV.get_template("gift_card_recipient.html").render(**context)
    sender_body = _ENV.get_template("gift_card_sender.html").render(**context)
    return [
        (
            card.recipient_email,
            f"You received a gift card for {restaurant.name}",
            recipient_body,
        ),
        (
            card.sender_email,
            f"Gift card purchase confirmation - {restaurant.name}",
            sender_body,
        ),
    ]


def notify_gift_card_issued(
    card: GiftCard, restaurant: Restaurant, background_tasks: BackgroundTasks
) -> None:
    try:
        messages = build_gift_card_emails(card=card, restaurant=restaurant)
    except TemplateError:
        logger.exception("Failed to render emails for gift card %s", card.code)
        return
    for address, subject, html_body in messages:
        schedule_email(
            background_tasks,
            recipients=[address],
            subject=subject,
            html_body=html_body,
        )


def send_email(recipients: list[str], subject: str, html_body: str) -> None:
    """Deliver an email, logging instead of raising on failure."""
    try:
        _deliver_email(recipients, subject, html_body)
    except NotificationDeliveryFailed:
        logger.exception("Failed to send email to %s", ", ".join(recipients))


def _deliver_email(recipients: list[str], subject: str, html_body: str) -> None:
    settings = get_settings()
    if not settings.smtp_host or not settings.smtp_port:
        logger.info(
            "SMTP settings missing; skipping email delivery to %s", ", ".join(recipients)
        )
        return

    message = EmailMessage()
    message["Subject"] = subject
    message["To"] = ", ".join(recipients)
    message["From"] = (
        settings.smtp_from or settings.smtp_username or "no-reply@tablebook.local"
    )
    message.set_content("This message contains HTML content.")
    message.add_alternative(html_body, subtype="html")

    try:
        with smtplib.SMTP(settings.smtp_host, settings.smtp_port, timeout=5) as smtp:
            if settings.smtp_username and settings.smtp_password:
                try:
                    smtp.starttls()
                except smtplib.SMTPException:
                    logger.debug("SMTP server does not support STARTTLS")
                smtp.login(settings.smtp_username, settings.smtp_password)
            smtp.send_message(message)
    except (OSError, smtplib.SMTPException) as exc:
        raise NotificationDeliveryFailed(str(exc)) from exc
    logger.info("Email sent to %s", ", ".join(recipients))
