"""Award notifications sent to the selected supplier."""

from __future__ import annotations

import logging
import smtplib
from dataclasses import dataclass
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Optional

from fuel_procurement.core.config import Settings
from fuel_procurement.models.enums import NotificationStatus

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AwardNotice:
    supplier_name: str
    supplier_email: str
    boq_id: str
    fuel_type: str
    quantity: str
    unit: str
    bid_price_per_unit: str
    total_price: str
    deadline: str


@dataclass(frozen=True)
class NotificationResult:
    status: NotificationStatus
    detail: Optional[str] = None

    @property
    def delivered(self) -> bool:
        return self.status in (NotificationStatus.sent, NotificationStatus.logged)


def render_subject(notice: AwardNotice) -> str:
    return f"Bid accepted: {notice.fuel_type} {notice.quantity} {notice.unit}"


def render_body(notice: AwardNotice) -> str:
    return "\n".join(
        [
            f"Dear {notice.supplier_name},",
            "",
            "Your bid has been selected for the following procurement request.",
            "",
            f"  BOQ reference:   {notice.boq_id}",
            f"  Fuel type:       {notice.fuel_type}",
            f"  Quantity:        {notice.quantity} {notice.unit}",
            f"  Price per unit:  {notice.bid_price_per_unit}",
            f"  Total price:     {notice.total_price}",
            f"  Delivery by:     {notice.deadline}",
            "",
            "The procurement team will contact you with delivery details.",
        ]
    )


class LogNotifier:
    """Used when no SMTP relay is configured: the notice goes to the log only."""

    def send_award(self, notice: AwardNotice) -> NotificationResult:
        logger.info(
            "award notice for boq %s to %s <%s> (no SMTP relay configured)",
            notice.boq_id,
            notice.supplier_name,
            notice.supplier_email,
        )
        return NotificationResult(NotificationStatus.logged, "SMTP not configured; notice logged.")


class EmailNotifier:
    """Sends the award notice over SMTP with a bounded socket timeout."""

    def __init__(
        self,
        settings: Settings,
        *,
        smtp_class=smtplib.SMTP,
        smtp_ssl_class=smtplib.SMTP_SSL,
    ) -> None:
        self.host = settings.smtp_host
        self.port = settings.smtp_port
        self.username = settings.smtp_username
        self.password = settings.smtp_password
        self.sender = settings.smtp_sender
        self.timeout = settings.smtp_timeout_seconds
        self.smtp_class = smtp_class
        self.smtp_ssl_class = smtp_ssl_class

    def _build_message(self, notice: AwardNotice) -> MIMEMultipart:
        msg = MIMEMultipart("alternative")
        msg["Subject"] = render_subject(notice)
        msg["From"] = self.sender
        msg["To"] = notice.supplier_email
        msg.attach(MIMEText(render_body(notice), "plain", "utf-8"))
        return msg

    def _send(self, msg: MIMEMultipart) -> None:
        smtp_cls = self.smtp_ssl_class if self.port == 465 else self.smtp_class
        with smtp_cls(self.host, self.port, timeout=self.timeout) as server:
            server.ehlo()
            if self.port == 587:
                server.starttls()
                server.ehlo()
            if self.username:
                server.login(self.username, self.password or "")
            server.send_message(msg)

    def send_award(self, notice: AwardNotice) -> NotificationResult:
        if not notice.supplier_email:
            logger.warning("supplier for boq %s has no email address", notice.boq_id)
            return NotificationResult(NotificationStatus.failed, "Supplier has no email address.")

        try:
            self._send(self._build_message(notice))
        except (smtplib.SMTPException, OSError) as exc:
            logger.error(
                "award notice for boq %s to %s failed: %s",
                notice.boq_id,
                notice.supplier_email,
                exc,
                exc_info=True,
            )
            return NotificationResult(NotificationStatus.failed, f"{exc.__class__.__name__}: {exc}")

        logger.info("award notice for boq %s sent to %s via %s", notice.boq_id, notice.supplier_email, self.host)
        return NotificationResult(NotificationStatus.sent)


def build_notifier(settings: Settings):
    if settings.smtp_host:
        return EmailNotifier(settings)
    return LogNotifier()
