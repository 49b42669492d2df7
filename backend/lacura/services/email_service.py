from typing import Optional

from lacura.core.config import Settings
from lacura.core.exceptions import BadRequestError
from lacura.schemas.email import SendEmailRequest, SendEmailResponse
from lacura.services.microsoft_graph import MicrosoftGraphClient
from lacura.utils.logger import get_logger

logger = get_logger("email_service")

DEFAULT_SUBJECT = "Message from Wellness Practice"
DEFAULT_HTML = "<p>Hello from La Cura.</p>"


class EmailService:
    def __init__(self, settings: Settings, graph: MicrosoftGraphClient):
        self.settings = settings
        self.graph = graph

    async def send_email(self, request: SendEmailRequest) -> SendEmailResponse:
        to = request.to
        subject = request.subject or DEFAULT_SUBJECT
        html = request.html or DEFAULT_HTML
        sender: Optional[str] = request.sender or self.settings.MAIL_SENDER

        if not to or not sender:
            logger.warning(f"Missing required fields (has_to={bool(to)}, has_sender={bool(sender)})")
            raise BadRequestError("Missing 'to' or configured 'from' sender")

        logger.info(f"Sending email to={to} sender={sender} subject={subject!r}")
        message_id = await self.graph.send_mail(to=to, subject=subject, html=html, sender=sender)
        logger.info(f"Email accepted: {message_id}")
        return SendEmailResponse(message_id=message_id, status="Accepted")
