from fastapi import APIRouter, Depends

from lacura.core.dependencies import get_email_service
from lacura.schemas.email import SendEmailRequest, SendEmailResponse
from lacura.services.email_service import EmailService

router = APIRouter(prefix="/email", tags=["Email"])


@router.post("/send", response_model=SendEmailResponse, response_model_by_alias=True)
async def send_email(
    request: SendEmailRequest,
    service: EmailService = Depends(get_email_service),
):
    return await service.send_email(request)
