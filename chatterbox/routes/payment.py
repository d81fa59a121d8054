from fastapi import APIRouter, Depends, Request

from chatterbox.auth import get_current_email
from chatterbox.payments import PaymentBridge

router = APIRouter(tags=["payment"])


def get_payments(request: Request) -> PaymentBridge:
    return request.app.state.payments


@router.post("/create-payment-intent")
def create_payment_intent(
    email: str = Depends(get_current_email),
    payments: PaymentBridge = Depends(get_payments),
):
    client_secret = payments.create_intent(email)
    return {"success": True, "clientSecret": client_secret}
