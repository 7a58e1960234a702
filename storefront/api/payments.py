
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from storefront.api.deps import get_db
from storefront.core.auth import require_internal
from storefront.schemas import PaymentEvent
from storefront.services.payments import process_event

router = APIRouter()

@router.post("/webhook")
def payment_webhook(payload: PaymentEvent, db: Session = Depends(get_db), _=Depends(require_internal)):
    # Called by the payment bridge once the provider confirms a payment
    handled = process_event(db, payload.model_dump())
    return {"received": True, "handled": handled}
