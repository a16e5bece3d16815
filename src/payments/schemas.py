from pydantic import Field, validator
from typing import List

from src.schemas import CamelModel
from src.bookings.schemas import PassengerInput, check_email, check_phone

class PaymentInitializeRequest(CamelModel):
    email: str
    amount: int = Field(..., description="Amount in minor units (kobo)")
    reference: str = Field(..., min_length=1)

    @validator('email')
    def validate_email(cls, v):
        return check_email(v)

    @validator('amount')
    def validate_amount(cls, v):
        if v <= 0:
            raise ValueError('Invalid amount')
        return v

class PaymentVerifyRequest(CamelModel):
    reference: str = Field(..., min_length=1)

# Webhook metadata attached to the transaction at initialization
class WebhookCustomer(CamelModel):
    email: str
    phone: str

    @validator('email')
    def validate_email(cls, v):
        return check_email(v)

    @validator('phone')
    def validate_phone(cls, v):
        return check_phone(v)

class WebhookMetadata(CamelModel):
    customer: WebhookCustomer
    passengers: List[PassengerInput] = Field(..., min_length=1)
    trip_id: str = Field(..., min_length=1)
    total_amount: float
    booking_reference: str = Field(..., min_length=1)
