from fastapi import APIRouter, Depends

from food_delivery.api.deps import get_payment_service, role_required
from food_delivery.models import RoleEnum, User
from food_delivery.schemas.payment import CreatePaymentInput, CreatePaymentOutput, GetPaymentsOutput
from food_delivery.services.payments import PaymentService

router = APIRouter(prefix="/payments", tags=["payments"])


@router.post("/", response_model=CreatePaymentOutput)
async def create_payment(
    payment_in: CreatePaymentInput,
    owner: User = Depends(role_required(RoleEnum.Owner)),
    service: PaymentService = Depends(get_payment_service),
):
    """
    Records a payment and promotes the restaurant for the promotion period.
    """
    return await service.create_payment(owner, payment_in)


@router.get("/", response_model=GetPaymentsOutput)
async def get_payments(
    owner: User = Depends(role_required(RoleEnum.Owner)),
    service: PaymentService = Depends(get_payment_service),
):
    return await service.get_payments(owner)
