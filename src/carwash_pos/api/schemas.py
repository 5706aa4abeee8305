"""Pydantic schemas for API request/response models."""

from datetime import datetime
from decimal import Decimal
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field

from carwash_pos.calculators.types import (
    Draft,
    EmployeeAssignment,
    LoyaltyCustomer,
    PaymentMethod,
    ServiceCatalogEntry,
    StaffMember,
    TransactionRecord,
    Variety,
)
from carwash_pos.services.history import TransactionSummary
from carwash_pos.services.transaction_service import DraftInput

# Amounts stored in Numeric(14, 2) columns
Money = Annotated[Decimal, Field(ge=0, decimal_places=2)]


# ============================================================================
# Catalog schemas
# ============================================================================


class ServiceResponse(BaseModel):
    """Catalog service with its price table."""

    id: str
    name: str
    description: str = ""
    prices: dict[str, Decimal]

    @classmethod
    def from_entry(cls, entry: ServiceCatalogEntry) -> "ServiceResponse":
        return cls(
            id=entry.id,
            name=entry.name,
            description=entry.description,
            prices=entry.prices,
        )


class EmployeeResponse(BaseModel):
    id: str
    first_name: str
    last_name: str
    full_name: str

    @classmethod
    def from_member(cls, member: StaffMember) -> "EmployeeResponse":
        return cls(
            id=member.id,
            first_name=member.first_name,
            last_name=member.last_name,
            full_name=member.full_name,
        )


class LoyaltyCarResponse(BaseModel):
    car_name: str
    plate_number: str


class LoyaltyCustomerResponse(BaseModel):
    id: str
    name: str
    cars: list[LoyaltyCarResponse]
    points: Decimal

    @classmethod
    def from_customer(cls, customer: LoyaltyCustomer) -> "LoyaltyCustomerResponse":
        return cls(
            id=customer.id,
            name=customer.name,
            cars=[
                LoyaltyCarResponse(car_name=c.car_name, plate_number=c.plate_number)
                for c in customer.cars
            ],
            points=customer.points,
        )


class OptionResponse(BaseModel):
    key: str
    label: str


class PaymentOptionsResponse(BaseModel):
    """Closed sets the cashier chooses from."""

    varieties: list[OptionResponse]
    payment_methods: list[OptionResponse]
    quick_amounts: list[Decimal]


# ============================================================================
# Draft schemas
# ============================================================================


class ManualServicePayload(BaseModel):
    name: str = Field(min_length=1)
    price: Money


class EmployeePercentPayload(BaseModel):
    id: str
    percent: Decimal = Decimal("0")


class DraftPayload(BaseModel):
    """Raw cashier inputs for a visit."""

    customer_name: str = ""
    car_name: str = ""
    plate_number: str = ""
    variety: Variety = Variety.MOTOR
    service_ids: list[str] = Field(default_factory=list)
    manual_services: list[ManualServicePayload] = Field(default_factory=list)
    employees: list[EmployeePercentPayload] = Field(default_factory=list)
    referrer_id: str | None = None
    referrer_percent: Decimal = Decimal("0")
    payment_method: PaymentMethod = PaymentMethod.CASH

    def to_input(self) -> DraftInput:
        return DraftInput(
            customer_name=self.customer_name,
            car_name=self.car_name,
            plate_number=self.plate_number,
            variety=self.variety,
            service_ids=tuple(self.service_ids),
            manual_items=tuple((m.name, m.price) for m in self.manual_services),
            employee_percents=tuple((e.id, e.percent) for e in self.employees),
            referrer_id=self.referrer_id or None,
            referrer_percent=self.referrer_percent,
            payment_method=self.payment_method,
        )


class QuoteRequest(DraftPayload):
    amount_tendered: Money | None = None


class ConfirmRequest(DraftPayload):
    amount_tendered: Money | None = None
    pay_later: bool = False


class PayNowRequest(BaseModel):
    amount_tendered: Money
    payment_method: PaymentMethod = PaymentMethod.CASH


class ManualServiceResponse(BaseModel):
    name: str
    price: Decimal


class AssignmentResponse(BaseModel):
    id: str
    name: str
    percent: Decimal | None = None
    commission: Decimal

    @classmethod
    def from_assignment(
        cls, assignment: EmployeeAssignment, with_percent: bool = True
    ) -> "AssignmentResponse":
        return cls(
            id=assignment.id,
            name=assignment.name,
            percent=assignment.percent if with_percent else None,
            commission=assignment.commission,
        )


class QuoteResponse(BaseModel):
    """A draft with its price and commissions; nothing is written."""

    customer_name: str
    car_name: str
    plate_number: str
    variety: Variety
    service_ids: list[str]
    manual_services: list[ManualServiceResponse]
    payment_method: PaymentMethod
    price: Decimal
    employees: list[AssignmentResponse]
    referrer: AssignmentResponse | None = None
    offered_service_ids: list[str]
    change: Decimal
    can_confirm: bool

    @classmethod
    def from_draft(
        cls, draft: Draft, offered: list[str], change: Decimal, can_confirm: bool
    ) -> "QuoteResponse":
        return cls(
            customer_name=draft.customer_name,
            car_name=draft.car_name,
            plate_number=draft.plate_number,
            variety=draft.variety,
            service_ids=list(draft.service_ids),
            manual_services=[
                ManualServiceResponse(name=m.name, price=m.price) for m in draft.manual_items
            ],
            payment_method=draft.payment_method,
            price=draft.price,
            employees=[AssignmentResponse.from_assignment(e) for e in draft.employees],
            referrer=(
                AssignmentResponse.from_assignment(draft.referrer) if draft.referrer else None
            ),
            offered_service_ids=offered,
            change=change,
            can_confirm=can_confirm,
        )


# ============================================================================
# Transaction schemas
# ============================================================================


class TransactionResponse(BaseModel):
    """Stored transaction; absent optional fields are omitted from JSON."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    customer_name: str
    car_name: str
    plate_number: str
    variety: Variety
    service_ids: list[str]
    service_names: list[str]
    service_name: str
    manual_services: list[ManualServiceResponse] | None = None
    price: Decimal
    cashier: str
    cashier_full_name: str | None = None
    employees: list[AssignmentResponse]
    referrer: AssignmentResponse | None = None
    created_at: datetime
    paid: bool
    payment_method: PaymentMethod | None = None
    amount_tendered: Decimal | None = None
    change: Decimal | None = None
    voided: bool | None = None
    read_only: bool

    @classmethod
    def from_record(cls, record: TransactionRecord, read_only: bool) -> "TransactionResponse":
        doc = record.to_document()
        doc["id"] = record.id
        doc["employees"] = [
            AssignmentResponse.from_assignment(e, with_percent=False) for e in record.employees
        ]
        if record.referrer is not None:
            doc["referrer"] = AssignmentResponse.from_assignment(
                record.referrer, with_percent=False
            )
        doc["read_only"] = read_only
        return cls(**doc)


class ConfirmResponse(BaseModel):
    message: str
    transaction: TransactionResponse
    side_effect_failures: list[str] = Field(default_factory=list)


class TransactionListResponse(BaseModel):
    items: list[TransactionResponse]
    total: int
    customers: list[str]
    service_names: list[str]


class MostAvailedResponse(BaseModel):
    service_name: str
    count: int


class SummaryResponse(BaseModel):
    total_transactions: int
    paid_count: int
    unpaid_count: int
    total_sales: Decimal
    most_availed: list[MostAvailedResponse]

    @classmethod
    def from_summary(cls, summary: TransactionSummary) -> "SummaryResponse":
        return cls(
            total_transactions=summary.total_transactions,
            paid_count=summary.paid_count,
            unpaid_count=summary.unpaid_count,
            total_sales=summary.total_sales,
            most_availed=[
                MostAvailedResponse(service_name=name, count=count)
                for name, count in summary.most_availed
            ],
        )


class ErrorResponse(BaseModel):
    """Error body."""

    detail: str
    code: str | None = None
    field: str | None = None
