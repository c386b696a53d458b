"""
Request models for the sales API.

Pydantic models validating payloads before they reach the sales engine.
Client-submitted totals, unit prices and discounts are not part of these
models: unknown keys are dropped and every amount is recomputed server-side.
"""

from datetime import datetime
from typing import Any, List, Optional
from uuid import UUID

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    StrictInt,
    ValidationError as PydanticValidationError,
    field_validator,
    model_validator,
)

from sales_catalog.exceptions import ValidationError
from sales_catalog.models import PaymentMethod
from sales_catalog.utils.dates import as_utc

# sale_item.quantity is a 32-bit INTEGER column
MAX_LINE_QUANTITY = 2 ** 31 - 1


class SaleLineRequest(BaseModel):
    """One requested line: which product and how many units."""
    model_config = ConfigDict(extra='ignore', frozen=True)

    product_id: UUID = Field(
        ...,
        validation_alias=AliasChoices('productId', 'product_id'),
        description="Product being sold"
    )
    quantity: StrictInt = Field(..., gt=0, le=MAX_LINE_QUANTITY, description="Units sold (positive integer)")


class SaleCreateRequest(BaseModel):
    """
    Request to create a sale.

    The client is referenced either by id (`clientId`) or by tax id
    (`clientNit`); the anonymous tax id ("CF" by default) means no client.
    Omitting both is also an anonymous sale.
    """
    model_config = ConfigDict(extra='ignore', frozen=True)

    date: datetime = Field(..., description="Business date of the sale (ISO-8601)")
    payment_method: PaymentMethod = Field(
        ...,
        validation_alias=AliasChoices('paymentMethod', 'payment_method')
    )
    items: List[SaleLineRequest] = Field(..., description="Requested lines")
    client_id: Optional[UUID] = Field(
        None,
        validation_alias=AliasChoices('clientId', 'client_id')
    )
    client_tax_id: Optional[str] = Field(
        None,
        validation_alias=AliasChoices('clientNit', 'clientTaxId', 'client_tax_id')
    )

    @field_validator('date')
    @classmethod
    def _normalize_date(cls, value: datetime) -> datetime:
        return as_utc(value)

    @field_validator('payment_method', mode='before')
    @classmethod
    def _parse_payment_method(cls, value: Any) -> PaymentMethod:
        return PaymentMethod.parse(value)

    @field_validator('client_tax_id')
    @classmethod
    def _strip_tax_id(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        value = value.strip()
        if not value:
            raise ValueError('clientNit cannot be blank')
        return value

    @model_validator(mode='after')
    def _single_client_reference(self) -> 'SaleCreateRequest':
        if self.client_id is not None and self.client_tax_id is not None:
            raise ValueError('Provide either clientId or clientNit, not both')
        return self


class Pagination(BaseModel):
    """skip/take query parameters."""
    model_config = ConfigDict(extra='ignore')

    skip: int = Field(0, ge=0)
    take: Optional[int] = Field(None, ge=1)


def _issues(error: PydanticValidationError) -> List[dict]:
    """Flatten pydantic errors into JSON-safe dicts."""
    return [
        {
            'loc': '.'.join(str(part) for part in err.get('loc', ())),
            'msg': err.get('msg', ''),
            'type': err.get('type', ''),
        }
        for err in error.errors()
    ]


def parse_sale_create(payload: Any) -> SaleCreateRequest:
    """
    Validate a raw create-sale payload.

    Raises:
        ValidationError: if the payload does not match SaleCreateRequest.
    """
    if not isinstance(payload, dict):
        raise ValidationError('Request body must be a JSON object')
    try:
        return SaleCreateRequest.model_validate(payload)
    except PydanticValidationError as e:
        raise ValidationError('Invalid sale request', issues=_issues(e))


def parse_pagination(args: Any) -> Pagination:
    """
    Validate skip/take query parameters.

    Raises:
        ValidationError: on negative or non-numeric values.
    """
    try:
        return Pagination.model_validate(dict(args))
    except PydanticValidationError as e:
        raise ValidationError('Invalid pagination parameters', issues=_issues(e))


__all__ = [
    'SaleLineRequest',
    'SaleCreateRequest',
    'Pagination',
    'MAX_LINE_QUANTITY',
    'parse_sale_create',
    'parse_pagination',
]
