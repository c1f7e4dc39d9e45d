from typing import Optional, List, Literal, Any
from datetime import date, datetime, timezone
from pydantic import AliasChoices, BaseModel, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


def coerce_calendar_date(value: Any) -> Any:
    """Reduce ISO datetimes and datetime objects to the calendar date they name"""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, str) and len(value) > 10:
        return value[:10]
    return value


class CamelModel(BaseModel):
    """Accepts storefront camelCase keys as well as snake_case ones"""

    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
    }


class DateRange(CamelModel):
    """Calendar date range of a departure"""
    from_: date = Field(..., alias="from")
    to: Optional[date] = None

    @field_validator("from_", "to", mode="before")
    @classmethod
    def _calendar_date(cls, v):
        return coerce_calendar_date(v)


class DiscountWindow(CamelModel):
    """Validity window of a discount; either end may be open"""
    from_: Optional[datetime] = Field(None, alias="from")
    to: Optional[datetime] = None

    @field_validator("from_", "to", mode="before")
    @classmethod
    def _midnight(cls, v):
        if isinstance(v, str) and len(v) == 10:
            return f"{v}T00:00:00"
        if isinstance(v, date) and not isinstance(v, datetime):
            return datetime(v.year, v.month, v.day)
        return v

    @field_validator("from_", "to")
    @classmethod
    def _aware(cls, v: Optional[datetime]) -> Optional[datetime]:
        if v is not None and v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    def contains(self, moment: datetime) -> bool:
        if self.from_ is not None and moment < self.from_:
            return False
        if self.to is not None and moment > self.to:
            return False
        return True


class Discount(CamelModel):
    """Time-bounded discount attached to a pricing option"""
    enabled: bool = False
    date_range: Optional[DiscountWindow] = None
    mode: Literal["percentage", "fixed"] = "percentage"
    percentage: float = Field(0, ge=0, le=100)
    fixed_price: Optional[float] = Field(None, ge=0)

    @model_validator(mode="before")
    @classmethod
    def _from_dashboard_shape(cls, data: Any) -> Any:
        # Dashboard payloads: percentageOrPrice (True = percentage),
        # discountPercentage, discountPrice, discountDateRange, discountEnabled
        if not isinstance(data, dict):
            return data
        data = dict(data)
        if "discountEnabled" in data and "enabled" not in data:
            data["enabled"] = bool(data.pop("discountEnabled"))
        if "percentageOrPrice" in data and "mode" not in data:
            data["mode"] = "percentage" if data.pop("percentageOrPrice") else "fixed"
        if "discountPercentage" in data and "percentage" not in data:
            data["percentage"] = data.pop("discountPercentage") or 0
        if "discountPrice" in data and "fixedPrice" not in data:
            data["fixedPrice"] = data.pop("discountPrice")
        if "discountDateRange" in data and "dateRange" not in data:
            data["dateRange"] = data.pop("discountDateRange")
        return data


class PricingOption(CamelModel):
    """Named price tier a departure may be tagged with"""
    id: str = Field(..., validation_alias=AliasChoices("id", "_id"))
    name: str
    category: Literal["adult", "child", "senior", "student", "custom"] = "adult"
    custom_category: Optional[str] = None
    price: float = Field(..., ge=0)
    min_pax: Optional[int] = Field(None, ge=0)
    max_pax: Optional[int] = Field(None, ge=0)
    discount: Optional[Discount] = None

    @model_validator(mode="before")
    @classmethod
    def _discount_flag(cls, data: Any) -> Any:
        # The dashboard keeps the on/off switch next to the discount block
        if isinstance(data, dict) and "discountEnabled" in data and isinstance(data.get("discount"), dict):
            data = dict(data)
            discount = dict(data["discount"])
            discount.setdefault("enabled", bool(data.pop("discountEnabled")))
            data["discount"] = discount
        return data


class PricingGroup(CamelModel):
    label: str
    options: List[PricingOption] = []


class Departure(CamelModel):
    """A schedule entry: one date range or a recurrence rule"""
    id: Optional[str] = Field(None, validation_alias=AliasChoices("id", "_id"))
    label: Optional[str] = None
    date_range: DateRange
    is_recurring: bool = False
    recurrence_pattern: Optional[str] = None
    recurrence_end_date: Optional[date] = None
    selected_pricing_options: List[str] = []
    capacity: Optional[int] = Field(None, ge=0)

    @model_validator(mode="before")
    @classmethod
    def _from_rule_shape(cls, data: Any) -> Any:
        # {pattern, startDate, endDate} is accepted as a recurring departure
        if not isinstance(data, dict) or "startDate" not in data:
            return data
        data = dict(data)
        data.setdefault("dateRange", {"from": data.pop("startDate")})
        if "endDate" in data:
            data.setdefault("recurrenceEndDate", data.pop("endDate"))
        if "pattern" in data:
            data.setdefault("recurrencePattern", data.pop("pattern"))
        data.setdefault("isRecurring", True)
        return data

    @field_validator("recurrence_end_date", mode="before")
    @classmethod
    def _calendar_date(cls, v):
        return coerce_calendar_date(v)

    @property
    def start_date(self) -> date:
        return self.date_range.from_

    @property
    def end_date(self) -> Optional[date]:
        """Last date a recurrence may produce"""
        return self.recurrence_end_date or self.date_range.to

    @property
    def recurs(self) -> bool:
        return self.is_recurring and self.end_date is not None


class TourDates(CamelModel):
    """Schedule block of a tour as authored in the dashboard"""
    schedule_type: Literal["flexible", "fixed", "multiple"] = "fixed"
    days: int = Field(1, ge=1)
    nights: Optional[int] = Field(None, ge=0)
    default_date_range: Optional[DateRange] = None
    single_date_range: Optional[DateRange] = None
    departures: List[Departure] = []
    is_recurring: bool = False
    recurrence_pattern: Optional[str] = None
    recurrence_end_date: Optional[date] = None
    selected_pricing_options: List[str] = []

    @field_validator("recurrence_end_date", mode="before")
    @classmethod
    def _calendar_date(cls, v):
        return coerce_calendar_date(v)


class Tour(CamelModel):
    """Tour snapshot as served by the catalog"""
    id: str = Field(..., validation_alias=AliasChoices("id", "_id"))
    title: str
    code: Optional[str] = None
    price: float = Field(0, ge=0)
    price_per_person: bool = True
    sale_enabled: bool = False
    sale_price: Optional[float] = Field(None, ge=0)
    pricing_options: List[PricingOption] = []
    pricing_groups: List[PricingGroup] = []
    tour_dates: Optional[TourDates] = None

    @property
    def booking_code(self) -> str:
        """Code printed on bookings; derived from the id when the tour has none"""
        return self.code or f"TOUR-{self.id[-8:].upper()}"
