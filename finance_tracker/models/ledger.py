"""
Core Ledger Models for Finance Tracker

These models define the strict schemas for every record the ledger stores
and every payload the API accepts. They are designed to:
1. Coerce incoming values (numeric strings, comma decimals, ISO dates)
2. Reject shape violations with clear validation messages
3. Serialize money as fixed-point strings, never as binary floats
4. Be storage-agnostic (the same models round-trip through memory and JSON)

DESIGN DECISION: Money is a Decimal quantized to two places on the way in
and rendered as a "0.00" string on the way out. Arithmetic happens on the
Decimal; nothing ever passes through float.
"""

import re
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from enum import Enum
from typing import Annotated, Any, Optional

from pydantic import (
    AfterValidator,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    PlainSerializer,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel


DEFAULT_USER_ID = "default-user"
OTHERS_CATEGORY_ID = "cat-others"

TWO_PLACES = Decimal("0.01")

# Largest amount a ledger field can hold (10 digits, 2 of them decimals)
MAX_MONEY = Decimal("99999999.99")

OTHERS_DESCRIPTION_MESSAGE = "Description is required for the 'Others' category"


# =============================================================================
# MONEY AND DATE COERCION
# =============================================================================

def quantize_money(value: Decimal) -> Decimal:
    """Round a Decimal to cents (half-up)."""
    return value.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def parse_money(value: Any) -> Decimal:
    """
    Parse an incoming amount into a two-place Decimal.

    Accepts Decimal, int, float (via its repr, not its binary value) and
    strings using either "." or "," as the decimal separator.
    """
    if isinstance(value, bool):
        raise ValueError("Amount must be a number")
    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, int):
        amount = Decimal(value)
    elif isinstance(value, float):
        amount = Decimal(repr(value))
    elif isinstance(value, str):
        text = value.strip().replace(",", ".")
        if not text:
            raise ValueError("Amount is required")
        try:
            amount = Decimal(text)
        except InvalidOperation:
            raise ValueError(f"Invalid amount: {value!r}")
    else:
        raise ValueError("Amount must be a number or numeric string")

    if not amount.is_finite():
        raise ValueError(f"Invalid amount: {value!r}")
    try:
        return quantize_money(amount)
    except InvalidOperation:
        raise ValueError(f"Amount out of range: {value!r}")


def format_money(value: Decimal) -> str:
    """Render a Decimal as a fixed-point string with two places."""
    return f"{quantize_money(value):.2f}"


def to_local_naive(value: datetime) -> datetime:
    """Normalize timezone-aware datetimes to naive local time."""
    if value.tzinfo is not None:
        return value.astimezone().replace(tzinfo=None)
    return value


Money = Annotated[
    Decimal,
    BeforeValidator(parse_money),
    PlainSerializer(format_money, return_type=str),
]

NonNegativeMoney = Annotated[
    Decimal,
    BeforeValidator(parse_money),
    Field(ge=0, le=MAX_MONEY),
    PlainSerializer(format_money, return_type=str),
]

LocalDateTime = Annotated[datetime, AfterValidator(to_local_naive)]

HexColor = Annotated[str, Field(pattern=r"^#[0-9A-Fa-f]{6}$")]


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class TransactionType(str, Enum):
    """Direction of a transaction."""
    INCOME = "income"
    EXPENSE = "expense"


class CategoryIcon(str, Enum):
    """
    Supported category icon identifiers.

    DESIGN DECISION: Icons are an explicit enum rather than free text looked
    up dynamically. Unknown names resolve to CIRCLE instead of failing, so a
    client shipping a newer icon set never breaks category creation.
    """
    COFFEE = "coffee"
    CAR = "car"
    GAMEPAD = "gamepad-2"
    FILE_TEXT = "file-text"
    ARROW_DOWN_LEFT = "arrow-down-left"
    SHOPPING_CART = "shopping-cart"
    HOME = "home"
    ZAP = "zap"
    WIFI = "wifi"
    PHONE = "phone"
    HEART = "heart"
    STAR = "star"
    BOOK = "book"
    MUSIC = "music"
    CAMERA = "camera"
    PLANE = "plane"
    UTENSILS = "utensils"
    SHIRT = "shirt"
    GIFT = "gift"
    BRIEFCASE = "briefcase"
    MORE_HORIZONTAL = "more-horizontal"
    CIRCLE = "circle"  # Fallback

    @classmethod
    def resolve(cls, name: str) -> "CategoryIcon":
        """Resolve "Coffee", "Gamepad2", "gamepad_2" etc. to a member."""
        return _ICON_LOOKUP.get(_icon_key(name), cls.CIRCLE)


def _icon_key(name: str) -> str:
    return re.sub(r"[^a-z0-9]", "", name.lower())


_ICON_LOOKUP = {_icon_key(icon.value): icon for icon in CategoryIcon}


def _coerce_icon(value: Any) -> CategoryIcon:
    if isinstance(value, CategoryIcon):
        return value
    if isinstance(value, str):
        return CategoryIcon.resolve(value)
    raise ValueError("Icon must be a string")


Icon = Annotated[CategoryIcon, BeforeValidator(_coerce_icon)]


# =============================================================================
# BASE MODEL
# =============================================================================

class LedgerModel(BaseModel):
    """
    Shared configuration: camelCase on the wire, snake_case in Python.

    Unknown fields are ignored, which is how client attempts to set
    server-owned fields (id, spent, userId) are dropped.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )


# =============================================================================
# STORED ENTITIES
# =============================================================================

class User(LedgerModel):
    """The single owner of all records."""

    id: str
    username: str = Field(..., min_length=1, max_length=100)
    password: str


class Category(LedgerModel):
    """A user-defined grouping for transactions and budgets."""

    id: str
    name: str = Field(..., min_length=1, max_length=100)
    icon: Icon
    color: HexColor
    user_id: Optional[str] = None


class Transaction(LedgerModel):
    """
    A single income or expense entry in the ledger.

    category_id may dangle if its category was deleted; nothing cascades.
    """

    id: str
    amount: NonNegativeMoney
    description: Optional[str] = Field(default=None, max_length=500)
    type: TransactionType
    category_id: Optional[str] = None
    user_id: Optional[str] = None
    date: LocalDateTime = Field(default_factory=datetime.now)
    tags: Optional[list[str]] = None


class Budget(LedgerModel):
    """
    A monthly spending target, optionally tied to a category.

    `spent` is owned by the ledger: it starts at zero and only moves when
    an expense in the same category and month is created.
    """

    id: str
    name: str = Field(..., min_length=1, max_length=100)
    amount: NonNegativeMoney
    spent: NonNegativeMoney = Decimal("0.00")
    category_id: Optional[str] = None
    user_id: Optional[str] = None
    month: int = Field(..., ge=1, le=12)
    year: int = Field(..., ge=1970, le=9999)


class Goal(LedgerModel):
    """A savings goal. Progress is updated manually, never by transactions."""

    id: str
    name: str = Field(..., min_length=1, max_length=100)
    target_amount: NonNegativeMoney
    current_amount: NonNegativeMoney = Decimal("0.00")
    target_date: LocalDateTime
    user_id: Optional[str] = None


# =============================================================================
# REQUEST PAYLOADS
# =============================================================================

class CategoryCreate(LedgerModel):
    name: str = Field(..., min_length=1, max_length=100)
    icon: Icon
    color: HexColor


class TransactionCreate(LedgerModel):
    """
    Payload for creating (POST) or replacing (PUT) a transaction.

    Transactions in the "Others" category must say what they were for.
    """

    amount: NonNegativeMoney
    description: Optional[str] = Field(default=None, max_length=500)
    type: TransactionType
    category_id: Optional[str] = None
    date: Optional[LocalDateTime] = None
    tags: Optional[list[str]] = None

    @field_validator('description', 'category_id')
    @classmethod
    def blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        return v or None

    @model_validator(mode='after')
    def require_description_for_others(self) -> 'TransactionCreate':
        if self.category_id == OTHERS_CATEGORY_ID and not self.description:
            raise ValueError(OTHERS_DESCRIPTION_MESSAGE)
        return self


class BudgetCreate(LedgerModel):
    name: str = Field(..., min_length=1, max_length=100)
    amount: NonNegativeMoney
    category_id: Optional[str] = None
    month: int = Field(..., ge=1, le=12)
    year: int = Field(..., ge=1970, le=9999)

    @field_validator('category_id')
    @classmethod
    def blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        return v or None


class GoalCreate(LedgerModel):
    name: str = Field(..., min_length=1, max_length=100)
    target_amount: NonNegativeMoney
    target_date: LocalDateTime


class GoalUpdate(LedgerModel):
    """Partial goal update. This is the only way current_amount changes."""

    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    target_amount: Optional[NonNegativeMoney] = None
    current_amount: Optional[NonNegativeMoney] = None
    target_date: Optional[LocalDateTime] = None

    def changes(self) -> dict[str, Any]:
        """Fields the client actually sent, keyed by attribute name."""
        return self.model_dump(exclude_unset=True, exclude_none=True)


# =============================================================================
# QUERY FILTERS
# =============================================================================

class TransactionFilters(BaseModel):
    """
    Optional filters for listing transactions.

    The date filter is a (month, year) period: it applies only when both
    are given. A lone month or year is ignored.
    """

    type: Optional[TransactionType] = None
    category_id: Optional[str] = None
    month: Optional[int] = Field(default=None, ge=1, le=12)
    year: Optional[int] = None

    def matches(self, transaction: Transaction) -> bool:
        if self.type and transaction.type != self.type:
            return False
        if self.category_id and transaction.category_id != self.category_id:
            return False
        if self.month is not None and self.year is not None:
            date = transaction.date
            if (date.year, date.month) != (self.year, self.month):
                return False
        return True


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single validation issue found in a payload."""

    field: str = Field(
        ...,
        description="Field with the issue ('__root__' for cross-field rules)"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'value_error', 'string_pattern_mismatch')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
