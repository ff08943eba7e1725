"""Document numbering models"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class ResetPeriod(str, Enum):
    """When a numbering sequence restarts"""
    NEVER = "never"
    YEARLY = "yearly"
    MONTHLY = "monthly"


class DocumentSeries(str, Enum):
    """Independent numbering series"""
    INVOICE = "invoice"
    CREDIT_NOTE = "credit_note"


class NumberingConfig(BaseModel):
    """
    Numbering configuration for one document series

    ``current_sequence`` counts the numbers already consumed, so the next
    number issued is ``current_sequence + 1``.
    """

    pattern: str = Field(default="{PREFIX}-{SEQ}", description="Number pattern")
    prefix: str = Field(default="INV", description="Value of the {PREFIX} token")
    sequence_digits: int = Field(
        default=4, description="Zero padding applied to {SEQ}", ge=1
    )
    current_sequence: int = Field(
        default=0, description="Numbers consumed so far", ge=0
    )
    reset_period: ResetPeriod = Field(default=ResetPeriod.NEVER)
    last_period: Optional[str] = Field(
        default=None,
        description="Period key ('2026' or '2026-01') of the last consumed number",
    )


@dataclass
class PatternValidation:
    """Pattern validation result"""
    valid: bool
    error: Optional[str] = None


@dataclass(frozen=True)
class NumberingPreset:
    """Ready-made numbering pattern"""
    id: str
    name: str
    pattern: str
    example: str
