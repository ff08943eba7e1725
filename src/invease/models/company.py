"""Company profile models"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class BusinessType(str, Enum):
    """Legal form of the invoicing business"""
    SOLE_TRADER = "sole_trader"
    PARTNERSHIP = "partnership"
    LIMITED_COMPANY = "limited_company"


class CompanySearchResult(BaseModel):
    """Company returned by the external company lookup"""

    name: str = Field(default="", description="Registered company name")
    number: str = Field(default="", description="Companies House number")
    status: Optional[str] = Field(default=None, description="e.g. 'active'")
    address: Optional[str] = Field(default=None, description="Registered office address")
