"""
Company store
The invoicer's business profile, CIS registration and bank details

Bank details are only persisted when the user has opted in with
``remember_bank_details``.
"""

import logging
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from invease.models.company import BusinessType, CompanySearchResult
from invease.models.invoice import BankDetails, InvoicerDetails
from invease.models.tax import CisStatus
from invease.services.tax_rules import is_cis_applicable
from invease.stores.base import BaseStore, merge_model

logger = logging.getLogger(__name__)


class CompanyState(BaseModel):
    """Persisted company profile"""

    # Onboarding
    has_seen_welcome: bool = False
    is_onboarded: bool = False
    business_type: Optional[BusinessType] = None

    # Invoicer details
    logo: Optional[str] = None
    logo_file_name: Optional[str] = None
    company_name: str = ""
    company_number: str = ""
    vat_number: str = ""
    eori_number: str = ""
    address: str = ""
    post_code: str = ""

    # CIS
    cis_status: CisStatus = CisStatus.NOT_APPLICABLE
    cis_utr: str = ""

    # Bank
    bank_details: BankDetails = Field(default_factory=BankDetails)
    remember_bank_details: bool = False


DEFAULT_COMPANY_STATE = CompanyState()

INVOICER_FIELDS = tuple(InvoicerDetails.model_fields)


class CompanyStore(BaseStore[CompanyState]):
    """Company store"""

    storage_key = "company-details"
    version = 1
    state_model = CompanyState

    def default_state(self) -> CompanyState:
        return DEFAULT_COMPANY_STATE.model_copy(deep=True)

    def serialize_state(self, state: CompanyState) -> Dict[str, Any]:
        data = state.model_dump(mode="json")
        if not state.remember_bank_details:
            data.pop("bank_details", None)
        return data

    def migrate(self, state: Dict[str, Any], version: int) -> Dict[str, Any]:
        # Older records could hold bank details without the opt-in
        if not state.get("remember_bank_details"):
            state.pop("bank_details", None)
        return state

    # ===== Onboarding =====

    def mark_welcome_seen(self) -> None:
        self._update(has_seen_welcome=True, is_onboarded=True)

    def set_business_type(self, business_type: BusinessType) -> None:
        self._update(business_type=business_type)

    def complete_onboarding(self) -> None:
        self._update(is_onboarded=True)

    def reset_onboarding(self) -> None:
        """Return to the setup wizard, keeping the entered details"""
        self._update(is_onboarded=False)

    def start_over(self) -> None:
        """Full reset, including the welcome screens"""
        self.clear_all_details()

    # ===== Details =====

    def set_company_details(self, **details: Any) -> None:
        self._update(**details)

    def set_cis_details(
        self,
        cis_status: Optional[CisStatus] = None,
        cis_utr: Optional[str] = None,
    ) -> None:
        changes: Dict[str, Any] = {}
        if cis_status is not None:
            changes["cis_status"] = cis_status
        if cis_utr is not None:
            changes["cis_utr"] = cis_utr
        if changes:
            self._update(**changes)

    def set_bank_details(self, **details: Any) -> None:
        self._mutate(lambda state: state.model_copy(
            update={"bank_details": merge_model(state.bank_details, details)}
        ))

    def set_remember_bank_details(self, remember: bool) -> None:
        self._update(remember_bank_details=remember)

    def apply_company_search_result(self, result: CompanySearchResult) -> None:
        """Fill name, number and address from a company lookup result"""
        changes: Dict[str, Any] = {}
        if result.name:
            changes["company_name"] = result.name
        if result.number:
            changes["company_number"] = result.number
        if result.address:
            changes["address"] = result.address
        if changes:
            self._update(**changes)
        else:
            logger.debug("Ignoring empty company search result")

    def clear_all_details(self) -> None:
        """Restore the exact default profile"""
        self._mutate(lambda _: self.default_state())

    # ===== Helpers =====

    def get_invoicer_details(self) -> InvoicerDetails:
        return InvoicerDetails(**{name: getattr(self._state, name) for name in INVOICER_FIELDS})

    def get_bank_details(self) -> BankDetails:
        return self._state.bank_details.model_copy(deep=True)

    def is_cis_subcontractor(self) -> bool:
        return is_cis_applicable(self._state.cis_status)
