"""
UK tax rules
Single source of truth for VAT percentages and CIS deduction rates
"""

from decimal import Decimal
from typing import Dict

from invease.models.tax import CisStatus, VatRate

# Reverse charge: the customer accounts for the VAT, so none is charged
VAT_PERCENTAGES: Dict[VatRate, Decimal] = {
    VatRate.ZERO: Decimal("0"),
    VatRate.REDUCED: Decimal("5"),
    VatRate.STANDARD: Decimal("20"),
    VatRate.REVERSE_CHARGE: Decimal("0"),
}

VAT_RATE_LABELS: Dict[VatRate, str] = {
    VatRate.STANDARD: "20%",
    VatRate.REDUCED: "5%",
    VatRate.ZERO: "0%",
    VatRate.REVERSE_CHARGE: "Reverse Charge (0%)",
}

CIS_DEDUCTION_RATES: Dict[CisStatus, Decimal] = {
    CisStatus.NOT_APPLICABLE: Decimal("0"),
    CisStatus.GROSS_PAYMENT: Decimal("0"),
    CisStatus.STANDARD: Decimal("0.20"),
    CisStatus.UNVERIFIED: Decimal("0.30"),
}

CIS_STATUS_LABELS: Dict[CisStatus, str] = {
    CisStatus.NOT_APPLICABLE: "Not Applicable",
    CisStatus.GROSS_PAYMENT: "Gross Payment (0%)",
    CisStatus.STANDARD: "Verified (20%)",
    CisStatus.UNVERIFIED: "Unverified (30%)",
}


def get_vat_percent(rate: VatRate) -> Decimal:
    """VAT percentage charged for a rate (0 for reverse charge)"""
    return VAT_PERCENTAGES[VatRate(rate)]


def get_vat_rate_label(rate: VatRate) -> str:
    return VAT_RATE_LABELS[VatRate(rate)]


def get_cis_deduction_rate(status: CisStatus) -> Decimal:
    """CIS deduction rate: 0 gross, 0.20 verified, 0.30 unverified"""
    return CIS_DEDUCTION_RATES.get(CisStatus(status), Decimal("0"))


def get_cis_status_label(status: CisStatus) -> str:
    return CIS_STATUS_LABELS[CisStatus(status)]


def is_cis_applicable(status: CisStatus) -> bool:
    return CisStatus(status) != CisStatus.NOT_APPLICABLE
