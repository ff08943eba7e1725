"""Tax enums: VAT rates and CIS statuses"""

from enum import Enum


class VatRate(str, Enum):
    """VAT rate applied to a line item"""
    ZERO = "0"
    REDUCED = "5"
    STANDARD = "20"
    REVERSE_CHARGE = "reverse_charge"


class CisStatus(str, Enum):
    """Construction Industry Scheme verification status of the invoicer"""
    NOT_APPLICABLE = "not_applicable"
    GROSS_PAYMENT = "gross_payment"
    STANDARD = "standard"
    UNVERIFIED = "unverified"


class CisCategory(str, Enum):
    """CIS category of a line item; only labour is subject to deduction"""
    LABOUR = "labour"
    MATERIALS = "materials"
    NOT_APPLICABLE = "not_applicable"
