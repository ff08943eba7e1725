"""Services module initialization"""

from invease.services.tax_rules import (
    get_vat_percent,
    get_vat_rate_label,
    get_cis_deduction_rate,
    get_cis_status_label,
    is_cis_applicable,
)
from invease.services.totals import (
    compute_totals,
    get_valid_line_items,
    has_valid_line_items,
    calculate_net_total,
)
from invease.services.numbering import (
    NUMBERING_PRESETS,
    DEFAULT_INVOICE_NUMBERING,
    DEFAULT_CREDIT_NOTE_NUMBERING,
    generate_number,
    increment_number,
    extract_sequence,
    validate_pattern,
    preview_pattern,
    preview_sequence,
)
from invease.services.customer_matching import (
    MergeSuggestion,
    normalise_customer_name,
    find_duplicate_customers,
)

__all__ = [
    "get_vat_percent",
    "get_vat_rate_label",
    "get_cis_deduction_rate",
    "get_cis_status_label",
    "is_cis_applicable",
    "compute_totals",
    "get_valid_line_items",
    "has_valid_line_items",
    "calculate_net_total",
    "NUMBERING_PRESETS",
    "DEFAULT_INVOICE_NUMBERING",
    "DEFAULT_CREDIT_NOTE_NUMBERING",
    "generate_number",
    "increment_number",
    "extract_sequence",
    "validate_pattern",
    "preview_pattern",
    "preview_sequence",
    "MergeSuggestion",
    "normalise_customer_name",
    "find_duplicate_customers",
]
