"""
Totals engine
Computes VAT and CIS correct totals from a list of line items

Sums are accumulated as exact Decimals and rounded to pence only when
the InvoiceTotals is built, so long invoices do not drift.
"""

from decimal import Decimal
from typing import Dict, Iterable, List

from invease.models.invoice import (
    CisBreakdown,
    InvoiceTotals,
    LineItem,
    VatBreakdownEntry,
)
from invease.models.tax import CisCategory, CisStatus, VatRate
from invease.services.tax_rules import (
    get_cis_deduction_rate,
    get_vat_percent,
    is_cis_applicable,
)
from invease.utils.money import ZERO, round_money, sum_money

HUNDRED = Decimal("100")


def is_valid_line_item(item: LineItem) -> bool:
    """A line counts towards totals once it has a description and a price"""
    return (
        bool(item.description and item.description.strip())
        and item.net_amount > 0
        and item.quantity >= 0
    )


def get_valid_line_items(items: Iterable[LineItem]) -> List[LineItem]:
    return [item for item in items if is_valid_line_item(item)]


def has_valid_line_items(items: Iterable[LineItem]) -> bool:
    return any(is_valid_line_item(item) for item in items)


def line_net(item: LineItem) -> Decimal:
    """Unrounded net value of a line"""
    return item.quantity * item.net_amount


def calculate_net_total(items: Iterable[LineItem]) -> Decimal:
    """Net total of the valid lines, rounded to pence"""
    return round_money(sum_money(line_net(item) for item in get_valid_line_items(items)))


def compute_totals(
    line_items: Iterable[LineItem],
    cis_status: CisStatus = CisStatus.NOT_APPLICABLE,
) -> InvoiceTotals:
    """
    Compute totals for a document

    Args:
        line_items: Draft line items; invalid ones are ignored
        cis_status: Invoicer's CIS status; anything other than
            not_applicable adds a CIS breakdown

    Returns:
        InvoiceTotals with every amount rounded to 2 decimal places
    """
    valid_items = get_valid_line_items(line_items)

    subtotal = ZERO
    net_by_rate: Dict[VatRate, Decimal] = {}
    for item in valid_items:
        net = line_net(item)
        subtotal += net
        # dicts keep insertion order, which gives first-seen rate order
        net_by_rate[item.vat_rate] = net_by_rate.get(item.vat_rate, ZERO) + net

    vat_breakdown = [
        VatBreakdownEntry(
            rate=rate,
            amount=round_money(group_net * get_vat_percent(rate) / HUNDRED),
        )
        for rate, group_net in net_by_rate.items()
    ]

    rounded_subtotal = round_money(subtotal)
    total_vat = round_money(sum_money(entry.amount for entry in vat_breakdown))
    total = rounded_subtotal + total_vat

    cis_breakdown = None
    if is_cis_applicable(cis_status):
        labour_total = round_money(sum_money(
            line_net(item) for item in valid_items
            if item.cis_category == CisCategory.LABOUR
        ))
        materials_total = round_money(sum_money(
            line_net(item) for item in valid_items
            if item.cis_category == CisCategory.MATERIALS
        ))
        deduction_rate = get_cis_deduction_rate(cis_status)
        deduction_amount = round_money(labour_total * deduction_rate)

        cis_breakdown = CisBreakdown(
            labour_total=labour_total,
            materials_total=materials_total,
            deduction_rate=deduction_rate,
            deduction_amount=deduction_amount,
            net_payable=total - deduction_amount,
        )

    return InvoiceTotals(
        subtotal=rounded_subtotal,
        vat_breakdown=vat_breakdown,
        total_vat=total_vat,
        total=total,
        cis_breakdown=cis_breakdown,
    )
