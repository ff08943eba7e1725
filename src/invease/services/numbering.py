"""
Document numbering
Generates invoice and credit note numbers from customizable patterns

Patterns support:
- {PREFIX} - Custom prefix text
- {YEAR} - 4-digit year (2026)
- {YY} - 2-digit year (26)
- {MONTH} - 2-digit month (01-12)
- {SEQ} - Sequence number padded to ``sequence_digits``
- {SEQ:4} - Sequence with explicit padding (0001)

Anything else in braces is copied through verbatim when generating and
reported by validate_pattern.

All functions here are pure. Generating or previewing a number never
advances a sequence; only increment_number produces an advanced config.
"""

import re
from datetime import date
from typing import List, Optional, Tuple

from invease.models.numbering import (
    DocumentSeries,
    NumberingConfig,
    NumberingPreset,
    PatternValidation,
    ResetPeriod,
)

TOKEN_RE = re.compile(r"\{([^{}]*)\}")
SEQ_TOKEN_RE = re.compile(r"^SEQ(?::(\d+))?$")
TRAILING_DIGITS_RE = re.compile(r"(\d+)(?!.*\d)")

DATE_TOKENS = ("PREFIX", "YEAR", "YY", "MONTH")


NUMBERING_PRESETS: Tuple[NumberingPreset, ...] = (
    NumberingPreset("simple", "Simple", "INV-{SEQ:4}", "INV-0001"),
    NumberingPreset("yearly", "Yearly", "INV-{YEAR}-{SEQ:3}", "INV-2026-001"),
    NumberingPreset("monthly", "Monthly", "{PREFIX}/{YEAR}/{MONTH}/{SEQ:3}", "INV/2026/02/001"),
    NumberingPreset("compact", "Compact", "{PREFIX}{YY}{MONTH}{SEQ:3}", "INV2602001"),
    NumberingPreset("custom", "Custom", "{PREFIX}-{SEQ}", "CUSTOM-0001"),
)

DEFAULT_INVOICE_NUMBERING = NumberingConfig(
    pattern="INV-{SEQ:4}",
    prefix="INV",
    sequence_digits=4,
)

DEFAULT_CREDIT_NOTE_NUMBERING = NumberingConfig(
    pattern="CN-{SEQ:4}",
    prefix="CN",
    sequence_digits=4,
)


def default_numbering_config(series: DocumentSeries) -> NumberingConfig:
    """Fresh copy of the default config for a series"""
    if DocumentSeries(series) == DocumentSeries.CREDIT_NOTE:
        return DEFAULT_CREDIT_NOTE_NUMBERING.model_copy(deep=True)
    return DEFAULT_INVOICE_NUMBERING.model_copy(deep=True)


def get_preset(preset_id: str) -> Optional[NumberingPreset]:
    for preset in NUMBERING_PRESETS:
        if preset.id == preset_id:
            return preset
    return None


# ===== Periods =====

def period_key(reset_period: ResetPeriod, on: date) -> Optional[str]:
    """Key identifying the reset period containing ``on``"""
    if reset_period == ResetPeriod.YEARLY:
        return f"{on.year:04d}"
    if reset_period == ResetPeriod.MONTHLY:
        return f"{on.year:04d}-{on.month:02d}"
    return None


def current_period(config: NumberingConfig, on: Optional[date] = None) -> Optional[str]:
    return period_key(config.reset_period, on or date.today())


def effective_sequence(config: NumberingConfig, on: Optional[date] = None) -> int:
    """
    Consumed count after applying any pending period reset

    A yearly or monthly series whose last consumed number belongs to an
    earlier period starts again from zero.
    """
    period = current_period(config, on)
    if period is not None and config.last_period is not None and config.last_period != period:
        return 0
    return config.current_sequence


def rekey_period(
    last_period: Optional[str],
    reset_period: ResetPeriod,
    current_sequence: int,
    on: Optional[date] = None,
) -> Optional[str]:
    """
    Translate ``last_period`` into the key format of another reset period

    Used when a series switches reset period, so the consumption that
    already happened this period keeps counting instead of looking like
    an earlier period.

    Args:
        last_period: Key written under the old reset period (or None)
        reset_period: New reset period
        current_sequence: Numbers consumed so far
        on: Today (default: date.today())

    Returns:
        Key in the new format, or None when nothing needs tracking
    """
    on = on or date.today()
    reset_period = ResetPeriod(reset_period)
    if reset_period == ResetPeriod.NEVER or current_sequence <= 0:
        return None

    today_key = period_key(reset_period, on)
    if not last_period:
        return today_key

    year = last_period[:4]
    if reset_period == ResetPeriod.YEARLY:
        return year
    if len(last_period) > 4:
        return last_period
    # Only the year is known: count this month when it is the same year
    return today_key if year == f"{on.year:04d}" else f"{year}-12"


# ===== Generation =====

def _render(pattern: str, prefix: str, sequence: int, digits: int, on: date) -> str:
    def replace(match: "re.Match[str]") -> str:
        token = match.group(1)
        if token == "PREFIX":
            return prefix
        if token == "YEAR":
            return f"{on.year:04d}"
        if token == "YY":
            return f"{on.year % 100:02d}"
        if token == "MONTH":
            return f"{on.month:02d}"
        seq_match = SEQ_TOKEN_RE.match(token)
        if seq_match:
            width = int(seq_match.group(1)) if seq_match.group(1) is not None else digits
            return str(sequence).zfill(width)
        return match.group(0)

    # single pass, so a prefix containing "{SEQ}" is not expanded again
    return TOKEN_RE.sub(replace, pattern)


def generate_number(config: NumberingConfig, on: Optional[date] = None) -> str:
    """
    Format the next number of a series without consuming it

    Args:
        config: Numbering configuration
        on: Issue date used for date tokens and reset checks (default: today)

    Returns:
        Formatted document number
    """
    on = on or date.today()
    sequence = effective_sequence(config, on) + 1
    return _render(config.pattern, config.prefix, sequence, config.sequence_digits, on)


def increment_number(config: NumberingConfig, on: Optional[date] = None) -> NumberingConfig:
    """
    Return a new config with one more number consumed

    The period reset is applied first, so the first number of a new year
    (or month) is 1.
    """
    on = on or date.today()
    period = current_period(config, on)
    return config.model_copy(update={
        "current_sequence": effective_sequence(config, on) + 1,
        "last_period": period if period is not None else config.last_period,
    })


def preview_pattern(
    pattern: str, config: NumberingConfig, on: Optional[date] = None
) -> str:
    """Number that ``pattern`` would produce next for ``config``"""
    return generate_number(config.model_copy(update={"pattern": pattern}), on)


def preview_sequence(
    pattern: str,
    config: NumberingConfig,
    count: int = 3,
    on: Optional[date] = None,
) -> List[str]:
    """The next ``count`` numbers ``pattern`` would produce"""
    on = on or date.today()
    preview_config = config.model_copy(update={"pattern": pattern})
    previews: List[str] = []
    for _ in range(count):
        previews.append(generate_number(preview_config, on))
        preview_config = increment_number(preview_config, on)
    return previews


# ===== Parsing & validation =====

def _pattern_regex(config: NumberingConfig) -> "re.Pattern[str]":
    parts: List[str] = []
    position = 0
    seq_captured = False

    for match in TOKEN_RE.finditer(config.pattern):
        parts.append(re.escape(config.pattern[position:match.start()]))
        position = match.end()
        token = match.group(1)

        if token == "PREFIX":
            parts.append(re.escape(config.prefix))
        elif token == "YEAR":
            parts.append(r"\d{4}")
        elif token in ("YY", "MONTH"):
            parts.append(r"\d{2}")
        elif SEQ_TOKEN_RE.match(token):
            if seq_captured:
                parts.append(r"\d+")
            else:
                parts.append(r"(?P<seq>\d+)")
                seq_captured = True
        else:
            parts.append(re.escape(match.group(0)))

    parts.append(re.escape(config.pattern[position:]))
    return re.compile("".join(parts))


def extract_sequence(number: str, config: Optional[NumberingConfig] = None) -> Optional[int]:
    """
    Extract the sequence number from an existing document number

    The number is matched against the config's pattern first. Numbers
    that do not follow the pattern (e.g. imported from another tool)
    fall back to their last run of digits.

    Returns:
        The sequence, or None if the number contains no digits
    """
    if not number:
        return None

    candidate = number.strip()
    if config is not None:
        match = _pattern_regex(config).fullmatch(candidate)
        if match and match.groupdict().get("seq") is not None:
            return int(match.group("seq"))

    fallback = TRAILING_DIGITS_RE.search(candidate)
    return int(fallback.group(1)) if fallback else None


def validate_pattern(pattern: str) -> PatternValidation:
    """
    Check a pattern before it is saved

    Returns:
        PatternValidation with an error message when invalid
    """
    if not pattern or not pattern.strip():
        return PatternValidation(valid=False, error="Pattern cannot be empty")

    has_sequence = False
    for match in TOKEN_RE.finditer(pattern):
        token = match.group(1)
        seq_match = SEQ_TOKEN_RE.match(token)
        if seq_match:
            has_sequence = True
            if seq_match.group(1) is not None and int(seq_match.group(1)) < 1:
                return PatternValidation(
                    valid=False, error="Sequence width must be at least 1"
                )
        elif token not in DATE_TOKENS:
            return PatternValidation(
                valid=False, error=f"Pattern contains invalid token: {match.group(0)}"
            )

    stripped = TOKEN_RE.sub("", pattern)
    if "{" in stripped or "}" in stripped:
        return PatternValidation(valid=False, error="Pattern contains unbalanced braces")

    if not has_sequence:
        return PatternValidation(
            valid=False, error="Pattern must include {SEQ} or {SEQ:n}"
        )

    return PatternValidation(valid=True)


def validate_reset_period(pattern: str, reset_period: ResetPeriod) -> PatternValidation:
    """
    Check that a reset period is distinguishable in the generated numbers

    A sequence that restarts every year must carry the year in the
    number, and one that restarts every month the year and month too,
    otherwise earlier numbers are issued again.
    """
    reset_period = ResetPeriod(reset_period)
    if reset_period == ResetPeriod.NEVER:
        return PatternValidation(valid=True)

    tokens = {match.group(1) for match in TOKEN_RE.finditer(pattern or "")}
    if not tokens & {"YEAR", "YY"}:
        return PatternValidation(
            valid=False,
            error=f"A {reset_period.value} reset needs {{YEAR}} or {{YY}} in the pattern",
        )
    if reset_period == ResetPeriod.MONTHLY and "MONTH" not in tokens:
        return PatternValidation(
            valid=False, error="A monthly reset needs {MONTH} in the pattern"
        )
    return PatternValidation(valid=True)


def validate_numbering_config(pattern: str, reset_period: ResetPeriod) -> PatternValidation:
    """validate_pattern plus validate_reset_period"""
    result = validate_pattern(pattern)
    if not result.valid:
        return result
    return validate_reset_period(pattern, reset_period)
