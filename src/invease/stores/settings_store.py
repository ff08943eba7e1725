"""
Settings store
Document numbering and PDF preferences

Owns the invoice and credit note sequences. Previewing a number never
changes state; consuming one is the only way a sequence advances.
"""

import logging
from datetime import date
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from invease.exceptions import NumberingError
from invease.models.numbering import (
    DocumentSeries,
    NumberingConfig,
    PatternValidation,
    ResetPeriod,
)
from invease.services.numbering import (
    default_numbering_config,
    get_preset,
    generate_number,
    increment_number,
    rekey_period,
    validate_numbering_config,
)
from invease.storage import StateStorage
from invease.stores.base import BaseStore, merge_model

logger = logging.getLogger(__name__)

DEFAULT_TEMPLATE_ID = "classic"


class SettingsState(BaseModel):
    """Persisted settings"""

    template_id: str = Field(default=DEFAULT_TEMPLATE_ID, description="PDF template")
    custom_primary_color: Optional[str] = Field(default=None, description="Hex colour override")
    numbering: NumberingConfig = Field(
        default_factory=lambda: default_numbering_config(DocumentSeries.INVOICE)
    )
    cn_numbering: NumberingConfig = Field(
        default_factory=lambda: default_numbering_config(DocumentSeries.CREDIT_NOTE)
    )


def migrate_legacy_numbering(raw: Any) -> Any:
    """
    Convert a numbering record written by the earlier app

    That format stored the *next* number (``currentNumber``) and a
    ``resetYearly`` flag; here the consumed count is stored instead.
    """
    if not isinstance(raw, dict) or "current_number" not in raw:
        return raw

    try:
        next_number = int(raw.get("current_number", 1))
    except (TypeError, ValueError):
        next_number = 1

    reset_yearly = bool(raw.get("reset_yearly", False))
    migrated: Dict[str, Any] = {
        "current_sequence": max(next_number - 1, 0),
        "reset_period": ResetPeriod.YEARLY.value if reset_yearly else ResetPeriod.NEVER.value,
    }
    for key in ("pattern", "prefix"):
        if isinstance(raw.get(key), str):
            migrated[key] = raw[key]
    if reset_yearly and raw.get("last_reset_year") is not None:
        migrated["last_period"] = str(raw["last_reset_year"])
    return migrated


class SettingsStore(BaseStore[SettingsState]):
    """
    Settings store

    Example:
        >>> settings = SettingsStore(MemoryStorage())
        >>> settings.get_next_invoice_number()
        'INV-0001'
        >>> settings.consume_invoice_number()
        'INV-0001'
        >>> settings.get_next_invoice_number()
        'INV-0002'
    """

    storage_key = "settings"
    version = 1
    state_model = SettingsState

    def __init__(
        self,
        storage: Optional[StateStorage] = None,
        invoice_numbering: Optional[NumberingConfig] = None,
        credit_note_numbering: Optional[NumberingConfig] = None,
        auto_load: bool = True,
    ) -> None:
        self._default_numbering = invoice_numbering
        self._default_cn_numbering = credit_note_numbering
        super().__init__(storage, auto_load=auto_load)

    def default_state(self) -> SettingsState:
        state = SettingsState()
        if self._default_numbering is not None:
            state.numbering = self._default_numbering.model_copy(deep=True)
        if self._default_cn_numbering is not None:
            state.cn_numbering = self._default_cn_numbering.model_copy(deep=True)
        return state

    def migrate(self, state: Dict[str, Any], version: int) -> Dict[str, Any]:
        # the earlier app also wrote version 1, so legacy records are detected by shape
        for key in ("numbering", "cn_numbering"):
            if key in state:
                state[key] = migrate_legacy_numbering(state[key])
        return state

    # ===== Helpers =====

    @staticmethod
    def _field_for(series: DocumentSeries) -> str:
        if DocumentSeries(series) == DocumentSeries.CREDIT_NOTE:
            return "cn_numbering"
        return "numbering"

    def get_numbering_config(self, series: DocumentSeries) -> NumberingConfig:
        """Copy of the numbering config of a series"""
        return getattr(self._state, self._field_for(series)).model_copy(deep=True)

    # ===== Numbering =====

    def set_numbering_config(
        self, series: DocumentSeries, on: Optional[date] = None, **updates: Any
    ) -> PatternValidation:
        """
        Update the numbering config of a series

        Invalid updates are rejected and reported, never raised. The
        sequence cannot be lowered here; use reset_sequence. A reset
        period needs the matching date tokens in the pattern. Switching
        reset period carries the current period over, so numbers already
        issued in it are not issued again.

        Args:
            series: Series to update
            on: Today, used to key the current period (default: today)
            **updates: NumberingConfig fields

        Returns:
            Validation result; state only changes when it is valid
        """
        field_name = self._field_for(series)
        current: NumberingConfig = getattr(self._state, field_name)

        try:
            updated = merge_model(current, updates)
        except PydanticValidationError as e:
            first = e.errors()[0]
            location = ".".join(str(part) for part in first["loc"])
            return PatternValidation(valid=False, error=f"{location}: {first['msg']}")

        if updated.current_sequence < current.current_sequence:
            return PatternValidation(
                valid=False,
                error="current_sequence cannot be lowered; use reset_sequence",
            )

        result = validate_numbering_config(updated.pattern, updated.reset_period)
        if not result.valid:
            return result

        if updated.reset_period != current.reset_period and "last_period" not in updates:
            updated = updated.model_copy(update={"last_period": rekey_period(
                current.last_period, updated.reset_period, updated.current_sequence, on
            )})

        self._mutate(lambda state: state.model_copy(update={field_name: updated}))
        return PatternValidation(valid=True)

    def apply_numbering_preset(self, series: DocumentSeries, preset_id: str) -> PatternValidation:
        """
        Switch a series to one of NUMBERING_PRESETS

        Raises:
            NumberingError: If no preset has this id
        """
        preset = get_preset(preset_id)
        if preset is None:
            raise NumberingError(f"Unknown numbering preset: {preset_id}", code="NUM02")
        return self.set_numbering_config(series, pattern=preset.pattern)

    def get_next_number(self, series: DocumentSeries, on: Optional[date] = None) -> str:
        """Preview the next number of a series without consuming it"""
        return generate_number(getattr(self._state, self._field_for(series)), on)

    def consume_number(self, series: DocumentSeries, on: Optional[date] = None) -> str:
        """
        Issue the next number of a series and advance its sequence

        Generation and increment happen in one mutation, so two callers
        can never receive the same number.
        """
        on = on or date.today()
        field_name = self._field_for(series)
        issued: List[str] = []

        def mutation(state: SettingsState) -> SettingsState:
            config: NumberingConfig = getattr(state, field_name)
            issued.append(generate_number(config, on))
            return state.model_copy(update={field_name: increment_number(config, on)})

        self._mutate(mutation)
        logger.info(f"Consumed {DocumentSeries(series).value} number {issued[0]}")
        return issued[0]

    def get_next_invoice_number(self, on: Optional[date] = None) -> str:
        return self.get_next_number(DocumentSeries.INVOICE, on)

    def consume_invoice_number(self, on: Optional[date] = None) -> str:
        return self.consume_number(DocumentSeries.INVOICE, on)

    def get_next_credit_note_number(self, on: Optional[date] = None) -> str:
        return self.get_next_number(DocumentSeries.CREDIT_NOTE, on)

    def consume_credit_note_number(self, on: Optional[date] = None) -> str:
        return self.consume_number(DocumentSeries.CREDIT_NOTE, on)

    def reset_sequence(self, series: DocumentSeries) -> None:
        """
        Set a series back to zero so the next number is 1

        Destructive: numbers issued before the reset can be issued again.
        """
        field_name = self._field_for(series)

        def mutation(state: SettingsState) -> SettingsState:
            config: NumberingConfig = getattr(state, field_name)
            reset = config.model_copy(update={"current_sequence": 0, "last_period": None})
            return state.model_copy(update={field_name: reset})

        self._mutate(mutation)
        logger.warning(f"Reset {DocumentSeries(series).value} numbering sequence")

    # ===== Template =====

    def set_template_id(self, template_id: str) -> None:
        self._update(template_id=template_id)

    def set_custom_primary_color(self, color: Optional[str]) -> None:
        self._update(custom_primary_color=color)
