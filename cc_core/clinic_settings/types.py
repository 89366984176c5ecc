# cc_core/clinic_settings/types.py
from __future__ import annotations

import dataclasses
import re
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Mapping, Tuple

from cc_core.billing.rounding import RoundingConfig, to_decimal
from cc_core.sequences.numbering import NumberingRule, normalize_reset_scope

CALC_ORDER_A = "A"
CALC_ORDER_B = "B"

REFUND_POLICY_ANY = "anyRefund"
REFUND_POLICY_NET_NEGATIVE = "netNegative"
REFUND_POLICY_NONE = "none"

ASSIGN_ON_FINALIZE = "finalize"

COLLISION_RETRY = "retry"
COLLISION_FAIL = "fail"

# numbering streams -> settings field prefix
STREAMS = ("invoice", "dispense", "lab_order", "accession", "imaging_order")

_CAMEL_RE = re.compile(r"(?<!^)(?=[A-Z])")
_FORMAT_TOKEN_RE = re.compile(r"YYYY|#")

_TRUTHY = {"1", "true", "yes", "y", "on"}

# acronyms the generic camelCase split would mangle
_KEY_ALIASES = {
    "roundingUSDDecimals": "rounding_usd_decimals",
    "roundingKHRMode": "rounding_khr_mode",
}


def _snake(key: str) -> str:
    if key in _KEY_ALIASES:
        return _KEY_ALIASES[key]
    return _CAMEL_RE.sub("_", key).lower()


def _to_bool(value) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in _TRUTHY
    return bool(value)


def parse_number_format(fmt) -> tuple[str, str] | None:
    """
    Legacy invoice format string -> (prefix, reset scope).

    "INV-YYYYMM-####" -> ("INV", "monthly")
    "BILL-YYYY-####"  -> ("BILL", "yearly")
    "RCPT-####"       -> ("RCPT", "global")
    """
    raw = str(fmt or "").strip()
    match = _FORMAT_TOKEN_RE.search(raw)
    prefix = (raw[: match.start()] if match else raw).rstrip("-_/ ")
    if not prefix:
        return None

    if "YYYYMM" in raw:
        scope = "monthly"
    elif "YYYY" in raw:
        scope = "yearly"
    else:
        scope = "global"
    return prefix, scope


def _legacy_invoice_numbering(values: Mapping[str, Any]) -> dict[str, Any]:
    """
    numberFormat / sequenceScope / zeroPad from older settings documents.
    The scope encoded in numberFormat wins over sequenceScope.
    """
    out: dict[str, Any] = {}

    pad = values.get("zeroPad")
    if pad is not None:
        try:
            out["invoice_pad"] = int(pad)
        except (TypeError, ValueError):
            pass

    scope = values.get("sequenceScope")
    if scope:
        out["invoice_reset_scope"] = normalize_reset_scope(str(scope))

    parsed = parse_number_format(values.get("numberFormat"))
    if parsed is not None:
        out["invoice_prefix"], out["invoice_reset_scope"] = parsed
    return out


@dataclass(frozen=True)
class BillingSettings:
    """
    Read-only billing configuration, passed explicitly into the pure
    calculators. Defaults are the Cambodian clinic defaults.
    """
    base_currency: str = "KHR"
    allowed_currencies: Tuple[str, ...] = ("KHR", "USD")

    tax_rate: Decimal = Decimal("0")  # percent
    service_charge_rate: Decimal = Decimal("0")  # percent
    default_item_taxable: bool = True
    non_taxable_types: Tuple[str, ...] = ("lab",)
    calc_order: str = CALC_ORDER_A

    rounding_mode: str = "half-up"
    rounding_khr_mode: str = "nearest_100"
    rounding_usd_decimals: int = 2

    invoice_prefix: str = "INV"
    invoice_reset_scope: str = "monthly"
    invoice_pad: int = 4

    dispense_prefix: str = "DSP"
    dispense_reset_scope: str = "monthly"
    dispense_pad: int = 6

    lab_order_prefix: str = "LAB"
    lab_order_reset_scope: str = "monthly"
    lab_order_pad: int = 6

    accession_prefix: str = "ACC"
    accession_reset_scope: str = "monthly"
    accession_pad: int = 6

    imaging_order_prefix: str = "IMG"
    imaging_order_reset_scope: str = "monthly"
    imaging_order_pad: int = 6

    assign_invoice_no_on: str = ASSIGN_ON_FINALIZE
    collision_policy: str = COLLISION_RETRY
    refund_status_policy: str = REFUND_POLICY_ANY

    payment_methods: Tuple[str, ...] = ("cash", "card", "mobile", "insurance", "bank")

    @property
    def rounding(self) -> RoundingConfig:
        return RoundingConfig(
            mode=self.rounding_mode,
            khr_mode=self.rounding_khr_mode,
            usd_decimals=self.rounding_usd_decimals,
        )

    def numbering_rule(self, stream: str) -> NumberingRule:
        if stream not in STREAMS:
            raise KeyError(stream)
        return NumberingRule(
            prefix=getattr(self, f"{stream}_prefix"),
            reset_scope=normalize_reset_scope(getattr(self, f"{stream}_reset_scope")),
            pad=int(getattr(self, f"{stream}_pad")),
        )

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any] | None) -> "BillingSettings":
        """
        Overlay a stored settings document on the defaults.
        Accepts snake_case or camelCase keys; unknown keys are ignored.
        Explicit invoice_* keys take precedence over the legacy
        numberFormat / sequenceScope / zeroPad trio.
        """
        if not values:
            return cls()

        known = {f.name: f for f in dataclasses.fields(cls)}
        defaults = cls()
        kwargs: dict[str, Any] = _legacy_invoice_numbering(values)

        for raw_key, raw_value in values.items():
            name = _snake(str(raw_key))
            if name not in known or raw_value is None:
                continue
            current = getattr(defaults, name)
            if isinstance(current, bool):
                kwargs[name] = _to_bool(raw_value)
            elif isinstance(current, Decimal):
                kwargs[name] = max(Decimal("0"), to_decimal(raw_value))
            elif isinstance(current, int):
                try:
                    kwargs[name] = int(raw_value)
                except (TypeError, ValueError):
                    continue
            elif isinstance(current, tuple):
                if isinstance(raw_value, str):
                    raw_value = [raw_value]
                kwargs[name] = tuple(str(v) for v in raw_value)
            else:
                kwargs[name] = str(raw_value)

        return dataclasses.replace(defaults, **kwargs)
