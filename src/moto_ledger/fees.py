# MotoLedger - Back-office & Financial Dashboard for motorcycle shops
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Card-acquirer fee calculator.

Given the gross amount of a card/Pix sale, the acquirer fee percentage and an
optional advance-payment ("antecipação") fee, compute what the shop actually
receives:

    fee_amount     = gross * fee_rate / 100
    advance_amount = gross * advance_rate / 100   (only when requested)
    net_amount     = gross - fee_amount - advance_amount

The advance fee is applied to the gross amount, not to the amount left after
the acquirer fee.

Rate tables (acquirer x payment method x card brand) are configuration data:
``FeeSchedule`` holds them and ``settle`` combines a lookup with
``compute_net``. ``DEFAULT_FEE_SCHEDULE`` is used when the configuration file
does not define its own ``[fees]`` section.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional, Union

from .logging_utils import get_logger
from .models import ZERO, to_decimal

logger = get_logger(__name__)

Number = Union[Decimal, int, float, str]

PAYMENT_METHODS = ("pix", "debit", "credit")

_HUNDRED = Decimal("100")


@dataclass(frozen=True)
class FeeBreakdown:
    """Result of a fee computation."""

    fee_amount: Decimal
    advance_amount: Decimal
    net_amount: Decimal


def _non_negative(name: str, value: Number) -> Decimal:
    amount = to_decimal(value)
    if amount < ZERO:
        logger.warning("Negative %s (%s) clamped to zero.", name, amount)
        return ZERO
    return amount


def compute_net(
    gross_amount: Number,
    fee_rate_percent: Number,
    apply_advance: bool = False,
    advance_rate_percent: Number = ZERO,
) -> FeeBreakdown:
    """
    Compute the net settlement of a card/payment transaction.

    Args:
        gross_amount: Amount charged to the customer.
        fee_rate_percent: Acquirer fee, in percent (2.18 means 2.18 %).
        apply_advance: Whether the advance-payment fee applies.
        advance_rate_percent: Advance fee, in percent, applied to the gross.

    Returns:
        A FeeBreakdown. Negative inputs are clamped to zero; the function
        never raises for numeric input.
    """
    gross = _non_negative("gross amount", gross_amount)
    fee_rate = _non_negative("fee rate", fee_rate_percent)
    advance_rate = _non_negative("advance rate", advance_rate_percent)

    fee_amount = gross * fee_rate / _HUNDRED
    advance_amount = gross * advance_rate / _HUNDRED if apply_advance else ZERO
    net_amount = gross - fee_amount - advance_amount

    return FeeBreakdown(
        fee_amount=fee_amount,
        advance_amount=advance_amount,
        net_amount=net_amount,
    )


# ---------------------------------------------------------------------------
# Rate schedule
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class BrandRates:
    """Credit rates of one card brand: single payment and installments."""

    label: str
    spot: Decimal
    installment: Decimal


@dataclass(frozen=True)
class AcquirerRates:
    """
    Rates of one acquirer (card machine provider).

    ``pix`` and ``debit`` are None when the acquirer does not offer the
    method. ``credit`` maps a lowercase brand key (``visa``, ``master``...)
    to its rates; an empty mapping means credit is not offered.
    """

    label: str
    pix: Optional[Decimal] = None
    debit: Optional[Decimal] = None
    credit: Mapping[str, BrandRates] = field(default_factory=dict)

    @property
    def methods(self) -> tuple[str, ...]:
        offered = []
        if self.pix is not None:
            offered.append("pix")
        if self.debit is not None:
            offered.append("debit")
        if self.credit:
            offered.append("credit")
        return tuple(offered)


@dataclass(frozen=True)
class FeeSchedule:
    """Acquirer rate tables plus the advance-payment rate."""

    acquirers: Mapping[str, AcquirerRates]
    advance_rate: Decimal = Decimal("1.50")

    def acquirer(self, key: str) -> AcquirerRates:
        try:
            return self.acquirers[key.strip().lower()]
        except KeyError as exc:
            known = ", ".join(sorted(self.acquirers)) or "none"
            raise ValueError(
                f"Unknown acquirer: {key!r} (configured: {known})."
            ) from exc

    def rate_for(
        self,
        acquirer: str,
        method: str,
        brand: Optional[str] = None,
        installment: bool = False,
    ) -> Decimal:
        """
        Return the fee percentage for an acquirer/method/brand combination.

        Raises:
            ValueError: if the acquirer, method or brand is not configured.
        """
        rates = self.acquirer(acquirer)
        method_key = method.strip().lower()

        if method_key == "pix" and rates.pix is not None:
            return rates.pix
        if method_key == "debit" and rates.debit is not None:
            return rates.debit
        if method_key == "credit" and rates.credit:
            brand_rates = self.brand(rates, brand)
            return brand_rates.installment if installment else brand_rates.spot

        raise ValueError(
            f"Payment method {method!r} is not offered by acquirer {rates.label!r}."
        )

    @staticmethod
    def brand(rates: AcquirerRates, brand: Optional[str]) -> BrandRates:
        if not brand:
            raise ValueError("A card brand is required for credit payments.")
        try:
            return rates.credit[brand.strip().lower()]
        except KeyError as exc:
            raise ValueError(
                f"Unknown card brand {brand!r} for acquirer {rates.label!r}."
            ) from exc


@dataclass(frozen=True)
class Settlement:
    """Fee breakdown together with the applied rate and a display label."""

    breakdown: FeeBreakdown
    rate: Decimal
    label: str


def settle(
    schedule: FeeSchedule,
    gross_amount: Number,
    acquirer: str,
    method: str,
    brand: Optional[str] = None,
    installment: bool = False,
    apply_advance: bool = False,
) -> Settlement:
    """Look up the rate in ``schedule`` and compute the net settlement."""
    rates = schedule.acquirer(acquirer)
    rate = schedule.rate_for(acquirer, method, brand, installment)
    method_key = method.strip().lower()

    if method_key == "pix":
        label = f"Pix ({rates.label})"
    elif method_key == "debit":
        label = f"Débito ({rates.label})"
    else:
        brand_label = schedule.brand(rates, brand).label
        mode = "Com Juros" if installment else "Sem Juros"
        label = f"{brand_label} - {mode} ({rates.label})"

    breakdown = compute_net(
        gross_amount,
        rate,
        apply_advance=apply_advance,
        advance_rate_percent=schedule.advance_rate,
    )
    return Settlement(breakdown=breakdown, rate=rate, label=label)


def _credit_table(spec: Mapping[str, tuple[str, str, str]]) -> dict[str, BrandRates]:
    return {
        key: BrandRates(label=label, spot=Decimal(spot), installment=Decimal(inst))
        for key, (label, spot, inst) in spec.items()
    }


DEFAULT_FEE_SCHEDULE = FeeSchedule(
    acquirers={
        "rede": AcquirerRates(
            label="Rede",
            pix=Decimal("0.49"),
            debit=Decimal("0.99"),
            credit=_credit_table(
                {
                    "master": ("MasterCard", "2.83", "2.39"),
                    "visa": ("Visa", "2.83", "2.39"),
                    "elo": ("Elo", "3.64", "3.19"),
                    "amex": ("Amex", "3.64", "3.64"),
                    "hiper": ("Hiper", "5.55", "5.55"),
                }
            ),
        ),
    },
    advance_rate=Decimal("1.50"),
)
