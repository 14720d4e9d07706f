"""
Rate Validator

Turns one upstream series envelope ``{code, currency, rates: [...]}`` into
canonical RateRecords. Malformed entries are rejected individually; the
rest of the batch is still returned.
"""

import logging
import re
from dataclasses import dataclass, field
from datetime import date, timedelta
from decimal import Decimal, InvalidOperation
from typing import Any, Callable

from ratebook.models import RateRecord, TableType

logger = logging.getLogger(__name__)

CURRENCY_CODE_PATTERN = re.compile(r"^[A-Z]{3}$")
DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")

# Upstream publications may be dated one day ahead of the local clock.
FUTURE_DATE_TOLERANCE = timedelta(days=1)

# Rates are stored as NUMERIC(18, 6).
RATE_SCALE = Decimal("0.000001")
MAX_RATE = Decimal("1000000000000")


class RateValidationError(ValueError):
    """A single rate entry failed validation."""


@dataclass
class ValidationBatch:
    """Validated records of one envelope plus the rejected entries' reasons."""
    records: list[RateRecord] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @property
    def failed(self) -> int:
        return len(self.errors)


def is_valid_currency_code(code: Any) -> bool:
    return isinstance(code, str) and CURRENCY_CODE_PATTERN.match(code) is not None


def parse_positive_rate(value: Any) -> Decimal:
    """
    Convert a numeric upstream value to a positive Decimal.

    Raises:
        RateValidationError: If the value is not numeric, not > 0 or not
            storable with six decimal places below MAX_RATE.
    """
    if isinstance(value, bool):
        raise RateValidationError(f"not numeric: {value!r}")
    try:
        rate = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise RateValidationError(f"not numeric: {value!r}") from None
    if not rate.is_finite() or rate <= 0:
        raise RateValidationError(f"must be positive: {value!r}")
    if rate >= MAX_RATE:
        raise RateValidationError(f"too large: {value!r}")
    if rate.quantize(RATE_SCALE) != rate:
        raise RateValidationError(f"more than 6 decimal places: {value!r}")
    return rate


class RateValidator:
    """
    Schema-aware validation of upstream rate entries.

    Args:
        today: Clock returning the current date, used for the future-date check.
    """

    def __init__(self, today: Callable[[], date] = date.today):
        self._today = today

    @staticmethod
    def is_valid_envelope(response: Any) -> bool:
        return (
            isinstance(response, dict)
            and isinstance(response.get("rates"), list)
            and response.get("code") is not None
            and response.get("currency") is not None
        )

    def parse_effective_date(self, value: Any) -> date:
        """Parse a YYYY-MM-DD date that is not more than one day ahead."""
        if not isinstance(value, str) or not DATE_PATTERN.match(value):
            raise RateValidationError(f"invalid effective date format: {value!r}")
        try:
            effective = date.fromisoformat(value)
        except ValueError:
            raise RateValidationError(f"impossible effective date: {value}") from None
        if effective > self._today() + FUTURE_DATE_TOLERANCE:
            raise RateValidationError(f"effective date in the future: {value}")
        return effective

    def validate_entry(
        self,
        currency_code: str,
        currency_name: str,
        entry: Any,
        table_type: TableType
    ) -> RateRecord:
        """
        Validate one rate entry and shape it into a RateRecord.

        Raises:
            RateValidationError: If any field is invalid.
        """
        if not is_valid_currency_code(currency_code):
            raise RateValidationError(
                f"Invalid currency code format: {currency_code} (expected 3 uppercase letters)"
            )
        if not isinstance(entry, dict):
            raise RateValidationError(f"Rate entry for {currency_code} is not an object")

        effective_date = self.parse_effective_date(entry.get("effectiveDate"))

        values: dict[str, Decimal | None] = {}
        for name in table_type.rate_fields:
            raw = entry.get(name)
            if raw is None:
                values[name] = None
                continue
            try:
                values[name] = parse_positive_rate(raw)
            except RateValidationError as e:
                raise RateValidationError(
                    f"Invalid {name} rate for {currency_code}: {e}"
                ) from None

        return RateRecord(
            currency_code=currency_code,
            currency_name=str(currency_name)[:100],
            table_type=table_type,
            rate=table_type.make_rate(values),
            effective_date=effective_date,
            table_number=str(entry.get("no") or "")[:20],
        )

    def normalize(self, response: Any, table_type: str | TableType) -> ValidationBatch:
        """Validate a whole envelope; invalid entries are skipped and reported."""
        batch = ValidationBatch()
        table = TableType.coerce(table_type)

        if not self.is_valid_envelope(response):
            message = "Invalid API response structure received"
            logger.error(message)
            batch.errors.append(message)
            return batch

        currency_code = response["code"]
        currency_name = response["currency"]

        for entry in response["rates"]:
            try:
                batch.records.append(
                    self.validate_entry(currency_code, currency_name, entry, table)
                )
            except RateValidationError as e:
                batch.errors.append(str(e))
                self._log_rejection(currency_code, entry, e)

        return batch

    @staticmethod
    def _log_rejection(currency_code: Any, entry: Any, error: Exception) -> None:
        entry = entry if isinstance(entry, dict) else {}
        effective = entry.get("effectiveDate", "unknown")
        rate_value = next(
            (entry[k] for k in ("mid", "bid", "ask") if entry.get(k) is not None),
            "N/A"
        )
        logger.warning(
            f"Validation failed for {currency_code} on {effective} "
            f"(rate: {rate_value}): {error}"
        )
