"""Tax and benefit reference data (brackets, credits, RRIF minimums, CPP/OAS amounts)."""

import functools
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

FEDERAL = "federal"
CPP = "CPP"
OAS = "OAS"

DEFAULT_REFERENCE_PATH = Path(__file__).parent / "data" / "reference.toml"

RRIF_MINIMUM_AGE = 55  # No mandatory withdrawal before this age
RRIF_MAXIMUM_AGE = 95  # Ages at or above use this bucket's rate

# Amounts the engine reads from each benefit table
REQUIRED_BENEFIT_KEYS: dict[str, tuple[str, ...]] = {
    CPP: ("max_monthly", "ympe"),
    OAS: ("clawback_threshold", "clawback_rate"),
}


class ReferenceDataError(ValueError):
    """Reference data cannot be resolved. Never defaulted silently."""


@dataclass(frozen=True)
class TaxBracket:
    """One progressive bracket. limit None = no upper limit (top bracket)."""

    limit: float | None
    rate: float


@dataclass(frozen=True)
class AgeCredit:
    max_credit: float
    income_threshold: float
    reduction_rate: float


class TaxDataProvider(Protocol):
    def get_bracket_table(self, jurisdiction: str, year: int) -> list[TaxBracket]: ...

    def get_basic_credit(self, year: int, jurisdiction: str = FEDERAL) -> float: ...

    def get_age_credit(self, year: int, jurisdiction: str = FEDERAL) -> AgeCredit | None: ...

    def get_minimum_withdrawal_percentage(self, age: int) -> float: ...

    def get_benefit_reference_amounts(self, benefit: str, year: int) -> dict[str, float]: ...


@dataclass
class _Jurisdiction:
    brackets: list[TaxBracket]
    basic_personal_amount: float | None = None
    age_amount: AgeCredit | None = None


@dataclass
class ReferenceData:
    """In-memory TaxDataProvider keyed by year and jurisdiction."""

    jurisdictions: dict[tuple[int, str], _Jurisdiction] = field(default_factory=dict)
    benefits: dict[tuple[int, str], dict[str, float]] = field(default_factory=dict)
    rrif_minimums: dict[int, float] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, raw: dict) -> "ReferenceData":
        """Build from the parsed TOML layout (see data/reference.toml)."""
        data = cls(
            rrif_minimums={int(age): float(pct) for age, pct in raw.get("rrif_minimums", {}).items()},
        )
        tax_years = raw.get("tax_years", [])
        if not tax_years:
            raise ReferenceDataError("Reference data must contain at least one [[tax_years]] entry")
        for entry in tax_years:
            year = int(entry["year"])
            if "federal" in entry:
                data.jurisdictions[(year, FEDERAL)] = _parse_jurisdiction(entry["federal"], year, FEDERAL)
            for code, prov in entry.get("provinces", {}).items():
                data.jurisdictions[(year, code)] = _parse_jurisdiction(prov, year, code)
            for benefit, amounts in entry.get("benefits", {}).items():
                data.benefits[(year, benefit)] = {k: float(v) for k, v in amounts.items()}
        return data

    def _jurisdiction(self, jurisdiction: str, year: int) -> _Jurisdiction:
        try:
            return self.jurisdictions[(year, jurisdiction)]
        except KeyError:
            raise ReferenceDataError(
                f"No tax data available for {jurisdiction} in {year}"
            ) from None

    def get_bracket_table(self, jurisdiction: str, year: int) -> list[TaxBracket]:
        return list(self._jurisdiction(jurisdiction, year).brackets)

    def get_basic_credit(self, year: int, jurisdiction: str = FEDERAL) -> float:
        amount = self._jurisdiction(jurisdiction, year).basic_personal_amount
        if amount is None:
            raise ReferenceDataError(f"No basic personal amount for {jurisdiction} in {year}")
        return amount

    def get_age_credit(self, year: int, jurisdiction: str = FEDERAL) -> AgeCredit | None:
        """Age amount for 65+. Federal must exist; provinces may have none."""
        credit = self._jurisdiction(jurisdiction, year).age_amount
        if credit is None and jurisdiction == FEDERAL:
            raise ReferenceDataError(f"No federal age amount in {year}")
        return credit

    def get_minimum_withdrawal_percentage(self, age: int) -> float:
        if age < RRIF_MINIMUM_AGE:
            return 0.0
        key = min(age, RRIF_MAXIMUM_AGE)
        try:
            return self.rrif_minimums[key]
        except KeyError:
            raise ReferenceDataError(f"No RRIF minimum percentage for age {key}") from None

    def get_benefit_reference_amounts(self, benefit: str, year: int) -> dict[str, float]:
        try:
            amounts = dict(self.benefits[(year, benefit)])
        except KeyError:
            raise ReferenceDataError(f"No {benefit} reference amounts for {year}") from None
        missing = [k for k in REQUIRED_BENEFIT_KEYS.get(benefit, ()) if k not in amounts]
        if missing:
            raise ReferenceDataError(f"{benefit} reference amounts for {year} lack {', '.join(missing)}")
        return amounts


def _parse_brackets(raw: list[dict], year: int, jurisdiction: str) -> list[TaxBracket]:
    if not raw:
        raise ReferenceDataError(f"Empty bracket table for {jurisdiction} in {year}")
    brackets = []
    previous = 0.0
    for i, b in enumerate(raw):
        limit = b.get("limit")
        if limit is None and i != len(raw) - 1:
            raise ReferenceDataError(
                f"Only the top bracket may be unbounded ({jurisdiction} {year}, bracket {i})"
            )
        if limit is not None:
            if limit <= previous:
                raise ReferenceDataError(
                    f"Bracket limits must ascend ({jurisdiction} {year}: {limit} after {previous})"
                )
            previous = limit
        brackets.append(TaxBracket(limit=None if limit is None else float(limit), rate=float(b["rate"])))
    return brackets


def _parse_jurisdiction(raw: dict, year: int, jurisdiction: str) -> _Jurisdiction:
    age = raw.get("age_amount")
    basic = raw.get("basic_personal_amount")
    return _Jurisdiction(
        brackets=_parse_brackets(raw.get("brackets", []), year, jurisdiction),
        basic_personal_amount=None if basic is None else float(basic),
        age_amount=AgeCredit(**{k: float(v) for k, v in age.items()}) if age else None,
    )


def load_reference_data(path: Path | None = None) -> ReferenceData:
    """Load reference data from a TOML file (default: bundled data/reference.toml)."""
    if path is None:
        path = DEFAULT_REFERENCE_PATH
    try:
        with open(path, "rb") as f:
            raw = tomllib.load(f)
    except FileNotFoundError:
        raise ReferenceDataError(f"Reference data file not found: {path}") from None
    except tomllib.TOMLDecodeError as e:
        raise ReferenceDataError(f"Invalid reference data file {path}: {e}") from e
    return ReferenceData.from_dict(raw)


@functools.cache
def default_reference_data() -> ReferenceData:
    """Bundled reference data, parsed once per process."""
    return load_reference_data()
