"""Value objects passed between the retention cleanup components."""

import math
from dataclasses import dataclass, field
from datetime import datetime

from retention_api.core.exceptions import ValidationError


def validate_max_age(max_age_minutes: float) -> float:
    """Return the retention window as a float, rejecting non-positive values."""
    if isinstance(max_age_minutes, bool) or not isinstance(max_age_minutes, int | float):
        raise ValidationError("max_age_minutes must be a number", field="max_age_minutes")
    if not math.isfinite(max_age_minutes) or max_age_minutes <= 0:
        raise ValidationError(
            f"max_age_minutes must be strictly positive, got {max_age_minutes}",
            field="max_age_minutes",
        )
    return float(max_age_minutes)


@dataclass(frozen=True)
class RetentionConfig:
    """Parameters of a single cleanup run.

    Bucket names are de-duplicated keeping their first occurrence; the order
    only affects the order of the report.
    """

    max_age_minutes: float
    bucket_names: tuple[str, ...]
    dry_run: bool = False
    deadline_seconds: float | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "max_age_minutes", validate_max_age(self.max_age_minutes))

        if isinstance(self.bucket_names, str):
            raise ValidationError("bucket_names must be a sequence of names", field="bucket_names")

        names: list[str] = []
        for name in self.bucket_names:
            if not isinstance(name, str) or not name.strip():
                raise ValidationError(f"Invalid bucket name: {name!r}", field="bucket_names")
            if name.strip() not in names:
                names.append(name.strip())
        if not names:
            raise ValidationError("At least one bucket must be configured", field="bucket_names")
        object.__setattr__(self, "bucket_names", tuple(names))

        if self.deadline_seconds is not None and self.deadline_seconds <= 0:
            object.__setattr__(self, "deadline_seconds", None)


@dataclass(frozen=True)
class BucketResult:
    """Tally of one bucket's sweep.

    Every expired object is either deleted or counted as an error, so
    ``expired_count == deleted_count + error_count`` always holds.
    """

    bucket_name: str
    total_seen: int = 0
    expired_count: int = 0
    deleted_count: int = 0
    error_count: int = 0
    deleted_bytes: int = 0
    listing_failed: bool = False
    skipped: bool = False
    incomplete: bool = False
    errors: tuple[str, ...] = ()

    @classmethod
    def empty(
        cls,
        bucket_name: str,
        *,
        listing_failed: bool = False,
        skipped: bool = False,
        errors: tuple[str, ...] = (),
    ) -> "BucketResult":
        return cls(
            bucket_name=bucket_name,
            listing_failed=listing_failed,
            skipped=skipped,
            incomplete=skipped,
            errors=errors,
        )


@dataclass(frozen=True)
class CleanupTotals:
    total_seen: int = 0
    total_expired: int = 0
    total_deleted: int = 0
    total_errors: int = 0

    @classmethod
    def from_results(cls, results: list[BucketResult]) -> "CleanupTotals":
        return cls(
            total_seen=sum(r.total_seen for r in results),
            total_expired=sum(r.expired_count for r in results),
            total_deleted=sum(r.deleted_count for r in results),
            total_errors=sum(r.error_count for r in results),
        )


@dataclass(frozen=True)
class CleanupReport:
    """Aggregated outcome of one run across all configured buckets."""

    start_time: datetime
    end_time: datetime
    max_age_minutes: float
    per_bucket: dict[str, BucketResult] = field(default_factory=dict)
    totals: CleanupTotals = field(default_factory=CleanupTotals)
    dry_run: bool = False
    incomplete: bool = False

    @property
    def duration_ms(self) -> int:
        return round((self.end_time - self.start_time).total_seconds() * 1000)

    @property
    def deleted_bytes(self) -> int:
        return sum(r.deleted_bytes for r in self.per_bucket.values())

    @property
    def failed_listings(self) -> list[str]:
        return [name for name, r in self.per_bucket.items() if r.listing_failed]

    @property
    def succeeded(self) -> bool:
        """True when every bucket was listed and the run finished without errors
        within its deadline.
        """
        return (
            self.totals.total_errors == 0 and not self.incomplete and not self.failed_listings
        )
