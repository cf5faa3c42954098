"""Config validator — checks and normalizes the raw config document.

Rules are applied in a fixed order and never raise for a bad field: an
absent, wrong-typed or out-of-range value is replaced by a safe default and
a ``FieldCorrection`` is recorded.  Fields that only matter in the inactive
reload mode are carried through untouched.

``validate_config`` is pure.  ``validate_and_persist`` adds the write-back
step: corrected documents are saved unless the file was just created from
defaults.
"""

from __future__ import annotations

import copy
import logging
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from magpatcher.errors import WriteBackError
from magpatcher.loaders.config_loader import UPDATE_COMMENTS, write_config
from magpatcher.models.patch_config import (
    KEY_BASE_LOAD_TIME,
    KEY_BASE_UNLOAD_TIME,
    KEY_DEBUG,
    KEY_DISABLE_LOAD_PENALTY,
    KEY_LOAD_SPEED,
    KEY_MAX_SIZE,
    KEY_MIN_SIZE,
    KEY_RESIZE_3TO2,
    KEY_UNLOAD_SPEED,
    KEY_USE_GLOBAL_TIMES,
    PatchConfig,
    default_document,
)
from magpatcher.util.constants import (
    BASE_TIME_RANGE,
    DECIMALS,
    MAX_MAGAZINE_SIZE_RANGE,
    MIN_MAGAZINE_SIZE_RANGE,
    SPEED_FALLBACK,
    SPEED_RANGE,
    UNBOUNDED,
)

log = logging.getLogger(__name__)

MISSING = "missing"
INVALID = "invalid"
MAX_BELOW_MIN = "< min"


@dataclass(frozen=True)
class FieldCorrection:
    """One field the validator had to fix.

    Attributes:
        key: On-disk key of the field.
        reason: ``missing``, ``invalid`` or ``< min``.
        original: Value found in the document (None when missing).
        value: Value substituted.
    """

    key: str
    reason: str
    original: Any = None
    value: Any = None

    def __str__(self) -> str:
        if self.reason == MISSING:
            return self.key
        return f"{self.key} {self.reason}"


@dataclass
class ValidationReport:
    """Result of validating one config document.

    Attributes:
        config: The validated settings.
        document: Validated on-disk document, unknown keys preserved.
        original: Deep copy of the document as loaded.
        corrections: Every field that was fixed, in rule order.
        created_default: Whether the loader just wrote the default file.
        written_back: Set by ``validate_and_persist`` after a successful save.
    """

    config: PatchConfig
    document: dict[str, Any]
    original: dict[str, Any]
    corrections: list[FieldCorrection] = field(default_factory=list)
    created_default: bool = False
    written_back: bool = False

    @property
    def messages(self) -> list[str]:
        return [str(c) for c in self.corrections]

    @property
    def values_changed(self) -> bool:
        """Whether validation changed any value, corrected or merely normalized."""
        return self.document != self.original

    @property
    def needs_write_back(self) -> bool:
        return bool(self.corrections) and not self.created_default


# ===================================================================
# Coercion helpers
# ===================================================================


def coerce_decimal(value: Any) -> float | None:
    """Return *value* as a finite float, or None if it is not one.

    Strings are accepted with either ``.`` or ``,`` as decimal separator.
    Digit-group underscores are not accepted.  Booleans are rejected even
    though Python treats them as integers.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        if "_" in value:
            return None
        try:
            value = float(value.strip().replace(",", "."))
        except ValueError:
            return None
    if not isinstance(value, (int, float)):
        return None
    try:
        value = float(value)
    except OverflowError:
        return None
    return value if math.isfinite(value) else None


def coerce_int(value: Any) -> int | None:
    """Return *value* as an int if it is an integral JSON number."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return None


# ===================================================================
# Rules
# ===================================================================


def _fill_missing(doc: dict[str, Any], corrections: list[FieldCorrection]) -> None:
    for key, default in default_document().items():
        if key not in doc:
            doc[key] = default
            corrections.append(FieldCorrection(key, MISSING, None, default))


def _check_bool(doc: dict[str, Any], key: str, corrections: list[FieldCorrection]) -> None:
    raw = doc[key]
    if not isinstance(raw, bool):
        doc[key] = False
        corrections.append(FieldCorrection(key, INVALID, raw, False))


def _check_decimal(
    doc: dict[str, Any],
    key: str,
    bounds: tuple[float, float],
    fallback: float,
    corrections: list[FieldCorrection],
) -> None:
    raw = doc[key]
    number = coerce_decimal(raw)
    low, high = bounds
    if number is None or not low <= number <= high:
        doc[key] = fallback
        corrections.append(FieldCorrection(key, INVALID, raw, fallback))
    else:
        doc[key] = round(number, DECIMALS)


def _check_size(
    doc: dict[str, Any],
    key: str,
    bounds: tuple[int, int],
    fallback: int,
    corrections: list[FieldCorrection],
) -> None:
    raw = doc[key]
    size = coerce_int(raw)
    low, high = bounds
    if size is None or (size != UNBOUNDED and not low <= size <= high):
        doc[key] = fallback
        corrections.append(FieldCorrection(key, INVALID, raw, fallback))
    else:
        doc[key] = size


def _check_size_window(doc: dict[str, Any], corrections: list[FieldCorrection]) -> None:
    low, high = doc[KEY_MIN_SIZE], doc[KEY_MAX_SIZE]
    if UNBOUNDED not in (low, high) and high < low:
        doc[KEY_MAX_SIZE] = UNBOUNDED
        corrections.append(FieldCorrection(KEY_MAX_SIZE, MAX_BELOW_MIN, high, UNBOUNDED))


# ===================================================================
# Public API
# ===================================================================


def validate_config(document: dict[str, Any], created_default: bool = False) -> ValidationReport:
    """Validate a raw config document.

    The input mapping is not modified.

    Args:
        document: Raw key/value document from the loader.
        created_default: Whether the loader just wrote this document as
            the default file.

    Returns:
        A :class:`ValidationReport`; ``corrections`` is empty for a valid
        document.
    """
    defaults = PatchConfig()
    original = copy.deepcopy(document)
    doc = copy.deepcopy(document)
    corrections: list[FieldCorrection] = []

    _fill_missing(doc, corrections)
    _check_bool(doc, KEY_USE_GLOBAL_TIMES, corrections)

    if not doc[KEY_USE_GLOBAL_TIMES]:
        _check_decimal(doc, KEY_LOAD_SPEED, SPEED_RANGE, SPEED_FALLBACK, corrections)
        _check_decimal(doc, KEY_UNLOAD_SPEED, SPEED_RANGE, SPEED_FALLBACK, corrections)
        _check_size(doc, KEY_MIN_SIZE, MIN_MAGAZINE_SIZE_RANGE, defaults.min_magazine_size, corrections)
        _check_size(doc, KEY_MAX_SIZE, MAX_MAGAZINE_SIZE_RANGE, UNBOUNDED, corrections)
        _check_size_window(doc, corrections)
    else:
        _check_decimal(doc, KEY_BASE_LOAD_TIME, BASE_TIME_RANGE, defaults.base_load_time, corrections)
        _check_decimal(doc, KEY_BASE_UNLOAD_TIME, BASE_TIME_RANGE, defaults.base_unload_time, corrections)

    for key in (KEY_DISABLE_LOAD_PENALTY, KEY_RESIZE_3TO2, KEY_DEBUG):
        _check_bool(doc, key, corrections)

    return ValidationReport(
        config=PatchConfig.from_document(doc),
        document=doc,
        original=original,
        corrections=corrections,
        created_default=created_default,
    )


def write_back(report: ValidationReport, path: str | Path) -> None:
    """Save the validated document over the config file.

    Raises:
        WriteBackError: The file could not be written.
    """
    try:
        write_config(path, report.document, UPDATE_COMMENTS)
    except OSError as e:
        raise WriteBackError(f"Config write-back to {path} failed: {e}") from e
    report.written_back = True


def validate_and_persist(
    document: dict[str, Any],
    created_default: bool,
    path: str | Path,
) -> ValidationReport:
    """Validate *document* and write corrections back to *path*.

    A failed write is logged and swallowed: the corrected in-memory config
    is still good for this run.
    """
    report = validate_config(document, created_default=created_default)

    if report.corrections:
        log.warning("Config issues: %s - defaults applied", ", ".join(report.messages))
        if report.needs_write_back:
            try:
                write_back(report, path)
            except WriteBackError as e:
                log.error("%s", e)
            else:
                log.info("Config validated and written back due to changes")
        else:
            log.info("Default config created; no write-back")
    elif report.values_changed:
        log.info("Config validated; only normalization differences found, skipping write-back")
    else:
        log.info("Config validated; no changes needed")

    return report
