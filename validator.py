"""
validator.py
------------
Client-side checks on onboarding input before a profile is created.

Returns the cleaned values plus a list of notes. An empty notes list
means the input is safe to send.
"""

from decimal import Decimal, InvalidOperation
from typing import Dict, Any, Optional

from .config import AGE_MIN, AGE_MAX, GENDERS, MODES
from .errors import ProfileValidationError


def validate_profile_input(
    gender: Optional[str], age, capital, mode: Optional[str] = None
) -> Dict[str, Any]:
    """
    Return format:
    {
        "status": "success" | "error",
        "values": {"gender", "age", "capital", "mode"},
        "notes": [ ...problems found... ]
    }
    """
    notes = []

    # --------------------------------------------------------
    # 1. Gender (missing -> UNSPECIFIED)
    # --------------------------------------------------------
    gender = (gender or "UNSPECIFIED").upper()
    if gender not in GENDERS:
        notes.append(f"Unknown gender '{gender}'.")

    # --------------------------------------------------------
    # 2. Age within range
    # --------------------------------------------------------
    try:
        age = int(age)
    except (TypeError, ValueError):
        notes.append("Age must be a whole number.")
        age = None

    if age is not None and not AGE_MIN <= age <= AGE_MAX:
        notes.append(f"Age must be between {AGE_MIN} and {AGE_MAX}.")

    # --------------------------------------------------------
    # 3. Capital non-negative
    # --------------------------------------------------------
    if capital is None or str(capital).strip() == "":
        notes.append("Capital is required.")
        capital = Decimal("0")
    else:
        try:
            capital = Decimal(str(capital).replace(",", "").replace(" ", ""))
        except InvalidOperation:
            capital = Decimal("NaN")

        if not capital.is_finite():
            notes.append("Capital must be a number.")
        elif capital < 0:
            notes.append("Capital must not be negative.")

    # --------------------------------------------------------
    # 4. Mode (optional)
    # --------------------------------------------------------
    if mode is not None:
        mode = mode.upper()
        if mode not in MODES:
            notes.append(f"Unknown mode '{mode}'.")

    return {
        "status": "error" if notes else "success",
        "values": {"gender": gender, "age": age, "capital": capital, "mode": mode},
        "notes": notes,
    }


def require_valid_profile(gender, age, capital, mode=None) -> Dict[str, Any]:
    result = validate_profile_input(gender, age, capital, mode)
    if result["notes"]:
        raise ProfileValidationError(result["notes"])
    return result["values"]
