"""
Runtime settings for the purchase workflow.

Values are read from the environment, after loading an optional `.env` file
from the project root.

Environment variables (all optional):
- PURCHASES_CURRENT_USER: actor recorded on payments, uploads, checklist
  entries and workflow finalization (default "Current Admin")
- PURCHASES_DEFAULT_CURRENCY: currency for new purchases (default "JPY")
- PURCHASES_ITEMS_PER_PAGE: listing page size, one of 20/40/60/100 (default 20)
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv

env_path = Path(__file__).parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

PAGE_SIZE_OPTIONS = (20, 40, 60, 100)

DEFAULT_CURRENT_USER = "Current Admin"
DEFAULT_CURRENCY = "JPY"
DEFAULT_ITEMS_PER_PAGE = 20


@dataclass(frozen=True, slots=True)
class Settings:
    current_user: str = DEFAULT_CURRENT_USER
    default_currency: str = DEFAULT_CURRENCY
    items_per_page: int = DEFAULT_ITEMS_PER_PAGE


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Build Settings from the environment.

    Raises:
        RuntimeError: If a variable is set to an unusable value.
    """

    env = os.environ if environ is None else environ

    current_user = env.get("PURCHASES_CURRENT_USER", DEFAULT_CURRENT_USER).strip()
    if not current_user:
        raise RuntimeError(
            "Invalid environment variable: PURCHASES_CURRENT_USER. "
            "Set it to the name recorded on admin actions, or unset it."
        )

    currency = env.get("PURCHASES_DEFAULT_CURRENCY", DEFAULT_CURRENCY).strip().upper()
    if len(currency) != 3 or not currency.isalpha():
        raise RuntimeError(
            "Invalid environment variable: PURCHASES_DEFAULT_CURRENCY. "
            "Set it to a 3-letter currency code such as JPY or USD."
        )

    raw_per_page = env.get("PURCHASES_ITEMS_PER_PAGE", str(DEFAULT_ITEMS_PER_PAGE)).strip()
    try:
        items_per_page = int(raw_per_page)
    except ValueError:
        items_per_page = -1
    if items_per_page not in PAGE_SIZE_OPTIONS:
        raise RuntimeError(
            "Invalid environment variable: PURCHASES_ITEMS_PER_PAGE. "
            f"Set it to one of {', '.join(str(n) for n in PAGE_SIZE_OPTIONS)}."
        )

    return Settings(
        current_user=current_user,
        default_currency=currency,
        items_per_page=items_per_page,
    )


__all__ = ["PAGE_SIZE_OPTIONS", "Settings", "load_settings"]
