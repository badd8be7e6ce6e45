"""
Localized message templates.

Templates carry positional placeholder tokens (``%a``, ``%pd``, ``%ep`` ...).
A table is loaded once and handed to each session as an immutable value.
"""

import logging
from dataclasses import dataclass
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple, Union

import yaml

logger = logging.getLogger(__name__)

DEFAULT_LANGUAGE = "en"
GENERIC_ERROR_TEXT = "❌ <b>ERROR</b>"

# wire/file key -> LocaleTexts field
_FIELD_KEYS = {
    "orderFilled": "order_filled",
    "closedPosition": "closed_position",
    "errorParams": "error_params",
    "errorInsufficientFunds": "error_insufficient_funds",
    "errorPrice": "error_price",
    "errorQuantityLow": "error_quantity_low",
    "errorGeneric": "error_generic",
}


@dataclass(frozen=True)
class LocaleTexts:
    """Templates for one language."""
    order_filled: str
    closed_position: str
    error_params: str
    error_insufficient_funds: str
    error_price: str
    error_quantity_low: str
    error_generic: str = GENERIC_ERROR_TEXT

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "LocaleTexts":
        """Build from a texts-file section, accepting camelCase or snake_case keys."""
        values = {}
        for key, value in data.items():
            field_name = _FIELD_KEYS.get(key, key)
            if field_name in cls.__dataclass_fields__:
                values[field_name] = str(value)
        missing = [
            name for name, f in cls.__dataclass_fields__.items()
            if name not in values and name != "error_generic"
        ]
        if missing:
            raise ValueError(f"Locale section is missing templates: {', '.join(missing)}")
        return cls(**values)


def substitute(template: str, *replacements: Tuple[str, str]) -> str:
    """
    Fill placeholder tokens left to right.

    Each ``(token, value)`` pair replaces only the first remaining occurrence
    of ``token``, so a token that appears twice is filled by two pairs given
    in the order the occurrences appear.
    """
    text = template
    for token, value in replacements:
        text = text.replace(token, str(value), 1)
    return text


def load_locales(path: Union[str, Path]) -> Dict[str, LocaleTexts]:
    """Load a language -> templates table from a YAML (or JSON) file."""
    with open(path, encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}
    return _build_table(raw)


@lru_cache(maxsize=1)
def default_locales() -> Dict[str, LocaleTexts]:
    """Packaged template table, loaded once per process."""
    text = resources.files("kuma_session").joinpath("data/texts.yml").read_text(encoding="utf-8")
    return _build_table(yaml.safe_load(text))


def texts_for(lang: str, table: Optional[Mapping[str, LocaleTexts]] = None) -> LocaleTexts:
    """Templates for ``lang``, falling back to English for unknown languages."""
    table = table if table is not None else default_locales()
    if lang in table:
        return table[lang]
    logger.warning(f"No texts for language '{lang}', using '{DEFAULT_LANGUAGE}'")
    return table[DEFAULT_LANGUAGE]


def _build_table(raw: Mapping[str, Any]) -> Dict[str, LocaleTexts]:
    return {lang: LocaleTexts.from_mapping(section) for lang, section in raw.items()}
