# -*- coding: utf-8 -*-
"""
Tests for template tables and placeholder substitution.
"""

import json

import pytest

from kuma_session.localization import (
    GENERIC_ERROR_TEXT,
    LocaleTexts,
    default_locales,
    load_locales,
    substitute,
    texts_for,
)

SECTION = {
    "orderFilled": "%a / %pd / %a / %f",
    "closedPosition": "%pd %ep %pnl",
    "errorParams": "p",
    "errorInsufficientFunds": "f",
    "errorPrice": "pr",
    "errorQuantityLow": "q",
}


class TestSubstitute:

    def test_repeated_token_filled_in_call_order(self):
        assert substitute("%a then %a", ("%a", "first"), ("%a", "second")) == "first then second"

    def test_each_pair_replaces_one_occurrence(self):
        assert substitute("%x %x %x", ("%x", "1")) == "1 %x %x"

    def test_missing_token_is_ignored(self):
        assert substitute("plain", ("%a", "1")) == "plain"


class TestLocaleTexts:

    def test_from_mapping_camel_case(self):
        texts = LocaleTexts.from_mapping(SECTION)
        assert texts.order_filled == "%a / %pd / %a / %f"
        assert texts.error_generic == GENERIC_ERROR_TEXT

    def test_from_mapping_missing_template(self):
        section = dict(SECTION)
        del section["closedPosition"]
        with pytest.raises(ValueError, match="closed_position"):
            LocaleTexts.from_mapping(section)

    def test_texts_are_immutable(self):
        texts = LocaleTexts.from_mapping(SECTION)
        with pytest.raises(AttributeError):
            texts.error_price = "changed"

    def test_load_locales_yaml_and_json(self, tmp_path):
        json_path = tmp_path / "texts.json"
        json_path.write_text(json.dumps({"en": SECTION, "de": SECTION}), encoding="utf-8")

        table = load_locales(json_path)

        assert set(table) == {"en", "de"}
        assert table["de"].error_quantity_low == "q"


class TestDefaultLocales:

    def test_packaged_languages(self):
        table = default_locales()
        assert "en" in table
        assert "%pd" in table["en"].order_filled
        assert "%pnl" in table["en"].closed_position

    def test_unknown_language_falls_back_to_english(self):
        assert texts_for("xx") == default_locales()["en"]

    def test_explicit_table(self):
        table = {"en": LocaleTexts.from_mapping(SECTION)}
        assert texts_for("en", table).error_params == "p"
