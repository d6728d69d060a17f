"""Tests for alias derivation and variant generation."""

from shift_core.aliases import (
    NBSP,
    alias_matches,
    build_alias_variants,
    derive_alias,
    normalize_email,
    normalize_phone,
    roster_segments,
    unique_upper,
)


class TestNormalize:
    def test_email(self):
        assert normalize_email("  Johan@ACW.com ") == "johan@acw.com"
        assert normalize_email(None) == ""

    def test_phone(self):
        assert normalize_phone("+1 (617) 555-0101") == "16175550101"
        assert normalize_phone(None) == ""


class TestDeriveAlias:
    def test_drops_middle_initial(self):
        assert derive_alias("Johan A. Giraldo") == "GIRALDO"

    def test_multi_word_joiner(self):
        assert derive_alias("Maria De La Cruz") == "DE LA CRUZ"

    def test_single_joiner(self):
        assert derive_alias("Ludwig van Beethoven") == "VAN BEETHOVEN"
        assert derive_alias("Ana del Valle") == "DEL VALLE"

    def test_collapses_whitespace(self):
        assert derive_alias("  Sofia    Zuleta ") == "ZULETA"

    def test_keeps_accents_and_strips_punctuation(self):
        assert derive_alias("Iván Muñoz") == "MUÑOZ"
        assert derive_alias("Kelly O'Brien") == "OBRIEN"

    def test_empty(self):
        assert derive_alias("") == ""
        assert derive_alias(None) == ""
        assert derive_alias("J.") == ""


class TestAliasVariants:
    def test_expected_variants(self):
        variants = build_alias_variants("Johan Giraldo")
        for expected in ("GIRALDO", "J. GIRALDO", "J.GIRALDO", "J GIRALDO", "JOHAN GIRALDO"):
            assert expected in variants

    def test_nbsp_variants(self):
        variants = build_alias_variants("Johan Giraldo")
        assert f"J{NBSP}.{NBSP}GIRALDO" in variants
        assert f"J{NBSP}GIRALDO" in variants

    def test_uppercase_and_unique(self):
        variants = build_alias_variants("Johan Giraldo")
        assert all(v == v.upper() for v in variants)
        assert len(variants) == len(set(variants))

    def test_surname_first(self):
        assert build_alias_variants("Maria De La Cruz")[0] == "DE LA CRUZ"

    def test_empty(self):
        assert build_alias_variants("") == []


class TestMatching:
    def test_alias_matches_initial_form(self):
        assert alias_matches("Johan Giraldo", "J. GIRALDO")
        assert not alias_matches("Johan Giraldo", "S. BARRERA")
        assert not alias_matches("", "GIRALDO")

    def test_unique_upper(self):
        assert unique_upper([" giraldo", "GIRALDO", None, "", "j. giraldo"]) == ["GIRALDO", "J. GIRALDO"]

    def test_roster_segments(self):
        roster = [
            {"name": "Johan Giraldo"},
            {"name": "Pedro Perez"},
            {"name": "Santiago Barrera"},
            {"name": "Elena Reyes"},
            {"name": "Sofia Zuleta"},
        ]
        groups = roster_segments(
            roster,
            {
                "back": ("J. GIRALDO", "S. BARRERA"),
                "front": ("E. REYES", "S. ZULETA"),
                "cash": ("K. ORTIZ", "C. BUSTAMANTE"),
            },
        )
        assert [r["name"] for r in groups["back"]] == ["Johan Giraldo", "Pedro Perez", "Santiago Barrera"]
        assert [r["name"] for r in groups["front"]] == ["Elena Reyes", "Sofia Zuleta"]
        assert groups["cash"] == []
