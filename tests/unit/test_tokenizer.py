"""Tests for name tokenization."""

from formulary_service.services.tokenizer import tokenize, tokenize_names


def test_tokenize_lowercases_and_drops_short_tokens():
    assert tokenize("Insulin GL 10 Lantus") == ["insulin", "lantus"]


def test_tokenize_empty_and_short_queries():
    assert tokenize("") == []
    assert tokenize("   ") == []
    assert tokenize("ab c de") == []


def test_tokenize_deduplicates_preserving_order():
    assert tokenize("Metformin metformin ER") == ["metformin"]


def test_tokenize_names_merges_fields():
    assert tokenize_names("Lipitor", "Atorvastatin Calcium") == ["lipitor", "atorvastatin", "calcium"]
    assert tokenize_names("Metformin", "Metformin") == ["metformin"]
    assert tokenize_names("Prozac", None) == ["prozac"]
