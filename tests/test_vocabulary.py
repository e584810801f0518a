"""Tests for the word <-> identifier index."""

import pytest

from binsim.core.vocabulary import Vocabulary, normalize_word


class TestVocabulary:
    """Test Vocabulary insertion and lookup."""

    def test_identifiers_assigned_in_first_seen_order(self):
        vocab = Vocabulary()
        assert vocab.insert_if_absent("cat") == 0
        assert vocab.insert_if_absent("dog") == 1
        assert vocab.insert_if_absent("car") == 2
        assert list(vocab) == ["cat", "dog", "car"]

    def test_insert_is_idempotent(self):
        vocab = Vocabulary()
        first = vocab.insert_if_absent("cat")
        assert len(vocab) == 1

        second = vocab.insert_if_absent("cat")
        assert second == first
        assert len(vocab) == 1

    def test_lookup_unknown_word_returns_none(self):
        vocab = Vocabulary(["cat"])
        assert vocab.lookup("dog") is None
        assert "dog" not in vocab
        assert len(vocab) == 1

    def test_lookup_is_case_sensitive(self):
        vocab = Vocabulary(["cat"])
        assert vocab.lookup("cat") == 0
        assert vocab.lookup("Cat") is None
        assert vocab.lookup(normalize_word("Cat")) == 0

    def test_word_of_round_trip(self):
        vocab = Vocabulary(["cat", "dog"])
        for word in vocab:
            assert vocab.word_of(vocab.lookup(word)) == word

    def test_word_of_out_of_range(self):
        vocab = Vocabulary(["cat"])
        with pytest.raises(IndexError):
            vocab.word_of(1)
        with pytest.raises(IndexError):
            vocab.word_of(-1)

    def test_constructor_deduplicates(self):
        vocab = Vocabulary(["cat", "dog", "cat"])
        assert len(vocab) == 2
        assert vocab.lookup("dog") == 1


def test_normalize_word_lowercases():
    assert normalize_word("New-York") == "new-york"
