"""Tests for judgment and embedding file readers."""

import pytest

from binsim.core.loader import (
    EmbeddingHeader,
    build_vocabulary,
    iter_dataset_files,
    load_vectors,
    read_judgments,
)
from binsim.core.vocabulary import Vocabulary
from binsim.errors import FormatError, LoadError


class TestReadJudgments:
    """Test judgment dataset parsing."""

    def test_reads_and_lowercases(self, tmp_path):
        path = tmp_path / "ws.txt"
        path.write_text("Tiger cat 7.35\n\nbook PAPER 7.46\n")

        judgments = read_judgments(path)

        assert [(j.word1, j.word2, j.score) for j in judgments] == [
            ("tiger", "cat", 7.35),
            ("book", "paper", 7.46),
        ]

    def test_stops_at_malformed_line(self, tmp_path):
        path = tmp_path / "ws.txt"
        path.write_text("a b 1.0\nc d high\ne f 2.0\n")

        assert len(read_judgments(path)) == 1

    def test_stops_at_short_line(self, tmp_path):
        path = tmp_path / "ws.txt"
        path.write_text("a b 1.0\nc d\ne f 2.0\n")

        assert len(read_judgments(path)) == 1

    def test_max_lines_caps_records(self, tmp_path):
        path = tmp_path / "ws.txt"
        path.write_text("".join(f"w{i} v{i} {i}\n" for i in range(10)))

        assert len(read_judgments(path, max_lines=4)) == 4
        assert len(read_judgments(path, max_lines=0)) == 10

    def test_missing_file_raises_oserror(self, tmp_path):
        with pytest.raises(OSError):
            read_judgments(tmp_path / "nope.txt")


class TestDatasetDirectory:
    """Test dataset enumeration and vocabulary building."""

    def test_lists_regular_files_in_name_order(self, tmp_path):
        (tmp_path / "b.txt").write_text("")
        (tmp_path / "a.txt").write_text("")
        (tmp_path / ".hidden").write_text("")
        (tmp_path / "sub").mkdir()

        assert [p.name for p in iter_dataset_files(tmp_path)] == ["a.txt", "b.txt"]

    def test_missing_directory_is_load_error(self, tmp_path):
        with pytest.raises(LoadError) as exc_info:
            list(iter_dataset_files(tmp_path / "missing"))

        assert exc_info.value.operation == "create_vocab"
        assert exc_info.value.path.endswith("missing")

    def test_build_vocabulary(self, datasets_dir):
        vocab = build_vocabulary(datasets_dir)

        assert list(vocab) == ["cat", "dog", "car", "zebra", "yak", "emu", "gnu"]


class TestEmbeddingHeader:
    """Test header parsing."""

    def test_bit_width_only(self):
        assert EmbeddingHeader.parse("256\n") == EmbeddingHeader(bit_width=256)

    def test_word_count_and_bit_width(self):
        header = EmbeddingHeader.parse("400000 256")
        assert header.word_count == 400000
        assert header.bit_width == 256

    @pytest.mark.parametrize("line", ["", "bits", "12 wide"])
    def test_unparseable(self, line):
        with pytest.raises(FormatError):
            EmbeddingHeader.parse(line)


class TestLoadVectors:
    """Test both population policies and record handling."""

    def test_filtered_load_skips_unknown_words(self, filtered_embedding):
        vocab = Vocabulary(["dog", "cat", "emu"])

        store = load_vectors(filtered_embedding, vocab, block_size=8)

        assert len(store) == 3
        assert store.get(vocab.lookup("cat")).blocks.tolist() == [15]
        assert store.get(vocab.lookup("dog")).blocks.tolist() == [14]
        assert store.get(vocab.lookup("emu")) is None
        assert store.stats.out_of_vocabulary == 1
        assert len(vocab) == 3

    def test_building_load_grows_vocabulary(self, building_embedding):
        vocab = Vocabulary()

        store = load_vectors(building_embedding, vocab, build_vocabulary=True, block_size=8)

        assert list(vocab) == ["cat", "dog", "car"]
        assert store.population == 3
        assert store.get(2).blocks.tolist() == [240]

    def test_building_load_accepts_header_without_count(self, filtered_embedding):
        vocab = Vocabulary()
        store = load_vectors(filtered_embedding, vocab, build_vocabulary=True, block_size=8)
        assert store.population == 3

    def test_multi_block_64_bit_records(self, tmp_path):
        path = tmp_path / "wide.vec"
        path.write_text(f"128\nalpha {2 ** 64 - 1} 0\nbeta 1 2\n")
        vocab = Vocabulary()

        store = load_vectors(path, vocab, build_vocabulary=True)

        assert store.n_blocks == 2
        assert store.get(0).popcount() == 64
        assert store.get(1).blocks.tolist() == [1, 2]

    def test_radix(self, tmp_path):
        path = tmp_path / "bin.vec"
        path.write_text("8\ncat 00001111\n")
        vocab = Vocabulary()

        store = load_vectors(path, vocab, build_vocabulary=True, block_size=8, radix=2)

        assert store.get(0).to_bits() == "00001111"

    def test_bit_width_must_be_multiple_of_block_size(self, tmp_path):
        path = tmp_path / "bad.vec"
        path.write_text("12\ncat 1\n")
        with pytest.raises(FormatError):
            load_vectors(path, Vocabulary(), build_vocabulary=True, block_size=8)

    def test_unparseable_header(self, tmp_path):
        path = tmp_path / "bad.vec"
        path.write_text("wide\ncat 1\n")
        with pytest.raises(FormatError):
            load_vectors(path, Vocabulary(), block_size=8)

    def test_missing_file_is_load_error(self, tmp_path):
        with pytest.raises(LoadError) as exc_info:
            load_vectors(tmp_path / "missing.vec", Vocabulary())

        assert exc_info.value.operation == "load_vectors"
        assert "missing.vec" in str(exc_info.value)

    def test_unsupported_block_size(self, filtered_embedding):
        with pytest.raises(FormatError):
            load_vectors(filtered_embedding, Vocabulary(), block_size=12)

    def test_malformed_record_skipped_by_default(self, tmp_path):
        path = tmp_path / "broken.vec"
        path.write_text("8\ncat 15\ndog x1\ncar 256\nemu 1 2\n")
        vocab = Vocabulary()

        store = load_vectors(path, vocab, build_vocabulary=True, block_size=8)

        assert list(vocab) == ["cat"]
        assert store.stats.malformed == 3
        assert store.population == 1

    @pytest.mark.parametrize("token", ["1_5", "+14", "٢٤٠", "-1", "0x0f"])
    def test_non_digit_block_is_malformed(self, tmp_path, token):
        path = tmp_path / "loose.vec"
        path.write_text(f"8\ncat 15\ndog {token}\n", encoding="utf-8")
        vocab = Vocabulary()

        store = load_vectors(path, vocab, build_vocabulary=True, block_size=8)

        assert list(vocab) == ["cat"]
        assert store.stats.records == 2
        assert store.stats.stored == 1
        assert store.stats.malformed == 1

    def test_radix_digits_accept_either_case(self, tmp_path):
        path = tmp_path / "hex.vec"
        path.write_text("16\ncat 0f F0\n")
        vocab = Vocabulary()

        store = load_vectors(path, vocab, build_vocabulary=True, block_size=8, radix=16)

        assert store.get(0).blocks.tolist() == [15, 240]
        assert store.stats.malformed == 0

    def test_lenient_keeps_zero_filled_record(self, tmp_path):
        path = tmp_path / "broken.vec"
        path.write_text("16\ncat 15 15\ndog 7 x\ncar\n")
        vocab = Vocabulary()

        store = load_vectors(path, vocab, build_vocabulary=True, block_size=8, lenient=True)

        assert list(vocab) == ["cat", "dog", "car"]
        assert store.get(1).blocks.tolist() == [7, 0]
        assert store.get(2).blocks.tolist() == [0, 0]
        assert store.stats.malformed == 2

    def test_duplicate_word_keeps_first_vector(self, tmp_path):
        path = tmp_path / "dup.vec"
        path.write_text("3 8\ncat 15\ncat 0\ndog 14\n")
        vocab = Vocabulary()

        store = load_vectors(path, vocab, build_vocabulary=True, block_size=8)

        assert len(vocab) == 2
        assert store.get(0).blocks.tolist() == [15]
        assert store.stats.duplicates == 1

    def test_store_is_frozen_after_load(self, filtered_embedding):
        store = load_vectors(filtered_embedding, Vocabulary(["cat"]), block_size=8)
        assert store.frozen
