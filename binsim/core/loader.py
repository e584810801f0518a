"""
Readers for judgment datasets and binary embedding files.

Judgment files hold ``word1 word2 score`` records, one per line. Embedding
files start with a header line, either ``bit_width`` or
``word_count bit_width``, followed by ``word block_1 ... block_n`` records
where each block is an unsigned integer in the file's radix.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import FrozenSet, Iterator, List, Optional, Sequence, Tuple, Union

from ..errors import FormatError, LoadError
from .evaluation import Judgment
from .vectors import SUPPORTED_BLOCK_SIZES, VectorStore
from .vocabulary import Vocabulary, normalize_word

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


# ---------------------------------------------------------------------
# Judgment datasets
# ---------------------------------------------------------------------

def read_judgments(path: PathLike, max_lines: int = 0) -> List[Judgment]:
    """
    Read a judgment file.

    Words are case-normalized. Blank lines are skipped and reading stops
    silently at the first malformed line or after ``max_lines`` records
    (0 means no limit).

    Raises:
        OSError: if the file cannot be opened
    """
    judgments: List[Judgment] = []
    with open(path, "r", encoding="utf-8", errors="replace") as f:
        for line_number, line in enumerate(f, start=1):
            if max_lines and len(judgments) >= max_lines:
                break
            fields = line.split()
            if not fields:
                continue
            if len(fields) < 3:
                logger.debug(f"{path}:{line_number}: stopping at short record")
                break
            try:
                score = float(fields[2])
            except ValueError:
                logger.debug(f"{path}:{line_number}: stopping at bad score {fields[2]!r}")
                break
            judgments.append(Judgment(normalize_word(fields[0]), normalize_word(fields[1]), score))
    return judgments


def iter_dataset_files(datasets_dir: PathLike, operation: str = "create_vocab") -> Iterator[Path]:
    """
    List the regular, non-hidden files of a dataset directory in name order.

    Raises:
        LoadError: if the directory cannot be opened
    """
    directory = Path(datasets_dir)
    try:
        entries = sorted(directory.iterdir())
    except OSError as e:
        raise LoadError(f"can't open {directory}: {e.strerror or e}", path=str(directory),
                        operation=operation) from e
    for entry in entries:
        if entry.name.startswith(".") or not entry.is_file():
            continue
        yield entry


def build_vocabulary(datasets_dir: PathLike, vocabulary: Optional[Vocabulary] = None) -> Vocabulary:
    """
    Collect every word of every dataset file into a vocabulary.

    Unreadable files are skipped with a warning.
    """
    vocabulary = vocabulary if vocabulary is not None else Vocabulary()
    n_files = 0
    for path in iter_dataset_files(datasets_dir, operation="create_vocab"):
        try:
            judgments = read_judgments(path)
        except OSError as e:
            logger.warning(f"create_vocab: can't open file {path}: {e}")
            continue
        n_files += 1
        for judgment in judgments:
            vocabulary.insert_if_absent(judgment.word1)
            vocabulary.insert_if_absent(judgment.word2)
    logger.info(f"Built vocabulary of {len(vocabulary)} words from {n_files} datasets")
    return vocabulary


# ---------------------------------------------------------------------
# Embedding files
# ---------------------------------------------------------------------

@dataclass(frozen=True)
class EmbeddingHeader:
    """Parsed first line of an embedding file."""

    bit_width: int
    word_count: Optional[int] = None

    @classmethod
    def parse(cls, line: str, path: Optional[str] = None) -> "EmbeddingHeader":
        """Parse ``bit_width`` or ``word_count bit_width``."""
        fields = line.split()
        if not fields:
            raise FormatError("can't read number of bits", path=path, line_number=1)
        try:
            values = [int(tok) for tok in fields[:2]]
        except ValueError:
            raise FormatError(f"can't read number of bits from {line.strip()!r}",
                              path=path, line_number=1) from None
        if len(values) == 2:
            word_count, bit_width = values
            if word_count < 0:
                raise FormatError(f"negative word count {word_count}", path=path, line_number=1)
            return cls(bit_width=bit_width, word_count=word_count)
        return cls(bit_width=values[0])


_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"


def _digit_set(radix: int) -> FrozenSet[str]:
    """ASCII digits valid in ``radix``, both letter cases."""
    digits = _DIGITS[:radix]
    return frozenset(digits + digits.upper())


def _parse_blocks(tokens: Sequence[str], n_blocks: int, radix: int,
                  block_size: int) -> Tuple[List[int], bool]:
    """Parse the block fields of one record.

    Returns the blocks read before the first bad or missing field (the rest
    left zero) and whether the record was well formed: exactly ``n_blocks``
    fields, each a run of ASCII digits of ``radix`` that fits in a block.
    Signs, underscores and non-ASCII digits make a field bad.
    """
    digits = _digit_set(radix)
    limit = 1 << block_size
    blocks = [0] * n_blocks
    for i, tok in enumerate(tokens[:n_blocks]):
        if not tok or not digits.issuperset(tok):
            return blocks, False
        value = int(tok, radix)
        if not 0 <= value < limit:
            return blocks, False
        blocks[i] = value
    return blocks, len(tokens) == n_blocks


def load_vectors(
    path: PathLike,
    vocabulary: Vocabulary,
    build_vocabulary: bool = False,
    block_size: int = 64,
    radix: int = 10,
    lenient: bool = False,
) -> VectorStore:
    """
    Load a binary embedding file into a frozen :class:`VectorStore`.

    Args:
        path: Embedding file
        vocabulary: Word index the store is addressed by
        build_vocabulary: Insert every record's word into ``vocabulary``
            (vocabulary-building load). When False only words already in
            ``vocabulary`` receive a vector (filtered load).
        block_size: Bits per packed block (8, 16, 32 or 64)
        radix: Radix of the block integers
        lenient: Keep malformed records with zero-filled blocks instead of
            skipping them

    Returns:
        Store sized to the vocabulary's identifier range

    Raises:
        LoadError: if the file cannot be opened
        FormatError: if the header is unusable
    """
    path_str = str(path)
    if block_size not in SUPPORTED_BLOCK_SIZES:
        raise FormatError(f"block size must be one of {SUPPORTED_BLOCK_SIZES}, got {block_size}",
                          path=path_str)
    if not 2 <= radix <= 36:
        raise FormatError(f"radix must be between 2 and 36, got {radix}", path=path_str)

    try:
        f = open(path, "r", encoding="utf-8", errors="replace")
    except OSError as e:
        raise LoadError(f"can't open {path_str}: {e.strerror or e}", path=path_str,
                        operation="load_vectors") from e

    with f:
        header = EmbeddingHeader.parse(f.readline(), path=path_str)
        if header.bit_width <= 0 or header.bit_width % block_size:
            raise FormatError(
                f"bit width {header.bit_width} is not a positive multiple of block size {block_size}",
                path=path_str, line_number=1
            )

        store = VectorStore(header.bit_width, block_size=block_size, size=len(vocabulary))
        if build_vocabulary and header.word_count:
            store.reserve(len(vocabulary) + header.word_count)
        stats = store.stats

        for line_number, line in enumerate(f, start=2):
            fields = line.split()
            if not fields:
                continue
            stats.records += 1
            word = fields[0]

            identifier = vocabulary.lookup(word)
            if identifier is None and not build_vocabulary:
                stats.out_of_vocabulary += 1
                continue
            if store.has_vector(identifier):
                stats.duplicates += 1
                logger.debug(f"{path_str}:{line_number}: duplicate word {word!r} skipped")
                continue

            blocks, well_formed = _parse_blocks(fields[1:], store.n_blocks, radix, block_size)
            if not well_formed:
                stats.malformed += 1
                if not lenient:
                    logger.debug(f"{path_str}:{line_number}: malformed vector for {word!r} skipped")
                    continue

            if identifier is None:
                identifier = vocabulary.insert_if_absent(word)
            store.put(identifier, blocks)
            stats.stored += 1

    store.resize(len(vocabulary))
    if header.word_count is not None and build_vocabulary and header.word_count != stats.stored:
        logger.warning(
            f"load_vectors: header declares {header.word_count} words, loaded {stats.stored}"
        )
    if stats.malformed:
        action = "kept zero-filled" if lenient else "skipped"
        logger.warning(f"load_vectors: {stats.malformed} malformed records {action} in {path_str}")
    logger.info(
        f"Loaded {stats.stored} vectors of {header.bit_width} bits from {path_str} "
        f"({stats.out_of_vocabulary} out of vocabulary, {stats.duplicates} duplicates)"
    )
    return store.freeze()
