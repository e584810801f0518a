"""binsim - Evaluate and query binary word embeddings."""

__version__ = "0.1.0"

from .core.vocabulary import Vocabulary, normalize_word
from .core.vectors import BinaryVector, VectorStore
from .core.similarity import sokal_michener
from .core.topk import Neighbor, TopKSelector, top_k
from .core.evaluation import CorrelationEvaluator, DatasetResult, Judgment, evaluate
from .core.loader import build_vocabulary, load_vectors, read_judgments

__all__ = [
    "Vocabulary",
    "normalize_word",
    "BinaryVector",
    "VectorStore",
    "sokal_michener",
    "Neighbor",
    "TopKSelector",
    "top_k",
    "CorrelationEvaluator",
    "DatasetResult",
    "Judgment",
    "evaluate",
    "build_vocabulary",
    "load_vectors",
    "read_judgments",
    "__version__",
]
