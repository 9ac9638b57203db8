"""BM25 lexical relevance index over a batch of feed items."""

import math
import re
from collections import Counter
from dataclasses import dataclass
from typing import Dict, Iterable, List

from ..config import CategoryConfig
from ..models import FeedItem

TOKEN_PATTERN = re.compile(r"\b\w+\b")
MIN_TOKEN_LENGTH = 3


def tokenize(text: str) -> List[str]:
    """Split text into lowercase word tokens of three or more characters."""
    if not text:
        return []
    return [t for t in TOKEN_PATTERN.findall(text.lower()) if len(t) >= MIN_TOKEN_LENGTH]


def query_terms_for(category_config: CategoryConfig) -> List[str]:
    """Tokenize a category's query string the same way documents are."""
    return tokenize(category_config.query)


@dataclass(frozen=True)
class IndexedDocument:
    """Tokenized document held by the index."""

    item_id: str
    terms: List[str]
    term_freqs: Counter
    length: int


class BM25Index:
    """In-memory BM25 index rebuilt for every ranking pass."""

    def __init__(self, k1: float = 1.5, b: float = 0.75) -> None:
        """
        Initialize an empty index.

        Args:
            k1: Term frequency saturation
            b: Document length normalization
        """
        self.k1 = k1
        self.b = b
        self.documents: Dict[str, IndexedDocument] = {}
        self.doc_freq: Counter = Counter()
        self.avg_doc_length = 0.0

    @property
    def total_docs(self) -> int:
        return len(self.documents)

    @staticmethod
    def item_to_document(item: FeedItem) -> str:
        """Searchable text of an item."""
        parts = [
            item.title or "",
            item.summary or "",
            item.content_snippet or "",
            " ".join(item.categories or []),
        ]
        return " ".join(p for p in parts if p)

    def add_documents(self, items: Iterable[FeedItem]) -> None:
        """Replace the index contents with a new batch."""
        self.documents.clear()
        self.doc_freq.clear()

        for item in items:
            terms = tokenize(self.item_to_document(item))
            freqs = Counter(terms)
            self.documents[item.id] = IndexedDocument(
                item_id=item.id,
                terms=terms,
                term_freqs=freqs,
                length=len(terms),
            )

        for doc in self.documents.values():
            self.doc_freq.update(doc.term_freqs.keys())

        total_length = sum(doc.length for doc in self.documents.values())
        self.avg_doc_length = total_length / max(self.total_docs, 1)

    def idf(self, term: str) -> float:
        """Inverse document frequency of a term."""
        n = self.doc_freq.get(term.lower(), 0)
        return math.log((self.total_docs - n + 0.5) / (n + 0.5) + 1)

    def score(self, query_terms: Iterable[str]) -> Dict[str, float]:
        """BM25 score of every indexed document for the query."""
        scores = {doc_id: 0.0 for doc_id in self.documents}
        if self.avg_doc_length == 0:
            return scores

        unique_terms = list(dict.fromkeys(t.lower() for t in query_terms if t))
        for term in unique_terms:
            if term not in self.doc_freq:
                continue
            idf = self.idf(term)
            for doc_id, doc in self.documents.items():
                tf = doc.term_freqs.get(term, 0)
                if tf == 0:
                    continue
                numerator = tf * (self.k1 + 1)
                denominator = tf + self.k1 * (
                    1 - self.b + self.b * (doc.length / self.avg_doc_length)
                )
                scores[doc_id] += idf * (numerator / denominator)

        return scores

    @staticmethod
    def normalize_scores(scores: Dict[str, float]) -> Dict[str, float]:
        """Rescale scores to [0, 1] by the batch maximum."""
        if not scores:
            return {}
        max_score = max(scores.values())
        if max_score <= 0:
            return {doc_id: 0.0 for doc_id in scores}
        return {doc_id: min(score / max_score, 1.0) for doc_id, score in scores.items()}
