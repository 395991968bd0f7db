"""
Keyword Analytics
Frequency-based keyword extraction, sentence co-occurrence mining, and
query relevance filtering over publication text.

Everything here is pure: same input, same output, no I/O.
"""

import re
from collections import Counter
from typing import Iterable, Sequence

from bioexplorer.models import KeywordCount, Publication

MIN_KEYWORD_COUNT = 2
RELEVANT_PUBLICATION_CAP = 12
TITLE_MATCH_PREFIX = 50

# Words of five letters or more; shorter words never reach the stopword check
LONG_WORD_RE = re.compile(r"\b[a-z]{5,}\b")
QUERY_WORD_RE = re.compile(r"[a-z0-9]+")
SENTENCE_SPLIT_RE = re.compile(r"[.!?]")

STOPWORDS = frozenset({
    "about", "above", "abstract", "across", "after", "again", "against", "along",
    "already", "although", "among", "analysis", "another", "around", "associated",
    "based", "because", "before", "being", "below", "between", "compared",
    "conditions", "could", "current", "different", "during", "effect", "effects",
    "either", "especially", "every", "first", "following", "found", "further",
    "given", "having", "however", "important", "including", "increased",
    "investigate", "investigated", "itself", "known", "large", "later", "least",
    "level", "levels", "little", "method", "methods", "might", "model", "models",
    "month", "months", "never", "observed", "other", "others", "paper",
    "particular", "perhaps", "performed", "present", "previous", "previously",
    "provide", "provides", "rather", "recent", "related", "report", "reported",
    "research", "result", "results", "reveal", "reveals", "several", "shall",
    "should", "showed", "shown", "shows", "significant", "significantly",
    "similar", "since", "small", "specific", "still", "studies", "study",
    "suggest", "suggests", "summary", "their", "there", "therefore", "these",
    "thing", "things", "third", "those", "though", "three", "through", "title",
    "together", "total", "toward", "towards", "under", "until", "using",
    "various", "whereas", "where", "whether", "which", "while", "whole", "whose",
    "within", "without", "would", "years",
})


def query_terms(query: str) -> list[str]:
    """Lowercase query words longer than three characters, in order, unique."""
    seen: dict[str, None] = {}
    for word in QUERY_WORD_RE.findall(query.lower()):
        if len(word) > 3:
            seen.setdefault(word, None)
    return list(seen)


def _keyword_text(publication: Publication) -> str:
    return f"{publication.title} {publication.abstract}".lower()


def _candidate_words(text: str, excluded: set[str]) -> list[str]:
    return [w for w in LONG_WORD_RE.findall(text) if w not in STOPWORDS and w not in excluded]


def extract_keywords(
    publications: Iterable[Publication],
    search_terms: Iterable[str] = (),
    top_n: int = 15,
) -> list[KeywordCount]:
    """
    Count frequent long words across publication titles and abstracts.

    Words shorter than five letters, stopwords, and the active search terms
    are ignored. Only words found in at least two publications are kept;
    the reported count is the raw number of occurrences.

    Args:
        publications: Publications to scan.
        search_terms: Terms already being searched for.
        top_n: 15 for question-driven graphs, 10 for corpus overviews.

    Returns:
        Keywords with raw counts, most frequent first.
    """
    excluded = {term.lower() for term in search_terms}
    counts: Counter[str] = Counter()
    publication_counts: Counter[str] = Counter()
    for publication in publications:
        words = _candidate_words(_keyword_text(publication), excluded)
        counts.update(words)
        publication_counts.update(set(words))

    frequent = [
        (word, n)
        for word, n in counts.most_common()
        if publication_counts[word] >= MIN_KEYWORD_COUNT
    ]
    return [KeywordCount(term=word, count=n) for word, n in frequent[:top_n]]


def extract_cooccurring_terms(
    publications: Iterable[Publication],
    search_terms: Iterable[str],
    top_n: int = 10,
) -> list[KeywordCount]:
    """
    Find words that share a sentence with any search term.

    Each publication's text is split on '.', '!' and '?'. Only sentences
    mentioning a search term contribute words.
    """
    terms = [term.lower() for term in search_terms if term]
    if not terms:
        return []
    excluded = set(terms)

    counts: Counter[str] = Counter()
    for publication in publications:
        for sentence in SENTENCE_SPLIT_RE.split(publication.search_text().lower()):
            if any(term in sentence for term in terms):
                counts.update(_candidate_words(sentence, excluded))

    return [KeywordCount(term=word, count=n) for word, n in counts.most_common(top_n)]


def filter_relevant_publications(
    publications: Iterable[Publication],
    query: str,
    source_titles: Sequence[str] = (),
    cap: int = RELEVANT_PUBLICATION_CAP,
) -> list[Publication]:
    """
    Keep publications that match a source title or mention a query term.

    A publication matches a source title when the first 50 characters of
    that title occur in its text. Stops after cap matches.
    """
    prefixes = [title.lower()[:TITLE_MATCH_PREFIX] for title in source_titles if title.strip()]
    terms = query_terms(query)

    relevant = []
    for publication in publications:
        text = publication.search_text().lower()
        if any(prefix in text for prefix in prefixes) or any(term in text for term in terms):
            relevant.append(publication)
            if len(relevant) >= cap:
                break
    return relevant
