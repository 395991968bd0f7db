"""
Corpus Statistics
Dashboard counts over the whole publication store: totals, topic and
organism distributions, and corpus-wide keywords.
"""

import re
from typing import Sequence

from bioexplorer.analytics.keywords import extract_keywords
from bioexplorer.models import KeywordCount, Publication

TOPICS = [
    "Microgravity",
    "Bone Loss",
    "Stem Cells",
    "Gene Expression",
    "Radiation",
    "Muscle Atrophy",
    "Cardiovascular",
    "Plant Growth",
    "Microbiome",
    "Immune System",
]

ORGANISMS = [
    "Mice",
    "Rats",
    "Plants",
    "Bacteria",
    "Yeast",
    "C. elegans",
    "Fruit Flies",
    "Human Cells",
]

CORPUS_KEYWORD_LIMIT = 10


def _matches(publication: Publication, vocabulary: Sequence[str]) -> list[str]:
    text = publication.search_text().lower()
    return [term for term in vocabulary if re.search(rf"\b{re.escape(term.lower())}\b", text)]


def _distribution(
    publications: Sequence[Publication],
    vocabulary: Sequence[str],
    top_n: int,
) -> list[dict]:
    counts = {term: 0 for term in vocabulary}
    for publication in publications:
        for term in _matches(publication, vocabulary):
            counts[term] += 1

    ranked = sorted(
        ((name, value) for name, value in counts.items() if value > 0),
        key=lambda item: item[1],
        reverse=True,
    )
    return [{"name": name, "value": value} for name, value in ranked[:top_n]]


def topic_distribution(publications: Sequence[Publication], top_n: int = 10) -> list[dict]:
    """Number of publications mentioning each known topic, most common first."""
    return _distribution(publications, TOPICS, top_n)


def organism_distribution(publications: Sequence[Publication], top_n: int = 10) -> list[dict]:
    return _distribution(publications, ORGANISMS, top_n)


def corpus_stats(publications: Sequence[Publication]) -> dict:
    """
    Headline numbers for the dashboard.

    A publication counts as analyzed when it has a non-empty summary.
    """
    topics: set[str] = set()
    organisms: set[str] = set()
    for publication in publications:
        topics.update(_matches(publication, TOPICS))
        organisms.update(_matches(publication, ORGANISMS))

    return {
        "total_publications": len(publications),
        "analyzed_publications": sum(1 for p in publications if p.summary.strip()),
        "total_topics": len(topics),
        "total_organisms": len(organisms),
    }


def corpus_keywords(publications: Sequence[Publication], top_n: int = CORPUS_KEYWORD_LIMIT) -> list[KeywordCount]:
    """Most frequent keywords across the corpus, with no active search terms."""
    return extract_keywords(publications, (), top_n=top_n)
