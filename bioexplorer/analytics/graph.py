"""
Knowledge Graph
Builds the query-centred node/link set for the interactive graph view.

Linkage:
    query       → each relevant publication
    publication → each top keyword found in its title + abstract
    query       → each co-occurring context term
"""

from typing import Sequence

from bioexplorer.analytics.keywords import (
    extract_cooccurring_terms,
    extract_keywords,
    filter_relevant_publications,
    query_terms,
)
from bioexplorer.models import GraphLink, GraphNode, KeywordCount, KnowledgeGraph, Publication

QUERY_NODE_ID = "query"
GRAPH_KEYWORD_LIMIT = 15
PUBLICATION_LABEL_LENGTH = 40


def _publication_label(title: str) -> str:
    if len(title) <= PUBLICATION_LABEL_LENGTH:
        return title
    return title[:PUBLICATION_LABEL_LENGTH] + "..."


def build_knowledge_graph(
    query: str,
    publications: Sequence[Publication],
    keywords: Sequence[KeywordCount],
    cooccurring: Sequence[KeywordCount],
) -> KnowledgeGraph:
    """
    Assemble nodes and links for one query.

    Node `val` values are display weights only.
    """
    graph = KnowledgeGraph()
    graph.nodes.append(GraphNode(id=QUERY_NODE_ID, name=query, kind="query", val=20))

    for publication in publications:
        node_id = f"pub-{publication.id}"
        graph.nodes.append(
            GraphNode(
                id=node_id,
                name=_publication_label(publication.title),
                kind="publication",
                val=8,
            )
        )
        graph.links.append(GraphLink(source=QUERY_NODE_ID, target=node_id))

    node_ids = {node.id for node in graph.nodes}
    linked: set[tuple[str, str]] = set()
    for keyword in keywords:
        keyword_id = f"keyword-{keyword.term}"
        if keyword_id not in node_ids:
            node_ids.add(keyword_id)
            graph.nodes.append(
                GraphNode(id=keyword_id, name=keyword.term, kind="keyword", val=4 + keyword.count)
            )
        for publication in publications:
            text = f"{publication.title} {publication.abstract}".lower()
            pair = (publication.id, keyword.term)
            if keyword.term.lower() in text and pair not in linked:
                linked.add(pair)
                graph.links.append(GraphLink(source=f"pub-{publication.id}", target=keyword_id))

    for term in cooccurring:
        context_id = f"context-{term.term}"
        if context_id in node_ids:
            continue
        node_ids.add(context_id)
        graph.nodes.append(
            GraphNode(id=context_id, name=term.term, kind="context", val=3 + term.count)
        )
        graph.links.append(GraphLink(source=QUERY_NODE_ID, target=context_id))

    return graph


def insight_graph(
    query: str,
    publications: Sequence[Publication],
    source_titles: Sequence[str] = (),
) -> dict:
    """
    Filter the corpus to the query, mine keywords and context terms, build the graph.

    Returns:
        Dict with relevant publications, keywords, cooccurring terms and graph.
    """
    terms = query_terms(query)
    relevant = filter_relevant_publications(publications, query, source_titles)
    keywords = extract_keywords(relevant, terms, top_n=GRAPH_KEYWORD_LIMIT)
    cooccurring = extract_cooccurring_terms(relevant, terms)

    return {
        "publications": relevant,
        "keywords": keywords,
        "cooccurring": cooccurring,
        "graph": build_knowledge_graph(query, relevant, keywords, cooccurring),
    }
