"""
Prompt Templates
All prompt templates used by the NASA Bioscience Explorer.
Centralized for easy tuning and version control.
"""

from langchain_core.prompts import PromptTemplate

# ─── Retrieval-Augmented Answer ─────────────────────────────────────

ANSWER_PROMPT = PromptTemplate.from_template(
    """Based on the following NASA bioscience research publications, answer this question: {question}

Context from research papers:
{context}

Instructions:
- Provide a detailed, scientific answer
- Mention specific findings and sources
- Be concise but thorough

Answer:"""
)

NO_RESULTS_ANSWER = "No relevant publications found. Please ensure embeddings have been created."

SEARCH_FAILED_ANSWER = "I could not search the publication index. Error: {error}"

GENERATION_FAILED_ANSWER = (
    "I couldn't generate an answer. Error: {error}. "
    "Found {source_count} relevant publications."
)


# ─── Direct Chat Over Supplied Publications ─────────────────────────

CHAT_PROMPT = PromptTemplate.from_template(
    """You are an expert in NASA bioscience research. Based on the following research publications, answer this question: {query}

Context:
{context}

Provide a detailed, scientific answer based on the research findings. If the context doesn't contain enough information, mention that and provide general knowledge about the topic."""
)

NO_PUBLICATIONS_CONTEXT = "No publications provided"


# ─── Single Publication Analysis ────────────────────────────────────

ANALYZE_PROMPT = PromptTemplate.from_template(
    """Analyze this NASA bioscience publication and extract topics, organisms, and key findings in JSON format:

Title: {title}
Abstract: {abstract}"""
)

ANALYZE_TITLE_ONLY_PROMPT = PromptTemplate.from_template(
    """Analyze this NASA bioscience publication and extract topics, organisms, and key findings in JSON format:

Title: {title}"""
)


# ─── Corpus-Wide Insights ───────────────────────────────────────────

OVERALL_INSIGHTS_PROMPT = PromptTemplate.from_template(
    """Analyze these NASA bioscience research titles and provide:

1. Top 5 research themes
2. Top 3 scientific progress areas
3. Top 3 knowledge gaps
4. Areas of consensus vs disagreement

Titles:
{titles}

Provide structured JSON response."""
)

INSIGHT_QUESTIONS = {
    "progress": (
        "Based on all NASA space biology research, what are the top 5 areas of significant "
        "scientific progress? List major breakthroughs with specific findings."
    ),
    "gaps": (
        "Analyze the research collection and identify the top 5 most critical research gaps "
        "or understudied areas in space biology that need more investigation."
    ),
    "consensus": (
        "Which research topics have reached scientific consensus vs which areas still have "
        "conflicting or contradicting results? Provide specific examples."
    ),
    "actionable": (
        "As a mission planner preparing for Mars missions, what are the most actionable "
        "insights and recommendations from this research? Focus on practical countermeasures."
    ),
}
