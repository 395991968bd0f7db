"""
FastAPI Entry Point: NASA Bioscience Explorer
Provides REST API for question answering, semantic search, publication
analysis, and corpus analytics over NASA bioscience publications.
"""

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Optional

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from bioexplorer.analytics.corpus_stats import (
    corpus_keywords,
    corpus_stats,
    organism_distribution,
    topic_distribution,
)
from bioexplorer.analytics.graph import insight_graph
from bioexplorer.config import Settings, settings
from bioexplorer.embedding.embedder import EmbeddingClient
from bioexplorer.embedding.vector_store import VectorIndex
from bioexplorer.errors import (
    EmbeddingServiceError,
    InvalidRequestError,
    PublicationSchemaError,
    VectorSearchError,
)
from bioexplorer.generation.answer_generator import AnswerGenerator
from bioexplorer.generation.fallback import GeminiTextGenerator
from bioexplorer.generation.roles import list_roles
from bioexplorer.ingestion.embed_job import EmbeddingJob
from bioexplorer.ingestion.publication_store import PublicationStore
from bioexplorer.models import AnswerResult, EmbeddingJobReport, Publication
from bioexplorer.retrieval.retriever import PublicationRetriever

# ── Logging ──────────────────────────────────────────────────────────
logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s | %(name)-30s | %(levelname)-7s | %(message)s",
)
logger = logging.getLogger(__name__)


# ── Services ─────────────────────────────────────────────────────────
@dataclass
class Services:
    """Components shared by all requests for the lifetime of the process."""

    store: PublicationStore
    index: VectorIndex
    retriever: PublicationRetriever
    generator: AnswerGenerator
    embedding_job: EmbeddingJob


def build_services(app_settings: Optional[Settings] = None) -> Services:
    """
    Construct every component from settings.

    Raises:
        MissingCredentialError: If no Gemini API key is configured.
    """
    app_settings = app_settings or settings
    app_settings.ensure_directories()

    store = PublicationStore(app_settings.database_url)
    embedder = EmbeddingClient(app_settings)
    index = VectorIndex(app_settings)
    retriever = PublicationRetriever(embedder, index, store)
    generator = AnswerGenerator(retriever, GeminiTextGenerator(app_settings), app_settings)
    job = EmbeddingJob(store, embedder, index, app_settings)
    return Services(store, index, retriever, generator, job)


def get_services(request: Request) -> Services:
    return request.app.state.services


# ── Request Models ───────────────────────────────────────────────────
class AnalyzeRequest(BaseModel):
    title: str = ""
    abstract: str = ""


class ChatPublication(BaseModel):
    id: str = ""
    title: str
    abstract: str = ""
    summary: str = ""
    url: str = ""

    def to_publication(self) -> Publication:
        return Publication(**self.model_dump())


class ChatRequest(BaseModel):
    query: str = ""
    publications: list[ChatPublication] = Field(default_factory=list)


class AskRequest(BaseModel):
    question: str = ""
    role: Optional[str] = None


class SearchRequest(BaseModel):
    query: str = ""
    limit: int = Field(default=10, ge=1, le=50)


class KnowledgeGraphRequest(BaseModel):
    query: str = ""
    role: Optional[str] = None


class EmbeddingRunRequest(BaseModel):
    append: bool = False


def _require(value: str, message: str) -> None:
    if not value or not value.strip():
        raise InvalidRequestError(message)


# ── App ──────────────────────────────────────────────────────────────
def create_app(services: Optional[Services] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        services: Pre-built components; built from settings on startup if None.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Initialize components on startup."""
        app.state.services = services or build_services()
        logger.info("🚀 NASA Bioscience Explorer started")
        yield
        logger.info("👋 NASA Bioscience Explorer shutting down")

    app = FastAPI(
        title="NASA Bioscience Explorer",
        description=(
            "Question answering, semantic search, and analytics over "
            "NASA bioscience publications."
        ),
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(InvalidRequestError)
    async def invalid_request_handler(request: Request, exc: InvalidRequestError):
        return JSONResponse(status_code=400, content={"error": str(exc)})

    @app.exception_handler(PublicationSchemaError)
    async def schema_error_handler(request: Request, exc: PublicationSchemaError):
        return JSONResponse(status_code=422, content={"error": str(exc)})

    @app.exception_handler(EmbeddingServiceError)
    @app.exception_handler(VectorSearchError)
    async def search_unavailable_handler(request: Request, exc: Exception):
        logger.error(f"Search failed on {request.url.path}: {exc}")
        return JSONResponse(
            status_code=503, content={"error": "could not search the publication index"}
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled error on {request.url.path}: {exc}", exc_info=exc)
        return JSONResponse(status_code=500, content={"error": "Failed to process request"})

    # ── Endpoints ────────────────────────────────────────────────────

    @app.get("/health")
    def health_check(request: Request):
        """Health check endpoint."""
        services = get_services(request)
        try:
            index_stats = services.index.get_collection_stats()
        except Exception:
            index_stats = {"status": "unavailable"}
        return {
            "status": "healthy",
            "publications": services.store.count(),
            "vector_index": index_stats,
        }

    @app.post("/analyze")
    def analyze(body: AnalyzeRequest, request: Request):
        """Extract topics, organisms, and findings from one publication."""
        _require(body.title, "Title is required")
        result = get_services(request).generator.analyze_publication(body.title, body.abstract)
        return {
            "title": body.title,
            "analysis": result.answer,
            "model_used": result.model_used,
            "error": result.error,
        }

    @app.post("/chat")
    def chat(body: ChatRequest, request: Request):
        """Answer a question from the publications supplied in the request."""
        _require(body.query, "Query is required")
        publications = [p.to_publication() for p in body.publications]
        result = get_services(request).generator.chat(body.query, publications)
        return {
            "answer": result.answer,
            "sources": [source.model_dump() for source in result.sources],
            "model_used": result.model_used,
            "error": result.error,
        }

    @app.post("/ask", response_model=AnswerResult)
    def ask(body: AskRequest, request: Request):
        """
        Answer a question from the embedded corpus.

        Pipeline: Role Prompt → Embed → Vector Search → Context → Model Fallback
        """
        _require(body.question, "Question is required")
        return get_services(request).generator.answer(body.question, role=body.role)

    @app.post("/search")
    def search(body: SearchRequest, request: Request):
        """Semantic search returning up to 10 unique publications."""
        _require(body.query, "Query is required")
        sources = get_services(request).retriever.search(body.query, limit=body.limit)
        return {"query": body.query, "results": [s.model_dump() for s in sources]}

    @app.get("/publications", response_model=list[Publication])
    def list_publications(request: Request):
        return get_services(request).store.get_all()

    @app.get("/publications/search", response_model=list[Publication])
    def search_publications(
        request: Request,
        term: str = Query(..., min_length=1),
        field: str = Query("title", pattern="^(title|abstract)$"),
    ):
        """Case-insensitive keyword search on title or abstract."""
        store = get_services(request).store
        if field == "abstract":
            return store.search_by_abstract(term)
        return store.search_by_title(term)

    @app.get("/publications/{publication_id}", response_model=Publication)
    def get_publication(publication_id: str, request: Request):
        publication = get_services(request).store.get_by_id(publication_id)
        if publication is None:
            raise HTTPException(status_code=404, detail="Publication not found")
        return publication

    @app.post("/publications", status_code=201)
    def add_publication(record: dict, request: Request):
        publication_id = get_services(request).store.add(record)
        return {"id": publication_id}

    @app.get("/analytics/stats")
    def analytics_stats(request: Request):
        return corpus_stats(get_services(request).store.get_all())

    @app.get("/analytics/topics")
    def analytics_topics(request: Request):
        return topic_distribution(get_services(request).store.get_all())

    @app.get("/analytics/organisms")
    def analytics_organisms(request: Request):
        return organism_distribution(get_services(request).store.get_all())

    @app.get("/analytics/keywords")
    def analytics_keywords(request: Request):
        keywords = corpus_keywords(get_services(request).store.get_all())
        return [k.model_dump() for k in keywords]

    @app.get("/roles")
    def roles():
        return list_roles()

    @app.post("/insights/overview")
    def insights_overview(request: Request):
        """Research themes, progress, gaps, and consensus across the corpus."""
        services = get_services(request)
        publications = services.store.get_all()
        result = services.generator.overall_insights(publications)
        return {
            "insights": result.answer,
            "total_publications": len(publications),
            "model_used": result.model_used,
            "error": result.error,
        }

    @app.post("/insights/{kind}", response_model=AnswerResult)
    def insights(kind: str, request: Request, role: Optional[str] = None):
        """Canned landscape questions: progress, gaps, consensus, actionable."""
        return get_services(request).generator.insight(kind, role=role)

    @app.post("/knowledge-graph")
    def knowledge_graph(body: KnowledgeGraphRequest, request: Request):
        """
        Answer the query, then build a graph over the publications relevant to it.

        Pipeline: Answer → Relevance Filter → Keywords + Co-occurrence → Graph
        """
        _require(body.query, "Query is required")
        services = get_services(request)
        result = services.generator.answer(body.query, role=body.role)
        source_titles = [source.title for source in result.sources]
        extracted = insight_graph(body.query, services.store.get_all(), source_titles)

        return {
            "answer": result.answer,
            "sources": [s.model_dump() for s in result.sources],
            "model_used": result.model_used,
            "error": result.error,
            "relevant_publications": len(extracted["publications"]),
            "keywords": [k.model_dump() for k in extracted["keywords"]],
            "cooccurring": [k.model_dump() for k in extracted["cooccurring"]],
            "graph": extracted["graph"].model_dump(),
        }

    @app.post("/embeddings/run", response_model=EmbeddingJobReport)
    def run_embeddings(body: EmbeddingRunRequest, request: Request):
        """Embed every stored publication. Blocks until the job finishes."""
        return get_services(request).embedding_job.run(replace_existing=not body.append)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=settings.app_host, port=settings.app_port)
