"""
Tests for the answer generator
"""
from unittest.mock import Mock

import pytest
from sqlalchemy.exc import OperationalError

from bioexplorer.errors import InvalidRequestError, PublicationStoreError, VectorSearchError
from bioexplorer.generation.answer_generator import AnswerGenerator, build_context
from bioexplorer.generation.fallback import ModelDescriptor
from bioexplorer.generation.prompts import INSIGHT_QUESTIONS, NO_RESULTS_ANSWER
from bioexplorer.models import Source
from bioexplorer.retrieval.retriever import PublicationRetriever
from conftest import make_chunk, make_publication

MODELS = [ModelDescriptor(model="A"), ModelDescriptor(model="B"), ModelDescriptor(model="C")]


class TestBuildContext:
    """Test context assembly"""

    def test_blocks_are_labelled_in_rank_order(self):
        chunks = [make_chunk("p1", text="first text", title="First"), make_chunk("p2", text="second text", title="Second")]

        context = build_context(chunks, 10000)

        assert context == "[Source 1: First]\nfirst text\n\n[Source 2: Second]\nsecond text"

    def test_missing_title_uses_placeholder(self):
        chunk = make_chunk("p1", text="body")
        chunk.metadata.pop("title")

        assert build_context([chunk], 100).startswith("[Source 1: Unknown Source]")

    def test_hard_cut_at_character_budget(self):
        chunks = [make_chunk("p1", text="z" * 500)]

        context = build_context(chunks, 50)

        assert len(context) == 50
        assert context == ("[Source 1: Title p1]\n" + "z" * 500)[:50]


class TestAnswerGenerator:
    """Test the question-answering pipeline"""

    def setup_method(self):
        self.chunks = [make_chunk(f"p{i}", text=f"text {i}") for i in range(1, 4)]
        self.sources = [Source(publication_id=f"p{i}", title=f"Title p{i}") for i in range(1, 4)]

        self.retriever = Mock()
        self.retriever.search_chunks.return_value = self.chunks
        self.retriever.to_sources.return_value = self.sources
        self.text_generator = Mock()
        self.text_generator.complete.return_value = "Generated answer"

        self.settings = Mock(answer_result_limit=5, max_context_chars=10000)
        self.generator = AnswerGenerator(
            self.retriever, self.text_generator, self.settings, models=MODELS
        )

    def prompt_sent(self, call_index=0):
        return self.text_generator.complete.call_args_list[call_index].args[1]

    def test_successful_answer(self):
        result = self.generator.answer("How does microgravity affect muscle?")

        assert result.answer == "Generated answer"
        assert result.model_used == "A"
        assert result.error is None
        assert result.sources == self.sources
        self.retriever.search_chunks.assert_called_once_with("How does microgravity affect muscle?", 5)
        self.retriever.to_sources.assert_called_once_with(self.chunks, 200, max_sources=5)

    def test_prompt_contains_question_context_and_instructions(self):
        self.generator.answer("What about bone loss?")

        prompt = self.prompt_sent()
        assert "answer this question: What about bone loss?" in prompt
        assert "[Source 1: Title p1]\ntext 1" in prompt
        assert "Mention specific findings and sources" in prompt

    def test_context_is_truncated_to_budget(self):
        self.settings.max_context_chars = 40
        self.retriever.search_chunks.return_value = [make_chunk("p1", text="q" * 1000)]

        self.generator.answer("question")

        assert "q" * 10 in self.prompt_sent()
        assert "q" * 30 not in self.prompt_sent()

    def test_no_results_short_circuits(self):
        self.retriever.search_chunks.return_value = []
        self.retriever.to_sources.return_value = []

        result = self.generator.answer("Unrelated question")

        assert result.answer == NO_RESULTS_ANSWER
        assert result.sources == []
        self.text_generator.complete.assert_not_called()

    def test_fallback_to_third_model(self):
        self.text_generator.complete.side_effect = [RuntimeError("A down"), RuntimeError("B down"), "From C"]

        result = self.generator.answer("question")

        assert result.model_used == "C"
        assert result.answer == "From C"
        assert self.text_generator.complete.call_count == 3
        assert [c.args[0].model for c in self.text_generator.complete.call_args_list] == ["A", "B", "C"]

    def test_total_failure_keeps_sources(self):
        self.text_generator.complete.side_effect = [
            RuntimeError("quota"), RuntimeError("timeout"), RuntimeError("model retired"),
        ]

        result = self.generator.answer("question")

        assert result.error == "model retired"
        assert "model retired" in result.answer
        assert "Found 3 relevant publications" in result.answer
        assert result.sources == self.sources
        assert result.model_used is None

    def test_search_failure_is_reported_not_raised(self):
        self.retriever.search_chunks.side_effect = VectorSearchError("index offline")

        result = self.generator.answer("question")

        assert "could not search" in result.answer
        assert result.error == "index offline"
        assert result.sources == []
        self.text_generator.complete.assert_not_called()

    def test_role_wraps_question_before_retrieval(self):
        result = self.generator.answer("radiation shielding", role="mission-planner")

        searched = self.retriever.search_chunks.call_args[0][0]
        assert searched.startswith("As a mission planner")
        assert "radiation shielding" in searched
        assert "As a mission planner" in self.prompt_sent()
        assert result.question == "radiation shielding"

    def test_role_system_prompt_is_sent_to_the_model(self):
        self.generator.answer("radiation shielding", role="mission-planner")

        system_prompt = self.text_generator.complete.call_args.kwargs["system_prompt"]
        assert system_prompt.startswith("You are an expert mission planning assistant")

    def test_no_role_means_no_system_prompt(self):
        self.generator.answer("radiation shielding")

        assert self.text_generator.complete.call_args.kwargs["system_prompt"] == ""

    def test_unreadable_store_does_not_break_answering(self):
        embedder = Mock()
        embedder.embed.return_value = [0.1, 0.2, 0.3, 0.4]
        index = Mock()
        index.search.return_value = [make_chunk("p1", text="bone text", title="Bone loss")]
        store = Mock()
        store.get_by_id.side_effect = PublicationStoreError("database is locked")
        generator = AnswerGenerator(
            PublicationRetriever(embedder, index, store), self.text_generator, self.settings, models=MODELS
        )

        result = generator.answer("bone?")

        assert result.answer == "Generated answer"
        assert result.sources[0].title == "Bone loss"

    def test_unexpected_retrieval_error_becomes_error_result(self):
        self.retriever.to_sources.side_effect = OperationalError("SELECT", {}, Exception("database is locked"))

        result = self.generator.answer("bone?")

        assert "could not search" in result.answer
        assert "database is locked" in result.error
        self.text_generator.complete.assert_not_called()

    def test_unknown_role_passes_question_through(self):
        self.generator.answer("plain question", role="astronaut")

        assert self.retriever.search_chunks.call_args[0][0] == "plain question"

    @pytest.mark.parametrize("question", ["", "   "])
    def test_empty_question_is_rejected(self, question):
        with pytest.raises(InvalidRequestError):
            self.generator.answer(question)
        self.retriever.search_chunks.assert_not_called()


class TestAnswerGeneratorOtherPrompts:
    """Test analysis, chat and insight prompts"""

    def setup_method(self):
        self.retriever = Mock()
        self.text_generator = Mock()
        self.text_generator.complete.return_value = '{"topics": ["bone"]}'
        self.generator = AnswerGenerator(
            self.retriever,
            self.text_generator,
            Mock(answer_result_limit=5, max_context_chars=10000),
            models=MODELS,
        )

    def test_analyze_with_abstract(self):
        result = self.generator.analyze_publication("Bone loss in mice", "Mice lost bone.")

        prompt = self.text_generator.complete.call_args.args[1]
        assert "Title: Bone loss in mice" in prompt
        assert "Abstract: Mice lost bone." in prompt
        assert result.answer == '{"topics": ["bone"]}'
        self.retriever.search_chunks.assert_not_called()

    def test_analyze_title_only_omits_abstract(self):
        self.generator.analyze_publication("Bone loss in mice", "")

        prompt = self.text_generator.complete.call_args.args[1]
        assert "Title: Bone loss in mice" in prompt
        assert "Abstract" not in prompt

    def test_analyze_requires_title(self):
        with pytest.raises(InvalidRequestError):
            self.generator.analyze_publication("  ", "abstract")
        self.text_generator.complete.assert_not_called()

    def test_chat_uses_first_five_publications(self):
        publications = [make_publication(f"p{i}", title=f"Paper {i}", summary=f"Summary {i}") for i in range(7)]

        result = self.generator.chat("What is known?", publications)

        prompt = self.text_generator.complete.call_args.args[1]
        assert "Title: Paper 4\nSummary: Summary 4" in prompt
        assert "Paper 5" not in prompt
        assert [s.title for s in result.sources] == [f"Paper {i}" for i in range(5)]

    def test_chat_without_publications(self):
        result = self.generator.chat("What is known?", [])

        assert "No publications provided" in self.text_generator.complete.call_args.args[1]
        assert result.sources == []

    def test_chat_missing_summary_is_marked(self):
        self.generator.chat("q", [make_publication("p1", title="Paper", summary="")])

        assert "Summary: N/A" in self.text_generator.complete.call_args.args[1]

    def test_overall_insights_uses_first_fifty_titles(self):
        publications = [make_publication(f"p{i}", title=f"Paper number {i}") for i in range(60)]

        self.generator.overall_insights(publications)

        prompt = self.text_generator.complete.call_args.args[1]
        assert "Paper number 49" in prompt
        assert "Paper number 50" not in prompt

    def test_insight_runs_canned_question(self):
        self.retriever.search_chunks.return_value = []
        self.retriever.to_sources.return_value = []

        self.generator.insight("gaps")

        assert self.retriever.search_chunks.call_args[0][0] == INSIGHT_QUESTIONS["gaps"]

    def test_unknown_insight_kind(self):
        with pytest.raises(InvalidRequestError, match="Unknown insight type"):
            self.generator.insight("trends")
