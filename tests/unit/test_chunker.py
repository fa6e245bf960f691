"""Unit tests for the sentence chunker."""

from __future__ import annotations

import pytest

from docembed.ingestion.chunker import SentenceChunker, extract_chunks, split_sentences

PAGE = (
    "Kubeflow runs ML workflows on Kubernetes. Pipelines are built from components! "
    "Can each component run in its own container? Yes it can. "
    "Artifacts flow between steps as datasets. Metrics are logged per step."
)


def _strip_overlap(contents: list[str], overlap: int) -> list[list[str]]:
    """Return each chunk's words minus the overlap carried from its predecessor."""
    cores: list[list[str]] = []
    for i, content in enumerate(contents):
        words = content.split()
        if i > 0:
            words = words[min(overlap, len(contents[i - 1].split())) :]
        cores.append(words)
    return cores


class TestSplitSentences:
    def test_keeps_terminal_punctuation(self) -> None:
        assert split_sentences("Stop! Why? Go.") == ["Stop!", "Why?", "Go."]

    def test_drops_empty_fragments(self) -> None:
        assert split_sentences("   \n  ") == []

    def test_requires_whitespace_after_punctuation(self) -> None:
        assert split_sentences("Version 1.2 is out. Upgrade now.") == [
            "Version 1.2 is out.",
            "Upgrade now.",
        ]


class TestSentenceChunker:
    def test_single_chunk_when_everything_fits(self) -> None:
        chunks = SentenceChunker(chunk_size=100, chunk_overlap=2).extract(["A. B. C."], "doc.pdf")
        assert len(chunks) == 1
        assert chunks[0].content == "A. B. C."
        assert chunks[0].source_document == "doc.pdf"
        assert chunks[0].page_number == 1
        assert chunks[0].position == 0

    def test_small_chunk_size_emits_one_chunk_per_sentence_with_overlap(self) -> None:
        chunker = SentenceChunker(chunk_size=3, chunk_overlap=1)
        contents = [c.content for c in chunker.extract(["A. B. C."], "doc.pdf")]
        assert contents == ["A.", "A. B.", "B. C."]
        for prev, cur in zip(contents, contents[1:]):
            assert cur.split()[0] == prev.split()[-1]

    def test_overlap_clamped_to_previous_word_count(self) -> None:
        chunker = SentenceChunker(chunk_size=8, chunk_overlap=10)
        contents = chunker.chunk_sentences(["One.", "Two words.", "Three more words."])
        # Every word of the previous chunk is carried over.
        assert contents[1].startswith(contents[0] + " ")
        assert contents[2].startswith(contents[1] + " ")

    def test_zero_overlap_adds_nothing(self) -> None:
        chunker = SentenceChunker(chunk_size=3, chunk_overlap=0)
        assert chunker.chunk_sentences(["A.", "B.", "C."]) == ["A.", "B.", "C."]

    def test_oversized_sentence_is_not_split(self) -> None:
        long_sentence = "This single sentence is much longer than the configured maximum size."
        chunker = SentenceChunker(chunk_size=20, chunk_overlap=0)
        contents = chunker.chunk_sentences(["Short one.", long_sentence, "Tail."])
        assert long_sentence in contents

    def test_positions_reset_per_page(self) -> None:
        chunker = SentenceChunker(chunk_size=10, chunk_overlap=1)
        chunks = chunker.extract(["First page one. First page two.", "Second page one. Two."], "d.pdf")
        by_page: dict[int, list[int]] = {}
        for c in chunks:
            by_page.setdefault(c.page_number, []).append(c.position)
        assert set(by_page) == {1, 2}
        for positions in by_page.values():
            assert positions == list(range(len(positions)))

    def test_overlap_never_crosses_pages(self) -> None:
        chunker = SentenceChunker(chunk_size=1000, chunk_overlap=5)
        chunks = chunker.extract(["Alpha beta.", "Gamma delta."], "d.pdf")
        assert [c.content for c in chunks] == ["Alpha beta.", "Gamma delta."]

    def test_blank_pages_produce_no_chunks(self) -> None:
        chunks = SentenceChunker().extract(["", "   \n", "Only text."], "d.pdf")
        assert len(chunks) == 1
        assert chunks[0].page_number == 3

    def test_chunk_ids_are_unique(self) -> None:
        chunks = SentenceChunker(chunk_size=30, chunk_overlap=2).extract([PAGE, PAGE], "d.pdf")
        assert len({c.id for c in chunks}) == len(chunks)

    def test_deterministic_content(self) -> None:
        chunker = SentenceChunker(chunk_size=50, chunk_overlap=3)
        first = [c.content for c in chunker.extract([PAGE], "d.pdf")]
        second = [c.content for c in chunker.extract([PAGE], "d.pdf")]
        assert first == second

    @pytest.mark.parametrize("chunk_size,overlap", [(30, 0), (50, 3), (80, 5), (400, 2)])
    def test_core_content_reproduces_sentences(self, chunk_size: int, overlap: int) -> None:
        contents = SentenceChunker(chunk_size, overlap).chunk_sentences(split_sentences(PAGE))
        cores = _strip_overlap(contents, overlap)
        assert [w for core in cores for w in core] == " ".join(split_sentences(PAGE)).split()

    @pytest.mark.parametrize("chunk_size,overlap", [(30, 0), (50, 3), (80, 5)])
    def test_core_content_respects_max_size(self, chunk_size: int, overlap: int) -> None:
        sentences = split_sentences(PAGE)
        contents = SentenceChunker(chunk_size, overlap).chunk_sentences(sentences)
        for core in _strip_overlap(contents, overlap):
            text = " ".join(core)
            assert len(text) <= chunk_size or text in sentences

    @pytest.mark.parametrize("chunk_size,overlap", [(0, 1), (-5, 1), (10, -1)])
    def test_invalid_parameters_raise(self, chunk_size: int, overlap: int) -> None:
        with pytest.raises(ValueError, match="must be"):
            SentenceChunker(chunk_size=chunk_size, chunk_overlap=overlap)


def test_extract_chunks_shortcut() -> None:
    chunks = extract_chunks(["A. B. C."], "doc.pdf", chunk_size=3, chunk_overlap=1)
    assert len(chunks) == 3


def test_extract_chunks_empty_input() -> None:
    assert extract_chunks([], "doc.pdf") == []
