"""Tests for the Chunk record."""

import pytest

from ultra_robust_bbcode.chunks import Chunk, ChunkType


class TestChunkCreation:
    """Test chunk factories and validation."""

    def test_plain_chunk(self) -> None:
        """Test creating a plain text chunk."""
        chunk = Chunk.plain("hello")

        assert chunk.type is ChunkType.TEXT
        assert chunk.text == "hello"
        assert chunk.tag is None
        assert chunk.attributes == {}
        assert chunk.is_text
        assert not chunk.is_open
        assert not chunk.is_close

    def test_open_chunk_reconstructs_text(self) -> None:
        """Test open factory lower-cases the name and rebuilds the source text."""
        chunk = Chunk.open("B")

        assert chunk.type is ChunkType.TAG_OPEN
        assert chunk.tag == "b"
        assert chunk.text == "[b]"
        assert chunk.is_open

    def test_open_chunk_keeps_source_text_and_attributes(self) -> None:
        """Test open factory keeps explicit text and copies attributes."""
        attributes = {"default": "http://example.com"}
        chunk = Chunk.open("url", attributes, text="[URL=http://example.com]")

        attributes["default"] = "changed"

        assert chunk.text == "[URL=http://example.com]"
        assert chunk.attributes == {"default": "http://example.com"}

    def test_close_chunk(self) -> None:
        """Test close factory."""
        chunk = Chunk.close("I")

        assert chunk.type is ChunkType.TAG_CLOSE
        assert chunk.tag == "i"
        assert chunk.text == "[/i]"
        assert chunk.is_close

    def test_text_chunk_with_tag_raises_error(self) -> None:
        """Test that text chunks cannot carry a tag name."""
        with pytest.raises(ValueError, match="Text chunks cannot carry a tag name"):
            Chunk(ChunkType.TEXT, "x", tag="b")

    def test_text_chunk_with_attributes_raises_error(self) -> None:
        """Test that text chunks cannot carry attributes."""
        with pytest.raises(ValueError, match="Text chunks cannot carry attributes"):
            Chunk(ChunkType.TEXT, "x", attributes={"a": "b"})

    def test_tag_chunk_without_name_raises_error(self) -> None:
        """Test that tag chunks require a tag name."""
        with pytest.raises(ValueError, match="Tag chunks require a tag name"):
            Chunk(ChunkType.TAG_OPEN, "[]")

    def test_close_chunk_with_attributes_raises_error(self) -> None:
        """Test that closing tags cannot carry attributes."""
        with pytest.raises(ValueError, match="Closing tag chunks cannot carry attributes"):
            Chunk(ChunkType.TAG_CLOSE, "[/b]", tag="b", attributes={"x": "y"})

    def test_chunks_are_immutable(self) -> None:
        """Test that chunk fields cannot be reassigned."""
        chunk = Chunk.plain("x")

        with pytest.raises(AttributeError):
            chunk.text = "y"  # type: ignore[misc]


class TestChunkMerging:
    """Test merging of adjacent text chunks."""

    def test_merge_text_chunks(self) -> None:
        """Test that two text chunks merge in order."""
        merged = Chunk.plain("foo").merged_with(Chunk.plain("bar"))

        assert merged.is_text
        assert merged.text == "foobar"

    def test_merge_with_tag_raises_error(self) -> None:
        """Test that tag chunks cannot be merged."""
        with pytest.raises(ValueError, match="Only text chunks can be merged"):
            Chunk.plain("foo").merged_with(Chunk.open("b"))
