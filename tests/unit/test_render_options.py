#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Tests for RenderOptions validation and cloning."""
import dataclasses
from typing import get_args

import pytest

from promptmark.constants import RENDERER_FORMATS, RendererFormat
from promptmark.options import RenderOptions


@pytest.mark.unit
class TestRenderOptions:
    """Test the render options dataclass."""

    def test_defaults(self) -> None:
        """Test default values."""
        options = RenderOptions()

        assert options.format == "dict"
        assert options.chat is True
        assert options.syntax is None
        assert options.max_include_depth == 16
        assert options.strict_parsing is False

    def test_frozen(self) -> None:
        """Test that options cannot be modified in place."""
        options = RenderOptions()

        with pytest.raises(dataclasses.FrozenInstanceError):
            options.format = "raw"  # type: ignore[misc]

    def test_create_updated(self) -> None:
        """Test cloning with changes."""
        options = RenderOptions(format="raw")
        updated = options.create_updated(chat=False)

        assert updated.format == "raw"
        assert updated.chat is False
        assert options.chat is True

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"format": "markdown"},
            {"syntax": "html"},
            {"max_include_depth": 0},
        ],
    )
    def test_invalid_values(self, kwargs: dict) -> None:
        """Test validation in __post_init__."""
        with pytest.raises(ValueError):
            RenderOptions(**kwargs)

    def test_create_updated_validates(self) -> None:
        """Test that clones are validated too."""
        with pytest.raises(ValueError):
            RenderOptions().create_updated(format="nope")

    def test_field_metadata(self) -> None:
        """Test that fields carry help text."""
        fields = {f.name: f for f in dataclasses.fields(RenderOptions)}

        assert fields["format"].metadata["choices"] == [
            "raw",
            "dict",
            "openai_chat",
            "openaiResponse",
            "langchain",
            "pydantic",
        ]
        assert all("help" in f.metadata for f in fields.values())

    def test_format_type_lists_every_format(self) -> None:
        """Test that the format annotation and the accepted formats agree."""
        assert get_args(RendererFormat) == RENDERER_FORMATS
