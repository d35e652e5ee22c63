"""Configuration classes for ultra-robust BBCode parsing.

This module provides configuration objects for the lexer, tree building,
rendering and global behaviour, with JSON round-tripping and presets for
trusted and untrusted input.
"""

import json
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, List, Optional

_VALID_LOGGING_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
_COMPONENT_FIELDS = ["lexer", "tree", "render", "global_"]

# Deepest tag nesting built as elements; deeper spans are kept as text
DEFAULT_MAX_DEPTH = 100


@dataclass
class LexerConfig:
    """Configuration for splitting raw markup into chunks."""

    open_bracket: str = "["
    close_bracket: str = "]"
    max_tag_length: int = 512
    lowercase_tags: bool = True

    def __post_init__(self) -> None:
        """Validate lexer configuration."""
        if not self.open_bracket or not self.close_bracket:
            raise ValueError("Brackets cannot be empty")
        if len(self.open_bracket) != 1 or len(self.close_bracket) != 1:
            raise ValueError("Brackets must be single characters")
        if self.open_bracket == self.close_bracket:
            raise ValueError("open_bracket and close_bracket must differ")
        if self.max_tag_length <= 0:
            raise ValueError("max_tag_length must be > 0")


@dataclass
class TreeConfig:
    """Configuration for tree building and structure repair."""

    record_repairs: bool = True
    report_repairs_as_warnings: bool = True
    max_depth: int = DEFAULT_MAX_DEPTH

    def __post_init__(self) -> None:
        """Validate tree configuration."""
        if self.max_depth <= 0:
            raise ValueError("max_depth must be > 0")


@dataclass
class RenderConfig:
    """Configuration for the rendering stage."""

    escape_html: bool = True
    trim_output: bool = False


@dataclass
class GlobalConfig:
    """Global configuration settings that apply across all components."""

    logging_level: str = "INFO"
    enable_correlation_tracking: bool = True
    max_input_size_bytes: Optional[int] = None

    def __post_init__(self) -> None:
        """Validate global configuration."""
        if self.logging_level not in _VALID_LOGGING_LEVELS:
            raise ValueError(f"logging_level must be one of {_VALID_LOGGING_LEVELS}")
        if self.max_input_size_bytes is not None and self.max_input_size_bytes <= 0:
            raise ValueError("max_input_size_bytes must be > 0 or None")


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigValidationError(ConfigError):
    """Exception raised when configuration validation fails."""

    def __init__(self, message: str, field_name: Optional[str] = None,
                 suggestions: Optional[List[str]] = None):
        super().__init__(message)
        self.field_name = field_name
        self.suggestions = suggestions or []


@dataclass(frozen=True)
class ParserConfig:
    """Complete configuration for the BBCode parser.

    Immutable so a single instance can be shared between parser instances
    and threads; use :meth:`override` to derive variations.
    """

    lexer: LexerConfig = field(default_factory=LexerConfig)
    tree: TreeConfig = field(default_factory=TreeConfig)
    render: RenderConfig = field(default_factory=RenderConfig)
    global_: GlobalConfig = field(default_factory=GlobalConfig)

    name: Optional[str] = None
    description: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate the complete parser configuration."""
        try:
            self.lexer.__post_init__()
            self.tree.__post_init__()
            self.global_.__post_init__()
        except ValueError as e:
            raise ConfigValidationError(str(e)) from e

        if (
            self.global_.max_input_size_bytes is not None
            and self.lexer.max_tag_length > self.global_.max_input_size_bytes
        ):
            raise ConfigValidationError(
                "Lexer max_tag_length exceeds global input size limit",
                field_name="lexer.max_tag_length",
                suggestions=["Reduce lexer.max_tag_length",
                             "Increase global_.max_input_size_bytes"]
            )

    def override(self, **kwargs: Any) -> "ParserConfig":
        """Create a new configuration with specific overrides.

        Args:
            **kwargs: Field overrides; nested fields use ``section__field``

        Returns:
            New ParserConfig instance with overrides applied

        Example:
            >>> config = ParserConfig()
            >>> config.override(render__escape_html=False).render.escape_html
            False
        """
        nested_overrides: Dict[str, Any] = {}
        for key, value in kwargs.items():
            component = next(
                (name for name in _COMPONENT_FIELDS if key.startswith(name + "__")), None
            )
            if component is not None:
                field_name = key[len(component) + 2:]
                nested_overrides.setdefault(component, {})[field_name] = value
            else:
                nested_overrides[key] = value

        new_fields: Dict[str, Any] = {}
        for key, value in nested_overrides.items():
            if key in _COMPONENT_FIELDS and isinstance(value, dict):
                try:
                    new_fields[key] = replace(getattr(self, key), **value)
                except (TypeError, ValueError) as e:
                    raise ConfigValidationError(str(e), field_name=key) from e
            elif key in self.__dataclass_fields__:
                new_fields[key] = value
            else:
                raise ConfigValidationError(
                    f"Unknown configuration field: {key}", field_name=key
                )

        return replace(self, **new_fields)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary format."""
        def _dataclass_to_dict(obj: Any) -> Any:
            if hasattr(obj, "__dataclass_fields__"):
                return {
                    name: _dataclass_to_dict(getattr(obj, name))
                    for name in obj.__dataclass_fields__
                }
            if isinstance(obj, Enum):
                return obj.name
            if isinstance(obj, (list, tuple, set)):
                return [_dataclass_to_dict(item) for item in obj]
            if isinstance(obj, dict):
                return {key: _dataclass_to_dict(value) for key, value in obj.items()}
            return obj

        result = _dataclass_to_dict(self)
        if not isinstance(result, dict):
            raise ConfigValidationError("Configuration serialization failed")
        return result

    def to_json(self, indent: int = 2) -> str:
        """Convert configuration to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ParserConfig":
        """Create configuration from dictionary.

        Unknown keys are rejected so that typos in configuration files do not
        silently fall back to defaults.
        """
        section_types = {
            "lexer": LexerConfig,
            "tree": TreeConfig,
            "render": RenderConfig,
            "global_": GlobalConfig,
        }

        kwargs: Dict[str, Any] = {}
        for key, value in data.items():
            if key in section_types:
                if not isinstance(value, dict):
                    raise ConfigValidationError(
                        f"Section {key} must be a mapping", field_name=key
                    )
                try:
                    kwargs[key] = section_types[key](**value)
                except (TypeError, ValueError) as e:
                    raise ConfigValidationError(str(e), field_name=key) from e
            elif key in ("name", "description"):
                kwargs[key] = value
            else:
                raise ConfigValidationError(
                    f"Unknown configuration field: {key}", field_name=key
                )

        return cls(**kwargs)

    @classmethod
    def from_json(cls, json_str: str) -> "ParserConfig":
        """Create configuration from JSON string."""
        try:
            data = json.loads(json_str)
        except json.JSONDecodeError as e:
            raise ConfigValidationError(f"Invalid JSON configuration: {e}") from e
        if not isinstance(data, dict):
            raise ConfigValidationError("Configuration JSON must be an object")
        return cls.from_dict(data)

    @classmethod
    def untrusted_input(cls) -> "ParserConfig":
        """Preset for user-authored markup: escape HTML before parsing."""
        return cls(
            render=RenderConfig(escape_html=True),
            global_=GlobalConfig(max_input_size_bytes=1024 * 1024),
            name="untrusted_input",
            description="Escapes embedded HTML and bounds input size",
        )

    @classmethod
    def trusted_input(cls) -> "ParserConfig":
        """Preset for markup from trusted authors: embedded HTML passes through."""
        return cls(
            render=RenderConfig(escape_html=False),
            name="trusted_input",
            description="Leaves embedded HTML untouched",
        )
