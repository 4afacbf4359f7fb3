"""
Custom exception hierarchy for PocketBase Model Generator.

This module provides an exception system with rich context and error
recovery guidance for contributors and users.
"""

from typing import Dict, Any, Optional, List


class PocketBaseModelGeneratorError(Exception):
    """
    Base exception for all PocketBase Model Generator errors.

    Provides rich context and error recovery guidance.
    """

    default_suggestions: List[str] = []
    default_error_code: Optional[str] = None

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        suggestions: Optional[List[str]] = None,
        error_code: Optional[str] = None
    ):
        """
        Initialize the exception with context and recovery suggestions.

        Args:
            message: Human-readable error message
            context: Additional context about where/why the error occurred
            suggestions: List of potential solutions or next steps
            error_code: Unique error code for programmatic handling
        """
        super().__init__(message)
        self.message = message
        self.context = context or {}
        self.suggestions = suggestions or list(self.default_suggestions)
        self.error_code = error_code or self.default_error_code

    def __str__(self) -> str:
        """Return formatted error message with context."""
        lines = [self.message]

        if self.error_code:
            lines.append(f"Error Code: {self.error_code}")

        if self.context:
            lines.append("Context:")
            for key, value in self.context.items():
                lines.append(f"  {key}: {value}")

        if self.suggestions:
            lines.append("Suggestions:")
            for suggestion in self.suggestions:
                lines.append(f"  • {suggestion}")

        return "\n".join(lines)


class ConfigurationError(PocketBaseModelGeneratorError):
    """Raised when configuration is invalid or missing."""

    default_error_code = "CONFIG_ERROR"
    default_suggestions = [
        "Check the configuration file syntax",
        "Verify the 'pocketbase.hosting' section has domain, email and password",
        "Run with --help to see an example configuration",
    ]

    def __init__(self, message: str, config_file: str = None, **kwargs):
        context = kwargs.pop('context', None) or {}
        if config_file:
            context['config_file'] = config_file
        super().__init__(message, context=context, **kwargs)


class AuthenticationError(PocketBaseModelGeneratorError):
    """Raised when authenticating against PocketBase fails."""

    default_error_code = "AUTHENTICATION_ERROR"
    default_suggestions = [
        "Check the email and password in the configuration file",
        "Verify the account is a superuser (admin) account",
        "Check the PocketBase domain is reachable",
    ]

    def __init__(self, message: str, domain: str = None, **kwargs):
        context = kwargs.pop('context', None) or {}
        if domain:
            context['domain'] = domain
        super().__init__(message, context=context, **kwargs)


class SchemaIntrospectionError(PocketBaseModelGeneratorError):
    """Raised when fetching or reading the collection schema fails."""

    default_error_code = "INTROSPECTION_ERROR"
    default_suggestions = [
        "Check the PocketBase server is running and reachable",
        "Verify the authenticated account may list collections",
        "Check the collection schema for missing names or select values",
    ]

    def __init__(self, message: str, collection: str = None, field: str = None, **kwargs):
        context = kwargs.pop('context', None) or {}
        if collection:
            context['collection'] = collection
        if field:
            context['field'] = field
        super().__init__(message, context=context, **kwargs)


class FieldMappingError(PocketBaseModelGeneratorError):
    """Raised when field type mapping fails."""

    default_error_code = "FIELD_MAPPING_ERROR"
    default_suggestions = [
        "Check if the field kind is listed in the type mapping table",
        "Report this as a new field type request",
    ]

    def __init__(self, message: str, field_kind: str = None, **kwargs):
        context = kwargs.pop('context', None) or {}
        if field_kind:
            context['field_kind'] = field_kind
        super().__init__(message, context=context, **kwargs)


class DuplicateEnumVariantError(PocketBaseModelGeneratorError, ValueError):
    """Raised when two raw select values normalize to the same enum variant."""

    default_error_code = "DUPLICATE_ENUM_VARIANT"
    default_suggestions = [
        "Rename one of the select values so they differ after normalization",
    ]

    def __init__(self, message: str, enum_name: str = None, variant: str = None,
                 raw_values: List[str] = None, **kwargs):
        context = kwargs.pop('context', None) or {}
        if enum_name:
            context['enum'] = enum_name
        if variant:
            context['variant'] = variant
        if raw_values:
            context['raw_values'] = raw_values
        super().__init__(message, context=context, **kwargs)


class InvalidEnumValueError(PocketBaseModelGeneratorError, ValueError):
    """Raised when a raw value matches no variant of an enum."""

    default_error_code = "INVALID_ENUM_VALUE"

    def __init__(self, message: str, enum_name: str = None, value: str = None, **kwargs):
        context = kwargs.pop('context', None) or {}
        if enum_name:
            context['enum'] = enum_name
        if value is not None:
            context['value'] = value
        super().__init__(message, context=context, **kwargs)


class RelationshipError(PocketBaseModelGeneratorError):
    """Raised when expansion analysis or generation fails."""

    default_error_code = "RELATIONSHIP_ERROR"
    default_suggestions = [
        "Check the expansion mapping records",
        "Verify both collections are included in generation",
    ]

    def __init__(
        self,
        message: str,
        source_collection: str = None,
        target_collection: str = None,
        source_field: str = None,
        **kwargs
    ):
        context = kwargs.pop('context', None) or {}
        if source_collection:
            context['source_collection'] = source_collection
        if source_field:
            context['source_field'] = source_field
        if target_collection:
            context['target_collection'] = target_collection
        super().__init__(message, context=context, **kwargs)


class UnresolvedExpansionTargetError(RelationshipError):
    """Raised in strict mode when an expansion targets an unknown collection."""

    default_error_code = "UNRESOLVED_EXPANSION_TARGET"
    default_suggestions = [
        "Fix the target_collection of the expansion mapping record",
        "Set 'strict_expansions: false' to emit the reference anyway",
    ]


class CodeGenerationError(PocketBaseModelGeneratorError):
    """Raised when assembling a generated module fails."""

    default_error_code = "CODE_GENERATION_ERROR"
    default_suggestions = [
        "Check the collection schema for field names that collide after normalization",
        "Check for collections whose singular names produce the same file",
    ]

    def __init__(self, message: str, collection: str = None, **kwargs):
        context = kwargs.pop('context', None) or {}
        if collection:
            context['collection'] = collection
        super().__init__(message, context=context, **kwargs)


class OutputWriteError(PocketBaseModelGeneratorError):
    """Raised when a generated file cannot be written."""

    default_error_code = "OUTPUT_WRITE_ERROR"
    default_suggestions = [
        "Check the output directory exists and is writable",
        "Make sure no other generator run writes to the same directory",
    ]

    def __init__(self, message: str, path: str = None, **kwargs):
        context = kwargs.pop('context', None) or {}
        if path:
            context['path'] = path
        super().__init__(message, context=context, **kwargs)

