#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Exceptions raised by promptmark.

A render pass is forgiving: a missing include, an unreadable document or a
malformed data attribute becomes placeholder text where the component would
have rendered, and the pass carries on. The classes here are for the cases
that do reach the caller, plus the few internal errors that components turn
into placeholders themselves.

Exception Hierarchy
-------------------
- PromptMarkError

  - ValidationError (bad arguments or options)
    - InvalidOptionsError (options object of the wrong class)

  - FileError (the markup file given to the API)
    - MarkupFileNotFoundError

  - ParsingError (malformed markup with strict parsing on)

  - DocumentError (the document contradicts itself; aborts the render)
    - DuplicateSchemaError (a second response schema)
    - InvalidSchemaError (a schema body that does not parse)
    - VersionMismatchError (``<meta minVersion>`` above the installed version)

  - RenderingError
    - FormatError (unknown output format)

  - ComponentRegistryError (bad component registration)

  - DependencyError (PDF or DOCX reader not installed)

"""


class PromptMarkError(Exception):
    """Base class of every promptmark exception.

    Parameters
    ----------
    message : str
        Description of the error
    original_error : Exception, optional
        Lower-level exception that caused this one

    """

    def __init__(self, message: str, original_error: Exception | None = None):
        """Store the message and the causing exception."""
        super().__init__(message)
        self.message = message
        self.original_error = original_error


class ValidationError(PromptMarkError):
    """An argument or option value is not acceptable."""

    def __init__(self, message: str, parameter_name: str | None = None, original_error: Exception | None = None):
        """Record which parameter was rejected."""
        super().__init__(message, original_error=original_error)
        self.parameter_name = parameter_name


class InvalidOptionsError(ValidationError):
    """A renderer received an options object of the wrong class.

    Parameters
    ----------
    renderer_name : str
        Class name of the renderer
    expected_type : type
        Options class the renderer accepts
    received_type : type
        Class of the object that was passed

    """

    def __init__(self, renderer_name: str, expected_type: type, received_type: type):
        """Build the message from the two classes."""
        super().__init__(
            f"{renderer_name} takes {expected_type.__name__}, not {received_type.__name__}",
            parameter_name="options",
        )
        self.renderer_name = renderer_name
        self.expected_type = expected_type
        self.received_type = received_type


class FileError(PromptMarkError):
    """The markup file passed to the API cannot be used.

    Files referenced from inside a document (includes, documents, tables)
    never raise this; they render placeholders instead.
    """

    def __init__(self, message: str, file_path: str | None = None, original_error: Exception | None = None):
        """Record the offending path."""
        super().__init__(message, original_error=original_error)
        self.file_path = file_path


class MarkupFileNotFoundError(FileError):
    """A markup file path does not exist."""

    def __init__(self, file_path: str):
        """Build the message from the path."""
        super().__init__(f"Markup file not found: {file_path}", file_path=file_path)


class ParsingError(PromptMarkError):
    """Markup is not well-formed and strict parsing was requested.

    Parameters
    ----------
    message : str
        Parser error description
    source : str, optional
        The start of the markup, to identify it in logs

    """

    def __init__(self, message: str, source: str | None = None, original_error: Exception | None = None):
        """Record the markup excerpt."""
        super().__init__(message, original_error=original_error)
        self.source = source


class DocumentError(PromptMarkError):
    """The document cannot be rendered as a whole.

    ``tag`` names the component that found the problem.
    """

    def __init__(self, message: str, tag: str | None = None, original_error: Exception | None = None):
        """Record the reporting tag."""
        super().__init__(message, original_error=original_error)
        self.tag = tag


class DuplicateSchemaError(DocumentError):
    """A document declared a response schema twice.

    Both ``<output-schema>`` and ``<meta type="responseSchema">`` fill the
    same slot, so any two of them conflict.
    """

    def __init__(self, tag: str | None = None):
        """Name the tag that tried to set the second schema."""
        super().__init__(
            f"<{tag or 'output-schema'}> declares a second response schema; a document may only have one",
            tag=tag,
        )


class InvalidSchemaError(DocumentError):
    """A schema or tool body is not valid JSON."""


class VersionMismatchError(DocumentError):
    """The document needs a newer promptmark than the one installed."""

    def __init__(self, required_version: str, current_version: str):
        """Store both versions."""
        super().__init__(
            f"Document requires promptmark >= {required_version}; installed version is {current_version}",
            tag="meta",
        )
        self.required_version = required_version
        self.current_version = current_version


class RenderingError(PromptMarkError):
    """The output renderer could not produce a result."""


class FormatError(RenderingError):
    """The requested output format is not one the renderer knows.

    Parameters
    ----------
    format_type : str
        Requested format
    supported_formats : list of str, optional
        Formats the renderer accepts

    """

    def __init__(self, format_type: str, supported_formats: list[str] | None = None):
        """List the supported formats in the message."""
        message = f"Unknown output format: {format_type}"
        if supported_formats:
            message = f"{message} (expected one of: {', '.join(supported_formats)})"
        super().__init__(message)
        self.format_type = format_type
        self.supported_formats = supported_formats


class ComponentRegistryError(PromptMarkError):
    """A component class or tag cannot be registered."""

    def __init__(self, message: str, tag: str | None = None):
        """Record the tag involved, if any."""
        super().__init__(message)
        self.tag = tag


class DependencyError(PromptMarkError):
    """A package needed to read a document format is missing or too old.

    The first line of the message names the problem; the second tells how
    to install the matching promptmark extra. ``<document>`` shows the first
    line in its placeholder.

    Parameters
    ----------
    feature_name : str
        Extra that provides the packages, e.g. ``"pdf"``
    missing_packages : list of (str, str)
        ``(package, version_spec)`` for packages that cannot be imported
    version_mismatches : list of (str, str, str), optional
        ``(package, version_spec, installed_version)`` for packages that are
        installed at an unsupported version
    original_import_error : ImportError, optional
        The first import failure

    """

    def __init__(
        self,
        feature_name: str,
        missing_packages: list[tuple[str, str]],
        version_mismatches: list[tuple[str, str, str]] | None = None,
        original_import_error: ImportError | None = None,
    ):
        """Summarize the unmet requirements."""
        version_mismatches = version_mismatches or []
        problems = [f"{name}{spec} is not installed" for name, spec in missing_packages]
        problems += [
            f"{name}{spec} is required but {installed} is installed" for name, spec, installed in version_mismatches
        ]
        message = (
            f"Reading {feature_name.upper()} documents needs extra packages: {'; '.join(problems)}\n"
            f'Install them with: pip install "promptmark[{feature_name}]"'
        )
        super().__init__(message, original_error=original_import_error)
        self.feature_name = feature_name
        self.missing_packages = missing_packages
        self.version_mismatches = version_mismatches
