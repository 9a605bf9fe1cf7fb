"""Data models for a normalized esbuild metafile."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ImportKind(str, Enum):
    """Edge kinds esbuild writes into a metafile."""

    IMPORT_STATEMENT = "import-statement"
    DYNAMIC_IMPORT = "dynamic-import"
    REQUIRE_CALL = "require-call"
    REQUIRE_RESOLVE = "require-resolve"
    IMPORT_RULE = "import-rule"
    URL_TOKEN = "url-token"
    ENTRY_POINT = "entry-point"
    INTERNAL = "internal"


class ImportEdge(BaseModel):
    """A directed import from one input (or output) to another."""

    model_config = ConfigDict(frozen=True)

    path: str
    kind: str = ImportKind.IMPORT_STATEMENT.value  # unknown kinds are kept verbatim
    external: bool = False
    original: str = ""  # specifier as written in source, inputs only

    @property
    def is_dynamic(self) -> bool:
        return self.kind == ImportKind.DYNAMIC_IMPORT.value

    @property
    def specifier(self) -> str:
        """The import statement as the user wrote it, falling back to the resolved path."""
        return self.original or self.path


class InputFile(BaseModel):
    """A source file that took part in the build."""

    model_config = ConfigDict(frozen=True)

    bytes: int = 0
    imports: list[ImportEdge] = Field(default_factory=list)
    format: str | None = None
    loader: str | None = None


class OutputContribution(BaseModel):
    """How much of one input ended up in an output."""

    model_config = ConfigDict(frozen=True)

    bytes_in_output: int = 0


class OutputFile(BaseModel):
    """An emitted file (a chunk, from the browser's point of view)."""

    model_config = ConfigDict(frozen=True)

    bytes: int = 0
    entry_point: str = ""
    imports: list[ImportEdge] = Field(default_factory=list)
    inputs: dict[str, OutputContribution] = Field(default_factory=dict)
    exports: list[str] = Field(default_factory=list)
    css_bundle: str | None = None


class Graph(BaseModel):
    """The full build report: inputs and outputs keyed by path."""

    model_config = ConfigDict(frozen=True)

    inputs: dict[str, InputFile] = Field(default_factory=dict)
    outputs: dict[str, OutputFile] = Field(default_factory=dict)
