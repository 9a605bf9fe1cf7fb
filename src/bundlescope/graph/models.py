"""Value objects derived from a bundle graph."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, computed_field


class ChunkType(str, Enum):
    """When the browser downloads a chunk."""

    INITIAL = "initial"  # on page load
    LAZY = "lazy"  # on demand, behind a dynamic import


class ChunkSummary(BaseModel):
    """Aggregate facts about one output."""

    model_config = ConfigDict(frozen=True)

    output_file: str
    bytes: int = 0
    entry_point: str = ""
    inferred_entry: str = ""  # own entry point, else the nearest static importer's
    included_inputs: tuple[str, ...] = ()

    @computed_field
    @property
    def is_entry(self) -> bool:
        return bool(self.entry_point)

    def contains(self, input_path: str) -> bool:
        return input_path in self.included_inputs


class LoadBucket(BaseModel):
    """One side of the initial/lazy split."""

    model_config = ConfigDict(frozen=True)

    outputs: tuple[str, ...] = ()
    total_bytes: int = 0

    def __contains__(self, output_file: object) -> bool:
        return output_file in self.outputs


class InitialSummary(BaseModel):
    """Outputs loaded on page load versus on demand.

    The two buckets are disjoint. Outputs that are unreachable from the entry
    or rejected by the browser filter appear in neither.
    """

    model_config = ConfigDict(frozen=True)

    entry_output: str
    initial: LoadBucket = Field(default_factory=LoadBucket)
    lazy: LoadBucket = Field(default_factory=LoadBucket)

    def chunk_type_of(self, output_file: str) -> ChunkType:
        return ChunkType.INITIAL if output_file in self.initial else ChunkType.LAZY


class InclusionStep(BaseModel):
    """One hop on the import chain from the entry to a file."""

    model_config = ConfigDict(frozen=True)

    file: str  # the importer at this hop
    import_statement: str
    is_dynamic_import: bool
    importer_chunk_type: ChunkType


class ImportSource(BaseModel):
    """A direct importer of a file."""

    model_config = ConfigDict(frozen=True)

    importer: str
    import_statement: str
    chunk_type: ChunkType
    is_dynamic_import: bool
    chunk_output_file: str | None = None
    chunk_size: int | None = None


class CreatedChunk(BaseModel):
    """A chunk split off by one of a file's dynamic imports."""

    model_config = ConfigDict(frozen=True)

    chunk: ChunkSummary
    dynamic_import_path: str
    import_statement: str
