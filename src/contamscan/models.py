"""Typed model of one NCBI Datasets assembly data report record.

Only ``accession``, ``assemblyInfo.assemblyName`` and ``organism.organismName``
are required. Everything else is optional so that upstream schema drift in
fields we never interpret does not break ingestion. Unknown keys are kept on
the model (``extra="allow"``) and survive ``model_dump(by_alias=True)``.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class ReportModel(BaseModel):
    """Base for report sections: camelCase aliases, immutable, tolerant of extras."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
        frozen=True,
    )


def _require_text(value: str, field_name: str) -> str:
    if not value.strip():
        raise ValueError(f"`{field_name}` must not be empty")
    return value


class Bioproject(ReportModel):
    accession: str = ""
    parent_accessions: list[str] = Field(default_factory=list)
    title: str = ""


class BioprojectLineage(ReportModel):
    bioprojects: list[Bioproject] = Field(default_factory=list)


class Attribute(ReportModel):
    name: str = ""
    value: str = ""


class TaxonRef(ReportModel):
    organism_name: str = ""
    tax_id: int | None = None


class Description(ReportModel):
    organism: TaxonRef | None = None
    title: str = ""


class Owner(ReportModel):
    name: str = ""


class SampleId(ReportModel):
    db: str = ""
    value: str = ""


class Status(ReportModel):
    status: str = ""
    when: str = ""


class Biosample(ReportModel):
    accession: str = ""
    attributes: list[Attribute] = Field(default_factory=list)
    description: Description | None = None
    last_updated: str = ""
    models: list[str] = Field(default_factory=list)
    owner: Owner | None = None
    package: str = ""
    publication_date: str = ""
    sample_ids: list[SampleId] = Field(default_factory=list)
    status: Status | None = None
    submission_date: str = ""

    def attribute(self, name: str) -> str | None:
        """Return the first biosample attribute value called ``name``."""

        for attribute in self.attributes:
            if attribute.name == name:
                return attribute.value
        return None


class LinkedAssembly(ReportModel):
    assembly_type: str = ""
    linked_assembly: str = ""


class AssemblyInfo(ReportModel):
    assembly_name: str
    assembly_level: str = ""
    assembly_method: str = ""
    assembly_status: str = ""
    assembly_type: str = ""
    bioproject_accession: str = ""
    bioproject_lineage: list[BioprojectLineage] = Field(default_factory=list)
    biosample: Biosample | None = None
    blast_url: str = ""
    comments: str = ""
    diploid_role: str = ""
    linked_assemblies: list[LinkedAssembly] = Field(default_factory=list)
    refseq_category: str = ""
    release_date: str = ""
    sequencing_tech: str = ""
    submitter: str = ""

    @field_validator("assembly_name")
    @classmethod
    def _assembly_name_not_blank(cls, value: str) -> str:
        return _require_text(value, "assemblyInfo.assemblyName")


class AssemblyStats(ReportModel):
    # NCBI reports several of these counts as strings; they are kept verbatim.
    contig_l50: int | None = None
    contig_n50: int | None = None
    gc_count: str | None = None
    gc_percent: float | None = None
    genome_coverage: str | None = None
    number_of_component_sequences: int | None = None
    number_of_contigs: int | None = None
    number_of_organelles: int | None = None
    number_of_scaffolds: int | None = None
    scaffold_l50: int | None = None
    scaffold_n50: int | None = None
    total_number_of_chromosomes: int | None = None
    total_sequence_length: str | None = None
    total_ungapped_length: str | None = None


class OrganelleInfo(ReportModel):
    description: str = ""
    submitter: str = ""
    total_seq_length: str | None = None


class Organism(ReportModel):
    organism_name: str
    tax_id: int | None = None

    @field_validator("organism_name")
    @classmethod
    def _organism_name_not_blank(cls, value: str) -> str:
        return _require_text(value, "organism.organismName")


class AssemblyRecord(ReportModel):
    """One assembly data report entry."""

    accession: str
    assembly_info: AssemblyInfo
    organism: Organism
    assembly_stats: AssemblyStats | None = None
    current_accession: str = ""
    organelle_info: list[OrganelleInfo] = Field(default_factory=list)
    source_database: str = ""

    @field_validator("accession")
    @classmethod
    def _accession_not_blank(cls, value: str) -> str:
        return _require_text(value, "accession")

    @property
    def assembly_name(self) -> str:
        return self.assembly_info.assembly_name

    @property
    def organism_name(self) -> str:
        return self.organism.organism_name

    @classmethod
    def from_payload(cls, payload: Any) -> "AssemblyRecord":
        """Validate a decoded JSON value; raises ``pydantic.ValidationError``."""

        return cls.model_validate(payload)
