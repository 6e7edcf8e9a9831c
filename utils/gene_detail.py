"""Group a master-table record into the sections of the gene detail page.

The master table is wide (one column per measure, prefixed by area:
``basic_``, ``disease_``, ``aging_``, ``dev_``). ``build_gene_detail()``
picks the displayed fields out of a record, formats them and attaches
links to the external databases they refer to. Fields absent from the
record are skipped, so older master files with fewer columns still render.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

from utils.formatting import format_detail_value, is_missing, split_multi

# ── Disease vocabulary ────────────────────────────────────────────────────────

# Open Targets ontology ids for the age-related diseases (ARDs) tracked.
DISEASE_IDS: dict[str, str] = {
    "age-related hearing impairment": "EFO_0005782",
    "age-related macular degeneration": "EFO_0001365",
    "alzheimer disease": "MONDO_0004975",
    "atherosclerosis": "EFO_0003914",
    "benign prostatic hyperplasia": "EFO_0000284",
    "cancer": "MONDO_0004992",
    "chronic obstructive pulmonary disease": "EFO_0000341",
    "heart failure": "EFO_0003144",
    "ischemic stroke": "HP_0002140",
    "myocardial infarction": "EFO_0000612",
    "non-alcoholic fatty liver disease": "EFO_0003095",
    "osteoarthritis": "MONDO_0005178",
    "osteoporosis": "HP_0000939",
    "parkinson disease": "MONDO_0005180",
    "sarcopenia": "EFO_1000653",
    "type 2 diabetes mellitus": "MONDO_0005148",
}

SHORT_DISEASE_NAMES: dict[str, str] = {
    "chronic obstructive pulmonary disease": "COPD",
    "type 2 diabetes mellitus": "T2DM",
    "age-related macular degeneration": "AMD",
    "age-related hearing impairment": "ARHI",
    "benign prostatic hyperplasia": "BPH",
    "non-alcoholic fatty liver disease": "NAFLD",
    "myocardial infarction": "MI",
    "ischemic stroke": "IS",
}


def disease_id(name: str) -> str | None:
    """Ontology id for a disease name (case-insensitive), or ``None``."""
    return DISEASE_IDS.get((name or "").strip().lower())


def short_disease_name(name: str) -> str:
    return SHORT_DISEASE_NAMES.get((name or "").strip().lower(), name)


# ── Link builders ─────────────────────────────────────────────────────────────

def _link(template: str) -> Callable[[str, Mapping[str, Any]], str]:
    return lambda value, record: template.format(value=value)


def _as_url(value: str, record: Mapping[str, Any]) -> str | None:
    return value if value.startswith(("http://", "https://")) else None


def _evidence_url(value: str, record: Mapping[str, Any]) -> str | None:
    ensembl = record.get("basic_ensembl_gene_id")
    ontology = disease_id(value)
    if is_missing(ensembl) or ontology is None:
        return None
    return f"https://platform.opentargets.org/evidence/{ensembl}/{ontology}"


LinkBuilder = Callable[[str, Mapping[str, Any]], "str | None"]


@dataclass(frozen=True)
class FieldSpec:
    key: str
    label: str
    link: LinkBuilder | None = None
    multi: bool = False
    """Split ``;``-separated values and render each one separately."""


@dataclass(frozen=True)
class SectionSpec:
    title: str
    fields: tuple[FieldSpec, ...]
    source_label: str = ""
    source_url: str = ""


SECTIONS: tuple[SectionSpec, ...] = (
    SectionSpec("TFactorTx IDs", (
        FieldSpec("basic_tfactortx_id", "TFactorTx ID"),
        FieldSpec("basic_gene_symbol", "Gene Symbol"),
    )),
    SectionSpec("Classification", (
        FieldSpec("basic_tf_superclass", "TF Superclass"),
        FieldSpec("basic_tf_class", "TF Class"),
        FieldSpec("basic_tf_family", "TF Family"),
    ), "TFClass", "http://tfclass.bioinf.med.uni-goettingen.de/"),
    SectionSpec("External Database IDs", (
        FieldSpec("basic_ensembl_gene_id", "Ensembl",
                  _link("https://ensembl.org/Homo_sapiens/Gene/Summary?g={value}")),
        FieldSpec("basic_hgnc_id", "HGNC",
                  _link("https://www.genenames.org/data/gene-symbol-report/#!/hgnc_id/{value}")),
        FieldSpec("basic_ncbi_gene_id", "NCBI Gene",
                  _link("https://www.ncbi.nlm.nih.gov/gene/{value}")),
        FieldSpec("basic_uniprot_id", "UniProt",
                  _link("https://www.uniprot.org/uniprot/{value}")),
        FieldSpec("basic_jaspar_url", "JASPAR", _as_url),
        FieldSpec("basic_open_targets_url", "Open Targets", _as_url),
    )),
    SectionSpec("Target-Disease", (
        FieldSpec("disease_ot_ard_strongest_linked_disease", "Strongest Linked ARD",
                  _evidence_url),
        FieldSpec("disease_ot_ard_total_score", "ARD Total Score"),
        FieldSpec("disease_ot_ard_disease_count", "ARD Count"),
        FieldSpec("disease_ot_total_assoc_score", "All Diseases Total Score"),
        FieldSpec("disease_ot_total_assoc_count", "All Diseases Count"),
        FieldSpec("disease_ot_hiconf_count", "High-Confidence Associations"),
        FieldSpec("disease_ot_modconf_count", "Moderate-Confidence Associations"),
        FieldSpec("disease_ot_lowconf_count", "Low-Confidence Associations"),
    ), "Open Targets", "https://platform.opentargets.org/"),
    SectionSpec("Target-Aging", (
        FieldSpec("aging_hagr_genage_human_inclusion", "GenAge Human"),
        FieldSpec("aging_opengenes_human_longevity_assoc", "OpenGenes Human Longevity"),
        FieldSpec("aging_agingreg_human_influence", "AgingReg Human"),
        FieldSpec("aging_hagr_genage_mm_influence", "GenAge M. musculus"),
        FieldSpec("aging_hagr_genage_ce_influence", "GenAge C. elegans"),
        FieldSpec("aging_hagr_genage_dm_influence", "GenAge D. melanogaster"),
        FieldSpec("aging_opengenes_mm_influence", "OpenGenes M. musculus"),
        FieldSpec("aging_opengenes_ce_influence", "OpenGenes C. elegans"),
        FieldSpec("aging_opengenes_dm_influence", "OpenGenes D. melanogaster"),
        FieldSpec("aging_senequest_total_entries", "SeneQuest Entries"),
    ), "PMID 35343830", "https://pubmed.ncbi.nlm.nih.gov/35343830/"),
    SectionSpec("Target-Development", (
        FieldSpec("dev_summary_dev_level_category", "Development Level"),
        FieldSpec("dev_pharos_tcrd_tdl", "Pharos TDL"),
        FieldSpec("dev_dgidb_all_drugs", "DGIdb Drugs", multi=True),
        FieldSpec("dev_dgidb_MOA_drugs", "DGIdb MOA Drugs", multi=True),
        FieldSpec("dev_ttd_approved_drugs", "TTD Approved Drugs", multi=True),
        FieldSpec("dev_chembl_target_id", "ChEMBL Target",
                  _link("https://www.ebi.ac.uk/chembl/explore/target/{value}"), multi=True),
        FieldSpec("dev_chembl_drug_count", "ChEMBL Drug Count", multi=True),
        FieldSpec("dev_chembl_max_phase", "ChEMBL Max Phase", multi=True),
        FieldSpec("dev_chembl_first_approval_min", "First Approval", multi=True),
    ), "ChEMBL", "https://www.ebi.ac.uk/chembl/"),
)


# ── View model ────────────────────────────────────────────────────────────────

@dataclass
class DetailValue:
    text: str
    url: str | None = None


@dataclass
class DetailField:
    label: str
    values: list[DetailValue] = field(default_factory=list)


@dataclass
class DetailSection:
    title: str
    fields: list[DetailField] = field(default_factory=list)
    source_label: str = ""
    source_url: str = ""


@dataclass
class GeneDetail:
    symbol: str
    protein_name: str
    sections: list[DetailSection]


def _clean_value(text: str) -> str:
    # Development level values carry a sort prefix ("1_High").
    if len(text) > 2 and text[0].isdigit() and text[1] == "_":
        return text[2:].replace("_", " ")
    return text


def _field_values(spec: FieldSpec, raw: Any, record: Mapping[str, Any]) -> list[DetailValue]:
    parts = split_multi(raw) if spec.multi else ([] if is_missing(raw) else [raw])
    if not parts:
        return [DetailValue(format_detail_value(None))]
    values = []
    for part in parts:
        text = _clean_value(format_detail_value(part))
        url = spec.link(str(part).strip(), record) if spec.link else None
        values.append(DetailValue(text, url))
    return values


def build_gene_detail(record: Mapping[str, Any]) -> GeneDetail:
    """Turn a master-table record into the detail page's sections."""
    sections = []
    for spec in SECTIONS:
        fields = [
            DetailField(f.label, _field_values(f, record[f.key], record))
            for f in spec.fields
            if f.key in record
        ]
        if fields:
            sections.append(DetailSection(spec.title, fields, spec.source_label, spec.source_url))
    protein = record.get("basic_protein_name")
    return GeneDetail(
        symbol=str(record.get("basic_gene_symbol") or ""),
        protein_name="" if is_missing(protein) else str(protein).strip(),
        sections=sections,
    )
