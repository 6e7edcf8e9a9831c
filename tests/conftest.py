"""
Pytest fixtures for the TFactorTx explorer tests.

Provides a small, deterministic overview table (as parsed rows and as a
data directory on disk), a matching master table and documentation CSVs,
and a TestClient bound to an app created for that data directory.

Sample overview (overallRank / agingDbEntriesRank / pharosTDL):

    TP53     1     1     Tchem
    PPARG    2     6     Tclin
    NR3C1    3     31    Tclin
    VDR      8     31    Tclin
    JAZF1    347   1168  Tbio
    APOE     NA    5     Tbio
    ZNF33B   NA    NA    NA
"""

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from utils.data_source import row_from_values  # noqa: E402

OVERVIEW_HEADER = (
    "TF Symbol;Overall Rank;All Diseases Rank;ARDs Rank;Strongest Linked ARD;"
    "Aging Rank;Human Link Y/N;M. musculus Link;C. elegans Link;"
    "D. melanogaster Link;Development Level;Pharos TDL"
)

OVERVIEW_LINES = [
    "TP53;1;1;4;Cancer;1;Y;Unclear;Anti-Longevity;Unclear;2_Medium;Tchem",
    "PPARG;2;6;3;Type 2 Diabetes Mellitus;6;Y;Pro-Longevity;Unclear;#NA;1_High;Tclin",
    "NR3C1;3;2;1;Chronic Obstructive Pulmonary Disease;31;Y;#NA;Unclear;#NA;1_High;Tclin",
    "VDR;8;43;2;Type 2 Diabetes Mellitus;31;Y;#NA;Unclear;#NA;1_High;Tclin",
    "JAZF1;347;33;5;Type 2 Diabetes Mellitus;1168;N;#NA;#NA;#NA;5_None;Tbio",
    "APOE;#NA;8;16;Alzheimer Disease;5;Y;Anti-Longevity;#NA;#NA;5_None;Tbio",
    "ZNF33B;#NA;#NA;#NA;#NA;#NA;#NA;#NA;#NA;#NA;#NA;#NA",
]

MASTER_HEADER = (
    "basic_tfactortx_id;basic_gene_symbol;basic_protein_name;basic_tf_family;"
    "basic_ensembl_gene_id;basic_hgnc_id;basic_ncbi_gene_id;basic_uniprot_id;"
    "disease_ot_ard_strongest_linked_disease;disease_ot_ard_total_score;"
    "disease_ot_ard_disease_count;aging_hagr_genage_mm_influence;"
    "dev_summary_dev_level_category;dev_pharos_tcrd_tdl;dev_chembl_target_id;"
    "dev_chembl_drug_count"
)

MASTER_LINES = [
    "TFTX0001;TP53;Cellular tumor antigen p53;p53-related factors;ENSG00000141510;"
    "HGNC:11998;7157;P04637;Cancer;9.412;14;Unclear;2_Medium;Tchem;CHEMBL4096;12",
    "TFTX0002;NR3C1;Glucocorticoid receptor;Thyroid hormone receptor-related factors (NR3);"
    "ENSG00000113580;HGNC:7978;2908;P04150;Chronic Obstructive Pulmonary Disease;11.07;15;"
    '#N/A;1_High;Tclin;"CHEMBL2034;CHEMBL3885521";"118;4"',
    "TFTX0005;JAZF1;#N/A;More than 3 adjacent zinc fingers;ENSG00000153814;HGNC:28917;"
    "221895;Q86VZ6;Type 2 Diabetes Mellitus;2.1;5;#N/A;5_None;Tbio;#N/A;#N/A",
]

CITATION_CSV = (
    "Source;Description;URL\n"
    "Open Targets Platform;Target-disease associations;https://platform.opentargets.org/\n"
    "ChEMBL;Bioactive molecules;https://www.ebi.ac.uk/chembl/\n"
)


def write_data_dir(root: Path, overview_lines=None, master=True, docs=True) -> Path:
    """Write the sample CSVs under *root* and return it."""
    root.mkdir(parents=True, exist_ok=True)
    lines = OVERVIEW_LINES if overview_lines is None else overview_lines
    (root / "tfactortx_overview.csv").write_text(
        "\n".join([OVERVIEW_HEADER, *lines]) + "\n", encoding="utf-8"
    )
    if master:
        (root / "tfactortx_master.csv").write_text(
            "\n".join([MASTER_HEADER, *MASTER_LINES]) + "\n", encoding="utf-8"
        )
    if docs:
        doc_dir = root / "documentation"
        doc_dir.mkdir(exist_ok=True)
        (doc_dir / "01_data_sources.csv").write_text(CITATION_CSV, encoding="utf-8")
    return root


# ── Row fixtures ──────────────────────────────────────────────────────────────

@pytest.fixture()
def sample_rows():
    """The sample overview as parsed rows, in file order."""
    return [row_from_values(line.split(";")) for line in OVERVIEW_LINES]


def symbols(rows):
    return [r["symbol"] for r in rows]


# ── App fixtures ──────────────────────────────────────────────────────────────

@pytest.fixture()
def data_dir(tmp_path):
    return write_data_dir(tmp_path / "data")


@pytest.fixture(autouse=True)
def _reset_app_state():
    """Clear rate-limit counters, the cached store and the mailer between tests."""
    import api.app as app_module
    from api.datastore import reset_store, set_data_url
    from api.routes.contact import set_mailer

    app_module._rate_counters.clear()
    yield
    app_module._rate_counters.clear()
    set_data_url(None)
    reset_store()
    set_mailer(None)


@pytest.fixture()
def app(data_dir):
    from api.app import create_app
    return create_app(data_dir=data_dir)


@pytest.fixture()
def client(app):
    from fastapi.testclient import TestClient
    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture()
def empty_client(tmp_path):
    """Client for an app whose data directory has no overview file."""
    from api.app import create_app
    from fastapi.testclient import TestClient

    missing = tmp_path / "missing"
    missing.mkdir()
    return TestClient(create_app(data_dir=missing), raise_server_exceptions=False)
