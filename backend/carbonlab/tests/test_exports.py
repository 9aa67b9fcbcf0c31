import csv
import io
from datetime import date

from carbonlab.exports import attachment_header, csv_value, value_pair

from conftest import create_biochar, create_graphene


def _rows(resp):
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/csv")
    return list(csv.reader(io.StringIO(resp.text)))


def test_csv_value_formats():
    assert csv_value(None) == ""
    assert csv_value(True) == "Yes"
    assert csv_value(False) == "No"
    assert csv_value(date(2025, 1, 2)) == "2025-01-02"
    assert csv_value(["a", "b"]) == "a, b"
    assert value_pair(1.5, None) == ""
    assert value_pair(1, 2, separator="-") == "1-2"


def test_attachment_header_escapes_names():
    assert attachment_header("spectrum.pdf") == 'attachment; filename="spectrum.pdf"'
    assert attachment_header('run "7".pdf') == (
        "attachment; filename=\"run 7.pdf\"; filename*=UTF-8''run%20%227%22.pdf"
    )
    assert attachment_header("") == 'attachment; filename="report.pdf"'
    assert attachment_header("光.pdf", fallback="raman.pdf").startswith(
        'attachment; filename="raman.pdf"; filename*='
    )


def test_biochar_export(client):
    record = create_biochar(client, reactor="R7", comments='says "hi", twice')
    resp = client.get("/api/biochar/export/csv")
    assert "biochar_export.csv" in resp.headers["content-disposition"]
    rows = _rows(resp)
    assert rows[0][:3] == ["Experiment #", "Lot Number", "Reactor"]
    row = next(r for r in rows if r[0] == record["experiment_number"])
    assert row[2] == "R7"
    assert 'says "hi", twice' in row


def test_graphene_export_shows_source_and_tags(client):
    source = create_biochar(client)
    record = create_graphene(
        client,
        biochar_experiment=source["experiment_number"],
        homogeneous=False,
        appearance_tags=["grey", "powder"],
    )
    rows = _rows(client.get("/api/graphene/export/csv"))
    header = rows[0]
    row = next(r for r in rows if r[0] == record["experiment_number"])
    assert row[header.index("Biochar Source")] == source["experiment_number"]
    assert row[header.index("Homogeneous")] == "No"
    assert row[header.index("Appearance Tags")] == "grey, powder"


def test_raman_export_pairs_readings(client):
    graphene = create_graphene(client)
    client.post(
        "/api/raman/",
        json={
            "graphene_sample": graphene["experiment_number"],
            "integration_range_g_low": 1500,
            "integration_range_g_high": 1650,
            "integral_typ_a_d_1": 0.5,
            "integral_typ_a_d_2": 0.75,
            "peak_high_typ_j_2d_1": 3,
        },
    )
    rows = _rows(client.get("/api/raman/export/csv"))
    header = rows[0]
    row = next(r for r in rows if r[1] == graphene["experiment_number"])
    assert row[header.index("Integration Range G")] == "1500.0-1650.0"
    assert row[header.index("Integral Typ A D")] == "0.5,0.75"
    assert row[header.index("Peak High Typ J 2D")] == ""


def test_test_exports_have_headers(client):
    assert _rows(client.get("/api/bet/export/csv"))[0][0] == "Test Date"
    assert _rows(client.get("/api/conductivity/export/csv"))[0][3] == "Conductivity 1kN (S/m)"
