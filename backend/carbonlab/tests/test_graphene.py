import uuid

from conftest import combine, create_biochar, create_graphene, unique_number


def test_create_graphene_from_biochar(client):
    source = create_biochar(client)
    record = create_graphene(
        client,
        biochar_experiment=source["experiment_number"],
        oven="Tube furnace",
        homogeneous=True,
        appearance_tags=["shiny", "fluffy"],
    )
    assert record["biochar_experiment"] == source["experiment_number"]
    assert record["biochar_lot"] is None
    assert record["appearance_tags"] == ["shiny", "fluffy"]
    assert record["objective"] == ""


def test_graphene_rejects_two_sources(client):
    source = create_biochar(client)
    lot_number = unique_number("LOT")
    combine(client, lot_number, [create_biochar(client)["id"]])
    resp = client.post(
        "/api/graphene/",
        json={
            "experiment_number": unique_number("GR"),
            "biochar_experiment": source["experiment_number"],
            "biochar_lot_number": lot_number,
        },
    )
    assert resp.status_code == 422


def test_graphene_rejects_unknown_sources(client):
    resp = client.post(
        "/api/graphene/",
        json={"experiment_number": unique_number("GR"), "biochar_experiment": "NOPE"},
    )
    assert resp.status_code == 400
    resp = client.post(
        "/api/graphene/",
        json={"experiment_number": unique_number("GR"), "biochar_lot_number": "NOPE"},
    )
    assert resp.status_code == 400


def test_switching_source_clears_the_other(client):
    source = create_biochar(client)
    lot_number = unique_number("LOT")
    combine(client, lot_number, [create_biochar(client)["id"]])
    record = create_graphene(client, biochar_experiment=source["experiment_number"])

    resp = client.put(f"/api/graphene/{record['id']}", json={"biochar_lot_number": lot_number})
    assert resp.status_code == 200
    assert resp.json()["biochar_lot_number"] == lot_number
    assert resp.json()["biochar_experiment"] is None

    resp = client.put(
        f"/api/graphene/{record['id']}",
        json={"biochar_experiment": source["experiment_number"]},
    )
    assert resp.json()["biochar_experiment"] == source["experiment_number"]
    assert resp.json()["biochar_lot_number"] is None


def test_filter_by_biochar(client):
    source = create_biochar(client)
    first = create_graphene(client, biochar_experiment=source["experiment_number"])
    second = create_graphene(client, biochar_experiment=source["experiment_number"])
    create_graphene(client)

    resp = client.get("/api/graphene/", params={"biochar_experiment": source["experiment_number"]})
    assert resp.status_code == 200
    assert {r["id"] for r in resp.json()} == {first["id"], second["id"]}

    resp = client.get(f"/api/graphene/by-biochar/{source['experiment_number']}")
    assert {r["id"] for r in resp.json()} == {first["id"], second["id"]}
    assert client.get(f"/api/biochar/{source['id']}").json()["graphene_count"] == 2


def test_apply_objective_text(client):
    record = create_graphene(client)
    resp = client.post(
        f"/api/graphene/{record['id']}/objective",
        json={"text": "Objective: lower oxygen\nResult: C/O ratio up\nConclusion: keep argon"},
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["objective"] == "lower oxygen"
    assert body["result"] == "C/O ratio up"
    assert body["conclusion"] == "keep argon"
    assert body["experiment_details"] == ""

    resp = client.post(
        f"/api/graphene/{record['id']}/objective",
        json={"text": "Result: second run"},
    )
    assert resp.json()["objective"] == ""
    assert resp.json()["result"] == "second run"


def test_unrecognized_objective_text_leaves_record_alone(client):
    record = create_graphene(client)
    client.post(f"/api/graphene/{record['id']}/objective", json={"text": "Objective: keep"})
    resp = client.post(f"/api/graphene/{record['id']}/objective", json={"text": "random notes"})
    assert resp.status_code == 400
    assert resp.json()["detail"]["kind"] == "InvalidRequest"
    assert client.get(f"/api/graphene/{record['id']}").json()["objective"] == "keep"


def test_parse_endpoint(client):
    resp = client.post(
        "/api/objectives/parse",
        json={"text": "objective   boost yield\nexperiment details:\n   two stage"},
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["recognized"] is True
    assert body["objective"]["objective"] == "boost yield"
    assert body["objective"]["experiment_details"] == "two stage"
    assert body["normalized_text"] == "Objective: boost yield\nExperiment details: two stage"

    resp = client.post("/api/objectives/parse", json={"text": ""})
    assert resp.json() == {"recognized": False, "objective": None, "normalized_text": None}


def test_renaming_graphene_follows_to_tests(client):
    record = create_graphene(client)
    test = client.post("/api/bet/", json={"graphene_sample": record["experiment_number"]}).json()
    new_number = unique_number("GR")
    resp = client.put(f"/api/graphene/{record['id']}", json={"experiment_number": new_number})
    assert resp.status_code == 200
    assert client.get(f"/api/bet/{test['id']}").json()["graphene_sample"] == new_number


def test_delete_graphene_keeps_tests(client):
    record = create_graphene(client, species="few-layer")
    test = client.post("/api/raman/", json={"graphene_sample": record["experiment_number"]}).json()
    assert test["graphene_ref"] == {
        "experiment_number": record["experiment_number"],
        "species": "few-layer",
    }

    assert client.delete(f"/api/graphene/{record['id']}").status_code == 204
    remaining = client.get(f"/api/raman/{test['id']}").json()
    assert remaining["graphene_sample"] is None
    assert remaining["graphene_ref"] is None


def test_missing_graphene_is_404(client):
    assert client.get(f"/api/graphene/{uuid.uuid4()}").status_code == 404
    assert client.put(f"/api/graphene/{uuid.uuid4()}", json={"oven": "x"}).status_code == 404
