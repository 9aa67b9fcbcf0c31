import uuid

import pytest
from sqlalchemy.exc import OperationalError

from carbonlab import crud, models
from carbonlab.errors import Conflict, ExperimentsAlreadyAssigned, InvalidRequest, StorageError
from carbonlab.services.lots import combine_into_lot

from conftest import combine, create_biochar, create_graphene, unique_number


def test_combine_into_lot(client):
    first = create_biochar(client)
    second = create_biochar(client)
    lot_number = unique_number("LOT")

    resp = combine(
        client,
        lot_number,
        [first["id"], second["id"]],
        lotName="Spring batch",
        description="  acid washed  ",
    )
    assert resp.status_code == 201, resp.text
    body = resp.json()
    assert body["success"] is True
    lot = body["lot"]
    assert lot["lot_number"] == lot_number
    assert lot["lot_name"] == "Spring batch"
    assert lot["description"] == "acid washed"
    assert lot["experiment_count"] == 2
    assert {e["id"] for e in lot["experiments"]} == {first["id"], second["id"]}

    for record in (first, second):
        fetched = client.get(f"/api/biochar/{record['id']}").json()
        assert fetched["lot_number"] == lot_number


def test_combine_accepts_snake_case_keys(client):
    record = create_biochar(client)
    lot_number = unique_number("LOT")
    resp = client.post(
        "/api/biochar/combine-lot",
        json={"lot_number": lot_number, "experiment_ids": [record["id"]], "lot_name": ""},
    )
    assert resp.status_code == 201, resp.text
    assert resp.json()["lot"]["lot_name"] is None


def test_lot_number_is_trimmed(client):
    record = create_biochar(client)
    lot_number = unique_number("LOT")
    resp = combine(client, f"  {lot_number} ", [record["id"]])
    assert resp.status_code == 201
    assert resp.json()["lot"]["lot_number"] == lot_number


def test_duplicate_lot_number_has_no_effect(client):
    lot_number = unique_number("LOT")
    assert combine(client, lot_number, [create_biochar(client)["id"]]).status_code == 201

    other = create_biochar(client)
    resp = combine(client, lot_number, [other["id"]])
    assert resp.status_code == 409
    assert resp.json()["detail"]["kind"] == "Conflict"
    assert client.get(f"/api/biochar/{other['id']}").json()["lot_number"] is None
    lot = client.get(f"/api/biochar/lots/{lot_number}").json()
    assert lot["experiment_count"] == 1


def test_already_assigned_experiment_rejects_whole_request(client):
    taken = create_biochar(client)
    free = create_biochar(client)
    assert combine(client, unique_number("LOT"), [taken["id"]]).status_code == 201

    lot_number = unique_number("LOT")
    resp = combine(client, lot_number, [free["id"], taken["id"]])
    assert resp.status_code == 409
    detail = resp.json()["detail"]
    assert detail["kind"] == "Conflict"
    assert detail["experiment_numbers"] == [taken["experiment_number"]]
    assert detail["experiment_ids"] == [taken["id"]]

    assert client.get(f"/api/biochar/lots/{lot_number}").status_code == 404
    assert client.get(f"/api/biochar/{free['id']}").json()["lot_number"] is None


@pytest.mark.parametrize(
    "lot_number, use_ids",
    [("", True), ("   ", True), ("LOT-EMPTY", False)],
)
def test_invalid_combination_requests(client, lot_number, use_ids):
    ids = [create_biochar(client)["id"]] if use_ids else []
    resp = combine(client, lot_number, ids)
    assert resp.status_code == 400
    assert resp.json()["detail"]["kind"] == "InvalidRequest"
    if use_ids:
        assert client.get(f"/api/biochar/{ids[0]}").json()["lot_number"] is None


def test_null_combination_fields_are_invalid_requests(client):
    record = create_biochar(client)
    for payload in (
        {"lotNumber": None, "experimentIds": [record["id"]]},
        {"lotNumber": unique_number("LOT"), "experimentIds": None},
        {"experimentIds": [record["id"]]},
    ):
        resp = client.post("/api/biochar/combine-lot", json=payload)
        assert resp.status_code == 400, resp.text
        assert resp.json()["detail"]["kind"] == "InvalidRequest"
    assert client.get(f"/api/biochar/{record['id']}").json()["lot_number"] is None


def test_unknown_experiment_ids_are_rejected(client):
    record = create_biochar(client)
    missing = str(uuid.uuid4())
    resp = combine(client, unique_number("LOT"), [record["id"], missing])
    assert resp.status_code == 400
    assert resp.json()["detail"]["experiment_ids"] == [missing]
    assert client.get(f"/api/biochar/{record['id']}").json()["lot_number"] is None


def test_duplicate_ids_are_collapsed(client):
    record = create_biochar(client)
    resp = combine(client, unique_number("LOT"), [record["id"], record["id"]])
    assert resp.status_code == 201
    assert resp.json()["lot"]["experiment_count"] == 1


def test_list_get_and_rename_lot(client):
    record = create_biochar(client)
    lot_number = unique_number("LOT")
    combine(client, lot_number, [record["id"]], lotName="old")

    listed = client.get("/api/biochar/lots")
    assert listed.status_code == 200
    assert lot_number in [lot["lot_number"] for lot in listed.json()]

    resp = client.patch(
        f"/api/biochar/lots/{lot_number}",
        json={"lot_name": "new", "description": "sieved"},
    )
    assert resp.status_code == 200
    assert resp.json()["lot_name"] == "new"
    assert resp.json()["lot_number"] == lot_number

    assert client.get("/api/biochar/lots/NO-SUCH-LOT").status_code == 404


def test_graphene_can_be_sourced_from_lot(client):
    record = create_biochar(client)
    lot_number = unique_number("LOT")
    combine(client, lot_number, [record["id"]], lotName="batch")

    graphene = create_graphene(client, biochar_lot_number=lot_number)
    assert graphene["biochar_lot"] == {"lot_number": lot_number, "lot_name": "batch"}
    assert graphene["biochar_experiment"] is None


def _make_biochar(db):
    record = models.Biochar(experiment_number=unique_number("BC"))
    db.add(record)
    db.commit()
    return record


def test_service_combines_without_committing(db_session):
    record = _make_biochar(db_session)
    lot_number = unique_number("LOT")
    lot = combine_into_lot(db_session, lot_number, None, None, [record.id])
    assert lot.lot_number == lot_number
    db_session.rollback()
    assert (
        db_session.query(models.BiocharLot)
        .filter(models.BiocharLot.lot_number == lot_number)
        .first()
        is None
    )
    db_session.refresh(record)
    assert record.lot_number is None


def test_service_reports_assigned_experiments(db_session):
    taken = _make_biochar(db_session)
    free = _make_biochar(db_session)
    combine_into_lot(db_session, unique_number("LOT"), None, None, [taken.id])
    db_session.commit()

    with pytest.raises(ExperimentsAlreadyAssigned) as excinfo:
        combine_into_lot(db_session, unique_number("LOT"), None, None, [free.id, taken.id])
    assert isinstance(excinfo.value, Conflict)
    assert excinfo.value.experiment_numbers == [taken.experiment_number]

    # the session was rolled back and stays usable
    db_session.refresh(free)
    assert free.lot_number is None


def test_service_validates_before_touching_storage(db_session):
    with pytest.raises(InvalidRequest):
        combine_into_lot(db_session, "LOT-X", None, None, [])
    with pytest.raises(InvalidRequest):
        combine_into_lot(db_session, "  ", None, None, [uuid.uuid4()])


def test_commit_failure_becomes_storage_error(db_session, monkeypatch):
    record = _make_biochar(db_session)
    combine_into_lot(db_session, unique_number("LOT"), None, None, [record.id])
    rollbacks = []
    real_rollback = db_session.rollback

    def failing_commit():
        raise OperationalError("COMMIT", {}, Exception("disk I/O error"))

    def tracked_rollback():
        rollbacks.append(True)
        real_rollback()

    monkeypatch.setattr(db_session, "commit", failing_commit)
    monkeypatch.setattr(db_session, "rollback", tracked_rollback)
    with pytest.raises(StorageError) as excinfo:
        crud.commit_or_conflict(db_session, "lot number already exists")
    assert excinfo.value.kind == "StorageError"
    assert rollbacks == [True]
    db_session.refresh(record)
    assert record.lot_number is None
