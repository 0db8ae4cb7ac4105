def _create(client, payload):
    r = client.post("/api/metrics", json=payload)
    assert r.status_code == 201, r.text
    return r.json()


def test_health_endpoint_sets_trace_id(client):
    r = client.get("/api/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}
    assert r.headers.get("x-trace-id")


def test_incoming_trace_id_is_echoed(client):
    r = client.get("/api/health", headers={"x-trace-id": "trace-123"})
    assert r.headers["x-trace-id"] == "trace-123"


def test_create_and_list_manual_metric(client):
    created = _create(client, {"type": "bloodPressure", "date": "2024-03-14", "systolic": 125, "diastolic": 82})
    assert created["kind"] == "blood_pressure"
    assert created["source"] == "manual"
    assert created["id"]

    r = client.get("/api/metrics")
    assert r.status_code == 200
    items = r.json()
    assert len(items) == 1
    assert items[0]["record"]["id"] == created["id"]
    assert items[0]["status"] == "Abnormal"
    assert items[0]["display_name"] == "Blood Pressure"
    assert items[0]["display_value"] == "125/82"


def test_invalid_manual_metric_returns_error_map(client):
    r = client.post("/api/metrics", json={"type": "hba1c", "date": "2024-03-14", "value": "25"})
    assert r.status_code == 422
    assert r.json() == {"is_valid": False, "errors": {"value": "Valid HbA1c (3-20 %) is required"}}
    assert client.get("/api/metrics").json() == []


def test_non_string_type_and_value_get_field_errors(client):
    r = client.post("/api/metrics", json={"type": 123, "date": "2024-03-01", "value": "90"})
    assert r.status_code == 422
    assert r.json() == {"is_valid": False, "errors": {"type": "Invalid metric type"}}

    r = client.post("/api/metrics", json={"type": "weight", "date": ["2024-03-01"], "value": [70]})
    assert r.status_code == 422
    body = r.json()
    assert body["is_valid"] is False
    assert set(body["errors"]) == {"date", "value"}


def test_validate_endpoint(client):
    r = client.post("/api/metrics/validate", json={"type": "weight", "date": "2024-03-14", "value": "72"})
    assert r.status_code == 200
    assert r.json() == {"is_valid": True, "errors": {}}


def test_update_keeps_id_and_created_at(client):
    created = _create(client, {"type": "weight", "date": "2024-03-01", "value": 80})
    r = client.put(f"/api/metrics/{created['id']}", json={"type": "weight", "date": "2024-03-02", "value": 78.5})
    assert r.status_code == 200, r.text
    updated = r.json()
    assert updated["id"] == created["id"]
    assert updated["created_at"][:19] == created["created_at"][:19]
    assert updated["value"] == 78.5
    assert updated["date"] == "2024-03-02"


def test_update_can_change_variant(client):
    created = _create(client, {"type": "glucose", "date": "2024-03-01", "value": 95})
    r = client.put(
        f"/api/metrics/{created['id']}",
        json={"type": "bloodPressure", "date": "2024-03-01", "systolic": 118, "diastolic": 76},
    )
    assert r.status_code == 200, r.text
    assert r.json()["kind"] == "blood_pressure"
    listed = client.get("/api/metrics").json()
    assert listed[0]["record"]["systolic"] == 118
    assert "value" not in listed[0]["record"]


def test_update_missing_metric_uses_error_envelope(client):
    r = client.put("/api/metrics/nope", json={"type": "weight", "date": "2024-03-02", "value": 70})
    assert r.status_code == 404
    body = r.json()
    assert body["code"] == "NOT_FOUND"
    assert body["message"] == "Metric not found"
    assert body["trace_id"]


def test_delete_metric(client):
    created = _create(client, {"type": "weight", "date": "2024-03-01", "value": 80})
    assert client.delete(f"/api/metrics/{created['id']}").status_code == 204
    assert client.get("/api/metrics").json() == []
    assert client.delete(f"/api/metrics/{created['id']}").status_code == 404


def test_list_filters_by_type_and_period(client):
    _create(client, {"type": "weight", "date": "2024-03-14", "value": 80})
    _create(client, {"type": "weight", "date": "2024-01-02", "value": 82})
    _create(client, {"type": "glucose", "date": "2024-03-10", "value": 92})

    weights = client.get("/api/metrics", params={"type": "weight"}).json()
    assert [m["record"]["value"] for m in weights] == [80, 82]

    latest = client.get("/api/metrics", params={"period": "latest"}).json()
    assert sorted(m["record"]["type"] for m in latest) == ["glucose", "weight"]

    week = client.get("/api/metrics", params={"period": "week"}).json()
    assert [m["record"]["date"] for m in week] == ["2024-03-14", "2024-03-10"]

    assert len(client.get("/api/metrics", params={"period": "month"}).json()) == 2
    assert len(client.get("/api/metrics", params={"period": "all"}).json()) == 3


def test_list_rejects_bad_filters(client):
    assert client.get("/api/metrics", params={"type": "sugarLevel"}).status_code == 400
    assert client.get("/api/metrics", params={"period": "year"}).status_code == 400
