# ABOUTME: Issue log endpoint tests
# ABOUTME: Validates logging, undo and clearing through the HTTP API


def test_log_entries(client, sample_class):
    response = client.post("/log", json={"entries": [
        {"student": "A", "issue": "X", "notes": "phone"},
        {"student": "C", "issue": "Y"},
    ]})

    assert response.status_code == 200
    assert response.json() == {"ok": True, "message": "Logged 2 entries."}
    assert client.get("/counts/P2").json()["total_logs"] == 1


def test_log_entries_with_timestamp(client, sample_class):
    response = client.post("/log", json={
        "entries": [{"student": "A", "issue": "X"}],
        "ts": "2024-02-01T08:15:00",
    })

    assert response.json()["ok"] is True


def test_log_entries_all_invalid(client, sample_class):
    response = client.post("/log", json={"entries": [{"student": "A"}]})

    assert response.status_code == 200
    assert response.json()["ok"] is False


def test_log_entries_requires_entries_field(client):
    response = client.post("/log", json={})

    assert response.status_code == 422


def test_undo_and_clear(client, sample_class):
    client.post("/log", json={"entries": [
        {"student": "A", "issue": "X", "notes": "first"},
        {"student": "A", "issue": "X", "notes": "second"},
        {"student": "B", "issue": "X"},
    ]})

    undo = client.post("/log/undo", json={"student": "A", "issue": "X", "period": "P1"})
    assert undo.json()["ok"] is True
    assert undo.json()["row"]["notes"] == "second"

    cleared = client.delete("/log")
    assert cleared.json() == {"ok": True, "message": "Cleared 2 log entries."}

    assert client.post("/log/undo", json={"student": "A", "issue": "X"}).json()["ok"] is False


def test_writes_before_setup_fail_softly(client):
    response = client.delete("/log")

    assert response.status_code == 200
    assert response.json()["ok"] is False
