# ABOUTME: Bathroom endpoint tests
# ABOUTME: Validates scan outcomes, error codes, status, analytics and the daily limit


def test_scan_out_and_in(client, sample_class, clock):
    response = client.post("/bathroom/scan/1")
    assert response.status_code == 200
    assert response.json() == {"message": "A checked out at 10:00."}

    status = client.get("/bathroom/status").json()
    assert [s["student_id"] for s in status["out"]] == ["1"]

    clock.advance(minutes=3)
    assert client.post("/bathroom/scan/1").json() == {"message": "A checked in after 3 min."}

    analytics = client.get("/bathroom/analytics").json()
    assert analytics["total_visits"] == 1
    assert analytics["total_minutes"] == 3


def test_scan_unknown_student(client, sample_class):
    response = client.post("/bathroom/scan/404")

    assert response.status_code == 404
    assert response.json() == {"code": "NOT_FOUND", "message": "No student with id 404 in the roster."}


def test_scan_before_setup(client):
    response = client.post("/bathroom/scan/1")

    assert response.status_code == 409
    assert response.json()["code"] == "NOT_ATTACHED"


def test_limit_reached_returns_429(client, sample_class, clock):
    assert client.put("/bathroom/limit", json={"limit": 1}).json()["ok"] is True
    client.post("/bathroom/scan/2")
    clock.advance(minutes=5)
    client.post("/bathroom/scan/2")

    response = client.post("/bathroom/scan/2")

    assert response.status_code == 429
    assert response.json()["code"] == "LIMIT_REACHED"


def test_status_period_filter(client, sample_class):
    client.post("/bathroom/scan/1")
    client.post("/bathroom/scan/3")

    status = client.get("/bathroom/status", params={"period": "P1"}).json()

    assert status["period"] == "P1"
    assert [s["student"] for s in status["out"]] == ["A"]


def test_invalid_limit(client, sample_class):
    response = client.put("/bathroom/limit", json={"limit": 0})

    assert response.status_code == 200
    assert response.json()["ok"] is False
