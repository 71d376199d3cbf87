from fastapi.testclient import TestClient
from grnd.main import app
import uuid

client = TestClient(app)
PWD = "StrongPassw0rd!"

def auth_headers():
    email = f"w_{uuid.uuid4().hex[:10]}@example.com"
    client.post("/auth/register", json={"email": email, "name": "Lifter", "password": PWD})
    tok = client.post("/auth/login", json={"email": email, "password": PWD}).json()["access_token"]
    return {"Authorization": f"Bearer {tok}"}

TREE = [{
    "id": "legs", "name": "Legs",
    "exercises": [{
        "id": "e1", "name": "Squat", "notes": "",
        "sets": [
            {"id": "s1", "weight": "100", "reps": "5", "completed": True, "type": "normal"},
            {"id": "s2", "weight": "120", "reps": "3", "completed": True, "type": "normal"},
            {"id": "s3", "weight": "140", "reps": "1", "completed": False, "type": "failure"},
        ],
    }],
}]

def test_create_default_name_and_get():
    h = auth_headers()
    r = client.post("/workouts", headers=h, json={"muscle_groups": TREE})
    assert r.status_code == 201
    w = r.json()
    assert w["name"].startswith("Workout ")
    assert w["completed"] is False
    assert w["muscle_groups"] == TREE

def test_update_complete_and_summary():
    h = auth_headers()
    wid = client.post("/workouts", headers=h, json={"name": "Leg Day"}).json()["id"]
    r = client.put(f"/workouts/{wid}/muscle-groups", headers=h, json={"muscle_groups": TREE})
    assert r.status_code == 200

    r = client.post(f"/workouts/{wid}/complete", headers=h, json={"total_volume": 860, "duration": 3900})
    assert r.status_code == 200 and r.json()["completed"] is True

    s = client.get(f"/workouts/{wid}/summary", headers=h).json()
    assert s["total_volume"] == 860
    assert s["total_reps"] == 8
    assert s["duration"] == "1h 5m"
    assert s["completed_sets"] == [{"exercise": "Squat", "completed_sets": 2}]
    assert s["best_sets"] == [{"exercise": "Squat", "weight": "120", "reps": "3", "one_rep_max": 127}]

def test_list_and_last_are_newest_first():
    h = auth_headers()
    assert client.get("/workouts/last", headers=h).status_code == 404
    ids = [client.post("/workouts", headers=h, json={"name": f"W{i}"}).json()["id"] for i in range(3)]
    r = client.get("/workouts?limit=2", headers=h)
    assert [w["id"] for w in r.json()] == [ids[2], ids[1]]
    assert client.get("/workouts/last", headers=h).json()["id"] == ids[2]

def test_other_users_workouts_are_hidden():
    owner, other = auth_headers(), auth_headers()
    wid = client.post("/workouts", headers=owner, json={"name": "Mine"}).json()["id"]
    assert client.get(f"/workouts/{wid}", headers=other).status_code == 404
    assert client.post(f"/workouts/{wid}/complete", headers=other, json={}).status_code == 404
    assert client.get("/workouts/999999", headers=owner).status_code == 404

def test_rejects_malformed_tree():
    h = auth_headers()
    bad = [{"id": "x", "name": "X", "exercises": [{"name": "A", "sets": [{"type": "heavy"}]}]}]
    assert client.post("/workouts", headers=h, json={"muscle_groups": bad}).status_code == 422
