import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, create_engine, SQLModel, select
from sqlalchemy.pool import StaticPool
from unittest.mock import patch
from datetime import date, datetime, timezone

from fastapi_app import app
from models import User, Goal, GoalEntry, Memo, GoalType, TrackerType, NumericEntryCreate, GoalInput, utcnow
from auth import get_password_hash, create_access_token

# Test database setup
test_engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

@pytest.fixture(scope="function")
def session():
    SQLModel.metadata.create_all(test_engine)
    with Session(test_engine) as session:
        yield session
    SQLModel.metadata.drop_all(test_engine)

@pytest.fixture(scope="function")
def client(session):
    # Point every router at the test database
    with patch('fastapi_app.database_engine', test_engine):
        with TestClient(app) as c:
            yield c

def make_user(session, user_id, email):
    user = User(
        id=user_id,
        name="Test User",
        email=email,
        password_hash=get_password_hash("testpassword"),
    )
    session.add(user)
    session.commit()
    session.refresh(user)
    return user

@pytest.fixture
def test_user(session):
    return make_user(session, "user_test_123", "test@example.com")

@pytest.fixture
def auth_headers(test_user):
    token = create_access_token(data={"sub": test_user.email})
    return {"Authorization": f"Bearer {token}"}

@pytest.fixture
def other_headers(session):
    other = make_user(session, "user_other_456", "other@example.com")
    token = create_access_token(data={"sub": other.email})
    return {"Authorization": f"Bearer {token}"}

def make_goal(session, user, goal_id, **kwargs):
    goal = Goal(id=goal_id, user_id=user.id, title=kwargs.pop("title", f"Goal {goal_id}"), **kwargs)
    session.add(goal)
    session.commit()
    session.refresh(goal)
    return goal

def make_entry(session, goal, entry_id, entry_date, created_at, **kwargs):
    entry = GoalEntry(id=entry_id, goal_id=goal.id, entry_date=entry_date,
                      created_at=created_at.replace(tzinfo=timezone.utc), **kwargs)
    session.add(entry)
    session.commit()
    return entry

@pytest.fixture
def checkin_goal(session, test_user):
    return make_goal(session, test_user, "goal_habit", goal_type=GoalType.HABIT,
                     tracker_type=TrackerType.CHECKIN, sort_order=1)

@pytest.fixture
def numeric_goal(session, test_user):
    return make_goal(session, test_user, "goal_weight", title="Reach 68kg",
                     tracker_type=TrackerType.NUMERIC, unit="kg", target_value=68, sort_order=2)

class TestHealthAndRoot:
    def test_health_check(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}

    def test_root_endpoint(self, client):
        response = client.get("/")
        assert response.status_code == 200
        data = response.json()
        assert "message" in data
        assert "Goal Cockpit" in data["message"]

class TestAuthentication:
    def test_register_user(self, client):
        user_data = {
            "name": "New User",
            "email": "newuser@example.com",
            "password": "newpassword123"
        }
        response = client.post("/auth/register", json=user_data)
        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "New User"
        assert data["email"] == "newuser@example.com"
        assert "password_hash" not in data

    def test_register_duplicate_email(self, client, test_user):
        user_data = {
            "name": "Duplicate User",
            "email": test_user.email,
            "password": "password123"
        }
        response = client.post("/auth/register", json=user_data)
        assert response.status_code == 409

    def test_login_success(self, client, test_user):
        response = client.post("/auth/login", json={"email": test_user.email, "password": "testpassword"})
        assert response.status_code == 200
        data = response.json()
        assert "access_token" in data
        assert data["token_type"] == "bearer"

    def test_login_invalid_credentials(self, client, test_user):
        response = client.post("/auth/login", json={"email": test_user.email, "password": "wrongpassword"})
        assert response.status_code == 401

    def test_get_current_user(self, client, test_user, auth_headers):
        response = client.get("/auth/me", headers=auth_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["id"] == test_user.id
        assert data["email"] == test_user.email

    def test_unauthorized_access(self, client):
        assert client.get("/auth/me").status_code == 401
        assert client.get("/dashboard/").status_code == 401
        assert client.get("/goals/").status_code == 401

    def test_invalid_token(self, client):
        response = client.get("/goals/", headers={"Authorization": "Bearer not-a-token"})
        assert response.status_code == 401

class TestGoals:
    def test_list_goals_empty(self, client, auth_headers):
        response = client.get("/goals/", headers=auth_headers)
        assert response.status_code == 200
        assert response.json() == []

    def test_create_goal_normalizes_tracker_fields(self, client, auth_headers, test_user):
        goal_data = {
            "title": "  Read every day  ",
            "description": "   ",
            "goal_type": "habit",
            "tracker_type": "checkin",
            "unit": "pages",
            "target_value": 20,
        }
        response = client.post("/goals/", json=goal_data, headers=auth_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["title"] == "Read every day"
        assert data["description"] is None
        assert data["tracker_type"] == "checkin"
        assert data["unit"] is None
        assert data["target_value"] is None
        assert data["is_pinned"] is True
        assert data["is_hidden"] is False
        assert data["sort_order"] == 100
        assert data["user_id"] == test_user.id

    def test_create_goal_unset_tracker(self, client, auth_headers):
        response = client.post("/goals/", json={"title": "Annual vision", "goal_type": "north_star",
                                                "tracker_type": "unset"}, headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["tracker_type"] is None

    def test_create_numeric_goal_keeps_unit_and_target(self, client, auth_headers):
        response = client.post("/goals/", json={"title": "Reach 65kg", "tracker_type": "numeric",
                                                "unit": " kg ", "target_value": 65,
                                                "target_date": "2024-12-31"}, headers=auth_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["unit"] == "kg"
        assert data["target_value"] == 65
        assert data["target_date"] == "2024-12-31"

    def test_create_goal_requires_title(self, client, auth_headers):
        response = client.post("/goals/", json={"title": "   "}, headers=auth_headers)
        assert response.status_code == 422

    def test_create_goal_rejects_non_numeric_target(self, client, auth_headers):
        response = client.post("/goals/", json={"title": "Weight", "tracker_type": "numeric",
                                                "target_value": "sixty"}, headers=auth_headers)
        assert response.status_code == 422

    def test_non_finite_target_rejected(self):
        with pytest.raises(ValueError):
            GoalInput(title="Weight", tracker_type="numeric", target_value=float("inf"))

    def test_list_goals_in_dashboard_order(self, client, session, test_user, auth_headers):
        make_goal(session, test_user, "g_other_first", is_pinned=False, sort_order=1)
        make_goal(session, test_user, "g_pinned_late", is_pinned=True, sort_order=50)
        make_goal(session, test_user, "g_pinned_early", is_pinned=True, sort_order=10)
        make_goal(session, test_user, "g_hidden", is_pinned=True, is_hidden=True, sort_order=0)

        response = client.get("/goals/", headers=auth_headers)
        assert response.status_code == 200
        assert [g["id"] for g in response.json()] == ["g_pinned_early", "g_pinned_late", "g_other_first"]

    def test_list_goals_including_hidden(self, client, session, test_user, auth_headers):
        make_goal(session, test_user, "g_visible", sort_order=10)
        make_goal(session, test_user, "g_hidden", is_hidden=True, sort_order=0)

        response = client.get("/goals/?include_hidden=true", headers=auth_headers)
        assert response.status_code == 200
        assert [g["id"] for g in response.json()] == ["g_hidden", "g_visible"]

        # A hidden goal can be brought back
        response = client.put("/goals/g_hidden", json={"title": "Back again", "is_hidden": False},
                              headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["is_hidden"] is False
        assert [g["id"] for g in client.get("/goals/", headers=auth_headers).json()] == ["g_hidden", "g_visible"]

    def test_new_goal_timestamps_are_utc(self, client, auth_headers):
        before = utcnow()
        response = client.post("/goals/", json={"title": "Timestamps"}, headers=auth_headers)
        assert response.status_code == 200
        goal = Goal(user_id="user_x", title="Fresh")
        assert goal.created_at.tzinfo is not None
        assert goal.created_at >= before
        assert response.json()["created_at"].startswith(str(before.year))

    def test_get_goal(self, client, numeric_goal, auth_headers):
        response = client.get(f"/goals/{numeric_goal.id}", headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["title"] == "Reach 68kg"

    def test_get_goal_not_found(self, client, auth_headers):
        response = client.get("/goals/nonexistent", headers=auth_headers)
        assert response.status_code == 404

    def test_get_goal_of_other_user(self, client, numeric_goal, other_headers):
        response = client.get(f"/goals/{numeric_goal.id}", headers=other_headers)
        assert response.status_code == 403

    def test_update_goal_keeps_hidden_flag(self, client, session, test_user, auth_headers):
        goal = make_goal(session, test_user, "g_hidden_edit", is_hidden=True)
        response = client.put(f"/goals/{goal.id}", json={"title": "Renamed", "tracker_type": "numeric",
                                                         "unit": "km", "is_pinned": False},
                              headers=auth_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["title"] == "Renamed"
        assert data["unit"] == "km"
        assert data["is_pinned"] is False
        assert data["is_hidden"] is True

    def test_switching_tracker_clears_numeric_fields(self, client, numeric_goal, auth_headers):
        response = client.put(f"/goals/{numeric_goal.id}", json={"title": "Reach 68kg", "tracker_type": "checkin",
                                                                 "unit": "kg", "target_value": 68},
                              headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["unit"] is None
        assert response.json()["target_value"] is None

    def test_delete_goal_removes_entries(self, client, session, numeric_goal, auth_headers):
        goal_id = numeric_goal.id
        make_entry(session, numeric_goal, "entry_a", date(2024, 6, 1), datetime(2024, 6, 1, 8), value=70.0)

        response = client.delete(f"/goals/{goal_id}", headers=auth_headers)
        assert response.status_code == 200
        assert "deleted successfully" in response.json()["message"]

        session.expunge_all()
        assert session.get(Goal, goal_id) is None
        assert session.exec(select(GoalEntry).where(GoalEntry.goal_id == goal_id)).all() == []
        assert client.get(f"/goals/{goal_id}", headers=auth_headers).status_code == 404

class TestEntries:
    def test_checkin_today(self, client, checkin_goal, auth_headers):
        response = client.post(f"/goals/{checkin_goal.id}/entries/checkin",
                               json={"reflection": " Felt good "}, headers=auth_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["is_done"] is True
        assert data["value"] is None
        assert data["entry_date"] == date.today().isoformat()
        assert data["reflection"] == "Felt good"

    def test_checkin_without_body(self, client, checkin_goal, auth_headers):
        response = client.post(f"/goals/{checkin_goal.id}/entries/checkin", headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["reflection"] is None

    def test_checkin_on_numeric_goal(self, client, numeric_goal, auth_headers):
        response = client.post(f"/goals/{numeric_goal.id}/entries/checkin", headers=auth_headers)
        assert response.status_code == 400

    def test_numeric_entry(self, client, numeric_goal, auth_headers):
        response = client.post(f"/goals/{numeric_goal.id}/entries/numeric",
                               json={"value": 70.5, "entry_date": "2024-06-01"}, headers=auth_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["value"] == 70.5
        assert data["is_done"] is None
        assert data["entry_date"] == "2024-06-01"

    def test_numeric_entry_defaults_to_today(self, client, numeric_goal, auth_headers):
        response = client.post(f"/goals/{numeric_goal.id}/entries/numeric",
                               json={"value": 69}, headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["entry_date"] == date.today().isoformat()

    def test_numeric_entry_validation(self, client, numeric_goal, checkin_goal, auth_headers):
        assert client.post(f"/goals/{numeric_goal.id}/entries/numeric",
                           json={}, headers=auth_headers).status_code == 422
        assert client.post(f"/goals/{numeric_goal.id}/entries/numeric",
                           json={"value": "heavy"}, headers=auth_headers).status_code == 422
        assert client.post(f"/goals/{checkin_goal.id}/entries/numeric",
                           json={"value": 1}, headers=auth_headers).status_code == 400

    def test_non_finite_value_rejected(self):
        with pytest.raises(ValueError):
            NumericEntryCreate(value=float("nan"))

    def test_list_entries_most_recent_first(self, client, session, numeric_goal, auth_headers):
        make_entry(session, numeric_goal, "e70", date(2024, 6, 1), datetime(2024, 6, 1, 8), value=70.0)
        make_entry(session, numeric_goal, "e71", date(2024, 6, 1), datetime(2024, 6, 1, 9), value=71.0)
        make_entry(session, numeric_goal, "e72", date(2024, 6, 2), datetime(2024, 6, 1, 7), value=72.0)

        response = client.get(f"/goals/{numeric_goal.id}/entries", headers=auth_headers)
        assert response.status_code == 200
        entries = response.json()
        assert [e["id"] for e in entries] == ["e72", "e71", "e70"]
        assert all(e["kind"] == "numeric" for e in entries)

    def test_delete_entry(self, client, session, numeric_goal, auth_headers):
        make_entry(session, numeric_goal, "e70", date(2024, 6, 1), datetime(2024, 6, 1, 8), value=70.0)

        response = client.delete(f"/goals/{numeric_goal.id}/entries/e70", headers=auth_headers)
        assert response.status_code == 200
        assert "deleted successfully" in response.json()["message"]

        response = client.delete(f"/goals/{numeric_goal.id}/entries/e70", headers=auth_headers)
        assert response.status_code == 404

    def test_delete_entry_through_wrong_goal(self, client, session, numeric_goal, checkin_goal, auth_headers):
        make_entry(session, numeric_goal, "e70", date(2024, 6, 1), datetime(2024, 6, 1, 8), value=70.0)
        response = client.delete(f"/goals/{checkin_goal.id}/entries/e70", headers=auth_headers)
        assert response.status_code == 404

    def test_entries_of_other_user(self, client, numeric_goal, other_headers):
        response = client.get(f"/goals/{numeric_goal.id}/entries", headers=other_headers)
        assert response.status_code == 403

class TestDashboard:
    def test_empty_dashboard(self, client, auth_headers):
        response = client.get("/dashboard/", headers=auth_headers)
        assert response.status_code == 200
        assert response.json() == {"pinned": [], "other": []}

    def test_dashboard_view_model(self, client, session, test_user, checkin_goal, numeric_goal, auth_headers):
        quiet = make_goal(session, test_user, "goal_quiet", tracker_type=TrackerType.NUMERIC,
                          is_pinned=False, sort_order=0)
        for i, value in enumerate([80.0, 75.0, 70.0]):
            make_entry(session, numeric_goal, f"w{i}", date(2024, 6, 1 + i), datetime(2024, 6, 1 + i, 8), value=value)
        make_entry(session, checkin_goal, "c1", date(2024, 6, 1), datetime(2024, 6, 1, 8), is_done=True)
        make_entry(session, checkin_goal, "c2", date(2024, 6, 15), datetime(2024, 6, 15, 8), is_done=True)
        make_entry(session, quiet, "q1", date(2024, 6, 3), datetime(2024, 6, 3, 8), value=3.0)

        response = client.get("/dashboard/?today=2024-06-15", headers=auth_headers)
        assert response.status_code == 200
        data = response.json()

        assert [c["id"] for c in data["pinned"]] == ["goal_habit", "goal_weight"]
        assert [c["id"] for c in data["other"]] == ["goal_quiet"]

        habit, weight = data["pinned"]
        assert habit["goal_type_label"] == "Daily Habit"
        assert habit["latest_summary"] == "Last check-in: Done (15/06/2024)"
        assert habit["trend"] is None
        statuses = {c["day"]: c["status"] for c in habit["calendar"]["cells"] if c["day"]}
        assert statuses[1] == "done"
        assert statuses[15] == "done"
        assert statuses[14] == "plain"
        assert habit["calendar"]["month_label"] == "Jun 2024"

        assert weight["latest_summary"] == "Last entry: 70 kg (03/06/2024)"
        assert weight["calendar"] is None
        trend = weight["trend"]
        assert trend["scale_min"] == 68
        assert trend["scale_max"] == 80
        assert trend["target_y"] == 108
        assert trend["min_value"] == 70
        assert [p["entry_id"] for p in trend["points"]] == ["w0", "w1", "w2"]

        other = data["other"][0]
        assert other["trend"] is None
        assert other["calendar"] is None
        assert other["latest_summary"] == "Last entry: 3 (03/06/2024)"

    def test_dashboard_only_shows_own_goals(self, client, numeric_goal, other_headers):
        response = client.get("/dashboard/", headers=other_headers)
        assert response.status_code == 200
        assert response.json() == {"pinned": [], "other": []}

    def test_goal_detail(self, client, session, numeric_goal, auth_headers):
        make_entry(session, numeric_goal, "e70", date(2024, 6, 1), datetime(2024, 6, 1, 8), value=70.0)
        make_entry(session, numeric_goal, "e71", date(2024, 6, 1), datetime(2024, 6, 1, 9), value=71.0)

        response = client.get(f"/goals/{numeric_goal.id}/detail", headers=auth_headers)
        assert response.status_code == 200
        data = response.json()
        assert [e["id"] for e in data["history"]] == ["e71", "e70"]
        assert data["entry_count_label"] == "2 entries"
        assert data["trend"]["target_y"] is None
        assert [p["entry_id"] for p in data["trend"]["points"]] == ["e70", "e71"]

class TestMemos:
    def test_memo_lifecycle(self, client, auth_headers):
        response = client.put("/memos/reading", json={"content": "Finish chapter 3"}, headers=auth_headers)
        assert response.status_code == 200
        memo_id = response.json()["id"]

        response = client.put("/memos/reading", json={"content": "Finish chapter 4"}, headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["id"] == memo_id
        assert response.json()["content"] == "Finish chapter 4"

        response = client.get("/memos/reading", headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["content"] == "Finish chapter 4"

        response = client.get("/memos/", headers=auth_headers)
        assert [m["topic"] for m in response.json()] == ["reading"]

        assert client.delete("/memos/reading", headers=auth_headers).status_code == 200
        assert client.get("/memos/reading", headers=auth_headers).status_code == 404

    def test_memos_are_private(self, client, auth_headers, other_headers):
        client.put("/memos/ideas", json={"content": "secret"}, headers=auth_headers)
        assert client.get("/memos/ideas", headers=other_headers).status_code == 404
        assert client.get("/memos/", headers=other_headers).json() == []

    def test_delete_missing_memo(self, client, auth_headers):
        assert client.delete("/memos/nothing", headers=auth_headers).status_code == 404

    def test_topic_with_slash(self, client, auth_headers):
        response = client.put("/memos/work%2Fplans", json={"content": "Q3 roadmap"}, headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["topic"] == "work/plans"

        response = client.get("/memos/work%2Fplans", headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["content"] == "Q3 roadmap"
        assert [m["topic"] for m in client.get("/memos/", headers=auth_headers).json()] == ["work/plans"]

        assert client.delete("/memos/work%2Fplans", headers=auth_headers).status_code == 200
        assert client.get("/memos/", headers=auth_headers).json() == []

    def test_topic_with_question_mark_and_hash(self, client, auth_headers):
        response = client.put("/memos/why%3F", json={"content": "Because"}, headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["topic"] == "why?"

        response = client.put("/memos/%23ideas", json={"content": "Tagged"}, headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["topic"] == "#ideas"

        topics = sorted(m["topic"] for m in client.get("/memos/", headers=auth_headers).json())
        assert topics == ["#ideas", "why?"]
        assert client.get("/memos/why", headers=auth_headers).status_code == 404

class TestUsers:
    def test_update_name(self, client, auth_headers):
        response = client.put("/users/me", json={"name": "Renamed"}, headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["name"] == "Renamed"

    def test_delete_user(self, client, session, test_user, numeric_goal, auth_headers):
        make_entry(session, numeric_goal, "e70", date(2024, 6, 1), datetime(2024, 6, 1, 8), value=70.0)
        session.add(Memo(user_id=test_user.id, topic="notes", content="x"))
        session.commit()

        response = client.delete("/users/me", headers=auth_headers)
        assert response.status_code == 200
        assert "deleted successfully" in response.json()["message"]

        session.expire_all()
        assert session.exec(select(Goal)).all() == []
        assert session.exec(select(GoalEntry)).all() == []
        assert session.exec(select(Memo)).all() == []

class TestErrorHandling:
    def test_invalid_json(self, client):
        response = client.post("/auth/register", content="invalid json",
                               headers={"Content-Type": "application/json"})
        assert response.status_code == 422

    def test_missing_required_fields(self, client):
        response = client.post("/auth/register", json={"name": "Test"})
        assert response.status_code == 422
