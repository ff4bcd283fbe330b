import os
import requests
from urllib.parse import quote
from typing import Optional, List
import streamlit as st

BACKEND_URL = os.getenv("BACKEND_URL", "http://backend:8000")

goal_type_emojis = {
    "north_star": "⭐",
    "mid_term": "🎯",
    "habit": "🔁"
}

def login_user(email: str, password: str) -> Optional[dict]:
    """Login user and return token response"""
    with st.spinner("Logging in..."):
        response = requests.post(f"{BACKEND_URL}/auth/login",
                                json={"email": email, "password": password})
        if response.status_code == 200:
            return response.json()
        elif response.status_code == 401:
            st.error("Incorrect email or password")
        else:
            st.error("Login failed")
        return None

def register_user(name: str, email: str, password: str) -> Optional[dict]:
    """Register new user and return user data"""
    with st.spinner("Creating account..."):
        response = requests.post(f"{BACKEND_URL}/auth/register",
                                json={"name": name, "email": email, "password": password})
        if response.status_code == 200:
            return response.json()
        elif response.status_code == 409:
            st.error("User with this email already exists")
        else:
            st.error("Registration failed")
        return None

def is_signed_in() -> bool:
    return "access_token" in st.session_state

def clear_session():
    for key in ['access_token', 'token_type', 'user_email']:
        if key in st.session_state:
            del st.session_state[key]

def api_request(method: str, endpoint: str, data: Optional[dict] = None, quiet_statuses: tuple = ()) -> Optional[dict]:
    """Make API request with proper authentication"""
    url = f"{BACKEND_URL}{endpoint}"
    headers = {"Authorization": f"Bearer {st.session_state.access_token}"}

    try:
        if method == "GET":
            response = requests.get(url, headers=headers, params=data)
        elif method == "PUT":
            response = requests.put(url, headers=headers, json=data)
        elif method == "POST":
            response = requests.post(url, headers=headers, json=data)
        elif method == "DELETE":
            response = requests.delete(url, headers=headers)
        else:
            return None

        if response.status_code in [200, 201]:
            return response.json()
        elif response.status_code == 401:
            st.error("Your session has expired, please log in again")
            clear_session()
            return None
        elif response.status_code not in quiet_statuses:
            detail = ""
            try:
                detail = response.json().get("detail", "")
            except ValueError:
                pass
            st.error(f"API Error: {response.status_code} {detail if isinstance(detail, str) else ''}".strip())
        return None
    except requests.exceptions.RequestException as e:
        st.error(f"Request failed: {e}")
        return None

####  User  ####

def get_user_info() -> Optional[dict]:
    """Fetch current user information from the backend"""
    return api_request("GET", "/users/me")

def update_user_info(name: str) -> bool:
    """Update user name"""
    if api_request("PUT", "/users/me", {"name": name}) is not None:
        st.success("Settings updated successfully!")
        return True
    return False

def delete_user_account() -> bool:
    """Delete user account"""
    return api_request("DELETE", "/users/me") is not None

####  Dashboard  ####

def get_dashboard() -> Optional[dict]:
    """Dashboard view model: pinned cards with visuals and compact other cards"""
    return api_request("GET", "/dashboard/")

####  Goals  ####

def get_goals(include_hidden: bool = False) -> Optional[List[dict]]:
    return api_request("GET", "/goals/", {"include_hidden": "true" if include_hidden else "false"})

def get_goal(goal_id: str) -> Optional[dict]:
    return api_request("GET", f"/goals/{goal_id}")

def save_goal(goal_data: dict, goal_id: Optional[str] = None) -> Optional[dict]:
    """Create a goal, or update it when an id is given"""
    if goal_id:
        return api_request("PUT", f"/goals/{goal_id}", goal_data)
    return api_request("POST", "/goals/", goal_data)

def delete_goal(goal_id: str) -> bool:
    return api_request("DELETE", f"/goals/{goal_id}") is not None

def get_goal_detail(goal_id: str) -> Optional[dict]:
    return api_request("GET", f"/goals/{goal_id}/detail")

####  Entries  ####

def add_checkin(goal_id: str, reflection: str = "") -> Optional[dict]:
    return api_request("POST", f"/goals/{goal_id}/entries/checkin", {"reflection": reflection or None})

def add_numeric_entry(goal_id: str, value: float, entry_date: str, reflection: str = "") -> Optional[dict]:
    return api_request("POST", f"/goals/{goal_id}/entries/numeric",
                       {"value": value, "entry_date": entry_date, "reflection": reflection or None})

def delete_entry(goal_id: str, entry_id: str) -> bool:
    return api_request("DELETE", f"/goals/{goal_id}/entries/{entry_id}") is not None

####  Memos  ####

def _memo_path(topic: str) -> str:
    # Topics may contain "/", "?" or "#"
    return f"/memos/{quote(topic, safe='')}"

def get_memos() -> List[dict]:
    result = api_request("GET", "/memos/")
    return result if result else []

def get_memo(topic: str) -> Optional[dict]:
    return api_request("GET", _memo_path(topic), quiet_statuses=(404,))

def save_memo(topic: str, content: str) -> Optional[dict]:
    return api_request("PUT", _memo_path(topic), {"content": content})

def delete_memo(topic: str) -> bool:
    return api_request("DELETE", _memo_path(topic)) is not None

def truncate_text(text: str, n: int):
    truncated_text = text[:n]
    if len(text) > n:
        truncated_text += '...'
    return truncated_text
