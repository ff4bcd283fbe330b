#!/usr/bin/env python3
"""
Mock data generation script for testing the dashboard.

Creates one goal per tracker flavour (a north star without tracker, a daily
check-in habit, a numeric weight goal and an unpinned numeric goal) and
fills the last 30 days with entries, some days holding more than one.

Usage:
    python create_mock_entries.py [email]
    python create_mock_entries.py test@example.com
"""

import sys
import argparse
from pathlib import Path
from datetime import date, timedelta
from sqlmodel import Session, create_engine, select

# Add parent directory to path so we can import backend modules
sys.path.insert(0, str(Path(__file__).parent.parent))

from config import Settings
from models import Goal, GoalEntry, GoalType, TrackerType, User, utcnow

MOCK_GOALS = [
    {
        "key": "vision",
        "title": "Live a healthy, focused life",
        "description": "The long game everything else feeds into.",
        "goal_type": GoalType.NORTH_STAR,
        "tracker_type": None,
        "sort_order": 1,
    },
    {
        "key": "reading",
        "title": "Read 20 pages",
        "goal_type": GoalType.HABIT,
        "tracker_type": TrackerType.CHECKIN,
        "sort_order": 2,
    },
    {
        "key": "weight",
        "title": "Reach 68 kg",
        "goal_type": GoalType.MID_TERM,
        "tracker_type": TrackerType.NUMERIC,
        "unit": "kg",
        "target_value": 68,
        "target_days_ahead": 90,
        "sort_order": 3,
    },
    {
        "key": "running",
        "title": "Weekly running distance",
        "goal_type": GoalType.MID_TERM,
        "tracker_type": TrackerType.NUMERIC,
        "unit": "km",
        "is_pinned": False,
        "sort_order": 4,
    },
]

# (goal key, days ago, is_done, value, reflection)
MOCK_ENTRIES = [
    ("vision", 28, True, None, "Wrote down what a good year looks like."),
    ("reading", 29, True, None, None),
    ("reading", 27, True, None, "Finished the first part of the book."),
    ("reading", 24, True, None, None),
    ("reading", 20, True, None, None),
    ("reading", 19, True, None, "Read on the train, easy win."),
    ("reading", 12, True, None, None),
    ("reading", 6, True, None, None),
    ("reading", 2, True, None, "Tired, but kept the streak."),
    ("reading", 1, True, None, None),
    ("weight", 30, None, 74.2, "Starting point."),
    ("weight", 26, None, 73.8, None),
    ("weight", 21, None, 73.9, "Weekend dinners."),
    ("weight", 21, None, 73.5, "Evening weigh-in."),
    ("weight", 15, None, 72.6, None),
    ("weight", 9, None, 71.9, None),
    ("weight", 4, None, 71.4, "Steady progress."),
    ("weight", 0, None, 71.0, None),
    ("running", 28, None, 12, None),
    ("running", 21, None, 15.5, None),
    ("running", 14, None, 18, "New route along the river."),
    ("running", 7, None, 14, None),
]


def create_mock_entries(user_email: str):
    """Create mock goals and entries for a user."""
    settings = Settings()
    engine = create_engine(settings.DATABASE_URL, connect_args={"check_same_thread": False})

    with Session(engine) as session:
        # Find the user
        user = session.exec(select(User).where(User.email == user_email)).first()

        if not user:
            print(f"❌ User with email '{user_email}' not found.")
            return False

        print(f"👤 Creating mock goals for: {user.name} ({user.email})")
        print(f"📝 Creating {len(MOCK_GOALS)} goals and {len(MOCK_ENTRIES)} entries (last 30 days)...")
        print()

        try:
            goals = {}
            for goal_data in MOCK_GOALS:
                goal_data = dict(goal_data)
                key = goal_data.pop("key")
                days_ahead = goal_data.pop("target_days_ahead", None)
                if days_ahead is not None:
                    goal_data["target_date"] = date.today() + timedelta(days=days_ahead)

                goal = Goal(user_id=user.id, **goal_data)
                session.add(goal)
                goals[key] = goal
                print(f"🎯 {goal.title} ({goal.goal_type.value}, tracker: {goal.tracker_type.value if goal.tracker_type else 'none'})")
            session.commit()
            print()

            for i, (key, days_ago, is_done, value, reflection) in enumerate(MOCK_ENTRIES):
                goal = goals[key]
                # Same-day entries keep their insertion order through created_at
                created_at = utcnow() - timedelta(days=days_ago) + timedelta(seconds=i)

                session.add(GoalEntry(
                    goal_id=goal.id,
                    entry_date=date.today() - timedelta(days=days_ago),
                    is_done=is_done,
                    value=value,
                    reflection=reflection,
                    created_at=created_at,
                ))

                day_label = "Today" if days_ago == 0 else f"{days_ago} days ago"
                detail = "done" if is_done else f"{value}"
                print(f"✅ Entry {i+1}/{len(MOCK_ENTRIES)} ({day_label}) - {goal.title}: {detail}")

            session.commit()
            print()
            print("✨ All mock goals and entries created successfully!")
            print(f"📊 Total entries created: {len(MOCK_ENTRIES)}")
            return True

        except Exception as e:
            print(f"❌ Failed to create mock entries: {e}")
            session.rollback()
            return False


def main():
    parser = argparse.ArgumentParser(
        description="Create mock goals and entries for dashboard testing",
        epilog="Example: python create_mock_entries.py test@example.com",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )

    parser.add_argument("email", help="Email of the user to create goals for")

    args = parser.parse_args()

    print("🚀 Creating Mock Goals")
    print("=" * 50)

    success = create_mock_entries(args.email)

    if not success:
        sys.exit(1)


if __name__ == "__main__":
    main()
