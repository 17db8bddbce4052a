# voting/demo.py

# Fixed demo sequence: fresh tables, two users, three candidates, one valid
# vote and one vote for a candidate that does not exist.

import sys

from voting import create_app, db
from voting.errors import StorageUnavailable, SchemaCreationFailed
from voting.store import build_store

DEMO_USERS = [("user1", "hash123"), ("user2", "hash456")]
DEMO_CANDIDATES = ["Candidate A", "Candidate B", "Candidate C"]
DEMO_VOTES = [(1, 1), (2, 999)]


def run_demo(store):
    """Run the sequence against an open store whose tables exist."""
    store.clear_all()

    for username, password_hash in DEMO_USERS:
        store.register_user(username, password_hash)

    for name in DEMO_CANDIDATES:
        store.add_candidate(name)

    for candidate_id, name in store.list_candidates():
        print(f"Candidate: ID={candidate_id}, Name={name}")

    results = []
    for user_id, candidate_id in DEMO_VOTES:
        status = store.cast_vote(user_id, candidate_id)
        if status.ok:
            print("Vote is registered!")
        else:
            print("Error of registering the vote!")
        results.append(status)
    return results


def main(test_config=None):
    app = create_app(test_config)
    with app.app_context():
        store = build_store(app, db)
        try:
            store.check_connection()
        except StorageUnavailable as e:
            print(f"Error opening the voting database: {e}", file=sys.stderr)
            return 1
        try:
            store.create_tables()
        except SchemaCreationFailed as e:
            print(f"Error creating tables: {e}", file=sys.stderr)
            return 1
        try:
            run_demo(store)
        finally:
            store.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
