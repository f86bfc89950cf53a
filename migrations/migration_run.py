"""
Driver shared by every migration script.

A migration is a name, the collection it writes, a scan step that reads
everything it needs from the store, and a pure compute step that turns the
scanned data into a Plan of per-document $set updates.

  scanning -> computing -> awaiting_confirmation -> committing -> done
                        -> done   (nothing to change: no prompt, no write)
  awaiting_confirmation -> aborted    (answer other than "y", or DRY_RUN=1)

Declining never exits the process; the caller gets RunResult(state="aborted")
and can carry on with the next migration. Store errors propagate unchanged.
"""

from collections import namedtuple

from mongo_config import MONGO_DB, TARGET, DRY_RUN
from store import MongoStore
from reconcile import build_lookup_index

DONE = "done"
ABORTED = "aborted"

Migration = namedtuple("Migration", ["name", "collection", "scan", "compute"])
Plan = namedtuple("Plan", ["updates", "messages"])
RunResult = namedtuple("RunResult", ["state", "updated"])


def ask_confirmation(question):
    """Read one line from the operator; returns it trimmed and lower-cased ("" on EOF)."""
    try:
        answer = input(question)
    except EOFError:
        return ""
    return answer.strip().lower()


def scan_users_with(collection):
    """Scan step for migrations that check `collection` against the users collection."""

    def scan(store):
        users = store.scan("users")
        print(f"Found {len(users)} user documents.")
        index = build_lookup_index(users)
        warn_duplicate_legacy_ids(index)
        docs = store.scan(collection)
        print(f"Found {len(docs)} {collection} documents.")
        return index, docs

    return scan


def warn_duplicate_legacy_ids(index):
    for legacy, keys in index.duplicate_legacy_ids.items():
        print(f"  WARNING: legacy id {legacy} is claimed by {keys}; using {keys[-1]}")


def commit_mode(store):
    if store.use_transactions:
        return "single transaction (needs a replica set; MONGO_TRANSACTIONS=0 for a standalone server)"
    return "plain bulk write (MONGO_TRANSACTIONS=0)"


def run_script(migration, connect=None):
    """Entry point for a single-migration script: connect, run, close."""
    print(f"Connecting to MongoDB: {MONGO_DB}...")
    store = (connect or MongoStore.connect)()
    try:
        result = run_migration(migration, store)
    finally:
        store.close()
    print("Done!")
    return result


def run_migration(migration, store, confirm=ask_confirmation, target=TARGET, dry_run=DRY_RUN):
    collection = migration.collection
    print(f"\n--- {migration.name} ---")

    data = migration.scan(store)

    plan = migration.compute(data)
    for line in plan.messages:
        print(f"  {line}")

    count = len(plan.updates)
    if count == 0:
        print(f"No {collection} documents required updating.")
        return RunResult(DONE, 0)

    print(f"\nYou are about to run the migration on: {target}")
    print(f"Commit mode: {commit_mode(store)}")
    print(f"About to update {count} {collection} document(s).")
    if dry_run:
        print("(No changes made, run without DRY_RUN=1 to apply)")
        return RunResult(ABORTED, 0)

    answer = confirm("Do you want to continue? (y/n): ")
    if answer != "y":
        print("Migration aborted.")
        return RunResult(ABORTED, 0)

    print(f"Committing batch update for {count} {collection} document(s)...")
    store.commit(collection, plan.updates)
    print("Batch update complete.")
    return RunResult(DONE, count)
