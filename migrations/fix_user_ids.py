#!/usr/bin/env python3
"""
Set users.id to the document's _id wherever the two differ.

Run this LAST: the reference migrations use the old `id` values to find the
right user, and they're gone once this has been applied.

Usage:
  python fix_user_ids.py
  DRY_RUN=1 python fix_user_ids.py
"""

from migration_run import Migration, Plan, run_script


def scan(store):
    users = store.scan("users")
    print(f"Found {len(users)} user documents.")
    return users


def compute(users):
    updates = {}
    messages = []
    for user in users:
        if user.get("id") != user["_id"]:
            messages.append(f"{user['_id']}: field id ({user.get('id')}) does not match document id")
            updates[user["_id"]] = {"id": user["_id"]}
    return Plan(updates, messages)


MIGRATION = Migration("users id", "users", scan, compute)


def main():
    return run_script(MIGRATION)


if __name__ == "__main__":
    main()
