#!/usr/bin/env python3
"""
Fix users.subscribers.list / users.subscriptions.list (and their counts).

Both lists point back into the users collection itself, so the lookup index
and the documents being fixed come from the same scan.

Usage:
  python fix_user_subscriptions.py
  DRY_RUN=1 python fix_user_subscriptions.py
"""

from migration_run import Migration, Plan, run_script, warn_duplicate_legacy_ids
from reconcile import build_lookup_index, describe, reconcile_list_pair

LIST_FIELDS = ["subscribers", "subscriptions"]


def scan(store):
    users = store.scan("users")
    print(f"Found {len(users)} user documents.")
    index = build_lookup_index(users)
    warn_duplicate_legacy_ids(index)
    return index, users


def compute(data):
    index, users = data
    updates = {}
    messages = []
    for user in users:
        fields = {}
        for parent in LIST_FIELDS:
            changed, diagnostics = reconcile_list_pair(user["_id"], user, parent, index)
            fields.update(changed)
            messages.extend(f"User {describe(d)}" for d in diagnostics)
        if fields:
            updates[user["_id"]] = fields
    return Plan(updates, messages)


MIGRATION = Migration("users subscribers/subscriptions", "users", scan, compute)


def main():
    return run_script(MIGRATION)


if __name__ == "__main__":
    main()
