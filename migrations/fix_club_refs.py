#!/usr/bin/env python3
"""
Fix user references in clubs.admins.list and clubs.members.list.

Each entry must be a users document key (_id). Entries holding a user's legacy
`id` field are rewritten to that user's _id; entries matching no user are
removed. The paired admins.count / members.count are rewritten with the list.

Usage:
  python fix_club_refs.py
  DRY_RUN=1 python fix_club_refs.py
"""

from migration_run import Migration, Plan, run_script, scan_users_with
from reconcile import describe, reconcile_list_pair

LIST_FIELDS = ["admins", "members"]


def compute(data):
    index, clubs = data
    updates = {}
    messages = []
    for club in clubs:
        fields = {}
        for parent in LIST_FIELDS:
            changed, diagnostics = reconcile_list_pair(club["_id"], club, parent, index)
            fields.update(changed)
            messages.extend(f"Club {describe(d)}" for d in diagnostics)
        if fields:
            updates[club["_id"]] = fields
    return Plan(updates, messages)


MIGRATION = Migration("clubs admins/members", "clubs", scan_users_with("clubs"), compute)


def main():
    return run_script(MIGRATION)


if __name__ == "__main__":
    main()
