#!/usr/bin/env python3
"""
Fix user references on events.

  events.createdBy             embedded user object; createdBy.id rewritten,
                               or the whole createdBy set to null when unknown
  events.likedByUserIds.list   list + count
  events.members.list          list + count

Usage:
  python fix_event_refs.py
  DRY_RUN=1 python fix_event_refs.py
"""

from migration_run import Migration, Plan, run_script, scan_users_with
from reconcile import describe, reconcile_list_pair, reconcile_object

LIST_FIELDS = ["likedByUserIds", "members"]


def compute(data):
    index, events = data
    updates = {}
    messages = []
    for event in events:
        doc_id = event["_id"]
        fields = {}

        creator = reconcile_object(doc_id, "createdBy", event.get("createdBy"), index)
        if creator.changed:
            fields["createdBy"] = creator.value
        messages.extend(f"Event {describe(d)}" for d in creator.diagnostics)

        for parent in LIST_FIELDS:
            changed, diagnostics = reconcile_list_pair(doc_id, event, parent, index)
            fields.update(changed)
            messages.extend(f"Event {describe(d)}" for d in diagnostics)

        if fields:
            updates[doc_id] = fields
    return Plan(updates, messages)


MIGRATION = Migration("events createdBy/likes/members", "events", scan_users_with("events"), compute)


def main():
    return run_script(MIGRATION)


if __name__ == "__main__":
    main()
