#!/usr/bin/env python3
"""
Fix sessions.creatorId: rewrite legacy user ids to the users _id.

A creatorId matching no user is NOT cleared here: the session would lose its
owner. It is reported as a WARNING and left as-is for manual follow-up.

Usage:
  python fix_session_refs.py
  DRY_RUN=1 python fix_session_refs.py
"""

from migration_run import Migration, Plan, run_script, scan_users_with
from reconcile import DROP, describe, reconcile_scalar


def compute(data):
    index, sessions = data
    updates = {}
    messages = []
    for session in sessions:
        creator = reconcile_scalar(session["_id"], "creatorId", session.get("creatorId"), index)
        if not creator.changed:
            continue
        diag = creator.diagnostics[0]
        if diag.verdict == DROP:
            messages.append(
                f"Session {diag.doc_id}: WARNING! creatorId {diag.old} not found. No changes applied"
            )
            continue
        messages.append(f"Session {describe(diag)}")
        updates[session["_id"]] = {"creatorId": creator.value}
    return Plan(updates, messages)


MIGRATION = Migration("sessions creatorId", "sessions", scan_users_with("sessions"), compute)


def main():
    return run_script(MIGRATION)


if __name__ == "__main__":
    main()
