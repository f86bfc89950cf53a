#!/usr/bin/env python3
"""
Fix user references on comments.

  comments.userId      legacy id -> users _id, unknown -> null
  comments.likedUsers  legacy ids rewritten, unknown ids removed (no count field)

Usage:
  python fix_comment_refs.py
  DRY_RUN=1 python fix_comment_refs.py
"""

from migration_run import Migration, Plan, run_script, scan_users_with
from reconcile import describe, reconcile_list, reconcile_scalar


def compute(data):
    index, comments = data
    updates = {}
    messages = []
    for comment in comments:
        doc_id = comment["_id"]
        fields = {}

        author = reconcile_scalar(doc_id, "userId", comment.get("userId"), index)
        if author.changed:
            fields["userId"] = author.value

        liked = reconcile_list(doc_id, "likedUsers", comment.get("likedUsers"), index)
        if liked.changed:
            fields["likedUsers"] = liked.values

        messages.extend(f"Comment {describe(d)}" for d in author.diagnostics + liked.diagnostics)
        if fields:
            updates[doc_id] = fields
    return Plan(updates, messages)


MIGRATION = Migration("comments userId/likedUsers", "comments", scan_users_with("comments"), compute)


def main():
    return run_script(MIGRATION)


if __name__ == "__main__":
    main()
