#!/usr/bin/env python3
"""
Run several migrations in order against one connection.

Each step scans, prompts and commits on its own. Declining one step skips it
and moves on; a database error stops the whole run.

Usage:
  python run_all.py                         # subscriptions, clubs, comments, user_ids
  python run_all.py events sessions         # just these, in this order
  DRY_RUN=1 python run_all.py               # preview every step

Available: subscriptions, clubs, comments, events, sessions,
           session_mentions, cigar_mentions, user_ids
"""

import sys

from pymongo.errors import PyMongoError

import fill_cigar_mentions
import fix_club_refs
import fix_comment_refs
import fix_event_refs
import fix_session_refs
import fix_user_ids
import fix_user_subscriptions
import migrate_session_mentions
from migration_run import run_migration
from mongo_config import MONGO_DB, TARGET
from store import MongoStore

MIGRATIONS = {
    "subscriptions": fix_user_subscriptions.MIGRATION,
    "clubs": fix_club_refs.MIGRATION,
    "comments": fix_comment_refs.MIGRATION,
    "events": fix_event_refs.MIGRATION,
    "sessions": fix_session_refs.MIGRATION,
    "session_mentions": migrate_session_mentions.MIGRATION,
    "cigar_mentions": fill_cigar_mentions.MIGRATION,
    # must stay after every reference migration: it overwrites the legacy ids they resolve
    "user_ids": fix_user_ids.MIGRATION,
}

DEFAULT_ORDER = ["subscriptions", "clubs", "comments", "user_ids"]


def run_all(store, names, **kwargs):
    """Run the named migrations in order; returns {name: RunResult}."""
    results = {}
    for name in names:
        results[name] = run_migration(MIGRATIONS[name], store, **kwargs)
    return results


def main(argv=None):
    names = (sys.argv[1:] if argv is None else argv) or DEFAULT_ORDER
    unknown = [n for n in names if n not in MIGRATIONS]
    if unknown:
        print(f"Unknown migration(s): {', '.join(unknown)}")
        print(f"Available: {', '.join(MIGRATIONS)}")
        return 2

    print(f"Target: {TARGET} ({MONGO_DB})")
    store = None
    try:
        store = MongoStore.connect()
        results = run_all(store, names)
    except PyMongoError as e:
        print(f"Migration failed: {e}")
        return 1
    finally:
        if store is not None:
            store.close()

    print("\nSummary:")
    for name, result in results.items():
        print(f"  {name}: {result.state} ({result.updated} updated)")
    print("Done!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
