#!/usr/bin/env python3
"""
Convert legacy cigar mentions on sessions to the cigarMention model.

  {type: "cigar", referenceId, name, description}
    -> {cigarMention: {referenceId, name, description}}

Non-cigar mentions are left alone. Run before fill_cigar_mentions.py.

Usage:
  python migrate_session_mentions.py
  DRY_RUN=1 python migrate_session_mentions.py
"""

from migration_run import Migration, Plan, run_script


def scan(store):
    sessions = store.scan("sessions")
    print(f"Found {len(sessions)} session documents.")
    return sessions


def is_legacy_cigar(mention):
    return isinstance(mention, dict) and mention.get("type") == "cigar"


def to_cigar_mention(mention):
    return {
        "cigarMention": {
            "referenceId": mention.get("referenceId"),
            "name": mention.get("name"),
            "description": mention.get("description"),
        }
    }


def compute(sessions):
    updates = {}
    messages = []
    for session in sessions:
        mentions = session.get("mentions")
        if not isinstance(mentions, list) or not any(is_legacy_cigar(m) for m in mentions):
            continue
        new_mentions = []
        for mention in mentions:
            if is_legacy_cigar(mention):
                messages.append(
                    f"Session {session['_id']}: migrated cigar mention {mention.get('referenceId')} to cigarMention"
                )
                new_mentions.append(to_cigar_mention(mention))
            else:
                new_mentions.append(mention)
        updates[session["_id"]] = {"mentions": new_mentions}
    return Plan(updates, messages)


MIGRATION = Migration("sessions mentions model", "sessions", scan, compute)


def main():
    return run_script(MIGRATION)


if __name__ == "__main__":
    main()
