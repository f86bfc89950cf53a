#!/usr/bin/env python3
"""
Backfill denormalized cigar fields on sessions.mentions[].cigarMention.

Only mentions whose `brand` is empty/missing are touched. Their cigars are
looked up by referenceId in the cigars collection ("_id $in" queries of at most
LOOKUP_BATCH_SIZE ids) and copied in:

  brand, strength, imageUrl      from the cigar, else "" / 0 / ""
  country                        from cigar.countryKeys.location, else ""
  cigarRating, flavorProfile     always reset to zeroed defaults
  smokedAt                       the session's createdAt

referenceId, name and description are kept. When a session has at least one
changed mention its whole mentions list is written back; the other mentions
go through untouched.

Run migrate_session_mentions.py first: legacy {type: "cigar"} mentions are
invisible to this script.

Usage:
  python fill_cigar_mentions.py
  DRY_RUN=1 python fill_cigar_mentions.py
  LOOKUP_BATCH_SIZE=10 python fill_cigar_mentions.py
"""

import copy

from mongo_config import LOOKUP_BATCH_SIZE
from migration_run import Migration, Plan, run_script
from reconcile import get_path

DEFAULT_CIGAR = {
    "brand": "",
    "country": "",
    "strength": 0,
    "cigarRating": {
        "appearance": 0,
        "aroma": 0,
        "flavor": 0,
        "burn": 0,
        "totalRatings": 0,
    },
    "flavorProfile": {
        "coffee": 0,
        "chocolate": 0,
        "cream": 0,
        "nuts": 0,
        "fruit": 0,
        "wood": 0,
        "spice": 0,
        "herb": 0,
        "earth": 0,
        "leather": 0,
    },
    "imageUrl": "",
}


def needs_fill(mention):
    cigar_mention = mention.get("cigarMention") if isinstance(mention, dict) else None
    return isinstance(cigar_mention, dict) and not cigar_mention.get("brand")


def iter_mentions(session):
    mentions = session.get("mentions")
    if isinstance(mentions, list):
        yield from mentions


def chunks(items, size):
    for i in range(0, len(items), size):
        yield items[i:i + size]


def missing_reference_ids(sessions):
    """Distinct referenceIds of mentions needing a fill, in first-seen order."""
    ids = {}
    for session in sessions:
        for mention in iter_mentions(session):
            if needs_fill(mention):
                ref_id = mention["cigarMention"].get("referenceId")
                if ref_id:
                    ids[ref_id] = True
    return list(ids)


def scan(store, batch_size=LOOKUP_BATCH_SIZE):
    sessions = store.scan("sessions")
    print(f"Found {len(sessions)} session documents.")

    ref_ids = missing_reference_ids(sessions)
    if not ref_ids:
        return sessions, {}
    print(f"Collected {len(ref_ids)} unique cigar referenceIds requiring updates.")

    cigars = {}
    for batch in chunks(ref_ids, batch_size):
        found = store.find_by_ids("cigars", batch)
        print(f"  Found {len(found)}/{len(batch)} cigar documents in batch")
        for cigar in found:
            cigars[cigar["_id"]] = cigar
    return sessions, cigars


def fill_mention(cigar_mention, cigar, smoked_at):
    """Rebuild one cigarMention from its cigar record (None -> defaults)."""
    cigar = cigar or {}
    return {
        "referenceId": cigar_mention.get("referenceId"),
        "name": cigar_mention.get("name"),
        "description": cigar_mention.get("description"),
        "brand": cigar.get("brand") or DEFAULT_CIGAR["brand"],
        "country": get_path(cigar, "countryKeys.location") or DEFAULT_CIGAR["country"],
        "strength": cigar.get("strength") or DEFAULT_CIGAR["strength"],
        "cigarRating": copy.deepcopy(DEFAULT_CIGAR["cigarRating"]),
        "flavorProfile": copy.deepcopy(DEFAULT_CIGAR["flavorProfile"]),
        "smokedAt": smoked_at,
        "imageUrl": cigar.get("imageUrl") or DEFAULT_CIGAR["imageUrl"],
    }


def compute(data):
    sessions, cigars = data
    updates = {}
    messages = []
    for session in sessions:
        new_mentions = []
        updated = False
        for mention in iter_mentions(session):
            if not needs_fill(mention):
                new_mentions.append(mention)
                continue
            old = mention["cigarMention"]
            ref_id = old.get("referenceId")
            filled = fill_mention(old, cigars.get(ref_id), session.get("createdAt"))
            if filled == old:
                new_mentions.append(mention)
                continue
            updated = True
            if ref_id not in cigars:
                messages.append(f"Session {session['_id']}: cigar {ref_id} not found, filled with defaults")
            else:
                messages.append(f"Session {session['_id']}: updated cigar mention for cigar referenceId {ref_id}")
            new_mentions.append({**mention, "cigarMention": filled})

        if updated:
            updates[session["_id"]] = {"mentions": new_mentions}
    return Plan(updates, messages)


MIGRATION = Migration("sessions cigarMention fill", "sessions", scan, compute)


def main():
    return run_script(MIGRATION)


if __name__ == "__main__":
    main()
