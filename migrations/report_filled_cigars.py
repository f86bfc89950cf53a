#!/usr/bin/env python3
"""List cigars whose characteristics / rating / reviewsCount are already filled in. Read-only."""

from store import MongoStore

# field -> the "empty" value it should still have
FIELDS = {
    "characteristics": [],
    "rating": 0,
    "reviewsCount": 0,
}


def filled_cigars(cigars, field):
    """Cigars that have `field` set to something other than its empty value."""
    empty = FIELDS[field]
    return [c for c in cigars if field in c and c[field] is not None and c[field] != empty]


def report(store):
    cigars = store.scan("cigars")
    print(f"Found {len(cigars)} cigar documents.\n")
    found = {}
    for field in FIELDS:
        print(f"--- Cigars with {field} filled ---")
        matches = filled_cigars(cigars, field)
        found[field] = [c["_id"] for c in matches]
        if not matches:
            print("No cigars found.\n")
            continue
        print(f"Found {len(matches)} cigars:")
        for c in matches:
            print(f"  {c['_id']}: {field}={c[field]!r}")
        print()
    return found


def main():
    store = MongoStore.connect()
    try:
        report(store)
    finally:
        store.close()
    print("Done!")


if __name__ == "__main__":
    main()
