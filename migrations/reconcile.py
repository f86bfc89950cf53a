"""
Reference reconciliation shared by all the user-reference migrations.

A referencing value is checked against the users scanned in the same run:
  keep     value is already a document key (_id)
  rewrite  value is a legacy `id` field of some user -> replace with that user's _id
  drop     value matches neither -> removed from lists, nulled for scalars/objects

Nothing here prints or touches the database. Every non-keep outcome comes back
as a Diagnostic so the calling script decides how to report it.
"""

from collections import namedtuple

KEEP = "keep"
REWRITE = "rewrite"
DROP = "drop"

Outcome = namedtuple("Outcome", ["verdict", "value"])
Diagnostic = namedtuple("Diagnostic", ["doc_id", "field", "old", "new", "verdict"])
ListResult = namedtuple("ListResult", ["values", "changed", "count", "diagnostics"])
FieldResult = namedtuple("FieldResult", ["value", "changed", "diagnostics"])


class LookupIndex:
    """valid_keys / legacy_to_key built from one full scan of the entity collection."""

    def __init__(self):
        self.valid_keys = set()
        self.legacy_to_key = {}
        # legacy id -> every key that claimed it, in scan order (only ids seen twice+)
        self.duplicate_legacy_ids = {}

    def __len__(self):
        return len(self.valid_keys)


def build_lookup_index(records, key_field="_id", legacy_field="id"):
    """Build a LookupIndex from entity documents.

    Every key goes into valid_keys. A truthy legacy id maps to its key; when two
    records share a legacy id the later one wins and the collision is recorded in
    duplicate_legacy_ids instead of raising.
    """
    index = LookupIndex()
    claims = {}
    for record in records:
        key = record[key_field]
        index.valid_keys.add(key)
        legacy = record.get(legacy_field)
        if not legacy:
            continue
        claims.setdefault(legacy, []).append(key)
        index.legacy_to_key[legacy] = key

    index.duplicate_legacy_ids = {
        legacy: keys for legacy, keys in claims.items() if len(keys) > 1
    }
    return index


def reconcile_value(value, index):
    """Verdict for a single reference value, or None when the value is absent."""
    if not value:
        return None
    if isinstance(value, (dict, list)):
        # embedded junk where an id should be
        return Outcome(DROP, None)
    if value in index.valid_keys:
        return Outcome(KEEP, value)
    if value in index.legacy_to_key:
        return Outcome(REWRITE, index.legacy_to_key[value])
    return Outcome(DROP, None)


def reconcile_scalar(doc_id, field, value, index):
    outcome = reconcile_value(value, index)
    if outcome is None or outcome.verdict == KEEP:
        return FieldResult(value, False, [])
    diag = Diagnostic(doc_id, field, value, outcome.value, outcome.verdict)
    return FieldResult(outcome.value, True, [diag])


def reconcile_list(doc_id, field, values, index):
    """Reconcile a list of references, keeping order and omitting dropped entries.

    `count` is always len(values) of the result so the paired count field can be
    written from it.
    """
    if not isinstance(values, list):
        return ListResult([], False, 0, [])

    new_values = []
    diagnostics = []
    for value in values:
        outcome = reconcile_value(value, index)
        if outcome is None:
            # falsy entries ("" / None) are not references
            outcome = Outcome(DROP, None)
        if outcome.verdict != DROP:
            new_values.append(outcome.value)
        if outcome.verdict != KEEP:
            diagnostics.append(Diagnostic(doc_id, field, value, outcome.value, outcome.verdict))

    return ListResult(new_values, bool(diagnostics), len(new_values), diagnostics)


def reconcile_object(doc_id, field, obj, index, id_field="id"):
    """Reconcile an embedded object whose `id_field` property is the reference.

    rewrite -> shallow copy with only that property replaced
    drop    -> the whole object becomes None
    """
    if not isinstance(obj, dict) or not obj.get(id_field):
        return FieldResult(obj, False, [])

    old_id = obj[id_field]
    outcome = reconcile_value(old_id, index)
    if outcome.verdict == KEEP:
        return FieldResult(obj, False, [])

    path = f"{field}.{id_field}"
    diag = Diagnostic(doc_id, path, old_id, outcome.value, outcome.verdict)
    if outcome.verdict == REWRITE:
        return FieldResult({**obj, id_field: outcome.value}, True, [diag])
    return FieldResult(None, True, [diag])


def reconcile_list_pair(doc_id, doc, parent, index):
    """Reconcile `<parent>.list` and keep `<parent>.count` in step with it.

    Returns ({dotted field: value}, diagnostics); the dict is empty when nothing changed.
    """
    field = f"{parent}.list"
    result = reconcile_list(doc_id, field, get_path(doc, field), index)
    if not result.changed:
        return {}, []
    return {field: result.values, f"{parent}.count": result.count}, result.diagnostics


def get_path(doc, path):
    """Walk a dotted path ("members.list") through nested dicts; None if any hop is missing."""
    val = doc
    for part in path.split("."):
        if isinstance(val, dict):
            val = val.get(part)
        else:
            return None
    return val


def describe(diag):
    """One-line operator message for a diagnostic."""
    if diag.verdict == REWRITE:
        return f"{diag.doc_id}: updated {diag.field} from {diag.old} to {diag.new}"
    return f"{diag.doc_id}: {diag.field} {diag.old} not found, dropped"
