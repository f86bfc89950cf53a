import fill_cigar_mentions
import migrate_session_mentions
import report_filled_cigars
from fill_cigar_mentions import DEFAULT_CIGAR, fill_mention, missing_reference_ids
from migration_run import DONE, run_migration

CIGARS = [
    {"_id": "cg1", "brand": "Padron", "countryKeys": {"location": "Nicaragua"},
     "strength": 3, "imageUrl": "padron.jpg", "rating": 4.5},
    {"_id": "cg2", "brand": "Cohiba", "strength": 2},
]


def mention(ref_id, **extra):
    return {"cigarMention": {"referenceId": ref_id, "name": f"n-{ref_id}", "description": "d", **extra}}


class TestFillMention:
    def test_copies_cigar_fields(self):
        filled = fill_mention(mention("cg1")["cigarMention"], CIGARS[0], "2024-05-01")
        assert filled == {
            "referenceId": "cg1",
            "name": "n-cg1",
            "description": "d",
            "brand": "Padron",
            "country": "Nicaragua",
            "strength": 3,
            "cigarRating": DEFAULT_CIGAR["cigarRating"],
            "flavorProfile": DEFAULT_CIGAR["flavorProfile"],
            "smokedAt": "2024-05-01",
            "imageUrl": "padron.jpg",
        }

    def test_missing_cigar_gets_defaults(self):
        filled = fill_mention(mention("nope")["cigarMention"], None, None)
        assert filled["brand"] == ""
        assert filled["country"] == ""
        assert filled["strength"] == 0
        assert filled["imageUrl"] == ""

    def test_cigar_without_country_keys(self):
        filled = fill_mention(mention("cg2")["cigarMention"], CIGARS[1], None)
        assert filled["country"] == ""
        assert filled["brand"] == "Cohiba"

    def test_defaults_are_not_shared(self):
        filled = fill_mention(mention("cg1")["cigarMention"], CIGARS[0], None)
        filled["cigarRating"]["aroma"] = 5
        assert DEFAULT_CIGAR["cigarRating"]["aroma"] == 0


class TestFillPass:
    def test_only_brandless_mentions_are_filled(self, make_store, answer):
        keep = mention("cg2", brand="Already")
        other = {"userMention": {"referenceId": "A"}}
        store = make_store(cigars=CIGARS, sessions=[
            {"_id": "s1", "createdAt": "t1", "mentions": [mention("cg1"), keep, other]},
            {"_id": "s2", "createdAt": "t2", "mentions": [keep]},
            {"_id": "s3"},
        ])
        result = run_migration(fill_cigar_mentions.MIGRATION, store, confirm=answer, dry_run=False)

        assert result == (DONE, 1)
        [(collection, updates)] = store.commits
        assert collection == "sessions"
        new_mentions = updates["s1"]["mentions"]
        assert new_mentions[0]["cigarMention"]["brand"] == "Padron"
        assert new_mentions[0]["cigarMention"]["smokedAt"] == "t1"
        assert new_mentions[1] == keep
        assert new_mentions[2] == other

    def test_lookups_are_batched(self, make_store):
        cigars = [{"_id": f"cg{i}", "brand": f"b{i}"} for i in range(7)]
        sessions = [{"_id": "s1", "mentions": [mention(c["_id"]) for c in cigars]}]
        store = make_store(cigars=cigars, sessions=sessions)

        _, found = fill_cigar_mentions.scan(store, batch_size=3)

        assert [len(ids) for _, ids in store.lookups] == [3, 3, 1]
        assert set(found) == {c["_id"] for c in cigars}

    def test_no_lookup_when_nothing_needs_filling(self, make_store):
        store = make_store(cigars=CIGARS, sessions=[{"_id": "s1", "mentions": [mention("cg1", brand="x")]}])
        _, found = fill_cigar_mentions.scan(store)
        assert found == {}
        assert store.lookups == []

    def test_distinct_ids_in_first_seen_order(self):
        sessions = [
            {"_id": "s1", "mentions": [mention("b"), mention("a")]},
            {"_id": "s2", "mentions": [mention("b"), mention("c", brand="x"), mention(None)]},
        ]
        assert missing_reference_ids(sessions) == ["b", "a"]

    def test_unknown_cigar_filled_with_defaults_then_settles(self, make_store, answer):
        store = make_store(cigars=[], sessions=[{"_id": "s1", "createdAt": "t", "mentions": [mention("gone")]}])
        first = run_migration(fill_cigar_mentions.MIGRATION, store, confirm=answer, dry_run=False)
        assert first == (DONE, 1)
        assert store.get("sessions", "s1")["mentions"][0]["cigarMention"]["brand"] == ""

        # brand is still empty so it's eligible again, but nothing differs any more
        second = run_migration(fill_cigar_mentions.MIGRATION, store, confirm=answer, dry_run=False)
        assert second == (DONE, 0)


class TestMigrateSessionMentions:
    def test_legacy_cigar_mentions_converted(self, make_store, answer):
        user_mention = {"type": "user", "referenceId": "A"}
        store = make_store(sessions=[
            {"_id": "s1", "mentions": [
                {"type": "cigar", "referenceId": "cg1", "name": "Padron", "description": "good"},
                user_mention,
            ]},
            {"_id": "s2", "mentions": [user_mention]},
            {"_id": "s3", "mentions": [mention("cg2")]},
        ])
        result = run_migration(migrate_session_mentions.MIGRATION, store, confirm=answer, dry_run=False)

        assert result == (DONE, 1)
        assert store.commits[0][1] == {"s1": {"mentions": [
            {"cigarMention": {"referenceId": "cg1", "name": "Padron", "description": "good"}},
            user_mention,
        ]}}


class TestReportFilledCigars:
    def test_lists_filled_fields(self, make_store, capsys):
        store = make_store(cigars=[
            {"_id": "cg1", "characteristics": ["smooth"], "rating": 0, "reviewsCount": 3},
            {"_id": "cg2", "characteristics": [], "rating": 4.0},
            {"_id": "cg3"},
        ])
        found = report_filled_cigars.report(store)
        assert found == {"characteristics": ["cg1"], "rating": ["cg2"], "reviewsCount": ["cg1"]}
        assert "--- Cigars with rating filled ---" in capsys.readouterr().out
