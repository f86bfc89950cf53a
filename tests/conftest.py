"""Shared fixtures: an in-memory stand-in for MongoStore and a canned users set."""

import copy

import pytest


class FakeStore:
    """Dict-backed store with the same scan / find_by_ids / commit surface as MongoStore."""

    def __init__(self, collections=None):
        self.collections = {
            name: [copy.deepcopy(d) for d in docs] for name, docs in (collections or {}).items()
        }
        self.commits = []
        self.lookups = []
        self.use_transactions = False
        self.closed = False

    def close(self):
        self.closed = True

    def scan(self, collection):
        return copy.deepcopy(self.collections.get(collection, []))

    def find_by_ids(self, collection, ids):
        ids = list(ids)
        self.lookups.append((collection, ids))
        return [copy.deepcopy(d) for d in self.collections.get(collection, []) if d["_id"] in ids]

    def commit(self, collection, updates):
        self.commits.append((collection, copy.deepcopy(updates)))
        for doc in self.collections.get(collection, []):
            for path, value in updates.get(doc["_id"], {}).items():
                target = doc
                *parents, last = path.split(".")
                for part in parents:
                    target = target.setdefault(part, {})
                target[last] = copy.deepcopy(value)
        return len(updates)

    def get(self, collection, doc_id):
        return next(d for d in self.collections[collection] if d["_id"] == doc_id)


@pytest.fixture
def users():
    return [
        {"_id": "A", "id": "old1"},
        {"_id": "B"},
        {"_id": "C", "id": "C"},
    ]


@pytest.fixture
def make_store(users):
    def _make(**collections):
        collections.setdefault("users", users)
        return FakeStore(collections)

    return _make


@pytest.fixture
def answer():
    """Confirmation callable that records the questions and always returns `reply`."""

    class Answer:
        def __init__(self):
            self.reply = "y"
            self.questions = []

        def __call__(self, question):
            self.questions.append(question)
            return self.reply

    return Answer()
