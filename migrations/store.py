"""
Thin pymongo wrapper used by the migration scripts.

Scripts never hold collection handles of their own; they get a store and call:
  scan(collection)                 every document in the collection
  find_by_ids(collection, ids)     documents whose _id is in ids (caller keeps ids bounded)
  commit(collection, updates)      one bulk write of {_id: {"$set": fields}} updates
"""

from pymongo import MongoClient, UpdateOne

from mongo_config import MONGO_URI, MONGO_DB, USE_TRANSACTIONS


class MongoStore:
    def __init__(self, db, use_transactions=USE_TRANSACTIONS):
        self.db = db
        self.use_transactions = use_transactions

    @classmethod
    def connect(cls, uri=MONGO_URI, db_name=MONGO_DB):
        client = MongoClient(uri)
        return cls(client[db_name])

    def close(self):
        self.db.client.close()

    def scan(self, collection):
        return list(self.db[collection].find({}))

    def find_by_ids(self, collection, ids):
        return list(self.db[collection].find({"_id": {"$in": list(ids)}}))

    def commit(self, collection, updates):
        """Apply {doc_id: {dotted.field: value}} as a single ordered bulk write.

        With transactions on, the bulk write runs inside one client session
        transaction so either every document is updated or none is.
        Returns the number of modified documents.
        """
        ops = [UpdateOne({"_id": doc_id}, {"$set": fields}) for doc_id, fields in updates.items()]
        if not ops:
            return 0

        coll = self.db[collection]
        if not self.use_transactions:
            return coll.bulk_write(ops, ordered=True).modified_count

        with self.db.client.start_session() as session:
            with session.start_transaction():
                result = coll.bulk_write(ops, ordered=True, session=session)
        return result.modified_count
