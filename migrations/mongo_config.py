"""Shared MongoDB config for the migration scripts.

Environment variables:
  MONGO_EMULATOR_HOST  host:port of a local/emulated instance; when set, the
                       scripts connect there and print it as the target
  MONGO_URI            override full connection string
  MONGO_DB             override database name
  DRY_RUN              "1" to print the planned writes without prompting or committing
  LOOKUP_BATCH_SIZE    max ids per "_id $in" lookup (default 30)
  MONGO_TRANSACTIONS   "0" to commit without a client session transaction
                       (standalone servers don't support transactions)

If MONGO_EMULATOR_HOST is not set, the target is reported as !PRODUCTION!.
"""

import os

PRODUCTION_LABEL = "!PRODUCTION!"

EMULATOR_HOST = os.environ.get("MONGO_EMULATOR_HOST", "")

if EMULATOR_HOST:
    MONGO_URI = os.environ.get("MONGO_URI", f"mongodb://{EMULATOR_HOST}/")
else:
    MONGO_URI = os.environ.get("MONGO_URI", "mongodb://127.0.0.1:27017/")
MONGO_DB = os.environ.get("MONGO_DB", "cigarclub")

TARGET = EMULATOR_HOST or PRODUCTION_LABEL

DRY_RUN = os.environ.get("DRY_RUN", "0") == "1"
USE_TRANSACTIONS = os.environ.get("MONGO_TRANSACTIONS", "1") == "1"


def _parse_batch_size(raw):
    """Parse LOOKUP_BATCH_SIZE; raises ValueError on junk or values below 1."""
    size = int(raw)
    if size < 1:
        raise ValueError(f"LOOKUP_BATCH_SIZE must be >= 1, got {size}")
    return size


# "$in" lookups are chunked to this many ids per query
LOOKUP_BATCH_SIZE = _parse_batch_size(os.environ.get("LOOKUP_BATCH_SIZE", "30"))
