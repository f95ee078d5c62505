"""Shared limits for the document store and the lifecycle services."""

# Maximum number of writes in one committed batch.
BATCH_LIMIT = 500

# Page size for the child query of a subtree traversal.
CHILD_PAGE_SIZE = 500

# Page size for the tag back-reference sweep and user collection sweeps.
SWEEP_PAGE_SIZE = 500

# Task listing limits.
DEFAULT_LIST_LIMIT = 50
MAX_LIST_LIMIT = 100

# array-contains-any accepts at most this many values.
MAX_TAG_FILTER = 10

# Collections owned by a user, in cascade order.
USER_COLLECTIONS = ("projects", "tags", "tasks")
