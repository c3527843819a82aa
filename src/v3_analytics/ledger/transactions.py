"""
Transaction upsert shared by every pool event.
"""

from v3_analytics.utils.ids import get_id
from .entity_types import Transaction


async def load_transaction(context, transaction_hash: str, block_number: int, timestamp: int, chain_id: int) -> Transaction:
    """
    Load or create the Transaction record for an event.

    Idempotent: re-applying the same hash with the same block data rewrites
    identical values. Gas fields are left at zero.
    """
    transaction_id = get_id(transaction_hash, chain_id)
    transaction = await context.get(Transaction, transaction_id)
    if transaction is None:
        transaction = Transaction(
            id=transaction_id,
            chain_id=chain_id,
            transaction_hash=transaction_hash.lower(),
            block_number=block_number,
            timestamp=timestamp,
        )
    transaction.block_number = block_number
    transaction.timestamp = timestamp
    context.set(transaction)
    return transaction
