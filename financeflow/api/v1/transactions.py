"""Transaction endpoints - list, add and delete through the finance store"""

from fastapi import APIRouter, Depends, Response
from financeflow.api.v1.schemas import TransactionCreate, TransactionListResponse, TransactionSchema
from financeflow.api.dependencies import get_store, store_failure
from financeflow.domain.models import NewTransaction
from financeflow.store.finance_store import FinanceStore

router = APIRouter()


def cached_transactions(store: FinanceStore) -> TransactionListResponse:
    return TransactionListResponse(
        transactions=[TransactionSchema.model_validate(t) for t in store.transactions]
    )


@router.get("/transactions", response_model=TransactionListResponse)
async def list_transactions(store: FinanceStore = Depends(get_store)):
    """
    Re-fetch the user's transactions (newest first) and return the cache.

    Returns:
        Exactly the rows the data service returned, in its order
    """
    if not await store.fetch_transactions():
        raise store_failure(store)
    return cached_transactions(store)


@router.post("/transactions", response_model=TransactionListResponse, status_code=201)
async def add_transaction(request_body: TransactionCreate, store: FinanceStore = Depends(get_store)):
    """Record a transaction; the stored row is appended to the end of the cache"""
    added = await store.add_transaction(
        NewTransaction(
            description=request_body.description,
            amount=request_body.amount,
            category=request_body.category,
            type=request_body.type,
            date=request_body.date,
        )
    )
    if not added:
        raise store_failure(store)
    return cached_transactions(store)


@router.delete("/transactions/{transaction_id}", status_code=204)
async def delete_transaction(transaction_id: str, store: FinanceStore = Depends(get_store)):
    if not await store.delete_transaction(transaction_id):
        raise store_failure(store)
    return Response(status_code=204)
