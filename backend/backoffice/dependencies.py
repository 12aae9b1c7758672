"""
Shared FastAPI dependencies
"""
from fastapi import BackgroundTasks, Depends
from sqlalchemy.orm import Session

from core.engine.event_bus import trigger_bus
from backoffice.database import get_db
from backoffice.services.document_store import DocumentStore


def get_store(background_tasks: BackgroundTasks, db: Session = Depends(get_db)) -> DocumentStore:
    """
    Document store on the request session, wired to the global trigger bus

    Write events are held until the response has been sent, so index sync
    never delays the request that made the edit.
    """
    store = DocumentStore(db, trigger_bus, defer_events=True)
    background_tasks.add_task(store.flush_events)
    return store
