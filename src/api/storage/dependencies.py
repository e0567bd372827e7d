from fastapi import Depends
from sqlmodel import Session
from src.api.common.utils.database import get_db
from src.api.storage.gateway import PersistenceGateway, SQLModelGateway


def get_gateway(db: Session = Depends(get_db)) -> PersistenceGateway:
    return SQLModelGateway(db)
