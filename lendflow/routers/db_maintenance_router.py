import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from starlette import status

from lendflow.core.config import APP_VERSION
from lendflow.core.exceptions import ConflictError
from lendflow.utils.database import get_db
from lendflow.models.customer_model import Customer
from lendflow.models.loan_model import Loan
from lendflow.models.loan_payment_model import LoanPayment
from lendflow.initial_data import init_seed
from lendflow.schemas.customer_schema import CustomerOut
from lendflow.schemas.loan_schema import LoanOut, PaymentOut
from lendflow.schemas.db_maintenance_schema import ClearRequest, DatabaseStatusOut, TableStatus

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/database", tags=["DB Maintenance"])

# collection name -> model, in the order rows must be deleted
COLLECTIONS = (
    ("payments", LoanPayment),
    ("loans", Loan),
    ("customers", Customer),
)


# ------------------------------
# STATUS
# ------------------------------
@router.get("/status", response_model=DatabaseStatusOut)
def database_status(db: Session = Depends(get_db)):
    bind = db.get_bind()
    tables = [
        TableStatus(name=model.__tablename__, count=db.query(func.count()).select_from(model).scalar())
        for _, model in reversed(COLLECTIONS)
    ]
    return DatabaseStatusOut(
        connection="connected",
        database=bind.url.database or bind.url.get_backend_name(),
        collections=tables,
    )


# ------------------------------
# BACKUP
# ------------------------------
@router.get("/backup")
def backup_database(db: Session = Depends(get_db)):
    now = datetime.now(timezone.utc)

    customers = [CustomerOut.model_validate(r).model_dump(mode="json") for r in db.query(Customer).all()]
    loans = [LoanOut.model_validate(r).model_dump(mode="json") for r in db.query(Loan).all()]
    payments = [PaymentOut.model_validate(r).model_dump(mode="json") for r in db.query(LoanPayment).all()]

    backup = {
        "timestamp": now.isoformat(),
        "version": APP_VERSION,
        "data": {
            "customers": customers,
            "loans": loans,
            "payments": payments,
        },
        "stats": {
            "customers": len(customers),
            "loans": len(loans),
            "payments": len(payments),
        },
    }

    filename = f"lendflow-backup-{now.date().isoformat()}.json"
    logger.info("Backup exported: %s", backup["stats"])
    return JSONResponse(
        backup,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


# ------------------------------
# CLEAR
# ------------------------------
@router.post("/clear")
def clear_collections(payload: ClearRequest, db: Session = Depends(get_db)):
    requested = set(payload.collections)
    results = {}

    try:
        for name, model in COLLECTIONS:
            if name in requested:
                results[name] = db.query(model).delete(synchronize_session=False)
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Cannot clear records that are still referenced; clear payments and loans first.",
        )
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Failed to clear %s", sorted(requested))
        raise

    logger.warning("Collections cleared: %s", results)
    return {"message": "Collections cleared successfully", "data": results}


# ------------------------------
# SEED
# ------------------------------
@router.post("/seed")
def seed_database(db: Session = Depends(get_db)):
    try:
        counts = init_seed(db)
    except ConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.message)

    return {"message": "Database seeded successfully", "data": counts}
