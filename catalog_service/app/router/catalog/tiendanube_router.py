# app/router/catalog/tiendanube_router.py
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from shared.core.database import get_catalog_db as get_db
from shared.helpers.json_response_helper import batch_response, error_response, success_response
from shared.core.schemas import UserToken
from shared.core.auth import validate_current_token
from shared.utils.app_status_code import AppStatusCode
from ...clients.tiendanube_client import RemoteCatalogConfigError, RemoteCatalogError
from ...core.exceptions import ItemNotFoundError, ReconciliationInputError
from ...schemas.catalog.tiendanube_schemas import PushPricesRequest
from ...services import price_push_service, stock_sync_service

router = APIRouter(prefix="/api/tiendanube",
                   tags=["tiendanube"], dependencies=[Depends(validate_current_token)])


def remote_error_response(e: RemoteCatalogError):
    # listing the remote catalog failed, nothing was written
    return error_response(message=str(e), status_code=AppStatusCode.REMOTE_CATALOG_ERROR,
                          http_status=502, data={"remote_status_code": e.status_code})


@router.post("/push-prices", response_model=None)
async def push_prices(
    request: PushPricesRequest,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    try:
        report = await price_push_service.reconcile_prices(
            db, current_user.owner_id, request.scope, request.item_id)
    except ReconciliationInputError as e:
        return error_response(message=str(e), status_code=AppStatusCode.INVALID_INPUT)
    except ItemNotFoundError:
        raise HTTPException(status_code=404, detail="Product not found")
    except RemoteCatalogConfigError as e:
        return error_response(message=str(e))
    except RemoteCatalogError as e:
        return remote_error_response(e)

    return batch_response(
        data=report,
        ok=report.ok,
        partial=report.partial,
        message=f"Updated {report.variants_updated} variants in {report.products_touched} products, "
                f"{len(report.failed_products)} products failed",
    )


@router.post("/sync-stock", response_model=None)
async def sync_stock(
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    try:
        summary = await stock_sync_service.sync_stock(db, current_user.owner_id)
    except RemoteCatalogConfigError as e:
        return error_response(message=str(e))
    except RemoteCatalogError as e:
        return remote_error_response(e)

    return success_response(
        data=summary,
        message=f"Stock synced for {summary.rows_written} variants",
        status_code=AppStatusCode.OPERATION_SUCCESSFUL,
    )
