# eva/api/v1/exportar.py
from fastapi import APIRouter, Path, Request
from fastapi.responses import StreamingResponse

from eva.api.v1.resources import ReaderDep, query_params
from eva.dependencies.context import ClockDep
from eva.dependencies.db import DbDep
from eva.services.export_service import EXPORTS, export_filename, export_rows

router = APIRouter(prefix="/api/exportar", tags=["Exportar"])

RecursoPath = Path(..., pattern="^(" + "|".join(EXPORTS) + ")$")


@router.get("/{recurso}", summary="Exportar listado a CSV (mismos filtros que el listado)")
def exportar(request: Request, db: DbDep, clock: ClockDep, actor: ReaderDep, recurso: str = RecursoPath):
    rows = export_rows(db, recurso, query_params(request))
    filename = export_filename(recurso, clock.now())
    return StreamingResponse(
        rows,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
