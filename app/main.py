import logging
import time

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.core.config import get_config_summary
from app.logging_config import configure_logging
from app.benefits.api_models import (
    CatalogCompileRequest,
    CatalogCompileResponse,
    CompileRequest,
    CompileResponse,
    ReclassifyRequest,
    ReclassifyResponse,
    ValidateRequest,
    ValidateResponse,
    compile_response_fields,
)
from app.benefits.compiler import compile_application_form, compile_from_catalog
from app.benefits.exceptions import (
    CatalogFetchError,
    CatalogParseError,
    DocumentEncodingError,
)
from app.benefits.fetch import fetch_catalog
from app.benefits.submission import build_submission_payload, reclassify
from app.benefits.validation import build_missing_document_errors, validate_form_data

configure_logging()
log = logging.getLogger("benefit_form")

app = FastAPI(title="Benefit Form Compiler", version="0.1.0")


@app.get("/healthz")
def healthz():
    return {"ok": True, "config": get_config_summary()}


@app.middleware("http")
async def req_log(request: Request, call_next):
    start = time.time()
    route = request.url.path
    remote = request.client.host if request.client else "-"
    resp = await call_next(request)
    duration_ms = int((time.time() - start) * 1000)
    log.info(f"request_complete status={resp.status_code} duration_ms={duration_ms}",
             extra={"request_id": "-", "route": route, "remote_addr": remote})
    return resp


def _error_response(status_code: int, exc) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"detail": {"code": exc.code, "message": exc.message}},
    )


@app.post("/compile")
def compile_form(req: CompileRequest):
    final = compile_application_form(
        req.application_fields,
        req.rules,
        req.wallet,
        title=req.title,
        benefit_id=req.benefit_id,
    )
    resp = CompileResponse(**compile_response_fields(final, build_missing_document_errors(final)))
    return JSONResponse(resp.model_dump())


@app.post("/compile/catalog")
def compile_catalog(req: CatalogCompileRequest):
    try:
        compiled = compile_from_catalog(req.catalog, req.prefill, benefit_id=req.benefit_id)
    except CatalogParseError as e:
        return _error_response(400, e)

    final = compiled.final
    resp = CatalogCompileResponse(
        **compile_response_fields(final, build_missing_document_errors(final)),
        form_data=compiled.form_data,
        remark=compiled.remark,
    )
    return JSONResponse(resp.model_dump())


@app.get("/benefits/{benefit_id}/form")
async def benefit_form(benefit_id: str):
    """Fetch a benefit's catalog entry and compile its form (no pre-fill)."""
    try:
        catalog = await fetch_catalog(benefit_id)
        compiled = compile_from_catalog(catalog, benefit_id=benefit_id)
    except CatalogFetchError as e:
        log.warning(f"catalog fetch failed: {e.message}", extra={"benefit_id": benefit_id})
        return _error_response(502, e)
    except CatalogParseError as e:
        return _error_response(400, e)

    final = compiled.final
    resp = CatalogCompileResponse(
        **compile_response_fields(final, build_missing_document_errors(final)),
        form_data=compiled.form_data,
        remark=compiled.remark,
    )
    return JSONResponse(resp.model_dump())


@app.post("/reclassify")
def reclassify_submission(req: ReclassifyRequest):
    try:
        result = reclassify(
            req.form_data,
            req.form_schema,
            req.wallet,
            document_field_names=req.document_field_names,
        )
    except DocumentEncodingError as e:
        log.error(f"submission aborted: {e.message}", extra={"benefit_id": req.benefit_id})
        return _error_response(422, e)

    resp = ReclassifyResponse(
        payload=build_submission_payload(result, req.benefit_id),
        file_count=len(result.files),
        vc_document_count=len(result.vc_documents),
    )
    return JSONResponse(resp.model_dump())


@app.post("/validate")
def validate(req: ValidateRequest):
    errors = validate_form_data(req.form_data, req.form_schema)
    return JSONResponse(ValidateResponse(valid=not errors, errors=errors).model_dump())
