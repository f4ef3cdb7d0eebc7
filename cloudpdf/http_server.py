"""HTTP server for the CloudPDF page tools service using FastAPI."""

import asyncio
import base64
import json
import logging
import re
import time
from typing import Dict, Any, List, Optional
from urllib.parse import quote

from fastapi import Depends, FastAPI, Header, HTTPException, UploadFile, File, Form
from fastapi.responses import Response
from pydantic import BaseModel, Field

from .auth import InMemoryIdentityProvider, Session
from .backends.annotate import AddTextBackend
from .backends.base import Backend
from .backends.merge import MergeBackend
from .backends.page_info import PageInfoBackend
from .backends.split import SplitBackend
from .config import get_config
from .documents.pdf_document import PdfDocument
from .errors import AuthenticationError, PageRangeError, RecordNotFound, StorageError
from .storage.blob_store import LocalBlobStore
from .storage.library import FileLibrary
from .storage.metadata_store import MetadataStore

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

VERSION = "0.1.0"


# Pydantic models
class ProcessRequest(BaseModel):
    """Request body for POST /process (base64 mode)."""
    operation: str = Field(..., description="Operation: split, merge, add_text, page_info")
    data: str = Field(..., description="Base64-encoded PDF data")
    additional_data: List[str] = Field(
        default_factory=list, description="Further base64-encoded PDFs (merge)"
    )
    options: Dict[str, str] = Field(default_factory=dict)


class HealthResponse(BaseModel):
    """Response body for GET /health."""
    status: str = "ok"
    operations: List[str]
    version: str = VERSION


class SignInRequest(BaseModel):
    """Request body for POST /auth/sign-in."""
    email: str
    password: str


def split_file_name(original_name: Optional[str], page_range: str) -> str:
    """Download name for a split, e.g. "report_pages_1-3_5.pdf"."""
    stem = (original_name or "").replace(".pdf", "", 1) or "split"
    return f"{stem}_pages_{re.sub(r'[^0-9a-zA-Z,-]', '_', page_range)}.pdf"


def _pdf_response(data: bytes, file_name: str, metadata: Dict[str, Any]) -> Response:
    headers = {
        "Content-Disposition": f"attachment; filename*=UTF-8''{quote(file_name)}",
    }
    for key, value in metadata.items():
        # Header values must stay latin-1
        headers[f"X-CloudPDF-{key.replace('_', '-').title()}"] = quote(str(value), safe=",-.")
    return Response(content=data, media_type="application/pdf", headers=headers)


def _validation_error(e: ValueError) -> HTTPException:
    if isinstance(e, PageRangeError):
        error = {"code": e.code, "message": str(e)}
        if e.token is not None:
            error["token"] = e.token
    else:
        error = {"code": getattr(e, "code", "VALIDATION_ERROR"), "message": str(e)}
    return HTTPException(status_code=400, detail={"success": False, "error": error})


def create_app(
    identity: Optional[InMemoryIdentityProvider] = None,
    library: Optional[FileLibrary] = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="CloudPDF Page Tools Service",
        description="PDF split, merge, text placement and page info using PyMuPDF",
        version=VERSION,
    )

    config = get_config()
    if identity is None:
        identity = InMemoryIdentityProvider()
    if library is None:
        library = FileLibrary(
            LocalBlobStore(config.storage.root, chunk_size=config.storage.upload_chunk_size),
            MetadataStore(),
        )

    backends: List[Backend] = [
        SplitBackend(),
        MergeBackend(),
        AddTextBackend(),
        PageInfoBackend(),
    ]

    supported_operations = set()
    for backend in backends:
        supported_operations.update(backend.SUPPORTED_OPERATIONS)

    def find_backend(operation: str) -> Optional[Backend]:
        for backend in backends:
            if backend.supports(operation):
                return backend
        return None

    def check_size(data: bytes) -> None:
        max_mb = get_config().page_tools.max_file_size_mb
        if len(data) > max_mb * 1024 * 1024:
            raise HTTPException(
                status_code=400,
                detail={
                    "success": False,
                    "error": {"code": "FILE_TOO_LARGE", "message": f"File exceeds {max_mb}MB limit"},
                },
            )

    async def run_backend(operation: str, documents: List[bytes], options: Dict[str, str]):
        backend = find_backend(operation)
        if backend is None:
            raise HTTPException(
                status_code=400,
                detail={
                    "success": False,
                    "error": {
                        "code": "INVALID_OPERATION",
                        "message": f"Operation '{operation}' is not supported",
                        "details": {"supported_operations": sorted(supported_operations)},
                    }
                }
            )
        try:
            return await asyncio.to_thread(backend.process, documents, operation, options)
        except ValueError as e:
            logger.info(f"Rejected {operation} request: {e}")
            raise _validation_error(e)
        except Exception as e:
            logger.exception(f"Processing error: {e}")
            raise HTTPException(
                status_code=500,
                detail={"success": False, "error": {"code": "PROCESSING_FAILED", "message": str(e)}}
            )

    def get_session(authorization: str = Header("")) -> Session:
        scheme, _, token = authorization.partition(" ")
        try:
            if scheme.lower() != "bearer" or not token:
                raise AuthenticationError("Missing bearer token")
            return identity.resolve(token.strip())
        except AuthenticationError as e:
            raise HTTPException(
                status_code=401,
                detail={"success": False, "error": {"code": "UNAUTHENTICATED", "message": str(e)}},
                headers={"WWW-Authenticate": "Bearer"},
            )

    @app.get("/health", response_model=HealthResponse)
    async def health_check() -> HealthResponse:
        return HealthResponse(
            status="ok",
            operations=sorted(supported_operations),
            version=VERSION,
        )

    @app.get("/ready")
    async def readiness_check():
        return {"status": "ready"}

    @app.post("/api/page-info")
    async def page_info(file: UploadFile = File(...)):
        """Report page count and native page sizes."""
        start_time = time.time()
        pdf_data = await file.read()
        check_size(pdf_data)

        output_data, _, metadata = await run_backend("page_info", [pdf_data], {})
        return {
            "success": True,
            "result": json.loads(output_data.decode("utf-8")),
            "metadata": metadata,
            "processing_time_ms": int((time.time() - start_time) * 1000),
        }

    @app.post("/api/split")
    async def split(file: UploadFile = File(...), pages: str = Form("")):
        """Extract a page selection such as "1-3, 5" into a new PDF."""
        pdf_data = await file.read()
        check_size(pdf_data)
        logger.info(f"Split request: size={len(pdf_data)} bytes, pages='{pages}'")

        output_data, _, metadata = await run_backend("split", [pdf_data], {"pages": pages})
        return _pdf_response(
            output_data, split_file_name(file.filename, metadata["page_range"]), metadata
        )

    @app.post("/api/merge")
    async def merge(files: List[UploadFile] = File(...)):
        """Merge the uploaded PDFs in upload order."""
        documents = []
        for upload in files:
            data = await upload.read()
            check_size(data)
            documents.append(data)
        logger.info(f"Merge request: {len(documents)} files")

        output_data, _, metadata = await run_backend("merge", documents, {})
        return _pdf_response(output_data, "merged_document.pdf", metadata)

    @app.post("/api/add-text")
    async def add_text(
        file: UploadFile = File(...),
        text: str = Form(...),
        page: str = Form("1"),
        x: str = Form(...),
        y: str = Form(...),
        container_width: str = Form(...),
        container_height: str = Form(...),
        color: str = Form(""),
        font_size: str = Form(""),
    ):
        """Draw text where the user clicked on a rendered page preview."""
        pdf_data = await file.read()
        check_size(pdf_data)

        options = {
            "text": text,
            "page": page,
            "x": x,
            "y": y,
            "container_width": container_width,
            "container_height": container_height,
            "color": color,
            "font_size": font_size,
        }
        output_data, _, metadata = await run_backend("add_text", [pdf_data], options)
        return _pdf_response(output_data, file.filename or "document.pdf", metadata)

    @app.post("/process")
    async def process_document(request: ProcessRequest) -> Dict[str, Any]:
        """Process PDFs via base64-encoded payload (compatible with pyworker pattern)."""
        start_time = time.time()

        try:
            documents = [
                base64.b64decode(encoded, validate=True)
                for encoded in [request.data] + request.additional_data
            ]
        except Exception as e:
            raise HTTPException(
                status_code=400,
                detail={"success": False, "error": {"code": "INVALID_BASE64", "message": str(e)}}
            )

        for document_data in documents:
            check_size(document_data)

        output_data, output_format, metadata = await run_backend(
            request.operation, documents, request.options
        )
        processing_time_ms = int((time.time() - start_time) * 1000)

        if output_format == "json":
            result = json.loads(output_data.decode("utf-8"))
            content_type = "application/json"
        else:
            result = base64.b64encode(output_data).decode("ascii")
            content_type = f"application/{output_format}"

        return {
            "success": True,
            "result": result,
            "format": content_type,
            "metadata": {str(k): str(v) for k, v in metadata.items()},
            "processing_time_ms": processing_time_ms,
        }

    @app.post("/auth/sign-in")
    async def sign_in(request: SignInRequest):
        try:
            token, session = identity.sign_in(request.email, request.password)
        except AuthenticationError as e:
            raise HTTPException(
                status_code=401,
                detail={"success": False, "error": {"code": "UNAUTHENTICATED", "message": str(e)}},
            )
        return {"success": True, "token": token, "user_id": session.user_id}

    @app.post("/auth/sign-out")
    async def sign_out(authorization: str = Header("")):
        _, _, token = authorization.partition(" ")
        identity.sign_out(token.strip())
        return {"success": True}

    @app.get("/api/files")
    async def list_files(session: Session = Depends(get_session)):
        """List the user's uploaded PDFs, newest first."""
        return {
            "success": True,
            "files": [record.to_dict() for record in library.list_files(session)],
        }

    @app.post("/api/files")
    async def upload_file(file: UploadFile = File(...), session: Session = Depends(get_session)):
        """Store a PDF for the user and record it."""
        pdf_data = await file.read()
        check_size(pdf_data)

        try:
            with PdfDocument.open(pdf_data):
                pass
            record = await asyncio.to_thread(library.upload, session, file.filename or "", pdf_data)
        except ValueError as e:
            raise _validation_error(e)
        except StorageError as e:
            logger.exception(f"Upload failed: {e}")
            raise HTTPException(
                status_code=500,
                detail={"success": False, "error": {"code": "UPLOAD_FAILED", "message": str(e)}},
            )

        return {"success": True, "file": record.to_dict()}

    @app.get("/api/files/{doc_id}/content")
    async def download_file(doc_id: str, session: Session = Depends(get_session)):
        try:
            record = library.get(session, doc_id)
            data = await asyncio.to_thread(library.download, session, doc_id)
        except RecordNotFound as e:
            raise HTTPException(
                status_code=404,
                detail={"success": False, "error": {"code": "NOT_FOUND", "message": str(e)}},
            )
        except StorageError as e:
            logger.exception(f"Download failed: {e}")
            raise HTTPException(
                status_code=500,
                detail={"success": False, "error": {"code": "DOWNLOAD_FAILED", "message": str(e)}},
            )
        return _pdf_response(data, record.file_name, {})

    @app.delete("/api/files/{doc_id}")
    async def delete_file(doc_id: str, session: Session = Depends(get_session)):
        try:
            await asyncio.to_thread(library.delete, session, doc_id)
        except RecordNotFound as e:
            raise HTTPException(
                status_code=404,
                detail={"success": False, "error": {"code": "NOT_FOUND", "message": str(e)}},
            )
        return {"success": True}

    return app


# Create app instance for uvicorn
app = create_app()


def run_server():
    """Run the HTTP server."""
    import uvicorn
    config = get_config()
    logger.info(f"Starting HTTP server on {config.server.host}:{config.server.port}")
    uvicorn.run(
        "cloudpdf.http_server:app",
        host=config.server.host,
        port=config.server.port,
        log_level="info",
    )


if __name__ == "__main__":
    run_server()
