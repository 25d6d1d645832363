"""
REST API for Shield Proofs

This module provides a FastAPI-based REST API for resolving commitment sister
paths and encoding circuit witness vectors, with full OpenAPI documentation.
"""

import logging
import traceback

from fastapi import Depends, FastAPI, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import uvicorn

from .. import __version__
from ..exceptions import (
    ConsistencyError,
    LengthMismatchError,
    PackingOverflowError,
    TreeAccessError,
    ValidationError,
)
from ..models.api_models import (
    ErrorResponse,
    HashRequest,
    HashResponse,
    HealthResponse,
    PathResponse,
    RootCheckRequest,
    RootCheckResponse,
    VectorRequest,
    VectorResponse,
)
from .witness_service import WitnessService

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title="Shield Proofs API",
    description="""
    Prepare zero-knowledge circuit inputs for the shield contract.

    ## Features
    - **Sister Paths**: Resolve a commitment's path through the on-chain commitment tree
    - **Root Checks**: Recompute a root from a commitment and its path
    - **Witness Vectors**: Encode hex values as bits, bytes, field limbs or scalars
    - **Hashing**: The single-round SHA-256 folding used by the circuit

    ## Tree Layout
    The tree is a flat array with the root at index 0 and the children of node i
    at 2i+1 and 2i+2. The commitment inserted z-count-th sits at
    2^(depth-1) - 1 + z_count.
    """,
    version=__version__,
    license_info={
        "name": "MIT",
        "url": "https://opensource.org/licenses/MIT"
    }
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Global witness service instance
witness_service = None


def get_witness_service() -> WitnessService:
    """Dependency to get the witness service instance."""
    global witness_service
    if witness_service is None:
        witness_service = WitnessService()
    return witness_service


def _error_response(status_code: int, exc: Exception, code: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(
            error=str(exc),
            code=code,
            details={"error_type": type(exc).__name__}
        ).model_dump()
    )


@app.exception_handler(ValidationError)
async def validation_error_handler(request, exc: ValidationError):
    """Handle malformed inputs."""
    logger.error(f"Validation error: {exc}")
    return _error_response(400, exc, "VALIDATION_ERROR")


@app.exception_handler(PackingOverflowError)
async def packing_overflow_handler(request, exc: PackingOverflowError):
    """Handle values that do not fit the requested number of limbs."""
    logger.error(f"Packing overflow: {exc}")
    return _error_response(422, exc, "PACKING_OVERFLOW")


@app.exception_handler(LengthMismatchError)
async def length_mismatch_handler(request, exc: LengthMismatchError):
    """Handle commitments or nodes that do not match the tree."""
    logger.error(f"Length or leaf mismatch: {exc}")
    return _error_response(409, exc, "LENGTH_MISMATCH")


@app.exception_handler(ConsistencyError)
async def consistency_error_handler(request, exc: ConsistencyError):
    """Handle roots that cannot be recomputed from a path."""
    logger.error(f"Consistency error: {exc}")
    return _error_response(409, exc, "CONSISTENCY_ERROR")


@app.exception_handler(TreeAccessError)
async def tree_access_error_handler(request, exc: TreeAccessError):
    """Handle failures reading the commitment tree."""
    logger.error(f"Tree access error: {exc}")
    return _error_response(502, exc, "TREE_ACCESS_ERROR")


@app.exception_handler(Exception)
async def general_exception_handler(request, exc: Exception):
    """Handle unexpected errors."""
    logger.error(f"Unexpected error: {exc}\n{traceback.format_exc()}")
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(
            error="Internal server error",
            code="INTERNAL_ERROR",
            details={"error_type": type(exc).__name__}
        ).model_dump()
    )


@app.get("/", response_model=dict)
async def root():
    """API root endpoint with basic information."""
    return {
        "name": "Shield Proofs API",
        "version": __version__,
        "description": "Resolve sister paths and encode witness vectors for the shield contract",
        "docs": "/docs",
        "health": "/health"
    }


@app.get("/health", response_model=HealthResponse)
async def health_check(service: WitnessService = Depends(get_witness_service)):
    """
    Health check endpoint.

    Checks the status of the API and tree accessor connectivity.
    """
    try:
        tree_status = service.health_check()
    except Exception as e:
        logger.warning(f"Health check failed: {e}")
        tree_status = False

    return HealthResponse(
        status="healthy" if tree_status else "degraded",
        tree_accessor=tree_status,
        version=__version__
    )


@app.post("/vectors", response_model=VectorResponse)
def encode_vectors(request: VectorRequest, service: WitnessService = Depends(get_witness_service)):
    """
    Encode a list of elements into a witness vector.

    Elements are encoded in order and their outputs concatenated:
    - `bits`: one entry per bit, most significant first
    - `bytes`: one entry per byte
    - `field`: big-endian limbs of `packing_size` bits
    - `scalar`: a single decimal value
    """
    vector = service.encode_vectors([element.model_dump() for element in request.elements])
    return VectorResponse(vector=vector, length=len(vector))


@app.get("/path/{z_count}", response_model=PathResponse)
def get_path(
    z_count: int,
    commitment: str = Query(..., description="Commitment as 0x-prefixed hex"),
    service: WitnessService = Depends(get_witness_service)
):
    """
    Resolve the sister path of the commitment inserted z_count-th.

    The leaf at the z-count's index must hold the (truncated) commitment. The
    returned path is checked against the tree's latest root before it is sent,
    and comes with the witness vector for the membership part of a proof.

    **Response Structure:**
    - `path`: node hashes from the leaf's sibling up to the root (root last)
    - `siblings`: the same nodes with their tree indices and sides
    - `positions`: side bits, leaf to root, packed as hex
    """
    logger.info(f"Resolving path for z-count {z_count}")
    return PathResponse(**service.get_path_witness(commitment, z_count))


@app.post("/roots/check", response_model=RootCheckResponse)
def check_root(request: RootCheckRequest, service: WitnessService = Depends(get_witness_service)):
    """
    Recompute a root from a commitment, its path and positions.

    Returns 409 when the recomputed root differs from the one supplied.
    """
    result = service.check_root(request.commitment, request.path, request.positions, request.root)
    return RootCheckResponse(**result)


@app.post("/hash", response_model=HashResponse)
def hash_items(request: HashRequest, service: WitnessService = Depends(get_witness_service)):
    """Hash the byte-wise concatenation of hex items."""
    digest = service.hash_items(request.items, mode=request.mode, hash_length=request.hash_length)
    return HashResponse(hash=digest, mode=request.mode)


def run_server(host: str = "127.0.0.1", port: int = 8000, dev: bool = False):
    """
    Run the API server.

    Args:
        host: Host to bind to
        port: Port to bind to
        dev: Enable development mode with auto-reload
    """
    logger.info(f"Starting Shield Proofs API server on {host}:{port}")
    uvicorn.run(
        "shield_proofs.api.rest_api:app" if dev else app,
        host=host,
        port=port,
        reload=dev,
        log_level="info"
    )


if __name__ == "__main__":
    run_server(dev=True)
