"""
API Models Package

This package contains request and response models for the witness API.
It includes Pydantic models for validation and serialization of:

- Witness vector requests and responses
- Sister path responses and root checks
- Hashing requests
- Error responses and status models

Usage:
    from shield_proofs.models import VectorRequest, VectorResponse

    request = VectorRequest(elements=[{"value": "0xff00", "encoding": "bytes"}])
"""

from .api_models import (
    ErrorResponse,
    HealthResponse,
    ElementModel,
    VectorRequest,
    VectorResponse,
    SisterNodeModel,
    PathResponse,
    RootCheckRequest,
    RootCheckResponse,
    HashRequest,
    HashResponse,
)

__all__ = [
    'ErrorResponse',
    'HealthResponse',
    'ElementModel',
    'VectorRequest',
    'VectorResponse',
    'SisterNodeModel',
    'PathResponse',
    'RootCheckRequest',
    'RootCheckResponse',
    'HashRequest',
    'HashResponse',
]
