"""Patient/$match endpoint.

- POST /Patient/$match -> validate a submitted Patient against the minimum
  criteria of its claimed IDI profile

The body is a FHIR ``Parameters`` resource in JSON or XML; the
``Content-Type`` header selects the format.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Header, HTTPException, Request, Response

from patient_match.codec import WireFormat

logger = logging.getLogger(__name__)

router = APIRouter(tags=["patient"])


@router.post("/Patient/$match")
async def match_patient(
    request: Request,
    content_type: str | None = Header(default=None),
    authorization: str | None = Header(default=None),
):
    """Run the $match minimum-criteria gate.

    Returns 202 with no body when the Patient meets its profile's minimum
    criteria, 400 with an OperationOutcome when it does not or when the body
    is malformed, and 401 when the bearer token is missing or unknown.
    """
    wire_format = WireFormat.from_content_type(content_type)
    if wire_format is None:
        raise HTTPException(
            status_code=415,
            detail=f"Unsupported Content-Type: {content_type!r}. Use application/fhir+json or application/fhir+xml.",
        )

    body = await request.body()
    service = request.app.state.match_service
    result = service.match(
        body,
        wire_format,
        authorization=authorization,
        request_base_url=str(request.base_url),
        client_host=request.client.host if request.client else None,
    )
    return Response(
        content=result.body,
        status_code=result.status_code,
        media_type=result.media_type,
        headers=result.headers,
    )
