from __future__ import annotations

from fastapi import APIRouter, HTTPException

from quizkey.schemas.quiz import QuizSet
from quizkey.schemas.share import DecodeResponse, DocumentRequest, ShareKeyRequest, ShareKeyResponse
from quizkey.services import share_key
from quizkey.services.normalizer import QuizValidationError, parse_quiz_document

router = APIRouter(prefix="/share", tags=["share"])


@router.post("/encode", response_model=ShareKeyResponse)
async def encode_quiz(body: QuizSet):
    key = await share_key.encode(body)
    if not key:
        raise HTTPException(
            status_code=422,
            detail={"error_code": "encode_failed", "error_message": "could not produce a share key"},
        )
    return ShareKeyResponse(key=key)


@router.post("/decode", response_model=DecodeResponse, response_model_exclude_none=True)
async def decode_key(body: ShareKeyRequest):
    outcome = await share_key.decode_outcome(body.key)
    if not outcome.ok:
        raise HTTPException(
            status_code=422,
            detail={"error_code": outcome.error or "invalid_key", "error_message": "invalid share key"},
        )
    return DecodeResponse(version=int(outcome.version or 0), quiz=outcome.quiz)


@router.post("/normalize", response_model=QuizSet, response_model_exclude_none=True)
def normalize_document(body: DocumentRequest):
    try:
        return parse_quiz_document(body.text)
    except QuizValidationError as e:
        raise HTTPException(
            status_code=422,
            detail={"error_code": "invalid_document", "error_message": str(e)},
        ) from e
