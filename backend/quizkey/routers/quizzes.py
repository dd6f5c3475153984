from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from quizkey.core.redis_client import get_redis
from quizkey.schemas.quiz import QuizSet
from quizkey.schemas.share import DocumentRequest, GradeRequest, GradeResponse, ShareKeyRequest, ShareKeyResponse
from quizkey.services.grading import grade_quiz, total_score
from quizkey.services.library import (
    DuplicateQuizError,
    InvalidShareKeyError,
    LibraryError,
    QuizLibrary,
    QuizNotFoundError,
)
from quizkey.services.normalizer import QuizValidationError

router = APIRouter(prefix="/quizzes", tags=["quizzes"])


def get_library() -> QuizLibrary:
    return QuizLibrary(get_redis())


def _http_error(exc: Exception) -> HTTPException:
    if isinstance(exc, QuizNotFoundError):
        status = 404
    elif isinstance(exc, DuplicateQuizError):
        status = 409
    else:
        status = 422

    code = getattr(exc, "code", None) or "invalid_document"
    if isinstance(exc, InvalidShareKeyError) and exc.outcome.error:
        message = f"invalid share key ({exc.outcome.error})"
    else:
        message = str(exc)
    return HTTPException(status_code=status, detail={"error_code": code, "error_message": message})


@router.get("", response_model=list[QuizSet], response_model_exclude_none=True)
def list_quizzes(library: QuizLibrary = Depends(get_library)):
    return library.list_quizzes()


@router.get("/{quiz_id}", response_model=QuizSet, response_model_exclude_none=True)
def get_quiz(quiz_id: str, library: QuizLibrary = Depends(get_library)):
    try:
        return library.get(quiz_id)
    except QuizNotFoundError as e:
        raise _http_error(e) from e


@router.put("/{quiz_id}", response_model=QuizSet, response_model_exclude_none=True)
def save_quiz(quiz_id: str, body: QuizSet, library: QuizLibrary = Depends(get_library)):
    if body.id != quiz_id:
        raise HTTPException(
            status_code=422,
            detail={"error_code": "id_mismatch", "error_message": "quiz id does not match the path"},
        )
    return library.save(body)


@router.delete("/{quiz_id}")
def delete_quiz(quiz_id: str, library: QuizLibrary = Depends(get_library)):
    if not library.delete(quiz_id):
        raise _http_error(QuizNotFoundError(f"quiz {quiz_id} not found"))
    return {"ok": True}


@router.post("/import-key", response_model=QuizSet, response_model_exclude_none=True)
async def import_key(body: ShareKeyRequest, library: QuizLibrary = Depends(get_library)):
    try:
        return await library.import_share_key(body.key)
    except LibraryError as e:
        raise _http_error(e) from e


@router.post("/import-json", response_model=QuizSet, response_model_exclude_none=True)
def import_json(body: DocumentRequest, library: QuizLibrary = Depends(get_library)):
    try:
        return library.import_document(body.text)
    except (LibraryError, QuizValidationError) as e:
        raise _http_error(e) from e


@router.get("/{quiz_id}/share-key", response_model=ShareKeyResponse)
async def quiz_share_key(quiz_id: str, library: QuizLibrary = Depends(get_library)):
    try:
        key = await library.export_share_key(quiz_id)
    except QuizNotFoundError as e:
        raise _http_error(e) from e
    if not key:
        raise HTTPException(
            status_code=422,
            detail={"error_code": "encode_failed", "error_message": "could not produce a share key"},
        )
    return ShareKeyResponse(key=key)


@router.post("/{quiz_id}/grade", response_model=GradeResponse)
def grade(quiz_id: str, body: GradeRequest, library: QuizLibrary = Depends(get_library)):
    try:
        quiz = library.get(quiz_id)
    except QuizNotFoundError as e:
        raise _http_error(e) from e

    results = grade_quiz(quiz, body.answers)
    score, max_score = total_score(results)
    return GradeResponse(quiz_id=quiz.id, score=score, max_score=max_score, results=results)
