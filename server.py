import logging
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from cms.content_repository import ContentRepository
from cms.db_helpers import CORS_ORIGINS, HOST, PORT, create_session_factory
from cms.exceptions import NotFound, ValidationFailure
from cms.schemas import (
    AnswerModeration,
    AnswerSubmission,
    ArticleCreate,
    ArticleUpdate,
    ContemplationCreate,
    ContemplationReorder,
    ContemplationUpdate,
    IntentionCreate,
    IntentionReorder,
    IntentionUpdate,
    NoteCreate,
    NoteUpdate,
    ProfileUpdate,
    ProjectCreate,
    ProjectUpdate,
    QuoteCreate,
    QuoteUpdate,
)

logger = logging.getLogger("cms_backend")

app = FastAPI(title="Content API")

# CORS configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

_repository: Optional[ContentRepository] = None


def get_repository() -> ContentRepository:
    global _repository
    if _repository is None:
        _repository = ContentRepository(create_session_factory())
    return _repository


def _http_error(e: Exception, action: str) -> HTTPException:
    """
    NotFound -> 404 with its message; anything else -> 500 "Failed to <action>".
    """
    if isinstance(e, HTTPException):
        return e
    if isinstance(e, NotFound):
        logger.info(f"{e.message} ({action})")
        return HTTPException(status_code=404, detail=e.message)
    logger.error(f"Failed to {action}: {e}", exc_info=True)
    return HTTPException(status_code=500, detail=f"Failed to {action}")


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    logger.error(f"Rejected request body on {request.method} {request.url.path}: {exc.errors()}")
    return JSONResponse(status_code=500, content={"error": "Failed to process request"})


SUCCESS = {"success": True}


@app.get("/")
def root():
    return {"message": "Content API is running"}


# -----------------------
# Articles
# -----------------------

@app.get("/articles")
def list_articles(repo: ContentRepository = Depends(get_repository)):
    try:
        return repo.list_articles()
    except Exception as e:
        raise _http_error(e, "fetch articles")


@app.post("/articles")
def create_article(body: ArticleCreate, repo: ContentRepository = Depends(get_repository)):
    try:
        return repo.create_article(body)
    except Exception as e:
        raise _http_error(e, "create article")


@app.get("/articles/{identifier}")
def get_article(identifier: str, repo: ContentRepository = Depends(get_repository)):
    try:
        return repo.get_article(identifier)
    except Exception as e:
        raise _http_error(e, "fetch article")


@app.put("/articles/{identifier}")
def update_article(identifier: str, body: ArticleUpdate, repo: ContentRepository = Depends(get_repository)):
    try:
        return repo.update_article(identifier, body)
    except Exception as e:
        raise _http_error(e, "update article")


@app.delete("/articles/{identifier}")
def delete_article(identifier: str, repo: ContentRepository = Depends(get_repository)):
    try:
        repo.delete_article(identifier)
        return SUCCESS
    except Exception as e:
        raise _http_error(e, "delete article")


# -----------------------
# Projects
# -----------------------

@app.get("/projects")
def list_projects(repo: ContentRepository = Depends(get_repository)):
    try:
        return repo.list_projects()
    except Exception as e:
        raise _http_error(e, "fetch projects")


@app.post("/projects")
def create_project(body: ProjectCreate, repo: ContentRepository = Depends(get_repository)):
    try:
        return repo.create_project(body)
    except Exception as e:
        raise _http_error(e, "create project")


@app.get("/projects/{identifier}")
def get_project(identifier: str, repo: ContentRepository = Depends(get_repository)):
    try:
        return repo.get_project(identifier)
    except Exception as e:
        raise _http_error(e, "fetch project")


@app.put("/projects/{identifier}")
def update_project(identifier: str, body: ProjectUpdate, repo: ContentRepository = Depends(get_repository)):
    try:
        return repo.update_project(identifier, body)
    except Exception as e:
        raise _http_error(e, "update project")


@app.delete("/projects/{identifier}")
def delete_project(identifier: str, repo: ContentRepository = Depends(get_repository)):
    try:
        repo.delete_project(identifier)
        return SUCCESS
    except Exception as e:
        raise _http_error(e, "delete project")


# -----------------------
# Quotes
# -----------------------

@app.get("/quotes")
def list_quotes(repo: ContentRepository = Depends(get_repository)):
    try:
        return repo.list_quotes()
    except Exception as e:
        raise _http_error(e, "fetch quotes")


@app.post("/quotes")
def create_quote(body: QuoteCreate, repo: ContentRepository = Depends(get_repository)):
    try:
        return repo.create_quote(body)
    except Exception as e:
        raise _http_error(e, "create quote")


@app.get("/quotes/{identifier}")
def get_quote(identifier: str, repo: ContentRepository = Depends(get_repository)):
    try:
        return repo.get_quote(identifier)
    except Exception as e:
        raise _http_error(e, "fetch quote")


@app.put("/quotes/{identifier}")
def update_quote(identifier: str, body: QuoteUpdate, repo: ContentRepository = Depends(get_repository)):
    try:
        return repo.update_quote(identifier, body)
    except Exception as e:
        raise _http_error(e, "update quote")


@app.delete("/quotes/{identifier}")
def delete_quote(identifier: str, repo: ContentRepository = Depends(get_repository)):
    try:
        repo.delete_quote(identifier)
        return SUCCESS
    except Exception as e:
        raise _http_error(e, "delete quote")


# -----------------------
# Daily intentions
# -----------------------

@app.get("/intentions")
def list_intentions(
    include_all: bool = Query(False, alias="all"),
    repo: ContentRepository = Depends(get_repository),
):
    try:
        return repo.list_intentions(include_inactive=include_all)
    except Exception as e:
        raise _http_error(e, "fetch intentions")


@app.post("/intentions")
def create_intention(body: IntentionCreate, repo: ContentRepository = Depends(get_repository)):
    try:
        return repo.create_intention(body)
    except Exception as e:
        raise _http_error(e, "create intention")


@app.put("/intentions")
def reorder_intentions(body: IntentionReorder, repo: ContentRepository = Depends(get_repository)):
    try:
        repo.reorder_intentions(body.intentions)
        return SUCCESS
    except Exception as e:
        raise _http_error(e, "reorder intentions")


@app.get("/intentions/{identifier}")
def get_intention(identifier: str, repo: ContentRepository = Depends(get_repository)):
    try:
        return repo.get_intention(identifier)
    except Exception as e:
        raise _http_error(e, "fetch intention")


@app.put("/intentions/{identifier}")
def update_intention(identifier: str, body: IntentionUpdate, repo: ContentRepository = Depends(get_repository)):
    try:
        return repo.update_intention(identifier, body)
    except Exception as e:
        raise _http_error(e, "update intention")


@app.delete("/intentions/{identifier}")
def delete_intention(identifier: str, repo: ContentRepository = Depends(get_repository)):
    try:
        repo.delete_intention(identifier)
        return SUCCESS
    except Exception as e:
        raise _http_error(e, "delete intention")


# -----------------------
# Contemplations
# -----------------------

@app.get("/contemplations")
def list_contemplations(
    include_all: bool = Query(False, alias="all"),
    repo: ContentRepository = Depends(get_repository),
):
    try:
        return repo.list_contemplations(include_inactive=include_all)
    except Exception as e:
        raise _http_error(e, "fetch contemplations")


@app.post("/contemplations")
def create_contemplation(body: ContemplationCreate, repo: ContentRepository = Depends(get_repository)):
    try:
        return repo.create_contemplation(body)
    except Exception as e:
        raise _http_error(e, "create contemplation")


@app.put("/contemplations")
def reorder_contemplations(body: ContemplationReorder, repo: ContentRepository = Depends(get_repository)):
    try:
        repo.reorder_contemplations(body.contemplations)
        return SUCCESS
    except Exception as e:
        raise _http_error(e, "reorder contemplations")


@app.get("/contemplations/{identifier}")
def get_contemplation(identifier: str, repo: ContentRepository = Depends(get_repository)):
    try:
        return repo.get_contemplation(identifier)
    except Exception as e:
        raise _http_error(e, "fetch contemplation")


@app.put("/contemplations/{identifier}")
def update_contemplation(identifier: str, body: ContemplationUpdate, repo: ContentRepository = Depends(get_repository)):
    try:
        return repo.update_contemplation(identifier, body)
    except Exception as e:
        raise _http_error(e, "update contemplation")


@app.delete("/contemplations/{identifier}")
def delete_contemplation(identifier: str, repo: ContentRepository = Depends(get_repository)):
    try:
        repo.delete_contemplation(identifier)
        return SUCCESS
    except Exception as e:
        raise _http_error(e, "delete contemplation")


# -----------------------
# Sticky notes
# -----------------------

@app.get("/notes")
def list_notes(repo: ContentRepository = Depends(get_repository)):
    try:
        return repo.list_notes()
    except Exception as e:
        raise _http_error(e, "fetch notes")


@app.post("/notes")
def create_note(body: NoteCreate, repo: ContentRepository = Depends(get_repository)):
    try:
        return repo.create_note(body)
    except Exception as e:
        raise _http_error(e, "create note")


@app.get("/notes/{identifier}")
def get_note(identifier: str, repo: ContentRepository = Depends(get_repository)):
    try:
        return repo.get_note(identifier)
    except Exception as e:
        raise _http_error(e, "fetch note")


@app.put("/notes/{identifier}")
def update_note(identifier: str, body: NoteUpdate, repo: ContentRepository = Depends(get_repository)):
    try:
        return repo.update_note(identifier, body)
    except Exception as e:
        raise _http_error(e, "update note")


@app.delete("/notes/{identifier}")
def delete_note(identifier: str, repo: ContentRepository = Depends(get_repository)):
    try:
        repo.delete_note(identifier)
        return SUCCESS
    except Exception as e:
        raise _http_error(e, "delete note")


# -----------------------
# Answers (public submission, admin moderation)
# -----------------------

@app.get("/answers")
def list_answers(
    pending: bool = False,
    include_all: bool = Query(False, alias="all"),
    repo: ContentRepository = Depends(get_repository),
):
    try:
        return repo.list_answers(pending=pending, include_all=include_all)
    except Exception as e:
        raise _http_error(e, "fetch answers")


@app.post("/answers")
def submit_answer(body: AnswerSubmission, repo: ContentRepository = Depends(get_repository)):
    try:
        return repo.submit_answer(body)
    except ValidationFailure as e:
        logger.info(f"Answer rejected: {e.message}")
        raise HTTPException(status_code=400, detail=e.message)
    except Exception as e:
        raise _http_error(e, "submit answer")


@app.get("/answers/{identifier}")
def get_answer(identifier: str, repo: ContentRepository = Depends(get_repository)):
    try:
        return repo.get_answer(identifier)
    except Exception as e:
        raise _http_error(e, "fetch answer")


@app.put("/answers/{identifier}")
def moderate_answer(identifier: str, body: AnswerModeration, repo: ContentRepository = Depends(get_repository)):
    try:
        return repo.moderate_answer(identifier, body)
    except Exception as e:
        raise _http_error(e, "update answer")


@app.delete("/answers/{identifier}")
def delete_answer(identifier: str, repo: ContentRepository = Depends(get_repository)):
    try:
        repo.delete_answer(identifier)
        return SUCCESS
    except Exception as e:
        raise _http_error(e, "delete answer")


# -----------------------
# Profile
# -----------------------

@app.get("/profile")
def get_profile(repo: ContentRepository = Depends(get_repository)):
    try:
        return repo.get_profile()
    except Exception as e:
        raise _http_error(e, "fetch profile")


@app.put("/profile")
def save_profile(body: ProfileUpdate, repo: ContentRepository = Depends(get_repository)):
    try:
        return repo.save_profile(body)
    except Exception as e:
        raise _http_error(e, "update profile")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=HOST, port=PORT)
