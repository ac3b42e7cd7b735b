"""FastAPI server that exposes the portal to the dashboards."""

from __future__ import annotations

from datetime import datetime, timezone
import logging

from fastapi import Depends, FastAPI, Header, HTTPException, Response
from pydantic import BaseModel, Field
import uvicorn

from eduportal.constants.auth_constants import USER_ID_HEADER
from eduportal.constants.network_constants import DEFAULT_HOST, DEFAULT_PORT
from eduportal.core.errors import InvalidQuiz, NotFound, PortalError, ValidationError
from eduportal.core.models import Question, Quiz, QuizDraft, Role, Submission, User, Video
from eduportal.core.portal_manager import PortalManager

logger = logging.getLogger(__name__)


class QuestionPayload(BaseModel):
    """Payload schema for one question of a quiz."""

    id: str | None = None
    question_text: str
    options: list[str]
    correct_answer: str = ""


class QuizCreatePayload(BaseModel):
    title: str
    questions: list[QuestionPayload] = Field(default_factory=list)


class QuizUpdatePayload(BaseModel):
    title: str | None = None
    questions: list[QuestionPayload] | None = None


class SubmissionPayload(BaseModel):
    """Payload schema for a student's answers, keyed by question id."""

    answers: dict[str, str] = Field(default_factory=dict)


class UserCreatePayload(BaseModel):
    username: str
    role: str
    email: str | None = None
    name: str | None = None
    course: str | None = None


class UserUpdatePayload(BaseModel):
    username: str | None = None
    role: str | None = None
    email: str | None = None
    name: str | None = None
    course: str | None = None


class VideoCreatePayload(BaseModel):
    title: str
    video_url: str


class VideoUpdatePayload(BaseModel):
    title: str | None = None
    video_url: str | None = None


def _isoformat(value: datetime) -> str:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc).isoformat()
    return value.astimezone(timezone.utc).isoformat()


def _to_question(payload: QuestionPayload) -> Question:
    return Question(
        id=payload.id,
        question_text=payload.question_text,
        options=tuple(payload.options),
        correct_answer=payload.correct_answer,
    )


def _quiz_to_dict(quiz: Quiz, include_answers: bool = True) -> dict[str, object]:
    questions = []
    for question in quiz.questions:
        entry: dict[str, object] = {
            "id": question.id,
            "question_text": question.question_text,
            "options": list(question.options),
        }
        if include_answers:
            entry["correct_answer"] = question.correct_answer
        questions.append(entry)
    return {
        "id": quiz.id,
        "title": quiz.title,
        "questions": questions,
        "created_by": quiz.created_by,
        "created_at": _isoformat(quiz.created_at),
    }


def _submission_to_dict(submission: Submission) -> dict[str, object]:
    return {
        "quiz_id": submission.quiz_id,
        "student_id": submission.student_id,
        "answers": dict(submission.answers),
        "score": submission.score,
        "submitted_at": _isoformat(submission.submitted_at),
        "passed": PortalManager.passed(submission.score),
    }


def _user_to_dict(user: User) -> dict[str, object]:
    return {
        "id": user.id,
        "username": user.username,
        "role": user.role.value,
        "email": user.email,
        "name": user.name,
        "course": user.course,
    }


def _video_to_dict(video: Video) -> dict[str, object]:
    return {
        "id": video.id,
        "title": video.title,
        "video_url": video.video_url,
        "created_by": video.created_by,
        "created_at": _isoformat(video.created_at),
    }


def _to_http_error(exc: PortalError) -> HTTPException:
    if isinstance(exc, NotFound):
        return HTTPException(status_code=404, detail=str(exc))
    if isinstance(exc, (ValidationError, InvalidQuiz)):
        return HTTPException(status_code=422, detail=str(exc))
    return HTTPException(status_code=400, detail=str(exc))


def _require_role(caller: User, *roles: Role) -> None:
    if caller.role not in roles:
        logger.warning("Rejected %s user %s: requires %s", caller.role.value, caller.id, "/".join(r.value for r in roles))
        raise HTTPException(status_code=403, detail="Not allowed for your role.")


def _require_owner_or_admin(caller: User, owner_id: str) -> None:
    if caller.role is Role.ADMIN:
        return
    if caller.role is Role.TEACHER and caller.id == owner_id:
        return
    logger.warning("Rejected user %s: not the author", caller.id)
    raise HTTPException(status_code=403, detail="Only the author or an admin may do this.")


def _require_self_or_staff(caller: User, student_id: str) -> None:
    if caller.role is Role.STUDENT and caller.id != student_id:
        raise HTTPException(status_code=403, detail="Students may only view their own progress.")


def _get_portal_manager_dependency(portal_manager: PortalManager):
    def dependency() -> PortalManager:
        return portal_manager

    return dependency


def create_api_app(portal_manager: PortalManager) -> FastAPI:
    """Create a FastAPI application wired to the provided portal manager."""
    app = FastAPI(title="EduPortal API", version="0.1.0")
    portal_dep = _get_portal_manager_dependency(portal_manager)

    def current_user(
        caller_id: str | None = Header(default=None, alias=USER_ID_HEADER),
        manager: PortalManager = Depends(portal_dep),
    ) -> User:
        if not caller_id:
            raise HTTPException(status_code=401, detail=f"Missing {USER_ID_HEADER} header.")
        user = manager.find_user(caller_id)
        if user is None:
            raise HTTPException(status_code=401, detail=f"Unknown user '{caller_id}'.")
        return user

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    # --- Quizzes ---

    @app.get("/quizzes")
    def list_quizzes(
        caller: User = Depends(current_user),
        manager: PortalManager = Depends(portal_dep),
    ) -> list[dict[str, object]]:
        if caller.role is Role.TEACHER:
            quizzes = manager.list_quizzes_by_author(caller.id)
        else:
            quizzes = manager.list_quizzes()
        include_answers = caller.role is not Role.STUDENT
        return [_quiz_to_dict(quiz, include_answers) for quiz in quizzes]

    @app.post("/quizzes", status_code=201)
    def create_quiz(
        payload: QuizCreatePayload,
        caller: User = Depends(current_user),
        manager: PortalManager = Depends(portal_dep),
    ) -> dict[str, object]:
        _require_role(caller, Role.ADMIN, Role.TEACHER)
        draft = QuizDraft(
            title=payload.title,
            questions=tuple(_to_question(q) for q in payload.questions),
            created_by=caller.id,
        )
        try:
            quiz = manager.create_quiz(draft)
        except PortalError as exc:
            raise _to_http_error(exc) from exc
        return _quiz_to_dict(quiz)

    @app.get("/quizzes/{quiz_id}")
    def get_quiz(
        quiz_id: str,
        caller: User = Depends(current_user),
        manager: PortalManager = Depends(portal_dep),
    ) -> dict[str, object]:
        try:
            quiz = manager.get_quiz(quiz_id)
        except PortalError as exc:
            raise _to_http_error(exc) from exc
        return _quiz_to_dict(quiz, include_answers=caller.role is not Role.STUDENT)

    @app.patch("/quizzes/{quiz_id}")
    def update_quiz(
        quiz_id: str,
        payload: QuizUpdatePayload,
        caller: User = Depends(current_user),
        manager: PortalManager = Depends(portal_dep),
    ) -> dict[str, object]:
        try:
            _require_owner_or_admin(caller, manager.get_quiz(quiz_id).created_by)
            changes: dict[str, object] = {}
            if payload.title is not None:
                changes["title"] = payload.title
            if payload.questions is not None:
                changes["questions"] = tuple(_to_question(q) for q in payload.questions)
            quiz = manager.update_quiz(quiz_id, changes)
        except PortalError as exc:
            raise _to_http_error(exc) from exc
        return _quiz_to_dict(quiz)

    @app.delete("/quizzes/{quiz_id}", status_code=204, response_model=None, response_class=Response)
    def delete_quiz(
        quiz_id: str,
        caller: User = Depends(current_user),
        manager: PortalManager = Depends(portal_dep),
    ) -> None:
        try:
            _require_owner_or_admin(caller, manager.get_quiz(quiz_id).created_by)
            manager.delete_quiz(quiz_id)
        except PortalError as exc:
            raise _to_http_error(exc) from exc

    # --- Submissions ---

    @app.post("/quizzes/{quiz_id}/submissions", status_code=201)
    def submit_quiz(
        quiz_id: str,
        payload: SubmissionPayload,
        caller: User = Depends(current_user),
        manager: PortalManager = Depends(portal_dep),
    ) -> dict[str, object]:
        _require_role(caller, Role.STUDENT)
        try:
            submission = manager.submit(quiz_id, caller.id, payload.answers)
        except PortalError as exc:
            raise _to_http_error(exc) from exc
        return _submission_to_dict(submission)

    @app.get("/submissions")
    def list_submissions(
        caller: User = Depends(current_user),
        manager: PortalManager = Depends(portal_dep),
    ) -> list[dict[str, object]]:
        if caller.role is Role.ADMIN:
            submissions = manager.list_submissions()
        elif caller.role is Role.TEACHER:
            submissions = manager.list_submissions_for_author(caller.id)
        else:
            submissions = manager.list_submissions_by_student(caller.id)
        return [_submission_to_dict(s) for s in submissions]

    # --- Statistics ---

    @app.get("/students/{student_id}/stats")
    def student_stats(
        student_id: str,
        caller: User = Depends(current_user),
        manager: PortalManager = Depends(portal_dep),
    ) -> dict[str, object]:
        _require_self_or_staff(caller, student_id)
        summary = manager.student_summary(student_id)
        return {
            "student_id": summary.student_id,
            "completed_quizzes": summary.completed_quizzes,
            "average_score": summary.average_score,
            "passed_quizzes": summary.passed_quizzes,
        }

    @app.get("/students/{student_id}/quizzes/{quiz_id}/status")
    def quiz_status(
        student_id: str,
        quiz_id: str,
        caller: User = Depends(current_user),
        manager: PortalManager = Depends(portal_dep),
    ) -> dict[str, object]:
        _require_self_or_staff(caller, student_id)
        status = manager.quiz_status(student_id, quiz_id)
        completed = isinstance(status, int)
        return {
            "student_id": student_id,
            "quiz_id": quiz_id,
            "completed": completed,
            "status": status,
            "passed": manager.passed(status) if completed else None,
        }

    @app.get("/quizzes/{quiz_id}/stats")
    def quiz_stats(
        quiz_id: str,
        caller: User = Depends(current_user),
        manager: PortalManager = Depends(portal_dep),
    ) -> dict[str, object]:
        _require_role(caller, Role.ADMIN, Role.TEACHER)
        try:
            _require_owner_or_admin(caller, manager.get_quiz(quiz_id).created_by)
        except NotFound:
            # Deleted quizzes keep their history; only admins may read it.
            _require_role(caller, Role.ADMIN)
        summary = manager.quiz_summary(quiz_id)
        return {
            "quiz_id": summary.quiz_id,
            "attempts": summary.attempts,
            "distinct_students": summary.distinct_students,
            "average_score": summary.average_score,
            "passed_attempts": summary.passed_attempts,
        }

    @app.get("/authors/{author_id}/stats")
    def author_stats(
        author_id: str,
        caller: User = Depends(current_user),
        manager: PortalManager = Depends(portal_dep),
    ) -> dict[str, object]:
        _require_role(caller, Role.ADMIN, Role.TEACHER)
        if caller.role is Role.TEACHER and caller.id != author_id:
            raise HTTPException(status_code=403, detail="Teachers may only view their own statistics.")
        summary = manager.author_summary(author_id)
        return {
            "author_id": summary.author_id,
            "quiz_count": summary.quiz_count,
            "submission_count": summary.submission_count,
            "average_score": summary.average_score,
            "quiz_ids": list(summary.quiz_ids),
        }

    @app.get("/overview")
    def overview(
        caller: User = Depends(current_user),
        manager: PortalManager = Depends(portal_dep),
    ) -> dict[str, object]:
        _require_role(caller, Role.ADMIN)
        counts = manager.count_users_by_role()
        return {
            "users": {role.value: count for role, count in counts.items()},
            "quizzes": len(manager.list_quizzes()),
            "videos": len(manager.list_videos()),
            "submissions": manager.ledger_size(),
        }

    # --- Users ---

    @app.get("/users")
    def list_users(
        role: str | None = None,
        caller: User = Depends(current_user),
        manager: PortalManager = Depends(portal_dep),
    ) -> list[dict[str, object]]:
        _require_role(caller, Role.ADMIN)
        try:
            users = manager.list_users() if role is None else manager.list_users_by_role(role)
        except PortalError as exc:
            raise _to_http_error(exc) from exc
        return [_user_to_dict(user) for user in users]

    @app.post("/users", status_code=201)
    def create_user(
        payload: UserCreatePayload,
        caller: User = Depends(current_user),
        manager: PortalManager = Depends(portal_dep),
    ) -> dict[str, object]:
        _require_role(caller, Role.ADMIN)
        try:
            user = manager.create_user(
                payload.username,
                payload.role,
                email=payload.email,
                name=payload.name,
                course=payload.course,
            )
        except PortalError as exc:
            raise _to_http_error(exc) from exc
        return _user_to_dict(user)

    @app.patch("/users/{user_id}")
    def update_user(
        user_id: str,
        payload: UserUpdatePayload,
        caller: User = Depends(current_user),
        manager: PortalManager = Depends(portal_dep),
    ) -> dict[str, object]:
        _require_role(caller, Role.ADMIN)
        try:
            user = manager.update_user(user_id, payload.model_dump(exclude_unset=True))
        except PortalError as exc:
            raise _to_http_error(exc) from exc
        return _user_to_dict(user)

    @app.delete("/users/{user_id}", status_code=204, response_model=None, response_class=Response)
    def delete_user(
        user_id: str,
        caller: User = Depends(current_user),
        manager: PortalManager = Depends(portal_dep),
    ) -> None:
        _require_role(caller, Role.ADMIN)
        try:
            manager.delete_user(user_id)
        except PortalError as exc:
            raise _to_http_error(exc) from exc

    # --- Videos ---

    @app.get("/videos")
    def list_videos(
        caller: User = Depends(current_user),
        manager: PortalManager = Depends(portal_dep),
    ) -> list[dict[str, object]]:
        if caller.role is Role.TEACHER:
            videos = manager.list_videos_by_author(caller.id)
        else:
            videos = manager.list_videos()
        return [_video_to_dict(video) for video in videos]

    @app.post("/videos", status_code=201)
    def create_video(
        payload: VideoCreatePayload,
        caller: User = Depends(current_user),
        manager: PortalManager = Depends(portal_dep),
    ) -> dict[str, object]:
        _require_role(caller, Role.ADMIN, Role.TEACHER)
        try:
            video = manager.create_video(payload.title, payload.video_url, caller.id)
        except PortalError as exc:
            raise _to_http_error(exc) from exc
        return _video_to_dict(video)

    @app.patch("/videos/{video_id}")
    def update_video(
        video_id: str,
        payload: VideoUpdatePayload,
        caller: User = Depends(current_user),
        manager: PortalManager = Depends(portal_dep),
    ) -> dict[str, object]:
        try:
            _require_owner_or_admin(caller, manager.get_video(video_id).created_by)
            video = manager.update_video(video_id, payload.model_dump(exclude_unset=True))
        except PortalError as exc:
            raise _to_http_error(exc) from exc
        return _video_to_dict(video)

    @app.delete("/videos/{video_id}", status_code=204, response_model=None, response_class=Response)
    def delete_video(
        video_id: str,
        caller: User = Depends(current_user),
        manager: PortalManager = Depends(portal_dep),
    ) -> None:
        try:
            _require_owner_or_admin(caller, manager.get_video(video_id).created_by)
            manager.delete_video(video_id)
        except PortalError as exc:
            raise _to_http_error(exc) from exc

    return app


def run_api_server(
    portal_manager: PortalManager,
    host: str = DEFAULT_HOST,
    port: int = DEFAULT_PORT,
) -> None:
    """Serve the API with uvicorn until the process is stopped."""
    app = create_api_app(portal_manager)
    config = uvicorn.Config(app=app, host=host, port=port, log_level="info")
    server = uvicorn.Server(config)
    server.run()
