"""
Social service — domain exceptions.

Services raise these; they carry no FastAPI dependency.  Each exception has a
preset code, human-readable message and HTTP status so that callers never
need to specify these at the raise site.  ``main.py`` registers
``domain_error_handler`` which wraps them in the shared error envelope.

Taxonomy:
  ValidationError     422  malformed input, self-follow, self-report
  AuthorizationError  403  caller not entitled to the operation
  NotFoundError       404  missing account / edge / post
  ConflictError       409  duplicate edge or report, follow cap reached
  TransientError      503  lock timeout, lost connection; safe to retry the
                           whole operation
"""
from __future__ import annotations

from fastapi import Request, status
from fastapi.responses import JSONResponse

from shared.middleware.error_handler import error_envelope


class DomainError(Exception):
    status_code: int = status.HTTP_400_BAD_REQUEST
    code: str = "domain_error"
    message: str = "The request could not be completed."

    def __init__(self, message: str | None = None) -> None:
        if message is not None:
            self.message = message
        super().__init__(self.message)


class ValidationError(DomainError):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    code = "validation_error"
    message = "The request is invalid."


class AuthorizationError(DomainError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "forbidden"
    message = "You do not have permission to perform this action."


class NotFoundError(DomainError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"
    message = "Resource not found."


class ConflictError(DomainError):
    status_code = status.HTTP_409_CONFLICT
    code = "conflict"
    message = "The request conflicts with the current state."


class TransientError(DomainError):
    """Storage hiccup (lock timeout, dropped connection); retry the whole call."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    code = "temporarily_unavailable"
    message = "The service is busy. Please try again."


# ── Relationship store ────────────────────────────────────────────────────────

class SelfReference(ValidationError):
    code = "self_reference"
    message = "An account cannot have a relationship with itself."


class DuplicateEdge(ConflictError):
    code = "duplicate_edge"
    message = "A relationship already exists for this pair."


class EdgeNotFound(NotFoundError):
    code = "edge_not_found"
    message = "Relationship not found."


# ── Follow workflow ───────────────────────────────────────────────────────────

class SelfFollow(ValidationError):
    code = "self_follow"
    message = "You cannot follow yourself."


class AlreadyRelated(ConflictError):
    code = "already_related"
    message = "You already follow or have requested to follow this user."


class FollowCapReached(ConflictError):
    code = "follow_cap_reached"

    def __init__(self, limit: int) -> None:
        self.limit = limit
        super().__init__(f"Follow limit reached ({limit}).")


class TargetNotFound(NotFoundError):
    code = "target_not_found"
    message = "User not found."


class RequestNotFound(NotFoundError):
    code = "request_not_found"
    message = "Follow request not found."


class NotFollowing(NotFoundError):
    code = "not_following"
    message = "You are not following this user."


class NotAFollower(NotFoundError):
    code = "not_a_follower"
    message = "This user does not follow you."


# ── Accounts ──────────────────────────────────────────────────────────────────

class AccountNotFound(NotFoundError):
    code = "account_not_found"
    message = "Account not found."


class AccountExists(ConflictError):
    code = "account_exists"
    message = "An account is already registered for this identity."


class UsernameTaken(ConflictError):
    code = "username_taken"
    message = "This username is already taken."


class CannotDeleteSelf(ValidationError):
    code = "cannot_delete_self"
    message = "You cannot delete your own account."


class AdminRequired(AuthorizationError):
    code = "admin_required"
    message = "Administrator access required."


# ── Posts & comments ──────────────────────────────────────────────────────────

class PostNotFound(NotFoundError):
    code = "post_not_found"
    message = "Post not found."


class NotPostOwner(AuthorizationError):
    code = "not_post_owner"
    message = "Only the author can delete this post."


class PostsHidden(AuthorizationError):
    code = "posts_hidden"
    message = "Follow this account to see its posts."


class CommentNotAllowed(AuthorizationError):
    code = "comment_not_allowed"
    message = "Only approved followers can comment on this post."


# ── Moderation ────────────────────────────────────────────────────────────────

class DuplicateReport(ConflictError):
    code = "duplicate_report"
    message = "You have already reported this post."


class SelfReport(ValidationError):
    code = "self_report"
    message = "You cannot report your own post."


# ── HTTP mapping ──────────────────────────────────────────────────────────────

async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    return error_envelope(request, exc.status_code, exc.code, exc.message)
