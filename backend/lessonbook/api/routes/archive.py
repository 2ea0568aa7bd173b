"""Archive — per-student image upload, listing, batch delete and download.

Invariants:
    - Uploads accept image/* only, each file at most settings.max_upload_bytes
    - Every accepted file becomes one ArchiveImage; response lists them in the
      order they were stored (completion order)
    - Batch delete requires confirm=true; unknown ids are ignored

Design Decisions:
    - Whole request validated before any encoding starts: a bad file rejects the batch
    - Download decodes the stored data URL server-side so the browser gets a real file
"""

from urllib.parse import quote

from fastapi import APIRouter, Depends, File, UploadFile, status
from fastapi.responses import Response

from lessonbook.api.dependencies import get_controller, require_session
from lessonbook.api.routes.response_builders import build_images
from lessonbook.config import get_settings
from lessonbook.core.errors import (
    ConfirmationRequiredError, ErrorContext, InvalidInputError,
    ResourceNotFoundError, StorageError,
)
from lessonbook.core.ledger_queries import archive_download_name, student_archive
from lessonbook.infrastructure.image_encoding import PendingUpload, decode_data_url
from lessonbook.schemas.ledger import (
    ArchiveImageResponse, DeleteResponse, ImageDeleteRequest,
)
from lessonbook.services.ledger_controller import LedgerController

router = APIRouter(
    prefix="/api/v1", tags=["archive"], dependencies=[Depends(require_session)],
)


async def _read_upload(file: UploadFile, max_bytes: int) -> PendingUpload:
    filename = file.filename or ""
    if not (file.content_type or "").startswith("image/"):
        raise InvalidInputError(
            f"'{filename}' is not an image ({file.content_type})", "files",
        )
    content = await file.read()
    if len(content) > max_bytes:
        raise InvalidInputError(
            f"'{filename}' exceeds {max_bytes} bytes", "files",
        )
    return PendingUpload(filename, file.content_type, content)


@router.post(
    "/students/{student_id}/archive",
    response_model=list[ArchiveImageResponse],
    status_code=status.HTTP_201_CREATED,
)
async def upload_images(
    student_id: str,
    files: list[UploadFile] = File(...),
    ledger: LedgerController = Depends(get_controller),
):
    if ledger.state.find_student(student_id) is None:
        raise ResourceNotFoundError("Student", student_id)
    max_bytes = get_settings().max_upload_bytes
    uploads = [await _read_upload(f, max_bytes) for f in files]
    images = await ledger.add_archive_images(student_id, uploads)
    return build_images(images)


@router.get(
    "/students/{student_id}/archive", response_model=list[ArchiveImageResponse],
)
async def list_images(
    student_id: str, ledger: LedgerController = Depends(get_controller),
):
    return build_images(student_archive(ledger.state, student_id))


@router.post("/archive/delete", response_model=DeleteResponse)
async def delete_images(
    body: ImageDeleteRequest, ledger: LedgerController = Depends(get_controller),
):
    if not body.confirm:
        raise ConfirmationRequiredError(f"Deleting {len(body.ids)} image(s)")
    removed = await ledger.delete_archive_images(body.ids)
    return DeleteResponse(deleted=removed)


@router.get("/archive/{image_id}/download")
async def download_image(
    image_id: str, ledger: LedgerController = Depends(get_controller),
):
    image = ledger.state.find_image(image_id)
    if image is None:
        raise ResourceNotFoundError("Image", image_id)
    try:
        content, mime = decode_data_url(image.url)
    except ValueError as e:
        raise StorageError(
            str(e), "read", ErrorContext(student_id=image.student_id),
        ) from e
    filename = archive_download_name(image)
    return Response(
        content=content,
        media_type=mime,
        headers={
            "Content-Disposition": f"attachment; filename*=UTF-8''{quote(filename)}",
        },
    )
