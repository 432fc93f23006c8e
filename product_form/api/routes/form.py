# product_form/api/routes/form.py
from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status

from product_form.api.deps import get_controller
from product_form.api.schemas.form import (
    DraftUpdate,
    FieldsOut,
    FormStateOut,
    ImageSelectedOut,
    SubmitOut,
)
from product_form.controller import BUSY, INVALID, ClearImage, FormController, Reset, SelectImage, SetField, Submit
from product_form.models.draft import ImageFile
from product_form.schemas.product import CATEGORIES, field_definitions

router = APIRouter(prefix="/api/form", tags=["form"])


@router.get("/", response_model=FormStateOut)
async def get_form(form: FormController = Depends(get_controller)):
    """
    Current draft values, inline errors, preview and active notifications.
    """
    return form.snapshot()


@router.get("/fields", response_model=FieldsOut)
def get_fields():
    return {"fields": field_definitions(), "categories": CATEGORIES}


@router.patch("/", response_model=FormStateOut)
async def update_form(payload: DraftUpdate, form: FormController = Depends(get_controller)):
    """
    Set one or more fields. Only the keys present in the body are touched.
    """
    for name, value in payload.model_dump(exclude_unset=True).items():
        await form.handle(SetField(name, value))
    return form.snapshot()


@router.post("/image", response_model=ImageSelectedOut)
async def select_image(file: UploadFile = File(...), form: FormController = Depends(get_controller)):
    """
    Select the product image. Any file is accepted here; the size limit is
    reported when the form is submitted.
    """
    contents = await file.read()
    blob = ImageFile(file.filename or "upload", contents, file.content_type)
    preview = await form.handle(SelectImage(blob))
    return {
        "ok": True,
        "image": blob.describe(),
        "preview": preview.to_dict() if preview else None,
    }


@router.delete("/image", response_model=FormStateOut)
async def clear_image(form: FormController = Depends(get_controller)):
    await form.handle(ClearImage())
    return form.snapshot()


@router.post("/submit", response_model=SubmitOut)
async def submit_form(form: FormController = Depends(get_controller)):
    outcome = await form.handle(Submit())
    if outcome.status == INVALID:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"errors": outcome.errors},
        )
    if outcome.status == BUSY:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=outcome.message)
    if not outcome.ok:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=outcome.message)
    return {"ok": True, "status": outcome.status, "message": outcome.message, "result": outcome.result}


@router.post("/reset", response_model=FormStateOut)
async def reset_form(form: FormController = Depends(get_controller)):
    if not await form.handle(Reset()):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="A submission is in progress")
    return form.snapshot()
