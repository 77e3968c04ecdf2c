import logging

from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse
from pydantic import BaseModel, Field

from api.dependencies import get_template_catalog, require_user
from catalog.template_catalog import TemplateCatalog
from mailcraft.models import User

router = APIRouter()
logger = logging.getLogger(__name__)


class CustomTemplateIn(BaseModel):
    name: str = Field(..., min_length=1)
    url: str = Field(..., min_length=1)


@router.get("/templates")
async def list_templates(
    user: User = Depends(require_user),
    catalog: TemplateCatalog = Depends(get_template_catalog),
) -> dict:
    return {"templates": await catalog.list_all(user.id)}


@router.post("/templates/custom")
async def add_custom_template(
    payload: CustomTemplateIn,
    user: User = Depends(require_user),
    catalog: TemplateCatalog = Depends(get_template_catalog),
) -> dict:
    """Record a template the client already uploaded to remote storage."""
    template = await catalog.add_custom(user.id, payload.name, payload.url)
    return {"status": "created", "template": template.model_dump()}


@router.get("/templates/{name}/html", response_class=HTMLResponse)
async def get_template_html(
    name: str,
    user: User = Depends(require_user),
    catalog: TemplateCatalog = Depends(get_template_catalog),
) -> HTMLResponse:
    html = await catalog.get_template_html(user.id, name)
    return HTMLResponse(content=html)
